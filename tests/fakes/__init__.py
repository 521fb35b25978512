"""Fake providers and HTTP responses for provider and aggregator tests (no live network)."""

from .providers import (
    FakePriceProvider,
    FakePriceProviderAlwaysFail,
    FakePriceProviderFailNThenSucceed,
    cmc_payload,
    fake_response,
    kline_row,
    make_candles,
)

__all__ = [
    "FakePriceProvider",
    "FakePriceProviderAlwaysFail",
    "FakePriceProviderFailNThenSucceed",
    "cmc_payload",
    "fake_response",
    "kline_row",
    "make_candles",
]
