"""
Tests for the aggregator fallback logic.

Verifies that:
- Primary provider is used when healthy and its quote is returned as-is
- Secondary provider is called exactly once with the original symbol when primary fails
- Secondary failures propagate unchanged
- Candles come only from the primary provider, with no fallback
"""
from __future__ import annotations

import logging
from decimal import Decimal

import pytest

from price_aggregator.providers.aggregator import PriceAggregator
from price_aggregator.providers.base import PriceSource
from price_aggregator.providers.errors import (
    NoCredentialsError,
    PoolExhaustedError,
    SymbolNotFoundError,
    UpstreamError,
)
from tests.fakes.providers import (
    FakePriceProvider,
    FakePriceProviderAlwaysFail,
    make_candles,
)

START = 1_767_225_600_000


class TestGetPrice:
    @pytest.mark.parametrize("symbol", ["BTCUSDT", "ethusdt", " SOL ", "DOGEUSD"])
    def test_primary_quote_returned_when_healthy(self, symbol):
        primary = FakePriceProvider("binance", {symbol: "123.45"})
        secondary = FakePriceProvider("coinmarketcap", source=PriceSource.SECONDARY)
        agg = PriceAggregator(primary, secondary)

        quote = agg.get_price(symbol)
        assert quote.source == PriceSource.PRIMARY
        assert quote.symbol == symbol
        assert quote.price == Decimal("123.45")
        assert primary.calls == [symbol]
        assert secondary.call_count == 0

    @pytest.mark.parametrize("symbol", ["BTCUSDT", "ethusd", "SOL"])
    def test_secondary_called_once_with_original_symbol(self, symbol):
        primary = FakePriceProviderAlwaysFail("binance")
        secondary = FakePriceProvider("coinmarketcap", source=PriceSource.SECONDARY)
        agg = PriceAggregator(primary, secondary)

        quote = agg.get_price(symbol)
        assert quote.source == PriceSource.SECONDARY
        assert quote.symbol == symbol
        assert secondary.calls == [symbol]

    @pytest.mark.parametrize(
        "error",
        [
            UpstreamError("HTTP 451", status_code=451),
            ConnectionError("connection reset"),
            ValueError("bad payload"),
            SymbolNotFoundError("XYZUSDT", "binance"),
        ],
    )
    def test_any_primary_failure_triggers_fallback(self, error):
        primary = FakePriceProviderAlwaysFail("binance", error=error)
        secondary = FakePriceProvider("coinmarketcap", source=PriceSource.SECONDARY)
        agg = PriceAggregator(primary, secondary)

        assert agg.get_price("BTCUSDT").source == PriceSource.SECONDARY
        assert secondary.call_count == 1

    @pytest.mark.parametrize(
        "error",
        [
            NoCredentialsError("No CoinMarketCap API keys available"),
            PoolExhaustedError(3, 429),
            SymbolNotFoundError("XYZ", "coinmarketcap"),
            UpstreamError("HTTP 500", status_code=500),
        ],
    )
    def test_secondary_failure_propagates_unchanged(self, error):
        primary = FakePriceProviderAlwaysFail("binance")
        secondary = FakePriceProviderAlwaysFail("coinmarketcap", error=error)
        agg = PriceAggregator(primary, secondary)

        with pytest.raises(type(error)) as exc_info:
            agg.get_price("XYZUSDT")
        assert exc_info.value is error
        assert secondary.call_count == 1

    def test_fallback_is_logged(self, caplog):
        primary = FakePriceProviderAlwaysFail("binance")
        secondary = FakePriceProvider("coinmarketcap", source=PriceSource.SECONDARY)
        agg = PriceAggregator(primary, secondary)

        with caplog.at_level(logging.WARNING, logger="price_aggregator.providers.aggregator"):
            agg.get_price("BTCUSDT")
        assert "falling back to coinmarketcap" in caplog.text

    def test_no_state_between_calls(self):
        primary = FakePriceProviderAlwaysFail("binance")
        secondary = FakePriceProvider("coinmarketcap", source=PriceSource.SECONDARY)
        agg = PriceAggregator(primary, secondary)

        for _ in range(3):
            agg.get_price("BTCUSDT")
        assert primary.call_count == 3
        assert secondary.call_count == 3


class TestGetKlines:
    def test_delegates_to_primary(self):
        candles = make_candles(START, 3)
        primary = FakePriceProvider("binance", candles=candles)
        secondary = FakePriceProvider("coinmarketcap")
        agg = PriceAggregator(primary, secondary)

        result = agg.get_klines("BTCUSDT", "1h", START)
        assert result == candles
        assert primary.kline_calls == [("BTCUSDT", "1h", START)]

    def test_candle_failure_has_no_fallback(self):
        primary = FakePriceProviderAlwaysFail("binance")
        secondary = FakePriceProvider("coinmarketcap", candles=make_candles(START, 2))
        agg = PriceAggregator(primary, secondary)

        with pytest.raises(UpstreamError, match="always fails"):
            agg.get_klines("BTCUSDT", "1h", START)
        assert secondary.kline_calls == []
        assert secondary.call_count == 0
