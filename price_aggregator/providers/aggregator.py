"""
Price aggregator: primary provider with a single fallback for prices.

Prices come from the primary provider; if that raises for any reason the
secondary provider is asked once with the same symbol. Candles only come
from the primary provider and its errors propagate unchanged.
"""
from __future__ import annotations

import logging
from typing import List

from .base import Candle, MarketDataProvider, PriceProvider, PriceQuote

logger = logging.getLogger(__name__)


class PriceAggregator:
    """
    Single entry point for prices and candles with primary -> secondary fallback.

    Holds no state of its own; key rotation lives inside the secondary client.
    """

    def __init__(self, primary: MarketDataProvider, secondary: PriceProvider) -> None:
        self._primary = primary
        self._secondary = secondary

    @property
    def primary(self) -> MarketDataProvider:
        return self._primary

    @property
    def secondary(self) -> PriceProvider:
        return self._secondary

    def get_price(self, symbol: str) -> PriceQuote:
        """
        Fetch a price from the primary provider, falling back to the secondary.

        Secondary errors propagate to the caller unchanged.
        """
        try:
            return self._primary.get_price(symbol)
        except Exception as exc:
            logger.warning(
                "%s price failed for %s (%s: %s), falling back to %s",
                self._primary.provider_name, symbol, type(exc).__name__, exc,
                self._secondary.provider_name,
            )
        return self._secondary.get_price(symbol)

    def get_klines(self, symbol: str, interval: str, start_time: int) -> List[Candle]:
        return self._primary.get_klines(symbol, interval, start_time)
