"""
Provider architecture for cryptocurrency price and candle data.

Binance is the primary source for prices and candles. CoinMarketCap is the
price-only fallback, reached through a rotating pool of API keys.
"""

from __future__ import annotations

from .aggregator import PriceAggregator
from .base import (
    Candle,
    CandleProvider,
    MarketDataProvider,
    PriceProvider,
    PriceQuote,
    PriceSource,
)
from .binance import BinanceClient
from .coinmarketcap import CoinMarketCapClient, normalize_symbol
from .defaults import create_aggregator
from .errors import (
    NoCredentialsError,
    PoolExhaustedError,
    ProviderError,
    SymbolNotFoundError,
    UpstreamError,
)
from .keys import CredentialPool, RotationDecision, classify_status

__all__ = [
    "PriceQuote",
    "Candle",
    "PriceSource",
    "PriceProvider",
    "CandleProvider",
    "MarketDataProvider",
    "BinanceClient",
    "CoinMarketCapClient",
    "normalize_symbol",
    "PriceAggregator",
    "create_aggregator",
    "CredentialPool",
    "RotationDecision",
    "classify_status",
    "ProviderError",
    "UpstreamError",
    "SymbolNotFoundError",
    "NoCredentialsError",
    "PoolExhaustedError",
]
