"""
Provider interfaces and data contracts.

Providers implement one or both protocols:
- PriceProvider: current price for a trading pair (Binance, CoinMarketCap)
- CandleProvider: OHLCV candles from a start time to now (Binance)

Data is returned via frozen dataclasses for immutability and type safety.
Prices and volumes are Decimals built from the provider's string form.
"""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Protocol, runtime_checkable


class PriceSource(enum.Enum):
    """Which provider produced a quote."""

    PRIMARY = "primary"
    SECONDARY = "secondary"


@dataclass(frozen=True)
class PriceQuote:
    """Immutable price quote. `symbol` is always the caller's input string."""

    symbol: str
    price: Decimal
    source: PriceSource
    timestamp: int  # unix ms

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "price": str(self.price),
            "source": self.source.value,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class Candle:
    """Immutable OHLCV candle for one interval."""

    open_time: int  # unix ms
    close_time: int  # unix ms
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: Decimal

    def to_dict(self) -> dict:
        return {
            "open_time": self.open_time,
            "close_time": self.close_time,
            "open": str(self.open),
            "high": str(self.high),
            "low": str(self.low),
            "close": str(self.close),
            "volume": str(self.volume),
        }


def now_ms() -> int:
    return int(time.time() * 1000)


def to_decimal(x: object) -> Decimal:
    """Decimal from a JSON number or numeric string, without float rounding."""
    return Decimal(str(x))


@runtime_checkable
class PriceProvider(Protocol):
    """Protocol for current-price providers."""

    @property
    def provider_name(self) -> str: ...

    def get_price(self, symbol: str) -> PriceQuote:
        """Fetch the current price for a trading pair (e.g. 'BTCUSDT')."""
        ...


@runtime_checkable
class CandleProvider(Protocol):
    """Protocol for candle providers."""

    @property
    def provider_name(self) -> str: ...

    def get_klines(self, symbol: str, interval: str, start_time: int) -> List[Candle]:
        """Fetch candles from `start_time` (unix ms) to now, oldest first."""
        ...


@runtime_checkable
class MarketDataProvider(PriceProvider, CandleProvider, Protocol):
    """Provider serving both prices and candles."""
