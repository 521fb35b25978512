"""
Binance price and candle provider (primary).

Uses the public Binance REST API (API key optional):
  GET https://api.binance.com/api/v3/ticker/price?symbol={symbol}
  GET https://api.binance.com/api/v3/klines?symbol=...&interval=...&startTime=...
"""

from __future__ import annotations

import logging
from decimal import InvalidOperation
from typing import Any, Dict, List, Optional

import requests

from .base import Candle, PriceQuote, PriceSource, now_ms, to_decimal
from .errors import UpstreamError

logger = logging.getLogger(__name__)

BINANCE_BASE_URL = "https://api.binance.com"
HTTP_TIMEOUT_S = 15.0

# Binance returns at most 1000 klines per request.
KLINES_PAGE_LIMIT = 1000

SUPPORTED_INTERVALS = frozenset(
    {"1m", "3m", "5m", "15m", "30m", "1h", "2h", "4h", "6h", "8h", "12h", "1d", "3d", "1w", "1M"}
)


def _parse_kline(row: Any) -> Candle:
    """Row format: [open_time, open, high, low, close, volume, close_time, ...]"""
    try:
        candle = Candle(
            open_time=int(row[0]),
            close_time=int(row[6]),
            open=to_decimal(row[1]),
            high=to_decimal(row[2]),
            low=to_decimal(row[3]),
            close=to_decimal(row[4]),
            volume=to_decimal(row[5]),
        )
    except (IndexError, KeyError, TypeError, ValueError, InvalidOperation) as exc:
        raise UpstreamError(f"Binance returned a malformed kline row: {row!r}") from exc
    if candle.open_time >= candle.close_time:
        raise UpstreamError(
            f"Binance kline has open_time {candle.open_time} >= close_time {candle.close_time}"
        )
    return candle


class BinanceClient:
    """Fetch current prices and klines from Binance. Stateless apart from config."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = BINANCE_BASE_URL,
        timeout_s: float = HTTP_TIMEOUT_S,
    ) -> None:
        self._api_key = api_key or None
        self._base_url = base_url.rstrip("/")
        self._timeout_s = timeout_s

    @property
    def provider_name(self) -> str:
        return "binance"

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["X-MBX-APIKEY"] = self._api_key
        return headers

    def _get_json(self, path: str, params: Dict[str, str]) -> Any:
        url = f"{self._base_url}{path}"
        try:
            resp = requests.get(url, params=params, headers=self._headers(), timeout=self._timeout_s)
        except requests.RequestException as exc:
            raise UpstreamError(f"Binance request failed: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            raise UpstreamError(
                f"Binance {path} returned HTTP {resp.status_code}",
                status_code=resp.status_code,
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise UpstreamError(f"Binance {path} returned invalid JSON") from exc

    def get_price(self, symbol: str) -> PriceQuote:
        data = self._get_json("/api/v3/ticker/price", {"symbol": symbol.strip().upper()})
        if not isinstance(data, dict) or data.get("price") is None:
            raise UpstreamError("Binance response missing price")
        try:
            price = to_decimal(data["price"])
        except InvalidOperation as exc:
            raise UpstreamError(f"Binance returned a non-numeric price: {data['price']!r}") from exc
        if not price.is_finite() or price <= 0:
            raise UpstreamError(f"Binance returned an invalid price: {price}")

        return PriceQuote(
            symbol=symbol,
            price=price,
            source=PriceSource.PRIMARY,
            timestamp=now_ms(),
        )

    def get_klines(self, symbol: str, interval: str, start_time: int) -> List[Candle]:
        """
        Fetch candles from `start_time` (unix ms) to now, oldest first.

        Pages through the klines endpoint until the end time is reached.
        Every returned candle has open_time >= start_time and open times are
        strictly increasing.
        """
        if interval not in SUPPORTED_INTERVALS:
            raise UpstreamError(f"Unsupported interval for Binance: {interval}")

        pair = symbol.strip().upper()
        start_ms = int(start_time)
        end_ms = now_ms()
        cursor_ms = start_ms
        candles: List[Candle] = []
        last_open_ms: Optional[int] = None

        while cursor_ms <= end_ms:
            page = self._get_json(
                "/api/v3/klines",
                {
                    "symbol": pair,
                    "interval": interval,
                    "startTime": str(cursor_ms),
                    "endTime": str(end_ms),
                    "limit": str(KLINES_PAGE_LIMIT),
                },
            )
            if not isinstance(page, list):
                raise UpstreamError(f"Unexpected Binance klines response type: {type(page)}")
            if not page:
                break

            for row in page:
                candle = _parse_kline(row)
                if candle.open_time < start_ms:
                    continue
                if last_open_ms is not None and candle.open_time <= last_open_ms:
                    continue
                candles.append(candle)
                last_open_ms = candle.open_time

            next_cursor = _parse_kline(page[-1]).close_time + 1
            if len(page) < KLINES_PAGE_LIMIT or next_cursor <= cursor_ms:
                break
            cursor_ms = next_cursor

        logger.debug("Fetched %d %s klines for %s", len(candles), interval, pair)
        return candles
