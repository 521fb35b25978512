"""
CoinMarketCap quote provider (secondary, price only).

Uses the CoinMarketCap Pro API (API key required):
  GET https://pro-api.coinmarketcap.com/v1/cryptocurrency/quotes/latest?symbol={base}&convert=USD

Requests rotate through a pool of API keys: HTTP 401/402/429 moves to the
next key and retries, up to one attempt per key. The cursor persists on the
client, so the next call starts from the key the previous call ended on.
"""

from __future__ import annotations

import logging
from decimal import InvalidOperation
from typing import Any, Dict, Iterable, Optional

import requests

from .base import PriceQuote, PriceSource, now_ms, to_decimal
from .errors import NoCredentialsError, PoolExhaustedError, SymbolNotFoundError, UpstreamError
from .keys import CredentialPool, RotationDecision, classify_status

logger = logging.getLogger(__name__)

CMC_BASE_URL = "https://pro-api.coinmarketcap.com"
HTTP_TIMEOUT_S = 15.0
QUOTE_CURRENCY = "USD"

# Longest first so BTCUSDT loses USDT rather than USD.
_QUOTE_SUFFIXES = ("USDT", "USD")


def normalize_symbol(symbol: str) -> str:
    """
    Trading pair -> CoinMarketCap base ticker: 'BTCUSDT' -> 'BTC', 'ETHUSD' -> 'ETH'.

    Only USDT/USD suffixes are stripped. Pairs quoted in anything else
    (BTCEUR, ETHBTC) pass through unchanged and will usually not be found.
    A bare 'USDT' or 'USD' is kept as is.
    """
    s = symbol.strip().upper()
    for suffix in _QUOTE_SUFFIXES:
        if s.endswith(suffix) and len(s) > len(suffix):
            return s[: -len(suffix)]
    return s


def _safe_get(d: Dict[str, Any], path: str, default: Any = None) -> Any:
    cur: Any = d
    for key in path.split("."):
        if not isinstance(cur, dict) or key not in cur:
            return default
        cur = cur[key]
    return cur


class CoinMarketCapClient:
    """Fetch USD quotes from CoinMarketCap, rotating API keys on auth/rate-limit failures."""

    def __init__(
        self,
        api_keys: Iterable[str],
        base_url: str = CMC_BASE_URL,
        timeout_s: float = HTTP_TIMEOUT_S,
    ) -> None:
        self._pool = CredentialPool(api_keys, name="CoinMarketCap")
        self._base_url = base_url.rstrip("/")
        self._timeout_s = timeout_s

    @property
    def provider_name(self) -> str:
        return "coinmarketcap"

    @property
    def pool(self) -> CredentialPool:
        return self._pool

    def _request(self, base_symbol: str, api_key: str) -> requests.Response:
        url = f"{self._base_url}/v1/cryptocurrency/quotes/latest"
        headers = {"X-CMC_PRO_API_KEY": api_key, "Accept": "application/json"}
        params = {"symbol": base_symbol, "convert": QUOTE_CURRENCY}
        try:
            return requests.get(url, params=params, headers=headers, timeout=self._timeout_s)
        except requests.RequestException as exc:
            raise UpstreamError(f"CoinMarketCap request failed: {exc}") from exc

    def _parse_quote(self, symbol: str, base_symbol: str, resp: requests.Response) -> PriceQuote:
        try:
            payload = resp.json()
        except ValueError as exc:
            raise UpstreamError("CoinMarketCap returned invalid JSON") from exc

        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            raise UpstreamError("CoinMarketCap response missing data")

        entry = data.get(base_symbol)
        if isinstance(entry, list):
            entry = entry[0] if entry else None
        if not entry:
            raise SymbolNotFoundError(base_symbol, self.provider_name)

        raw_price = _safe_get(entry, f"quote.{QUOTE_CURRENCY}.price")
        if raw_price is None:
            raise UpstreamError(f"CoinMarketCap quote for {base_symbol} missing {QUOTE_CURRENCY} price")
        try:
            price = to_decimal(raw_price)
        except InvalidOperation as exc:
            raise UpstreamError(f"CoinMarketCap returned a non-numeric price: {raw_price!r}") from exc
        if not price.is_finite() or price <= 0:
            raise UpstreamError(f"CoinMarketCap returned an invalid price for {base_symbol}: {price}")

        # Local call time, not the quote's last_updated.
        return PriceQuote(
            symbol=symbol,
            price=price,
            source=PriceSource.SECONDARY,
            timestamp=now_ms(),
        )

    def get_price(self, symbol: str) -> PriceQuote:
        if not self._pool:
            raise NoCredentialsError("No CoinMarketCap API keys available")

        base_symbol = normalize_symbol(symbol)
        attempts = len(self._pool)
        last_status: Optional[int] = None

        for attempt in range(1, attempts + 1):
            key_index = self._pool.index
            resp = self._request(base_symbol, self._pool.current)
            status = resp.status_code
            if 200 <= status < 300:
                return self._parse_quote(symbol, base_symbol, resp)

            if classify_status(status) is RotationDecision.FAIL:
                raise UpstreamError(
                    f"CoinMarketCap returned HTTP {status} for {base_symbol}",
                    status_code=status,
                )

            logger.warning(
                "CoinMarketCap HTTP %d with key index %d (attempt %d/%d)",
                status, key_index, attempt, attempts,
            )
            last_status = status
            self._pool.advance()

        raise PoolExhaustedError(attempts, last_status)
