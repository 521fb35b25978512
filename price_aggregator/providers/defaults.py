"""
Default provider wiring.

Builds the Binance -> CoinMarketCap aggregator from config.yaml / env settings.
"""
from __future__ import annotations

import logging
from typing import Optional

from .aggregator import PriceAggregator
from .binance import BinanceClient
from .coinmarketcap import CoinMarketCapClient

logger = logging.getLogger(__name__)


def create_binance_client(config: dict) -> BinanceClient:
    cfg = config.get("binance", {})
    return BinanceClient(
        api_key=cfg.get("api_key"),
        base_url=cfg.get("base_url") or "https://api.binance.com",
        timeout_s=float(cfg.get("timeout_s", 15.0)),
    )


def create_coinmarketcap_client(config: dict) -> CoinMarketCapClient:
    cfg = config.get("coinmarketcap", {})
    keys = list(cfg.get("api_keys") or [])
    if not keys:
        logger.warning("No CoinMarketCap API keys provided. Fallback will not work.")
    return CoinMarketCapClient(
        api_keys=keys,
        base_url=cfg.get("base_url") or "https://pro-api.coinmarketcap.com",
        timeout_s=float(cfg.get("timeout_s", 15.0)),
    )


def create_aggregator(config: Optional[dict] = None) -> PriceAggregator:
    """Build an aggregator from the given config dict, or from get_config()."""
    if config is None:
        from price_aggregator.config import get_config

        config = get_config()
    return PriceAggregator(
        primary=create_binance_client(config),
        secondary=create_coinmarketcap_client(config),
    )
