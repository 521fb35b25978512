"""
Load config from config.yaml with optional env overrides.
Single source of truth for provider URLs, timeouts and API keys.
"""
from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any, List, Optional

import yaml

# Defaults if no YAML or env
_DEFAULTS = {
    "binance": {
        "base_url": "https://api.binance.com",
        "api_key": None,
        "api_secret": None,
        "timeout_s": 15.0,
    },
    "coinmarketcap": {
        "base_url": "https://pro-api.coinmarketcap.com",
        "api_keys": [],
        "timeout_s": 15.0,
    },
}


def _config_yaml_path() -> Path:
    """PRICE_AGGREGATOR_CONFIG if set, else config.yaml at repo root (parent of package dir)."""
    override = os.environ.get("PRICE_AGGREGATOR_CONFIG")
    if override:
        return Path(override)
    return Path(__file__).resolve().parent.parent / "config.yaml"


def _load_yaml(path: Optional[Path] = None) -> dict:
    config_path = path or _config_yaml_path()
    if not config_path.exists():
        return {}
    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    out = dict(base)
    for k, v in override.items():
        if k in out and isinstance(out[k], dict) and isinstance(v, dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def parse_api_keys(raw: Any) -> List[str]:
    """Comma-separated string, list, or single scalar -> trimmed keys with blanks dropped."""
    if raw is None:
        return []
    if isinstance(raw, str):
        items = raw.split(",")
    elif isinstance(raw, (list, tuple, set)):
        items = list(raw)
    else:
        items = [raw]
    return [str(k).strip() for k in items if k is not None and str(k).strip()]


def _env_overrides() -> dict:
    overrides: dict = {}
    key = os.environ.get("BINANCE_API_KEY")
    if key:
        overrides.setdefault("binance", {})["api_key"] = key
    secret = os.environ.get("BINANCE_API_SECRET")
    if secret:
        overrides.setdefault("binance", {})["api_secret"] = secret
    cmc_keys = os.environ.get("COINMARKETCAP_API_KEYS")
    if cmc_keys:
        overrides.setdefault("coinmarketcap", {})["api_keys"] = cmc_keys
    return overrides


def get_config(path: Optional[Path] = None) -> dict:
    """Return merged config: defaults <- config.yaml <- env. API keys are normalized to a list."""
    merged = _deep_merge(copy.deepcopy(_DEFAULTS), _load_yaml(path))
    merged = _deep_merge(merged, _env_overrides())
    merged["coinmarketcap"]["api_keys"] = parse_api_keys(merged["coinmarketcap"].get("api_keys"))
    return merged


def coinmarketcap_api_keys() -> List[str]:
    return list(get_config()["coinmarketcap"]["api_keys"])
