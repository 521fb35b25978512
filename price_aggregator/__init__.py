"""
Top-level public API surface.
Canonical entrypoint: from price_aggregator import create_aggregator.
Does not import cli.
"""

from __future__ import annotations

from ._version import __version__
from .providers import (
    Candle,
    PriceAggregator,
    PriceQuote,
    PriceSource,
    create_aggregator,
)

# Do not add exports without updating __all__.
__all__ = [
    "__version__",
    "Candle",
    "PriceAggregator",
    "PriceQuote",
    "PriceSource",
    "create_aggregator",
]
