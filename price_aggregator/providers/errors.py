"""
Provider error taxonomy.

All errors derive from RuntimeError so callers that treat any provider
failure as a RuntimeError keep working.
"""

from __future__ import annotations

from typing import Optional


class ProviderError(RuntimeError):
    """Base class for provider failures."""


class UpstreamError(ProviderError):
    """Transport fault, non-auth HTTP failure, or unusable payload."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SymbolNotFoundError(ProviderError):
    """Provider answered successfully but has no data for the asset."""

    def __init__(self, symbol: str, provider_name: str = "") -> None:
        where = f" on {provider_name}" if provider_name else ""
        super().__init__(f"Symbol {symbol} not found{where}")
        self.symbol = symbol


class NoCredentialsError(ProviderError):
    """Credential pool is empty; no request was made."""


class PoolExhaustedError(ProviderError):
    """Every credential in the pool failed with an auth or rate-limit status."""

    def __init__(self, attempts: int, last_status: Optional[int] = None) -> None:
        super().__init__(
            f"All {attempts} API keys exhausted (last HTTP status {last_status})"
        )
        self.attempts = attempts
        self.last_status = last_status
