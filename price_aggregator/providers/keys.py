"""
API key rotation primitives: status classification and a wraparound key pool.

The pool cursor is the only shared mutable state in the provider layer.
advance() is a single locked increment, so concurrent rotations can reorder
which key a call sees but never corrupt the cursor.
"""

from __future__ import annotations

import enum
import logging
import threading
from typing import Iterable, Tuple

from .errors import NoCredentialsError

logger = logging.getLogger(__name__)

# Unauthorized, payment required (plan limit), too many requests.
ROTATE_STATUS_CODES: Tuple[int, ...] = (401, 402, 429)


class RotationDecision(enum.Enum):
    ROTATE = "ROTATE"
    FAIL = "FAIL"


def classify_status(status_code: int) -> RotationDecision:
    """Map an HTTP failure status to rotate-and-retry or fail-immediately."""
    if status_code in ROTATE_STATUS_CODES:
        return RotationDecision.ROTATE
    return RotationDecision.FAIL


class CredentialPool:
    """
    Ordered API keys with a cursor that persists across calls.

    Usage:
        pool = CredentialPool(["key-a", "key-b"])
        pool.current    # "key-a"
        pool.advance()  # -> 1
        pool.current    # "key-b"
    """

    def __init__(self, keys: Iterable[str], name: str = "api") -> None:
        self._keys: Tuple[str, ...] = tuple(keys)
        self._name = name
        self._index = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._keys)

    def __bool__(self) -> bool:
        return bool(self._keys)

    @property
    def index(self) -> int:
        return self._index

    @property
    def current(self) -> str:
        if not self._keys:
            raise NoCredentialsError(f"No {self._name} API keys available")
        return self._keys[self._index]

    def advance(self) -> int:
        """Move the cursor one step with wraparound; return the new index."""
        if not self._keys:
            raise NoCredentialsError(f"No {self._name} API keys available")
        with self._lock:
            self._index = (self._index + 1) % len(self._keys)
            new_index = self._index
        logger.info("Rotated %s API key to index %d", self._name, new_index)
        return new_index
