"""Cache-related exceptions.

These never escape the caching layer: ``CacheStore`` catches them and
continues as if no cache existed.
"""

from __future__ import annotations

from blockcheck.exceptions.base import BlocksError


class CacheError(BlocksError):
    """Base class for cache failures."""


class CorruptCacheError(CacheError, ValueError):
    """Raised when a persisted cache payload is malformed or has the wrong version."""
