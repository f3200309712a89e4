"""Shared exception hierarchy for blockcheck."""

from __future__ import annotations

from .base import BlocksError
from .cache import CacheError, CorruptCacheError
from .config import ConfigError, ConfigMismatchError

__all__ = [
    "BlocksError",
    "CacheError",
    "ConfigError",
    "ConfigMismatchError",
    "CorruptCacheError",
]
