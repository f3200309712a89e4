"""Configuration-related exceptions."""

from __future__ import annotations

from blockcheck.exceptions.base import BlocksError


class ConfigError(BlocksError, ValueError):
    """Raised when the project configuration cannot be loaded."""


class ConfigMismatchError(BlocksError, ValueError):
    """Raised when a configuration slice cannot be canonicalized for hashing."""
