"""Base exception for blockcheck."""

from __future__ import annotations


class BlocksError(Exception):
    """Base class for all blockcheck errors."""
