"""Validation run orchestration."""

from __future__ import annotations

from blockcheck.pipeline.session import ValidationSession

__all__ = ["ValidationSession"]
