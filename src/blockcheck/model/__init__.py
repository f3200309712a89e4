"""Core data models for blockcheck."""

from .decisions import (
    BlockDecision,
    CachedReason,
    FilesChangedReason,
    Reason,
    ValidatorDecision,
    ValidatorOutcome,
)
from .entities import (
    BlockCacheEntry,
    BlockFingerprint,
    CachedIssue,
    CachedValidatorResult,
    ConfigurationFingerprint,
    FileDiff,
    FileDigest,
    ValidationCache,
)

__all__ = [
    "BlockCacheEntry",
    "BlockDecision",
    "BlockFingerprint",
    "CachedIssue",
    "CachedReason",
    "CachedValidatorResult",
    "ConfigurationFingerprint",
    "FileDiff",
    "FileDigest",
    "FilesChangedReason",
    "Reason",
    "ValidationCache",
    "ValidatorDecision",
    "ValidatorOutcome",
]
