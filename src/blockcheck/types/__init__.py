"""Shared type aliases for blockcheck."""

from .cache import (
    BlockConfigPayload,
    BlockEntryPayload,
    CachePayload,
    FileHashPayload,
    FingerprintPayload,
    IssuePayload,
    ValidatorResultPayload,
)
from .common import JsonObject, JsonScalar, JsonValue
from .policy import ReasonKind, ValidatorCategory

__all__ = [
    "BlockConfigPayload",
    "BlockEntryPayload",
    "CachePayload",
    "FileHashPayload",
    "FingerprintPayload",
    "IssuePayload",
    "JsonObject",
    "JsonScalar",
    "JsonValue",
    "ReasonKind",
    "ValidatorCategory",
    "ValidatorResultPayload",
]
