"""Typed cache payload structures."""

from __future__ import annotations

from typing import NotRequired, TypedDict


class FileHashPayload(TypedDict):
    """Persisted digest of a single block file."""

    path: str
    hash: str
    size: int
    mtime: float


class IssuePayload(TypedDict):
    """Persisted validator issue."""

    type: str
    code: str
    message: str


class ValidatorResultPayload(TypedDict):
    """Persisted result of one validator for one block."""

    passed: bool
    hash: str
    rulesApplied: NotRequired[list[str]]
    issues: NotRequired[list[IssuePayload]]


class BlockEntryPayload(TypedDict):
    """Persisted cache state for a single block."""

    blockName: str
    blockPath: str
    files: list[FileHashPayload]
    contentHash: str
    configHash: str
    lastValidated: str
    lastRunId: str
    validatorResults: dict[str, ValidatorResultPayload]


class BlockConfigPayload(TypedDict):
    """Persisted digests of one block's configuration slices."""

    definitionHash: str
    domainRulesHash: str | None
    inputsOutputsHash: str


class FingerprintPayload(TypedDict):
    """Persisted configuration fingerprint."""

    fullHash: str
    philosophyHash: str
    domainHash: str
    aiConfigHash: str
    validatorsHash: str
    globalDomainRulesHash: str
    blockConfigs: dict[str, BlockConfigPayload]


class CachePayload(TypedDict):
    """Top-level cache payload persisted to disk."""

    version: str
    createdAt: str
    updatedAt: str
    configFingerprint: FingerprintPayload
    blocks: dict[str, BlockEntryPayload]
