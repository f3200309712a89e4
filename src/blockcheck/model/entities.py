"""Cache state entities: file digests, block entries and configuration fingerprints."""

from __future__ import annotations

from dataclasses import dataclass, field

from blockcheck.types.cache import (
    BlockConfigPayload,
    BlockEntryPayload,
    CachePayload,
    FileHashPayload,
    FingerprintPayload,
    IssuePayload,
    ValidatorResultPayload,
)


@dataclass(frozen=True)
class FileDigest:
    """Digest and stat metadata of one file under a block directory."""

    relative_path: str
    digest: str
    size_bytes: int
    modified_at_ms: float

    def to_dict(self) -> FileHashPayload:
        return {
            "path": self.relative_path,
            "hash": self.digest,
            "size": self.size_bytes,
            "mtime": self.modified_at_ms,
        }


@dataclass(frozen=True)
class FileDiff:
    """Relative paths that differ between two file digest sets."""

    added: tuple[str, ...] = ()
    removed: tuple[str, ...] = ()
    modified: tuple[str, ...] = ()

    @property
    def changed_paths(self) -> tuple[str, ...]:
        """All differing paths, sorted."""
        return tuple(sorted({*self.added, *self.removed, *self.modified}))

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.removed or self.modified)


@dataclass(frozen=True)
class CachedIssue:
    """Issue reported by a validator run, kept for replay on cache hits."""

    type: str
    code: str
    message: str

    def to_dict(self) -> IssuePayload:
        return {"type": self.type, "code": self.code, "message": self.message}


@dataclass(frozen=True)
class CachedValidatorResult:
    """Outcome of one validator, pinned to the content digest it ran against."""

    passed: bool
    digest_at_run: str
    rules_applied: tuple[str, ...] = ()
    issues: tuple[CachedIssue, ...] = ()

    def to_dict(self) -> ValidatorResultPayload:
        return {
            "passed": self.passed,
            "hash": self.digest_at_run,
            "rulesApplied": list(self.rules_applied),
            "issues": [issue.to_dict() for issue in self.issues],
        }


def _file_sort_key(file: FileDigest) -> str:
    return file.relative_path


@dataclass(frozen=True)
class BlockCacheEntry:
    """Last known validation state of one block.

    ``files`` is normalized to relative-path order on construction so the
    stored sequence always matches the order ``content_digest`` was built from.
    """

    block_name: str
    block_path: str
    files: tuple[FileDigest, ...]
    content_digest: str
    config_digest: str
    last_validated_at: str
    last_run_id: str
    validator_results: dict[str, CachedValidatorResult] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "files", tuple(sorted(self.files, key=_file_sort_key)))

    def to_dict(self) -> BlockEntryPayload:
        return {
            "blockName": self.block_name,
            "blockPath": self.block_path,
            "files": [file.to_dict() for file in self.files],
            "contentHash": self.content_digest,
            "configHash": self.config_digest,
            "lastValidated": self.last_validated_at,
            "lastRunId": self.last_run_id,
            "validatorResults": {
                validator_id: result.to_dict() for validator_id, result in sorted(self.validator_results.items())
            },
        }


@dataclass(frozen=True)
class BlockFingerprint:
    """Digests of one block's slices of the configuration document."""

    definition_digest: str
    domain_rules_digest: str | None
    inputs_outputs_digest: str

    def to_dict(self) -> BlockConfigPayload:
        return {
            "definitionHash": self.definition_digest,
            "domainRulesHash": self.domain_rules_digest,
            "inputsOutputsHash": self.inputs_outputs_digest,
        }


@dataclass(frozen=True)
class ConfigurationFingerprint:
    """Named digests covering disjoint slices of the project configuration."""

    full_digest: str
    philosophy_digest: str
    domain_digest: str
    ai_config_digest: str
    validators_digest: str
    global_rules_digest: str
    per_block: dict[str, BlockFingerprint] = field(default_factory=dict)

    def to_dict(self) -> FingerprintPayload:
        return {
            "fullHash": self.full_digest,
            "philosophyHash": self.philosophy_digest,
            "domainHash": self.domain_digest,
            "aiConfigHash": self.ai_config_digest,
            "validatorsHash": self.validators_digest,
            "globalDomainRulesHash": self.global_rules_digest,
            "blockConfigs": {name: block.to_dict() for name, block in sorted(self.per_block.items())},
        }


@dataclass
class ValidationCache:
    """Persisted aggregate: one fingerprint plus one entry per block."""

    schema_version: str
    created_at: str
    updated_at: str
    configuration_fingerprint: ConfigurationFingerprint
    blocks: dict[str, BlockCacheEntry] = field(default_factory=dict)

    def to_dict(self) -> CachePayload:
        return {
            "version": self.schema_version,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "configFingerprint": self.configuration_fingerprint.to_dict(),
            "blocks": {name: entry.to_dict() for name, entry in sorted(self.blocks.items())},
        }
