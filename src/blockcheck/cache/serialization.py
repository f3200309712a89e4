"""Conversion of persisted cache payloads into model objects.

Parsing is strict: anything the engine would later rely on must be present
and well-typed, otherwise ``CorruptCacheError`` is raised. A malformed block
entry only invalidates that block; a malformed envelope or fingerprint
invalidates the whole cache.
"""

from __future__ import annotations

import math

from blockcheck.cache.hasher import content_digest
from blockcheck.constants.cache import CACHE_VERSION
from blockcheck.exceptions import CorruptCacheError
from blockcheck.model import (
    BlockCacheEntry,
    BlockFingerprint,
    CachedIssue,
    CachedValidatorResult,
    ConfigurationFingerprint,
    FileDigest,
    ValidationCache,
)


def _require_str(mapping: dict[object, object], key: str, where: str) -> str:
    value = mapping.get(key)
    if not isinstance(value, str):
        raise CorruptCacheError(f"{where}.{key} must be a string")
    return value


def _require_mapping(value: object, where: str) -> dict[object, object]:
    if not isinstance(value, dict):
        raise CorruptCacheError(f"{where} must be an object")
    return value


def _require_number(mapping: dict[object, object], key: str, where: str) -> float:
    value = mapping.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise CorruptCacheError(f"{where}.{key} must be a number")
    try:
        finite = math.isfinite(value)
    except OverflowError:
        finite = False
    if not finite:
        raise CorruptCacheError(f"{where}.{key} must be finite")
    return value


def parse_cache_payload(payload: object) -> tuple[ValidationCache, tuple[str, ...]]:
    """Parse a whole cache document.

    Returns the cache plus the names of block entries that were dropped
    because they were malformed.
    """
    envelope = _require_mapping(payload, "cache")
    version = envelope.get("version")
    if version != CACHE_VERSION:
        raise CorruptCacheError(f"cache version {version!r} does not match {CACHE_VERSION!r}")

    created_at = _require_str(envelope, "createdAt", "cache")
    updated_at = _require_str(envelope, "updatedAt", "cache")
    fingerprint = parse_fingerprint(envelope.get("configFingerprint"))
    raw_blocks = _require_mapping(envelope.get("blocks"), "cache.blocks")

    blocks: dict[str, BlockCacheEntry] = {}
    corrupted: list[str] = []
    for name, value in raw_blocks.items():
        if not isinstance(name, str):
            continue
        try:
            entry = parse_block_entry(value, where=f"blocks.{name}")
        except CorruptCacheError:
            corrupted.append(name)
            continue
        if entry.block_name != name:
            corrupted.append(name)
            continue
        blocks[name] = entry

    cache = ValidationCache(
        schema_version=CACHE_VERSION,
        created_at=created_at,
        updated_at=updated_at,
        configuration_fingerprint=fingerprint,
        blocks=blocks,
    )
    return cache, tuple(sorted(corrupted))


def parse_fingerprint(value: object) -> ConfigurationFingerprint:
    where = "configFingerprint"
    raw = _require_mapping(value, where)
    raw_blocks = _require_mapping(raw.get("blockConfigs"), f"{where}.blockConfigs")

    per_block: dict[str, BlockFingerprint] = {}
    for name, block_value in raw_blocks.items():
        if not isinstance(name, str):
            raise CorruptCacheError(f"{where}.blockConfigs has a non-string key")
        block_where = f"{where}.blockConfigs.{name}"
        block_raw = _require_mapping(block_value, block_where)
        domain_rules = block_raw.get("domainRulesHash")
        if domain_rules is not None and not isinstance(domain_rules, str):
            raise CorruptCacheError(f"{block_where}.domainRulesHash must be a string or null")
        per_block[name] = BlockFingerprint(
            definition_digest=_require_str(block_raw, "definitionHash", block_where),
            domain_rules_digest=domain_rules,
            inputs_outputs_digest=_require_str(block_raw, "inputsOutputsHash", block_where),
        )

    return ConfigurationFingerprint(
        full_digest=_require_str(raw, "fullHash", where),
        philosophy_digest=_require_str(raw, "philosophyHash", where),
        domain_digest=_require_str(raw, "domainHash", where),
        ai_config_digest=_require_str(raw, "aiConfigHash", where),
        validators_digest=_require_str(raw, "validatorsHash", where),
        global_rules_digest=_require_str(raw, "globalDomainRulesHash", where),
        per_block=per_block,
    )


def parse_block_entry(value: object, *, where: str = "block") -> BlockCacheEntry:
    raw = _require_mapping(value, where)
    raw_files = raw.get("files")
    if not isinstance(raw_files, list):
        raise CorruptCacheError(f"{where}.files must be a list")

    files = tuple(_parse_file_digest(item, f"{where}.files[{index}]") for index, item in enumerate(raw_files))
    if len({file.relative_path for file in files}) != len(files):
        raise CorruptCacheError(f"{where}.files has duplicate paths")

    stored_digest = _require_str(raw, "contentHash", where)
    if stored_digest != content_digest(files):
        raise CorruptCacheError(f"{where}.contentHash does not match its file list")

    raw_results = _require_mapping(raw.get("validatorResults"), f"{where}.validatorResults")
    results: dict[str, CachedValidatorResult] = {}
    for validator_id, result_value in raw_results.items():
        if not isinstance(validator_id, str):
            raise CorruptCacheError(f"{where}.validatorResults has a non-string key")
        results[validator_id] = _parse_validator_result(result_value, f"{where}.validatorResults.{validator_id}")

    return BlockCacheEntry(
        block_name=_require_str(raw, "blockName", where),
        block_path=_require_str(raw, "blockPath", where),
        files=files,
        content_digest=stored_digest,
        config_digest=_require_str(raw, "configHash", where),
        last_validated_at=_require_str(raw, "lastValidated", where),
        last_run_id=_require_str(raw, "lastRunId", where),
        validator_results=results,
    )


def _parse_file_digest(value: object, where: str) -> FileDigest:
    raw = _require_mapping(value, where)
    return FileDigest(
        relative_path=_require_str(raw, "path", where),
        digest=_require_str(raw, "hash", where),
        size_bytes=int(_require_number(raw, "size", where)),
        modified_at_ms=float(_require_number(raw, "mtime", where)),
    )


def _parse_validator_result(value: object, where: str) -> CachedValidatorResult:
    raw = _require_mapping(value, where)
    passed = raw.get("passed")
    if not isinstance(passed, bool):
        raise CorruptCacheError(f"{where}.passed must be a boolean")

    rules_applied = raw.get("rulesApplied") or []
    if not isinstance(rules_applied, list) or not all(isinstance(rule, str) for rule in rules_applied):
        raise CorruptCacheError(f"{where}.rulesApplied must be a list of strings")

    raw_issues = raw.get("issues") or []
    if not isinstance(raw_issues, list):
        raise CorruptCacheError(f"{where}.issues must be a list")
    issues: list[CachedIssue] = []
    for index, issue_value in enumerate(raw_issues):
        issue_where = f"{where}.issues[{index}]"
        issue = _require_mapping(issue_value, issue_where)
        issues.append(
            CachedIssue(
                type=_require_str(issue, "type", issue_where),
                code=_require_str(issue, "code", issue_where),
                message=_require_str(issue, "message", issue_where),
            )
        )

    return CachedValidatorResult(
        passed=passed,
        digest_at_run=_require_str(raw, "hash", where),
        rules_applied=tuple(rules_applied),
        issues=tuple(issues),
    )
