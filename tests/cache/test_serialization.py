"""Tests for parsing persisted cache payloads."""

from __future__ import annotations

from typing import Any

import pytest

from blockcheck.cache.hasher import content_digest
from blockcheck.cache.serialization import parse_block_entry, parse_cache_payload, parse_fingerprint
from blockcheck.constants.cache import CACHE_VERSION
from blockcheck.exceptions import CorruptCacheError
from blockcheck.model import FileDigest


def _files() -> list[dict[str, Any]]:
    return [
        {"path": "index.ts", "hash": "aa", "size": 3, "mtime": 1700000000000.5},
        {"path": "block.ts", "hash": "bb", "size": 4, "mtime": 1700000000001},
    ]


def _entry_payload(name: str = "card") -> dict[str, Any]:
    files = _files()
    digest = content_digest(
        FileDigest(relative_path=item["path"], digest=item["hash"], size_bytes=item["size"], modified_at_ms=0.0)
        for item in files
    )
    return {
        "blockName": name,
        "blockPath": f"blocks/{name}",
        "files": files,
        "contentHash": digest,
        "configHash": "definition",
        "lastValidated": "2024-05-01T10:00:00.000Z",
        "lastRunId": "run-1",
        "validatorResults": {
            "domain": {
                "passed": False,
                "hash": digest,
                "rulesApplied": ["no-any"],
                "issues": [{"type": "error", "code": "DOMAIN_RULE", "message": "uses any"}],
            },
            "schema": {"passed": True, "hash": digest},
        },
    }


def _fingerprint_payload() -> dict[str, Any]:
    return {
        "fullHash": "full",
        "philosophyHash": "philosophy",
        "domainHash": "domain",
        "aiConfigHash": "ai",
        "validatorsHash": "validators",
        "globalDomainRulesHash": "global",
        "blockConfigs": {
            "card": {"definitionHash": "definition", "domainRulesHash": None, "inputsOutputsHash": "io"},
        },
    }


def _cache_payload(**blocks: dict[str, Any]) -> dict[str, Any]:
    return {
        "version": CACHE_VERSION,
        "createdAt": "2024-05-01T10:00:00.000Z",
        "updatedAt": "2024-05-01T10:00:00.000Z",
        "configFingerprint": _fingerprint_payload(),
        "blocks": blocks,
    }


def test_parse_block_entry_reads_every_field() -> None:
    entry = parse_block_entry(_entry_payload())

    assert entry.block_name == "card"
    assert [file.relative_path for file in entry.files] == ["block.ts", "index.ts"]
    assert entry.files[1].size_bytes == 3
    assert entry.validator_results["domain"].rules_applied == ("no-any",)
    assert entry.validator_results["domain"].issues[0].code == "DOMAIN_RULE"
    assert entry.validator_results["schema"].issues == ()


def test_parse_fingerprint_keeps_null_domain_rules() -> None:
    fingerprint = parse_fingerprint(_fingerprint_payload())

    assert fingerprint.per_block["card"].domain_rules_digest is None
    assert fingerprint.global_rules_digest == "global"


@pytest.mark.parametrize(
    ("mutate", "message"),
    [
        pytest.param(lambda entry: entry.pop("blockPath"), "blockPath", id="missing-field"),
        pytest.param(lambda entry: entry.update(files={}), "files", id="files-not-list"),
        pytest.param(lambda entry: entry["files"].append(dict(entry["files"][0])), "duplicate", id="duplicate-path"),
        pytest.param(lambda entry: entry["files"][0].update(size="3"), "size", id="size-not-number"),
        pytest.param(lambda entry: entry["files"][0].update(size=True), "size", id="size-bool"),
        pytest.param(lambda entry: entry.update(contentHash="other"), "contentHash", id="digest-mismatch"),
        pytest.param(
            lambda entry: entry["validatorResults"]["schema"].update(passed="yes"), "passed", id="passed-not-bool"
        ),
        pytest.param(
            lambda entry: entry["validatorResults"]["domain"].update(rulesApplied="no-any"),
            "rulesApplied",
            id="rules-not-list",
        ),
        pytest.param(
            lambda entry: entry["validatorResults"]["domain"]["issues"][0].pop("code"), "code", id="issue-missing-code"
        ),
    ],
)
def test_parse_block_entry_rejects_malformed_payload(mutate: Any, message: str) -> None:
    payload = _entry_payload()
    mutate(payload)

    with pytest.raises(CorruptCacheError, match=message):
        parse_block_entry(payload)


def test_parse_cache_payload_drops_only_bad_entries() -> None:
    bad = _entry_payload("hero")
    del bad["lastRunId"]
    renamed = _entry_payload("other-name")

    cache, corrupted = parse_cache_payload(_cache_payload(card=_entry_payload(), hero=bad, banner=renamed))

    assert sorted(cache.blocks) == ["card"]
    assert corrupted == ("banner", "hero")
    assert cache.configuration_fingerprint.full_digest == "full"


@pytest.mark.parametrize(
    "payload",
    [
        pytest.param("not a mapping", id="not-object"),
        pytest.param({**_cache_payload(), "version": "2.0"}, id="version"),
        pytest.param({**_cache_payload(), "createdAt": 5}, id="created-at"),
        pytest.param({**_cache_payload(), "blocks": []}, id="blocks-list"),
        pytest.param({**_cache_payload(), "configFingerprint": {"fullHash": "x"}}, id="fingerprint"),
    ],
)
def test_parse_cache_payload_rejects_bad_envelope(payload: object) -> None:
    with pytest.raises(CorruptCacheError):
        parse_cache_payload(payload)
