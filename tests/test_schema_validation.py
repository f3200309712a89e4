"""Tests for JSON Schema validation of the persisted cache file."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import pytest

from blockcheck.cache.store import cache_path_for
from blockcheck.config import load_config
from blockcheck.model import CachedIssue, ValidatorOutcome
from blockcheck.pipeline import ValidationSession

SCHEMAS_DIR: Path = Path(__file__).resolve().parents[1] / "schemas"
CACHE_SCHEMA_PATH: Path = SCHEMAS_DIR / "cache.schema.json"


def _load_schema(path: Path) -> dict[str, Any]:
    """Load a JSON Schema file from disk."""
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.fixture()
def cache_schema() -> dict[str, Any]:
    """Load the cache JSON Schema."""
    return _load_schema(CACHE_SCHEMA_PATH)


def _write_cache(root: Path) -> dict[str, Any]:
    session = ValidationSession(root, load_config(root))
    issue = CachedIssue(type="warning", code="SHAPE_EXPORT", message="Missing default export")
    for decision in session.plan():
        outcomes = {validator_id: ValidatorOutcome(passed=True) for validator_id in decision.to_run}
        outcomes["schema"] = ValidatorOutcome(passed=False, issues=(issue,), rules_applied=("exports",))
        session.record(decision, outcomes)
    session.finish()
    return json.loads(cache_path_for(root).read_text(encoding="utf-8"))


def test_cache_schema_is_valid(cache_schema: dict[str, Any]) -> None:
    jsonschema.Draft202012Validator.check_schema(cache_schema)


def test_written_cache_matches_schema(project_root: Path, cache_schema: dict[str, Any]) -> None:
    payload = _write_cache(project_root)

    jsonschema.validate(instance=payload, schema=cache_schema)


def test_schema_rejects_unknown_version(project_root: Path, cache_schema: dict[str, Any]) -> None:
    payload = _write_cache(project_root)
    payload["version"] = "2.0"

    with pytest.raises(jsonschema.ValidationError):
        jsonschema.validate(instance=payload, schema=cache_schema)


def test_schema_rejects_entry_without_content_hash(project_root: Path, cache_schema: dict[str, Any]) -> None:
    payload = _write_cache(project_root)
    del payload["blocks"]["theme-glass"]["contentHash"]

    with pytest.raises(jsonschema.ValidationError):
        jsonschema.validate(instance=payload, schema=cache_schema)
