"""Tests for JSON IO and hashing helpers."""

from __future__ import annotations

import hashlib
import json
from pathlib import Path

import pytest

from blockcheck.constants.cache import CACHE_TEMP_PREFIX, CACHE_TEMP_SUFFIX
from blockcheck.io import dump_json_text, file_sha256, load_json_file, text_sha256, write_json_atomic


def test_write_json_atomic_cleans_temp_file_on_error(tmp_path: Path) -> None:
    out_path = tmp_path / "cache.json"

    with pytest.raises(TypeError):
        write_json_atomic(
            path=out_path,
            payload={"bad": object()},
            temp_prefix=CACHE_TEMP_PREFIX,
            temp_suffix=CACHE_TEMP_SUFFIX,
        )

    leftovers = [
        item
        for item in tmp_path.iterdir()
        if item.name.startswith(CACHE_TEMP_PREFIX) and item.name.endswith(CACHE_TEMP_SUFFIX)
    ]
    assert not leftovers
    assert not out_path.exists()


def test_write_json_atomic_keeps_previous_file_on_error(tmp_path: Path) -> None:
    out_path = tmp_path / "cache.json"
    out_path.write_text('{"keep": true}\n', encoding="utf-8")

    with pytest.raises(TypeError):
        write_json_atomic(
            path=out_path,
            payload={"bad": object()},
            temp_prefix=CACHE_TEMP_PREFIX,
            temp_suffix=CACHE_TEMP_SUFFIX,
        )

    assert load_json_file(out_path) == {"keep": True}


def test_write_json_atomic_creates_parent_directory(tmp_path: Path) -> None:
    out_path = tmp_path / ".blocks" / "cache.json"

    write_json_atomic(path=out_path, payload={"b": 1, "a": [1, 2]}, temp_prefix=".t-", temp_suffix=".tmp")

    assert load_json_file(out_path) == {"a": [1, 2], "b": 1}
    assert [item.name for item in out_path.parent.iterdir()] == ["cache.json"]


def test_dump_json_text_is_sorted_and_newline_terminated() -> None:
    text = dump_json_text({"z": 1, "a": {"c": 2, "b": 3}})

    assert text.endswith("\n")
    assert text.index('"a"') < text.index('"z"')
    assert text.index('"b"') < text.index('"c"')
    assert json.loads(text) == {"a": {"b": 3, "c": 2}, "z": 1}


def test_file_sha256_matches_hashlib(tmp_path: Path) -> None:
    path = tmp_path / "data.bin"
    content = b"x" * 200_000
    path.write_bytes(content)

    assert file_sha256(path) == hashlib.sha256(content).hexdigest()


def test_text_sha256_encodes_utf8() -> None:
    assert text_sha256("héllo") == hashlib.sha256("héllo".encode()).hexdigest()
