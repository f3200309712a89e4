"""Tests for block content hashing and config slice digests."""

from __future__ import annotations

import hashlib
import logging
import os
import sys
from datetime import date
from pathlib import Path

import pytest

from blockcheck.cache import hasher
from blockcheck.cache.hasher import (
    canonical_json,
    combine_digests,
    content_digest,
    diff_file_digests,
    hash_block_files,
    hash_config_slice,
)
from blockcheck.constants.cache import UNREADABLE_DIGEST
from blockcheck.exceptions import ConfigMismatchError
from blockcheck.model import FileDigest


def _write(root: Path, relative: str, text: str) -> None:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def _digest(path: str, digest: str) -> FileDigest:
    return FileDigest(relative_path=path, digest=digest, size_bytes=1, modified_at_ms=0.0)


def test_hash_block_files_sorted_by_relative_path(tmp_path: Path) -> None:
    _write(tmp_path, "index.ts", "a")
    _write(tmp_path, "components/card.tsx", "b")
    _write(tmp_path, "block.ts", "c")

    files = hash_block_files(tmp_path)

    assert [file.relative_path for file in files] == ["block.ts", "components/card.tsx", "index.ts"]
    assert files[2].digest == hashlib.sha256(b"a").hexdigest()
    assert files[2].size_bytes == 1
    assert files[2].modified_at_ms > 0


def test_hash_block_files_skips_excluded_entries(tmp_path: Path) -> None:
    _write(tmp_path, "index.ts", "a")
    _write(tmp_path, "node_modules/pkg/index.js", "x")
    _write(tmp_path, "dist/index.js", "x")
    _write(tmp_path, "nested/.git/HEAD", "x")
    _write(tmp_path, ".DS_Store", "x")
    _write(tmp_path, "package-lock.json", "{}")

    files = hash_block_files(tmp_path)

    assert [file.relative_path for file in files] == ["index.ts"]


def test_hash_block_files_missing_path_is_empty(tmp_path: Path) -> None:
    assert hash_block_files(tmp_path / "missing") == []


def test_hash_block_files_single_file_block(tmp_path: Path) -> None:
    _write(tmp_path, "block.ts", "single")

    files = hash_block_files(tmp_path / "block.ts")

    assert [file.relative_path for file in files] == ["block.ts"]


def test_hash_block_files_marks_unreadable_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _write(tmp_path, "ok.ts", "fine")
    _write(tmp_path, "locked.ts", "secret")

    real_sha256 = hasher.file_sha256

    def _fake_sha256(path: Path) -> str:
        if path.name == "locked.ts":
            raise PermissionError(13, "Permission denied", str(path))
        return real_sha256(path)

    monkeypatch.setattr(hasher, "file_sha256", _fake_sha256)

    files = hash_block_files(tmp_path)

    assert [(file.relative_path, file.digest) for file in files][0] == ("locked.ts", UNREADABLE_DIGEST)
    assert files[1].digest != UNREADABLE_DIGEST


@pytest.mark.skipif(sys.platform != "linux", reason="needs a filesystem that accepts non-UTF-8 names")
def test_undecodable_file_name_still_hashes(tmp_path: Path) -> None:
    (tmp_path / os.fsdecode(b"bad\xff.ts")).write_bytes(b"odd")
    _write(tmp_path, "index.ts", "fine")

    files = hash_block_files(tmp_path)

    assert [file.relative_path for file in files] == ["bad\udcff.ts", "index.ts"]
    assert content_digest(files) != content_digest(files[1:])


def test_hash_block_files_inaccessible_path_is_empty(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    def _denied(self: Path) -> bool:
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "is_file", _denied)

    with caplog.at_level(logging.WARNING, logger="blockcheck.cache.hasher"):
        files = hash_block_files(tmp_path / "locked" / "card")

    assert files == []
    assert "Failed to stat block path" in caplog.text


def test_content_digest_independent_of_input_order() -> None:
    files = [_digest("b.ts", "2"), _digest("a.ts", "1"), _digest("c/d.ts", "3")]

    assert content_digest(files) == content_digest(list(reversed(files)))


def test_content_digest_changes_with_path_or_digest() -> None:
    base = content_digest([_digest("a.ts", "1")])

    assert content_digest([_digest("b.ts", "1")]) != base
    assert content_digest([_digest("a.ts", "2")]) != base


def test_empty_file_set_has_defined_digest() -> None:
    assert content_digest([]) == combine_digests([]) == hashlib.sha256(b"").hexdigest()


def test_hash_config_slice_ignores_key_order() -> None:
    first = {"entities": {"user": {"fields": ["name"]}}, "signals": {}}
    second = {"signals": {}, "entities": {"user": {"fields": ["name"]}}}

    assert hash_config_slice(first) == hash_config_slice(second)
    assert hash_config_slice(first) != hash_config_slice({"entities": {}})


def test_canonical_json_is_compact_and_handles_dates() -> None:
    assert canonical_json({"b": [1, 2], "a": date(2024, 1, 2)}) == '{"a":"2024-01-02","b":[1,2]}'


@pytest.mark.parametrize(
    "value",
    [
        pytest.param({"bad": object()}, id="unserializable"),
        pytest.param({"bad": float("nan")}, id="nan"),
    ],
)
def test_canonical_json_rejects_unhashable_slices(value: object) -> None:
    with pytest.raises(ConfigMismatchError):
        canonical_json(value)


def test_diff_file_digests_reports_each_kind() -> None:
    old = [_digest("same.ts", "1"), _digest("edited.ts", "1"), _digest("gone.ts", "1")]
    new = [_digest("same.ts", "1"), _digest("edited.ts", "2"), _digest("new.ts", "1")]

    diff = diff_file_digests(old, new)

    assert diff.added == ("new.ts",)
    assert diff.removed == ("gone.ts",)
    assert diff.modified == ("edited.ts",)
    assert diff.changed_paths == ("edited.ts", "gone.ts", "new.ts")
    assert not diff.is_empty


def test_diff_file_digests_unreadable_counts_as_modified() -> None:
    files = [_digest("a.ts", UNREADABLE_DIGEST)]

    assert diff_file_digests(files, files).modified == ("a.ts",)
    assert diff_file_digests([_digest("a.ts", "1")], [_digest("a.ts", "1")]).is_empty
