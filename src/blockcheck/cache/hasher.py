"""Content hashing for block files and configuration slices."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterable, Sequence
from datetime import date, datetime
from pathlib import Path

from blockcheck.constants.cache import EXCLUDED_DIRS, EXCLUDED_FILES, UNREADABLE_DIGEST
from blockcheck.exceptions import ConfigMismatchError
from blockcheck.io import file_sha256, text_sha256
from blockcheck.model import FileDiff, FileDigest

logger = logging.getLogger(__name__)


def hash_file(path: Path, relative_path: str) -> FileDigest:
    """Hash one file and capture its size and modification time.

    Raises ``OSError`` when the file cannot be read.
    """
    digest = file_sha256(path)
    stat = path.stat()
    return FileDigest(
        relative_path=relative_path,
        digest=digest,
        size_bytes=int(stat.st_size),
        modified_at_ms=stat.st_mtime_ns / 1_000_000,
    )


def _unreadable(relative_path: str) -> FileDigest:
    return FileDigest(relative_path=relative_path, digest=UNREADABLE_DIGEST, size_bytes=-1, modified_at_ms=0)


def hash_block_files(block_path: Path) -> list[FileDigest]:
    """Hash every file under a block directory, sorted by relative path.

    A block path pointing at a single file yields one digest named after the
    file. Unreadable files are kept with a marker digest so they always count
    as changed; a missing or inaccessible block path yields an empty list.
    """
    try:
        is_file = block_path.is_file()
        is_dir = not is_file and block_path.is_dir()
    except OSError as exc:
        logger.warning("Failed to stat block path %s (%s); treating it as changed", block_path, exc)
        return []

    if is_file:
        try:
            return [hash_file(block_path, block_path.name)]
        except OSError as exc:
            logger.warning("Failed to hash block file %s (%s)", block_path, exc)
            return [_unreadable(block_path.name)]

    if not is_dir:
        return []

    digests: list[FileDigest] = []

    def _on_walk_error(exc: OSError) -> None:
        logger.warning("Failed to list directory %s (%s)", exc.filename, exc)

    for dirpath, dirnames, filenames in os.walk(block_path, onerror=_on_walk_error):
        dirnames[:] = sorted(name for name in dirnames if name not in EXCLUDED_DIRS)
        current = Path(dirpath)
        for filename in filenames:
            if filename in EXCLUDED_FILES:
                continue
            file_path = current / filename
            relative_path = file_path.relative_to(block_path).as_posix()
            try:
                digests.append(hash_file(file_path, relative_path))
            except OSError as exc:
                logger.warning("Failed to hash %s (%s); treating it as changed", file_path, exc)
                digests.append(_unreadable(relative_path))

    return sort_file_digests(digests)


def sort_file_digests(files: Iterable[FileDigest]) -> list[FileDigest]:
    """Return file digests in relative-path order."""
    return sorted(files, key=lambda file: file.relative_path)


def combine_digests(sorted_digests: Sequence[str]) -> str:
    """Digest an already-ordered sequence of digests.

    The empty sequence has a well-defined digest of its own.
    """
    return text_sha256("\n".join(sorted_digests))


def content_digest(files: Iterable[FileDigest]) -> str:
    """Combined digest of a block's file set, independent of traversal order."""
    return combine_digests([f"{file.relative_path}:{file.digest}" for file in sort_file_digests(files)])


def _json_default(value: object) -> str:
    # YAML timestamps load as date/datetime objects.
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def canonical_json(value: object) -> str:
    """Render a configuration value with stable key ordering and no whitespace."""
    try:
        return json.dumps(
            value,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
            default=_json_default,
        )
    except (TypeError, ValueError) as exc:
        raise ConfigMismatchError(f"Configuration slice cannot be canonicalized: {exc}") from exc


def hash_config_slice(value: object) -> str:
    """Digest a configuration slice so formatting and key order do not matter."""
    return text_sha256(canonical_json(value))


def diff_file_digests(old_files: Iterable[FileDigest], new_files: Iterable[FileDigest]) -> FileDiff:
    """Compare two file sets by relative path and digest."""
    old_digests = {file.relative_path: file.digest for file in old_files}
    new_digests = {file.relative_path: file.digest for file in new_files}

    added = sorted(set(new_digests) - set(old_digests))
    removed = sorted(set(old_digests) - set(new_digests))
    modified = sorted(
        path
        for path in set(old_digests) & set(new_digests)
        if old_digests[path] != new_digests[path] or new_digests[path] == UNREADABLE_DIGEST
    )
    return FileDiff(added=tuple(added), removed=tuple(removed), modified=tuple(modified))
