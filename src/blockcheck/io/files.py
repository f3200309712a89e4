"""File-level helpers for hashing."""

from __future__ import annotations

import hashlib
from pathlib import Path

from blockcheck.constants.cache import FILE_HASH_CHUNK_SIZE


def file_sha256(path: Path) -> str:
    """Return SHA-256 hex digest for a file."""
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(FILE_HASH_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def text_sha256(text: str) -> str:
    """Return SHA-256 hex digest of UTF-8 encoded text.

    Surrogate escapes from undecodable file names map back to their raw bytes.
    """
    return hashlib.sha256(text.encode("utf-8", errors="surrogateescape")).hexdigest()
