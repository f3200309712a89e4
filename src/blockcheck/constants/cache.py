"""Constants used by the validation cache and hashing."""

from __future__ import annotations

CACHE_VERSION: str = "1.0"
CACHE_DIRNAME: str = ".blocks"
CACHE_FILENAME: str = "cache.json"
CACHE_TEMP_PREFIX: str = ".cache-"
CACHE_TEMP_SUFFIX: str = ".tmp"
FILE_HASH_CHUNK_SIZE: int = 65536

# Directories never descended into when hashing a block.
EXCLUDED_DIRS: frozenset[str] = frozenset(
    {
        "node_modules",
        "dist",
        "build",
        ".git",
        ".turbo",
        "coverage",
    }
)

EXCLUDED_FILES: frozenset[str] = frozenset(
    {
        ".DS_Store",
        "package-lock.json",
        "pnpm-lock.yaml",
        "yarn.lock",
    }
)

# Recorded for files that exist but cannot be read; never equal to a real digest.
UNREADABLE_DIGEST: str = "!unreadable"

# Recorded for config slices that cannot be canonicalized; always compares as changed.
UNCOMPUTABLE_DIGEST: str = "!uncomputable"

SENTINEL_DIGESTS: frozenset[str] = frozenset({UNREADABLE_DIGEST, UNCOMPUTABLE_DIGEST})

DEFAULT_MAX_HASH_WORKERS: int = 8
