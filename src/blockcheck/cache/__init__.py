"""Incremental validation cache: hashing, persistence and skip decisions."""

from __future__ import annotations

from blockcheck.cache.hasher import (
    canonical_json,
    combine_digests,
    content_digest,
    diff_file_digests,
    hash_block_files,
    hash_config_slice,
    hash_file,
)
from blockcheck.cache.policy import RevalidationPolicy, digests_differ, find_cached_result
from blockcheck.cache.store import CacheStore, cache_path_for, utc_now_iso

__all__ = [
    "CacheStore",
    "RevalidationPolicy",
    "cache_path_for",
    "canonical_json",
    "combine_digests",
    "content_digest",
    "diff_file_digests",
    "digests_differ",
    "find_cached_result",
    "hash_block_files",
    "hash_config_slice",
    "hash_file",
    "utc_now_iso",
]
