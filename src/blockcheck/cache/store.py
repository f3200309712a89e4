"""Cache loading and persistence for validation state."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from dataclasses import replace
from datetime import UTC, datetime
from pathlib import Path

from blockcheck.cache.serialization import parse_cache_payload
from blockcheck.constants.cache import (
    CACHE_DIRNAME,
    CACHE_FILENAME,
    CACHE_TEMP_PREFIX,
    CACHE_TEMP_SUFFIX,
    CACHE_VERSION,
)
from blockcheck.exceptions import CorruptCacheError
from blockcheck.io import load_json_file, write_json_atomic
from blockcheck.model import BlockCacheEntry, ConfigurationFingerprint, ValidationCache

logger = logging.getLogger(__name__)


def utc_now_iso() -> str:
    """Current time as an ISO-8601 UTC timestamp."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def cache_path_for(root: Path) -> Path:
    """Location of the cache file for a project root."""
    return root / CACHE_DIRNAME / CACHE_FILENAME


class CacheStore:
    """Owner of the in-memory ``ValidationCache`` and its on-disk file.

    Read, parse and write failures never raise: they leave the store without
    a cache (load) or disabled for the rest of the run (flush). Every mutation
    takes the same lock, so entries may be written from worker threads.
    """

    def __init__(self, root: Path, *, disabled: bool = False) -> None:
        self._root = root
        self._path = cache_path_for(root)
        self._disabled = disabled
        self._cache: ValidationCache | None = None
        self._dirty = False
        self._load_error: str | None = None
        self._corrupted_blocks: tuple[str, ...] = ()
        self._lock = threading.Lock()
        if not disabled:
            self.load()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def cache(self) -> ValidationCache | None:
        return self._cache

    @property
    def fingerprint(self) -> ConfigurationFingerprint | None:
        """Fingerprint stored with the loaded (or initialized) cache."""
        return self._cache.configuration_fingerprint if self._cache is not None else None

    @property
    def is_loaded(self) -> bool:
        return self._cache is not None

    @property
    def is_disabled(self) -> bool:
        return self._disabled

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    @property
    def load_error(self) -> str | None:
        """Why an existing cache file was discarded, if it was."""
        return self._load_error

    @property
    def corrupted_blocks(self) -> tuple[str, ...]:
        """Block entries dropped during load because they were malformed."""
        return self._corrupted_blocks

    def load(self) -> ValidationCache | None:
        """Read the cache file; a missing, unreadable or mismatched file yields ``None``."""
        with self._lock:
            self._cache = None
            self._dirty = False
            self._load_error = None
            self._corrupted_blocks = ()

            if not self._path.is_file():
                return None

            try:
                payload = load_json_file(self._path)
            except (OSError, ValueError, RecursionError) as exc:
                self._load_error = f"unreadable cache file ({exc})"
                logger.warning("Ignoring cache at %s: %s", self._path, self._load_error)
                return None

            try:
                cache, corrupted = parse_cache_payload(payload)
            except CorruptCacheError as exc:
                self._load_error = str(exc)
                logger.warning("Ignoring cache at %s: %s", self._path, exc)
                return None

            if corrupted:
                logger.warning("Dropping malformed cache entries: %s", ", ".join(corrupted))
            self._cache = cache
            self._corrupted_blocks = corrupted
            logger.debug("Loaded cache with %d block entries from %s", len(cache.blocks), self._path)
            return cache

    def initialize_if_absent(self, fingerprint: ConfigurationFingerprint) -> None:
        """Start a fresh cache with ``fingerprint`` unless one is already loaded."""
        if self._disabled:
            return
        with self._lock:
            if self._cache is not None:
                return
            now = utc_now_iso()
            self._cache = ValidationCache(
                schema_version=CACHE_VERSION,
                created_at=now,
                updated_at=now,
                configuration_fingerprint=fingerprint,
                blocks={},
            )
            self._dirty = True

    def get_block_entry(self, name: str) -> BlockCacheEntry | None:
        if self._disabled or self._cache is None:
            return None
        return self._cache.blocks.get(name)

    def put_block_entry(self, entry: BlockCacheEntry) -> None:
        """Replace the entry stored under ``entry.block_name``."""
        if self._disabled:
            return
        with self._lock:
            if self._cache is None:
                return
            self._cache.blocks[entry.block_name] = entry
            self._corrupted_blocks = tuple(name for name in self._corrupted_blocks if name != entry.block_name)
            self._dirty = True

    def remove_block_entry(self, name: str) -> None:
        if self._disabled:
            return
        with self._lock:
            if self._cache is None:
                return
            if self._cache.blocks.pop(name, None) is not None:
                self._dirty = True

    def prune_blocks(self, current_names: Iterable[str]) -> list[str]:
        """Drop entries and fingerprint slices of blocks no longer configured.

        Returns the removed block names, sorted.
        """
        if self._disabled:
            return []
        keep = set(current_names)
        with self._lock:
            if self._cache is None:
                return []

            removed = sorted(name for name in self._cache.blocks if name not in keep)
            for name in removed:
                del self._cache.blocks[name]

            fingerprint = self._cache.configuration_fingerprint
            stale_slices = [name for name in fingerprint.per_block if name not in keep]
            if stale_slices:
                self._cache.configuration_fingerprint = replace(
                    fingerprint,
                    per_block={name: block for name, block in fingerprint.per_block.items() if name in keep},
                )

            if removed or stale_slices:
                self._dirty = True
            if removed:
                logger.info("Pruned %d deleted block(s) from cache: %s", len(removed), ", ".join(removed))
            return removed

    def update_fingerprint(self, fingerprint: ConfigurationFingerprint) -> None:
        if self._disabled:
            return
        with self._lock:
            if self._cache is None:
                return
            self._cache.configuration_fingerprint = fingerprint
            self._dirty = True

    def cached_block_names(self) -> list[str]:
        if self._cache is None:
            return []
        return sorted(self._cache.blocks)

    def flush(self) -> bool:
        """Write the cache when dirty. Returns whether the file was written."""
        if self._disabled:
            return False
        with self._lock:
            if self._cache is None or not self._dirty:
                return False

            self._cache.updated_at = utc_now_iso()
            try:
                write_json_atomic(
                    path=self._path,
                    payload=self._cache.to_dict(),
                    temp_prefix=CACHE_TEMP_PREFIX,
                    temp_suffix=CACHE_TEMP_SUFFIX,
                )
            except (OSError, TypeError, ValueError) as exc:
                logger.warning("Failed to write cache to %s (%s); caching disabled for this run", self._path, exc)
                self._disabled = True
                return False

            self._dirty = False
            logger.debug("Wrote cache with %d block entries to %s", len(self._cache.blocks), self._path)
            return True

    def clear(self) -> None:
        """Delete the cache file and forget in-memory state."""
        with self._lock:
            self._cache = None
            self._dirty = False
            self._corrupted_blocks = ()
            try:
                self._path.unlink(missing_ok=True)
            except OSError as exc:
                logger.warning("Failed to delete cache file %s (%s)", self._path, exc)
