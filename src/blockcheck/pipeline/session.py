"""One validation run against a project: plan decisions, record results, persist once."""

from __future__ import annotations

import logging
import os
import uuid
from collections.abc import Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from pathlib import Path

from blockcheck.cache.hasher import content_digest, hash_block_files
from blockcheck.cache.policy import RevalidationPolicy
from blockcheck.cache.store import CacheStore, utc_now_iso
from blockcheck.config import BlocksConfig, compute_config_fingerprint
from blockcheck.constants.cache import DEFAULT_MAX_HASH_WORKERS
from blockcheck.exceptions import ConfigError
from blockcheck.model import (
    BlockCacheEntry,
    BlockDecision,
    CachedValidatorResult,
    ConfigurationFingerprint,
    FileDigest,
    ValidatorOutcome,
)
from blockcheck.types.policy import ValidatorCategory

logger = logging.getLogger(__name__)


def _default_workers() -> int:
    return max(1, min(DEFAULT_MAX_HASH_WORKERS, os.cpu_count() or 1))


def _display_path(path: Path, root: Path) -> str:
    """Render a block path relative to the project root when possible."""
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def _same_slices(first: ConfigurationFingerprint, second: ConfigurationFingerprint) -> bool:
    return replace(first, full_digest="") == replace(second, full_digest="")


class ValidationSession:
    """Drive the cache for one run.

    ``plan`` hashes the requested blocks on a worker pool and asks the policy
    for decisions; the caller runs whatever must run and hands the outcomes
    to ``record``; ``finish`` stores the new fingerprint and flushes.
    """

    def __init__(
        self,
        root: Path,
        config: BlocksConfig,
        *,
        force: bool = False,
        no_cache: bool = False,
        max_workers: int | None = None,
        validator_categories: Mapping[str, ValidatorCategory] | None = None,
        run_id: str | None = None,
    ) -> None:
        self.root = root.resolve()
        self.config = config
        self.run_id = run_id or uuid.uuid4().hex
        self.max_workers = max_workers if max_workers is not None else _default_workers()
        if self.max_workers < 1:
            raise ConfigError("max_workers must be at least 1")

        self.store = CacheStore(self.root, disabled=no_cache)
        self.current_fingerprint = compute_config_fingerprint(config)
        self.stored_fingerprint = self.store.fingerprint
        cache_corrupted = self.store.load_error is not None
        if cache_corrupted:
            logger.warning("Cache discarded (%s); all blocks will be revalidated", self.store.load_error)
        self.store.initialize_if_absent(self.current_fingerprint)

        categories = dict(config.validator_categories)
        if validator_categories:
            categories.update(validator_categories)
        self.policy = RevalidationPolicy(
            current_fingerprint=self.current_fingerprint,
            stored_fingerprint=self.stored_fingerprint,
            force=force,
            cache_corrupted=cache_corrupted,
            validator_categories=categories,
        )
        self._pruned = False
        self._recorded: set[str] = set()

    @property
    def validators(self) -> tuple[str, ...]:
        return self.config.validator_ids

    def plan(self, block_names: Sequence[str] | None = None) -> list[BlockDecision]:
        """Decide, for every requested block, which validators must run."""
        names = list(block_names) if block_names else list(self.config.block_names)
        unknown = sorted(set(names) - set(self.config.blocks))
        if unknown:
            raise ConfigError(f"Block(s) not found in config: {', '.join(unknown)}")

        if not self._pruned:
            self.store.prune_blocks(self.config.blocks)
            self._pruned = True

        hashed = self._hash_blocks(names)
        corrupted = set(self.store.corrupted_blocks)
        decisions: list[BlockDecision] = []
        for name in names:
            files, digest = hashed[name]
            decision = self.policy.decide(
                block_name=name,
                block_path=_display_path(self.config.block_path(self.root, name), self.root),
                validators=self.validators,
                current_files=files,
                current_content_digest=digest,
                cached_entry=self.store.get_block_entry(name),
                entry_corrupted=name in corrupted,
            )
            logger.debug("%s: %s", name, decision.summary)
            decisions.append(decision)

        skipped = sum(len(decision.skipped) for decision in decisions)
        total = sum(len(decision.validators) for decision in decisions)
        logger.info("Planned %d block(s): %d/%d validator run(s) served from cache", len(decisions), skipped, total)
        return decisions

    def _hash_blocks(self, names: Iterable[str]) -> dict[str, tuple[list[FileDigest], str]]:
        def _hash(name: str) -> tuple[str, list[FileDigest], str]:
            files = hash_block_files(self.config.block_path(self.root, name))
            return name, files, content_digest(files)

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            results = list(executor.map(_hash, names))
        return {name: (files, digest) for name, files, digest in results}

    def record(self, decision: BlockDecision, outcomes: Mapping[str, ValidatorOutcome]) -> BlockCacheEntry | None:
        """Write a block's entry back, combining reused results with fresh outcomes.

        Validators that should have run but report no outcome are left out of
        the entry, so they run again next time. A block whose validators were
        all served from cache keeps its existing entry untouched.
        """
        name = decision.block_name
        self._recorded.add(name)
        if decision.all_skipped and not outcomes and self.store.get_block_entry(name) is not None:
            return self.store.get_block_entry(name)

        results: dict[str, CachedValidatorResult] = {}
        for validator in decision.validators:
            outcome = outcomes.get(validator.validator_id)
            if outcome is not None:
                results[validator.validator_id] = outcome.pin(decision.current_content_digest)
            elif not validator.should_run and validator.cached_result is not None:
                results[validator.validator_id] = validator.cached_result
            elif validator.should_run:
                logger.debug("%s: no outcome for %s; it will run again", name, validator.validator_id)

        block_fingerprint = self.current_fingerprint.per_block.get(name)
        entry = BlockCacheEntry(
            block_name=name,
            block_path=decision.block_path,
            files=decision.current_files,
            content_digest=decision.current_content_digest,
            config_digest=block_fingerprint.definition_digest if block_fingerprint else "",
            last_validated_at=utc_now_iso(),
            last_run_id=self.run_id,
            validator_results=results,
        )
        self.store.put_block_entry(entry)
        return entry

    def _fingerprint_to_store(self) -> ConfigurationFingerprint:
        """Fingerprint that is truthful for every cached entry after this run.

        When only some blocks were recorded, project-wide digests keep their
        previous values so unrecorded blocks still see pending changes; only
        the per-block slices of recorded blocks advance.
        """
        stored = self.store.fingerprint
        all_recorded = set(self.config.blocks) <= self._recorded
        if stored is None or all_recorded:
            return self.current_fingerprint

        per_block = {name: block for name, block in stored.per_block.items() if name in self.config.blocks}
        for name in self._recorded:
            if name in self.current_fingerprint.per_block:
                per_block[name] = self.current_fingerprint.per_block[name]
        merged = replace(stored, per_block=per_block)
        if _same_slices(merged, self.current_fingerprint):
            return self.current_fingerprint
        return merged

    def finish(self) -> bool:
        """Persist the run's state. Returns whether the cache file was written."""
        fingerprint = self._fingerprint_to_store()
        if fingerprint != self.store.fingerprint:
            self.store.update_fingerprint(fingerprint)
        written = self.store.flush()
        if written:
            logger.info("Cache updated at %s", self.store.path)
        return written
