"""Revalidation policy: decide, per block and validator, whether a cached result is reusable.

Decisions follow a fixed precedence so the least-trusting reason always wins:

1. the stored cache (or this block's entry) was unusable -> ``cache_corrupted``
2. the caller forced a run -> ``force_flag``
3. the block has no stored entry -> ``first_run``
4. the block's content digest changed -> ``files_changed``
5. per validator: ``always_run`` validators and validators with an unknown
   dependency surface run; otherwise the first differing configuration
   digest relevant to the validator's category decides the reason
6. the stored result is reused (``cached``) only if it was pinned to the
   current content digest
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from blockcheck.cache.hasher import diff_file_digests
from blockcheck.constants.cache import SENTINEL_DIGESTS, UNREADABLE_DIGEST
from blockcheck.constants.validators import (
    BUILTIN_VALIDATOR_CATEGORIES,
    CATEGORY_CONFIG_REASONS,
    CONFIG_REASON_ORDER,
    REASON_MESSAGES,
    SUMMARY_ALL_CACHED,
    SUMMARY_NO_VALIDATORS,
    VALIDATOR_ALIAS_GROUPS,
)
from blockcheck.model import (
    BlockCacheEntry,
    BlockDecision,
    BlockFingerprint,
    CachedReason,
    CachedValidatorResult,
    ConfigurationFingerprint,
    FileDigest,
    FilesChangedReason,
    Reason,
    ValidatorDecision,
)
from blockcheck.types.policy import ReasonKind, ValidatorCategory

logger = logging.getLogger(__name__)


def _reason(kind: ReasonKind, message: str | None = None) -> Reason:
    return Reason(kind=kind, message=message or REASON_MESSAGES[kind])


def digests_differ(stored: str | None, current: str | None) -> bool:
    """Compare two digests; markers for unreadable or uncomputable input never match."""
    if stored in SENTINEL_DIGESTS or current in SENTINEL_DIGESTS:
        return True
    return stored != current


def alias_ids(validator_id: str) -> tuple[str, ...]:
    """Ids whose cached results may stand in for ``validator_id``, in lookup order."""
    for group in VALIDATOR_ALIAS_GROUPS:
        if validator_id in group:
            return (validator_id, *(alias for alias in group if alias != validator_id))
    return (validator_id,)


def find_cached_result(
    validator_id: str,
    results: Mapping[str, CachedValidatorResult],
) -> CachedValidatorResult | None:
    for candidate in alias_ids(validator_id):
        result = results.get(candidate)
        if result is not None:
            return result
    return None


class RevalidationPolicy:
    """Run-wide decision inputs plus the per-block decision function.

    The policy never mutates its inputs; the same arguments always produce
    the same decisions.
    """

    def __init__(
        self,
        *,
        current_fingerprint: ConfigurationFingerprint,
        stored_fingerprint: ConfigurationFingerprint | None,
        force: bool = False,
        cache_corrupted: bool = False,
        validator_categories: Mapping[str, ValidatorCategory] | None = None,
    ) -> None:
        self._current = current_fingerprint
        self._stored = stored_fingerprint
        self._force = force
        self._cache_corrupted = cache_corrupted
        self._categories: dict[str, ValidatorCategory] = dict(BUILTIN_VALIDATOR_CATEGORIES)
        if validator_categories:
            self._categories.update(validator_categories)
        self._warned_unmapped: set[str] = set()

    def category_for(self, validator_id: str) -> ValidatorCategory | None:
        return self._categories.get(validator_id)

    def global_changes(self) -> tuple[ReasonKind, ...]:
        """Project-wide configuration reasons, in precedence order."""
        if self._stored is None:
            return ()
        stored, current = self._stored, self._current
        if not digests_differ(stored.full_digest, current.full_digest):
            return ()
        checks = (
            (ReasonKind.PHILOSOPHY_CHANGED, stored.philosophy_digest, current.philosophy_digest),
            (ReasonKind.DOMAIN_CHANGED, stored.domain_digest, current.domain_digest),
            (ReasonKind.AI_CONFIG_CHANGED, stored.ai_config_digest, current.ai_config_digest),
            (ReasonKind.VALIDATORS_CHANGED, stored.validators_digest, current.validators_digest),
            (ReasonKind.GLOBAL_RULES_CHANGED, stored.global_rules_digest, current.global_rules_digest),
        )
        return tuple(kind for kind, old, new in checks if digests_differ(old, new))

    def config_changes(self, block_name: str) -> frozenset[ReasonKind]:
        """Every configuration reason that applies to one block."""
        if self._stored is None:
            return frozenset(CONFIG_REASON_ORDER)
        if not digests_differ(self._stored.full_digest, self._current.full_digest) and (
            block_name in self._stored.per_block
        ):
            return frozenset()

        changes = set(self.global_changes())
        stored_block = self._stored.per_block.get(block_name)
        current_block = self._current.per_block.get(block_name)

        if current_block is not None and current_block.domain_rules_digest is not None:
            # Blocks with their own rules do not read the global ones.
            changes.discard(ReasonKind.GLOBAL_RULES_CHANGED)
        changes.update(_block_changes(stored_block, current_block))
        return frozenset(changes)

    def decide(
        self,
        *,
        block_name: str,
        block_path: str,
        validators: Sequence[str],
        current_files: Sequence[FileDigest],
        current_content_digest: str,
        cached_entry: BlockCacheEntry | None,
        entry_corrupted: bool = False,
    ) -> BlockDecision:
        """Produce one decision per validator for a block."""
        block_reason: Reason | None = None
        if self._cache_corrupted or entry_corrupted:
            block_reason = _reason(ReasonKind.CACHE_CORRUPTED)
        elif self._force:
            block_reason = _reason(ReasonKind.FORCE_FLAG)
        elif cached_entry is None:
            block_reason = _reason(ReasonKind.FIRST_RUN, f'Block "{block_name}" not in cache')
        else:
            block_reason = self._content_change(cached_entry, current_files, current_content_digest)

        if block_reason is not None:
            decisions = tuple(
                ValidatorDecision(validator_id=validator_id, should_run=True, reason=block_reason)
                for validator_id in validators
            )
        else:
            assert cached_entry is not None
            changes = self.config_changes(block_name)
            decisions = tuple(
                self._decide_validator(validator_id, cached_entry, current_content_digest, changes)
                for validator_id in validators
            )

        return BlockDecision(
            block_name=block_name,
            block_path=block_path,
            validators=decisions,
            all_skipped=all(not decision.should_run for decision in decisions),
            summary=_summarize(decisions),
            current_files=tuple(current_files),
            current_content_digest=current_content_digest,
        )

    def _content_change(
        self,
        cached_entry: BlockCacheEntry,
        current_files: Sequence[FileDigest],
        current_content_digest: str,
    ) -> Reason | None:
        unreadable = any(file.digest == UNREADABLE_DIGEST for file in current_files)
        if not unreadable and cached_entry.content_digest == current_content_digest:
            return None

        changed = diff_file_digests(cached_entry.files, current_files).changed_paths
        return FilesChangedReason(
            kind=ReasonKind.FILES_CHANGED,
            message=f"{len(changed)} file(s) changed",
            changed_paths=changed,
        )

    def _decide_validator(
        self,
        validator_id: str,
        cached_entry: BlockCacheEntry,
        current_content_digest: str,
        changes: frozenset[ReasonKind],
    ) -> ValidatorDecision:
        category = self.category_for(validator_id)
        if category is None:
            if validator_id not in self._warned_unmapped:
                self._warned_unmapped.add(validator_id)
                logger.warning("Validator %r has no dependency mapping; it will always run", validator_id)
            return ValidatorDecision(
                validator_id=validator_id,
                should_run=True,
                reason=_reason(ReasonKind.ALWAYS_RUN, "Unknown validator dependencies"),
            )
        if category is ValidatorCategory.ALWAYS_RUN:
            return ValidatorDecision(validator_id=validator_id, should_run=True, reason=_reason(ReasonKind.ALWAYS_RUN))

        relevant = CATEGORY_CONFIG_REASONS[category]
        for kind in CONFIG_REASON_ORDER:
            if kind in relevant and kind in changes:
                return ValidatorDecision(validator_id=validator_id, should_run=True, reason=_reason(kind))

        cached_result = find_cached_result(validator_id, cached_entry.validator_results)
        if cached_result is None:
            return ValidatorDecision(
                validator_id=validator_id,
                should_run=True,
                reason=_reason(ReasonKind.FIRST_RUN, "No cached result for validator"),
            )
        if cached_result.digest_at_run != current_content_digest:
            return ValidatorDecision(
                validator_id=validator_id,
                should_run=True,
                reason=FilesChangedReason(
                    kind=ReasonKind.FILES_CHANGED,
                    message="Cached result was produced from different content",
                    changed_paths=(),
                ),
            )

        return ValidatorDecision(
            validator_id=validator_id,
            should_run=False,
            reason=CachedReason(
                kind=ReasonKind.CACHED,
                message=f"No changes since {cached_entry.last_validated_at}",
                last_validated_at=cached_entry.last_validated_at,
            ),
            cached_result=cached_result,
        )


def _block_changes(stored: BlockFingerprint | None, current: BlockFingerprint | None) -> set[ReasonKind]:
    if stored is None or current is None:
        return {ReasonKind.BLOCK_RULES_CHANGED, ReasonKind.BLOCK_DEFINITION_CHANGED}

    changes: set[ReasonKind] = set()
    if (stored.domain_rules_digest is None) != (current.domain_rules_digest is None) or (
        current.domain_rules_digest is not None
        and digests_differ(stored.domain_rules_digest, current.domain_rules_digest)
    ):
        changes.add(ReasonKind.BLOCK_RULES_CHANGED)
    if digests_differ(stored.definition_digest, current.definition_digest) or digests_differ(
        stored.inputs_outputs_digest, current.inputs_outputs_digest
    ):
        changes.add(ReasonKind.BLOCK_DEFINITION_CHANGED)
    return changes


def _summarize(decisions: Sequence[ValidatorDecision]) -> str:
    if not decisions:
        return SUMMARY_NO_VALIDATORS
    skipped = sum(1 for decision in decisions if not decision.should_run)
    if skipped == len(decisions):
        return SUMMARY_ALL_CACHED
    if skipped:
        return f"{skipped}/{len(decisions)} cached"
    return decisions[0].reason.message
