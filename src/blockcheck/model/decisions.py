"""Per-validator and per-block revalidation decisions."""

from __future__ import annotations

from dataclasses import dataclass

from blockcheck.model.entities import CachedIssue, CachedValidatorResult, FileDigest
from blockcheck.types.common import JsonObject
from blockcheck.types.policy import ReasonKind


@dataclass(frozen=True)
class Reason:
    """Why a validator runs or is skipped."""

    kind: ReasonKind
    message: str

    def to_dict(self) -> JsonObject:
        return {"type": self.kind.value, "message": self.message}


@dataclass(frozen=True)
class FilesChangedReason(Reason):
    """Content changed; carries the relative paths that differ."""

    changed_paths: tuple[str, ...]

    def to_dict(self) -> JsonObject:
        payload = super().to_dict()
        payload["changedFiles"] = list(self.changed_paths)
        return payload


@dataclass(frozen=True)
class CachedReason(Reason):
    """Validator skipped; carries when the reused result was produced."""

    last_validated_at: str

    def to_dict(self) -> JsonObject:
        payload = super().to_dict()
        payload["lastValidated"] = self.last_validated_at
        return payload


@dataclass(frozen=True)
class ValidatorDecision:
    """Run/skip verdict for one validator against one block."""

    validator_id: str
    should_run: bool
    reason: Reason
    cached_result: CachedValidatorResult | None = None

    def to_dict(self) -> JsonObject:
        payload: JsonObject = {
            "validatorId": self.validator_id,
            "shouldRun": self.should_run,
            "reason": self.reason.to_dict(),
        }
        if self.cached_result is not None:
            payload["cachedResult"] = dict(self.cached_result.to_dict())
        return payload


@dataclass(frozen=True)
class BlockDecision:
    """All validator verdicts for one block, plus the content state they were made against."""

    block_name: str
    block_path: str
    validators: tuple[ValidatorDecision, ...]
    all_skipped: bool
    summary: str
    current_files: tuple[FileDigest, ...]
    current_content_digest: str

    @property
    def to_run(self) -> tuple[str, ...]:
        """Validator ids that must be invoked."""
        return tuple(decision.validator_id for decision in self.validators if decision.should_run)

    @property
    def skipped(self) -> tuple[ValidatorDecision, ...]:
        return tuple(decision for decision in self.validators if not decision.should_run)

    def decision_for(self, validator_id: str) -> ValidatorDecision | None:
        for decision in self.validators:
            if decision.validator_id == validator_id:
                return decision
        return None

    def to_dict(self) -> JsonObject:
        return {
            "blockName": self.block_name,
            "blockPath": self.block_path,
            "allSkipped": self.all_skipped,
            "summary": self.summary,
            "contentHash": self.current_content_digest,
            "validators": [decision.to_dict() for decision in self.validators],
        }


@dataclass(frozen=True)
class ValidatorOutcome:
    """Fresh result of a validator run, as reported back by the orchestrator."""

    passed: bool
    issues: tuple[CachedIssue, ...] = ()
    rules_applied: tuple[str, ...] = ()

    def pin(self, content_digest: str) -> CachedValidatorResult:
        """Turn the outcome into a cacheable result tied to the content it ran against."""
        return CachedValidatorResult(
            passed=self.passed,
            digest_at_run=content_digest,
            rules_applied=self.rules_applied,
            issues=self.issues,
        )
