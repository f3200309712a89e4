"""Plain-text stdout reporter for revalidation plans."""

from __future__ import annotations

from collections.abc import Sequence

from blockcheck.constants.reporting import (
    ANSI_DIM,
    ANSI_GREEN,
    ANSI_RESET,
    ANSI_YELLOW,
    MAX_CHANGED_PATHS_SHOWN,
    PLAN_TITLE,
    QUIET_REASONS,
)
from blockcheck.model import BlockDecision, FilesChangedReason, ValidatorDecision


def _colorize(text: str, color: str) -> str:
    return f"{color}{text}{ANSI_RESET}"


class PlanReporter:
    """Formats block decisions as human-readable stdout output."""

    def __init__(
        self,
        decisions: Sequence[BlockDecision],
        *,
        color: bool = True,
        verbose: bool = False,
    ) -> None:
        self._decisions = decisions
        self._color = color
        self._verbose = verbose

    def render(self) -> str:
        lines = [f"  {PLAN_TITLE}", "  " + "─" * 38]
        for decision in self._decisions:
            lines.append(self._render_block(decision))
            if self._verbose:
                lines.extend(self._render_validator(validator) for validator in decision.validators)
        lines.append("")
        lines.append(f"  {self._render_totals()}")
        return "\n".join(lines)

    def _render_block(self, decision: BlockDecision) -> str:
        marker = "=" if decision.all_skipped else "~"
        text = f"  {marker} {decision.block_name}: {decision.summary}"
        if not self._color:
            return text
        return _colorize(text, ANSI_GREEN if decision.all_skipped else ANSI_YELLOW)

    def _render_validator(self, validator: ValidatorDecision) -> str:
        action = "run " if validator.should_run else "skip"
        text = f"      {action} {validator.validator_id} [{validator.reason.kind.value}] {validator.reason.message}"
        reason = validator.reason
        if isinstance(reason, FilesChangedReason) and reason.changed_paths:
            shown = list(reason.changed_paths[:MAX_CHANGED_PATHS_SHOWN])
            hidden = len(reason.changed_paths) - len(shown)
            suffix = f" (+{hidden} more)" if hidden > 0 else ""
            text = f"{text}: {', '.join(shown)}{suffix}"
        if self._color and reason.kind in QUIET_REASONS:
            return _colorize(text, ANSI_DIM)
        return text

    def _render_totals(self) -> str:
        total = sum(len(decision.validators) for decision in self._decisions)
        skipped = sum(len(decision.skipped) for decision in self._decisions)
        return f"Blocks {len(self._decisions)} / validators to run {total - skipped} / cached {skipped}"
