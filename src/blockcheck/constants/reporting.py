"""Constants for terminal output."""

from __future__ import annotations

from blockcheck.types.policy import ReasonKind

ANSI_RESET: str = "\033[0m"
ANSI_GREEN: str = "\033[32m"
ANSI_YELLOW: str = "\033[33m"
ANSI_DIM: str = "\033[2m"

CLI_DESCRIPTION: str = "blockcheck: incremental revalidation planner for blocks projects"
PLAN_TITLE: str = "Revalidation plan"

# Reasons that mean "nothing to worry about" are not highlighted.
QUIET_REASONS: frozenset[ReasonKind] = frozenset({ReasonKind.CACHED, ReasonKind.ALWAYS_RUN})

MAX_CHANGED_PATHS_SHOWN: int = 5
