"""Validator dependency categories, aliases and reason messages."""

from __future__ import annotations

from blockcheck.types.policy import ReasonKind, ValidatorCategory

BUILTIN_VALIDATOR_CATEGORIES: dict[str, ValidatorCategory] = {
    "schema": ValidatorCategory.SCHEMA_SHAPE,
    "schema.io": ValidatorCategory.SCHEMA_SHAPE,
    "shape": ValidatorCategory.SCHEMA_SHAPE,
    "shape.ts": ValidatorCategory.SCHEMA_SHAPE,
    "shape.exports.ts": ValidatorCategory.SCHEMA_SHAPE,
    "domain": ValidatorCategory.DOMAIN_SEMANTIC,
    "domain.validation": ValidatorCategory.DOMAIN_SEMANTIC,
    "output": ValidatorCategory.DOMAIN_SEMANTIC,
    "output.runtime": ValidatorCategory.DOMAIN_SEMANTIC,
    "visual.screenshot": ValidatorCategory.ALWAYS_RUN,
    "visual.axe": ValidatorCategory.ALWAYS_RUN,
    "visual.vision": ValidatorCategory.ALWAYS_RUN,
}

# Short names and technical ids that share one cached result.
VALIDATOR_ALIAS_GROUPS: tuple[tuple[str, ...], ...] = (
    ("schema", "schema.io"),
    ("shape", "shape.ts", "shape.exports.ts"),
    ("domain", "domain.validation"),
    ("output", "output.runtime"),
)

# Order in which configuration-level reasons are checked; first difference wins.
CONFIG_REASON_ORDER: tuple[ReasonKind, ...] = (
    ReasonKind.PHILOSOPHY_CHANGED,
    ReasonKind.DOMAIN_CHANGED,
    ReasonKind.AI_CONFIG_CHANGED,
    ReasonKind.VALIDATORS_CHANGED,
    ReasonKind.GLOBAL_RULES_CHANGED,
    ReasonKind.BLOCK_RULES_CHANGED,
    ReasonKind.BLOCK_DEFINITION_CHANGED,
)

CATEGORY_CONFIG_REASONS: dict[ValidatorCategory, frozenset[ReasonKind]] = {
    ValidatorCategory.SCHEMA_SHAPE: frozenset({ReasonKind.BLOCK_DEFINITION_CHANGED}),
    ValidatorCategory.DOMAIN_SEMANTIC: frozenset(
        {
            ReasonKind.PHILOSOPHY_CHANGED,
            ReasonKind.DOMAIN_CHANGED,
            ReasonKind.AI_CONFIG_CHANGED,
            ReasonKind.VALIDATORS_CHANGED,
            ReasonKind.GLOBAL_RULES_CHANGED,
            ReasonKind.BLOCK_RULES_CHANGED,
            ReasonKind.BLOCK_DEFINITION_CHANGED,
        }
    ),
    ValidatorCategory.ALWAYS_RUN: frozenset(),
}

REASON_MESSAGES: dict[ReasonKind, str] = {
    ReasonKind.CACHED: "No changes since last validation",
    ReasonKind.CACHE_CORRUPTED: "Cache missing or unreadable, running full validation",
    ReasonKind.FORCE_FLAG: "--force flag specified",
    ReasonKind.FIRST_RUN: "Block not in cache",
    ReasonKind.FILES_CHANGED: "Block files changed",
    ReasonKind.PHILOSOPHY_CHANGED: "Project philosophy changed",
    ReasonKind.DOMAIN_CHANGED: "Domain entities/signals/measures changed",
    ReasonKind.AI_CONFIG_CHANGED: "AI provider or model changed",
    ReasonKind.VALIDATORS_CHANGED: "Validator pipeline changed",
    ReasonKind.GLOBAL_RULES_CHANGED: "Global domain_rules changed",
    ReasonKind.BLOCK_RULES_CHANGED: "Block domain_rules changed",
    ReasonKind.BLOCK_DEFINITION_CHANGED: "Block definition changed in blocks.yml",
    ReasonKind.ALWAYS_RUN: "Validator always runs",
}

SUMMARY_ALL_CACHED: str = "All validators cached"
SUMMARY_NO_VALIDATORS: str = "No validators configured"
