"""Closed enumerations for revalidation decisions."""

from __future__ import annotations

from enum import StrEnum


class ValidatorCategory(StrEnum):
    """Dependency surface of a validator kind."""

    SCHEMA_SHAPE = "schema_shape"
    DOMAIN_SEMANTIC = "domain_semantic"
    ALWAYS_RUN = "always_run"


class ReasonKind(StrEnum):
    """Why a validator was skipped or must run again."""

    CACHED = "cached"
    CACHE_CORRUPTED = "cache_corrupted"
    FORCE_FLAG = "force_flag"
    FIRST_RUN = "first_run"
    FILES_CHANGED = "files_changed"
    PHILOSOPHY_CHANGED = "philosophy_changed"
    DOMAIN_CHANGED = "domain_changed"
    AI_CONFIG_CHANGED = "ai_config_changed"
    VALIDATORS_CHANGED = "validators_changed"
    GLOBAL_RULES_CHANGED = "global_rules_changed"
    BLOCK_RULES_CHANGED = "block_rules_changed"
    BLOCK_DEFINITION_CHANGED = "block_definition_changed"
    ALWAYS_RUN = "always_run"
