"""Configuration defaults and filenames."""

from __future__ import annotations

CONFIG_FILENAME: str = "blocks.yml"
DEFAULT_BLOCKS_ROOT: str = "blocks"

# ``blocks.domain_rules`` holds project-wide rules rather than a block definition.
GLOBAL_DOMAIN_RULES_KEY: str = "domain_rules"

DEFAULT_VALIDATORS: tuple[str, ...] = ("domain",)

BLOCK_IO_KEYS: tuple[str, ...] = ("inputs", "outputs")
