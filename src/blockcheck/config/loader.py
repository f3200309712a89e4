"""Config loading and normalization for blocks projects."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from blockcheck.config.model import BlockDefinition, BlocksConfig
from blockcheck.constants.config import CONFIG_FILENAME, GLOBAL_DOMAIN_RULES_KEY
from blockcheck.exceptions import ConfigError
from blockcheck.types.policy import ValidatorCategory

_VALID_CATEGORIES: frozenset[str] = frozenset(category.value for category in ValidatorCategory)


def load_config(root: Path, config_path: Path | None = None) -> BlocksConfig:
    """Load project config from ``blocks.yml`` or an explicit path."""
    root = root.resolve()
    path = config_path.resolve() if config_path else (root / CONFIG_FILENAME)
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Config file at {path} is not readable: {exc}") from exc

    return parse_config(text, source_path=path)


def parse_config(text: str, *, source_path: Path | None = None) -> BlocksConfig:
    """Parse config source text into a ``BlocksConfig``."""
    where = f" at {source_path}" if source_path else ""
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML config file{where}: {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file{where} must be a YAML mapping")

    blocks_raw = raw.get("blocks", {})
    if blocks_raw is None:
        blocks_raw = {}
    if not isinstance(blocks_raw, dict):
        raise ConfigError("blocks must be a mapping")

    global_domain_rules = blocks_raw.get(GLOBAL_DOMAIN_RULES_KEY)
    if global_domain_rules is not None and not isinstance(global_domain_rules, list):
        raise ConfigError("blocks.domain_rules must be a list")

    blocks: dict[str, BlockDefinition] = {}
    for name, definition in blocks_raw.items():
        if name == GLOBAL_DOMAIN_RULES_KEY:
            continue
        blocks[str(name)] = _build_block_definition(str(name), definition)

    root_dir = raw.get("root")
    if root_dir is not None and not isinstance(root_dir, str):
        raise ConfigError("root must be a string")

    return BlocksConfig(
        document=raw,
        blocks=blocks,
        philosophy=_ensure_optional_list(raw.get("philosophy"), "philosophy"),
        domain=_ensure_optional_mapping(raw.get("domain"), "domain"),
        ai=_ensure_optional_mapping(raw.get("ai"), "ai"),
        validators=_ensure_validators(raw.get("validators")),
        global_domain_rules=global_domain_rules,
        root=root_dir,
        source_path=source_path,
    )


def _build_block_definition(name: str, definition: Any) -> BlockDefinition:
    if definition is None:
        definition = {}
    if not isinstance(definition, dict):
        raise ConfigError(f"blocks.{name} must be a mapping")

    description = definition.get("description", "")
    if not isinstance(description, str):
        raise ConfigError(f"blocks.{name}.description must be a string")

    path = definition.get("path")
    if path is not None and not isinstance(path, str):
        raise ConfigError(f"blocks.{name}.path must be a string")

    for key in ("inputs", "outputs", "domain_rules"):
        _ensure_optional_list(definition.get(key), f"blocks.{name}.{key}")

    return BlockDefinition(name=name, raw=definition, description=description, path=path)


def _ensure_optional_list(value: Any, key_name: str) -> list[Any] | None:
    """Return the value when it is a list or absent, raising ConfigError otherwise."""
    if value is None:
        return None
    if not isinstance(value, list):
        raise ConfigError(f"{key_name} must be a list")
    return value


def _ensure_optional_mapping(value: Any, key_name: str) -> dict[str, Any] | None:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ConfigError(f"{key_name} must be a mapping")
    return value


def _ensure_validators(value: Any) -> list[Any] | None:
    """Check validator entries are ids or ``{name, run}`` mappings."""
    entries = _ensure_optional_list(value, "validators")
    if entries is None:
        return None

    for index, entry in enumerate(entries):
        if isinstance(entry, str):
            if not entry.strip():
                raise ConfigError(f"validators[{index}] must not be empty")
            continue
        if not isinstance(entry, dict):
            raise ConfigError(f"validators[{index}] must be a string or a mapping")
        run = entry.get("run")
        if not isinstance(run, str) or not run.strip():
            raise ConfigError(f"validators[{index}].run must be a non-empty string")
        name = entry.get("name")
        if name is not None and not isinstance(name, str):
            raise ConfigError(f"validators[{index}].name must be a string")
        category = entry.get("category")
        if category is not None and category not in _VALID_CATEGORIES:
            raise ConfigError(
                f"validators[{index}].category must be one of {sorted(_VALID_CATEGORIES)}, got {category!r}"
            )
    return entries
