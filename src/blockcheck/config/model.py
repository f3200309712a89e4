"""Config data model for blocks projects."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from blockcheck.constants.config import DEFAULT_BLOCKS_ROOT, DEFAULT_VALIDATORS
from blockcheck.types.policy import ValidatorCategory


@dataclass(frozen=True)
class ValidatorSpec:
    """One entry of the configured validator pipeline."""

    validator_id: str
    label: str
    category: ValidatorCategory | None = None


@dataclass(frozen=True)
class BlockDefinition:
    """A block as declared under ``blocks`` in ``blocks.yml``.

    ``raw`` keeps the mapping exactly as parsed; fingerprints are computed
    from it rather than from the typed fields.
    """

    name: str
    raw: dict[str, Any]
    description: str = ""
    path: str | None = None

    @property
    def domain_rules(self) -> Any:
        """Block-specific rules, or ``None`` when the block inherits the global ones."""
        return self.raw.get("domain_rules")


@dataclass(frozen=True)
class BlocksConfig:
    """Resolved project config."""

    document: dict[str, Any] = field(default_factory=dict)
    blocks: dict[str, BlockDefinition] = field(default_factory=dict)
    philosophy: Any = None
    domain: Any = None
    ai: Any = None
    validators: Any = None
    global_domain_rules: Any = None
    root: str | None = None
    source_path: Path | None = None

    @property
    def block_names(self) -> tuple[str, ...]:
        return tuple(sorted(self.blocks))

    @property
    def validator_specs(self) -> tuple[ValidatorSpec, ...]:
        """Configured validators, defaulting to the domain validator."""
        entries = self.validators if self.validators is not None else list(DEFAULT_VALIDATORS)
        specs: list[ValidatorSpec] = []
        for entry in entries:
            if isinstance(entry, str):
                specs.append(ValidatorSpec(validator_id=entry, label=entry))
                continue
            validator_id = entry["run"]
            category = entry.get("category")
            specs.append(
                ValidatorSpec(
                    validator_id=validator_id,
                    label=entry.get("name", validator_id),
                    category=ValidatorCategory(category) if category is not None else None,
                )
            )
        return tuple(specs)

    @property
    def validator_ids(self) -> tuple[str, ...]:
        return tuple(spec.validator_id for spec in self.validator_specs)

    @property
    def validator_categories(self) -> dict[str, ValidatorCategory]:
        """Categories declared inline on validator entries."""
        return {spec.validator_id: spec.category for spec in self.validator_specs if spec.category is not None}

    def block_path(self, project_root: Path, block_name: str) -> Path:
        """Resolve a block's directory: explicit ``path`` first, then ``<root>/<name>``."""
        block = self.blocks[block_name]
        if block.path:
            return project_root / block.path
        return project_root / (self.root or DEFAULT_BLOCKS_ROOT) / block_name
