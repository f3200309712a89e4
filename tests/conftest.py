"""Shared pytest fixtures for on-disk blocks projects."""

from __future__ import annotations

from pathlib import Path

import pytest

SAMPLE_CONFIG: str = """\
philosophy:
  - Blocks are small and composable
domain:
  entities:
    user:
      fields: [name, email]
ai:
  provider: openai
  model: gpt-4o-mini
validators:
  - schema
  - domain
blocks:
  domain_rules:
    - id: no-any
      description: Never use the any type
  theme-glass:
    description: Glassmorphism theme for user cards
    inputs:
      - name: user
        type: entity.user
    outputs:
      - name: html
        type: string
  rate-limiter:
    description: Token bucket limiter
    path: services/rate-limiter
    domain_rules:
      - id: bounded
        description: Limits must be positive
"""

SAMPLE_FILES: dict[str, str] = {
    "blocks/theme-glass/index.ts": "export const theme = 'glass';\n",
    "blocks/theme-glass/block.ts": "export default function block() { return '<div/>'; }\n",
    "services/rate-limiter/index.ts": "export const limit = 10;\n",
}


def write_project(root: Path, config_text: str = SAMPLE_CONFIG, files: dict[str, str] | None = None) -> Path:
    """Write a config file plus block sources under ``root``."""
    root.mkdir(parents=True, exist_ok=True)
    (root / "blocks.yml").write_text(config_text, encoding="utf-8")
    for relative, text in (SAMPLE_FILES if files is None else files).items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root


@pytest.fixture()
def sample_config_text() -> str:
    """Return the sample ``blocks.yml`` source."""
    return SAMPLE_CONFIG


@pytest.fixture()
def project_root(tmp_path: Path) -> Path:
    """Return a project with two blocks and the sample config."""
    return write_project(tmp_path / "project")
