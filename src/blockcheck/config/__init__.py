"""Configuration loading and fingerprinting for blocks projects."""

from __future__ import annotations

from blockcheck.config.fingerprint import block_fingerprint, compute_config_fingerprint
from blockcheck.config.loader import load_config, parse_config
from blockcheck.config.model import BlockDefinition, BlocksConfig, ValidatorSpec

__all__ = [
    "BlockDefinition",
    "BlocksConfig",
    "ValidatorSpec",
    "block_fingerprint",
    "compute_config_fingerprint",
    "load_config",
    "parse_config",
]
