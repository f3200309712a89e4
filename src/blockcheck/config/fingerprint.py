"""Config fingerprinting for cache invalidation."""

from __future__ import annotations

import logging

from blockcheck.cache.hasher import hash_config_slice
from blockcheck.config.model import BlockDefinition, BlocksConfig
from blockcheck.constants.cache import UNCOMPUTABLE_DIGEST
from blockcheck.constants.config import BLOCK_IO_KEYS, DEFAULT_VALIDATORS
from blockcheck.exceptions import ConfigMismatchError
from blockcheck.model import BlockFingerprint, ConfigurationFingerprint

logger = logging.getLogger(__name__)


def _slice_digest(value: object, slice_name: str) -> str:
    """Digest one slice, substituting a marker that never compares equal on failure."""
    try:
        return hash_config_slice(value)
    except ConfigMismatchError as exc:
        logger.warning("Cannot fingerprint config slice %s (%s); it will always count as changed", slice_name, exc)
        return UNCOMPUTABLE_DIGEST


def block_fingerprint(block: BlockDefinition) -> BlockFingerprint:
    """Return digests of a block's definition, domain rules and I/O schema."""
    domain_rules = block.domain_rules
    return BlockFingerprint(
        definition_digest=_slice_digest(block.raw, f"blocks.{block.name}"),
        domain_rules_digest=(
            _slice_digest(domain_rules, f"blocks.{block.name}.domain_rules") if domain_rules is not None else None
        ),
        inputs_outputs_digest=_slice_digest(
            {key: block.raw.get(key) for key in BLOCK_IO_KEYS},
            f"blocks.{block.name}.inputs/outputs",
        ),
    )


def compute_config_fingerprint(config: BlocksConfig) -> ConfigurationFingerprint:
    """Return the named digests of every configuration slice.

    ``full_digest`` covers the canonicalized whole document, so formatting
    and key order changes produce an identical fingerprint.
    """
    return ConfigurationFingerprint(
        full_digest=_slice_digest(config.document, "<document>"),
        philosophy_digest=_slice_digest(config.philosophy or [], "philosophy"),
        domain_digest=_slice_digest(config.domain or {}, "domain"),
        ai_config_digest=_slice_digest(config.ai or {}, "ai"),
        validators_digest=_slice_digest(
            config.validators if config.validators is not None else list(DEFAULT_VALIDATORS),
            "validators",
        ),
        global_rules_digest=_slice_digest(config.global_domain_rules or [], "blocks.domain_rules"),
        per_block={name: block_fingerprint(block) for name, block in config.blocks.items()},
    )
