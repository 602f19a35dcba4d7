"""Configuration management for Bindwire."""

from bindwire.foundation.config.loader import (
    MUTATION_POLICIES,
    BindwireConfig,
    get_config,
    load_config,
    reset_config,
)

__all__ = [
    "MUTATION_POLICIES",
    "BindwireConfig",
    "get_config",
    "load_config",
    "reset_config",
]
