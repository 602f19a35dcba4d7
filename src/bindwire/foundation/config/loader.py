"""Bindwire configuration management.

Loads configuration from .bindwire/config.yaml with sensible defaults.
All settings can be overridden via environment variables (BINDWIRE_*).

Config locations (in priority order):
1. Explicit path passed to load_config()
2. .bindwire/config.yaml (project-local)
3. ~/.bindwire/config.yaml (user-global)
4. Built-in defaults

Thread Safety:
    Uses threading.Lock for thread-safe lazy initialization in
    free-threaded Python (3.14t).
"""


import logging
import os
import threading
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

_ENV_PREFIX = "BINDWIRE_"

MUTATION_POLICIES = ("marker", "convention")


@dataclass(frozen=True, slots=True)
class BindwireConfig:
    """Root configuration for Bindwire."""

    default_manager: str = "default"
    """Name of the registry returned by get_default_manager()."""

    mutation_policy: str = "marker"
    """How proxies recognise mutating calls: "marker" or "convention"."""

    mutator_prefix: str = "set"
    """Method-name prefix used by the "convention" mutation policy."""

    debug: bool = False
    """Enable DEBUG logging when configure_logging() is called without a level."""

    def __post_init__(self) -> None:
        if not self.default_manager:
            raise ValueError("default_manager must be a non-empty string")
        if self.mutation_policy not in MUTATION_POLICIES:
            raise ValueError(
                f"mutation_policy must be one of {MUTATION_POLICIES}, "
                f"got {self.mutation_policy!r}"
            )
        if not self.mutator_prefix:
            raise ValueError("mutator_prefix must be a non-empty string")


# Global config instance (lazy-loaded, thread-safe)
_config: BindwireConfig | None = None
_config_lock = threading.Lock()


def _apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides.

    Environment variables follow pattern: BINDWIRE_<FIELD>

    Examples:
        BINDWIRE_DEFAULT_MANAGER=app
        BINDWIRE_MUTATION_POLICY=convention
        BINDWIRE_DEBUG=true
    """
    known = {f.name for f in fields(BindwireConfig)}

    for key, value in os.environ.items():
        if not key.startswith(_ENV_PREFIX):
            continue

        name = key[len(_ENV_PREFIX):].lower()
        if name not in known:
            continue

        if name == "debug":
            config_dict[name] = value.lower() in ("true", "1", "yes")
        else:
            config_dict[name] = value

    return config_dict


def _dict_to_config(data: dict[str, Any]) -> BindwireConfig:
    """Convert a dict to BindwireConfig, ignoring unknown keys."""
    known = {f.name for f in fields(BindwireConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))
    return BindwireConfig(**{k: v for k, v in data.items() if k in known})


def load_config(path: str | Path | None = None) -> BindwireConfig:
    """Load configuration from file with defaults and env overrides.

    Priority (highest to lowest):
    1. Environment variables (BINDWIRE_*)
    2. Explicit path if provided
    3. .bindwire/config.yaml (project-local)
    4. ~/.bindwire/config.yaml (user-global)
    5. Built-in defaults

    Args:
        path: Optional explicit config file path.

    Returns:
        Merged BindwireConfig instance.
    """
    global _config

    config_dict: dict[str, Any] = asdict(BindwireConfig())

    config_paths = []
    if path:
        config_paths.append(Path(path))
    config_paths.extend([
        Path(".bindwire/config.yaml"),
        Path.home() / ".bindwire" / "config.yaml",
    ])

    for config_path in config_paths:
        if config_path.exists():
            try:
                with open(config_path) as f:
                    file_config = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                logger.warning("Skipping invalid config file %s: %s", config_path, e)
                continue
            if isinstance(file_config, dict):
                config_dict.update(file_config)
                logger.debug("Loaded config from %s", config_path)
                break  # Use first found config

    config_dict = _apply_env_overrides(config_dict)

    _config = _dict_to_config(config_dict)
    return _config


def get_config() -> BindwireConfig:
    """Get the current configuration, loading if needed.

    Thread-safe with double-check locking for free-threaded Python.
    """
    global _config

    # Fast path: already initialized
    if _config is not None:
        return _config

    with _config_lock:
        if _config is None:
            _config = load_config()
        return _config


def reset_config() -> None:
    """Reset the global config (useful for testing).

    Thread-safe for free-threaded Python.
    """
    global _config
    with _config_lock:
        _config = None
