"""Logging configuration for Bindwire.

Bindwire is an embeddable library: every module logs through
``logging.getLogger(__name__)`` and never installs handlers on import.
Applications that want to see registration and notification traces call
``configure_logging`` once at startup.

Usage:
    from bindwire.foundation.logging import configure_logging
    configure_logging(debug=True)

Priority for level resolution (highest to lowest):
    1. Explicit `level` parameter (programmatic override)
    2. BINDWIRE_LOG_LEVEL env var (any level: DEBUG, INFO, WARNING, etc.)
    3. BINDWIRE_DEBUG=true env var (simple boolean)
    4. `debug=True` parameter
    5. Config file: debug: true
    6. WARNING (default)
"""

import logging
import os
import sys

# Format includes module path for tracing issues
_DEBUG_FORMAT = "%(asctime)s %(name)s [%(levelname)s] %(threadName)s %(message)s"
_DEFAULT_FORMAT = "%(name)s: %(message)s"

LOGGER_NAME = "bindwire"


def configure_logging(
    *,
    debug: bool = False,
    level: int | str | None = None,
    stream: object = None,
) -> logging.Logger:
    """Configure the ``bindwire`` logger hierarchy.

    Only the package logger is touched; the root logger and any handlers the
    host application installed are left alone.

    Args:
        debug: Enable DEBUG level with detailed format
        level: Override log level (int or string like "DEBUG", "INFO")
        stream: Output stream (default: stderr)

    Returns:
        The configured package logger.
    """
    resolved_level: int
    if level is not None:
        resolved_level = _parse_level(level)
    elif env_level := os.environ.get("BINDWIRE_LOG_LEVEL"):
        resolved_level = _parse_level(env_level)
    elif os.environ.get("BINDWIRE_DEBUG", "").lower() in ("true", "1", "yes"):
        resolved_level = logging.DEBUG
    elif debug:
        resolved_level = logging.DEBUG
    elif _check_config_debug():
        resolved_level = logging.DEBUG
    else:
        resolved_level = logging.WARNING

    fmt = _DEBUG_FORMAT if resolved_level <= logging.DEBUG else _DEFAULT_FORMAT

    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.setLevel(resolved_level)
    package_logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(resolved_level)
    handler.setFormatter(logging.Formatter(fmt))
    package_logger.addHandler(handler)
    package_logger.propagate = False

    package_logger.debug(
        "Logging configured: level=%s, debug=%s",
        logging.getLevelName(resolved_level),
        debug,
    )
    return package_logger


def _check_config_debug() -> bool:
    """Check if debug is enabled in the loaded configuration."""
    from bindwire.foundation.config import get_config

    try:
        return get_config().debug
    except Exception:
        # A broken config file must not prevent logging from coming up
        return False


def _parse_level(level: int | str) -> int:
    """Parse log level from int or string."""
    if isinstance(level, int):
        return level
    numeric = getattr(logging, level.upper(), None)
    if isinstance(numeric, int):
        return numeric
    try:
        return int(level)
    except ValueError:
        return logging.WARNING
