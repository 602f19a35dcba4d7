"""Foundation domain - base config, errors and logging.

This domain contains the building blocks that have no dependencies on other
bindwire modules. Everything else imports from here.
"""

from bindwire.foundation.config import (
    BindwireConfig,
    get_config,
    load_config,
    reset_config,
)
from bindwire.foundation.errors import (
    BindwireError,
    ErrorCode,
    config_error,
    conversion_error,
    invocation_error,
    lookup_error,
    registration_error,
)
from bindwire.foundation.logging import configure_logging

__all__ = [
    # === Config ===
    "BindwireConfig",
    "get_config",
    "load_config",
    "reset_config",
    # === Errors ===
    "BindwireError",
    "ErrorCode",
    "config_error",
    "conversion_error",
    "invocation_error",
    "lookup_error",
    "registration_error",
    # === Logging ===
    "configure_logging",
]
