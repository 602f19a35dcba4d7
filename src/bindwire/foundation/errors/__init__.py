"""Error system for Bindwire."""

from bindwire.foundation.errors.errors import (
    ERROR_MESSAGES,
    BindwireError,
    ErrorCode,
    config_error,
    conversion_error,
    invocation_error,
    lookup_error,
    registration_error,
)

__all__ = [
    "ErrorCode",
    "ERROR_MESSAGES",
    "BindwireError",
    "config_error",
    "conversion_error",
    "invocation_error",
    "lookup_error",
    "registration_error",
]
