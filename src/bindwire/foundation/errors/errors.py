"""Bindwire Error System.

Provides structured error handling with:
- Numeric error codes for programmatic handling
- User-friendly messages
- Context for debugging

Every failure the engine reports is a BindwireError. Errors are raised
synchronously to the caller; the engine never retries or swallows them.
"""


from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Numeric error codes organized by category.

    Format: XYYY where X = category, YYY = specific error

    Categories:
        1xxx - Registration errors
        2xxx - Lookup errors
        3xxx - Configuration errors
        4xxx - Invocation errors
        5xxx - Conversion errors
    """

    # 1xxx - Registration Errors
    REGISTRATION_FAILED = 1001
    PROXY_NULL_VALUE = 1002
    DECLARATION_INVALID = 1003

    # 2xxx - Lookup Errors
    CHANNEL_UNKNOWN = 2001
    EXECUTOR_NOT_FOUND = 2002
    EXECUTOR_NAME_MISSING = 2003

    # 3xxx - Configuration Errors
    EXECUTOR_SIGNATURE_MISMATCH = 3001
    PARAMETER_COUNT_MISMATCH = 3002
    PARAMETER_TYPE_MISMATCH = 3003

    # 4xxx - Invocation Errors
    INVOCATION_FAILED = 4001
    LISTENER_WRITE_FAILED = 4002
    LISTENER_READ_FAILED = 4003

    # 5xxx - Conversion Errors
    CONVERTER_NOT_CONFIGURED = 5001
    ARGUMENT_COUNT_MISMATCH = 5002
    CONVERSION_FAILED = 5003

    @property
    def category(self) -> str:
        """Get the error category name."""
        prefix = self.value // 1000
        return {
            1: "registration",
            2: "lookup",
            3: "configuration",
            4: "invocation",
            5: "conversion",
        }.get(prefix, "unknown")


# Human-readable error messages
ERROR_MESSAGES: dict[ErrorCode, str] = {
    # Registration errors
    ErrorCode.REGISTRATION_FAILED: "Error occurred while registering an object of type '{owner}': {detail}",
    ErrorCode.PROXY_NULL_VALUE: "Cannot create proxy for a null slot '{slot}' in '{owner}' (channel '{channel}').",
    ErrorCode.DECLARATION_INVALID: "Invalid declaration on '{owner}': {detail}",

    # Lookup errors
    ErrorCode.CHANNEL_UNKNOWN: "No listener found for channel '{channel}'.",
    ErrorCode.EXECUTOR_NOT_FOUND: "Executor '{executor}' not found.",
    ErrorCode.EXECUTOR_NAME_MISSING: "Listener on channel '{channel}' is in UPDATE mode but names no executor.",

    # Configuration errors
    ErrorCode.EXECUTOR_SIGNATURE_MISMATCH: "Executor '{executor}' declares inputs but its mode is NO_PARAMETER.",
    ErrorCode.PARAMETER_COUNT_MISMATCH: "Parameter count mismatch for executor '{executor}': {detail}",
    ErrorCode.PARAMETER_TYPE_MISMATCH: "Parameter type mismatch for executor '{executor}': {detail}",

    # Invocation errors
    ErrorCode.INVOCATION_FAILED: "Failed to invoke executor '{executor}': {detail}",
    ErrorCode.LISTENER_WRITE_FAILED: "Failed to update listener slot on channel '{channel}': {detail}",
    ErrorCode.LISTENER_READ_FAILED: "Failed to read listener value on channel '{channel}': {detail}",

    # Conversion errors
    ErrorCode.CONVERTER_NOT_CONFIGURED: "Argument converter has no conversion table. Use ArgumentConverter.with_defaults().",
    ErrorCode.ARGUMENT_COUNT_MISMATCH: "Expected {expected} argument(s) but got {actual}.",
    ErrorCode.CONVERSION_FAILED: "Cannot convert argument {position} ('{value}') to {target}.",
}


class BindwireError(Exception):
    """Base error type for all Bindwire errors.

    Provides structured error information for:
    - Programmatic error handling (code)
    - User-friendly display (message)
    - Debugging (context, cause)

    Example:
        >>> err = BindwireError(
        ...     code=ErrorCode.CHANNEL_UNKNOWN,
        ...     context={"channel": "count"},
        ... )
        >>> print(err)
        [BW-2001] No listener found for channel 'count'.
    """

    def __init__(
        self,
        code: ErrorCode,
        context: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ):
        self.code = code
        self.context = context or {}
        self.cause = cause
        super().__init__(str(self))

    @property
    def message(self) -> str:
        """Get the formatted user-friendly message."""
        template = ERROR_MESSAGES.get(self.code, "An error occurred: {detail}")
        try:
            return template.format(**self.context)
        except KeyError:
            # Fallback if context doesn't have all keys
            return template

    @property
    def category(self) -> str:
        """Get the error category."""
        return self.code.category

    @property
    def error_id(self) -> str:
        """Get the error ID string (e.g., 'BW-2001')."""
        return f"BW-{self.code.value}"

    def __str__(self) -> str:
        return f"[{self.error_id}] {self.message}"

    def __repr__(self) -> str:
        return f"BindwireError(code={self.code!r}, context={self.context!r})"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dict for logging."""
        return {
            "error_id": self.error_id,
            "code": self.code.value,
            "category": self.category,
            "message": self.message,
            "context": self.context,
        }


# Convenience factory functions

def registration_error(
    code: ErrorCode,
    owner: object,
    detail: str = "",
    cause: BaseException | None = None,
    **extra: Any,
) -> BindwireError:
    """Create a registration error naming the offending object's type."""
    return BindwireError(
        code=code,
        context={"owner": _type_name(owner), "detail": detail, **extra},
        cause=cause,
    )


def lookup_error(
    code: ErrorCode,
    channel: str = "",
    executor: str = "",
) -> BindwireError:
    """Create a lookup error for an unknown channel or executor."""
    return BindwireError(
        code=code,
        context={"channel": channel, "executor": executor},
    )


def config_error(
    code: ErrorCode,
    executor: str,
    detail: str = "",
) -> BindwireError:
    """Create a configuration error for a misdeclared executor."""
    return BindwireError(
        code=code,
        context={"executor": executor, "detail": detail},
    )


def invocation_error(
    code: ErrorCode,
    executor: str = "",
    channel: str = "",
    cause: BaseException | None = None,
) -> BindwireError:
    """Create an invocation error wrapping the operation's own failure."""
    detail = f"{type(cause).__name__}: {cause}" if cause is not None else ""
    return BindwireError(
        code=code,
        context={"executor": executor, "channel": channel, "detail": detail},
        cause=cause,
    )


def conversion_error(code: ErrorCode, **context: Any) -> BindwireError:
    """Create a conversion error."""
    return BindwireError(code=code, context=context)


def _type_name(obj: object) -> str:
    cls = obj if isinstance(obj, type) else type(obj)
    return f"{cls.__module__}.{cls.__qualname__}"
