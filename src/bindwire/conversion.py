"""String-to-value conversion for ARGUMENTS-mode executors.

A ConversionRegistry maps a target type to an ordered list of candidate
``str -> value`` callables. The ArgumentConverter tries the candidates for
each target in registration order and keeps the first result that is an
instance of the target. Union targets (``int | None``) try each non-None
member in declaration order.
"""

import inspect
import logging
import threading
import types
import typing
from collections.abc import Callable, Sequence
from decimal import Decimal
from typing import Any

from bindwire.foundation.errors import ErrorCode, conversion_error

logger = logging.getLogger(__name__)

Converter = Callable[[str], Any]

_TRUE_LITERALS = frozenset({"true", "1", "yes"})


def parse_bool(text: str) -> bool:
    """Parse a boolean literal; anything outside true/1/yes is False."""
    return text.strip().lower() in _TRUE_LITERALS


class ConversionRegistry:
    """Type-keyed registry of string conversion candidates.

    Thread-safe. Candidate lists are replaced, never mutated, so a snapshot
    returned by candidates() stays valid while registrations continue.
    """

    def __init__(self, *, defaults: bool = True) -> None:
        self._converters: dict[type, tuple[Converter, ...]] = {}
        self._lock = threading.Lock()
        if defaults:
            for target, fn in (
                (int, int),
                (float, float),
                (complex, complex),
                (bool, parse_bool),
                (Decimal, Decimal),
            ):
                self._add(target, fn)

    def register(self, target: type, fn: Converter) -> None:
        """Register a conversion candidate for ``target``.

        The candidate must accept exactly one positional input (annotated
        ``str`` if annotated at all) and, if its return is annotated, return
        exactly ``target``. Registering for ``str`` is a no-op: strings are
        always passed through unchanged.

        Raises:
            ValueError: If the candidate's signature does not qualify.
        """
        _validate_converter(target, fn)
        if target is str:
            return
        self._add(target, fn)
        logger.debug("Registered converter %s for %s", _name(fn), target.__name__)

    def candidates(self, target: type) -> tuple[Converter, ...]:
        """Snapshot of the candidates for ``target`` in registration order."""
        with self._lock:
            return self._converters.get(target, ())

    def targets(self) -> list[type]:
        with self._lock:
            return list(self._converters)

    def _add(self, target: type, fn: Converter) -> None:
        with self._lock:
            self._converters[target] = (*self._converters.get(target, ()), fn)


class ArgumentConverter:
    """Converts string literals to typed values using a ConversionRegistry."""

    def __init__(self, registry: ConversionRegistry | None = None) -> None:
        self.registry = registry

    @classmethod
    def with_defaults(cls) -> "ArgumentConverter":
        """Converter backed by a registry with the default conversions."""
        return cls(ConversionRegistry())

    def convert(self, args: Sequence[str], types: Sequence[Any]) -> list[Any]:
        """Convert ``args`` positionally to ``types``.

        A position whose candidates all fail is left as None; callers must
        treat that as a conversion failure.

        Raises:
            BindwireError: CONVERTER_NOT_CONFIGURED if no registry is set,
                ARGUMENT_COUNT_MISMATCH if the lengths differ.
        """
        if self.registry is None:
            raise conversion_error(ErrorCode.CONVERTER_NOT_CONFIGURED)
        if len(args) != len(types):
            raise conversion_error(
                ErrorCode.ARGUMENT_COUNT_MISMATCH, expected=len(types), actual=len(args)
            )

        return [self._convert_one(arg, target) for arg, target in zip(args, types)]

    def _convert_one(self, arg: str, target: Any) -> Any:
        if target is str:
            return arg
        if typing.get_origin(target) in (typing.Union, types.UnionType):
            # First member that converts wins; None is never produced
            for member in typing.get_args(target):
                if member is type(None):
                    continue
                value = self._convert_one(arg, member)
                if value is not None:
                    return value
            return None
        if not isinstance(target, type):
            # Unannotated or generic inputs have no registry entry
            return None
        for candidate in self.registry.candidates(target):
            try:
                value = candidate(arg)
            except (ValueError, TypeError, ArithmeticError) as e:
                logger.debug("Converter %s rejected %r: %s", _name(candidate), arg, e)
                continue
            if isinstance(value, target):
                return value
        return None


def _validate_converter(target: type, fn: Converter) -> None:
    if not isinstance(target, type):
        raise ValueError(f"conversion target must be a class, got {target!r}")
    if not callable(fn):
        raise ValueError(f"converter for {target.__name__} must be callable")
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError) as e:
        raise ValueError(f"cannot inspect converter {_name(fn)}: {e}") from e

    params = list(signature.parameters.values())
    if len(params) != 1 or params[0].kind not in (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    ):
        raise ValueError(
            "Invalid converter, a valid converter takes exactly one string parameter"
        )
    annotation = params[0].annotation
    if annotation not in (inspect.Parameter.empty, str, "str"):
        raise ValueError(
            f"Invalid converter, parameter must be a string, not {annotation!r}"
        )
    returns = signature.return_annotation
    if returns is not inspect.Signature.empty and returns not in (target, target.__name__):
        raise ValueError(
            f"Invalid converter, must return {target.__name__}, not {returns!r}"
        )


def _name(fn: Any) -> str:
    return getattr(fn, "__qualname__", None) or repr(fn)
