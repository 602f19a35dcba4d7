"""Binding declarations and the providers that discover them.

The registry never inspects objects itself. It asks a MetadataProvider for
the declarations of an object and builds bindings from what it gets back.

Two providers ship with bindwire:

- AnnotationMetadataProvider reads ``Annotated`` class hints and
  ``@executor``-decorated methods::

      class Counter:
          count: Annotated[Cell, listener("count", mode=ListenerMode.UPDATE,
                                           executor="recompute")]

          @executor("recompute")
          def recompute(self) -> int:
              ...

- TableMetadataProvider is a static registration table filled through a
  builder, for classes that cannot (or should not) carry annotations::

      provider = TableMetadataProvider()
      (provider.for_type(Counter)
          .listener("count", "count", mode=ListenerMode.UPDATE, executor="recompute")
          .executor("recompute", "recompute"))
"""

import threading
import typing
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import Annotated, Any, Protocol, TypeVar, runtime_checkable

from bindwire.binding.types import ExecutorMode, ListenerMode

F = TypeVar("F", bound=Callable[..., Any])

EXECUTOR_ATTR = "__bindwire_executor__"


# =============================================================================
# Declarations
# =============================================================================


@dataclass(frozen=True, slots=True)
class ListenerDeclaration:
    """A slot that listens on a channel."""

    slot: str
    channel: str
    mode: ListenerMode = ListenerMode.LISTEN
    executor: str = ""
    value_type: type | None = None

    def __post_init__(self) -> None:
        _require_name("slot", self.slot)
        _require_name("channel", self.channel)


@dataclass(frozen=True, slots=True)
class ParameterDeclaration:
    """A slot feeding input ``position`` of an executor."""

    slot: str
    executor: str
    position: int = 0

    def __post_init__(self) -> None:
        _require_name("slot", self.slot)
        _require_name("executor", self.executor)
        _require_position(self.position)


@dataclass(frozen=True, slots=True)
class ExecutorDeclaration:
    """An operation registered under an executor name."""

    operation: str
    executor: str
    mode: ExecutorMode = ExecutorMode.NO_PARAMETER
    arguments: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _require_name("operation", self.operation)
        _require_name("executor", self.executor)


Declaration = ListenerDeclaration | ParameterDeclaration | ExecutorDeclaration


@runtime_checkable
class MetadataProvider(Protocol):
    """Yields the binding declarations of an object."""

    def declarations(self, obj: object) -> Iterable[Declaration]:
        """Declarations for ``obj``, slot declarations first."""
        ...


# =============================================================================
# Annotation markers
# =============================================================================


@dataclass(frozen=True, slots=True)
class ListenerSpec:
    """Marker placed in ``Annotated[...]`` to declare a listener slot."""

    channel: str
    mode: ListenerMode = ListenerMode.LISTEN
    executor: str = ""

    def declare(self, slot: str, value_type: type | None = None) -> ListenerDeclaration:
        return ListenerDeclaration(
            slot=slot,
            channel=self.channel,
            mode=self.mode,
            executor=self.executor,
            value_type=value_type,
        )


@dataclass(frozen=True, slots=True)
class ParameterSpec:
    """Marker placed in ``Annotated[...]`` to declare a parameter slot."""

    executor: str
    position: int = 0

    def declare(self, slot: str) -> ParameterDeclaration:
        return ParameterDeclaration(slot=slot, executor=self.executor, position=self.position)


@dataclass(frozen=True, slots=True)
class ExecutorSpec:
    """Metadata attached to a method by ``@executor``."""

    executor: str
    mode: ExecutorMode = ExecutorMode.NO_PARAMETER
    arguments: tuple[str, ...] = ()


def listener(
    channel: str,
    *,
    mode: ListenerMode = ListenerMode.LISTEN,
    executor: str = "",
) -> ListenerSpec:
    """Declare a listener slot inside ``Annotated[...]``."""
    _require_name("channel", channel)
    return ListenerSpec(channel=channel, mode=mode, executor=executor)


def parameter(executor: str, position: int = 0) -> ParameterSpec:
    """Declare a parameter slot inside ``Annotated[...]``."""
    _require_name("executor", executor)
    _require_position(position)
    return ParameterSpec(executor=executor, position=position)


def executor(
    name: str,
    *,
    mode: ExecutorMode = ExecutorMode.NO_PARAMETER,
    arguments: Iterable[str] = (),
) -> Callable[[F], F]:
    """Decorator to register a method as an executor.

    Example:
        >>> class Adder:
        ...     @executor("answer", mode=ExecutorMode.ARGUMENTS, arguments=["42"])
        ...     def answer(self, value: int) -> int:
        ...         return value
    """
    _require_name("executor", name)
    spec = ExecutorSpec(executor=name, mode=mode, arguments=tuple(arguments))

    def decorator(fn: F) -> F:
        setattr(_unwrap_descriptor(fn), EXECUTOR_ATTR, spec)
        return fn

    return decorator


# =============================================================================
# Providers
# =============================================================================


class AnnotationMetadataProvider:
    """Discovers declarations from class annotations and decorated methods."""

    def declarations(self, obj: object) -> Iterator[Declaration]:
        cls = type(obj)
        yield from self._slot_declarations(cls)
        yield from self._executor_declarations(cls)

    def _slot_declarations(self, cls: type) -> Iterator[Declaration]:
        # Base classes first, matching get_type_hints() ordering
        hints = typing.get_type_hints(cls, include_extras=True)
        for slot, hint in hints.items():
            if typing.get_origin(hint) is not Annotated:
                continue
            base, *markers = typing.get_args(hint)
            for marker in markers:
                if isinstance(marker, ListenerSpec):
                    yield marker.declare(slot, _plain_type(base))
                elif isinstance(marker, ParameterSpec):
                    yield marker.declare(slot)

    def _executor_declarations(self, cls: type) -> Iterator[ExecutorDeclaration]:
        seen: set[str] = set()
        found: list[ExecutorDeclaration] = []
        # Most-derived definition of a name wins, even if it is undecorated
        for klass in cls.__mro__:
            for name, attr in vars(klass).items():
                if name in seen:
                    continue
                seen.add(name)
                spec = getattr(_unwrap_descriptor(attr), EXECUTOR_ATTR, None)
                if isinstance(spec, ExecutorSpec):
                    found.append(
                        ExecutorDeclaration(
                            operation=name,
                            executor=spec.executor,
                            mode=spec.mode,
                            arguments=spec.arguments,
                        )
                    )
        return iter(found)


class TableMetadataProvider:
    """Static registration table of declarations keyed by class.

    Declarations registered for a base class apply to its subclasses.
    Thread-safe: tables may be extended while objects are being registered.
    """

    def __init__(self) -> None:
        self._table: dict[type, tuple[Declaration, ...]] = {}
        self._lock = threading.Lock()

    def for_type(self, cls: type) -> "DeclarationBuilder":
        """Start declaring bindings for ``cls``."""
        return DeclarationBuilder(self, cls)

    def add(self, cls: type, declaration: Declaration) -> None:
        with self._lock:
            self._table[cls] = (*self._table.get(cls, ()), declaration)

    def declarations(self, obj: object) -> Iterator[Declaration]:
        with self._lock:
            table = dict(self._table)
        entries = [
            declaration
            for klass in reversed(type(obj).__mro__)
            for declaration in table.get(klass, ())
        ]
        # Slots before operations, as AnnotationMetadataProvider does
        entries.sort(key=lambda d: isinstance(d, ExecutorDeclaration))
        return iter(entries)


class DeclarationBuilder:
    """Fluent builder adding declarations for one class to a table."""

    def __init__(self, provider: TableMetadataProvider, cls: type) -> None:
        self._provider = provider
        self._cls = cls

    def listener(
        self,
        slot: str,
        channel: str,
        *,
        mode: ListenerMode = ListenerMode.LISTEN,
        executor: str = "",
        value_type: type | None = None,
    ) -> "DeclarationBuilder":
        self._provider.add(
            self._cls,
            ListenerDeclaration(
                slot=slot, channel=channel, mode=mode, executor=executor, value_type=value_type
            ),
        )
        return self

    def parameter(self, slot: str, executor: str, position: int = 0) -> "DeclarationBuilder":
        self._provider.add(
            self._cls, ParameterDeclaration(slot=slot, executor=executor, position=position)
        )
        return self

    def executor(
        self,
        operation: str,
        name: str,
        *,
        mode: ExecutorMode = ExecutorMode.NO_PARAMETER,
        arguments: Iterable[str] = (),
    ) -> "DeclarationBuilder":
        self._provider.add(
            self._cls,
            ExecutorDeclaration(
                operation=operation, executor=name, mode=mode, arguments=tuple(arguments)
            ),
        )
        return self


# =============================================================================
# Helpers
# =============================================================================


def _require_name(kind: str, value: str) -> None:
    if not isinstance(value, str) or not value:
        raise ValueError(f"{kind} name must be a non-empty string, got {value!r}")


def _require_position(position: int) -> None:
    if isinstance(position, bool) or not isinstance(position, int) or position < 0:
        raise ValueError(f"position must be a non-negative integer, got {position!r}")


def _unwrap_descriptor(attr: Any) -> Any:
    """The function behind a staticmethod/classmethod, or attr itself."""
    if isinstance(attr, (staticmethod, classmethod)):
        return attr.__func__
    return attr


def _plain_type(hint: Any) -> type | None:
    """``hint`` if it is a concrete class, else None (generics, Any, unions)."""
    if isinstance(hint, type) and typing.get_origin(hint) is None:
        return hint
    return None
