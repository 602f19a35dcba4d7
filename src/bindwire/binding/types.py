"""Binding records held by a BindingRegistry.

Three kinds of binding connect objects without any object referencing
another directly:

- ListenerBinding: an observable slot attached to a channel
- ExecutorBinding: a named operation that recomputes a channel's listeners
- ParameterBinding: a slot feeding one positional input of an executor

Bindings hold their owner by reference and compare by identity, so two
equal-but-distinct owners never share bindings.
"""

import inspect
import typing
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ListenerMode(Enum):
    """How a listener slot takes part in the update pipeline."""

    LISTEN = "listen"
    """Passive: read through get_listener_value(), never recomputed."""

    UPDATE = "update"
    """Reactive: recomputed by its executor whenever the channel is notified."""


class ExecutorMode(Enum):
    """How an executor's inputs are resolved at invocation time."""

    NO_PARAMETER = "no_parameter"
    """The operation takes no inputs."""

    ARGUMENTS = "arguments"
    """Inputs are converted from static string literals."""

    PARAMETERS = "parameters"
    """Inputs are read from parameter-bound slots, ordered by position."""


@dataclass(frozen=True, slots=True)
class SlotAccessor:
    """Reads and writes one named attribute of an owner object."""

    name: str
    value_type: type | None = None
    """Concrete class written values must be instances of (None = anything)."""

    def get(self, owner: object) -> Any:
        """Current slot value, or None when the attribute is absent."""
        return getattr(owner, self.name, None)

    def set(self, owner: object, value: Any, *, validate: bool = True) -> None:
        """Write a value into the slot.

        Raises:
            TypeError: If validation is on and the value is not an instance
                of value_type.
        """
        if (
            validate
            and self.value_type is not None
            and value is not None
            and not isinstance(value, self.value_type)
        ):
            raise TypeError(
                f"slot '{self.name}' expects {self.value_type.__name__}, "
                f"got {type(value).__name__}"
            )
        setattr(owner, self.name, value)


@dataclass(frozen=True, slots=True)
class InputSpec:
    """One declared positional input of an executor operation."""

    name: str
    annotation: Any = None
    """Resolved type hint, or None when the input is unannotated."""


@dataclass(frozen=True, slots=True, eq=False)
class ListenerBinding:
    """An observable slot attached to a channel."""

    owner: object
    slot: SlotAccessor
    channel: str
    mode: ListenerMode = ListenerMode.LISTEN
    executor: str = ""

    def read(self) -> Any:
        return self.slot.get(self.owner)

    def write(self, value: Any) -> None:
        self.slot.set(self.owner, value)


@dataclass(frozen=True, slots=True, eq=False)
class ExecutorBinding:
    """A named operation with a declared input-resolution strategy."""

    owner: object
    operation: str
    """Attribute name of the operation on the owner."""

    name: str
    mode: ExecutorMode = ExecutorMode.NO_PARAMETER
    arguments: tuple[str, ...] = ()

    def bound(self) -> Callable[..., Any]:
        """The operation bound to its owner."""
        return getattr(self.owner, self.operation)

    def inputs(self) -> tuple[InputSpec, ...]:
        """Declared positional inputs of the operation, in order."""
        return declared_inputs(self.bound())


@dataclass(frozen=True, slots=True, eq=False)
class ParameterBinding:
    """A slot feeding one positional input of an executor."""

    owner: object
    slot: SlotAccessor
    executor: str
    position: int = 0

    def read(self) -> Any:
        return self.slot.get(self.owner)


_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


def declared_inputs(fn: Callable[..., Any]) -> tuple[InputSpec, ...]:
    """Positional inputs of a callable with their resolved type hints.

    Bound methods already exclude ``self``. Hints that cannot be resolved
    (forward references to unknown names) fall back to the raw annotation.
    """
    signature = inspect.signature(fn)
    try:
        hints = typing.get_type_hints(fn)
    except (NameError, TypeError):
        hints = {}

    specs = []
    for param in signature.parameters.values():
        if param.kind not in _POSITIONAL:
            continue
        annotation = hints.get(param.name, param.annotation)
        if annotation is inspect.Parameter.empty:
            annotation = None
        specs.append(InputSpec(name=param.name, annotation=annotation))
    return tuple(specs)
