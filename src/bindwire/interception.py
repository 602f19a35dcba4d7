"""Mutation interception for listener slots.

When a listener binding is registered, the value in its slot is replaced by
an ObservedProxy. The proxy forwards everything to the original value and,
after a call it classifies as mutating, notifies the listener's channel on
the owning registry before returning to the caller.

Mutating calls are recognised by an explicit ``@mutator`` marker. The older
naming convention (``setX(value) -> None``) is available as an opt-in
policy for values whose classes cannot be marked.
"""

import functools
import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from bindwire.binding.types import SlotAccessor
from bindwire.foundation.errors import ErrorCode, registration_error

logger = logging.getLogger(__name__)

T = TypeVar("T")
F = TypeVar("F", bound=Callable[..., Any])

MUTATOR_ATTR = "__bindwire_mutator__"

Notify = Callable[[str], None]


def mutator(fn: F) -> F:
    """Mark a method as mutating its instance.

    Calls to a marked method through an ObservedProxy notify the proxy's
    channel once the method returns.
    """
    setattr(fn, MUTATOR_ATTR, True)
    return fn


def is_marked_mutator(fn: Any) -> bool:
    # Bound methods expose the function's attributes
    return getattr(fn, MUTATOR_ATTR, False) is True


class MutationPolicy(Enum):
    """How proxies decide that a forwarded call mutates the value."""

    MARKER = "marker"
    """Only methods decorated with @mutator."""

    CONVENTION = "convention"
    """@mutator methods, plus prefix-named single-input methods returning None."""


@dataclass(frozen=True, slots=True)
class MutationClassifier:
    """Applies a MutationPolicy to callables reached through a proxy."""

    policy: MutationPolicy = MutationPolicy.MARKER
    prefix: str = "set"

    def is_mutating(self, fn: Any, name: str) -> bool:
        if is_marked_mutator(fn):
            return True
        if self.policy is MutationPolicy.CONVENTION:
            return self._follows_convention(fn, name)
        return False

    def _follows_convention(self, fn: Any, name: str) -> bool:
        if not name.startswith(self.prefix) or len(name) <= len(self.prefix):
            return False
        try:
            signature = inspect.signature(fn)
        except (TypeError, ValueError):
            # Builtins without signatures cannot be classified
            return False
        params = [
            p
            for p in signature.parameters.values()
            if p.kind
            in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
        ]
        if len(params) != 1 or len(params) != len(signature.parameters):
            return False
        return signature.return_annotation in (None, type(None), "None")


class ObservedProxy:
    """Transparent stand-in for a listener slot's value.

    Attribute reads, attribute writes, calls, comparisons, container access
    and arithmetic are forwarded to the wrapped value. ``isinstance`` checks
    see the original's class. The wrapped value is ``__wrapped__``; it is
    itself a proxy when the slot is observed by more than one registry, and
    unwrap() reaches the original.
    """

    __slots__ = ("__wrapped__", "_bw_channel", "_bw_notify", "_bw_classifier")

    def __init__(
        self,
        original: Any,
        channel: str,
        notify: Notify,
        classifier: MutationClassifier,
    ) -> None:
        object.__setattr__(self, "__wrapped__", original)
        object.__setattr__(self, "_bw_channel", channel)
        object.__setattr__(self, "_bw_notify", notify)
        object.__setattr__(self, "_bw_classifier", classifier)

    @property
    def __class__(self) -> type:  # type: ignore[override]
        return type(unwrap(object.__getattribute__(self, "__wrapped__")))

    def __getattr__(self, name: str) -> Any:
        original = object.__getattribute__(self, "__wrapped__")
        attr = getattr(original, name)
        classifier: MutationClassifier = object.__getattribute__(self, "_bw_classifier")
        if callable(attr) and classifier.is_mutating(attr, name):
            return self._bw_intercept(attr)
        return attr

    def _bw_intercept(self, fn: Callable[..., Any]) -> Callable[..., Any]:
        channel = object.__getattribute__(self, "_bw_channel")
        notify = object.__getattribute__(self, "_bw_notify")

        @functools.wraps(fn)
        def intercepted(*args: Any, **kwargs: Any) -> Any:
            result = fn(*args, **kwargs)
            if args or kwargs:
                logger.debug("Mutation via %s on channel '%s'", fn.__name__, channel)
                notify(channel)
            return result

        return intercepted

    def __setattr__(self, name: str, value: Any) -> None:
        setattr(object.__getattribute__(self, "__wrapped__"), name, value)

    def __delattr__(self, name: str) -> None:
        delattr(object.__getattribute__(self, "__wrapped__"), name)

    def __dir__(self) -> list[str]:
        return dir(object.__getattribute__(self, "__wrapped__"))

    def __repr__(self) -> str:
        return repr(object.__getattribute__(self, "__wrapped__"))

    def __str__(self) -> str:
        return str(object.__getattribute__(self, "__wrapped__"))

    def __format__(self, spec: str) -> str:
        return format(object.__getattribute__(self, "__wrapped__"), spec)

    def __bool__(self) -> bool:
        return bool(object.__getattribute__(self, "__wrapped__"))

    def __hash__(self) -> int:
        return hash(object.__getattribute__(self, "__wrapped__"))

    def __eq__(self, other: object) -> bool:
        return object.__getattribute__(self, "__wrapped__") == unwrap(other)

    def __ne__(self, other: object) -> bool:
        return object.__getattribute__(self, "__wrapped__") != unwrap(other)

    def __lt__(self, other: Any) -> bool:
        return object.__getattribute__(self, "__wrapped__") < unwrap(other)

    def __le__(self, other: Any) -> bool:
        return object.__getattribute__(self, "__wrapped__") <= unwrap(other)

    def __gt__(self, other: Any) -> bool:
        return object.__getattribute__(self, "__wrapped__") > unwrap(other)

    def __ge__(self, other: Any) -> bool:
        return object.__getattribute__(self, "__wrapped__") >= unwrap(other)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return object.__getattribute__(self, "__wrapped__")(*args, **kwargs)

    def __len__(self) -> int:
        return len(object.__getattribute__(self, "__wrapped__"))

    def __iter__(self) -> Any:
        return iter(object.__getattribute__(self, "__wrapped__"))

    def __reversed__(self) -> Any:
        return reversed(object.__getattribute__(self, "__wrapped__"))

    def __contains__(self, item: Any) -> bool:
        return item in object.__getattribute__(self, "__wrapped__")

    def __getitem__(self, key: Any) -> Any:
        return object.__getattribute__(self, "__wrapped__")[key]

    def __setitem__(self, key: Any, value: Any) -> None:
        object.__getattribute__(self, "__wrapped__")[key] = value

    def __delitem__(self, key: Any) -> None:
        del object.__getattribute__(self, "__wrapped__")[key]

    def __int__(self) -> int:
        return int(object.__getattribute__(self, "__wrapped__"))

    def __float__(self) -> float:
        return float(object.__getattribute__(self, "__wrapped__"))

    def __index__(self) -> int:
        return object.__getattribute__(self, "__wrapped__").__index__()


def _binary(name: str) -> Callable[..., Any]:
    def method(self: ObservedProxy, other: Any) -> Any:
        original = object.__getattribute__(self, "__wrapped__")
        fn = getattr(type(original), name, None)
        if fn is None:
            return NotImplemented
        return fn(original, unwrap(other))

    method.__name__ = name
    return method


def _unary(name: str) -> Callable[..., Any]:
    def method(self: ObservedProxy) -> Any:
        original = object.__getattribute__(self, "__wrapped__")
        return getattr(type(original), name)(original)

    method.__name__ = name
    return method


for _op in ("add", "sub", "mul", "truediv", "floordiv", "mod", "pow", "and", "or", "xor",
            "lshift", "rshift", "matmul"):
    setattr(ObservedProxy, f"__{_op}__", _binary(f"__{_op}__"))
    setattr(ObservedProxy, f"__r{_op}__", _binary(f"__r{_op}__"))
for _op in ("neg", "pos", "abs", "invert"):
    setattr(ObservedProxy, f"__{_op}__", _unary(f"__{_op}__"))
del _op


def is_proxy(value: Any) -> bool:
    return type(value) is ObservedProxy


def unwrap(value: Any) -> Any:
    """The original behind an ObservedProxy, or ``value`` itself."""
    while type(value) is ObservedProxy:
        value = object.__getattribute__(value, "__wrapped__")
    return value


class Cell(Generic[T]):
    """A mutable box whose ``set`` is an explicit mutator.

    The recommended value type for listener slots: reading is ``get()``,
    writing through ``set()`` always notifies when the cell is proxied.
    """

    __slots__ = ("_value",)

    def __init__(self, value: T) -> None:
        self._value = value

    def get(self) -> T:
        return self._value

    @mutator
    def set(self, value: T) -> None:
        self._value = value

    def __repr__(self) -> str:
        return f"Cell({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Cell):
            return self._value == other._value
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]


class ProxyFactory:
    """Installs ObservedProxy instances into listener slots."""

    def __init__(self, notify: Notify, classifier: MutationClassifier | None = None) -> None:
        self._notify = notify
        self._classifier = classifier or MutationClassifier()

    def create_field_proxy(
        self,
        owner: object,
        slot: SlotAccessor,
        channel: str,
    ) -> ObservedProxy:
        """Wrap the slot's current value and write the proxy back into the slot.

        A value already proxied for another registry or channel is wrapped
        again, so every observer keeps being notified. If this factory already
        observes the slot on ``channel``, the installed value is left as is.

        Raises:
            BindwireError: PROXY_NULL_VALUE if the slot holds no value.
        """
        current = slot.get(owner)
        if current is None:
            raise registration_error(
                ErrorCode.PROXY_NULL_VALUE,
                owner,
                slot=slot.name,
                channel=channel,
            )

        if self._observes(current, channel):
            logger.debug(
                "%s.%s already observed on channel '%s'",
                type(owner).__name__,
                slot.name,
                channel,
            )
            return current

        proxy = ObservedProxy(current, channel, self._notify, self._classifier)
        slot.set(owner, proxy, validate=False)
        logger.debug(
            "Installed proxy on %s.%s for channel '%s'",
            type(owner).__name__,
            slot.name,
            channel,
        )
        return proxy

    def _observes(self, value: Any, channel: str) -> bool:
        """Whether a proxy in ``value``'s chain notifies this factory's channel."""
        while type(value) is ObservedProxy:
            if (
                object.__getattribute__(value, "_bw_channel") == channel
                and object.__getattribute__(value, "_bw_notify") == self._notify
            ):
                return True
            value = object.__getattribute__(value, "__wrapped__")
        return False
