"""BindingRegistry - binding indexes, update pipeline and invocation engine.

A registry keeps three indexes:

- channel name -> listener bindings (several listeners may share a channel)
- executor name -> executor binding (last registration wins)
- executor name -> parameter bindings (one per input position)

Registering an object asks the metadata provider for its declarations,
fills the indexes and installs an interception proxy on every listener
slot. A mutation through such a proxy notifies the listener's channel:
every UPDATE listener on it has its executor invoked and the result
written back into its slot. Updates are exactly one hop deep.

Thread Safety:
    Index writes happen under a per-registry lock. List-valued entries are
    tuples replaced on every write, so a snapshot taken for iteration never
    changes underneath the reader. No lock is held while executors run, so
    an executor may itself trigger notifications.
"""

import logging
import threading
import types
import typing
from dataclasses import dataclass
from typing import Any

from bindwire.binding.declarations import (
    AnnotationMetadataProvider,
    Declaration,
    ExecutorDeclaration,
    ListenerDeclaration,
    MetadataProvider,
    ParameterDeclaration,
)
from bindwire.binding.types import (
    ExecutorBinding,
    ExecutorMode,
    InputSpec,
    ListenerBinding,
    ListenerMode,
    ParameterBinding,
    SlotAccessor,
)
from bindwire.conversion import ArgumentConverter
from bindwire.foundation.config import BindwireConfig, get_config
from bindwire.foundation.errors import (
    ErrorCode,
    config_error,
    conversion_error,
    invocation_error,
    lookup_error,
    registration_error,
)
from bindwire.interception import MutationClassifier, MutationPolicy, ProxyFactory, unwrap

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RegistrySnapshot:
    """Point-in-time copy of a registry's bindings."""

    listeners: tuple[ListenerBinding, ...]
    executors: tuple[ExecutorBinding, ...]
    parameters: tuple[ParameterBinding, ...]


class BindingRegistry:
    """Registry of listener, executor and parameter bindings.

    Usage:
        registry = BindingRegistry()
        registry.register_object(counter)

        counter.count.set(5)          # notifies "count", recomputes listeners
        registry.get_listener_value("count")
    """

    def __init__(
        self,
        provider: MetadataProvider | None = None,
        converter: ArgumentConverter | None = None,
        config: BindwireConfig | None = None,
    ) -> None:
        config = config or get_config()
        self._provider = provider or AnnotationMetadataProvider()
        self._converter = converter or ArgumentConverter.with_defaults()
        self._listeners: dict[str, tuple[ListenerBinding, ...]] = {}
        self._executors: dict[str, ExecutorBinding] = {}
        self._parameters: dict[str, tuple[ParameterBinding, ...]] = {}
        self._lock = threading.Lock()
        self._proxies = ProxyFactory(
            self.notify_from_proxy,
            MutationClassifier(
                policy=MutationPolicy(config.mutation_policy),
                prefix=config.mutator_prefix,
            ),
        )

    @property
    def provider(self) -> MetadataProvider:
        return self._provider

    @property
    def converter(self) -> ArgumentConverter:
        return self._converter

    # =========================================================================
    # Registration
    # =========================================================================

    def register_object(self, obj: object) -> None:
        """Scan ``obj`` and index its bindings.

        Listener slots get an interception proxy as soon as their binding is
        indexed. A failure leaves any bindings already indexed for ``obj`` in
        place; call unregister_object() to remove them.

        Raises:
            BindwireError: REGISTRATION_FAILED naming the object's type.
        """
        if obj is None:
            raise registration_error(ErrorCode.REGISTRATION_FAILED, obj, detail="object is None")

        try:
            for declaration in self._provider.declarations(obj):
                self._apply(obj, declaration)
        except Exception as e:
            logger.debug("Registration of %s failed: %s", type(obj).__name__, e)
            raise registration_error(
                ErrorCode.REGISTRATION_FAILED,
                obj,
                detail=str(e),
                cause=e,
            ) from e

        logger.debug("Registered %s", type(obj).__name__)

    def register_objects(self, *objs: object) -> None:
        """Register each object in turn; the first failure stops the rest."""
        for obj in objs:
            self.register_object(obj)

    def unregister_object(self, obj: object) -> int:
        """Remove every binding owned by ``obj`` (by identity).

        Channels and executors left without bindings are dropped.

        Returns:
            Number of bindings removed.
        """
        removed = 0
        with self._lock:
            removed += _prune(self._listeners, obj)
            removed += _prune(self._parameters, obj)
            for name in [n for n, b in self._executors.items() if b.owner is obj]:
                del self._executors[name]
                removed += 1

        logger.debug("Unregistered %s (%d binding(s))", type(obj).__name__, removed)
        return removed

    def _apply(self, obj: object, declaration: Declaration) -> None:
        match declaration:
            case ListenerDeclaration():
                binding = ListenerBinding(
                    owner=obj,
                    slot=SlotAccessor(declaration.slot, declaration.value_type),
                    channel=declaration.channel,
                    mode=declaration.mode,
                    executor=declaration.executor,
                )
                with self._lock:
                    self._listeners[binding.channel] = (
                        *self._listeners.get(binding.channel, ()),
                        binding,
                    )
                self._proxies.create_field_proxy(obj, binding.slot, binding.channel)

            case ParameterDeclaration():
                binding = ParameterBinding(
                    owner=obj,
                    slot=SlotAccessor(declaration.slot),
                    executor=declaration.executor,
                    position=declaration.position,
                )
                with self._lock:
                    self._parameters[binding.executor] = (
                        *self._parameters.get(binding.executor, ()),
                        binding,
                    )

            case ExecutorDeclaration():
                if not callable(getattr(obj, declaration.operation, None)):
                    raise registration_error(
                        ErrorCode.DECLARATION_INVALID,
                        obj,
                        detail=f"'{declaration.operation}' is not a callable attribute",
                    )
                binding = ExecutorBinding(
                    owner=obj,
                    operation=declaration.operation,
                    name=declaration.executor,
                    mode=declaration.mode,
                    arguments=declaration.arguments,
                )
                with self._lock:
                    previous = self._executors.get(binding.name)
                    self._executors[binding.name] = binding
                if previous is not None and previous.owner is not obj:
                    logger.warning(
                        "Executor '%s' of %s replaced by %s",
                        binding.name,
                        type(previous.owner).__name__,
                        type(obj).__name__,
                    )

            case _:
                raise registration_error(
                    ErrorCode.DECLARATION_INVALID,
                    obj,
                    detail=f"unsupported declaration {declaration!r}",
                )

    # =========================================================================
    # Update pipeline
    # =========================================================================

    def notify_listener_update(self, channel: str) -> None:
        """Recompute every UPDATE listener on ``channel``.

        Runs synchronously on the caller's thread. If an executor fails
        partway through, listeners already updated keep their new values.

        Raises:
            BindwireError: CHANNEL_UNKNOWN, EXECUTOR_NAME_MISSING,
                LISTENER_WRITE_FAILED, or any invoke_executor() error.
        """
        bindings = self._listener_snapshot(channel)
        if not bindings:
            raise lookup_error(ErrorCode.CHANNEL_UNKNOWN, channel=channel)

        logger.debug("Notifying channel '%s' (%d listener(s))", channel, len(bindings))

        for binding in bindings:
            if binding.mode is not ListenerMode.UPDATE:
                continue
            if not binding.executor:
                raise lookup_error(ErrorCode.EXECUTOR_NAME_MISSING, channel=channel)

            result = self.invoke_executor(binding.executor)
            try:
                binding.write(result)
            except Exception as e:
                raise invocation_error(
                    ErrorCode.LISTENER_WRITE_FAILED,
                    executor=binding.executor,
                    channel=channel,
                    cause=e,
                ) from e

    def notify_from_proxy(self, channel: str) -> None:
        """Notification entry point for installed proxies.

        A proxy outlives its bindings after clear() or unregister_object();
        its mutations then notify nothing.
        """
        if not self.has_listener(channel):
            logger.debug("Channel '%s' has no bindings; mutation ignored", channel)
            return
        self.notify_listener_update(channel)

    # =========================================================================
    # Invocation engine
    # =========================================================================

    def invoke_executor(self, name: str) -> Any:
        """Resolve an executor's inputs and invoke it.

        Raises:
            BindwireError: EXECUTOR_NOT_FOUND, a configuration or conversion
                error from input resolution, or INVOCATION_FAILED wrapping
                whatever the operation raised.
        """
        with self._lock:
            binding = self._executors.get(name)
        if binding is None:
            raise lookup_error(ErrorCode.EXECUTOR_NOT_FOUND, executor=name)

        try:
            operation = binding.bound()
            inputs = binding.inputs()
        except (AttributeError, TypeError, ValueError) as e:
            raise invocation_error(ErrorCode.INVOCATION_FAILED, executor=name, cause=e) from e

        args = self._resolve_inputs(binding, inputs)

        logger.debug("Invoking executor '%s' with %d input(s)", name, len(args))
        try:
            return operation(*args)
        except Exception as e:
            raise invocation_error(ErrorCode.INVOCATION_FAILED, executor=name, cause=e) from e

    def _resolve_inputs(
        self,
        binding: ExecutorBinding,
        inputs: tuple[InputSpec, ...],
    ) -> list[Any]:
        match binding.mode:
            case ExecutorMode.NO_PARAMETER:
                if inputs:
                    raise config_error(ErrorCode.EXECUTOR_SIGNATURE_MISMATCH, binding.name)
                return []
            case ExecutorMode.ARGUMENTS:
                return self._resolve_arguments(binding, inputs)
            case ExecutorMode.PARAMETERS:
                return self._resolve_parameters(binding, inputs)
        raise config_error(
            ErrorCode.EXECUTOR_SIGNATURE_MISMATCH,
            binding.name,
            detail=f"unknown mode {binding.mode!r}",
        )

    def _resolve_arguments(
        self,
        binding: ExecutorBinding,
        inputs: tuple[InputSpec, ...],
    ) -> list[Any]:
        # Unannotated inputs take the literal as-is
        targets = [
            str if spec.annotation in (None, Any) else spec.annotation for spec in inputs
        ]
        values = self._converter.convert(binding.arguments, targets)

        for position, (value, target) in enumerate(zip(values, targets)):
            if value is None:
                raise conversion_error(
                    ErrorCode.CONVERSION_FAILED,
                    position=position,
                    value=binding.arguments[position],
                    target=getattr(target, "__name__", repr(target)),
                    executor=binding.name,
                )
        return values

    def _resolve_parameters(
        self,
        binding: ExecutorBinding,
        inputs: tuple[InputSpec, ...],
    ) -> list[Any]:
        with self._lock:
            params = self._parameters.get(binding.name, ())
        params = sorted(params, key=lambda p: p.position)

        if len(params) != len(inputs):
            raise config_error(
                ErrorCode.PARAMETER_COUNT_MISMATCH,
                binding.name,
                detail=f"operation declares {len(inputs)} input(s), "
                f"{len(params)} parameter binding(s) registered",
            )
        positions = [p.position for p in params]
        if positions != list(range(len(params))):
            raise config_error(
                ErrorCode.PARAMETER_COUNT_MISMATCH,
                binding.name,
                detail=f"positions {positions} do not cover 0..{len(params) - 1}",
            )

        values = []
        for spec, param in zip(inputs, params):
            value = param.read()
            if value is None:
                raise config_error(
                    ErrorCode.PARAMETER_TYPE_MISMATCH,
                    binding.name,
                    detail=f"input '{spec.name}' (position {param.position}) is absent",
                )
            if not _accepts(spec.annotation, unwrap(value)):
                raise config_error(
                    ErrorCode.PARAMETER_TYPE_MISMATCH,
                    binding.name,
                    detail=f"input '{spec.name}' expects {_describe(spec.annotation)}, "
                    f"got {type(unwrap(value)).__name__}",
                )
            values.append(value)
        return values

    # =========================================================================
    # Lookups
    # =========================================================================

    def get_listener_value(self, channel: str) -> Any:
        """Current value of the first listener registered on ``channel``.

        Returns:
            The slot value, or None if the channel has no listeners.
        """
        bindings = self._listener_snapshot(channel)
        if not bindings:
            return None
        try:
            return bindings[0].read()
        except Exception as e:
            raise invocation_error(
                ErrorCode.LISTENER_READ_FAILED, channel=channel, cause=e
            ) from e

    def has_listener(self, name: str) -> bool:
        with self._lock:
            return bool(self._listeners.get(name))

    def has_executor(self, name: str) -> bool:
        with self._lock:
            return name in self._executors

    def get_all_listener_names(self) -> list[str]:
        with self._lock:
            return list(self._listeners)

    def get_all_executor_names(self) -> list[str]:
        with self._lock:
            return list(self._executors)

    def snapshot(self) -> RegistrySnapshot:
        """Copy of every binding currently indexed."""
        with self._lock:
            return RegistrySnapshot(
                listeners=tuple(b for group in self._listeners.values() for b in group),
                executors=tuple(self._executors.values()),
                parameters=tuple(b for group in self._parameters.values() for b in group),
            )

    def clear(self) -> None:
        """Drop every binding. Installed proxies keep forwarding calls."""
        with self._lock:
            self._listeners.clear()
            self._executors.clear()
            self._parameters.clear()
        logger.debug("Registry cleared")

    def _listener_snapshot(self, channel: str) -> tuple[ListenerBinding, ...]:
        with self._lock:
            return self._listeners.get(channel, ())

    def __repr__(self) -> str:
        with self._lock:
            return (
                f"BindingRegistry(listeners={len(self._listeners)}, "
                f"executors={len(self._executors)}, parameters={len(self._parameters)})"
            )


def _prune(index: dict[str, tuple[Any, ...]], owner: object) -> int:
    """Drop bindings owned by ``owner`` from a tuple-valued index."""
    removed = 0
    for key, bindings in list(index.items()):
        kept = tuple(b for b in bindings if b.owner is not owner)
        removed += len(bindings) - len(kept)
        if not kept:
            del index[key]
        elif len(kept) != len(bindings):
            index[key] = kept
    return removed


def _accepts(annotation: Any, value: Any) -> bool:
    """Whether ``value`` satisfies a declared input annotation."""
    if annotation is None or annotation is Any:
        return True
    origin = typing.get_origin(annotation)
    if origin in (typing.Union, types.UnionType):
        return any(_accepts(arg, value) for arg in typing.get_args(annotation))
    if isinstance(origin, type):
        # list[int] -> list; element types are not inspected
        annotation = origin
    try:
        return isinstance(value, annotation)
    except TypeError:
        # TypeVars, Literal and other non-class hints
        return True


def _describe(annotation: Any) -> str:
    return getattr(annotation, "__name__", None) or repr(annotation)

