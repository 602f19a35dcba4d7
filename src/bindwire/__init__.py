"""Bindwire - declarative listener/executor bindings with reactive updates.

Objects declare listener slots, executor operations and parameter slots.
A BindingRegistry wires them together at registration time and recomputes
UPDATE listeners whenever a proxied slot is mutated.

Example:
    >>> from typing import Annotated
    >>> from bindwire import Cell, ListenerMode, BindingRegistry, executor, listener
    >>> class Counter:
    ...     count: Annotated[Cell, listener("count")]
    ...     doubled: Annotated[int, listener("count", mode=ListenerMode.UPDATE,
    ...                                      executor="double")]
    ...     def __init__(self):
    ...         self.count = Cell(1)
    ...         self.doubled = 2
    ...     @executor("double")
    ...     def double(self) -> int:
    ...         return self.count.get() * 2
    >>> counter = Counter()
    >>> BindingRegistry().register_object(counter)
    >>> counter.count.set(5)
    >>> counter.doubled
    10
"""

from bindwire.binding import (
    AnnotationMetadataProvider,
    ExecutorBinding,
    ExecutorMode,
    ListenerBinding,
    ListenerMode,
    MetadataProvider,
    ParameterBinding,
    TableMetadataProvider,
    executor,
    listener,
    parameter,
)
from bindwire.conversion import ArgumentConverter, ConversionRegistry
from bindwire.foundation.config import BindwireConfig, get_config, load_config, reset_config
from bindwire.foundation.errors import BindwireError, ErrorCode
from bindwire.foundation.logging import configure_logging
from bindwire.interception import (
    Cell,
    MutationPolicy,
    ObservedProxy,
    ProxyFactory,
    mutator,
    unwrap,
)
from bindwire.manager import (
    ManagerContainer,
    get_container,
    get_default_manager,
    get_manager,
    register,
)
from bindwire.registry import BindingRegistry, RegistrySnapshot
from bindwire.tracking import ObjectRegistry

__version__ = "0.1.0"

__all__ = [
    # === Registry ===
    "BindingRegistry",
    "RegistrySnapshot",
    "ObjectRegistry",
    # === Manager ===
    "ManagerContainer",
    "get_container",
    "get_default_manager",
    "get_manager",
    "register",
    # === Declarations ===
    "AnnotationMetadataProvider",
    "MetadataProvider",
    "TableMetadataProvider",
    "executor",
    "listener",
    "parameter",
    # === Bindings ===
    "ExecutorBinding",
    "ExecutorMode",
    "ListenerBinding",
    "ListenerMode",
    "ParameterBinding",
    # === Interception ===
    "Cell",
    "MutationPolicy",
    "ObservedProxy",
    "ProxyFactory",
    "mutator",
    "unwrap",
    # === Conversion ===
    "ArgumentConverter",
    "ConversionRegistry",
    # === Foundation ===
    "BindwireConfig",
    "BindwireError",
    "ErrorCode",
    "configure_logging",
    "get_config",
    "load_config",
    "reset_config",
]
