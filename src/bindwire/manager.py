"""Process-wide container of named BindingRegistry instances.

Callers that want isolation ask for a registry by name; callers that want
to share one use the default. Registries are created on first request and
live for the rest of the process.

Tests should build ``BindingRegistry()`` directly, or call
``reset_managers_for_tests()`` between cases when they go through the
container.
"""

import logging
import threading

from bindwire.foundation.config import get_config
from bindwire.registry import BindingRegistry

logger = logging.getLogger(__name__)


class ManagerContainer:
    """Named registries, created exactly once per name.

    Thread-safe: concurrent first requests for the same name all receive
    the same instance.
    """

    def __init__(self, default_name: str | None = None) -> None:
        self._default_name = default_name
        self._managers: dict[str, BindingRegistry] = {}
        self._lock = threading.Lock()

    @property
    def default_name(self) -> str:
        return self._default_name or get_config().default_manager

    def get_manager(self, name: str) -> BindingRegistry:
        """Registry for ``name``, creating it on first request."""
        # Fast path: already created
        manager = self._managers.get(name)
        if manager is not None:
            return manager

        with self._lock:
            manager = self._managers.get(name)
            if manager is None:
                manager = BindingRegistry()
                self._managers[name] = manager
                logger.debug("Created registry '%s'", name)
            return manager

    def get_default_manager(self) -> BindingRegistry:
        return self.get_manager(self.default_name)

    def register(self, obj: object, name: str | None = None) -> None:
        """Register ``obj`` with the named registry (default if omitted)."""
        self.get_manager(name or self.default_name).register_object(obj)

    def names(self) -> list[str]:
        with self._lock:
            return list(self._managers)

    def clear(self) -> None:
        """Forget every registry (bindings inside them are cleared too)."""
        with self._lock:
            managers = list(self._managers.values())
            self._managers.clear()
        for manager in managers:
            manager.clear()


# =============================================================================
# Global Instance
# =============================================================================

_container: ManagerContainer | None = None
_container_lock = threading.Lock()


def get_container() -> ManagerContainer:
    """Get the global ManagerContainer instance.

    Lazily initialized on first access. Thread-safe.
    """
    global _container
    if _container is None:
        with _container_lock:
            if _container is None:
                _container = ManagerContainer()
    return _container


def get_manager(name: str) -> BindingRegistry:
    return get_container().get_manager(name)


def get_default_manager() -> BindingRegistry:
    return get_container().get_default_manager()


def register(obj: object, name: str | None = None) -> None:
    """Register ``obj`` with a process-wide registry.

    Usage:
        register(counter)              # default registry
        register(counter, "metrics")   # registry named "metrics"
    """
    get_container().register(obj, name)


def reset_managers_for_tests() -> None:
    """Reset the global container (for testing only)."""
    global _container
    with _container_lock:
        if _container is not None:
            _container.clear()
        _container = None
