"""Fluent facade that remembers which objects it registered."""

import threading
from typing import Self

from bindwire.registry import BindingRegistry


class ObjectRegistry:
    """Wraps one BindingRegistry and records registered objects.

    Usage:
        objects = ObjectRegistry().register_all(source, view).notify("count")
        objects.registered_objects   # (source, view)
    """

    def __init__(self, manager: BindingRegistry | None = None) -> None:
        self._manager = manager or BindingRegistry()
        self._objects: tuple[object, ...] = ()
        self._lock = threading.Lock()

    @property
    def manager(self) -> BindingRegistry:
        return self._manager

    @property
    def registered_objects(self) -> tuple[object, ...]:
        """Registered objects in registration order."""
        return self._objects

    def register(self, obj: object) -> Self:
        """Register ``obj``; it is recorded only if registration succeeds."""
        self._manager.register_object(obj)
        with self._lock:
            self._objects = (*self._objects, obj)
        return self

    def register_all(self, *objs: object) -> Self:
        for obj in objs:
            self.register(obj)
        return self

    def unregister(self, obj: object) -> Self:
        self._manager.unregister_object(obj)
        with self._lock:
            self._objects = tuple(o for o in self._objects if o is not obj)
        return self

    def notify(self, channel: str) -> Self:
        self._manager.notify_listener_update(channel)
        return self

    def __contains__(self, obj: object) -> bool:
        return any(o is obj for o in self._objects)

    def __len__(self) -> int:
        return len(self._objects)
