"""Tests for the ObjectRegistry facade."""

from typing import Annotated

import pytest

from bindwire.binding import listener
from bindwire.foundation.errors import BindwireError
from bindwire.interception import Cell
from bindwire.registry import BindingRegistry
from bindwire.tracking import ObjectRegistry


class TestObjectRegistry:
    def test_records_registered_objects(self, registry: BindingRegistry, operands, summer):
        objects = ObjectRegistry(registry).register_all(operands, summer)

        assert objects.registered_objects == (operands, summer)
        assert len(objects) == 2
        assert operands in objects
        assert objects.manager is registry

    def test_fluent_notify(self, registry: BindingRegistry, counter):
        ObjectRegistry(registry).register(counter).notify("count")

        assert counter.calls == 1

    def test_unregister(self, registry: BindingRegistry, counter, operands):
        objects = ObjectRegistry(registry).register_all(counter, operands)

        objects.unregister(counter)

        assert objects.registered_objects == (operands,)
        assert counter not in objects
        assert not registry.has_listener("count")

    def test_failed_registration_is_not_recorded(self, registry: BindingRegistry):
        class Broken:
            value: Annotated[Cell, listener("broken")]
            value = None

        objects = ObjectRegistry(registry)

        with pytest.raises(BindwireError):
            objects.register(Broken())

        assert len(objects) == 0

    def test_default_manager_is_private(self):
        objects = ObjectRegistry()

        assert isinstance(objects.manager, BindingRegistry)
        assert objects.manager is not ObjectRegistry().manager
