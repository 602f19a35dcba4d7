"""Tests for declaration markers and metadata providers."""

from typing import Annotated

import pytest

from bindwire.binding import (
    AnnotationMetadataProvider,
    ExecutorMode,
    ListenerMode,
    MetadataProvider,
    TableMetadataProvider,
    executor,
    listener,
    parameter,
)
from bindwire.binding.declarations import (
    ExecutorDeclaration,
    ListenerDeclaration,
    ParameterDeclaration,
)
from bindwire.foundation.config import BindwireConfig
from bindwire.foundation.errors import BindwireError, ErrorCode
from bindwire.interception import Cell
from bindwire.registry import BindingRegistry


class Base:
    base_value: Annotated[Cell, listener("base")]

    @executor("shout")
    def shout(self) -> str:
        return "base"

    @executor("whisper")
    def whisper(self) -> str:
        return "base"


class Derived(Base):
    derived_value: Annotated[int, listener("derived", mode=ListenerMode.UPDATE, executor="shout")]
    plain: int
    other: Annotated[str, "unrelated metadata"]

    def shout(self) -> str:
        return "derived, undecorated"

    @executor("loud")
    def whisper(self) -> str:
        return "derived"


class TestMarkers:
    @pytest.mark.parametrize("channel", ["", None, 3])
    def test_listener_requires_channel_name(self, channel):
        with pytest.raises(ValueError, match="channel name"):
            listener(channel)

    def test_parameter_rejects_negative_position(self):
        with pytest.raises(ValueError, match="position"):
            parameter("sum", -1)

    def test_parameter_rejects_bool_position(self):
        with pytest.raises(ValueError, match="position"):
            parameter("sum", True)

    def test_executor_requires_name(self):
        with pytest.raises(ValueError, match="executor name"):
            executor("")

    def test_executor_decorator_returns_function(self):
        def operation(self) -> None:
            pass

        assert executor("op")(operation) is operation

    def test_arguments_become_tuple(self):
        @executor("op", mode=ExecutorMode.ARGUMENTS, arguments=["1", "2"])
        def operation(self, a: int, b: int) -> int:
            return a + b

        spec = operation.__bindwire_executor__
        assert spec.arguments == ("1", "2")
        assert spec.mode is ExecutorMode.ARGUMENTS


class TestAnnotationMetadataProvider:
    def test_is_a_metadata_provider(self):
        assert isinstance(AnnotationMetadataProvider(), MetadataProvider)

    def test_slot_declarations_come_first(self):
        declarations = list(AnnotationMetadataProvider().declarations(Derived()))

        kinds = [type(d) for d in declarations]
        assert kinds == [
            ListenerDeclaration,
            ListenerDeclaration,
            ExecutorDeclaration,
        ]

    def test_listener_declarations(self):
        declarations = list(AnnotationMetadataProvider().declarations(Derived()))

        listeners = [d for d in declarations if isinstance(d, ListenerDeclaration)]
        assert listeners == [
            ListenerDeclaration(slot="base_value", channel="base", value_type=Cell),
            ListenerDeclaration(
                slot="derived_value",
                channel="derived",
                mode=ListenerMode.UPDATE,
                executor="shout",
                value_type=int,
            ),
        ]

    def test_most_derived_method_wins(self):
        declarations = list(AnnotationMetadataProvider().declarations(Derived()))

        executors = [d for d in declarations if isinstance(d, ExecutorDeclaration)]
        assert executors == [ExecutorDeclaration(operation="whisper", executor="loud")]

    def test_base_class_alone(self):
        declarations = list(AnnotationMetadataProvider().declarations(Base()))

        names = {d.executor for d in declarations if isinstance(d, ExecutorDeclaration)}
        assert names == {"shout", "whisper"}

    def test_parameter_declarations(self, operands):
        declarations = list(AnnotationMetadataProvider().declarations(operands))

        assert declarations == [
            ParameterDeclaration(slot="left", executor="sum", position=1),
            ParameterDeclaration(slot="right", executor="sum", position=0),
        ]

    def test_generic_annotation_has_no_value_type(self):
        class Holder:
            items: Annotated[list[int], listener("items")]

        (declaration,) = AnnotationMetadataProvider().declarations(Holder())

        assert declaration.value_type is None

    def test_object_without_declarations(self):
        assert list(AnnotationMetadataProvider().declarations(object())) == []


class Plain:
    """A class with no binding metadata of its own."""

    def __init__(self) -> None:
        self.count = Cell(0)
        self.total = 0
        self.factor = 3

    def recompute(self) -> int:
        return self.count.get() * self.factor

    def scale(self, factor: int) -> int:
        return factor * 2


class TestTableMetadataProvider:
    @pytest.fixture
    def provider(self) -> TableMetadataProvider:
        provider = TableMetadataProvider()
        (
            provider.for_type(Plain)
            .executor("recompute", "recompute")
            .listener("count", "count")
            .listener("total", "count", mode=ListenerMode.UPDATE, executor="recompute",
                      value_type=int)
            .parameter("factor", "scale")
            .executor("scale", "scale", mode=ExecutorMode.PARAMETERS)
        )
        return provider

    def test_slots_sorted_before_executors(self, provider):
        declarations = list(provider.declarations(Plain()))

        kinds = [type(d).__name__ for d in declarations]
        assert kinds == [
            "ListenerDeclaration",
            "ListenerDeclaration",
            "ParameterDeclaration",
            "ExecutorDeclaration",
            "ExecutorDeclaration",
        ]

    def test_subclasses_inherit_declarations(self, provider):
        class Child(Plain):
            pass

        provider.for_type(Child).executor("scale", "child-scale")

        declarations = list(provider.declarations(Child()))

        executors = [d.executor for d in declarations if isinstance(d, ExecutorDeclaration)]
        assert executors == ["recompute", "scale", "child-scale"]

    def test_unknown_type_has_no_declarations(self, provider):
        assert list(provider.declarations(object())) == []

    def test_drives_a_registry(self, provider):
        registry = BindingRegistry(provider=provider, config=BindwireConfig())
        plain = Plain()
        registry.register_object(plain)

        plain.count.set(4)

        assert plain.total == 12
        assert registry.invoke_executor("scale") == 6

    def test_missing_operation_fails_registration(self):
        provider = TableMetadataProvider()
        provider.for_type(Plain).executor("nonexistent", "ghost")
        registry = BindingRegistry(provider=provider, config=BindwireConfig())

        with pytest.raises(BindwireError) as exc_info:
            registry.register_object(Plain())

        err = exc_info.value
        assert err.code == ErrorCode.REGISTRATION_FAILED
        assert err.cause.code == ErrorCode.DECLARATION_INVALID

    def test_builder_validates_names(self):
        with pytest.raises(ValueError):
            TableMetadataProvider().for_type(Plain).listener("", "count")
