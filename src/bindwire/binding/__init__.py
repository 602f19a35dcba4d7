"""Binding records and declarations."""

from bindwire.binding.declarations import (
    AnnotationMetadataProvider,
    Declaration,
    DeclarationBuilder,
    ExecutorDeclaration,
    ListenerDeclaration,
    MetadataProvider,
    ParameterDeclaration,
    TableMetadataProvider,
    executor,
    listener,
    parameter,
)
from bindwire.binding.types import (
    ExecutorBinding,
    ExecutorMode,
    InputSpec,
    ListenerBinding,
    ListenerMode,
    ParameterBinding,
    SlotAccessor,
    declared_inputs,
)

__all__ = [
    # === Types ===
    "ExecutorBinding",
    "ExecutorMode",
    "InputSpec",
    "ListenerBinding",
    "ListenerMode",
    "ParameterBinding",
    "SlotAccessor",
    "declared_inputs",
    # === Declarations ===
    "AnnotationMetadataProvider",
    "Declaration",
    "DeclarationBuilder",
    "ExecutorDeclaration",
    "ListenerDeclaration",
    "MetadataProvider",
    "ParameterDeclaration",
    "TableMetadataProvider",
    "executor",
    "listener",
    "parameter",
]
