"""Collect the component schemas an operation reaches.

Every collected name is emitted once as a standalone type definition, so
the cycle points that render as bare names always refer to something
declared in the same file.
"""

from dataclasses import dataclass

from ..parser.base import (
    ArrayNode,
    CompositeNode,
    Document,
    ObjectNode,
    OperationEntry,
    ReferenceNode,
    SchemaNode,
)
from .analyzer import first_schema, merge_parameters
from .naming import type_identifier
from .resolver import SchemaResolver
from .types import StructType, TypeDescriptor


@dataclass(frozen=True)
class TypeDefinition:
    name: str
    type: TypeDescriptor

    @property
    def identifier(self) -> str:
        return type_identifier(self.name)

    def render(self) -> str:
        if isinstance(self.type, StructType):
            body = "\n".join(f"  {f.render()};" for f in self.type.fields)
            return f"export interface {self.identifier} {{\n{body}\n}}"
        return f"export type {self.identifier} = {self.type.render()};"


def collect_schema_names(entry: OperationEntry, document: Document) -> list[str]:
    """Names of every component schema reachable from the operation, in discovery order."""
    names: dict[str, None] = {}
    schemas = document.components.schemas

    def collect(node: SchemaNode | None) -> None:
        if node is None:
            return
        if isinstance(node, ReferenceNode):
            name = node.target_name
            if name is not None and name not in names and name in schemas:
                names[name] = None
                collect(schemas[name])
        elif isinstance(node, ArrayNode):
            collect(node.items)
        elif isinstance(node, ObjectNode):
            for prop in node.properties.values():
                collect(prop)
            if not isinstance(node.additional_properties, (bool, type(None))):
                collect(node.additional_properties)
        elif isinstance(node, CompositeNode):
            for member in node.members:
                collect(member)

    operation = entry.operation
    for param in merge_parameters(entry.path_parameters, operation.parameters):
        collect(param.schema_node)
    if operation.request_body is not None:
        collect(first_schema(operation.request_body.content))
    for response in operation.responses.values():
        collect(first_schema(response.content))

    return list(names)


def build_definitions(entry: OperationEntry, resolver: SchemaResolver) -> tuple[TypeDefinition, ...]:
    return tuple(
        TypeDefinition(name, resolver.resolve_named(name))
        for name in collect_schema_names(entry, resolver.document)
    )
