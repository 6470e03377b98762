"""Schema resolution: SchemaNode -> TypeDescriptor.

Resolution is best-effort. A fragment that cannot be classified becomes
``unknown`` rather than an error, because API documents in the wild are
often imprecise and the generated module should still compile.

Self-referencing schemas are handled with ``visiting``, the set of
component names currently being expanded on this call chain. Meeting a
name that is already in the set yields a ``RefType`` to it instead of
another expansion. ``visiting`` is an immutable set handed down the
recursion, so a name leaves the set as soon as its expansion returns and
concurrent resolutions never share state.
"""

import logging

from ..parser.base import (
    ArrayNode,
    CompositeNode,
    Document,
    ObjectNode,
    PrimitiveNode,
    ReferenceNode,
    SchemaNode,
    UnknownNode,
)
from .types import (
    BLOB,
    BOOLEAN,
    NULL,
    NUMBER,
    OPAQUE_OBJECT,
    STRING,
    UNKNOWN,
    ArrayType,
    LiteralType,
    MapType,
    RefType,
    StructField,
    StructType,
    TypeDescriptor,
    intersection_of,
    union_of,
)

logger = logging.getLogger(__name__)

# Structs nested deeper than this render as a plain ``object``
DEFAULT_DEPTH_LIMIT = 4


class SchemaResolver:
    """Resolves schema nodes against one document's component registry."""

    def __init__(self, document: Document, depth_limit: int = DEFAULT_DEPTH_LIMIT):
        self.document = document
        self.depth_limit = depth_limit

    def resolve(
        self,
        node: SchemaNode | None,
        depth: int = 0,
        visiting: frozenset[str] = frozenset(),
    ) -> TypeDescriptor:
        if node is None:
            return UNKNOWN
        if isinstance(node, ReferenceNode):
            return self._resolve_reference(node, depth, visiting)
        if isinstance(node, CompositeNode):
            return self._resolve_composite(node, depth, visiting)
        if isinstance(node, PrimitiveNode):
            return self._resolve_primitive(node)
        if isinstance(node, ArrayNode):
            return ArrayType(self.resolve(node.items, depth, visiting))
        if isinstance(node, ObjectNode):
            return self._resolve_object(node, depth, visiting)
        if isinstance(node, UnknownNode) and node.nullable:
            return union_of([UNKNOWN, NULL])
        return UNKNOWN

    def resolve_named(self, name: str) -> TypeDescriptor:
        """Resolve a component schema with its own name already being expanded."""
        node = self.document.components.schemas.get(name)
        if node is None:
            return UNKNOWN
        return self.resolve(node, 0, frozenset({name}))

    def _resolve_reference(
        self, node: ReferenceNode, depth: int, visiting: frozenset[str]
    ) -> TypeDescriptor:
        name = node.target_name
        if name is None:
            logger.debug("Unsupported reference %r resolved as unknown", node.ref)
            return UNKNOWN
        if name in visiting:
            return RefType(name)
        target = self.document.components.schemas.get(name)
        if target is None:
            logger.debug("Reference %r points to a missing schema", node.ref)
            return UNKNOWN
        return self.resolve(target, depth, visiting | {name})

    def _resolve_composite(
        self, node: CompositeNode, depth: int, visiting: frozenset[str]
    ) -> TypeDescriptor:
        members = [self.resolve(m, depth, visiting) for m in node.members]
        if node.kind == "all":
            return intersection_of(members)
        return union_of(members)

    def _resolve_primitive(self, node: PrimitiveNode) -> TypeDescriptor:
        if node.type_name == "string":
            if node.enum:
                return LiteralType(node.enum)
            if node.format == "binary":
                return BLOB
            # date and date-time stay ISO strings
            return STRING
        if node.type_name in ("integer", "number"):
            return NUMBER
        return BOOLEAN

    def _resolve_object(
        self, node: ObjectNode, depth: int, visiting: frozenset[str]
    ) -> TypeDescriptor:
        if not node.properties:
            extra = node.additional_properties
            if extra is None or isinstance(extra, bool):
                return MapType(UNKNOWN)
            return MapType(self.resolve(extra, depth + 1, visiting))

        if depth >= self.depth_limit:
            return OPAQUE_OBJECT

        fields = tuple(
            StructField(
                name=name,
                type=self.resolve(prop, depth + 1, visiting),
                optional=name not in node.required,
                nullable=prop.nullable,
            )
            for name, prop in node.properties.items()
        )
        return StructType(fields)


def resolve(
    node: SchemaNode | None,
    document: Document,
    depth_limit: int = DEFAULT_DEPTH_LIMIT,
    visiting: frozenset[str] = frozenset(),
) -> TypeDescriptor:
    """Resolve one schema node against ``document``."""
    return SchemaResolver(document, depth_limit).resolve(node, 0, visiting)
