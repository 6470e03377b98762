"""Classify raw JSON schema fragments into ``SchemaNode`` variants.

Parsing is total: any fragment that does not fit a known shape becomes an
``UnknownNode`` instead of raising.
"""

import json
from typing import Any

from .base import (
    ArrayNode,
    CompositeNode,
    ObjectNode,
    PrimitiveNode,
    ReferenceNode,
    SchemaNode,
    UnknownNode,
)

PRIMITIVE_TYPES = ("string", "integer", "number", "boolean")

COMPOSITE_KEYS = (("allOf", "all"), ("oneOf", "one"), ("anyOf", "any"))


def parse_schema(raw: Any) -> SchemaNode:
    """Convert a raw schema dict into a SchemaNode."""
    if not isinstance(raw, dict):
        return UnknownNode()

    type_name, nullable = _split_type(raw)

    ref = raw.get("$ref")
    if isinstance(ref, str):
        return ReferenceNode(ref=ref, nullable=nullable)

    for key, kind in COMPOSITE_KEYS:
        members = raw.get(key)
        if isinstance(members, list):
            return CompositeNode(
                kind=kind,
                members=tuple(parse_schema(m) for m in members),
                nullable=nullable,
            )

    if type_name in PRIMITIVE_TYPES:
        enum, enum_nullable = _parse_enum(raw.get("enum"))
        fmt = raw.get("format")
        return PrimitiveNode(
            type_name=type_name,
            format=fmt if isinstance(fmt, str) else None,
            enum=enum,
            nullable=nullable or enum_nullable,
        )

    if type_name == "array" or (type_name is None and "items" in raw):
        items = parse_schema(raw["items"]) if "items" in raw else None
        return ArrayNode(items=items, nullable=nullable)

    properties = raw.get("properties")
    if type_name == "object" or (type_name is None and isinstance(properties, dict)):
        return _parse_object(raw, nullable)

    return UnknownNode(nullable=nullable)


def _split_type(raw: dict) -> tuple[str | None, bool]:
    """Return (type, nullable), folding OpenAPI 3.1 ``type: [T, "null"]`` lists."""
    nullable = raw.get("nullable") is True
    type_name = raw.get("type")
    if isinstance(type_name, list):
        if "null" in type_name:
            nullable = True
        concrete = [t for t in type_name if t != "null" and isinstance(t, str)]
        # Multi-typed nodes have no single classification
        type_name = concrete[0] if len(concrete) == 1 else None
    elif not isinstance(type_name, str):
        type_name = None
    return type_name, nullable


def _parse_enum(values: Any) -> tuple[tuple[str, ...] | None, bool]:
    if not isinstance(values, list):
        return None, False
    nullable = any(v is None for v in values)
    # Booleans keep their JSON spelling; duplicates collapse in first-seen order
    literals = tuple(dict.fromkeys(
        json.dumps(v) if isinstance(v, bool) else str(v) for v in values if v is not None
    ))
    return (literals or None), nullable


def _parse_object(raw: dict, nullable: bool) -> ObjectNode:
    properties = raw.get("properties")
    if not isinstance(properties, dict):
        properties = {}

    required = raw.get("required")
    if not isinstance(required, list):
        required = []

    additional = raw.get("additionalProperties")
    if isinstance(additional, bool):
        additional_properties = additional
    elif isinstance(additional, dict):
        additional_properties = parse_schema(additional)
    else:
        additional_properties = None

    return ObjectNode(
        properties={str(name): parse_schema(prop) for name, prop in properties.items()},
        required=frozenset(str(r) for r in required),
        additional_properties=additional_properties,
        nullable=nullable,
    )
