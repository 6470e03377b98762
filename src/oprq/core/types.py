"""Resolved type descriptors and their TypeScript rendering.

Every descriptor renders to the same text wherever it appears, so the
renderer can substitute ``render()`` output directly into the file.
"""

import json
from dataclasses import dataclass
from typing import Iterable, Union

from .naming import TS_IDENTIFIER, type_identifier


@dataclass(frozen=True)
class ScalarType:
    name: str

    def render(self) -> str:
        return self.name


@dataclass(frozen=True)
class LiteralType:
    values: tuple[str, ...]

    def render(self) -> str:
        return " | ".join(json.dumps(v) for v in self.values)


@dataclass(frozen=True)
class ArrayType:
    element: "TypeDescriptor"

    def render(self) -> str:
        inner = self.element.render()
        if _is_compound(self.element):
            return f"({inner})[]"
        return f"{inner}[]"


@dataclass(frozen=True)
class StructField:
    name: str
    type: "TypeDescriptor"
    optional: bool = False
    nullable: bool = False

    @property
    def quoted(self) -> bool:
        return not TS_IDENTIFIER.match(self.name)

    @property
    def key(self) -> str:
        return json.dumps(self.name) if self.quoted else self.name

    def render_type(self) -> str:
        if self.nullable:
            return union_of([self.type, NULL]).render()
        return self.type.render()

    def render(self) -> str:
        return f"{self.key}{'?' if self.optional else ''}: {self.render_type()}"


@dataclass(frozen=True)
class StructType:
    fields: tuple[StructField, ...]

    def render(self) -> str:
        if not self.fields:
            return "{}"
        return "{ " + "; ".join(f.render() for f in self.fields) + " }"


@dataclass(frozen=True)
class UnionType:
    members: tuple["TypeDescriptor", ...]

    def render(self) -> str:
        return " | ".join(m.render() for m in self.members)


@dataclass(frozen=True)
class IntersectionType:
    members: tuple["TypeDescriptor", ...]

    def render(self) -> str:
        parts = []
        for m in self.members:
            text = m.render()
            parts.append(f"({text})" if _is_compound(m) else text)
        return " & ".join(parts)


@dataclass(frozen=True)
class MapType:
    value: "TypeDescriptor"

    def render(self) -> str:
        return f"Record<string, {self.value.render()}>"


@dataclass(frozen=True)
class OpaqueType:
    label: str = "unknown"

    def render(self) -> str:
        return self.label


@dataclass(frozen=True)
class RefType:
    """A named reference standing in for a schema already being expanded."""

    name: str

    def render(self) -> str:
        return type_identifier(self.name)


TypeDescriptor = Union[
    ScalarType,
    LiteralType,
    ArrayType,
    StructType,
    UnionType,
    IntersectionType,
    MapType,
    OpaqueType,
    RefType,
]

STRING = ScalarType("string")
NUMBER = ScalarType("number")
BOOLEAN = ScalarType("boolean")
BLOB = ScalarType("Blob")
NULL = ScalarType("null")
VOID = ScalarType("void")
UNDEFINED = ScalarType("undefined")
NEVER = ScalarType("never")

UNKNOWN = OpaqueType()
OPAQUE_OBJECT = OpaqueType("object")
EMPTY_RECORD = MapType(NEVER)


def _is_compound(descriptor: TypeDescriptor) -> bool:
    if isinstance(descriptor, LiteralType):
        return len(descriptor.values) > 1
    return isinstance(descriptor, (UnionType, IntersectionType))


def union_of(members: Iterable[TypeDescriptor], empty: TypeDescriptor = UNKNOWN) -> TypeDescriptor:
    """Build a union, flattening nested unions and dropping members that render identically."""
    seen = {}
    for member in members:
        nested = member.members if isinstance(member, UnionType) else (member,)
        for m in nested:
            seen.setdefault(m.render(), m)
    unique = tuple(seen.values())
    if not unique:
        return empty
    if len(unique) == 1:
        return unique[0]
    return UnionType(unique)


def intersection_of(members: Iterable[TypeDescriptor]) -> TypeDescriptor:
    """Build an intersection; members keep their own shape."""
    flat = []
    for member in members:
        if isinstance(member, IntersectionType):
            flat.extend(member.members)
        else:
            flat.append(member)
    if not flat:
        return UNKNOWN
    if len(flat) == 1:
        return flat[0]
    return IntersectionType(tuple(flat))


def render_type(descriptor: TypeDescriptor) -> str:
    return descriptor.render()
