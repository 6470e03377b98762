"""Unified data models for a parsed OpenAPI document.

The loader converts raw YAML/JSON into these models so downstream code
never has to inspect untyped dictionaries. Schema fragments become the
closed ``SchemaNode`` variant; everything else mirrors the OpenAPI objects
the generator actually reads.
"""

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict

SCHEMA_REF_PREFIX = "#/components/schemas/"


class OprqError(Exception):
    """Base class for all errors raised by oprq."""


class DocumentError(OprqError):
    """The API document could not be read or is not an OpenAPI document."""


class OperationNotFoundError(OprqError):
    """The requested (method, path) pair is not declared in the document."""

    def __init__(self, method: str, path: str):
        super().__init__(f"Operation not found: {method.lower()} {path}")
        self.method = method
        self.path = path


class _Node(BaseModel):
    model_config = ConfigDict(frozen=True)

    nullable: bool = False


class PrimitiveNode(_Node):
    """A scalar schema: string, integer, number or boolean."""

    type_name: Literal["string", "integer", "number", "boolean"]
    format: str | None = None
    enum: tuple[str, ...] | None = None


class ArrayNode(_Node):
    items: "SchemaNode | None" = None


class ObjectNode(_Node):
    """An object schema.

    ``additional_properties`` is None when the key is missing, a bool when
    declared as a flag, or a schema node.
    """

    properties: dict[str, "SchemaNode"] = {}
    required: frozenset[str] = frozenset()
    additional_properties: "bool | SchemaNode | None" = None


class ReferenceNode(_Node):
    ref: str

    @property
    def target_name(self) -> str | None:
        """Component schema name, or None for refs outside the registry."""
        if not self.ref.startswith(SCHEMA_REF_PREFIX):
            return None
        return self.ref[len(SCHEMA_REF_PREFIX):]


class CompositeNode(_Node):
    kind: Literal["all", "one", "any"]
    members: tuple["SchemaNode", ...] = ()


class UnknownNode(_Node):
    """Anything the parser could not classify."""


SchemaNode = Union[PrimitiveNode, ArrayNode, ObjectNode, ReferenceNode, CompositeNode, UnknownNode]

for _model in (ArrayNode, ObjectNode, CompositeNode):
    _model.model_rebuild()


class Parameter(BaseModel):
    """A single operation parameter (query, path, header, or cookie)."""

    name: str
    location: str  # query / path / header / cookie
    required: bool = False
    schema_node: SchemaNode | None = None
    description: str = ""


class MediaType(BaseModel):
    schema_node: SchemaNode | None = None


class RequestBody(BaseModel):
    required: bool = False
    content: dict[str, MediaType] = {}


class Response(BaseModel):
    description: str = ""
    content: dict[str, MediaType] = {}


class Operation(BaseModel):
    """A single operation object with the fields the generator reads."""

    operation_id: str | None = None
    summary: str = ""
    description: str = ""
    tags: list[str] = []
    parameters: list[Parameter] = []
    request_body: RequestBody | None = None
    responses: dict[str, Response] = {}


class PathItem(BaseModel):
    parameters: list[Parameter] = []
    operations: dict[str, Operation] = {}  # lower-case method -> operation


class Components(BaseModel):
    schemas: dict[str, SchemaNode] = {}


class Document(BaseModel):
    """A parsed OpenAPI document."""

    openapi: str
    title: str = ""
    version: str = ""
    paths: dict[str, PathItem] = {}
    components: Components = Components()


class OperationEntry(BaseModel):
    """An operation bound to the (method, path) pair it is declared under."""

    method: str  # lower-case
    path: str
    operation: Operation
    path_parameters: list[Parameter] = []
