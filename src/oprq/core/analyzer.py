"""Operation analysis: parameters, request body and responses.

Splits one operation into the groups the composer needs and picks the
success and error responses by a fixed priority order. Ambiguous response
maps never raise; they resolve by that order.
"""

import logging
from dataclasses import dataclass

from ..parser.base import MediaType, OperationEntry, Parameter, Response, SchemaNode
from .naming import path_placeholders
from .resolver import SchemaResolver
from .types import STRING, TypeDescriptor

logger = logging.getLogger(__name__)

SUCCESS_CODES = ("200", "201", "202", "203")
ERROR_WILDCARDS = ("4XX", "5XX")
JSON_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class ParamField:
    name: str
    required: bool
    type: TypeDescriptor


@dataclass(frozen=True)
class ParameterGroup:
    path: tuple[ParamField, ...]
    query: tuple[ParamField, ...]
    required_query: bool


@dataclass(frozen=True)
class SuccessResponse:
    status_code: str
    type: TypeDescriptor | None = None
    no_content: bool = False


@dataclass(frozen=True)
class ResponseSelection:
    success: SuccessResponse
    errors: tuple[TypeDescriptor, ...]


@dataclass(frozen=True)
class OperationAnalysis:
    parameters: ParameterGroup
    body: SchemaNode | None
    body_required: bool
    responses: ResponseSelection


def first_schema(content: dict[str, MediaType]) -> SchemaNode | None:
    """Pick the body schema, preferring application/json over other content types."""
    if not content:
        return None
    preferred = content.get(JSON_CONTENT_TYPE)
    if preferred is not None and preferred.schema_node is not None:
        return preferred.schema_node
    return next(iter(content.values())).schema_node


def merge_parameters(shared: list[Parameter], own: list[Parameter]) -> list[Parameter]:
    """Path-item parameters, overridden by operation parameters with the same (name, in)."""
    merged = {(p.name, p.location): p for p in shared}
    for p in own:
        merged[(p.name, p.location)] = p
    return list(merged.values())


class OperationAnalyzer:
    """Partitions an operation into parameter, body and response groups."""

    def __init__(self, resolver: SchemaResolver):
        self.resolver = resolver

    def analyze(self, entry: OperationEntry) -> OperationAnalysis:
        operation = entry.operation
        body = operation.request_body
        return OperationAnalysis(
            parameters=self.partition_parameters(entry),
            body=first_schema(body.content) if body else None,
            body_required=body.required if body else False,
            responses=ResponseSelection(
                success=self.select_success(operation.responses),
                errors=self.select_errors(operation.responses),
            ),
        )

    def partition_parameters(self, entry: OperationEntry) -> ParameterGroup:
        params = merge_parameters(entry.path_parameters, entry.operation.parameters)

        path_fields = []
        query_fields = []
        for p in params:
            if p.location == "path":
                # Path segments cannot be omitted, whatever the document says
                param_type = self.resolver.resolve(p.schema_node) if p.schema_node else STRING
                path_fields.append(ParamField(p.name, True, param_type))
            elif p.location == "query":
                query_fields.append(ParamField(p.name, p.required, self.resolver.resolve(p.schema_node)))

        declared = {f.name for f in path_fields}
        for name in path_placeholders(entry.path):
            if name not in declared:
                logger.debug("Undeclared path parameter %r in %s", name, entry.path)
                path_fields.append(ParamField(name, True, STRING))
                declared.add(name)

        return ParameterGroup(
            path=tuple(path_fields),
            query=tuple(query_fields),
            required_query=any(f.required for f in query_fields),
        )

    def select_success(self, responses: dict[str, Response]) -> SuccessResponse:
        """Priority: 204 > 200 > 201 > 202 > 203 > 2XX > default."""
        if "204" in responses:
            return SuccessResponse(status_code="204", no_content=True)

        for code in (*SUCCESS_CODES, "2XX"):
            if code in responses:
                return self._success_from(code, responses[code])

        if "default" in responses and not _has_explicit_status(responses):
            return self._success_from("default", responses["default"])

        return SuccessResponse(status_code="200")

    def _success_from(self, code: str, response: Response) -> SuccessResponse:
        schema = first_schema(response.content)
        return SuccessResponse(
            status_code=code,
            type=self.resolver.resolve(schema) if schema is not None else None,
        )

    def select_errors(self, responses: dict[str, Response]) -> tuple[TypeDescriptor, ...]:
        """Collect 4xx/5xx schemas, falling back to ``default``; dedupe by rendered text."""
        schemas = []
        for code, response in responses.items():
            if code in ERROR_WILDCARDS or _is_error_code(code):
                schema = first_schema(response.content)
                if schema is not None:
                    schemas.append(schema)

        if not schemas and "default" in responses:
            schema = first_schema(responses["default"].content)
            if schema is not None:
                schemas.append(schema)

        errors: dict[str, TypeDescriptor] = {}
        for schema in schemas:
            resolved = self.resolver.resolve(schema)
            errors.setdefault(resolved.render(), resolved)
        return tuple(errors.values())


def _is_error_code(code: str) -> bool:
    return code.isdigit() and 400 <= int(code) < 600


def _has_explicit_status(responses: dict[str, Response]) -> bool:
    for code in responses:
        if code in ("2XX", *ERROR_WILDCARDS) or _is_error_code(code):
            return True
        if code.isdigit() and 200 <= int(code) < 300:
            return True
    return False
