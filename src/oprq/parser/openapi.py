"""OpenAPI / Swagger document loader.

Reads a document from a file or URL, checks that it is an OpenAPI
document, and converts it into the models in ``oprq.parser.base``.
"""

import logging
from pathlib import Path
from typing import Any

import httpx
import yaml

from .base import (
    Components,
    Document,
    DocumentError,
    MediaType,
    Operation,
    OperationEntry,
    OperationNotFoundError,
    Parameter,
    PathItem,
    RequestBody,
    Response,
)
from .schema import parse_schema

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "post", "put", "patch", "delete", "head", "options")

FETCH_TIMEOUT_SECONDS = 30


def load_document(source: str | Path) -> Document:
    """Load an OpenAPI document from a local file or an http(s) URL."""
    source_text = str(source)
    if source_text.startswith(("http://", "https://")):
        return parse_document(_fetch(source_text))

    file_path = Path(source)
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise DocumentError(f"Cannot read {file_path}: {e}") from e
    return parse_document(_load_text(text, str(file_path)))


def _fetch(url: str) -> Any:
    logger.info("Fetching OpenAPI document from %s", url)
    try:
        response = httpx.get(
            url,
            timeout=FETCH_TIMEOUT_SECONDS,
            headers={"Accept": "application/json"},
            follow_redirects=True,
        )
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise DocumentError(f"Failed to fetch OpenAPI spec: {e}") from e
    return _load_text(response.text, url)


def _load_text(text: str, origin: str) -> Any:
    # YAML is a superset of JSON, so one loader covers both
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise DocumentError(f"{origin} is not valid YAML or JSON: {e}") from e


def parse_document(data: Any) -> Document:
    """Convert a decoded OpenAPI document into a Document model."""
    if not isinstance(data, dict) or not ("openapi" in data or "swagger" in data):
        raise DocumentError("Not a valid OpenAPI spec: missing 'openapi' or 'swagger' field.")

    raw_components = data.get("components") or {}
    registry = _ComponentRegistry(raw_components)

    schemas = raw_components.get("schemas") or {}
    components = Components(
        schemas={str(name): parse_schema(raw) for name, raw in schemas.items()},
    )

    paths = {}
    for path, raw_item in (data.get("paths") or {}).items():
        if not isinstance(raw_item, dict):
            continue
        paths[str(path)] = _parse_path_item(raw_item, registry)

    info = data.get("info") or {}
    return Document(
        openapi=str(data.get("openapi") or data.get("swagger")),
        title=str(info.get("title", "")),
        version=str(info.get("version", "")),
        paths=paths,
        components=components,
    )


class _ComponentRegistry:
    """Resolves local ``$ref`` pointers for parameters, bodies and responses."""

    def __init__(self, components: dict):
        self.components = components

    def deref(self, raw: Any, section: str) -> Any:
        if not isinstance(raw, dict) or "$ref" not in raw:
            return raw
        prefix = f"#/components/{section}/"
        ref = raw["$ref"]
        if not isinstance(ref, str) or not ref.startswith(prefix):
            logger.debug("Ignoring unsupported %s reference %r", section, ref)
            return {}
        target = (self.components.get(section) or {}).get(ref[len(prefix):])
        if target is None:
            logger.debug("Reference %r points to a missing component", ref)
            return {}
        return target


def _parse_path_item(raw_item: dict, registry: _ComponentRegistry) -> PathItem:
    operations = {}
    for method, raw_op in raw_item.items():
        if method.lower() not in HTTP_METHODS or not isinstance(raw_op, dict):
            continue
        operations[method.lower()] = _parse_operation(raw_op, registry)
    return PathItem(
        parameters=_parse_parameters(raw_item.get("parameters") or [], registry),
        operations=operations,
    )


def _parse_operation(raw_op: dict, registry: _ComponentRegistry) -> Operation:
    operation_id = raw_op.get("operationId")
    return Operation(
        operation_id=str(operation_id) if operation_id else None,
        summary=str(raw_op.get("summary") or ""),
        description=str(raw_op.get("description") or ""),
        tags=[str(t) for t in raw_op.get("tags") or []],
        parameters=_parse_parameters(raw_op.get("parameters") or [], registry),
        request_body=_parse_request_body(raw_op.get("requestBody"), registry),
        responses=_parse_responses(raw_op.get("responses") or {}, registry),
    )


def _parse_parameters(params: list, registry: _ComponentRegistry) -> list[Parameter]:
    result = []
    for raw in params:
        p = registry.deref(raw, "parameters")
        if not isinstance(p, dict) or "name" not in p:
            continue
        schema = p.get("schema")
        result.append(
            Parameter(
                name=str(p["name"]),
                location=str(p.get("in", "query")),
                required=p.get("required") is True,
                schema_node=parse_schema(schema) if schema is not None else None,
                description=str(p.get("description") or ""),
            )
        )
    return result


def _parse_content(content: Any) -> dict[str, MediaType]:
    if not isinstance(content, dict):
        return {}
    result = {}
    for content_type, media in content.items():
        schema = media.get("schema") if isinstance(media, dict) else None
        result[str(content_type)] = MediaType(
            schema_node=parse_schema(schema) if schema is not None else None,
        )
    return result


def _parse_request_body(body: Any, registry: _ComponentRegistry) -> RequestBody | None:
    body = registry.deref(body, "requestBodies")
    if not isinstance(body, dict) or not body:
        return None
    return RequestBody(
        required=body.get("required") is True,
        content=_parse_content(body.get("content")),
    )


def _parse_responses(responses: dict, registry: _ComponentRegistry) -> dict[str, Response]:
    result = {}
    for status_code, raw in responses.items():
        resp = registry.deref(raw, "responses")
        if not isinstance(resp, dict):
            resp = {}
        # YAML loads bare status codes as integers
        key = str(status_code)
        key = "default" if key.lower() == "default" else key.upper()
        result[key] = Response(
            description=str(resp.get("description") or ""),
            content=_parse_content(resp.get("content")),
        )
    return result


def list_operations(document: Document) -> list[OperationEntry]:
    """Return every operation in document order."""
    entries = []
    for path, item in document.paths.items():
        for method, operation in item.operations.items():
            entries.append(
                OperationEntry(
                    method=method,
                    path=path,
                    operation=operation,
                    path_parameters=item.parameters,
                )
            )
    return entries


def find_operation(document: Document, method: str, path: str) -> OperationEntry:
    """Look up one operation; raise OperationNotFoundError when absent."""
    item = document.paths.get(path)
    operation = item.operations.get(method.lower()) if item else None
    if operation is None:
        raise OperationNotFoundError(method, path)
    return OperationEntry(
        method=method.lower(),
        path=path,
        operation=operation,
        path_parameters=item.parameters,
    )
