"""Artifact composition: one renderer-ready description per operation.

Combines the analyzer's groups, the resolver's types and the naming rules
with a ``GenerationConfig`` into an ``OperationArtifact``. Everything that
differs between React Query major versions lives in ``LIBRARY_PROFILES``.
"""

import logging
from dataclasses import dataclass, replace

from ..config import GenerationConfig, LibraryVersion
from ..parser.base import Document, OperationEntry, SchemaNode
from ..parser.openapi import find_operation
from .analyzer import OperationAnalyzer, ParameterGroup, ParamField, ResponseSelection
from .naming import derive
from .references import TypeDefinition, build_definitions
from .resolver import SchemaResolver
from .types import (
    EMPTY_RECORD,
    UNDEFINED,
    UNKNOWN,
    VOID,
    StructField,
    StructType,
    TypeDescriptor,
    union_of,
)

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "API"


@dataclass(frozen=True)
class InfiniteQueryShape:
    """Signature of the generated infinite-query hook for one library version."""

    type_arity: int
    page_param_type_arg: bool
    requires_next_page_param: bool
    data_wrapper: str = "InfiniteData"


@dataclass(frozen=True)
class LibraryProfile:
    version: LibraryVersion
    import_path: str
    supports_suspense: bool
    infinite_query: InfiniteQueryShape


_LEGACY_INFINITE = InfiniteQueryShape(type_arity=5, page_param_type_arg=False, requires_next_page_param=True)

LIBRARY_PROFILES = {
    LibraryVersion.V3: LibraryProfile(LibraryVersion.V3, "react-query", False, _LEGACY_INFINITE),
    LibraryVersion.V4: LibraryProfile(LibraryVersion.V4, "@tanstack/react-query", False, _LEGACY_INFINITE),
    LibraryVersion.V5: LibraryProfile(
        LibraryVersion.V5,
        "@tanstack/react-query",
        True,
        InfiniteQueryShape(type_arity=6, page_param_type_arg=True, requires_next_page_param=False),
    ),
}


@dataclass(frozen=True)
class RequiredFlags:
    path: bool
    query: bool
    body: bool

    @property
    def any(self) -> bool:
        return self.path or self.query or self.body


@dataclass(frozen=True)
class QueryKey:
    """Base cache key: (namespace, METHOD, path template, request argument).

    Built the same way for every configuration, so regenerating with other
    hook flags keeps existing cache entries addressable.
    """

    namespace: str
    method: str
    path: str
    argument: str = "req"

    @property
    def parts(self) -> tuple[str, str, str, str]:
        return (self.namespace, self.method, self.path, self.argument)


@dataclass(frozen=True)
class HookPlan:
    query: bool
    suspense: bool
    mutation: bool
    infinite: InfiniteQueryShape | None

    @property
    def uses_query(self) -> bool:
        return self.query or self.suspense


@dataclass(frozen=True)
class OperationArtifact:
    operation_name: str
    display_name: str
    method: str
    path: str
    summary: str
    path_params: TypeDescriptor
    query_params: TypeDescriptor
    body_type: TypeDescriptor
    response_type: TypeDescriptor
    error_type: TypeDescriptor
    required: RequiredFlags
    args_optional: bool
    query_key: QueryKey
    hook_plan: HookPlan
    library: LibraryProfile
    definitions: tuple[TypeDefinition, ...] = ()


def library_profile(config: GenerationConfig) -> LibraryProfile:
    """The version profile, with the configured import path if one is set."""
    profile = LIBRARY_PROFILES[config.library_version]
    if config.import_path:
        return replace(profile, import_path=config.import_path)
    return profile


def plan_hooks(config: GenerationConfig) -> HookPlan:
    profile = LIBRARY_PROFILES[config.library_version]
    if config.suspense_hook and not profile.supports_suspense:
        logger.debug("Suspense hook skipped for React Query %s", config.library_version.value)
    return HookPlan(
        query=config.query_hook,
        suspense=config.suspense_hook and profile.supports_suspense,
        mutation=config.mutation_hook,
        infinite=profile.infinite_query if config.infinite_query_hook else None,
    )


def _params_type(fields: tuple[ParamField, ...]) -> TypeDescriptor:
    if not fields:
        return EMPTY_RECORD
    return StructType(tuple(StructField(f.name, f.type, optional=not f.required) for f in fields))


class ArtifactComposer:
    """Builds OperationArtifacts for operations of one document."""

    def __init__(self, resolver: SchemaResolver, namespace: str = DEFAULT_NAMESPACE):
        self.resolver = resolver
        self.namespace = namespace

    def compose(
        self,
        entry: OperationEntry,
        parameters: ParameterGroup,
        body_schema: SchemaNode | None,
        responses: ResponseSelection,
        config: GenerationConfig,
        body_required: bool = False,
    ) -> OperationArtifact:
        identifier = derive(entry.method, entry.path, entry.operation.operation_id)
        required = RequiredFlags(
            path=bool(parameters.path),
            query=parameters.required_query,
            body=body_required,
        )

        success = responses.success
        if success.no_content or success.type is None:
            response_type = VOID
        else:
            response_type = success.type

        return OperationArtifact(
            operation_name=identifier.raw,
            display_name=identifier.pascal,
            method=entry.method,
            path=entry.path,
            summary=entry.operation.summary,
            path_params=_params_type(parameters.path),
            query_params=_params_type(parameters.query),
            body_type=self.resolver.resolve(body_schema) if body_schema is not None else UNDEFINED,
            response_type=response_type,
            error_type=union_of(responses.errors, empty=UNKNOWN),
            required=required,
            args_optional=not required.any,
            query_key=QueryKey(self.namespace, entry.method.upper(), entry.path),
            hook_plan=plan_hooks(config),
            library=library_profile(config),
            definitions=build_definitions(entry, self.resolver),
        )


def build_artifact(
    document: Document,
    method: str,
    path: str,
    config: GenerationConfig,
    namespace: str = DEFAULT_NAMESPACE,
) -> OperationArtifact:
    """Look up, analyze and compose one operation."""
    entry = find_operation(document, method, path)
    return compose_entry(entry, document, config, namespace)


def compose_entry(
    entry: OperationEntry,
    document: Document,
    config: GenerationConfig,
    namespace: str = DEFAULT_NAMESPACE,
) -> OperationArtifact:
    resolver = SchemaResolver(document)
    analysis = OperationAnalyzer(resolver).analyze(entry)
    return ArtifactComposer(resolver, namespace).compose(
        entry,
        analysis.parameters,
        analysis.body,
        analysis.responses,
        config,
        body_required=analysis.body_required,
    )
