from datetime import datetime, timezone
from pathlib import Path

import pytest

from oprq.config import GenerationConfig
from oprq.core.composer import build_artifact
from oprq.generator.renderer import render_operation_file, utils_import_path
from oprq.parser.openapi import load_document, parse_document

FIXTURES = Path(__file__).parent / "fixtures"

GENERATED_AT = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest.fixture(scope="module")
def petstore():
    return load_document(FIXTURES / "petstore.yaml")


def _render(doc, method, path, **config):
    artifact = build_artifact(doc, method, path, GenerationConfig(**config), namespace="PETSTORE")
    return render_operation_file(artifact, generated_at=GENERATED_AT)


class TestHeaderAndTypes:
    def test_header(self, petstore):
        content = _render(petstore, "get", "/pets")
        assert content.startswith("/**\n * GET /pets\n * List all pets\n")
        assert "Generated at: 2026-01-02T03:04:05+00:00" in content
        assert " * Source: PETSTORE" in content

    def test_type_aliases(self, petstore):
        content = _render(petstore, "get", "/pets")
        assert "export type PathParams = Record<string, never>;" in content
        assert 'export type QueryParams = { limit?: number; status?: "available" | "sold" };' in content
        assert "export type Body = undefined;" in content
        assert "export type ErrorResponse = { code: number; message: string };" in content

    def test_referenced_types(self, petstore):
        content = _render(petstore, "get", "/pets")
        assert "// Referenced Types" in content
        assert "export interface PetPage {" in content
        assert "export interface Pet {" in content

    def test_request_args_follow_required_flags(self, petstore):
        content = _render(petstore, "post", "/pets")
        assert "  pathParams?: PathParams;" in content
        assert "  queryParams?: QueryParams;" in content
        assert "  body: Body;" in content

    def test_no_content_response(self, petstore):
        content = _render(petstore, "delete", "/pets/{petId}")
        assert "export type Response = void;" in content


class TestRepository:
    def test_api_url_and_query_key(self, petstore):
        content = _render(petstore, "get", "/pets/{petId}")
        assert 'const API_URL = "PETSTORE:/pets/{petId}" as const;' in content
        assert "export const getPetsByPetIdQueryKey = (req: RequestArgs) =>" in content
        assert '["PETSTORE", "GET", "/pets/{petId}", req] as const;' in content

    def test_optional_args_default(self, petstore):
        assert "export const listPets = async (args: RequestArgs = {}): Promise<Response> => {" in _render(petstore, "get", "/pets")
        assert "export const createPet = async (args: RequestArgs): Promise<Response> => {" in _render(petstore, "post", "/pets")

    def test_http_calls_by_method(self, petstore):
        assert "http.get(url, { params: args?.queryParams, ...args?.config })" in _render(petstore, "get", "/pets")
        assert "http.post(url, args?.body, { params: args?.queryParams, ...args?.config })" in _render(petstore, "post", "/pets")
        assert "http.delete(url, { params: args?.queryParams, data: args?.body, ...args?.config })" in _render(petstore, "delete", "/pets/{petId}")

    def test_utils_import_path(self, petstore):
        assert utils_import_path("get", "/pets") == "../../__oprq__"
        assert utils_import_path("get", "/users/{userId}/orders") == "../../../../__oprq__"
        assert 'from "../../../__oprq__";' in _render(petstore, "get", "/pets/{petId}")


class TestHooks:
    def test_default_hooks(self, petstore):
        content = _render(petstore, "get", "/pets")
        assert "export const useListPetsQuery = <TData = Response, TError = ErrorResponse>(" in content
        assert "export const useListPetsMutation = <TContext = unknown>(" in content
        assert "useSuspenseQuery" not in content
        assert "useInfiniteQuery" not in content
        assert 'from "@tanstack/react-query";' in content

    def test_hook_order(self, petstore):
        content = _render(petstore, "get", "/pets", suspense_hook=True, infinite_query_hook=True)
        positions = [
            content.index("useListPetsQuery"),
            content.index("useListPetsSuspenseQuery"),
            content.index("useListPetsInfiniteQuery"),
            content.index("useListPetsMutation"),
        ]
        assert positions == sorted(positions)

    def test_no_hooks_no_react_query_import(self, petstore):
        content = _render(petstore, "get", "/pets", query_hook=False, mutation_hook=False)
        assert "react-query" not in content
        assert "StringReplacer" in content

    def test_suspense_dropped_before_v5(self, petstore):
        content = _render(petstore, "get", "/pets", suspense_hook=True, library_version="v4")
        assert "useSuspenseQuery" not in content

    def test_v5_infinite_query(self, petstore):
        content = _render(petstore, "get", "/pets", infinite_query_hook=True)
        assert "type InfiniteData," in content
        assert "ReturnType<typeof listPetsQueryKey>, TPageParam>" in content
        assert "getNextPageParam" not in content
        assert "queryParams: { ...req.queryParams, ...(pageParam as Record<string, unknown>) }," in content

    def test_v3_infinite_query(self, petstore):
        content = _render(petstore, "get", "/pets", infinite_query_hook=True, library_version="v3")
        assert 'from "react-query";' in content
        assert "ReturnType<typeof listPetsQueryKey>>," in content
        assert "getNextPageParam: (lastPage: Response, allPages: Response[]) => TPageParam | undefined;" in content


class TestNameClashes:
    def test_component_named_like_module_alias(self):
        doc = parse_document({
            "openapi": "3.0.0",
            "paths": {"/things": {"get": {
                "operationId": "listThings",
                "responses": {"400": {"content": {"application/json": {
                    "schema": {"$ref": "#/components/schemas/ErrorResponse"},
                }}}},
            }}},
            "components": {"schemas": {"ErrorResponse": {
                "type": "object",
                "properties": {
                    "message": {"type": "string"},
                    "cause": {"$ref": "#/components/schemas/ErrorResponse"},
                },
            }}},
        })
        content = _render(doc, "get", "/things")
        assert "export interface ErrorResponseSchema {" in content
        assert "  cause?: ErrorResponseSchema;" in content
        assert "export type ErrorResponse = { message?: string; cause?: ErrorResponseSchema };" in content
        assert "export interface ErrorResponse " not in content
