from pathlib import Path
from unittest.mock import MagicMock, patch

import httpx
import pytest

from oprq.parser.base import DocumentError, OperationNotFoundError, PrimitiveNode
from oprq.parser.openapi import find_operation, list_operations, load_document, parse_document

FIXTURES = Path(__file__).parent / "fixtures"


class TestLoadDocument:
    def test_load_petstore(self):
        doc = load_document(FIXTURES / "petstore.yaml")
        assert doc.openapi == "3.0.3"
        assert doc.title == "Petstore"
        assert set(doc.components.schemas) == {"Pet", "NewPet", "PetPage", "Error", "Order"}

    def test_rejects_non_openapi(self, tmp_path):
        f = tmp_path / "doc.yaml"
        f.write_text("hello: world\n")
        with pytest.raises(DocumentError):
            load_document(f)

    def test_missing_file(self, tmp_path):
        with pytest.raises(DocumentError):
            load_document(tmp_path / "missing.yaml")

    def test_swagger_documents_are_accepted(self):
        doc = parse_document({"swagger": "2.0", "paths": {}})
        assert doc.openapi == "2.0"

    @patch("oprq.parser.openapi.httpx.get")
    def test_load_from_url(self, mock_get):
        response = MagicMock()
        response.text = '{"openapi": "3.1.0", "info": {"title": "Remote"}, "paths": {}}'
        mock_get.return_value = response

        doc = load_document("https://example.com/openapi.json")

        assert doc.title == "Remote"
        mock_get.assert_called_once()

    @patch("oprq.parser.openapi.httpx.get", side_effect=httpx.ConnectError("boom"))
    def test_url_failure_is_document_error(self, _mock_get):
        with pytest.raises(DocumentError):
            load_document("https://example.com/openapi.json")


class TestOperations:
    def test_list_operations(self):
        doc = load_document(FIXTURES / "petstore.yaml")
        entries = list_operations(doc)
        assert [(e.method, e.path) for e in entries] == [
            ("get", "/pets"),
            ("post", "/pets"),
            ("get", "/pets/{petId}"),
            ("delete", "/pets/{petId}"),
            ("get", "/users/{userId}/orders"),
            ("get", "/health"),
        ]

    def test_find_operation_is_case_insensitive_on_method(self):
        doc = load_document(FIXTURES / "petstore.yaml")
        entry = find_operation(doc, "GET", "/pets")
        assert entry.method == "get"
        assert entry.operation.operation_id == "listPets"

    def test_missing_operation_raises(self):
        doc = load_document(FIXTURES / "petstore.yaml")
        with pytest.raises(OperationNotFoundError):
            find_operation(doc, "put", "/pets")

    def test_component_refs_are_dereferenced(self):
        doc = load_document(FIXTURES / "petstore.yaml")
        entry = find_operation(doc, "get", "/pets/{petId}")
        (param,) = entry.path_parameters
        assert param.name == "petId"
        assert param.location == "path"
        assert isinstance(param.schema_node, PrimitiveNode)

        create = find_operation(doc, "post", "/pets")
        assert create.operation.responses["400"].description == "Bad request"

    def test_status_codes_are_strings(self):
        doc = load_document(FIXTURES / "petstore.yaml")
        create = find_operation(doc, "post", "/pets")
        assert set(create.operation.responses) == {"201", "400"}
        get_pet = find_operation(doc, "get", "/pets/{petId}")
        assert "5XX" in get_pet.operation.responses
