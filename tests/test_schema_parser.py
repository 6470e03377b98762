from oprq.parser.base import (
    ArrayNode,
    CompositeNode,
    ObjectNode,
    PrimitiveNode,
    ReferenceNode,
    UnknownNode,
)
from oprq.parser.schema import parse_schema


class TestPrimitives:
    def test_string_with_format(self):
        node = parse_schema({"type": "string", "format": "date-time"})
        assert isinstance(node, PrimitiveNode)
        assert node.type_name == "string"
        assert node.format == "date-time"
        assert node.enum is None

    def test_enum_values_are_stringified(self):
        node = parse_schema({"type": "string", "enum": ["a", 1, None]})
        assert node.enum == ("a", "1")
        assert node.nullable is True

    def test_boolean_enum_values_use_json_spelling(self):
        node = parse_schema({"type": "string", "enum": [True, False]})
        assert node.enum == ("true", "false")

    def test_duplicate_enum_values_collapse(self):
        node = parse_schema({"type": "string", "enum": ["a", "b", "a"]})
        assert node.enum == ("a", "b")

    def test_openapi_31_null_type_list(self):
        node = parse_schema({"type": ["integer", "null"]})
        assert isinstance(node, PrimitiveNode)
        assert node.type_name == "integer"
        assert node.nullable is True


class TestStructures:
    def test_object_keeps_property_order_and_required(self):
        node = parse_schema({
            "type": "object",
            "required": ["b"],
            "properties": {"b": {"type": "string"}, "a": {"type": "integer"}},
        })
        assert isinstance(node, ObjectNode)
        assert list(node.properties) == ["b", "a"]
        assert node.required == frozenset({"b"})
        assert node.additional_properties is None

    def test_additional_properties_variants(self):
        assert parse_schema({"type": "object", "additionalProperties": True}).additional_properties is True
        schema_valued = parse_schema({"type": "object", "additionalProperties": {"type": "string"}})
        assert isinstance(schema_valued.additional_properties, PrimitiveNode)

    def test_untyped_properties_imply_object(self):
        assert isinstance(parse_schema({"properties": {"a": {}}}), ObjectNode)

    def test_array_without_items(self):
        node = parse_schema({"type": "array"})
        assert isinstance(node, ArrayNode)
        assert node.items is None

    def test_ref_wins_over_siblings(self):
        node = parse_schema({"$ref": "#/components/schemas/Pet", "type": "object"})
        assert isinstance(node, ReferenceNode)
        assert node.target_name == "Pet"

    def test_external_ref_has_no_target(self):
        node = parse_schema({"$ref": "other.yaml#/Pet"})
        assert node.target_name is None

    def test_composites(self):
        node = parse_schema({"oneOf": [{"type": "string"}, {"type": "integer"}]})
        assert isinstance(node, CompositeNode)
        assert node.kind == "one"
        assert len(node.members) == 2


class TestMalformed:
    def test_non_dict_is_unknown(self):
        assert isinstance(parse_schema("string"), UnknownNode)
        assert isinstance(parse_schema(None), UnknownNode)

    def test_unrecognized_type_is_unknown(self):
        assert isinstance(parse_schema({"type": "file"}), UnknownNode)

    def test_untyped_nullable(self):
        node = parse_schema({"nullable": True})
        assert isinstance(node, UnknownNode)
        assert node.nullable is True
