import pytest

from oapicodegen.models import gen_struct_from_schema
from oapicodegen.naming import path_to_type_name, schema_name_to_type_name, string_to_go_comment
from oapicodegen.schemagen import generate_go_schema, merge_schemas, param_to_go_type
from oapicodegen.spec import CodegenError, Compatibility, GenerationState, use_state

SPEC = {
    "components": {
        "schemas": {
            "Cat": {"type": "object", "properties": {"name": {"type": "string"}}},
            "Dog": {"type": "object", "properties": {"bark": {"type": "boolean"}}},
        }
    }
}


def test_missing_schema_is_interface():
    assert generate_go_schema(None, []).go_type == "interface{}"


def test_empty_schema_is_interface_alias():
    result = generate_go_schema({}, ["Thing"])
    assert result.go_type == "interface{}"
    assert result.define_via_alias is True


def test_object_without_properties_is_map():
    assert generate_go_schema({"type": "object"}, []).go_type == "map[string]interface{}"


@pytest.mark.parametrize(
    "fmt,expected",
    [
        ("int64", "int64"),
        ("int32", "int32"),
        ("int16", "int16"),
        ("int8", "int8"),
        ("uint64", "uint64"),
        ("uint", "uint"),
        ("", "int"),
        ("whatever", "int"),
    ],
)
def test_integer_formats(fmt, expected):
    result = generate_go_schema({"type": "integer", "format": fmt}, [])
    assert result.go_type == expected
    assert result.define_via_alias is True


@pytest.mark.parametrize(
    "fmt,expected", [("double", "float64"), ("float", "float32"), ("", "float32")]
)
def test_number_formats(fmt, expected):
    assert generate_go_schema({"type": "number", "format": fmt}, []).go_type == expected


def test_invalid_number_format_raises():
    with pytest.raises(CodegenError, match="invalid number format"):
        generate_go_schema({"type": "number", "format": "decimal"}, [])


def test_boolean_with_format_raises():
    with pytest.raises(CodegenError, match="for boolean"):
        generate_go_schema({"type": "boolean", "format": "x"}, [])


@pytest.mark.parametrize(
    "fmt,expected",
    [
        ("byte", "[]byte"),
        ("email", "openapi_types.Email"),
        ("date", "openapi_types.Date"),
        ("date-time", "time.Time"),
        ("uuid", "openapi_types.UUID"),
        ("binary", "openapi_types.File"),
        ("json", "json.RawMessage"),
        ("hostname", "string"),
    ],
)
def test_string_formats(fmt, expected):
    result = generate_go_schema({"type": "string", "format": fmt}, [])
    assert result.go_type == expected
    assert result.skip_optional_pointer is (fmt == "json")


def test_unknown_type_raises():
    with pytest.raises(CodegenError, match="unhandled Schema type"):
        generate_go_schema({"type": "weird"}, [])


def test_reference_uses_type_name():
    with use_state(GenerationState(spec=SPEC)):
        result = generate_go_schema({"$ref": "#/components/schemas/Cat"}, [])
    assert result.go_type == "Cat"
    assert result.define_via_alias is True


def test_array_of_strings():
    result = generate_go_schema({"type": "array", "items": {"type": "string"}}, [])
    assert result.array_type.go_type == "string"
    assert result.go_type == "[]" + result.array_type.type_decl()


def test_object_properties_sorted_with_required():
    schema = {
        "type": "object",
        "required": ["b"],
        "properties": {"c": {"type": "string"}, "a": {"type": "integer"}, "b": {"type": "boolean"}},
    }
    result = generate_go_schema(schema, ["Obj"])
    assert [p.json_field_name for p in result.properties] == ["a", "b", "c"]
    assert [p.required for p in result.properties] == [False, True, False]
    assert result.define_via_alias is False
    assert result.go_type == gen_struct_from_schema(result)


def test_only_additional_properties_flattens_to_map():
    schema = {"type": "object", "additionalProperties": {"type": "string"}}
    result = generate_go_schema(schema, ["Dict"])
    assert result.has_additional_properties is False
    assert result.go_type == "map[string]" + result.additional_properties_type.go_type


def test_disable_flatten_keeps_struct():
    schema = {"type": "object", "additionalProperties": {"type": "string"}}
    state = GenerationState(compatibility=Compatibility(disable_flatten_additional_properties=True))
    with use_state(state):
        result = generate_go_schema(schema, ["Dict"])
    assert result.has_additional_properties is True
    assert "AdditionalProperties map[string]" in result.go_type


def test_nested_object_with_additional_properties_gets_named_type():
    schema = {
        "type": "object",
        "properties": {
            "inner": {
                "type": "object",
                "properties": {"x": {"type": "string"}},
                "additionalProperties": {"type": "integer"},
            }
        },
    }
    result = generate_go_schema(schema, ["Outer"])
    inner = result.properties[0].schema
    assert inner.ref_type == path_to_type_name(["Outer", "inner"])
    names = [td.type_name for td in result.get_additional_type_defs()]
    assert inner.ref_type in names


def test_top_level_enum_has_no_ref_type():
    result = generate_go_schema({"type": "string", "enum": ["a", "b"]}, ["Thing"])
    assert set(result.enum_values.values()) == {"a", "b"}
    assert result.define_via_alias is False
    assert result.ref_type == ""


def test_nested_enum_defines_type():
    path = ["Obj", "color"]
    result = generate_go_schema({"type": "string", "enum": ["red", "blue"]}, path)
    expected = schema_name_to_type_name(path_to_type_name(path))
    assert result.ref_type == expected
    assert result.additional_types[-1].type_name == expected
    assert result.additional_types[-1].schema.ref_type == ""


def test_enum_type_name_extension():
    schema = {"type": "string", "enum": ["x"], "x-go-type-name": "CustomColor"}
    result = generate_go_schema(schema, ["Obj", "color"])
    assert result.ref_type == "CustomColor"


def test_enum_numbers_and_bools_are_formatted():
    ints = generate_go_schema({"type": "integer", "enum": [1, 2]}, ["N"])
    assert set(ints.enum_values.values()) == {"1", "2"}
    bools = generate_go_schema({"type": "boolean", "enum": [True, False]}, ["B"])
    assert set(bools.enum_values.values()) == {"true", "false"}


def test_go_type_extension():
    result = generate_go_schema({"type": "string", "x-go-type": "mypkg.Thing"}, [])
    assert result.go_type == "mypkg.Thing"
    assert result.define_via_alias is True


def test_invalid_go_type_extension_raises():
    with pytest.raises(CodegenError, match="x-go-type"):
        generate_go_schema({"type": "string", "x-go-type": 5}, [])


def test_one_of_union_with_discriminator():
    schema = {
        "oneOf": [
            {"$ref": "#/components/schemas/Cat"},
            {"type": "object", "properties": {"z": {"type": "string"}}},
        ],
        "discriminator": {"propertyName": "kind", "mapping": {"cat": "#/components/schemas/Cat"}},
    }
    with use_state(GenerationState(spec=SPEC)):
        result = generate_go_schema(schema, ["Pet"])
    inline_name = schema_name_to_type_name(path_to_type_name(["Pet", "1"]))
    assert list(result.union_elements) == ["Cat", inline_name]
    assert result.discriminator.property == "kind"
    assert result.discriminator.mapping == {"cat": "Cat"}
    assert "union json.RawMessage" in result.go_type


def test_all_of_merges_properties():
    schema = {
        "allOf": [
            {"type": "object", "properties": {"a": {"type": "string"}}},
            {"type": "object", "properties": {"b": {"type": "integer"}}},
        ]
    }
    result = generate_go_schema(schema, ["Merged"])
    assert [p.json_field_name for p in result.properties] == ["a", "b"]
    assert result.oapi_schema is schema


def test_all_of_with_references():
    with use_state(GenerationState(spec=SPEC)):
        result = merge_schemas(
            [{"$ref": "#/components/schemas/Cat"}, {"$ref": "#/components/schemas/Dog"}],
            ["Both"],
        )
    assert [p.json_field_name for p in result.properties] == ["bark", "name"]


def test_all_of_incompatible_types_raise():
    with pytest.raises(CodegenError, match="incompatible types"):
        merge_schemas([{"type": "string"}, {"type": "integer"}], ["X"])


def test_single_all_of_matches_direct_generation():
    element = {"type": "string", "format": "uuid"}
    assert merge_schemas([element], ["X"]) == generate_go_schema(element, ["X"])


def test_param_without_schema_or_content_raises():
    with pytest.raises(CodegenError, match="has no schema or content"):
        param_to_go_type({"name": "id", "in": "path"}, [])


def test_param_with_schema():
    param = {"name": "id", "schema": {"type": "integer", "format": "int64"}}
    assert param_to_go_type(param, []).go_type == "int64"


def test_param_with_several_content_types_is_string():
    param = {
        "name": "q",
        "description": "a query",
        "content": {"application/json": {}, "text/plain": {}},
    }
    result = param_to_go_type(param, [])
    assert result.go_type == "string"
    assert result.description == string_to_go_comment("a query")


def test_param_with_non_json_content_is_string():
    param = {"name": "q", "content": {"text/plain": {"schema": {"type": "integer"}}}}
    assert param_to_go_type(param, []).go_type == "string"


def test_param_with_json_content_uses_schema():
    param = {"name": "q", "content": {"application/json": {"schema": {"type": "boolean"}}}}
    assert param_to_go_type(param, []).go_type == "bool"