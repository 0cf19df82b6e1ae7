import pytest

from oapicodegen.models import Schema
from oapicodegen.parameters import (
    ParameterDefinition,
    describe_parameters,
    describe_security_definition,
    filter_parameter_definition_by_type,
    find_parameter_by_name,
    is_media_type_json,
    sort_params_by_path,
)
from oapicodegen.spec import CodegenError, GenerationState, use_state


@pytest.mark.parametrize(
    "media_types, want",
    [
        ([], False),
        (["application/pdf"], False),
        (["application/pdf", "application/json"], False),
        (["application/notjson"], False),
        (["application/json"], True),
        (["application/json-patch+json"], True),
        (["application/vnd.api+json"], True),
    ],
)
def test_is_json(media_types, want):
    pd = ParameterDefinition(spec={"content": {mt: None for mt in media_types}})
    assert pd.is_json() is want


def test_is_media_type_json_ignores_parameters():
    assert is_media_type_json("application/json; charset=utf-8") is True
    assert is_media_type_json("text/plain") is False


def test_is_pass_through():
    assert ParameterDefinition(spec={}).is_pass_through() is False
    assert ParameterDefinition(spec={"content": {"application/json": {}}}).is_pass_through() is False
    assert ParameterDefinition(spec={"content": {"text/plain": {}}}).is_pass_through() is True
    two = {"content": {"text/plain": {}, "application/json": {}}}
    assert ParameterDefinition(spec=two).is_pass_through() is True


def test_is_styled():
    assert ParameterDefinition(spec={"schema": {"type": "string"}}).is_styled() is True
    assert ParameterDefinition(spec={"content": {}}).is_styled() is False


@pytest.mark.parametrize(
    "location, style, explode",
    [("path", "simple", False), ("header", "simple", False), ("query", "form", True), ("cookie", "form", True)],
)
def test_style_and_explode_defaults(location, style, explode):
    pd = ParameterDefinition(spec={"in": location})
    assert pd.style() == style
    assert pd.explode() is explode


def test_explicit_style_and_explode():
    pd = ParameterDefinition(spec={"in": "query", "style": "deepObject", "explode": False})
    assert pd.style() == "deepObject"
    assert pd.explode() is False


def test_unknown_location_raises():
    pd = ParameterDefinition(spec={"in": "body"})
    with pytest.raises(CodegenError):
        pd.style()
    with pytest.raises(CodegenError):
        pd.explode()


def test_json_tag():
    assert ParameterDefinition(param_name="id", required=True).json_tag() == '`json:"id"`'
    assert ParameterDefinition(param_name="id").json_tag() == '`json:"id,omitempty"`'


def test_go_names():
    pd = ParameterDefinition(param_name="foo_bar", spec={})
    assert pd.go_name() == "FooBar"
    assert pd.go_variable_name() == "fooBar"
    keyword = ParameterDefinition(param_name="type", spec={})
    assert keyword.go_variable_name() == "pType"
    renamed = ParameterDefinition(param_name="foo_bar", spec={"x-go-name": "Custom"})
    assert renamed.go_name() == "Custom"


def test_type_def_and_indirect_optional():
    pd = ParameterDefinition(schema=Schema(go_type="int32"))
    assert pd.type_def() == "int32"
    assert pd.indirect_optional() is True
    assert ParameterDefinition(required=True).indirect_optional() is False
    skip = ParameterDefinition(schema=Schema(go_type="json.RawMessage", skip_optional_pointer=True))
    assert skip.indirect_optional() is False


def test_describe_parameters_inline_and_ref():
    spec = {
        "components": {
            "parameters": {
                "offsetParam": {"name": "offset", "in": "query", "schema": {"type": "integer"}}
            }
        }
    }
    params = [
        {"name": "limit", "in": "query", "required": True, "schema": {"type": "integer", "format": "int32"}},
        {"$ref": "#/components/parameters/offsetParam"},
    ]
    with use_state(GenerationState(spec=spec)):
        described = describe_parameters(params, ["OpParams"])
    assert [p.param_name for p in described] == ["limit", "offset"]
    assert described[0].schema.go_type == "int32"
    assert described[0].required is True
    assert described[1].schema.go_type == "OffsetParam"
    assert described[1].location == "query"


def test_describe_parameters_without_schema_raises():
    with pytest.raises(CodegenError):
        describe_parameters([{"name": "bad", "in": "query"}], None)


def test_describe_security_definition_sorts_providers():
    defs = describe_security_definition([{"b": ["s1"], "a": []}, {"c": ["x", "y"]}])
    assert [(d.provider_name, d.scopes) for d in defs] == [("a", []), ("b", ["s1"]), ("c", ["x", "y"])]


def _params():
    return [
        ParameterDefinition(param_name="toyId", location="path"),
        ParameterDefinition(param_name="q", location="query"),
        ParameterDefinition(param_name="petId", location="path"),
    ]


def test_filter_and_find():
    params = _params()
    assert [p.param_name for p in filter_parameter_definition_by_type(params, "path")] == ["toyId", "petId"]
    assert find_parameter_by_name(params, "q").location == "query"
    assert find_parameter_by_name(params, "missing") is None


def test_sort_params_by_path():
    paths = filter_parameter_definition_by_type(_params(), "path")
    ordered = sort_params_by_path("/pets/{petId}/toys/{toyId}", paths)
    assert [p.param_name for p in ordered] == ["petId", "toyId"]


def test_sort_params_by_path_errors():
    paths = filter_parameter_definition_by_type(_params(), "path")
    with pytest.raises(CodegenError):
        sort_params_by_path("/pets/{petId}", paths)
    with pytest.raises(CodegenError):
        sort_params_by_path("/pets/{petId}/{other}", paths)