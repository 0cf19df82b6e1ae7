import pytest

from oapicodegen.bodies import RequestBodyDefinition
from oapicodegen.operation import OperationDefinition
from oapicodegen.parameters import ParameterDefinition
from oapicodegen.spec import CodegenError, GenerationState, load_spec, use_state


def _param(name, location):
    return ParameterDefinition(param_name=name, location=location, spec={"in": location})


def _op():
    return OperationDefinition(
        path_params=[_param("p", "path")],
        query_params=[_param("q", "query")],
        header_params=[_param("h", "header")],
        cookie_params=[_param("c", "cookie")],
    )


def test_params_order_excludes_path():
    op = _op()
    names = [p.param_name for p in op.params()]
    assert names == ["q", "h", "c"]


def test_all_params_ends_with_path():
    op = _op()
    names = [p.param_name for p in op.all_params()]
    assert names == ["q", "h", "c", "p"]


def test_requires_param_object():
    assert _op().requires_param_object() is True
    only_path = OperationDefinition(path_params=[_param("p", "path")])
    assert only_path.requires_param_object() is False


def test_has_body():
    assert OperationDefinition(spec={"requestBody": {"content": {}}}).has_body() is True
    assert OperationDefinition(spec={}).has_body() is False


def test_summary_as_comment_empty():
    assert OperationDefinition().summary_as_comment() == ""


def test_summary_as_comment_lines():
    lines = ["first line", "second line"]
    comment = OperationDefinition(summary="\n".join(lines) + "\n").summary_as_comment()
    out = comment.split("\n")
    assert len(out) == len(lines)
    assert all(line.startswith("// ") for line in out)
    assert [line[3:] for line in out] == lines


def test_has_masked_request_content_types():
    fixed = OperationDefinition(bodies=[RequestBodyDefinition(content_type="application/json")])
    masked = OperationDefinition(
        bodies=[
            RequestBodyDefinition(content_type="application/json"),
            RequestBodyDefinition(content_type="application/*"),
        ]
    )
    assert fixed.has_masked_request_content_types() is False
    assert masked.has_masked_request_content_types() is True


DOC = """
openapi: 3.0.1
paths: {}
components:
  schemas:
    Pet:
      type: object
      properties:
        name:
          type: string
"""


def test_response_type_definitions_inline_json():
    op = OperationDefinition(
        operation_id="GetThing",
        spec={
            "responses": {
                "200": {
                    "description": "ok",
                    "content": {"application/json": {"schema": {"type": "string"}}},
                }
            }
        },
    )
    tds = op.get_response_type_definitions()
    assert len(tds) == 1
    assert tds[0].type_name == "JSON200"
    assert tds[0].response_name == "200"
    assert tds[0].content_type_name == "application/json"
    assert tds[0].schema.go_type == "string"


def test_response_type_definitions_ref():
    doc = load_spec(DOC)
    op = OperationDefinition(
        operation_id="GetPet",
        spec={
            "responses": {
                "200": {
                    "content": {
                        "application/json": {"schema": {"$ref": "#/components/schemas/Pet"}}
                    }
                }
            }
        },
    )
    with use_state(GenerationState(spec=doc)):
        tds = op.get_response_type_definitions()
    assert len(tds) == 1
    assert tds[0].schema.ref_type == "Pet"
    assert tds[0].schema.type_decl() == "Pet"


def test_response_type_definitions_skip_unknown_content_type():
    op = OperationDefinition(
        spec={
            "responses": {
                "200": {
                    "content": {"application/octet-stream": {"schema": {"type": "string"}}}
                },
                "204": {"description": "none"},
            }
        }
    )
    assert op.get_response_type_definitions() == []


def test_response_type_definitions_sorted_by_content_type():
    op = OperationDefinition(
        spec={
            "responses": {
                "200": {
                    "content": {
                        "application/yaml": {"schema": {"type": "string"}},
                        "application/json": {"schema": {"type": "string"}},
                    }
                }
            }
        }
    )
    tds = op.get_response_type_definitions()
    assert [t.content_type_name for t in tds] == ["application/json", "application/yaml"]
    assert [t.type_name[:4] for t in tds] == ["JSON", "YAML"]


def test_response_type_definitions_error():
    op = OperationDefinition(
        operation_id="Bad",
        spec={
            "responses": {
                "200": {
                    "content": {
                        "application/json": {"schema": {"type": "number", "format": "weird"}}
                    }
                }
            }
        },
    )
    with pytest.raises(CodegenError):
        op.get_response_type_definitions()