"""Collecting the operations of an OpenAPI document into definitions."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from contextlib import nullcontext
from typing import Any

from oapicodegen.bodies import generate_body_definitions, generate_response_definitions
from oapicodegen.filter import HTTP_METHODS
from oapicodegen.models import Property, Schema, TypeDefinition, gen_struct_from_schema
from oapicodegen.naming import to_camel_case, type_name_prefix
from oapicodegen.operation import OperationDefinition
from oapicodegen.parameters import (
    describe_parameters,
    describe_security_definition,
    filter_parameter_definition_by_type,
    sort_params_by_path,
)
from oapicodegen.spec import CodegenError, current_state, split_ref, use_state


def generate_default_operation_id(op_name: str, request_path: str) -> str:
    """Build an operation id such as ``GetV1FooBar`` from a method and a path."""
    if op_name == "":
        raise CodegenError("operation name cannot be an empty string")
    if request_path == "":
        raise CodegenError("request path cannot be an empty string")
    parts = [op_name.lower(), *(part for part in request_path.split("/") if part)]
    return to_camel_case("-".join(parts))


def _extensions(node: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in node.items() if key.startswith("x-")}


def _path_operations(path_item: Mapping[str, Any]) -> list[tuple[str, dict[str, Any]]]:
    found = [
        (method.upper(), dict(path_item[method]))
        for method in HTTP_METHODS
        if path_item.get(method) is not None
    ]
    return sorted(found, key=lambda pair: pair[0])


def _describe_operation(
    spec: Mapping[str, Any],
    request_path: str,
    path_item: Mapping[str, Any],
    method: str,
    op: dict[str, Any],
    global_params: list,
) -> OperationDefinition:
    if path_item.get("servers") is not None:
        op["servers"] = path_item["servers"]

    op_id = op.get("operationId") or ""
    if not op_id:
        try:
            op_id = generate_default_operation_id(method, request_path)
        except CodegenError as exc:
            raise CodegenError(
                f"error generating default OperationID for {method}/{request_path}: {exc}"
            ) from exc
    else:
        op_id = to_camel_case(op_id)
    op_id = type_name_prefix(op_id) + op_id
    op["operationId"] = op_id

    try:
        local_params = describe_parameters(op.get("parameters"), [op_id + "Params"])
    except CodegenError as exc:
        raise CodegenError(
            f"error describing global parameters for {method}/{request_path}: {exc}"
        ) from exc
    all_params = [*global_params, *local_params]

    path_params = sort_params_by_path(
        request_path, filter_parameter_definition_by_type(all_params, "path")
    )

    try:
        bodies, type_defs = generate_body_definitions(op_id, op.get("requestBody"))
    except CodegenError as exc:
        raise CodegenError(f"error generating body definitions: {exc}") from exc
    try:
        responses = generate_response_definitions(op_id, op.get("responses"))
    except CodegenError as exc:
        raise CodegenError(f"error generating response definitions: {exc}") from exc

    definition = OperationDefinition(
        operation_id=to_camel_case(op_id),
        path_params=path_params,
        header_params=filter_parameter_definition_by_type(all_params, "header"),
        query_params=filter_parameter_definition_by_type(all_params, "query"),
        cookie_params=filter_parameter_definition_by_type(all_params, "cookie"),
        summary=op.get("summary") or "",
        method=method,
        path=request_path,
        spec=op,
        bodies=bodies,
        responses=responses,
        type_definitions=list(type_defs),
    )

    # An operation's own security requirements override the document's.
    if op.get("security") is not None:
        definition.security_definitions = describe_security_definition(op["security"])
    else:
        definition.security_definitions = describe_security_definition(spec.get("security"))

    if op.get("requestBody") is not None:
        _, body = split_ref(op["requestBody"])
        definition.body_required = bool((body or {}).get("required"))

    definition.type_definitions.extend(generate_type_defs_for_operation(definition))
    return definition


def operation_definitions(spec: Mapping[str, Any]) -> list[OperationDefinition]:
    """Return definitions of every operation in ``spec``, by path then method."""
    state = current_state()
    context = (
        nullcontext(state)
        if state.spec is spec
        else use_state(dataclasses.replace(state, spec=spec))
    )
    operations: list[OperationDefinition] = []
    with context:
        paths = spec.get("paths") or {}
        for request_path in sorted(paths):
            path_item = paths[request_path] or {}
            try:
                global_params = describe_parameters(path_item.get("parameters"), None)
            except CodegenError as exc:
                raise CodegenError(
                    f"error describing global parameters for {request_path}: {exc}"
                ) from exc
            for method, op in _path_operations(path_item):
                operations.append(
                    _describe_operation(
                        spec, request_path, path_item, method, op, global_params
                    )
                )
    return operations


def generate_type_defs_for_operation(op: OperationDefinition) -> list[TypeDefinition]:
    """Return every type an operation needs: its params object and auxiliary types."""
    type_defs: list[TypeDefinition] = []
    if op.params():
        type_defs.extend(generate_params_types(op))
    for param in op.all_params():
        type_defs.extend(param.schema.get_additional_type_defs())
    for body in op.bodies:
        type_defs.extend(body.schema.get_additional_type_defs())
    return type_defs


def generate_params_types(op: OperationDefinition) -> list[TypeDefinition]:
    """Define the object holding the query, header and cookie parameters of ``op``."""
    type_defs: list[TypeDefinition] = []
    type_name = op.operation_id + "Params"
    schema = Schema()
    for param in op.params():
        param_schema = param.schema
        needs_form_tag = param.style() == "form"
        if param_schema.has_additional_properties:
            prop_ref_name = "_".join([type_name, param.go_name()])
            param_schema = dataclasses.replace(param_schema, ref_type=prop_ref_name)
            type_defs.append(TypeDefinition(type_name=prop_ref_name, schema=param.schema))
        schema.properties.append(
            Property(
                description=param.spec.get("description") or "",
                json_field_name=param.param_name,
                required=param.required,
                schema=param_schema,
                needs_form_tag=needs_form_tag,
                extensions=_extensions(param.spec),
            )
        )
    schema.description = op.spec.get("description") or ""
    schema.go_type = gen_struct_from_schema(schema)
    type_defs.append(TypeDefinition(type_name=type_name, schema=schema))
    return type_defs