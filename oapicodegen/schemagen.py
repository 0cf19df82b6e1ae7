"""Turning OpenAPI schemas into descriptions of Go types."""

from __future__ import annotations

import dataclasses
import math
from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal
from typing import Any

from oapicodegen.merging import merge_openapi_schemas, value_with_propagated_ref
from oapicodegen.models import (
    Discriminator,
    Property,
    Schema,
    TypeDefinition,
    UnionElement,
    additional_properties_type,
    gen_struct_from_schema,
)
from oapicodegen.naming import (
    path_to_type_name,
    sanitize_enum_names,
    schema_name_to_type_name,
    string_to_go_comment,
    to_camel_case,
)
from oapicodegen.spec import (
    CodegenError,
    current_state,
    is_go_type_reference,
    ref_path_to_go_type,
    schema_has_additional_properties,
    split_ref,
)

EXT_PROP_GO_TYPE = "x-go-type"
EXT_GO_TYPE_NAME = "x-go-type-name"

_INTEGER_FORMATS = frozenset(
    {"int64", "int32", "int16", "int8", "int", "uint64", "uint32", "uint16", "uint8", "uint"}
)

_STRING_FORMATS = {
    "byte": "[]byte",
    "email": "openapi_types.Email",
    "date": "openapi_types.Date",
    "date-time": "time.Time",
    "json": "json.RawMessage",
    "uuid": "openapi_types.UUID",
    "binary": "openapi_types.File",
}


def _extensions(schema: Mapping[str, Any] | None) -> dict[str, Any]:
    if not schema:
        return {}
    return {key: value for key, value in schema.items() if key.startswith("x-")}


def _ext_string(value: Any) -> str:
    if not isinstance(value, str):
        raise CodegenError(f"expected a string, got {value!r}")
    return value


def _format_float(value: float) -> str:
    """Format a number the way a shortest-precision %v would."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    _, digit_tuple, exponent = Decimal(repr(abs(value))).as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    stripped = digits.rstrip("0")
    exponent += len(digits) - len(stripped)
    digits = stripped or "0"
    point = len(digits) + exponent
    exp = point - 1
    if exp < -4 or exp >= 6:
        mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        exp_sign = "-" if exp < 0 else "+"
        return f"{sign}{mantissa}e{exp_sign}{abs(exp):02d}"
    if point <= 0:
        return f"{sign}0.{'0' * -point}{digits}"
    if point >= len(digits):
        return sign + digits + "0" * (point - len(digits))
    return f"{sign}{digits[:point]}.{digits[point:]}"


def _format_enum_value(value: Any) -> str:
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return _format_float(float(value))
    return str(value)


def _with_type_definition(
    schema: Schema, type_name: str, json_name: str
) -> Schema:
    """Register a named type for ``schema`` and return the schema referring to it."""
    type_def = TypeDefinition(
        type_name=type_name, json_name=json_name, schema=dataclasses.replace(schema)
    )
    return dataclasses.replace(
        schema,
        additional_types=[*schema.additional_types, type_def],
        ref_type=type_name,
    )


def _needs_named_type(schema: Schema) -> bool:
    return (schema.has_additional_properties or bool(schema.union_elements)) and not schema.ref_type


def generate_go_schema(node: Any, path: Sequence[str] | None) -> Schema:
    """Describe the Go type for the schema (or reference) ``node`` found at ``path``."""
    path = list(path or [])
    # A missing schema, e.g. an array without items, still yields valid Go.
    if node is None:
        return Schema(go_type="interface{}")

    ref, schema = split_ref(node)

    if is_go_type_reference(ref):
        try:
            ref_type = ref_path_to_go_type(ref)
        except CodegenError as exc:
            raise CodegenError(
                f"error turning reference ({ref}) into a Go type: {exc}"
            ) from exc
        description = (schema or {}).get("description") or ""
        return Schema(go_type=ref_type, description=description, define_via_alias=True)

    if schema is None:
        raise CodegenError(f"unresolved reference: {ref}")

    description = schema.get("description") or ""

    if schema.get("allOf") is not None:
        try:
            merged = merge_schemas(schema["allOf"], path)
        except CodegenError as exc:
            raise CodegenError(f"error merging schemas: {exc}") from exc
        merged.oapi_schema = schema
        return merged

    if EXT_PROP_GO_TYPE in schema:
        try:
            type_name = _ext_string(schema[EXT_PROP_GO_TYPE])
        except CodegenError as exc:
            raise CodegenError(f'invalid value for "{EXT_PROP_GO_TYPE}": {exc}') from exc
        return Schema(
            go_type=type_name,
            description=description,
            oapi_schema=schema,
            define_via_alias=True,
        )

    schema_type = schema.get("type") or ""
    if schema_type in ("", "object"):
        return _object_schema(schema, schema_type, path, description)

    if schema.get("enum"):
        return _enum_schema(schema, path, description)

    try:
        primitive = _primitive_go_type(schema, path)
    except CodegenError as exc:
        raise CodegenError(f"error resolving primitive type: {exc}") from exc
    return dataclasses.replace(primitive, description=description, oapi_schema=schema)


def _object_schema(
    schema: Mapping[str, Any], schema_type: str, path: list[str], description: str
) -> Schema:
    properties = schema.get("properties") or {}
    has_additional = schema_has_additional_properties(schema)
    any_of = schema.get("anyOf")
    one_of = schema.get("oneOf")
    out = Schema(description=description, oapi_schema=schema)

    if not properties and not has_additional and any_of is None and one_of is None:
        out.go_type = "map[string]interface{}" if schema_type == "object" else "interface{}"
        out.define_via_alias = True
        return out

    out.define_via_alias = False
    out.has_additional_properties = has_additional
    out.additional_properties_type = Schema(go_type="interface{}")

    additional = schema.get("additionalProperties")
    if isinstance(additional, Mapping):
        try:
            additional_schema = generate_go_schema(additional, path)
        except CodegenError as exc:
            raise CodegenError(
                f"error generating type for additional properties: {exc}"
            ) from exc
        if additional_schema.has_additional_properties or additional_schema.union_elements:
            extended = [*path, "AdditionalProperties"]
            additional_schema = _with_type_definition(
                additional_schema, path_to_type_name(extended), ".".join(extended)
            )
        out.additional_properties_type = additional_schema
        out.additional_types = [*out.additional_types, *additional_schema.additional_types]

    compatibility = current_state().compatibility
    if (
        not compatibility.disable_flatten_additional_properties
        and not properties
        and any_of is None
        and one_of is None
    ):
        # A plain dictionary: no custom marshaling needed.
        out.has_additional_properties = False
        out.go_type = f"map[string]{additional_properties_type(out)}"
        return out

    required_names = list(schema.get("required") or [])
    for name in sorted(properties):
        prop_node = properties[name]
        property_path = [*path, name]
        try:
            prop_schema = generate_go_schema(prop_node, property_path)
        except CodegenError as exc:
            raise CodegenError(
                f"error generating Go schema for property '{name}': {exc}"
            ) from exc

        if _needs_named_type(prop_schema):
            type_name = path_to_type_name(property_path)
            json_name = ".".join(to_camel_case(part) for part in property_path)
            prop_schema = _with_type_definition(prop_schema, type_name, json_name)

        _, prop_value = split_ref(prop_node)
        prop_value = prop_value or {}
        out.properties.append(
            Property(
                json_field_name=name,
                schema=prop_schema,
                required=name in required_names,
                description=prop_value.get("description") or "",
                nullable=bool(prop_value.get("nullable")),
                read_only=bool(prop_value.get("readOnly")),
                write_only=bool(prop_value.get("writeOnly")),
                extensions=_extensions(prop_value),
            )
        )

    discriminator = schema.get("discriminator")
    if any_of is not None:
        try:
            _generate_union(out, any_of, discriminator, path)
        except CodegenError as exc:
            raise CodegenError(f"error generating type for anyOf: {exc}") from exc
    if one_of is not None:
        try:
            _generate_union(out, one_of, discriminator, path)
        except CodegenError as exc:
            raise CodegenError(f"error generating type for oneOf: {exc}") from exc

    out.go_type = gen_struct_from_schema(out)
    return out


def _enum_schema(schema: Mapping[str, Any], path: list[str], description: str) -> Schema:
    try:
        primitive = _primitive_go_type(schema, path)
    except CodegenError as exc:
        raise CodegenError(f"error resolving primitive type: {exc}") from exc
    # Enums are always distinct types so their values are not interchangeable.
    out = dataclasses.replace(
        primitive, description=description, oapi_schema=schema, define_via_alias=False
    )

    values = [_format_enum_value(value) for value in schema["enum"]]
    old_conflicts = current_state().compatibility.old_enum_conflicts
    enum_values: dict[str, str] = {}
    for key, value in sanitize_enum_names(values).items():
        if old_conflicts:
            enum_name = "Empty" if value == "" else key
            enum_values[schema_name_to_type_name(path_to_type_name([*path, enum_name]))] = value
        else:
            enum_values[schema_name_to_type_name(key)] = value
    out.enum_values = enum_values

    if len(path) > 1:
        if EXT_GO_TYPE_NAME in schema:
            try:
                type_name = _ext_string(schema[EXT_GO_TYPE_NAME])
            except CodegenError as exc:
                raise CodegenError(f'invalid value for "{EXT_GO_TYPE_NAME}": {exc}') from exc
            json_name = ".".join(path)
        else:
            type_name = schema_name_to_type_name(path_to_type_name(path))
            json_name = ".".join(to_camel_case(part) for part in path)
        out = _with_type_definition(out, type_name, json_name)
    return out


def _primitive_go_type(schema: Mapping[str, Any], path: list[str]) -> Schema:
    """Describe the Go type of a non-object schema."""
    fmt = schema.get("format") or ""
    schema_type = schema.get("type") or ""

    if schema_type == "array":
        try:
            array_type = generate_go_schema(schema.get("items"), path)
        except CodegenError as exc:
            raise CodegenError(f"error generating type for array: {exc}") from exc
        if _needs_named_type(array_type):
            extended = [*path, "Item"]
            array_type = _with_type_definition(
                array_type, path_to_type_name(extended), ".".join(extended)
            )
        return Schema(
            go_type="[]" + array_type.type_decl(),
            array_type=array_type,
            additional_types=list(array_type.additional_types),
            properties=list(array_type.properties),
            define_via_alias=True,
        )
    if schema_type == "integer":
        return Schema(go_type=fmt if fmt in _INTEGER_FORMATS else "int", define_via_alias=True)
    if schema_type == "number":
        if fmt == "double":
            return Schema(go_type="float64", define_via_alias=True)
        if fmt in ("float", ""):
            return Schema(go_type="float32", define_via_alias=True)
        raise CodegenError(f"invalid number format: {fmt}")
    if schema_type == "boolean":
        if fmt:
            raise CodegenError(f"invalid format ({fmt}) for boolean")
        return Schema(go_type="bool", define_via_alias=True)
    if schema_type == "string":
        return Schema(
            go_type=_STRING_FORMATS.get(fmt, "string"),
            skip_optional_pointer=fmt == "json",
            define_via_alias=True,
        )
    raise CodegenError(f"unhandled Schema type: {schema_type}")


def _generate_union(
    out: Schema,
    elements: Iterable[Any],
    discriminator: Mapping[str, Any] | None,
    path: list[str],
) -> None:
    mapping: dict[str, str] = {}
    if discriminator is not None:
        mapping = dict(discriminator.get("mapping") or {})
        out.discriminator = Discriminator(
            property=discriminator.get("propertyName") or "", mapping={}
        )

    for index, element in enumerate(elements):
        element_schema = generate_go_schema(element, path)
        element_ref = element.get("$ref", "") if isinstance(element, Mapping) else ""

        if not element_ref:
            type_def = TypeDefinition(
                schema=element_schema,
                type_name=schema_name_to_type_name(path_to_type_name([*path, str(index)])),
            )
            out.additional_types.append(type_def)
            element_schema = dataclasses.replace(element_schema, go_type=type_def.type_name)

        if out.discriminator is not None:
            for key, target in mapping.items():
                if target == element_ref:
                    out.discriminator.mapping[key] = element_schema.go_type
                    break
        out.union_elements.append(UnionElement(element_schema.go_type))


def merge_schemas(all_of: Sequence[Any], path: Sequence[str] | None) -> Schema:
    """Merge every schema of an ``allOf`` into one and describe its Go type."""
    all_of = list(all_of)
    path = list(path or [])
    if len(all_of) == 1:
        return generate_go_schema(all_of[0], path)

    schema = value_with_propagated_ref(all_of[0])
    for node in all_of[1:]:
        other = value_with_propagated_ref(node)
        try:
            schema = merge_openapi_schemas(schema, other)
        except CodegenError as exc:
            raise CodegenError(f"error merging schemas for AllOf: {exc}") from exc
    return generate_go_schema(schema, path)


def param_to_go_type(param: Mapping[str, Any], path: Sequence[str] | None) -> Schema:
    """Describe the Go type of a parameter from its schema or its content."""
    content = param.get("content")
    schema = param.get("schema")
    if content is None and schema is None:
        raise CodegenError(f"parameter '{param.get('name', '')}' has no schema or content")

    if schema is not None:
        return generate_go_schema(schema, path)

    description = string_to_go_comment(param.get("description") or "")
    # Several media types cannot be decoded, so the raw string is passed on.
    if len(content) > 1 or "application/json" not in content:
        return Schema(go_type="string", description=description)

    media_type = content["application/json"] or {}
    return generate_go_schema(media_type.get("schema"), path)