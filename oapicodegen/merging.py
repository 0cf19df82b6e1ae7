"""Flattening of ``allOf`` schemas into a single OpenAPI schema."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from oapicodegen.spec import CodegenError, schema_has_additional_properties, split_ref

_FLAGS = (
    ("uniqueItems", "UniqueItems"),
    ("exclusiveMinimum", "ExclusiveMin"),
    ("exclusiveMaximum", "ExclusiveMax"),
    ("nullable", "Nullable"),
    ("readOnly", "ReadOnly"),
    ("writeOnly", "WriteOnly"),
    ("allowEmptyValue", "AllowEmptyValue"),
)


def value_with_propagated_ref(node: Any) -> dict[str, Any]:
    """Return a copy of the schema behind ``node``.

    When ``node`` is a reference into another document, local references of its
    properties are rewritten to point into that document.
    """
    ref, value = split_ref(node)
    if not ref or ref.startswith("#"):
        if value is None:
            raise CodegenError(f"unresolved reference: {ref}")
        return dict(value)

    parts = ref.split("#")
    if len(parts) != 2:
        raise CodegenError(f"unsupported reference: {ref}")
    remote_component = parts[0]
    if value is None:
        raise CodegenError(f"unresolved reference: {ref}")

    schema = dict(value)
    properties = schema.get("properties")
    if properties:
        rewritten = {}
        for name, prop in properties.items():
            prop_ref = prop.get("$ref") if isinstance(prop, Mapping) else None
            if isinstance(prop_ref, str) and prop_ref.startswith("#"):
                prop = {**prop, "$ref": remote_component + prop_ref}
            rewritten[name] = prop
        schema["properties"] = rewritten
    return schema


def merge_all_of(all_of: Iterable[Any]) -> dict[str, Any]:
    """Merge every schema of an ``allOf`` list into one."""
    schema: dict[str, Any] = {}
    for node in all_of:
        _, value = split_ref(node)
        if value is None:
            raise CodegenError("error merging schemas for AllOf: unresolved schema")
        try:
            schema = merge_openapi_schemas(schema, value)
        except CodegenError as exc:
            raise CodegenError(f"error merging schemas for AllOf: {exc}") from exc
    return schema


def merge_openapi_schemas(s1: Mapping[str, Any], s2: Mapping[str, Any]) -> dict[str, Any]:
    """Merge two OpenAPI schemas into one whose fields are composed from both."""
    result: dict[str, Any] = {}
    for source in (s1, s2):
        for key, value in source.items():
            if key.startswith("x-"):
                result[key] = value

    one_of = list(s1.get("oneOf") or []) + list(s2.get("oneOf") or [])
    if one_of:
        result["oneOf"] = one_of

    # allOf is made transitive, so nested allOf lists end up as one flat object.
    if s1.get("allOf") is not None:
        try:
            s1 = merge_all_of(s1["allOf"])
        except CodegenError as exc:
            raise CodegenError("error transitive merging AllOf on schema 1") from exc
    if s2.get("allOf") is not None:
        try:
            s2 = merge_all_of(s2["allOf"])
        except CodegenError as exc:
            raise CodegenError("error transitive merging AllOf on schema 2") from exc

    all_of = list(s1.get("allOf") or []) + list(s2.get("allOf") or [])
    if all_of:
        result["allOf"] = all_of

    type1, type2 = s1.get("type") or "", s2.get("type") or ""
    if type1 and type2 and type1 != type2:
        raise CodegenError("can not merge incompatible types")
    if type1:
        result["type"] = type1

    format1, format2 = s1.get("format") or "", s2.get("format") or ""
    if format1 != format2:
        raise CodegenError("can not merge incompatible formats")
    if format1:
        result["format"] = format1

    enum = list(s1.get("enum") or []) + list(s2.get("enum") or [])
    if enum:
        result["enum"] = enum

    if s1.get("default") is not None or s2.get("default") is not None:
        raise CodegenError("merging two sets of defaults is undefined")

    for key, label in _FLAGS:
        flag1, flag2 = bool(s1.get(key)), bool(s2.get(key))
        if flag1 != flag2:
            raise CodegenError(f"merging two schemas with different {label}")
        if flag1:
            result[key] = True

    required = list(s1.get("required") or []) + list(s2.get("required") or [])
    if required:
        result["required"] = required

    result["properties"] = {**(s1.get("properties") or {}), **(s2.get("properties") or {})}

    if schema_has_additional_properties(s1) and schema_has_additional_properties(s2):
        raise CodegenError(
            "merging two schemas with additional properties, this is unhandled"
        )
    for source in (s1, s2):
        additional = source.get("additionalProperties")
        if isinstance(additional, Mapping):
            result["additionalProperties"] = additional

    if s1.get("discriminator") is not None or s2.get("discriminator") is not None:
        raise CodegenError("merging two schemas with discriminators is not supported")

    return result