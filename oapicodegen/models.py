"""Descriptions of generated Go types, fields and enums used by the templates."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from oapicodegen.naming import (
    schema_name_to_type_name,
    string_with_type_name_to_go_comment,
    uppercase_first_character,
)
from oapicodegen.spec import CodegenError, current_state

EXT_GO_NAME = "x-go-name"
EXT_PROP_OMIT_EMPTY = "x-omitempty"
EXT_PROP_GO_JSON_IGNORE = "x-go-json-ignore"
EXT_PROP_EXTRA_TAGS = "x-oapi-codegen-extra-tags"


@dataclass
class Schema:
    """An OpenAPI schema together with the Go type that represents it."""

    go_type: str = ""
    ref_type: str = ""
    array_type: Schema | None = None
    enum_values: dict[str, str] = field(default_factory=dict)
    properties: list[Property] = field(default_factory=list)
    has_additional_properties: bool = False
    additional_properties_type: Schema | None = None
    additional_types: list[TypeDefinition] = field(default_factory=list)
    skip_optional_pointer: bool = False
    description: str = ""
    union_elements: list[UnionElement] = field(default_factory=list)
    discriminator: Discriminator | None = None
    # Declare the type as an alias (`type Foo = bool`) rather than a definition.
    define_via_alias: bool = False
    oapi_schema: Any = None

    def is_ref(self) -> bool:
        """Return whether the schema refers to a named type."""
        return self.ref_type != ""

    def type_decl(self) -> str:
        """Return the Go type to use when declaring a value of this schema."""
        return self.ref_type if self.is_ref() else self.go_type

    def add_property(self, prop: Property) -> None:
        """Add ``prop``, raising if a different property of the same name exists."""
        for existing in self.properties:
            if existing.json_field_name == prop.json_field_name and not properties_equal(
                existing, prop
            ):
                raise CodegenError(
                    f"property '{existing.json_field_name}' already exists with a different type"
                )
        self.properties.append(prop)

    def get_additional_type_defs(self) -> list[TypeDefinition]:
        """Return auxiliary type definitions of the properties, then of the schema."""
        result: list[TypeDefinition] = []
        for prop in self.properties:
            result.extend(prop.schema.get_additional_type_defs())
        result.extend(self.additional_types)
        return result


@dataclass
class Property:
    """A named field of an object schema."""

    json_field_name: str = ""
    schema: Schema = field(default_factory=Schema)
    description: str = ""
    required: bool = False
    nullable: bool = False
    read_only: bool = False
    write_only: bool = False
    needs_form_tag: bool = False
    extensions: Mapping[str, Any] = field(default_factory=dict)

    def go_field_name(self) -> str:
        """Return the Go struct field name derived from the JSON name."""
        return schema_name_to_type_name(self.json_field_name)

    def go_type_def(self) -> str:
        """Return the field's Go type, a pointer when the value may be absent."""
        type_def = self.schema.type_decl()
        disable_ro_pointer = current_state().compatibility.disable_required_read_only_as_pointer
        if not self.schema.skip_optional_pointer and (
            not self.required
            or self.nullable
            or (self.read_only and (not self.required or not disable_ro_pointer))
            or self.write_only
        ):
            type_def = "*" + type_def
        return type_def


@dataclass
class EnumDefinition:
    """Type and value information for an enum."""

    schema: Schema = field(default_factory=Schema)
    type_name: str = ""
    # Wraps each value; used to put quotes around strings.
    value_wrapper: str = ""
    prefix_type_name: bool = False

    def get_values(self) -> dict[str, str]:
        """Return the enum constant names, prefixed with the type name if needed."""
        if not self.prefix_type_name:
            return self.schema.enum_values
        return {
            self.type_name + uppercase_first_character(name): value
            for name, value in self.schema.enum_values.items()
        }


@dataclass
class Constants:
    """Constants emitted alongside generated types."""

    security_scheme_provider_names: list[str] = field(default_factory=list)
    enum_definitions: list[EnumDefinition] = field(default_factory=list)


@dataclass
class TypeDefinition:
    """A Go type definition in generated code."""

    type_name: str = ""
    json_name: str = ""
    schema: Schema = field(default_factory=Schema)

    def is_alias(self) -> bool:
        """Return whether the type is declared as an alias."""
        return (
            not current_state().compatibility.old_aliasing and self.schema.define_via_alias
        )


@dataclass
class ResponseTypeDefinition(TypeDefinition):
    """A type definition for a response body that the client unmarshals."""

    content_type_name: str = ""
    response_name: str = ""


@dataclass
class Discriminator:
    """Which property of a union value tells its concrete type."""

    mapping: dict[str, str] = field(default_factory=dict)
    property: str = ""

    def json_tag(self) -> str:
        """Return the JSON struct tag for the discriminator property."""
        return f'`json:"{self.property}"`'

    def property_name(self) -> str:
        """Return the Go name of the discriminator property."""
        return schema_name_to_type_name(self.property)


class UnionElement(str):
    """A member type of a oneOf/anyOf union, e.g. ``externalRef0.SomeType``."""

    def method(self) -> str:
        """Return the name used for the union's As/From/Merge methods."""
        return "".join(uppercase_first_character(part) for part in self.split("."))


def properties_equal(a: Property, b: Property) -> bool:
    """Return whether two properties have the same name, type and requiredness."""
    return (
        a.json_field_name == b.json_field_name
        and a.schema.type_decl() == b.schema.type_decl()
        and a.required == b.required
    )


def _ext_string(value: Any) -> str:
    if not isinstance(value, str):
        raise CodegenError(f"expected a string, got {value!r}")
    return value


def _ext_bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise CodegenError(f"expected a boolean, got {value!r}")
    return value


def _ext_tags(value: Any) -> dict[str, str]:
    if not isinstance(value, Mapping) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in value.items()
    ):
        raise CodegenError(f"expected a mapping of strings, got {value!r}")
    return dict(value)


def _extension(extensions: Mapping[str, Any], key: str, parse: Any) -> Any:
    """Return the parsed extension value, or None when absent or malformed."""
    if key not in extensions:
        return None
    try:
        return parse(extensions[key])
    except CodegenError:
        return None


def gen_fields_from_properties(props: list[Property]) -> list[str]:
    """Produce Go struct field declarations with tags for ``props``."""
    disable_ro_pointer = current_state().compatibility.disable_required_read_only_as_pointer
    fields: list[str] = []
    for index, prop in enumerate(props):
        text = ""
        ext = prop.extensions or {}

        go_field_name = _extension(ext, EXT_GO_NAME, _ext_string) or prop.go_field_name()

        if prop.description:
            if index != 0:
                text += "\n"
            text += (
                string_with_type_name_to_go_comment(prop.description, prop.go_field_name())
                + "\n"
            )

        text += f"    {go_field_name} {prop.go_type_def()}"

        omit_empty = _extension(ext, EXT_PROP_OMIT_EMPTY, _ext_bool)
        override_omit_empty = True if omit_empty is None else omit_empty

        tags: dict[str, str] = {}
        if (
            (prop.required and not prop.read_only and not prop.write_only)
            or prop.nullable
            or not override_omit_empty
            or (prop.required and prop.read_only and disable_ro_pointer)
        ):
            suffix = ""
        else:
            suffix = ",omitempty"
        tags["json"] = prop.json_field_name + suffix
        if prop.needs_form_tag:
            tags["form"] = prop.json_field_name + suffix

        if _extension(ext, EXT_PROP_GO_JSON_IGNORE, _ext_bool):
            tags["json"] = "-"

        extra = _extension(ext, EXT_PROP_EXTRA_TAGS, _ext_tags)
        if extra:
            tags.update(extra)

        text += "`" + " ".join(f'{k}:"{tags[k]}"' for k in sorted(tags)) + "`"
        fields.append(text)
    return fields


def additional_properties_type(schema: Schema) -> str:
    """Return the Go type of the schema's additional properties."""
    add_props = schema.additional_properties_type
    if add_props is None:
        return "interface{}"
    return add_props.ref_type or add_props.go_type


def gen_struct_from_schema(schema: Schema) -> str:
    """Return the Go struct declaration for an object schema."""
    parts = ["struct {"]
    parts.extend(gen_fields_from_properties(schema.properties))
    if schema.has_additional_properties:
        parts.append(
            f'AdditionalProperties map[string]{additional_properties_type(schema)} `json:"-"`'
        )
    if schema.union_elements:
        parts.append("union json.RawMessage")
    parts.append("}")
    return "\n".join(parts)


def type_definitions_equivalent(t1: TypeDefinition, t2: TypeDefinition) -> bool:
    """Return whether two definitions name the same type built from the same schema."""
    if t1.type_name != t2.type_name:
        return False
    return t1.schema.oapi_schema is t2.schema.oapi_schema