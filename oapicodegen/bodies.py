"""Descriptions of request bodies and responses of an operation."""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from oapicodegen.models import Schema, TypeDefinition
from oapicodegen.naming import schema_name_to_type_name
from oapicodegen.parameters import is_media_type_json
from oapicodegen.schemagen import generate_go_schema
from oapicodegen.spec import (
    CodegenError,
    is_go_type_reference,
    ref_path_to_go_type,
    split_ref,
)

_STATUS_CODE_RE = re.compile(r"[+-]?[0-9]+")


@dataclass
class RequestBodyEncoding:
    """Encoding options of one form-data field."""

    content_type: str = ""
    style: str = ""
    explode: bool | None = None


@dataclass
class RequestBodyDefinition:
    """A request body of one content type."""

    required: bool = False
    schema: Schema = field(default_factory=Schema)
    # Tag used in type names, e.g. "JSON" gives "JSONBody".
    name_tag: str = ""
    content_type: str = ""
    # The default body gets no suffix on generated function names.
    default: bool = False
    encoding: dict[str, RequestBodyEncoding] | None = None

    def type_def(self, op_id: str) -> TypeDefinition:
        """Return the type definition of this body for operation ``op_id``."""
        return TypeDefinition(
            type_name=f"{op_id}{self.name_tag}RequestBody", schema=self.schema
        )

    def custom_type(self) -> bool:
        """Return whether the body is an inline type rather than a predefined one."""
        return self.schema.ref_type == ""

    def suffix(self) -> str:
        """Return the suffix for functions handling this body, empty for the default."""
        if self.default:
            return ""
        return "With" + self.name_tag + "Body"

    def is_supported_by_client(self) -> bool:
        """Return whether the client gets a typed method for this body."""
        return self.name_tag in ("JSON", "Formdata", "Text")

    def is_supported(self) -> bool:
        """Return whether the server decodes this body rather than passing a reader."""
        return self.name_tag != ""

    def is_fixed_content_type(self) -> bool:
        """Return whether the content type has no wildcard."""
        return "*" not in self.content_type


@dataclass
class ResponseContentDefinition:
    """One content type of a response."""

    schema: Schema = field(default_factory=Schema)
    content_type: str = ""
    name_tag: str = ""

    def type_def(self, op_id: str, status_code: int) -> TypeDefinition:
        """Return the type definition of this content for an operation and status."""
        return TypeDefinition(
            type_name=f"{op_id}{status_code}{self.name_tag_or_content_type()}Response",
            schema=self.schema,
        )

    def is_supported(self) -> bool:
        """Return whether this content type is decoded."""
        return self.name_tag != ""

    def has_fixed_content_type(self) -> bool:
        """Return whether the content type has no wildcard."""
        return "*" not in self.content_type

    def name_tag_or_content_type(self) -> str:
        """Return the name tag, or a type name derived from the content type."""
        if self.name_tag:
            return self.name_tag
        return schema_name_to_type_name(self.content_type)


@dataclass
class ResponseHeaderDefinition:
    """A header sent with a response."""

    name: str = ""
    go_name: str = ""
    schema: Schema = field(default_factory=Schema)


@dataclass
class ResponseDefinition:
    """A response of an operation for one status code."""

    status_code: str = ""
    description: str = ""
    contents: list[ResponseContentDefinition] = field(default_factory=list)
    headers: list[ResponseHeaderDefinition] = field(default_factory=list)
    ref: str = ""

    def has_fixed_status_code(self) -> bool:
        """Return whether the status code is a number rather than e.g. ``default``."""
        return _STATUS_CODE_RE.fullmatch(self.status_code) is not None

    def go_name(self) -> str:
        """Return the Go name derived from the status code."""
        return schema_name_to_type_name(self.status_code)

    def is_ref(self) -> bool:
        """Return whether the response refers to a predefined response type."""
        return self.ref != ""


def _request_tag(content_type: str) -> str:
    if is_media_type_json(content_type):
        return "JSON"
    if content_type.startswith("multipart/"):
        return "Multipart"
    if content_type == "application/x-www-form-urlencoded":
        return "Formdata"
    if content_type == "text/plain":
        return "Text"
    return ""


def _response_tag(content_type: str) -> str:
    if is_media_type_json(content_type):
        return "JSON"
    if content_type == "application/x-www-form-urlencoded":
        return "Formdata"
    if content_type.startswith("multipart/"):
        return "Multipart"
    if content_type == "text/plain":
        return "Text"
    return ""


def _schema_ref(node: Any) -> str:
    if isinstance(node, Mapping) and isinstance(node.get("$ref"), str):
        return node["$ref"]
    return ""


def _encodings(raw: Mapping[str, Any] | None) -> dict[str, RequestBodyEncoding] | None:
    if not raw:
        return None
    result: dict[str, RequestBodyEncoding] = {}
    for name, options in raw.items():
        options = options or {}
        explode = options.get("explode")
        result[name] = RequestBodyEncoding(
            content_type=options.get("contentType") or "",
            style=options.get("style") or "",
            explode=None if explode is None else bool(explode),
        )
    return result


def generate_body_definitions(
    operation_id: str, body: Any
) -> tuple[list[RequestBodyDefinition], list[TypeDefinition]]:
    """Describe the request bodies of an operation and the types they need."""
    if body is None:
        return [], []
    ref, value = split_ref(body)
    if value is None:
        raise CodegenError(f"unresolved reference: {ref}")

    required = bool(value.get("required"))
    content = value.get("content") or {}
    bodies: list[RequestBodyDefinition] = []
    type_defs: list[TypeDefinition] = []

    for content_type in sorted(content):
        media = content[content_type] or {}
        tag = _request_tag(content_type)
        if not tag:
            bodies.append(RequestBodyDefinition(required=required, content_type=content_type))
            continue

        body_type_name = operation_id + tag + "Body"
        schema_node = media.get("schema")
        try:
            body_schema = generate_go_schema(schema_node, [body_type_name])
        except CodegenError as exc:
            raise CodegenError(f"error generating request body definition: {exc}") from exc

        schema_ref = _schema_ref(schema_node)
        if is_go_type_reference(schema_ref):
            try:
                ref_type = ref_path_to_go_type(schema_ref)
            except CodegenError as exc:
                raise CodegenError(
                    f"error turning reference ({schema_ref}) into a Go type: {exc}"
                ) from exc
            body_schema = dataclasses.replace(body_schema, ref_type=ref_type)

        # An inline body gets a named type so it is easy to marshal.
        if body_schema.ref_type == "":
            type_defs.append(
                TypeDefinition(type_name=body_type_name, schema=dataclasses.replace(body_schema))
            )
            body_schema = dataclasses.replace(body_schema, ref_type=body_type_name)

        bodies.append(
            RequestBodyDefinition(
                required=required,
                schema=body_schema,
                name_tag=tag,
                content_type=content_type,
                default=tag == "JSON",
                encoding=_encodings(media.get("encoding")),
            )
        )

    bodies.sort(key=lambda definition: definition.content_type)
    return bodies, type_defs


def generate_response_definitions(
    operation_id: str, responses: Mapping[str, Any] | None
) -> list[ResponseDefinition]:
    """Describe the responses of an operation, in status code order."""
    responses = responses or {}
    definitions: list[ResponseDefinition] = []
    # Only the first status code referring to a response may use its type,
    # otherwise the generated type switch would be ambiguous.
    used_refs: set[str] = set()

    for status_code in sorted(responses):
        node = responses[status_code]
        if node is None:
            continue
        ref, response = split_ref(node)
        if response is None:
            raise CodegenError(f"unresolved reference: {ref}")

        contents: list[ResponseContentDefinition] = []
        content = response.get("content") or {}
        for content_type in sorted(content):
            media = content[content_type] or {}
            tag = _response_tag(content_type)
            if not tag:
                contents.append(ResponseContentDefinition(content_type=content_type))
                continue
            type_name = operation_id + status_code + tag + "Response"
            try:
                schema = generate_go_schema(media.get("schema"), [type_name])
            except CodegenError as exc:
                raise CodegenError(
                    f"error generating request body definition: {exc}"
                ) from exc
            contents.append(
                ResponseContentDefinition(content_type=content_type, name_tag=tag, schema=schema)
            )

        headers: list[ResponseHeaderDefinition] = []
        header_nodes = response.get("headers") or {}
        for header_name in sorted(header_nodes):
            header_ref, header = split_ref(header_nodes[header_name])
            if header is None:
                raise CodegenError(f"unresolved reference: {header_ref}")
            try:
                schema = generate_go_schema(header.get("schema"), [])
            except CodegenError as exc:
                raise CodegenError(
                    f"error generating response header definition: {exc}"
                ) from exc
            headers.append(
                ResponseHeaderDefinition(
                    name=header_name,
                    go_name=schema_name_to_type_name(header_name),
                    schema=schema,
                )
            )

        definition = ResponseDefinition(
            status_code=status_code,
            description=response.get("description") or "",
            contents=contents,
            headers=headers,
        )
        if is_go_type_reference(ref):
            try:
                ref_type = ref_path_to_go_type(ref)
            except CodegenError as exc:
                raise CodegenError(
                    f"error turning reference ({ref}) into a Go type: {exc}"
                ) from exc
            if ref_type not in used_refs:
                definition.ref = ref_type
                used_refs.add(ref_type)
        definitions.append(definition)

    return definitions