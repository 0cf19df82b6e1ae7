"""Description of a single API operation, as consumed by the templates."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from oapicodegen.bodies import RequestBodyDefinition, ResponseDefinition
from oapicodegen.models import ResponseTypeDefinition, TypeDefinition
from oapicodegen.naming import to_camel_case
from oapicodegen.parameters import ParameterDefinition, SecurityDefinition
from oapicodegen.schemagen import generate_go_schema
from oapicodegen.spec import (
    CodegenError,
    is_go_type_reference,
    ref_path_to_go_type,
    split_ref,
)

CONTENT_TYPES_JSON = ("application/json", "text/x-json", "application/problem+json")
CONTENT_TYPES_YAML = ("application/yaml", "application/x-yaml", "text/yaml", "text/x-yaml")
CONTENT_TYPES_XML = ("application/xml", "text/xml", "application/problems+xml")


def _response_type_prefix(content_type: str) -> str:
    if content_type in CONTENT_TYPES_JSON:
        return "JSON"
    if content_type in CONTENT_TYPES_YAML:
        return "YAML"
    if content_type in CONTENT_TYPES_XML:
        return "XML"
    return ""


@dataclass
class OperationDefinition:
    """An operation of the API together with everything generated for it."""

    operation_id: str = ""
    path_params: list[ParameterDefinition] = field(default_factory=list)
    header_params: list[ParameterDefinition] = field(default_factory=list)
    query_params: list[ParameterDefinition] = field(default_factory=list)
    cookie_params: list[ParameterDefinition] = field(default_factory=list)
    type_definitions: list[TypeDefinition] = field(default_factory=list)
    security_definitions: list[SecurityDefinition] = field(default_factory=list)
    body_required: bool = False
    bodies: list[RequestBodyDefinition] = field(default_factory=list)
    responses: list[ResponseDefinition] = field(default_factory=list)
    summary: str = ""
    method: str = ""
    path: str = ""
    spec: Mapping[str, Any] = field(default_factory=dict)

    def params(self) -> list[ParameterDefinition]:
        """Return the query, header and cookie parameters, in that order."""
        return [*self.query_params, *self.header_params, *self.cookie_params]

    def all_params(self) -> list[ParameterDefinition]:
        """Return every parameter, path parameters last."""
        return [*self.params(), *self.path_params]

    def requires_param_object(self) -> bool:
        """Return whether non-path parameters must be bundled into an object."""
        return bool(self.params())

    def has_body(self) -> bool:
        """Return whether the operation declares a request body."""
        return self.spec.get("requestBody") is not None

    def summary_as_comment(self) -> str:
        """Return the summary as a multi-line Go comment."""
        if not self.summary:
            return ""
        trimmed = self.summary.removesuffix("\n")
        return "\n".join("// " + line for line in trimmed.split("\n"))

    def get_response_type_definitions(self) -> list[ResponseTypeDefinition]:
        """Return type definitions for the responses the client can decode."""
        definitions: list[ResponseTypeDefinition] = []
        responses = self.spec.get("responses") or {}
        for response_name in sorted(responses):
            _, response = split_ref(responses[response_name])
            if response is None:
                continue
            content = response.get("content") or {}
            for content_type in sorted(content):
                media = content[content_type] or {}
                schema_node = media.get("schema")
                if schema_node is None:
                    continue
                try:
                    schema = generate_go_schema(schema_node, [response_name])
                except CodegenError as exc:
                    raise CodegenError(
                        f"Unable to determine Go type for "
                        f"{self.operation_id}.{content_type}: {exc}"
                    ) from exc

                prefix = _response_type_prefix(content_type)
                if not prefix:
                    continue

                schema_ref = ""
                if isinstance(schema_node, Mapping) and isinstance(
                    schema_node.get("$ref"), str
                ):
                    schema_ref = schema_node["$ref"]
                if is_go_type_reference(schema_ref):
                    try:
                        ref_type = ref_path_to_go_type(schema_ref)
                    except CodegenError as exc:
                        raise CodegenError(
                            f"error dereferencing response Ref: {exc}"
                        ) from exc
                    schema = dataclasses.replace(schema, ref_type=ref_type)

                definitions.append(
                    ResponseTypeDefinition(
                        type_name=prefix + to_camel_case(response_name),
                        schema=schema,
                        response_name=response_name,
                        content_type_name=content_type,
                    )
                )
        return definitions

    def has_masked_request_content_types(self) -> bool:
        """Return whether any request body has a wildcard content type."""
        return any(not body.is_fixed_content_type() for body in self.bodies)