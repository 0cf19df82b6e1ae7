"""Descriptions of operation parameters and security requirements."""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from oapicodegen.models import Schema
from oapicodegen.naming import (
    is_go_keyword,
    lowercase_first_character,
    ordered_params_from_uri,
    schema_name_to_type_name,
    uppercase_first_character,
)
from oapicodegen.schemagen import param_to_go_type
from oapicodegen.spec import (
    CodegenError,
    is_go_type_reference,
    ref_path_to_go_type,
    split_ref,
)

EXT_GO_NAME = "x-go-name"

_DEFAULT_STYLES = {"path": "simple", "header": "simple", "query": "form", "cookie": "form"}
_DEFAULT_EXPLODE = {"path": False, "header": False, "query": True, "cookie": True}


def is_media_type_json(media_type: str) -> bool:
    """Return whether ``media_type`` denotes JSON, including ``+json`` suffixed types."""
    base = media_type.split(";", 1)[0].strip().lower()
    if not base or "/" not in base:
        return False
    return base == "application/json" or base.endswith("+json")


@dataclass
class ParameterDefinition:
    """A parameter of an operation, flattened for use by the templates."""

    param_name: str = ""
    location: str = ""
    required: bool = False
    spec: Mapping[str, Any] = field(default_factory=dict)
    schema: Schema = field(default_factory=Schema)

    def _content(self) -> Mapping[str, Any]:
        return self.spec.get("content") or {}

    def type_def(self) -> str:
        """Return the Go type of the parameter, without a pointer for optional ones."""
        return self.schema.type_decl()

    def json_tag(self) -> str:
        """Return the JSON struct tag mapping the Go field to the parameter name."""
        if self.required:
            return f'`json:"{self.param_name}"`'
        return f'`json:"{self.param_name},omitempty"`'

    def is_json(self) -> bool:
        """Return whether the parameter has exactly one content type and it is JSON."""
        content = self._content()
        return len(content) == 1 and is_media_type_json(next(iter(content)))

    def is_pass_through(self) -> bool:
        """Return whether the parameter value is handed on without decoding."""
        content = self._content()
        if len(content) > 1:
            return True
        if len(content) == 1:
            return not self.is_json()
        return False

    def is_styled(self) -> bool:
        """Return whether the parameter is described by a schema."""
        return self.spec.get("schema") is not None

    def style(self) -> str:
        """Return the serialisation style, defaulting by parameter location."""
        style = self.spec.get("style") or ""
        if style:
            return style
        location = self.spec.get("in") or ""
        try:
            return _DEFAULT_STYLES[location]
        except KeyError:
            raise CodegenError("unknown parameter format") from None

    def explode(self) -> bool:
        """Return whether the parameter is exploded, defaulting by location."""
        explode = self.spec.get("explode")
        if explode is not None:
            return bool(explode)
        location = self.spec.get("in") or ""
        try:
            return _DEFAULT_EXPLODE[location]
        except KeyError:
            raise CodegenError("unknown parameter format") from None

    def go_variable_name(self) -> str:
        """Return a Go variable name for the parameter that is not a keyword."""
        name = lowercase_first_character(self.go_name())
        if is_go_keyword(name):
            name = "p" + uppercase_first_character(name)
        if name and name[0].isnumeric():
            name = "n" + name
        return name

    def go_name(self) -> str:
        """Return the Go name of the parameter, honouring ``x-go-name``."""
        go_name = self.param_name
        override = self.spec.get(EXT_GO_NAME)
        if isinstance(override, str):
            go_name = override
        return schema_name_to_type_name(go_name)

    def indirect_optional(self) -> bool:
        """Return whether the optional parameter is passed by pointer."""
        return not self.required and not self.schema.skip_optional_pointer


@dataclass
class SecurityDefinition:
    """A security provider and the scopes an operation requires from it."""

    provider_name: str = ""
    scopes: list[str] = field(default_factory=list)


def find_parameter_by_name(
    params: Iterable[ParameterDefinition], name: str
) -> ParameterDefinition | None:
    """Return the first parameter called ``name``, or None."""
    return next((param for param in params if param.param_name == name), None)


def describe_parameters(
    params: Iterable[Any] | None, path: Sequence[str] | None
) -> list[ParameterDefinition]:
    """Describe every parameter (or parameter reference) in ``params``."""
    path = list(path or [])
    result: list[ParameterDefinition] = []
    for node in params or ():
        ref, param = split_ref(node)
        if param is None:
            raise CodegenError(f"unresolved reference: {ref}")
        name = param.get("name") or ""
        try:
            go_type = param_to_go_type(param, [*path, name])
        except CodegenError as exc:
            raise CodegenError(f"error generating type for param ({name}): {exc}") from exc

        definition = ParameterDefinition(
            param_name=name,
            location=param.get("in") or "",
            required=bool(param.get("required")),
            spec=param,
            schema=go_type,
        )

        # A reference to a predefined parameter uses the referenced type name.
        if is_go_type_reference(ref):
            try:
                ref_type = ref_path_to_go_type(ref)
            except CodegenError as exc:
                raise CodegenError(
                    f"error dereferencing ({ref}) for param ({name}): {exc}"
                ) from exc
            definition.schema = dataclasses.replace(definition.schema, go_type=ref_type)
        result.append(definition)
    return result


def describe_security_definition(
    requirements: Iterable[Mapping[str, Iterable[str]]] | None,
) -> list[SecurityDefinition]:
    """Flatten security requirements into provider definitions, sorted within each."""
    return [
        SecurityDefinition(provider_name=name, scopes=list(requirement[name] or []))
        for requirement in requirements or ()
        for name in sorted(requirement)
    ]


def filter_parameter_definition_by_type(
    params: Iterable[ParameterDefinition], location: str
) -> list[ParameterDefinition]:
    """Return the parameters found at ``location`` (path, query, header or cookie)."""
    return [param for param in params if param.location == location]


def sort_params_by_path(
    path: str, params: Sequence[ParameterDefinition]
) -> list[ParameterDefinition]:
    """Order path parameters as they appear in ``path``, checking that they match."""
    names = ordered_params_from_uri(path)
    if len(names) != len(params):
        raise CodegenError(
            f"path '{path}' has {len(names)} positional parameters, "
            f"but spec has {len(params)} declared"
        )
    ordered: list[ParameterDefinition] = []
    for name in names:
        param = find_parameter_by_name(params, name)
        if param is None:
            raise CodegenError(
                f"path '{path}' refers to parameter '{name}', "
                "which doesn't exist in specification"
            )
        ordered.append(param)
    return ordered