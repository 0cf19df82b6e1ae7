"""Loading OpenAPI documents, resolving references and mapping them to Go types."""

from __future__ import annotations

import contextvars
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import unquote

import yaml

from oapicodegen.naming import schema_name_to_type_name

EXT_GO_NAME = "x-go-name"
EXT_PROP_GO_TYPE = "x-go-type"


class CodegenError(Exception):
    """Raised when a specification cannot be turned into code."""


@dataclass
class Compatibility:
    """Switches that restore older generator behaviour."""

    old_merge_schemas: bool = False
    old_enum_conflicts: bool = False
    old_aliasing: bool = False
    disable_flatten_additional_properties: bool = False
    disable_required_read_only_as_pointer: bool = False
    always_prefix_enum_values: bool = False


@dataclass(frozen=True)
class GoImport:
    """A Go package that external references are mapped to."""

    name: str
    path: str


@dataclass
class GenerationState:
    """Everything that generation consults besides its direct arguments."""

    spec: Mapping[str, Any] | None = None
    compatibility: Compatibility = field(default_factory=Compatibility)
    import_mapping: dict[str, GoImport] = field(default_factory=dict)
    documents: dict[str, Mapping[str, Any]] = field(default_factory=dict)


_DEFAULT_STATE = GenerationState()
_STATE: contextvars.ContextVar[GenerationState] = contextvars.ContextVar(
    "oapicodegen_state", default=_DEFAULT_STATE
)


def construct_import_mapping(mapping: Mapping[str, str]) -> dict[str, GoImport]:
    """Give every distinct Go package an ``externalRefN`` alias, in sorted order."""
    names: dict[str, str] = {}
    for package_path in sorted(set(mapping.values())):
        names[package_path] = f"externalRef{len(names)}"
    return {
        spec_path: GoImport(name=names[package_path], path=package_path)
        for spec_path, package_path in mapping.items()
    }


def current_state() -> GenerationState:
    """Return the generation state in effect."""
    return _STATE.get()


@contextmanager
def use_state(state: GenerationState) -> Iterator[GenerationState]:
    """Make ``state`` the generation state for the duration of the block."""
    token = _STATE.set(state)
    try:
        yield state
    finally:
        _STATE.reset(token)


def _stringify_keys(node: Any) -> Any:
    if isinstance(node, Mapping):
        return {str(key): _stringify_keys(value) for key, value in node.items()}
    if isinstance(node, list):
        return [_stringify_keys(item) for item in node]
    return node


def load_spec(text: str | bytes) -> dict[str, Any]:
    """Parse a YAML or JSON OpenAPI document into plain dictionaries."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise CodegenError(f"error parsing specification: {exc}") from exc
    if not isinstance(data, Mapping):
        raise CodegenError("specification must be a mapping")
    return _stringify_keys(data)


def resolve_ref(spec: Any, ref: str) -> Any:
    """Follow a local JSON pointer reference such as ``#/components/schemas/Foo``."""
    if not ref.startswith("#"):
        raise CodegenError(f"not a local reference: {ref}")
    pointer = ref[1:]
    if not pointer:
        return spec
    if not pointer.startswith("/"):
        raise CodegenError(f"unresolved reference: {ref}")
    node = spec
    for raw in pointer[1:].split("/"):
        token = unquote(raw).replace("~1", "/").replace("~0", "~")
        if isinstance(node, Mapping) and token in node:
            node = node[token]
        elif isinstance(node, list) and token.isdigit() and int(token) < len(node):
            node = node[int(token)]
        else:
            raise CodegenError(f"unresolved reference: {ref}")
    return node


def _resolve(ref: str, state: GenerationState, seen: set[str]) -> Any:
    if ref in seen:
        raise CodegenError(f"circular reference: {ref}")
    seen.add(ref)
    if ref.startswith("#"):
        if state.spec is None:
            return None
        target = resolve_ref(state.spec, ref)
    else:
        document, sep, pointer = ref.partition("#")
        if "#" in pointer:
            return None
        doc = state.documents.get(document)
        if doc is None:
            return None
        target = resolve_ref(doc, "#" + pointer) if sep else doc
    if isinstance(target, Mapping) and isinstance(target.get("$ref"), str):
        return _resolve(target["$ref"], state, seen)
    return target


def split_ref(node: Any) -> tuple[str, Any]:
    """Return the ``$ref`` of a node (or "") and the value it stands for."""
    if node is None:
        return "", None
    if isinstance(node, Mapping) and isinstance(node.get("$ref"), str):
        ref = node["$ref"]
        return ref, _resolve(ref, current_state(), set())
    return "", node


def is_whole_document_reference(ref: str) -> bool:
    """Return whether ``ref`` points at a whole document rather than into one."""
    return ref != "" and "#" not in ref


def is_go_type_reference(ref: str) -> bool:
    """Return whether ``ref`` can be turned into a Go type name."""
    return ref != "" and not is_whole_document_reference(ref)


def _ref_path_to_go_type(ref_path: str, local: bool) -> str:
    if not ref_path:
        raise CodegenError("empty reference")
    state = current_state()
    if ref_path.startswith("#"):
        parts = ref_path.split("/")
        depth = len(parts)
        if (local and depth != 4) or (not local and depth not in (2, 4)):
            raise CodegenError(
                f"unexpected reference depth: {depth} for ref: {ref_path} "
                f"local: {str(local).lower()}"
            )
        try:
            name = find_schema_name_by_ref_path(ref_path, state.spec)
        except CodegenError as exc:
            raise CodegenError(f"error finding ref: {ref_path} in spec: {exc}") from exc
        if name:
            return name
        return schema_name_to_type_name(parts[-1])

    parts = ref_path.split("#")
    if len(parts) != 2:
        raise CodegenError(f"unsupported reference: {ref_path}")
    remote_component, flat_component = parts
    go_import = state.import_mapping.get(remote_component)
    if go_import is None:
        raise CodegenError(
            f"unrecognized external reference '{remote_component}'; please provide "
            "the known import for this reference using option --import-mapping"
        )
    go_type = _ref_path_to_go_type("#" + flat_component, False)
    return f"{go_import.name}.{go_type}"


def ref_path_to_go_type(ref_path: str) -> str:
    """Convert a ``$ref`` value into a Go type name, using the import mapping for remote refs."""
    return _ref_path_to_go_type(ref_path, True)


def _rename_component(name: str, node: Any) -> str:
    if isinstance(node, Mapping) and "$ref" in node:
        return schema_name_to_type_name(name)
    if isinstance(node, Mapping) and EXT_GO_NAME in node:
        value = node[EXT_GO_NAME]
        if not isinstance(value, str):
            raise CodegenError(
                f'invalid value for "{EXT_PROP_GO_TYPE}": expected a string, got {value!r}'
            )
        return value
    return schema_name_to_type_name(name)


_COMPONENT_SECTIONS = ("schemas", "parameters", "responses", "requestBodies")


def find_schema_name_by_ref_path(ref_path: str, spec: Mapping[str, Any] | None) -> str:
    """Return the type name of a local component, honouring ``x-go-name``, or ""."""
    if spec is None:
        return ""
    elements = ref_path.split("/")
    if len(elements) != 4 or elements[0] != "#" or elements[1] != "components":
        return ""
    section, name = elements[2], elements[3]
    if section not in _COMPONENT_SECTIONS:
        return ""
    entries = (spec.get("components") or {}).get(section) or {}
    if name not in entries:
        return ""
    return _rename_component(name, entries[name])


def schema_has_additional_properties(schema: Mapping[str, Any]) -> bool:
    """Return whether a schema explicitly allows or describes additional properties."""
    additional = schema.get("additionalProperties")
    return additional is True or isinstance(additional, Mapping)