# oapicodegen

`oapicodegen` reads OpenAPI 3 documents and works out the Go types, parameters,
request bodies, responses and operations that a Go code generator needs. The
results are plain dataclasses that a template engine can render into Go source.

## Installation

```
pip install .
```

With the test dependencies:

```
pip install ".[test]"
```

## Loading a document

```python
from oapicodegen.spec import load_spec

with open("api.yaml") as f:
    spec = load_spec(f.read())
```

`load_spec` parses YAML or JSON text into plain dictionaries and lists. It raises
`CodegenError` when the text cannot be parsed or is not a mapping.

## Generation state

Resolving `$ref` values, naming referenced types and a few generation choices
depend on a `GenerationState` (from `oapicodegen.spec`): the document being
processed, a `Compatibility` object with switches for older behaviour, an import
mapping for references to other documents, and any such other documents already
loaded. Activate one with the `use_state` context manager; `current_state()`
returns the state in effect.

```python
from oapicodegen.spec import (
    GenerationState,
    construct_import_mapping,
    ref_path_to_go_type,
    use_state,
)

state = GenerationState(
    spec=spec,
    import_mapping=construct_import_mapping({"doc.json": "example.com/models"}),
)
with use_state(state):
    ref_path_to_go_type("#/components/schemas/pet_owner")    # "PetOwner"
    ref_path_to_go_type("doc.json#/components/schemas/Pet")  # "externalRef0.Pet"
```

Local component names honour an `x-go-name` extension. An external reference
whose document is not in the import mapping raises `CodegenError`.

`Compatibility` has these switches, all off by default: `old_merge_schemas`,
`old_enum_conflicts`, `old_aliasing`, `disable_flatten_additional_properties`,
`disable_required_read_only_as_pointer` and `always_prefix_enum_values`.

## Filtering by tag

```python
from oapicodegen.filter import filter_operations_by_tag

filter_operations_by_tag(spec, include_tags=["cat"], exclude_tags=[])
```

The document is changed in place: operations with an excluded tag are removed
first, then, if inclusion tags are given, every operation without one of them.

## Operations

```python
from oapicodegen.operations import operation_definitions

for op in operation_definitions(spec):
    print(op.method, op.path, op.operation_id)
    for param in op.path_params:
        print("  ", param.go_variable_name(), param.type_def())
```

Operations come back sorted by path, then by method. An operation without an
`operationId` gets one built from its method and path (`GET /v1/foo/bar` becomes
`GetV1FooBar`, see `generate_default_operation_id`). Path parameters are
reordered to match the path, and a mismatch between the path and the declared
parameters raises `CodegenError`. Each `OperationDefinition` carries its
parameters by location, its request bodies (`RequestBodyDefinition`), responses
(`ResponseDefinition`), security requirements and the type definitions it needs,
including the parameters object from `generate_params_types`.

## Schemas

```python
from oapicodegen.schemagen import generate_go_schema
from oapicodegen.spec import GenerationState, use_state

with use_state(GenerationState(spec=spec)):
    schema = generate_go_schema(spec["components"]["schemas"]["Pet"], ["Pet"])
print(schema.type_decl())
```

`generate_go_schema` handles objects, maps, arrays, primitive types and their
formats, enums, `allOf` merging (`merge_schemas`, built on
`oapicodegen.merging`), `oneOf`/`anyOf` unions with discriminators and the
`x-go-type` and `x-go-type-name` extensions. Helper types it needs are returned
by `schema.get_additional_type_defs()`. `oapicodegen.models` renders struct
bodies with `gen_struct_from_schema` and `gen_fields_from_properties`, honouring
`x-go-name`, `x-omitempty`, `x-go-json-ignore` and `x-oapi-codegen-extra-tags`.

## Naming helpers

`oapicodegen.naming` turns OpenAPI names into Go identifiers, comments and
router paths:

```python
from oapicodegen.naming import (
    schema_name_to_type_name,
    string_to_go_comment,
    swagger_uri_to_chi_uri,
    swagger_uri_to_echo_uri,
)

schema_name_to_type_name("no_prefix~+-")    # "NoPrefix"
schema_name_to_type_name("123")             # "N123"
swagger_uri_to_echo_uri("/path/{arg*}")     # "/path/:arg"
swagger_uri_to_chi_uri("/path/{.arg}")      # "/path/{arg}"
string_to_go_comment("Single Line")         # "// Single Line"
```

## What the package does not do

It produces descriptions of the Go code to generate, not the Go code itself:
there are no templates, no rendering of client or server code, no embedded copy
of the document, no removal of unused components and no command-line tool.
References to other documents are resolved only against documents placed in
`GenerationState.documents`; nothing is fetched from files or the network.

## Errors

Invalid input raises `oapicodegen.spec.CodegenError`.

## Running the tests

```
pytest
```