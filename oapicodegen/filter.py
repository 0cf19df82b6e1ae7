"""Keep or drop operations of an OpenAPI document according to their tags."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

HTTP_METHODS = (
    "connect",
    "delete",
    "get",
    "head",
    "options",
    "patch",
    "post",
    "put",
    "trace",
)


def _operations(path_item: Mapping[str, Any]) -> Iterator[tuple[str, Mapping[str, Any]]]:
    for method in HTTP_METHODS:
        operation = path_item.get(method)
        if operation is not None:
            yield method, operation


def operation_has_tag(operation: Mapping[str, Any] | None, tags: Iterable[str]) -> bool:
    """Return True if the operation is tagged with any of ``tags``."""
    if operation is None:
        return False
    wanted = set(tags)
    return any(tag in wanted for tag in operation.get("tags") or ())


def include_operations_with_tags(
    paths: Mapping[str, dict[str, Any]], tags: Iterable[str], exclude: bool
) -> None:
    """Remove operations lacking ``tags``, or carrying them when ``exclude`` is set."""
    tags = list(tags)
    for path_item in paths.values():
        if not path_item:
            continue
        doomed = [
            method
            for method, operation in _operations(path_item)
            if operation_has_tag(operation, tags) == exclude
        ]
        for method in doomed:
            del path_item[method]


def exclude_operations_with_tags(
    paths: Mapping[str, dict[str, Any]], tags: Iterable[str]
) -> None:
    """Remove every operation tagged with any of ``tags``."""
    include_operations_with_tags(paths, tags, True)


def filter_operations_by_tag(
    spec: Mapping[str, Any],
    include_tags: Iterable[str] = (),
    exclude_tags: Iterable[str] = (),
) -> None:
    """Apply exclusion, then inclusion, tag filters to the paths of ``spec`` in place."""
    paths = spec.get("paths") or {}
    exclude_tags = list(exclude_tags)
    include_tags = list(include_tags)
    if exclude_tags:
        exclude_operations_with_tags(paths, exclude_tags)
    if include_tags:
        include_operations_with_tags(paths, include_tags, False)