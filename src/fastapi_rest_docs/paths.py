"""Path aggregation — aggregate_path_item(), merge_paths(), deep_merge()."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from fastapi_rest_docs._types import PathItemObject, PathsObject
from fastapi_rest_docs.assembler import _compact, _plain, assemble_operation
from fastapi_rest_docs.definitions import RouteDefinition
from fastapi_rest_docs.schema import SchemaNormalizer

VALID_METHODS = frozenset(
    {"get", "put", "post", "delete", "options", "head", "patch", "trace"}
)


def is_valid_method(method: object) -> bool:
    return isinstance(method, str) and method.lower() in VALID_METHODS


def aggregate_path_item(
    route: str,
    definition: RouteDefinition,
    normalizer: SchemaNormalizer | None = None,
) -> PathItemObject:
    """Build the path item for one route.

    Path-level fields come from the route definition; each recognised
    method contributes one operation under its lower-cased name.
    """
    normalizer = normalizer or SchemaNormalizer()
    item: PathItemObject = _compact(
        **{"$ref": definition.ref},
        summary=definition.summary,
        description=definition.description,
        servers=_plain(definition.servers),
        parameters=_plain(definition.parameters),
    )

    for method, meta in definition.methods.items():
        if not is_valid_method(method):
            continue
        item[method.lower()] = assemble_operation(route, method, meta, normalizer)

    return item


def deep_merge(base: Mapping[str, Any], incoming: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge two mappings into a new dict.

    Nested mappings are merged key by key; any other value from
    ``incoming`` (scalars, lists) replaces the one in ``base``.
    Neither input is mutated.
    """
    result: dict[str, Any] = copy.deepcopy(dict(base))
    for key, value in incoming.items():
        current = result.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            result[key] = deep_merge(current, value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def merge_paths(*results: Mapping[str, Any] | None) -> PathsObject:
    """Merge paths mappings with last-writer-wins per field, recursively.

    Later results overwrite scalar fields and arrays of earlier ones and
    are deep-merged into nested objects.
    """
    merged: PathsObject = {}
    for paths in results:
        if paths:
            merged = deep_merge(merged, paths)
    return merged
