"""Schema normalizer — SchemaAdapter registry and SchemaNormalizer.

Each supported schema flavour is handled by one ``SchemaAdapter``. The
registry picks the first adapter whose ``handles()`` accepts a value and
falls back to an opaque adapter that can neither introspect nor convert.
"""

from __future__ import annotations

import copy
import dataclasses
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, get_origin

from pydantic import BaseModel, TypeAdapter, ValidationError

from fastapi_rest_docs._types import JSONSchema, Reporter
from fastapi_rest_docs.exceptions import InvalidSchemaUsage, UnsupportedSchemaKind
from fastapi_rest_docs.reporting import DocsWarning, WarningKind, log_reporter

_DEFS_PREFIX = "#/$defs/"


class SchemaRole(Enum):
    """Where a schema is used within an operation."""

    INPUT_PARAMS = "input-params"
    INPUT_QUERY = "input-query"
    INPUT_BODY = "input-body"
    OUTPUT_BODY = "output-body"

    @property
    def json_schema_mode(self) -> str:
        return "serialization" if self is SchemaRole.OUTPUT_BODY else "validation"


class OpenAPIMeta:
    """Extension metadata attached to a single schema field.

    Use it inside ``Annotated`` on a pydantic model field, or as the
    ``"openapi"`` entry of a dataclass field's ``metadata``::

        class Todo(BaseModel):
            name: Annotated[str, OpenAPIMeta(example="Buy milk")]
    """

    def __init__(self, **metadata: Any) -> None:
        self.metadata = metadata

    def openapi(self) -> dict[str, Any]:
        return dict(self.metadata)

    def __repr__(self) -> str:
        return f"OpenAPIMeta({self.metadata!r})"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a value against a schema."""

    valid: bool
    errors: list[Any] | None = None
    data: Any = None


class SchemaAdapter(ABC):
    """Capability set for one schema flavour."""

    # Whether the flavour exposes a field-level shape
    reflected: ClassVar[bool] = True
    can_validate: ClassVar[bool] = True

    @abstractmethod
    def handles(self, schema: Any) -> bool: ...

    def introspect_shape(self, schema: Any) -> list[str]:
        raise UnsupportedSchemaKind(f"{type(schema).__name__} has no introspectable shape")

    def field_metadata(self, schema: Any) -> dict[str, dict[str, Any]]:
        return {}

    def to_canonical(self, schema: Any, role: SchemaRole) -> JSONSchema:
        raise UnsupportedSchemaKind(f"Can't convert {type(schema).__name__} to JSON Schema")

    def validate(self, schema: Any, value: Any) -> ValidationResult:
        raise InvalidSchemaUsage(f"{type(schema).__name__} cannot validate values")


def _is_class(value: Any) -> bool:
    # Parameterised generics such as list[int] are not classes
    return isinstance(value, type) and get_origin(value) is None


def _collect_meta(sources: Iterable[Any]) -> dict[str, Any]:
    meta: dict[str, Any] = {}
    for source in sources:
        if isinstance(source, OpenAPIMeta):
            meta.update(source.openapi())
        elif isinstance(source, Mapping):
            meta.update(source)
    return meta


def _inline_refs(schema: JSONSchema) -> JSONSchema:
    """Replace local ``$defs`` references with the referenced schemas.

    Self-referencing definitions cannot be inlined; in that case the
    remaining references are kept and ``$defs`` stays in place.
    """
    defs: dict[str, Any] = schema.pop("$defs", {})
    if not defs:
        return schema
    dangling = False

    def resolve(node: Any, seen: frozenset[str]) -> Any:
        nonlocal dangling
        if isinstance(node, list):
            return [resolve(item, seen) for item in node]
        if not isinstance(node, dict):
            return node

        ref = node.get("$ref")
        if isinstance(ref, str) and ref.startswith(_DEFS_PREFIX):
            name = ref[len(_DEFS_PREFIX) :]
            if name in defs and name not in seen:
                target = resolve(copy.deepcopy(defs[name]), seen | {name})
                siblings = {k: resolve(v, seen) for k, v in node.items() if k != "$ref"}
                return {**target, **siblings}
            dangling = True

        return {key: resolve(value, seen) for key, value in node.items()}

    result: JSONSchema = resolve(schema, frozenset())
    if dangling:
        result["$defs"] = defs
    return result


class PydanticModelAdapter(SchemaAdapter):
    """Pydantic ``BaseModel`` subclasses."""

    def handles(self, schema: Any) -> bool:
        return _is_class(schema) and issubclass(schema, BaseModel)

    def introspect_shape(self, schema: Any) -> list[str]:
        return [info.alias or name for name, info in schema.model_fields.items()]

    def field_metadata(self, schema: Any) -> dict[str, dict[str, Any]]:
        result: dict[str, dict[str, Any]] = {}
        for name, info in schema.model_fields.items():
            extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else None
            meta = _collect_meta([*info.metadata, extra])
            if meta:
                result[info.alias or name] = meta
        return result

    def to_canonical(self, schema: Any, role: SchemaRole) -> JSONSchema:
        return _inline_refs(schema.model_json_schema(mode=role.json_schema_mode))

    def validate(self, schema: Any, value: Any) -> ValidationResult:
        try:
            data = schema.model_validate(value)
        except ValidationError as exc:
            return ValidationResult(valid=False, errors=exc.errors())
        return ValidationResult(valid=True, data=data)


class DataclassAdapter(SchemaAdapter):
    """Standard-library and pydantic dataclasses."""

    def handles(self, schema: Any) -> bool:
        return _is_class(schema) and dataclasses.is_dataclass(schema)

    def introspect_shape(self, schema: Any) -> list[str]:
        return [f.name for f in dataclasses.fields(schema)]

    def field_metadata(self, schema: Any) -> dict[str, dict[str, Any]]:
        result: dict[str, dict[str, Any]] = {}
        for f in dataclasses.fields(schema):
            meta = _collect_meta([f.metadata.get("openapi")])
            if meta:
                result[f.name] = meta
        return result

    def to_canonical(self, schema: Any, role: SchemaRole) -> JSONSchema:
        return _inline_refs(TypeAdapter(schema).json_schema(mode=role.json_schema_mode))

    def validate(self, schema: Any, value: Any) -> ValidationResult:
        try:
            data = TypeAdapter(schema).validate_python(value)
        except ValidationError as exc:
            return ValidationResult(valid=False, errors=exc.errors())
        return ValidationResult(valid=True, data=data)


class JsonSchemaAdapter(SchemaAdapter):
    """Literal JSON Schema fragments, e.g. received from a remote route."""

    can_validate = False

    def handles(self, schema: Any) -> bool:
        return isinstance(schema, Mapping)

    def introspect_shape(self, schema: Any) -> list[str]:
        properties = schema.get("properties")
        return list(properties) if isinstance(properties, Mapping) else []

    def to_canonical(self, schema: Any, role: SchemaRole) -> JSONSchema:
        return _inline_refs(copy.deepcopy(dict(schema)))


class TypeAdapterSchemaAdapter(SchemaAdapter):
    """Pydantic ``TypeAdapter`` instances: validate only, no object shape."""

    reflected = False

    def handles(self, schema: Any) -> bool:
        return isinstance(schema, TypeAdapter)

    def to_canonical(self, schema: Any, role: SchemaRole) -> JSONSchema:
        raise UnsupportedSchemaKind("Expected an object schema, got a TypeAdapter")

    def validate(self, schema: Any, value: Any) -> ValidationResult:
        try:
            data = schema.validate_python(value)
        except ValidationError as exc:
            return ValidationResult(valid=False, errors=exc.errors())
        return ValidationResult(valid=True, data=data)


class OpaqueSchemaAdapter(SchemaAdapter):
    """Fallback for values no registered adapter recognises."""

    reflected = False
    can_validate = False

    def handles(self, schema: Any) -> bool:
        return True


class SchemaRegistry:
    """Ordered set of adapters; the first one that handles a value wins."""

    def __init__(self, adapters: Iterable[SchemaAdapter] | None = None) -> None:
        if adapters is None:
            adapters = (
                PydanticModelAdapter(),
                DataclassAdapter(),
                TypeAdapterSchemaAdapter(),
                JsonSchemaAdapter(),
            )
        self._adapters: list[SchemaAdapter] = list(adapters)
        self._fallback = OpaqueSchemaAdapter()

    def register(self, adapter: SchemaAdapter) -> SchemaRegistry:
        """Add an adapter ahead of the existing ones."""
        self._adapters.insert(0, adapter)
        return self

    def find(self, schema: Any) -> SchemaAdapter:
        for adapter in self._adapters:
            if adapter.handles(schema):
                return adapter
        return self._fallback


default_registry = SchemaRegistry()


class SchemaNormalizer:
    """Converts schema values into canonical JSON Schema dicts.

    Conversion never raises: any failure is reported once through the
    reporter and yields an empty schema.
    """

    def __init__(
        self,
        reporter: Reporter | None = None,
        registry: SchemaRegistry | None = None,
    ) -> None:
        self._reporter = reporter or log_reporter
        self._registry = registry or default_registry

    def normalize(
        self,
        schema: Any,
        *,
        operation_id: str | None = None,
        role: SchemaRole = SchemaRole.OUTPUT_BODY,
    ) -> JSONSchema:
        adapter = self._registry.find(schema)
        try:
            canonical = adapter.to_canonical(schema, role)
            metadata = adapter.field_metadata(schema)
        except Exception as exc:
            self._reporter(
                DocsWarning(
                    kind=WarningKind.SCHEMA_CONVERSION,
                    message=(
                        f"{role.value} schema for operation {operation_id}"
                        f" could not be converted correctly: {exc}"
                    ),
                    operation_id=operation_id,
                )
            )
            return {}

        properties = canonical.get("properties")
        if isinstance(properties, dict):
            for key, meta in metadata.items():
                properties[key] = {**properties.get(key, {}), **meta}

        return canonical


def validate_schema(
    schema: Any, value: Any, *, registry: SchemaRegistry | None = None
) -> ValidationResult:
    """Validate ``value`` against ``schema`` with the matching adapter."""
    adapter = (registry or default_registry).find(schema)
    if not adapter.can_validate:
        raise InvalidSchemaUsage(f"Invalid schema: {schema!r}")
    return adapter.validate(schema, value)


def get_schema_keys(schema: Any, *, registry: SchemaRegistry | None = None) -> list[str]:
    """Return the field names of an object schema in declaration order."""
    adapter = (registry or default_registry).find(schema)
    if not adapter.reflected:
        raise InvalidSchemaUsage(f"Invalid schema: {schema!r}")
    return adapter.introspect_shape(schema)
