"""Operation assembly — turns declared OperationMetadata into an OpenAPI operation."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from fastapi_rest_docs._types import OperationObject
from fastapi_rest_docs.definitions import (
    DEFAULT_CONTENT_TYPE,
    OperationMetadata,
    RequestBody,
    ResponseSpec,
)
from fastapi_rest_docs.schema import SchemaNormalizer, SchemaRole

UNEXPECTED_ERROR = "unexpected error"
AUTOGENERATED_DESCRIPTION = "Auto-generated description by FastAPI REST Docs."

ERROR_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {"message": {"type": "string"}},
    "required": ["message"],
}

DEFAULT_RESPONSES: dict[str, Any] = {
    "500": {
        "description": UNEXPECTED_ERROR,
        "content": {DEFAULT_CONTENT_TYPE: {"schema": ERROR_SCHEMA}},
    }
}


def _compact(**fields: Any) -> dict[str, Any]:
    """Keep only the fields that were actually declared."""
    return {key: value for key, value in fields.items() if value is not None}


def _plain(value: Any) -> Any:
    """Copy declared containers into plain JSON-friendly dicts and lists."""
    if isinstance(value, Mapping):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


def _media_type(
    normalizer: SchemaNormalizer,
    declared: RequestBody | ResponseSpec,
    operation_id: str,
    role: SchemaRole,
) -> dict[str, Any]:
    schema = None
    if declared.schema is not None:
        schema = normalizer.normalize(declared.schema, operation_id=operation_id, role=role)
    return _compact(
        schema=schema,
        example=_plain(declared.example),
        examples=_plain(declared.examples),
        encoding=_plain(declared.encoding),
    )


def assemble_parameters(
    normalizer: SchemaNormalizer,
    meta: OperationMetadata,
    operation_id: str,
) -> list[Any] | None:
    """Declared parameters followed by those expanded from parameter schemas."""
    parameters: list[Any] = _plain(meta.parameters) or []
    sources = (
        ("path", meta.path_params_schema, SchemaRole.INPUT_PARAMS),
        ("query", meta.query_schema, SchemaRole.INPUT_QUERY),
    )
    for location, schema, role in sources:
        if schema is None:
            continue
        canonical = normalizer.normalize(schema, operation_id=operation_id, role=role)
        required = set(canonical.get("required") or ())
        for name, prop in (canonical.get("properties") or {}).items():
            parameters.append(
                _compact(
                    name=name,
                    **{"in": location},
                    # path parameters are always required
                    required=location == "path" or name in required,
                    description=prop.get("description"),
                    schema=prop,
                )
            )

    if meta.parameters is None and not parameters:
        return None
    return parameters


def assemble_request_body(
    normalizer: SchemaNormalizer,
    body: RequestBody | Mapping[str, Any] | None,
    operation_id: str,
) -> dict[str, Any] | None:
    if body is None:
        return None
    if not isinstance(body, RequestBody):
        return _plain(body)

    return _compact(
        description=body.description,
        required=body.required,
        content={
            body.content_type: _media_type(
                normalizer, body, operation_id, SchemaRole.INPUT_BODY
            )
        },
    )


def assemble_responses(
    normalizer: SchemaNormalizer,
    declared: tuple[ResponseSpec, ...] | list[ResponseSpec],
    operation_id: str,
) -> dict[str, Any]:
    """Build the responses map on top of the default 500 entry."""
    responses = copy.deepcopy(DEFAULT_RESPONSES)

    for response in declared:
        if not response.status:
            continue
        responses[str(response.status)] = _compact(
            description=response.description or AUTOGENERATED_DESCRIPTION,
            headers=_plain(response.headers),
            links=_plain(response.links),
            content={
                response.content_type: _media_type(
                    normalizer, response, operation_id, SchemaRole.OUTPUT_BODY
                )
            },
        )

    return responses


def assemble_operation(
    route: str,
    method: str,
    meta: OperationMetadata,
    normalizer: SchemaNormalizer | None = None,
) -> OperationObject:
    """Compile one declared operation into an OpenAPI operation object.

    Schemas are converted through ``normalizer``; everything else is
    passed through as declared.
    """
    normalizer = normalizer or SchemaNormalizer()
    operation_id = meta.operation_id or f"{method.lower()} {route}"

    return _compact(
        tags=_plain(meta.tags),
        summary=meta.summary,
        description=meta.description,
        externalDocs=_plain(meta.external_docs),
        operationId=meta.operation_id,
        parameters=assemble_parameters(normalizer, meta, operation_id),
        requestBody=assemble_request_body(normalizer, meta.request_body, operation_id),
        responses=assemble_responses(normalizer, meta.responses, operation_id),
        callbacks=_plain(meta.callbacks),
        deprecated=meta.deprecated,
        security=_plain(meta.security),
        servers=_plain(meta.servers),
    )
