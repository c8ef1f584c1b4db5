"""Declared endpoint metadata — RouteDefinition, OperationMetadata and friends.

These are the inputs of the compiler. They are built once per declared
endpoint (by hand, by a resolver introspecting an app, or from a JSON
payload) and never mutated afterwards.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

DEFAULT_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class RequestBody:
    """Declared request body of one operation."""

    schema: Any = None
    content_type: str = DEFAULT_CONTENT_TYPE
    description: str | None = None
    required: bool | None = None
    example: Any = None
    examples: Mapping[str, Any] | None = None
    encoding: Mapping[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RequestBody:
        return cls(
            schema=data.get("schema"),
            content_type=data.get("contentType", DEFAULT_CONTENT_TYPE),
            description=data.get("description"),
            required=data.get("required"),
            example=data.get("example"),
            examples=data.get("examples"),
            encoding=data.get("encoding"),
        )


@dataclass(frozen=True)
class ResponseSpec:
    """Declared response of one operation.

    Entries without a ``status`` are ignored when the operation is
    assembled.
    """

    status: int | str | None = None
    schema: Any = None
    content_type: str = DEFAULT_CONTENT_TYPE
    description: str | None = None
    headers: Mapping[str, Any] | None = None
    links: Mapping[str, Any] | None = None
    example: Any = None
    examples: Mapping[str, Any] | None = None
    encoding: Mapping[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ResponseSpec:
        return cls(
            status=data.get("status"),
            schema=data.get("schema"),
            content_type=data.get("contentType", DEFAULT_CONTENT_TYPE),
            description=data.get("description"),
            headers=data.get("headers"),
            links=data.get("links"),
            example=data.get("example"),
            examples=data.get("examples"),
            encoding=data.get("encoding"),
        )


@dataclass(frozen=True)
class OperationMetadata:
    """Everything declared for one HTTP method on one route."""

    tags: Sequence[str] | None = None
    summary: str | None = None
    description: str | None = None
    external_docs: Mapping[str, Any] | None = None
    operation_id: str | None = None
    parameters: Sequence[Mapping[str, Any]] | None = None
    request_body: RequestBody | Mapping[str, Any] | None = None
    responses: Sequence[ResponseSpec] = ()
    callbacks: Mapping[str, Any] | None = None
    deprecated: bool | None = None
    security: Sequence[Mapping[str, Sequence[str]]] | None = None
    servers: Sequence[Mapping[str, Any]] | None = None
    # Object schemas expanded into one parameter per property
    path_params_schema: Any = None
    query_schema: Any = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> OperationMetadata:
        raw_body = data.get("requestBody")
        request_body: RequestBody | Mapping[str, Any] | None
        if isinstance(raw_body, Mapping) and "content" not in raw_body:
            request_body = RequestBody.from_dict(raw_body)
        else:
            # Already an OpenAPI request body object
            request_body = raw_body

        return cls(
            tags=data.get("tags"),
            summary=data.get("summary"),
            description=data.get("description"),
            external_docs=data.get("externalDocs"),
            operation_id=data.get("operationId"),
            parameters=data.get("parameters"),
            request_body=request_body,
            responses=tuple(
                ResponseSpec.from_dict(r) for r in data.get("responses") or ()
            ),
            callbacks=data.get("callbacks"),
            deprecated=data.get("deprecated"),
            security=data.get("security"),
            servers=data.get("servers"),
            path_params_schema=data.get("pathParamsSchema"),
            query_schema=data.get("querySchema"),
        )


@dataclass(frozen=True)
class RouteDefinition:
    """Path-level metadata plus the operations declared on one route.

    ``methods`` keys are HTTP method names in any case; names outside the
    recognised method set are ignored during aggregation.
    """

    methods: Mapping[str, OperationMetadata] = field(default_factory=dict)
    ref: str | None = None
    summary: str | None = None
    description: str | None = None
    servers: Sequence[Mapping[str, Any]] | None = None
    parameters: Sequence[Mapping[str, Any]] | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RouteDefinition:
        """Parse the camelCase JSON payload served for route introspection."""
        methods = data.get("methods") or {}
        if not isinstance(methods, Mapping):
            raise ValueError("'methods' must be an object")
        return cls(
            methods={
                name: OperationMetadata.from_dict(op) for name, op in methods.items()
            },
            ref=data.get("$ref"),
            summary=data.get("summary"),
            description=data.get("description"),
            servers=data.get("servers"),
            parameters=data.get("parameters"),
        )
