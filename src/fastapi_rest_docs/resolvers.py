"""Route resolvers — RouteResolver, InMemoryRouteResolver, FastAPIRouteResolver, HTTPRouteResolver."""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Mapping, Sequence
from typing import Annotated, Any, Protocol, get_origin, runtime_checkable

import httpx
from pydantic import BaseModel, TypeAdapter

from fastapi_rest_docs._types import JSONSchema
from fastapi_rest_docs.config import INTROSPECTION_USER_AGENT
from fastapi_rest_docs.definitions import (
    OperationMetadata,
    RequestBody,
    ResponseSpec,
    RouteDefinition,
)
from fastapi_rest_docs.exceptions import RouteResolutionFailure


@runtime_checkable
class RouteResolver(Protocol):
    """Pluggable source of declared routes and their metadata."""

    async def routes(self) -> Sequence[str]: ...
    async def resolve(self, route: str) -> RouteDefinition: ...


class InMemoryRouteResolver:
    """Resolver backed by a plain dict of route definitions."""

    def __init__(self, definitions: Mapping[str, RouteDefinition] | None = None) -> None:
        self._definitions: dict[str, RouteDefinition] = dict(definitions or {})

    def register(self, route: str, definition: RouteDefinition) -> InMemoryRouteResolver:
        self._definitions[route] = definition
        return self

    async def routes(self) -> list[str]:
        return list(self._definitions)

    async def resolve(self, route: str) -> RouteDefinition:
        return self._definitions[route]


_PARAM_LOCATIONS = ("path", "query", "header", "cookie")


def _is_model_class(annotation: Any) -> bool:
    return (
        isinstance(annotation, type)
        and get_origin(annotation) is None
        and (issubclass(annotation, BaseModel) or dataclasses.is_dataclass(annotation))
    )


def _schema_source(annotation: Any, mode: str) -> Any:
    """Keep model classes as-is; describe any other annotation as JSON Schema."""
    if _is_model_class(annotation):
        return annotation
    return TypeAdapter(annotation).json_schema(mode=mode)


def _field_schema(field: Any) -> JSONSchema:
    info = field.field_info
    annotation = info.annotation
    if info.metadata:
        # Keep constraints such as ge/le declared on Query() and friends
        annotation = Annotated[(annotation, *info.metadata)]
    schema: JSONSchema = TypeAdapter(annotation).json_schema()
    if info.description:
        schema["description"] = info.description
    return schema


def _flat_params(dependant: Any) -> dict[str, list[Any]]:
    """Collect request parameters from a dependant and all its sub-dependencies.

    Sub-dependencies are walked depth-first in declaration order; a
    parameter declared twice in the same location is kept once.
    """
    params: dict[str, list[Any]] = {location: [] for location in _PARAM_LOCATIONS}
    seen: set[tuple[str, str]] = set()
    pending = [dependant]
    while pending:
        current = pending.pop()
        for location in _PARAM_LOCATIONS:
            for field in getattr(current, f"{location}_params"):
                if not getattr(field.field_info, "include_in_schema", True):
                    continue
                key = (location, field.alias)
                if key not in seen:
                    seen.add(key)
                    params[location].append(field)
        pending.extend(reversed(current.dependencies))
    return params


def _params_schema(fields: Sequence[Any]) -> Any:
    """Describe FastAPI path/query parameter fields as one object schema."""
    if not fields:
        return None
    # A single model parameter (Annotated[Filters, Query()]) spreads its fields
    if len(fields) == 1 and _is_model_class(fields[0].field_info.annotation):
        return fields[0].field_info.annotation

    properties: dict[str, Any] = {}
    required: list[str] = []
    for field in fields:
        properties[field.alias] = _field_schema(field)
        if field.field_info.is_required():
            required.append(field.alias)
    return {"type": "object", "properties": properties, "required": required}


def _literal_parameters(location: str, fields: Sequence[Any]) -> list[dict[str, Any]]:
    """Header and cookie parameters as ready-made OpenAPI parameter objects."""
    parameters: list[dict[str, Any]] = []
    for field in fields:
        name = field.alias
        if (
            location == "header"
            and name == field.name
            and getattr(field.field_info, "convert_underscores", True)
        ):
            name = name.replace("_", "-")
        parameter: dict[str, Any] = {
            "name": name,
            "in": location,
            "required": field.field_info.is_required(),
            "schema": _field_schema(field),
        }
        if field.field_info.description:
            parameter["description"] = field.field_info.description
        parameters.append(parameter)
    return parameters


def _operation_id(route: Any, method: str) -> str:
    """Operation ids stay unique when one route serves several methods."""
    if len(route.methods) == 1:
        return str(route.operation_id or route.unique_id)
    if route.operation_id:
        return f"{route.operation_id}_{method.lower()}"
    return re.sub(r"\W", "_", f"{route.name}{route.path_format}") + f"_{method.lower()}"


def _operation_from_route(route: Any) -> OperationMetadata:
    request_body = None
    if route.body_field is not None:
        info = route.body_field.field_info
        request_body = RequestBody(
            schema=_schema_source(info.annotation, "validation"),
            required=info.is_required(),
            content_type=getattr(info, "media_type", None) or "application/json",
        )

    responses: list[ResponseSpec] = []
    if route.response_model is not None:
        responses.append(
            ResponseSpec(
                status=route.status_code or 200,
                schema=_schema_source(route.response_model, "serialization"),
                description=route.response_description,
            )
        )
    for status, extra in (route.responses or {}).items():
        responses.append(
            ResponseSpec(
                status=status,
                schema=_schema_source(extra["model"], "serialization")
                if extra.get("model") is not None
                else None,
                description=extra.get("description"),
            )
        )

    params = _flat_params(route.dependant)
    parameters = _literal_parameters("header", params["header"])
    parameters += _literal_parameters("cookie", params["cookie"])

    return OperationMetadata(
        tags=[str(tag) for tag in route.tags] or None,
        summary=route.summary,
        description=route.description or None,
        parameters=parameters or None,
        request_body=request_body,
        responses=tuple(responses),
        deprecated=route.deprecated,
        path_params_schema=_params_schema(params["path"]),
        query_schema=_params_schema(params["query"]),
    )


def _api_routes(app: Any) -> list[Any]:
    """Every API route of ``app``, including those of included routers."""
    from fastapi import routing

    iter_route_contexts = getattr(routing, "iter_route_contexts", None)
    if iter_route_contexts is None:
        # Releases without route contexts copy included routes into app.routes
        candidates = [r for r in app.routes if isinstance(r, routing.APIRoute)]
    else:
        candidates = [
            context
            for context in iter_route_contexts(app.routes)
            if isinstance(context.original_route, routing.APIRoute)
        ]
    return [route for route in candidates if route.include_in_schema]


class FastAPIRouteResolver:
    """Resolver that introspects the routes registered on a FastAPI app.

    Works in-process, so the app does not need to be serving requests.
    Routes registered with ``include_in_schema=False`` are not listed.
    """

    def __init__(self, app: Any) -> None:
        self._app = app

    async def routes(self) -> list[str]:
        seen: dict[str, None] = {}
        for route in _api_routes(self._app):
            seen.setdefault(route.path, None)
        return list(seen)

    async def resolve(self, route: str) -> RouteDefinition:
        methods: dict[str, OperationMetadata] = {}
        matched = False
        for api_route in _api_routes(self._app):
            if api_route.path != route:
                continue
            matched = True
            operation = _operation_from_route(api_route)
            for method in sorted(api_route.methods):
                methods[method] = dataclasses.replace(
                    operation, operation_id=_operation_id(api_route, method)
                )

        if not matched:
            raise KeyError(route)
        return RouteDefinition(methods=methods)


class HTTPRouteResolver:
    """Resolver that asks a running server for each route's definition.

    Every route is fetched with the introspection ``User-Agent``; the
    server is expected to answer with a JSON route definition whose
    schemas are literal JSON Schema objects.
    """

    def __init__(
        self,
        base_url: str,
        routes: Sequence[str],
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._base_url = base_url
        self._routes = list(routes)
        self._client = client
        self._timeout = timeout

    async def routes(self) -> list[str]:
        return list(self._routes)

    def _url(self, route: str) -> str:
        # Absolute, so an injected client needs no base_url of its own
        return self._base_url.rstrip("/") + route

    async def _fetch(self, client: httpx.AsyncClient, route: str) -> httpx.Response:
        response = await client.get(
            self._url(route), headers={"User-Agent": INTROSPECTION_USER_AGENT}
        )
        response.raise_for_status()
        return response

    async def resolve(self, route: str) -> RouteDefinition:
        try:
            if self._client is not None:
                response = await self._fetch(self._client, route)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await self._fetch(client, route)
            return RouteDefinition.from_dict(response.json())
        except (httpx.HTTPError, ValueError, TypeError, AttributeError) as exc:
            raise RouteResolutionFailure(
                route, f"Could not resolve route {route}: {exc}", cause=exc
            ) from exc
