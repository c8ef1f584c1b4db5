"""DocumentCompiler — discovers routes and compiles the OpenAPI document."""

from __future__ import annotations

import asyncio
import copy
import logging

from fastapi_rest_docs._types import OpenAPIDocument, PathsObject, Reporter
from fastapi_rest_docs.config import DEFAULT_CONFIG, OPENAPI_VERSION, DocsConfig
from fastapi_rest_docs.definitions import RouteDefinition
from fastapi_rest_docs.exceptions import ReservedPathCollision, RouteResolutionFailure
from fastapi_rest_docs.paths import aggregate_path_item, merge_paths
from fastapi_rest_docs.reporting import DocsWarning, WarningKind, log_reporter
from fastapi_rest_docs.resolvers import RouteResolver
from fastapi_rest_docs.schema import SchemaNormalizer

logger = logging.getLogger(__name__)


def is_catch_all_route(route: str) -> bool:
    """Catch-all routes (``[...slug]`` or ``{name:path}``) are never documented."""
    return "..." in route or ":path}" in route


class DocumentCompiler:
    """Builds the OpenAPI document from a base document and discovered routes.

    The compiler owns the per-instance warning state: each reserved path
    collision is reported at most once per compiler.
    """

    def __init__(
        self,
        config: DocsConfig | None = None,
        resolver: RouteResolver | None = None,
        *,
        reporter: Reporter | None = None,
        normalizer: SchemaNormalizer | None = None,
    ) -> None:
        self.config = config or DEFAULT_CONFIG
        self.resolver = resolver
        self._reporter = reporter or log_reporter
        self._normalizer = normalizer or SchemaNormalizer(reporter=self._reporter)
        self._warned_reserved_paths: set[str] = set()
        self._init_info_logged = False

    def handle_reserved_path(self, path: str) -> bool:
        """Report a collision with a reserved path, once per path.

        Returns whether ``path`` is reserved.
        """
        reserved = self.config.reserved_paths
        if path not in reserved:
            return False

        if path not in self._warned_reserved_paths:
            name, config_name = reserved[path]
            collision = ReservedPathCollision(path, name, config_name)
            self._reporter(
                DocsWarning(
                    kind=WarningKind.RESERVED_PATH,
                    message=f"Warning: {collision.detail}",
                    route=path,
                )
            )
            self._warned_reserved_paths.add(path)
        return True

    def is_documented(self, route: str) -> bool:
        if is_catch_all_route(route) or route in self.config.denied_paths:
            return False
        return not self.handle_reserved_path(route)

    async def discover(self) -> list[str]:
        """List the routes that take part in the generated document."""
        if self.resolver is None:
            return []
        routes = await self.resolver.routes()
        return [route for route in routes if self.is_documented(route)]

    async def _resolve_route(self, resolver: RouteResolver, route: str) -> PathsObject:
        try:
            definition: RouteDefinition = await asyncio.wait_for(
                resolver.resolve(route), timeout=self.config.resolve_timeout
            )
            return {route: aggregate_path_item(route, definition, self._normalizer)}
        except asyncio.TimeoutError as exc:
            failure = RouteResolutionFailure(
                route,
                f"Timed out resolving route {route}"
                f" after {self.config.resolve_timeout}s",
                cause=exc,
            )
        except RouteResolutionFailure as exc:
            failure = exc
        except Exception as exc:
            failure = RouteResolutionFailure(
                route, f"Could not resolve route {route}: {exc!r}", cause=exc
            )

        self._reporter(
            DocsWarning(
                kind=WarningKind.ROUTE_RESOLUTION,
                message=f"FastAPI REST Docs encountered an error: {failure.detail}",
                route=route,
            )
        )
        return {}

    async def generate_paths(self) -> PathsObject:
        """Resolve every discovered route concurrently and merge the results.

        Results are merged in lexical route order, whatever order the
        individual fetches complete in.
        """
        resolver = self.resolver
        if resolver is None:
            return {}
        routes = await self.discover()
        results = await asyncio.gather(
            *(self._resolve_route(resolver, route) for route in routes)
        )
        ordered = sorted(zip(routes, results), key=lambda pair: pair[0])
        return merge_paths(*(paths for _, paths in ordered))

    async def compile(self) -> OpenAPIDocument:
        """Compile a fresh document; the configured base document is not touched."""
        base = copy.deepcopy(self.config.openapi_document)
        paths = await self.generate_paths()

        document: OpenAPIDocument = {**base, "openapi": OPENAPI_VERSION}
        # Discovered paths overwrite hand-written ones on collision
        document["paths"] = merge_paths(base.get("paths"), paths)
        return document

    def log_init_info(self, base_url: str) -> None:
        """Log where the generated docs are served, once per compiler."""
        if self._init_info_logged or self.config.suppress_info:
            return
        self._init_info_logged = True

        if self.config.expose_openapi_spec:
            logger.info(
                "API docs: %s%s | OpenAPI JSON: %s%s | OpenAPI YAML: %s%s",
                base_url,
                self.config.docs_path,
                base_url,
                self.config.openapi_json_path,
                base_url,
                self.config.openapi_yaml_path,
            )
        else:
            logger.info(
                "OpenAPI spec is not exposed. To expose it, set"
                " expose_openapi_spec to True in the docs config."
            )
