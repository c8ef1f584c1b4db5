"""docs_router() / mount_docs() — serve the compiled document from FastAPI."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, FastAPI, HTTPException
from fastapi.openapi.docs import get_swagger_ui_html
from starlette.requests import Request
from starlette.responses import HTMLResponse, Response

from fastapi_rest_docs._types import OpenAPIDocument, Reporter
from fastapi_rest_docs.compiler import DocumentCompiler
from fastapi_rest_docs.config import DocsConfig
from fastapi_rest_docs.resolvers import FastAPIRouteResolver
from fastapi_rest_docs.serialization import to_json, to_yaml


def _base_url(request: Request) -> str:
    return str(request.base_url).rstrip("/")


def docs_router(compiler: DocumentCompiler) -> APIRouter:
    """Return a router serving the JSON spec, the YAML spec and the docs page.

    None of these routes appear in the generated document.
    """
    config = compiler.config
    router = APIRouter()

    async def _document(request: Request) -> OpenAPIDocument:
        compiler.log_init_info(_base_url(request))
        if not config.expose_openapi_spec:
            raise HTTPException(status_code=404, detail="OpenAPI spec is not exposed")
        return await compiler.compile()

    @router.get(config.openapi_json_path, include_in_schema=False)
    async def openapi_json(request: Request) -> Response:
        document = await _document(request)
        return Response(to_json(document), media_type="application/json")

    @router.get(config.openapi_yaml_path, include_in_schema=False)
    async def openapi_yaml(request: Request) -> Response:
        document = await _document(request)
        return Response(to_yaml(document), media_type="application/yaml")

    @router.get(config.docs_path, include_in_schema=False)
    async def docs(request: Request) -> HTMLResponse:
        compiler.log_init_info(_base_url(request))
        root_path = request.scope.get("root_path", "").rstrip("/")
        return get_swagger_ui_html(
            openapi_url=root_path + config.openapi_json_path,
            title=config.docs_title,
        )

    return router


def mount_docs(
    app: Any,
    config: DocsConfig | None = None,
    *,
    reporter: Reporter | None = None,
) -> DocumentCompiler | None:
    """Document every API route of ``app`` and serve the result from it.

    Call this after all routes are registered. Returns the compiler, or
    ``None`` when ``app`` is not a FastAPI application.
    """
    if not isinstance(app, FastAPI):
        return None

    compiler = DocumentCompiler(config, FastAPIRouteResolver(app), reporter=reporter)
    app.include_router(docs_router(compiler))
    return compiler
