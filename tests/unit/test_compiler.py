"""Tests for DocumentCompiler."""

from __future__ import annotations

import copy
import json
import logging

import pytest
from conftest import ScriptedResolver, make_route

from fastapi_rest_docs.compiler import DocumentCompiler, is_catch_all_route
from fastapi_rest_docs.config import DocsConfig, get_config
from fastapi_rest_docs.definitions import RouteDefinition
from fastapi_rest_docs.exceptions import RouteResolutionFailure
from fastapi_rest_docs.reporting import RecordingReporter, WarningKind
from fastapi_rest_docs.resolvers import InMemoryRouteResolver
from fastapi_rest_docs.serialization import to_json, to_yaml


class TestIsCatchAllRoute:
    def test_spread_segment(self) -> None:
        assert is_catch_all_route("/api/[...slug]")

    def test_path_converter(self) -> None:
        assert is_catch_all_route("/files/{file_path:path}")

    def test_regular_route(self) -> None:
        assert not is_catch_all_route("/todos/{todo_id}")


class TestDiscovery:
    async def test_reserved_paths_excluded(
        self, config: DocsConfig, reporter: RecordingReporter
    ) -> None:
        resolver = ScriptedResolver(
            {
                "/a": make_route("a"),
                "/openapi.json": make_route("json"),
                "/openapi.yaml": make_route("yaml"),
                "/docs": make_route("docs"),
            }
        )
        compiler = DocumentCompiler(config, resolver, reporter=reporter)
        document = await compiler.compile()
        assert resolver.resolved == ["/a"]
        assert list(document["paths"]) == ["/a"]

    async def test_reserved_collision_warned_once_per_path(
        self, config: DocsConfig, reporter: RecordingReporter
    ) -> None:
        resolver = ScriptedResolver(
            {"/a": make_route("a"), "/openapi.json": make_route("json")}
        )
        compiler = DocumentCompiler(config, resolver, reporter=reporter)
        await compiler.compile()
        await compiler.compile()
        warnings = reporter.of_kind(WarningKind.RESERVED_PATH)
        assert len(warnings) == 1
        assert warnings[0].route == "/openapi.json"
        assert "openapi_json_path" in warnings[0].message

    async def test_warning_state_is_per_compiler(
        self, config: DocsConfig, reporter: RecordingReporter
    ) -> None:
        resolver = ScriptedResolver({"/docs": make_route("docs")})
        await DocumentCompiler(config, resolver, reporter=reporter).compile()
        await DocumentCompiler(config, resolver, reporter=reporter).compile()
        assert len(reporter.of_kind(WarningKind.RESERVED_PATH)) == 2

    async def test_catch_all_and_denied_routes_excluded(
        self, reporter: RecordingReporter
    ) -> None:
        config = get_config(denied_paths=["/internal"])
        resolver = ScriptedResolver(
            {
                "/a": make_route("a"),
                "/internal": make_route("internal"),
                "/files/{rest:path}": make_route("files"),
            }
        )
        compiler = DocumentCompiler(config, resolver, reporter=reporter)
        assert await compiler.discover() == ["/a"]
        assert reporter.events == []

    def test_handle_reserved_path_ignores_regular_paths(
        self, config: DocsConfig, reporter: RecordingReporter
    ) -> None:
        compiler = DocumentCompiler(config, reporter=reporter)
        assert compiler.handle_reserved_path("/todos") is False
        assert compiler.handle_reserved_path("/docs") is True
        assert compiler.handle_reserved_path("/docs") is True
        assert len(reporter.events) == 1

    async def test_without_resolver(self, config: DocsConfig) -> None:
        document = await DocumentCompiler(config).compile()
        assert document["paths"] == {}


class TestFaultIsolation:
    async def test_failing_route_skipped_with_one_warning(
        self, config: DocsConfig, reporter: RecordingReporter
    ) -> None:
        resolver = ScriptedResolver(
            {"/a": make_route("a"), "/b": make_route("b"), "/c": make_route("c")},
            failures={"/b": ConnectionError("connection refused")},
        )
        compiler = DocumentCompiler(config, resolver, reporter=reporter)
        document = await compiler.compile()

        assert list(document["paths"]) == ["/a", "/c"]
        assert document["paths"]["/a"]["get"]["summary"] == "a"
        assert document["paths"]["/c"]["get"]["summary"] == "c"
        warnings = reporter.of_kind(WarningKind.ROUTE_RESOLUTION)
        assert len(warnings) == 1
        assert warnings[0].route == "/b"
        assert "connection refused" in warnings[0].message

    async def test_resolution_failure_detail_kept(
        self, config: DocsConfig, reporter: RecordingReporter
    ) -> None:
        resolver = ScriptedResolver(
            {"/b": make_route("b")},
            failures={"/b": RouteResolutionFailure("/b", "bad payload")},
        )
        await DocumentCompiler(config, resolver, reporter=reporter).compile()
        assert reporter.events[0].message.endswith("bad payload")

    async def test_unknown_route_in_memory(
        self, config: DocsConfig, reporter: RecordingReporter
    ) -> None:
        class Listing(InMemoryRouteResolver):
            async def routes(self) -> list[str]:
                return ["/a", "/ghost"]

        resolver = Listing({"/a": make_route("a")})
        document = await DocumentCompiler(config, resolver, reporter=reporter).compile()
        assert list(document["paths"]) == ["/a"]
        assert reporter.events[0].route == "/ghost"

    async def test_timeout_treated_as_failure(self, reporter: RecordingReporter) -> None:
        config = get_config(resolve_timeout=0.05)
        resolver = ScriptedResolver(
            {"/fast": make_route("fast"), "/slow": make_route("slow")},
            delays={"/slow": 5},
        )
        document = await DocumentCompiler(config, resolver, reporter=reporter).compile()
        assert list(document["paths"]) == ["/fast"]
        warnings = reporter.of_kind(WarningKind.ROUTE_RESOLUTION)
        assert len(warnings) == 1
        assert "Timed out" in warnings[0].message

    async def test_schema_failure_does_not_drop_route(
        self, config: DocsConfig, reporter: RecordingReporter
    ) -> None:
        from fastapi_rest_docs.definitions import OperationMetadata, ResponseSpec

        route = RouteDefinition(
            methods={
                "GET": OperationMetadata(
                    responses=(ResponseSpec(status=200, schema=object()),)
                )
            }
        )
        resolver = InMemoryRouteResolver({"/a": route})
        document = await DocumentCompiler(config, resolver, reporter=reporter).compile()
        assert document["paths"]["/a"]["get"]["responses"]["200"]["content"] == {
            "application/json": {"schema": {}}
        }
        assert reporter.of_kind(WarningKind.SCHEMA_CONVERSION)


class TestDeterminism:
    async def test_merge_order_independent_of_completion(
        self, config: DocsConfig, reporter: RecordingReporter
    ) -> None:
        resolver = ScriptedResolver(
            {"/c": make_route("c"), "/a": make_route("a"), "/b": make_route("b")},
            delays={"/a": 0.03, "/b": 0.02, "/c": 0.0},
        )
        document = await DocumentCompiler(config, resolver, reporter=reporter).compile()
        assert list(document["paths"]) == ["/a", "/b", "/c"]

    async def test_compile_twice_identical(
        self, config: DocsConfig, todo_route: RouteDefinition
    ) -> None:
        resolver = InMemoryRouteResolver({"/todos": todo_route, "/a": make_route("a")})
        compiler = DocumentCompiler(config, resolver)
        first = await compiler.compile()
        second = await compiler.compile()
        assert to_json(first) == to_json(second)
        assert to_yaml(first) == to_yaml(second)


class TestBaseDocument:
    async def test_openapi_version_forced(self) -> None:
        config = get_config(openapi_document={"openapi": "3.0.0"})
        document = await DocumentCompiler(config).compile()
        assert document["openapi"] == "3.1.0"

    async def test_base_fields_kept(self, todo_route: RouteDefinition) -> None:
        config = get_config(
            openapi_document={
                "info": {"title": "Todo API", "version": "2.0.0"},
                "servers": [{"url": "https://api.example.com"}],
                "components": {"securitySchemes": {"Bearer": {"type": "http"}}},
            }
        )
        resolver = InMemoryRouteResolver({"/todos": todo_route})
        document = await DocumentCompiler(config, resolver).compile()
        assert document["info"]["title"] == "Todo API"
        assert document["servers"] == [{"url": "https://api.example.com"}]
        assert "Bearer" in document["components"]["securitySchemes"]
        assert "/todos" in document["paths"]

    async def test_discovered_paths_overwrite_base_paths(self) -> None:
        config = get_config(
            openapi_document={
                "paths": {
                    "/a": {"get": {"summary": "hand-written"}, "x-owner": "team-a"},
                    "/manual": {"get": {"summary": "manual"}},
                }
            }
        )
        resolver = InMemoryRouteResolver({"/a": make_route("discovered")})
        document = await DocumentCompiler(config, resolver).compile()
        assert document["paths"]["/a"]["get"]["summary"] == "discovered"
        assert document["paths"]["/a"]["x-owner"] == "team-a"
        assert document["paths"]["/manual"]["get"]["summary"] == "manual"

    async def test_base_document_not_mutated(self, todo_route: RouteDefinition) -> None:
        config = get_config(
            openapi_document={"paths": {"/todos": {"get": {"summary": "old"}}}}
        )
        before = copy.deepcopy(config.openapi_document)
        resolver = InMemoryRouteResolver({"/todos": todo_route})
        document = await DocumentCompiler(config, resolver).compile()
        document["info"]["title"] = "changed"
        assert config.openapi_document == before

    async def test_document_is_json_serializable(
        self, config: DocsConfig, todo_route: RouteDefinition
    ) -> None:
        resolver = InMemoryRouteResolver({"/todos": todo_route})
        document = await DocumentCompiler(config, resolver).compile()
        assert json.loads(to_json(document)) == document


class TestInitInfo:
    def test_logged_once(
        self, config: DocsConfig, caplog: pytest.LogCaptureFixture
    ) -> None:
        compiler = DocumentCompiler(config)
        with caplog.at_level(logging.INFO, logger="fastapi_rest_docs"):
            compiler.log_init_info("http://localhost:8000")
            compiler.log_init_info("http://localhost:8000")
        messages = [r.getMessage() for r in caplog.records]
        assert len(messages) == 1
        assert "http://localhost:8000/docs" in messages[0]
        assert "http://localhost:8000/openapi.yaml" in messages[0]

    def test_not_exposed_hint(self, caplog: pytest.LogCaptureFixture) -> None:
        compiler = DocumentCompiler(get_config(expose_openapi_spec=False))
        with caplog.at_level(logging.INFO, logger="fastapi_rest_docs"):
            compiler.log_init_info("http://localhost:8000")
        assert "not exposed" in caplog.records[0].getMessage()

    def test_suppressed(self, caplog: pytest.LogCaptureFixture) -> None:
        compiler = DocumentCompiler(get_config(suppress_info=True))
        with caplog.at_level(logging.INFO, logger="fastapi_rest_docs"):
            compiler.log_init_info("http://localhost:8000")
        assert caplog.records == []
