"""Shared pytest fixtures for fastapi-rest-docs tests."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Annotated

import pytest
from pydantic import BaseModel, Field

from fastapi_rest_docs.config import DocsConfig, get_config
from fastapi_rest_docs.definitions import (
    OperationMetadata,
    RequestBody,
    ResponseSpec,
    RouteDefinition,
)
from fastapi_rest_docs.reporting import RecordingReporter
from fastapi_rest_docs.schema import OpenAPIMeta, SchemaNormalizer


class Todo(BaseModel):
    id: int
    name: Annotated[str, OpenAPIMeta(example="Buy milk", description="What to do")]
    completed: bool = False


class TodoCreate(BaseModel):
    name: str = Field(json_schema_extra={"example": "Walk the dog"})


class ScriptedResolver:
    """Resolver with per-route delays and failures, recording resolve calls."""

    def __init__(
        self,
        definitions: Mapping[str, RouteDefinition],
        *,
        delays: Mapping[str, float] | None = None,
        failures: Mapping[str, Exception] | None = None,
    ) -> None:
        self.definitions = dict(definitions)
        self.delays = dict(delays or {})
        self.failures = dict(failures or {})
        self.resolved: list[str] = []

    async def routes(self) -> list[str]:
        return list(self.definitions)

    async def resolve(self, route: str) -> RouteDefinition:
        self.resolved.append(route)
        if route in self.delays:
            await asyncio.sleep(self.delays[route])
        if route in self.failures:
            raise self.failures[route]
        return self.definitions[route]


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def normalizer(reporter: RecordingReporter) -> SchemaNormalizer:
    return SchemaNormalizer(reporter=reporter)


@pytest.fixture
def config() -> DocsConfig:
    return get_config(
        openapi_json_path="/openapi.json",
        openapi_yaml_path="/openapi.yaml",
        docs_path="/docs",
    )


@pytest.fixture
def todo_route() -> RouteDefinition:
    """A route with one read and one write operation."""
    return RouteDefinition(
        summary="Todos",
        methods={
            "GET": OperationMetadata(
                tags=["todos"],
                operation_id="getTodos",
                responses=(ResponseSpec(status=200, schema=Todo),),
            ),
            "POST": OperationMetadata(
                tags=["todos"],
                operation_id="createTodo",
                request_body=RequestBody(schema=TodoCreate, required=True),
                responses=(
                    ResponseSpec(status=201, schema=Todo, description="Todo created"),
                ),
            ),
        },
    )


def make_route(summary: str) -> RouteDefinition:
    return RouteDefinition(
        methods={"GET": OperationMetadata(summary=summary, operation_id=summary)}
    )
