"""DocsConfig — compiler and docs endpoint configuration."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from fastapi_rest_docs._types import OpenAPIDocument
from fastapi_rest_docs.paths import deep_merge

OPENAPI_VERSION = "3.1.0"
PACKAGE_VERSION = "0.1.0"
INTROSPECTION_USER_AGENT = "fastapi-rest-docs"


def _default_document() -> OpenAPIDocument:
    return {
        "openapi": OPENAPI_VERSION,
        "info": {
            "title": "FastAPI REST Docs",
            "description": "This is an autogenerated OpenAPI spec by FastAPI REST Docs.",
            "version": PACKAGE_VERSION,
        },
        "components": {},
    }


@dataclass(frozen=True)
class DocsConfig:
    """Immutable settings shared by the compiler and the docs router."""

    openapi_document: OpenAPIDocument = field(default_factory=_default_document)
    openapi_json_path: str = "/api/openapi.json"
    openapi_yaml_path: str = "/api/openapi.yaml"
    docs_path: str = "/api"
    docs_title: str = "FastAPI REST Docs"
    denied_paths: tuple[str, ...] = ()
    expose_openapi_spec: bool = True
    suppress_info: bool = False
    resolve_timeout: float = 10.0

    @property
    def reserved_paths(self) -> dict[str, tuple[str, str]]:
        """Map of reserved path -> (human name, config field name)."""
        return {
            self.openapi_json_path: ("OpenAPI JSON spec", "openapi_json_path"),
            self.openapi_yaml_path: ("OpenAPI YAML spec", "openapi_yaml_path"),
            self.docs_path: ("API docs", "docs_path"),
        }


DEFAULT_CONFIG = DocsConfig()


def get_config(
    *, openapi_document: Mapping[str, Any] | None = None, **overrides: Any
) -> DocsConfig:
    """Build a config from the defaults.

    A partial ``openapi_document`` is deep-merged over the default base
    document; every other override replaces the default value.
    """
    document = _default_document()
    if openapi_document is not None:
        document = deep_merge(document, openapi_document)
    if "denied_paths" in overrides:
        overrides["denied_paths"] = tuple(overrides["denied_paths"])
    return replace(DEFAULT_CONFIG, openapi_document=document, **overrides)
