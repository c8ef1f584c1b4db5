"""Shared type aliases and protocols."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from fastapi_rest_docs.reporting import DocsWarning

# Plain JSON-compatible OpenAPI fragments
JSONSchema = dict[str, Any]
OperationObject = dict[str, Any]
PathItemObject = dict[str, Any]
PathsObject = dict[str, PathItemObject]
OpenAPIDocument = dict[str, Any]

# Sink for non-fatal warnings emitted while compiling
Reporter = Callable[["DocsWarning"], None]
