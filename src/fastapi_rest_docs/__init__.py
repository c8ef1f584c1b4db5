"""FastAPI REST Docs - compile declared endpoints into an OpenAPI document."""

from fastapi_rest_docs.assembler import DEFAULT_RESPONSES, assemble_operation
from fastapi_rest_docs.compiler import DocumentCompiler
from fastapi_rest_docs.config import (
    DEFAULT_CONFIG,
    OPENAPI_VERSION,
    DocsConfig,
    get_config,
)
from fastapi_rest_docs.definitions import (
    OperationMetadata,
    RequestBody,
    ResponseSpec,
    RouteDefinition,
)
from fastapi_rest_docs.exceptions import (
    DocsException,
    InvalidSchemaUsage,
    ReservedPathCollision,
    RouteResolutionFailure,
    UnsupportedSchemaKind,
)
from fastapi_rest_docs.paths import aggregate_path_item, merge_paths
from fastapi_rest_docs.reporting import (
    DocsWarning,
    RecordingReporter,
    WarningKind,
    log_reporter,
)
from fastapi_rest_docs.resolvers import (
    FastAPIRouteResolver,
    HTTPRouteResolver,
    InMemoryRouteResolver,
    RouteResolver,
)
from fastapi_rest_docs.router import docs_router, mount_docs
from fastapi_rest_docs.schema import (
    OpenAPIMeta,
    SchemaAdapter,
    SchemaNormalizer,
    SchemaRegistry,
    SchemaRole,
    ValidationResult,
    get_schema_keys,
    validate_schema,
)
from fastapi_rest_docs.serialization import to_json, to_yaml

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_RESPONSES",
    "OPENAPI_VERSION",
    "DocsConfig",
    "DocsException",
    "DocsWarning",
    "DocumentCompiler",
    "FastAPIRouteResolver",
    "HTTPRouteResolver",
    "InMemoryRouteResolver",
    "InvalidSchemaUsage",
    "OpenAPIMeta",
    "OperationMetadata",
    "RecordingReporter",
    "RequestBody",
    "ReservedPathCollision",
    "ResponseSpec",
    "RouteDefinition",
    "RouteResolutionFailure",
    "RouteResolver",
    "SchemaAdapter",
    "SchemaNormalizer",
    "SchemaRegistry",
    "SchemaRole",
    "UnsupportedSchemaKind",
    "ValidationResult",
    "WarningKind",
    "aggregate_path_item",
    "assemble_operation",
    "docs_router",
    "get_config",
    "get_schema_keys",
    "log_reporter",
    "merge_paths",
    "mount_docs",
    "to_json",
    "to_yaml",
    "validate_schema",
]
