"""DocsException hierarchy for schema and route compilation failures."""

from __future__ import annotations


class DocsException(Exception):
    """Base for all documentation compiler exceptions."""


class UnsupportedSchemaKind(DocsException):
    """Schema value has no introspectable shape and cannot be converted."""

    def __init__(self, detail: str = "Unsupported schema type") -> None:
        super().__init__(detail)
        self.detail = detail


class InvalidSchemaUsage(DocsException):
    """A non-schema value was passed where a schema is required."""

    def __init__(self, detail: str = "Invalid schema") -> None:
        super().__init__(detail)
        self.detail = detail


class RouteResolutionFailure(DocsException):
    """Fetching one route's declared metadata failed."""

    def __init__(
        self, route: str, detail: str = "", *, cause: Exception | None = None
    ) -> None:
        detail = detail or f"Could not resolve route {route}"
        super().__init__(detail)
        self.route = route
        self.detail = detail
        self.cause = cause


class ReservedPathCollision(DocsException):
    """A regular route collides with a path reserved for generated docs."""

    def __init__(self, path: str, name: str, config_name: str) -> None:
        detail = (
            f"{path} is reserved for {name}. Update {config_name} in your"
            " docs config to use this path for other purposes."
        )
        super().__init__(detail)
        self.path = path
        self.name = name
        self.config_name = config_name
        self.detail = detail
