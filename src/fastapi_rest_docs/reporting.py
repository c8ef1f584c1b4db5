"""DocsWarning events and the default logging reporter."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class WarningKind(Enum):
    """Categories of non-fatal conditions raised during compilation."""

    SCHEMA_CONVERSION = "schema_conversion"
    ROUTE_RESOLUTION = "route_resolution"
    RESERVED_PATH = "reserved_path"


@dataclass(frozen=True)
class DocsWarning:
    """Single warning event handed to a reporter."""

    kind: WarningKind
    message: str
    route: str | None = None
    operation_id: str | None = None


def log_reporter(event: DocsWarning) -> None:
    """Default reporter: forwards every event to the package logger."""
    logger.warning("%s", event.message, extra={"docs_warning": event.kind.value})


class RecordingReporter:
    """Reporter that keeps events in memory, e.g. for test assertions."""

    def __init__(self) -> None:
        self.events: list[DocsWarning] = []

    def __call__(self, event: DocsWarning) -> None:
        self.events.append(event)

    def of_kind(self, kind: WarningKind) -> list[DocsWarning]:
        return [e for e in self.events if e.kind is kind]
