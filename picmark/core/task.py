"""File task model, lifecycle statuses and reporting sinks."""

import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Any, Protocol

from picmark.utils.logging import get_logger

log = get_logger(__name__)


class TaskStatus(StrEnum):
    """Lifecycle status reported for a file task."""

    STARTED = "started"
    UPLOAD_PROGRESS = "uploadProgress"
    ABORTED = "aborted"
    ENDED = "ended"


class ErrorKind(StrEnum):
    """Error kinds carried by ``aborted`` events and failed uploads."""

    NO_LOCAL_IMAGES = "no-local-images"
    UPLOAD_ADDRESS_INVALID = "upload-address-invalid"
    UPLOAD_FAILED = "upload-failed"
    CANCELLED = "cancelled"
    UNKNOWN_ERROR = "unknown-error"


@dataclass(frozen=True)
class FileTask:
    """One document to process, owned by the caller."""

    id: str
    file_path: Path
    file_name: str

    @classmethod
    def from_path(cls, path: Path | str, task_id: str | None = None) -> "FileTask":
        """Create a task for ``path`` with a short generated id."""
        path = Path(path)
        return cls(
            id=task_id or str(uuid.uuid4())[:8],
            file_path=path,
            file_name=path.name,
        )


class ReportSink(Protocol):
    """Receives ``(status, params)`` pairs; ``params`` always carries ``id``."""

    def __call__(self, status: TaskStatus, params: dict[str, Any]) -> None: ...


@dataclass
class TaskEvent:
    """A recorded lifecycle event."""

    status: TaskStatus
    params: dict[str, Any]


@dataclass
class RecordingSink:
    """Sink that keeps every event in memory, in emission order."""

    events: list[TaskEvent] = field(default_factory=list)

    def __call__(self, status: TaskStatus, params: dict[str, Any]) -> None:
        self.events.append(TaskEvent(status=status, params=dict(params)))

    def for_task(self, task_id: str) -> list[TaskEvent]:
        """Events emitted for one task."""
        return [e for e in self.events if e.params.get("id") == task_id]

    def statuses(self, task_id: str) -> list[TaskStatus]:
        return [e.status for e in self.for_task(task_id)]


class LoggingSink:
    """Sink that writes every event to the structured log.

    Optionally forwards to another sink, so it can wrap a UI sink.
    """

    def __init__(self, forward: Callable[[TaskStatus, dict[str, Any]], None] | None = None) -> None:
        self.forward = forward

    def __call__(self, status: TaskStatus, params: dict[str, Any]) -> None:
        if status == TaskStatus.ABORTED:
            log.warning("Task aborted", **params)
        elif status == TaskStatus.UPLOAD_PROGRESS:
            log.debug("Upload progress", **params)
        else:
            log.info(f"Task {status}", **params)
        if self.forward is not None:
            self.forward(status, params)
