"""Core upload pipeline.

One file task goes through::

    read -> extract references -> deduplicate -> upload (concurrently)
         -> map results -> rewrite -> write new file

and reports ``started``, ``uploadProgress``, then ``ended`` or ``aborted`` to
the sink. Several tasks run fully concurrently; a failing task never affects
the others.
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import anyio
import httpx

from picmark.config.settings import PicmarkSettings
from picmark.core.mapping import deduplicate, map_results
from picmark.core.task import ErrorKind, FileTask, ReportSink, TaskStatus
from picmark.exceptions import NoLocalImagesError, TaskError
from picmark.markdown.references import extract_references
from picmark.markdown.rewriter import rewrite_content
from picmark.services.output_manager import OutputManager
from picmark.services.uploader import ProgressEvent, UploadOrchestrator
from picmark.utils.logging import get_logger, task_context

log = get_logger(__name__)


@dataclass
class PipelineResult:
    """Result of a completed file task."""

    output_path: Path
    uploaded_count: int
    failed_count: int


async def read_document(file_path: Path) -> str:
    """Read a document as UTF-8 text, keeping its line terminators."""
    async with await anyio.open_file(file_path, "r", encoding="utf-8", newline="") as f:
        return await f.read()


class TaskCoordinator:
    """Drives file tasks through the pipeline and reports lifecycle events."""

    def __init__(
        self,
        settings: PicmarkSettings,
        sink: ReportSink,
        uploader: UploadOrchestrator | None = None,
        output_manager: OutputManager | None = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            settings: Application settings
            sink: Receives every lifecycle event
            uploader: Upload orchestrator (default: built from settings)
            output_manager: Output writer (default: built from settings)
        """
        self.settings = settings
        self.sink = sink
        self.uploader = uploader or UploadOrchestrator(
            endpoint=settings.upload.endpoint,
            timeout=settings.upload.timeout,
        )
        self.output_manager = output_manager or OutputManager(
            separator=settings.output.separator,
            on_conflict=settings.output.on_conflict,
        )

    def _report(self, status: TaskStatus, task: FileTask, **params: Any) -> None:
        self.sink(status, {"id": task.id, **params})

    async def _run_pipeline(self, task: FileTask) -> PipelineResult:
        scan_mode = self.settings.scan.mode

        content = await read_document(task.file_path)
        references = extract_references(content, task.file_path, scan_mode)

        units = deduplicate(references)
        if not units:
            raise NoLocalImagesError(str(task.file_path))

        def on_progress(event: ProgressEvent) -> None:
            self._report(
                TaskStatus.UPLOAD_PROGRESS,
                task,
                totalCount=event.total_count,
                uploadedCount=event.uploaded_count,
            )

        outcomes = await self.uploader.upload_all(units, on_progress=on_progress)

        entries = map_results(outcomes, units, references)
        new_content = rewrite_content(content, entries, scan_mode)
        output_path = await self.output_manager.write_output(
            new_content, task.file_path, task.file_name
        )

        failed = sum(1 for o in outcomes if not o.succeeded)
        return PipelineResult(
            output_path=output_path,
            uploaded_count=len(outcomes) - failed,
            failed_count=failed,
        )

    async def process(self, task: FileTask) -> PipelineResult | None:
        """Process one file task.

        Failures become an ``aborted`` event and a None result. Cancellation
        is reported as ``aborted`` with ``cancelled`` and then re-raised.
        """
        with task_context(task.id, str(task.file_path)):
            self._report(TaskStatus.STARTED, task)

            try:
                result = await self._run_pipeline(task)
            except asyncio.CancelledError:
                log.warning("Task cancelled")
                self._report(TaskStatus.ABORTED, task, error=ErrorKind.CANCELLED.value)
                raise
            except TaskError as e:
                log.warning("Task aborted", error=str(e), kind=e.kind.value)
                self._report(TaskStatus.ABORTED, task, error=e.kind.value)
                return None
            except Exception as e:
                log.error("Task failed", error=str(e), exc_info=True)
                self._report(TaskStatus.ABORTED, task, error=ErrorKind.UNKNOWN_ERROR.value)
                return None

            self._report(
                TaskStatus.ENDED,
                task,
                isBuild=result.output_path is not None,
                outputPath=str(result.output_path),
                failedCount=result.failed_count,
            )
            return result

    async def run(self, tasks: list[FileTask]) -> list[PipelineResult | None]:
        """Process all tasks concurrently.

        Errors that escape a task (for example a failing sink) are logged
        and never propagate.
        """
        results = await asyncio.gather(
            *(self.process(task) for task in tasks),
            return_exceptions=True,
        )

        collected: list[PipelineResult | None] = []
        for task, result in zip(tasks, results, strict=True):
            if isinstance(result, BaseException):
                log.error("Unhandled task error", task_id=task.id, error=repr(result))
                collected.append(None)
            else:
                collected.append(result)
        return collected


async def run_upload_tasks(
    tasks: list[FileTask],
    sink: ReportSink,
    settings: PicmarkSettings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> None:
    """Entry point: process tasks and report only through ``sink``.

    Never raises; anything uncaught at this layer is logged.
    """
    try:
        uploader = UploadOrchestrator(
            endpoint=settings.upload.endpoint,
            timeout=settings.upload.timeout,
            transport=transport,
        )
        coordinator = TaskCoordinator(settings, sink, uploader=uploader)
        await coordinator.run(tasks)
    except Exception as e:
        log.error("Upload run failed", error=str(e), exc_info=True)
