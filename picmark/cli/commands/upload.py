"""Upload command: upload local images and write rewritten documents."""

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskID, TextColumn
from rich.table import Table

from picmark.cli.shared import apply_overrides, collect_documents, load_settings
from picmark.config import PicmarkSettings
from picmark.core.pipeline import run_upload_tasks
from picmark.core.task import FileTask, LoggingSink, TaskStatus
from picmark.utils.logging import (
    configure_task_logging,
    get_console,
    get_logger,
    setup_task_logging,
)

console = get_console()
log = get_logger(__name__)

_ERROR_MESSAGES = {
    "no-local-images": "No local images found",
    "upload-address-invalid": "Invalid upload address",
    "cancelled": "Cancelled",
    "unknown-error": "Unexpected error (see log file)",
}


@dataclass
class _TaskRow:
    task: FileTask
    progress_id: TaskID
    status: TaskStatus | None = None
    output_path: str | None = None
    error: str | None = None
    failed_count: int = 0
    total: int = 0


class ProgressReporter:
    """Sink that drives one Rich progress bar per file."""

    def __init__(self, progress: Progress, tasks: list[FileTask]) -> None:
        self.progress = progress
        self.rows = {
            task.id: _TaskRow(
                task=task,
                progress_id=progress.add_task(f"[dim]{task.file_name}", total=None),
            )
            for task in tasks
        }

    def __call__(self, status: TaskStatus, params: dict[str, Any]) -> None:
        row = self.rows.get(params["id"])
        if row is None:
            return
        row.status = status
        name = row.task.file_name

        if status == TaskStatus.STARTED:
            self.progress.update(row.progress_id, description=f"[cyan]{name}")
        elif status == TaskStatus.UPLOAD_PROGRESS:
            row.total = params["totalCount"]
            self.progress.update(
                row.progress_id,
                total=params["totalCount"],
                completed=params["uploadedCount"],
            )
        elif status == TaskStatus.ENDED:
            row.output_path = params["outputPath"]
            row.failed_count = params.get("failedCount", 0)
            total = row.total or 1
            self.progress.update(
                row.progress_id, description=f"[green]{name}", total=total, completed=total
            )
        elif status == TaskStatus.ABORTED:
            row.error = params["error"]
            self.progress.update(row.progress_id, description=f"[red]{name}")
            self.progress.stop_task(row.progress_id)

    @property
    def aborted(self) -> list[_TaskRow]:
        return [row for row in self.rows.values() if row.status == TaskStatus.ABORTED]

    def summary_table(self) -> Table:
        table = Table(show_header=True, header_style="bold")
        table.add_column("File", style="cyan")
        table.add_column("Status")
        table.add_column("Result")

        for row in self.rows.values():
            if row.status == TaskStatus.ENDED:
                status = "[green]done[/green]"
                if row.failed_count:
                    status = f"[yellow]done ({row.failed_count} failed)[/yellow]"
                table.add_row(str(row.task.file_path), status, row.output_path or "")
            elif row.status == TaskStatus.ABORTED:
                message = _ERROR_MESSAGES.get(row.error or "", row.error or "")
                table.add_row(str(row.task.file_path), "[red]aborted[/red]", message)
            else:
                table.add_row(str(row.task.file_path), "[dim]not finished[/dim]", "")
        return table


def _run_with_progress(
    tasks: list[FileTask],
    settings: PicmarkSettings,
    run_id: str,
    log_path: Path,
    verbose: bool = False,
) -> ProgressReporter:
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("({task.completed}/{task.total})"),
        console=console,
        transient=False,
    ) as progress:
        reporter = ProgressReporter(progress, tasks)
        # Console log lines go through the Progress console while the bars are live
        configure_task_logging(log_path, verbose=verbose, console=progress.console)
        try:
            asyncio.run(run_upload_tasks(tasks, LoggingSink(forward=reporter), settings))
        except KeyboardInterrupt:
            log.warning("Task Interrupted by KeyboardInterrupt", run_id=run_id)
            console.print("\n[yellow]Interrupted. Exiting...[/yellow]")
            raise typer.Exit(130) from None
        finally:
            configure_task_logging(log_path, verbose=verbose)
    return reporter


def upload(
    paths: Annotated[
        list[Path],
        typer.Argument(
            help="Markdown files or directories to process.",
            exists=True,
            resolve_path=True,
        ),
    ],
    endpoint: Annotated[
        str | None,
        typer.Option(
            "--endpoint",
            "-e",
            help="Upload URL of the image host (default from config).",
        ),
    ] = None,
    timeout: Annotated[
        float | None,
        typer.Option(
            "--timeout",
            help="Per-upload timeout in seconds; 0 disables it.",
            min=0,
        ),
    ] = None,
    inline: Annotated[
        bool,
        typer.Option(
            "--inline",
            help="Also detect Markdown images that do not start a line.",
        ),
    ] = False,
    recursive: Annotated[
        bool,
        typer.Option(
            "--recursive",
            "-r",
            help="Search directories recursively.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
) -> None:
    """Upload the local images of Markdown documents.

    A rewritten copy named "<name> - <timestamp>.md" is written next to each
    document; the original is left untouched.

    Examples:
        picmark upload notes.md
        picmark upload docs/ -r
        picmark upload notes.md -e http://127.0.0.1:36677/upload --timeout 30
    """
    settings = apply_overrides(load_settings(), endpoint=endpoint, timeout=timeout, inline=inline)

    files = collect_documents(paths, recursive=recursive, extensions=settings.scan.extensions)
    if not files:
        console.print("[yellow]No Markdown documents found.[/yellow]")
        raise typer.Exit(1)

    tasks = [FileTask.from_path(file_path) for file_path in files]

    run_id, log_path = setup_task_logging(
        log_dir=settings.log_dir,
        prefix="upload",
        verbose=verbose,
    )
    if verbose:
        log.info("Logs will be saved to", log_file=str(log_path))
    log.info("Task Configuration", run_id=run_id, config=settings.model_dump())

    reporter = _run_with_progress(tasks, settings, run_id, log_path, verbose=verbose)

    console.print(reporter.summary_table())

    aborted = reporter.aborted
    if aborted:
        console.print(f"[red]{len(aborted)} of {len(tasks)} file(s) aborted.[/red]")
        raise typer.Exit(1)
    console.print(f"[bold green]Processed {len(tasks)} file(s).[/bold green]")
