"""Helpers shared by the CLI commands."""

from pathlib import Path

import typer
from rich.console import Console

from picmark.config.settings import PicmarkSettings, get_settings
from picmark.exceptions import ConfigurationError
from picmark.utils.fs import discover_documents

console = Console()


def load_settings() -> PicmarkSettings:
    """Load settings, ending the command on a configuration error."""
    try:
        return get_settings()
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1) from e


def collect_documents(
    paths: list[Path], recursive: bool = False, extensions: list[str] | None = None
) -> list[Path]:
    """Expand directories into the Markdown documents they contain.

    Files given explicitly are kept whatever their suffix. Duplicates are
    dropped, first occurrence wins.
    """
    wanted = set(extensions) if extensions else None
    documents: dict[Path, None] = {}

    for path in paths:
        if path.is_dir():
            for found in discover_documents(path, recursive=recursive, extensions=wanted):
                documents.setdefault(found, None)
        else:
            documents.setdefault(path, None)

    return list(documents)


def apply_overrides(
    settings: PicmarkSettings,
    endpoint: str | None = None,
    timeout: float | None = None,
    inline: bool = False,
) -> PicmarkSettings:
    """Copy of ``settings`` with command-line overrides applied.

    A timeout of 0 disables the per-upload timeout.
    """
    settings = settings.model_copy(deep=True)
    if endpoint:
        settings.upload.endpoint = endpoint
    if timeout is not None:
        settings.upload.timeout = timeout or None
    if inline:
        settings.scan.mode = "inline"
    return settings
