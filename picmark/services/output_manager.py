"""Output management for rewritten documents.

The rewritten document is written next to its source as a new file named
``"{base} - {unix_timestamp}.{ext}"``. The source file is never modified.
"""

import time
from pathlib import Path
from typing import Literal

import anyio

from picmark.config.constants import DEFAULT_OUTPUT_SEPARATOR
from picmark.utils.fs import get_unique_path
from picmark.utils.logging import get_logger

log = get_logger(__name__)


def split_file_name(file_name: str) -> tuple[str, str | None]:
    """Split a file name into base and extension at the *last* dot.

    A leading dot (``.notes``) is part of the base, not an extension.

    Examples:
        >>> split_file_name("report.v2.md")
        ('report.v2', 'md')
        >>> split_file_name("README")
        ('README', None)
    """
    base, dot, extension = file_name.rpartition(".")
    if not dot or not base:
        return file_name, None
    return base, extension


class OutputManager:
    """Derives output paths and writes rewritten documents."""

    def __init__(
        self,
        separator: str = DEFAULT_OUTPUT_SEPARATOR,
        on_conflict: Literal["overwrite", "rename"] = "rename",
    ) -> None:
        """Initialize the output manager.

        Args:
            separator: Text between the base name and the timestamp
            on_conflict: Strategy for an existing output file
                - "overwrite": Overwrite existing file
                - "rename": Add numeric suffix to filename
        """
        self.separator = separator
        self.on_conflict = on_conflict

    def derive_output_path(
        self, file_path: Path, file_name: str, timestamp: int | None = None
    ) -> Path:
        """Sibling path of ``file_path`` embedding a Unix timestamp (seconds)."""
        if timestamp is None:
            timestamp = int(time.time())

        base, extension = split_file_name(file_name)
        new_name = f"{base}{self.separator}{timestamp}"
        if extension is not None:
            new_name = f"{new_name}.{extension}"
        return Path(file_path).parent / new_name

    def _resolve_conflict(self, output_path: Path) -> Path:
        if self.on_conflict == "rename":
            return get_unique_path(output_path)
        return output_path

    async def write_output(
        self,
        content: str,
        file_path: Path,
        file_name: str,
        timestamp: int | None = None,
    ) -> Path:
        """Write rewritten content next to the source file.

        Args:
            content: Rewritten document text
            file_path: Path of the source document
            file_name: Name of the source document
            timestamp: Unix timestamp for the name (default: now)

        Returns:
            Path of the written file
        """
        output_path = self._resolve_conflict(
            self.derive_output_path(file_path, file_name, timestamp)
        )

        # newline="" keeps the terminators chosen by the rewriter
        async with await anyio.open_file(output_path, "w", encoding="utf-8", newline="") as f:
            await f.write(content)

        log.info("Wrote output", output_path=str(output_path))
        return output_path
