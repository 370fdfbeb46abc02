"""File system utilities for picmark."""

from pathlib import Path

from picmark.config.constants import DOCUMENT_EXTENSIONS
from picmark.utils.logging import get_logger

log = get_logger(__name__)


def get_unique_path(path: Path) -> Path:
    """Get a unique path by adding a counter suffix if path exists.

    Args:
        path: Original path

    Returns:
        Unique path that doesn't exist
    """
    if not path.exists():
        return path

    stem = path.stem
    suffix = path.suffix
    parent = path.parent

    counter = 1
    while True:
        new_path = parent / f"{stem}_{counter}{suffix}"
        if not new_path.exists():
            return new_path
        counter += 1


def discover_documents(
    directory: Path,
    recursive: bool = False,
    extensions: set[str] | None = None,
) -> list[Path]:
    """Discover Markdown documents in a directory.

    Args:
        directory: Directory to search
        recursive: Search subdirectories
        extensions: File suffixes to include (default: DOCUMENT_EXTENSIONS)

    Returns:
        Sorted list of file paths
    """
    if extensions is None:
        extensions = DOCUMENT_EXTENSIONS

    wanted = {ext.lower() for ext in extensions}
    pattern = "**/*" if recursive else "*"

    files = [
        file_path
        for file_path in directory.glob(pattern)
        if file_path.is_file() and file_path.suffix.lower() in wanted
    ]

    log.debug("Discovered documents", directory=str(directory), count=len(files))
    return sorted(files)
