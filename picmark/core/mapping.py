"""Deduplication of references into upload units, and mapping results back.

Uploading works on one unit per distinct resolved path. Once the uploads are
done, each successful result is resolved once into a ``path -> remote_url``
dictionary and expanded over *every* local reference sharing that path, so a
Markdown and an HTML reference to the same file both get rewritten.
"""

from dataclasses import dataclass, field
from pathlib import Path

from picmark.core.task import ErrorKind
from picmark.markdown.references import ImageReference
from picmark.utils.logging import get_logger

log = get_logger(__name__)


@dataclass
class UploadUnit:
    """One distinct local path to upload, with every line referencing it."""

    absolute_path: Path
    line_indices: list[int] = field(default_factory=list)


@dataclass
class UploadOutcome:
    """Tagged result of uploading one unit."""

    unit: UploadUnit
    succeeded: bool
    remote_url: str | None = None
    error_kind: ErrorKind | None = None
    error: str | None = None

    @classmethod
    def success(cls, unit: UploadUnit, remote_url: str) -> "UploadOutcome":
        return cls(unit=unit, succeeded=True, remote_url=remote_url)

    @classmethod
    def failure(cls, unit: UploadUnit, error_kind: ErrorKind, error: str) -> "UploadOutcome":
        return cls(unit=unit, succeeded=False, error_kind=error_kind, error=error)


@dataclass(frozen=True)
class ReplacementEntry:
    """Replace ``raw_url`` on line ``line_index`` with ``remote_url``."""

    line_index: int
    remote_url: str
    raw_url: str


def deduplicate(references: list[ImageReference]) -> list[UploadUnit]:
    """Drop remote references and group local ones by resolved path.

    Units keep the order in which their path first appears.
    """
    units: dict[Path, UploadUnit] = {}

    for ref in references:
        if ref.is_remote:
            continue
        unit = units.get(ref.absolute_path)
        if unit is None:
            unit = units[ref.absolute_path] = UploadUnit(absolute_path=ref.absolute_path)
        unit.line_indices.append(ref.line_index)

    return list(units.values())


def map_results(
    outcomes: list[UploadOutcome],
    units: list[UploadUnit],
    references: list[ImageReference],
) -> list[ReplacementEntry]:
    """Expand successful outcomes over every original reference to the same path.

    Args:
        outcomes: Upload outcomes, in any order
        units: The units that were uploaded
        references: The full, undeduplicated reference list

    Returns:
        One entry per local reference whose path uploaded successfully
    """
    known_paths = {unit.absolute_path for unit in units}
    path_to_url: dict[Path, str] = {}

    for outcome in outcomes:
        if not outcome.succeeded or not outcome.remote_url:
            continue
        path = outcome.unit.absolute_path
        if path not in known_paths:
            log.warning("Outcome for unknown upload unit ignored", path=str(path))
            continue
        path_to_url.setdefault(path, outcome.remote_url)

    entries = [
        ReplacementEntry(
            line_index=ref.line_index,
            remote_url=path_to_url[ref.absolute_path],
            raw_url=ref.raw_url,
        )
        for ref in references
        if not ref.is_remote and ref.absolute_path in path_to_url
    ]

    log.debug("Mapped upload results", paths=len(path_to_url), replacements=len(entries))
    return entries
