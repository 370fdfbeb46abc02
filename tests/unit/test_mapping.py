"""Tests for reference deduplication and result mapping."""

from pathlib import Path

from picmark.core.mapping import (
    ReplacementEntry,
    UploadOutcome,
    UploadUnit,
    deduplicate,
    map_results,
)
from picmark.core.task import ErrorKind
from picmark.markdown.references import ImageReference, ReferenceKind


def make_ref(
    path: str,
    line: int,
    raw: str | None = None,
    remote: bool = False,
    kind: ReferenceKind = ReferenceKind.MARKDOWN,
) -> ImageReference:
    return ImageReference(
        absolute_path=Path(path),
        raw_url=raw or path,
        line_index=line,
        is_remote=remote,
        kind=kind,
    )


class TestDeduplicate:
    """Tests for deduplicate()."""

    def test_groups_by_resolved_path(self):
        refs = [
            make_ref("/docs/a.png", 0, raw="./a.png"),
            make_ref("/docs/b.png", 1),
            make_ref("/docs/a.png", 4, raw="a.png", kind=ReferenceKind.HTML),
        ]

        units = deduplicate(refs)

        assert [u.absolute_path for u in units] == [Path("/docs/a.png"), Path("/docs/b.png")]
        assert units[0].line_indices == [0, 4]
        assert units[1].line_indices == [1]

    def test_remote_references_dropped(self):
        refs = [make_ref("https://cdn/x.png", 0, remote=True), make_ref("/docs/a.png", 1)]
        units = deduplicate(refs)
        assert [u.absolute_path for u in units] == [Path("/docs/a.png")]

    def test_only_remote_gives_no_units(self):
        assert deduplicate([make_ref("https://cdn/x.png", 0, remote=True)]) == []

    def test_empty(self):
        assert deduplicate([]) == []


class TestMapResults:
    """Tests for map_results()."""

    def test_expands_over_every_reference_to_the_path(self):
        """One upload rewrites both the Markdown and the HTML reference."""
        refs = [
            make_ref("/docs/a.png", 0, raw="./a.png"),
            make_ref("/docs/a.png", 3, raw="a.png", kind=ReferenceKind.HTML),
        ]
        units = deduplicate(refs)
        outcomes = [UploadOutcome.success(units[0], "https://cdn/a.png")]

        entries = map_results(outcomes, units, refs)

        assert entries == [
            ReplacementEntry(line_index=0, remote_url="https://cdn/a.png", raw_url="./a.png"),
            ReplacementEntry(line_index=3, remote_url="https://cdn/a.png", raw_url="a.png"),
        ]

    def test_failed_uploads_produce_no_entries(self):
        refs = [make_ref("/docs/a.png", 0), make_ref("/docs/b.png", 1)]
        units = deduplicate(refs)
        outcomes = [
            UploadOutcome.failure(units[0], ErrorKind.UPLOAD_FAILED, "HTTP 500"),
            UploadOutcome.success(units[1], "https://cdn/b.png"),
        ]

        entries = map_results(outcomes, units, refs)

        assert [e.line_index for e in entries] == [1]

    def test_outcome_order_does_not_matter(self):
        refs = [make_ref("/docs/a.png", 0), make_ref("/docs/b.png", 1)]
        units = deduplicate(refs)
        outcomes = [
            UploadOutcome.success(units[1], "https://cdn/b.png"),
            UploadOutcome.success(units[0], "https://cdn/a.png"),
        ]

        entries = map_results(outcomes, units, refs)

        assert {e.line_index: e.remote_url for e in entries} == {
            0: "https://cdn/a.png",
            1: "https://cdn/b.png",
        }

    def test_unknown_unit_ignored(self):
        refs = [make_ref("/docs/a.png", 0)]
        units = deduplicate(refs)
        stranger = UploadUnit(absolute_path=Path("/docs/zzz.png"), line_indices=[0])

        entries = map_results([UploadOutcome.success(stranger, "https://cdn/z.png")], units, refs)

        assert entries == []

    def test_remote_references_never_mapped(self):
        refs = [make_ref("/docs/a.png", 0), make_ref("https://cdn/x.png", 1, remote=True)]
        units = deduplicate(refs)

        entries = map_results([UploadOutcome.success(units[0], "https://cdn/a.png")], units, refs)

        assert [e.line_index for e in entries] == [0]


class TestUploadOutcome:
    def test_success(self):
        unit = UploadUnit(absolute_path=Path("/a.png"))
        outcome = UploadOutcome.success(unit, "https://cdn/a.png")
        assert outcome.succeeded is True
        assert outcome.error_kind is None

    def test_failure(self):
        unit = UploadUnit(absolute_path=Path("/a.png"))
        outcome = UploadOutcome.failure(unit, ErrorKind.UPLOAD_FAILED, "boom")
        assert outcome.succeeded is False
        assert outcome.remote_url is None
        assert outcome.error_kind == ErrorKind.UPLOAD_FAILED
        assert outcome.error == "boom"
