"""Markdown image reference scanning and rewriting."""

from picmark.markdown.references import (
    ImageReference,
    ReferenceKind,
    extract_references,
    split_lines,
)
from picmark.markdown.rewriter import detect_line_terminator, rewrite_content

__all__ = [
    "ImageReference",
    "ReferenceKind",
    "extract_references",
    "split_lines",
    "detect_line_terminator",
    "rewrite_content",
]
