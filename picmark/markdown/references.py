"""Image reference extraction from Markdown documents.

Two passes over the text:

1. Markdown pass: ``![alt](url "title")`` per line. By default only a line that
   *starts* with the image is recognized (``line-start`` mode); ``inline`` mode
   finds every occurrence on the line.
2. HTML pass: ``<img ... src=...>`` tags anywhere in the text.

Markdown results come first, then HTML results, each in document order.
"""

import os
import re
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from picmark.config.settings import ScanMode
from picmark.utils.logging import get_logger

log = get_logger(__name__)

LINE_SPLIT_PATTERN = re.compile(r"\r?\n")

_MARKDOWN_IMAGE_BODY = (
    r"!\[(?P<alt>[^\]]*)\]\(\s*"
    r"(?P<url><[^>]*>|(?:[^()\s\"]|\([^()\s]*\)|\s+(?![\"\s)]))+)"
    r"\s*(?:\"(?P<title>[^\"]*)\"\s*)?\)"
)

# Anchored form used by the line-start scanner and rewriter
MARKDOWN_IMAGE_AT_START = re.compile("^" + _MARKDOWN_IMAGE_BODY)
MARKDOWN_IMAGE = re.compile(_MARKDOWN_IMAGE_BODY)


def _attribute(name: str, optional: bool = False) -> str:
    value = "*" if optional else "+"
    return (
        rf"(?<![\w-]){name}\s*=\s*"
        rf"(?:\"(?P<{name}_dq>[^\"]{value})\""
        rf"|'(?P<{name}_sq>[^']{value})'"
        # an unquoted value stops before the "/" of a self-closing "/>"
        rf"|(?P<{name}_bare>(?:[^\s\"'>/]|/(?!>))+))"
    )


# alt and style are captured only to keep the match anchored on the tag
HTML_IMAGE = re.compile(
    r"<img\b[^>]*?"
    + _attribute("src")
    + r"(?:[^>]*?"
    + _attribute("alt", optional=True)
    + r")?(?:[^>]*?"
    + _attribute("style", optional=True)
    + r")?[^>]*>",
    re.IGNORECASE,
)

HTML_IMAGE_TAG = re.compile(r"<img\b[^>]*>", re.IGNORECASE)
HTML_SRC_ATTRIBUTE = re.compile(_attribute("src"), re.IGNORECASE)

_REMOTE_URL = re.compile(r"^https?://", re.IGNORECASE)


class ReferenceKind(StrEnum):
    """Syntax a reference was written in; selects the rewrite rule."""

    MARKDOWN = "markdown"
    HTML = "html"


@dataclass(frozen=True)
class ImageReference:
    """An image reference found in a document."""

    absolute_path: Path  # only meaningful when not remote
    raw_url: str
    line_index: int
    is_remote: bool
    kind: ReferenceKind


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` or ``\\r\\n``; line indexes are positions in this list."""
    return LINE_SPLIT_PATTERN.split(text)


def is_remote_url(url: str) -> bool:
    return bool(_REMOTE_URL.match(url))


def markdown_url(match: re.Match[str]) -> str:
    """URL of a Markdown image match, without surrounding angle brackets."""
    url = match.group("url").strip()
    if url.startswith("<") and url.endswith(">"):
        url = url[1:-1].strip()
    return url


def html_src(match: re.Match[str]) -> str:
    """Value of the ``src`` attribute of an HTML image match."""
    return match.group("src_dq") or match.group("src_sq") or match.group("src_bare")


def _make_reference(
    raw_url: str, line_index: int, document_dir: Path, kind: ReferenceKind
) -> ImageReference:
    return ImageReference(
        absolute_path=Path(os.path.abspath(os.path.join(document_dir, raw_url))),
        raw_url=raw_url,
        line_index=line_index,
        is_remote=is_remote_url(raw_url),
        kind=kind,
    )


def _is_data_uri(url: str) -> bool:
    return url[:5].lower() == "data:"


def extract_markdown_references(
    text: str, document_path: Path | str, scan_mode: ScanMode = "line-start"
) -> list[ImageReference]:
    """Find Markdown image references, line by line."""
    document_dir = Path(document_path).parent
    references = []

    for index, line in enumerate(split_lines(text)):
        if scan_mode == "inline":
            matches = list(MARKDOWN_IMAGE.finditer(line))
        else:
            match = MARKDOWN_IMAGE_AT_START.match(line)
            matches = [match] if match else []

        for match in matches:
            url = markdown_url(match)
            if not url or _is_data_uri(url):
                continue
            references.append(_make_reference(url, index, document_dir, ReferenceKind.MARKDOWN))

    return references


def extract_html_references(text: str, document_path: Path | str) -> list[ImageReference]:
    """Find ``<img>`` tags over the whole text."""
    document_dir = Path(document_path).parent
    references = []

    for match in HTML_IMAGE.finditer(text):
        src = html_src(match)
        if _is_data_uri(src):
            continue
        # "\r\n" also contains "\n", so this counts lines for both styles
        line_index = text.count("\n", 0, match.start())
        references.append(_make_reference(src, line_index, document_dir, ReferenceKind.HTML))

    return references


def extract_references(
    text: str, document_path: Path | str, scan_mode: ScanMode = "line-start"
) -> list[ImageReference]:
    """Extract all image references: Markdown pass first, then HTML pass.

    Args:
        text: Document content
        document_path: Path of the document; relative URLs resolve against its directory
        scan_mode: ``line-start`` or ``inline`` Markdown scanning

    Returns:
        Ordered list of references (empty when nothing matches)
    """
    markdown_refs = extract_markdown_references(text, document_path, scan_mode)
    html_refs = extract_html_references(text, document_path)

    log.debug(
        "Extracted image references",
        markdown=len(markdown_refs),
        html=len(html_refs),
        scan_mode=scan_mode,
    )
    return [*markdown_refs, *html_refs]
