"""Rewrite image references in a document to their uploaded URLs."""

import re
from collections.abc import Iterable
from typing import TYPE_CHECKING

from picmark.config.settings import ScanMode
from picmark.markdown.references import (
    HTML_IMAGE_TAG,
    HTML_SRC_ATTRIBUTE,
    MARKDOWN_IMAGE,
    MARKDOWN_IMAGE_AT_START,
    html_src,
    markdown_url,
    split_lines,
)

if TYPE_CHECKING:
    from picmark.core.mapping import ReplacementEntry


def detect_line_terminator(text: str) -> str:
    """``\\r\\n`` if the text contains any, else ``\\n``."""
    return "\r\n" if "\r\n" in text else "\n"


def _build_lookup(entries: Iterable["ReplacementEntry"]) -> dict[int, dict[str, str]]:
    lookup: dict[int, dict[str, str]] = {}
    for entry in entries:
        lookup.setdefault(entry.line_index, {})[entry.raw_url] = entry.remote_url
    return lookup


def _markdown_image(match: re.Match[str], remote_url: str) -> str:
    title = match.group("title")
    title_clause = f' "{title}"' if title else ""
    return f"![{match.group('alt')}]({remote_url}{title_clause})"


def replace_markdown_image(
    line: str, urls: dict[str, str], scan_mode: ScanMode = "line-start"
) -> str:
    """Apply the Markdown rule to one line.

    ``line-start`` mode rewrites the image at the start of the line only;
    ``inline`` mode rewrites every mapped image on the line in one pass.
    """
    if not urls:
        return line

    if scan_mode == "inline":

        def substitute(match: re.Match[str]) -> str:
            remote_url = urls.get(markdown_url(match))
            return _markdown_image(match, remote_url) if remote_url else match.group(0)

        return MARKDOWN_IMAGE.sub(substitute, line)

    match = MARKDOWN_IMAGE_AT_START.match(line)
    if not match:
        return line

    remote_url = urls.get(markdown_url(match))
    if not remote_url:
        return line

    return _markdown_image(match, remote_url) + line[match.end() :]


def replace_html_image(
    line: str, urls: dict[str, str], scan_mode: ScanMode = "line-start"
) -> str:
    """Apply the HTML rule to one line.

    Only the ``src`` value changes; other attributes are left as written.
    ``line-start`` mode rewrites the first mapped tag, ``inline`` mode every
    mapped tag.
    """
    if not urls:
        return line

    pieces: list[str] = []
    cursor = 0

    for tag in HTML_IMAGE_TAG.finditer(line):
        src_match = HTML_SRC_ATTRIBUTE.search(tag.group(0))
        if not src_match:
            continue
        remote_url = urls.get(html_src(src_match))
        if not remote_url:
            continue

        start = tag.start() + src_match.start()
        end = tag.start() + src_match.end()
        pieces.append(line[cursor:start])
        pieces.append(f'src="{remote_url}"')
        cursor = end

        if scan_mode != "inline":
            break

    if not pieces:
        return line

    pieces.append(line[cursor:])
    return "".join(pieces)


def rewrite_content(
    content: str,
    entries: Iterable["ReplacementEntry"],
    scan_mode: ScanMode = "line-start",
) -> str:
    """Substitute uploaded URLs into the document in a single pass over its lines.

    The Markdown rule is tried first; the HTML rule only when the Markdown rule
    left the line unchanged. A line changed by either rule is marked processed
    and never touched again. Lines without a mapped URL pass through unchanged,
    and the source's line terminator style is kept.

    Args:
        content: Original document text
        entries: Replacement table
        scan_mode: ``line-start`` or ``inline``

    Returns:
        Rewritten document text
    """
    lookup = _build_lookup(entries)
    processed: set[int] = set()
    result_lines = []

    for index, line in enumerate(split_lines(content)):
        if index in processed:
            result_lines.append(line)
            continue

        urls = lookup.get(index, {})

        new_line = replace_markdown_image(line, urls, scan_mode)
        if new_line == line:
            new_line = replace_html_image(line, urls, scan_mode)

        if new_line != line:
            processed.add(index)
        result_lines.append(new_line)

    return detect_line_terminator(content).join(result_lines)
