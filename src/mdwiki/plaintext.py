"""Markdown to plain text, for search results.

The stages run in a fixed order, each one on the previous stage's output.
The result is always a single line.
"""

from __future__ import annotations

import re

# Leading frontmatter block (same delimiters as the codec)
_FRONTMATTER_RE = re.compile(r"^\s*---\s*[\r\n]+.*?[\r\n]+---\s*[\r\n]*", re.DOTALL)
_HTML_RE = re.compile(r"<[^>]*>")
_IMAGE_RE = re.compile(r"!\[(.*?)\]\s*\(.*?\)")
_LINK_RE = re.compile(r"\[(.*?)\]\s*\(.*?\)")
# [[Title]] or [[Title|Alias]] -> Alias or Title
_WIKILINK_RE = re.compile(r"\[\[([^|\]]+\|)?([^\]]+)\]\]")
_ATX_HEADING_RE = re.compile(r"^[ \t]{0,3}#{1,6}[ \t]*([^#\n]*?)[ \t]*#*[ \t]*$", re.MULTILINE)
_SETEXT_RE = re.compile(r"^[=\-]{2,}\s*$", re.MULTILINE)
_EMPHASIS_RE = re.compile(r"([*_]{1,3})(\S.*?\S?)\1")
_BLOCKQUOTE_RE = re.compile(r"^\s{0,3}>\s?", re.MULTILINE)
_FENCE_RE = re.compile(r"(`{3,})(.*?)\1", re.DOTALL)
_INLINE_CODE_RE = re.compile(r"`(.+?)`")
_HR_RE = re.compile(r"^[-*_]{3,}\s*$", re.MULTILINE)
_BULLET_RE = re.compile(r"^\s*[*\-+]\s+", re.MULTILINE)
_NUMBERED_RE = re.compile(r"^\s*\d+\.\s+", re.MULTILINE)
_ISOLATED_MARKER_RE = re.compile(r"(^|\s)[*\-_]+(\s|$)")
_STRAY_MARKER_RE = re.compile(r"[*\-_]")
_WHITESPACE_RE = re.compile(r"\s+")

ELLIPSIS = "..."


def strip_markdown(markdown: str | None) -> str:
    """Return *markdown* as plain text on one line."""
    if not markdown:
        return ""
    out = _FRONTMATTER_RE.sub("", markdown, count=1)
    out = _HTML_RE.sub("", out)
    out = _IMAGE_RE.sub(r"\1", out)
    out = _LINK_RE.sub(r"\1", out)
    out = _WIKILINK_RE.sub(r"\2", out)
    out = _ATX_HEADING_RE.sub(r"\1", out)
    out = _SETEXT_RE.sub("", out)
    # twice, for one level of nesting like ***text***
    out = _EMPHASIS_RE.sub(r"\2", out)
    out = _EMPHASIS_RE.sub(r"\2", out)
    out = _BLOCKQUOTE_RE.sub("", out)
    out = _FENCE_RE.sub(r"\2", out)
    out = _INLINE_CODE_RE.sub(r"\1", out)
    out = _HR_RE.sub("", out)
    out = _BULLET_RE.sub("", out)
    out = _NUMBERED_RE.sub("", out)
    out = _ISOLATED_MARKER_RE.sub(r"\1\2", out)
    out = _STRAY_MARKER_RE.sub("", out)
    return _WHITESPACE_RE.sub(" ", out).strip()


def _head(text: str, length: int) -> str:
    return text[:length] + (ELLIPSIS if len(text) > length else "")


def get_search_snippet(content: str | None, query: str | None = "", length: int = 120) -> str:
    """Return about *length* characters of plain text around *query*.

    With no query, or when the query does not occur, the start of the text is
    returned.  Otherwise the window is centred on the first case-insensitive
    match and marked with ``...`` on any side where text was cut.
    """
    text = strip_markdown(content)
    if not query or not query.strip():
        return _head(text, length)

    pos = text.lower().find(query.lower())
    if pos == -1:
        return _head(text, length)

    start = max(0, pos - length // 2)
    end = min(len(text), start + length)
    snippet = text[start:end]
    if start > 0:
        snippet = ELLIPSIS + snippet
    if end < len(text):
        snippet = snippet + ELLIPSIS
    return snippet
