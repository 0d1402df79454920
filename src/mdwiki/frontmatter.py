"""Frontmatter codec: split a note into ``(metadata, body)`` and back.

This is the editor-facing codec.  It reads ``key: value`` lines only (no
nested YAML) and keeps every value a string, so a note that is parsed and
stringified again comes back unchanged for ``title, slug, date, tags,
category``.  Typed metadata for the index is read by :mod:`mdwiki.parser`.
"""

from __future__ import annotations

import re
from typing import Any

# optional whitespace, "---", newline(s), block (lazy), newline(s), "---", body
FRONTMATTER_RE = re.compile(r"^\s*---\s*[\r\n]+(.*?)[\r\n]+---\s*[\r\n]*(.*)\Z", re.DOTALL)

PREFERRED_ORDER = ("title", "slug", "date", "tags", "category", "fontTheme")


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def parse_metadata_block(block: str) -> dict[str, str]:
    """Parse the lines between the delimiters into a flat ``{key: str}`` map."""
    metadata: dict[str, str] = {}
    for line in block.split("\n"):
        key, sep, value = line.partition(":")
        if not sep:
            continue
        key = key.strip()
        value = _unquote(value.strip())
        if value.startswith("[") and value.endswith("]"):
            value = ", ".join(v.strip() for v in value[1:-1].split(","))
        if key:
            metadata[key] = value
    return metadata


def parse_frontmatter(content: str | None) -> tuple[dict[str, str], str]:
    """Split frontmatter from body text.

    Returns ``(metadata, body)``.  Text without a leading ``---`` block is not
    an error: the result is ``({}, content)``.
    """
    if not content:
        return {}, ""
    match = FRONTMATTER_RE.match(content)
    if not match:
        return {}, content
    return parse_metadata_block(match.group(1)), match.group(2)


def normalize_tags(value: Any) -> list[str]:
    """Turn a tag list or a comma-separated string into a clean list."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        items = [str(t).strip() for t in value]
    else:
        items = [t.strip() for t in str(value).split(",")]
    return [t for t in items if t]


def _render(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return f"[{', '.join(str(v) for v in value)}]"
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def stringify_frontmatter(metadata: dict[str, Any], body: str | None = "") -> str:
    """Render ``metadata`` and ``body`` back into note text.

    Known keys come first in :data:`PREFERRED_ORDER`, then the rest in
    insertion order.  Values are not escaped: a value containing a colon
    or a bare ``---`` line will not survive a round-trip.
    """
    lines = ["---"]
    for key in PREFERRED_ORDER:
        if metadata.get(key) is None:
            continue
        if key == "tags":
            lines.append(f"tags: [{', '.join(normalize_tags(metadata['tags']))}]")
        else:
            lines.append(f"{key}: {_render(metadata[key])}")
    for key, value in metadata.items():
        if key in PREFERRED_ORDER or value is None:
            continue
        lines.append(f"{key}: {_render(value)}")
    lines.append("---")
    return "\n".join(lines) + "\n\n" + (body or "")
