"""Typed frontmatter reader used when building the index.

The index wants real types (dates, lists, booleans), so the metadata block is
loaded with YAML, except for the free-text fields in :data:`TEXT_FIELDS`,
which keep the raw text of the line when YAML would turn them into a
bool, number or date.  The block is located with the same delimiter pattern as
:mod:`mdwiki.frontmatter`; when it is not valid YAML the plain ``key: value``
parser is used instead, so a slightly broken note still gets its title.
"""

from __future__ import annotations

import datetime as dt
from typing import Any

import yaml

from mdwiki.frontmatter import FRONTMATTER_RE, parse_metadata_block

# Free-text fields keep their source spelling (`title: No`, `slug: 0123`).
TEXT_FIELDS = ("title", "slug", "category")


def parse_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Split typed YAML front-matter from body text.

    Returns ``(metadata_dict, body)``; ``metadata_dict`` is empty when there
    is no front-matter block.
    """
    match = FRONTMATTER_RE.match(content)
    if not match:
        return {}, content
    block = match.group(1)
    strings = parse_metadata_block(block)
    try:
        meta = yaml.safe_load(block)
    except (yaml.YAMLError, ValueError, TypeError):
        # impossible dates such as 2024-13-45 raise ValueError
        meta = None
    if not isinstance(meta, dict):
        meta = strings
    for key in TEXT_FIELDS:
        if key in strings and not isinstance(meta.get(key), str):
            meta[key] = strings[key]
    return {str(k): v for k, v in meta.items() if k is not None}, match.group(2)


def normalize_date(value: Any) -> str | None:
    """Return *value* as an ISO-8601 string (``None`` stays ``None``).

    ``datetime.date`` becomes ``YYYY-MM-DD``; ``datetime.datetime`` keeps its
    time part.  Anything else is stringified.
    """
    if value is None or value == "":
        return None
    if isinstance(value, (dt.date, dt.datetime)):
        return value.isoformat()
    return str(value)


def is_draft(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return False
