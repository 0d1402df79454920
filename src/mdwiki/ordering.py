"""Per-directory display order, kept in ``_meta.json`` / ``_draft_meta.json``.

Each ordering file is a JSON array of base names (no extension).  Names are
only ever appended: the order a user curated is never rewritten.  A file that
does not exist yet is created sorted.

Sort indices:

- published item: its position in ``_meta.json``
- draft item: ``10000 +`` its position in ``_draft_meta.json``, so drafts
  always come after every published sibling

There is no locking; if something else edits an ordering file during a scan,
the last write wins.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mdwiki.node import Node

logger = logging.getLogger(__name__)

META_FILENAME = "_meta.json"
DRAFT_META_FILENAME = "_draft_meta.json"

DRAFT_OFFSET = 10000
MISSING_PUBLISHED = 9999
MISSING_DRAFT = 20000


class _Corrupt(Exception):
    pass


def read_ordering(path: Path) -> list[str] | None:
    """Return the names stored in *path*, or ``None`` when it does not exist.

    Raises :class:`_Corrupt` when the file exists but is not a JSON list.
    """
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise _Corrupt(str(exc)) from exc
    if not isinstance(data, list):
        raise _Corrupt(f"expected a JSON array, got {type(data).__name__}")
    return [str(name) for name in data]


def extend_ordering(path: Path, names: Iterable[str]) -> list[str]:
    """Append any of *names* missing from the ordering file at *path*.

    The file is rewritten only when something was added, or created when it
    did not exist and *names* is non-empty.  An unreadable file is treated as
    empty and left untouched.
    """
    names = list(dict.fromkeys(names))
    try:
        existing = read_ordering(path)
    except _Corrupt as exc:
        logger.warning("ignoring unreadable ordering file %s: %s", path, exc)
        return []

    if existing is None:
        if not names:
            return []
        order = sorted(names)
        _write(path, order)
        logger.info("created %s with %d entries", path, len(order))
        return order

    known = set(existing)
    missing = [n for n in names if n not in known]
    if missing:
        existing.extend(missing)
        _write(path, existing)
        logger.info("appended %d entries to %s", len(missing), path)
    return existing


def _write(path: Path, names: list[str]) -> None:
    try:
        path.write_text(json.dumps(names, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    except OSError as exc:
        logger.warning("could not write ordering file %s: %s", path, exc)


def _positions(order: list[str]) -> dict[str, int]:
    pos: dict[str, int] = {}
    for i, name in enumerate(order):
        pos.setdefault(name, i)
    return pos


def resolve_sort_order(directory: Path, siblings: Iterable["Node"]) -> dict[str, int]:
    """Return ``{node_id: sort_index}`` for the direct children of *directory*."""
    siblings = list(siblings)
    published = [n for n in siblings if not n.draft]
    drafts = [n for n in siblings if n.draft]

    pub_order = extend_ordering(directory / META_FILENAME, (n.name for n in published))
    draft_order = extend_ordering(directory / DRAFT_META_FILENAME, (n.name for n in drafts))
    pub_pos = _positions(pub_order)
    draft_pos = _positions(draft_order)

    result: dict[str, int] = {}
    for node in published:
        result[node.id] = pub_pos.get(node.name, MISSING_PUBLISHED)
    for node in drafts:
        pos = draft_pos.get(node.name)
        result[node.id] = MISSING_DRAFT if pos is None else DRAFT_OFFSET + pos
    return result
