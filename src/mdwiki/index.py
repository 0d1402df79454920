"""Tree indexer: scan a content root into a flat list of :class:`Node` records.

Every ``*.md`` file becomes a file node and every directory (on disk, or
implied by a file path) becomes a folder node.  Parent/child links are by
path: ``parent_id`` is the id with its last segment dropped.  Sort indices
come from the per-directory ordering files (see :mod:`mdwiki.ordering`).
"""

from __future__ import annotations

import dataclasses
import datetime as dt
import logging
from pathlib import Path
from typing import Any

from mdwiki.config import load_config
from mdwiki.errors import ScanError
from mdwiki.frontmatter import normalize_tags
from mdwiki.node import Node, Snapshot
from mdwiki.ordering import resolve_sort_order
from mdwiki.parser import is_draft, normalize_date, parse_frontmatter

logger = logging.getLogger(__name__)

DEFAULT_FILE_CATEGORY = "General"
DEFAULT_FOLDER_CATEGORY = "System"


def _hidden(rel: Path) -> bool:
    return any(part.startswith(".") for part in rel.parts)


def _parent_id(segments: list[str]) -> str | None:
    return "/".join(segments[:-1]) if len(segments) > 1 else None


def _created_date(path: Path) -> str:
    st = path.stat()
    ts = getattr(st, "st_birthtime", None) or st.st_mtime
    return dt.date.fromtimestamp(ts).isoformat()


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def read_file_node(content_dir: Path, path: Path) -> Node:
    """Build the file :class:`Node` for the markdown file at *path*."""
    rel = path.relative_to(content_dir).as_posix()
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ScanError(f"cannot read {rel}: {exc}") from exc
    meta, _ = parse_frontmatter(content)

    node_id = rel.replace("\\", "/").removesuffix(".md")
    segments = node_id.split("/")
    default_category = segments[0] if len(segments) > 1 else DEFAULT_FILE_CATEGORY

    return Node(
        id=node_id,
        title=_text(meta.get("title")) or segments[-1],
        parent_id=_parent_id(segments),
        is_folder=False,
        category=_text(meta.get("category")) or default_category,
        slug=_text(meta.get("slug")),
        tags=tuple(normalize_tags(meta.get("tags"))),
        date=normalize_date(meta.get("date")) or _created_date(path),
        draft=is_draft(meta.get("draft")),
        content=content,
        file_path=rel,
        file_name=path.name,
    )


def folder_node(folder_id: str) -> Node:
    segments = folder_id.split("/")
    return Node(
        id=folder_id,
        title=segments[-1],
        parent_id=_parent_id(segments),
        is_folder=True,
        category=segments[0] or DEFAULT_FOLDER_CATEGORY,
    )


def scan(content_dir: Path) -> Snapshot:
    """(Re-)scan *content_dir* and return a complete :class:`Snapshot`.

    Raises :class:`ScanError` when the content root is missing or a file
    cannot be read; no partial snapshot is returned in that case.
    """
    content_dir = Path(content_dir)
    if not content_dir.is_dir():
        raise ScanError(f"content directory not found: {content_dir}")

    files: list[Node] = []
    folder_ids: dict[str, None] = {}
    try:
        for path in sorted(content_dir.rglob("*")):
            rel = path.relative_to(content_dir)
            if _hidden(rel):
                continue
            if path.is_dir():
                folder_ids[rel.as_posix()] = None
            elif path.suffix == ".md" and path.is_file():
                node = read_file_node(content_dir, path)
                files.append(node)
                segments = node.id.split("/")
                for i in range(1, len(segments)):
                    folder_ids["/".join(segments[:i])] = None
    except OSError as exc:
        raise ScanError(f"cannot scan {content_dir}: {exc}") from exc

    file_ids = {n.id for n in files}
    for fid in folder_ids:
        if fid in file_ids:
            logger.warning("folder %s shares its id with a note; keeping the note only", fid)
    nodes = files + [folder_node(fid) for fid in folder_ids if fid not in file_ids]

    groups: dict[str | None, list[Node]] = {}
    for node in nodes:
        groups.setdefault(node.parent_id, []).append(node)

    sort_index: dict[str, int] = {}
    for parent_id, siblings in groups.items():
        directory = content_dir / parent_id if parent_id else content_dir
        sort_index.update(resolve_sort_order(directory, siblings))

    nodes = [dataclasses.replace(n, sort_index=sort_index.get(n.id, 0)) for n in nodes]
    config = load_config(content_dir)
    logger.info("indexed %s: %d nodes", content_dir, len(nodes))
    return Snapshot(nodes=tuple(nodes), config=config)


def sorted_children(snapshot: Snapshot, parent_id: str | None) -> list[Node]:
    """Direct children of *parent_id* in display order (ties keep scan order)."""
    return sorted(
        (n for n in snapshot.nodes if n.parent_id == parent_id),
        key=lambda n: n.sort_index,
    )
