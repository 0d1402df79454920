"""Index records: :class:`Node` and :class:`Snapshot`."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True)
class Node:
    """One entry of the content index: a markdown file or a folder.

    ``id`` is the forward-slash path relative to the content root, without
    the ``.md`` extension for files.  ``parent_id`` is ``None`` for top-level
    entries.
    """

    id: str
    title: str
    parent_id: str | None
    is_folder: bool
    category: str
    sort_index: int = 0
    # file-only
    slug: str | None = None
    tags: tuple[str, ...] = ()
    date: str | None = None
    draft: bool = False
    #: Raw file text, frontmatter included
    content: str | None = None
    file_path: str | None = None
    file_name: str | None = None

    @property
    def name(self) -> str:
        """Base name used in ordering files (extension stripped)."""
        return self.id.rsplit("/", 1)[-1]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "parentId": self.parent_id,
            "isFolder": self.is_folder,
            "category": self.category,
            "sortIndex": self.sort_index,
        }
        if self.is_folder:
            data["children"] = []
            return data
        data.update(
            {
                "slug": self.slug,
                "tags": list(self.tags),
                "date": self.date,
                "draft": self.draft,
                "content": self.content,
                "filePath": self.file_path,
                "fileName": self.file_name,
            }
        )
        return data


@dataclass(frozen=True)
class Snapshot:
    """The complete index state handed to subscribers, never a diff."""

    nodes: tuple[Node, ...] = ()
    config: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # read-only view over a private copy
        object.__setattr__(self, "config", MappingProxyType(dict(self.config)))

    def get(self, node_id: str) -> Node | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "config": dict(self.config),
        }
