"""mdwiki: content index and frontmatter model for a local markdown wiki."""

from mdwiki.db import IndexDB
from mdwiki.errors import ScanError, WikiError, WriteBackError
from mdwiki.frontmatter import parse_frontmatter, stringify_frontmatter
from mdwiki.index import scan
from mdwiki.live import InotifyWatcher, LiveIndex, PollingWatcher, default_watcher
from mdwiki.node import Node, Snapshot
from mdwiki.plaintext import get_search_snippet, strip_markdown
from mdwiki.store import ContentStore

__all__ = [
    "Node",
    "Snapshot",
    "scan",
    "parse_frontmatter",
    "stringify_frontmatter",
    "strip_markdown",
    "get_search_snippet",
    "LiveIndex",
    "PollingWatcher",
    "InotifyWatcher",
    "default_watcher",
    "ContentStore",
    "IndexDB",
    "WikiError",
    "ScanError",
    "WriteBackError",
]
