"""Exception types raised by mdwiki.

Parse-level problems (bad frontmatter, bad ``_config.json`` or ordering
files) never raise; they degrade to defaults.  Only structural scan failures
and write-back failures surface as exceptions.
"""

from __future__ import annotations


class WikiError(Exception):
    """Base class for every error raised by this package."""


class ScanError(WikiError):
    """The content tree could not be read, so no snapshot was produced."""


class WriteBackError(WikiError):
    """A read/write/create/delete/rename on the content tree failed."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path
