"""Write-back primitives for the content directory.

Every operation either succeeds or raises :class:`WriteBackError` with a
message meant for the user.  Nothing is retried and the in-memory index is
never updated from here; the live index picks up adds and deletes through
its watcher.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from mdwiki.errors import WriteBackError
from mdwiki.frontmatter import stringify_frontmatter

_FORBIDDEN_RE = re.compile(r'[\\/:*?"<>|]')


def sanitize_filename(name: str | None) -> str:
    """Replace characters that are not allowed in file names with ``-``."""
    if not name:
        return ""
    return _FORBIDDEN_RE.sub("-", name).strip()


class ContentStore:
    """Read and write files below a content root."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def _resolve(self, rel_path: str | Path) -> Path:
        root = self.root.resolve()
        path = (root / rel_path).resolve()
        if path != root and root not in path.parents:
            raise WriteBackError(f"path escapes the content directory: {rel_path}", str(rel_path))
        return path

    def read(self, rel_path: str | Path) -> str:
        path = self._resolve(rel_path)
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise WriteBackError(f"cannot read {rel_path}: {exc}", str(rel_path)) from exc

    def write(self, rel_path: str | Path, content: str) -> None:
        path = self._resolve(rel_path)
        try:
            path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise WriteBackError(f"cannot write {rel_path}: {exc}", str(rel_path)) from exc

    def create(self, rel_path: str | Path, content: str = "") -> None:
        path = self._resolve(rel_path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("x", encoding="utf-8") as fh:
                fh.write(content)
        except FileExistsError as exc:
            raise WriteBackError(f"{rel_path} already exists", str(rel_path)) from exc
        except OSError as exc:
            raise WriteBackError(f"cannot create {rel_path}: {exc}", str(rel_path)) from exc

    def delete(self, rel_path: str | Path) -> None:
        path = self._resolve(rel_path)
        if path == self.root.resolve():
            raise WriteBackError("refusing to delete the content directory", str(rel_path))
        try:
            if path.is_dir():
                path.rmdir()
            else:
                path.unlink()
        except OSError as exc:
            raise WriteBackError(f"cannot delete {rel_path}: {exc}", str(rel_path)) from exc

    def create_dir(self, rel_path: str | Path) -> None:
        path = self._resolve(rel_path)
        try:
            path.mkdir(parents=True)
        except OSError as exc:
            raise WriteBackError(f"cannot create directory {rel_path}: {exc}", str(rel_path)) from exc

    def rename(self, old_path: str | Path, new_path: str | Path) -> None:
        src = self._resolve(old_path)
        dst = self._resolve(new_path)
        if dst.exists():
            raise WriteBackError(f"{new_path} already exists", str(new_path))
        try:
            src.rename(dst)
        except OSError as exc:
            raise WriteBackError(f"cannot rename {old_path} to {new_path}: {exc}", str(old_path)) from exc

    def save_note(self, rel_path: str | Path, metadata: dict[str, Any], body: str) -> str:
        """Serialize *metadata* and *body* and write them to *rel_path*."""
        text = stringify_frontmatter(metadata, body)
        self.write(rel_path, text)
        return text
