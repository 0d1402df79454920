"""Slug migration and frontmatter repair.

For every note under the content root:

1. Repair a closing delimiter glued onto the previous line
   (``title: Foo---`` becomes ``title: Foo`` + ``---``).
2. If the frontmatter has no ``slug:`` key, insert one right after the
   ``title:`` line (or as the first line), derived from the title or, when
   the title has no usable characters, from the file name.

Notes without frontmatter are skipped with a warning.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from mdwiki.frontmatter import FRONTMATTER_RE

logger = logging.getLogger(__name__)

_TITLE_RE = re.compile(r"^title:[ \t]*(.*)$", re.MULTILINE)
_SLUG_KEY_RE = re.compile(r"^slug:", re.MULTILINE)


def slugify(text: str) -> str:
    slug = re.sub(r"[^\w\s-]", "", text.lower())
    slug = re.sub(r"\s+", "-", slug)
    return slug.strip("-")


def repair_delimiters(content: str) -> str:
    """Split a ``key: value---`` line inside the leading block into two lines."""
    lines = content.split("\n")
    if not lines or lines[0].strip() != "---":
        return content
    for i, line in enumerate(lines[1:], start=1):
        stripped = line.rstrip()
        if stripped == "---":
            break
        if stripped.endswith("---") and ":" in stripped:
            lines[i : i + 1] = [stripped[:-3], "---"]
            break
    return "\n".join(lines)


def add_slug(content: str, fallback_name: str) -> str | None:
    """Return *content* with a ``slug:`` line added, or ``None`` if not possible.

    ``None`` means there is no frontmatter block; content that already has a
    slug is returned unchanged.
    """
    match = FRONTMATTER_RE.match(content)
    if not match:
        return None
    block = match.group(1)
    if _SLUG_KEY_RE.search(block):
        return content

    title = _TITLE_RE.search(block)
    slug = slugify(title.group(1).strip() if title else fallback_name) or slugify(fallback_name)
    if title:
        new_block = block[: title.end()] + f"\nslug: {slug}" + block[title.end() :]
    else:
        new_block = f"slug: {slug}\n{block}"
    return content[: match.start(1)] + new_block + content[match.end(1) :]


def migrate_file(path: Path) -> bool:
    """Repair and slug one note in place.  Returns ``True`` if it was rewritten."""
    try:
        original = path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        logger.warning("skipping %s (not valid UTF-8)", path)
        return False
    content = repair_delimiters(original)
    if content != original:
        logger.info("repaired frontmatter delimiter in %s", path)

    updated = add_slug(content, path.stem)
    if updated is None:
        logger.warning("skipping %s (no frontmatter found)", path)
        updated = content
    if updated == original:
        return False
    path.write_text(updated, encoding="utf-8")
    logger.info("updated %s", path)
    return True


def migrate_slugs(content_dir: Path) -> list[Path]:
    """Run :func:`migrate_file` over every note; return the rewritten paths."""
    content_dir = Path(content_dir)
    changed: list[Path] = []
    for path in sorted(content_dir.rglob("*.md")):
        if any(p.startswith(".") for p in path.relative_to(content_dir).parts):
            continue
        if migrate_file(path):
            changed.append(path)
    logger.info("migration complete: %d notes updated", len(changed))
    return changed
