"""Wiki configuration.

Two layers:

- ``_config.json`` at the content root, the user-editable wiki config
  (currently just ``{"title": ...}``).  A missing or broken file falls back
  to :data:`DEFAULT_CONFIG`; it never stops the index from loading.
- :class:`Settings`, the process-level options for the CLI and watcher.

Environment variables (all optional; explicit arguments take precedence):
    MDWIKI_CONTENT_DIR     – content root (default ``./content``)
    MDWIKI_OUTPUT          – generated index path (default ``./public/content.json``)
    MDWIKI_POLL_INTERVAL   – watcher poll interval in seconds (default ``1.0``)
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "_config.json"
DEFAULT_CONFIG: dict[str, Any] = {"title": "Wiki"}


def default_config() -> dict[str, Any]:
    return dict(DEFAULT_CONFIG)


def load_config(content_dir: Path) -> dict[str, Any]:
    """Read ``_config.json`` from *content_dir*, falling back to the default."""
    path = Path(content_dir) / CONFIG_FILENAME
    if not path.is_file():
        return default_config()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.warning("could not load %s: %s", path, exc)
        return default_config()
    if not isinstance(data, dict):
        logger.warning("ignoring %s: expected a JSON object, got %s", path, type(data).__name__)
        return default_config()
    return {**DEFAULT_CONFIG, **data}


def is_config_file(path: Path, content_dir: Path) -> bool:
    """True when *path* is the root-level ``_config.json`` of *content_dir*."""
    path = Path(path)
    return path.name == CONFIG_FILENAME and path.parent.resolve() == Path(content_dir).resolve()


@dataclass
class Settings:
    content_dir: Path = Path("content")
    output: Path = Path("public") / "content.json"
    poll_interval: float = 1.0

    @classmethod
    def from_env(cls) -> "Settings":
        interval = os.getenv("MDWIKI_POLL_INTERVAL", "")
        try:
            poll_interval = max(0.1, float(interval)) if interval else 1.0
        except ValueError:
            logger.warning("ignoring MDWIKI_POLL_INTERVAL=%r: not a number", interval)
            poll_interval = 1.0
        return cls(
            content_dir=Path(os.getenv("MDWIKI_CONTENT_DIR", "content")),
            output=Path(os.getenv("MDWIKI_OUTPUT", str(Path("public") / "content.json"))),
            poll_interval=poll_interval,
        )
