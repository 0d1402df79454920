"""Generate the static index artifact (``content.json``).

The document is ``{"nodes": [...], "config": {...}}``.  File nodes carry
``filePath`` and ``fileName``, and ``content`` is the full raw source with
its frontmatter, so consumers re-parse it themselves.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from mdwiki.index import scan

logger = logging.getLogger(__name__)


def generate_content(content_dir: Path, output_file: Path) -> dict[str, Any]:
    """Scan *content_dir* and write the index document to *output_file*."""
    document = scan(Path(content_dir)).to_dict()
    output_file = Path(output_file)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(json.dumps(document, ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info("wrote %s with %d nodes", output_file, len(document["nodes"]))
    return document
