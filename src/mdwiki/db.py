"""IndexDB: SQL query view over an index snapshot.

Uses DuckDB (in-memory) as a query engine over the snapshot's nodes and
returns :mod:`polars` DataFrames.

Usage::

    db = IndexDB(snapshot)

    # Free-form SQL
    df = db.query("SELECT id, title FROM nodes WHERE 'python' = ANY(tags)")

    # Full-text search with plain-text snippets
    hits = db.search("wiki")

    # One level of the tree, in display order
    children = db.children("guides")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import duckdb
import polars as pl

from mdwiki.plaintext import get_search_snippet

if TYPE_CHECKING:
    from mdwiki.node import Snapshot

_SEARCH_SCHEMA = {"id": pl.Utf8, "title": pl.Utf8, "category": pl.Utf8, "snippet": pl.Utf8}


class IndexDB:
    """In-memory DuckDB database over the nodes of a :class:`Snapshot`."""

    def __init__(self, snapshot: "Snapshot") -> None:
        self.conn: duckdb.DuckDBPyConnection = duckdb.connect(":memory:")
        self.refresh(snapshot)

    # ------------------------------------------------------------------
    # Build / refresh
    # ------------------------------------------------------------------

    def refresh(self, snapshot: "Snapshot") -> None:
        """(Re-)populate the database from *snapshot* (call after every update)."""
        self._snapshot = snapshot
        self._create_schema()
        self._load_nodes()

    def _create_schema(self) -> None:
        self.conn.execute("""
            CREATE OR REPLACE TABLE nodes (
                id          VARCHAR PRIMARY KEY,
                title       VARCHAR,
                parent_id   VARCHAR,
                is_folder   BOOLEAN,
                category    VARCHAR,
                sort_index  INTEGER,
                slug        VARCHAR,
                tags        VARCHAR[],
                date        VARCHAR,
                draft       BOOLEAN,
                content     TEXT,
                file_path   VARCHAR
            )
        """)

    def _load_nodes(self) -> None:
        rows = [
            (
                n.id,
                n.title,
                n.parent_id,
                n.is_folder,
                n.category,
                n.sort_index,
                n.slug,
                list(n.tags),
                n.date,
                n.draft,
                n.content,
                n.file_path,
            )
            for n in self._snapshot.nodes
        ]
        if rows:
            self.conn.executemany("INSERT INTO nodes VALUES (?,?,?,?,?,?,?,?,?,?,?,?)", rows)

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    def query(self, sql: str) -> pl.DataFrame:
        """Run a raw SQL query and return a Polars DataFrame."""
        return self.conn.execute(sql).pl()

    def search(self, query: str, *, limit: int = 50, length: int = 120) -> pl.DataFrame:
        """Case-insensitive search over note titles and content.

        Title matches rank first.  Each row carries a plain-text ``snippet``
        centred on the match.
        """
        pattern = f"%{query}%"
        rows = self.conn.execute(
            f"""
            SELECT id, title, category, content
            FROM nodes
            WHERE NOT is_folder AND (title ILIKE ? OR content ILIKE ?)
            ORDER BY (title ILIKE ?) DESC, title
            LIMIT {int(limit)}
            """,
            [pattern, pattern, pattern],
        ).fetchall()
        return pl.DataFrame(
            [
                {
                    "id": node_id,
                    "title": title,
                    "category": category,
                    "snippet": get_search_snippet(content, query, length),
                }
                for node_id, title, category, content in rows
            ],
            schema=_SEARCH_SCHEMA,
        )

    def children(self, parent_id: str | None = None) -> pl.DataFrame:
        """Direct children of *parent_id* (``None`` = root) in display order."""
        if parent_id is None:
            where, params = "parent_id IS NULL", []
        else:
            where, params = "parent_id = ?", [parent_id]
        return self.conn.execute(
            f"""
            SELECT id, title, is_folder, draft, sort_index
            FROM nodes
            WHERE {where}
            ORDER BY sort_index, title
            """,
            params,
        ).pl()

    def tag_counts(self) -> pl.DataFrame:
        """Return a tag → count table sorted by frequency."""
        return self.conn.execute(
            """
            SELECT tag, COUNT(*) AS note_count
            FROM (SELECT unnest(tags) AS tag FROM nodes WHERE NOT is_folder)
            GROUP BY tag
            ORDER BY note_count DESC, tag
            """
        ).pl()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> "IndexDB":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()
