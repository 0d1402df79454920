"""Unit tests for mdwiki.db.IndexDB."""

import textwrap
from pathlib import Path

import pytest

from mdwiki.db import IndexDB
from mdwiki.index import scan


def _write_note(directory: Path, name: str, content: str) -> None:
    path = directory / f"{name}.md"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content), encoding="utf-8")


@pytest.fixture()
def content(tmp_path: Path) -> Path:
    _write_note(tmp_path, "python", """\
        ---
        title: Python Tips
        tags: [python, code]
        ---
        Use **list** comprehensions.
    """)
    _write_note(tmp_path, "cooking", """\
        ---
        title: Cooking
        tags: [food]
        ---
        # Kitchen

        Python is not a food. Pasta first.
    """)
    _write_note(tmp_path, "drafts/idea", """\
        ---
        title: Idea
        tags: [python]
        ---
        Nothing here yet.
    """)
    return tmp_path


@pytest.fixture()
def db(content: Path):
    with IndexDB(scan(content)) as database:
        yield database


class TestSearch:
    def test_content_match_with_snippet(self, db: IndexDB):
        hits = db.search("pasta")
        assert hits["id"].to_list() == ["cooking"]
        snippet = hits["snippet"][0]
        assert "Pasta first." in snippet
        assert "#" not in snippet

    def test_title_matches_rank_first(self, db: IndexDB):
        hits = db.search("python")
        assert hits["id"][0] == "python"
        assert "cooking" in hits["id"].to_list()

    def test_case_insensitive(self, db: IndexDB):
        assert db.search("PASTA")["id"].to_list() == ["cooking"]

    def test_folders_never_returned(self, db: IndexDB):
        assert "drafts" not in db.search("drafts")["id"].to_list()

    def test_limit(self, db: IndexDB):
        assert db.search("python", limit=1).height == 1

    def test_no_match_is_empty_frame(self, db: IndexDB):
        hits = db.search("zebra")
        assert hits.is_empty()
        assert hits.columns == ["id", "title", "category", "snippet"]


class TestViews:
    def test_children_in_display_order(self, db: IndexDB):
        assert db.children()["id"].to_list() == ["cooking", "drafts", "python"]
        assert db.children("drafts")["id"].to_list() == ["drafts/idea"]

    def test_tag_counts(self, db: IndexDB):
        counts = dict(db.tag_counts().iter_rows())
        assert counts == {"python": 2, "code": 1, "food": 1}
        assert db.tag_counts()["tag"][0] == "python"

    def test_query(self, db: IndexDB):
        df = db.query("SELECT count(*) AS n FROM nodes WHERE is_folder")
        assert df["n"][0] == 1

    def test_refresh(self, db: IndexDB, content: Path):
        _write_note(content, "pasta", "---\ntitle: Pasta\n---\nBoil water.\n")
        db.refresh(scan(content))
        assert db.search("boil")["id"].to_list() == ["pasta"]
