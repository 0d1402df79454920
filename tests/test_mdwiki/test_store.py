"""Unit tests for mdwiki.store (write-back primitives)."""

from pathlib import Path

import pytest

from mdwiki.errors import WriteBackError
from mdwiki.frontmatter import parse_frontmatter
from mdwiki.store import ContentStore, sanitize_filename


@pytest.fixture()
def store(tmp_path: Path) -> ContentStore:
    return ContentStore(tmp_path)


class TestSanitizeFilename:
    def test_forbidden_characters_replaced(self):
        assert sanitize_filename('a/b\\c:d*e?f"g<h>i|j') == "a-b-c-d-e-f-g-h-i-j"

    def test_trimmed(self):
        assert sanitize_filename("  note  ") == "note"

    def test_empty(self):
        assert sanitize_filename("") == ""
        assert sanitize_filename(None) == ""


class TestReadWrite:
    def test_write_then_read(self, store: ContentStore):
        store.write("a.md", "hello")
        assert store.read("a.md") == "hello"

    def test_read_missing_raises(self, store: ContentStore):
        with pytest.raises(WriteBackError, match="cannot read"):
            store.read("missing.md")

    def test_write_into_missing_dir_raises(self, store: ContentStore):
        with pytest.raises(WriteBackError):
            store.write("no/such/dir.md", "x")

    def test_path_outside_root_rejected(self, store: ContentStore):
        with pytest.raises(WriteBackError, match="escapes"):
            store.write("../outside.md", "x")

    def test_save_note_round_trips(self, store: ContentStore, tmp_path: Path):
        store.save_note("n.md", {"title": "N", "tags": ["a", "b"]}, "Body\n")
        meta, body = parse_frontmatter((tmp_path / "n.md").read_text(encoding="utf-8"))
        assert meta == {"title": "N", "tags": "a, b"}
        assert body == "Body\n"


class TestCreateDeleteRename:
    def test_create(self, store: ContentStore, tmp_path: Path):
        store.create("sub/new.md", "x")
        assert (tmp_path / "sub" / "new.md").read_text(encoding="utf-8") == "x"

    def test_create_existing_raises(self, store: ContentStore):
        store.create("a.md")
        with pytest.raises(WriteBackError, match="already exists"):
            store.create("a.md")

    def test_delete_file(self, store: ContentStore, tmp_path: Path):
        store.create("a.md")
        store.delete("a.md")
        assert not (tmp_path / "a.md").exists()

    def test_delete_empty_dir(self, store: ContentStore, tmp_path: Path):
        store.create_dir("folder")
        store.delete("folder")
        assert not (tmp_path / "folder").exists()

    def test_delete_missing_raises(self, store: ContentStore):
        with pytest.raises(WriteBackError):
            store.delete("missing.md")

    def test_delete_root_refused(self, store: ContentStore):
        with pytest.raises(WriteBackError):
            store.delete(".")

    def test_create_dir_existing_raises(self, store: ContentStore):
        store.create_dir("folder")
        with pytest.raises(WriteBackError):
            store.create_dir("folder")

    def test_rename(self, store: ContentStore, tmp_path: Path):
        store.create("old.md", "x")
        store.rename("old.md", "new.md")
        assert not (tmp_path / "old.md").exists()
        assert (tmp_path / "new.md").read_text(encoding="utf-8") == "x"

    def test_rename_onto_existing_raises(self, store: ContentStore):
        store.create("a.md")
        store.create("b.md")
        with pytest.raises(WriteBackError, match="already exists"):
            store.rename("a.md", "b.md")
