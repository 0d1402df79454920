"""Unit tests for mdwiki.migrate."""

import textwrap
from pathlib import Path

from mdwiki.migrate import add_slug, migrate_slugs, repair_delimiters, slugify


def _write_note(directory: Path, name: str, content: str) -> Path:
    path = directory / f"{name}.md"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


class TestSlugify:
    def test_basic(self):
        assert slugify("Hello, World!") == "hello-world"

    def test_collapses_whitespace_and_trims_dashes(self):
        assert slugify("  -- Many   spaces --  ") == "many-spaces"

    def test_symbols_only(self):
        assert slugify("?!") == ""


class TestRepairDelimiters:
    def test_glued_closing_delimiter(self):
        assert repair_delimiters("---\ntitle: Foo---\nBody") == "---\ntitle: Foo\n---\nBody"

    def test_well_formed_untouched(self):
        text = "---\ntitle: Foo\n---\nA line ending in---"
        assert repair_delimiters(text) == text

    def test_no_frontmatter_untouched(self):
        assert repair_delimiters("plain---text") == "plain---text"


class TestAddSlug:
    def test_inserted_after_title(self):
        out = add_slug("---\ntitle: My Note\ndate: 2024-01-01\n---\n\nBody", "file")
        assert out == "---\ntitle: My Note\nslug: my-note\ndate: 2024-01-01\n---\n\nBody"

    def test_inserted_first_without_title(self):
        out = add_slug("---\ndate: 2024-01-01\n---\nBody", "From File")
        assert out == "---\nslug: from-file\ndate: 2024-01-01\n---\nBody"

    def test_existing_slug_kept(self):
        text = "---\ntitle: T\nslug: custom\n---\nBody"
        assert add_slug(text, "file") == text

    def test_unusable_title_uses_filename(self):
        out = add_slug("---\ntitle: ???\n---\nBody", "backup-name")
        assert "slug: backup-name" in out

    def test_no_frontmatter(self):
        assert add_slug("Just text", "file") is None


class TestMigrateSlugs:
    def test_updates_and_skips(self, tmp_path: Path, caplog):
        a = _write_note(tmp_path, "a", """\
            ---
            title: Alpha Note
            ---
            Body.
        """)
        _write_note(tmp_path, "b", """\
            ---
            title: Beta
            slug: beta
            ---
            Body.
        """)
        _write_note(tmp_path, "plain", "No frontmatter.\n")
        c = _write_note(tmp_path, "sub/c", "---\ntitle: Gamma---\nBody.\n")

        changed = migrate_slugs(tmp_path)

        assert changed == [a, c]
        assert "slug: alpha-note" in a.read_text(encoding="utf-8")
        assert c.read_text(encoding="utf-8") == "---\ntitle: Gamma\nslug: gamma\n---\nBody.\n"
        assert "skipping" in caplog.text

    def test_undecodable_note_skipped(self, tmp_path: Path, caplog):
        (tmp_path / "a-binary.md").write_bytes(b"\xff\xfe\xfa not utf-8")
        b = _write_note(tmp_path, "b", "---\ntitle: Beta\n---\nBody.\n")

        assert migrate_slugs(tmp_path) == [b]
        assert (tmp_path / "a-binary.md").read_bytes() == b"\xff\xfe\xfa not utf-8"
        assert "not valid UTF-8" in caplog.text

    def test_second_run_changes_nothing(self, tmp_path: Path):
        _write_note(tmp_path, "a", "---\ntitle: A\n---\nBody.\n")
        migrate_slugs(tmp_path)
        assert migrate_slugs(tmp_path) == []
