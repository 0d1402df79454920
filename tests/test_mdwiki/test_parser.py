"""Unit tests for mdwiki.parser (typed frontmatter for the index)."""

import datetime as dt
import textwrap

from mdwiki.parser import is_draft, normalize_date, parse_frontmatter


class TestParseFrontmatter:
    def test_no_frontmatter_returns_empty_dict(self):
        meta, body = parse_frontmatter("Just some text.")
        assert meta == {}
        assert body == "Just some text."

    def test_typed_values(self):
        raw = textwrap.dedent("""\
            ---
            title: My Note
            tags: [a, b]
            date: 2023-01-01
            draft: true
            ---
            Body here.
        """)
        meta, body = parse_frontmatter(raw)
        assert meta["title"] == "My Note"
        assert meta["tags"] == ["a", "b"]
        assert meta["date"] == dt.date(2023, 1, 1)
        assert meta["draft"] is True
        assert body == "Body here.\n"

    def test_invalid_yaml_falls_back_to_line_parser(self):
        raw = "---\ntitle: Colons: everywhere: here\ntags: [x, y\n---\nBody."
        meta, body = parse_frontmatter(raw)
        assert meta["title"] == "Colons: everywhere: here"
        assert body == "Body."

    def test_scalar_yaml_block_falls_back(self):
        meta, _ = parse_frontmatter("---\njust a sentence\n---\nBody.")
        assert meta == {}

    def test_impossible_date_falls_back_to_line_parser(self):
        meta, body = parse_frontmatter("---\ntitle: Odd\ndate: 2024-13-45\n---\nBody.")
        assert meta == {"title": "Odd", "date": "2024-13-45"}
        assert body == "Body."

    def test_february_thirtieth(self):
        meta, _ = parse_frontmatter("---\ndate: 2024-02-30\ndraft: true\n---\n")
        assert meta["date"] == "2024-02-30"
        assert is_draft(meta["draft"])

    def test_text_fields_keep_source_spelling(self):
        raw = "---\ntitle: No\nslug: 0123\ncategory: 2024\ndraft: yes\n---\n"
        meta, _ = parse_frontmatter(raw)
        assert meta["title"] == "No"
        assert meta["slug"] == "0123"
        assert meta["category"] == "2024"
        assert meta["draft"] is True

    def test_quoted_text_fields_unchanged(self):
        meta, _ = parse_frontmatter('---\ntitle: "Yes: really"\n---\n')
        assert meta["title"] == "Yes: really"


class TestNormalizeDate:
    def test_date(self):
        assert normalize_date(dt.date(2023, 1, 1)) == "2023-01-01"

    def test_datetime_keeps_time(self):
        value = dt.datetime(2023, 1, 1, 12, 30, tzinfo=dt.timezone.utc)
        assert normalize_date(value) == "2023-01-01T12:30:00+00:00"

    def test_string_passthrough(self):
        assert normalize_date("last spring") == "last spring"

    def test_missing(self):
        assert normalize_date(None) is None
        assert normalize_date("") is None


class TestIsDraft:
    def test_bool(self):
        assert is_draft(True) is True
        assert is_draft(False) is False

    def test_string(self):
        assert is_draft("TRUE") is True
        assert is_draft("no") is False

    def test_missing(self):
        assert is_draft(None) is False
