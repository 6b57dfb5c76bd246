"""Tests for loading versifications from YAML."""

from __future__ import annotations

import pytest

from versekit.errors import VersificationError
from versekit.refs import Range, Verse
from versekit.versification.loader import (
    VERSIFICATION_ENV_VAR,
    load_versification,
    parse_versification_data,
)


class TestLoadVersification:
    """Tests for load_versification()."""

    def test_load_file(self, tiny_yaml):
        """A valid file produces a versification."""
        v = load_versification(tiny_yaml)
        assert v.name == "tiny"
        assert [b.id for b in v.order] == ["AAA", "BBB"]
        assert v.book["AAA"].aliases == ("Al",)
        assert v.total_verses == 9

    def test_ids_upper_cased(self, tiny_yaml):
        """Lower-case ids are normalized."""
        v = load_versification(str(tiny_yaml))
        assert "BBB" in v

    def test_range_alias_loaded(self, tiny_yaml):
        """Range aliases resolve against the loaded books."""
        v = load_versification(tiny_yaml)
        assert v.range_aliases[0].refs == (
            Range(Verse("AAA", 1, 1), Verse("BBB", 1, 4)),
        )

    def test_name_defaults_to_stem(self, tmp_path):
        """Unnamed files take their file name."""
        path = tmp_path / "custom.yaml"
        path.write_text("books:\n  - {id: AAA, name: Alpha, verse_counts: [1]}\n")
        assert load_versification(path).name == "custom"

    def test_env_var(self, tiny_yaml, monkeypatch):
        """The path may come from the environment."""
        monkeypatch.setenv(VERSIFICATION_ENV_VAR, str(tiny_yaml))
        assert load_versification().name == "tiny"

    def test_no_path(self, monkeypatch):
        """Without a path or env var loading fails."""
        monkeypatch.delenv(VERSIFICATION_ENV_VAR, raising=False)
        with pytest.raises(VersificationError, match=VERSIFICATION_ENV_VAR):
            load_versification()

    def test_missing_file(self, tmp_path):
        """Missing files raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_versification(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        """Unparseable YAML raises VersificationError."""
        path = tmp_path / "bad.yaml"
        path.write_text("books: [unclosed\n")
        with pytest.raises(VersificationError, match="Cannot parse"):
            load_versification(path)


class TestParseVersificationData:
    """Tests for entry validation."""

    def test_not_a_mapping(self):
        """The top level must be a mapping."""
        with pytest.raises(VersificationError, match="mapping"):
            parse_versification_data(["GEN"])

    def test_missing_books(self):
        """A books list is required."""
        with pytest.raises(VersificationError):
            parse_versification_data({"name": "x"})

    def test_bad_verse_count_names_the_book(self):
        """Book entry errors carry the book id."""
        data = {"books": [{"id": "AAA", "name": "Alpha", "verse_counts": [3, 0]}]}
        with pytest.raises(VersificationError) as exc:
            parse_versification_data(data)
        assert exc.value.key == "AAA"

    def test_entry_without_id_uses_position(self):
        """Entries without an id are named by position."""
        data = {
            "books": [
                {"id": "AAA", "name": "Alpha", "verse_counts": [1]},
                {"name": "Beta", "verse_counts": [1]},
            ]
        }
        with pytest.raises(VersificationError) as exc:
            parse_versification_data(data)
        assert exc.value.key == "books[1]"

    def test_bad_range_alias(self):
        """Alias entries are validated too."""
        data = {
            "books": [{"id": "AAA", "name": "Alpha", "verse_counts": [1]}],
            "range_aliases": [{"start_book": "AAA"}],
        }
        with pytest.raises(VersificationError) as exc:
            parse_versification_data(data)
        assert exc.value.key == "range_aliases[0]"

    def test_default_name(self):
        """default_name applies when the data has none."""
        data = {"books": [{"id": "AAA", "name": "Alpha", "verse_counts": [1]}]}
        assert parse_versification_data(data, default_name="fallback").name == "fallback"
