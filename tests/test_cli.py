"""Tests for the versekit command line."""

from __future__ import annotations

import json
import logging

import pytest
from click.testing import CliRunner

from versekit.__main__ import cli


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Run every command without VERSEKIT_* settings from the caller."""
    for name in (
        "VERSEKIT_VERSIFICATION",
        "VERSEKIT_LOG_LEVEL",
        "VERSEKIT_FORMAT_PRESET",
        "VERSEKIT_USE_BOOK_ID",
        "VERSEKIT_VERSE_SEPARATOR",
        "VERSEKIT_STRIP_WHITESPACE",
        "VERSEKIT_COMBINE_RANGES",
        "VERSEKIT_COMPACT",
    ):
        monkeypatch.delenv(name, raising=False)
    package_logger = logging.getLogger("versekit")
    saved = (package_logger.handlers[:], package_logger.level, package_logger.propagate)
    yield
    package_logger.handlers = saved[0]
    package_logger.setLevel(saved[1])
    package_logger.propagate = saved[2]


@pytest.fixture
def runner():
    return CliRunner()


def run_json(runner, *args):
    result = runner.invoke(cli, ["--json", *args])
    return result, json.loads(result.output)


def verse(book, chapter, v):
    return {"book": book, "chapter": chapter, "verse": v}


def span(start, end):
    return {"is_range": True, "start": verse(*start), "end": verse(*end)}


class TestParseCommand:
    """Tests for `versekit parse`."""

    def test_json(self, runner):
        result, data = run_json(runner, "parse", "Gen 1:1-3; Exo 2")
        assert result.exit_code == 0
        assert data["refs"] == [
            span(("GEN", 1, 1), ("GEN", 1, 3)),
            span(("EXO", 2, 1), ("EXO", 2, 25)),
        ]
        assert data["verse_count"] == 28

    def test_url_token(self, runner):
        result, data = run_json(runner, "parse", "--url", "gen3v2,4")
        assert result.exit_code == 0
        assert data["refs"] == [verse("GEN", 3, 2), verse("GEN", 3, 4)]

    def test_table(self, runner):
        result = runner.invoke(cli, ["parse", "John 3:16"])
        assert result.exit_code == 0
        assert "John 3:16" in result.output

    def test_error(self, runner):
        """Bad input exits with status 1 and says where it failed."""
        result = runner.invoke(cli, ["parse", "Hello 1:1"])
        assert result.exit_code == 1
        assert "Error" in result.output


class TestFormatCommand:
    """Tests for `versekit format`."""

    @pytest.mark.parametrize(
        "args,expected",
        [
            (["Gen 3:8"], "Genesis 3:8"),
            (["--preset", "url", "Genesis 1:1-3, 5"], "gen1v1-3,5"),
            (["--url", "gen1v2-3"], "Genesis 1:2-3"),
            (["--book-id", "--separator", "v", "Genesis 3:8"], "GEN 3v8"),
            (["--strip", "1 John 1:2"], "1John1:2"),
            (["--combine", "Gen 1:3; Gen 1:1-2"], "Genesis 1:1-3"),
        ],
    )
    def test_format(self, runner, args, expected):
        result = runner.invoke(cli, ["format", *args])
        assert result.exit_code == 0
        assert result.output.strip() == expected

    def test_json(self, runner):
        result, data = run_json(runner, "format", "Gen 1:1")
        assert data == {"input": "Gen 1:1", "formatted": "Genesis 1:1"}

    def test_preset_from_env(self, runner, monkeypatch):
        monkeypatch.setenv("VERSEKIT_FORMAT_PRESET", "url")
        result = runner.invoke(cli, ["format", "Genesis 1:1"])
        assert result.output.strip() == "gen1v1"


class TestAlgebraCommands:
    """Tests for combine, split, count and the set commands."""

    def test_combine(self, runner):
        result, data = run_json(runner, "combine", "Gen 1:1-5; Gen 1:3-10; Gen 1:11")
        assert data == [span(("GEN", 1, 1), ("GEN", 1, 11))]

    def test_count(self, runner):
        """Overlaps are counted once."""
        result, data = run_json(runner, "count", "Gen 1; Gen 1:5")
        assert data["verse_count"] == 31

    def test_split_by_book(self, runner):
        result, data = run_json(runner, "split", "--by", "book", "Gen 50 - Exo 1")
        assert data == [
            span(("GEN", 50, 1), ("GEN", 50, 26)),
            span(("EXO", 1, 1), ("EXO", 1, 22)),
        ]

    def test_split_group(self, runner):
        result, data = run_json(runner, "split", "--group", "Gen 1:30 - 2:2; Exo 1:1")
        assert [(g["book"], g["chapter"]) for g in data] == [
            ("GEN", 1),
            ("GEN", 2),
            ("EXO", 1),
        ]

    def test_set_operations(self, runner):
        _, data = run_json(runner, "intersect", "Gen 1:1-10", "Gen 1:5-20")
        assert data == [span(("GEN", 1, 5), ("GEN", 1, 10))]
        _, data = run_json(runner, "union", "Gen 1:1-3", "Gen 1:4-6")
        assert data == [span(("GEN", 1, 1), ("GEN", 1, 6))]
        _, data = run_json(runner, "difference", "Gen 1:1-10", "Gen 1:5")
        assert data == [
            span(("GEN", 1, 1), ("GEN", 1, 4)),
            span(("GEN", 1, 6), ("GEN", 1, 10)),
        ]

    def test_contains_exit_code(self, runner):
        assert runner.invoke(cli, ["contains", "Gen 1", "Gen 1:5"]).exit_code == 0
        assert runner.invoke(cli, ["contains", "Gen 1:5", "Gen 1"]).exit_code == 1


class TestValidationCommands:
    """Tests for validate and repair."""

    def test_validate_error(self, runner):
        """Compact tokens are not bounds checked, so validation reports them."""
        result, data = run_json(runner, "validate", "--url", "gen51v1")
        assert result.exit_code == 1
        assert not data["valid"]
        assert data["findings"][0]["kind"] == "bad_chapter"

    def test_validate_ok(self, runner):
        result = runner.invoke(cli, ["validate", "Gen 1:1"])
        assert result.exit_code == 0
        assert "valid" in result.output

    def test_repair(self, runner):
        result, data = run_json(runner, "repair", "--url", "gen51v1_gen1v99_gen3v5-2")
        assert result.exit_code == 0
        assert data == [
            verse("GEN", 50, 26),
            verse("GEN", 1, 31),
            span(("GEN", 3, 2), ("GEN", 3, 5)),
        ]

    def test_text_is_bounds_checked(self, runner):
        """Out of range text fails while parsing, before validation."""
        result = runner.invoke(cli, ["validate", "Gen 51:1"])
        assert result.exit_code == 1
        assert "chapters" in result.output


class TestVersificationCommands:
    """Tests for books and navigate."""

    def test_books_sequence(self, runner):
        result, data = run_json(runner, "books", "-s", "torah")
        assert [b["id"] for b in data] == ["GEN", "EXO", "LEV", "NUM", "DEU"]
        assert data[0]["chapters"] == 50

    def test_unknown_sequence(self, runner):
        result = runner.invoke(cli, ["books", "-s", "apocrypha"])
        assert result.exit_code == 1

    def test_custom_versification(self, runner, tiny_yaml):
        result = runner.invoke(cli, ["--versification", str(tiny_yaml), "--json", "books"])
        assert [b["id"] for b in json.loads(result.output)] == ["AAA", "BBB"]

    def test_navigate(self, runner):
        _, data = run_json(runner, "navigate", "--to", "next-book", "Gen 3:4")
        assert data == [span(("EXO", 1, 1), ("EXO", 40, 38))]
        _, data = run_json(runner, "navigate", "Gen 50")
        assert data == [span(("EXO", 1, 1), ("EXO", 1, 22))]

    def test_navigate_edge(self, runner):
        """Nothing before the first chapter exits with status 1."""
        result = runner.invoke(cli, ["navigate", "--to", "previous-chapter", "Gen 1"])
        assert result.exit_code == 1
