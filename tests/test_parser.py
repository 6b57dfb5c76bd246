"""Unit tests for the reference parser.

Tests cover:
- Book names, aliases, ids and numbered prefixes
- Whole books and chapters
- Verses, verse lists and ranges
- Cross-chapter and cross-book ranges
- Range aliases and numbered book spans
- Error messages for malformed references
"""

from __future__ import annotations

import pytest

from versekit.errors import ReferenceParseError
from versekit.refs import Range, Verse
from versekit.text.parser import parse, parse_book_name, try_parse


def R(b1, c1, v1, b2, c2, v2):
    return Range(Verse(b1, c1, v1), Verse(b2, c2, v2))


class TestBookNames:
    """Tests for parse_book_name()."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Genesis", "GEN"),
            ("gen", "GEN"),
            ("GEN", "GEN"),
            ("Exod", "EXO"),
            ("Ex", "EXO"),
            ("1 John", "1JN"),
            ("1John", "1JN"),
            ("1st John", "1JN"),
            ("First John", "1JN"),
            ("II John", "2JN"),
            ("III John", "3JN"),
            ("2 THESS", "2TH"),
            ("Second Sam", "2SA"),
            ("song of songs", "SNG"),
            ("Song of Solomon", "SNG"),
            ("SongofSolomon", "SNG"),
            ("sos", "SNG"),
            ("Psalms", "PSA"),
            ("Isa", "ISA"),
            ("Isaiah", "ISA"),
        ],
    )
    def test_known_names(self, v, text, expected):
        """Names, aliases, ids and numbered forms resolve to ids."""
        assert parse_book_name(v, text) == expected

    @pytest.mark.parametrize("text", ["3 Kings", "hello", "Gen 1", "", "4 John"])
    def test_unknown_names(self, v, text):
        """Anything that is not exactly a book name is None."""
        assert parse_book_name(v, text) is None

    def test_custom_versification(self, tiny):
        """Names come from the versification in use."""
        assert parse_book_name(tiny, "Gam") == "CCC"
        assert parse_book_name(tiny, "Alp") == "AAA"
        assert parse_book_name(tiny, "Genesis") is None


class TestWholeBooksAndChapters:
    """Tests for book-only and chapter-only references."""

    def test_whole_book(self, v):
        """A bare book covers the whole book."""
        assert parse(v, "Genesis") == [R("GEN", 1, 1, "GEN", 50, 26)]
        assert parse(v, "Jude") == [R("JUD", 1, 1, "JUD", 1, 25)]

    def test_chapter(self, v):
        """A chapter number covers the whole chapter."""
        assert parse(v, "Genesis 1") == [R("GEN", 1, 1, "GEN", 1, 31)]
        assert parse(v, "GEN1") == [R("GEN", 1, 1, "GEN", 1, 31)]

    def test_chapter_range(self, v):
        """Chapter ranges run to the end of the last chapter."""
        assert parse(v, "Gen 1-3") == [R("GEN", 1, 1, "GEN", 3, 24)]

    def test_chapter_list(self, v):
        """Comma separated chapters."""
        assert parse(v, "Gen 1, 5") == [
            R("GEN", 1, 1, "GEN", 1, 31),
            R("GEN", 5, 1, "GEN", 5, 32),
        ]

    def test_last_chapter(self, v):
        """The last chapter of a book is in range."""
        assert parse(v, "Ruth 4") == [R("RUT", 4, 1, "RUT", 4, 22)]
        assert parse(v, "Gen 50:26") == [Verse("GEN", 50, 26)]


class TestVerses:
    """Tests for verse references."""

    @pytest.mark.parametrize("text", ["Genesis 1:1", "Gen 1v1", "GEN1.1", "gen 1 : 1", "Gen. 1:1"])
    def test_single_verse(self, v, text):
        """Every chapter/verse separator is accepted."""
        assert parse(v, text) == [Verse("GEN", 1, 1)]

    def test_verse_range(self, v):
        """Verse ranges within a chapter."""
        assert parse(v, "Job 8:3-6") == [R("JOB", 8, 3, "JOB", 8, 6)]
        assert parse(v, "Job 8:3 – 6") == [R("JOB", 8, 3, "JOB", 8, 6)]

    def test_verse_list(self, v):
        """Verse lists mix single verses and ranges."""
        assert parse(v, "Gen 1:1,4-6,9") == [
            Verse("GEN", 1, 1),
            R("GEN", 1, 4, "GEN", 1, 6),
            Verse("GEN", 1, 9),
        ]

    def test_chapter_continuation(self, v):
        """A comma may start a new chapter of the same book."""
        assert parse(v, "Gen 1:1,3, 2:5") == [
            Verse("GEN", 1, 1),
            Verse("GEN", 1, 3),
            Verse("GEN", 2, 5),
        ]

    def test_cross_chapter_range(self, v):
        """Ranges may cross chapters."""
        assert parse(v, "Genesis 1:1 - 2:2") == [R("GEN", 1, 1, "GEN", 2, 2)]


class TestCrossBook:
    """Tests for ranges crossing books."""

    def test_verse_to_verse(self, v):
        """Both ends may be full verses."""
        assert parse(v, "Genesis 1:1 - Exodus 2:3") == [R("GEN", 1, 1, "EXO", 2, 3)]

    def test_chapter_to_chapter(self, v):
        """Chapter ends cover whole chapters."""
        assert parse(v, "Gen 50 - Exo 2") == [R("GEN", 50, 1, "EXO", 2, 25)]

    def test_book_to_book(self, v):
        """Book ends cover whole books."""
        assert parse(v, "Gen - Exo") == [R("GEN", 1, 1, "EXO", 40, 38)]

    def test_numbered_books_without_spaces(self, v):
        """Digits in book ids do not confuse the range."""
        assert parse(v, "1JN1:1-2JN1:5") == [R("1JN", 1, 1, "2JN", 1, 5)]
        assert parse(v, "1JN1:1-2;JHN4:5") == [
            R("1JN", 1, 1, "1JN", 1, 2),
            Verse("JHN", 4, 5),
        ]

    def test_continuation_after_cross_book(self, v):
        """Further chapters may follow the closing book."""
        assert parse(v, "Gen 50:1 - Exo 1:2, 5") == [
            R("GEN", 50, 1, "EXO", 1, 2),
            Verse("EXO", 1, 5),
        ]


class TestSpans:
    """Tests for range aliases and numbered book spans."""

    def test_range_alias(self, v):
        """Named spans expand to their books."""
        assert parse(v, "Torah") == [R("GEN", 1, 1, "DEU", 34, 12)]
        assert parse(v, "the Gospels") == [R("MAT", 1, 1, "JHN", 21, 25)]
        assert parse(v, "New Testament") == [R("MAT", 1, 1, "REV", 22, 21)]

    def test_numbered_book_span(self, v):
        """"1-2 Kings" covers both books."""
        assert parse(v, "1-2 Kings") == [R("1KI", 1, 1, "2KI", 25, 30)]

    def test_custom_alias(self, tiny):
        """Aliases come from the versification in use."""
        assert parse(tiny, "first two") == [R("AAA", 1, 1, "BBB", 1, 4)]


class TestBlocks:
    """Tests for multiple blocks."""

    def test_semicolons(self, v):
        """Blocks keep the order they were written in."""
        assert parse(v, "GEN1.1-2; EXO3:4 - DEU5v6,10; Revelation 22") == [
            R("GEN", 1, 1, "GEN", 1, 2),
            R("EXO", 3, 4, "DEU", 5, 6),
            Verse("DEU", 5, 10),
            R("REV", 22, 1, "REV", 22, 21),
        ]

    def test_underscore_blocks(self, v):
        """Underscores separate blocks too."""
        assert parse(v, "gen1v2_exo3") == [
            Verse("GEN", 1, 2),
            R("EXO", 3, 1, "EXO", 3, 22),
        ]

    def test_comma_between_books(self, v):
        """A comma before a book name starts a new block."""
        assert parse(v, "1Sam1,2Sam1") == [
            R("1SA", 1, 1, "1SA", 1, 28),
            R("2SA", 1, 1, "2SA", 1, 27),
        ]


class TestErrors:
    """Tests for malformed input."""

    @pytest.mark.parametrize(
        "text",
        [
            "Gen 1-2-3",
            "Gen 1:2:3",
            "Gen 1:2,3,",
            "Gen 1 a",
            "Gen 1 -",
            "Gen 1:",
            "Gen\n1",
            "Gen 9 - 9",
            "Gen 9 - 5",
            "Gen 1 - 2:3",
            "Gen 1:5-3",
            "Hello 1:1",
        ],
    )
    def test_rejected(self, v, text):
        """Malformed references raise ReferenceParseError."""
        with pytest.raises(ReferenceParseError):
            parse(v, text)

    def test_empty(self, v):
        """Empty input has its own message."""
        with pytest.raises(ReferenceParseError, match="Empty reference"):
            parse(v, "   ")

    def test_message_points_at_column(self, v):
        """The message names the column and what was expected."""
        with pytest.raises(ReferenceParseError) as exc:
            parse(v, "Gen 1:1; Foo 2")
        assert exc.value.offset == 9
        assert "column 10" in str(exc.value)
        assert "Foo" in str(exc.value)
        assert exc.value.text == "Gen 1:1; Foo 2"

    def test_backwards_range_message(self, v):
        """Backwards ranges say what the end must be."""
        with pytest.raises(ReferenceParseError, match="range end greater than 9"):
            parse(v, "Gen 9 - 5")

    @pytest.mark.parametrize(
        "text,message",
        [
            ("Matt 5 - Matt 3", "range end after Matthew 5:1"),
            ("Gen 1:5 - Gen 1:3", "range end after Genesis 1:5"),
            ("Gen 1:5 - Gen 1:5", "range end after Genesis 1:5"),
            ("Exo 2 - Gen 3", "range end after Exodus 2:1"),
            ("Exo - Gen", "range end after Exodus 1:1"),
        ],
    )
    def test_backwards_cross_book_range(self, v, text, message):
        """Naming the book twice does not allow a backwards range."""
        with pytest.raises(ReferenceParseError, match=message):
            parse(v, text)


class TestBounds:
    """Chapter and verse numbers must exist in the versification."""

    @pytest.mark.parametrize(
        "text,message",
        [
            ("Gen 51", "Genesis has only 50 chapters"),
            ("Gen 49-52", "Genesis has only 50 chapters"),
            ("Gen 1 - Exo 99", "Exodus has only 40 chapters"),
            ("Ruth 12", "Ruth has only 4 chapters"),
            ("Jude 2", "Jude has only 1 chapter$"),
            ("Gen 51:1", "Genesis has only 50 chapters"),
            ("Gen 1:32", "Genesis 1 has only 31 verses"),
            ("Gen 1:30-40", "Genesis 1 has only 31 verses"),
            ("Gen 1:1, 40", "Genesis 1 has only 31 verses"),
            ("Gen 1:5 - 2:30", "Genesis 2 has only 25 verses"),
            ("Gen 50:30 - Exo 1", "Genesis 50 has only 26 verses"),
            ("Gen 50 - Exo 1:30", "Exodus 1 has only 22 verses"),
            ("Gen 0", "chapter numbers start at 1"),
            ("Gen 1:0", "verse numbers start at 1"),
        ],
    )
    def test_out_of_range(self, v, text, message):
        """Numbers past the end of a book or chapter are rejected."""
        with pytest.raises(ReferenceParseError, match=message):
            parse(v, text)

    def test_column_of_bad_number(self, v):
        """The error points at the offending chapter/verse specifier."""
        with pytest.raises(ReferenceParseError) as exc:
            parse(v, "Gen 1:1; Gen 51")
        assert exc.value.offset == 13
        assert "column 14" in str(exc.value)

    def test_try_parse_reports_bounds(self, v):
        """try_parse turns the bounds error into a failed result."""
        result = try_parse(v, "Gen 51")
        assert not result.ok
        assert "only 50 chapters" in result.error
        assert result.offset == 4


class TestTryParse:
    """Tests for try_parse()."""

    def test_success(self, v):
        """Successful parses carry the refs."""
        result = try_parse(v, "Gen 1:1")
        assert result.ok
        assert result.refs == [Verse("GEN", 1, 1)]
        assert result.error is None

    def test_failure(self, v):
        """Failures carry the message and offset instead of raising."""
        result = try_parse(v, "Gen 1:")
        assert not result.ok
        assert result.refs == []
        assert result.error
        assert result.offset is not None
        assert result.input == "Gen 1:"
