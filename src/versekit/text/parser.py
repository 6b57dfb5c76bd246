"""Reference parsing for human-readable scripture references.

Supported formats:
- Whole book: "Genesis", "Gen", "GEN", "1 Kings", "First John"
- Whole chapters: "Genesis 1", "GEN1", "Gen 1-3", "Gen 1, 5"
- Single verse: "Genesis 1:1", "Gen 1v1", "GEN1.1"
- Verse lists and ranges: "Gen 1:1-4", "Gen 1:1,4-6,9"
- Cross-chapter ranges: "Genesis 1:1 - 2:2"
- Cross-book ranges: "Genesis 1:1 - Exodus 2:3", "Gen 50 - Exo 2", "Gen - Exo"
- Numbered book spans: "1-2 Kings"
- Named spans from the versification: "Torah", "New Testament"
- Several blocks separated by ';' (also ',' or '_' where unambiguous):
  "GEN1.1-2; EXO3:4 - DEU5v6,10; Revelation 22"

Chapter and verse numbers are checked against the versification, so
"Gen 51" and "Gen 1:40" are rejected ("Genesis has only 50 chapters").
Ranges written backwards ("Gen 9 - 5", "Matt 5 - Matt 3") are rejected
too.

Error messages are actionable and point at the column where parsing failed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Callable, Optional, Union

from versekit.engine.ranges import make_book_range
from versekit.errors import RangeConstructionError, ReferenceParseError
from versekit.refs import Range, Ref, Verse
from versekit.versification.model import Versification


# ============================================================================
# Tokens
# ============================================================================

# Whitespace never includes newlines
_SPACE = re.compile(r"[ \t]*")
_INT = re.compile(r"([0-9]+)[ \t]*")
_VERSE_SEP = re.compile(r"[:v.][ \t]*")
_COMMA = re.compile(r",[ \t]*")
_RANGE_SEP = re.compile(r"[ \t]*[-–—][ \t]*")
_BLOCK_SEP = re.compile(r"[ \t]*[;_,][ \t]*")
_LETTER = re.compile(r"[A-Za-z]")
_WORD = re.compile(r"[A-Za-z]+")
_BOOK_ID = re.compile(r"[0-9A-Za-z]{3}")
_BOOK_TRAIL = re.compile(r"\.?[ \t]*")

# Number in front of a book name, as in "1 John" or "First John"
_PREFIX = re.compile(r"1st|2nd|3rd|First|Second|Third|III|II|I|[123]")
_PREFIX_VALUES = {
    "1st": 1,
    "2nd": 2,
    "3rd": 3,
    "First": 1,
    "Second": 2,
    "Third": 3,
    "I": 1,
    "II": 2,
    "III": 3,
    "1": 1,
    "2": 2,
    "3": 3,
}

BOOK_EXPECTATION = "book name (e.g. 'Genesis', '2 Kings')"


# ============================================================================
# Book Name Lookup
# ============================================================================


def _name_key(name: str) -> str:
    """Normalize a book name for lookup: "1Sam" and "1  sam" -> "1 sam"."""
    key = " ".join(name.lower().split())
    return re.sub(r"^([0-9])\s*(?=[a-z])", r"\1 ", key)


def _plural(n: int, noun: str) -> str:
    return f"{n} {noun}" if n == 1 else f"{n} {noun}s"


@dataclass(frozen=True)
class _BookNames:
    names: dict[str, str]
    multiword: tuple[tuple[re.Pattern, str], ...]


@lru_cache(maxsize=16)
def _book_names(v: Versification) -> _BookNames:
    names: dict[str, str] = {}
    multiword: list[tuple[str, str]] = []

    for book in v.order:
        for name in (book.id, book.osis_id, book.name, *book.aliases):
            key = _name_key(name)
            if not key:
                continue
            names.setdefault(key, book.id)
            if " " in key and not key[0].isdigit():
                multiword.append((key, book.id))

    multiword.sort(key=lambda item: len(item[0]), reverse=True)
    patterns = tuple(
        (
            re.compile(
                r"[ \t]+".join(re.escape(w) for w in key.split()) + r"(?![A-Za-z])",
                re.IGNORECASE,
            ),
            book_id,
        )
        for key, book_id in multiword
    )
    return _BookNames(names=names, multiword=patterns)


# ============================================================================
# Chapter/verse specifiers
# ============================================================================

IntRange = tuple[int, Optional[int]]


@dataclass
class _FullChapters:
    """"5" or "5-8"."""

    start: int
    end: int | None
    pos: int = 0


@dataclass
class _VerseList:
    """"5:6", "5:6,12", "5:6-12,14"."""

    chapter: int
    verses: list[IntRange]
    pos: int = 0


@dataclass
class _ChapterRange:
    """"5:12 - 6:13"."""

    c1: int
    v1: int
    c2: int
    v2: int
    pos: int = 0


_ChapterVerse = Union[_FullChapters, _VerseList, _ChapterRange]


class _Parser:
    """Backtracking parser over one input string.

    Every rule either succeeds and advances ``pos``, or fails, restores
    ``pos`` and returns None. The furthest failure position and what was
    expected there are kept for the error message.
    """

    def __init__(self, v: Versification, text: str):
        self.v = v
        self.names = _book_names(v)
        self.text = text
        self.pos = 0
        self.furthest = -1
        self.expected: set[str] = set()

    # -- primitives ---------------------------------------------------------

    def _expect(self, what: str, pos: int | None = None) -> None:
        pos = self.pos if pos is None else pos
        if pos > self.furthest:
            self.furthest = pos
            self.expected = {what}
        elif pos == self.furthest:
            self.expected.add(what)

    def _match(self, regex: re.Pattern, what: str) -> re.Match | None:
        m = regex.match(self.text, self.pos)
        if m is None:
            self._expect(what)
            return None
        self.pos = m.end()
        return m

    def _peek(self, regex: re.Pattern) -> bool:
        return regex.match(self.text, self.pos) is not None

    def _skip_space(self) -> None:
        self.pos = _SPACE.match(self.text, self.pos).end()  # type: ignore[union-attr]

    def _attempt(self, rule: Callable[[], object]):
        start = self.pos
        result = rule()
        if result is None:
            self.pos = start
        return result

    def error(self) -> ReferenceParseError:
        offset = max(self.furthest, 0)
        near = self.text[offset : offset + 12] or "end of input"
        expected = " or ".join(sorted(self.expected)) or "a reference"
        return ReferenceParseError(
            f"Cannot parse reference '{self.text}' at column {offset + 1} "
            f"(near '{near}'): expected {expected}",
            text=self.text,
            offset=offset,
        )

    # -- books --------------------------------------------------------------

    def _multiword_name(self) -> str | None:
        for pattern, book_id in self.names.multiword:
            m = pattern.match(self.text, self.pos)
            if m:
                self.pos = m.end()
                return book_id
        return None

    def _numbered_name(self) -> str | None:
        prefix = _PREFIX.match(self.text, self.pos)
        if prefix is None:
            return None
        self.pos = prefix.end()
        self._skip_space()
        # Only digits may touch the name ("1Sam"); "Isa" is not "I Sa"
        if self.pos == prefix.end() and not prefix.group().isdigit():
            return None
        word = _WORD.match(self.text, self.pos)
        if word is None:
            return None
        key = f"{_PREFIX_VALUES[prefix.group()]} {word.group().lower()}"
        book_id = self.names.names.get(key)
        if book_id is None:
            self._expect(
                f"known book name (got '{self.text[prefix.start():word.end()]}')",
                prefix.start(),
            )
            return None
        self.pos = word.end()
        return book_id

    def _single_word_name(self) -> str | None:
        word = _WORD.match(self.text, self.pos)
        if word is None:
            return None
        book_id = self.names.names.get(word.group().lower())
        if book_id is None:
            self._expect(f"known book name (got '{word.group()}')")
            return None
        self.pos = word.end()
        return book_id

    def _book_id(self) -> str | None:
        m = _BOOK_ID.match(self.text, self.pos)
        if m is None:
            return None
        book_id = m.group().upper()
        if book_id not in self.v.book:
            self._expect(f"known book id (got '{m.group()}')")
            return None
        self.pos = m.end()
        return book_id

    def book(self) -> str | None:
        for rule in (
            self._multiword_name,
            self._numbered_name,
            self._single_word_name,
            self._book_id,
        ):
            book_id = self._attempt(rule)
            if book_id is not None:
                self.pos = _BOOK_TRAIL.match(self.text, self.pos).end()  # type: ignore[union-attr]
                return book_id
        self._expect(BOOK_EXPECTATION)
        return None

    def prefix_number(self) -> int | None:
        m = _PREFIX.match(self.text, self.pos)
        if m is None:
            return None
        self.pos = m.end()
        return _PREFIX_VALUES[m.group()]

    # -- numbers ------------------------------------------------------------

    def integer(self) -> int | None:
        m = self._match(_INT, "number")
        return int(m.group(1)) if m else None

    def int_range(self) -> IntRange | None:
        start_pos = self.pos
        first = self.integer()
        if first is None:
            return None
        before_sep = self.pos
        if not self._match(_RANGE_SEP, "'-'"):
            return (first, None)
        end_pos = self.pos
        end = self.integer()
        if end is None:
            self.pos = before_sep
            return (first, None)
        if end <= first:
            self._expect(f"range end greater than {first}", end_pos)
            self.pos = start_pos
            return None
        return (first, end)

    # -- chapter/verse specifiers ---------------------------------------------

    def _chapter_range(self) -> _ChapterRange | None:
        start = self.pos
        c1 = self.integer()
        if c1 is None or not self._match(_VERSE_SEP, "':'"):
            return None
        v1 = self.integer()
        if v1 is None or not self._match(_RANGE_SEP, "'-'"):
            return None
        end_pos = self.pos
        c2 = self.integer()
        if c2 is None or not self._match(_VERSE_SEP, "':'"):
            return None
        v2 = self.integer()
        if v2 is None:
            return None
        if (c2, v2) <= (c1, v1):
            self._expect(f"range end after {c1}:{v1}", end_pos)
            return None
        return _ChapterRange(c1, v1, c2, v2, pos=start)

    def _full_chapters(self) -> _FullChapters | None:
        start = self.pos
        r = self.int_range()
        if r is None or self._peek(_VERSE_SEP):
            return None
        return _FullChapters(*r, pos=start)

    def _verse_item(self) -> IntRange | None:
        r = self.int_range()
        if r is None or self._peek(_VERSE_SEP):
            return None
        return r

    def _verse_list(self) -> _VerseList | None:
        start = self.pos
        chapter = self.integer()
        if chapter is None or not self._match(_VERSE_SEP, "':'"):
            return None
        first = self._attempt(self._verse_item)
        if first is None:
            return None
        verses = [first]
        while True:
            save = self.pos
            if not self._match(_COMMA, "','"):
                break
            item = self._attempt(self._verse_item)
            if item is None:
                self.pos = save
                break
            verses.append(item)
        return _VerseList(chapter, verses, pos=start)

    def chapter_verse(self) -> _ChapterVerse | None:
        start = self.pos
        for rule in (self._chapter_range, self._full_chapters, self._verse_list):
            spec = self._attempt(rule)
            if spec is not None:
                # "1Sam1,2Sam1" must not read ",2" as chapter 2 of 1 Samuel
                if self._peek(_LETTER):
                    self._expect("',' or ';'")
                    self.pos = start
                    return None
                return spec
        return None

    def chapter_verse_list(self) -> list[_ChapterVerse]:
        first = self._attempt(self.chapter_verse)
        if first is None:
            return []
        specs = [first]
        while True:
            save = self.pos
            if not self._match(_COMMA, "','"):
                break
            spec = self._attempt(self.chapter_verse)
            if spec is None:
                self.pos = save
                break
            specs.append(spec)
        return specs

    # -- reference construction ---------------------------------------------

    def _fail(self, message: str, offset: int) -> ReferenceParseError:
        """Error for input that is well formed but names no real verse."""
        return ReferenceParseError(
            f"Cannot parse reference '{self.text}' at column {offset + 1}: {message}",
            text=self.text,
            offset=offset,
        )

    def _last_verse(self, book: str, chapter: int, pos: int) -> int:
        meta = self.v.book[book]
        if chapter < 1:
            raise self._fail("chapter numbers start at 1", pos)
        if chapter > meta.chapter_count:
            raise self._fail(
                f"{meta.name} has only {_plural(meta.chapter_count, 'chapter')}", pos
            )
        return meta.chapter(chapter).verse_count

    def _verse(self, book: str, chapter: int, verse: int, pos: int) -> Verse:
        """Verse checked against the versification's chapter and verse counts."""
        last = self._last_verse(book, chapter, pos)
        if verse < 1:
            raise self._fail("verse numbers start at 1", pos)
        if verse > last:
            name = self.v.book[book].name
            raise self._fail(
                f"{name} {chapter} has only {_plural(last, 'verse')}", pos
            )
        return Verse(book, chapter, verse)

    def _expand(self, book: str, spec: _ChapterVerse) -> list[Ref]:
        if isinstance(spec, _FullChapters):
            end = spec.end if spec.end is not None else spec.start
            return [
                Range(
                    self._verse(book, spec.start, 1, spec.pos),
                    Verse(book, end, self._last_verse(book, end, spec.pos)),
                )
            ]
        if isinstance(spec, _VerseList):
            refs: list[Ref] = []
            for first, last in spec.verses:
                start = self._verse(book, spec.chapter, first, spec.pos)
                if last is None:
                    refs.append(start)
                else:
                    refs.append(
                        Range(start, self._verse(book, spec.chapter, last, spec.pos))
                    )
            return refs
        return [
            Range(
                self._verse(book, spec.c1, spec.v1, spec.pos),
                self._verse(book, spec.c2, spec.v2, spec.pos),
            )
        ]

    # -- blocks -------------------------------------------------------------

    def _cross_book(self) -> list[Ref] | None:
        b1 = self.book()
        if b1 is None:
            return None

        chapter_pos = self.pos
        chapter = self.integer()
        verse = None
        if chapter is not None:
            after_chapter = self.pos
            sep = _VERSE_SEP.match(self.text, self.pos)
            if sep:
                self.pos = sep.end()
                verse = self.integer()
                if verse is None:
                    self.pos = after_chapter

        if not self._match(_RANGE_SEP, "'-'"):
            return None
        separator_end = self.pos
        b2 = self.book()
        if b2 is None:
            return None

        if chapter is None:
            start = self.v.book[b1].first_verse()
        else:
            start = self._verse(
                b1, chapter, verse if verse is not None else 1, chapter_pos
            )

        specs = self.chapter_verse_list()
        if not specs:
            end = self.v.book[b2].last_verse()
            self._check_order(start, end, separator_end)
            return [Range(start, end)]

        # The first specifier closes the range, so it cannot be a range itself
        head, rest = specs[0], specs[1:]
        if isinstance(head, _FullChapters) and head.end is None:
            end = Verse(b2, head.start, self._last_verse(b2, head.start, head.pos))
        elif isinstance(head, _VerseList) and head.verses[0][1] is None:
            end = self._verse(b2, head.chapter, head.verses[0][0], head.pos)
            if len(head.verses) > 1:
                rest = [_VerseList(head.chapter, head.verses[1:], head.pos)] + rest
        else:
            self._expect("single chapter or verse after cross-book '-'", separator_end)
            return None

        self._check_order(start, end, separator_end)
        refs: list[Ref] = [Range(start, end)]
        for spec in rest:
            refs.extend(self._expand(b2, spec))
        return refs

    def _check_order(self, start: Verse, end: Verse, pos: int) -> None:
        """Reject "Matt 5 - Matt 3" as "Gen 9 - 5" is rejected."""
        first, last = self.v.book[start.book], self.v.book[end.book]
        if (last.index, end.chapter, end.verse) <= (
            first.index,
            start.chapter,
            start.verse,
        ):
            raise self._fail(
                f"expected range end after {first.name} {start.chapter}:{start.verse}",
                pos,
            )

    def _book_block(self) -> list[Ref] | None:
        book = self.book()
        if book is None:
            return None
        specs = self.chapter_verse_list()
        if not specs:
            meta = self.v.book[book]
            return [Range(meta.first_verse(), meta.last_verse())]
        refs: list[Ref] = []
        for spec in specs:
            refs.extend(self._expand(book, spec))
        return refs

    def _numbered_book_range(self) -> list[Ref] | None:
        first = self.prefix_number()
        if first is None or not self._match(_RANGE_SEP, "'-'"):
            return None
        second = self.prefix_number()
        if second is None:
            return None
        self._skip_space()
        word = self._match(_WORD, BOOK_EXPECTATION)
        if word is None or first == second:
            return None

        name = word.group().lower()
        start = self.names.names.get(f"{first} {name}")
        end = self.names.names.get(f"{second} {name}")
        if start is None or end is None:
            self._expect(f"known numbered book (got '{word.group()}')", word.start())
            return None
        try:
            return [make_book_range(self.v, start, end)]
        except RangeConstructionError:
            self._expect("ascending numbered book span", word.start())
            return None

    def _range_alias(self) -> list[Ref] | None:
        for alias in self.v.range_aliases:
            m = alias.pattern.match(self.text, self.pos)
            if m and m.end() > self.pos and not _LETTER.match(self.text, m.end()):
                self.pos = m.end()
                return list(alias.refs)
        return None

    def block(self) -> list[Ref] | None:
        for rule in (
            self._cross_book,
            self._book_block,
            self._numbered_book_range,
            self._range_alias,
        ):
            refs = self._attempt(rule)
            if refs is not None:
                return refs
        return None

    def references(self) -> list[Ref] | None:
        first = self._attempt(self.block)
        if first is None:
            return None
        refs = list(first)
        while True:
            save = self.pos
            if not self._match(_BLOCK_SEP, "';'"):
                break
            block = self._attempt(self.block)
            if block is None:
                self.pos = save
                break
            refs.extend(block)

        if self.pos != len(self.text):
            self._expect("end of input")
            return None
        return refs


# ============================================================================
# Public API
# ============================================================================


@dataclass
class ParseResult:
    """Outcome of try_parse.

    Attributes:
        ok: True if the whole input was understood
        refs: Parsed references (empty on failure)
        error: Actionable error message on failure
        input: The string that was parsed
        offset: 0-based position of the failure
    """

    ok: bool
    input: str
    refs: list[Ref] = field(default_factory=list)
    error: str | None = None
    offset: int | None = None


def parse(v: Versification, text: str) -> list[Ref]:
    """Parse a human-readable reference string.

    Args:
        v: Versification supplying book names and chapter sizes
        text: Reference string like "Gen 1:1-4; Exo 2"

    Returns:
        References in the order written

    Raises:
        ReferenceParseError: With actionable error message if parsing fails

    Examples:
        >>> parse(VERSIFICATION, "Gen 1:1")
        [Verse(book='GEN', chapter=1, verse=1)]

        >>> parse(VERSIFICATION, "Job 8:3-6")
        [Range(start=Verse(book='JOB', chapter=8, verse=3), end=Verse(book='JOB', chapter=8, verse=6))]
    """
    stripped = text.strip(" \t")
    if not stripped:
        raise ReferenceParseError("Empty reference string provided.", text=text)

    parser = _Parser(v, stripped)
    refs = parser.references()
    if refs is None:
        raise parser.error()
    return refs


def try_parse(v: Versification, text: str) -> ParseResult:
    """As parse, but report failure in the result instead of raising."""
    try:
        return ParseResult(ok=True, input=text, refs=parse(v, text))
    except ReferenceParseError as e:
        return ParseResult(ok=False, input=text, error=str(e), offset=e.offset)


def parse_book_name(v: Versification, text: str) -> str | None:
    """Book id for a book name, alias or id, or None if not recognised.

    Examples:
        >>> parse_book_name(VERSIFICATION, "1st John")
        '1JN'
    """
    stripped = text.strip(" \t")
    parser = _Parser(v, stripped)
    book_id = parser.book()
    if book_id is None or parser.pos != len(stripped):
        return None
    return book_id
