"""Versification model: books, chapters and cumulative verse counts.

A Versification is built once from a minimal raw description (the verse
count of every chapter of every book) and is read-only afterwards. The
cumulative verse offsets computed here are the basis of the ordinal mapping
in versekit.engine.ordinal.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from versekit.errors import VersificationError
from versekit.refs import Range, Ref, Verse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookMetaRaw:
    """Minimal description of a book; chapter count is implied by verse_counts."""

    id: str
    name: str
    verse_counts: Sequence[int]
    osis_id: str = ""
    aliases: Sequence[str] = ()


@dataclass(frozen=True)
class RangeAliasRaw:
    """A named span of whole books, e.g. "Torah" -> GEN..DEU."""

    pattern: str
    start_book: str
    end_book: str | None = None


@dataclass(frozen=True)
class ChapterMeta:
    """Verse count of a chapter and the number of verses preceding it."""

    verse_count: int
    cumulative_verse: int


@dataclass(frozen=True)
class BookMeta:
    """Full metadata for one book of a versification."""

    id: str
    osis_id: str
    name: str
    index: int
    aliases: tuple[str, ...]
    chapters: tuple[ChapterMeta, ...]

    @property
    def chapter_count(self) -> int:
        return len(self.chapters)

    @property
    def verse_count(self) -> int:
        """Total number of verses in the book."""
        return sum(c.verse_count for c in self.chapters)

    @property
    def first_ordinal(self) -> int:
        return self.chapters[0].cumulative_verse

    def chapter(self, number: int) -> ChapterMeta:
        """Metadata for a 1-indexed chapter number.

        Raises:
            IndexError: If the chapter does not exist
        """
        if number < 1 or number > len(self.chapters):
            raise IndexError(f"{self.name} has no chapter {number}")
        return self.chapters[number - 1]

    def last_verse(self) -> Verse:
        return Verse(self.id, len(self.chapters), self.chapters[-1].verse_count)

    def first_verse(self) -> Verse:
        return Verse(self.id, 1, 1)


@dataclass(frozen=True)
class RangeAlias:
    """Compiled range alias: a case-insensitive pattern naming a list of refs."""

    pattern: re.Pattern
    refs: tuple[Ref, ...]

    def matches(self, text: str) -> bool:
        return bool(self.pattern.fullmatch(text.strip()))


@dataclass(frozen=True, eq=False)
class Versification:
    """A scheme dividing a canon into books, chapters and verses.

    Attributes:
        order: Books in canonical order; ``order[i].index == i``
        book: Mapping from book id (e.g. "GEN") to BookMeta
        range_aliases: Named spans such as "Torah"
        name: Optional scheme name
    """

    order: tuple[BookMeta, ...]
    book: dict[str, BookMeta]
    range_aliases: tuple[RangeAlias, ...] = ()
    name: str | None = None
    book_starts: tuple[int, ...] = field(default=(), repr=False)
    total_verses: int = 0

    def get(self, book_id: str) -> BookMeta | None:
        return self.book.get(book_id)

    def __contains__(self, book_id: object) -> bool:
        return book_id in self.book

    def __len__(self) -> int:
        return len(self.order)

    @property
    def book_ids(self) -> list[str]:
        return [b.id for b in self.order]


def _check_raw_book(raw: BookMetaRaw) -> None:
    if not raw.id:
        raise VersificationError("Missing required field: id")
    if not raw.name:
        raise VersificationError("Missing required field: name", raw.id)
    if not raw.verse_counts:
        raise VersificationError("Book must have at least one chapter", raw.id)
    for i, count in enumerate(raw.verse_counts):
        if not isinstance(count, int) or isinstance(count, bool) or count < 1:
            raise VersificationError(
                f"Chapter {i + 1} has invalid verse count: {count!r}", raw.id
            )


def _whole_books(book: dict[str, BookMeta], alias: RangeAliasRaw) -> Range:
    start = book.get(alias.start_book)
    end = book.get(alias.end_book or alias.start_book)
    if start is None or end is None:
        missing = alias.start_book if start is None else alias.end_book
        raise VersificationError(
            f"Range alias refers to unknown book: {missing}", alias.pattern
        )
    if end.index < start.index:
        raise VersificationError(
            f"Range alias ends ({end.id}) before it starts ({start.id})",
            alias.pattern,
        )
    return Range(start.first_verse(), end.last_verse())


def create_versification(
    raw_books: Iterable[BookMetaRaw],
    range_aliases: Iterable[RangeAliasRaw] = (),
    name: str | None = None,
) -> Versification:
    """Create a full Versification from the minimal raw description.

    Computes each book's index, each chapter's cumulative verse offset, and
    resolves range aliases into concrete Ranges.

    Args:
        raw_books: Books in canonical order
        range_aliases: Named spans of whole books
        name: Optional scheme name

    Returns:
        A read-only Versification

    Raises:
        VersificationError: If the description is malformed or inconsistent
    """
    order: list[BookMeta] = []
    book: dict[str, BookMeta] = {}
    accumulator = 0

    for index, raw in enumerate(raw_books):
        _check_raw_book(raw)
        if raw.id in book:
            raise VersificationError("Duplicate book id", raw.id)

        chapters = []
        for count in raw.verse_counts:
            chapters.append(ChapterMeta(verse_count=count, cumulative_verse=accumulator))
            accumulator += count

        meta = BookMeta(
            id=raw.id,
            osis_id=raw.osis_id or raw.id,
            name=raw.name,
            index=index,
            aliases=tuple(raw.aliases),
            chapters=tuple(chapters),
        )
        order.append(meta)
        book[meta.id] = meta

    if not order:
        raise VersificationError("Versification must contain at least one book")

    aliases = tuple(
        RangeAlias(
            pattern=re.compile(a.pattern, re.IGNORECASE),
            refs=(_whole_books(book, a),),
        )
        for a in range_aliases
    )

    logger.debug(
        f"Created versification {name or '<unnamed>'}: "
        f"{len(order)} books, {accumulator} verses"
    )

    return Versification(
        order=tuple(order),
        book=book,
        range_aliases=aliases,
        name=name,
        book_starts=tuple(b.first_ordinal for b in order),
        total_verses=accumulator,
    )
