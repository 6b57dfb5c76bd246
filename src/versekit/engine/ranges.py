"""Range algebra: combining, splitting, grouping and navigation.

Splitting is layered. Chapter splitting is built on book splitting and
verse splitting on chapter splitting, so a range crossing several books is
first cut at book boundaries and then at chapter boundaries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Literal

from versekit.engine.ordinal import interval_to_ref, verse_interval
from versekit.errors import RangeConstructionError
from versekit.refs import Range, Ref, RefInput, Verse, as_ref_list, ref_end, ref_start
from versekit.versification.model import BookMeta, Versification

GroupLevel = Literal["book", "chapter", "verse"]


@dataclass
class BookGroup:
    """References falling within a single book."""

    book: str
    references: list[Ref] = field(default_factory=list)


@dataclass
class ChapterGroup:
    """References falling within a single chapter."""

    book: str
    chapter: int
    references: list[Ref] = field(default_factory=list)


def _book_meta(v: Versification, book_id: str) -> BookMeta:
    meta = v.book.get(book_id)
    if meta is None:
        raise RangeConstructionError(f"Unknown book: {book_id}")
    return meta


# ============================================================================
# Construction
# ============================================================================


def make_range(v: Versification, book: str, chapter: int | None = None) -> Range:
    """Range covering a whole book, or a whole chapter of it.

    Args:
        v: Versification in use
        book: Book id, e.g. "GEN"
        chapter: Optional 1-indexed chapter number

    Returns:
        Range from the first to the last verse of the book or chapter

    Raises:
        RangeConstructionError: If the book is unknown or the chapter does
            not exist
    """
    meta = _book_meta(v, book)
    if chapter is None:
        return Range(meta.first_verse(), meta.last_verse())
    if chapter < 1 or chapter > meta.chapter_count:
        raise RangeConstructionError(
            f"{meta.name} has only {meta.chapter_count} chapters, got {chapter}"
        )
    return Range(
        Verse(book, chapter, 1),
        Verse(book, chapter, meta.chapters[chapter - 1].verse_count),
    )


def make_book_range(
    v: Versification, start_book: str, end_book: str | None = None
) -> Range:
    """Range from the first verse of start_book to the last verse of end_book.

    Raises:
        RangeConstructionError: If either book is unknown or end_book comes
            before start_book
    """
    start = _book_meta(v, start_book)
    end = _book_meta(v, end_book or start_book)
    if end.index < start.index:
        raise RangeConstructionError(
            f"{end.name} comes before {start.name}"
        )
    return Range(start.first_verse(), end.last_verse())


# ============================================================================
# Combining
# ============================================================================


def combine(v: Versification, refs: RefInput | Iterable[Ref]) -> list[Ref]:
    """Merge overlapping and adjacent references.

    Returns:
        Sorted, non-overlapping list where no two elements could be merged.
        Single verses come back as Verse, never as a one-verse Range.
    """
    intervals = sorted(verse_interval(v, r) for r in as_ref_list(refs))
    if not intervals:
        return []

    merged: list[list[int]] = [list(intervals[0])]
    for lo, hi in intervals[1:]:
        acc = merged[-1]
        if lo <= acc[1] + 1:
            acc[1] = max(acc[1], hi)
        else:
            merged.append([lo, hi])

    return [interval_to_ref(v, lo, hi) for lo, hi in merged]


# ============================================================================
# Splitting
# ============================================================================


def iterate_by_book(
    v: Versification, refs: RefInput, expand_verses: bool = False
) -> Iterator[Ref]:
    """Yield references cut so that none crosses a book boundary.

    Args:
        v: Versification in use
        refs: References to split
        expand_verses: If True, bare verses are yielded as one-verse Ranges
    """
    for cur in as_ref_list(refs):
        if not isinstance(cur, Range):
            yield Range(cur, cur) if expand_verses else cur
            continue

        if cur.start.book == cur.end.book:
            yield cur
            continue

        first = _book_meta(v, cur.start.book)
        last = _book_meta(v, cur.end.book)

        yield Range(cur.start, first.last_verse())
        for index in range(first.index + 1, last.index):
            yield make_range(v, v.order[index].id)
        yield Range(last.first_verse(), cur.end)


def iterate_by_chapter(
    v: Versification, refs: RefInput, expand_verses: bool = False
) -> Iterator[Ref]:
    """Yield references cut so that none crosses a chapter boundary."""
    for cur in iterate_by_book(v, refs, expand_verses):
        if not isinstance(cur, Range) or cur.start.chapter == cur.end.chapter:
            yield cur
            continue

        book = cur.start.book
        meta = _book_meta(v, book)

        yield Range(
            cur.start,
            Verse(book, cur.start.chapter, meta.chapter(cur.start.chapter).verse_count),
        )
        for chapter in range(cur.start.chapter + 1, cur.end.chapter):
            yield make_range(v, book, chapter)
        yield Range(Verse(book, cur.end.chapter, 1), cur.end)


def iterate_by_verse(v: Versification, refs: RefInput) -> Iterator[Verse]:
    """Yield every verse of the references, in input order."""
    for cur in iterate_by_chapter(v, refs):
        if isinstance(cur, Range):
            for number in range(cur.start.verse, cur.end.verse + 1):
                yield Verse(cur.start.book, cur.start.chapter, number)
        else:
            yield cur


def split_by_book(
    v: Versification, refs: RefInput, expand_verses: bool = False
) -> list[Ref]:
    return list(iterate_by_book(v, refs, expand_verses))


def split_by_chapter(
    v: Versification, refs: RefInput, expand_verses: bool = False
) -> list[Ref]:
    return list(iterate_by_chapter(v, refs, expand_verses))


def split_by_verse(v: Versification, refs: RefInput) -> list[Verse]:
    return list(iterate_by_verse(v, refs))


# ============================================================================
# Grouping
# ============================================================================


def group_by_book(v: Versification, refs: RefInput) -> list[BookGroup]:
    """Bucket references per book.

    Cross-book ranges are split first. Groups are ordered by book; the
    references inside a group keep their input order.
    """
    groups: dict[str, BookGroup] = {}
    for ref in iterate_by_book(v, refs):
        book = ref_start(ref).book
        if book not in groups:
            groups[book] = BookGroup(book=book)
        groups[book].references.append(ref)

    return sorted(groups.values(), key=lambda g: _book_meta(v, g.book).index)


def _group_by_chapter(v: Versification, pieces: Iterable[Ref]) -> list[ChapterGroup]:
    groups: dict[tuple[str, int], ChapterGroup] = {}
    for ref in pieces:
        start = ref_start(ref)
        key = (start.book, start.chapter)
        if key not in groups:
            groups[key] = ChapterGroup(book=start.book, chapter=start.chapter)
        groups[key].references.append(ref)

    return sorted(
        groups.values(), key=lambda g: (_book_meta(v, g.book).index, g.chapter)
    )


def group_by_chapter(v: Versification, refs: RefInput) -> list[ChapterGroup]:
    """Bucket references per (book, chapter), ordered by book then chapter."""
    return _group_by_chapter(v, iterate_by_chapter(v, refs))


def group_by_level(
    v: Versification, refs: RefInput, level: GroupLevel
) -> list[BookGroup] | list[ChapterGroup]:
    """Group at the given level.

    ``"verse"`` produces chapter groups whose references are single verses.

    Raises:
        ValueError: If level is not one of "book", "chapter" or "verse"
    """
    if level == "book":
        return group_by_book(v, refs)
    if level == "chapter":
        return group_by_chapter(v, refs)
    if level == "verse":
        return _group_by_chapter(v, iterate_by_verse(v, refs))
    raise ValueError(f"Unknown group level: {level!r}")


# ============================================================================
# Navigation
# ============================================================================


def next_chapter(
    v: Versification, ref: Ref, constrain_book: bool = False
) -> Range | None:
    """The whole chapter following the end of ref.

    Returns:
        Range of the next chapter, or None at the end of the versification
        (or of the book when constrain_book is set)

    Raises:
        RangeConstructionError: If the book is unknown
    """
    end = ref_end(ref)
    meta = _book_meta(v, end.book)
    if end.chapter < meta.chapter_count:
        return make_range(v, end.book, end.chapter + 1)
    if constrain_book or meta.index + 1 >= len(v.order):
        return None
    return make_range(v, v.order[meta.index + 1].id, 1)


def previous_chapter(
    v: Versification, ref: Ref, constrain_book: bool = False
) -> Range | None:
    """The whole chapter preceding the start of ref, or None at the edge."""
    start = ref_start(ref)
    meta = _book_meta(v, start.book)
    if start.chapter > 1:
        return make_range(v, start.book, start.chapter - 1)
    if constrain_book or meta.index == 0:
        return None
    prev = v.order[meta.index - 1]
    return make_range(v, prev.id, prev.chapter_count)


def next_book(v: Versification, ref: Ref) -> Range | None:
    """The whole book following the end of ref, or None after the last book."""
    meta = _book_meta(v, ref_end(ref).book)
    if meta.index + 1 >= len(v.order):
        return None
    return make_range(v, v.order[meta.index + 1].id)


def previous_book(v: Versification, ref: Ref) -> Range | None:
    """The whole book preceding the start of ref, or None before the first."""
    meta = _book_meta(v, ref_start(ref).book)
    if meta.index == 0:
        return None
    return make_range(v, v.order[meta.index - 1].id)


# ============================================================================
# Predicates
# ============================================================================


def is_full_book(v: Versification, ref: Ref) -> bool:
    """True if ref is a Range spanning exactly one whole book."""
    if not isinstance(ref, Range) or ref.start.book != ref.end.book:
        return False
    meta = v.book.get(ref.start.book)
    if meta is None:
        return False
    return ref.start == meta.first_verse() and ref.end == meta.last_verse()


def is_full_chapter(v: Versification, ref: Ref) -> bool:
    """True if ref is a Range spanning exactly one whole chapter."""
    if not isinstance(ref, Range):
        return False
    start, end = ref.start, ref.end
    if start.book != end.book or start.chapter != end.chapter:
        return False
    meta = v.book.get(start.book)
    if meta is None or start.chapter < 1 or start.chapter > meta.chapter_count:
        return False
    return start.verse == 1 and end.verse == meta.chapter(start.chapter).verse_count
