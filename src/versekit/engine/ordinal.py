"""Ordinal mapping between verses and integer positions.

Every verse of a versification has an ordinal: its 0-based position in the
list of all verses. ``GEN 1:1`` is 0, ``GEN 2:1`` is 31 in the default
scheme. Ordinals turn reference arithmetic into integer arithmetic and are
the basis of the range algebra and geometry modules.
"""

from __future__ import annotations

from bisect import bisect_right
from typing import Iterable

from versekit.errors import OrdinalError
from versekit.refs import Range, Ref, RefInput, Verse, as_ref_list, ref_start
from versekit.versification.model import Versification


def to_ordinal(v: Versification, verse: Verse) -> int:
    """Convert a verse to its 0-based ordinal.

    Args:
        v: Versification in use
        verse: Verse to convert

    Returns:
        Position of the verse across the whole versification

    Raises:
        OrdinalError: If the book, chapter or verse does not exist
    """
    book = v.book.get(verse.book)
    if book is None:
        raise OrdinalError(f"Unknown book: {verse.book}")
    if verse.chapter < 1 or verse.chapter > len(book.chapters):
        raise OrdinalError(
            f"{book.name} has no chapter {verse.chapter} "
            f"(1-{len(book.chapters)})"
        )
    chapter = book.chapters[verse.chapter - 1]
    if verse.verse < 1 or verse.verse > chapter.verse_count:
        raise OrdinalError(
            f"{book.name} {verse.chapter} has no verse {verse.verse} "
            f"(1-{chapter.verse_count})"
        )
    return chapter.cumulative_verse + verse.verse - 1


def from_ordinal(v: Versification, n: int) -> Verse:
    """Convert an ordinal back to a verse.

    Raises:
        OrdinalError: If n is outside ``[0, v.total_verses)``
    """
    if n < 0 or n >= v.total_verses:
        raise OrdinalError(
            f"Ordinal {n} out of range for versification (0-{v.total_verses - 1})"
        )

    book = v.order[bisect_right(v.book_starts, n) - 1]
    starts = [c.cumulative_verse for c in book.chapters]
    c_idx = bisect_right(starts, n) - 1

    return Verse(book.id, c_idx + 1, n - starts[c_idx] + 1)


def verse_interval(v: Versification, ref: Ref) -> tuple[int, int]:
    """Inclusive ordinal interval covered by a reference."""
    if isinstance(ref, Range):
        return to_ordinal(v, ref.start), to_ordinal(v, ref.end)
    n = to_ordinal(v, ref)
    return n, n


def interval_to_ref(v: Versification, lo: int, hi: int) -> Ref:
    """Reference for an inclusive ordinal interval; a Verse when lo == hi."""
    if lo == hi:
        return from_ordinal(v, lo)
    return Range(from_ordinal(v, lo), from_ordinal(v, hi))


def count_verses(v: Versification, refs: RefInput | Iterable[Ref]) -> int:
    """Total number of verses in a reference or list of references.

    Overlapping references are counted once per reference, not once per
    distinct verse.
    """
    total = 0
    for ref in as_ref_list(refs):
        lo, hi = verse_interval(v, ref)
        total += hi - lo + 1
    return total


def compare_verses(v: Versification, a: Verse, b: Verse) -> int:
    """Negative, zero or positive as a comes before, equals or follows b."""
    return to_ordinal(v, a) - to_ordinal(v, b)


def sort_refs(v: Versification, refs: Iterable[Ref]) -> list[Ref]:
    """Sort references by their start verse.

    Where two references start at the same verse, a bare Verse comes before
    a Range. The sort is stable and returns a new list.
    """
    return sorted(
        refs,
        key=lambda r: (to_ordinal(v, ref_start(r)), isinstance(r, Range)),
    )


def first_n_verses(v: Versification, refs: RefInput, n: int) -> list[Ref]:
    """Leading references holding at most n verses.

    The last reference kept is truncated if it holds more verses than remain;
    a truncated piece of a single verse is returned as a Verse.

    Args:
        v: Versification in use
        refs: References in reading order
        n: Maximum number of verses

    Returns:
        New list with ``min(n, count_verses(refs))`` verses
    """
    result: list[Ref] = []
    remaining = n
    for ref in as_ref_list(refs):
        if remaining <= 0:
            break
        lo, hi = verse_interval(v, ref)
        count = hi - lo + 1
        if count <= remaining:
            result.append(ref)
            remaining -= count
            continue
        result.append(interval_to_ref(v, lo, lo + remaining - 1))
        remaining = 0
    return result
