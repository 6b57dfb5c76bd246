"""Validation and repair of references.

Validation never raises: findings come back as a list of ValidationError
records, each with a severity flag so callers can drop warnings. Repair is
best-effort. Out of range numbers are clamped, backwards ranges are
swapped, and one-verse ranges collapse to a Verse. Only an unknown book
cannot be repaired and raises RepairError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Literal, MutableSequence

from versekit.errors import RepairError
from versekit.refs import Range, Ref, RefInput, Verse, as_ref_list
from versekit.versification.model import Versification

logger = logging.getLogger(__name__)

MAX_REPAIR_PASSES = 5

Component = Literal["book", "chapter", "verse"]


class ErrorKind(str, Enum):
    """Kinds of validation finding."""

    BAD_BOOK = "bad_book"
    BAD_CHAPTER = "bad_chapter"
    BAD_VERSE = "bad_verse"
    BACKWARDS_RANGE = "backwards_range"
    # Warning: a range holding exactly one verse
    RANGE_OF_ONE = "range_of_one"


@dataclass(frozen=True)
class ValidationError:
    """A single validation finding.

    Attributes:
        kind: What is wrong
        is_warning: True for findings that do not make the ref unusable
        message: Human readable description
        ref: The offending Verse (endpoint checks) or Range (range checks)
        got: Offending value (book id, chapter or verse number)
        max_value: Value the offending number should be clamped to
        component: Most significant reversed component of a backwards range
    """

    kind: ErrorKind
    is_warning: bool
    message: str
    ref: Ref
    got: str | int | None = None
    max_value: int | None = None
    component: Component | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "kind": self.kind.value,
            "is_warning": self.is_warning,
            "message": self.message,
            "ref": self.ref.to_dict(),
            "got": self.got,
            "max_value": self.max_value,
            "component": self.component,
        }


def _validate_verse(v: Versification, ref: Verse) -> list[ValidationError]:
    book = v.book.get(ref.book)
    if book is None:
        return [
            ValidationError(
                kind=ErrorKind.BAD_BOOK,
                is_warning=False,
                message=f"The book '{ref.book}' does not exist",
                ref=ref,
                got=ref.book,
            )
        ]

    if ref.chapter < 1 or ref.chapter > book.chapter_count:
        below = ref.chapter < 1
        return [
            ValidationError(
                kind=ErrorKind.BAD_CHAPTER,
                is_warning=False,
                message=(
                    "Chapter numbers start at 1"
                    if below
                    else f"{book.name} has only {book.chapter_count} chapters"
                ),
                ref=ref,
                got=ref.chapter,
                max_value=1 if below else book.chapter_count,
            )
        ]

    verse_count = book.chapter(ref.chapter).verse_count
    if ref.verse < 1 or ref.verse > verse_count:
        below = ref.verse < 1
        return [
            ValidationError(
                kind=ErrorKind.BAD_VERSE,
                is_warning=False,
                message=(
                    "Verse numbers start at 1"
                    if below
                    else f"{book.name} {ref.chapter} has only {verse_count} verses"
                ),
                ref=ref,
                got=ref.verse,
                max_value=1 if below else verse_count,
            )
        ]

    return []


def _validate_range(
    v: Versification, ref: Range, include_warnings: bool
) -> list[ValidationError]:
    results = _validate_verse(v, ref.start) + _validate_verse(v, ref.end)

    start_book = v.book.get(ref.start.book)
    end_book = v.book.get(ref.end.book)
    if start_book is None or end_book is None:
        return results

    def backwards(component: Component, message: str) -> ValidationError:
        return ValidationError(
            kind=ErrorKind.BACKWARDS_RANGE,
            is_warning=False,
            message=message,
            ref=ref,
            component=component,
        )

    if end_book.index < start_book.index:
        results.append(
            backwards(
                "book",
                f"Range is backwards ({end_book.name} comes before {start_book.name})",
            )
        )
    elif start_book.index == end_book.index:
        if ref.end.chapter < ref.start.chapter:
            results.append(backwards("chapter", "Chapter range is backwards"))
        elif ref.end.chapter == ref.start.chapter:
            if ref.end.verse < ref.start.verse:
                results.append(backwards("verse", "Verse range is backwards"))
            elif ref.end.verse == ref.start.verse and include_warnings:
                results.append(
                    ValidationError(
                        kind=ErrorKind.RANGE_OF_ONE,
                        is_warning=True,
                        message="Range contains only a single verse",
                        ref=ref,
                    )
                )

    return results


def validate(
    v: Versification,
    refs: RefInput | Iterable[Ref],
    include_warnings: bool = True,
) -> list[ValidationError]:
    """Check references against a versification.

    Args:
        v: Versification in use
        refs: A reference or list of references
        include_warnings: If False, warnings are left out

    Returns:
        All findings, in input order; empty if everything is valid
    """
    results: list[ValidationError] = []
    for ref in as_ref_list(refs):
        if isinstance(ref, Range):
            results.extend(_validate_range(v, ref, include_warnings))
        else:
            results.extend(_validate_verse(v, ref))
    return results


def _repair_verse(v: Versification, ref: Verse) -> Verse:
    for err in _validate_verse(v, ref):
        if err.kind is ErrorKind.BAD_BOOK:
            raise RepairError(f"Cannot repair an unknown book: {ref.book}")
        if err.kind is ErrorKind.BAD_CHAPTER:
            assert err.max_value is not None
            book = v.book[ref.book]
            if ref.chapter < 1:
                return Verse(ref.book, 1, 1)
            return Verse(
                ref.book,
                err.max_value,
                book.chapter(err.max_value).verse_count,
            )
        if err.kind is ErrorKind.BAD_VERSE:
            assert err.max_value is not None
            return replace(ref, verse=err.max_value)
    return ref


def _repair_once(v: Versification, ref: Ref, include_warnings: bool) -> Ref:
    if not isinstance(ref, Range):
        return _repair_verse(v, ref)

    start = _repair_verse(v, ref.start)
    end = _repair_verse(v, ref.end)
    fixed = Range(start, end)

    kinds = {e.kind for e in _validate_range(v, fixed, include_warnings)}
    if ErrorKind.BACKWARDS_RANGE in kinds:
        logger.debug(f"Swapping endpoints of backwards range {fixed}")
        return Range(end, start)
    if ErrorKind.RANGE_OF_ONE in kinds:
        return start
    return fixed


def repair(v: Versification, ref: Ref, include_warnings: bool = True) -> Ref:
    """Return a repaired copy of ref.

    Chapter and verse numbers are clamped into range (a clamped chapter
    also moves the verse to that chapter's last verse), backwards ranges
    have their endpoints swapped, and when warnings are included a range
    whose start equals its end becomes a Verse. The input is not modified.

    Args:
        v: Versification in use
        ref: Reference to repair
        include_warnings: If False, one-verse ranges are left as they are

    Returns:
        A reference with no validation findings

    Raises:
        RepairError: If a book is unknown, or the reference still has
            findings after the maximum number of passes
    """
    current = ref
    for _ in range(MAX_REPAIR_PASSES):
        if not validate(v, current, include_warnings):
            if current != ref:
                logger.debug(f"Repaired {ref} -> {current}")
            return current
        current = _repair_once(v, current, include_warnings)

    if validate(v, current, include_warnings):
        raise RepairError(f"Could not repair {ref} in {MAX_REPAIR_PASSES} passes")
    logger.debug(f"Repaired {ref} -> {current}")
    return current


def repair_in_place(
    v: Versification,
    holder: MutableSequence[Ref],
    index: int,
    include_warnings: bool = True,
) -> Ref:
    """Repair ``holder[index]`` and store the result back into holder.

    References are immutable, so the mutation happens on the containing
    sequence. Returns the repaired reference.
    """
    repaired = repair(v, holder[index], include_warnings)
    holder[index] = repaired
    return repaired
