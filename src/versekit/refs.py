"""Reference value types.

A reference is either a single ``Verse`` or an inclusive ``Range`` between
two verses. Both are immutable; functions branch on the type, never on the
presence of fields.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Sequence, Union


@dataclass(frozen=True)
class Verse:
    """A single verse. Chapter and verse numbers start at 1."""

    book: str
    chapter: int
    verse: int

    def __str__(self) -> str:
        return f"{self.book} {self.chapter}:{self.verse}"

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {"book": self.book, "chapter": self.chapter, "verse": self.verse}


@dataclass(frozen=True)
class Range:
    """Inclusive span of verses, possibly crossing chapters or books.

    The type does not enforce ``start <= end``; see versekit.engine.validate.
    """

    start: Verse
    end: Verse

    def __str__(self) -> str:
        return f"{self.start} - {self.end}"

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "is_range": True,
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
        }


Ref = Union[Verse, Range]
RefInput = Union[Verse, Range, Sequence[Ref]]


def is_range(ref: Ref) -> bool:
    """True if ref is a Range."""
    return isinstance(ref, Range)


def ref_start(ref: Ref) -> Verse:
    """First verse of a reference."""
    return ref.start if isinstance(ref, Range) else ref


def ref_end(ref: Ref) -> Verse:
    """Last verse of a reference."""
    return ref.end if isinstance(ref, Range) else ref


def as_ref_list(refs: RefInput | Iterable[Ref]) -> list[Ref]:
    """Normalize a single reference or a collection of them to a list."""
    if isinstance(refs, (Verse, Range)):
        return [refs]
    return list(refs)


def from_dict(data: dict[str, Any]) -> Ref:
    """Build a reference from its dictionary form.

    Args:
        data: ``{"book", "chapter", "verse"}`` or
            ``{"is_range": True, "start": {...}, "end": {...}}``

    Returns:
        Verse or Range

    Raises:
        ValueError: If required keys are missing
    """
    if data.get("is_range"):
        try:
            return Range(_verse_from_dict(data["start"]), _verse_from_dict(data["end"]))
        except KeyError as e:
            raise ValueError(f"Range is missing field: {e.args[0]}")
    return _verse_from_dict(data)


def _verse_from_dict(data: dict[str, Any]) -> Verse:
    try:
        return Verse(str(data["book"]), int(data["chapter"]), int(data["verse"]))
    except KeyError as e:
        raise ValueError(f"Verse is missing field: {e.args[0]}")


def to_dicts(refs: Iterable[Ref]) -> list[dict]:
    """Convert references to a JSON-friendly list."""
    return [r.to_dict() for r in refs]
