"""VerseKit: every operation bound to one versification.

The engine and text modules take the Versification as an explicit first
argument. VerseKit binds one so callers do not repeat it:

    >>> kit = VerseKit(load_versification("kjv.yaml"))
    >>> kit.count_verses(kit.parse("Gen 1"))
    31

``versekit.default`` is a VerseKit over the built-in 66 book canon.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator, MutableSequence

from versekit.engine import geometry, ordinal, ranges
from versekit.engine.validate import (
    ValidationError,
    repair,
    repair_in_place,
    validate,
)
from versekit.engine.geometry import IntersectionSet, SetInput
from versekit.engine.ranges import BookGroup, ChapterGroup, GroupLevel
from versekit.refs import Range, Ref, RefInput, Verse
from versekit.text import parser, printer, url
from versekit.text.parser import ParseResult
from versekit.text.printer import FormatOptions
from versekit.versification import VERSIFICATION, BookSequence, bible_sequences
from versekit.versification.loader import load_versification
from versekit.versification.model import BookMeta, Versification


class VerseKit:
    """Reference toolkit bound to a single Versification."""

    def __init__(
        self,
        versification: Versification | None = None,
        format_options: FormatOptions | str | None = None,
    ):
        """Create a toolkit.

        Args:
            versification: Scheme to use; defaults to the built-in canon
            format_options: Default options (or preset name) for format()
        """
        self.versification = versification or VERSIFICATION
        self.format_options = printer.resolve_options(format_options)

    @classmethod
    def from_file(cls, path: Path | str | None = None, **kwargs) -> VerseKit:
        """Toolkit over a versification loaded from YAML.

        See versekit.versification.loader.load_versification for how path is
        resolved.
        """
        return cls(load_versification(path), **kwargs)

    def __repr__(self) -> str:
        return f"VerseKit(versification={self.versification.name!r})"

    # ========================================================================
    # Versification
    # ========================================================================

    def book(self, book_id: str) -> BookMeta | None:
        return self.versification.get(book_id)

    @property
    def books(self) -> tuple[BookMeta, ...]:
        return self.versification.order

    def sequences(self) -> dict[str, BookSequence]:
        return bible_sequences(self.versification)

    # ========================================================================
    # Text
    # ========================================================================

    def parse(self, text: str) -> list[Ref]:
        return parser.parse(self.versification, text)

    def try_parse(self, text: str) -> ParseResult:
        return parser.try_parse(self.versification, text)

    def parse_book_name(self, text: str) -> str | None:
        return parser.parse_book_name(self.versification, text)

    def parse_url_encoded(self, token: str) -> list[Ref]:
        return url.parse_url_encoded(self.versification, token)

    def format(
        self, refs: RefInput, opts: FormatOptions | str | None = None
    ) -> str:
        """Format refs with opts, or with this toolkit's default options."""
        return printer.format_refs(
            self.versification, refs, opts if opts is not None else self.format_options
        )

    # ========================================================================
    # Ordinals
    # ========================================================================

    def to_ordinal(self, verse: Verse) -> int:
        return ordinal.to_ordinal(self.versification, verse)

    def from_ordinal(self, n: int) -> Verse:
        return ordinal.from_ordinal(self.versification, n)

    def count_verses(self, refs: RefInput) -> int:
        return ordinal.count_verses(self.versification, refs)

    def compare_verses(self, a: Verse, b: Verse) -> int:
        return ordinal.compare_verses(self.versification, a, b)

    def sort(self, refs: Iterable[Ref]) -> list[Ref]:
        return ordinal.sort_refs(self.versification, refs)

    def first_n_verses(self, refs: RefInput, n: int) -> list[Ref]:
        return ordinal.first_n_verses(self.versification, refs, n)

    # ========================================================================
    # Construction and splitting
    # ========================================================================

    def make_range(self, book: str, chapter: int | None = None) -> Range:
        return ranges.make_range(self.versification, book, chapter)

    def make_book_range(self, start_book: str, end_book: str | None = None) -> Range:
        return ranges.make_book_range(self.versification, start_book, end_book)

    def combine(self, refs: RefInput) -> list[Ref]:
        return ranges.combine(self.versification, refs)

    def iterate_by_book(self, refs: RefInput, expand_verses: bool = False) -> Iterator[Ref]:
        return ranges.iterate_by_book(self.versification, refs, expand_verses)

    def iterate_by_chapter(
        self, refs: RefInput, expand_verses: bool = False
    ) -> Iterator[Ref]:
        return ranges.iterate_by_chapter(self.versification, refs, expand_verses)

    def iterate_by_verse(self, refs: RefInput) -> Iterator[Verse]:
        return ranges.iterate_by_verse(self.versification, refs)

    def split_by_book(self, refs: RefInput, expand_verses: bool = False) -> list[Ref]:
        return ranges.split_by_book(self.versification, refs, expand_verses)

    def split_by_chapter(self, refs: RefInput, expand_verses: bool = False) -> list[Ref]:
        return ranges.split_by_chapter(self.versification, refs, expand_verses)

    def split_by_verse(self, refs: RefInput) -> list[Verse]:
        return ranges.split_by_verse(self.versification, refs)

    def group_by_book(self, refs: RefInput) -> list[BookGroup]:
        return ranges.group_by_book(self.versification, refs)

    def group_by_chapter(self, refs: RefInput) -> list[ChapterGroup]:
        return ranges.group_by_chapter(self.versification, refs)

    def group_by_level(
        self, refs: RefInput, level: GroupLevel
    ) -> list[BookGroup] | list[ChapterGroup]:
        return ranges.group_by_level(self.versification, refs, level)

    # ========================================================================
    # Navigation
    # ========================================================================

    def next_chapter(self, ref: Ref, constrain_book: bool = False) -> Range | None:
        return ranges.next_chapter(self.versification, ref, constrain_book)

    def previous_chapter(self, ref: Ref, constrain_book: bool = False) -> Range | None:
        return ranges.previous_chapter(self.versification, ref, constrain_book)

    def next_book(self, ref: Ref) -> Range | None:
        return ranges.next_book(self.versification, ref)

    def previous_book(self, ref: Ref) -> Range | None:
        return ranges.previous_book(self.versification, ref)

    def is_full_book(self, ref: Ref) -> bool:
        return ranges.is_full_book(self.versification, ref)

    def is_full_chapter(self, ref: Ref) -> bool:
        return ranges.is_full_chapter(self.versification, ref)

    # ========================================================================
    # Geometry
    # ========================================================================

    def create_intersection_set(self, refs: RefInput) -> IntersectionSet:
        return geometry.create_intersection_set(self.versification, refs)

    def intersection(self, a: SetInput, b: SetInput) -> list[Ref]:
        return geometry.intersection(self.versification, a, b)

    def intersects(self, a: SetInput, b: SetInput) -> bool:
        return geometry.intersects(self.versification, a, b)

    def union(self, a: RefInput, b: RefInput) -> list[Ref]:
        return geometry.union(self.versification, a, b)

    def difference(self, a: SetInput, b: SetInput) -> list[Ref]:
        return geometry.difference(self.versification, a, b)

    def contains(self, outer: SetInput, inner: SetInput) -> bool:
        return geometry.contains(self.versification, outer, inner)

    def index_of(self, refs: RefInput, verse: Verse) -> int:
        return geometry.index_of(self.versification, refs, verse)

    def verse_at_index(self, refs: RefInput, index: int) -> Verse | None:
        return geometry.verse_at_index(self.versification, refs, index)

    # ========================================================================
    # Validation
    # ========================================================================

    def validate(
        self, refs: RefInput, include_warnings: bool = True
    ) -> list[ValidationError]:
        return validate(self.versification, refs, include_warnings)

    def is_valid(self, refs: RefInput) -> bool:
        """True if refs have no errors (warnings are ignored)."""
        return not self.validate(refs, include_warnings=False)

    def repair(self, ref: Ref, include_warnings: bool = True) -> Ref:
        return repair(self.versification, ref, include_warnings)

    def repair_in_place(
        self,
        holder: MutableSequence[Ref],
        index: int,
        include_warnings: bool = True,
    ) -> Ref:
        return repair_in_place(
            self.versification, holder, index, include_warnings
        )


default = VerseKit()
