"""Formatting of references as human-readable strings.

Output is always accepted by versekit.text.parser, so formatting then
parsing gives back the same references (after combining, if enabled).

Examples with the default options:
- Verse(GEN, 3, 8) -> "Genesis 3:8"
- GEN 1:2 to GEN 1:5 -> "Genesis 1:2-5"
- GEN 1:2 to GEN 3:4 -> "Genesis 1:2 - 3:4"
- Whole book -> "Genesis", whole chapter -> "Genesis 1"
- [GEN 1:1, GEN 1:3, GEN 2:5, EXO 1:1] -> "Genesis 1:1,3, 2:5; Exodus 1:1"
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable

from versekit.engine.ranges import combine
from versekit.errors import FormatError
from versekit.refs import Range, Ref, RefInput, Verse, as_ref_list
from versekit.versification.model import BookMeta, Versification


@dataclass(frozen=True)
class FormatOptions:
    """Options controlling formatter output.

    Attributes:
        use_book_id: Print "GEN" instead of "Genesis"
        verse_separator: Between chapter and verse; one of ":", "v", "."
            (or " v ") keeps the output parseable
        strip_whitespace: Drop all whitespace the formatter adds
        combine_ranges: Merge overlapping and adjacent refs before printing
            a list
        compact: Print whole books as "Genesis" and whole chapters as
            "Genesis 1"
        lower_case: Lower-case book ids (with use_book_id)
        block_separator: Between unrelated refs; defaults to "; " (or ";"
            when stripping whitespace)
    """

    use_book_id: bool = False
    verse_separator: str = ":"
    strip_whitespace: bool = False
    combine_ranges: bool = False
    compact: bool = True
    lower_case: bool = False
    block_separator: str | None = None


FORMAT_PRESETS: dict[str, FormatOptions] = {
    "default": FormatOptions(),
    # Short, whitespace free output such as "gen1v2-3,5_exo"
    "url": FormatOptions(
        use_book_id=True,
        verse_separator="v",
        strip_whitespace=True,
        combine_ranges=True,
        lower_case=True,
        block_separator="_",
    ),
}


def resolve_options(opts: FormatOptions | str | None = None) -> FormatOptions:
    """Turn a preset name, options or None into FormatOptions.

    Raises:
        FormatError: If a preset name is unknown
    """
    if opts is None:
        return FORMAT_PRESETS["default"]
    if isinstance(opts, FormatOptions):
        return opts
    try:
        return FORMAT_PRESETS[opts]
    except KeyError:
        raise FormatError(
            f"Unknown format preset: '{opts}'. "
            f"Available presets: {', '.join(sorted(FORMAT_PRESETS))}"
        )


class _Printer:
    """Formats refs for one versification and one set of options."""

    def __init__(self, v: Versification, opts: FormatOptions):
        self.v = v
        self.opts = opts

    def ws(self, text: str) -> str:
        return text.replace(" ", "") if self.opts.strip_whitespace else text

    @property
    def range_sep(self) -> str:
        return self.ws(" - ")

    @property
    def list_sep(self) -> str:
        return self.ws(", ")

    @property
    def block_sep(self) -> str:
        if self.opts.block_separator is not None:
            return self.opts.block_separator
        return self.ws("; ")

    def meta(self, book: str) -> BookMeta:
        meta = self.v.book.get(book)
        if meta is None:
            raise FormatError(f"Cannot format unknown book: {book}")
        return meta

    def book(self, book: str) -> str:
        """Book label without trailing space."""
        meta = self.meta(book)
        if self.opts.use_book_id:
            return meta.id.lower() if self.opts.lower_case else meta.id
        return self.ws(meta.name)

    def with_book(self, book: str, rest: str) -> str:
        """Book label followed by a chapter/verse part."""
        if self.opts.strip_whitespace:
            return self.book(book) + rest
        return f"{self.book(book)} {rest}"

    def cv(self, verse: Verse) -> str:
        return f"{verse.chapter}{self.opts.verse_separator}{verse.verse}"

    # -- shape tests --------------------------------------------------------

    def _chapter_end(self, verse: Verse) -> bool:
        meta = self.meta(verse.book)
        if verse.chapter < 1 or verse.chapter > meta.chapter_count:
            return False
        return verse.verse == meta.chapter(verse.chapter).verse_count

    def whole_book(self, ref: Range) -> bool:
        meta = self.meta(ref.start.book)
        return (
            self.opts.compact
            and ref.start.book == ref.end.book
            and ref.start == meta.first_verse()
            and ref.end == meta.last_verse()
        )

    def whole_chapters(self, ref: Range) -> bool:
        """True for a range covering one or more complete chapters of a book."""
        return (
            self.opts.compact
            and ref.start.book == ref.end.book
            and ref.start.verse == 1
            and ref.end.chapter >= ref.start.chapter
            and self._chapter_end(ref.end)
        )

    # -- single refs ----------------------------------------------------------

    def verse(self, verse: Verse) -> str:
        return self.with_book(verse.book, self.cv(verse))

    def chapters(self, ref: Range) -> str:
        """Chapter part of a whole-chapter range: "1" or "1-3"."""
        if ref.start.chapter == ref.end.chapter:
            return str(ref.start.chapter)
        return f"{ref.start.chapter}-{ref.end.chapter}"

    def _cross_book_endpoint(self, verse: Verse, is_start: bool) -> str:
        meta = self.meta(verse.book)
        if self.opts.compact:
            if is_start and verse.verse == 1:
                if verse.chapter == 1:
                    return self.book(verse.book)
                return self.with_book(verse.book, str(verse.chapter))
            if not is_start and self._chapter_end(verse):
                if verse.chapter == meta.chapter_count:
                    return self.book(verse.book)
                return self.with_book(verse.book, str(verse.chapter))
        return self.verse(verse)

    def range(self, ref: Range) -> str:
        start, end = ref.start, ref.end
        if start.book != end.book:
            return (
                self._cross_book_endpoint(start, True)
                + self.range_sep
                + self._cross_book_endpoint(end, False)
            )
        if self.whole_book(ref):
            return self.book(start.book)
        if self.whole_chapters(ref):
            return self.with_book(start.book, self.chapters(ref))
        return self.with_book(start.book, self.range_cv(ref))

    def range_cv(self, ref: Range) -> str:
        """Chapter/verse part of a single-book range."""
        start, end = ref.start, ref.end
        if start.chapter != end.chapter:
            return self.cv(start) + self.range_sep + self.cv(end)
        if start.verse != end.verse:
            return f"{self.cv(start)}-{end.verse}"
        return self.cv(start)

    # -- lists --------------------------------------------------------------

    def ref_list(self, refs: Iterable[Ref]) -> str:
        blocks: list[str] = []
        current = ""
        cur_book: str | None = None
        # Chapter whose bare verse numbers may follow after a ","
        cur_chapter: int | None = None

        def new_block(text: str) -> None:
            nonlocal current
            if current:
                blocks.append(current)
            current = text

        for ref in refs:
            if isinstance(ref, Range) and ref.start == ref.end:
                ref = ref.start

            if isinstance(ref, Verse):
                if ref.book != cur_book:
                    new_block(self.verse(ref))
                elif ref.chapter != cur_chapter:
                    current += self.list_sep + self.cv(ref)
                else:
                    current += f",{ref.verse}"
                cur_book, cur_chapter = ref.book, ref.chapter
                continue

            start, end = ref.start, ref.end
            if start.book != end.book or self.whole_book(ref):
                new_block(self.range(ref))
                cur_book, cur_chapter = None, None
                continue

            if self.whole_chapters(ref):
                # After a verse list a bare number would read as a verse
                if start.book != cur_book or cur_chapter is not None:
                    new_block(self.with_book(start.book, self.chapters(ref)))
                else:
                    current += self.list_sep + self.chapters(ref)
                cur_book, cur_chapter = start.book, None
                continue

            if start.chapter != end.chapter:
                if start.book != cur_book:
                    new_block(self.range(ref))
                else:
                    current += self.list_sep + self.range_cv(ref)
                cur_book, cur_chapter = start.book, None
                continue

            if start.book != cur_book:
                new_block(self.range(ref))
            elif start.chapter != cur_chapter:
                current += self.list_sep + self.range_cv(ref)
            else:
                current += f",{start.verse}-{end.verse}"
            cur_book, cur_chapter = start.book, start.chapter

        new_block("")
        return self.block_sep.join(blocks)


def format_verse(
    v: Versification, verse: Verse, opts: FormatOptions | str | None = None
) -> str:
    """Format a single verse, e.g. "Genesis 3:8".

    Raises:
        FormatError: If the book is unknown
    """
    return _Printer(v, resolve_options(opts)).verse(verse)


def format_range(
    v: Versification, ref: Range, opts: FormatOptions | str | None = None
) -> str:
    """Format a single range, e.g. "Genesis 1:2 - 3:4".

    Raises:
        FormatError: If a book is unknown
    """
    return _Printer(v, resolve_options(opts)).range(ref)


def format_ref_list(
    v: Versification, refs: Iterable[Ref], opts: FormatOptions | str | None = None
) -> str:
    """Format a list of references, sharing book and chapter where possible.

    Raises:
        FormatError: If a book is unknown
    """
    options = resolve_options(opts)
    items = list(refs)
    if options.combine_ranges:
        items = combine(v, items)
    return _Printer(v, options).ref_list(items)


def format_refs(
    v: Versification, refs: RefInput, opts: FormatOptions | str | None = None
) -> str:
    """Format a verse, a range or a list of references."""
    if isinstance(refs, Verse):
        return format_verse(v, refs, opts)
    if isinstance(refs, Range):
        return format_range(v, refs, opts)
    return format_ref_list(v, as_ref_list(refs), opts)


def with_options(opts: FormatOptions | str | None = None, **changes) -> FormatOptions:
    """Copy of the resolved options with some fields changed."""
    return replace(resolve_options(opts), **changes)
