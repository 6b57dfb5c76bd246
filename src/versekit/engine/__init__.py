"""Reference algebra over a Versification.

Every function takes the Versification as its first argument; nothing in
this package holds a default.
"""

from versekit.engine.geometry import (
    IntersectionSet,
    contains,
    create_intersection_set,
    difference,
    index_of,
    intersection,
    intersects,
    union,
    verse_at_index,
)
from versekit.engine.ordinal import (
    compare_verses,
    count_verses,
    first_n_verses,
    from_ordinal,
    interval_to_ref,
    sort_refs,
    to_ordinal,
    verse_interval,
)
from versekit.engine.ranges import (
    BookGroup,
    ChapterGroup,
    combine,
    group_by_book,
    group_by_chapter,
    group_by_level,
    is_full_book,
    is_full_chapter,
    iterate_by_book,
    iterate_by_chapter,
    iterate_by_verse,
    make_book_range,
    make_range,
    next_book,
    next_chapter,
    previous_book,
    previous_chapter,
    split_by_book,
    split_by_chapter,
    split_by_verse,
)
from versekit.engine.validate import (
    ErrorKind,
    ValidationError,
    repair,
    repair_in_place,
    validate,
)

__all__ = [
    "BookGroup",
    "ChapterGroup",
    "ErrorKind",
    "IntersectionSet",
    "ValidationError",
    "combine",
    "compare_verses",
    "contains",
    "count_verses",
    "create_intersection_set",
    "difference",
    "first_n_verses",
    "from_ordinal",
    "group_by_book",
    "group_by_chapter",
    "group_by_level",
    "index_of",
    "intersection",
    "intersects",
    "interval_to_ref",
    "is_full_book",
    "is_full_chapter",
    "iterate_by_book",
    "iterate_by_chapter",
    "iterate_by_verse",
    "make_book_range",
    "make_range",
    "next_book",
    "next_chapter",
    "previous_book",
    "previous_chapter",
    "repair",
    "repair_in_place",
    "sort_refs",
    "split_by_book",
    "split_by_chapter",
    "split_by_verse",
    "to_ordinal",
    "union",
    "validate",
    "verse_at_index",
]
