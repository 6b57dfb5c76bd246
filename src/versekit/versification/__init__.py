"""Versification schemes: the shared, read-only book/chapter/verse tables."""

from versekit.versification.data import DEFAULT_BOOKS, DEFAULT_RANGE_ALIASES
from versekit.versification.model import (
    BookMeta,
    BookMetaRaw,
    ChapterMeta,
    RangeAlias,
    RangeAliasRaw,
    Versification,
    create_versification,
)
from versekit.versification.sequence import BookSequence, bible_sequences

# Default 66 book Protestant canon
VERSIFICATION = create_versification(
    DEFAULT_BOOKS, DEFAULT_RANGE_ALIASES, name="default"
)

__all__ = [
    "BookMeta",
    "BookMetaRaw",
    "BookSequence",
    "ChapterMeta",
    "DEFAULT_BOOKS",
    "DEFAULT_RANGE_ALIASES",
    "RangeAlias",
    "RangeAliasRaw",
    "VERSIFICATION",
    "Versification",
    "bible_sequences",
    "create_versification",
]
