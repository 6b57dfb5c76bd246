"""versekit: book/chapter/verse references and set algebra over them."""

__version__ = "0.1.0"

from versekit.errors import (
    FormatError,
    OrdinalError,
    RangeConstructionError,
    ReferenceParseError,
    RepairError,
    VerseKitError,
    VersificationError,
)
from versekit.refs import Range, Ref, RefInput, Verse, is_range, ref_end, ref_start
from versekit.versification import VERSIFICATION, Versification, create_versification
from versekit.versification.loader import load_versification
from versekit.text import FormatOptions, ParseResult
from versekit.library import VerseKit, default

__all__ = [
    "FormatError",
    "FormatOptions",
    "OrdinalError",
    "ParseResult",
    "Range",
    "RangeConstructionError",
    "Ref",
    "RefInput",
    "ReferenceParseError",
    "RepairError",
    "VERSIFICATION",
    "Verse",
    "VerseKit",
    "VerseKitError",
    "Versification",
    "VersificationError",
    "create_versification",
    "default",
    "is_range",
    "load_versification",
    "ref_end",
    "ref_start",
]
