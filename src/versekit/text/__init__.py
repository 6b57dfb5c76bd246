"""Conversion between references and text."""

from versekit.text.parser import ParseResult, parse, parse_book_name, try_parse
from versekit.text.printer import (
    FORMAT_PRESETS,
    FormatOptions,
    format_range,
    format_ref_list,
    format_refs,
    format_verse,
)
from versekit.text.url import parse_url_encoded

__all__ = [
    "FORMAT_PRESETS",
    "FormatOptions",
    "ParseResult",
    "format_range",
    "format_ref_list",
    "format_refs",
    "format_verse",
    "parse",
    "parse_book_name",
    "parse_url_encoded",
    "try_parse",
]
