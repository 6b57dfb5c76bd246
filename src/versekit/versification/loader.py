"""Versification loading from YAML.

Loads a custom versification description so callers (and the CLI) can work
with schemes other than the built-in default. The core never reads files;
this module turns a file into the raw description accepted by
``create_versification``.

File layout:

    name: my-scheme
    books:
      - id: GEN
        osis_id: Gen
        name: Genesis
        aliases: [Gn]
        verse_counts: [31, 25, 24]
    range_aliases:
      - pattern: "torah"
        start_book: GEN
        end_book: DEU

The path may also come from the VERSEKIT_VERSIFICATION env var.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, PositiveInt, ValidationError

from versekit.errors import VersificationError
from versekit.versification.model import (
    BookMetaRaw,
    RangeAliasRaw,
    Versification,
    create_versification,
)

logger = logging.getLogger(__name__)

VERSIFICATION_ENV_VAR = "VERSEKIT_VERSIFICATION"


class BookEntryModel(BaseModel):
    """One book entry of a versification file."""

    id: str = Field(..., min_length=1, description="Book identifier, e.g. GEN")
    name: str = Field(..., min_length=1, description="Canonical book name")
    osis_id: Optional[str] = Field(None, description="OSIS identifier")
    aliases: List[str] = Field(default_factory=list, description="Abbreviations")
    verse_counts: List[PositiveInt] = Field(
        ..., min_length=1, description="Verse count of each chapter"
    )


class RangeAliasEntryModel(BaseModel):
    """Named span of whole books."""

    pattern: str = Field(..., min_length=1, description="Case-insensitive regex")
    start_book: str
    end_book: Optional[str] = None


class VersificationFileModel(BaseModel):
    """Top-level structure of a versification file."""

    name: Optional[str] = None
    books: List[dict] = Field(..., min_length=1)
    range_aliases: List[dict] = Field(default_factory=list)


def _entry_key(index: int, raw: dict) -> str:
    book_id = raw.get("id") if isinstance(raw, dict) else None
    return str(book_id) if book_id else f"books[{index}]"


def parse_versification_data(
    data: object, default_name: str | None = None
) -> Versification:
    """Build a Versification from already-parsed YAML/JSON data.

    Raises:
        VersificationError: If the data is malformed
    """
    if not isinstance(data, dict):
        raise VersificationError("Versification file must be a YAML mapping")

    try:
        top = VersificationFileModel.model_validate(data)
    except ValidationError as e:
        raise VersificationError(f"Invalid versification file: {e}")

    books: list[BookMetaRaw] = []
    for i, raw in enumerate(top.books):
        key = _entry_key(i, raw)
        try:
            entry = BookEntryModel.model_validate(raw)
        except ValidationError as e:
            raise VersificationError(f"Invalid book entry: {e}", key)
        books.append(
            BookMetaRaw(
                id=entry.id.upper(),
                name=entry.name,
                osis_id=entry.osis_id or "",
                aliases=tuple(entry.aliases),
                verse_counts=tuple(entry.verse_counts),
            )
        )

    aliases: list[RangeAliasRaw] = []
    for i, raw in enumerate(top.range_aliases):
        try:
            entry = RangeAliasEntryModel.model_validate(raw)
        except ValidationError as e:
            raise VersificationError(f"Invalid range alias: {e}", f"range_aliases[{i}]")
        aliases.append(
            RangeAliasRaw(
                pattern=entry.pattern,
                start_book=entry.start_book.upper(),
                end_book=entry.end_book.upper() if entry.end_book else None,
            )
        )

    return create_versification(books, aliases, name=top.name or default_name)


def load_versification(path: Path | str | None = None) -> Versification:
    """Load a versification from a YAML file.

    Args:
        path: Path to the file. If None, uses the VERSEKIT_VERSIFICATION
            env var.

    Returns:
        Loaded Versification, named after the file stem unless the file
        gives a name

    Raises:
        VersificationError: If the file is invalid or no path is available
        FileNotFoundError: If the file does not exist
    """
    if path is None:
        path = os.environ.get(VERSIFICATION_ENV_VAR)
        if not path:
            raise VersificationError(
                f"No versification path given and {VERSIFICATION_ENV_VAR} is not set"
            )

    if isinstance(path, str):
        path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Versification file not found: {path}")

    logger.debug(f"Loading versification from {path}")
    with open(path, "r", encoding="utf-8") as f:
        try:
            raw_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise VersificationError(f"Cannot parse {path}: {e}")

    versification = parse_versification_data(raw_data, default_name=path.stem)
    logger.info(
        f"Loaded versification '{versification.name}' "
        f"({len(versification)} books) from {path}"
    )
    return versification
