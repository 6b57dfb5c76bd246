"""Parser for the compact, whitespace free form used in URLs.

This is the form produced by the "url" format preset:

- "gen3v2,3,4" -> GEN 3:2, GEN 3:3, GEN 3:4
- "gen3v2-4" -> GEN 3:2-4
- "gen3-4" -> GEN 3:1 to GEN 4:26
- "gen1v2-10_exo5v3-6v4" -> GEN 1:2-10, EXO 5:3 to EXO 6:4
- "gen-exo", "gen5-exo2", "gen5v3-exo" -> cross-book ranges

Blocks are separated by "_" and always start with a three character book
id (any case). Within a block "," separates items, "v" separates chapter
from verse and "-" makes a range.
"""

from __future__ import annotations

import logging
import re

from versekit.engine.ranges import make_range
from versekit.errors import RangeConstructionError, ReferenceParseError
from versekit.refs import Range, Ref, Verse
from versekit.versification.model import BookMeta, Versification

logger = logging.getLogger(__name__)

BLOCK_SEPARATOR = "_"

_CROSS_BOOK = re.compile(
    r"^(\d+)?(?:v(\d+))?-([0-9a-z]{3})(\d+)?(?:v(\d+))?$", re.IGNORECASE
)
_CV_CV = re.compile(r"^(\d+)v(\d+)-(\d+)v(\d+)$", re.IGNORECASE)
_CV_V = re.compile(r"^(\d+)v(\d+)-(\d+)$", re.IGNORECASE)
_CV = re.compile(r"^(\d+)v(\d+)$", re.IGNORECASE)
_N_N = re.compile(r"^(\d+)-(\d+)$")
_N = re.compile(r"^(\d+)$")


def _book(v: Versification, book_id: str, token: str) -> BookMeta:
    meta = v.book.get(book_id.upper())
    if meta is None:
        raise ReferenceParseError(
            f"Unknown book id '{book_id}' in '{token}'", text=token
        )
    return meta


def _whole(v: Versification, book: str, chapter: int | None, token: str) -> Range:
    try:
        return make_range(v, book, chapter)
    except RangeConstructionError as e:
        raise ReferenceParseError(f"{e} in '{token}'", text=token) from e


def _cross_book(
    v: Versification, start: BookMeta, match: re.Match, token: str
) -> Range:
    end = _book(v, match.group(3), token)

    s_ch, s_vs = match.group(1), match.group(2)
    if s_ch is None:
        if s_vs is not None:
            raise ReferenceParseError(
                f"Verse given without chapter in '{token}'", text=token
            )
        first = start.first_verse()
    elif s_vs is None:
        first = _whole(v, start.id, int(s_ch), token).start
    else:
        first = Verse(start.id, int(s_ch), int(s_vs))

    e_ch, e_vs = match.group(4), match.group(5)
    if e_ch is None:
        if e_vs is not None:
            raise ReferenceParseError(
                f"Verse given without chapter in '{token}'", text=token
            )
        last = end.last_verse()
    elif e_vs is None:
        last = _whole(v, end.id, int(e_ch), token).end
    else:
        last = Verse(end.id, int(e_ch), int(e_vs))

    return Range(first, last)


def _block(v: Versification, block: str, token: str) -> list[Ref]:
    if len(block) < 3:
        raise ReferenceParseError(f"Block too short: '{block}'", text=token)

    meta = _book(v, block[:3], token)
    rest = block[3:]
    if not rest:
        return [make_range(v, meta.id)]

    cross = _CROSS_BOOK.match(rest)
    if cross and cross.group(3).upper() in v.book:
        return [_cross_book(v, meta, cross, token)]

    refs: list[Ref] = []
    # Chapter that bare numbers refer to, set by the last "CvV" item
    chapter: int | None = None

    for item in rest.split(","):
        if m := _CV_CV.match(item):
            refs.append(
                Range(
                    Verse(meta.id, int(m.group(1)), int(m.group(2))),
                    Verse(meta.id, int(m.group(3)), int(m.group(4))),
                )
            )
            chapter = None
        elif m := _CV_V.match(item):
            chapter = int(m.group(1))
            refs.append(
                Range(
                    Verse(meta.id, chapter, int(m.group(2))),
                    Verse(meta.id, chapter, int(m.group(3))),
                )
            )
        elif m := _CV.match(item):
            chapter = int(m.group(1))
            refs.append(Verse(meta.id, chapter, int(m.group(2))))
        elif m := _N_N.match(item):
            lo, hi = int(m.group(1)), int(m.group(2))
            if chapter is not None:
                refs.append(Range(Verse(meta.id, chapter, lo), Verse(meta.id, chapter, hi)))
            else:
                refs.append(
                    Range(
                        _whole(v, meta.id, lo, token).start,
                        _whole(v, meta.id, hi, token).end,
                    )
                )
        elif m := _N.match(item):
            n = int(m.group(1))
            if chapter is not None:
                refs.append(Verse(meta.id, chapter, n))
            else:
                refs.append(_whole(v, meta.id, n, token))
        else:
            raise ReferenceParseError(
                f"Cannot understand '{item}' in block '{block}'", text=token
            )

    return refs


def parse_url_encoded(v: Versification, token: str) -> list[Ref]:
    """Parse a compact reference token such as "gen1v2-3,5_exo".

    Args:
        v: Versification supplying book ids and chapter sizes
        token: Compact reference string

    Returns:
        References in the order written

    Raises:
        ReferenceParseError: If the token is empty, names an unknown book or
            is malformed
    """
    if not token:
        raise ReferenceParseError("Empty reference string provided.", text=token)

    refs: list[Ref] = []
    for block in token.split(BLOCK_SEPARATOR):
        refs.extend(_block(v, block, token))

    logger.debug(f"Parsed url token '{token}' into {len(refs)} refs")
    return refs
