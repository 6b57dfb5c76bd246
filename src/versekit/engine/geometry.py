"""Set algebra over references.

References are treated as sets of verse ordinals: a Verse is a point and a
Range a segment. Every operation first normalizes its inputs with
``combine`` so the sweeps below can rely on sorted, non-overlapping,
non-adjacent intervals.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Union

from versekit.engine.ordinal import (
    from_ordinal,
    interval_to_ref,
    to_ordinal,
    verse_interval,
)
from versekit.engine.ranges import combine
from versekit.refs import Ref, RefInput, Verse, as_ref_list
from versekit.versification.model import Versification

Interval = tuple[int, int]


@dataclass(frozen=True)
class IntersectionSet:
    """Prepared set of combined intervals.

    Build one with ``create_intersection_set`` when many references are
    tested against the same set; the set is then combined only once.
    """

    intervals: tuple[Interval, ...]

    def __len__(self) -> int:
        return len(self.intervals)

    def __bool__(self) -> bool:
        return bool(self.intervals)


SetInput = Union[RefInput, IntersectionSet]


def _intervals(v: Versification, refs: SetInput | Iterable[Ref]) -> list[Interval]:
    if isinstance(refs, IntersectionSet):
        return list(refs.intervals)
    return [verse_interval(v, r) for r in combine(v, refs)]


def _to_refs(v: Versification, intervals: Iterable[Interval]) -> list[Ref]:
    return [interval_to_ref(v, lo, hi) for lo, hi in intervals]


def create_intersection_set(v: Versification, refs: RefInput) -> IntersectionSet:
    """Combine refs once so they can be reused across many set operations."""
    return IntersectionSet(tuple(_intervals(v, refs)))


def _intersect_intervals(a: list[Interval], b: list[Interval]) -> list[Interval]:
    result: list[Interval] = []
    heads_a = [list(x) for x in a]
    heads_b = [list(x) for x in b]
    i = j = 0

    while i < len(heads_a) and j < len(heads_b):
        ha, hb = heads_a[i], heads_b[j]
        lo = max(ha[0], hb[0])
        hi = min(ha[1], hb[1])

        if lo > hi:
            if ha[1] < hb[1]:
                i += 1
            else:
                j += 1
            continue

        result.append((lo, hi))

        # Trim both heads past the emitted overlap
        ha[0] = hi + 1
        hb[0] = hi + 1
        if ha[0] > ha[1]:
            i += 1
        if hb[0] > hb[1]:
            j += 1

    return result


def intersection(v: Versification, a: SetInput, b: SetInput) -> list[Ref]:
    """Verses present in both a and b.

    Returns:
        Sorted, combined list; empty if nothing is shared
    """
    return _to_refs(v, _intersect_intervals(_intervals(v, a), _intervals(v, b)))


def intersects(v: Versification, a: SetInput, b: SetInput) -> bool:
    """True if a and b share at least one verse."""
    return bool(intersection(v, a, b))


def union(v: Versification, a: RefInput, b: RefInput) -> list[Ref]:
    """Verses present in a, b or both, combined."""
    return combine(v, as_ref_list(a) + as_ref_list(b))


def difference(v: Versification, a: SetInput, b: SetInput) -> list[Ref]:
    """Verses of a that are not in b."""
    keep = _intervals(v, a)
    remove = _intervals(v, b)
    result: list[Interval] = []
    j = 0

    for lo, hi in keep:
        while j < len(remove) and remove[j][1] < lo:
            j += 1

        cur = lo
        k = j
        while k < len(remove) and remove[k][0] <= hi:
            r_lo, r_hi = remove[k]
            if r_lo > cur:
                result.append((cur, r_lo - 1))
            cur = max(cur, r_hi + 1)
            if r_hi > hi:
                # This removal also covers the start of the next kept interval
                break
            k += 1
        j = k

        if cur <= hi:
            result.append((cur, hi))

    return _to_refs(v, result)


def contains(v: Versification, outer: SetInput, inner: SetInput) -> bool:
    """True if every verse of inner is also in outer.

    An empty inner set is contained in anything.
    """
    outer_iv = _intervals(v, outer)
    i = 0

    for lo, hi in _intervals(v, inner):
        while i < len(outer_iv) and outer_iv[i][1] < lo:
            i += 1
        if i == len(outer_iv):
            return False
        o_lo, o_hi = outer_iv[i]
        if lo < o_lo or hi > o_hi:
            return False

    return True


def index_of(v: Versification, refs: RefInput, verse: Verse) -> int:
    """Position of verse when refs are expanded verse by verse.

    refs are taken in the order given, without combining.

    Returns:
        0-based position, or -1 if the verse is not covered

    Raises:
        OrdinalError: If verse does not exist in the versification
    """
    target = to_ordinal(v, verse)
    offset = 0
    for ref in as_ref_list(refs):
        lo, hi = verse_interval(v, ref)
        if lo <= target <= hi:
            return offset + target - lo
        offset += hi - lo + 1
    return -1


def verse_at_index(v: Versification, refs: RefInput, index: int) -> Verse | None:
    """Verse at a 0-based position of the expanded refs; inverse of index_of."""
    if index < 0:
        return None
    offset = 0
    for ref in as_ref_list(refs):
        lo, hi = verse_interval(v, ref)
        size = hi - lo + 1
        if index < offset + size:
            return from_ordinal(v, lo + index - offset)
        offset += size
    return None
