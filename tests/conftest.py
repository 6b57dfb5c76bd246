"""Shared fixtures for versekit tests."""

import random

import pytest

from versekit.engine.ordinal import interval_to_ref
from versekit.library import VerseKit
from versekit.refs import Ref
from versekit.versification import VERSIFICATION
from versekit.versification.model import BookMetaRaw, RangeAliasRaw, create_versification


@pytest.fixture
def v():
    """The default 66 book versification."""
    return VERSIFICATION


@pytest.fixture
def kit():
    """VerseKit over the default versification."""
    return VerseKit()


@pytest.fixture
def tiny():
    """Three small books: AAA (3, 2), BBB (4), CCC (1, 1, 2)."""
    return create_versification(
        [
            BookMetaRaw("AAA", "Alpha", osis_id="Alp", aliases=("Al",), verse_counts=(3, 2)),
            BookMetaRaw("BBB", "Beta", verse_counts=(4,)),
            BookMetaRaw("CCC", "Gamma", aliases=("Gam",), verse_counts=(1, 1, 2)),
        ],
        [RangeAliasRaw(r"first\s+two", "AAA", "BBB")],
        name="tiny",
    )


TINY_YAML = """\
name: tiny
books:
  - id: AAA
    name: Alpha
    osis_id: Alp
    aliases: [Al]
    verse_counts: [3, 2]
  - id: bbb
    name: Beta
    verse_counts: [4]
range_aliases:
  - pattern: "both"
    start_book: AAA
    end_book: BBB
"""


@pytest.fixture
def tiny_yaml(tmp_path):
    """Path to a small versification file."""
    path = tmp_path / "tiny.yaml"
    path.write_text(TINY_YAML, encoding="utf-8")
    return path


@pytest.fixture
def random_refs(v):
    """Seeded generator of reference lists over the default versification.

    ``random_refs(seed, count=8, window=None)`` returns Verses and Ranges in
    random order. A window keeps them within the first ``window`` verses so
    that overlaps and adjacency are common.
    """

    def make(seed: int, count: int = 8, window: int | None = None) -> list[Ref]:
        rng = random.Random(seed)
        limit = window or v.total_verses
        refs: list[Ref] = []
        for _ in range(count):
            lo = rng.randrange(limit)
            hi = min(limit - 1, lo + rng.choice([0, 0, 1, 5, 40, 300]))
            refs.append(interval_to_ref(v, lo, hi))
        return refs

    return make
