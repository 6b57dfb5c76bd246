"""Ordered sequences of books, e.g. the whole Bible or the Torah."""

from __future__ import annotations

from typing import Iterator, Sequence

from versekit.versification.model import Versification


class BookSequence(Sequence[str]):
    """An ordered subset of book ids with navigation helpers."""

    def __init__(self, refs: Sequence[str], names: Sequence[str]):
        if len(refs) != len(names):
            raise ValueError(
                f"List of book ids ({len(refs)}) and book names ({len(names)}) "
                "must be of equal length"
            )
        self._refs = [r.upper() for r in refs]
        self._names = list(names)
        self._index = {r: i for i, r in enumerate(self._refs)}

    @classmethod
    def from_lists(cls, refs: Sequence[str], names: Sequence[str]) -> "BookSequence":
        return cls(refs, names)

    @classmethod
    def from_range(
        cls, v: Versification, start: int, end: int | None = None
    ) -> "BookSequence":
        """Sequence of the books ``v.order[start:end]``."""
        books = v.order[start:end]
        return cls([b.id for b in books], [b.name for b in books])

    def __getitem__(self, index):  # type: ignore[override]
        return self._refs[index]

    def __len__(self) -> int:
        return len(self._refs)

    def __iter__(self) -> Iterator[str]:
        return iter(self._refs)

    def __repr__(self) -> str:
        return f"BookSequence({self.first}..{self.last}, {len(self)} books)"

    def _idx(self, ref: str) -> int:
        return self._index.get(ref.upper(), -1)

    def contains(self, ref: str) -> bool:
        return self._idx(ref) >= 0

    def __contains__(self, ref: object) -> bool:
        return isinstance(ref, str) and self.contains(ref)

    def get_next(self, ref: str) -> str | None:
        """Book following ref, or None at the end or for unknown books."""
        idx = self._idx(ref)
        if idx < 0 or idx >= len(self._refs) - 1:
            return None
        return self._refs[idx + 1]

    def get_previous(self, ref: str) -> str | None:
        """Book preceding ref, or None at the start or for unknown books."""
        idx = self._idx(ref)
        if idx < 1:
            return None
        return self._refs[idx - 1]

    @property
    def first(self) -> str:
        return self._refs[0]

    @property
    def last(self) -> str:
        return self._refs[-1]

    def get_name(self, ref: str) -> str | None:
        idx = self._idx(ref)
        if idx < 0:
            return None
        return self._names[idx]

    def refs(self) -> list[str]:
        return list(self._refs)

    def names(self) -> list[str]:
        return list(self._names)


def bible_sequences(v: Versification) -> dict[str, BookSequence]:
    """Standard sequences over a 66-book versification.

    Returns:
        Mapping with keys "bible", "old_testament", "new_testament", "torah"
    """
    return {
        "bible": BookSequence.from_range(v, 0, 66),
        "old_testament": BookSequence.from_range(v, 0, 39),
        "new_testament": BookSequence.from_range(v, 39, 66),
        "torah": BookSequence.from_range(v, 0, 5),
    }
