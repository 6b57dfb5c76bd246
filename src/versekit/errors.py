"""Exception hierarchy for versekit.

Structural failures (bad versification data, unknown books passed to
constructors, unparseable text) are raised. Validation findings are never
raised; see versekit.engine.validate.
"""

from __future__ import annotations


class VerseKitError(ValueError):
    """Base class for all versekit errors."""

    pass


class VersificationError(VerseKitError):
    """Raised when versification data is malformed or inconsistent."""

    def __init__(self, message: str, key: str | None = None):
        self.key = key
        full_message = f"[{key}] {message}" if key else message
        super().__init__(full_message)


class OrdinalError(VerseKitError):
    """Raised when a verse or ordinal falls outside the versification."""

    pass


class RangeConstructionError(VerseKitError):
    """Raised when a book/chapter range cannot be built."""

    pass


class RepairError(VerseKitError):
    """Raised when a reference cannot be repaired (e.g. unknown book)."""

    pass


class ReferenceParseError(VerseKitError):
    """Error parsing a reference string, with an actionable message."""

    def __init__(
        self, message: str, text: str | None = None, offset: int | None = None
    ):
        self.text = text
        self.offset = offset
        super().__init__(message)


class FormatError(VerseKitError):
    """Raised when a reference cannot be rendered as text."""

    pass
