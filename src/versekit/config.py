"""Configuration settings for versekit."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from rich.console import Console
from rich.logging import RichHandler

from versekit.text.printer import FormatOptions, resolve_options
from versekit.versification.loader import VERSIFICATION_ENV_VAR

LOG_LEVEL_ENV_VAR = "VERSEKIT_LOG_LEVEL"
FORMAT_PRESET_ENV_VAR = "VERSEKIT_FORMAT_PRESET"

_TRUE_VALUES = {"1", "true", "yes", "on"}

# Boolean format fields and the variables that set them
_FLAG_ENV_VARS = {
    "use_book_id": "VERSEKIT_USE_BOOK_ID",
    "strip_whitespace": "VERSEKIT_STRIP_WHITESPACE",
    "combine_ranges": "VERSEKIT_COMBINE_RANGES",
    "compact": "VERSEKIT_COMPACT",
}


@dataclass
class Settings:
    """Application settings."""

    # Versification YAML; None means the built-in canon
    versification_path: Path | None = None

    # Formatting
    format_preset: str = "default"
    use_book_id: bool = False
    verse_separator: str = ":"
    strip_whitespace: bool = False
    combine_ranges: bool = False
    compact: bool = True

    # Logging
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from VERSEKIT_* environment variables."""
        env = os.environ if environ is None else environ

        path = env.get(VERSIFICATION_ENV_VAR)
        settings = cls(
            versification_path=Path(path) if path else None,
            log_level=env.get(LOG_LEVEL_ENV_VAR, "WARNING").upper(),
        )

        preset = env.get(FORMAT_PRESET_ENV_VAR)
        if preset:
            settings.format_preset = preset
        for field, name in _FLAG_ENV_VARS.items():
            if name in env:
                setattr(settings, field, env[name].strip().lower() in _TRUE_VALUES)
        if "VERSEKIT_VERSE_SEPARATOR" in env:
            settings.verse_separator = env["VERSEKIT_VERSE_SEPARATOR"]
        return settings

    def format_options(self) -> FormatOptions:
        """FormatOptions from these settings.

        A non-default preset wins over the individual fields.
        """
        if self.format_preset != "default":
            return resolve_options(self.format_preset)
        return FormatOptions(
            use_book_id=self.use_book_id,
            verse_separator=self.verse_separator,
            strip_whitespace=self.strip_whitespace,
            combine_ranges=self.combine_ranges,
            compact=self.compact,
        )


def configure_logging(level: str | int = "WARNING") -> None:
    """Send versekit log records to stderr through rich."""
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    package_logger = logging.getLogger("versekit")
    package_logger.handlers = [handler]
    package_logger.setLevel(level)
    package_logger.propagate = False
