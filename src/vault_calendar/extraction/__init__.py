"""Extraction strategies mapping a document and a calendar to dated items."""

from vault_calendar.extraction.base import (
    STRATEGIES,
    Extraction,
    ExtractionStrategy,
    InvalidCalendarStrategy,
    resolve_strategy,
)
from vault_calendar.extraction.strategies import (
    FilenameStrategy,
    FrontmatterStrategy,
    InlineStrategy,
    NoteHeadingStrategy,
    PatternMatch,
    preview_pattern,
)

__all__ = [
    "STRATEGIES",
    "Extraction",
    "ExtractionStrategy",
    "FilenameStrategy",
    "FrontmatterStrategy",
    "InlineStrategy",
    "InvalidCalendarStrategy",
    "NoteHeadingStrategy",
    "PatternMatch",
    "preview_pattern",
    "resolve_strategy",
]
