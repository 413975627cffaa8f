"""The four extraction strategies: filename, front matter, inline pattern, date headings."""

import re
from dataclasses import dataclass
from typing import List, Optional

from vault_calendar.extraction.base import Extraction, ExtractionStrategy, register
from vault_calendar.markdown import Document, split_lines
from vault_calendar.models import (
    CalendarConfig,
    InlineTimestampItem,
    NoteHeadingItem,
    NoteItem,
    SourceType,
    truncate_display,
)
from vault_calendar.services.exceptions import ConfigurationError


@register(SourceType.FILENAME)
class FilenameStrategy(ExtractionStrategy):
    """Dates a note by its base name, e.g. ``2024-03-05.md`` with ``YYYY-MM-DD``."""

    def extract(self, document: Document) -> List[Extraction]:
        date = self.parse_date(document.stem)
        if not date:
            return []
        item = NoteItem(display_name=document.stem, path=document.path, calendar_id=self.calendar_id)
        return [(date, item)]


@register(SourceType.YAML)
class FrontmatterStrategy(ExtractionStrategy):
    """Dates a note by one of its front matter values."""

    deferred_on_create = True

    def __init__(self, calendar: CalendarConfig):
        super().__init__(calendar)
        if not calendar.yaml_key:
            raise ConfigurationError("yaml calendar needs a front matter key")
        self.key = calendar.yaml_key

    def extract(self, document: Document) -> List[Extraction]:
        frontmatter = document.frontmatter
        if not frontmatter or self.key not in frontmatter:
            return []

        date = self.parse_date(str(frontmatter[self.key]))
        if not date:
            return []
        item = NoteItem(display_name=document.stem, path=document.path, calendar_id=self.calendar_id)
        return [(date, item)]


def compile_inline_pattern(pattern: Optional[str]) -> re.Pattern:
    """Compile an inline pattern, which must capture the date in its first group.

    Raises:
        ConfigurationError: if the pattern is empty, invalid or has no group
    """
    if not pattern:
        raise ConfigurationError("inline calendar needs a pattern")
    try:
        regex = re.compile(pattern)
    except re.error as e:
        raise ConfigurationError(f"invalid inline pattern {pattern!r}: {e}") from e
    if regex.groups < 1:
        raise ConfigurationError(f"inline pattern {pattern!r} has no capture group")
    return regex


@register(SourceType.INLINE)
class InlineStrategy(ExtractionStrategy):
    """One item per line whose pattern match captures a parsable date."""

    def __init__(self, calendar: CalendarConfig):
        super().__init__(calendar)
        self.regex = compile_inline_pattern(calendar.inline_pattern)
        self.whitelist = calendar.whitelist()

    def applies_to(self, path: str) -> bool:
        return not self.whitelist or path in self.whitelist

    def extract(self, document: Document) -> List[Extraction]:
        if not self.applies_to(document.path):
            return []

        extractions: List[Extraction] = []
        for line_number, line in enumerate(document.lines, start=1):
            match = self.regex.search(line)
            if not match or not match.group(1):
                continue
            date = self.parse_date(match.group(1))
            if not date:
                continue
            item = InlineTimestampItem(
                display_name=truncate_display(line),
                path=document.path,
                line_number=line_number,
                calendar_id=self.calendar_id,
            )
            extractions.append((date, item))
        return extractions


@register(SourceType.NOTE_HEADING)
class NoteHeadingStrategy(ExtractionStrategy):
    """Lists the lines under each dated heading of one designated note.

    Every non-blank line between a heading that parses as a date and the next
    heading becomes an item on that date. Two headings with the same date put
    their lines in the same bucket.
    """

    def __init__(self, calendar: CalendarConfig):
        super().__init__(calendar)
        if not calendar.note_path:
            raise ConfigurationError("note-heading calendar needs a note path")
        self.note_path = calendar.note_path

    def extract(self, document: Document) -> List[Extraction]:
        if document.path != self.note_path or not document.headings:
            return []

        headings = document.headings
        lines = document.lines
        extractions: List[Extraction] = []
        for index, heading in enumerate(headings):
            date = self.parse_date(heading.text)
            if not date:
                continue

            end = headings[index + 1].line_start if index + 1 < len(headings) else len(lines)
            for line_index in range(heading.line_end + 1, min(end, len(lines))):
                text = lines[line_index].strip()
                if not text or text.startswith("#"):
                    continue
                item = NoteHeadingItem(
                    display_name=truncate_display(text),
                    path=document.path,
                    line_number=line_index + 1,
                    calendar_id=self.calendar_id,
                )
                extractions.append((date, item))
        return extractions


@dataclass(frozen=True)
class PatternMatch:
    """A line matched while previewing an inline pattern."""

    line_number: int
    line: str
    date: Optional[str]


def preview_pattern(calendar: CalendarConfig, sample: str) -> List[PatternMatch]:
    """Run an inline calendar's pattern over sample text.

    Returns every matching line with the ISO date its capture parses to, or None
    when the capture does not fit the calendar's format.

    Raises:
        ConfigurationError: if the pattern or format cannot be used
    """
    strategy = InlineStrategy(calendar)
    matches = []
    for line_number, line in enumerate(split_lines(sample), start=1):
        match = strategy.regex.search(line)
        if not match:
            continue
        captured = match.group(1)
        matches.append(
            PatternMatch(
                line_number=line_number,
                line=line,
                date=strategy.parse_date(captured) if captured else None,
            )
        )
    return matches
