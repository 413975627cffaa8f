"""Base package for markdown parsing."""

from vault_calendar.markdown.metadata_parser import parse_headings, parse_metadata, split_lines
from vault_calendar.markdown.schemas import Document, Heading, NoteMetadata

__all__ = [
    "Document",
    "Heading",
    "NoteMetadata",
    "parse_headings",
    "parse_metadata",
    "split_lines",
]
