"""Snapshots of a document and its structural metadata."""

from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class Heading:
    """A section heading. Line numbers are 0-based and inclusive."""

    text: str
    line_start: int
    line_end: int
    level: int = 1


@dataclass(frozen=True)
class NoteMetadata:
    """Structural metadata of a note: front matter and headings."""

    frontmatter: Optional[Dict[str, Any]] = None
    headings: Tuple[Heading, ...] = ()


@dataclass(frozen=True)
class Document:
    """A read-only view of one note at a point in time.

    Attributes:
        path: vault relative POSIX path, e.g. ``journal/2024-03-05.md``
        lines: content split into lines
        metadata: parsed metadata, None when not (yet) available
    """

    path: str
    lines: Tuple[str, ...] = ()
    metadata: Optional[NoteMetadata] = None
    checksum: Optional[str] = field(default=None, compare=False)

    @property
    def name(self) -> str:
        return PurePosixPath(self.path).name

    @property
    def stem(self) -> str:
        """Base name without extension."""
        return PurePosixPath(self.path).stem

    @property
    def frontmatter(self) -> Optional[Dict[str, Any]]:
        return self.metadata.frontmatter if self.metadata else None

    @property
    def headings(self) -> Tuple[Heading, ...]:
        return self.metadata.headings if self.metadata else ()
