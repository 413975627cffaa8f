"""Cache of parsed note metadata, keyed by vault relative path."""

from typing import Dict, Optional

from loguru import logger

from vault_calendar.markdown import NoteMetadata, parse_metadata


class MetadataCache:
    """Holds the front matter and headings of every known note.

    ``resolved`` turns true once the initial corpus has been parsed.
    """

    def __init__(self):
        self._metadata: Dict[str, NoteMetadata] = {}
        self.resolved = False

    def __contains__(self, path: object) -> bool:
        return path in self._metadata

    def __len__(self) -> int:
        return len(self._metadata)

    def get(self, path: str) -> Optional[NoteMetadata]:
        return self._metadata.get(path)

    def update(self, path: str, text: str) -> NoteMetadata:
        """Parse text and store the result for path."""
        metadata = parse_metadata(text, path=path)
        self._metadata[path] = metadata
        return metadata

    def remove(self, path: str) -> None:
        self._metadata.pop(path, None)

    def move(self, old_path: str, new_path: str) -> None:
        metadata = self._metadata.pop(old_path, None)
        if metadata is not None:
            self._metadata[new_path] = metadata

    def mark_resolved(self) -> None:
        if not self.resolved:
            logger.debug(f"Metadata resolved for {len(self._metadata)} notes")
        self.resolved = True
