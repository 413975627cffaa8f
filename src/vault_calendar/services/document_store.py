"""Service for reading notes from the vault on disk."""

from pathlib import Path
from typing import Dict, Iterable, List, Optional

from loguru import logger

from vault_calendar.file_utils import compute_checksum, is_hidden
from vault_calendar.markdown import Document, split_lines
from vault_calendar.services.exceptions import FileOperationError
from vault_calendar.services.metadata_cache import MetadataCache


class DocumentStore:
    """
    Read access to the notes of a vault.

    Paths handed in and out are vault relative POSIX strings. Reading a note
    refreshes its metadata in the cache and its checksum, which is what lets
    the watcher tell a rename from a delete plus a create.
    """

    def __init__(
        self,
        base_path: Path,
        metadata_cache: Optional[MetadataCache] = None,
        extensions: Iterable[str] = (".md",),
    ):
        self.base_path = base_path.resolve()
        self.metadata_cache = metadata_cache or MetadataCache()
        self.extensions = tuple(extensions)
        self.checksums: Dict[str, str] = {}

    def relative_path(self, path: Path | str) -> str:
        """Vault relative POSIX path for an absolute or relative path."""
        path = Path(path)
        if path.is_absolute():
            path = path.resolve().relative_to(self.base_path)
        return path.as_posix()

    def absolute_path(self, path: str) -> Path:
        return self.base_path / path

    def is_tracked(self, path: str) -> bool:
        """True for note types the index follows."""
        return path.endswith(self.extensions) and not is_hidden(path)

    async def read_text(self, path: str) -> str:
        """
        Read a note.

        Raises:
            FileOperationError: If the note cannot be read
        """
        try:
            # decoded without newline translation so line numbers match split_lines
            return self.absolute_path(path).read_bytes().decode("utf-8")
        except Exception as e:
            logger.warning(f"Failed to read {path}: {e}")
            raise FileOperationError(f"Failed to read {path}: {e}") from e

    async def read_content(self, path: str) -> List[str]:
        """Lines of a note. Raises FileOperationError."""
        return split_lines(await self.read_text(path))

    async def get_document(self, path: str) -> Optional[Document]:
        """
        Current snapshot of a note with fresh metadata.

        Returns:
            The document, or None if it does not exist or is not a tracked note

        Raises:
            FileOperationError: If the note exists but cannot be read
        """
        if not self.is_tracked(path) or not self.absolute_path(path).is_file():
            return None

        text = await self.read_text(path)
        checksum = await compute_checksum(text)
        metadata = self.metadata_cache.update(path, text)
        self.checksums[path] = checksum
        return Document(
            path=path,
            lines=tuple(split_lines(text)),
            metadata=metadata,
            checksum=checksum,
        )

    async def list_documents(self) -> List[Document]:
        """
        Read every tracked note in the vault.

        Unreadable notes are logged and skipped. Marks the metadata cache resolved.
        """
        documents = []
        errors = 0
        for file_path in sorted(self.base_path.rglob("*")):
            if not file_path.is_file():
                continue
            path = file_path.relative_to(self.base_path).as_posix()
            if not self.is_tracked(path):
                continue
            try:
                document = await self.get_document(path)
            except FileOperationError:
                errors += 1
                continue
            if document:
                documents.append(document)

        logger.debug(f"Found {len(documents)} notes in {self.base_path}")
        if errors:
            logger.warning(f"Skipped {errors} unreadable notes")
        self.metadata_cache.mark_resolved()
        return documents

    def forget(self, path: str) -> None:
        """Drop cached state for a deleted note."""
        self.checksums.pop(path, None)
        self.metadata_cache.remove(path)

    def move(self, old_path: str, new_path: str) -> None:
        checksum = self.checksums.pop(old_path, None)
        if checksum is not None:
            self.checksums[new_path] = checksum
        self.metadata_cache.move(old_path, new_path)
