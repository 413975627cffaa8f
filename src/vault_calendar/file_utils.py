"""Utilities for file operations."""

import hashlib
from pathlib import PurePosixPath

from loguru import logger

from vault_calendar.services.exceptions import FileOperationError


async def compute_checksum(content: str) -> str:
    """
    Compute SHA-256 checksum of content.

    Args:
        content: Text content to hash

    Returns:
        SHA-256 hex digest

    Raises:
        FileOperationError: If checksum computation fails
    """
    try:
        return hashlib.sha256(content.encode()).hexdigest()
    except Exception as e:
        logger.error(f"Failed to compute checksum: {e}")
        raise FileOperationError(f"Failed to compute checksum: {e}")


def is_hidden(path: str) -> bool:
    """True if any part of a relative path starts with a dot."""
    return any(part.startswith(".") for part in PurePosixPath(path).parts)
