"""Services backing the date index: document store and metadata cache."""

from vault_calendar.services.exceptions import (
    CalendarNotFoundError,
    ConfigurationError,
    FileOperationError,
)

__all__ = [
    "CalendarNotFoundError",
    "ConfigurationError",
    "FileOperationError",
]
