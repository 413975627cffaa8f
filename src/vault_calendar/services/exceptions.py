class FileOperationError(Exception):
    """Raised when file operations fail"""

    pass


class CalendarNotFoundError(Exception):
    """Raised when a calendar cannot be found"""

    pass


class ConfigurationError(Exception):
    """Raised when a calendar configuration cannot be used"""

    pass
