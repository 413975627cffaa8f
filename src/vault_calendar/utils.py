"""Utility functions for vault-calendar."""

import re
import sys
from typing import List, Optional, Union

from loguru import logger


def setup_logging(
    level: str = "INFO",
    console_level: Optional[str] = None,
    log_file: Optional[str] = None,
    fmt: str = "<level>[{level.name}]</level> {message}",
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """
    Configure loguru with console and optional file output.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR).
        console_level: Minimum level for stderr, defaults to level.
        log_file: Path to log file. If None, only logs to stderr.
        fmt: Loguru format string.
        rotation: Log file rotation size.
        retention: How long to keep rotated logs.
    """
    logger.remove()
    logger.add(sys.stderr, level=console_level or level, format=fmt)

    if log_file:
        logger.add(
            log_file,
            level=level,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}",
            rotation=rotation,
            retention=retention,
        )


def natural_sort_key(text: str) -> List[Union[int, str]]:
    """Sort key comparing digit runs by value: ``note 2`` before ``note 10``."""
    return [int(part) if part.isdigit() else part.casefold() for part in re.split(r"(\d+)", text)]
