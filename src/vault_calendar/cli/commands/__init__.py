"""Command module exports."""

from . import calendars, day, scan, watch

__all__ = ["calendars", "day", "scan", "watch"]
