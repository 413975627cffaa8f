"""Ordered registry of calendar configurations."""

import time
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set

from loguru import logger

from vault_calendar.extraction import ExtractionStrategy, resolve_strategy
from vault_calendar.models import EXTRACTION_FIELDS, CalendarConfig, SourceType
from vault_calendar.services.exceptions import CalendarNotFoundError


class CalendarRegistry:
    """Ordered list of calendars with their resolved extraction strategies.

    The registry performs no I/O. Strategies are resolved once per calendar and
    cached until the calendar's extraction fields change.
    """

    def __init__(self, calendars: Optional[Iterable[CalendarConfig]] = None):
        self._calendars: List[CalendarConfig] = []
        self._strategies: Dict[str, ExtractionStrategy] = {}
        for calendar in calendars or []:
            if self.find(calendar.id):
                raise ValueError(f"Duplicate calendar id: {calendar.id}")
            self._calendars.append(calendar)

    def __iter__(self) -> Iterator[CalendarConfig]:
        return iter(list(self._calendars))

    def __len__(self) -> int:
        return len(self._calendars)

    def find(self, calendar_id: str) -> Optional[CalendarConfig]:
        return next((c for c in self._calendars if c.id == calendar_id), None)

    def get(self, calendar_id: str) -> CalendarConfig:
        calendar = self.find(calendar_id)
        if calendar is None:
            raise CalendarNotFoundError(f"Calendar not found: {calendar_id}")
        return calendar

    def enabled(self) -> List[CalendarConfig]:
        return [c for c in self._calendars if c.enabled]

    def enabled_strategies(self) -> List[ExtractionStrategy]:
        """Strategies of the enabled calendars, in registry order."""
        strategies = []
        for calendar in self.enabled():
            if calendar.id not in self._strategies:
                self._strategies[calendar.id] = resolve_strategy(calendar)
            strategies.append(self._strategies[calendar.id])
        return strategies

    def _new_id(self) -> str:
        calendar_id = f"calendar-{time.time_ns() // 1_000_000}"
        suffix = 1
        while self.find(calendar_id):
            calendar_id = f"calendar-{time.time_ns() // 1_000_000}-{suffix}"
            suffix += 1
        return calendar_id

    def add(
        self,
        name: str = "New Calendar",
        source_type: SourceType = SourceType.YAML,
        format: str = "YYYY-MM-DD",
        **fields: Any,
    ) -> CalendarConfig:
        """Append a calendar with a fresh id derived from the creation time."""
        if source_type == SourceType.YAML and "yaml_key" not in fields:
            fields["yaml_key"] = "date"
        calendar = CalendarConfig(
            id=self._new_id(), name=name, source_type=source_type, format=format, **fields
        )
        self._calendars.append(calendar)
        logger.debug(f"Added calendar {calendar.id} ({calendar.name})")
        return calendar

    def update(self, calendar_id: str, **changes: Any) -> Set[str]:
        """Update fields of a calendar in place.

        The whole change is validated before any field is assigned, so a
        rejected change leaves the calendar and its strategy untouched.

        Returns:
            Names of the fields whose value changed
        """
        if "id" in changes:
            raise ValueError("Calendar id cannot be changed")
        unknown = set(changes) - set(CalendarConfig.model_fields)
        if unknown:
            raise ValueError(f"Unknown calendar fields: {sorted(unknown)}")
        calendar = self.get(calendar_id)

        updated = CalendarConfig.model_validate({**calendar.model_dump(), **changes})
        changed = {field for field in changes if getattr(calendar, field) != getattr(updated, field)}
        for field in changed:
            setattr(calendar, field, getattr(updated, field))

        if changed & EXTRACTION_FIELDS:
            self._strategies.pop(calendar_id, None)
        logger.debug(f"Updated calendar {calendar_id}: {sorted(changed)}")
        return changed

    def set_enabled(self, calendar_id: str, enabled: bool) -> bool:
        """Toggle a calendar. Returns True when the state changed."""
        return bool(self.update(calendar_id, enabled=enabled))

    def remove(self, calendar_id: str) -> CalendarConfig:
        calendar = self.get(calendar_id)
        self._calendars.remove(calendar)
        self._strategies.pop(calendar_id, None)
        logger.debug(f"Removed calendar {calendar_id}")
        return calendar
