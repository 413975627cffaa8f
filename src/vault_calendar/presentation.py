"""Grouping and sorting of index contents for display."""

import calendar
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Sequence

from vault_calendar.index import DateIndex
from vault_calendar.models import (
    CalendarItem,
    CalendarType,
    InlineTimestampItem,
    NoteHeadingItem,
    NoteItem,
    ReminderItem,
    SortingOption,
)
from vault_calendar.utils import natural_sort_key


@dataclass
class DayListing:
    """The items of one day, split by kind and sorted by display name."""

    day: date
    notes: List[NoteItem] = field(default_factory=list)
    reminders: List[ReminderItem] = field(default_factory=list)
    inline_timestamps: List[InlineTimestampItem] = field(default_factory=list)
    headings: List[NoteHeadingItem] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.notes) + len(self.reminders) + len(self.inline_timestamps) + len(self.headings)

    @property
    def label(self) -> str:
        """Heading for the day, e.g. ``Tue, 05 Mar 2024``."""
        return self.day.strftime("%a, %d %b %Y")


def sort_items(items: Sequence[CalendarItem], sorting: SortingOption) -> List[CalendarItem]:
    return sorted(
        items,
        key=lambda item: natural_sort_key(item.display_name),
        reverse=sorting == SortingOption.NAME_REV,
    )


def group_items(day: date, items: Sequence[CalendarItem], sorting: SortingOption) -> DayListing:
    listing = DayListing(day=day)
    for item in sort_items(items, sorting):
        if isinstance(item, NoteItem):
            listing.notes.append(item)
        elif isinstance(item, ReminderItem):
            listing.reminders.append(item)
        elif isinstance(item, InlineTimestampItem):
            listing.inline_timestamps.append(item)
        elif isinstance(item, NoteHeadingItem):
            listing.headings.append(item)
        else:
            raise TypeError(f"Unknown calendar item: {item!r}")
    return listing


def day_listing(
    index: DateIndex, day: date, sorting: SortingOption = SortingOption.NAME
) -> DayListing:
    return group_items(day, index.items_for(day.isoformat()), sorting)


def week_start(day: date, calendar_type: CalendarType = CalendarType.ISO_8601) -> date:
    """First day of the week holding day: Monday for ISO 8601, Sunday for US."""
    if calendar_type == CalendarType.US:
        return day - timedelta(days=(day.weekday() + 1) % 7)
    return day - timedelta(days=day.weekday())


def week_listing(
    index: DateIndex, start: date, sorting: SortingOption = SortingOption.NAME
) -> List[DayListing]:
    """Listings for the seven days from start, leaving out empty days."""
    listings = [day_listing(index, start + timedelta(days=offset), sorting) for offset in range(7)]
    return [listing for listing in listings if listing.total]


def month_counts(index: DateIndex, year: int, month: int) -> Dict[date, int]:
    """Number of items on each day of a month that has any."""
    counts = {}
    for day_number in range(1, calendar.monthrange(year, month)[1] + 1):
        day = date(year, month, day_number)
        count = len(index.items_for(day.isoformat()))
        if count:
            counts[day] = count
    return counts
