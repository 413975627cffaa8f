"""In-memory index from ISO date to the calendar items found on that day."""

from collections import Counter
from typing import AbstractSet, Dict, Iterable, Iterator, List, Sequence, Tuple

from loguru import logger

from vault_calendar.extraction import Extraction, ExtractionStrategy
from vault_calendar.markdown import Document
from vault_calendar.models import CalendarItem


def extract_document(
    document: Document,
    strategies: Sequence[ExtractionStrategy],
    skip_deferred: bool = False,
) -> List[Extraction]:
    """Run every strategy over one document."""
    extractions: List[Extraction] = []
    for strategy in strategies:
        if skip_deferred and strategy.deferred_on_create:
            continue
        extractions.extend(strategy.run(document))
    return extractions


class DateIndex:
    """Mapping of ISO date (``YYYY-MM-DD``) to the items on that day.

    Invariants:
    - no date maps to an empty bucket
    - after remove_by_path(p) no bucket holds an item for p until p is added again
    - bucket order carries no meaning

    The index is derived state: it is rebuilt from documents and calendars and
    never persisted.
    """

    def __init__(self):
        self._days: Dict[str, List[CalendarItem]] = {}

    def __contains__(self, date: object) -> bool:
        return date in self._days

    def __len__(self) -> int:
        return len(self._days)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._days))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DateIndex):
            return NotImplemented
        return self.as_counters() == other.as_counters()

    def __repr__(self) -> str:
        return f"DateIndex(days={len(self._days)}, items={self.total_items})"

    @property
    def total_items(self) -> int:
        return sum(len(items) for items in self._days.values())

    def dates(self) -> List[str]:
        return sorted(self._days)

    def items_for(self, date: str) -> Tuple[CalendarItem, ...]:
        return tuple(self._days.get(date, ()))

    def items(self) -> Iterator[Tuple[str, Tuple[CalendarItem, ...]]]:
        for date in sorted(self._days):
            yield date, tuple(self._days[date])

    def as_counters(self) -> Dict[str, Counter]:
        """Buckets as multisets, for order independent comparison."""
        return {date: Counter(items) for date, items in self._days.items()}

    def paths(self) -> AbstractSet[str]:
        return {item.path for items in self._days.values() for item in items}

    def add_item(self, date: str, item: CalendarItem) -> None:
        """Append an item to the bucket for date, creating the bucket if needed."""
        self._days.setdefault(date, []).append(item)

    def add_extractions(self, extractions: Iterable[Extraction]) -> bool:
        added = False
        for date, item in extractions:
            self.add_item(date, item)
            added = True
        return added

    def remove_by_path(self, path: str) -> bool:
        """Remove every item of path, dropping buckets left empty.

        Scans all buckets, so the cost is O(total items) per call.

        Returns:
            True if anything was removed
        """
        changed = False
        for date in list(self._days):
            items = self._days[date]
            remaining = [item for item in items if item.path != path]
            if len(remaining) == len(items):
                continue
            changed = True
            if remaining:
                self._days[date] = remaining
            else:
                del self._days[date]
        return changed

    def upsert_document(
        self,
        document: Document,
        strategies: Sequence[ExtractionStrategy],
        skip_deferred: bool = False,
    ) -> bool:
        """Replace the items of one document with a fresh extraction.

        Only the given document is read; unrelated documents are never rescanned.

        Returns:
            True if the index changed
        """
        removed = self.remove_by_path(document.path)
        added = self.add_extractions(extract_document(document, strategies, skip_deferred))
        return removed or added

    def clear(self) -> None:
        self._days = {}

    def rebuild_all(
        self, documents: Iterable[Document], strategies: Sequence[ExtractionStrategy]
    ) -> "DateIndex":
        """Rebuild from scratch over all documents.

        The new buckets are assembled aside and swapped in at the end, so the
        index is never observed half built.
        """
        days: Dict[str, List[CalendarItem]] = {}
        count = 0
        for document in documents:
            for date, item in extract_document(document, strategies):
                days.setdefault(date, []).append(item)
            count += 1

        self._days = days
        logger.info(
            f"Indexed {count} documents: {self.total_items} items on {len(days)} days "
            f"from {len(strategies)} calendars"
        )
        return self
