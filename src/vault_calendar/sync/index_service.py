"""Service keeping the date index in step with the vault and the calendars."""

import asyncio
from typing import Any, Callable, List, Optional

from loguru import logger

from vault_calendar.index import DateIndex
from vault_calendar.models import EXTRACTION_FIELDS, CalendarConfig, SourceType
from vault_calendar.registry import CalendarRegistry
from vault_calendar.services.document_store import DocumentStore
from vault_calendar.services.exceptions import FileOperationError

Listener = Callable[[], Any]


class IndexService:
    """Reacts to note lifecycle events and calendar changes.

    Each event recomputes only the affected note against every enabled
    calendar. Calendar changes that invalidate extraction trigger a full
    rebuild. Events are handled one at a time, and every event that changed
    the index ends with a single notification to subscribers.

    A note is read before any of its items are removed, so a failed read
    leaves its last known items in place.
    """

    def __init__(
        self,
        store: DocumentStore,
        registry: CalendarRegistry,
        index: Optional[DateIndex] = None,
    ):
        self.store = store
        self.registry = registry
        self.index = index if index is not None else DateIndex()
        self.loaded = False
        self.running = False
        self._listeners: List[Listener] = []
        self._lock = asyncio.Lock()
        self._rebuild_requests = 0

    async def start(self) -> DateIndex:
        """Scan the vault and build the index. Starting a running service does nothing."""
        if self.running:
            return self.index
        self.running = True
        await self.handle_initial_load()
        return self.index

    async def stop(self) -> None:
        self.running = False
        self._listeners.clear()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener after every change of the index. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self) -> None:
        """Tell subscribers the index changed. Listener failures are logged, never raised."""
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                logger.exception(f"Index listener {listener!r} failed: {e}")

    async def handle_initial_load(self) -> bool:
        """Build the index over the whole vault, once."""
        if self.loaded:
            return False
        await self.rebuild()
        self.loaded = True
        return True

    async def rebuild(self) -> bool:
        """Rebuild the index from every note and the enabled calendars.

        Rebuilds never overlap. A rebuild still waiting while a newer one is
        requested is skipped; the newest request wins.
        """
        self._rebuild_requests += 1
        request = self._rebuild_requests
        async with self._lock:
            if request != self._rebuild_requests:
                logger.debug("Skipping rebuild superseded by a newer request")
                return False
            documents = await self.store.list_documents()
            self.index.rebuild_all(documents, self.registry.enabled_strategies())
        self.notify()
        return True

    async def handle_changed(self, path: str) -> bool:
        """A note's content or metadata changed.

        Until the vault's metadata is resolved, front matter calendars are left
        to the initial rebuild.
        """
        if not self.store.is_tracked(path):
            return False
        logger.debug(f"Changed: {path}")
        async with self._lock:
            try:
                document = await self.store.get_document(path)
            except FileOperationError:
                logger.warning(f"Keeping previous calendar items for unreadable note {path}")
                return False
            if document is None:
                changed = self.index.remove_by_path(path)
            else:
                changed = self.index.upsert_document(
                    document,
                    self.registry.enabled_strategies(),
                    skip_deferred=not self.store.metadata_cache.resolved,
                )
        if changed:
            self.notify()
        return changed

    async def handle_created(self, path: str) -> bool:
        """A note was created.

        Front matter calendars are skipped: their items arrive with the changed
        event that follows once metadata is resolved.
        """
        if not self.store.is_tracked(path):
            return False
        logger.debug(f"Created: {path}")
        async with self._lock:
            try:
                document = await self.store.get_document(path)
            except FileOperationError:
                return False
            if document is None:
                changed = self.index.remove_by_path(path)
            else:
                changed = self.index.upsert_document(
                    document, self.registry.enabled_strategies(), skip_deferred=True
                )
        if changed:
            self.notify()
        return changed

    async def handle_renamed(self, old_path: str, new_path: str) -> bool:
        """A note moved. Every calendar is re-run because whitelists and note paths match on path."""
        logger.debug(f"Renamed: {old_path} -> {new_path}")
        async with self._lock:
            self.store.move(old_path, new_path)
            document = None
            if self.store.is_tracked(new_path):
                try:
                    document = await self.store.get_document(new_path)
                except FileOperationError:
                    logger.warning(f"Could not read renamed note {new_path}")

            changed = self.index.remove_by_path(old_path)
            if document is not None:
                changed = (
                    self.index.upsert_document(document, self.registry.enabled_strategies())
                    or changed
                )
        if changed:
            self.notify()
        return changed

    async def handle_deleted(self, path: str) -> bool:
        logger.debug(f"Deleted: {path}")
        async with self._lock:
            self.store.forget(path)
            changed = self.index.remove_by_path(path)
        if changed:
            self.notify()
        return changed

    # calendar changes

    async def add_calendar(
        self, name: str, source_type: SourceType, format: str, **fields: Any
    ) -> CalendarConfig:
        calendar = self.registry.add(name=name, source_type=source_type, format=format, **fields)
        if calendar.enabled:
            await self.rebuild()
        return calendar

    async def update_calendar(self, calendar_id: str, **changes: Any) -> bool:
        """Edit a calendar; rebuilds only when extraction is affected.

        Returns:
            True if the index was rebuilt
        """
        changed = self.registry.update(calendar_id, **changes)
        if changed & EXTRACTION_FIELDS:
            return await self.rebuild()
        if changed:
            self.notify()
        return False

    async def set_calendar_enabled(self, calendar_id: str, enabled: bool) -> bool:
        if self.registry.set_enabled(calendar_id, enabled):
            return await self.rebuild()
        return False

    async def remove_calendar(self, calendar_id: str) -> CalendarConfig:
        calendar = self.registry.remove(calendar_id)
        await self.rebuild()
        return calendar
