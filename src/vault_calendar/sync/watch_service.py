"""Watch service turning file system changes into index events."""

import asyncio
import os
from datetime import datetime
from typing import Dict, List, Optional, Set, Tuple

from loguru import logger
from pydantic import BaseModel, Field
from rich.console import Console
from watchfiles import Change, awatch

from vault_calendar.config import ProjectConfig
from vault_calendar.file_utils import compute_checksum
from vault_calendar.services.exceptions import FileOperationError
from vault_calendar.sync.index_service import IndexService

console = Console()

MAX_RECENT_EVENTS = 100


class WatchEvent(BaseModel):
    timestamp: datetime
    path: str
    action: str  # created, modified, moved, deleted
    status: str  # success, error
    error: Optional[str] = None


class WatchServiceState(BaseModel):
    # Service status
    running: bool = False
    start_time: datetime = Field(default_factory=datetime.now)
    pid: int = Field(default_factory=os.getpid)

    # Stats
    error_count: int = 0
    last_error: Optional[datetime] = None
    last_scan: Optional[datetime] = None

    # Index counts
    indexed_days: int = 0
    indexed_items: int = 0

    # Recent activity
    recent_events: List[WatchEvent] = Field(default_factory=list)

    def add_event(
        self,
        path: str,
        action: str,
        status: str,
        error: Optional[str] = None,
    ) -> WatchEvent:
        event = WatchEvent(
            timestamp=datetime.now(),
            path=path,
            action=action,
            status=status,
            error=error,
        )
        self.recent_events.insert(0, event)
        self.recent_events = self.recent_events[:MAX_RECENT_EVENTS]
        return event

    def record_error(self, error: str):
        self.error_count += 1
        self.add_event(path="", action="sync", status="error", error=error)
        self.last_error = datetime.now()


class WatchService:
    def __init__(self, index_service: IndexService, config: ProjectConfig):
        self.index_service = index_service
        self.store = index_service.store
        self.config = config
        self.state = WatchServiceState()
        self.status_path = config.status_path
        self.status_path.parent.mkdir(parents=True, exist_ok=True)
        self._stop_event = asyncio.Event()

    async def run(self):
        """Watch the vault for changes and apply them to the index."""
        self.state.running = True
        self.state.start_time = datetime.now()
        self._stop_event.clear()
        await self.write_status()

        console.print("\n[cyan]Watching for changes...[/cyan]")
        try:
            async for changes in awatch(
                self.config.home,
                watch_filter=self.filter_changes,
                debounce=self.config.sync_delay,
                recursive=True,
                stop_event=self._stop_event,
            ):
                await self.handle_changes(changes)

        except Exception as e:
            self.state.record_error(str(e))
            await self.write_status()
            raise
        finally:
            self.state.running = False
            await self.write_status()

    def stop(self) -> None:
        self._stop_event.set()

    async def write_status(self):
        """Write current state to status file"""
        self.status_path.write_text(WatchServiceState.model_dump_json(self.state, indent=2))

    def filter_changes(self, change: Change, path: str) -> bool:
        """Filter to only watch tracked, non hidden notes"""
        try:
            return self.store.is_tracked(self.store.relative_path(path))
        except ValueError:
            return False

    async def detect_moves(self, added: Set[str], deleted: Set[str]) -> Dict[str, str]:
        """Pair deleted and added notes with the same content.

        Returns:
            Mapping of old path to new path
        """
        moves: Dict[str, str] = {}
        if not added or not deleted:
            return moves

        added_checksums: Dict[str, str] = {}
        for path in added:
            try:
                added_checksums[path] = await compute_checksum(await self.store.read_text(path))
            except FileOperationError:
                continue

        for old_path in sorted(deleted):
            old_checksum = self.store.checksums.get(old_path)
            if old_checksum is None:
                continue
            for new_path, checksum in sorted(added_checksums.items()):
                if checksum == old_checksum and new_path not in moves.values():
                    moves[old_path] = new_path
                    break
        return moves

    async def handle_changes(self, changes: Set[Tuple[Change, str]]):
        """Process a batch of file changes"""
        logger.debug(f"handling {len(changes)} changes in {self.config.home} ...")

        added: Set[str] = set()
        modified: Set[str] = set()
        deleted: Set[str] = set()
        for change, path in changes:
            relative = self.store.relative_path(path)
            if change == Change.added:
                added.add(relative)
            elif change == Change.modified:
                modified.add(relative)
            elif change == Change.deleted:
                deleted.add(relative)

        # an editor saving through a temporary file reports delete + add of the same path
        replaced = added & deleted
        modified |= replaced
        added -= replaced
        deleted -= replaced
        modified -= added | deleted

        try:
            moves = await self.detect_moves(added, deleted)
            for old_path, new_path in moves.items():
                await self.index_service.handle_renamed(old_path, new_path)
                self.report(f"{old_path} -> {new_path}", "moved", "blue")

            for path in sorted(deleted - set(moves)):
                await self.index_service.handle_deleted(path)
                self.report(path, "deleted", "red")

            for path in sorted(added - set(moves.values())):
                await self.index_service.handle_created(path)
                # metadata is resolved once the note has been read
                await self.index_service.handle_changed(path)
                self.report(path, "created", "green")

            for path in sorted(modified):
                await self.index_service.handle_changed(path)
                self.report(path, "modified", "yellow")

        except Exception as e:
            self.state.record_error(str(e))
            await self.write_status()
            raise

        index = self.index_service.index
        self.state.last_scan = datetime.now()
        self.state.indexed_days = len(index)
        self.state.indexed_items = index.total_items
        await self.write_status()

    def report(self, path: str, action: str, style: str) -> WatchEvent:
        event = self.state.add_event(path=path, action=action, status="success")
        console.print(
            f"{event.timestamp.isoformat(timespec='minutes')} {action.capitalize()}:\t"
            f" [{style}]{path}[/{style}]"
        )
        return event
