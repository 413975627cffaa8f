from .index_service import IndexService
from .watch_service import WatchService

__all__ = ["IndexService", "WatchService"]
