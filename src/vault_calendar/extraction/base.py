"""Base class for extraction strategies."""

from abc import ABC, abstractmethod
from typing import ClassVar, Dict, List, Optional, Tuple, Type

from loguru import logger

from vault_calendar.dates import DateFormat, compile_format, to_iso
from vault_calendar.markdown import Document
from vault_calendar.models import CalendarConfig, CalendarItem, SourceType
from vault_calendar.services.exceptions import ConfigurationError

# (ISO date, item)
Extraction = Tuple[str, CalendarItem]


class ExtractionStrategy(ABC):
    """Maps a document to the dated items one calendar finds in it.

    A strategy is resolved once per calendar configuration: patterns and formats
    are compiled in the constructor, which raises ConfigurationError when the
    calendar cannot be used.
    """

    source_type: ClassVar[SourceType]

    # Front matter may not be parsed yet when a document is created.
    deferred_on_create: ClassVar[bool] = False

    def __init__(self, calendar: CalendarConfig):
        self.calendar = calendar
        try:
            self.date_format: Optional[DateFormat] = compile_format(calendar.format)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

    @property
    def calendar_id(self) -> str:
        return self.calendar.id

    def parse_date(self, value: str) -> Optional[str]:
        """ISO date for value, None when it does not match the calendar's format."""
        if self.date_format is None:
            return None
        day = self.date_format.parse(value)
        return to_iso(day) if day else None

    def run(self, document: Document) -> List[Extraction]:
        """Extract from document, converting any failure into no results."""
        try:
            return self.extract(document)
        except Exception as e:
            logger.error(f"Calendar {self.calendar_id} failed on {document.path}: {e}")
            return []

    @abstractmethod
    def extract(self, document: Document) -> List[Extraction]:
        """Dated items for document."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(calendar_id={self.calendar_id!r})"


class InvalidCalendarStrategy(ExtractionStrategy):
    """Stands in for a calendar whose configuration is invalid; finds nothing."""

    def __init__(self, calendar: CalendarConfig, error: str):
        self.calendar = calendar
        self.date_format = None
        self.error = error

    def extract(self, document: Document) -> List[Extraction]:
        return []


STRATEGIES: Dict[SourceType, Type[ExtractionStrategy]] = {}


def register(source_type: SourceType):
    """Class decorator registering a strategy for a source type."""

    def decorator(cls: Type[ExtractionStrategy]) -> Type[ExtractionStrategy]:
        cls.source_type = source_type
        STRATEGIES[source_type] = cls
        return cls

    return decorator


def resolve_strategy(calendar: CalendarConfig) -> ExtractionStrategy:
    """Resolve the strategy for a calendar.

    An invalid configuration is reported here, once, and yields a strategy that
    finds nothing for every document.
    """
    try:
        strategy_class = STRATEGIES[calendar.source_type]
        return strategy_class(calendar)
    except (ConfigurationError, KeyError) as e:
        logger.error(f"Calendar {calendar.id} ({calendar.name}) is misconfigured: {e}")
        return InvalidCalendarStrategy(calendar, str(e))
