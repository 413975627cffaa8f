"""Schema models for calendars, settings and calendar items."""

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PositiveInt
from pydantic.alias_generators import to_camel

MAX_DISPLAY_LENGTH = 255
ELLIPSIS = "..."


def truncate_display(text: str) -> str:
    """Cut display text to MAX_DISPLAY_LENGTH characters, marking the cut with an ellipsis."""
    if len(text) > MAX_DISPLAY_LENGTH:
        return text[:MAX_DISPLAY_LENGTH] + ELLIPSIS
    return text


class CamelModel(BaseModel):
    """Base for models persisted with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )


class SourceType(str, Enum):
    """Where a calendar reads its dates from."""

    FILENAME = "filename"
    YAML = "yaml"
    INLINE = "inline"
    NOTE_HEADING = "note-heading"


class CalendarConfig(CamelModel):
    """A named, independently toggleable date extraction rule."""

    id: str
    name: str
    source_type: SourceType
    format: str
    enabled: bool = True
    color: Optional[str] = None

    # source type specific
    yaml_key: Optional[str] = None
    inline_pattern: Optional[str] = None
    inline_whitelist: Optional[str] = None
    note_path: Optional[str] = None

    # only used when previewing a pattern
    test_pattern: Optional[str] = None

    def whitelist(self) -> List[str]:
        """Paths the inline calendar is restricted to, empty when unrestricted."""
        if not self.inline_whitelist:
            return []
        return [p.strip() for p in self.inline_whitelist.split(",") if p.strip()]


# Fields whose change invalidates every item the calendar produced.
EXTRACTION_FIELDS = frozenset(
    {
        "source_type",
        "format",
        "enabled",
        "yaml_key",
        "inline_pattern",
        "inline_whitelist",
        "note_path",
    }
)


class CalendarType(str, Enum):
    ISO_8601 = "ISO 8601"
    US = "US"


class SortingOption(str, Enum):
    NAME = "name"
    NAME_REV = "name-rev"


class DisplaySettings(CamelModel):
    """Display preferences consumed by the presentation layer."""

    open_view_on_start: bool = True
    calendar_type: CalendarType = CalendarType.ISO_8601
    sorting_option: SortingOption = SortingOption.NAME
    show_week_numbers: bool = False


def default_calendars() -> List[CalendarConfig]:
    return [
        CalendarConfig(
            id="default",
            name="Default Calendar",
            source_type=SourceType.YAML,
            format="YYYY-MM-DD hh:mm:ss",
            yaml_key="created",
        ),
        CalendarConfig(
            id="inline-timestamp",
            name="Inline Timestamps",
            source_type=SourceType.INLINE,
            format="YYYYMMDDHHmm",
            inline_pattern=r"^-\s+(\d{12}):",
        ),
    ]


class PluginSettings(CamelModel):
    """The persisted configuration blob."""

    settings: DisplaySettings = Field(default_factory=DisplaySettings)
    calendars: List[CalendarConfig] = Field(default_factory=default_calendars)


class ItemModel(BaseModel):
    """Shared fields of every calendar item. Items are values and never mutated."""

    model_config = ConfigDict(frozen=True)

    display_name: str
    path: str
    calendar_id: Optional[str] = None


class NoteItem(ItemModel):
    """A whole note placed on a day."""

    type: Literal["note"] = "note"


class ReminderItem(ItemModel):
    """A task or periodic entry."""

    type: Literal["task", "periodic"]
    date: str


class InlineTimestampItem(ItemModel):
    """One dated line inside a note."""

    type: Literal["inline-timestamp"] = "inline-timestamp"
    line_number: PositiveInt


class NoteHeadingItem(ItemModel):
    """One line listed under a dated heading."""

    type: Literal["note-heading"] = "note-heading"
    line_number: PositiveInt


CalendarItem = Annotated[
    Union[NoteItem, ReminderItem, InlineTimestampItem, NoteHeadingItem],
    Field(discriminator="type"),
]
