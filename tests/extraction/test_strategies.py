"""Tests for the extraction strategies."""

import pytest

from vault_calendar.extraction import (
    FilenameStrategy,
    FrontmatterStrategy,
    InlineStrategy,
    InvalidCalendarStrategy,
    NoteHeadingStrategy,
    preview_pattern,
    resolve_strategy,
)
from vault_calendar.markdown import Document, parse_metadata, split_lines
from vault_calendar.models import (
    CalendarConfig,
    InlineTimestampItem,
    NoteHeadingItem,
    NoteItem,
    SourceType,
)
from vault_calendar.services.exceptions import ConfigurationError


def make_document(path: str, text: str) -> Document:
    return Document(path=path, lines=tuple(split_lines(text)), metadata=parse_metadata(text))


def test_filename(filename_calendar):
    strategy = resolve_strategy(filename_calendar)
    assert isinstance(strategy, FilenameStrategy)

    document = make_document("journal/2024-03-05.md", "# Tuesday\n")
    assert strategy.run(document) == [
        ("2024-03-05", NoteItem(display_name="2024-03-05", path="journal/2024-03-05.md", calendar_id="daily"))
    ]
    assert strategy.run(make_document("ideas.md", "")) == []


def test_frontmatter(yaml_calendar):
    strategy = resolve_strategy(yaml_calendar)
    assert isinstance(strategy, FrontmatterStrategy)
    assert strategy.deferred_on_create

    document = make_document("notes/trip.md", "---\ndue: 2024-03-05\n---\nbody\n")
    assert strategy.run(document) == [
        ("2024-03-05", NoteItem(display_name="trip", path="notes/trip.md", calendar_id="due"))
    ]


def test_frontmatter_missing_or_unparsable(yaml_calendar):
    strategy = resolve_strategy(yaml_calendar)
    assert strategy.run(make_document("a.md", "no front matter\n")) == []
    assert strategy.run(make_document("b.md", "---\ntitle: x\n---\n")) == []
    assert strategy.run(make_document("c.md", "---\ndue: someday\n---\n")) == []
    # no metadata resolved yet
    assert strategy.run(Document(path="d.md", lines=("---", "due: 2024-03-05", "---"))) == []


def test_frontmatter_datetime_values():
    """YAML timestamps are matched through their string form."""
    calendar = CalendarConfig(
        id="created",
        name="Created",
        source_type=SourceType.YAML,
        format="YYYY-MM-DD hh:mm:ss",
        yaml_key="created",
    )
    document = make_document("x.md", "---\ncreated: 2024-03-05 14:30:00\n---\n")
    [(date, item)] = resolve_strategy(calendar).run(document)
    assert date == "2024-03-05"
    assert item.display_name == "x"


def test_frontmatter_iso_timestamp_keeps_its_t_separator():
    calendar = CalendarConfig(
        id="created",
        name="Created",
        source_type=SourceType.YAML,
        format="YYYY-MM-DDTHH:mm:ss",
        yaml_key="created",
    )
    document = make_document("x.md", "---\ncreated: 2024-03-05T10:00:00\n---\n")
    assert document.frontmatter["created"] == "2024-03-05T10:00:00"
    [(date, _)] = resolve_strategy(calendar).run(document)
    assert date == "2024-03-05"


def test_inline_scenario(inline_calendar):
    """Only lines whose capture parses produce items, numbered from 1."""
    strategy = resolve_strategy(inline_calendar)
    assert isinstance(strategy, InlineStrategy)

    text = "# Log\n- 202403051430: standup\n- 202413011200: bad month\nplain line\n"
    assert strategy.run(make_document("log.md", text)) == [
        (
            "2024-03-05",
            InlineTimestampItem(
                display_name="- 202403051430: standup",
                path="log.md",
                line_number=2,
                calendar_id="inline",
            ),
        )
    ]


def test_inline_display_is_truncated(inline_calendar):
    line = "- 202403051430: " + "x" * 300
    [(_, item)] = resolve_strategy(inline_calendar).run(make_document("long.md", line))
    assert len(item.display_name) == 258
    assert item.display_name.endswith("...")
    assert item.display_name == line[:255] + "..."


def test_inline_whitelist(inline_calendar):
    inline_calendar.inline_whitelist = " work/log.md , other.md"
    strategy = resolve_strategy(inline_calendar)
    text = "- 202403051430: standup\n"

    assert strategy.run(make_document("work/log.md", text))
    assert strategy.run(make_document("home/log.md", text)) == []


def test_inline_line_numbers_only_count_newlines(inline_calendar):
    """Form feeds and other separators inside a line do not start a new line."""
    text = "intro \x0c page\n- 202403051200: meeting\r\nend \u2028 of note\n- 202403061200: review\n"
    result = resolve_strategy(inline_calendar).run(make_document("log.md", text))
    assert [(date, item.line_number) for date, item in result] == [
        ("2024-03-05", 2),
        ("2024-03-06", 4),
    ]
    assert result[0][1].display_name == "- 202403051200: meeting"


def test_inline_empty_capture_is_skipped():
    calendar = CalendarConfig(
        id="optional",
        name="Optional",
        source_type=SourceType.INLINE,
        format="YYYY-MM-DD",
        inline_pattern=r"^due:\s*(\S*)",
    )
    strategy = resolve_strategy(calendar)
    assert strategy.run(make_document("a.md", "due:\ndue: 2024-03-05\n")) == [
        (
            "2024-03-05",
            InlineTimestampItem(
                display_name="due: 2024-03-05", path="a.md", line_number=2, calendar_id="optional"
            ),
        )
    ]


def test_note_heading_scenario(heading_calendar):
    """Lines under a dated heading belong to that date until the next heading."""
    strategy = resolve_strategy(heading_calendar)
    assert isinstance(strategy, NoteHeadingStrategy)

    text = "# 2024-03-05\nWrote tests\n\nShipped\n# Ideas\nnot dated\n# 2024-03-06\nRested\n"
    result = strategy.run(make_document("log.md", text))

    assert result == [
        ("2024-03-05", NoteHeadingItem(display_name="Wrote tests", path="log.md", line_number=2, calendar_id="log")),
        ("2024-03-05", NoteHeadingItem(display_name="Shipped", path="log.md", line_number=4, calendar_id="log")),
        ("2024-03-06", NoteHeadingItem(display_name="Rested", path="log.md", line_number=8, calendar_id="log")),
    ]


def test_note_heading_only_reads_its_note(heading_calendar):
    strategy = resolve_strategy(heading_calendar)
    assert strategy.run(make_document("other.md", "# 2024-03-05\nentry\n")) == []


def test_note_heading_duplicate_dates_share_a_date(heading_calendar):
    text = "# 2024-03-05\nmorning\n# 2024-03-05\nevening\n"
    result = resolve_strategy(heading_calendar).run(make_document("log.md", text))
    assert [(date, item.display_name) for date, item in result] == [
        ("2024-03-05", "morning"),
        ("2024-03-05", "evening"),
    ]


def test_note_heading_trailing_section(heading_calendar):
    text = "intro\n## 2024-03-05\n  indented entry  \n\n"
    [(date, item)] = resolve_strategy(heading_calendar).run(make_document("log.md", text))
    assert date == "2024-03-05"
    assert item.display_name == "indented entry"
    assert item.line_number == 3


def test_note_heading_display_is_truncated(heading_calendar):
    entry = "y" * 300
    [(_, item)] = resolve_strategy(heading_calendar).run(
        make_document("log.md", f"# 2024-03-05\n{entry}\n")
    )
    assert len(item.display_name) == 258
    assert item.display_name == entry[:255] + "..."


def test_note_heading_line_numbers_include_frontmatter(heading_calendar):
    """Front matter lines count toward line numbers and never become items."""
    text = "---\ntitle: Log\n---\n# 2024-03-05\nentry\n\n## 2024-03-06\nlater\n"
    result = resolve_strategy(heading_calendar).run(make_document("log.md", text))
    assert [(date, item.display_name, item.line_number) for date, item in result] == [
        ("2024-03-05", "entry", 5),
        ("2024-03-06", "later", 8),
    ]


@pytest.mark.parametrize(
    "fields",
    [
        {"source_type": SourceType.INLINE, "inline_pattern": None},
        {"source_type": SourceType.INLINE, "inline_pattern": "("},
        {"source_type": SourceType.INLINE, "inline_pattern": r"\d{12}"},
        {"source_type": SourceType.YAML, "yaml_key": None},
        {"source_type": SourceType.NOTE_HEADING, "note_path": None},
        {"source_type": SourceType.FILENAME, "format": "[no tokens]"},
    ],
)
def test_invalid_configuration_finds_nothing(fields):
    """A misconfigured calendar is resolved once and never raises while extracting."""
    values = {"id": "bad", "name": "Bad", "format": "YYYY-MM-DD", **fields}
    strategy = resolve_strategy(CalendarConfig(**values))

    assert isinstance(strategy, InvalidCalendarStrategy)
    assert strategy.error
    assert strategy.run(make_document("2024-03-05.md", "- 202403051430: x\n")) == []


def test_strategy_failure_is_contained(filename_calendar, monkeypatch):
    strategy = resolve_strategy(filename_calendar)

    def explode(document):
        raise RuntimeError("boom")

    monkeypatch.setattr(strategy, "extract", explode)
    assert strategy.run(make_document("2024-03-05.md", "")) == []


def test_preview_pattern(inline_calendar):
    sample = "- 202403051430: good\nnothing\n- 202499991200: bad\n"
    matches = preview_pattern(inline_calendar, sample)

    assert [(m.line_number, m.date) for m in matches] == [(1, "2024-03-05"), (3, None)]
    assert matches[0].line == "- 202403051430: good"


def test_preview_pattern_rejects_invalid_pattern(inline_calendar):
    inline_calendar.inline_pattern = "no group"
    with pytest.raises(ConfigurationError):
        preview_pattern(inline_calendar, "anything")
