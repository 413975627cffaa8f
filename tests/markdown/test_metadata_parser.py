"""Tests for front matter and heading parsing."""

from textwrap import dedent

from vault_calendar.markdown import Heading, parse_headings, parse_metadata, split_lines
from vault_calendar.markdown.metadata_parser import split_frontmatter_block


def test_frontmatter_and_headings():
    """Heading lines count from the top of the file, front matter included."""
    text = dedent("""
        ---
        title: Trip
        due: 2024-03-05
        ---
        # Plan

        Pack bags
        ## Day one
        """).lstrip("\n")

    metadata = parse_metadata(text)

    assert metadata.frontmatter["title"] == "Trip"
    assert str(metadata.frontmatter["due"]) == "2024-03-05"
    assert metadata.headings == (
        Heading(text="Plan", line_start=4, line_end=4, level=1),
        Heading(text="Day one", line_start=7, line_end=7, level=2),
    )


def test_no_frontmatter():
    metadata = parse_metadata("# Title\n\nbody\n")
    assert metadata.frontmatter is None
    assert [h.text for h in metadata.headings] == ["Title"]


def test_malformed_yaml_is_treated_as_missing():
    text = "---\ndue: [unclosed\n---\n# Heading\n"
    metadata = parse_metadata(text, path="broken.md")
    assert metadata.frontmatter is None
    assert [h.text for h in metadata.headings] == ["Heading"]


def test_unterminated_block_is_not_frontmatter():
    assert split_frontmatter_block(["---", "title: x"]) == 0
    assert split_frontmatter_block(["---", "title: x", "---", "body"]) == 3
    assert split_frontmatter_block(["body"]) == 0


def test_setext_heading_spans_two_lines():
    headings = parse_headings(["2024-03-05", "==========", "", "entry"])
    assert headings == (Heading(text="2024-03-05", line_start=0, line_end=1, level=1),)


def test_headings_inside_code_blocks_are_ignored():
    lines = ["# Real", "```", "# not a heading", "```"]
    assert [h.text for h in parse_headings(lines)] == ["Real"]


def test_frontmatter_dates_stay_as_written():
    text = "---\ndue: 2024-03-05\ncreated: 2024-03-05T10:00:00\nupdated: 2024-03-05 10:00:00\n---\n"
    metadata = parse_metadata(text)
    assert metadata.frontmatter == {
        "due": "2024-03-05",
        "created": "2024-03-05T10:00:00",
        "updated": "2024-03-05 10:00:00",
    }


def test_split_lines_only_breaks_on_newlines():
    assert split_lines("a\x0cb\nc\r\nd e\x1cf\n") == ["a\x0cb", "c", "d e\x1cf"]
    assert split_lines("a\n\nb") == ["a", "", "b"]
    assert split_lines("") == []


def test_heading_lines_after_lone_carriage_return():
    metadata = parse_metadata("intro\rstill intro\n# 2024-03-05\nentry\n")
    assert metadata.headings == (Heading(text="2024-03-05", line_start=1, line_end=1, level=1),)
