"""Parser for note metadata: front matter and headings.

Front matter is read with python-frontmatter, headings with markdown-it so that
line spans match what an editor shows (ATX and setext headings, none inside
code blocks).
"""

from typing import Any, List, Optional, Tuple

import frontmatter
import yaml
from frontmatter.default_handlers import YAMLHandler
from loguru import logger
from markdown_it import MarkdownIt

from vault_calendar.markdown.schemas import Heading, NoteMetadata

FRONTMATTER_DELIMITER = "---"

md = MarkdownIt("commonmark")


class StringTimestampLoader(yaml.SafeLoader):
    """SafeLoader that leaves dates and timestamps as the text they were written as."""


StringTimestampLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:timestamp"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class FrontmatterHandler(YAMLHandler):
    def load(self, fm: str, **kwargs: Any) -> Any:
        return yaml.load(fm, Loader=StringTimestampLoader)


def split_lines(text: str) -> List[str]:
    """Split text into lines on newlines only, dropping a trailing carriage return."""
    lines = [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def split_frontmatter_block(lines: List[str]) -> int:
    """Return the number of lines taken by a leading front matter block (0 if none)."""
    if not lines or lines[0].strip() != FRONTMATTER_DELIMITER:
        return 0
    for index in range(1, len(lines)):
        if lines[index].strip() == FRONTMATTER_DELIMITER:
            return index + 1
    return 0


def parse_headings(lines: List[str], offset: int = 0) -> Tuple[Heading, ...]:
    """Find headings in lines; line numbers are shifted by offset."""
    headings = []
    # markdown-it treats a lone carriage return as a line break
    tokens = md.parse("\n".join(line.replace("\r", " ") for line in lines))
    for index, token in enumerate(tokens):
        if token.type != "heading_open" or token.map is None:
            continue
        inline = tokens[index + 1]
        start, end = token.map
        headings.append(
            Heading(
                text=inline.content.strip(),
                line_start=start + offset,
                line_end=end - 1 + offset,
                level=int(token.tag[1:]),
            )
        )
    return tuple(headings)


def parse_metadata(text: str, path: Optional[str] = None) -> NoteMetadata:
    """Parse note text into NoteMetadata.

    Malformed YAML is logged and the note is treated as having no front matter.
    """
    lines = split_lines(text)
    block_length = split_frontmatter_block(lines)

    metadata = None
    if block_length:
        try:
            metadata = frontmatter.loads(text, handler=FrontmatterHandler()).metadata
        except yaml.YAMLError as e:
            logger.warning(f"Failed to parse YAML frontmatter in {path or '<text>'}: {e}")
            metadata = None

    return NoteMetadata(
        frontmatter=metadata,
        headings=parse_headings(lines[block_length:], offset=block_length),
    )
