"""Date format patterns in the moment/dayjs token style.

A format such as ``YYYY-MM-DD hh:mm:ss`` is matched against the start of a
value. Text after the last token is ignored, so ``2024-03-05 notes`` parses
against ``YYYY-MM-DD``. Literal characters between tokens must match exactly
and ``[...]`` escapes literal text. Only ASCII digits count as digits.

The matched tokens are handed to dateparser as a strftime format, which
decides whether they name a real day.
"""

import re
from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from typing import Optional, Tuple

from dateparser.date import DateDataParser

TOKEN_RE = re.compile(
    r"\[([^\]]*)\]|YYYY|YY|MMMM|MMM|MM|M|Do|DD|D|dddd|ddd|HH|H|hh|h|mm|m|SSS|SS|S|ss|s|ZZ|Z|A|a|X|x"
)

TIMESTAMP = "timestamp"

# token -> (pattern, strftime directive); tokens without a directive are matched and ignored
TOKENS = {
    "YYYY": (r"\d{4}", "%Y"),
    "YY": (r"\d{2}", "%y"),
    "MMMM": (r"[a-z]+", "%B"),
    "MMM": (r"[a-z]{3}", "%b"),
    "MM": (r"\d{2}", "%m"),
    "M": (r"\d{1,2}", "%m"),
    "Do": (r"\d{1,2}", "%d"),
    "DD": (r"\d{2}", "%d"),
    "D": (r"\d{1,2}", "%d"),
    "dddd": (r"[a-z]+", None),
    "ddd": (r"[a-z]+", None),
    "HH": (r"\d{1,2}", "%H"),
    "H": (r"\d{1,2}", "%H"),
    "hh": (r"\d{1,2}", "%I"),
    "h": (r"\d{1,2}", "%I"),
    "mm": (r"\d{1,2}", "%M"),
    "m": (r"\d{1,2}", "%M"),
    "ss": (r"\d{1,2}", "%S"),
    "s": (r"\d{1,2}", "%S"),
    "SSS": (r"\d{3}", None),
    "SS": (r"\d{2}", None),
    "S": (r"\d", None),
    "ZZ": (r"[+-]\d\d:?(?:\d\d)?|Z", None),
    "Z": (r"[+-]\d\d:?(?:\d\d)?|Z", None),
    "A": (r"am|pm", "%p"),
    "a": (r"am|pm", "%p"),
    "X": (r"\d{10}", TIMESTAMP),
    "x": (r"\d{13}", TIMESTAMP),
}

# Missing parts default to the first of the month, January and the current year.
format_parser = DateDataParser(
    languages=["en"],
    settings={
        "PARSERS": ["custom-formats"],
        "PREFER_DAY_OF_MONTH": "first",
        "PREFER_MONTH_OF_YEAR": "first",
    },
)
timestamp_parser = DateDataParser(languages=["en"], settings={"PARSERS": ["timestamp"]})


@dataclass(frozen=True)
class DateFormat:
    """A compiled date format."""

    pattern: str
    regex: re.Pattern
    directives: Tuple[str, ...]

    @property
    def strftime(self) -> str:
        return " ".join(self.directives)

    def parse(self, value: str) -> Optional[date]:
        """Parse the start of value into a calendar day, None when it does not fit."""
        match = self.regex.match(value.strip())
        if not match:
            return None

        if TIMESTAMP in self.directives:
            data = timestamp_parser.get_date_data(match.group(self.directives.index(TIMESTAMP) + 1))
        else:
            data = format_parser.get_date_data(" ".join(match.groups()), [self.strftime])
        return data.date_obj.date() if data.date_obj else None


@lru_cache(maxsize=256)
def compile_format(pattern: str) -> DateFormat:
    """Compile a token format into a DateFormat.

    Raises:
        ValueError: if the pattern contains no date tokens
    """
    tokens = [m.group(0) for m in TOKEN_RE.finditer(pattern) if m.group(1) is None]
    # hh without a meridiem reads as a 24 hour clock
    twelve_hour = "A" in tokens or "a" in tokens

    regex_parts = []
    directives = []
    position = 0
    for match in TOKEN_RE.finditer(pattern):
        regex_parts.append(re.escape(pattern[position : match.start()]))
        position = match.end()
        if match.group(1) is not None:
            regex_parts.append(re.escape(match.group(1)))
            continue

        token = match.group(0)
        token_regex, directive = TOKENS[token]
        if directive is None:
            regex_parts.append(f"(?:{token_regex})")
            continue
        if directive == "%I" and not twelve_hour:
            directive = "%H"
        regex_parts.append(f"({token_regex})")
        if token == "Do":
            regex_parts.append("(?:st|nd|rd|th)")
        directives.append(directive)
    regex_parts.append(re.escape(pattern[position:]))

    if not directives:
        raise ValueError(f"Date format has no date tokens: {pattern!r}")

    return DateFormat(
        pattern=pattern,
        regex=re.compile("".join(regex_parts), re.IGNORECASE | re.ASCII),
        directives=tuple(directives),
    )


def parse_date(value: str, pattern: str) -> Optional[date]:
    """Parse value against a token format. Never raises."""
    try:
        date_format = compile_format(pattern)
    except ValueError:
        return None
    return date_format.parse(value)


def to_iso(day: date) -> str:
    return day.isoformat()
