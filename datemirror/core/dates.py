"""Date format tokens, pattern compilation, parsing and formatting for datemirror."""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date, datetime
from functools import lru_cache

# Longest first so "YYYY" is never consumed as two "YY" tokens
_TOKENS = ("YYYY", "YY", "MM", "M", "DD", "D")

_TOKEN_PATTERNS = {
    "YYYY": r"\d{4}",  # 4-digit year
    "YY": r"\d{2}",  # 2-digit year
    "MM": r"\d{2}",  # 2-digit month
    "M": r"\d{1,2}",  # 1-2 digit month
    "DD": r"\d{2}",  # 2-digit day
    "D": r"\d{1,2}",  # 1-2 digit day
}

_TOKEN_FIELDS = {
    "YYYY": "year",
    "YY": "year",
    "MM": "month",
    "M": "month",
    "DD": "day",
    "D": "day",
}

# Two-digit years above this belong to the 1900s
_TWO_DIGIT_YEAR_PIVOT = 68

_DIGITS_ONLY = re.compile(r"[0-9]+")
_NEVER_MATCHES = re.compile(r"(?!)")


def tokenize_format(date_format: str) -> list[tuple[bool, str]]:
    """Split a date format into tokens and literal runs.

    Args:
        date_format: Format string such as "YYYY-MM-DD".

    Returns:
        List of (is_token, text) pairs in order of appearance.
    """
    parts: list[tuple[bool, str]] = []
    literal = ""
    i = 0
    while i < len(date_format):
        for token in _TOKENS:
            if date_format.startswith(token, i):
                if literal:
                    parts.append((False, literal))
                    literal = ""
                parts.append((True, token))
                i += len(token)
                break
        else:
            literal += date_format[i]
            i += 1
    if literal:
        parts.append((False, literal))
    return parts


@lru_cache(maxsize=64)
def compile_date_pattern(date_format: str) -> re.Pattern[str]:
    """Convert a date format string to an unanchored regex pattern.

    Literal characters are escaped, tokens become digit matchers. Any
    format compiles; one without a date token never matches.

    Args:
        date_format: Format string such as "YYYY-MM-DD".

    Returns:
        Compiled pattern that finds dates in that format anywhere in a string.
    """
    parts = tokenize_format(date_format)
    if not any(is_token for is_token, _ in parts):
        return _NEVER_MATCHES
    pattern = "".join(
        _TOKEN_PATTERNS[text] if is_token else re.escape(text)
        for is_token, text in parts
    )
    return re.compile(pattern, re.ASCII)


@lru_cache(maxsize=64)
def _strict_pattern(date_format: str) -> tuple[re.Pattern[str], tuple[str, ...]]:
    """Build a fully-anchored pattern with one capture group per token."""
    pieces = []
    tokens = []
    for is_token, text in tokenize_format(date_format):
        if is_token:
            pieces.append(f"({_TOKEN_PATTERNS[text]})")
            tokens.append(text)
        else:
            pieces.append(re.escape(text))
    return re.compile("".join(pieces), re.ASCII), tuple(tokens)


def _expand_two_digit_year(value: int) -> int:
    return value + (1900 if value > _TWO_DIGIT_YEAR_PIVOT else 2000)


def parse_date_strict(text: str, date_format: str) -> date | None:
    """Parse text that must conform exactly to the date format.

    Fields missing from the format default to the current year, January and
    the first day of the month. A format without any date token never
    parses.

    Args:
        text: Candidate date string.
        date_format: Format string the text must follow.

    Returns:
        Date object, or None if the text does not match or is not a real date.
    """
    pattern, tokens = _strict_pattern(date_format)
    if not tokens:
        return None
    match = pattern.fullmatch(text)
    if match is None:
        return None

    fields: dict[str, int] = {}
    for token, raw in zip(tokens, match.groups()):
        value = int(raw)
        if token == "YY":
            value = _expand_two_digit_year(value)
        field = _TOKEN_FIELDS[token]
        # A field repeated in the format must agree with itself
        if fields.setdefault(field, value) != value:
            return None

    try:
        return date(
            fields.get("year", date.today().year),
            fields.get("month", 1),
            fields.get("day", 1),
        )
    except ValueError:
        return None


def format_date(value: date, date_format: str) -> str:
    """Render a date using the date format tokens.

    Args:
        value: Date to render.
        date_format: Format string such as "YYYY-MM-DD".

    Returns:
        Rendered string with literals preserved.
    """
    rendered = {
        "YYYY": f"{value.year:04d}",
        "YY": f"{value.year % 100:02d}",
        "MM": f"{value.month:02d}",
        "M": str(value.month),
        "DD": f"{value.day:02d}",
        "D": str(value.day),
    }
    return "".join(
        rendered[text] if is_token else text
        for is_token, text in tokenize_format(date_format)
    )


def format_frontmatter_date(value: date, date_format: str) -> str | int:
    """Output the date in the configured format for storage in frontmatter.

    If the rendered date is made of digits only it is returned as an integer,
    otherwise as a string. Leading zeros are lost in the integer case.

    Args:
        value: Date to render.
        date_format: Format string such as "YYYYMMDD".

    Returns:
        Integer for all-digit renders, string otherwise.
    """
    output = format_date(value, date_format)
    if _DIGITS_ONLY.fullmatch(output):
        return int(output)
    return output


def parse_date_value(
    value: object,
    date_format: str,
    fallback_formats: Iterable[str] = (),
) -> date | None:
    """Parse a frontmatter value of any supported type into a date.

    Strings are tried against the configured format, then ISO 8601, then
    each of the fallback strptime formats. Integers are read as the digits of
    the configured format, which is how all-digit dates are stored.

    Args:
        value: Raw frontmatter value.
        date_format: Configured date format.
        fallback_formats: Extra strptime formats for strings.

    Returns:
        Date object or None if the value cannot be read as a date.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, int):
        return parse_date_strict(str(value), date_format)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    parsed = parse_date_strict(text, date_format)
    if parsed is not None:
        return parsed

    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass

    for fmt in fallback_formats:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    return None


def values_match(stored: object, new_value: str | int, date_format: str) -> bool:
    """Check whether a stored frontmatter value already holds the new value.

    YAML turns unquoted ISO dates into date objects; those count as equal when
    they render to the same frontmatter value.
    """
    if isinstance(stored, bool):
        return False
    if stored == new_value:
        return True
    if isinstance(stored, datetime):
        stored = stored.date()
    if isinstance(stored, date):
        return format_frontmatter_date(stored, date_format) == new_value
    return False
