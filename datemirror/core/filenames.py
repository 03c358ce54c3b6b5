"""Finding and replacing dates inside filenames."""

from __future__ import annotations

from datetime import date

from .dates import compile_date_pattern, parse_date_strict


def extract_date_from_filename(filename: str, date_format: str) -> date | None:
    """Extract a date from a filename using the configured date format.

    Only the first substring that looks like a date is considered. It must
    then parse strictly as a real date.

    Args:
        filename: Basename without extension.
        date_format: Configured date format.

    Returns:
        Date object if a valid date is found, None otherwise.
    """
    match = compile_date_pattern(date_format).search(filename)
    if match is None:
        return None
    return parse_date_strict(match.group(0), date_format)


def replace_date_in_filename(filename: str, date_format: str, new_date: str) -> str:
    """Replace the first date in a filename with a new date string.

    Args:
        filename: Basename without extension.
        date_format: Configured date format.
        new_date: Already formatted date to put in place of the match.

    Returns:
        The new basename, or the original one if no date pattern is found.
    """
    return compile_date_pattern(date_format).sub(lambda _: new_date, filename, count=1)
