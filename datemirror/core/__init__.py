"""Core date and frontmatter functions for datemirror.

This module contains the date format engine (pattern compilation, strict and
permissive parsing, formatting), filename date replacement and frontmatter
handling.
"""

from .dates import (
    compile_date_pattern,
    format_date,
    format_frontmatter_date,
    parse_date_strict,
    parse_date_value,
    tokenize_format,
    values_match,
)
from .filenames import extract_date_from_filename, replace_date_in_filename
from .frontmatter import (
    process_frontmatter,
    read_frontmatter,
    render_frontmatter,
    split_frontmatter,
)

__all__ = [
    "tokenize_format",
    "compile_date_pattern",
    "parse_date_strict",
    "parse_date_value",
    "format_date",
    "format_frontmatter_date",
    "values_match",
    "extract_date_from_filename",
    "replace_date_in_filename",
    "split_frontmatter",
    "render_frontmatter",
    "read_frontmatter",
    "process_frontmatter",
]
