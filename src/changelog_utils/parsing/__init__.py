"""Markdown parsing and serialization for changelog files."""

from changelog_utils.parsing.escapes import parse_escape, render_escape
from changelog_utils.parsing.parser import parse, parse_entry_line
from changelog_utils.parsing.serializer import release_lines, section_lines, serialize

__all__ = [
    "parse",
    "parse_entry_line",
    "parse_escape",
    "release_lines",
    "render_escape",
    "section_lines",
    "serialize",
]
