"""Changelog operations built on top of the parse/lint/fix engine."""

from changelog_utils.operations.bootstrap import (
    derive_rules_from_changelog,
    empty_changelog_text,
)
from changelog_utils.operations.diff import added_lines, check_diff
from changelog_utils.operations.entries import add_entry, build_entry
from changelog_utils.operations.query import get_release, render_release

__all__ = [
    "add_entry",
    "added_lines",
    "build_entry",
    "check_diff",
    "derive_rules_from_changelog",
    "empty_changelog_text",
    "get_release",
    "render_release",
]
