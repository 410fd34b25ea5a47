"""Automatic fixes for fixable lint diagnostics."""

from changelog_utils.fixing.fixer import FixOutcome, fix, fix_changelog

__all__ = ["FixOutcome", "fix", "fix_changelog"]
