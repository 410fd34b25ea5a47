"""Rule-based changelog linting."""

from changelog_utils.linting.diagnostics import (
    Diagnostic,
    LintReport,
    RuleId,
    Severity,
    format_json,
    format_text,
)
from changelog_utils.linting.linter import OPEN_PR_LOOKUP_SKIPPED_NOTE, lint, lint_report

__all__ = [
    "Diagnostic",
    "LintReport",
    "OPEN_PR_LOOKUP_SKIPPED_NOTE",
    "RuleId",
    "Severity",
    "format_json",
    "format_text",
    "lint",
    "lint_report",
]
