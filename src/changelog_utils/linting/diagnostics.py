"""Diagnostic values produced by the linter and their text/JSON renderings."""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum


class Severity(StrEnum):
    ERROR = "error"
    FIXABLE = "fixable"


class RuleId(StrEnum):
    CATEGORY = "category"
    CATEGORY_CASE = "category-case"
    CHANGE_TYPE = "change-type"
    CHANGE_TYPE_HEADING = "change-type-heading"
    CHANGE_TYPE_NAME = "change-type-name"
    DESCRIPTION_CAPITAL = "description-capital"
    DESCRIPTION_PERIOD = "description-period"
    DUPLICATE_CHANGE_TYPE = "duplicate-change-type"
    DUPLICATE_PR = "duplicate-pr"
    DUPLICATE_RELEASE = "duplicate-release"
    ENTRY_ORDER = "entry-order"
    ESCAPE_SCOPE = "escape-scope"
    PR_HASH = "pr-hash"
    PR_LINK = "pr-link"
    RELEASE_DATE = "release-date"
    RELEASE_HEADING = "release-heading"
    RELEASE_LINK = "release-link"
    RELEASE_ORDER = "release-order"
    SPELLING = "spelling"
    WHITESPACE = "whitespace"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    line_number: int
    rule_id: RuleId
    severity: Severity
    message: str

    @property
    def is_fixable(self) -> bool:
        return self.severity is Severity.FIXABLE

    def sort_key(self) -> tuple[int, str, str]:
        return (self.line_number, self.rule_id.value, self.message)

    def to_dict(self) -> dict[str, object]:
        return {
            "line": self.line_number,
            "rule": self.rule_id.value,
            "severity": self.severity.value,
            "message": self.message,
        }

    def __str__(self) -> str:
        return f"line {self.line_number}: {self.message} [{self.rule_id.value}]"


def error(line_number: int, rule_id: RuleId, message: str) -> Diagnostic:
    return Diagnostic(line_number, rule_id, Severity.ERROR, message)


def fixable(line_number: int, rule_id: RuleId, message: str) -> Diagnostic:
    return Diagnostic(line_number, rule_id, Severity.FIXABLE, message)


def ordered(diagnostics: Sequence[Diagnostic]) -> tuple[Diagnostic, ...]:
    """Deduplicate and sort by ``(line_number, rule_id, message)``."""

    return tuple(sorted(set(diagnostics), key=Diagnostic.sort_key))


@dataclass(frozen=True, slots=True)
class LintReport:
    """Lint outcome; ``notes`` carry informational messages such as skipped checks."""

    diagnostics: tuple[Diagnostic, ...]
    notes: tuple[str, ...] = ()

    @property
    def error_count(self) -> int:
        return sum(1 for item in self.diagnostics if item.severity is Severity.ERROR)

    @property
    def fixable_count(self) -> int:
        return sum(1 for item in self.diagnostics if item.severity is Severity.FIXABLE)

    @property
    def passed(self) -> bool:
        return self.error_count == 0

    @property
    def is_clean(self) -> bool:
        return not self.diagnostics

    def summary(self) -> dict[str, object]:
        return {
            "error_count": self.error_count,
            "fixable_count": self.fixable_count,
            "total_diagnostics": len(self.diagnostics),
            "passed": self.passed,
        }

    def to_dict(self) -> dict[str, object]:
        return {
            "summary": self.summary(),
            "diagnostics": [item.to_dict() for item in self.diagnostics],
            "notes": list(self.notes),
        }


def format_text(report: LintReport, *, path: str | None = None) -> str:
    prefix = f"{path}:" if path else "line "
    output_lines: list[str] = []
    for item in report.diagnostics:
        output_lines.append(
            f"{prefix}{item.line_number}: {item.severity.value}: {item.message} [{item.rule_id.value}]"
        )
    for note in report.notes:
        output_lines.append(f"note: {note}")
    summary = report.summary()
    output_lines.append(
        "Summary: "
        f"errors={summary['error_count']} "
        f"fixable={summary['fixable_count']} "
        f"total={summary['total_diagnostics']}"
    )
    return "\n".join(output_lines) + "\n"


def format_json(report: LintReport) -> str:
    return json.dumps(report.to_dict(), sort_keys=True, indent=2, ensure_ascii=False) + "\n"


__all__ = [
    "Diagnostic",
    "LintReport",
    "RuleId",
    "Severity",
    "error",
    "fixable",
    "format_json",
    "format_text",
    "ordered",
]
