"""
changelog-utils — changelog linter.

File: src/changelog_utils/linting/linter.py

Purpose
- Walk a parsed ``Changelog`` and collect ordered diagnostics.

What should be included in this file
- Per-element checks from ``linting.checks`` with escape handling.
- Cross-element rules: release order, duplicate releases, duplicate change
  types, duplicate PR entries and escape scope.
- Duplicate-PR escape eligibility against an already resolved set of open PRs.

Functional requirements
- ``disable-all`` escapes suppress every entry rule; ``disable-duplicate-pr``
  escapes suppress only the cross-release duplicate rule.
- Escape-scope violations can never be escaped.
- A missing open-PR set skips that cross-check and adds a note, never a failure.

Non-functional requirements
- Deterministic and side-effect free apart from structured log events.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from changelog_utils.domain.models import EscapeKind
from changelog_utils.linting.checks import (
    check_entry,
    check_release_heading,
    check_section,
    open_pull_request_key,
)
from changelog_utils.linting.diagnostics import (
    Diagnostic,
    LintReport,
    RuleId,
    error,
    ordered,
)

if TYPE_CHECKING:
    from collections.abc import Set

    from changelog_utils.domain.models import Changelog, Entry, PullRequestRef, Release, Version
    from changelog_utils.rules.ruleset import RuleSet

OPEN_PR_LOOKUP_SKIPPED_NOTE = (
    "open pull request lookup unavailable; duplicate-PR escapes were accepted "
    "without checking whether the pull request is still open"
)

logger = structlog.get_logger(__name__)


def lint(
    model: Changelog,
    ruleset: RuleSet,
    *,
    open_pull_requests: Set[PullRequestRef] | None = None,
) -> tuple[Diagnostic, ...]:
    """Return diagnostics ordered by ``(line_number, rule_id, message)``."""

    return lint_report(model, ruleset, open_pull_requests=open_pull_requests).diagnostics


def lint_report(
    model: Changelog,
    ruleset: RuleSet,
    *,
    open_pull_requests: Set[PullRequestRef] | None = None,
) -> LintReport:
    """Lint ``model`` and return diagnostics together with informational notes."""

    state = _LintState(ruleset, open_pull_requests)

    for index, release in enumerate(model.releases):
        state.check_release(index, release)

    for escape in model.dangling_escapes:
        state.found.append(
            error(
                escape.line_number,
                RuleId.ESCAPE_SCOPE,
                "escape directive must be immediately followed by a changelog entry",
            )
        )

    notes: list[str] = []
    if state.skipped_open_check:
        notes.append(OPEN_PR_LOOKUP_SKIPPED_NOTE)
        logger.warning("duplicate_pr_open_check_skipped", escapes=state.skipped_open_check)

    report = LintReport(diagnostics=ordered(state.found), notes=tuple(notes))
    logger.debug(
        "lint_completed",
        releases=len(model.releases),
        errors=report.error_count,
        fixable=report.fixable_count,
    )
    return report


class _LintState:
    __slots__ = (
        "_open",
        "_previous_version",
        "_ruleset",
        "_seen_pr",
        "_seen_versions",
        "found",
        "skipped_open_check",
    )

    def __init__(self, ruleset: RuleSet, open_pull_requests: Set[PullRequestRef] | None) -> None:
        self._ruleset = ruleset
        self._open = (
            None
            if open_pull_requests is None
            else frozenset(item.normalized() for item in open_pull_requests)
        )
        self._previous_version: Version | None = None
        self._seen_versions: set[Version | None] = set()
        self._seen_pr: set[tuple[str, int]] = set()
        self.found: list[Diagnostic] = []
        self.skipped_open_check = 0

    def check_release(self, index: int, release: Release) -> None:
        self.found.extend(check_release_heading(release, self._ruleset))
        self._check_order(index, release)

        seen_change_types: set[str] = set()
        release_pr: set[tuple[str, int]] = set()
        for section in release.sections:
            self.found.extend(check_section(section, self._ruleset))
            matched = self._ruleset.match_change_type(section.name)
            key = matched.long if matched is not None else section.name
            if key in seen_change_types:
                self.found.append(
                    error(
                        section.line_number,
                        RuleId.DUPLICATE_CHANGE_TYPE,
                        f"duplicate change type in release {release.label}: {key}",
                    )
                )
            seen_change_types.add(key)

            for entry in section.entries:
                self._check_entry(release, entry, release_pr)

        self._seen_pr.update(release_pr)

    def _check_order(self, index: int, release: Release) -> None:
        line = release.line_number
        version = release.version

        if version in self._seen_versions:
            self.found.append(error(line, RuleId.DUPLICATE_RELEASE, f"duplicate release: {release.label}"))
            return
        self._seen_versions.add(version)

        if version is None:
            if index != 0:
                self.found.append(
                    error(line, RuleId.RELEASE_ORDER, "Unreleased must be the first release")
                )
            return

        previous = self._previous_version
        self._previous_version = version
        if previous is not None and not version < previous:
            self.found.append(
                error(
                    line,
                    RuleId.RELEASE_ORDER,
                    f"release {version} should be listed before release {previous}; "
                    "releases must be in descending version order",
                )
            )

    def _check_entry(self, release: Release, entry: Entry, release_pr: set[tuple[str, int]]) -> None:
        key = (entry.category.lower(), entry.pr_number)
        escaped = entry.is_fully_escaped

        if not escaped:
            self.found.extend(check_entry(entry, self._ruleset))

        if key in release_pr:
            if not escaped:
                self.found.append(
                    error(
                        entry.line_number,
                        RuleId.DUPLICATE_PR,
                        f"duplicate PR in release {release.label}: #{entry.pr_number}",
                    )
                )
            return
        release_pr.add(key)

        if key not in self._seen_pr or escaped:
            return

        escape = entry.escape
        if escape is not None and escape.kind is EscapeKind.DISABLE_DUPLICATE_PR:
            if self._open is None:
                self.skipped_open_check += 1
                return
            reference = open_pull_request_key(entry, self._ruleset)
            if reference is None or reference.normalized() not in self._open:
                return
            self.found.append(
                error(
                    entry.line_number,
                    RuleId.DUPLICATE_PR,
                    f"duplicate PR: #{entry.pr_number}; escape not honored because "
                    "the pull request is still open",
                )
            )
            return

        self.found.append(error(entry.line_number, RuleId.DUPLICATE_PR, f"duplicate PR: #{entry.pr_number}"))


__all__ = ["OPEN_PR_LOOKUP_SKIPPED_NOTE", "lint", "lint_report"]
