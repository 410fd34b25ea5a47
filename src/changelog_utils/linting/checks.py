"""
changelog-utils — per-element lint checks.

File: src/changelog_utils/linting/checks.py

Purpose
- Check single entries, change-type sections and release headings against a ``RuleSet``.

What should be included in this file
- Entry checks: whitespace, PR hash, category, PR link, description, spelling.
- Section checks: change-type membership, display name and heading shape.
- Release heading checks: Unreleased heading, release link and date.
- The corrected values each fixable check expects (shared with the fixer).

Functional requirements
- Checks never raise for content problems; they return diagnostics.
- Unknown categories and change types are errors, never fixable.

Non-functional requirements
- Pure functions; no logging at this level.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from changelog_utils.constants import CANONICAL_ENTRY_SPACING, UNRELEASED_HEADING
from changelog_utils.domain.models import PullRequestRef
from changelog_utils.linting.diagnostics import Diagnostic, RuleId, error, fixable

if TYPE_CHECKING:
    from changelog_utils.domain.models import ChangeTypeSection, Entry, Release, Version
    from changelog_utils.rules.ruleset import RuleSet

_CODE_SPAN_RE = re.compile(r"`[^`]*`")
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

_SPACING_MESSAGES: tuple[str, ...] = (
    "There should be no leading whitespace before the dash",
    "There should be exactly one space between the leading dash and the category",
    "There should be exactly one space between the category and the PR link",
    "There should be no whitespace inside of the markdown link",
    "There should be exactly one space between the PR link and the description",
)


# ---------------------------------------------------------------------------
# Expected values
# ---------------------------------------------------------------------------


def expected_pr_link(entry: Entry, ruleset: RuleSet) -> str | None:
    """Link the entry should carry, or None when it cannot be determined."""

    configured = ruleset.pull_request_link(entry.pr_number)
    if configured is not None:
        return configured
    reference = entry.pr_reference
    if reference is None:
        return None
    return f"{reference.normalized().repository}/pull/{entry.pr_number}"


def apply_spelling(description: str, ruleset: RuleSet) -> str:
    """Replace configured misspellings outside of code spans."""

    corrected = description
    for rule in ruleset.spellings:
        pattern = rule.compiled()
        corrected = _substitute_outside_code(corrected, pattern, rule.correct)
    return corrected


def capitalize_description(description: str, ruleset: RuleSet) -> str:
    if not _needs_capital(description, ruleset):
        return description
    return description[0].upper() + description[1:]


def add_trailing_period(description: str) -> str:
    stripped = description.rstrip()
    if stripped.endswith("."):
        return description
    return stripped + "."


def canonical_change_type_heading(name: str) -> str:
    return f"### {name}"


def canonical_release_heading(version: Version, link: str | None, date_text: str | None) -> str:
    heading = f"## [{version}]"
    if link is not None:
        heading += f"({link})"
    if date_text is not None:
        heading += f" - {date_text}"
    return heading


def expected_release_link(release: Release, ruleset: RuleSet) -> str | None:
    if release.version is None:
        return None
    return ruleset.release_link(release.version)


# ---------------------------------------------------------------------------
# Entry checks
# ---------------------------------------------------------------------------


def check_entry(entry: Entry, ruleset: RuleSet) -> list[Diagnostic]:
    line = entry.line_number
    found: list[Diagnostic] = []

    for actual, expected, message in zip(
        entry.spacing, CANONICAL_ENTRY_SPACING, _SPACING_MESSAGES, strict=True
    ):
        if actual != expected:
            found.append(fixable(line, RuleId.WHITESPACE, message))

    if entry.escaped_hash:
        found.append(
            fixable(line, RuleId.PR_HASH, "There should be no backslash in front of the # in the PR link")
        )

    found.extend(_check_category(entry, ruleset))
    found.extend(_check_pr_link(entry, ruleset))
    found.extend(_check_description(entry, ruleset))
    return found


def _check_category(entry: Entry, ruleset: RuleSet) -> list[Diagnostic]:
    lowered = entry.category.lower()
    if lowered not in ruleset.categories:
        return [error(entry.line_number, RuleId.CATEGORY, f"invalid change category: ({entry.category})")]
    if entry.category != lowered:
        return [
            fixable(
                entry.line_number,
                RuleId.CATEGORY_CASE,
                f"category should be lowercase: ({entry.category})",
            )
        ]
    return []


def _check_pr_link(entry: Entry, ruleset: RuleSet) -> list[Diagnostic]:
    line = entry.line_number
    expected = expected_pr_link(entry, ruleset)
    reference = entry.pr_reference

    if reference is None:
        message = f"PR link is malformed: '{entry.link}'"
        if expected is None:
            return [error(line, RuleId.PR_LINK, message)]
        return [fixable(line, RuleId.PR_LINK, message)]

    found: list[Diagnostic] = []
    normalized = reference.normalized()
    if ruleset.target_repository and normalized.repository != ruleset.target_repository:
        found.append(fixable(line, RuleId.PR_LINK, f"PR link points to wrong repository: {entry.link}"))
    if normalized.number != entry.pr_number:
        found.append(
            fixable(
                line,
                RuleId.PR_LINK,
                f"PR link is not matching PR number {entry.pr_number}: '{entry.link}'",
            )
        )
    if not found and expected is not None and entry.link != expected:
        found.append(
            fixable(line, RuleId.PR_LINK, f"PR link should be '{expected}'; got: '{entry.link}'")
        )
    return found


def _check_description(entry: Entry, ruleset: RuleSet) -> list[Diagnostic]:
    line = entry.line_number
    description = entry.description
    found: list[Diagnostic] = []

    if ruleset.require_capitalized_description and _needs_capital(description, ruleset):
        found.append(
            fixable(
                line,
                RuleId.DESCRIPTION_CAPITAL,
                f"PR description should start with capital letter: '{description}'",
            )
        )
    if ruleset.require_trailing_period and not description.rstrip().endswith("."):
        found.append(
            fixable(
                line,
                RuleId.DESCRIPTION_PERIOD,
                f"PR description should end with a dot: '{description}'",
            )
        )

    for rule in ruleset.spellings:
        for match in _matches_outside_code(description, rule.compiled()):
            word = match.group("word")
            if word == rule.correct:
                continue
            found.append(
                fixable(
                    line,
                    RuleId.SPELLING,
                    f"'{rule.correct}' should be used instead of '{word}'",
                )
            )
    return found


# ---------------------------------------------------------------------------
# Section and release checks
# ---------------------------------------------------------------------------


def check_section(section: ChangeTypeSection, ruleset: RuleSet) -> list[Diagnostic]:
    line = section.line_number
    name = section.name
    found: list[Diagnostic] = []

    if ruleset.change_type_named(name) is None:
        matched = ruleset.match_change_type(name)
        if matched is None:
            found.append(error(line, RuleId.CHANGE_TYPE, f"'{name}' is not a valid change type"))
        else:
            found.append(
                fixable(
                    line,
                    RuleId.CHANGE_TYPE_NAME,
                    f"'{matched.long}' should be used instead of '{name}'",
                )
            )

    expected_heading = canonical_change_type_heading(name)
    if section.heading != expected_heading:
        found.append(
            fixable(
                line,
                RuleId.CHANGE_TYPE_HEADING,
                f"Change type line is malformed; should be: '{expected_heading}'",
            )
        )

    if ruleset.sort_entries:
        numbers = [entry.pr_number for entry in section.entries]
        if numbers != sorted(numbers, reverse=True):
            found.append(
                fixable(
                    line,
                    RuleId.ENTRY_ORDER,
                    f"entries in '{name}' should be sorted by PR number in descending order",
                )
            )
    return found


def check_release_heading(release: Release, ruleset: RuleSet) -> list[Diagnostic]:
    line = release.line_number
    if release.version is None:
        if release.heading != UNRELEASED_HEADING:
            return [
                fixable(
                    line,
                    RuleId.RELEASE_HEADING,
                    f"Unreleased header is malformed; expected: '{UNRELEASED_HEADING}'; "
                    f"got: '{release.heading}'",
                )
            ]
        return []

    version = release.version
    found: list[Diagnostic] = []

    if release.date_text is None:
        found.append(error(line, RuleId.RELEASE_DATE, f"Release date is missing for version {version}"))
    elif release.release_date is None:
        found.append(
            error(
                line,
                RuleId.RELEASE_DATE,
                f"Release date is not a valid YYYY-MM-DD date for version {version}: "
                f"'{release.date_text}'",
            )
        )

    expected_link = expected_release_link(release, ruleset)
    if expected_link is not None:
        if release.link is None:
            found.append(
                fixable(line, RuleId.RELEASE_LINK, f"Release link is missing for version {version}")
            )
        elif release.link != expected_link:
            found.append(
                fixable(
                    line,
                    RuleId.RELEASE_LINK,
                    f"Release link should point to the GitHub release for {version}; "
                    f"expected: '{expected_link}'; got: '{release.link}'",
                )
            )

    canonical = canonical_release_heading(version, release.link, release.date_text)
    if release.heading != canonical:
        found.append(
            fixable(
                line,
                RuleId.RELEASE_HEADING,
                f"Release header is malformed; expected: '{canonical}'; got: '{release.heading}'",
            )
        )
    return found


def open_pull_request_key(entry: Entry, ruleset: RuleSet) -> PullRequestRef | None:
    repository = ruleset.target_repository
    if not repository:
        reference = entry.pr_reference
        if reference is None:
            return None
        repository = reference.normalized().repository
    return PullRequestRef(repository=repository, number=entry.pr_number)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _needs_capital(description: str, ruleset: RuleSet) -> bool:
    if not description or not description[0].islower():
        return False
    # Words with a configured spelling keep their expected casing.
    for rule in ruleset.spellings:
        if description.startswith(rule.correct):
            return False
    return True


def _code_spans(text: str) -> list[tuple[int, int]]:
    return [match.span() for match in _CODE_SPAN_RE.finditer(text)]


def _matches_outside_code(text: str, pattern: re.Pattern[str]) -> list[re.Match[str]]:
    spans = _code_spans(text)
    found: list[re.Match[str]] = []
    for match in pattern.finditer(text):
        start = match.start("word")
        if any(span_start <= start < span_end for span_start, span_end in spans):
            continue
        found.append(match)
    return found


def _substitute_outside_code(text: str, pattern: re.Pattern[str], correct: str) -> str:
    matches = _matches_outside_code(text, pattern)
    if not matches:
        return text
    pieces: list[str] = []
    cursor = 0
    for match in matches:
        start, end = match.span("word")
        pieces.append(text[cursor:start])
        pieces.append(correct)
        cursor = end
    pieces.append(text[cursor:])
    return "".join(pieces)


__all__ = [
    "add_trailing_period",
    "apply_spelling",
    "canonical_change_type_heading",
    "canonical_release_heading",
    "capitalize_description",
    "check_entry",
    "check_release_heading",
    "check_section",
    "expected_pr_link",
    "expected_release_link",
    "open_pull_request_key",
]
