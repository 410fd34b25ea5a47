"""
changelog-utils — deterministic auto-fixer.

File: src/changelog_utils/fixing/fixer.py

Purpose
- Apply fixable diagnostics to a ``Changelog`` and return a fresh model.

What should be included in this file
- Entry rewrites: whitespace, PR hash, category case, PR link, spelling,
  capitalization and trailing period.
- Section rewrites: canonical change-type name and heading.
- Release rewrites: Unreleased heading, release link and canonical heading.
- Optional descending PR sort inside a section.

Functional requirements
- Only diagnostics tagged fixable are applied; errors pass through untouched.
- Idempotent: fixing an already fixed model is a no-op.

Non-functional requirements
- Pure; the result is re-parsed so line numbers are fresh.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

import structlog

from changelog_utils.constants import CANONICAL_ENTRY_SPACING, UNRELEASED_HEADING
from changelog_utils.linting.checks import (
    add_trailing_period,
    apply_spelling,
    canonical_change_type_heading,
    canonical_release_heading,
    capitalize_description,
    expected_pr_link,
    expected_release_link,
)
from changelog_utils.linting.diagnostics import Diagnostic, RuleId, Severity
from changelog_utils.linting.linter import lint
from changelog_utils.parsing.parser import parse
from changelog_utils.parsing.serializer import serialize

if TYPE_CHECKING:
    from collections.abc import Iterable, Set

    from changelog_utils.domain.models import (
        ChangeTypeSection,
        Changelog,
        Entry,
        PullRequestRef,
        Release,
    )
    from changelog_utils.rules.ruleset import RuleSet

logger = structlog.get_logger(__name__)

_RuleIndex = dict[int, set[RuleId]]


@dataclass(frozen=True, slots=True)
class FixOutcome:
    changelog: Changelog
    applied: tuple[Diagnostic, ...]
    remaining: tuple[Diagnostic, ...]

    @property
    def changed(self) -> bool:
        return bool(self.applied)


def fix(model: Changelog, ruleset: RuleSet, diagnostics: Iterable[Diagnostic]) -> Changelog:
    """Apply the fixable ``diagnostics`` to ``model`` in a single pass."""

    index: _RuleIndex = defaultdict(set)
    for item in diagnostics:
        if item.severity is Severity.FIXABLE:
            index[item.line_number].add(item.rule_id)
    if not index:
        return model

    releases = tuple(_fix_release(release, ruleset, index) for release in model.releases)
    fixed = replace(model, releases=releases)
    return parse(serialize(fixed), legacy_version=ruleset.legacy_version)


def fix_changelog(
    model: Changelog,
    ruleset: RuleSet,
    *,
    open_pull_requests: Set[PullRequestRef] | None = None,
) -> FixOutcome:
    """Lint, fix and re-lint ``model``; ``remaining`` holds what still needs a human."""

    found = lint(model, ruleset, open_pull_requests=open_pull_requests)
    fixed = fix(model, ruleset, found)
    remaining = lint(fixed, ruleset, open_pull_requests=open_pull_requests)
    applied = tuple(item for item in found if item.severity is Severity.FIXABLE)
    logger.info("fix_applied", applied=len(applied), remaining=len(remaining))
    return FixOutcome(changelog=fixed, applied=applied, remaining=remaining)


def _fix_release(release: Release, ruleset: RuleSet, index: _RuleIndex) -> Release:
    rules = index.get(release.line_number, set())
    if rules & {RuleId.RELEASE_HEADING, RuleId.RELEASE_LINK}:
        release = _rewrite_release_heading(release, ruleset, rules)
    sections = tuple(_fix_section(section, ruleset, index) for section in release.sections)
    return replace(release, sections=sections)


def _rewrite_release_heading(release: Release, ruleset: RuleSet, rules: set[RuleId]) -> Release:
    if release.version is None:
        return replace(release, heading=UNRELEASED_HEADING)
    link = release.link
    if RuleId.RELEASE_LINK in rules:
        link = expected_release_link(release, ruleset) or link
    heading = canonical_release_heading(release.version, link, release.date_text)
    return replace(release, link=link, heading=heading)


def _fix_section(section: ChangeTypeSection, ruleset: RuleSet, index: _RuleIndex) -> ChangeTypeSection:
    rules = index.get(section.line_number, set())
    name = section.name
    heading = section.heading
    if RuleId.CHANGE_TYPE_NAME in rules:
        matched = ruleset.match_change_type(name)
        if matched is not None:
            name = matched.long
            heading = canonical_change_type_heading(name)
    if RuleId.CHANGE_TYPE_HEADING in rules:
        heading = canonical_change_type_heading(name)

    entries = tuple(_fix_entry(entry, ruleset, index.get(entry.line_number, set())) for entry in section.entries)
    if RuleId.ENTRY_ORDER in rules:
        entries = _sort_entries(entries)
    return replace(section, name=name, heading=heading, entries=entries)


def _fix_entry(entry: Entry, ruleset: RuleSet, rules: set[RuleId]) -> Entry:
    if not rules:
        return entry

    spacing = CANONICAL_ENTRY_SPACING if RuleId.WHITESPACE in rules else entry.spacing
    escaped_hash = entry.escaped_hash and RuleId.PR_HASH not in rules
    category = entry.category.lower() if RuleId.CATEGORY_CASE in rules else entry.category
    link = entry.link
    if RuleId.PR_LINK in rules:
        link = expected_pr_link(entry, ruleset) or link

    description = entry.description
    if RuleId.SPELLING in rules:
        description = apply_spelling(description, ruleset)
    if RuleId.DESCRIPTION_CAPITAL in rules:
        description = capitalize_description(description, ruleset)
    if RuleId.DESCRIPTION_PERIOD in rules:
        description = add_trailing_period(description)

    return replace(
        entry,
        spacing=spacing,
        escaped_hash=escaped_hash,
        category=category,
        link=link,
        description=description,
    )


def _sort_entries(entries: tuple[Entry, ...]) -> tuple[Entry, ...]:
    # Escapes travel with their entry; trailing lines stay at their slot.
    ordered = sorted(entries, key=lambda entry: entry.pr_number, reverse=True)
    return tuple(
        replace(moved, trailer=slot.trailer) for slot, moved in zip(entries, ordered, strict=True)
    )


__all__ = ["FixOutcome", "fix", "fix_changelog"]
