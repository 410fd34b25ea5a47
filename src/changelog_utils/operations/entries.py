"""Adding new entries to the Unreleased release."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

import structlog

from changelog_utils.constants import UNRELEASED_HEADING
from changelog_utils.domain.models import ChangeTypeSection, Entry, Release
from changelog_utils.errors import InvalidEntryError
from changelog_utils.linting.checks import canonical_change_type_heading
from changelog_utils.parsing.parser import parse
from changelog_utils.parsing.serializer import serialize

if TYPE_CHECKING:
    from changelog_utils.domain.models import Changelog
    from changelog_utils.rules.ruleset import RuleSet

logger = structlog.get_logger(__name__)


def build_entry(
    ruleset: RuleSet,
    *,
    category: str,
    description: str,
    pr_number: int,
    link: str | None = None,
) -> Entry:
    """Build a canonical entry; the link defaults to the target repository PR URL."""

    if pr_number <= 0:
        raise InvalidEntryError(f"PR number must be positive, got {pr_number}")
    text = description.strip()
    if not text:
        raise InvalidEntryError("entry description must not be empty")
    if "\n" in text or "\r" in text:
        raise InvalidEntryError("entry description must be a single line")
    resolved_link = link if link is not None else ruleset.pull_request_link(pr_number)
    if resolved_link is None:
        raise InvalidEntryError(
            "cannot build the PR link: configure changelog.target_repository or pass a link"
        )
    return Entry(
        category=category.strip().lower(),
        pr_number=pr_number,
        link=resolved_link,
        description=text,
    )


def add_entry(
    model: Changelog,
    ruleset: RuleSet,
    *,
    change_type: str,
    category: str,
    description: str,
    pr_number: int,
    link: str | None = None,
) -> Changelog:
    """Insert a new entry at the top of the matching Unreleased change type.

    The Unreleased release and the change-type section are created when missing.
    """

    rule = ruleset.match_change_type(change_type)
    if rule is None:
        raise InvalidEntryError(f"'{change_type}' is not a configured change type")
    if category.strip().lower() not in ruleset.categories:
        raise InvalidEntryError(f"'{category}' is not a configured category")

    entry = build_entry(
        ruleset, category=category, description=description, pr_number=pr_number, link=link
    )

    releases = list(model.releases)
    position = next((i for i, release in enumerate(releases) if release.is_unreleased), None)
    if position is None:
        releases.insert(0, Release(version=None, heading=UNRELEASED_HEADING, trailer=("",)))
        position = 0
    unreleased = releases[position]

    sections = list(unreleased.sections)
    section_index = next(
        (
            i
            for i, section in enumerate(sections)
            if ruleset.match_change_type(section.name) == rule
        ),
        None,
    )
    if section_index is None:
        if not sections and not unreleased.trailer:
            unreleased = replace(unreleased, trailer=("",))
        if sections and sections[-1].entries and not sections[-1].entries[-1].trailer:
            last = sections[-1]
            closing = replace(last.entries[-1], trailer=("",))
            sections[-1] = replace(last, entries=(*last.entries[:-1], closing))
        followed = position < len(releases) - 1 or bool(model.legacy)
        sections.append(
            ChangeTypeSection(
                name=rule.long,
                heading=canonical_change_type_heading(rule.long),
                entries=(replace(entry, trailer=("",)) if followed else entry,),
                trailer=("",),
            )
        )
    else:
        section = sections[section_index]
        sections[section_index] = replace(section, entries=(entry, *section.entries))

    releases[position] = replace(unreleased, sections=tuple(sections))
    updated = parse(
        serialize(replace(model, releases=tuple(releases))), legacy_version=ruleset.legacy_version
    )
    logger.info("entry_added", change_type=rule.long, category=entry.category, pr_number=pr_number)
    return updated


__all__ = ["add_entry", "build_entry"]
