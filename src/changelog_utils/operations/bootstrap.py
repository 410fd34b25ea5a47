"""Bootstrap helpers for ``init``: derive settings from an existing changelog."""

from __future__ import annotations

from typing import Any

from changelog_utils.parsing.parser import CHANGE_TYPE_PATTERN, ENTRY_PATTERN
from changelog_utils.rules.ruleset import ChangeTypeRule

EMPTY_CHANGELOG_LINES: tuple[str, ...] = (
    "<!--",
    "This changelog was created using the `clu` command line tool.",
    "-->",
    "",
    "# Changelog",
    "",
    "## Unreleased",
    "",
)


def empty_changelog_text() -> str:
    return "\n".join(EMPTY_CHANGELOG_LINES)


def derive_rules_from_changelog(text: str) -> dict[str, Any]:
    """Collect the categories and change types used in ``text``.

    Scanning is line based and tolerant: lines that do not parse are skipped,
    so legacy or malformed history still contributes what it can.
    """

    change_types: list[str] = []
    categories: set[str] = set()
    for line in text.splitlines():
        if line.strip().startswith("### "):
            match = CHANGE_TYPE_PATTERN.match(line)
            if match is not None and match.group("name").strip() not in change_types:
                change_types.append(match.group("name").strip())
            continue
        entry_match = ENTRY_PATTERN.match(line)
        if entry_match is not None:
            categories.add(entry_match.group("category").lower())

    rules = [ChangeTypeRule.from_name(name) for name in change_types]
    return {
        "categories": sorted(categories),
        "change_types": [{"long": rule.long, "short": rule.short} for rule in rules],
    }


__all__ = ["EMPTY_CHANGELOG_LINES", "derive_rules_from_changelog", "empty_changelog_text"]
