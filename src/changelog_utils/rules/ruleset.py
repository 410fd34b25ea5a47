"""
changelog-utils — immutable lint rule set.

File: src/changelog_utils/rules/ruleset.py

Purpose
- Hold the closed set of categories, change types, spellings and repository
  settings one engine run checks against.

What should be included in this file
- ``ChangeTypeRule`` display name / abbreviation pairs with fuzzy matching.
- ``SpellingRule`` expected-spelling entries (correct word + case-insensitive pattern).
- ``RuleSet.from_config`` for validated config mappings, ``RuleSet.create`` for callers.

Functional requirements
- Built once from an already-validated config; never re-validated mid-run.

Non-functional requirements
- Frozen and safe to share between independent engine invocations.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from changelog_utils.domain.models import Version

_WHITESPACE_RE = re.compile(r"\s+")


def _squash(name: str) -> str:
    return _WHITESPACE_RE.sub("", name).lower()


@dataclass(frozen=True, slots=True)
class ChangeTypeRule:
    long: str
    short: str

    @classmethod
    def from_name(cls, name: str) -> ChangeTypeRule:
        """Derive an abbreviation from the first four letters of the display name."""

        return cls(long=name, short=name[:4].strip().lower())

    def matches(self, name: str) -> bool:
        """True when ``name`` refers to this change type modulo case and whitespace."""

        squashed = _squash(name)
        return squashed == _squash(self.long) or squashed == self.short.lower()


@dataclass(frozen=True, slots=True)
class SpellingRule:
    correct: str
    pattern: str

    def compiled(self) -> re.Pattern[str]:
        return re.compile(
            rf"(?:^|(?<=\s))(?P<word>{self.pattern})(?=$|[\s.,;:!?)])", re.IGNORECASE
        )


@dataclass(frozen=True, slots=True)
class RuleSet:
    categories: frozenset[str]
    change_types: tuple[ChangeTypeRule, ...]
    spellings: tuple[SpellingRule, ...] = ()
    target_repository: str = ""
    legacy_version: Version | None = None
    require_capitalized_description: bool = True
    require_trailing_period: bool = False
    sort_entries: bool = False

    @classmethod
    def create(
        cls,
        *,
        categories: Iterable[str],
        change_types: Iterable[str | ChangeTypeRule],
        spelling_corrections: Mapping[str, str] | None = None,
        target_repository: str = "",
        legacy_version: Version | str | None = None,
        require_capitalized_description: bool = True,
        require_trailing_period: bool = False,
        sort_entries: bool = False,
    ) -> RuleSet:
        """Build a rule set from plain values.

        ``spelling_corrections`` maps a misspelling pattern to its correct form.
        """

        rules = tuple(
            item if isinstance(item, ChangeTypeRule) else ChangeTypeRule.from_name(item)
            for item in change_types
        )
        spellings = tuple(
            SpellingRule(correct=correct, pattern=pattern)
            for pattern, correct in sorted((spelling_corrections or {}).items())
        )
        legacy = Version.parse(legacy_version) if isinstance(legacy_version, str) else legacy_version
        return cls(
            categories=frozenset(category.strip().lower() for category in categories),
            change_types=rules,
            spellings=spellings,
            target_repository=target_repository.strip().rstrip("/"),
            legacy_version=legacy,
            require_capitalized_description=require_capitalized_description,
            require_trailing_period=require_trailing_period,
            sort_entries=sort_entries,
        )

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> RuleSet:
        """Build a rule set from a config mapping validated by ``config.schema``."""

        changelog = config.get("changelog", {})
        rules = config.get("rules", {})
        expected = rules.get("expected_spellings", {})
        legacy_raw = changelog.get("legacy_version")
        return cls(
            categories=frozenset(rules.get("categories", ())),
            change_types=tuple(
                ChangeTypeRule(long=item["long"], short=item["short"])
                for item in rules.get("change_types", ())
            ),
            spellings=tuple(
                SpellingRule(correct=correct, pattern=expected[correct])
                for correct in sorted(expected)
            ),
            target_repository=str(changelog.get("target_repository", "")).rstrip("/"),
            legacy_version=Version.parse(legacy_raw) if legacy_raw else None,
            require_capitalized_description=bool(
                rules.get("require_capitalized_description", True)
            ),
            require_trailing_period=bool(rules.get("require_trailing_period", False)),
            sort_entries=bool(rules.get("sort_entries", False)),
        )

    @property
    def spelling_corrections(self) -> dict[str, str]:
        return {rule.pattern: rule.correct for rule in self.spellings}

    def change_type_named(self, name: str) -> ChangeTypeRule | None:
        for rule in self.change_types:
            if rule.long == name:
                return rule
        return None

    def match_change_type(self, name: str) -> ChangeTypeRule | None:
        exact = self.change_type_named(name)
        if exact is not None:
            return exact
        for rule in self.change_types:
            if rule.matches(name):
                return rule
        return None

    def change_type_rank(self, name: str) -> int:
        for index, rule in enumerate(self.change_types):
            if rule.long == name:
                return index
        return len(self.change_types)

    def pull_request_link(self, pr_number: int) -> str | None:
        if not self.target_repository:
            return None
        return f"{self.target_repository}/pull/{pr_number}"

    def release_link(self, version: Version) -> str | None:
        if not self.target_repository:
            return None
        return f"{self.target_repository}/releases/tag/{version}"


__all__ = ["ChangeTypeRule", "RuleSet", "SpellingRule"]
