"""
changelog-utils — external description suggestions.

File: src/changelog_utils/integrations/suggestions.py

Purpose
- Accept ``{category, change_type, title, pr_description}`` JSON produced by an
  external description generator and review it as a candidate entry.

What should be included in this file
- Strict decoding of the suggestion payload.
- Rendering the suggestion as a canonical entry under Unreleased.
- Running the full linter over the candidate before it is accepted.

Functional requirements
- Suggestions are untrusted: they are never accepted with lint errors.

Non-functional requirements
- No network access; the generator itself lives outside this package.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass

from changelog_utils.constants import UNRELEASED_HEADING
from changelog_utils.domain.models import ChangeTypeSection, Changelog, Entry, Release
from changelog_utils.errors import InvalidEntryError, ParseError, SuggestionError
from changelog_utils.linting.checks import canonical_change_type_heading
from changelog_utils.linting.diagnostics import Diagnostic, Severity
from changelog_utils.linting.linter import lint
from changelog_utils.operations.entries import build_entry
from changelog_utils.parsing.parser import parse
from changelog_utils.parsing.serializer import serialize
from changelog_utils.rules.ruleset import RuleSet

_REQUIRED_FIELDS: tuple[str, ...] = ("category", "change_type", "title", "pr_description")


@dataclass(frozen=True, slots=True)
class Suggestion:
    category: str
    change_type: str
    title: str
    pr_description: str

    @classmethod
    def from_json(cls, payload: str | bytes | Mapping[str, object]) -> Suggestion:
        if isinstance(payload, (str, bytes)):
            try:
                decoded = json.loads(payload)
            except json.JSONDecodeError as exc:
                raise SuggestionError(f"suggestion is not valid JSON: {exc}") from exc
        else:
            decoded = payload
        if not isinstance(decoded, Mapping):
            raise SuggestionError("suggestion must be a JSON object")

        values: dict[str, str] = {}
        for name in _REQUIRED_FIELDS:
            raw = decoded.get(name)
            if not isinstance(raw, str) or not raw.strip():
                raise SuggestionError(f"suggestion field {name!r} must be a non-empty string")
            values[name] = raw.strip()
        return cls(**values)

    def pull_request_title(self, ruleset: RuleSet) -> str:
        """Conventional PR title ``short(category): title``."""

        rule = ruleset.match_change_type(self.change_type)
        prefix = rule.short if rule is not None else self.change_type.lower()
        return f"{prefix}({self.category.lower()}): {self.title}"


@dataclass(frozen=True, slots=True)
class SuggestionReview:
    suggestion: Suggestion
    entry: Entry | None
    diagnostics: tuple[Diagnostic, ...]

    @property
    def accepted(self) -> bool:
        return self.entry is not None and not any(
            item.severity is Severity.ERROR for item in self.diagnostics
        )


def review_suggestion(suggestion: Suggestion, ruleset: RuleSet, pr_number: int) -> SuggestionReview:
    """Render ``suggestion`` as an Unreleased entry and run the full linter on it.

    Unknown categories or change types become diagnostics, not exceptions.
    """

    rule = ruleset.match_change_type(suggestion.change_type)
    section_name = rule.long if rule is not None else suggestion.change_type
    try:
        entry = build_entry(
            ruleset,
            category=suggestion.category,
            description=suggestion.title,
            pr_number=pr_number,
        )
    except InvalidEntryError as exc:
        raise SuggestionError(f"suggestion cannot be used as an entry: {exc}") from exc

    draft = Changelog(
        releases=(
            Release(
                version=None,
                heading=UNRELEASED_HEADING,
                trailer=("",),
                sections=(
                    ChangeTypeSection(
                        name=section_name,
                        heading=canonical_change_type_heading(section_name),
                        entries=(entry,),
                        trailer=("",),
                    ),
                ),
            ),
        ),
    )
    try:
        candidate = parse(serialize(draft))
    except ParseError as exc:
        raise SuggestionError(f"suggestion does not render as a valid entry: {exc}") from exc

    unreleased = candidate.unreleased
    parsed_entry = next(unreleased.iter_entries()) if unreleased is not None else None
    return SuggestionReview(
        suggestion=suggestion,
        entry=parsed_entry,
        diagnostics=lint(candidate, ruleset),
    )


__all__ = ["Suggestion", "SuggestionReview", "review_suggestion"]
