"""Rule set consumed by the linter, fixer and release transition."""

from changelog_utils.rules.ruleset import ChangeTypeRule, RuleSet, SpellingRule

__all__ = ["ChangeTypeRule", "RuleSet", "SpellingRule"]
