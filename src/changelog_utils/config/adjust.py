"""Pure edits of the ``rules`` section; each returns a new validated config."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from changelog_utils.config.schema import assert_valid_config


class ConfigAdjustError(ValueError):
    """Raised when an edit would duplicate or remove a missing rule."""


def add_category(config: Mapping[str, Any], name: str) -> dict[str, Any]:
    updated = _copy(config)
    category = name.strip().lower()
    categories: list[str] = updated["rules"]["categories"]
    if category in categories:
        raise ConfigAdjustError(f"category {category!r} already exists")
    categories.append(category)
    return assert_valid_config(updated)


def remove_category(config: Mapping[str, Any], name: str) -> dict[str, Any]:
    updated = _copy(config)
    category = name.strip().lower()
    categories: list[str] = updated["rules"]["categories"]
    if category not in categories:
        raise ConfigAdjustError(f"category {category!r} does not exist")
    categories.remove(category)
    return assert_valid_config(updated)


def add_change_type(
    config: Mapping[str, Any], long: str, short: str | None = None
) -> dict[str, Any]:
    """Append a change type; the abbreviation defaults to the first four letters."""

    updated = _copy(config)
    name = long.strip()
    abbreviation = (short if short is not None else name[:4]).strip().lower()
    change_types: list[dict[str, str]] = updated["rules"]["change_types"]
    for item in change_types:
        if item["long"].lower() == name.lower():
            raise ConfigAdjustError(f"change type {name!r} already exists")
        if item["short"] == abbreviation:
            raise ConfigAdjustError(
                f"abbreviation {abbreviation!r} is already used by {item['long']!r}"
            )
    change_types.append({"long": name, "short": abbreviation})
    return assert_valid_config(updated)


def remove_change_type(config: Mapping[str, Any], name: str) -> dict[str, Any]:
    """Remove a change type by display name or abbreviation."""

    updated = _copy(config)
    wanted = name.strip().lower()
    change_types: list[dict[str, str]] = updated["rules"]["change_types"]
    remaining = [
        item for item in change_types if wanted not in (item["long"].lower(), item["short"])
    ]
    if len(remaining) == len(change_types):
        raise ConfigAdjustError(f"change type {name!r} does not exist")
    updated["rules"]["change_types"] = remaining
    return assert_valid_config(updated)


def add_expected_spelling(
    config: Mapping[str, Any], correct: str, pattern: str
) -> dict[str, Any]:
    updated = _copy(config)
    spellings: dict[str, str] = updated["rules"].setdefault("expected_spellings", {})
    if correct in spellings:
        raise ConfigAdjustError(f"expected spelling {correct!r} already exists")
    spellings[correct] = pattern
    return assert_valid_config(updated)


def remove_expected_spelling(config: Mapping[str, Any], correct: str) -> dict[str, Any]:
    updated = _copy(config)
    spellings: dict[str, str] = updated["rules"].setdefault("expected_spellings", {})
    if correct not in spellings:
        raise ConfigAdjustError(f"expected spelling {correct!r} does not exist")
    del spellings[correct]
    return assert_valid_config(updated)


def _copy(config: Mapping[str, Any]) -> dict[str, Any]:
    updated = copy.deepcopy(dict(config))
    rules = updated.get("rules")
    if not isinstance(rules, dict):
        raise ConfigAdjustError("config has no rules section")
    return updated


__all__ = [
    "ConfigAdjustError",
    "add_category",
    "add_change_type",
    "add_expected_spelling",
    "remove_category",
    "remove_change_type",
    "remove_expected_spelling",
]
