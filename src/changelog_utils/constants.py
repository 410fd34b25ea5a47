"""Stable constants shared across the changelog engine and its CLI."""

from __future__ import annotations

from typing import Final

# Schema version for persisted config files.
CONFIG_SCHEMA_VERSION: Final[int] = 1

# Default file names, relative to the working directory unless overridden.
DEFAULT_CHANGELOG_PATH: Final[str] = "CHANGELOG.md"
DEFAULT_CONFIG_FILE: Final[str] = "clconfig.toml"
LEGACY_CONFIG_FILE: Final[str] = ".clconfig.json"

# Inline escape directive markers.
ESCAPE_DISABLE_ALL: Final[str] = "clu-disable-next-line"
ESCAPE_DISABLE_DUPLICATE_PR: Final[str] = "clu-disable-next-line-duplicate-pr"

# Canonical whitespace runs of an entry line:
# ``<ws0>-<ws1>(category)<ws2>[#N]<ws3>(link)<ws4>description``.
CANONICAL_ENTRY_SPACING: Final[tuple[str, str, str, str, str]] = ("", " ", " ", "", " ")

UNRELEASED_HEADING: Final[str] = "## Unreleased"

DEFAULT_CHANGE_TYPES: Final[tuple[tuple[str, str], ...]] = (
    ("Features", "feat"),
    ("Improvements", "imp"),
    ("Bug Fixes", "fix"),
)

__all__ = [
    "CANONICAL_ENTRY_SPACING",
    "CONFIG_SCHEMA_VERSION",
    "DEFAULT_CHANGELOG_PATH",
    "DEFAULT_CHANGE_TYPES",
    "DEFAULT_CONFIG_FILE",
    "ESCAPE_DISABLE_ALL",
    "ESCAPE_DISABLE_DUPLICATE_PR",
    "LEGACY_CONFIG_FILE",
    "UNRELEASED_HEADING",
]
