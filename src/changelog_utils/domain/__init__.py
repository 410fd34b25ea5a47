"""Domain model for parsed changelogs."""

from changelog_utils.domain.models import (
    ChangeTypeSection,
    Changelog,
    Entry,
    Escape,
    EscapeKind,
    PullRequestRef,
    Release,
    ReleaseType,
    Version,
)

__all__ = [
    "ChangeTypeSection",
    "Changelog",
    "Entry",
    "Escape",
    "EscapeKind",
    "PullRequestRef",
    "Release",
    "ReleaseType",
    "Version",
]
