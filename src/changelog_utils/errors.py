"""Error taxonomy for the changelog engine.

Structural problems are raised; content problems are reported as
``Diagnostic`` values by the linter and never raised.
"""

from __future__ import annotations


class ChangelogError(Exception):
    """Base class for all engine failures."""


class ParseError(ChangelogError):
    """Raised when the Markdown structure cannot be turned into a model."""

    def __init__(self, line_number: int, reason: str) -> None:
        self.line_number = line_number
        self.reason = reason
        super().__init__(f"line {line_number}: {reason}")


class ReleaseError(ChangelogError):
    """Base class for release-cutting and release lookup failures."""


class EmptyUnreleasedError(ReleaseError):
    """Raised when there are no unreleased entries to cut a release from."""


class VersionOrderError(ReleaseError):
    """Raised when a new version is not newer than the latest release."""


class ReleaseNotFoundError(ReleaseError):
    """Raised when a requested release version is not in the changelog."""


class EntryCheckError(ChangelogError):
    """Base class for pull-request entry checks against a diff."""


class NoUnreleasedError(EntryCheckError):
    """Raised when the changelog has no Unreleased release."""


class MissingEntryError(EntryCheckError):
    """Raised when no entry for a pull request was added in the diff."""


class InvalidEntryError(ChangelogError):
    """Raised when a new entry cannot be added with the given inputs."""


class SuggestionError(ChangelogError):
    """Raised when an external description suggestion is not usable."""


__all__ = [
    "ChangelogError",
    "EmptyUnreleasedError",
    "EntryCheckError",
    "InvalidEntryError",
    "MissingEntryError",
    "NoUnreleasedError",
    "ParseError",
    "ReleaseError",
    "ReleaseNotFoundError",
    "SuggestionError",
    "VersionOrderError",
]
