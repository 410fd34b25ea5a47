"""Check that a pull request's diff adds its Unreleased changelog entry."""

from __future__ import annotations

from typing import TYPE_CHECKING

from changelog_utils.errors import MissingEntryError, NoUnreleasedError

if TYPE_CHECKING:
    from changelog_utils.domain.models import Changelog, Entry


def added_lines(diff: str) -> list[str]:
    """Lines added by a unified diff, without the ``+`` marker or file headers."""

    return [
        line[1:]
        for line in diff.splitlines()
        if line.startswith("+") and not line.startswith("+++")
    ]


def check_diff(model: Changelog, diff: str, pr_number: int) -> Entry:
    """Return the Unreleased entry for ``pr_number`` when the diff adds it.

    Raises ``NoUnreleasedError`` without an Unreleased release and
    ``MissingEntryError`` when the entry is absent or was not added by ``diff``.
    """

    unreleased = model.unreleased
    if unreleased is None:
        raise NoUnreleasedError("changelog has no Unreleased release")

    entry = next(
        (item for item in unreleased.iter_entries() if item.pr_number == pr_number), None
    )
    if entry is None:
        raise MissingEntryError(f"no Unreleased entry found for PR #{pr_number}")

    marker = f"[#{pr_number}]"
    if not any(marker in line for line in added_lines(diff)):
        raise MissingEntryError(
            f"the entry for PR #{pr_number} is not part of the diff; "
            "it was probably added in a different pull request"
        )
    return entry


__all__ = ["added_lines", "check_diff"]
