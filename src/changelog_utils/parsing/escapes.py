"""Recognition and rendering of inline ``clu-disable-next-line`` escape directives."""

from __future__ import annotations

import re
from typing import Final

from changelog_utils.constants import ESCAPE_DISABLE_ALL, ESCAPE_DISABLE_DUPLICATE_PR
from changelog_utils.domain.models import Escape, EscapeKind

# The duplicate-PR marker extends the disable-all marker, so it is matched first.
_ESCAPE_PATTERNS: Final[tuple[tuple[EscapeKind, re.Pattern[str]], ...]] = (
    (
        EscapeKind.DISABLE_DUPLICATE_PR,
        re.compile(
            rf"^\s*<!--\s*{re.escape(ESCAPE_DISABLE_DUPLICATE_PR)}(?::(?P<reason>.*?))?\s*-->\s*$"
        ),
    ),
    (
        EscapeKind.DISABLE_ALL,
        re.compile(rf"^\s*<!--\s*{re.escape(ESCAPE_DISABLE_ALL)}(?::(?P<reason>.*?))?\s*-->\s*$"),
    ),
)


def parse_escape(line: str, line_number: int) -> Escape | None:
    """Return the escape directive on ``line``, or None when it is not one."""

    for kind, pattern in _ESCAPE_PATTERNS:
        match = pattern.fullmatch(line)
        if match is None:
            continue
        reason = match.group("reason")
        justification = reason.strip() if reason is not None and reason.strip() else None
        return Escape(kind=kind, justification=justification, line_number=line_number, raw=line)
    return None


def render_escape(kind: EscapeKind, justification: str | None = None) -> str:
    marker = ESCAPE_DISABLE_ALL if kind is EscapeKind.DISABLE_ALL else ESCAPE_DISABLE_DUPLICATE_PR
    if justification:
        return f"<!-- {marker}: {justification.strip()} -->"
    return f"<!-- {marker} -->"


__all__ = ["parse_escape", "render_escape"]
