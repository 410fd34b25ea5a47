"""Output rendering abstraction for the changelog-utils CLI.

File: src/changelog_utils/ui/render.py

Purpose
- Provide a thin rendering layer for CLI output.
- Respect NO_COLOR environment variable and --no-color CLI flag.

What should be included in this file
- CLIRenderer class with methods for common output patterns.
- Factory function to create a renderer with appropriate settings.

Functional requirements
- Plain-text rendering must always work without external dependencies.
- Lint diagnostics render one per line as ``path:line: severity: message [rule]``.

Non-functional requirements
- No mandatory dependencies beyond the standard library.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Sequence

    from changelog_utils.linting.diagnostics import LintReport

_GREEN: Final[str] = "\033[32m"
_RED: Final[str] = "\033[31m"
_YELLOW: Final[str] = "\033[33m"
_RESET: Final[str] = "\033[0m"


def _color_allowed(no_color_flag: bool) -> bool:
    """Check whether color output should be attempted."""

    if no_color_flag:
        return False
    if os.environ.get("NO_COLOR", ""):
        return False
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


class CLIRenderer:
    """Thin CLI output renderer.

    Produces clean, deterministic plain-text output.
    Respects ``NO_COLOR`` env var and ``--no-color`` flag.
    """

    def __init__(self, *, no_color: bool = False, verbose: bool = False) -> None:
        self.verbose = verbose
        self._color = _color_allowed(no_color)

    def heading(self, text: str) -> None:
        print(text)

    def kv(self, key: str, value: object) -> None:
        print(f"{key}: {value}")

    def text(self, line: str) -> None:
        print(line)

    def raw(self, content: str) -> None:
        """Write ``content`` verbatim, without adding a newline."""

        sys.stdout.write(content)

    def blank(self) -> None:
        print()

    def section(self, title: str) -> None:
        print(f"\n{title}")

    def warning(self, text: str) -> None:
        print(f"  {self._paint('Warning', _YELLOW)}: {text}")

    def items(self, entries: Sequence[str], *, prefix: str = "- ") -> None:
        for entry in entries:
            print(f"  {prefix}{entry}")

    def ok(self, label: str) -> None:
        print(f"  {self._paint('OK', _GREEN)}  {label}")

    def fail(self, label: str) -> None:
        print(f"  {self._paint('FAIL', _RED)}  {label}")

    def lint_report(self, report: LintReport, *, path: str) -> None:
        """Print diagnostics, notes, and the summary line of a lint run."""

        for item in report.diagnostics:
            severity = item.severity.value
            if item.is_fixable:
                severity = self._paint(severity, _YELLOW)
            else:
                severity = self._paint(severity, _RED)
            print(f"{path}:{item.line_number}: {severity}: {item.message} [{item.rule_id.value}]")
        for note in report.notes:
            print(f"note: {note}")
        if report.is_clean:
            print(self._paint(f"{path}: no problems found", _GREEN))
            return
        print(
            f"Summary: errors={report.error_count} fixable={report.fixable_count} "
            f"total={len(report.diagnostics)}"
        )

    def _paint(self, text: str, color: str) -> str:
        if not self._color:
            return text
        return f"{color}{text}{_RESET}"


def create_renderer(*, no_color: bool = False, verbose: bool = False) -> CLIRenderer:
    """Create a CLI renderer with the given settings."""

    return CLIRenderer(no_color=no_color, verbose=verbose)


__all__ = ["CLIRenderer", "create_renderer"]
