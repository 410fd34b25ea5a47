"""Executable CLI entrypoint for ``changelog_utils``."""

from __future__ import annotations

import sys
import traceback
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence


class ExitCode(IntEnum):
    """Process exit codes shared by every ``clu`` command."""

    SUCCESS = 0
    LINT_FAILED = 1
    CONFIG_ERROR = 2
    CHANGELOG_ERROR = 3
    INTERNAL_ERROR = 4


def cli_entrypoint(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and turn every outcome, including crashes, into an exit code."""

    try:
        from changelog_utils.ui.cli import run_cli

        return _coerce_exit_code(run_cli(argv))
    except SystemExit as exc:
        return _coerce_exit_code(exc.code)
    except Exception as exc:  # noqa: BLE001 - last-resort mapping at the process boundary.
        code = _exit_code_for(exc)
        if code is ExitCode.INTERNAL_ERROR:
            traceback.print_exception(exc, file=sys.stderr)
        else:
            _stderr_line(f"error: {str(exc).strip() or type(exc).__name__}")
        return int(code)


def console_entrypoint() -> None:
    """Console-script entrypoint for ``clu``."""

    raise SystemExit(cli_entrypoint(sys.argv[1:]))


def _coerce_exit_code(raw_code: object) -> int:
    if raw_code is None:
        return int(ExitCode.SUCCESS)
    if isinstance(raw_code, int):
        return raw_code if raw_code in {int(code) for code in ExitCode} else int(ExitCode.INTERNAL_ERROR)
    text = str(raw_code).strip()
    if text:
        _stderr_line(text)
    return int(ExitCode.INTERNAL_ERROR)


def _exit_code_for(exc: BaseException) -> ExitCode:
    from changelog_utils.config import ConfigAdjustError, ConfigLoadError, ConfigValidationError
    from changelog_utils.errors import ChangelogError

    table: tuple[tuple[tuple[type[BaseException], ...], ExitCode], ...] = (
        ((ConfigAdjustError, ConfigLoadError, ConfigValidationError), ExitCode.CONFIG_ERROR),
        ((ChangelogError, FileNotFoundError, IsADirectoryError, PermissionError), ExitCode.CHANGELOG_ERROR),
    )
    for link in _causes(exc):
        for error_types, code in table:
            if isinstance(link, error_types):
                return code
    return ExitCode.INTERNAL_ERROR


def _causes(exc: BaseException) -> Iterator[BaseException]:
    """Yield ``exc`` and the exceptions it was raised from, stopping on cycles."""

    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        yield current
        if current.__cause__ is not None:
            current = current.__cause__
        elif current.__suppress_context__:
            current = None
        else:
            current = current.__context__


def _stderr_line(message: str) -> None:
    sys.stderr.write(message.rstrip("\n") + "\n")


__all__ = ["ExitCode", "cli_entrypoint", "console_entrypoint"]
