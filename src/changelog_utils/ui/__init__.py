"""UI package exports for the CLI and its rendering helpers."""

from changelog_utils.ui.cli import CLIError, build_parser, main, run_cli
from changelog_utils.ui.render import CLIRenderer, create_renderer

__all__ = [
    "CLIError",
    "CLIRenderer",
    "build_parser",
    "create_renderer",
    "main",
    "run_cli",
]
