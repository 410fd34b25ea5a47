"""Module entrypoint for ``python -m changelog_utils``."""

from __future__ import annotations

from changelog_utils.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
