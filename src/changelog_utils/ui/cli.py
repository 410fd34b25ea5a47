"""Command-line interface router for changelog-utils."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Final

import yaml

from changelog_utils.config import (
    ConfigAdjustError,
    ConfigLoadError,
    ConfigValidationError,
    add_category,
    add_change_type,
    add_expected_spelling,
    assert_valid_config,
    default_config,
    dump_effective_config,
    find_config_file,
    load_config,
    load_config_payload,
    merge_config,
    remove_category,
    remove_change_type,
    remove_expected_spelling,
)
from changelog_utils.domain.models import Changelog, PullRequestRef, ReleaseType, Version
from changelog_utils.errors import (
    EntryCheckError,
    InvalidEntryError,
    ParseError,
    ReleaseError,
)
from changelog_utils.fixing import fix_changelog
from changelog_utils.integrations.pull_requests import (
    StaticPullRequestSource,
    resolve_open_pull_requests,
)
from changelog_utils.linting import format_json, lint_report
from changelog_utils.main import ExitCode
from changelog_utils.observability import correlation_scope, setup_logging, shutdown_logging
from changelog_utils.operations import (
    add_entry,
    check_diff,
    derive_rules_from_changelog,
    empty_changelog_text,
    get_release,
    render_release,
)
from changelog_utils.parsing import parse, serialize
from changelog_utils.releasing import cut_release, next_version
from changelog_utils.rules import RuleSet
from changelog_utils.ui.render import CLIRenderer, create_renderer

INIT_CONFIG_FILE: Final[str] = "clconfig.yaml"
_EDITABLE_SUFFIXES: Final[frozenset[str]] = frozenset({".yaml", ".yml"})


@dataclass(slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = ExitCode.LINT_FAILED

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class _Workspace:
    config: dict[str, Any]
    ruleset: RuleSet
    changelog_path: Path


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="clu",
        description=(
            "changelog-utils: lint, fix and release Keep-a-Changelog files.\n\n"
            "Common workflows:\n"
            "  clu lint                    Report problems in CHANGELOG.md\n"
            "  clu fix                     Apply every automatic fix\n"
            "  clu release v1.2.0          Turn Unreleased into a dated release\n"
            "  clu init                    Write a config derived from the changelog\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to a config file (default: ./clconfig.toml, ./clconfig.yaml or ./.clconfig.json).",
    )
    common.add_argument(
        "--changelog",
        dest="changelog_path",
        default=None,
        help="Path to the changelog (default: changelog.path from config).",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Show debug logging on stderr.",
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Disable colored output (also respects NO_COLOR env var).",
    )

    pr_lookup = argparse.ArgumentParser(add_help=False)
    pr_lookup.add_argument(
        "--open-pr",
        dest="open_prs",
        action="append",
        type=int,
        default=None,
        metavar="N",
        help="Number of a currently open pull request (repeatable).",
    )
    pr_lookup.add_argument(
        "--no-open-prs",
        action="store_true",
        default=False,
        help="Declare that no pull requests are open.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # lint ----------------------------------------------------------------
    lint_parser = subparsers.add_parser(
        "lint",
        parents=[common, pr_lookup],
        help="Report problems without modifying the changelog",
        description=(
            "Lint the changelog against the configured rules.\n"
            "Exits 1 when any non-fixable error is found.\n\n"
            "Examples:\n"
            "  clu lint\n"
            "  clu lint --format json\n"
            "  clu lint --open-pr 12 --open-pr 15\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    lint_parser.add_argument("--format", choices=("text", "json"), default="text")
    lint_parser.set_defaults(handler=_cmd_lint)

    # fix -----------------------------------------------------------------
    fix_parser = subparsers.add_parser(
        "fix",
        parents=[common, pr_lookup],
        help="Apply automatic fixes in place",
        description=(
            "Apply every fixable diagnostic and rewrite the changelog.\n\n"
            "Examples:\n"
            "  clu fix\n"
            "  clu fix --check\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    fix_parser.add_argument(
        "--check",
        action="store_true",
        default=False,
        help="Do not write; exit 1 when fixes would be applied.",
    )
    fix_parser.add_argument("--json", action="store_true", default=False)
    fix_parser.set_defaults(handler=_cmd_fix)

    # release -------------------------------------------------------------
    release_parser = subparsers.add_parser(
        "release",
        parents=[common],
        help="Turn the Unreleased section into a versioned release",
        description=(
            "Rename Unreleased to a dated release and open a new Unreleased section.\n\n"
            "Examples:\n"
            "  clu release v1.4.0\n"
            "  clu release --bump minor --date 2024-05-01\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    release_parser.add_argument("version", nargs="?", default=None, help="Version such as v1.4.0.")
    release_parser.add_argument(
        "--bump",
        choices=[item.value for item in ReleaseType],
        default=None,
        help="Derive the version from the newest release.",
    )
    release_parser.add_argument(
        "--date",
        dest="release_date",
        default=None,
        help="Release date as YYYY-MM-DD (default: today).",
    )
    release_parser.add_argument("--json", action="store_true", default=False)
    release_parser.set_defaults(handler=_cmd_release)

    # get -----------------------------------------------------------------
    get_parser = subparsers.add_parser(
        "get",
        parents=[common],
        help="Print one release",
        description=(
            "Print the Markdown of one release.\n\n"
            "Examples:\n"
            "  clu get v1.2.0\n"
            "  clu get unreleased\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    get_parser.add_argument("version", help="Version such as v1.2.0, or 'unreleased'.")
    get_parser.set_defaults(handler=_cmd_get)

    # add -----------------------------------------------------------------
    add_parser = subparsers.add_parser(
        "add",
        parents=[common],
        help="Add an entry to the Unreleased section",
        description=(
            "Insert a canonical entry at the top of an Unreleased change type.\n\n"
            "Examples:\n"
            '  clu add --change-type "Bug Fixes" --category cli --pr 42 \\\n'
            '      --description "Fix crash on empty input"\n'
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    add_parser.add_argument("--change-type", required=True)
    add_parser.add_argument("--category", required=True)
    add_parser.add_argument("--pr", dest="pr_number", type=int, required=True)
    add_parser.add_argument("--description", required=True)
    add_parser.add_argument(
        "--link", default=None, help="PR link (default: derived from target_repository)."
    )
    add_parser.set_defaults(handler=_cmd_add)

    # check-diff ----------------------------------------------------------
    diff_parser = subparsers.add_parser(
        "check-diff",
        parents=[common],
        help="Verify that a PR diff adds its changelog entry",
        description=(
            "Check that Unreleased holds an entry for the PR and that the diff adds it.\n\n"
            "Examples:\n"
            "  git diff main -- CHANGELOG.md | clu check-diff --pr 42\n"
            "  clu check-diff --pr 42 --diff pr.diff\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    diff_parser.add_argument("--pr", dest="pr_number", type=int, required=True)
    diff_parser.add_argument(
        "--diff", dest="diff_path", default="-", help="Unified diff file, '-' for stdin."
    )
    diff_parser.add_argument("--json", action="store_true", default=False)
    diff_parser.set_defaults(handler=_cmd_check_diff)

    # init ----------------------------------------------------------------
    init_parser = subparsers.add_parser(
        "init",
        parents=[common],
        help="Create a config (and an empty changelog when missing)",
        description=(
            "Write clconfig.yaml with the categories and change types already used\n"
            "by the changelog. An empty changelog is created when none exists.\n\n"
            "Examples:\n"
            "  clu init --target-repository https://github.com/org/repo\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    init_parser.add_argument("--target-repository", default=None)
    init_parser.add_argument(
        "--force", action="store_true", default=False, help="Overwrite an existing config."
    )
    init_parser.set_defaults(handler=_cmd_init)

    # config --------------------------------------------------------------
    config_parser = subparsers.add_parser(
        "config",
        help="Show or edit configuration",
        description=(
            "Show the effective configuration or edit the rules of a YAML config.\n\n"
            "Examples:\n"
            "  clu config show --json\n"
            "  clu config add-category docs\n"
            '  clu config add-spelling GitHub "github"\n'
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    config_sub = config_parser.add_subparsers(dest="config_command", required=True)

    show_parser = config_sub.add_parser("show", parents=[common], help="Print effective config")
    show_parser.add_argument("--json", action="store_true", default=False)
    show_parser.set_defaults(handler=_cmd_config_show)

    for name, help_text, handler in (
        ("add-category", "Allow a new category", _cmd_config_add_category),
        ("remove-category", "Remove a category", _cmd_config_remove_category),
        ("remove-change-type", "Remove a change type", _cmd_config_remove_change_type),
        ("remove-spelling", "Remove an expected spelling", _cmd_config_remove_spelling),
    ):
        edit_parser = config_sub.add_parser(name, parents=[common], help=help_text)
        edit_parser.add_argument("name")
        edit_parser.set_defaults(handler=handler)

    add_type_parser = config_sub.add_parser(
        "add-change-type", parents=[common], help="Add a change type"
    )
    add_type_parser.add_argument("name")
    add_type_parser.add_argument("--short", default=None, help="PR title abbreviation.")
    add_type_parser.set_defaults(handler=_cmd_config_add_change_type)

    add_spelling_parser = config_sub.add_parser(
        "add-spelling", parents=[common], help="Add an expected spelling"
    )
    add_spelling_parser.add_argument("correct")
    add_spelling_parser.add_argument("pattern", help="Regex matching the wrong spellings.")
    add_spelling_parser.set_defaults(handler=_cmd_config_add_spelling)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return int(ExitCode.CONFIG_ERROR)

    setup_logging(None, verbose=_flag(namespace, "verbose"))
    try:
        with correlation_scope(command=_optional_str(getattr(namespace, "command", None))):
            result = handler(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return int(exc.exit_code)
    finally:
        shutdown_logging()
    return int(result)


def main(argv: Sequence[str] | None = None) -> int:
    """Compatibility wrapper for main-module wiring."""

    return run_cli(argv)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_lint(args: argparse.Namespace) -> int:
    workspace = _load_workspace(args)
    model = _read_changelog(workspace)
    report = lint_report(
        model, workspace.ruleset, open_pull_requests=_open_pull_requests(args, workspace)
    )

    if getattr(args, "format", "text") == "json":
        sys.stdout.write(format_json(report))
    else:
        _get_renderer(args).lint_report(report, path=_display_path(workspace.changelog_path))
    return int(ExitCode.SUCCESS) if report.passed else int(ExitCode.LINT_FAILED)


def _cmd_fix(args: argparse.Namespace) -> int:
    workspace = _load_workspace(args)
    model = _read_changelog(workspace)
    outcome = fix_changelog(
        model, workspace.ruleset, open_pull_requests=_open_pull_requests(args, workspace)
    )
    check_only = _flag(args, "check")
    if outcome.changed and not check_only:
        _write_changelog(workspace, outcome.changelog)

    remaining_errors = [item for item in outcome.remaining if not item.is_fixable]
    payload: dict[str, object] = {
        "command": "fix",
        "check": check_only,
        "changed": outcome.changed,
        "applied": [item.to_dict() for item in outcome.applied],
        "remaining": [item.to_dict() for item in outcome.remaining],
    }
    failed = bool(remaining_errors) or (check_only and outcome.changed)

    if _flag(args, "json"):
        _emit_json(payload)
        return int(ExitCode.LINT_FAILED) if failed else int(ExitCode.SUCCESS)

    renderer = _get_renderer(args)
    path = _display_path(workspace.changelog_path)
    if not outcome.changed:
        renderer.text(f"{path}: nothing to fix")
    elif check_only:
        renderer.text(f"{path}: {len(outcome.applied)} fix(es) would be applied")
    else:
        renderer.text(f"{path}: applied {len(outcome.applied)} fix(es)")
    if renderer.verbose and outcome.applied:
        renderer.items([str(item) for item in outcome.applied])
    if outcome.remaining:
        renderer.section("Remaining problems:")
        renderer.items([str(item) for item in outcome.remaining])
    return int(ExitCode.LINT_FAILED) if failed else int(ExitCode.SUCCESS)


def _cmd_release(args: argparse.Namespace) -> int:
    workspace = _load_workspace(args)
    model = _read_changelog(workspace)

    bump = _optional_str(getattr(args, "bump", None))
    raw_version = _optional_str(getattr(args, "version", None))
    if bump is not None and raw_version is not None:
        raise CLIError(
            "pass either a version or --bump, not both", exit_code=ExitCode.CONFIG_ERROR
        )
    try:
        if bump is not None:
            version = next_version(model, bump)
        elif raw_version is not None:
            version = Version.parse(raw_version)
        else:
            raise CLIError("a version or --bump is required", exit_code=ExitCode.CONFIG_ERROR)
    except ValueError as exc:
        raise CLIError(str(exc), exit_code=ExitCode.CONFIG_ERROR) from exc

    release_day = _release_date(getattr(args, "release_date", None))
    try:
        released = cut_release(model, version, release_day, ruleset=workspace.ruleset)
    except ReleaseError as exc:
        raise CLIError(str(exc), exit_code=ExitCode.CHANGELOG_ERROR) from exc
    _write_changelog(workspace, released)

    if _flag(args, "json"):
        _emit_json(
            {"command": "release", "version": str(version), "date": release_day.isoformat()}
        )
        return int(ExitCode.SUCCESS)
    _get_renderer(args).text(f"Released {version} ({release_day.isoformat()})")
    return int(ExitCode.SUCCESS)


def _cmd_get(args: argparse.Namespace) -> int:
    workspace = _load_workspace(args)
    model = _read_changelog(workspace)
    try:
        release = get_release(model, _require_str(getattr(args, "version", None), "version"))
    except ReleaseError as exc:
        raise CLIError(str(exc), exit_code=ExitCode.CHANGELOG_ERROR) from exc
    _get_renderer(args).raw(render_release(release))
    return int(ExitCode.SUCCESS)


def _cmd_add(args: argparse.Namespace) -> int:
    workspace = _load_workspace(args)
    model = _read_changelog(workspace)
    try:
        updated = add_entry(
            model,
            workspace.ruleset,
            change_type=_require_str(getattr(args, "change_type", None), "change type"),
            category=_require_str(getattr(args, "category", None), "category"),
            description=_require_str(getattr(args, "description", None), "description"),
            pr_number=int(args.pr_number),
            link=_optional_str(getattr(args, "link", None)),
        )
    except InvalidEntryError as exc:
        raise CLIError(str(exc), exit_code=ExitCode.CHANGELOG_ERROR) from exc
    _write_changelog(workspace, updated)
    _get_renderer(args).text(f"Added entry for PR #{args.pr_number}")
    return int(ExitCode.SUCCESS)


def _cmd_check_diff(args: argparse.Namespace) -> int:
    workspace = _load_workspace(args)
    model = _read_changelog(workspace)
    diff_text = _read_diff(_require_str(getattr(args, "diff_path", None), "diff"))
    pr_number = int(args.pr_number)
    try:
        entry = check_diff(model, diff_text, pr_number)
    except EntryCheckError as exc:
        if _flag(args, "json"):
            _emit_json({"command": "check-diff", "pr": pr_number, "ok": False, "reason": str(exc)})
            return int(ExitCode.LINT_FAILED)
        raise CLIError(str(exc), exit_code=ExitCode.LINT_FAILED) from exc

    if _flag(args, "json"):
        _emit_json(
            {
                "command": "check-diff",
                "pr": pr_number,
                "ok": True,
                "line_number": entry.line_number,
                "entry": entry.render(),
            }
        )
        return int(ExitCode.SUCCESS)
    _get_renderer(args).ok(f"PR #{pr_number}: {entry.render()}")
    return int(ExitCode.SUCCESS)


def _cmd_init(args: argparse.Namespace) -> int:
    config_path = Path(_optional_str(getattr(args, "config_path", None)) or INIT_CONFIG_FILE)
    if config_path.suffix.lower() not in _EDITABLE_SUFFIXES:
        raise CLIError(
            f"init writes YAML configs; {config_path} is not a .yaml file",
            exit_code=ExitCode.CONFIG_ERROR,
        )
    if config_path.exists() and not _flag(args, "force"):
        raise CLIError(
            f"{config_path} already exists; pass --force to overwrite",
            exit_code=ExitCode.CONFIG_ERROR,
        )

    changelog_path = Path(_optional_str(getattr(args, "changelog_path", None)) or "CHANGELOG.md")
    renderer = _get_renderer(args)
    overlay: dict[str, Any] = {"changelog": {"path": changelog_path.as_posix()}}
    target_repository = _optional_str(getattr(args, "target_repository", None))
    if target_repository is not None:
        overlay["changelog"]["target_repository"] = target_repository

    if changelog_path.exists():
        derived = derive_rules_from_changelog(_read_text(changelog_path))
        rules: dict[str, Any] = {"categories": derived["categories"]}
        if derived["change_types"]:
            rules["change_types"] = derived["change_types"]
        overlay["rules"] = rules
        renderer.kv("Derived categories", ", ".join(derived["categories"]) or "(none)")
    else:
        changelog_path.write_text(empty_changelog_text(), encoding="utf-8")
        renderer.kv("Created", changelog_path.as_posix())

    config = assert_valid_config(merge_config(default_config(), overlay))
    _write_yaml_config(config_path, config)
    renderer.kv("Wrote config", config_path.as_posix())
    return int(ExitCode.SUCCESS)


def _cmd_config_show(args: argparse.Namespace) -> int:
    workspace = _load_workspace(args)
    if _flag(args, "json"):
        sys.stdout.write(dump_effective_config(workspace.config) + "\n")
        return int(ExitCode.SUCCESS)
    renderer = _get_renderer(args)
    renderer.text(json.dumps(workspace.config, indent=2, sort_keys=True, ensure_ascii=False))
    return int(ExitCode.SUCCESS)


def _cmd_config_add_category(args: argparse.Namespace) -> int:
    return _edit_config(args, lambda config: add_category(config, args.name))


def _cmd_config_remove_category(args: argparse.Namespace) -> int:
    return _edit_config(args, lambda config: remove_category(config, args.name))


def _cmd_config_add_change_type(args: argparse.Namespace) -> int:
    short = _optional_str(getattr(args, "short", None))
    return _edit_config(args, lambda config: add_change_type(config, args.name, short))


def _cmd_config_remove_change_type(args: argparse.Namespace) -> int:
    return _edit_config(args, lambda config: remove_change_type(config, args.name))


def _cmd_config_add_spelling(args: argparse.Namespace) -> int:
    return _edit_config(
        args, lambda config: add_expected_spelling(config, args.correct, args.pattern)
    )


def _cmd_config_remove_spelling(args: argparse.Namespace) -> int:
    return _edit_config(args, lambda config: remove_expected_spelling(config, args.name))


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _get_renderer(args: argparse.Namespace) -> CLIRenderer:
    no_color = _flag(args, "no_color")
    verbose = _flag(args, "verbose")
    return create_renderer(no_color=no_color, verbose=verbose)


def _display_path(path: Path) -> str:
    try:
        return path.resolve().relative_to(Path.cwd().resolve()).as_posix()
    except ValueError:
        return path.as_posix()


# ---------------------------------------------------------------------------
# Config and changelog file helpers
# ---------------------------------------------------------------------------


def _load_workspace(args: argparse.Namespace) -> _Workspace:
    config_path = _optional_str(getattr(args, "config_path", None))
    overrides: dict[str, object] = {}
    changelog_override = _optional_str(getattr(args, "changelog_path", None))
    if changelog_override is not None:
        overrides["changelog.path"] = changelog_override

    try:
        config = load_config(config_path, cli_overrides=overrides)
        ruleset = RuleSet.from_config(config)
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=ExitCode.CONFIG_ERROR) from exc

    setup_logging(config.get("observability"), verbose=_flag(args, "verbose"))
    return _Workspace(
        config=config,
        ruleset=ruleset,
        changelog_path=Path(config["changelog"]["path"]).expanduser(),
    )


def _read_changelog(workspace: _Workspace) -> Changelog:
    path = workspace.changelog_path
    if not path.is_file():
        raise CLIError(
            f"changelog not found: {path} (run `clu init` to create one)",
            exit_code=ExitCode.CHANGELOG_ERROR,
        )
    try:
        return parse(_read_text(path), legacy_version=workspace.ruleset.legacy_version)
    except ParseError as exc:
        raise CLIError(f"{path}: {exc}", exit_code=ExitCode.CHANGELOG_ERROR) from exc


def _write_changelog(workspace: _Workspace, model: Changelog) -> None:
    workspace.changelog_path.write_text(serialize(model), encoding="utf-8")


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CLIError(f"unable to read {path}: {exc}", exit_code=ExitCode.CHANGELOG_ERROR) from exc
    except UnicodeDecodeError as exc:
        raise CLIError(
            f"{path} is not valid UTF-8 (byte offset {exc.start})",
            exit_code=ExitCode.CHANGELOG_ERROR,
        ) from exc


def _read_diff(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return _read_text(Path(source).expanduser())


def _open_pull_requests(
    args: argparse.Namespace, workspace: _Workspace
) -> frozenset[PullRequestRef] | None:
    numbers: list[int] = list(getattr(args, "open_prs", None) or [])
    if not numbers and not _flag(args, "no_open_prs"):
        return None
    if not workspace.ruleset.target_repository:
        raise CLIError(
            "--open-pr/--no-open-prs require changelog.target_repository",
            exit_code=ExitCode.CONFIG_ERROR,
        )
    source = StaticPullRequestSource.from_numbers(workspace.ruleset.target_repository, numbers)
    return resolve_open_pull_requests(source)


def _editable_config_path(args: argparse.Namespace) -> Path:
    explicit = _optional_str(getattr(args, "config_path", None))
    candidate = Path(explicit).expanduser() if explicit is not None else find_config_file()
    if candidate is None:
        return Path(INIT_CONFIG_FILE)
    if candidate.suffix.lower() not in _EDITABLE_SUFFIXES:
        raise CLIError(
            f"config editing supports YAML files only; {candidate} is not .yaml/.yml",
            exit_code=ExitCode.CONFIG_ERROR,
        )
    return candidate


def _edit_config(
    args: argparse.Namespace, edit: Callable[[dict[str, Any]], dict[str, Any]]
) -> int:
    path = _editable_config_path(args)
    try:
        payload = load_config_payload(path) if path.exists() else {}
        current = assert_valid_config(merge_config(default_config(), payload))
        updated = edit(current)
    except (ConfigLoadError, ConfigValidationError, ConfigAdjustError) as exc:
        raise CLIError(str(exc), exit_code=ExitCode.CONFIG_ERROR) from exc
    _write_yaml_config(path, updated)
    _get_renderer(args).kv("Updated config", path.as_posix())
    return int(ExitCode.SUCCESS)


def _write_yaml_config(path: Path, config: Mapping[str, object]) -> None:
    rendered = yaml.safe_dump(
        dict(config), sort_keys=True, default_flow_style=False, allow_unicode=True
    )
    path.write_text(rendered, encoding="utf-8")


# ---------------------------------------------------------------------------
# Argument helpers
# ---------------------------------------------------------------------------


def _release_date(value: object) -> date:
    raw = _optional_str(value)
    if raw is None:
        return date.today()
    try:
        return date.fromisoformat(raw)
    except ValueError as exc:
        raise CLIError(
            f"invalid --date {raw!r}: expected YYYY-MM-DD", exit_code=ExitCode.CONFIG_ERROR
        ) from exc


def _require_str(value: object, name: str) -> str:
    if not isinstance(value, str):
        raise CLIError(f"invalid {name}: expected string", exit_code=ExitCode.CONFIG_ERROR)
    cleaned = value.strip()
    if not cleaned:
        raise CLIError(f"invalid {name}: value cannot be empty", exit_code=ExitCode.CONFIG_ERROR)
    return cleaned


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise CLIError("invalid optional string argument", exit_code=ExitCode.CONFIG_ERROR)
    cleaned = value.strip()
    return cleaned or None


def _flag(args: argparse.Namespace, name: str) -> bool:
    value = getattr(args, name, False)
    return bool(value)


__all__ = [
    "CLIError",
    "build_parser",
    "main",
    "run_cli",
]


if __name__ == "__main__":
    raise SystemExit(run_cli())
