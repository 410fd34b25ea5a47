"""
changelog-utils — unit tests for the CLI router

File: tests/unit/ui/test_cli.py

Purpose
- Exercise every subcommand in-process through ``run_cli``.
- Pin exit codes, stdout contracts and on-disk side effects.

What this test file should cover
- lint/fix/release/get/add/check-diff/init/config happy paths.
- Exit code routing for config errors (2) and changelog errors (3).
- Duplicate-PR escapes with and without an open pull request set.

Functional requirements
- Runs in a temporary working directory; no network, no real config.

Non-functional requirements
- Deterministic; dates are always passed explicitly.
"""

from __future__ import annotations

import io
import json
import os
from pathlib import Path

import pytest
import yaml

from changelog_utils.main import cli_entrypoint
from changelog_utils.ui.cli import run_cli

CONFIG = """\
changelog:
  target_repository: https://github.com/org/repo
rules:
  categories: [cli, docs]
  change_types:
    - long: Features
      short: feat
    - long: Bug Fixes
      short: fix
"""

CHANGELOG = """\
# Changelog

## Unreleased

### Features

- (cli) [#12](https://github.com/org/repo/pull/12) Add lint command

## [v1.1.0](https://github.com/org/repo/releases/tag/v1.1.0) - 2024-03-01

### Bug Fixes

- (cli) [#10](https://github.com/org/repo/pull/10) Fix crash
"""

ESCAPED_DUPLICATE = CHANGELOG.replace(
    "- (cli) [#10](https://github.com/org/repo/pull/10) Fix crash\n",
    "<!-- clu-disable-next-line-duplicate-pr: backport -->\n"
    "- (cli) [#12](https://github.com/org/repo/pull/12) Add lint command\n",
)

DIFF = """\
--- a/CHANGELOG.md
+++ b/CHANGELOG.md
@@ -5,2 +5,4 @@
 ### Features

+- (cli) [#12](https://github.com/org/repo/pull/12) Add lint command
+
"""


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("NO_COLOR", raising=False)
    for key in list(os.environ):
        if key.startswith("CLU_"):
            monkeypatch.delenv(key)
    (tmp_path / "clconfig.yaml").write_text(CONFIG, encoding="utf-8")
    (tmp_path / "CHANGELOG.md").write_text(CHANGELOG, encoding="utf-8")
    return tmp_path


def _changelog(root: Path) -> str:
    return (root / "CHANGELOG.md").read_text(encoding="utf-8")


def _config(root: Path) -> dict[str, object]:
    loaded = yaml.safe_load((root / "clconfig.yaml").read_text(encoding="utf-8"))
    assert isinstance(loaded, dict)
    return loaded


# ---------------------------------------------------------------------------
# lint
# ---------------------------------------------------------------------------


def test_lint_clean_changelog(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run_cli(["lint"]) == 0
    assert capsys.readouterr().out == "CHANGELOG.md: no problems found\n"


def test_lint_reports_errors_and_exits_one(
    workspace: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (workspace / "CHANGELOG.md").write_text(
        CHANGELOG.replace("(cli) [#10]", "(web) [#10]"), encoding="utf-8"
    )

    assert run_cli(["lint"]) == 1
    out = capsys.readouterr().out
    assert "CHANGELOG.md:13: error: invalid change category: (web) [category]\n" in out
    assert out.endswith("Summary: errors=1 fixable=0 total=1\n")


def test_lint_passes_with_only_fixable_problems(
    workspace: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (workspace / "CHANGELOG.md").write_text(
        CHANGELOG.replace("Add lint command", "add lint command"), encoding="utf-8"
    )

    assert run_cli(["lint"]) == 0
    out = capsys.readouterr().out
    assert (
        "CHANGELOG.md:7: fixable: PR description should start with capital letter: "
        "'add lint command' [description-capital]\n"
    ) in out
    assert "Summary: errors=0 fixable=1 total=1" in out


def test_lint_json_format(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run_cli(["lint", "--format", "json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["summary"]["passed"] is True
    assert payload["diagnostics"] == []
    assert payload["notes"] == []


def test_lint_duplicate_pr_escape_depends_on_open_pull_requests(
    workspace: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (workspace / "CHANGELOG.md").write_text(ESCAPED_DUPLICATE, encoding="utf-8")

    assert run_cli(["lint"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("note: open pull request lookup unavailable")

    assert run_cli(["lint", "--open-pr", "12"]) == 1
    assert "escape not honored because the pull request is still open" in capsys.readouterr().out

    assert run_cli(["lint", "--no-open-prs"]) == 0
    assert capsys.readouterr().out == "CHANGELOG.md: no problems found\n"


def test_open_pr_flags_require_target_repository(
    workspace: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (workspace / "clconfig.yaml").write_text("rules:\n  categories: [cli]\n", encoding="utf-8")

    assert run_cli(["lint", "--no-open-prs"]) == 2
    assert "require changelog.target_repository" in capsys.readouterr().err


# ---------------------------------------------------------------------------
# fix
# ---------------------------------------------------------------------------


def test_fix_rewrites_the_changelog(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (workspace / "CHANGELOG.md").write_text(
        CHANGELOG.replace("Add lint command", "add lint command"), encoding="utf-8"
    )

    assert run_cli(["fix"]) == 0
    assert capsys.readouterr().out == "CHANGELOG.md: applied 1 fix(es)\n"
    assert _changelog(workspace) == CHANGELOG

    assert run_cli(["fix"]) == 0
    assert capsys.readouterr().out == "CHANGELOG.md: nothing to fix\n"


def test_fix_check_does_not_write(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    broken = CHANGELOG.replace("Add lint command", "add lint command")
    (workspace / "CHANGELOG.md").write_text(broken, encoding="utf-8")

    assert run_cli(["fix", "--check"]) == 1
    assert capsys.readouterr().out == "CHANGELOG.md: 1 fix(es) would be applied\n"
    assert _changelog(workspace) == broken


def test_fix_json_reports_remaining_errors(
    workspace: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (workspace / "CHANGELOG.md").write_text(
        CHANGELOG.replace("(cli) [#10]", "(web) [#10]").replace(
            "Add lint command", "add lint command"
        ),
        encoding="utf-8",
    )

    assert run_cli(["fix", "--json"]) == 1
    payload = json.loads(capsys.readouterr().out)
    assert payload["changed"] is True
    assert [item["rule"] for item in payload["applied"]] == ["description-capital"]
    assert [item["rule"] for item in payload["remaining"]] == ["category"]
    assert "(web) [#10]" in _changelog(workspace)
    assert "Add lint command" in _changelog(workspace)


# ---------------------------------------------------------------------------
# release
# ---------------------------------------------------------------------------


def test_release_with_explicit_version(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run_cli(["release", "v1.2.0", "--date", "2024-05-01"]) == 0
    assert capsys.readouterr().out == "Released v1.2.0 (2024-05-01)\n"
    assert _changelog(workspace) == CHANGELOG.replace(
        "## Unreleased\n\n",
        "## Unreleased\n\n"
        "## [v1.2.0](https://github.com/org/repo/releases/tag/v1.2.0) - 2024-05-01\n\n",
    )

    assert run_cli(["lint"]) == 0


def test_release_with_bump_emits_json(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run_cli(["release", "--bump", "patch", "--date", "2024-05-01", "--json"]) == 0
    assert json.loads(capsys.readouterr().out) == {
        "command": "release",
        "date": "2024-05-01",
        "version": "v1.1.1",
    }
    assert "## [v1.1.1](" in _changelog(workspace)


@pytest.mark.parametrize(
    "args",
    [
        ["release", "v1.2.0", "--bump", "minor"],
        ["release"],
        ["release", "vX"],
        ["release", "v1.2.0", "--date", "2024-13-01"],
    ],
)
def test_release_argument_errors_exit_two(
    workspace: Path, capsys: pytest.CaptureFixture[str], args: list[str]
) -> None:
    assert run_cli(args) == 2
    assert capsys.readouterr().err.startswith("error: ")
    assert _changelog(workspace) == CHANGELOG


def test_release_older_version_exits_three(
    workspace: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    assert run_cli(["release", "v1.0.0", "--date", "2024-05-01"]) == 3
    assert "must be greater than the latest release v1.1.0" in capsys.readouterr().err
    assert _changelog(workspace) == CHANGELOG


# ---------------------------------------------------------------------------
# get / add / check-diff
# ---------------------------------------------------------------------------


def test_get_prints_one_release(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run_cli(["get", "v1.1.0"]) == 0
    assert capsys.readouterr().out == (
        "## [v1.1.0](https://github.com/org/repo/releases/tag/v1.1.0) - 2024-03-01\n"
        "\n"
        "### Bug Fixes\n"
        "\n"
        "- (cli) [#10](https://github.com/org/repo/pull/10) Fix crash\n"
    )

    assert run_cli(["get", "v9.9.9"]) == 3
    assert "release v9.9.9 not found" in capsys.readouterr().err


def test_add_inserts_a_canonical_entry(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = run_cli(
        [
            "add",
            "--change-type",
            "feat",
            "--category",
            "cli",
            "--pr",
            "13",
            "--description",
            "Add fix command",
        ]
    )

    assert code == 0
    assert capsys.readouterr().out == "Added entry for PR #13\n"
    assert (
        "- (cli) [#13](https://github.com/org/repo/pull/13) Add fix command\n"
        "- (cli) [#12](https://github.com/org/repo/pull/12) Add lint command\n"
    ) in _changelog(workspace)
    assert run_cli(["lint"]) == 0


def test_add_rejects_unknown_category(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = run_cli(
        [
            "add",
            "--change-type",
            "Features",
            "--category",
            "web",
            "--pr",
            "13",
            "--description",
            "Add fix command",
        ]
    )
    assert code == 3
    assert "'web' is not a configured category" in capsys.readouterr().err
    assert _changelog(workspace) == CHANGELOG


def test_check_diff_from_file_and_stdin(
    workspace: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    (workspace / "pr.diff").write_text(DIFF, encoding="utf-8")
    assert run_cli(["check-diff", "--pr", "12", "--diff", "pr.diff"]) == 0
    assert capsys.readouterr().out == (
        "  OK  PR #12: - (cli) [#12](https://github.com/org/repo/pull/12) Add lint command\n"
    )

    monkeypatch.setattr("sys.stdin", io.StringIO(DIFF))
    assert run_cli(["check-diff", "--pr", "12"]) == 0
    assert "OK  PR #12" in capsys.readouterr().out


def test_check_diff_failures(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (workspace / "pr.diff").write_text(DIFF, encoding="utf-8")

    assert run_cli(["check-diff", "--pr", "10", "--diff", "pr.diff"]) == 1
    assert "no Unreleased entry found for PR #10" in capsys.readouterr().err

    (workspace / "empty.diff").write_text("", encoding="utf-8")
    assert run_cli(["check-diff", "--pr", "12", "--diff", "empty.diff", "--json"]) == 1
    payload = json.loads(capsys.readouterr().out)
    assert payload["ok"] is False
    assert payload["pr"] == 12
    assert "not part of the diff" in payload["reason"]


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------


def test_init_creates_changelog_and_config(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.chdir(tmp_path)

    assert run_cli(["init", "--target-repository", "https://github.com/org/repo"]) == 0
    assert capsys.readouterr().out == "Created: CHANGELOG.md\nWrote config: clconfig.yaml\n"
    assert _changelog(tmp_path).startswith("<!--\n")
    assert "## Unreleased" in _changelog(tmp_path)
    changelog = _config(tmp_path)["changelog"]
    assert isinstance(changelog, dict)
    assert changelog["target_repository"] == "https://github.com/org/repo"

    assert run_cli(["lint"]) == 0


def test_init_derives_rules_from_existing_changelog(
    workspace: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (workspace / "clconfig.yaml").unlink()

    assert run_cli(["init"]) == 0
    assert capsys.readouterr().out == "Derived categories: cli\nWrote config: clconfig.yaml\n"
    rules = _config(workspace)["rules"]
    assert isinstance(rules, dict)
    assert rules["categories"] == ["cli"]
    assert sorted(item["long"] for item in rules["change_types"]) == ["Bug Fixes", "Features"]
    assert _changelog(workspace) == CHANGELOG

    assert run_cli(["lint"]) == 0


def test_init_refuses_to_overwrite_or_write_toml(
    workspace: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    assert run_cli(["init"]) == 2
    assert "pass --force to overwrite" in capsys.readouterr().err
    assert (workspace / "clconfig.yaml").read_text(encoding="utf-8") == CONFIG

    assert run_cli(["init", "--config", "clconfig.toml"]) == 2
    assert "init writes YAML configs" in capsys.readouterr().err

    assert run_cli(["init", "--force"]) == 0


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


def test_config_show_json(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run_cli(["config", "show", "--json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["changelog"]["target_repository"] == "https://github.com/org/repo"
    assert payload["rules"]["categories"] == ["cli", "docs"]


def test_config_category_edits(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run_cli(["config", "add-category", "web"]) == 0
    assert capsys.readouterr().out.startswith("Updated config: ")
    rules = _config(workspace)["rules"]
    assert isinstance(rules, dict)
    assert rules["categories"] == ["cli", "docs", "web"]

    assert run_cli(["config", "add-category", "cli"]) == 2
    assert "already exists" in capsys.readouterr().err

    assert run_cli(["config", "remove-category", "docs"]) == 0
    rules = _config(workspace)["rules"]
    assert isinstance(rules, dict)
    assert rules["categories"] == ["cli", "web"]


def test_config_spelling_and_change_type_edits(workspace: Path) -> None:
    assert run_cli(["config", "add-spelling", "GitHub", "git ?hub"]) == 0
    rules = _config(workspace)["rules"]
    assert isinstance(rules, dict)
    assert rules["expected_spellings"] == {"GitHub": "git ?hub"}

    assert run_cli(["config", "remove-spelling", "GitHub"]) == 0
    assert run_cli(["config", "remove-change-type", "fix"]) == 0
    assert run_cli(["config", "add-change-type", "Security", "--short", "sec"]) == 0
    rules = _config(workspace)["rules"]
    assert isinstance(rules, dict)
    assert rules["expected_spellings"] == {}
    assert [item["long"] for item in rules["change_types"]] == ["Features", "Security"]


def test_config_editing_rejects_toml(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (workspace / "clconfig.yaml").unlink()
    (workspace / "clconfig.toml").write_text('[rules]\ncategories = ["cli"]\n', encoding="utf-8")

    assert run_cli(["config", "add-category", "web"]) == 2
    assert "supports YAML files only" in capsys.readouterr().err


# ---------------------------------------------------------------------------
# error routing and global options
# ---------------------------------------------------------------------------


def test_missing_changelog_exits_three(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (workspace / "CHANGELOG.md").unlink()
    assert run_cli(["lint"]) == 3
    assert "changelog not found" in capsys.readouterr().err


def test_unparseable_changelog_exits_three(
    workspace: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (workspace / "CHANGELOG.md").write_text(
        "## Unreleased\n\n- (cli) [#1](https://github.com/org/repo/pull/1) Fix\n",
        encoding="utf-8",
    )
    assert run_cli(["lint"]) == 3
    assert "entry is not inside a change type section" in capsys.readouterr().err


def test_non_utf8_changelog_exits_three(
    workspace: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (workspace / "CHANGELOG.md").write_bytes(b"# Changelog\n\n## Unreleased\n\xff\xfe\n")
    assert run_cli(["lint"]) == 3
    assert "is not valid UTF-8 (byte offset 27)" in capsys.readouterr().err


def test_invalid_config_exits_two(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (workspace / "clconfig.yaml").write_text(
        "rules:\n  categories: [two words]\n", encoding="utf-8"
    )
    assert run_cli(["lint"]) == 2
    assert "rules.categories[0]" in capsys.readouterr().err


def test_changelog_override(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    docs = workspace / "docs"
    docs.mkdir()
    (docs / "CHANGES.md").write_text(
        CHANGELOG.replace("(cli) [#10]", "(web) [#10]"), encoding="utf-8"
    )

    assert run_cli(["lint", "--changelog", "docs/CHANGES.md"]) == 1
    assert "docs/CHANGES.md:13: error: invalid change category" in capsys.readouterr().out


def test_verbose_logs_to_stderr(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run_cli(["lint", "-v"]) == 0
    assert "config_loaded" in capsys.readouterr().err


def test_entrypoint_without_command_is_a_usage_error(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_entrypoint([]) == 2
    assert "usage: clu" in capsys.readouterr().err
