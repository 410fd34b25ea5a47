"""
changelog-utils — configuration schema and validation.

File: src/changelog_utils/config/schema.py

Purpose
- Define authoritative configuration defaults and strict validation rules.

What should be included in this file
- Schema versioning and migration guidance.
- Validation rules for required fields, types, enums and patterns.
- Migration of the flat ``.clconfig.json`` layout into the sectioned schema.
- Deterministic deep-merge helpers.

Functional requirements
- Validate config payloads and return structured errors (field path + message).
- Normalize categories to lowercase and change types to ``{long, short}`` pairs.

Non-functional requirements
- Keep rules deterministic and easy to audit.
- Preserve backwards compatibility through explicit migration messages.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, Literal, NotRequired, TypedDict

from changelog_utils.constants import (
    CONFIG_SCHEMA_VERSION,
    DEFAULT_CHANGE_TYPES,
    DEFAULT_CHANGELOG_PATH,
)
from changelog_utils.domain.models import Version

ConfigSchemaVersion: Final[int] = CONFIG_SCHEMA_VERSION

_CATEGORY_PATTERN = re.compile(r"^[a-z0-9\-]+$")
_CHANGE_TYPE_PATTERN = re.compile(r"^[A-Za-z0-9\-]+(?: [A-Za-z0-9\-]+)*$")
_SHORT_PATTERN = re.compile(r"^[a-z0-9\-]+$")
_REPOSITORY_PATTERN = re.compile(r"^[^\s()\[\]]+$")

# Keys of the flat config written by earlier releases of the tool.
_LEGACY_KEYS: Final[frozenset[str]] = frozenset(
    {
        "categories",
        "change_types",
        "changelog_path",
        "config_version",
        "expected_spellings",
        "legacy_version",
        "target_repo",
    }
)


class MetaConfig(TypedDict):
    schema_version: int


class ChangelogSettings(TypedDict):
    path: str
    target_repository: str
    legacy_version: NotRequired[str | None]


class ChangeTypeSettings(TypedDict):
    long: str
    short: str


class RulesConfig(TypedDict):
    categories: list[str]
    change_types: list[ChangeTypeSettings]
    expected_spellings: dict[str, str]
    require_capitalized_description: bool
    require_trailing_period: bool
    sort_entries: bool


class ObservabilityConfig(TypedDict):
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"]
    log_format: Literal["json", "text"]


class ChangelogConfig(TypedDict):
    meta: MetaConfig
    changelog: ChangelogSettings
    rules: RulesConfig
    observability: ObservabilityConfig


DEFAULT_CONFIG: Final[ChangelogConfig] = {
    "meta": {
        "schema_version": ConfigSchemaVersion,
    },
    "changelog": {
        "path": DEFAULT_CHANGELOG_PATH,
        "target_repository": "",
        "legacy_version": None,
    },
    "rules": {
        "categories": [],
        "change_types": [{"long": long, "short": short} for long, short in DEFAULT_CHANGE_TYPES],
        "expected_spellings": {},
        "require_capitalized_description": True,
        "require_trailing_period": False,
        "sort_entries": False,
    },
    "observability": {
        "log_level": "WARNING",
        "log_format": "text",
    },
}


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    """Validation result with normalized config when no issues were found."""

    config: dict[str, Any] | None
    issues: tuple[ConfigValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.config is not None and not self.issues


class ConfigValidationError(ValueError):
    """Raised when strict config validation fails."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.path}: {item.message}" for item in self.issues)
        super().__init__(f"invalid config:\n{rendered}")


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ConfigValidationIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(ConfigValidationIssue(path=path, message=message))

    def items(self) -> tuple[ConfigValidationIssue, ...]:
        return tuple(self._items)

    @property
    def has_issues(self) -> bool:
        return bool(self._items)


def default_config() -> ChangelogConfig:
    """Return a deep copy of deterministic built-in defaults."""

    return copy.deepcopy(DEFAULT_CONFIG)


def migration_guidance(found_version: int) -> str:
    """Return deterministic migration guidance for schema version mismatch."""

    if found_version < ConfigSchemaVersion:
        return (
            f"schema version {found_version} is older than supported {ConfigSchemaVersion}; "
            "set meta.schema_version to the supported version after reviewing the release notes"
        )
    if found_version > ConfigSchemaVersion:
        return (
            f"schema version {found_version} is newer than supported {ConfigSchemaVersion}; "
            "upgrade changelog-utils"
        )
    return "schema version is current"


def is_legacy_layout(payload: Mapping[str, object]) -> bool:
    """True for the flat ``.clconfig.json`` layout of earlier releases."""

    return bool(payload) and set(payload) <= _LEGACY_KEYS and "meta" not in payload


def migrate_legacy_config(payload: Mapping[str, object]) -> dict[str, Any]:
    """Convert the flat ``.clconfig.json`` layout into the sectioned schema.

    ``change_types`` may be either a mapping of display name to match pattern or
    a list of ``{long, short}`` objects; patterns are not carried over.
    """

    changelog: dict[str, Any] = {}
    rules: dict[str, Any] = {}

    if "changelog_path" in payload:
        changelog["path"] = payload["changelog_path"]
    if "target_repo" in payload:
        changelog["target_repository"] = payload["target_repo"]
    if "legacy_version" in payload:
        changelog["legacy_version"] = payload["legacy_version"]

    if "categories" in payload:
        rules["categories"] = payload["categories"]
    if "expected_spellings" in payload:
        rules["expected_spellings"] = payload["expected_spellings"]

    change_types = payload.get("change_types")
    if isinstance(change_types, Mapping):
        rules["change_types"] = [
            {"long": name, "short": str(name)[:4].strip().lower()} for name in sorted(change_types)
        ]
    elif change_types is not None:
        rules["change_types"] = change_types

    migrated: dict[str, Any] = {"meta": {"schema_version": ConfigSchemaVersion}}
    if changelog:
        migrated["changelog"] = changelog
    if rules:
        migrated["rules"] = rules
    return migrated


def merge_config(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Deterministically deep-merge ``overlay`` onto ``base``; lists are replaced."""

    merged = _deep_copy_mapping(base)
    _merge_into(merged, overlay)
    return merged


def validate_config(config: Mapping[str, object] | object) -> ConfigValidationResult:
    """Validate config and return structured issues with deterministic paths."""

    issues = _IssueCollector()
    root = _as_object(config, "<root>", issues)
    if root is None:
        return ConfigValidationResult(config=None, issues=issues.items())

    normalized = _validate_root(root, issues)
    if issues.has_issues:
        return ConfigValidationResult(config=None, issues=issues.items())
    return ConfigValidationResult(config=normalized, issues=())


def assert_valid_config(config: Mapping[str, object] | object) -> dict[str, Any]:
    """Validate config and raise ``ConfigValidationError`` on failure."""

    result = validate_config(config)
    if result.config is None:
        raise ConfigValidationError(result.issues)
    return result.config


def _validate_root(payload: Mapping[str, object], issues: _IssueCollector) -> dict[str, Any]:
    allowed = {"meta", "changelog", "rules", "observability"}
    _reject_unknown_keys(payload, allowed, "", issues)
    _require_keys(payload, allowed, "", issues)

    out: dict[str, Any] = {}
    _section(payload, key="meta", issues=issues, validator=_validate_meta, out=out)
    _section(payload, key="changelog", issues=issues, validator=_validate_changelog, out=out)
    _section(payload, key="rules", issues=issues, validator=_validate_rules, out=out)
    _section(
        payload, key="observability", issues=issues, validator=_validate_observability, out=out
    )
    return out


def _section(
    payload: Mapping[str, object],
    *,
    key: str,
    issues: _IssueCollector,
    validator: Callable[[dict[str, object], str, _IssueCollector], dict[str, Any]],
    out: dict[str, Any],
) -> None:
    raw = payload.get(key)
    if raw is None:
        return
    section_obj = _as_object(raw, key, issues)
    if section_obj is None:
        return
    out[key] = validator(section_obj, key, issues)


def _validate_meta(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    _reject_unknown_keys(payload, {"schema_version"}, path, issues)
    _require_keys(payload, {"schema_version"}, path, issues)

    out: dict[str, Any] = {}
    if "schema_version" in payload:
        parsed = _as_int(payload["schema_version"], _join(path, "schema_version"), issues, minimum=1)
        if parsed is not None:
            out["schema_version"] = parsed
            if parsed != ConfigSchemaVersion:
                issues.add(_join(path, "schema_version"), migration_guidance(parsed))
    return out


def _validate_changelog(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    allowed = {"path", "target_repository", "legacy_version"}
    _reject_unknown_keys(payload, allowed, path, issues)
    _require_keys(payload, {"path", "target_repository"}, path, issues)

    out: dict[str, Any] = {}
    if "path" in payload:
        parsed_path = _as_str(payload["path"], _join(path, "path"), issues)
        if parsed_path is not None:
            if "\x00" in parsed_path:
                issues.add(_join(path, "path"), "must not contain NUL bytes")
            else:
                out["path"] = parsed_path

    if "target_repository" in payload:
        raw = payload["target_repository"]
        field_path = _join(path, "target_repository")
        if not isinstance(raw, str):
            issues.add(field_path, f"expected string, got {type(raw).__name__}")
        elif raw.strip() and not _REPOSITORY_PATTERN.fullmatch(raw.strip()):
            issues.add(field_path, "must be a repository URL without whitespace or brackets")
        else:
            out["target_repository"] = raw.strip().rstrip("/")

    if "legacy_version" in payload:
        raw_legacy = payload["legacy_version"]
        field_path = _join(path, "legacy_version")
        if raw_legacy is None or raw_legacy == "":
            out["legacy_version"] = None
        elif not isinstance(raw_legacy, str):
            issues.add(field_path, f"expected string, got {type(raw_legacy).__name__}")
        else:
            try:
                out["legacy_version"] = str(Version.parse(raw_legacy))
            except ValueError as exc:
                issues.add(field_path, str(exc))
    return out


def _validate_rules(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    allowed = {
        "categories",
        "change_types",
        "expected_spellings",
        "require_capitalized_description",
        "require_trailing_period",
        "sort_entries",
    }
    _reject_unknown_keys(payload, allowed, path, issues)
    _require_keys(payload, {"categories", "change_types"}, path, issues)

    out: dict[str, Any] = {}

    if "categories" in payload:
        out["categories"] = _validate_categories(payload["categories"], _join(path, "categories"), issues)

    if "change_types" in payload:
        out["change_types"] = _validate_change_types(
            payload["change_types"], _join(path, "change_types"), issues
        )

    if "expected_spellings" in payload:
        out["expected_spellings"] = _validate_spellings(
            payload["expected_spellings"], _join(path, "expected_spellings"), issues
        )

    for flag in ("require_capitalized_description", "require_trailing_period", "sort_entries"):
        if flag in payload:
            parsed_flag = _as_bool(payload[flag], _join(path, flag), issues)
            if parsed_flag is not None:
                out[flag] = parsed_flag
    return out


def _validate_categories(value: object, path: str, issues: _IssueCollector) -> list[str]:
    if not isinstance(value, list):
        issues.add(path, f"expected list, got {type(value).__name__}")
        return []
    seen: list[str] = []
    for index, item in enumerate(value):
        item_path = f"{path}[{index}]"
        parsed = _as_str(item, item_path, issues)
        if parsed is None:
            continue
        lowered = parsed.lower()
        if not _CATEGORY_PATTERN.fullmatch(lowered):
            issues.add(item_path, "categories may only contain letters, digits and dashes")
            continue
        if lowered in seen:
            issues.add(item_path, f"duplicate category {lowered!r}")
            continue
        seen.append(lowered)
    return sorted(seen)


def _validate_change_types(
    value: object, path: str, issues: _IssueCollector
) -> list[dict[str, str]]:
    if not isinstance(value, list):
        issues.add(path, f"expected list, got {type(value).__name__}")
        return []
    out: list[dict[str, str]] = []
    longs: set[str] = set()
    shorts: set[str] = set()
    for index, item in enumerate(value):
        item_path = f"{path}[{index}]"
        item_obj = _as_object(item, item_path, issues)
        if item_obj is None:
            continue
        _reject_unknown_keys(item_obj, {"long", "short"}, item_path, issues)
        _require_keys(item_obj, {"long", "short"}, item_path, issues)
        long = _as_str(item_obj.get("long"), _join(item_path, "long"), issues) if "long" in item_obj else None
        short = (
            _as_str(item_obj.get("short"), _join(item_path, "short"), issues)
            if "short" in item_obj
            else None
        )
        if long is None or short is None:
            continue
        if not _CHANGE_TYPE_PATTERN.fullmatch(long):
            issues.add(
                _join(item_path, "long"),
                "change type names may only contain letters, digits, dashes and single spaces",
            )
            continue
        short = short.lower()
        if not _SHORT_PATTERN.fullmatch(short):
            issues.add(_join(item_path, "short"), "abbreviations may only contain letters, digits and dashes")
            continue
        if long in longs:
            issues.add(_join(item_path, "long"), f"duplicate change type {long!r}")
            continue
        if short in shorts:
            issues.add(_join(item_path, "short"), f"duplicate abbreviation {short!r}")
            continue
        longs.add(long)
        shorts.add(short)
        out.append({"long": long, "short": short})
    return out


def _validate_spellings(value: object, path: str, issues: _IssueCollector) -> dict[str, str]:
    mapping = _as_object(value, path, issues)
    if mapping is None:
        return {}
    out: dict[str, str] = {}
    for correct in sorted(mapping):
        item_path = _join(path, correct)
        pattern = _as_str(mapping[correct], item_path, issues)
        if pattern is None:
            continue
        try:
            re.compile(pattern)
        except re.error as exc:
            issues.add(item_path, f"invalid regular expression: {exc}")
            continue
        out[correct] = pattern
    return out


def _validate_observability(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    allowed = {"log_level", "log_format"}
    _reject_unknown_keys(payload, allowed, path, issues)
    _require_keys(payload, allowed, path, issues)

    out: dict[str, Any] = {}
    if "log_level" in payload:
        parsed_log_level = _as_enum(
            payload["log_level"],
            _join(path, "log_level"),
            issues,
            allowed_values=("DEBUG", "INFO", "WARNING", "ERROR"),
        )
        if parsed_log_level is not None:
            out["log_level"] = parsed_log_level

    if "log_format" in payload:
        parsed_log_format = _as_enum(
            payload["log_format"],
            _join(path, "log_format"),
            issues,
            allowed_values=("json", "text"),
        )
        if parsed_log_format is not None:
            out["log_format"] = parsed_log_format
    return out


def _as_object(value: object, path: str, issues: _IssueCollector) -> dict[str, object] | None:
    if not isinstance(value, Mapping):
        issues.add(path, f"expected object, got {type(value).__name__}")
        return None
    out: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            issues.add(path, f"object key must be string, got {type(key).__name__}")
            continue
        out[key] = item
    return out


def _as_str(value: object, path: str, issues: _IssueCollector) -> str | None:
    if not isinstance(value, str):
        issues.add(path, f"expected string, got {type(value).__name__}")
        return None
    parsed = value.strip()
    if not parsed:
        issues.add(path, "must not be empty")
        return None
    return parsed


def _as_bool(value: object, path: str, issues: _IssueCollector) -> bool | None:
    if isinstance(value, bool):
        return value
    issues.add(path, f"expected boolean, got {type(value).__name__}")
    return None


def _as_int(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    minimum: int | None = None,
) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        issues.add(path, f"expected integer, got {type(value).__name__}")
        return None
    if minimum is not None and value < minimum:
        issues.add(path, f"must be >= {minimum}")
        return None
    return value


def _as_enum(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    allowed_values: tuple[str, ...],
) -> str | None:
    parsed = _as_str(value, path, issues)
    if parsed is None:
        return None
    if parsed not in allowed_values:
        expected = ", ".join(sorted(allowed_values))
        issues.add(path, f"invalid value {parsed!r}; expected one of: {expected}")
        return None
    return parsed


def _reject_unknown_keys(
    payload: Mapping[str, object],
    allowed: set[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(payload):
        if key not in allowed:
            issues.add(_join(path, key), "unknown field")


def _require_keys(
    payload: Mapping[str, object],
    required: set[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(required):
        if key not in payload:
            issues.add(_join(path, key), "missing required field")


def _join(path: str, key: str) -> str:
    if not path:
        return key
    return f"{path}.{key}"


def _merge_into(target: dict[str, Any], overlay: Mapping[str, object]) -> None:
    for key in sorted(overlay):
        value = overlay[key]
        if isinstance(value, Mapping):
            existing = target.get(key)
            if isinstance(existing, dict):
                _merge_into(existing, value)
            else:
                nested: dict[str, Any] = {}
                _merge_into(nested, value)
                target[key] = nested
        else:
            target[key] = copy.deepcopy(value)


def _deep_copy_mapping(value: Mapping[str, object]) -> dict[str, Any]:
    return {key: copy.deepcopy(value[key]) for key in sorted(value)}


__all__ = [
    "ChangeTypeSettings",
    "ChangelogConfig",
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "DEFAULT_CONFIG",
    "assert_valid_config",
    "default_config",
    "is_legacy_layout",
    "merge_config",
    "migrate_legacy_config",
    "migration_guidance",
    "validate_config",
]
