"""
changelog-utils — runtime config loader.

File: src/changelog_utils/config/loader.py

Purpose
- Load effective config from defaults, a config file, env vars, and CLI overrides.

What should be included in this file
- Precedence logic: CLI > env (CLU_) > file > defaults.
- TOML loading via ``tomllib``, YAML via ``yaml.safe_load``, JSON for the
  legacy ``.clconfig.json`` layout.
- Deterministic environment variable mapping and coercion.
- Changelog path normalization relative to the config file location.

Functional requirements
- Reject invalid config via schema validation.
- Transparently migrate the flat legacy layout.

Non-functional requirements
- Keep loading deterministic and reproducible.
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final, Literal

import structlog
import yaml

from changelog_utils.config.schema import (
    assert_valid_config,
    default_config,
    is_legacy_layout,
    merge_config,
    migrate_legacy_config,
)
from changelog_utils.constants import DEFAULT_CONFIG_FILE, LEGACY_CONFIG_FILE

ENV_PREFIX: Final[str] = "CLU_"
SEARCHED_CONFIG_FILES: Final[tuple[str, ...]] = (
    DEFAULT_CONFIG_FILE,
    "clconfig.yaml",
    "clconfig.yml",
    LEGACY_CONFIG_FILE,
)

_BOOLEAN_TRUE: Final[frozenset[str]] = frozenset({"1", "true", "t", "yes", "y", "on"})
_BOOLEAN_FALSE: Final[frozenset[str]] = frozenset({"0", "false", "f", "no", "n", "off"})

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class _Binding:
    path: tuple[str, ...]
    value_type: Literal["str", "int", "bool"]


class ConfigLoadError(ValueError):
    """Raised when config cannot be loaded or overrides cannot be coerced."""


def load_config(
    config_path: str | Path | None = None,
    *,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Load effective config with deterministic precedence: CLI > env > file > defaults."""

    env_map = dict(os.environ if environ is None else environ)
    cli_map = dict(cli_overrides or {})

    resolved_path = find_config_file(config_path)
    file_payload: dict[str, Any] = {}
    if resolved_path is not None:
        file_payload = load_config_payload(resolved_path)
        _normalize_changelog_path(file_payload, base_dir=resolved_path.parent)
    elif config_path is not None:
        raise ConfigLoadError(f"config file not found: {Path(config_path).expanduser()}")

    merged = merge_config(default_config(), file_payload)
    merged = assert_valid_config(merged)

    env_overrides = _collect_env_overrides(merged, env_map)
    cli_payload = _materialize_cli_overrides(cli_map)

    merged = merge_config(merged, env_overrides)
    merged = merge_config(merged, cli_payload)
    merged = assert_valid_config(merged)

    logger.debug(
        "config_loaded",
        source=None if resolved_path is None else resolved_path.as_posix(),
        env_overrides=sorted(_env_name_for_path(path) for path, _ in _iter_scalar_paths(env_overrides)),
    )
    return merged


def find_config_file(config_path: str | Path | None = None) -> Path | None:
    """Return the explicit config path, or the first known file in the working directory."""

    if config_path is not None:
        candidate = Path(config_path).expanduser().resolve()
        return candidate if candidate.exists() else None
    cwd = Path.cwd()
    for name in SEARCHED_CONFIG_FILES:
        candidate = cwd / name
        if candidate.is_file():
            return candidate.resolve()
    return None


def load_config_payload(path: str | Path) -> dict[str, Any]:
    """Decode one config file by suffix; legacy JSON payloads are migrated."""

    resolved = Path(path)
    try:
        raw_text = resolved.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigLoadError(f"unable to read config file {resolved}: {exc}") from exc

    suffix = resolved.suffix.lower()
    if suffix == ".toml":
        try:
            parsed: object = tomllib.loads(raw_text)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigLoadError(f"invalid TOML in {resolved}: {exc}") from exc
    elif suffix in {".yaml", ".yml"}:
        try:
            parsed = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            raise ConfigLoadError(f"invalid YAML in {resolved}: {exc}") from exc
        if parsed is None:
            parsed = {}
    elif suffix == ".json":
        try:
            parsed = json.loads(raw_text)
        except json.JSONDecodeError as exc:
            raise ConfigLoadError(f"invalid JSON in {resolved}: {exc}") from exc
    else:
        raise ConfigLoadError(
            f"unsupported config file type {resolved.suffix!r}; use .toml, .yaml or .json"
        )

    if not isinstance(parsed, dict):
        raise ConfigLoadError(f"config root must be an object: {resolved}")

    if is_legacy_layout(parsed):
        logger.info("legacy_config_migrated", path=resolved.as_posix())
        return migrate_legacy_config(parsed)
    return parsed


def dump_effective_config(config: Mapping[str, object]) -> str:
    """Return deterministic JSON dump of the effective config."""

    return json.dumps(config, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _normalize_changelog_path(payload: dict[str, Any], *, base_dir: Path) -> None:
    value = _get_nested(payload, ("changelog", "path"))
    if not isinstance(value, str) or not value.strip():
        return
    candidate = Path(os.path.expandvars(value.strip())).expanduser()
    if not candidate.is_absolute():
        candidate = base_dir / candidate
    _set_nested(payload, ("changelog", "path"), Path(os.path.normpath(candidate)).as_posix())


def _collect_env_overrides(
    config: Mapping[str, object], environ: Mapping[str, str]
) -> dict[str, Any]:
    bindings = _build_bindings(config)
    overrides: dict[str, Any] = {}
    for env_name in sorted(bindings):
        raw = environ.get(env_name)
        if raw is None:
            continue
        binding = bindings[env_name]
        value = _coerce_env(raw, binding.value_type, env_name, binding.path)
        _set_nested(overrides, binding.path, value)
    return overrides


def _build_bindings(config: Mapping[str, object]) -> dict[str, _Binding]:
    bindings: dict[str, _Binding] = {}

    for path, value in _iter_scalar_paths(config):
        kind = _kind_for_value(value)
        if kind is None:
            continue
        bindings[_env_name_for_path(path)] = _Binding(path=path, value_type=kind)

    # legacy_version defaults to null and so has no inferred kind.
    optional: tuple[_Binding, ...] = (_Binding(("changelog", "legacy_version"), "str"),)
    for binding in optional:
        bindings.setdefault(_env_name_for_path(binding.path), binding)

    return bindings


def _iter_scalar_paths(
    payload: Mapping[str, object],
    prefix: tuple[str, ...] = (),
) -> list[tuple[tuple[str, ...], object]]:
    pairs: list[tuple[tuple[str, ...], object]] = []
    for key in sorted(payload):
        value = payload[key]
        path = (*prefix, key)
        if isinstance(value, Mapping):
            pairs.extend(_iter_scalar_paths(value, path))
        else:
            pairs.append((path, value))
    return pairs


def _kind_for_value(value: object) -> Literal["str", "int", "bool"] | None:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    if isinstance(value, str):
        return "str"
    return None


def _coerce_env(
    raw: str,
    value_type: Literal["str", "int", "bool"],
    env_name: str,
    path: tuple[str, ...],
) -> object:
    value = raw.strip()
    if value_type == "str":
        return value
    if value_type == "int":
        try:
            return int(value)
        except ValueError as exc:
            raise ConfigLoadError(f"{env_name} -> {'.'.join(path)} must be an integer") from exc

    lowered = value.lower()
    if lowered in _BOOLEAN_TRUE:
        return True
    if lowered in _BOOLEAN_FALSE:
        return False
    raise ConfigLoadError(
        f"{env_name} -> {'.'.join(path)} must be a boolean (true/false/1/0/yes/no/on/off)"
    )


def _materialize_cli_overrides(cli_overrides: Mapping[str, object]) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    for key in sorted(cli_overrides):
        value = cli_overrides[key]
        if value is None:
            continue
        path = tuple(part for part in key.split(".") if part)
        if not path:
            raise ConfigLoadError(f"invalid CLI override key {key!r}")
        _set_nested(payload, path, value)
    return payload


def _set_nested(target: dict[str, Any], path: tuple[str, ...], value: object) -> None:
    cursor = target
    for part in path[:-1]:
        next_node = cursor.get(part)
        if not isinstance(next_node, dict):
            next_node = {}
            cursor[part] = next_node
        cursor = next_node
    cursor[path[-1]] = value


def _get_nested(payload: Mapping[str, object], path: tuple[str, ...]) -> object | None:
    cursor: object = payload
    for part in path:
        if not isinstance(cursor, Mapping):
            return None
        if part not in cursor:
            return None
        cursor = cursor[part]
    return cursor


def _env_name_for_path(path: tuple[str, ...]) -> str:
    return ENV_PREFIX + "_".join(part.upper() for part in path)


__all__ = [
    "ConfigLoadError",
    "ENV_PREFIX",
    "SEARCHED_CONFIG_FILES",
    "dump_effective_config",
    "find_config_file",
    "load_config",
    "load_config_payload",
]
