"""
changelog-utils config package public API.

File: src/changelog_utils/config/__init__.py

Purpose
- Export config loading/validation entrypoints and public error types.

What should be included in this file
- Public schema constants and validation/report types.
- Loader APIs for effective config and deterministic dumps.
- Pure rule editing helpers.

Functional requirements
- Support loading from ``clconfig.toml`` + ``CLU_`` env overrides.
- Fail fast with clear structured validation/load errors.

Non-functional requirements
- Keep import-time surface small and deterministic.
"""

from changelog_utils.config.adjust import (
    ConfigAdjustError,
    add_category,
    add_change_type,
    add_expected_spelling,
    remove_category,
    remove_change_type,
    remove_expected_spelling,
)
from changelog_utils.config.loader import (
    ENV_PREFIX,
    SEARCHED_CONFIG_FILES,
    ConfigLoadError,
    dump_effective_config,
    find_config_file,
    load_config,
    load_config_payload,
)
from changelog_utils.config.schema import (
    DEFAULT_CONFIG,
    ChangelogConfig,
    ConfigSchemaVersion,
    ConfigValidationError,
    ConfigValidationIssue,
    ConfigValidationResult,
    assert_valid_config,
    default_config,
    is_legacy_layout,
    merge_config,
    migrate_legacy_config,
    migration_guidance,
    validate_config,
)

__all__ = [
    "ChangelogConfig",
    "ConfigAdjustError",
    "ConfigLoadError",
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "DEFAULT_CONFIG",
    "ENV_PREFIX",
    "SEARCHED_CONFIG_FILES",
    "add_category",
    "add_change_type",
    "add_expected_spelling",
    "assert_valid_config",
    "default_config",
    "dump_effective_config",
    "find_config_file",
    "is_legacy_layout",
    "load_config",
    "load_config_payload",
    "merge_config",
    "migrate_legacy_config",
    "migration_guidance",
    "remove_category",
    "remove_change_type",
    "remove_expected_spelling",
    "validate_config",
]
