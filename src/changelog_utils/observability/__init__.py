"""Public observability primitives: structured logging setup."""

from changelog_utils.observability.logging import (
    LoggingConfig,
    correlation_scope,
    setup_logging,
    setup_structured_logging,
    shutdown_logging,
)

__all__ = [
    "LoggingConfig",
    "correlation_scope",
    "setup_logging",
    "setup_structured_logging",
    "shutdown_logging",
]
