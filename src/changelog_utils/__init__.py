"""changelog-utils: parse, lint, fix and release Keep-a-Changelog style files."""

__version__ = "0.1.0"

__all__ = ["__version__"]
