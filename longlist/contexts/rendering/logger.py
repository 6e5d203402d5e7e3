"""
Rendering context logger.

Provides logging interface for rendering context with automatic [render] prefix.
All rendering modules should import from this module, not from utils.logger directly.
Rendering runs inside a templating session, so log files are configured by the
templating logger.
"""

from loguru import logger

CONTEXT_PREFIX = "[render]"


# Wrapper functions with automatic [render] prefix


def _log_info(message: str) -> None:
    """Log info message with [render] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [render] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [render] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [render] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level rendering-specific logging helpers


def log_archive_loaded(source: str, part_count: int, slide_count: int) -> None:
    """Log a package that was opened for rendering."""
    _log_info(f"Loaded {source}: {part_count} parts, {slide_count} slides")


def log_archive_written(destination: str, size: int, parts_written: int) -> None:
    """Log a serialized package."""
    _log_success(f"Wrote {destination} ({size} bytes, {parts_written} parts rewritten)")


def log_slide_added(source_part: str, new_part: str) -> None:
    """Log a slide duplicated to hold an extra page."""
    _log_info(f"Added {new_part} (copy of {source_part})")
