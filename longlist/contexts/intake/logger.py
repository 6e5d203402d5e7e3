"""
Intake context logger.

Provides logging interface for intake context with automatic [intake] prefix.
All intake modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path

from loguru import logger

from longlist.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[intake]"


def setup_intake_logger(log_dir: Path, source: str = None) -> Path:
    """
    Setup logger for intake context.

    Args:
        log_dir: Directory for this intake session
        source: CV bundle being processed (logged in the provenance header)

    Returns:
        Path to log file
    """
    return _setup_logger(
        context_name="intake",
        log_dir=log_dir,
        extra_provenance={"Source": source},
    )


# Wrapper functions with automatic [intake] prefix


def _log_info(message: str) -> None:
    """Log info message with [intake] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [intake] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [intake] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [intake] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [intake] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level intake-specific logging helpers


def log_extraction_summary(report) -> None:
    """
    Log the outcome of an intake run.

    Args:
        report: ExtractionReport from collect_records()
    """
    if report.all_failed:
        _log_error(f"All {report.total} CVs failed to process")
    elif report.failures:
        _log_warning(f"Extracted {len(report.records)} of {report.total} CVs")
    else:
        _log_success(f"Extracted {len(report.records)} of {report.total} CVs")

    for failure in report.failures:
        _log_warning(f"  CV #{failure.index}: {failure.error}")
