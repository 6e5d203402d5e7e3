"""
Templating context logger.

Provides logging interface for templating context with automatic [template] prefix.
All templating modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path

from loguru import logger

from longlist.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[template]"


def setup_templating_logger(log_dir: Path, template_path: Path = None) -> Path:
    """
    Setup logger for templating context.

    Configures loguru with provenance tracking and templating-specific context.

    Args:
        log_dir: Directory for this templating session
        template_path: Template being rendered (logged in the provenance header)

    Returns:
        Path to log file

    Example:
        from longlist.contexts.templating.logger import setup_templating_logger, _log_info

        log_file = setup_templating_logger(log_dir, template_path=template)
        _log_info("Starting render...")
    """
    return _setup_logger(
        context_name="template",
        log_dir=log_dir,
        extra_provenance={"Template": template_path},
    )


# Wrapper functions with automatic [template] prefix


def _log_info(message: str) -> None:
    """Log info message with [template] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [template] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [template] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [template] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [template] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level templating-specific logging helpers


def log_render_start(deck_name: str, template_path: Path, num_records: int, log_file: Path) -> None:
    """Log start of a deck render with context."""
    _log_info(f"Starting to render {deck_name} ({num_records} records)")
    _log_info(f"Log file: {log_file}")
    _log_debug(f"Template: {template_path}")


def log_stage(stage: str, detail: str = "") -> None:
    """Log a render stage transition."""
    suffix = f": {detail}" if detail else ""
    _log_debug(f"Stage {stage}{suffix}")


def log_render_result(
    deck_name: str,
    result,  # DeckGenerationResult
    elapsed_time: float,
) -> None:
    """
    Log deck render result with its summary.

    Args:
        deck_name: Output deck identifier
        result: DeckGenerationResult from generate_deck()
        elapsed_time: Time taken
    """
    if result.success:
        _log_success(
            f"{deck_name}: rendered {result.records_rendered} records on "
            f"{result.pages} pages ({elapsed_time:.2f}s)"
        )
        if result.records_truncated:
            _log_warning(f"  {result.records_truncated} records over the limit were not rendered")
        if result.injection_fallbacks:
            _log_warning(
                f"  {result.injection_fallbacks} multi-line values lost run formatting"
            )
        if result.output_path:
            _log_info(f"  Output: {result.output_path}")
    else:
        _log_error(f"Failed to render {deck_name} ({elapsed_time:.2f}s)")
        _log_error(f"  Error: {result.error}")
