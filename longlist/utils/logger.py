"""
Loguru setup shared by every context (detailed, per-run logging).

A run gets its own directory with one log file per context. Context modules wrap
loguru with a prefix in contexts/{context}/logger.py and never configure sinks
themselves.
"""

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

from longlist import __version__

load_dotenv()
CONSOLE_LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

LEVEL_COLORS = {
    "WARNING": "<yellow>",
    "ERROR": "<red>",
    "CRITICAL": "<bold><red>",
}

# Slides may render on worker threads, so file lines carry the thread name
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <7} | {thread.name: <12} | {message}"
CONSOLE_FORMAT = "{time:HH:mm:ss} | <level>{level: <7}</level> | <level>{message}</level>"


def setup_logger(
    context_name: str,
    log_dir: Path,
    extra_provenance: dict = None,
    level_colors: dict = None,
) -> Path:
    """
    Send loguru output to ``<log_dir>/<context_name>.log`` and the console.

    Previously added sinks are removed, so each run starts from a clean logger.
    The file sink records DEBUG and above; the console shows CONSOLE_LOG_LEVEL
    (env LOG_LEVEL, default INFO) and above.

    Args:
        context_name: Context identifier (e.g., "template", "intake")
        log_dir: Directory for this run
        extra_provenance: Additional key-value pairs for the provenance header
        level_colors: Console color overrides (e.g., {"INFO": "<cyan>"})

    Returns:
        Path to log file

    Example:
        log_file = setup_logger(
            context_name="template",
            log_dir=Path("outs/logs/render_20251114_123456"),
            extra_provenance={"Template": "template_with_placeholders.pptx"},
        )
    """
    log_dir.mkdir(exist_ok=True, parents=True)
    log_file = log_dir / f"{context_name}.log"

    logger.remove()

    for level_name, color in {**LEVEL_COLORS, **(level_colors or {})}.items():
        logger.level(level_name, color=color)

    logger.add(log_file, format=FILE_FORMAT, level="DEBUG", encoding="utf-8")
    logger.add(sys.stdout, format=CONSOLE_FORMAT, level=CONSOLE_LOG_LEVEL, colorize=True)

    log_provenance(extra_provenance)

    return log_file


def log_provenance(extra_context: dict = None) -> None:
    """
    Write a header describing how the run was started.

    Includes the command line, working directory, interpreter and package
    versions, then any ``extra_context`` entries.
    """
    logger.info("=" * 80)
    logger.info(f"Command: {' '.join(sys.argv)}")
    logger.info(f"Working directory: {Path.cwd()}")
    logger.info(f"Python {sys.version.split()[0]}, longlist {__version__}")

    for key, value in (extra_context or {}).items():
        logger.info(f"{key}: {value}")

    logger.info("=" * 80)
