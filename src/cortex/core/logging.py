"""
Logging configuration.

Every module logs through a child of the ``cortex`` logger, so consolidation,
trimming and persistence decisions end up in one audit trail.
"""

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# HTTP client libraries log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "anthropic")


def setup_logging(
    level: int = logging.INFO,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure the cortex logger with console and optional file output.

    Safe to call more than once: handlers from a previous call are closed
    and replaced.
    """
    logger = logging.getLogger("cortex")
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    # stderr keeps `cortex state` output pipeable
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a child logger, e.g. ``get_logger("memory.store")``."""
    return logging.getLogger(f"cortex.{name}")
