"""Logging configuration for vaultsync."""

import logging
import sys
from datetime import UTC, datetime
from pathlib import Path

from . import __version__


def setup_logging(verbose: int = 0, log_file: Path | None = None) -> None:
    """Configure the vaultsync logger from verbosity and optional file output.

    Args:
        verbose: Verbosity level (0=warnings only, 1=INFO, 2+=DEBUG)
        log_file: Optional path to write logs to file
    """
    logger = logging.getLogger("vaultsync")

    if verbose >= 2:
        level = logging.DEBUG
    elif verbose >= 1 or log_file is not None:
        level = logging.INFO
    else:
        level = logging.WARNING
    logger.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Warnings always reach stderr so per-document read failures are visible
    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(level if verbose > 0 else logging.WARNING)
    stderr_handler.setFormatter(formatter)
    logger.addHandler(stderr_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if level <= logging.INFO:
        timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S UTC")
        logger.info("=" * 60)
        logger.info(
            "vaultsync %s starting | %s | level=%s",
            __version__,
            timestamp,
            logging.getLevelName(level),
        )
        logger.info("=" * 60)
