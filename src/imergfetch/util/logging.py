"""Logging setup utilities."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOGGER_NAME = "imergfetch"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def configure_logging(*, log_path: Path | None = None, verbose: bool = False) -> logging.Logger:
    """Attach stdout and optional file handlers to the ``imergfetch`` logger.

    Safe to call repeatedly; handlers are only added once per destination.
    """

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    has_stream = any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        for h in logger.handlers
    )
    existing_files = {getattr(h, "baseFilename", None) for h in logger.handlers}

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    if not has_stream:
        stream_handler = logging.StreamHandler(stream=sys.stdout)
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)

    if log_path and str(log_path.absolute()) not in existing_files:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # urllib3 chatter drowns out per-day progress on long ranges
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    return logger


__all__ = ["LOGGER_NAME", "configure_logging"]
