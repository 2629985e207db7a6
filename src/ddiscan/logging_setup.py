"""Process-wide logging configuration for the GUI and headless entry points."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str | int = "INFO", log_file: str | Path | None = None) -> None:
    """Send log records to stderr and, optionally, to *log_file*."""
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    file_error: OSError | None = None
    if log_file:
        try:
            handlers.append(logging.FileHandler(Path(log_file).expanduser(), encoding="utf-8"))
        except OSError as exc:
            file_error = exc
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
    if file_error is not None:
        logger.warning("Logging to stderr only; cannot open %s (%s)", log_file, file_error)
