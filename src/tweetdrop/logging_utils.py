"""Logging helpers."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"
DEFAULT_LOG_FILE = "tweetdrop.log"


def configure_logging(verbose: bool = False, log_file: str | None = None) -> None:
    """Configure console logging, plus a log file when one is given."""
    level = logging.DEBUG if verbose else logging.INFO
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers)


def get_logger() -> logging.Logger:
    """Return the logger passed to every component of a run."""
    return logging.getLogger("tweetdrop")
