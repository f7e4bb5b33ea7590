"""Logging helpers."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"
LOGGER_NAME = "chapter_resolver"
NOISY_LOGGERS = ("urllib3", "requests")


def configure_logging(verbose: bool = False) -> None:
    """Configure application logging once for CLI usage.

    HTTP library chatter stays at WARNING unless ``verbose`` is set.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)


def get_logger(component: str | None = None) -> logging.Logger:
    """Return the package logger, or a child logger for ``component``."""
    if component:
        return logging.getLogger(f"{LOGGER_NAME}.{component}")
    return logging.getLogger(LOGGER_NAME)
