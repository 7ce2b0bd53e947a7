"""Logging configuration utilities."""

from __future__ import annotations

import logging

from dahira.core.config import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(settings: Settings) -> None:
    """Install the console handler for the ``dahira`` logger tree.

    Handlers already attached to that logger are replaced.
    """

    level = logging.DEBUG if settings.app_debug else getattr(
        logging, settings.log_level.upper(), logging.INFO
    )

    app_logger = logging.getLogger("dahira")
    app_logger.setLevel(level)
    app_logger.propagate = False
    app_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    app_logger.addHandler(console_handler)
