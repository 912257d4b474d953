"""Logging configuration helpers for the excavation game."""

from __future__ import annotations

import logging
from logging import Logger

LOGGER_NAME = "code_archaeology"


def configure_logging(level: int = logging.INFO) -> Logger:
    """Configure basic logging for the game and return the package logger."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    return logging.getLogger(LOGGER_NAME)
