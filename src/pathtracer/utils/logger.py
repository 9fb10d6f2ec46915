"""Logging setup for the renderer.

Library modules log through ``logging.getLogger(__name__)`` and never
configure handlers themselves. Applications call ``configure_logging`` once.
"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

ROOT_LOGGER_NAME = "pathtracer"


def configure_logging(level: int | str = logging.INFO) -> logging.Logger:
    """Install the standard log format and return the package logger."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    return logger
