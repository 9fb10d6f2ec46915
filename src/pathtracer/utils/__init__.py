"""Logging and timing helpers."""

from .logger import LOG_FORMAT, configure_logging
from .timer import ScopedTimer

__all__ = ["LOG_FORMAT", "configure_logging", "ScopedTimer"]
