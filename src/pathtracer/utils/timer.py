"""Scoped wall-clock timer that reports through logging."""

from __future__ import annotations

import logging
import time

logger = logging.getLogger(__name__)


class ScopedTimer:
    """Context manager measuring the wall time of a block.

    Example:
        >>> with ScopedTimer("Tracing Scene") as timer:
        ...     render()
        >>> timer.elapsed  # seconds
    """

    def __init__(self, name: str, level: int = logging.INFO) -> None:
        self.name = name
        self.level = level
        self.elapsed = 0.0
        self._start = 0.0

    def __enter__(self) -> ScopedTimer:
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.elapsed = time.perf_counter() - self._start
        logger.log(self.level, "%s: %.2f ms", self.name, self.elapsed * 1000.0)
