"""Random number streams for Monte Carlo sampling.

A RandomStream is created once per render context (one render, or one worker
when pixels are dispatched in parallel) and handed to the estimators. It is
never rebuilt or re-seeded per path; doing so would correlate every pixel's
samples.

Independent streams for parallel callers come from
``numpy.random.SeedSequence.spawn``, which guarantees non-overlapping,
statistically independent child sequences.

Example:
    >>> from pathtracer.core.sampler import RandomStream, spawn_streams
    >>> stream = RandomStream(seed=42)
    >>> r1, r2 = stream.next_pair()
    >>> workers = spawn_streams(seed=42, count=4)
"""

from __future__ import annotations

import numpy as np


class RandomStream:
    """Uniform [0, 1) number source backed by ``numpy.random.Generator``.

    Attributes:
        seed: The seed the stream was created with (None for OS entropy).
        draws: Number of uniform values handed out so far.
    """

    def __init__(
        self,
        seed: int | np.random.SeedSequence | None = None,
        generator: np.random.Generator | None = None,
    ) -> None:
        if generator is not None and seed is not None:
            raise ValueError("Pass either a seed or a generator, not both")
        self.seed = seed
        self._generator = generator if generator is not None else np.random.default_rng(seed)
        self.draws = 0

    def next_float(self) -> float:
        """Draw one uniform number in [0, 1)."""
        self.draws += 1
        return float(self._generator.random())

    def next_pair(self) -> tuple[float, float]:
        """Draw two uniform numbers in [0, 1)."""
        values = self._generator.random(2)
        self.draws += 2
        return float(values[0]), float(values[1])

    def __repr__(self) -> str:
        return f"RandomStream(seed={self.seed!r}, draws={self.draws})"


def spawn_streams(seed: int | None, count: int) -> list[RandomStream]:
    """Create ``count`` statistically independent streams from one seed.

    Args:
        seed: Root seed. None draws entropy from the OS.
        count: Number of child streams (for example one per worker).

    Returns:
        A list of RandomStream instances with independent sequences.

    Raises:
        ValueError: If count is not positive.
    """
    if count <= 0:
        raise ValueError(f"Stream count must be positive, got {count}")
    children = np.random.SeedSequence(seed).spawn(count)
    return [RandomStream(seed=child) for child in children]
