"""Output framebuffer for linear radiance.

The estimators write through the narrow ``FramebufferLike`` interface:
``set_pixel(x, y, r, g, b)`` plus ``width``/``height``. ``Framebuffer`` is the
in-memory implementation backed by a (height, width, 3) float32 array with
row 0 at the top of the image. Values are stored as given; gamma encoding and
tone mapping happen at export time.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np
import numpy.typing as npt


@runtime_checkable
class FramebufferLike(Protocol):
    """Minimal write interface used by the image-plane driver."""

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def set_pixel(self, x: int, y: int, r: float, g: float, b: float) -> None: ...


class Framebuffer:
    """In-memory RGB float framebuffer."""

    def __init__(self, width: int, height: int) -> None:
        """Allocate a black framebuffer.

        Raises:
            ValueError: If either dimension is not positive.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Framebuffer dimensions must be positive, got {width}x{height}")
        self._width = width
        self._height = height
        self._pixels = np.zeros((height, width, 3), dtype=np.float32)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def set_pixel(self, x: int, y: int, r: float, g: float, b: float) -> None:
        """Store linear radiance at column x, row y.

        Raises:
            ValueError: If (x, y) lies outside the framebuffer.
        """
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise ValueError(
                f"Pixel ({x}, {y}) is outside the {self._width}x{self._height} framebuffer"
            )
        self._pixels[y, x] = (r, g, b)

    def get_pixel(self, x: int, y: int) -> tuple[float, float, float]:
        r, g, b = self._pixels[y, x]
        return float(r), float(g), float(b)

    def clear(self) -> None:
        self._pixels.fill(0.0)

    def to_numpy(self) -> npt.NDArray[np.float32]:
        """Copy of the linear image, shape (height, width, 3)."""
        return self._pixels.copy()
