"""Display-side tone mapping and gamma encoding.

The estimators produce unbounded linear radiance. Before an image is written
to an 8-bit file it goes through the display pipeline:

1. optional tone mapping ("reinhard": c / (1 + c), "exposure": 1 - exp(-c * e)),
2. gamma encoding (c ** (1 / gamma)),
3. a final clamp to [0, 1].
"""

from __future__ import annotations

from typing import Literal, get_args

import numpy as np
import numpy.typing as npt

# Type alias for tone mapping options
ToneMapMethod = Literal["none", "reinhard", "exposure"]

TONE_MAP_METHODS: tuple[str, ...] = get_args(ToneMapMethod)


def tone_map_reinhard(image: npt.NDArray[np.float32]) -> npt.NDArray[np.float32]:
    """Reinhard global operator; negative input is clamped to zero first."""
    image = np.maximum(image, 0.0)
    return (image / (1.0 + image)).astype(np.float32)


def tone_map_exposure(
    image: npt.NDArray[np.float32],
    exposure: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Exponential exposure operator. Higher exposure brightens the image."""
    image = np.maximum(image, 0.0)
    return (1.0 - np.exp(-image * exposure)).astype(np.float32)


def apply_gamma(
    image: npt.NDArray[np.float32],
    gamma: float = 2.2,
) -> npt.NDArray[np.float32]:
    """Encode linear values in [0, 1] with ``value ** (1 / gamma)``.

    Values are clamped to [0, 1] first; a gamma of 1 leaves the image as is.
    """
    if gamma <= 0.0:
        raise ValueError(f"gamma must be positive, got {gamma}")
    if gamma == 1.0:
        return image
    clamped = np.clip(image, 0.0, 1.0)
    return np.power(clamped, 1.0 / gamma).astype(np.float32)


def process_image_for_display(
    image: npt.NDArray[np.float32],
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
    exposure: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Run the full display pipeline on a linear (H, W, 3) image.

    Raises:
        ValueError: If the tone mapping method is unknown.
    """
    result = np.asarray(image, dtype=np.float32).copy()

    if tone_map == "reinhard":
        result = tone_map_reinhard(result)
    elif tone_map == "exposure":
        result = tone_map_exposure(result, exposure)
    elif tone_map != "none":
        raise ValueError(f"Unknown tone mapping method: {tone_map}")

    result = apply_gamma(result, gamma)
    return np.clip(result, 0.0, 1.0).astype(np.float32)
