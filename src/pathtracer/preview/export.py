"""Image export for rendered framebuffers.

Linear radiance is tone mapped, gamma encoded and quantized to 8 bits before
it is written with Pillow. The file format follows the extension:

    - .png  (default)
    - .ppm  (binary PPM)
    - .tga  (Targa)

Example:
    >>> from pathtracer.preview.export import save_image
    >>> save_image(framebuffer, "color.tga", gamma=2.2)
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from pathtracer.preview.framebuffer import Framebuffer
from pathtracer.preview.tonemap import ToneMapMethod, process_image_for_display
from pathtracer.utils.timer import ScopedTimer

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = {".png": "PNG", ".ppm": "PPM", ".tga": "TGA"}


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
    exposure: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Convert a linear float image of shape (H, W, 3) to 8-bit display values."""
    processed = process_image_for_display(
        image,
        tone_map=tone_map,
        gamma=gamma,
        exposure=exposure,
    )
    return np.rint(processed * 255.0).astype(np.uint8)


def save_image(
    source: Framebuffer | npt.NDArray[np.float32],
    filepath: str | Path,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
    exposure: float = 1.0,
) -> Path:
    """Write a framebuffer or linear image array to disk.

    Args:
        source: A Framebuffer, or a linear image array of shape (H, W, 3).
        filepath: Output path; its extension selects the format.
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma encoding value (default 2.2).
        exposure: Exposure for exposure tone mapping.

    Returns:
        The path written.

    Raises:
        ValueError: If the extension is not supported or the array has the
            wrong shape.
    """
    path = Path(filepath)
    file_format = SUPPORTED_FORMATS.get(path.suffix.lower())
    if file_format is None:
        supported = ", ".join(sorted(SUPPORTED_FORMATS))
        raise ValueError(f"Unsupported image format {path.suffix!r}; expected one of: {supported}")

    image = source.to_numpy() if isinstance(source, Framebuffer) else np.asarray(source)
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")

    with ScopedTimer("Writing Images"):
        image_uint8 = image_to_uint8(image, tone_map=tone_map, gamma=gamma, exposure=exposure)
        PILImage.fromarray(image_uint8).save(path, format=file_format)

    logger.info("Saved %dx%d image to %s", image.shape[1], image.shape[0], path)
    return path


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Root mean squared error between two images of the same shape.

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
