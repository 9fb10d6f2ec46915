"""Preview module for render output.

Components:
    framebuffer: In-memory linear RGB framebuffer
    tonemap: Tone mapping and gamma encoding for display
    export: PNG/PPM/TGA export via Pillow

Example:
    >>> from pathtracer.preview import Framebuffer, save_image
    >>> framebuffer = Framebuffer(128, 128)
    >>> save_image(framebuffer, "color.png", gamma=2.2)
"""

from pathtracer.preview.export import (
    SUPPORTED_FORMATS,
    compute_rmse,
    image_to_uint8,
    save_image,
)
from pathtracer.preview.framebuffer import Framebuffer, FramebufferLike
from pathtracer.preview.tonemap import (
    ToneMapMethod,
    apply_gamma,
    process_image_for_display,
    tone_map_exposure,
    tone_map_reinhard,
)

__all__ = [
    # Framebuffer
    "Framebuffer",
    "FramebufferLike",
    # Tone mapping
    "ToneMapMethod",
    "apply_gamma",
    "process_image_for_display",
    "tone_map_exposure",
    "tone_map_reinhard",
    # Export
    "SUPPORTED_FORMATS",
    "compute_rmse",
    "image_to_uint8",
    "save_image",
]
