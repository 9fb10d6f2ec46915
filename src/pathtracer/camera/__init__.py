"""Camera module for primary ray generation.

Components:
    pinhole: Pinhole (perspective) camera with a camera-to-world transform

Ray generation maps a pixel center to normalized device coordinates
(pixel + 0.5) / resolution, remaps it onto the z = -1 film plane in camera
space, and transforms origin and film point to world space.
"""

from .pinhole import (
    CORNELL_VFOV,
    PinholeCamera,
    film_scale,
    generate_camera_ray,
    look_at_matrix,
)

__all__ = [
    "CORNELL_VFOV",
    "PinholeCamera",
    "film_scale",
    "generate_camera_ray",
    "look_at_matrix",
]
