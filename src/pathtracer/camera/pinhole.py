"""Pinhole camera model for primary ray generation.

A pixel center is mapped to normalized device coordinates, remapped to a
film point on the z = -1 plane of camera space, and both the camera origin and
the film point are taken to world space with a 4x4 camera-to-world transform.
The world direction is the difference of the two points and is not normalized.

Film coordinates:
    px = (2 * ndc_x - 1) * aspect * scale
    py = (1 - 2 * ndc_y) * scale

where ``aspect = width / height`` and ``scale = tan(vfov / 2)`` when a
vertical field of view is given, or 1 without one (the unit-FOV remap; a
90 degree field of view is equivalent). Pixel row 0 is the top of the image.

Example:
    >>> from pathtracer.camera.pinhole import PinholeCamera
    >>> camera = PinholeCamera.translated((0.0, 0.8, 4.5), vfov=34.5159)
    >>> ray = camera.generate_ray(400, 400, 800, 800)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np
import numpy.typing as npt

from pathtracer.core.ray import (
    Mat4,
    Ray,
    as_vec3,
    identity_matrix,
    make_ray,
    transform_point,
    translation_matrix,
)

# Full vertical field of view of the box scene's path-tracing camera, in degrees
CORNELL_VFOV = 34.5159


def film_scale(vfov: float | None) -> float:
    """Scale applied to film coordinates for a vertical field of view in degrees."""
    if vfov is None:
        return 1.0
    return math.tan(math.radians(vfov) / 2.0)


def generate_camera_ray(
    pixel_x: float,
    pixel_y: float,
    image_width: int,
    image_height: int,
    vfov: float | None = None,
    camera_to_world: Mat4 | None = None,
) -> Ray:
    """Generate the primary ray through the center of a pixel.

    Args:
        pixel_x: Pixel column (0 = left).
        pixel_y: Pixel row (0 = top).
        image_width: Image width in pixels.
        image_height: Image height in pixels.
        vfov: Vertical field of view in degrees, or None for the unscaled remap.
        camera_to_world: 4x4 affine camera-to-world transform. Identity if None.

    Returns:
        A Ray with world-space origin and unnormalized direction, ``tnear = 0``,
        ``tfar = inf`` and a cleared hit record.
    """
    matrix = identity_matrix() if camera_to_world is None else camera_to_world

    ndc_x = (pixel_x + 0.5) / image_width
    ndc_y = (pixel_y + 0.5) / image_height

    scale = film_scale(vfov)
    aspect_ratio = image_width / image_height
    px = (2.0 * ndc_x - 1.0) * aspect_ratio * scale
    py = (1.0 - 2.0 * ndc_y) * scale

    origin = transform_point(matrix, (0.0, 0.0, 0.0))
    film_point = transform_point(matrix, (px, py, -1.0))

    return make_ray(origin, film_point - origin)


def look_at_matrix(
    lookfrom: npt.ArrayLike,
    lookat: npt.ArrayLike,
    vup: npt.ArrayLike = (0.0, 1.0, 0.0),
) -> Mat4:
    """Build a camera-to-world transform looking from ``lookfrom`` at ``lookat``.

    The camera basis (u, v, w) has w pointing from lookat toward lookfrom, so
    the camera looks down -w, matching the z = -1 film plane.

    Raises:
        ValueError: If lookfrom equals lookat or vup is parallel to the view.
    """
    eye = as_vec3(lookfrom)
    target = as_vec3(lookat)
    up = as_vec3(vup)

    w = eye - target
    w_len = np.linalg.norm(w)
    if w_len == 0.0:
        raise ValueError("lookfrom and lookat must differ")
    w = w / w_len

    u = np.cross(up, w)
    u_len = np.linalg.norm(u)
    if u_len < 1e-12:
        raise ValueError("vup must not be parallel to the view direction")
    u = u / u_len

    v = np.cross(w, u)

    matrix = identity_matrix()
    matrix[:3, 0] = u
    matrix[:3, 1] = v
    matrix[:3, 2] = w
    matrix[:3, 3] = eye
    return matrix


@dataclass
class PinholeCamera:
    """Configuration for a pinhole (perspective) camera.

    Attributes:
        camera_to_world: 4x4 affine transform from camera to world space.
        vfov: Vertical field of view in degrees, or None for the unscaled remap.
    """

    camera_to_world: Mat4 = field(default_factory=identity_matrix)
    vfov: float | None = None

    def __post_init__(self) -> None:
        matrix = np.asarray(self.camera_to_world, dtype=np.float64)
        if matrix.shape != (4, 4):
            raise ValueError(f"camera_to_world must be 4x4, got shape {matrix.shape}")
        if self.vfov is not None and not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov must be in (0, 180) degrees, got {self.vfov}")
        self.camera_to_world = matrix

    @classmethod
    def translated(cls, offset: npt.ArrayLike, vfov: float | None = None) -> PinholeCamera:
        """Camera at ``offset`` looking down -Z."""
        return cls(camera_to_world=translation_matrix(offset), vfov=vfov)

    @classmethod
    def look_at(
        cls,
        lookfrom: npt.ArrayLike,
        lookat: npt.ArrayLike,
        vup: npt.ArrayLike = (0.0, 1.0, 0.0),
        vfov: float | None = None,
    ) -> PinholeCamera:
        return cls(camera_to_world=look_at_matrix(lookfrom, lookat, vup), vfov=vfov)

    @property
    def origin(self) -> npt.NDArray[np.float64]:
        return transform_point(self.camera_to_world, (0.0, 0.0, 0.0))

    def generate_ray(self, pixel_x: float, pixel_y: float, width: int, height: int) -> Ray:
        """Generate the primary ray through the center of pixel (x, y)."""
        return generate_camera_ray(
            pixel_x, pixel_y, width, height, self.vfov, self.camera_to_world
        )
