"""Ray data structure and vector utilities for the light-transport estimators.

This module provides the Ray record exchanged with the intersector, plus the
small set of vector, frame and sampling helpers the estimators need. Vectors
are NumPy float64 arrays of shape (3,); matrices are (4, 4) affine transforms.

The Ray carries a mutable hit record. The intersector fills it in place and
clamps ``tfar`` to the hit distance, so a ray is built fresh for every cast
(camera sample, shadow test, or bounce) rather than reused.

Example:
    >>> from pathtracer.core.ray import make_ray, ray_at, vec3
    >>> ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0))
    >>> ray_at(ray, 5.0)
    array([ 0.,  0., -5.])
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np
import numpy.typing as npt

Vec3 = npt.NDArray[np.float64]
Mat4 = npt.NDArray[np.float64]

# Surface/primitive id reported when nothing was hit. Valid ids are >= 0.
INVALID_GEOMETRY_ID = -1

# Ray parameter upper bound for an unbounded cast.
T_INFINITY = math.inf


def vec3(x: float, y: float, z: float) -> Vec3:
    """Create a 3-component float64 vector."""
    return np.array((x, y, z), dtype=np.float64)


def as_vec3(value: npt.ArrayLike) -> Vec3:
    """Coerce a sequence of three numbers into a float64 vector.

    Raises:
        ValueError: If ``value`` does not hold exactly three components.
    """
    v = np.asarray(value, dtype=np.float64).reshape(-1)
    if v.shape != (3,):
        raise ValueError(f"Expected 3 components, got shape {v.shape}")
    return v.copy()


# =============================================================================
# Ray Record
# =============================================================================


@dataclass
class HitRecord:
    """Hit fields written by the intersector.

    Attributes:
        geom_id: Surface (mesh) id of the hit, or INVALID_GEOMETRY_ID.
        prim_id: Primitive (triangle) id within the surface, or INVALID_GEOMETRY_ID.
        u: First barycentric coordinate of the hit.
        v: Second barycentric coordinate of the hit.
    """

    geom_id: int = INVALID_GEOMETRY_ID
    prim_id: int = INVALID_GEOMETRY_ID
    u: float = 0.0
    v: float = 0.0

    @property
    def is_valid(self) -> bool:
        return self.geom_id != INVALID_GEOMETRY_ID


@dataclass
class Ray:
    """A ray with an origin, a direction and a valid interval [tnear, tfar).

    Attributes:
        origin: The starting point of the ray.
        direction: The direction vector. It is not required to be unit length;
            ``tfar`` is measured in multiples of its length.
        tnear: Start of the valid interval.
        tfar: End of the valid interval. Reduced to the hit distance on a hit.
        time: Motion-blur time. Carried for interface compatibility only.
        mask: Intersection mask. Carried for interface compatibility only.
        hit: The mutable hit record.
    """

    origin: Vec3
    direction: Vec3
    tnear: float = 0.0
    tfar: float = T_INFINITY
    time: float = 0.0
    mask: int = -1
    hit: HitRecord = field(default_factory=HitRecord)

    def mark_occluded(self) -> None:
        """Record a blocking hit for an occlusion query.

        Occlusion queries report a blocked ray by overwriting the surface id
        sentinel, leaving the sentinel in place when the ray is unblocked.
        """
        self.hit.geom_id = 0


def make_ray(
    origin: npt.ArrayLike,
    direction: npt.ArrayLike,
    tnear: float = 0.0,
    tfar: float = T_INFINITY,
) -> Ray:
    """Create a ray with a cleared hit record.

    Args:
        origin: The starting point of the ray.
        direction: The direction vector (need not be normalized).
        tnear: Start of the valid interval.
        tfar: End of the valid interval.

    Returns:
        A new Ray instance.
    """
    return Ray(origin=as_vec3(origin), direction=as_vec3(direction), tnear=tnear, tfar=tfar)


def ray_at(ray: Ray, t: float) -> Vec3:
    """Compute the point ray.origin + t * ray.direction."""
    return ray.origin + t * ray.direction


# =============================================================================
# Vector Utility Functions
# =============================================================================


def length(v: Vec3) -> float:
    """Compute the Euclidean length of a vector."""
    return float(math.sqrt(float(np.dot(v, v))))


def length_squared(v: Vec3) -> float:
    return float(np.dot(v, v))


def normalize(v: Vec3) -> Vec3:
    """Normalize a vector to unit length.

    Returns:
        A unit vector in the same direction as v. A zero-length vector is
        returned unchanged (as zeros) instead of producing NaNs.
    """
    n = length(v)
    if n == 0.0:
        return np.zeros(3, dtype=np.float64)
    return v / n


def dot(a: Vec3, b: Vec3) -> float:
    return float(np.dot(a, b))


def cross(a: Vec3, b: Vec3) -> Vec3:
    return np.cross(a, b).astype(np.float64)


def power(v: Vec3, exponent: float) -> Vec3:
    """Raise every component of v to ``exponent``."""
    return np.power(v, exponent)


# =============================================================================
# Affine Transforms
# =============================================================================


def identity_matrix() -> Mat4:
    return np.eye(4, dtype=np.float64)


def translation_matrix(offset: npt.ArrayLike) -> Mat4:
    """Build a 4x4 affine transform translating by ``offset``."""
    matrix = identity_matrix()
    matrix[:3, 3] = as_vec3(offset)
    return matrix


def transform_point(matrix: Mat4, point: npt.ArrayLike) -> Vec3:
    """Apply a 4x4 affine transform to a point (w = 1).

    Each output component is the dot product of a matrix row with
    (x, y, z, 1), so the translation column is applied.
    """
    p = as_vec3(point)
    return matrix[:3, :3] @ p + matrix[:3, 3]


# =============================================================================
# Shading Frame and Sampling
# =============================================================================


def build_onb_from_normal(normal: Vec3) -> tuple[Vec3, Vec3, Vec3]:
    """Build an orthonormal basis (u, v, w) with w equal to the normal.

    The seed axis is world Y when ``|normal.x| > 0.1`` and world X otherwise,
    which keeps the seed away from being parallel to the normal.

    Args:
        normal: The unit surface normal.

    Returns:
        A tuple (u, v, w) forming a right-handed orthonormal basis.
    """
    w = normal
    axis = vec3(0.0, 1.0, 0.0) if abs(w[0]) > 0.1 else vec3(1.0, 0.0, 0.0)
    u = normalize(cross(axis, w))
    v = cross(w, u)
    return u, v, w


def local_to_world(local_dir: Vec3, u: Vec3, v: Vec3, w: Vec3) -> Vec3:
    """Transform a direction from local (z-up) to world coordinates."""
    return local_dir[0] * u + local_dir[1] * v + local_dir[2] * w


def cosine_direction(r1: float, r2: float) -> Vec3:
    """Map two uniform numbers to a cosine-weighted local direction.

    The distribution has PDF = cos(theta) / pi around the local z-axis.

    Args:
        r1: Uniform number in [0, 1) controlling the azimuth.
        r2: Uniform number in [0, 1) controlling the elevation.

    Returns:
        A unit direction in the local frame (z-up).
    """
    phi = 2.0 * math.pi * r1
    sqrt_r2 = math.sqrt(r2)
    return vec3(math.cos(phi) * sqrt_r2, math.sin(phi) * sqrt_r2, math.sqrt(1.0 - r2))


def sample_cosine_hemisphere(normal: Vec3, r1: float, r2: float) -> Vec3:
    """Cosine-weighted hemisphere sample around ``normal``.

    Args:
        normal: The unit surface normal.
        r1: Uniform number in [0, 1).
        r2: Uniform number in [0, 1).

    Returns:
        The sampled unit direction in world space.
    """
    u, v, w = build_onb_from_normal(normal)
    return normalize(local_to_world(cosine_direction(r1, r2), u, v, w))
