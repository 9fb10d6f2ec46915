"""Direct-lighting and path-tracing estimators.

This module implements the two radiance estimators of the renderer:

- ``estimate_direct``: single-bounce radiance at the primary hit from one
  point light, with a shadow-ray visibility test and a Lambertian BRDF on the
  gamma-decoded albedo.
- ``path_trace``: a fixed-depth random walk with cosine-weighted hemisphere
  sampling, accumulating a throughput-weighted color.

Both estimators take their collaborators explicitly: an ``Intersector``, a
``MaterialTable``, a ``SceneLighting`` descriptor and, for the path tracer,
a ``RandomStream``. Nothing here owns global state.

Path tracing loop, per bounce:
    1. Intersect. A miss returns ``color + mask * background``.
    2. Fetch and normalize the shading normal, build an orthonormal frame.
    3. Draw a cosine-weighted direction around the normal.
    4. ``color += mask``, then ``mask *= albedo * cos(new_dir, N)``.
    5. Advance the path to the hit point and continue.

The walk stops after ``max_bounces`` bounces. There is no Russian roulette,
no emission term and no light sampling in the path tracer; its radiance comes
from the throughput collected at every bounce plus the background reached by
escaping paths.

Example:
    >>> from pathtracer.core.integrator import estimate_direct, path_trace
    >>> from pathtracer.core.lighting import SceneLighting
    >>> from pathtracer.core.sampler import RandomStream
    >>> lighting = SceneLighting()
    >>> radiance = path_trace(intersector, materials, ray, RandomStream(7), lighting)
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

import numpy as np

from pathtracer.core.intersector import Intersector
from pathtracer.core.lighting import SceneLighting
from pathtracer.core.ray import (
    INVALID_GEOMETRY_ID,
    T_INFINITY,
    Ray,
    Vec3,
    dot,
    length,
    make_ray,
    normalize,
    ray_at,
    sample_cosine_hemisphere,
    vec3,
)
from pathtracer.core.sampler import RandomStream
from pathtracer.materials.lambertian import DEFAULT_GAMMA, MaterialTable, eval_lambertian_gamma

# =============================================================================
# Estimator Constants
# =============================================================================

# Bounce cap of the path tracer
MAX_BOUNCES = 8

# Flat per-axis bias added to a bounce origin to leave the surface
RAY_EPSILON = 3e-5

# Start of the shadow-ray interval, measured along the unnormalized to-light vector
SHADOW_T_NEAR = 1e-3

# End of the shadow-ray interval: t = 1 reaches the light position exactly
SHADOW_T_FAR = 1.0


def _black() -> Vec3:
    return vec3(0.0, 0.0, 0.0)


def _white() -> Vec3:
    return vec3(1.0, 1.0, 1.0)


# =============================================================================
# Shared Shading Helpers
# =============================================================================


def hit_point(ray: Ray) -> Vec3:
    """World-space hit location ``origin + direction * tfar`` of an intersected ray."""
    return ray_at(ray, ray.tfar)


def shading_normal(intersector: Intersector, ray: Ray) -> Vec3:
    """Fetch the interpolated normal at the ray's hit and normalize it."""
    hit = ray.hit
    normal = np.asarray(
        intersector.interpolate_normal(hit.geom_id, hit.prim_id, hit.u, hit.v),
        dtype=np.float64,
    )
    return normalize(normal)


def visibility(intersector: Intersector, point: Vec3, to_light: Vec3) -> float:
    """Shadow test from ``point`` toward a light at ``point + to_light``.

    The shadow ray uses the unnormalized ``to_light`` vector as its direction
    with the interval [SHADOW_T_NEAR, SHADOW_T_FAR), so it ends at the light.

    Returns:
        1.0 when the surface id sentinel survives the occlusion query
        (the light is visible), 0.0 otherwise.
    """
    shadow_ray = make_ray(point, to_light, tnear=SHADOW_T_NEAR, tfar=SHADOW_T_FAR)
    intersector.occluded(shadow_ray)
    return 1.0 if shadow_ray.hit.geom_id == INVALID_GEOMETRY_ID else 0.0


# =============================================================================
# Direct Lighting
# =============================================================================


def estimate_direct(
    intersector: Intersector,
    materials: MaterialTable,
    ray: Ray,
    lighting: SceneLighting,
    gamma: float = DEFAULT_GAMMA,
) -> Vec3:
    """Estimate single-bounce radiance along a camera ray.

    Args:
        intersector: Scene query interface.
        materials: Material table indexed by surface id.
        ray: The primary ray. Mutated by the intersector.
        lighting: Point light and background policy.
        gamma: Decoding exponent applied to the albedo.

    Returns:
        The radiance ``Li * brdf * max(0, N.Wi) * visibility``, or
        ``lighting.direct_background`` when the ray misses.

    Raises:
        InvalidSurfaceError: If the intersector reports a surface id with no
            material.
    """
    if not intersector.intersect(ray):
        return lighting.direct_background.copy()

    point = hit_point(ray)
    to_light = lighting.light.position - point
    distance = length(to_light)
    wi = normalize(to_light)

    normal = shading_normal(intersector, ray)
    brdf = eval_lambertian_gamma(materials.diffuse_color(ray.hit.geom_id), gamma)

    li = lighting.light.power / (distance * distance)
    cos_theta = max(0.0, dot(normal, wi))

    return li * brdf * cos_theta * visibility(intersector, point, to_light)


# =============================================================================
# Path Tracing
# =============================================================================


@dataclass(frozen=True)
class PathState:
    """State of one random walk between bounces.

    Attributes:
        origin: Origin of the next cast.
        direction: Direction of the next cast.
        color: Radiance accumulated so far.
        throughput: Multiplicative path weight (the mask).
        bounce: Number of bounces completed.
    """

    origin: Vec3
    direction: Vec3
    color: Vec3 = field(default_factory=_black)
    throughput: Vec3 = field(default_factory=_white)
    bounce: int = 0

    @classmethod
    def from_ray(cls, ray: Ray) -> PathState:
        return cls(origin=ray.origin.copy(), direction=ray.direction.copy())

    def to_ray(self) -> Ray:
        """Build a fresh ray for this state: [0, inf) interval, cleared hit."""
        return make_ray(self.origin, self.direction, tnear=0.0, tfar=T_INFINITY)

    def escape(self, background: Vec3) -> Vec3:
        """Final radiance for a path that left the scene."""
        return self.color + self.throughput * background

    def scatter(self, ray: Ray, albedo: Vec3, normal: Vec3, new_direction: Vec3) -> PathState:
        """Advance the walk through the hit recorded on ``ray``.

        The current throughput is collected into the color before the albedo
        and cosine terms are applied, so they only affect later bounces.
        """
        color = self.color + self.throughput
        throughput = self.throughput * albedo * dot(new_direction, normal)
        return replace(
            self,
            origin=hit_point(ray) + RAY_EPSILON,
            direction=new_direction,
            color=color,
            throughput=throughput,
            bounce=self.bounce + 1,
        )


def path_trace(
    intersector: Intersector,
    materials: MaterialTable,
    ray: Ray,
    stream: RandomStream,
    lighting: SceneLighting,
    max_bounces: int = MAX_BOUNCES,
) -> Vec3:
    """Estimate radiance along a camera ray with a cosine-weighted random walk.

    Args:
        intersector: Scene query interface.
        materials: Material table indexed by surface id.
        ray: The primary ray. Only its origin and direction are read.
        stream: Random stream owned by the render context.
        lighting: Background policy for escaping paths.
        max_bounces: Maximum number of intersection queries for the path.

    Returns:
        The accumulated radiance (RGB).

    Raises:
        ValueError: If max_bounces is negative.
        InvalidSurfaceError: If the intersector reports a surface id with no
            material.
    """
    if max_bounces < 0:
        raise ValueError(f"max_bounces must be non-negative, got {max_bounces}")

    state = PathState.from_ray(ray)

    while state.bounce < max_bounces:
        current = state.to_ray()
        if not intersector.intersect(current):
            return state.escape(lighting.path_background)

        normal = shading_normal(intersector, current)
        r1, r2 = stream.next_pair()
        new_direction = sample_cosine_hemisphere(normal, r1, r2)
        albedo = materials.diffuse_color(current.hit.geom_id)

        state = state.scatter(current, albedo, normal, new_direction)

    return state.color
