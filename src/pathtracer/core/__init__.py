"""Core rendering module.

Components:
    ray: Ray record, vector math, shading frames and cosine sampling
    sampler: Random number streams scoped to a render context
    lighting: Point light and background configuration
    intersector: The scene query interface consumed by the estimators
    integrator: Direct-lighting and path-tracing estimators
    renderer: Image-plane driver

The estimators receive every collaborator explicitly (intersector, material
table, lighting, random stream); nothing in this package holds global state.
"""

from .intersector import Intersector
from .lighting import PointLight, SceneLighting
from .ray import (
    INVALID_GEOMETRY_ID,
    HitRecord,
    Ray,
    build_onb_from_normal,
    cosine_direction,
    cross,
    dot,
    length,
    make_ray,
    normalize,
    ray_at,
    sample_cosine_hemisphere,
    transform_point,
    translation_matrix,
    vec3,
)
from .sampler import RandomStream, spawn_streams

# Note: integrator and renderer are NOT imported here to avoid circular imports
# with the camera and materials packages. Import them directly:
#   from pathtracer.core.integrator import estimate_direct, path_trace
#   from pathtracer.core.renderer import ImageRenderer, render_image

__all__ = [
    "INVALID_GEOMETRY_ID",
    "HitRecord",
    "Ray",
    "make_ray",
    "ray_at",
    "vec3",
    "length",
    "normalize",
    "dot",
    "cross",
    "transform_point",
    "translation_matrix",
    "build_onb_from_normal",
    "cosine_direction",
    "sample_cosine_hemisphere",
    "Intersector",
    "PointLight",
    "SceneLighting",
    "RandomStream",
    "spawn_streams",
]
