"""Triangle primitive with Moller-Trumbore ray-triangle intersection.

A triangle is given by its three vertices v0, v1, v2. A hit is reported with
barycentric coordinates (u, v) such that

    P = (1 - u - v) * v0 + u * v1 + v * v2

which is the convention the intersector uses to interpolate per-vertex
normals. Ray directions need not be normalized; ``t`` is measured in multiples
of the direction's length. A zero direction yields a zero determinant and is
reported as a miss.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.geometry.triangle import TriangleHit, hit_triangle
    >>> # Use hit_triangle within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Determinants below this magnitude are treated as parallel or degenerate
DET_EPSILON = 1e-12


@ti.dataclass
class TriangleHit:
    """Record of a ray-triangle intersection.

    Attributes:
        hit: 1 if the ray intersected the triangle, 0 otherwise.
        t: Ray parameter of the hit. Only valid if hit == 1.
        u: Barycentric weight of v1. Only valid if hit == 1.
        v: Barycentric weight of v2. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    u: ti.f32
    v: ti.f32


@ti.func
def hit_triangle(
    ray_origin: vec3,
    ray_direction: vec3,
    v0: vec3,
    v1: vec3,
    v2: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> TriangleHit:
    """Test for ray-triangle intersection within [t_min, t_max).

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be normalized).
        v0: First vertex.
        v1: Second vertex.
        v2: Third vertex.
        t_min: Minimum t value to consider a valid hit (inclusive).
        t_max: Maximum t value to consider a valid hit (exclusive).

    Returns:
        A TriangleHit. Check the hit field to determine if intersection occurred.
    """
    edge1 = v1 - v0
    edge2 = v2 - v0
    pvec = tm.cross(ray_direction, edge2)
    det = tm.dot(edge1, pvec)

    did_hit = 0
    hit_t = 0.0
    hit_u = 0.0
    hit_v = 0.0

    # Ray not parallel to the triangle plane
    if ti.abs(det) > DET_EPSILON:
        inv_det = 1.0 / det
        tvec = ray_origin - v0
        u = tm.dot(tvec, pvec) * inv_det
        if u >= 0.0 and u <= 1.0:
            qvec = tm.cross(tvec, edge1)
            v = tm.dot(ray_direction, qvec) * inv_det
            if v >= 0.0 and u + v <= 1.0:
                t = tm.dot(edge2, qvec) * inv_det
                if t >= t_min and t < t_max:
                    did_hit = 1
                    hit_t = t
                    hit_u = u
                    hit_v = v

    return TriangleHit(hit=did_hit, t=hit_t, u=hit_u, v=hit_v)

