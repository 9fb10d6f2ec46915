"""Taichi-backed triangle-mesh intersector.

This module provides the reference implementation of the ``Intersector``
interface. Triangle vertices and indices are uploaded to Taichi fields once;
each query runs one small Taichi kernel that walks every triangle and keeps
the closest hit (``intersect``) or stops at the first hit (``occluded``).
Per-vertex shading normals stay on the NumPy side, since they are only needed
by ``interpolate_normal`` after a hit has been found.

Surface ids are mesh indices; primitive ids are triangle indices local to
their mesh.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.scene.intersection import TaichiIntersector
    >>> intersector = TaichiIntersector(vertices, normals, triangles, triangle_geom_ids)
    >>> intersector.intersect(ray)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import INVALID_GEOMETRY_ID, Ray, Vec3
from pathtracer.geometry.triangle import hit_triangle
from pathtracer.materials.lambertian import InvalidSurfaceError

# Type aliases using Taichi's math module
vec3 = tm.vec3
vec4 = tm.vec4


# =============================================================================
# Query Kernels
# =============================================================================


@ti.kernel
def _closest_hit(
    vertices: ti.template(),
    indices: ti.template(),
    num_triangles: ti.i32,
    origin: vec3,
    direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> vec4:
    """Find the closest triangle hit in [t_min, t_max).

    Returns:
        (triangle_index, t, u, v), with triangle_index = -1 on a miss.
    """
    closest_t = t_max
    result = vec4(-1.0, t_max, 0.0, 0.0)
    # Closest-hit tracking needs an ordered walk over the triangles
    ti.loop_config(serialize=True)
    for i in range(num_triangles):
        tri = indices[i]
        rec = hit_triangle(
            origin, direction, vertices[tri[0]], vertices[tri[1]], vertices[tri[2]], t_min, closest_t
        )
        if rec.hit == 1:
            closest_t = rec.t
            result = vec4(ti.cast(i, ti.f32), rec.t, rec.u, rec.v)
    return result


@ti.kernel
def _any_hit(
    vertices: ti.template(),
    indices: ti.template(),
    num_triangles: ti.i32,
    origin: vec3,
    direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> ti.i32:
    """Return 1 if any triangle is hit in [t_min, t_max), 0 otherwise."""
    hit_any = 0
    ti.loop_config(serialize=True)
    for i in range(num_triangles):
        if hit_any == 0:
            tri = indices[i]
            rec = hit_triangle(
                origin, direction, vertices[tri[0]], vertices[tri[1]], vertices[tri[2]], t_min, t_max
            )
            if rec.hit == 1:
                hit_any = 1
    return hit_any


def _to_ti_vec3(v: Vec3) -> ti.Vector:
    return vec3(float(v[0]), float(v[1]), float(v[2]))


# =============================================================================
# Intersector
# =============================================================================


class TaichiIntersector:
    """Intersector over a committed set of triangle meshes.

    Attributes:
        num_triangles: Total number of triangles across all meshes.
        num_surfaces: Number of meshes (surface ids 0 .. num_surfaces - 1).
        queries: Number of intersect/occluded calls served so far.
    """

    def __init__(
        self,
        vertices: npt.ArrayLike,
        normals: npt.ArrayLike,
        triangles: npt.ArrayLike,
        triangle_geom_ids: npt.ArrayLike,
    ) -> None:
        """Upload mesh data to Taichi fields.

        Args:
            vertices: (N, 3) vertex positions.
            normals: (N, 3) per-vertex shading normals.
            triangles: (M, 3) vertex indices per triangle, grouped by mesh.
            triangle_geom_ids: (M,) owning mesh id of every triangle. Ids must
                be non-decreasing and start at 0.

        Raises:
            RuntimeError: If there are no triangles to commit.
            ValueError: If array shapes or ids are inconsistent.
        """
        vertex_array = np.asarray(vertices, dtype=np.float32).reshape(-1, 3)
        normal_array = np.asarray(normals, dtype=np.float64).reshape(-1, 3)
        triangle_array = np.asarray(triangles, dtype=np.int32).reshape(-1, 3)
        geom_ids = np.asarray(triangle_geom_ids, dtype=np.int32).reshape(-1)

        if triangle_array.shape[0] == 0:
            raise RuntimeError("Cannot build an intersector for an empty scene")
        if normal_array.shape != vertex_array.shape:
            raise ValueError(
                f"normals shape {normal_array.shape} does not match vertices {vertex_array.shape}"
            )
        if geom_ids.shape[0] != triangle_array.shape[0]:
            raise ValueError("triangle_geom_ids must have one entry per triangle")
        if triangle_array.min() < 0 or triangle_array.max() >= vertex_array.shape[0]:
            raise ValueError("triangle indices reference missing vertices")
        if geom_ids[0] != 0 or np.any(np.diff(geom_ids) < 0):
            raise ValueError("triangle_geom_ids must start at 0 and be non-decreasing")

        self._normals = normal_array
        self._triangles = triangle_array
        self._triangle_geom_ids = geom_ids
        self.num_triangles = int(triangle_array.shape[0])
        self.num_surfaces = int(geom_ids[-1]) + 1
        # First global triangle index of every mesh
        self._geom_offsets = np.searchsorted(geom_ids, np.arange(self.num_surfaces))
        self._geom_counts = np.bincount(geom_ids, minlength=self.num_surfaces)
        self.queries = 0

        self._vertices = ti.Vector.field(3, dtype=ti.f32, shape=vertex_array.shape[0])
        self._indices = ti.Vector.field(3, dtype=ti.i32, shape=self.num_triangles)
        self._vertices.from_numpy(vertex_array)
        self._indices.from_numpy(triangle_array)

    def intersect(self, ray: Ray) -> bool:
        """Closest-hit query. Fills the hit record and clamps tfar on a hit."""
        self.queries += 1
        result = _closest_hit(
            self._vertices,
            self._indices,
            self.num_triangles,
            _to_ti_vec3(ray.origin),
            _to_ti_vec3(ray.direction),
            ray.tnear,
            ray.tfar,
        )
        triangle_index = int(result[0])
        if triangle_index < 0:
            return False

        geom_id = int(self._triangle_geom_ids[triangle_index])
        ray.tfar = float(result[1])
        ray.hit.geom_id = geom_id
        ray.hit.prim_id = triangle_index - int(self._geom_offsets[geom_id])
        ray.hit.u = float(result[2])
        ray.hit.v = float(result[3])
        return True

    def occluded(self, ray: Ray) -> bool:
        """Any-hit query. A blocked ray gets its surface id sentinel overwritten."""
        self.queries += 1
        blocked = _any_hit(
            self._vertices,
            self._indices,
            self.num_triangles,
            _to_ti_vec3(ray.origin),
            _to_ti_vec3(ray.direction),
            ray.tnear,
            ray.tfar,
        )
        if blocked:
            ray.mark_occluded()
        return bool(blocked)

    def interpolate_normal(self, geom_id: int, prim_id: int, u: float, v: float) -> Vec3:
        """Barycentric blend of the triangle's vertex normals (not normalized).

        Raises:
            InvalidSurfaceError: If the ids do not name a committed triangle.
        """
        if geom_id == INVALID_GEOMETRY_ID or not 0 <= geom_id < self.num_surfaces:
            raise InvalidSurfaceError(geom_id, self.num_surfaces)
        if not 0 <= prim_id < self._geom_counts[geom_id]:
            raise IndexError(f"Primitive {prim_id} does not exist on surface {geom_id}")

        tri = self._triangles[self._geom_offsets[geom_id] + prim_id]
        n0, n1, n2 = self._normals[tri]
        return (1.0 - u - v) * n0 + u * n1 + v * n2
