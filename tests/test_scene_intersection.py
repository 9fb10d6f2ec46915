"""Unit tests for triangle intersection and the Taichi intersector.

Tests cover:
- Moller-Trumbore hit_triangle inside a kernel (hits, misses, barycentrics)
- Closest-hit queries with surface and local primitive ids
- Ray interval handling (tnear, tfar clamping)
- Occlusion queries and the surface id sentinel
- Zero-direction rays
- Normal interpolation and invalid ids
"""

import math

import numpy as np
import pytest
import taichi as ti


class TestHitTriangle:
    """Tests for the hit_triangle Taichi function."""

    def _run(self, origin, direction, t_min=0.0, t_max=1e30):
        from pathtracer.geometry.triangle import hit_triangle, vec3

        result_hit = ti.field(dtype=ti.i32, shape=())
        result_t = ti.field(dtype=ti.f32, shape=())
        result_u = ti.field(dtype=ti.f32, shape=())
        result_v = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(o: vec3, d: vec3, t0: ti.f32, t1: ti.f32):
            rec = hit_triangle(
                o,
                d,
                vec3(0.0, 0.0, 0.0),
                vec3(1.0, 0.0, 0.0),
                vec3(0.0, 1.0, 0.0),
                t0,
                t1,
            )
            result_hit[None] = rec.hit
            result_t[None] = rec.t
            result_u[None] = rec.u
            result_v[None] = rec.v

        test_kernel(vec3(*origin), vec3(*direction), t_min, t_max)
        return result_hit[None], result_t[None], result_u[None], result_v[None]

    def test_hit_with_barycentrics(self):
        hit, t, u, v = self._run((0.25, 0.5, 1.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert abs(t - 1.0) < 1e-6
        assert abs(u - 0.25) < 1e-6
        assert abs(v - 0.5) < 1e-6

    def test_unnormalized_direction(self):
        """t is measured in multiples of the direction length."""
        hit, t, _, _ = self._run((0.25, 0.25, 1.0), (0.0, 0.0, -4.0))
        assert hit == 1
        assert abs(t - 0.25) < 1e-6

    def test_back_face_is_hit(self):
        hit, t, _, _ = self._run((0.25, 0.25, -1.0), (0.0, 0.0, 1.0))
        assert hit == 1
        assert abs(t - 1.0) < 1e-6

    def test_miss_outside(self):
        hit, _, _, _ = self._run((0.8, 0.8, 1.0), (0.0, 0.0, -1.0))
        assert hit == 0

    def test_miss_parallel(self):
        hit, _, _, _ = self._run((0.0, 0.0, 1.0), (1.0, 0.0, 0.0))
        assert hit == 0

    def test_miss_zero_direction(self):
        hit, _, _, _ = self._run((0.25, 0.25, 1.0), (0.0, 0.0, 0.0))
        assert hit == 0

    def test_interval_is_half_open(self):
        hit, _, _, _ = self._run((0.25, 0.25, 1.0), (0.0, 0.0, -1.0), t_max=1.0)
        assert hit == 0
        hit, _, _, _ = self._run((0.25, 0.25, 1.0), (0.0, 0.0, -1.0), t_min=1.5)
        assert hit == 0


def _build(*quads):
    """Build an intersector from (z, albedo) quads spanning [-1, 1]^2 and facing +z."""
    from pathtracer.scene.manager import SceneManager

    scene = SceneManager()
    for z, albedo in quads:
        scene.add_quad((-1.0, -1.0, z), (2.0, 0.0, 0.0), (0.0, 2.0, 0.0), albedo)
    return scene.build()


class TestTaichiIntersector:
    """Tests for TaichiIntersector queries."""

    def test_closest_hit_fills_record(self):
        from pathtracer.core.ray import make_ray

        intersector, _ = _build((-2.0, (0.5, 0.5, 0.5)))
        ray = make_ray((0.5, -0.5, 0.0), (0.0, 0.0, -1.0))
        assert intersector.intersect(ray)
        assert ray.hit.geom_id == 0
        assert ray.hit.prim_id == 0
        assert ray.tfar == pytest.approx(2.0, abs=1e-5)
        assert ray.hit.u == pytest.approx(0.5, abs=1e-5)
        assert ray.hit.v == pytest.approx(0.25, abs=1e-5)

    def test_second_triangle_of_quad(self):
        from pathtracer.core.ray import make_ray

        intersector, _ = _build((-2.0, (0.5, 0.5, 0.5)))
        ray = make_ray((-0.5, 0.5, 0.0), (0.0, 0.0, -1.0))
        assert intersector.intersect(ray)
        assert ray.hit.prim_id == 1
        assert ray.hit.u == pytest.approx(0.25, abs=1e-5)
        assert ray.hit.v == pytest.approx(0.5, abs=1e-5)

    def test_closest_of_several_surfaces(self):
        """The nearer quad wins even though it was added last."""
        from pathtracer.core.ray import make_ray

        intersector, materials = _build((-4.0, (0.1, 0.1, 0.1)), (-2.0, (0.9, 0.9, 0.9)))
        ray = make_ray((0.5, -0.5, 0.0), (0.0, 0.0, -1.0))
        assert intersector.intersect(ray)
        assert ray.hit.geom_id == 1
        assert ray.hit.prim_id == 0
        assert ray.tfar == pytest.approx(2.0, abs=1e-5)
        np.testing.assert_allclose(materials.diffuse_color(ray.hit.geom_id), [0.9, 0.9, 0.9])

    def test_tnear_skips_nearer_surface(self):
        from pathtracer.core.ray import make_ray

        intersector, _ = _build((-4.0, (0.1, 0.1, 0.1)), (-2.0, (0.9, 0.9, 0.9)))
        ray = make_ray((0.5, -0.5, 0.0), (0.0, 0.0, -1.0), tnear=2.5)
        assert intersector.intersect(ray)
        assert ray.hit.geom_id == 0
        assert ray.tfar == pytest.approx(4.0, abs=1e-5)

    def test_tfar_limits_search(self):
        from pathtracer.core.ray import INVALID_GEOMETRY_ID, make_ray

        intersector, _ = _build((-2.0, (0.5, 0.5, 0.5)))
        ray = make_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), tfar=1.5)
        assert not intersector.intersect(ray)
        assert ray.hit.geom_id == INVALID_GEOMETRY_ID
        assert ray.tfar == 1.5

    def test_miss_leaves_record(self):
        from pathtracer.core.ray import INVALID_GEOMETRY_ID, make_ray

        intersector, _ = _build((-2.0, (0.5, 0.5, 0.5)))
        ray = make_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert not intersector.intersect(ray)
        assert ray.hit.geom_id == INVALID_GEOMETRY_ID
        assert math.isinf(ray.tfar)

    def test_zero_direction_misses(self):
        from pathtracer.core.ray import INVALID_GEOMETRY_ID, make_ray

        intersector, _ = _build((-2.0, (0.5, 0.5, 0.5)))
        ray = make_ray((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))
        assert not intersector.intersect(ray)
        assert not intersector.occluded(ray)
        assert ray.hit.geom_id == INVALID_GEOMETRY_ID

    def test_query_counter(self):
        from pathtracer.core.ray import make_ray

        intersector, _ = _build((-2.0, (0.5, 0.5, 0.5)))
        intersector.intersect(make_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)))
        intersector.occluded(make_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)))
        assert intersector.queries == 2

    def test_satisfies_intersector_protocol(self):
        from pathtracer.core.intersector import Intersector

        intersector, _ = _build((-2.0, (0.5, 0.5, 0.5)))
        assert isinstance(intersector, Intersector)


class TestOcclusion:
    """Tests for occlusion queries."""

    def test_blocked_overwrites_sentinel(self):
        from pathtracer.core.ray import INVALID_GEOMETRY_ID, make_ray

        intersector, _ = _build((-2.0, (0.5, 0.5, 0.5)))
        ray = make_ray((0.0, 0.0, 0.0), (0.0, 0.0, -4.0), tnear=1e-3, tfar=1.0)
        assert intersector.occluded(ray)
        assert ray.hit.geom_id != INVALID_GEOMETRY_ID

    def test_unblocked_keeps_sentinel(self):
        """A surface past tfar does not block."""
        from pathtracer.core.ray import INVALID_GEOMETRY_ID, make_ray

        intersector, _ = _build((-2.0, (0.5, 0.5, 0.5)))
        ray = make_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), tnear=1e-3, tfar=1.0)
        assert not intersector.occluded(ray)
        assert ray.hit.geom_id == INVALID_GEOMETRY_ID

    def test_surface_at_origin_is_skipped_by_tnear(self):
        from pathtracer.core.ray import INVALID_GEOMETRY_ID, make_ray

        intersector, _ = _build((-2.0, (0.5, 0.5, 0.5)))
        ray = make_ray((0.0, 0.0, -2.0), (0.0, 0.0, 1.0), tnear=1e-3, tfar=1.0)
        assert not intersector.occluded(ray)
        assert ray.hit.geom_id == INVALID_GEOMETRY_ID


class TestInterpolateNormal:
    """Tests for interpolate_normal."""

    def test_flat_quad_normal(self):
        intersector, _ = _build((-2.0, (0.5, 0.5, 0.5)))
        np.testing.assert_allclose(intersector.interpolate_normal(0, 1, 0.2, 0.3), [0.0, 0.0, 1.0])

    def test_barycentric_blend(self):
        from pathtracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_mesh(
            vertices=[(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0)],
            triangles=[(0, 1, 2)],
            diffuse_color=(0.5, 0.5, 0.5),
            normals=[(1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0)],
        )
        intersector, _ = scene.build()
        np.testing.assert_allclose(intersector.interpolate_normal(0, 0, 0.25, 0.5), [0.25, 0.25, 0.5])

    @pytest.mark.parametrize("geom_id", [-1, 1, 7])
    def test_invalid_surface(self, geom_id):
        from pathtracer.materials.lambertian import InvalidSurfaceError

        intersector, _ = _build((-2.0, (0.5, 0.5, 0.5)))
        with pytest.raises(InvalidSurfaceError):
            intersector.interpolate_normal(geom_id, 0, 0.0, 0.0)

    def test_invalid_primitive(self):
        intersector, _ = _build((-2.0, (0.5, 0.5, 0.5)))
        with pytest.raises(IndexError):
            intersector.interpolate_normal(0, 2, 0.0, 0.0)


class TestIntersectorConstruction:
    """Tests for TaichiIntersector input validation."""

    def test_empty_scene(self):
        from pathtracer.scene.intersection import TaichiIntersector

        with pytest.raises(RuntimeError):
            TaichiIntersector(np.zeros((0, 3)), np.zeros((0, 3)), np.zeros((0, 3)), np.zeros(0))

    def test_normals_shape_mismatch(self):
        from pathtracer.scene.intersection import TaichiIntersector

        vertices = np.eye(3)
        with pytest.raises(ValueError):
            TaichiIntersector(vertices, np.eye(3)[:2], [(0, 1, 2)], [0])

    def test_geom_ids_must_start_at_zero(self):
        from pathtracer.scene.intersection import TaichiIntersector

        vertices = np.eye(3)
        with pytest.raises(ValueError):
            TaichiIntersector(vertices, vertices, [(0, 1, 2)], [1])

    def test_missing_vertex(self):
        from pathtracer.scene.intersection import TaichiIntersector

        vertices = np.eye(3)
        with pytest.raises(ValueError):
            TaichiIntersector(vertices, vertices, [(0, 1, 3)], [0])
