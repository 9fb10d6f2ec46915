"""Unit tests for the image-plane driver.

Tests cover:
- Estimator name parsing
- Row-major pixel order and progress callbacks
- Estimator selection per render
- Framebuffer contents and render_image
"""

import numpy as np
import pytest


class RecordingFramebuffer:
    """Framebuffer double that records the order of writes."""

    def __init__(self, width, height):
        self.width = width
        self.height = height
        self.writes = []

    def set_pixel(self, x, y, r, g, b):
        self.writes.append((x, y, (r, g, b)))


class TestEstimator:
    """Tests for Estimator.parse."""

    @pytest.mark.parametrize("name", ["direct", "DIRECT", "Direct"])
    def test_parse_direct(self, name):
        from pathtracer.core.renderer import Estimator

        assert Estimator.parse(name) is Estimator.DIRECT

    def test_parse_passthrough(self):
        from pathtracer.core.renderer import Estimator

        assert Estimator.parse(Estimator.PATH) is Estimator.PATH

    def test_parse_unknown(self):
        from pathtracer.core.renderer import Estimator

        with pytest.raises(ValueError, match="Unknown estimator"):
            Estimator.parse("bidirectional")


class TestImageRenderer:
    """Tests for ImageRenderer."""

    def _renderer(self, intersector, materials, **kwargs):
        from pathtracer.camera.pinhole import PinholeCamera
        from pathtracer.core.lighting import SceneLighting
        from pathtracer.core.renderer import ImageRenderer

        # Straight down at the floor, image x along world +x
        camera = PinholeCamera.look_at((0.0, 2.0, 0.0), (0.0, 0.0, 0.0), vup=(0.0, 0.0, -1.0))
        lighting = SceneLighting.with_light((0.0, 1.0, 0.0))
        return ImageRenderer(intersector, materials, camera, lighting, **kwargs)

    def test_row_major_order(self, floor_plane, gray_materials):
        renderer = self._renderer(floor_plane, gray_materials)
        framebuffer = RecordingFramebuffer(3, 2)
        renderer.render(framebuffer, "direct")
        assert [(x, y) for x, y, _ in framebuffer.writes] == [
            (0, 0), (1, 0), (2, 0), (0, 1), (1, 1), (2, 1),
        ]

    def test_progress_callback(self, floor_plane, gray_materials):
        from pathtracer.preview.framebuffer import Framebuffer

        renderer = self._renderer(floor_plane, gray_materials)
        calls = []
        renderer.render(Framebuffer(2, 3), "direct", callback=lambda done, total: calls.append((done, total)))
        assert calls == [(1, 3), (2, 3), (3, 3)]

    def test_one_primary_ray_per_pixel(self, floor_plane, gray_materials):
        from pathtracer.preview.framebuffer import Framebuffer

        renderer = self._renderer(floor_plane, gray_materials)
        renderer.render(Framebuffer(4, 3), "direct")
        assert floor_plane.intersect_calls == 12
        assert floor_plane.occluded_calls == 12

    def test_direct_render_is_symmetric(self, floor_plane, gray_materials):
        """The light sits above the image center, so the image is mirror symmetric."""
        from pathtracer.preview.framebuffer import Framebuffer

        renderer = self._renderer(floor_plane, gray_materials)
        framebuffer = Framebuffer(5, 5)
        renderer.render(framebuffer, "direct")
        image = framebuffer.to_numpy()
        np.testing.assert_allclose(image, image[:, ::-1], rtol=1e-5)
        np.testing.assert_allclose(image, image[::-1, :], rtol=1e-5)
        assert image[2, 2, 0] == image.max()

    def test_estimator_selection(self, gray_materials):
        from doubles import EmptyIntersector

        from pathtracer.preview.framebuffer import Framebuffer

        renderer = self._renderer(EmptyIntersector(), gray_materials, seed=0)
        direct = Framebuffer(2, 2)
        path = Framebuffer(2, 2)
        renderer.render(direct, "direct")
        renderer.render(path, "path")
        np.testing.assert_array_equal(direct.to_numpy(), np.zeros((2, 2, 3)))
        np.testing.assert_allclose(path.to_numpy(), np.full((2, 2, 3), 0.5))

    def test_render_pixel_matches_render(self, floor_plane, gray_materials):
        from pathtracer.preview.framebuffer import Framebuffer

        renderer = self._renderer(floor_plane, gray_materials)
        framebuffer = Framebuffer(3, 3)
        renderer.render(framebuffer, "direct")
        pixel = renderer.render_pixel(0, 2, 3, 3, "direct")
        np.testing.assert_allclose(framebuffer.get_pixel(0, 2), pixel, rtol=1e-6)

    def test_stream_shared_across_pixels(self, gray_materials):
        from doubles import EnclosingIntersector

        from pathtracer.core.sampler import RandomStream
        from pathtracer.preview.framebuffer import Framebuffer

        stream = RandomStream(4)
        renderer = self._renderer(EnclosingIntersector(), gray_materials, stream=stream, max_bounces=3)
        renderer.render(Framebuffer(2, 2), "path")
        assert stream.draws == 2 * 3 * 4

    def test_same_seed_same_image(self, gray_materials):
        from doubles import EnclosingIntersector

        from pathtracer.preview.framebuffer import Framebuffer

        images = []
        for _ in range(2):
            renderer = self._renderer(EnclosingIntersector(), gray_materials, seed=11)
            framebuffer = Framebuffer(3, 2)
            renderer.render(framebuffer, "path")
            images.append(framebuffer.to_numpy())
        np.testing.assert_array_equal(images[0], images[1])

    def test_negative_bounce_cap_rejected(self, floor_plane, gray_materials):
        with pytest.raises(ValueError):
            self._renderer(floor_plane, gray_materials, max_bounces=-1)

    def test_render_logs_timing(self, floor_plane, gray_materials, caplog):
        import logging

        from pathtracer.preview.framebuffer import Framebuffer

        renderer = self._renderer(floor_plane, gray_materials)
        with caplog.at_level(logging.INFO, logger="pathtracer"):
            renderer.render(Framebuffer(2, 2), "direct")
        messages = [record.getMessage() for record in caplog.records]
        assert any("Rendering 2x2 with the direct estimator" in m for m in messages)
        assert any(m.startswith("Tracing Scene:") for m in messages)


class TestRenderImage:
    def test_render_image_fills_framebuffer(self, floor_plane, gray_materials):
        from pathtracer.camera.pinhole import PinholeCamera
        from pathtracer.core.lighting import SceneLighting
        from pathtracer.core.renderer import render_image
        from pathtracer.preview.framebuffer import Framebuffer

        camera = PinholeCamera.look_at((0.0, 2.0, 0.0), (0.0, 0.0, 0.0), vup=(0.0, 0.0, -1.0))
        framebuffer = Framebuffer(3, 3)
        render_image(
            floor_plane,
            gray_materials,
            framebuffer,
            camera,
            SceneLighting.with_light((0.0, 1.0, 0.0)),
            estimator="direct",
        )
        assert np.all(framebuffer.to_numpy() > 0.0)
