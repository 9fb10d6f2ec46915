"""Image-plane driver.

Walks every pixel in row-major order, generates the primary ray through the
pixel center, evaluates exactly one estimator on it and writes the linear
radiance into a framebuffer. One sample per pixel per pass; no ray reuse and
no adaptive sampling.

The ImageRenderer class bundles the collaborators of a render (intersector,
material table, camera, lighting and random stream) so a render can be
repeated or probed pixel by pixel.

Example:
    >>> from pathtracer.core.renderer import Estimator, ImageRenderer
    >>> from pathtracer.preview.framebuffer import Framebuffer
    >>> renderer = ImageRenderer(intersector, materials, camera, lighting, seed=1)
    >>> framebuffer = Framebuffer(64, 64)
    >>> renderer.render(framebuffer, estimator=Estimator.DIRECT)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum

from pathtracer.camera.pinhole import PinholeCamera
from pathtracer.core.integrator import MAX_BOUNCES, estimate_direct, path_trace
from pathtracer.core.intersector import Intersector
from pathtracer.core.lighting import SceneLighting
from pathtracer.core.ray import Vec3
from pathtracer.core.sampler import RandomStream
from pathtracer.materials.lambertian import DEFAULT_GAMMA, MaterialTable
from pathtracer.preview.framebuffer import FramebufferLike
from pathtracer.utils.timer import ScopedTimer

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (rows_done, rows_total)
ProgressCallback = Callable[[int, int], None]


class Estimator(str, Enum):
    """Radiance estimator evaluated per pixel."""

    DIRECT = "direct"
    PATH = "path"

    @classmethod
    def parse(cls, value: str | Estimator) -> Estimator:
        """Look up an estimator by name.

        Raises:
            ValueError: If the name is unknown.
        """
        if isinstance(value, Estimator):
            return value
        try:
            return cls(value.lower())
        except ValueError:
            names = ", ".join(e.value for e in cls)
            raise ValueError(f"Unknown estimator {value!r}; expected one of: {names}") from None


class ImageRenderer:
    """Renders images of one scene with one camera and lighting setup.

    Attributes:
        intersector: Scene query interface.
        materials: Material table indexed by surface id.
        camera: Primary ray generator.
        lighting: Light and background policy.
        stream: Random stream used by the path tracer for the whole render.
        max_bounces: Bounce cap of the path tracer.
        gamma: Albedo decoding exponent of the direct estimator.
    """

    def __init__(
        self,
        intersector: Intersector,
        materials: MaterialTable,
        camera: PinholeCamera,
        lighting: SceneLighting | None = None,
        *,
        stream: RandomStream | None = None,
        seed: int | None = None,
        max_bounces: int = MAX_BOUNCES,
        gamma: float = DEFAULT_GAMMA,
    ) -> None:
        """Initialize the renderer.

        Args:
            intersector: Scene query interface.
            materials: Material table indexed by surface id.
            camera: Primary ray generator.
            lighting: Light and background policy. Defaults to SceneLighting().
            stream: Random stream for the render. Built from ``seed`` if omitted.
            seed: Seed for the default stream. Ignored when ``stream`` is given.
            max_bounces: Bounce cap of the path tracer.
            gamma: Albedo decoding exponent of the direct estimator.

        Raises:
            ValueError: If max_bounces is negative.
        """
        if max_bounces < 0:
            raise ValueError(f"max_bounces must be non-negative, got {max_bounces}")
        self.intersector = intersector
        self.materials = materials
        self.camera = camera
        self.lighting = lighting if lighting is not None else SceneLighting()
        self.stream = stream if stream is not None else RandomStream(seed)
        self.max_bounces = max_bounces
        self.gamma = gamma

    def render_pixel(
        self,
        pixel_x: int,
        pixel_y: int,
        width: int,
        height: int,
        estimator: Estimator | str = Estimator.PATH,
    ) -> Vec3:
        """Evaluate one estimator for the center of a single pixel.

        Returns:
            The linear radiance (RGB) of the pixel.
        """
        ray = self.camera.generate_ray(pixel_x, pixel_y, width, height)
        if Estimator.parse(estimator) is Estimator.DIRECT:
            return estimate_direct(
                self.intersector, self.materials, ray, self.lighting, self.gamma
            )
        return path_trace(
            self.intersector,
            self.materials,
            ray,
            self.stream,
            self.lighting,
            self.max_bounces,
        )

    def render(
        self,
        framebuffer: FramebufferLike,
        estimator: Estimator | str = Estimator.PATH,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render every pixel of ``framebuffer`` once.

        Args:
            framebuffer: Output target. Its width and height set the resolution.
            estimator: Which estimator to evaluate per pixel.
            callback: Optional callback invoked after each row with
                (rows_done, rows_total).
        """
        kind = Estimator.parse(estimator)
        width = framebuffer.width
        height = framebuffer.height
        logger.info("Rendering %dx%d with the %s estimator", width, height, kind.value)

        with ScopedTimer("Tracing Scene"):
            for y in range(height):
                for x in range(width):
                    radiance = self.render_pixel(x, y, width, height, kind)
                    framebuffer.set_pixel(
                        x, y, float(radiance[0]), float(radiance[1]), float(radiance[2])
                    )
                logger.debug("Finished row %d/%d", y + 1, height)
                if callback is not None:
                    callback(y + 1, height)


def render_image(
    intersector: Intersector,
    materials: MaterialTable,
    framebuffer: FramebufferLike,
    camera: PinholeCamera,
    lighting: SceneLighting | None = None,
    *,
    estimator: Estimator | str = Estimator.PATH,
    stream: RandomStream | None = None,
    max_bounces: int = MAX_BOUNCES,
    gamma: float = DEFAULT_GAMMA,
) -> None:
    """Render one pass over every pixel into ``framebuffer``.

    Convenience wrapper around ImageRenderer for one-off renders.
    """
    renderer = ImageRenderer(
        intersector,
        materials,
        camera,
        lighting,
        stream=stream,
        max_bounces=max_bounces,
        gamma=gamma,
    )
    renderer.render(framebuffer, estimator)
