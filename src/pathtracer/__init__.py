"""Stochastic light-transport estimation for triangle-mesh scenes.

This package renders per-pixel radiance by simulating random light paths,
with two estimators:
- Direct lighting from a single point light with shadow-ray visibility
- Fixed-depth path tracing with cosine-weighted hemisphere sampling

Subpackages:
    core: Rays and vector math, estimators, random streams, image-plane driver
    camera: Pinhole camera ray generation
    geometry: Taichi ray-triangle intersection
    materials: Lambertian materials and the material table
    scene: Taichi-backed intersector, scene builder and preset scenes
    preview: Framebuffer, tone mapping and image export
    utils: Logging and timing helpers
"""

__version__ = "0.1.0"
