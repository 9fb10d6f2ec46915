"""Preset scenes.

Two scenes are provided:

- ``create_facing_quad_scene``: a single diffuse quad facing the camera with
  a point light straight above its center (along its normal). With no
  occluders the direct-lighting image is a smooth, radially symmetric falloff
  centered on the quad point nearest the light.
- ``create_cornell_box_scene``: an open box with red and green side walls,
  white floor, ceiling and back wall, and a white block on the floor, lit by
  a point light at (0, 1.4, 0) under the ceiling. The direct-lighting camera
  sits at (0, 0.8, 1.85) with the unscaled film remap; the path-tracing camera
  sits at (0, 0.8, 4.5) with a 34.5159 degree vertical field of view.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.scene.presets import create_cornell_box_scene
    >>> preset = create_cornell_box_scene()
    >>> intersector, materials = preset.scene.build()
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from pathtracer.camera.pinhole import CORNELL_VFOV, PinholeCamera
from pathtracer.core.lighting import DEFAULT_LIGHT_POSITION, SceneLighting
from pathtracer.core.renderer import Estimator
from pathtracer.scene.manager import SceneManager

# =============================================================================
# Scene Constants
# =============================================================================

# Box extents: x in [-BOX_HALF_WIDTH, BOX_HALF_WIDTH], y in [0, BOX_HEIGHT],
# z in [-BOX_HALF_DEPTH, BOX_HALF_DEPTH]; open toward +z
BOX_HALF_WIDTH = 1.0
BOX_HEIGHT = 1.6
BOX_HALF_DEPTH = 1.0

RED_WALL_ALBEDO = (0.65, 0.05, 0.05)
GREEN_WALL_ALBEDO = (0.12, 0.45, 0.15)
WHITE_WALL_ALBEDO = (0.73, 0.73, 0.73)

DIRECT_CAMERA_POSITION = (0.0, 0.8, 1.85)
PATH_CAMERA_POSITION = (0.0, 0.8, 4.5)


@dataclass
class ScenePreset:
    """A scene with the cameras and lighting it is meant to be rendered with.

    Attributes:
        scene: The scene builder. Call ``scene.build()`` after ``ti.init``.
        camera: Camera for path-traced renders.
        lighting: Point light and background policy.
        direct_camera: Camera for direct-lighting renders, when it differs.
    """

    scene: SceneManager
    camera: PinholeCamera
    lighting: SceneLighting
    direct_camera: PinholeCamera | None = None

    def camera_for(self, estimator: Estimator | str) -> PinholeCamera:
        if Estimator.parse(estimator) is Estimator.DIRECT and self.direct_camera is not None:
            return self.direct_camera
        return self.camera


def create_facing_quad_scene(
    distance: float = 3.0,
    size: float = 8.0,
    light_height: float = 1.0,
    albedo: tuple[float, float, float] = (0.8, 0.8, 0.8),
) -> ScenePreset:
    """Create a square quad centered on the -Z axis, facing a camera at the origin.

    Args:
        distance: Distance from the camera to the quad plane (z = -distance).
        size: Edge length of the quad.
        light_height: Height of the point light above the quad center,
            measured along the quad normal (+Z).
        albedo: Diffuse color of the quad.

    Returns:
        The preset. Both estimators use the same camera.
    """
    if distance <= 0.0 or size <= 0.0 or light_height <= 0.0:
        raise ValueError("distance, size and light_height must be positive")

    half = size / 2.0
    scene = SceneManager()
    scene.add_quad(
        corner=(-half, -half, -distance),
        edge_u=(size, 0.0, 0.0),
        edge_v=(0.0, size, 0.0),
        diffuse_color=albedo,
        name="quad",
    )

    lighting = SceneLighting.with_light((0.0, 0.0, -distance + light_height))
    return ScenePreset(scene=scene, camera=PinholeCamera(), lighting=lighting)


def _add_block(
    scene: SceneManager,
    x_range: tuple[float, float],
    z_range: tuple[float, float],
    height: float,
    albedo: tuple[float, float, float],
) -> None:
    """Add an axis-aligned block standing on the floor (five outward-facing quads)."""
    x0, x1 = x_range
    z0, z1 = z_range
    dx = x1 - x0
    dz = z1 - z0
    scene.add_quad((x0, height, z1), (dx, 0.0, 0.0), (0.0, 0.0, -dz), albedo, name="block top")
    scene.add_quad((x0, 0.0, z1), (dx, 0.0, 0.0), (0.0, height, 0.0), albedo, name="block front")
    scene.add_quad((x1, 0.0, z0), (-dx, 0.0, 0.0), (0.0, height, 0.0), albedo, name="block back")
    scene.add_quad((x0, 0.0, z0), (0.0, 0.0, dz), (0.0, height, 0.0), albedo, name="block left")
    scene.add_quad((x1, 0.0, z1), (0.0, 0.0, -dz), (0.0, height, 0.0), albedo, name="block right")


def create_cornell_box_scene(with_block: bool = True) -> ScenePreset:
    """Create the open box scene with inward-facing walls.

    Args:
        with_block: Whether to place a white block on the floor.

    Returns:
        The preset with separate cameras for the two estimators.
    """
    w = BOX_HALF_WIDTH
    h = BOX_HEIGHT
    d = BOX_HALF_DEPTH
    scene = SceneManager()

    scene.add_quad((-w, 0.0, d), (2 * w, 0.0, 0.0), (0.0, 0.0, -2 * d), WHITE_WALL_ALBEDO, name="floor")
    scene.add_quad((-w, h, d), (0.0, 0.0, -2 * d), (2 * w, 0.0, 0.0), WHITE_WALL_ALBEDO, name="ceiling")
    scene.add_quad((-w, 0.0, -d), (2 * w, 0.0, 0.0), (0.0, h, 0.0), WHITE_WALL_ALBEDO, name="back wall")
    scene.add_quad((-w, 0.0, d), (0.0, 0.0, -2 * d), (0.0, h, 0.0), RED_WALL_ALBEDO, name="left wall")
    scene.add_quad((w, 0.0, d), (0.0, h, 0.0), (0.0, 0.0, -2 * d), GREEN_WALL_ALBEDO, name="right wall")

    if with_block:
        _add_block(scene, (-0.5, 0.1), (-0.6, 0.0), 0.6, WHITE_WALL_ALBEDO)

    return ScenePreset(
        scene=scene,
        camera=PinholeCamera.translated(PATH_CAMERA_POSITION, vfov=CORNELL_VFOV),
        lighting=SceneLighting.with_light(DEFAULT_LIGHT_POSITION),
        direct_camera=PinholeCamera.translated(DIRECT_CAMERA_POSITION),
    )


PRESETS: dict[str, Callable[[], ScenePreset]] = {
    "quad": create_facing_quad_scene,
    "cornell": create_cornell_box_scene,
}


def get_preset(name: str) -> ScenePreset:
    """Build a preset by name.

    Raises:
        ValueError: If the name is unknown.
    """
    factory = PRESETS.get(name)
    if factory is None:
        raise ValueError(f"Unknown scene preset {name!r}; expected one of: {', '.join(PRESETS)}")
    return factory()
