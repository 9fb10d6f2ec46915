"""Scene module: intersector, scene builder and preset scenes.

Components:
    intersection: Taichi-backed triangle-mesh intersector
    manager: Scene builder assigning one material per mesh
    presets: Facing-quad and Cornell-style box scenes

Mesh data is uploaded to Taichi fields when the scene is built, so
``ti.init`` must run before ``SceneManager.build``.
"""

from .intersection import TaichiIntersector
from .manager import MeshInfo, SceneManager, compute_vertex_normals
from .presets import (
    PRESETS,
    ScenePreset,
    create_cornell_box_scene,
    create_facing_quad_scene,
    get_preset,
)

__all__ = [
    "TaichiIntersector",
    "MeshInfo",
    "SceneManager",
    "compute_vertex_normals",
    "PRESETS",
    "ScenePreset",
    "create_cornell_box_scene",
    "create_facing_quad_scene",
    "get_preset",
]
