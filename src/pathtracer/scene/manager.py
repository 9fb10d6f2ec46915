"""Scene manager coordinating meshes and materials.

The SceneManager collects triangle meshes, assigns every mesh one Lambertian
material, and commits the result into the two read-only collaborators the
estimators consume:

- a ``TaichiIntersector`` answering ray queries, and
- a ``MaterialTable`` indexed by the surface id the intersector reports.

Surface ids are assigned in insertion order, so mesh ``i`` always uses
material ``i``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> floor = scene.add_quad((-1, 0, 1), (2, 0, 0), (0, 0, -2), diffuse_color=(0.7, 0.7, 0.7))
    >>> intersector, materials = scene.build()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import numpy as np
import numpy.typing as npt

from pathtracer.core.ray import as_vec3
from pathtracer.materials.lambertian import Material, MaterialTable
from pathtracer.scene.intersection import TaichiIntersector
from pathtracer.utils.timer import ScopedTimer

logger = logging.getLogger(__name__)


def compute_vertex_normals(
    vertices: npt.NDArray[np.float64], triangles: npt.NDArray[np.int32]
) -> npt.NDArray[np.float64]:
    """Area-weighted average of adjacent face normals for every vertex.

    Vertices not referenced by any triangle get a zero normal.
    """
    v0 = vertices[triangles[:, 0]]
    v1 = vertices[triangles[:, 1]]
    v2 = vertices[triangles[:, 2]]
    # Unnormalized cross product weights each face by twice its area
    face_normals = np.cross(v1 - v0, v2 - v0)

    normals = np.zeros_like(vertices)
    for corner in range(3):
        np.add.at(normals, triangles[:, corner], face_normals)

    lengths = np.linalg.norm(normals, axis=1, keepdims=True)
    np.divide(normals, lengths, out=normals, where=lengths > 0.0)
    return normals


@dataclass
class MeshInfo:
    """Information about a mesh in the scene.

    Attributes:
        geom_id: Surface id reported by the intersector for this mesh.
        vertices: (N, 3) vertex positions.
        normals: (N, 3) per-vertex shading normals.
        triangles: (M, 3) vertex indices local to this mesh.
        material: The mesh's material.
    """

    geom_id: int
    vertices: npt.NDArray[np.float64]
    normals: npt.NDArray[np.float64]
    triangles: npt.NDArray[np.int32]
    material: Material

    @property
    def triangle_count(self) -> int:
        return int(self.triangles.shape[0])


class SceneManager:
    """Builder for triangle-mesh scenes with one material per mesh."""

    def __init__(self) -> None:
        self._meshes: list[MeshInfo] = []

    def add_mesh(
        self,
        vertices: npt.ArrayLike,
        triangles: npt.ArrayLike,
        diffuse_color: npt.ArrayLike | Material,
        normals: npt.ArrayLike | None = None,
        name: str = "",
    ) -> int:
        """Add a triangle mesh with a Lambertian material.

        Args:
            vertices: (N, 3) vertex positions.
            triangles: (M, 3) vertex indices, counter-clockwise when seen
                from the front.
            diffuse_color: Diffuse albedo (RGB in [0, 1]) or a Material.
            normals: Optional (N, 3) per-vertex normals. Computed from the
                faces when omitted.
            name: Optional label for logs.

        Returns:
            The surface id of the new mesh.

        Raises:
            ValueError: If the mesh is empty, malformed, or the albedo is out
                of range.
        """
        vertex_array = np.asarray(vertices, dtype=np.float64).reshape(-1, 3)
        triangle_array = np.asarray(triangles, dtype=np.int32).reshape(-1, 3)

        if triangle_array.shape[0] == 0:
            raise ValueError("A mesh needs at least one triangle")
        if triangle_array.min() < 0 or triangle_array.max() >= vertex_array.shape[0]:
            raise ValueError("Triangle indices reference missing vertices")

        if normals is None:
            normal_array = compute_vertex_normals(vertex_array, triangle_array)
        else:
            normal_array = np.asarray(normals, dtype=np.float64).reshape(-1, 3)
            if normal_array.shape != vertex_array.shape:
                raise ValueError(
                    f"normals shape {normal_array.shape} does not match "
                    f"vertices {vertex_array.shape}"
                )

        if isinstance(diffuse_color, Material):
            material = diffuse_color
        else:
            material = Material(as_vec3(diffuse_color), name=name)

        geom_id = len(self._meshes)
        self._meshes.append(
            MeshInfo(
                geom_id=geom_id,
                vertices=vertex_array,
                normals=normal_array,
                triangles=triangle_array,
                material=material,
            )
        )
        return geom_id

    def add_quad(
        self,
        corner: npt.ArrayLike,
        edge_u: npt.ArrayLike,
        edge_v: npt.ArrayLike,
        diffuse_color: npt.ArrayLike | Material,
        name: str = "",
    ) -> int:
        """Add a parallelogram Q, Q+u, Q+u+v, Q+v as a two-triangle mesh.

        The quad faces along normalize(cross(edge_u, edge_v)).

        Returns:
            The surface id of the new quad.
        """
        q = as_vec3(corner)
        u = as_vec3(edge_u)
        v = as_vec3(edge_v)
        normal = np.cross(u, v)
        norm = np.linalg.norm(normal)
        if norm < 1e-12:
            raise ValueError("Quad edges must not be parallel")
        normal = normal / norm

        vertices = np.stack([q, q + u, q + u + v, q + v])
        triangles = np.array([[0, 1, 2], [0, 2, 3]], dtype=np.int32)
        normals = np.tile(normal, (4, 1))
        return self.add_mesh(vertices, triangles, diffuse_color, normals=normals, name=name)

    def get_mesh(self, geom_id: int) -> MeshInfo:
        return self._meshes[geom_id]

    @property
    def mesh_count(self) -> int:
        return len(self._meshes)

    @property
    def triangle_count(self) -> int:
        return sum(mesh.triangle_count for mesh in self._meshes)

    def material_table(self) -> MaterialTable:
        """Materials ordered by surface id."""
        return MaterialTable(mesh.material for mesh in self._meshes)

    def build(self) -> tuple[TaichiIntersector, MaterialTable]:
        """Commit the meshes into an intersector and a material table.

        Taichi must be initialized before calling this.

        Raises:
            RuntimeError: If the scene holds no meshes.
        """
        if not self._meshes:
            raise RuntimeError("Cannot build an empty scene")

        with ScopedTimer("Committing scene"):
            vertices = []
            normals = []
            triangles = []
            geom_ids = []
            base = 0
            for mesh in self._meshes:
                vertices.append(mesh.vertices)
                normals.append(mesh.normals)
                triangles.append(mesh.triangles + base)
                geom_ids.append(np.full(mesh.triangle_count, mesh.geom_id, dtype=np.int32))
                base += mesh.vertices.shape[0]

            intersector = TaichiIntersector(
                np.concatenate(vertices),
                np.concatenate(normals),
                np.concatenate(triangles),
                np.concatenate(geom_ids),
            )

        logger.info(
            "Committed scene: %d meshes, %d triangles", self.mesh_count, self.triangle_count
        )
        return intersector, self.material_table()

    def to_dict(self) -> dict[str, Any]:
        """Export the scene description as plain Python data."""
        return {
            "meshes": [
                {
                    "name": mesh.material.name,
                    "vertices": mesh.vertices.tolist(),
                    "normals": mesh.normals.tolist(),
                    "triangles": mesh.triangles.tolist(),
                    "diffuse_color": mesh.material.diffuse_color.tolist(),
                }
                for mesh in self._meshes
            ]
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SceneManager:
        """Rebuild a scene from ``to_dict`` output.

        Raises:
            ValueError: If a mesh entry is missing required keys.
        """
        scene = cls()
        for i, entry in enumerate(data.get("meshes", [])):
            missing = {"vertices", "triangles", "diffuse_color"} - entry.keys()
            if missing:
                raise ValueError(f"Mesh {i} is missing keys: {sorted(missing)}")
            scene.add_mesh(
                entry["vertices"],
                entry["triangles"],
                entry["diffuse_color"],
                normals=entry.get("normals"),
                name=entry.get("name", ""),
            )
        return scene
