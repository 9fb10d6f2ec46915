"""Lambertian (ideal diffuse) materials and the scene material table.

The Lambertian BRDF is:
    f_r(wi, wo) = albedo / pi

The direct-lighting estimator gamma-decodes the stored albedo before use,
so its BRDF response is ``albedo ** gamma / pi``. The path tracer uses the raw
albedo as its throughput factor: with cosine-weighted sampling
(pdf = cos(theta) / pi) the BRDF / pdf ratio collapses to the albedo.

Materials live in a read-only ``MaterialTable`` indexed by the surface id the
intersector reports.

Example:
    >>> from pathtracer.materials.lambertian import Material, MaterialTable
    >>> table = MaterialTable([Material((0.8, 0.3, 0.3)), Material((0.7, 0.7, 0.7))])
    >>> table.diffuse_color(1)
    array([0.7, 0.7, 0.7])
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass

import numpy.typing as npt

from pathtracer.core.ray import Vec3, as_vec3, power

# Exponent used to decode display-referred albedo into linear reflectance.
DEFAULT_GAMMA = 2.2


class InvalidSurfaceError(IndexError):
    """Raised when a surface id does not reference a material in the table."""

    def __init__(self, geom_id: int, table_size: int) -> None:
        super().__init__(
            f"Invalid surface reference {geom_id}: material table holds {table_size} entries"
        )
        self.geom_id = geom_id
        self.table_size = table_size


@dataclass(frozen=True)
class Material:
    """Lambertian material properties.

    Attributes:
        diffuse_color: Diffuse reflectance (RGB, each component in [0, 1]).
        name: Optional label used in logs and scene descriptions.
    """

    diffuse_color: Vec3
    name: str = ""

    def __post_init__(self) -> None:
        color = as_vec3(self.diffuse_color)
        # Validate albedo for energy conservation
        for i, component in enumerate(color):
            if component < 0.0 or component > 1.0:
                raise ValueError(
                    f"Albedo component {i} = {component} is outside [0, 1]. "
                    "This would violate energy conservation."
                )
        color.setflags(write=False)
        object.__setattr__(self, "diffuse_color", color)


def eval_lambertian(albedo: Vec3) -> Vec3:
    """Evaluate the Lambertian BRDF (albedo / pi), cosine term excluded."""
    return albedo / math.pi


def eval_lambertian_gamma(albedo: Vec3, gamma: float = DEFAULT_GAMMA) -> Vec3:
    """Evaluate the Lambertian BRDF on a gamma-decoded albedo.

    Args:
        albedo: Display-referred diffuse color.
        gamma: Decoding exponent applied per channel.

    Returns:
        ``albedo ** gamma / pi``.
    """
    return eval_lambertian(power(albedo, gamma))


class MaterialTable(Sequence[Material]):
    """Read-only ordered material table indexed by surface id."""

    def __init__(self, materials: Iterable[Material] = ()) -> None:
        self._materials: tuple[Material, ...] = tuple(materials)

    @classmethod
    def from_colors(cls, colors: Iterable[npt.ArrayLike]) -> MaterialTable:
        """Build a table from diffuse colors, one material per entry."""
        return cls(Material(as_vec3(color)) for color in colors)

    def lookup(self, geom_id: int) -> Material:
        """Return the material for a surface id.

        Raises:
            InvalidSurfaceError: If ``geom_id`` is negative or out of range.
        """
        if geom_id < 0 or geom_id >= len(self._materials):
            raise InvalidSurfaceError(geom_id, len(self._materials))
        return self._materials[geom_id]

    def diffuse_color(self, geom_id: int) -> Vec3:
        return self.lookup(geom_id).diffuse_color

    def __getitem__(self, index):  # type: ignore[override]
        return self._materials[index]

    def __len__(self) -> int:
        return len(self._materials)

    def __iter__(self) -> Iterator[Material]:
        return iter(self._materials)

    def __repr__(self) -> str:
        return f"MaterialTable({len(self._materials)} materials)"
