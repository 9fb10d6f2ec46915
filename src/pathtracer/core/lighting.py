"""Scene lighting descriptor passed explicitly to the estimators.

The light position and both background policies are owned by the caller.
The direct-lighting estimator returns ``direct_background`` on a miss, while
the path tracer adds ``path_background`` weighted by the path throughput when
a bounce escapes the scene.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
import numpy.typing as npt

from pathtracer.core.ray import Vec3, as_vec3, vec3

# Light position of the Cornell-style box scene, just under its ceiling
DEFAULT_LIGHT_POSITION = (0.0, 1.4, 0.0)


def _black() -> Vec3:
    return vec3(0.0, 0.0, 0.0)


def _mid_gray() -> Vec3:
    return vec3(0.5, 0.5, 0.5)


@dataclass(frozen=True)
class PointLight:
    """A single point light with inverse-square falloff.

    Attributes:
        position: World-space light position.
        power: Per-channel light power. Defaults to unit white.
    """

    position: Vec3
    power: Vec3 = field(default_factory=lambda: vec3(1.0, 1.0, 1.0))

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", as_vec3(self.position))
        power = as_vec3(self.power)
        if np.any(power < 0.0):
            raise ValueError(f"Light power must be non-negative, got {power.tolist()}")
        object.__setattr__(self, "power", power)


@dataclass(frozen=True)
class SceneLighting:
    """Light and background configuration for one render.

    Attributes:
        light: The point light used by the direct-lighting estimator.
        direct_background: Radiance returned by the direct estimator on a miss.
        path_background: Radiance collected by the path tracer when a path
            escapes the scene.
    """

    light: PointLight = field(default_factory=lambda: PointLight(vec3(*DEFAULT_LIGHT_POSITION)))
    direct_background: Vec3 = field(default_factory=_black)
    path_background: Vec3 = field(default_factory=_mid_gray)

    def __post_init__(self) -> None:
        object.__setattr__(self, "direct_background", as_vec3(self.direct_background))
        object.__setattr__(self, "path_background", as_vec3(self.path_background))

    @classmethod
    def with_light(
        cls,
        position: npt.ArrayLike,
        power: npt.ArrayLike = (1.0, 1.0, 1.0),
        **backgrounds: npt.ArrayLike,
    ) -> SceneLighting:
        """Build lighting around a point light at ``position``.

        Example:
            >>> lighting = SceneLighting.with_light((0.0, 2.0, 0.0), path_background=(0, 0, 0))
        """
        return cls(light=PointLight(as_vec3(position), as_vec3(power)), **backgrounds)
