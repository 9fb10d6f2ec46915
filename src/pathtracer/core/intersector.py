"""Intersector interface consumed by the estimators.

The estimators never see the acceleration structure. They talk to a scene
through exactly three queries, described by the ``Intersector`` protocol:

- ``intersect(ray)``: closest hit. Fills ``ray.hit`` and clamps ``ray.tfar``
  to the hit distance, returning True; returns False and leaves the ray's hit
  record cleared on a miss.
- ``occluded(ray)``: any hit within ``[tnear, tfar)``. A blocking hit is
  recorded by overwriting the surface id sentinel (see ``Ray.mark_occluded``);
  an unblocked ray keeps the sentinel. Callers read the sentinel, so the
  polarity is: sentinel present means the light is visible.
- ``interpolate_normal(geom_id, prim_id, u, v)``: the shading normal at a
  barycentric location, not necessarily unit length.

A ray with a zero direction vector must produce a miss, never an error.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pathtracer.core.ray import Ray, Vec3


@runtime_checkable
class Intersector(Protocol):
    """Narrow ray-query interface over an opaque scene."""

    def intersect(self, ray: Ray) -> bool: ...

    def occluded(self, ray: Ray) -> bool: ...

    def interpolate_normal(self, geom_id: int, prim_id: int, u: float, v: float) -> Vec3: ...
