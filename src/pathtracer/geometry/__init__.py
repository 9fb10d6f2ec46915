"""Geometry module for ray-primitive intersection.

Components:
    triangle: Moller-Trumbore ray-triangle intersection with barycentrics

Intersection routines are Taichi functions (@ti.func) called from the
intersector's query kernels.
"""

from .triangle import TriangleHit, hit_triangle

__all__ = ["TriangleHit", "hit_triangle"]
