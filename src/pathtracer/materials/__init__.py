"""Material models.

Components:
    lambertian: Lambertian BRDF helpers, Material and MaterialTable
"""

from .lambertian import (
    DEFAULT_GAMMA,
    InvalidSurfaceError,
    Material,
    MaterialTable,
    eval_lambertian,
    eval_lambertian_gamma,
)

__all__ = [
    "DEFAULT_GAMMA",
    "InvalidSurfaceError",
    "Material",
    "MaterialTable",
    "eval_lambertian",
    "eval_lambertian_gamma",
]
