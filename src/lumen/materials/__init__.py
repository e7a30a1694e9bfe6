"""Materials module for BSDF models.

Components:
    material: BSDF and Material interfaces, UniformMaterial
    lambertian: Cosine-weighted Lambertian reflectance
"""

from .lambertian import Lambert, eval_lambert
from .material import BSDF, Material, UniformMaterial

__all__ = [
    "BSDF",
    "Material",
    "UniformMaterial",
    "Lambert",
    "eval_lambert",
]
