"""Shape and material binding.

A Renderable couples one shape with one material so that the scene can
test it for intersection and later shade the hit. It is a composition, not
a subclass of either.
"""

from __future__ import annotations

import numpy.typing as npt

from lumen.core.ray import Ray, Vec3
from lumen.geometry.shape import DiffGeom, Shape
from lumen.materials.material import BSDF, Material


class Renderable:
    """A shape paired with the material that shades it.

    Attributes:
        shape: The geometry used for intersection and normals.
        material: The material used for shading.
    """

    def __init__(self, shape: Shape, material: Material) -> None:
        self.shape = shape
        self.material = material

    def intersection(self, ray: Ray) -> float | None:
        return self.shape.intersection(ray)

    def normal(self, point: npt.ArrayLike) -> Vec3:
        return self.shape.normal(point)

    def get_bsdf(self, geom: DiffGeom) -> BSDF:
        return self.material.get_bsdf(geom)

    def __repr__(self) -> str:
        return f"Renderable({self.shape!r}, {self.material!r})"
