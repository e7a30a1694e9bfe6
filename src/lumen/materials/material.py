"""Material and BSDF interfaces.

A BSDF answers "what fraction of the light arriving along ``light`` leaves
along ``view``" for a single surface point. Both vectors are given in
reflection space, where the surface normal is the +Z axis.

A Material maps the differential geometry of a hit point to the BSDF that
applies there.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from lumen.core.ray import Vec3

if TYPE_CHECKING:
    from lumen.core.color import Rgb
    from lumen.geometry.shape import DiffGeom


class BSDF(ABC):
    """Scattering function evaluated in reflection space."""

    @abstractmethod
    def bsdf(self, view: Vec3, light: Vec3) -> Rgb:
        """Return the reflected color ratio for a view and light direction.

        Args:
            view: Direction toward the viewer, reflection space.
            light: Direction toward the light, reflection space.
        """


class Material(ABC):
    """Maps surface geometry to a BSDF."""

    @abstractmethod
    def get_bsdf(self, geom: DiffGeom) -> BSDF:
        """Return the BSDF at the given surface point."""


class UniformMaterial(Material):
    """A material with the same BSDF everywhere on the surface."""

    def __init__(self, bsdf: BSDF) -> None:
        self.bsdf = bsdf

    def get_bsdf(self, geom: DiffGeom) -> BSDF:
        return self.bsdf

    def __repr__(self) -> str:
        return f"UniformMaterial({self.bsdf!r})"
