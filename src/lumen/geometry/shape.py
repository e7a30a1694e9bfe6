"""Shape interface shared by every geometric primitive."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy.typing as npt

from lumen.core.ray import Ray, Vec3

# Sentinel returned by the kernel-side intersection routines on a miss.
# Every valid hit time is >= 0.
NO_HIT = -1.0


@dataclass(frozen=True, eq=False)
class DiffGeom:
    """Local differential geometry at a point on a surface.

    Attributes:
        position: The surface point.
        normal: The surface normal there. Not guaranteed to be unit length.
    """

    position: Vec3
    normal: Vec3


class Shape(ABC):
    """A surface that can be hit by rays."""

    @abstractmethod
    def intersection(self, ray: Ray) -> float | None:
        """Return the closest forward hit time along the ray, or None."""

    @abstractmethod
    def normal(self, point: npt.ArrayLike) -> Vec3:
        """Return the (unnormalized) surface normal at a point on the shape."""

    def diff_geom(self, point: npt.ArrayLike) -> DiffGeom:
        """Return the differential geometry at a point on the shape."""
        return DiffGeom(position=point, normal=self.normal(point))
