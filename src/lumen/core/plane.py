"""Infinite plane with unsigned point distance.

The plane is stored as ``dot(normal, p) + dist = 0``. It is used to check
that camera rays start on the camera's view plane.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy.typing as npt

from lumen.core.ray import Vec3, as_vec3, dot, length, length_squared


@dataclass(frozen=True, eq=False)
class Plane:
    """A plane given by a (not necessarily unit) normal and an offset.

    Attributes:
        normal: The plane normal.
        dist: The offset term d in dot(normal, p) + d = 0.
    """

    normal: Vec3
    dist: float

    @classmethod
    def new_at_point(cls, position: npt.ArrayLike, normal: npt.ArrayLike) -> Plane:
        """Create the plane through position with the given normal."""
        n = as_vec3(normal)
        return cls(n, -dot(n, as_vec3(position)))

    def distance_to(self, point: npt.ArrayLike) -> float:
        """Compute the unsigned distance from a point to the plane.

        Raises:
            ValueError: If the plane normal has zero length.
        """
        n_sq = length_squared(self.normal)
        if n_sq == 0.0:
            raise ValueError("Plane normal has zero length")
        t = (-self.dist - dot(self.normal, as_vec3(point))) / n_sq
        return length(self.normal * t)
