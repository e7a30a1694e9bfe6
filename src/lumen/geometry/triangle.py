"""Triangle primitive with Moller-Trumbore ray-triangle intersection.

With edge vectors e1 = v2 - v1 and e2 = v3 - v1 the hit is expressed in
barycentric coordinates (b1, b2) and rejected when the ray is parallel to
the triangle plane, the barycentrics fall outside the triangle, or the hit
lies behind the ray origin.

The parallel test uses the fixed absolute tolerance TRIANGLE_EPSILON. It is
not scaled by the operand magnitudes, so very large or very small triangles
see a shifted threshold.
"""

import numpy.typing as npt
import taichi as ti

from lumen.core.ray import Ray, Vec3, as_vec3, cross, dot, ti_vec3
from lumen.geometry.shape import NO_HIT, Shape

TRIANGLE_EPSILON = 1e-6


class Triangle(Shape):
    """A triangle given by three vertices.

    No degeneracy check is made: a collinear triangle has a zero true normal
    and is never hit.

    Attributes:
        v1: First vertex.
        v2: Second vertex.
        v3: Third vertex.
    """

    def __init__(self, v1: npt.ArrayLike, v2: npt.ArrayLike, v3: npt.ArrayLike) -> None:
        self.v1 = as_vec3(v1)
        self.v2 = as_vec3(v2)
        self.v3 = as_vec3(v3)

    @property
    def true_normal(self) -> Vec3:
        """Unnormalized cross(v2 - v1, v3 - v1)."""
        return cross(self.v2 - self.v1, self.v3 - self.v1)

    def intersection(self, ray: Ray) -> float | None:
        e1 = self.v2 - self.v1
        e2 = self.v3 - self.v1

        s1 = cross(ray.direction, e2)
        divisor = dot(s1, e1)
        if abs(divisor) < TRIANGLE_EPSILON:
            return None
        inv_divisor = 1.0 / divisor

        # First barycentric coordinate
        s = ray.origin - self.v1
        b1 = dot(s1, s) * inv_divisor
        if b1 < 0.0 or b1 > 1.0:
            return None

        # Second barycentric coordinate
        s2 = cross(s, e1)
        b2 = dot(ray.direction, s2) * inv_divisor
        if b2 < 0.0 or b1 + b2 > 1.0:
            return None

        t = dot(e2, s2) * inv_divisor
        if t < 0.0:
            return None
        return t

    def normal(self, point: npt.ArrayLike) -> Vec3:
        """The true normal; constant over the triangle."""
        return self.true_normal

    def __repr__(self) -> str:
        return f"Triangle({self.v1.tolist()}, {self.v2.tolist()}, {self.v3.tolist()})"


@ti.func
def hit_triangle(
    ray_origin: ti_vec3,
    ray_direction: ti_vec3,
    v1: ti_vec3,
    v2: ti_vec3,
    v3: ti_vec3,
) -> ti.f64:
    """Kernel twin of Triangle.intersection().

    Returns:
        The hit time, or NO_HIT.
    """
    e1 = v2 - v1
    e2 = v3 - v1
    s1 = ray_direction.cross(e2)
    divisor = s1.dot(e1)

    t = NO_HIT
    if ti.abs(divisor) >= TRIANGLE_EPSILON:
        inv_divisor = 1.0 / divisor
        s = ray_origin - v1
        b1 = s1.dot(s) * inv_divisor
        if b1 >= 0.0 and b1 <= 1.0:
            s2 = s.cross(e1)
            b2 = ray_direction.dot(s2) * inv_divisor
            if b2 >= 0.0 and b1 + b2 <= 1.0:
                t_hit = e2.dot(s2) * inv_divisor
                if t_hit >= 0.0:
                    t = t_hit
    return t
