"""Sphere primitive with ray-sphere intersection.

The ray-sphere intersection is found by solving:
    |ray_origin + t * ray_direction - center|^2 = radius^2

Expanding and rearranging gives the quadratic equation:
    a*t^2 + b*t + c = 0

where:
    a = dot(direction, direction)
    b = 2 * dot(origin - center, direction)
    c = dot(origin - center, origin - center) - radius^2

The smaller positive root is reported, falling back to the larger positive
root when the ray starts inside the sphere. Spheres entirely behind the ray
are missed.

Example:
    >>> from lumen.core.ray import Ray, vec3
    >>> from lumen.geometry.sphere import Sphere
    >>> sphere = Sphere(vec3(0.0, 0.0, 0.0), 1.0)
    >>> sphere.intersection(Ray.new_normalize(vec3(0, 0, 5), vec3(0, 0, -1)))
    4.0
"""

import logging
import math

import numpy.typing as npt
import taichi as ti

from lumen.core.ray import Ray, Vec3, as_vec3, dot, length_squared, ti_vec3
from lumen.geometry.shape import NO_HIT, Shape

logger = logging.getLogger(__name__)


class Sphere(Shape):
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere.
        radius: The radius of the sphere. Negative inputs are floored to 0.
    """

    def __init__(self, center: npt.ArrayLike, radius: float) -> None:
        self.center = as_vec3(center)
        if radius < 0.0:
            logger.warning("Sphere radius %s is negative; clamping to 0", radius)
        self.radius = max(0.0, float(radius))

    def intersection(self, ray: Ray) -> float | None:
        oc = ray.origin - self.center
        a = length_squared(ray.direction)
        b = 2.0 * dot(oc, ray.direction)
        c = length_squared(oc) - self.radius * self.radius

        discriminant = b * b - 4.0 * a * c
        if discriminant < 0.0:
            return None

        sqrt_d = math.sqrt(discriminant)
        t0 = (-b - sqrt_d) / (2.0 * a)
        t1 = (-b + sqrt_d) / (2.0 * a)
        if t0 > 0.0:
            return t0
        if t1 > 0.0:
            return t1
        return None

    def normal(self, point: npt.ArrayLike) -> Vec3:
        """Outward direction from the center; its length is the radius."""
        return as_vec3(point) - self.center

    def __repr__(self) -> str:
        return f"Sphere(center={self.center.tolist()}, radius={self.radius})"


@ti.func
def hit_sphere(
    ray_origin: ti_vec3,
    ray_direction: ti_vec3,
    center: ti_vec3,
    radius: ti.f64,
) -> ti.f64:
    """Kernel twin of Sphere.intersection().

    Returns:
        The closest forward hit time, or NO_HIT.
    """
    oc = ray_origin - center
    a = ray_direction.dot(ray_direction)
    b = 2.0 * oc.dot(ray_direction)
    c = oc.dot(oc) - radius * radius
    discriminant = b * b - 4.0 * a * c

    # Taichi requires outer-scope declaration
    t = NO_HIT
    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)
        t0 = (-b - sqrt_d) / (2.0 * a)
        t1 = (-b + sqrt_d) / (2.0 * a)
        if t0 > 0.0:
            t = t0
        elif t1 > 0.0:
            t = t1
    return t
