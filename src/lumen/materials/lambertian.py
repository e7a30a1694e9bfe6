"""Lambertian (ideal diffuse) material implementation.

This module implements cosine-weighted Lambertian reflectance: the reflected
color is the material color scaled by the cosine of the angle between the
surface normal and the light direction.

Evaluation happens in reflection space, so the normal is the +Z axis and
the cosine reduces to:
    cos(theta) = dot(z, light) / (|z| * |light|) = light.z / |light|

The cosine is not clamped; light from below the surface gives a negative
color that is clamped away at 8-bit conversion.

Example:
    >>> from lumen.core.ray import vec3
    >>> from lumen.materials.lambertian import Lambert
    >>> Lambert(1.0, 0.5, 0.0).bsdf(vec3(0, 0, 1), vec3(0, 0, 2))
    Rgb(red=1.0, green=0.5, blue=0.0)
"""

import taichi as ti

from lumen.core.color import BLACK, Rgb
from lumen.core.ray import Vec3, dot, length, ti_vec3, vec3
from lumen.materials.material import BSDF

# Canonical surface normal in reflection space
NORMAL_AXIS = vec3(0.0, 0.0, 1.0)


class Lambert(BSDF):
    """Lambertian reflectance with a constant color.

    Attributes:
        color: The diffuse color multiplier.
    """

    def __init__(self, red: float, green: float, blue: float) -> None:
        self.color = Rgb(float(red), float(green), float(blue))

    def bsdf(self, view: Vec3, light: Vec3) -> Rgb:
        denom = length(NORMAL_AXIS) * length(light)
        if denom == 0.0:
            return BLACK
        cos_theta = dot(NORMAL_AXIS, light) / denom
        return self.color * cos_theta

    def __repr__(self) -> str:
        return f"Lambert({self.color.red}, {self.color.green}, {self.color.blue})"


@ti.func
def eval_lambert(albedo: ti_vec3, light: ti_vec3) -> ti_vec3:
    """Kernel twin of Lambert.bsdf(); ``light`` is in reflection space."""
    norm = light.norm()
    cos_theta = 0.0
    if norm > 0.0:
        cos_theta = light[2] / norm
    return albedo * cos_theta
