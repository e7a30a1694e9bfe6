"""Geometry module for shape primitives.

Components:
    shape: Shape interface and differential geometry record
    sphere: Sphere primitive with ray-sphere intersection
    triangle: Triangle primitive with Moller-Trumbore intersection

Each primitive has a Python implementation used by the reference renderer
and a Taichi function twin (hit_sphere, hit_triangle) used by the render
kernel. Both return the closest forward hit time; the kernel versions
return NO_HIT instead of None.
"""

from .shape import NO_HIT, DiffGeom, Shape
from .sphere import Sphere, hit_sphere
from .triangle import TRIANGLE_EPSILON, Triangle, hit_triangle

__all__ = [
    "Shape",
    "DiffGeom",
    "NO_HIT",
    "Sphere",
    "hit_sphere",
    "Triangle",
    "hit_triangle",
    "TRIANGLE_EPSILON",
]
