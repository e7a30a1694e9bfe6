"""Camera module for primary ray generation.

Components:
    pinhole: Perspective camera with look-at construction
    orthographic: Parallel-projection camera

Both cameras map fractional screen coordinates (x, y) in [0, 1] to rays
via ray_at() and generate every pixel's ray at once via ray_grid().
"""

from .orthographic import OrthographicCamera
from .pinhole import Camera, look_at_rotation

__all__ = [
    "Camera",
    "OrthographicCamera",
    "look_at_rotation",
]
