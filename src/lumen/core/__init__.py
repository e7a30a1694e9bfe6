"""Core rendering module.

Components:
    ray: Ray type and NumPy vector utilities
    plane: Point-to-plane distance
    color: Linear RGB color and 8-bit conversion
    renderer: Per-pixel rendering loop and backend dispatch
    integrator: Data-parallel Taichi render kernel
"""

from .color import BLACK, WHITE, Rgb, channel_to_u8, image_to_uint8
from .plane import Plane
from .ray import (
    Ray,
    as_vec3,
    build_onb_from_normal,
    cross,
    dot,
    length,
    length_squared,
    local_to_world,
    normalize,
    vec3,
    world_to_local,
)

# Note: renderer and integrator are NOT imported here to avoid circular imports.
# Import directly from lumen.core.renderer or lumen.core.integrator when needed.

__all__ = [
    "Ray",
    "vec3",
    "as_vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "build_onb_from_normal",
    "world_to_local",
    "local_to_world",
    "Plane",
    "Rgb",
    "BLACK",
    "WHITE",
    "channel_to_u8",
    "image_to_uint8",
]
