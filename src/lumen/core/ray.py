"""Ray data structure and vector utilities.

This module provides the fundamental Ray type and the small set of vector
helpers the rest of the renderer is written against. Points and vectors are
plain NumPy float64 arrays of shape (3,); this module is the only place that
knows that.

Kernel-side twins of the frame helpers (``ti_build_onb_from_normal``,
``ti_world_to_local``) are provided for the Taichi integrator, together with
the ``ti_vec3`` vector type used in every ``@ti.func`` signature.

Example:
    >>> from lumen.core.ray import Ray, vec3
    >>> ray = Ray.new_normalize(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, 2.0))
    >>> ray.at_time(5.0)  # Point 5 units along the ray
    array([0., 0., 5.])
"""

from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti

Vec3 = npt.NDArray[np.float64]

# Kernel-side vector type. Always double precision so kernel results match
# the NumPy reference path.
ti_vec3 = ti.types.vector(3, ti.f64)


# =============================================================================
# Vector Utility Functions
# =============================================================================


def vec3(x: float, y: float, z: float) -> Vec3:
    """Create a 3D point or vector as a float64 array."""
    return np.array([x, y, z], dtype=np.float64)


def as_vec3(value: npt.ArrayLike) -> Vec3:
    """Coerce a sequence of three numbers into a float64 array.

    Raises:
        ValueError: If the value does not have exactly three components.
    """
    arr = np.asarray(value, dtype=np.float64)
    if arr.shape != (3,):
        raise ValueError(f"Expected 3 components, got shape {arr.shape}")
    return arr


def dot(a: Vec3, b: Vec3) -> float:
    """Compute the dot product of two vectors."""
    return float(np.dot(a, b))


def cross(a: Vec3, b: Vec3) -> Vec3:
    """Compute the cross product a x b."""
    return np.cross(a, b)


def length_squared(v: Vec3) -> float:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return float(np.dot(v, v))


def length(v: Vec3) -> float:
    """Compute the Euclidean length of a vector."""
    return float(np.sqrt(np.dot(v, v)))


def normalize(v: Vec3) -> Vec3:
    """Normalize a vector to unit length.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the same direction as v.

    Raises:
        ValueError: If v has zero length (its direction is undefined).
    """
    magnitude = length(v)
    if magnitude == 0.0 or not np.isfinite(magnitude):
        raise ValueError(f"Cannot normalize vector {v!r} with length {magnitude}")
    return v / magnitude


def build_onb_from_normal(normal: Vec3) -> tuple[Vec3, Vec3, Vec3]:
    """Build an orthonormal basis from a normal vector.

    Creates a local coordinate frame where the normal is the z-axis. The
    frame is right-handed: cross(tangent, bitangent) == normal.

    Args:
        normal: The surface normal (need not be unit length).

    Returns:
        A tuple (tangent, bitangent, normal) of unit vectors.

    Raises:
        ValueError: If the normal has zero length.
    """
    n = normalize(normal)
    # Choose a vector not parallel to normal
    a = vec3(1.0, 0.0, 0.0)
    if abs(n[0]) > 0.9:
        a = vec3(0.0, 1.0, 0.0)
    bitangent = normalize(cross(n, a))
    tangent = cross(bitangent, n)
    return tangent, bitangent, n


def world_to_local(v: Vec3, tangent: Vec3, bitangent: Vec3, normal: Vec3) -> Vec3:
    """Express a world-space direction in the (tangent, bitangent, normal) frame."""
    return vec3(dot(v, tangent), dot(v, bitangent), dot(v, normal))


def local_to_world(local_dir: Vec3, tangent: Vec3, bitangent: Vec3, normal: Vec3) -> Vec3:
    """Transform a direction from local (z-up) to world coordinates."""
    return local_dir[0] * tangent + local_dir[1] * bitangent + local_dir[2] * normal


# =============================================================================
# Ray
# =============================================================================


@dataclass(frozen=True, eq=False)
class Ray:
    """A ray with an origin point and direction vector.

    Rays are immutable: the stored arrays are copied and flagged read-only.

    Attributes:
        origin: The starting point of the ray.
        direction: The direction vector of the ray. Unit length when built
            with new_normalize(), which is how the camera builds every ray.
    """

    origin: Vec3
    direction: Vec3

    def __post_init__(self) -> None:
        origin = as_vec3(self.origin).copy()
        direction = as_vec3(self.direction).copy()
        origin.flags.writeable = False
        direction.flags.writeable = False
        object.__setattr__(self, "origin", origin)
        object.__setattr__(self, "direction", direction)

    @classmethod
    def new_normalize(cls, origin: npt.ArrayLike, direction: npt.ArrayLike) -> "Ray":
        """Create a ray with a unit-length direction.

        Raises:
            ValueError: If the direction has zero length.
        """
        return cls(as_vec3(origin), normalize(as_vec3(direction)))

    def at_time(self, t: float) -> Vec3:
        """Compute the point origin + direction * t.

        No bounds are applied: negative t yields points behind the origin.
        """
        return self.origin + self.direction * t

    def closest_point(self, p: npt.ArrayLike) -> Vec3:
        """Project a point onto the ray's forward half-line.

        The parameter is clamped to t >= 0, so a point behind the origin
        projects onto the origin itself.
        """
        offset = as_vec3(p) - self.origin
        t = dot(self.direction, offset) / length_squared(self.direction)
        return self.at_time(max(0.0, t))

    def __repr__(self) -> str:
        return f"Ray(origin={self.origin.tolist()}, direction={self.direction.tolist()})"


# =============================================================================
# Kernel-side Frame Helpers
# =============================================================================


@ti.func
def ti_build_onb_from_normal(normal: ti_vec3):
    """Kernel twin of build_onb_from_normal(). The normal must be non-zero."""
    n = normal.normalized()
    a = ti_vec3(1.0, 0.0, 0.0)
    if ti.abs(n[0]) > 0.9:
        a = ti_vec3(0.0, 1.0, 0.0)
    bitangent = n.cross(a).normalized()
    tangent = bitangent.cross(n)
    return tangent, bitangent, n


@ti.func
def ti_world_to_local(v: ti_vec3, tangent: ti_vec3, bitangent: ti_vec3, normal: ti_vec3) -> ti_vec3:
    """Kernel twin of world_to_local()."""
    return ti_vec3(v.dot(tangent), v.dot(bitangent), v.dot(normal))
