"""Pinhole camera model for perspective projection ray generation.

The camera is a rectangle of size width x height centred on ``position``
and oriented by a rotation whose local +Z axis is the view direction. A
focal point sits behind the rectangle at

    focal_distance = width / (2 * tan(fov / 2))

so that ``fov`` is the horizontal field of view: the angle between the rays
through the left and right edges of the rectangle's horizontal centreline.

Every ray starts on the view rectangle itself (not at the focal point) and
points away from the focal point. Screen coordinates (x, y) are fractions in
[0, 1]; (0.5, 0.5) is the centre and its ray starts exactly at ``position``.

Example:
    >>> import math
    >>> from lumen.camera.pinhole import Camera
    >>> camera = Camera.look_at(
    ...     position=(1.0, 2.0, -2.0),
    ...     target=(0.5, 0.5, 0.5),
    ...     up=(0.0, 1.0, 0.0),
    ...     width=2.0,
    ...     height=2.0,
    ...     fov=math.pi / 2.0,
    ... )
    >>> ray = camera.ray_at(0.5, 0.5)  # Ray through image center
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from lumen.core.ray import Ray, Vec3, as_vec3, cross, length, normalize, vec3

# Cross products shorter than this mean ``up`` is parallel to the view axis
_PARALLEL_EPSILON = 1e-12


def look_at_rotation(direction: npt.ArrayLike, up: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Build a rotation whose local +Z axis points along ``direction``.

    The columns of the returned matrix are the world-space images of the
    local X (side), Y (up) and Z (view) axes. ``up`` only fixes the roll.

    Args:
        direction: View direction (any non-zero length).
        up: Approximate up vector, not parallel to direction.

    Returns:
        A 3x3 proper rotation matrix (orthonormal, determinant +1).

    Raises:
        ValueError: If direction is zero or parallel to up.
    """
    view = normalize(as_vec3(direction))
    side = cross(as_vec3(up), view)
    if length(side) < _PARALLEL_EPSILON:
        raise ValueError(f"Up vector {up!r} is parallel to view direction {view!r}")
    side = normalize(side)
    true_up = cross(view, side)
    return np.column_stack((side, true_up, view))


def _frozen(arr: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    arr = arr.copy()
    arr.flags.writeable = False
    return arr


@dataclass(frozen=True, eq=False)
class Camera:
    """A pinhole camera.

    Attributes:
        position: Centre of the view rectangle in world space.
        orientation: 3x3 rotation from camera-local to world space. Local +Z
            is the view direction.
        width: Width of the view rectangle.
        height: Height of the view rectangle.
        fov: Horizontal field of view in radians, in (0, pi).
    """

    position: Vec3
    orientation: npt.NDArray[np.float64]
    width: float
    height: float
    fov: float

    def __post_init__(self) -> None:
        orientation = np.asarray(self.orientation, dtype=np.float64)
        if orientation.shape != (3, 3):
            raise ValueError(f"Orientation must be 3x3, got shape {orientation.shape}")
        if self.width <= 0.0 or self.height <= 0.0:
            raise ValueError(f"Camera size must be positive, got {self.width}x{self.height}")
        if not 0.0 < self.fov < math.pi:
            raise ValueError(f"Field of view must be in (0, pi) radians, got {self.fov}")
        object.__setattr__(self, "position", _frozen(as_vec3(self.position)))
        object.__setattr__(self, "orientation", _frozen(orientation))

    @classmethod
    def look_at(
        cls,
        position: npt.ArrayLike,
        target: npt.ArrayLike,
        up: npt.ArrayLike,
        width: float,
        height: float,
        fov: float,
    ) -> Camera:
        """Create a camera at ``position`` looking toward ``target``.

        Raises:
            ValueError: If target equals position or up is parallel to the
                view direction.
        """
        position = as_vec3(position)
        orientation = look_at_rotation(as_vec3(target) - position, up)
        return cls(position, orientation, float(width), float(height), float(fov))

    @property
    def view_axis(self) -> Vec3:
        """World-space view direction (local +Z)."""
        return self.orientation[:, 2]

    @property
    def focal_distance(self) -> float:
        """Distance from the view rectangle back to the focal point."""
        return self.width / (2.0 * math.tan(self.fov / 2.0))

    @property
    def focal_point(self) -> Vec3:
        """The point behind the view rectangle every ray points away from."""
        return self.orientation @ vec3(0.0, 0.0, -1.0) * self.focal_distance + self.position

    def ray_at(self, x: float, y: float) -> Ray:
        """Generate the ray through fractional screen coordinates (x, y).

        Args:
            x: Horizontal coordinate in [0, 1].
            y: Vertical coordinate in [0, 1].

        Returns:
            A unit-direction ray starting on the view rectangle.
        """
        offset = self.orientation @ vec3((x - 0.5) * self.width, (y - 0.5) * self.height, 0.0)
        point = offset + self.position
        return Ray.new_normalize(point, point - self.focal_point)

    def ray_grid(
        self, width_px: int, height_px: int
    ) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """Generate the ray of every pixel at once.

        Pixel (px, py) gets the same ray as ray_at(px / width_px,
        py / height_px), up to floating-point rounding.

        Returns:
            (origins, directions), each of shape (height_px, width_px, 3).
        """
        xs = np.arange(width_px, dtype=np.float64) / width_px
        ys = np.arange(height_px, dtype=np.float64) / height_px
        local = np.zeros((height_px, width_px, 3), dtype=np.float64)
        local[..., 0] = (xs[np.newaxis, :] - 0.5) * self.width
        local[..., 1] = (ys[:, np.newaxis] - 0.5) * self.height

        origins = local @ self.orientation.T + self.position
        directions = origins - self.focal_point
        directions /= np.linalg.norm(directions, axis=-1, keepdims=True)
        return origins, directions
