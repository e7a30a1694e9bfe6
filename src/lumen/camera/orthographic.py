"""Orthographic camera: a grid of parallel rays.

Every ray points along the camera's local +Z axis and starts at
``corner + R @ (x * width, y * height, 0)``. With the identity orientation
and a 100 x 100 rectangle at the origin, pixel (x, y) of a 100 x 100 image
gets the ray from (x, y, 0) along +Z.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
import numpy.typing as npt

from lumen.core.ray import Ray, Vec3, as_vec3, vec3


@dataclass(frozen=True, eq=False)
class OrthographicCamera:
    """A parallel-projection camera.

    Attributes:
        corner: World-space position of screen coordinate (0, 0).
        width: Width of the view rectangle.
        height: Height of the view rectangle.
        orientation: 3x3 rotation from camera-local to world space.
    """

    corner: Vec3
    width: float
    height: float
    orientation: npt.NDArray[np.float64] = field(default_factory=lambda: np.eye(3))

    def __post_init__(self) -> None:
        orientation = np.asarray(self.orientation, dtype=np.float64)
        if orientation.shape != (3, 3):
            raise ValueError(f"Orientation must be 3x3, got shape {orientation.shape}")
        if self.width <= 0.0 or self.height <= 0.0:
            raise ValueError(f"Camera size must be positive, got {self.width}x{self.height}")
        object.__setattr__(self, "corner", as_vec3(self.corner))
        object.__setattr__(self, "orientation", orientation)

    @property
    def view_axis(self) -> Vec3:
        """World-space view direction (local +Z)."""
        return self.orientation[:, 2]

    def ray_at(self, x: float, y: float) -> Ray:
        """Generate the ray through fractional screen coordinates (x, y)."""
        offset = self.orientation @ vec3(x * self.width, y * self.height, 0.0)
        return Ray.new_normalize(self.corner + offset, self.view_axis)

    def ray_grid(
        self, width_px: int, height_px: int
    ) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """Generate the ray of every pixel at once, see Camera.ray_grid()."""
        xs = np.arange(width_px, dtype=np.float64) / width_px
        ys = np.arange(height_px, dtype=np.float64) / height_px
        local = np.zeros((height_px, width_px, 3), dtype=np.float64)
        local[..., 0] = xs[np.newaxis, :] * self.width
        local[..., 1] = ys[:, np.newaxis] * self.height

        origins = local @ self.orientation.T + self.corner
        directions = np.broadcast_to(self.view_axis / np.linalg.norm(self.view_axis), origins.shape)
        return origins, directions.copy()
