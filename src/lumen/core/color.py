"""Linear RGB color and 8-bit conversion.

Colors are unbounded linear triples. Multiplying by a scalar scales the
intensity; multiplying by another color modulates componentwise (material
tint times light color). Nothing is clamped until a pixel is converted to
8 bits.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt


@dataclass(frozen=True)
class Rgb:
    """A linear RGB color.

    Attributes:
        red: Red component (unbounded).
        green: Green component (unbounded).
        blue: Blue component (unbounded).
    """

    red: float
    green: float
    blue: float

    def __mul__(self, other: Rgb | float) -> Rgb:
        if isinstance(other, Rgb):
            return Rgb(self.red * other.red, self.green * other.green, self.blue * other.blue)
        if isinstance(other, (int, float, np.floating)):
            return Rgb(self.red * other, self.green * other, self.blue * other)
        return NotImplemented

    def __rmul__(self, other: float) -> Rgb:
        if isinstance(other, (int, float, np.floating)):
            return self * other
        return NotImplemented

    def __add__(self, other: Rgb) -> Rgb:
        if not isinstance(other, Rgb):
            return NotImplemented
        return Rgb(self.red + other.red, self.green + other.green, self.blue + other.blue)

    def to_array(self) -> npt.NDArray[np.float64]:
        """Return the color as a float64 array (r, g, b)."""
        return np.array([self.red, self.green, self.blue], dtype=np.float64)

    def to_rgb8(self) -> tuple[int, int, int]:
        """Convert to an 8-bit triple using channel_to_u8()."""
        return (
            channel_to_u8(self.red),
            channel_to_u8(self.green),
            channel_to_u8(self.blue),
        )


BLACK = Rgb(0.0, 0.0, 0.0)
WHITE = Rgb(1.0, 1.0, 1.0)


def channel_to_u8(value: float) -> int:
    """Convert a linear channel value to 8 bits.

    The value is clamped to [0, 1], scaled by 255 and truncated toward zero.
    NaN maps to 0.
    """
    if math.isnan(value):
        return 0
    return int(min(max(value, 0.0), 1.0) * 255.0)


def image_to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a linear float image of shape (H, W, 3) to uint8.

    Vectorized channel_to_u8(): clamp to [0, 1], scale by 255, truncate,
    NaN to 0.
    """
    clean = np.nan_to_num(np.asarray(image, dtype=np.float64), nan=0.0, posinf=1.0, neginf=0.0)
    return (np.clip(clean, 0.0, 1.0) * 255.0).astype(np.uint8)
