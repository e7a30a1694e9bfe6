"""Point light source."""

from __future__ import annotations

from dataclasses import dataclass, field

from lumen.core.color import WHITE, Rgb
from lumen.core.ray import Vec3, as_vec3


@dataclass(eq=False)
class PointLight:
    """A zero-size light with no distance attenuation.

    Attributes:
        position: World-space position of the light.
        color: Emitted color.
    """

    position: Vec3
    color: Rgb = field(default=WHITE)

    def __post_init__(self) -> None:
        self.position = as_vec3(self.position)
