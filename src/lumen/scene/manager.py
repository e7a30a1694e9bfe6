"""Scene container and nearest-hit query.

The Scene owns an ordered list of renderables and a list of point lights.
It is populated before a render and only read during one.

The nearest-hit query is a brute-force linear scan: every renderable is
tested and the smallest reported hit time wins. Ties go to the renderable
added first.

Example:
    >>> from lumen.core.ray import Ray, vec3
    >>> from lumen.materials.lambertian import Lambert
    >>> from lumen.materials.material import UniformMaterial
    >>> from lumen.scene.manager import Scene
    >>> scene = Scene.empty()
    >>> scene.add_sphere((0, 0, 10), 1.0, UniformMaterial(Lambert(1, 0, 0)))
    >>> scene.add_light((0, 5, 0))
    >>> hit = scene.intersects_renderable(Ray.new_normalize(vec3(0, 0, 0), vec3(0, 0, 1)))
"""

from __future__ import annotations

from collections.abc import Iterable

import numpy.typing as npt

from lumen.core.color import WHITE, Rgb
from lumen.core.ray import Ray
from lumen.geometry.sphere import Sphere
from lumen.geometry.triangle import Triangle
from lumen.materials.material import Material
from lumen.scene.light import PointLight
from lumen.scene.renderable import Renderable


class Scene:
    """Renderables plus point lights.

    Attributes:
        objects: Renderables in insertion order.
        lights: Point lights in insertion order. Shading uses the first one
            unless the renderer is asked to sum over all of them.
    """

    def __init__(
        self,
        objects: Iterable[Renderable] = (),
        lights: Iterable[PointLight] = (),
    ) -> None:
        self.objects: list[Renderable] = list(objects)
        self.lights: list[PointLight] = list(lights)

    @classmethod
    def empty(cls) -> Scene:
        """Create a scene with no objects and no lights."""
        return cls()

    # =========================================================================
    # Population
    # =========================================================================

    def add_renderable(self, renderable: Renderable) -> int:
        """Add a renderable and return its index."""
        self.objects.append(renderable)
        return len(self.objects) - 1

    def add_sphere(self, center: npt.ArrayLike, radius: float, material: Material) -> int:
        """Add a sphere with a material and return its index."""
        return self.add_renderable(Renderable(Sphere(center, radius), material))

    def add_triangle(
        self,
        v1: npt.ArrayLike,
        v2: npt.ArrayLike,
        v3: npt.ArrayLike,
        material: Material,
    ) -> int:
        """Add a triangle with a material and return its index."""
        return self.add_renderable(Renderable(Triangle(v1, v2, v3), material))

    def add_light(self, position: npt.ArrayLike, color: Rgb = WHITE) -> int:
        """Add a point light and return its index."""
        self.lights.append(PointLight(position, color))
        return len(self.lights) - 1

    # =========================================================================
    # Queries
    # =========================================================================

    def intersects_renderable(self, ray: Ray) -> tuple[Renderable, float] | None:
        """Find the nearest renderable hit by a ray.

        Args:
            ray: The ray to trace.

        Returns:
            (renderable, t) for the smallest hit time, or None when nothing
            is hit. The first renderable with the minimal time wins ties.
        """
        closest: tuple[Renderable, float] | None = None
        for renderable in self.objects:
            t = renderable.intersection(ray)
            if t is None:
                continue
            if closest is None or t < closest[1]:
                closest = (renderable, t)
        return closest

    def __len__(self) -> int:
        return len(self.objects)

    def __repr__(self) -> str:
        return f"Scene(objects={len(self.objects)}, lights={len(self.lights)})"
