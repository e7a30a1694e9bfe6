"""Renderer: camera rays, nearest hits and direct shading per pixel.

This module ties the pipeline together. For every pixel (x, y) of the
output image:

1. ray = camera.ray_at(x / width, y / height)
2. hit = scene.intersects_renderable(ray)
3. No hit: the pixel is black.
4. Hit at time t: point = ray.at_time(t), normal = renderable.normal(point),
   and the BSDF is evaluated in reflection space with view = -ray.direction
   and light = light.position - point. The pixel is light.color * bsdf.
5. The linear color is converted to 8 bits per channel.

Only the first light of the scene is used unless RenderSettings.all_lights
is set, in which case the contributions of every light are summed.

Two backends compute the same image:
    - "python": the scalar reference loop below
    - "taichi": the data-parallel kernel in lumen.core.integrator

Example:
    >>> from lumen.core.renderer import RenderSettings, Renderer
    >>> renderer = Renderer(RenderSettings(width=100, height=100))
    >>> image = renderer.render(camera, scene)  # uint8 array (100, 100, 3)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Literal, Protocol

import numpy as np
import numpy.typing as npt

from lumen.core.color import BLACK, Rgb, image_to_uint8
from lumen.core.ray import Ray, build_onb_from_normal, length_squared, world_to_local
from lumen.scene.manager import Scene
from lumen.scene.renderable import Renderable

logger = logging.getLogger(__name__)

# Type alias for backend options
Backend = Literal["python", "taichi"]
BACKENDS: tuple[str, ...] = ("python", "taichi")

DEFAULT_WIDTH = 100
DEFAULT_HEIGHT = 100


class RayCamera(Protocol):
    """Anything that maps fractional screen coordinates to rays."""

    def ray_at(self, x: float, y: float) -> Ray: ...

    def ray_grid(
        self, width_px: int, height_px: int
    ) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]: ...


@dataclass(frozen=True)
class RenderSettings:
    """Configuration for a render. Immutable once created.

    Attributes:
        width: Output width in pixels.
        height: Output height in pixels.
        backend: "python" (reference loop) or "taichi" (parallel kernel).
        all_lights: Sum over every light instead of using only the first.
        arch: Taichi arch used when the taichi backend initializes Taichi.
    """

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    backend: Backend = "python"
    all_lights: bool = False
    arch: str = "cpu"

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.backend not in BACKENDS:
            raise ValueError(f"Unknown backend {self.backend!r}, expected one of {BACKENDS}")


# =============================================================================
# Shading (reference path)
# =============================================================================


def shade(
    scene: Scene,
    ray: Ray,
    renderable: Renderable,
    t: float,
    all_lights: bool = False,
) -> Rgb:
    """Compute the direct illumination of a ray hit.

    Args:
        scene: The scene providing the lights.
        ray: The ray that produced the hit.
        renderable: The renderable that was hit.
        t: The hit time along the ray.
        all_lights: Sum over every light instead of using only the first.

    Returns:
        The linear color seen along the ray. Black when the scene has no
        lights or the surface normal is degenerate.
    """
    lights = scene.lights if all_lights else scene.lights[:1]
    point = ray.at_time(t)
    geom = renderable.shape.diff_geom(point)
    if not lights or length_squared(geom.normal) == 0.0:
        return BLACK

    # Rotate into reflection space: the normal becomes +Z
    tangent, bitangent, n = build_onb_from_normal(geom.normal)
    bsdf = renderable.get_bsdf(geom)
    view = world_to_local(-ray.direction, tangent, bitangent, n)

    color = BLACK
    for light in lights:
        to_light = world_to_local(light.position - point, tangent, bitangent, n)
        color = color + light.color * bsdf.bsdf(view, to_light)
    return color


def trace_ray(scene: Scene, ray: Ray, all_lights: bool = False) -> Rgb:
    """Find the nearest hit of a ray and shade it; black on a miss."""
    hit = scene.intersects_renderable(ray)
    if hit is None:
        return BLACK
    renderable, t = hit
    return shade(scene, ray, renderable, t, all_lights)


def render_pixel(
    camera: RayCamera,
    scene: Scene,
    x: int,
    y: int,
    width: int,
    height: int,
    all_lights: bool = False,
) -> tuple[int, int, int]:
    """Render a single pixel to an 8-bit RGB triple."""
    ray = camera.ray_at(x / width, y / height)
    return trace_ray(scene, ray, all_lights).to_rgb8()


# =============================================================================
# Renderer
# =============================================================================


class Renderer:
    """Renders a scene through a camera into an RGB raster.

    The image array has shape (height, width, 3); row index y and column
    index x hold the pixel whose ray is camera.ray_at(x / width, y / height).
    """

    def __init__(self, settings: RenderSettings | None = None) -> None:
        self._settings = settings if settings is not None else RenderSettings()

    @property
    def settings(self) -> RenderSettings:
        """Get the render settings."""
        return self._settings

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._settings.width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._settings.height

    def render_linear(self, camera: RayCamera, scene: Scene) -> npt.NDArray[np.float64]:
        """Render the unclamped linear color image.

        Returns:
            Float64 array of shape (height, width, 3).
        """
        settings = self._settings
        logger.info(
            "Rendering %dx%d image (%d renderables, %d lights, backend=%s)",
            settings.width,
            settings.height,
            len(scene.objects),
            len(scene.lights),
            settings.backend,
        )
        if scene.objects and not scene.lights:
            logger.warning("Scene has no lights; every hit will render black")

        start = time.perf_counter()
        if settings.backend == "taichi":
            image = self._render_taichi(camera, scene)
        else:
            image = self._render_python(camera, scene)
        logger.info("Render finished in %.3fs", time.perf_counter() - start)
        return image

    def render(self, camera: RayCamera, scene: Scene) -> npt.NDArray[np.uint8]:
        """Render the 8-bit RGB image.

        Returns:
            Uint8 array of shape (height, width, 3).
        """
        return image_to_uint8(self.render_linear(camera, scene))

    def _render_python(self, camera: RayCamera, scene: Scene) -> npt.NDArray[np.float64]:
        width, height = self._settings.width, self._settings.height
        image = np.zeros((height, width, 3), dtype=np.float64)
        for y in range(height):
            for x in range(width):
                ray = camera.ray_at(x / width, y / height)
                image[y, x] = trace_ray(scene, ray, self._settings.all_lights).to_array()
        return image

    def _render_taichi(self, camera: RayCamera, scene: Scene) -> npt.NDArray[np.float64]:
        # Imported here so the reference path works without compiling kernels
        from lumen.core.integrator import init_taichi, shared_integrator

        settings = self._settings
        init_taichi(arch=settings.arch)
        integrator = shared_integrator(settings.width, settings.height)
        origins, directions = camera.ray_grid(settings.width, settings.height)
        return integrator.render(origins, directions, scene, all_lights=settings.all_lights)

    def __repr__(self) -> str:
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"backend={self._settings.backend!r})"
        )
