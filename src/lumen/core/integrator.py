"""Taichi render kernel for direct illumination.

This module implements the data-parallel rendering backend: one kernel
thread per pixel traces the camera ray against the packed scene, shades the
nearest hit with the Lambert BSDF and writes the linear color into its own
output cell. Pixels share no mutable state, so the kernel needs no
synchronization.

The kernel follows exactly the same math as the Python reference path in
lumen.core.renderer, in double precision, so both backends agree to
floating-point rounding.

Key features:
    - Camera-agnostic: rays are generated by the camera's ray_grid() on the
      Python side and uploaded as fields
    - Nearest-hit query over spheres and triangles with scene-order ties
    - First-light shading, or a sum over all lights on request
    - Scene fields and compiled kernels are reused across renders; use
      shared_integrator() to reuse them across renderers too

Example:
    >>> from lumen.core.integrator import init_taichi, shared_integrator
    >>> init_taichi(arch="cpu")
    >>> integrator = shared_integrator(100, 100)
    >>> image = integrator.render(*camera.ray_grid(100, 100), scene)
"""

import logging

import numpy as np
import numpy.typing as npt
import taichi as ti

from lumen.core.ray import ti_build_onb_from_normal, ti_vec3, ti_world_to_local
from lumen.materials.lambertian import eval_lambert
from lumen.scene.intersection import MISS, SceneBuffers, pack_scene
from lumen.scene.manager import Scene

logger = logging.getLogger(__name__)

# =============================================================================
# Runtime Setup
# =============================================================================

TAICHI_ARCHES = ("cpu", "gpu", "cuda", "vulkan", "metal", "opengl")

_initialized_arch: str | None = None


def init_taichi(arch: str = "cpu", **kwargs) -> None:
    """Initialize the Taichi runtime for double-precision rendering.

    Only the first call initializes; later calls are no-ops, because
    re-initializing discards every field already allocated.

    Args:
        arch: Taichi backend name ("cpu", "gpu", "cuda", "vulkan", "metal").
        **kwargs: Extra keyword arguments for ti.init().

    Raises:
        ValueError: If the backend name is unknown.
    """
    global _initialized_arch
    if _initialized_arch is not None:
        if arch != _initialized_arch:
            logger.debug(
                "Taichi already initialized on %s; ignoring request for %s",
                _initialized_arch,
                arch,
            )
        return

    if arch not in TAICHI_ARCHES:
        raise ValueError(f"Unknown Taichi arch {arch!r}, expected one of {TAICHI_ARCHES}")

    ti.init(arch=getattr(ti, arch), default_fp=ti.f64, **kwargs)
    _initialized_arch = arch
    logger.debug("Taichi initialized on %s with f64 default precision", arch)


def is_taichi_initialized() -> bool:
    """Check if init_taichi() has run."""
    return _initialized_arch is not None


# =============================================================================
# Shading
# =============================================================================


@ti.func
def shade_hit(
    scene: ti.template(),
    point: ti_vec3,
    normal: ti_vec3,
    albedo: ti_vec3,
    all_lights: ti.i32,
) -> ti_vec3:
    """Direct illumination of a hit point.

    Light directions are rotated into reflection space (normal along +Z)
    before the Lambert BSDF is evaluated. A zero normal shades black.
    """
    color = ti_vec3(0.0, 0.0, 0.0)
    n_lights = scene.num_lights[None]
    if all_lights == 0:
        n_lights = ti.min(n_lights, 1)

    if normal.norm() > 0.0:
        tangent, bitangent, n = ti_build_onb_from_normal(normal)
        for i in range(n_lights):
            to_light = ti_world_to_local(scene.light_positions[i] - point, tangent, bitangent, n)
            color += scene.light_colors[i] * eval_lambert(albedo, to_light)
    return color


# =============================================================================
# Integrator
# =============================================================================


@ti.data_oriented
class TaichiIntegrator:
    """Per-pixel direct-illumination renderer running in a Taichi kernel.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, width: int, height: int) -> None:
        """Allocate the ray and color buffers.

        Initializes Taichi on the CPU if init_taichi() has not run yet.

        Raises:
            ValueError: If either dimension is not positive.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
        init_taichi()

        self.width = width
        self.height = height

        # Row index is y, column index is x
        self.ray_origins = ti.Vector.field(3, dtype=ti.f64, shape=(height, width))
        self.ray_directions = ti.Vector.field(3, dtype=ti.f64, shape=(height, width))
        self.colors = ti.Vector.field(3, dtype=ti.f64, shape=(height, width))

        # Scene storage, reused while scenes fit
        self._buffers: SceneBuffers | None = None
        # Freed buffers stay referenced so no new instance reuses their id
        # while compiled kernels are keyed on it.
        self._retired: list[SceneBuffers] = []

    def render(
        self,
        origins: npt.NDArray[np.float64],
        directions: npt.NDArray[np.float64],
        scene: Scene,
        all_lights: bool = False,
    ) -> npt.NDArray[np.float64]:
        """Render one image from precomputed camera rays.

        Args:
            origins: Ray origins of shape (height, width, 3).
            directions: Ray directions of shape (height, width, 3).
            scene: The scene to render.
            all_lights: Sum over every light instead of using only the first.

        Returns:
            The linear color image of shape (height, width, 3).

        Raises:
            ValueError: If the ray arrays do not match the image size.
            TypeError: If the scene holds shapes or materials the kernel
                cannot represent.
        """
        expected = (self.height, self.width, 3)
        if origins.shape != expected or directions.shape != expected:
            raise ValueError(
                f"Ray arrays must have shape {expected}, got {origins.shape} and {directions.shape}"
            )

        buffers = self._scene_buffers(scene)

        self.ray_origins.from_numpy(np.ascontiguousarray(origins, dtype=np.float64))
        self.ray_directions.from_numpy(np.ascontiguousarray(directions, dtype=np.float64))
        self._trace(buffers, 1 if all_lights else 0)
        return self.colors.to_numpy()

    @property
    def scene_buffers(self) -> SceneBuffers | None:
        """The field storage used by the last render, if any."""
        return self._buffers

    def _scene_buffers(self, scene: Scene) -> SceneBuffers:
        """Load a scene into the cached buffers, growing them when it does not fit.

        Replacing the buffers frees the old fields and makes _trace compile
        once more for the new instance.
        """
        packed = pack_scene(scene)
        if self._buffers is None or not self._buffers.fits(packed):
            self.release()
            self._buffers = SceneBuffers.for_scene(packed)
            logger.debug(
                "Allocated scene buffers for %s (spheres, triangles, lights)", packed.counts
            )
        self._buffers.load(packed)
        logger.debug("Loaded scene into kernel buffers: %s", self._buffers.get_counts())
        return self._buffers

    def release(self) -> None:
        """Free the cached scene buffers. The next render allocates new ones."""
        if self._buffers is not None:
            self._buffers.destroy()
            self._retired.append(self._buffers)
            self._buffers = None

    @ti.kernel
    def _trace(self, scene: ti.template(), all_lights: ti.i32):
        for y, x in self.colors:
            origin = self.ray_origins[y, x]
            direction = self.ray_directions[y, x]
            kind, index, t = scene.intersect(origin, direction)

            color = ti_vec3(0.0, 0.0, 0.0)
            if kind != MISS:
                point = origin + t * direction
                normal, albedo = scene.surface(kind, index, point)
                color = shade_hit(scene, point, normal, albedo, all_lights)
            self.colors[y, x] = color


_shared_integrators: dict[tuple[int, int], TaichiIntegrator] = {}


def shared_integrator(width: int, height: int) -> TaichiIntegrator:
    """Get the process-wide integrator for an image size.

    Integrator fields cannot be freed individually and every new instance
    compiles its own kernel, so renderers share one integrator per size.
    """
    key = (width, height)
    if key not in _shared_integrators:
        _shared_integrators[key] = TaichiIntegrator(width, height)
        logger.debug("Created Taichi integrator for %dx%d", width, height)
    return _shared_integrators[key]
