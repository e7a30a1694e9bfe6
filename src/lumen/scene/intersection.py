"""Kernel-side scene storage and nearest-hit query.

pack_scene() splits a Scene into per-type NumPy arrays, and SceneBuffers holds
them in Taichi fields so the render kernel can trace rays without touching
Python objects. Primitives are stored in a Structure-of-Arrays layout, each
with its diffuse albedo and its position in the scene's object list.

The scene's object list is interleaved (spheres and triangles in any
order) while the kernel scans spheres first and triangles second, so each
primitive keeps its scene order and equal hit times are resolved in favour
of the smaller order. This gives the same winner as Scene.intersects_renderable().

Only renderables with a Sphere or Triangle shape and a UniformMaterial over
a Lambert BSDF can be packed.
"""

from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti

from lumen.core.ray import ti_vec3
from lumen.geometry.shape import NO_HIT
from lumen.geometry.sphere import Sphere, hit_sphere
from lumen.geometry.triangle import Triangle, hit_triangle
from lumen.materials.lambertian import Lambert
from lumen.materials.material import UniformMaterial
from lumen.scene.manager import Scene
from lumen.scene.renderable import Renderable

# Primitive kinds reported by SceneBuffers.intersect()
MISS = 0
SPHERE = 1
TRIANGLE = 2


def _lambert_albedo(renderable: Renderable) -> tuple[float, float, float]:
    """Extract the constant Lambert color of a renderable.

    Raises:
        TypeError: If the material is not a UniformMaterial over a Lambert BSDF.
    """
    material = renderable.material
    if not isinstance(material, UniformMaterial) or not isinstance(material.bsdf, Lambert):
        raise TypeError(
            f"Kernel rendering supports UniformMaterial(Lambert) only, got {material!r}"
        )
    color = material.bsdf.color
    return (color.red, color.green, color.blue)


def _rows(rows: list, width: int = 0, dtype=np.float64) -> npt.NDArray:
    """Stack rows into an array of shape (n, width), or (n,) when width is 0."""
    shape = (-1, width) if width else (-1,)
    return np.asarray(rows, dtype=dtype).reshape(shape)


def _padded(values: npt.NDArray, capacity: int) -> npt.NDArray:
    """Zero-pad the leading axis of an array to the field capacity."""
    out = np.zeros((capacity,) + values.shape[1:], dtype=values.dtype)
    out[: len(values)] = values
    return out


def _capacity_for(count: int) -> int:
    """Smallest power of two holding count elements (at least 1)."""
    capacity = 1
    while capacity < count:
        capacity *= 2
    return capacity


@dataclass
class PackedScene:
    """NumPy copy of the kernel-renderable parts of a Scene.

    Every array has one row per primitive or light. The order arrays hold
    each primitive's index in the scene's object list.
    """

    sphere_centers: npt.NDArray[np.float64]
    sphere_radii: npt.NDArray[np.float64]
    sphere_albedos: npt.NDArray[np.float64]
    sphere_order: npt.NDArray[np.int32]
    triangle_v1: npt.NDArray[np.float64]
    triangle_v2: npt.NDArray[np.float64]
    triangle_v3: npt.NDArray[np.float64]
    triangle_albedos: npt.NDArray[np.float64]
    triangle_order: npt.NDArray[np.int32]
    light_positions: npt.NDArray[np.float64]
    light_colors: npt.NDArray[np.float64]

    @property
    def counts(self) -> tuple[int, int, int]:
        """(spheres, triangles, lights)."""
        return len(self.sphere_radii), len(self.triangle_order), len(self.light_positions)


def pack_scene(scene: Scene) -> PackedScene:
    """Split a scene into per-type arrays for the render kernel.

    Raises:
        TypeError: If a renderable has a shape other than Sphere or Triangle,
            or a material other than UniformMaterial(Lambert).
    """
    centers, radii, sphere_albedos, sphere_order = [], [], [], []
    v1s, v2s, v3s, triangle_albedos, triangle_order = [], [], [], [], []

    for order, renderable in enumerate(scene.objects):
        shape = renderable.shape
        albedo = _lambert_albedo(renderable)
        if isinstance(shape, Sphere):
            centers.append(shape.center)
            radii.append(shape.radius)
            sphere_albedos.append(albedo)
            sphere_order.append(order)
        elif isinstance(shape, Triangle):
            v1s.append(shape.v1)
            v2s.append(shape.v2)
            v3s.append(shape.v3)
            triangle_albedos.append(albedo)
            triangle_order.append(order)
        else:
            raise TypeError(f"Kernel rendering supports Sphere and Triangle, got {shape!r}")

    return PackedScene(
        sphere_centers=_rows(centers, 3),
        sphere_radii=_rows(radii),
        sphere_albedos=_rows(sphere_albedos, 3),
        sphere_order=_rows(sphere_order, dtype=np.int32),
        triangle_v1=_rows(v1s, 3),
        triangle_v2=_rows(v2s, 3),
        triangle_v3=_rows(v3s, 3),
        triangle_albedos=_rows(triangle_albedos, 3),
        triangle_order=_rows(triangle_order, dtype=np.int32),
        light_positions=_rows([light.position for light in scene.lights], 3),
        light_colors=_rows([light.color.to_array() for light in scene.lights], 3),
    )


@ti.data_oriented
class SceneBuffers:
    """Reusable Taichi field storage for packed scenes.

    Fields are allocated once with fixed capacities in their own field tree
    and refilled by load() for every render, so kernels taking the buffers
    as a template argument compile once per SceneBuffers instance. Only the
    first num_* elements of each field are scanned. Call destroy() to free
    the fields.

    Attributes:
        sphere_capacity: Number of sphere slots.
        triangle_capacity: Number of triangle slots.
        light_capacity: Number of light slots.
        num_spheres: Number of loaded spheres (0-d field).
        num_triangles: Number of loaded triangles (0-d field).
        num_lights: Number of loaded lights (0-d field).
    """

    def __init__(self, sphere_capacity: int, triangle_capacity: int, light_capacity: int) -> None:
        if min(sphere_capacity, triangle_capacity, light_capacity) < 1:
            raise ValueError("Buffer capacities must be at least 1")
        self.sphere_capacity = sphere_capacity
        self.triangle_capacity = triangle_capacity
        self.light_capacity = light_capacity

        builder = ti.FieldsBuilder()

        # Element counts
        self.num_spheres = ti.field(dtype=ti.i32)
        self.num_triangles = ti.field(dtype=ti.i32)
        self.num_lights = ti.field(dtype=ti.i32)
        builder.place(self.num_spheres, self.num_triangles, self.num_lights)

        # Sphere storage
        self.sphere_centers = ti.Vector.field(3, dtype=ti.f64)
        self.sphere_radii = ti.field(dtype=ti.f64)
        self.sphere_albedos = ti.Vector.field(3, dtype=ti.f64)
        self.sphere_order = ti.field(dtype=ti.i32)
        builder.dense(ti.i, sphere_capacity).place(
            self.sphere_centers, self.sphere_radii, self.sphere_albedos, self.sphere_order
        )

        # Triangle storage
        self.triangle_v1 = ti.Vector.field(3, dtype=ti.f64)
        self.triangle_v2 = ti.Vector.field(3, dtype=ti.f64)
        self.triangle_v3 = ti.Vector.field(3, dtype=ti.f64)
        self.triangle_albedos = ti.Vector.field(3, dtype=ti.f64)
        self.triangle_order = ti.field(dtype=ti.i32)
        builder.dense(ti.i, triangle_capacity).place(
            self.triangle_v1,
            self.triangle_v2,
            self.triangle_v3,
            self.triangle_albedos,
            self.triangle_order,
        )

        # Light storage
        self.light_positions = ti.Vector.field(3, dtype=ti.f64)
        self.light_colors = ti.Vector.field(3, dtype=ti.f64)
        builder.dense(ti.i, light_capacity).place(self.light_positions, self.light_colors)

        self._tree = builder.finalize()

    @classmethod
    def for_scene(cls, packed: PackedScene) -> "SceneBuffers":
        """Allocate buffers with power-of-two capacities that hold a packed scene."""
        return cls(*(_capacity_for(count) for count in packed.counts))

    def fits(self, packed: PackedScene) -> bool:
        """Check whether a packed scene fits in the allocated capacities."""
        n_spheres, n_triangles, n_lights = packed.counts
        return (
            n_spheres <= self.sphere_capacity
            and n_triangles <= self.triangle_capacity
            and n_lights <= self.light_capacity
        )

    def load(self, packed: PackedScene) -> None:
        """Copy a packed scene into the fields.

        Raises:
            ValueError: If the scene does not fit.
        """
        if not self.fits(packed):
            raise ValueError(
                f"Scene counts {packed.counts} exceed buffer capacities "
                f"{(self.sphere_capacity, self.triangle_capacity, self.light_capacity)}"
            )
        n_spheres, n_triangles, n_lights = packed.counts

        self.sphere_centers.from_numpy(_padded(packed.sphere_centers, self.sphere_capacity))
        self.sphere_radii.from_numpy(_padded(packed.sphere_radii, self.sphere_capacity))
        self.sphere_albedos.from_numpy(_padded(packed.sphere_albedos, self.sphere_capacity))
        self.sphere_order.from_numpy(_padded(packed.sphere_order, self.sphere_capacity))
        self.num_spheres[None] = n_spheres

        capacity = self.triangle_capacity
        self.triangle_v1.from_numpy(_padded(packed.triangle_v1, capacity))
        self.triangle_v2.from_numpy(_padded(packed.triangle_v2, capacity))
        self.triangle_v3.from_numpy(_padded(packed.triangle_v3, capacity))
        self.triangle_albedos.from_numpy(_padded(packed.triangle_albedos, capacity))
        self.triangle_order.from_numpy(_padded(packed.triangle_order, capacity))
        self.num_triangles[None] = n_triangles

        self.light_positions.from_numpy(_padded(packed.light_positions, self.light_capacity))
        self.light_colors.from_numpy(_padded(packed.light_colors, self.light_capacity))
        self.num_lights[None] = n_lights

    def destroy(self) -> None:
        """Free the field tree. The buffers must not be used afterwards."""
        self._tree.destroy()

    def get_counts(self) -> dict[str, int]:
        """Get the loaded primitive and light counts, for debugging."""
        return {
            "spheres": int(self.num_spheres[None]),
            "triangles": int(self.num_triangles[None]),
            "lights": int(self.num_lights[None]),
        }

    @ti.func
    def intersect(self, ray_origin: ti_vec3, ray_direction: ti_vec3):
        """Find the nearest primitive hit by a ray.

        Returns:
            A tuple (kind, index, t) where kind is MISS, SPHERE or TRIANGLE
            and index addresses the per-kind fields. t is NO_HIT on a miss.
        """
        kind = MISS
        index = -1
        best_t = NO_HIT
        best_order = -1

        for i in range(self.num_spheres[None]):
            t = hit_sphere(ray_origin, ray_direction, self.sphere_centers[i], self.sphere_radii[i])
            if t >= 0.0:
                order = self.sphere_order[i]
                if best_order < 0 or t < best_t or (t == best_t and order < best_order):
                    kind = SPHERE
                    index = i
                    best_t = t
                    best_order = order

        for i in range(self.num_triangles[None]):
            t = hit_triangle(
                ray_origin,
                ray_direction,
                self.triangle_v1[i],
                self.triangle_v2[i],
                self.triangle_v3[i],
            )
            if t >= 0.0:
                order = self.triangle_order[i]
                if best_order < 0 or t < best_t or (t == best_t and order < best_order):
                    kind = TRIANGLE
                    index = i
                    best_t = t
                    best_order = order

        return kind, index, best_t

    @ti.func
    def surface(self, kind: ti.i32, index: ti.i32, point: ti_vec3):
        """Return (normal, albedo) of a hit primitive.

        The normal is unnormalized, matching Shape.normal().
        """
        normal = ti_vec3(0.0, 0.0, 0.0)
        albedo = ti_vec3(0.0, 0.0, 0.0)
        if kind == SPHERE:
            normal = point - self.sphere_centers[index]
            albedo = self.sphere_albedos[index]
        elif kind == TRIANGLE:
            v1 = self.triangle_v1[index]
            normal = (self.triangle_v2[index] - v1).cross(self.triangle_v3[index] - v1)
            albedo = self.triangle_albedos[index]
        return normal, albedo
