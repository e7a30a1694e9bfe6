"""Scene import from Wavefront OBJ meshes.

Only vertex positions (``v``) and faces (``f``) are read; texture
coordinates, normals, groups and material libraries are skipped. Faces may
use any of the ``v``, ``v/vt``, ``v//vn`` or ``v/vt/vn`` index forms and
negative (relative) indices.

Every face must be a triangle. Loading fails as a whole rather than
producing a partial scene:
    - LoadObjError: the file cannot be read or a record is malformed.
    - GeneralPolygonError: a face has more or fewer than three vertices.

Example:
    >>> from lumen.scene.loader import load_scene
    >>> scene = load_scene("examples/cube.obj")
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable

from lumen.core.color import WHITE
from lumen.core.ray import Vec3, vec3
from lumen.geometry.triangle import Triangle
from lumen.materials.lambertian import Lambert
from lumen.materials.material import Material, UniformMaterial
from lumen.scene.light import PointLight
from lumen.scene.manager import Scene
from lumen.scene.renderable import Renderable

logger = logging.getLogger(__name__)

# Used until materials are read from the file
DEFAULT_LIGHT_POSITION = (5.0, 5.0, 1.0)


def default_material() -> Material:
    """Red Lambert material applied to imported triangles."""
    return UniformMaterial(Lambert(1.0, 0.0, 0.0))


def default_lights() -> list[PointLight]:
    """Single white point light used for imported scenes."""
    return [PointLight(vec3(*DEFAULT_LIGHT_POSITION), WHITE)]


class SceneLoadError(Exception):
    """Base class for scene import failures."""


class LoadObjError(SceneLoadError):
    """The mesh file is unreadable or malformed."""


class GeneralPolygonError(SceneLoadError):
    """A face is not a triangle."""


def _parse_vertex(values: list[str], line_num: int) -> Vec3:
    if len(values) < 3:
        raise LoadObjError(f"line {line_num}: vertex needs 3 coordinates, got {len(values)}")
    try:
        return vec3(float(values[0]), float(values[1]), float(values[2]))
    except ValueError as e:
        raise LoadObjError(f"line {line_num}: bad vertex coordinate: {e}") from e


def _resolve_index(token: str, vertex_count: int, line_num: int) -> int:
    index_str = token.split("/")[0]
    try:
        index = int(index_str)
    except ValueError as e:
        raise LoadObjError(f"line {line_num}: bad face index {token!r}") from e

    # OBJ indices are 1-based; negative indices count back from the last vertex
    if index > 0:
        resolved = index - 1
    elif index < 0:
        resolved = vertex_count + index
    else:
        raise LoadObjError(f"line {line_num}: face index 0 is invalid")

    if not 0 <= resolved < vertex_count:
        raise LoadObjError(
            f"line {line_num}: face index {index} out of range ({vertex_count} vertices)"
        )
    return resolved


def parse_obj(lines: Iterable[str]) -> list[Triangle]:
    """Parse OBJ records into triangles.

    Args:
        lines: The text of an OBJ file, one record per line.

    Returns:
        One Triangle per face, in file order.

    Raises:
        LoadObjError: If a record is malformed or references a missing vertex.
        GeneralPolygonError: If a face does not have exactly three vertices.
    """
    vertices: list[Vec3] = []
    triangles: list[Triangle] = []

    for line_num, line in enumerate(lines, 1):
        values = line.split("#", 1)[0].split()
        if not values:
            continue

        if values[0] == "v":
            vertices.append(_parse_vertex(values[1:], line_num))
        elif values[0] == "f":
            indices = [_resolve_index(tok, len(vertices), line_num) for tok in values[1:]]
            if len(indices) != 3:
                raise GeneralPolygonError(
                    f"line {line_num}: face has {len(indices)} vertices, only triangles "
                    "are supported"
                )
            triangles.append(Triangle(*(vertices[i] for i in indices)))

    logger.debug("Parsed %d vertices, %d triangles", len(vertices), len(triangles))
    return triangles


def load_triangles(path: str | os.PathLike[str]) -> list[Triangle]:
    """Load the triangles of an OBJ file.

    Raises:
        LoadObjError: If the file cannot be read or is malformed.
        GeneralPolygonError: If a face is not a triangle.
    """
    try:
        with open(path, encoding="utf-8") as f:
            return parse_obj(f)
    except (OSError, UnicodeDecodeError) as e:
        raise LoadObjError(f"Could not read {os.fspath(path)!r}: {e}") from e


def scene_from_triangles(
    triangles: Iterable[Triangle],
    material: Material | None = None,
    lights: Iterable[PointLight] | None = None,
) -> Scene:
    """Build a scene from imported triangles.

    Args:
        triangles: The triangles to add, in order.
        material: Material shared by every triangle. Defaults to red Lambert.
        lights: Lights to add. Defaults to one white light at (5, 5, 1).

    Returns:
        The populated scene.
    """
    if material is None:
        material = default_material()
    return Scene(
        objects=(Renderable(tri, material) for tri in triangles),
        lights=default_lights() if lights is None else lights,
    )


def load_scene(
    path: str | os.PathLike[str],
    material: Material | None = None,
    lights: Iterable[PointLight] | None = None,
) -> Scene:
    """Load an OBJ file into a renderable scene.

    See scene_from_triangles() for the material and light defaults.

    Raises:
        LoadObjError: If the file cannot be read or is malformed.
        GeneralPolygonError: If a face is not a triangle.
    """
    scene = scene_from_triangles(load_triangles(path), material, lights)
    logger.info(
        "Loaded %s: %d triangles, %d lights",
        os.fspath(path),
        len(scene.objects),
        len(scene.lights),
    )
    return scene
