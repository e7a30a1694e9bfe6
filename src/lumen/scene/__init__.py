"""Scene module for scene representation and ray-scene queries.

Components:
    renderable: Shape and material binding
    light: Point lights
    manager: Scene container with the nearest-hit query
    loader: OBJ mesh import and scene load errors
    intersection: Taichi field packing for the render kernel
"""

from .light import PointLight
from .loader import (
    GeneralPolygonError,
    LoadObjError,
    SceneLoadError,
    load_scene,
    load_triangles,
    parse_obj,
    scene_from_triangles,
)
from .manager import Scene
from .renderable import Renderable

# Note: intersection is NOT imported here; it is only needed by the kernel.

__all__ = [
    "PointLight",
    "Renderable",
    "Scene",
    "SceneLoadError",
    "LoadObjError",
    "GeneralPolygonError",
    "load_scene",
    "load_triangles",
    "parse_obj",
    "scene_from_triangles",
]
