#!/usr/bin/env python3
"""Render a demo scene or an OBJ mesh to a PNG file.

Without --obj, renders a single red sphere at (50, 50, 100) with radius 25
through an orthographic 100 x 100 ray grid looking along +Z. With --obj,
loads the mesh as red Lambert triangles lit by a white point light at
(5, 5, 1) and renders it through a pinhole camera at (1, 2, -2) looking at
(0.5, 0.5, 0.5).

Usage:
    python examples/render_scene.py [options]

Options:
    --obj PATH          OBJ mesh to render (default: sphere demo scene)
    --width WIDTH       Image width in pixels (default: 100)
    --height HEIGHT     Image height in pixels (default: 100)
    --backend NAME      "python" or "taichi" (default: python)
    --arch ARCH         Taichi arch for the taichi backend (default: cpu)
    --all-lights        Sum over every light instead of the first only
    --output OUTPUT     Output file path (default: render.png)
    --quiet             Only log warnings and errors

Example:
    python examples/render_scene.py --obj examples/cube.obj --backend taichi
"""

from __future__ import annotations

import argparse
import logging
import math
import sys
from pathlib import Path

from lumen.camera.orthographic import OrthographicCamera
from lumen.camera.pinhole import Camera
from lumen.core.color import WHITE
from lumen.core.renderer import BACKENDS, RenderSettings, Renderer
from lumen.core.ray import vec3
from lumen.materials.lambertian import Lambert
from lumen.materials.material import UniformMaterial
from lumen.preview.export import save_png
from lumen.scene.loader import SceneLoadError, load_scene
from lumen.scene.manager import Scene

logger = logging.getLogger("render_scene")


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a demo scene or an OBJ mesh.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--obj",
        type=Path,
        default=None,
        help="OBJ mesh to render (default: sphere demo scene)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=100,
        help="Image width in pixels (default: 100)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=100,
        help="Image height in pixels (default: 100)",
    )
    parser.add_argument(
        "--backend",
        choices=BACKENDS,
        default="python",
        help="Rendering backend (default: python)",
    )
    parser.add_argument(
        "--arch",
        default="cpu",
        help="Taichi arch for the taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--all-lights",
        action="store_true",
        help="Sum over every light instead of the first only",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("render.png"),
        help="Output file path (default: render.png)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only log warnings and errors",
    )
    return parser.parse_args()


def create_sphere_scene() -> tuple[Scene, OrthographicCamera]:
    """Create the demo sphere scene and its orthographic camera.

    The light sits on the camera side of the sphere so the visible
    hemisphere is lit.
    """
    scene = Scene.empty()
    scene.add_sphere((50.0, 50.0, 100.0), 25.0, UniformMaterial(Lambert(1.0, 0.0, 0.0)))
    scene.add_light((50.0, 50.0, -1000.0), WHITE)
    camera = OrthographicCamera(corner=vec3(0.0, 0.0, 0.0), width=100.0, height=100.0)
    return scene, camera


def create_mesh_camera() -> Camera:
    """Camera used for imported meshes."""
    return Camera.look_at(
        position=(1.0, 2.0, -2.0),
        target=(0.5, 0.5, 0.5),
        up=(0.0, 1.0, 0.0),
        width=2.0,
        height=2.0,
        fov=math.pi / 2.0,
    )


def main() -> int:
    """Main entry point."""
    args = parse_args()
    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = RenderSettings(
            width=args.width,
            height=args.height,
            backend=args.backend,
            all_lights=args.all_lights,
            arch=args.arch,
        )
        if args.obj is None:
            scene, camera = create_sphere_scene()
        else:
            scene = load_scene(args.obj)
            camera = create_mesh_camera()

        image = Renderer(settings).render(camera, scene)
        save_png(image, args.output)
    except SceneLoadError as e:
        logger.error("Could not load scene: %s", e)
        return 1
    except ValueError as e:
        logger.error("Invalid render configuration: %s", e)
        return 1

    logger.info("Saved to: %s", args.output.absolute())
    return 0


if __name__ == "__main__":
    sys.exit(main())
