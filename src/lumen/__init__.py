"""Minimal offline ray tracer with direct illumination.

Given a camera and a scene of spheres and triangles with Lambert materials
and point lights, the renderer casts one ray per pixel, finds the nearest
surface and evaluates direct lighting there.

Subpackages:
    core: Rays, colors, the renderer and the Taichi render kernel
    geometry: Shape primitives and intersection algorithms
    materials: BSDF and material models
    camera: Pinhole and orthographic ray generation
    scene: Scene container, nearest-hit query and OBJ import
    preview: Image export
"""

__version__ = "0.1.0"
