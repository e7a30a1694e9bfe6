"""Pytest configuration for lumen tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls, which would
    discard every field allocated by earlier tests.
    """
    from lumen.core.integrator import init_taichi

    init_taichi(arch="cpu", random_seed=42)
    yield


@pytest.fixture
def red_material():
    """Red Lambert material shared by scene tests."""
    from lumen.materials.lambertian import Lambert
    from lumen.materials.material import UniformMaterial

    return UniformMaterial(Lambert(1.0, 0.0, 0.0))


@pytest.fixture
def sphere_scene(red_material):
    """One red sphere at (50, 50, 100) with radius 25, lit from the camera side."""
    from lumen.scene.manager import Scene

    scene = Scene.empty()
    scene.add_sphere((50.0, 50.0, 100.0), 25.0, red_material)
    scene.add_light((50.0, 50.0, -1000.0))
    return scene


@pytest.fixture
def grid_camera():
    """Orthographic camera mapping pixel (x, y) of a 100x100 image to (x, y, 0)."""
    from lumen.camera.orthographic import OrthographicCamera

    return OrthographicCamera(corner=(0.0, 0.0, 0.0), width=100.0, height=100.0)
