"""Pytest configuration for path tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls, which would
    invalidate fields created by earlier tests. Double precision is required
    by the box scene's 1e5-radius walls.
    """
    ti.init(arch=ti.cpu, default_fp=ti.f64)
    yield


@pytest.fixture
def box_scene():
    """Create the box scene and its camera."""
    from src.pathtracer.scene.box import create_box_scene

    return create_box_scene()


@pytest.fixture
def single_sphere_scene():
    """A grey diffuse unit sphere at the origin and a small light far above it."""
    from src.pathtracer.materials import Material
    from src.pathtracer.scene.scene import Scene, SphereInfo

    return Scene(
        [
            SphereInfo((0.0, 0.0, 0.0), 1.0, material=Material.diffuse((0.5, 0.5, 0.5))),
            SphereInfo(
                (0.0, 10.0, 0.0),
                0.5,
                emission=(4.0, 4.0, 4.0),
                material=Material.diffuse((0.0, 0.0, 0.0)),
            ),
        ],
        light_index=1,
    )
