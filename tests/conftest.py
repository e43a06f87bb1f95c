"""Pytest configuration for whitted tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts. Double precision and
    IEEE-conformant math match whitted.core.init_taichi().
    """
    ti.init(arch=ti.cpu, default_fp=ti.f64, fast_math=False)
    yield


@pytest.fixture
def make_scene():
    """Factory for small in-memory scenes.

    Defaults: a 16x12 image, camera at z=10 looking at the origin, a white
    ambient light only, one pigment and one matte texture.
    """
    from whitted.scene.model import Camera, Light, Scene, Texture

    def _make(
        spheres=(),
        lights=None,
        pigments=None,
        textures=None,
        width=16,
        height=12,
        camera=None,
    ):
        return Scene(
            output="test.ppm",
            width=width,
            height=height,
            camera=camera or Camera(eye=(0.0, 0.0, 10.0), at=(0.0, 0.0, 0.0), up=(0.0, 1.0, 0.0), fovy=0.5),
            lights=tuple(lights) if lights is not None else (Light((0.0, 0.0, 0.0), (1.0, 1.0, 1.0)),),
            pigments=tuple(pigments) if pigments is not None else ((1.0, 0.5, 0.25),),
            textures=tuple(textures) if textures is not None else (Texture(0.2, 0.6, 0.0, 1.0, 0.0),),
            spheres=tuple(spheres),
        )

    return _make
