"""Core rendering module.

This module contains the fundamental building blocks of the Whitted tracer:

Components:
    vector: Ray data structure, vector utilities and the tolerance comparator
    shading: Ambient, diffuse and specular lighting with shadow rays
    integrator: Recursive tracer and per-pixel frame driver
    renderer: Render session wrapping scene upload, rendering and export

All compute-intensive operations are Taichi functions running in double
precision. Call init_taichi() (or ti.init with default_fp=ti.f64 and
fast_math=False) before building a Renderer.
"""

import taichi as ti

from .vector import (
    EPSILON,
    INF,
    Ray,
    compare,
    cross,
    dot,
    length,
    make_ray,
    normalize,
    ray_at,
    reflect,
    vec3,
)

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from whitted.core.integrator or whitted.core.renderer when needed.


def init_taichi(arch: str = "cpu") -> None:
    """Initialize Taichi for rendering.

    Double precision is the default float type and fast math is disabled so
    that comparisons against the infinite "no hit" distance behave per IEEE.

    Args:
        arch: "cpu" or "gpu". Taichi falls back to the CPU when no GPU
            backend is available.

    Raises:
        ValueError: If arch is not recognised.
    """
    archs = {"cpu": ti.cpu, "gpu": ti.gpu}
    if arch not in archs:
        raise ValueError(f"Unknown Taichi arch {arch!r}; expected one of {sorted(archs)}")
    ti.init(arch=archs[arch], default_fp=ti.f64, fast_math=False)


__all__ = [
    "EPSILON",
    "INF",
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "compare",
    "init_taichi",
]
