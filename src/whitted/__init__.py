"""Whitted-style recursive ray tracer built on Taichi.

This package renders scenes of pigmented, textured spheres lit by point
lights, with support for:
- Analytic ray-sphere intersection with a tolerance comparator
- Shadow rays and Phong-style local illumination
- Recursive specular reflection with a bounded bounce depth
- Per-pixel parallel rendering into a double-precision frame buffer

Subpackages:
    core: Vector utilities, shading, the recursive tracer and render session
    geometry: Sphere intersection engine
    scene: Scene data model, textual loader and device-side scene storage
    camera: Camera basis derivation and primary ray generation
    preview: Image encoding (PPM/PNG) and matplotlib preview
"""

__version__ = "0.1.0"
