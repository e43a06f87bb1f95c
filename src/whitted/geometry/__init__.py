"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with analytic ray-sphere intersection

The intersection routine is a Taichi function (@ti.func) returning the
nearest accepted distance along the ray, or INF on a miss:
    t = intersect_sphere(ray_origin, ray_direction, center, radius)
"""

from .sphere import Sphere, hit_sphere, intersect_sphere, make_sphere

__all__ = [
    "Sphere",
    "hit_sphere",
    "intersect_sphere",
    "make_sphere",
]
