"""Sphere primitive and the analytic ray-sphere intersection engine.

The intersection is found by solving:
    |origin + t * direction - center|^2 = radius^2

which expands to the quadratic a*t^2 + b*t + c = 0 with
    a = dot(direction, direction)
    b = 2 * dot(direction, origin - center)
    c = dot(origin - center, origin - center) - radius^2

The discriminant is classified with the tolerance comparator rather than an
exact sign test. A near-zero discriminant is treated as a tangent hit with a
single root, and roots within EPSILON of the origin are rejected.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64, fast_math=False)
    >>> from whitted.geometry.sphere import intersect_sphere
    >>> # Use intersect_sphere within a Taichi kernel
"""

import taichi as ti

from whitted.core.vector import INF, compare, dot, vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f64


@ti.func
def _accept_root(t: ti.f64) -> ti.i32:
    """A root is usable when it lies beyond the tolerance and is finite."""
    return compare(0.0, t) < 0 and compare(t, INF) < 0


@ti.func
def intersect_sphere(origin: vec3, direction: vec3, center: vec3, radius: ti.f64) -> ti.f64:
    """Smallest positive distance at which a ray meets a sphere.

    Args:
        origin: The starting point of the ray.
        direction: The direction vector of the ray (normalized).
        center: The sphere center.
        radius: The sphere radius.

    Returns:
        The parametric distance t of the nearest accepted root, or INF if
        the ray misses the sphere.
    """
    oc = origin - center
    a = dot(direction, direction)
    b = 2.0 * dot(direction, oc)
    c = dot(oc, oc) - radius * radius
    discriminant = b * b - 4.0 * a * c

    state = compare(discriminant, 0.0)
    result = ti.cast(INF, ti.f64)

    if state == 0:
        # Tangent ray: a single root
        t = -b / (2.0 * a)
        if _accept_root(t):
            result = t
    elif state == 1:
        s = ti.sqrt(discriminant)
        t0 = (-b - s) / (2.0 * a)
        t1 = (-b + s) / (2.0 * a)

        if _accept_root(t0):
            result = t0
        elif compare(0.0, t1) < 0 and compare(t1, result) < 0:
            result = t1

    return result


@ti.func
def hit_sphere(origin: vec3, direction: vec3, sphere: Sphere) -> ti.f64:
    """Intersect a ray with a Sphere dataclass instance."""
    return intersect_sphere(origin, direction, sphere.center, sphere.radius)


@ti.func
def make_sphere(center: vec3, radius: ti.f64) -> Sphere:
    """Create a sphere from center and radius."""
    return Sphere(center=center, radius=radius)
