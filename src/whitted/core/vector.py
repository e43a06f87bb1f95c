"""Ray data structure and double-precision vector utilities.

This module provides the Ray dataclass, the vector helpers shared by every
stage of the tracer and the tolerance comparator used for all distance
decisions. All operations are Taichi functions and run inside kernels.

The comparator treats two values closer than EPSILON as equal. It is used for
root classification, nearest-hit selection and shadow distances alike, so
every stage agrees on what "closer" means.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64, fast_math=False)
    >>> origin = vec3(0.0, 0.0, 0.0)
    >>> direction = vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti

# Colors and positions are carried in double precision end to end
vec3 = ti.types.vector(3, ti.f64)

# Tolerance of the three-way comparator (2^-10)
EPSILON = 0.0009765625

# Sentinel distance for "no intersection"
INF = float("inf")


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Normalized by
            every producer in this package.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f64) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + ray.direction * t


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def dot(a: vec3, b: vec3) -> ti.f64:
    """Compute the dot product a . b."""
    return a.x * b.x + a.y * b.y + a.z * b.z


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return vec3(
        a.y * b.z - a.z * b.y,
        a.z * b.x - a.x * b.z,
        a.x * b.y - a.y * b.x,
    )


@ti.func
def length(v: vec3) -> ti.f64:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(dot(v, v))


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Unlike ti.math.normalize this never divides by zero: a zero-length
    vector normalizes to the zero vector.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the same direction as v, or the zero vector if v
        has zero length.
    """
    result = vec3(0.0, 0.0, 0.0)
    len_v = length(v)
    if len_v != 0.0:
        result = v / len_v
    return result


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect a vector about a unit normal.

    Computes d - 2(d . n)n. The normal should be unit length.

    Args:
        incident: The vector to reflect.
        normal: The surface normal (should be normalized).

    Returns:
        The reflected vector.
    """
    return incident - normal * (2.0 * dot(incident, normal))


@ti.func
def compare(a: ti.f64, b: ti.f64) -> ti.i32:
    """Three-way comparison with a fixed tolerance.

    Equal values (two infinities included) compare as 0 without forming
    inf - inf.

    Args:
        a: Left operand.
        b: Right operand.

    Returns:
        -1 if a - b < -EPSILON, 1 if a - b > EPSILON, 0 otherwise.
    """
    result = 0
    if a != b:
        d = a - b
        if d < -EPSILON:
            result = -1
        elif d > EPSILON:
            result = 1
    return result
