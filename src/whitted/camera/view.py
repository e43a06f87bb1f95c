"""Camera basis derivation and primary ray generation.

The camera builds a right-handed orthonormal basis from the scene's eye, at
and up vectors:
- forward: normalize(at - eye)
- left: normalize(up x forward)
- up: normalize(forward x left), re-orthogonalized

The view plane sits at unit distance in front of the eye (its centre replaces
the scene's look-at point) with half-extents h = 2 * tan(fovy / 2) and
w = aspect * h.

Primary rays start on the view plane, not at the eye. The direction still
points away from the eye, so the projection is perspective, but ray origins
are offset by one unit along the view. Output from existing scene files
depends on this convention.

Example:
    >>> from whitted.scene.model import Camera
    >>> view = derive_view(Camera((0, 0, 5), (0, 0, 0), (0, 1, 0), 0.8), aspect=4 / 3)
    >>> view.forward
    (0.0, 0.0, -1.0)
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from whitted.core.vector import Ray, make_ray, normalize, vec3
from whitted.scene.model import Camera

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class ViewBasis:
    """Derived camera frame, computed once per scene.

    Attributes:
        eye: Camera position.
        at: Centre of the view plane (eye + forward).
        forward: Unit view direction.
        left: Unit vector spanning the view plane horizontally.
        up: Unit vector spanning the view plane vertically.
        half_width: w, the horizontal view-plane extent.
        half_height: h, the vertical view-plane extent.
    """

    eye: tuple[float, float, float]
    at: tuple[float, float, float]
    forward: tuple[float, float, float]
    left: tuple[float, float, float]
    up: tuple[float, float, float]
    half_width: float
    half_height: float


def _unit(v: np.ndarray, what: str) -> np.ndarray:
    norm = np.linalg.norm(v)
    if norm == 0.0:
        raise ValueError(f"Degenerate camera: {what} has zero length")
    return v / norm


def _as_tuple(v: np.ndarray) -> tuple[float, float, float]:
    return (float(v[0]), float(v[1]), float(v[2]))


# =============================================================================
# Camera Setup (Python-side, called once per scene)
# =============================================================================


def derive_view(camera: Camera, aspect: float) -> ViewBasis:
    """Derive the orthonormal view basis and view-plane extents.

    Args:
        camera: Camera placement from the scene.
        aspect: Image width divided by height.

    Returns:
        The derived ViewBasis.

    Raises:
        ValueError: If eye and at coincide, or up is zero or parallel to the
            view direction.
    """
    eye = np.array(camera.eye, dtype=np.float64)
    at = np.array(camera.at, dtype=np.float64)
    up = np.array(camera.up, dtype=np.float64)

    up = _unit(up, "up vector")
    forward = _unit(at - eye, "view direction (eye == at)")
    left = _unit(np.cross(up, forward), "up vector parallel to view direction")
    up = _unit(np.cross(forward, left), "up vector")

    half_height = 2.0 * math.tan(camera.fovy / 2.0)
    half_width = aspect * half_height

    return ViewBasis(
        eye=_as_tuple(eye),
        at=_as_tuple(eye + forward),
        forward=_as_tuple(forward),
        left=_as_tuple(left),
        up=_as_tuple(up),
        half_width=half_width,
        half_height=half_height,
    )


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_view_ray(
    eye: vec3,
    at: vec3,
    left: vec3,
    up: vec3,
    half_width: ti.f64,
    half_height: ti.f64,
    px: ti.i32,
    py: ti.i32,
    width: ti.i32,
    height: ti.i32,
) -> Ray:
    """Generate the primary ray for pixel (px, py).

    Row 0 is the top of the image: py = 0 maps to the upper edge of the
    view plane.

    Args:
        eye: Camera position.
        at: View-plane centre.
        left: Horizontal basis vector.
        up: Vertical basis vector.
        half_width: Horizontal view-plane extent w.
        half_height: Vertical view-plane extent h.
        px: Pixel column.
        py: Pixel row.
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A Ray whose origin is the pixel's point on the view plane and whose
        direction points away from the eye through that point.
    """
    x = half_width * ti.cast(px, ti.f64) / ti.cast(width, ti.f64) - half_width / 2.0
    y = half_height * ti.cast(py, ti.f64) / ti.cast(height, ti.f64) - half_height / 2.0

    viewpoint = at - left * x - up * y
    direction = normalize(viewpoint - eye)

    return make_ray(viewpoint, direction)
