"""Camera module for view derivation and primary ray generation.

Components:
    view: Orthonormal camera basis (derived once per scene with NumPy) and
        the per-pixel ray generator used by the frame driver
"""

from .view import ViewBasis, derive_view, get_view_ray

__all__ = [
    "ViewBasis",
    "derive_view",
    "get_view_ray",
]
