"""Unit tests for the camera view basis and primary rays.

Tests cover:
- Orthonormal basis derivation
- View-plane placement and extents
- Degenerate camera rejection
- Primary ray generation for corner and center pixels
"""

import math

import numpy as np
import pytest
import taichi as ti


def _camera(eye=(0.0, 0.0, 5.0), at=(0.0, 0.0, 0.0), up=(0.0, 1.0, 0.0), fovy=0.8):
    from whitted.scene.model import Camera

    return Camera(eye=eye, at=at, up=up, fovy=fovy)


class TestDeriveView:
    """Tests for derive_view."""

    def test_axis_aligned_basis(self):
        from whitted.camera.view import derive_view

        view = derive_view(_camera(), aspect=1.0)

        assert view.forward == pytest.approx((0.0, 0.0, -1.0))
        assert view.left == pytest.approx((-1.0, 0.0, 0.0))
        assert view.up == pytest.approx((0.0, 1.0, 0.0))

    @pytest.mark.parametrize(
        "eye,at,up",
        [
            ((0.0, 1.0, 12.0), (0.0, 0.0, 0.0), (0.0, 1.0, 0.0)),
            ((3.0, -2.0, 7.0), (1.0, 1.0, -1.0), (0.2, 1.0, 0.1)),
            ((-5.0, 4.0, 0.0), (0.0, 0.0, 0.0), (0.0, 0.0, 3.0)),
        ],
    )
    def test_basis_orthonormal(self, eye, at, up):
        from whitted.camera.view import derive_view

        view = derive_view(_camera(eye, at, up), aspect=4.0 / 3.0)
        fwd, left, vup = (np.array(v) for v in (view.forward, view.left, view.up))

        for v in (fwd, left, vup):
            assert np.linalg.norm(v) == pytest.approx(1.0)
        assert np.dot(fwd, left) == pytest.approx(0.0, abs=1e-12)
        assert np.dot(fwd, vup) == pytest.approx(0.0, abs=1e-12)
        assert np.dot(left, vup) == pytest.approx(0.0, abs=1e-12)

    def test_view_plane_one_unit_ahead(self):
        """The view-plane center is eye + forward, not the look-at point."""
        from whitted.camera.view import derive_view

        view = derive_view(_camera(eye=(0.0, 0.0, 5.0), at=(0.0, 0.0, -20.0)), aspect=1.0)

        assert view.at == pytest.approx((0.0, 0.0, 4.0))
        assert view.eye == pytest.approx((0.0, 0.0, 5.0))

    def test_extents(self):
        from whitted.camera.view import derive_view

        view = derive_view(_camera(fovy=0.8), aspect=2.0)

        assert view.half_height == pytest.approx(2.0 * math.tan(0.4))
        assert view.half_width == pytest.approx(2.0 * view.half_height)

    def test_eye_equals_at_rejected(self):
        from whitted.camera.view import derive_view

        with pytest.raises(ValueError, match="Degenerate camera"):
            derive_view(_camera(eye=(1.0, 1.0, 1.0), at=(1.0, 1.0, 1.0)), aspect=1.0)

    def test_up_parallel_to_view_rejected(self):
        from whitted.camera.view import derive_view

        with pytest.raises(ValueError, match="Degenerate camera"):
            derive_view(_camera(up=(0.0, 0.0, 2.0)), aspect=1.0)

    def test_zero_up_rejected(self):
        from whitted.camera.view import derive_view

        with pytest.raises(ValueError, match="Degenerate camera"):
            derive_view(_camera(up=(0.0, 0.0, 0.0)), aspect=1.0)


class TestViewRay:
    """Tests for get_view_ray."""

    def _ray(self, view, px, py, width, height):
        from whitted.camera.view import get_view_ray
        from whitted.core.vector import vec3

        origin = ti.Vector.field(3, dtype=ti.f64, shape=())
        direction = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel(
            eye: vec3, at: vec3, left: vec3, up: vec3, hw: ti.f64, hh: ti.f64,
            x: ti.i32, y: ti.i32, w: ti.i32, h: ti.i32,
        ):
            ray = get_view_ray(eye, at, left, up, hw, hh, x, y, w, h)
            origin[None] = ray.origin
            direction[None] = ray.direction

        test_kernel(
            vec3(*view.eye), vec3(*view.at), vec3(*view.left), vec3(*view.up),
            view.half_width, view.half_height, px, py, width, height,
        )
        return origin.to_numpy(), direction.to_numpy()

    def test_center_pixel_looks_forward(self):
        from whitted.camera.view import derive_view

        view = derive_view(_camera(), aspect=4.0 / 3.0)
        origin, direction = self._ray(view, 8, 6, 16, 12)

        np.testing.assert_allclose(origin, view.at, atol=1e-12)
        np.testing.assert_allclose(direction, view.forward, atol=1e-12)

    def test_top_left_pixel(self):
        """Pixel (0, 0) is the upper-left corner of the view plane."""
        from whitted.camera.view import derive_view

        view = derive_view(_camera(), aspect=4.0 / 3.0)
        origin, direction = self._ray(view, 0, 0, 16, 12)

        w, h = view.half_width, view.half_height
        expected_origin = np.array([-w / 2.0, h / 2.0, 4.0])
        np.testing.assert_allclose(origin, expected_origin, atol=1e-12)

        expected_direction = expected_origin - np.array(view.eye)
        expected_direction /= np.linalg.norm(expected_direction)
        np.testing.assert_allclose(direction, expected_direction, atol=1e-12)

    def test_directions_normalized(self):
        from whitted.camera.view import derive_view

        view = derive_view(_camera(eye=(2.0, 3.0, 4.0), at=(0.0, 0.5, -1.0)), aspect=1.5)
        for px, py in [(0, 0), (23, 0), (0, 15), (23, 15), (11, 7)]:
            _, direction = self._ray(view, px, py, 24, 16)
            assert np.linalg.norm(direction) == pytest.approx(1.0)
