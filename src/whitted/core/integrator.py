"""Whitted-style recursive tracer and frame driver.

This module implements the rendering kernel: one primary ray per pixel,
nearest-hit search, local shading and bounded-depth mirror reflection.

Tracing a ray with a bounce budget is naturally recursive:

    trace(ray, budget):
        miss                      -> BACKGROUND_COLOR
        reflectivity <= 0         -> local
        budget <= 0               -> (1 - r) * local
        otherwise                 -> (1 - r) * local + r * trace(mirror ray, budget - 1)

Taichi functions cannot recurse, so the recursion is flattened into a
work-list. Each reflective bounce pushes (local, r) onto a per-pixel bounce
stack; once the chain ends, the terminal value is folded back through the
stack with value = (1 - r_k) * local_k + r_k * value. The operations and their
order match the recursive form exactly. The budget strictly decreases, so a
chain has at most max_depth + 1 rays.

Key features:
    - Nearest-hit search with tolerance-based tie breaking
    - Shadow rays per point light (see shading.py)
    - Per-pixel ray counters for inspecting the reflection chain
    - Row-band rendering so callers can report progress

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64, fast_math=False)
    >>> from whitted.scene.intersection import SceneFields
    >>> from whitted.scene.loader import load_scene
    >>> integrator = WhittedIntegrator(SceneFields(load_scene("scenes/mirrors.txt")))
    >>> integrator.render_rows(0, integrator.height)
    >>> image = integrator.get_frame_numpy()
"""

import numpy as np
import taichi as ti

from whitted.core.shading import Shader
from whitted.core.vector import compare, reflect, vec3
from whitted.scene.intersection import SceneFields

# =============================================================================
# Rendering Constants
# =============================================================================

# Color returned by rays that hit nothing (flat mid-gray)
BACKGROUND_COLOR = vec3(0.5, 0.5, 0.5)

# Reflection bounces allowed after the primary ray
DEFAULT_MAX_DEPTH = 4


@ti.data_oriented
class WhittedIntegrator:
    """Frame buffer plus the kernels that fill it.

    The frame buffer is indexed [row, column] with row 0 at the top of the
    image. One extra row beyond the image is reserved as scratch space for
    single-ray queries made from Python.

    Attributes:
        scene: The device-side scene.
        shader: The local illumination stage.
        max_depth: Reflection bounces allowed after the primary ray.
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, scene: SceneFields, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        """Allocate the frame buffer and bounce stacks.

        Args:
            scene: The device-side scene to render.
            max_depth: Maximum number of reflection bounces (>= 0).

        Raises:
            ValueError: If max_depth is negative.
        """
        if max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {max_depth}")

        self.scene = scene
        self.shader = Shader(scene)
        self.max_depth = max_depth
        self.width = scene.width
        self.height = scene.height

        rows = self.height + 1
        stack_depth = max(max_depth, 1)

        self.frame = ti.Vector.field(3, dtype=ti.f64, shape=(rows, self.width))
        self.rays_traced = ti.field(dtype=ti.i32, shape=(rows, self.width))
        self._bounce_color = ti.Vector.field(3, dtype=ti.f64, shape=(rows, self.width, stack_depth))
        self._bounce_reflectivity = ti.field(dtype=ti.f64, shape=(rows, self.width, stack_depth))

    # =========================================================================
    # Tracing Core
    # =========================================================================

    @ti.func
    def trace(self, origin: vec3, direction: vec3, depth: ti.i32, row: ti.i32, col: ti.i32) -> vec3:
        """Radiance seen along a ray with `depth` reflection bounces left.

        Args:
            origin: Ray origin.
            direction: Ray direction (normalized).
            depth: Remaining reflection budget.
            row: Bounce-stack row owned by the caller.
            col: Bounce-stack column owned by the caller.

        Returns:
            The radiance (RGB), unclamped.
        """
        ray_origin = origin
        ray_direction = direction
        budget = depth
        bounces = 0
        terminal = vec3(0.0, 0.0, 0.0)
        active = 1

        while active == 1:
            index, t = self.scene.nearest_hit(ray_origin, ray_direction)

            if index < 0:
                terminal = BACKGROUND_COLOR
                active = 0
            else:
                local, point, normal, refl = self.shader.shade_local(
                    index, t, ray_origin, ray_direction
                )

                if compare(0.0, refl) >= 0:
                    # Matte surface: no mirror ray
                    terminal = local
                    active = 0
                elif budget <= 0:
                    terminal = (1.0 - refl) * local
                    active = 0
                else:
                    self._bounce_color[row, col, bounces] = local
                    self._bounce_reflectivity[row, col, bounces] = refl
                    bounces += 1
                    ray_origin = point
                    ray_direction = reflect(ray_direction, normal)
                    budget -= 1

        self.rays_traced[row, col] = bounces + 1

        # Unwind the reflection chain, innermost bounce first
        radiance = terminal
        k = bounces - 1
        while k >= 0:
            r = self._bounce_reflectivity[row, col, k]
            radiance = (1.0 - r) * self._bounce_color[row, col, k] + r * radiance
            k -= 1

        return radiance

    # =========================================================================
    # Rendering Kernels
    # =========================================================================

    @ti.kernel
    def _render_rows_kernel(self, row_start: ti.i32, row_stop: ti.i32, depth: ti.i32):
        """Trace one primary ray per pixel for rows [row_start, row_stop)."""
        for py, px in ti.ndrange((row_start, row_stop), self.width):
            ray = self.scene.view_ray(px, py)
            self.frame[py, px] = self.trace(ray.origin, ray.direction, depth, py, px)

    @ti.kernel
    def _render_pixel_kernel(self, px: ti.i32, py: ti.i32, depth: ti.i32) -> vec3:
        ray = self.scene.view_ray(px, py)
        color = self.trace(ray.origin, ray.direction, depth, py, px)
        self.frame[py, px] = color
        return color

    @ti.kernel
    def _trace_ray_kernel(self, origin: vec3, direction: vec3, depth: ti.i32) -> vec3:
        return self.trace(origin, direction, depth, self.height, 0)

    # =========================================================================
    # Public API
    # =========================================================================

    def render_rows(self, row_start: int, row_stop: int) -> None:
        """Render the rows [row_start, row_stop) of the frame.

        Raises:
            ValueError: If the row range lies outside the image.
        """
        if not 0 <= row_start <= row_stop <= self.height:
            raise ValueError(
                f"Row range [{row_start}, {row_stop}) outside image of height {self.height}"
            )
        if row_start == row_stop:
            return
        self._render_rows_kernel(row_start, row_stop, self.max_depth)

    def render_pixel(self, px: int, py: int) -> tuple[float, float, float]:
        """Render a single pixel and store it in the frame buffer.

        Args:
            px: Pixel column (0 = left).
            py: Pixel row (0 = top).

        Returns:
            Tuple of (R, G, B) linear color values.

        Raises:
            ValueError: If the pixel lies outside the image.
        """
        if not (0 <= px < self.width and 0 <= py < self.height):
            raise ValueError(f"Pixel ({px}, {py}) outside {self.width}x{self.height} image")
        color = self._render_pixel_kernel(px, py, self.max_depth)
        return (float(color[0]), float(color[1]), float(color[2]))

    def trace_ray(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
        depth: int | None = None,
    ) -> tuple[float, float, float]:
        """Trace an arbitrary ray from Python.

        Args:
            origin: Ray origin.
            direction: Ray direction; normalized here before tracing.
            depth: Reflection budget, default max_depth. Clamped to max_depth
                because the bounce stacks are sized for it.

        Returns:
            Tuple of (R, G, B) linear color values.
        """
        budget = self.max_depth if depth is None else min(depth, self.max_depth)
        d = np.asarray(direction, dtype=np.float64)
        norm = np.linalg.norm(d)
        if norm != 0.0:
            d = d / norm
        color = self._trace_ray_kernel(vec3(*origin), vec3(*d), budget)
        return (float(color[0]), float(color[1]), float(color[2]))

    def last_ray_count(self) -> int:
        """Number of rays traced by the most recent trace_ray() call."""
        return int(self.rays_traced[self.height, 0])

    def clear(self) -> None:
        """Reset the frame buffer and ray counters to zero."""
        self.frame.fill(0.0)
        self.rays_traced.fill(0)

    def get_frame_numpy(self) -> np.ndarray:
        """Frame buffer as a (height, width, 3) float64 array in raster order."""
        return self.frame.to_numpy()[: self.height]

    def get_ray_counts_numpy(self) -> np.ndarray:
        """Rays traced per pixel as a (height, width) int32 array."""
        return self.rays_traced.to_numpy()[: self.height]
