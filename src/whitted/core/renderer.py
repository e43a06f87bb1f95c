"""Render session tying a Scene to its device storage and frame buffer.

This module provides a convenient wrapper around the integrator that supports:
- Rendering the whole frame in one call or in row bands
- Progress callbacks for command-line and UI updates
- Reading the linear frame buffer back as NumPy arrays
- Encoding and saving the result

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64, fast_math=False)
    >>> from whitted.core.renderer import Renderer
    >>> from whitted.scene.loader import load_scene
    >>>
    >>> renderer = Renderer(load_scene("scenes/mirrors.txt"), max_depth=4)
    >>> renderer.render()
    >>> image = renderer.get_image_numpy()
"""

from __future__ import annotations

from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt

from whitted.core.integrator import DEFAULT_MAX_DEPTH, WhittedIntegrator
from whitted.scene.intersection import SceneFields
from whitted.scene.model import Scene

# Type alias for progress callback
# Callback receives (rows_rendered, total_rows)
ProgressCallback = Callable[[int, int], None]


class Renderer:
    """A render session for one immutable scene.

    The scene is uploaded once in the constructor. Rendering only reads the
    scene fields and writes each pixel's own frame-buffer slot, so the frame
    can be produced in any band order with identical results.

    Attributes:
        scene: The scene being rendered.
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Reflection bounces allowed after the primary ray.
    """

    def __init__(self, scene: Scene, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        """Upload the scene and allocate the frame buffer.

        Args:
            scene: The scene to render.
            max_depth: Maximum number of reflection bounces (default 4).

        Raises:
            ValueError: If max_depth is negative or the camera is degenerate.
        """
        self._scene = scene
        self._fields = SceneFields(scene)
        self._integrator = WhittedIntegrator(self._fields, max_depth=max_depth)
        self._rows_rendered = 0

    @property
    def scene(self) -> Scene:
        """Get the scene being rendered."""
        return self._scene

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._scene.width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._scene.height

    @property
    def max_depth(self) -> int:
        """Get the reflection budget."""
        return self._integrator.max_depth

    @property
    def integrator(self) -> WhittedIntegrator:
        """Get the underlying integrator."""
        return self._integrator

    @property
    def is_complete(self) -> bool:
        """Whether every row of the frame has been rendered."""
        return self._rows_rendered >= self.height

    def reset(self) -> None:
        """Clear the frame buffer for a fresh render."""
        self._integrator.clear()
        self._rows_rendered = 0

    def render(
        self,
        batch_rows: int | None = None,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render the full frame.

        Args:
            batch_rows: Rows per kernel launch. None renders the whole frame
                in a single launch.
            callback: Optional callback function called after each batch.
                Receives (rows_rendered, total_rows).

        Raises:
            ValueError: If batch_rows is not positive.

        Example:
            >>> def progress(done, total):
            ...     print(f"Progress: {done}/{total} rows")
            >>> renderer.render(batch_rows=32, callback=progress)
        """
        rows = self.height if batch_rows is None else batch_rows
        for done, total in self.render_progressive(rows):
            if callback is not None:
                callback(done, total)

    def render_progressive(self, batch_rows: int = 16) -> Generator[tuple[int, int], None, None]:
        """Render the frame in row bands, yielding progress after each band.

        This is a generator-based alternative to render() with callbacks.

        Args:
            batch_rows: Number of rows per band.

        Yields:
            Tuple of (rows_rendered, total_rows).

        Raises:
            ValueError: If batch_rows is not positive.
        """
        if batch_rows <= 0:
            raise ValueError(f"batch_rows must be positive, got {batch_rows}")

        self.reset()
        while self._rows_rendered < self.height:
            stop = min(self._rows_rendered + batch_rows, self.height)
            self._integrator.render_rows(self._rows_rendered, stop)
            self._rows_rendered = stop
            yield (self._rows_rendered, self.height)

    def render_pixel(self, px: int, py: int) -> tuple[float, float, float]:
        """Render a single pixel (column px, row py from the top)."""
        return self._integrator.render_pixel(px, py)

    def trace_ray(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
        depth: int | None = None,
    ) -> tuple[float, float, float]:
        """Trace an arbitrary ray through the scene."""
        return self._integrator.trace_ray(origin, direction, depth)

    def _check_complete(self) -> None:
        if not self.is_complete:
            raise RuntimeError("Frame not rendered. Call render() first.")

    def get_image_numpy(self) -> npt.NDArray[np.float64]:
        """Get the rendered frame as linear colors.

        Values are not clamped; clamping belongs to encoding.

        Returns:
            NumPy array of shape (height, width, 3) with dtype float64.

        Raises:
            RuntimeError: If the frame has not been fully rendered.
        """
        self._check_complete()
        return self._integrator.get_frame_numpy()

    def get_ray_counts(self) -> npt.NDArray[np.int32]:
        """Get the number of rays traced per pixel (1 = primary ray only).

        Raises:
            RuntimeError: If the frame has not been fully rendered.
        """
        self._check_complete()
        return self._integrator.get_ray_counts_numpy()

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the rendered frame as 8-bit RGB (scaled by 255 and clamped)."""
        from whitted.preview.export import image_to_uint8

        return image_to_uint8(self.get_image_numpy())

    def save_image(self, filepath: str | None = None) -> str:
        """Save the rendered frame.

        Args:
            filepath: Output path. Defaults to the path named by the scene.
                The format follows the suffix (.ppm or any Pillow format).

        Returns:
            The path written.
        """
        from whitted.preview.export import save_image

        path = filepath or self._scene.output
        save_image(self.get_image_numpy(), path)
        return path

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"max_depth={self.max_depth}, spheres={len(self._scene.spheres)}, "
            f"lights={len(self._scene.lights)})"
        )
