"""Matplotlib-based preview display for rendered frames.

Frames are shown exactly as they will be encoded: linear values clamped to
[0, 1], with no tone mapping or gamma correction.

Example:
    >>> from whitted.preview.display import show_preview
    >>> renderer.render()
    >>> show_preview(renderer.get_image_numpy(), title="mirrors.txt")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

if TYPE_CHECKING:
    from matplotlib.figure import Figure


def clamp_for_display(image: npt.NDArray[np.floating]) -> npt.NDArray[np.float64]:
    """Clamp a linear image to the displayable [0, 1] range."""
    return np.clip(np.asarray(image, dtype=np.float64), 0.0, 1.0)


def show_preview(
    image: npt.NDArray[np.floating],
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 8),
    block: bool = True,
    show: bool = True,
) -> Figure:
    """Display a rendered frame as a Matplotlib figure.

    Args:
        image: Linear image array of shape (H, W, 3).
        title: Custom title (default shows the image size).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
        show: Whether to call plt.show(); False only builds the figure.

    Returns:
        The Matplotlib figure.
    """
    import matplotlib.pyplot as plt

    display_image = clamp_for_display(image)

    fig, ax = plt.subplots(1, 1, figsize=figsize)

    ax.imshow(display_image, interpolation="nearest")
    ax.axis("off")

    if title is None:
        height, width = display_image.shape[:2]
        title = f"Render Preview - {width}x{height}"
    ax.set_title(title)

    plt.tight_layout()
    if show:
        plt.show(block=block)

    return fig
