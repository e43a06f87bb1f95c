"""Preview module for output and visualization.

Components:
    export: 8-bit conversion, binary PPM and Pillow-backed image export
    display: Matplotlib preview of a rendered frame

Example:
    >>> from whitted.preview import save_image, show_preview
    >>> image = renderer.get_image_numpy()
    >>> save_image(image, "output.ppm")
    >>> show_preview(image)
"""

from whitted.preview.display import clamp_for_display, show_preview
from whitted.preview.export import (
    compute_rmse,
    encode_ppm,
    image_to_uint8,
    save_image,
    save_png_from_array,
    save_ppm,
)

__all__ = [
    # Display functions
    "show_preview",
    "clamp_for_display",
    # Export functions
    "image_to_uint8",
    "encode_ppm",
    "save_ppm",
    "save_png_from_array",
    "save_image",
    "compute_rmse",
]
