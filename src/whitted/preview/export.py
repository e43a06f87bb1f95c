"""Image export utilities for rendered frames.

This module converts linear frame buffers to 8-bit RGB and writes them to
files. Conversion follows a single contract: each channel is multiplied by
255, clamped to [0, 255] and rounded. Out-of-range values are clamped, never
wrapped.

Supported formats:
    - PPM (binary P6, written directly)
    - PNG and every other format Pillow can write

Example:
    >>> from whitted.preview.export import save_image
    >>> from whitted.core.renderer import Renderer
    >>>
    >>> renderer = Renderer(scene)
    >>> renderer.render()
    >>> save_image(renderer.get_image_numpy(), "output.ppm")
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

# Process umask, read once; mkstemp creates files with mode 0600
_UMASK = os.umask(0)
os.umask(_UMASK)


def image_to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a linear color image to 8-bit RGB.

    Args:
        image: Linear image array of shape (H, W, 3), nominal range [0, 1].

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.

    Raises:
        ValueError: If the array is not (H, W, 3).
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")

    scaled = np.clip(np.asarray(image, dtype=np.float64) * 255.0, 0.0, 255.0)
    return np.rint(scaled).astype(np.uint8)


def encode_ppm(image: npt.NDArray[np.floating]) -> bytes:
    """Encode a linear image as a binary PPM (P6) file.

    Args:
        image: Linear image array of shape (H, W, 3).

    Returns:
        The header "P6\\n<width> <height>\\n255\\n" followed by raw RGB bytes
        in raster order.
    """
    pixels = image_to_uint8(image)
    height, width = pixels.shape[:2]
    header = f"P6\n{width} {height}\n255\n".encode("ascii")
    return header + pixels.tobytes()


def _replace_atomically(filepath: str | Path, write) -> None:
    """Write through a temporary file in the destination directory.

    The destination only ever holds a complete file: `write` receives an
    open binary file, and the result is moved into place once it returns.
    On failure the temporary file is removed and the error re-raised.
    """
    target = Path(filepath)
    fd, tmp_name = tempfile.mkstemp(
        dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "wb") as f:
            write(f)
        os.chmod(tmp_name, 0o666 & ~_UMASK)
        os.replace(tmp_name, target)
    except BaseException:
        os.unlink(tmp_name)
        raise


def save_ppm(image: npt.NDArray[np.floating], filepath: str | Path) -> None:
    """Save a linear image as a binary PPM file.

    Raises:
        OSError: If the destination cannot be written.
    """
    data = encode_ppm(image)
    _replace_atomically(filepath, lambda f: f.write(data))


def save_png_from_array(image: npt.NDArray[np.floating], filepath: str | Path) -> None:
    """Save a linear image with Pillow (format chosen from the suffix).

    Raises:
        OSError: If the destination cannot be written.
        ValueError: If Pillow does not know the file suffix.
    """
    suffix = Path(filepath).suffix.lower()
    image_format = PILImage.registered_extensions().get(suffix)
    if image_format is None:
        raise ValueError(f"unknown file extension: {suffix}")

    pil_image = PILImage.fromarray(image_to_uint8(image))
    _replace_atomically(filepath, lambda f: pil_image.save(f, format=image_format))


def save_image(image: npt.NDArray[np.floating], filepath: str | Path) -> None:
    """Save a linear image, choosing the encoder from the file suffix.

    ".ppm" (or no suffix) writes binary PPM; anything else goes to Pillow.

    Args:
        image: Linear image array of shape (H, W, 3).
        filepath: Output file path.
    """
    suffix = Path(filepath).suffix.lower()
    if suffix in ("", ".ppm"):
        save_ppm(image, filepath)
    else:
        save_png_from_array(image, filepath)


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
