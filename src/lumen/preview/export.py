"""Image export utilities for rendered images.

Rendering produces a (height, width, 3) grid of 8-bit RGB triples whose row
0 is screen coordinate y = 0. Encoding that grid to a file is delegated to
Pillow.

Supported formats:
    - PNG (8-bit RGB via Pillow)

Example:
    >>> from lumen.preview.export import save_png
    >>> image = renderer.render(camera, scene)
    >>> save_png(image, "output.png")
"""

from __future__ import annotations

import os

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from lumen.core.color import image_to_uint8


def save_png(image: npt.NDArray[np.uint8], filepath: str | os.PathLike[str]) -> None:
    """Save an 8-bit RGB image as a PNG file.

    Args:
        image: Array of shape (H, W, 3) with dtype uint8.
        filepath: Output file path (should end in .png).

    Raises:
        ValueError: If the array has the wrong shape or dtype.
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")
    if image.dtype != np.uint8:
        raise ValueError(f"Expected a uint8 image, got dtype {image.dtype}")

    pil_image = PILImage.fromarray(np.ascontiguousarray(image))
    pil_image.save(filepath, format="PNG")


def save_png_from_linear(
    image: npt.NDArray[np.floating],
    filepath: str | os.PathLike[str],
) -> None:
    """Convert a linear float image to 8 bits and save it as a PNG file.

    Uses the same clamp-and-truncate conversion as the renderer.
    """
    save_png(image_to_uint8(image), filepath)
