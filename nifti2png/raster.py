"""Conversion of rescaled 2D planes into oriented 8-bit rasters.

Each plane goes through the same fixed steps:

1. grayscale values are replicated into RGB (or RGBA) channels,
2. the [0, 1] floats are quantized to uint8,
3. the raster is rotated 90 degrees counter-clockwise and mirrored
   left to right to match the viewing convention of downstream viewers.
"""

from __future__ import annotations

import numpy as np
from PIL import Image, ImageOps

from nifti2png.errors import RasterRangeError

UBYTE_MAX = 255


def gray_to_rgb(plane: np.ndarray, alpha: bool = False) -> np.ndarray:
    """Replicate a grayscale plane into color channels.

    Args:
        plane: 2D float array with values in [0, 1].
        alpha: Append an opaque alpha channel (value 1.0).

    Returns:
        Float array with shape (H, W, 3), or (H, W, 4) with alpha.
    """
    if plane.ndim != 2:
        raise ValueError(f"Expected a 2D plane, got shape {plane.shape}")

    channels = [plane, plane, plane]
    if alpha:
        channels.append(np.ones_like(plane))
    return np.stack(channels, axis=-1)


def to_ubyte(image: np.ndarray) -> np.ndarray:
    """Quantize [0, 1] floats to uint8 via ``round(x * 255)``.

    Raises:
        RasterRangeError: If any value is non-finite or lies outside
            [0, 1]. Rescaling guarantees the range, so this signals an
            internal bug.
    """
    if not np.all(np.isfinite(image)):
        raise RasterRangeError("Raster contains non-finite values")
    if image.size and (image.min() < 0.0 or image.max() > 1.0):
        raise RasterRangeError(
            f"Raster values out of [0, 1]: min={image.min()}, max={image.max()}"
        )
    return np.rint(image * UBYTE_MAX).astype(np.uint8)


def orient(image: np.ndarray | Image.Image) -> Image.Image:
    """Rotate a raster 90 degrees counter-clockwise, then mirror it.

    The rotation always swaps width and height, so non-square slices
    are never cropped. The net pixel mapping for an H x W input is
    ``out[i, j] = in[H - 1 - j, W - 1 - i]``.

    Args:
        image: uint8 array (H, W, C) or a PIL image.

    Returns:
        Oriented PIL image of size W x H (rows x columns).
    """
    if isinstance(image, np.ndarray):
        image = Image.fromarray(image)
    rotated = image.transpose(Image.Transpose.ROTATE_90)
    return ImageOps.mirror(rotated)


def rasterize(plane: np.ndarray, alpha: bool = False) -> Image.Image:
    """Turn a rescaled 2D plane into an oriented 8-bit image.

    Args:
        plane: 2D float array with values in [0, 1].
        alpha: Produce an RGBA image instead of RGB.

    Returns:
        PIL image in mode "RGB" (or "RGBA") ready to be encoded.

    Example:
        >>> img = rasterize(np.zeros((240, 155)))
        >>> img.mode, img.size
        ('RGB', (240, 155))
    """
    ubyte = to_ubyte(gray_to_rgb(plane, alpha=alpha))
    return orient(ubyte)


def raster_to_array(image: Image.Image) -> np.ndarray:
    """Return the raw (H, W, C) uint8 buffer of a raster."""
    return np.asarray(image, dtype=np.uint8)
