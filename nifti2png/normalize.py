"""Intensity normalization for volumetric data.

This module maps arbitrary floating-point voxel intensities into the
unit interval [0, 1] before slices are quantized to 8-bit rasters.
"""

from __future__ import annotations

import numpy as np

Window = tuple[float, float]


def resolve_window(data: np.ndarray, window: Window | None = None) -> Window:
    """Return the (lo, hi) clamp range used to rescale ``data``.

    The automatic range only considers finite voxels. A buffer without
    any finite voxel gets the degenerate window (0, 0).

    Args:
        data: Voxel buffer of any shape.
        window: Explicit (min, max) range, or None to use the data range.

    Returns:
        Tuple (lo, hi) as finite floats.

    Raises:
        ValueError: If the window is inverted (lo > hi) or not finite, or
            the buffer is empty.
    """
    if window is None:
        if data.size == 0:
            raise ValueError("Cannot compute an intensity range of an empty buffer")
        finite = data[np.isfinite(data)]
        if finite.size == 0:
            return 0.0, 0.0
        lo, hi = float(finite.min()), float(finite.max())
    else:
        lo, hi = float(window[0]), float(window[1])
        if not (np.isfinite(lo) and np.isfinite(hi)):
            raise ValueError(f"Intensity window must be finite, got ({lo}, {hi})")

    if lo > hi:
        raise ValueError(f"Invalid intensity window: min {lo} > max {hi}")
    return lo, hi


def rescale_intensity(data: np.ndarray, window: Window | None = None) -> np.ndarray:
    """Rescale voxel intensities to the [0, 1] range.

    Each element becomes ``(clip(x, lo, hi) - lo) / (hi - lo)``, where
    ``(lo, hi)`` is the supplied window or the min/max of the whole
    buffer. Values below ``lo`` map to exactly 0 and values above ``hi``
    to exactly 1. A degenerate window (``lo == hi``) yields all zeros,
    matching how constant slices are handled elsewhere. NaN and -inf
    voxels map to 0, +inf voxels to 1.

    The input array is never modified; a new float64 array is returned.

    Args:
        data: Voxel buffer of any shape.
        window: Optional (min, max) clamp range.

    Returns:
        New float64 array with the same shape as ``data``.

    Example:
        >>> data = np.array([[0, 100], [50, 200]], dtype=np.float32)
        >>> rescale_intensity(data)
        array([[0.  , 0.5 ],
               [0.25, 1.  ]])
    """
    lo, hi = resolve_window(data, window)
    values = np.nan_to_num(
        np.asarray(data, dtype=np.float64), nan=lo, posinf=hi, neginf=lo
    )

    if hi > lo:
        rescaled = (np.clip(values, lo, hi) - lo) / (hi - lo)
        # guard against rounding drift at the upper bound
        np.clip(rescaled, 0.0, 1.0, out=rescaled)
    else:
        rescaled = np.zeros_like(values)  # degenerate window
    return rescaled
