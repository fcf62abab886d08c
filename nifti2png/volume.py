"""Volume containers and slice extraction.

This module holds the decoded and rescaled volume types and the
functions that address 2D planes inside them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, NamedTuple

import numpy as np

from nifti2png.dimensions import VolumeDimensions
from nifti2png.normalize import Window, rescale_intensity, resolve_window
from nifti2png.raster import rasterize, raster_to_array


class SliceCoordinate(NamedTuple):
    """Position of one 2D plane: depth ``z`` and frame ``t``."""

    z: int
    t: int = 0


@dataclass
class Volume:
    """Decoded voxel grid and its metadata.

    Attributes:
        filename: Name of the file the volume was decoded from.
        dims: Canonical axis extents.
        data: Voxel buffer with 3 or 4 axes.
    """

    filename: str
    dims: VolumeDimensions
    data: np.ndarray

    def rescaled(self, window: Window | None = None) -> "RescaledVolume":
        """Return a new volume with intensities mapped to [0, 1].

        Args:
            window: Optional (min, max) clamp range. Defaults to the
                min/max of this volume.

        Returns:
            RescaledVolume sharing ``filename`` and ``dims``.
        """
        used = resolve_window(self.data, window)
        return RescaledVolume(
            filename=self.filename,
            dims=self.dims,
            data=rescale_intensity(self.data, used),
            window=used,
        )


@dataclass
class RescaledVolume(Volume):
    """Volume whose voxel values all lie in [0, 1].

    Attributes:
        window: The (lo, hi) range that was mapped onto [0, 1].
    """

    window: Window = (0.0, 1.0)

    def slice_as_raw_rgba(self, z: int, t: int = 0) -> np.ndarray:
        """Return the oriented RGBA raster of one slice as a uint8 array.

        Returns:
            Array with shape (ny, nx, 4).

        Raises:
            IndexError: If ``(z, t)`` is outside the volume.
        """
        return raster_to_array(rasterize(extract_slice(self, z, t), alpha=True))


def _check_index(name: str, index: int, extent: int) -> None:
    if not 0 <= index < extent:
        raise IndexError(
            f"Slice index {name}={index} out of bounds for axis of size {extent}"
        )


def extract_slice(volume: Volume, z: int, t: int = 0) -> np.ndarray:
    """Extract a 2D plane from a volume.

    The plane spans axes 0 and 1 at depth ``z``. The frame index ``t`` is
    only used to address the data when the volume has more than one
    frame; single-frame volumes are always read at their only frame,
    so ``t`` must be 0 for them.

    Args:
        volume: Decoded or rescaled volume.
        z: Index along axis 2.
        t: Index along axis 3.

    Returns:
        2D numpy array with shape (nx, ny).

    Raises:
        IndexError: If ``z`` or ``t`` is outside the volume. Negative
            indices are rejected rather than wrapped.

    Example:
        >>> dims = VolumeDimensions.from_shape((4, 4, 2))
        >>> vol = Volume("a.nii", dims, np.zeros((4, 4, 2)))
        >>> extract_slice(vol, 1).shape
        (4, 4)
    """
    dims = volume.dims
    _check_index("z", z, dims.nz)
    _check_index("t", t, dims.nt)

    if volume.data.ndim == 4:
        return volume.data[:, :, z, t]
    return volume.data[:, :, z]


def iter_slice_coordinates(dims: VolumeDimensions) -> Iterator[SliceCoordinate]:
    """Yield every slice coordinate, frames outer and depth inner."""
    for t in range(dims.nt):
        for z in range(dims.nz):
            yield SliceCoordinate(z=z, t=t)
