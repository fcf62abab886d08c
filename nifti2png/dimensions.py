"""Axis extents of a loaded volume.

Axes 0 and 1 form the image plane, axis 2 is depth ("z") and axis 3 is
the temporal/series axis ("t"). Three-axis sources get ``nt = 1``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from nifti2png.errors import UnsupportedDimensionality

# Axis counts accepted from the decoder
SUPPORTED_NDIMS = (3, 4)


@dataclass(frozen=True)
class VolumeDimensions:
    """Canonical 4-axis extents of a volume.

    Attributes:
        nx: Extent of axis 0 (image rows).
        ny: Extent of axis 1 (image columns).
        nz: Extent of axis 2 (depth).
        nt: Extent of axis 3 (frames), 1 for 3-axis sources.
        source_ndim: Number of axes in the decoded shape (3 or 4).
    """

    nx: int
    ny: int
    nz: int
    nt: int = 1
    source_ndim: int = 3

    @classmethod
    def from_shape(
        cls,
        shape: Sequence[int],
        filename: str | Path = "<unknown>",
    ) -> "VolumeDimensions":
        """Build canonical dimensions from a decoder shape.

        Args:
            shape: Shape tuple of length 3 or 4.
            filename: Source file name, used for error reporting.

        Returns:
            VolumeDimensions with ``nt`` defaulting to 1.

        Raises:
            UnsupportedDimensionality: If the shape has any other length,
                or an axis extent is not positive.

        Example:
            >>> VolumeDimensions.from_shape((240, 240, 155)).shape
            (240, 240, 155, 1)
        """
        ndim = len(shape)
        if ndim not in SUPPORTED_NDIMS:
            raise UnsupportedDimensionality(ndim, filename)

        extents = [int(n) for n in shape]
        if any(n <= 0 for n in extents):
            raise UnsupportedDimensionality(
                ndim, filename, detail=f"non-positive extent in shape {tuple(extents)}"
            )

        if ndim == 3:
            extents.append(1)
        return cls(*extents, source_ndim=ndim)

    @property
    def shape(self) -> tuple[int, int, int, int]:
        """Return the canonical (nx, ny, nz, nt) vector."""
        return (self.nx, self.ny, self.nz, self.nt)

    @property
    def num_slices(self) -> int:
        return self.nz

    @property
    def num_frames(self) -> int:
        return self.nt

    @property
    def primary_dims(self) -> tuple[int, int]:
        """Return the (nx, ny) extents of the image plane."""
        return (self.nx, self.ny)

    @property
    def secondary_dims(self) -> tuple[int, int]:
        """Return the (nz, nt) extents addressed by a slice coordinate."""
        return (self.nz, self.nt)

    @property
    def is_series(self) -> bool:
        """True when the temporal axis must be addressed when slicing."""
        return self.nt > 1

    def __str__(self) -> str:
        return "(" + ", ".join(str(n) for n in self.shape[: self.source_ndim]) + ")"
