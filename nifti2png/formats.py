"""Volume decoding and raster encoding collaborators.

The conversion pipeline only talks to the two small interfaces defined
here: a ``VolumeDecoder`` that turns a path into a ``Volume`` and a
``RasterEncoder`` that persists an oriented image. The default
implementations are backed by nibabel and Pillow.
"""

from __future__ import annotations

import logging
import zlib
from pathlib import Path
from typing import Protocol

import nibabel as nib
import numpy as np
from nibabel.filebasedimages import ImageFileError
from nibabel.spatialimages import HeaderDataError
from PIL import Image, UnidentifiedImageError

from nifti2png.dimensions import VolumeDimensions
from nifti2png.errors import CollaboratorFailure, DecodeFailure, EncodeFailure
from nifti2png.paths import PNG_SUFFIX
from nifti2png.volume import Volume

logger = logging.getLogger(__name__)

# Raised by nibabel and the gzip layer for unreadable or corrupt files
DECODE_ERRORS = (ImageFileError, HeaderDataError, OSError, ValueError, EOFError, zlib.error)


class VolumeDecoder(Protocol):
    """Turns a volume file into a decoded ``Volume``."""

    def __call__(self, path: Path) -> Volume: ...


class RasterEncoder(Protocol):
    """Persists an oriented raster at ``path``."""

    suffix: str

    def __call__(self, path: Path, image: Image.Image) -> None: ...


class NiftiDecoder:
    """Decode NIfTI (.nii / .nii.gz) files with nibabel.

    Args:
        canonical: Reorient volumes to the closest canonical (RAS+)
            orientation before reading the voxel data.
    """

    def __init__(self, canonical: bool = False):
        self.canonical = canonical

    def __call__(self, path: Path) -> Volume:
        path = Path(path)
        if not path.exists():
            raise DecodeFailure(path, FileNotFoundError(f"Volume file not found: {path}"))

        try:
            nii = nib.load(path)
            if self.canonical:
                nii = nib.as_closest_canonical(nii)
            shape = nii.header.get_data_shape()
        except DECODE_ERRORS as e:
            raise DecodeFailure(path, e) from e
        except Exception as e:
            raise CollaboratorFailure(path, e) from e

        # Validate the header before reading the (possibly large) voxel data
        dims = VolumeDimensions.from_shape(shape, filename=path.name)

        try:
            data = np.asarray(nii.get_fdata())
        except DECODE_ERRORS as e:
            raise DecodeFailure(path, e) from e
        except Exception as e:
            raise CollaboratorFailure(path, e) from e

        logger.debug(f"Decoded {path.name}: shape={dims}, dtype={data.dtype}")
        return Volume(filename=path.name, dims=dims, data=data)


class PngEncoder:
    """Write rasters as PNG files with Pillow."""

    suffix = PNG_SUFFIX

    def __call__(self, path: Path, image: Image.Image) -> None:
        try:
            image.save(path, format="PNG")
        except (OSError, ValueError) as e:
            raise EncodeFailure(path, e) from e


def load_nifti(path: str | Path, canonical: bool = False) -> Volume:
    """Load a NIfTI volume file.

    Supports both .nii and .nii.gz formats.

    Args:
        path: Path to the NIfTI file.
        canonical: Reorient to the closest canonical (RAS+) orientation.

    Returns:
        Decoded Volume with 3 or 4 axes.

    Raises:
        DecodeFailure: If the file is missing or not a valid NIfTI.
        UnsupportedDimensionality: If the volume is not 3D or 4D.

    Example:
        >>> volume = load_nifti("brain_volume.nii.gz")
        >>> volume.dims.shape
        (240, 240, 155, 1)
    """
    return NiftiDecoder(canonical=canonical)(Path(path))


def load_image(path: str | Path) -> np.ndarray:
    """Load a written raster back as an (H, W, 3) RGB array.

    Raises:
        FileNotFoundError: If the image file does not exist.
        EncodeFailure: If the file is not a readable image.
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    try:
        with Image.open(path) as img:
            return np.array(img.convert("RGB"))
    except UnidentifiedImageError as e:
        raise EncodeFailure(path, e) from e
