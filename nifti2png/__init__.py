"""nifti2png: convert NIfTI volumes into oriented PNG slice sequences.

Exports:
    VolumeDimensions: Canonical 4-axis extents of a volume
    Volume, RescaledVolume: Decoded and [0, 1]-rescaled voxel grids
    rescale_intensity: Map voxel intensities into [0, 1]
    extract_slice: Extract a 2D plane at (z, t)
    rasterize: Turn a plane into an oriented 8-bit image
    raster_to_array: Raw uint8 buffer of a raster
    plan_directory, plan_slice_file, ensure_directory: Output layout
    walk, convert: Directory-level conversion
"""

from nifti2png.dimensions import VolumeDimensions
from nifti2png.errors import (
    CollaboratorFailure,
    DecodeFailure,
    DirectoryCreationFailure,
    DirectoryListingFailure,
    EncodeFailure,
    MultipleVolumeFailures,
    Nifti2PngError,
    PathEncodingFailure,
    RasterRangeError,
    UnsupportedDimensionality,
)
from nifti2png.formats import NiftiDecoder, PngEncoder, load_image, load_nifti
from nifti2png.normalize import rescale_intensity
from nifti2png.paths import OutputTarget, ensure_directory, plan_directory, plan_slice_file
from nifti2png.raster import raster_to_array, rasterize
from nifti2png.volume import RescaledVolume, SliceCoordinate, Volume, extract_slice
from nifti2png.walker import ConversionSummary, convert, walk, write_volume_slices

__all__ = [
    "CollaboratorFailure",
    "ConversionSummary",
    "DecodeFailure",
    "DirectoryCreationFailure",
    "DirectoryListingFailure",
    "EncodeFailure",
    "MultipleVolumeFailures",
    "Nifti2PngError",
    "NiftiDecoder",
    "OutputTarget",
    "PathEncodingFailure",
    "PngEncoder",
    "RasterRangeError",
    "RescaledVolume",
    "SliceCoordinate",
    "UnsupportedDimensionality",
    "Volume",
    "VolumeDimensions",
    "convert",
    "ensure_directory",
    "extract_slice",
    "load_image",
    "load_nifti",
    "plan_directory",
    "plan_slice_file",
    "raster_to_array",
    "rasterize",
    "rescale_intensity",
    "walk",
    "write_volume_slices",
]
