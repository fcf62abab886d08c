"""Error types raised by the NIfTI to PNG conversion pipeline.

Every error carries the path (or coordinate) that triggered it so the
command-line entry point can report which input was rejected. Errors
raised by third-party libraries are chained via ``raise ... from exc``.
"""

from __future__ import annotations

from pathlib import Path


class Nifti2PngError(Exception):
    """Base class for all conversion errors."""


class UnsupportedDimensionality(Nifti2PngError):
    """Volume shape has a number of axes other than 3 or 4.

    Attributes:
        ndim: Number of axes found in the source shape.
        filename: Name of the file the shape was read from.
    """

    def __init__(self, ndim: int, filename: str | Path, detail: str | None = None):
        self.ndim = ndim
        self.filename = str(filename)
        message = (
            f"Unexpected dimensionality of {self.filename}: "
            f"{ndim} axes (3 or 4 expected)"
        )
        if detail:
            message = f"{message}; {detail}"
        super().__init__(message)


class _PathError(Nifti2PngError):
    """Error enriched with the filesystem path that triggered it."""

    action = "Operation failed"

    def __init__(self, path: str | Path, reason: object = None):
        self.path = Path(path)
        self.reason = reason
        message = f"{self.action}: {self.path}"
        if reason is not None:
            message = f"{message} ({reason})"
        super().__init__(message)


class DecodeFailure(_PathError):
    """Volume file could not be parsed."""

    action = "Could not decode volume"


class DirectoryListingFailure(_PathError):
    """Input directory could not be listed."""

    action = "Could not list directory"


class DirectoryCreationFailure(_PathError):
    """Output directory could not be created."""

    action = "Could not create directory"


class PathEncodingFailure(_PathError):
    """Path is not representable on this filesystem."""

    action = "Path cannot be encoded for the filesystem"

    def __init__(self, path: str | Path, reason: object = None):
        # repr keeps undecodable surrogates printable
        super().__init__(path, reason)
        self.args = (f"{self.action}: {str(self.path)!r}",)


class EncodeFailure(_PathError):
    """Raster could not be written."""

    action = "Could not write image"


class CollaboratorFailure(_PathError):
    """Any other error raised by an external library."""

    action = "External library failed"


class RasterRangeError(Nifti2PngError):
    """Raster values left [0, 1] before quantization.

    Indicates an upstream rescaling bug rather than bad user input.
    """


class MultipleVolumeFailures(Nifti2PngError):
    """Several volumes failed during a concurrent conversion.

    Attributes:
        errors: Every error raised, in submission order.
    """

    def __init__(self, errors: list[Exception]):
        self.errors = list(errors)
        lines = "\n".join(f"  - {e}" for e in self.errors)
        super().__init__(f"{len(self.errors)} volumes failed:\n{lines}")
