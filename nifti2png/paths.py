"""Output path planning.

Output layout::

    <output_stub>/<input_file_name>/<zzzz>.png          (single-frame volumes)
    <output_stub>/<input_file_name>/<tttt>_<zzzz>.png   (multi-frame series)

Indices are zero padded to 4 digits and widen, never truncate, past 9999.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from nifti2png.errors import DirectoryCreationFailure, PathEncodingFailure

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_STUB = "slice"
PNG_SUFFIX = ".png"
INDEX_WIDTH = 4


def _check_encodable(path: Path) -> Path:
    try:
        os.fsencode(path)
    except UnicodeError as e:
        raise PathEncodingFailure(path, e) from e
    return path


def plan_directory(base_stub: str | Path, volume_filename: str) -> Path:
    """Return the output directory for one input volume.

    Two inputs with the same file name map to the same directory; this is
    accepted and not guarded against.

    Example:
        >>> plan_directory("out", "brain.nii.gz")
        PosixPath('out/brain.nii.gz')
    """
    return _check_encodable(Path(base_stub) / volume_filename)


def plan_slice_file(
    directory: str | Path,
    z: int,
    t: int | None = None,
    suffix: str = PNG_SUFFIX,
) -> Path:
    """Return the file path of one slice inside ``directory``.

    Args:
        directory: Output directory of the volume.
        z: Depth index of the slice.
        t: Frame index, only given for multi-frame series.
        suffix: File suffix of the raster format.

    Example:
        >>> plan_slice_file("out/a.nii", 7).name
        '0007.png'
        >>> plan_slice_file("out/a.nii", 12345).name
        '12345.png'
        >>> plan_slice_file("out/a.nii", 3, t=1).name
        '0001_0003.png'
    """
    name = f"{z:0{INDEX_WIDTH}d}"
    if t is not None:
        name = f"{t:0{INDEX_WIDTH}d}_{name}"
    return _check_encodable(Path(directory) / f"{name}{suffix}")


def ensure_directory(directory: str | Path) -> Path:
    """Create ``directory`` and any missing parents if it does not exist.

    Safe to call on an existing directory.

    Raises:
        DirectoryCreationFailure: If the directory cannot be created, e.g.
            because a file already occupies the path.
    """
    directory = _check_encodable(Path(directory))
    if directory.is_dir():
        return directory

    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryCreationFailure(directory, e) from e
    logger.debug(f"Created output directory {directory}")
    return directory


@dataclass
class OutputTarget:
    """Output directory of a single input volume.

    The directory is created lazily, once, by ``ensure_exists``.

    Attributes:
        directory: Directory all slices of the volume are written to.
        created: Whether the directory has been ensured already.
    """

    directory: Path
    created: bool = False

    @classmethod
    def for_volume(cls, base_stub: str | Path, volume_filename: str) -> "OutputTarget":
        return cls(directory=plan_directory(base_stub, volume_filename))

    def ensure_exists(self) -> Path:
        if not self.created:
            ensure_directory(self.directory)
            self.created = True
        return self.directory

    def slice_path(
        self, z: int, t: int | None = None, suffix: str = PNG_SUFFIX
    ) -> Path:
        return plan_slice_file(self.directory, z, t=t, suffix=suffix)
