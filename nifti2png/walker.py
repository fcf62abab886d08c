"""Directory-level conversion of NIfTI volumes into PNG slice sequences.

This module walks an input directory, decodes and rescales each volume
and writes one raster per slice into that volume's output directory.
Volumes are processed one at a time by default; ``convert`` can also
spread volumes over a thread pool, since they share no state.
"""

from __future__ import annotations

import logging
import os
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator

from nifti2png.errors import DirectoryListingFailure, MultipleVolumeFailures
from nifti2png.formats import NiftiDecoder, PngEncoder, RasterEncoder, VolumeDecoder
from nifti2png.normalize import Window
from nifti2png.paths import DEFAULT_OUTPUT_STUB, OutputTarget
from nifti2png.raster import rasterize
from nifti2png.volume import RescaledVolume, extract_slice, iter_slice_coordinates

logger = logging.getLogger(__name__)

# Called once per volume with (filename, number of slices written)
ProgressCallback = Callable[[str, int], None]


@dataclass
class ConversionSummary:
    """Outcome of a directory conversion.

    Attributes:
        volumes: Number of volumes converted.
        written: Paths of every raster written, in write order.
    """

    volumes: int = 0
    written: list[Path] = field(default_factory=list)

    @property
    def slices(self) -> int:
        return len(self.written)


def list_volume_files(input_dir: str | Path) -> list[str]:
    """List the entries of ``input_dir`` in directory-listing order.

    Raises:
        DirectoryListingFailure: If the directory cannot be listed.
    """
    try:
        return os.listdir(input_dir)
    except OSError as e:
        raise DirectoryListingFailure(input_dir, e) from e


def walk(
    input_dir: str | Path,
    output_stub: str | Path = DEFAULT_OUTPUT_STUB,
    window: Window | None = None,
    decoder: VolumeDecoder | None = None,
) -> Iterator[tuple[OutputTarget, RescaledVolume]]:
    """Lazily yield ``(target, rescaled_volume)`` for each file in ``input_dir``.

    The directory is listed when iteration starts; each file is decoded
    and rescaled only when the consumer asks for it. Any error aborts
    the walk.

    Args:
        input_dir: Directory containing volume files.
        output_stub: Base directory for per-volume output directories.
        window: Optional (min, max) intensity window. None rescales each
            volume over its own min/max.
        decoder: Volume decoder, NiftiDecoder by default.

    Yields:
        Tuples of (OutputTarget, RescaledVolume).

    Raises:
        DirectoryListingFailure: If ``input_dir`` cannot be listed.
        DecodeFailure: If a file is not a readable volume.
        UnsupportedDimensionality: If a volume is not 3D or 4D.
    """
    decoder = decoder or NiftiDecoder()
    input_dir = Path(input_dir)

    for filename in list_volume_files(input_dir):
        target = OutputTarget.for_volume(output_stub, filename)
        volume = decoder(input_dir / filename)
        logger.info(f"{filename}: matrix size {volume.dims}")
        yield target, volume.rescaled(window)


def write_volume_slices(
    target: OutputTarget,
    volume: RescaledVolume,
    encoder: RasterEncoder | None = None,
    alpha: bool = False,
) -> list[Path]:
    """Rasterize and write every slice of one volume.

    Frames are iterated in the outer loop and depth in the inner loop.
    The output directory is created before the first write.

    Args:
        target: Output directory of the volume.
        volume: Rescaled volume to slice.
        encoder: Raster encoder, PngEncoder by default.
        alpha: Write RGBA rasters instead of RGB.

    Returns:
        Paths written, in write order.
    """
    encoder = encoder or PngEncoder()
    dims = volume.dims
    written = []
    current_frame = None

    for coord in iter_slice_coordinates(dims):
        if coord.t != current_frame:
            current_frame = coord.t
            logger.info(f"Volume {coord.t} -> {target.directory}")

        plane = extract_slice(volume, coord.z, coord.t)
        image = rasterize(plane, alpha=alpha)

        target.ensure_exists()
        path = target.slice_path(
            coord.z,
            t=coord.t if dims.is_series else None,
            suffix=encoder.suffix,
        )
        encoder(path, image)
        logger.debug(f"Wrote {path}")
        written.append(path)

    return written


def _convert_one(
    target: OutputTarget,
    volume: RescaledVolume,
    encoder: RasterEncoder,
    alpha: bool,
    on_volume: ProgressCallback | None,
) -> list[Path]:
    written = write_volume_slices(target, volume, encoder=encoder, alpha=alpha)
    if on_volume is not None:
        on_volume(volume.filename, len(written))
    return written


def convert(
    input_dir: str | Path,
    output_stub: str | Path = DEFAULT_OUTPUT_STUB,
    window: Window | None = None,
    decoder: VolumeDecoder | None = None,
    encoder: RasterEncoder | None = None,
    alpha: bool = False,
    workers: int = 1,
    on_volume: ProgressCallback | None = None,
) -> ConversionSummary:
    """Convert every volume in ``input_dir`` into PNG slices.

    Args:
        input_dir: Directory containing NIfTI volumes.
        output_stub: Base output directory, "slice" by default.
        window: Optional (min, max) intensity window applied to all volumes.
        decoder: Volume decoder, NiftiDecoder by default.
        encoder: Raster encoder, PngEncoder by default.
        alpha: Write RGBA rasters instead of RGB.
        workers: Number of volumes converted concurrently.
        on_volume: Called after each volume with (filename, slices written).

    Returns:
        ConversionSummary of the run.

    Raises:
        Nifti2PngError: The first error when converting sequentially. With
            ``workers > 1`` every failure is collected; a single one is
            re-raised as is and several as MultipleVolumeFailures.
    """
    encoder = encoder or PngEncoder()
    summary = ConversionSummary()
    volumes = walk(input_dir, output_stub, window=window, decoder=decoder)

    if workers <= 1:
        for target, volume in volumes:
            summary.written.extend(_convert_one(target, volume, encoder, alpha, on_volume))
            summary.volumes += 1
    else:
        _convert_concurrently(volumes, summary, encoder, alpha, workers, on_volume)

    logger.info(f"Done: {summary.slices} slices from {summary.volumes} volumes")
    return summary


def _convert_concurrently(
    volumes: Iterator[tuple[OutputTarget, RescaledVolume]],
    summary: ConversionSummary,
    encoder: RasterEncoder,
    alpha: bool,
    workers: int,
    on_volume: ProgressCallback | None,
) -> None:
    errors: list[Exception] = []
    in_flight: deque[Future] = deque()

    def collect(future: Future) -> None:
        try:
            written = future.result()
        except Exception as e:
            errors.append(e)
            return
        summary.written.extend(written)
        summary.volumes += 1

    with ThreadPoolExecutor(max_workers=workers) as pool:
        # Decoding stays on this thread and waits for a free worker first,
        # so at most ``workers`` rescaled volumes are held at once
        while True:
            if len(in_flight) >= workers:
                collect(in_flight.popleft())
            try:
                target, volume = next(volumes)
            except StopIteration:
                break
            except Exception as e:
                errors.append(e)
                break
            in_flight.append(
                pool.submit(_convert_one, target, volume, encoder, alpha, on_volume)
            )

        while in_flight:
            collect(in_flight.popleft())

    if len(errors) == 1:
        raise errors[0]
    if errors:
        raise MultipleVolumeFailures(errors)
