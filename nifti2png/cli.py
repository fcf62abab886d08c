"""Command-line entry point for nifti2png.

Usage:
    nifti2png INPUT_DIR [-o STUB] [--window MIN MAX] [--workers N]
    nifti2png                      # prompts for the input interactively
    nifti-slice [FILE] [--window MIN MAX]   # inspect single slices of one volume

Writes ``<STUB>/<volume file name>/<zzzz>.png`` for every slice of every
volume in INPUT_DIR and exits non-zero on the first error.
``nifti-slice`` loads one volume and returns the slices asked for on the
terminal as raw RGBA buffers.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Iterator, Sequence

import numpy as np
from tqdm import tqdm

from nifti2png.errors import Nifti2PngError
from nifti2png.formats import NiftiDecoder, load_nifti
from nifti2png.normalize import Window
from nifti2png.paths import DEFAULT_OUTPUT_STUB
from nifti2png.volume import RescaledVolume, SliceCoordinate
from nifti2png.walker import convert

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def parse_window(text: str) -> Window | None:
    """Parse an intensity window written as ``"min max"``.

    Blank input means no window (auto-range per volume).

    Raises:
        ValueError: If the text is not exactly two numbers.

    Example:
        >>> parse_window("0 255")
        (0.0, 255.0)
        >>> parse_window("") is None
        True
    """
    parts = text.split()
    if not parts:
        return None
    if len(parts) != 2:
        raise ValueError(f"Expected two numbers `min max`, got {text!r}")
    lo, hi = (float(p) for p in parts)
    if lo > hi:
        raise ValueError(f"Window min {lo} is greater than max {hi}")
    return lo, hi


def prompt_arguments(
    args: argparse.Namespace,
    read: Callable[[str], str] = input,
) -> argparse.Namespace:
    """Fill in missing arguments by prompting on the terminal."""
    example = Path.cwd() / "assets"
    args.input_dir = read(
        f"Enter a path to a directory with NIFTI files, e.g. {example}\n"
    ).strip()

    if args.output_stub is None:
        stub = read(f"Enter the output stub (default: {DEFAULT_OUTPUT_STUB}):\n").strip()
        args.output_stub = stub or DEFAULT_OUTPUT_STUB

    if args.window is None:
        args.window = parse_window(
            read("Enter the intensity window as `min max` (blank for auto):\n")
        )
    return args


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nifti2png",
        description="Convert a directory of NIfTI volumes into PNG slice images",
    )
    parser.add_argument(
        "input_dir",
        nargs="?",
        default=None,
        help="Directory containing NIfTI volumes (prompted for when omitted)",
    )
    parser.add_argument(
        "-o",
        "--output-stub",
        default=None,
        help=f"Base output directory (default: {DEFAULT_OUTPUT_STUB})",
    )
    parser.add_argument(
        "--window",
        nargs=2,
        type=float,
        metavar=("MIN", "MAX"),
        default=None,
        help="Intensity window clamped to [0, 1] (default: per-volume min/max)",
    )
    parser.add_argument(
        "--alpha",
        action="store_true",
        help="Write RGBA images instead of RGB",
    )
    parser.add_argument(
        "--canonical",
        action="store_true",
        help="Reorient volumes to the closest canonical (RAS+) orientation",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of volumes converted concurrently (default: 1)",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable the progress bar",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every written slice",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT,
    )
    # Pillow logs every PNG chunk at DEBUG
    logging.getLogger("PIL").setLevel(logging.INFO)

    if args.window is not None:
        lo, hi = args.window
        if lo > hi:
            parser.error(f"--window MIN {lo} is greater than MAX {hi}")
        args.window = (lo, hi)

    if args.input_dir is None:
        try:
            prompt_arguments(args)
        except ValueError as e:
            parser.error(str(e))
    output_stub = args.output_stub or DEFAULT_OUTPUT_STUB

    progress = tqdm(desc="Converting volumes", unit="volume", disable=args.no_progress)

    def on_volume(filename: str, slices: int) -> None:
        progress.update(1)
        progress.set_postfix_str(f"{filename} ({slices} slices)")

    try:
        summary = convert(
            args.input_dir,
            output_stub,
            window=args.window,
            decoder=NiftiDecoder(canonical=args.canonical),
            alpha=args.alpha,
            workers=args.workers,
            on_volume=on_volume,
        )
    except Nifti2PngError as e:
        logger.error(str(e))
        return 1
    finally:
        progress.close()

    logger.info(f"Output written to {Path(output_stub).resolve()} ({summary.slices} files)")
    return 0


def parse_slice_index(text: str) -> SliceCoordinate:
    """Parse a slice coordinate written as ``"z t"``.

    Raises:
        ValueError: If the text is not exactly two integers.
    """
    parts = text.split()
    if len(parts) != 2:
        raise ValueError(f"Expected two integers `z t`, got {text!r}")
    z, t = (int(p) for p in parts)
    return SliceCoordinate(z=z, t=t)


def inspect_slices(
    volume: RescaledVolume,
    read: Callable[[str], str] = input,
) -> Iterator[tuple[SliceCoordinate, np.ndarray]]:
    """Prompt for slice coordinates and yield each slice as raw RGBA.

    Stops on ``exit`` or end of input. Malformed or out-of-range
    coordinates are reported and prompted for again.

    Yields:
        Tuples of (SliceCoordinate, uint8 array of shape (ny, nx, 4)).
    """
    nz, nt = volume.dims.secondary_dims
    prompt = f"Enter the 2D index for [0..{nz}, 0..{nt}] secondary dimension or `exit`\n"

    while True:
        try:
            text = read(prompt).strip()
        except EOFError:
            return
        if text.startswith("exit"):
            return

        try:
            coord = parse_slice_index(text)
            raster = volume.slice_as_raw_rgba(coord.z, coord.t)
        except (ValueError, IndexError) as e:
            logger.warning(f"Invalid slice index: {e}")
            continue
        yield coord, raster


def build_slice_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nifti-slice",
        description="Inspect single slices of one NIfTI volume as raw RGBA buffers",
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=None,
        help="NIfTI file to inspect (prompted for when omitted)",
    )
    parser.add_argument(
        "--window",
        nargs=2,
        type=float,
        metavar=("MIN", "MAX"),
        default=None,
        help="Intensity window clamped to [0, 1] (default: volume min/max)",
    )
    parser.add_argument(
        "--canonical",
        action="store_true",
        help="Reorient the volume to the closest canonical (RAS+) orientation",
    )
    return parser


def slice_main(
    argv: Sequence[str] | None = None,
    read: Callable[[str], str] = input,
) -> int:
    parser = build_slice_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

    window = tuple(args.window) if args.window is not None else None
    if window is not None and window[0] > window[1]:
        parser.error(f"--window MIN {window[0]} is greater than MAX {window[1]}")

    if args.path is None:
        example = Path.cwd() / "assets" / "avg152T1_LR_nifti.nii.gz"
        args.path = read(f"Enter a path to a NIFTI file, e.g. {example}\n").strip()
        if window is None:
            try:
                window = parse_window(
                    read("Enter the intensity window as `min max` (blank for auto):\n")
                )
            except ValueError as e:
                parser.error(str(e))

    try:
        volume = load_nifti(args.path, canonical=args.canonical).rescaled(window)
    except Nifti2PngError as e:
        logger.error(str(e))
        return 1

    logger.info(f"{volume.filename}: matrix size {volume.dims}")
    for coord, raster in inspect_slices(volume, read=read):
        height, width, _ = raster.shape
        logger.info(
            f"Slice z={coord.z}, t={coord.t}: {width}x{height} RGBA, "
            f"{raster.nbytes} bytes, values {raster[..., 0].min()}..{raster[..., 0].max()}"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
