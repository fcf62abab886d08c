"""Unit tests for volume containers and slice extraction."""

import numpy as np
import pytest

from nifti2png.dimensions import VolumeDimensions
from nifti2png.raster import rasterize
from nifti2png.volume import (
    RescaledVolume,
    SliceCoordinate,
    Volume,
    extract_slice,
    iter_slice_coordinates,
)


def make_volume(data: np.ndarray, filename: str = "test.nii") -> Volume:
    return Volume(
        filename=filename,
        dims=VolumeDimensions.from_shape(data.shape, filename),
        data=data,
    )


class TestVolumeRescaled:
    """Tests for Volume.rescaled()."""

    def test_returns_rescaled_volume_with_same_dims(self):
        volume = make_volume(np.arange(12, dtype=np.float32).reshape(2, 2, 3))

        rescaled = volume.rescaled()

        assert isinstance(rescaled, RescaledVolume)
        assert rescaled.dims == volume.dims
        assert rescaled.filename == volume.filename
        assert rescaled.data.min() == 0.0
        assert rescaled.data.max() == 1.0
        assert rescaled.window == (0.0, 11.0)

    def test_source_volume_is_unchanged(self):
        data = np.arange(8, dtype=np.float64).reshape(2, 2, 2)
        volume = make_volume(data)

        volume.rescaled((0, 4))

        np.testing.assert_array_equal(volume.data, np.arange(8).reshape(2, 2, 2))

    def test_explicit_window_is_recorded(self):
        volume = make_volume(np.zeros((2, 2, 2)))

        assert volume.rescaled((10, 20)).window == (10.0, 20.0)


class TestExtractSlice:
    """Tests for extract_slice function."""

    def test_extract_slice_returns_correct_slice(self):
        """Should return the correct 2D plane from a 3D volume."""
        data = np.zeros((10, 10, 5), dtype=np.float32)
        data[:, :, 2] = 42.0

        result = extract_slice(make_volume(data), 2)

        assert result.shape == (10, 10)
        assert np.all(result == 42.0)

    def test_slices_are_disjoint(self):
        """Each depth of a 4x4x2x1 volume should give its own 4x4 plane."""
        data = np.arange(32, dtype=np.float64).reshape(4, 4, 2, 1)
        volume = make_volume(data)

        first = extract_slice(volume, 0)
        second = extract_slice(volume, 1)

        assert first.shape == (4, 4)
        assert second.shape == (4, 4)
        assert set(first.ravel()).isdisjoint(second.ravel())
        np.testing.assert_array_equal(first, data[:, :, 0, 0])
        np.testing.assert_array_equal(second, data[:, :, 1, 0])

    def test_depth_out_of_bounds_raises(self):
        volume = make_volume(np.zeros((4, 4, 2, 1)))

        with pytest.raises(IndexError, match="z=2"):
            extract_slice(volume, 2)

    def test_negative_depth_raises_instead_of_wrapping(self):
        volume = make_volume(np.zeros((4, 4, 2)))

        with pytest.raises(IndexError):
            extract_slice(volume, -1)

    def test_series_addresses_time_axis(self):
        data = np.zeros((3, 3, 2, 4))
        data[:, :, 1, 3] = 7.0
        volume = make_volume(data)

        assert np.all(extract_slice(volume, 1, 3) == 7.0)
        assert np.all(extract_slice(volume, 1, 2) == 0.0)

    def test_frame_out_of_bounds_raises(self):
        volume = make_volume(np.zeros((3, 3, 2, 4)))

        with pytest.raises(IndexError, match="t=4"):
            extract_slice(volume, 0, 4)

    def test_frame_ignored_for_single_frame_volume(self):
        """3D volumes have one frame; t is not used for addressing."""
        data = np.random.rand(3, 3, 2)

        result = extract_slice(make_volume(data), 1, t=0)

        np.testing.assert_array_equal(result, data[:, :, 1])

    def test_nonzero_frame_on_three_axis_volume_raises(self):
        volume = make_volume(np.zeros((3, 3, 2)))

        with pytest.raises(IndexError, match="t=1"):
            extract_slice(volume, 0, 1)

    def test_preserves_dtype(self):
        volume = make_volume(np.ones((5, 5, 3), dtype=np.float64))

        assert extract_slice(volume, 1).dtype == np.float64


class TestIterSliceCoordinates:
    """Tests for iter_slice_coordinates function."""

    def test_frames_outer_depth_inner(self):
        dims = VolumeDimensions.from_shape((2, 2, 3, 2))

        coords = list(iter_slice_coordinates(dims))

        assert coords == [
            SliceCoordinate(z=0, t=0),
            SliceCoordinate(z=1, t=0),
            SliceCoordinate(z=2, t=0),
            SliceCoordinate(z=0, t=1),
            SliceCoordinate(z=1, t=1),
            SliceCoordinate(z=2, t=1),
        ]

    def test_three_axis_volume_has_single_frame(self):
        dims = VolumeDimensions.from_shape((2, 2, 4))

        coords = list(iter_slice_coordinates(dims))

        assert len(coords) == 4
        assert {c.t for c in coords} == {0}


class TestSliceAsRawRgba:
    """Tests for RescaledVolume.slice_as_raw_rgba method."""

    def test_returns_oriented_rgba_buffer(self):
        data = np.random.rand(5, 3, 2, 2)
        volume = make_volume(data).rescaled()

        raster = volume.slice_as_raw_rgba(1, 1)

        assert raster.dtype == np.uint8
        assert raster.shape == (3, 5, 4)
        assert np.all(raster[..., 3] == 255)

    def test_matches_rasterized_plane(self):
        volume = make_volume(np.random.rand(4, 6, 3)).rescaled()

        raster = volume.slice_as_raw_rgba(2)

        expected = np.asarray(rasterize(extract_slice(volume, 2), alpha=True))
        np.testing.assert_array_equal(raster, expected)

    def test_out_of_range_index_raises(self):
        volume = make_volume(np.zeros((4, 4, 2, 3))).rescaled()

        with pytest.raises(IndexError):
            volume.slice_as_raw_rgba(0, 3)
        with pytest.raises(IndexError):
            volume.slice_as_raw_rgba(2, 0)
