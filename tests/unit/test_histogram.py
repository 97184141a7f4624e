"""
Unit tests for luma histograms, LUT construction and global equalization
"""

import numpy as np
import pytest

from pixelkit.core.histogram import (
    get_histogram,
    compute_cdf,
    build_lut,
    apply_lut,
    validate_lut,
    equalize,
    IDENTITY_LUT,
    NUM_BINS,
)
from pixelkit.utils.buffer_utils import InvalidInputError


def as_image(buffer, width, height):
    return buffer.reshape(height, width, 4)


class TestGetHistogram:

    def test_uniform_gray(self, uniform_gray):
        pixels, width, height = uniform_gray
        histogram = get_histogram(pixels, width, height)

        assert histogram.shape == (NUM_BINS,)
        assert histogram[128] == 64
        assert histogram.sum() == 64

    def test_counts_sum_to_pixels(self, random_buffer):
        pixels, width, height = random_buffer
        assert get_histogram(pixels, width, height).sum() == width * height

    def test_luma_bins(self, low_contrast):
        pixels, width, height = low_contrast
        histogram = get_histogram(pixels, width, height)

        # (100, 120, 110) -> 112.88, (150, 140, 130) -> 141.85
        assert histogram[113] == 32
        assert histogram[142] == 32

    def test_alpha_ignored(self, buffer_factory):
        histogram = get_histogram(buffer_factory(2, 2, (0, 0, 0), alpha=0), 2, 2)
        assert histogram[0] == 4

    def test_invalid_buffer(self):
        with pytest.raises(InvalidInputError):
            get_histogram(b"\x00" * 8, 2, 2)


class TestLut:

    def test_cdf(self):
        histogram = np.zeros(NUM_BINS, dtype=np.int64)
        histogram[[3, 7]] = [2, 5]
        cdf = compute_cdf(histogram)

        assert cdf[2] == 0
        assert cdf[3] == 2
        assert cdf[-1] == 7

    def test_cdf_rejects_bad_histogram(self):
        with pytest.raises(InvalidInputError):
            compute_cdf(np.zeros(10))
        with pytest.raises(InvalidInputError):
            compute_cdf(np.full(NUM_BINS, -1))

    def test_build_lut_is_monotonic(self, random_buffer):
        pixels, width, height = random_buffer
        lut = build_lut(get_histogram(pixels, width, height))

        assert lut.dtype == np.uint8
        assert (np.diff(lut.astype(int)) >= 0).all()
        assert lut[-1] == 255

    def test_single_bin_at_zero_is_identity(self):
        histogram = np.zeros(NUM_BINS, dtype=np.int64)
        histogram[0] = 10
        np.testing.assert_array_equal(build_lut(histogram), IDENTITY_LUT)

    def test_empty_histogram_is_identity(self):
        np.testing.assert_array_equal(build_lut(np.zeros(NUM_BINS)), IDENTITY_LUT)

    def test_apply_lut_inverts(self, random_buffer):
        pixels, width, height = random_buffer
        inverted = as_image(apply_lut(pixels, width, height, 255 - IDENTITY_LUT), width, height)
        source = as_image(pixels, width, height)

        np.testing.assert_array_equal(inverted[..., :3], 255 - source[..., :3])
        np.testing.assert_array_equal(inverted[..., 3], source[..., 3])

    def test_validate_lut(self):
        with pytest.raises(InvalidInputError):
            validate_lut(np.arange(10))
        with pytest.raises(InvalidInputError):
            validate_lut(np.arange(NUM_BINS) + 1)


class TestEqualize:
    """Global histogram equalization"""

    def test_uniform_gray_goes_white(self, uniform_gray):
        pixels, width, height = uniform_gray
        image = as_image(equalize(pixels, width, height), width, height)

        assert (image[..., :3] == 255).all()
        assert (image[..., 3] == 255).all()

    def test_low_contrast_is_stretched(self, low_contrast):
        pixels, width, height = low_contrast
        result = equalize(pixels, width, height).reshape(-1, 4)

        # LUT: < 113 -> 0, 113..141 -> 128, >= 142 -> 255, applied per channel
        assert tuple(result[0]) == (255, 128, 128, 255)
        assert tuple(result[1]) == (0, 128, 0, 255)

    def test_black_buffer_unchanged(self, buffer_factory):
        pixels = buffer_factory(4, 4, (0, 0, 0), alpha=90)
        np.testing.assert_array_equal(equalize(pixels, 4, 4), pixels)

    def test_alpha_preserved(self, random_buffer):
        pixels, width, height = random_buffer
        result = as_image(equalize(pixels, width, height), width, height)
        np.testing.assert_array_equal(result[..., 3], as_image(pixels, width, height)[..., 3])

    def test_returns_new_buffer(self, uniform_gray):
        pixels, width, height = uniform_gray
        before = pixels.copy()
        result = equalize(pixels, width, height)

        assert result.shape == pixels.shape
        np.testing.assert_array_equal(pixels, before)

    def test_accepts_bytes(self, uniform_gray):
        pixels, width, height = uniform_gray
        np.testing.assert_array_equal(
            equalize(pixels.tobytes(), width, height),
            equalize(pixels, width, height)
        )
