"""
Unit tests for gradient operators and simplified Canny
"""

import logging

import numpy as np
import pytest

from pixelkit.core.edge_detection import (
    sobel,
    prewitt,
    laplacian,
    canny,
    compute_gradient,
    classify_edges,
    render_edges,
    EdgeClass,
    EDGE_PALETTE,
    SOBEL_X,
    PREWITT_X,
)
from pixelkit.utils.buffer_utils import InvalidInputError

NONE_PIXEL = (0, 0, 0, 0)
WEAK_PIXEL = (128, 128, 128, 255)
STRONG_PIXEL = (255, 255, 255, 255)


def as_image(buffer, width, height):
    return buffer.reshape(height, width, 4)


class TestGradientOperators:
    """Sobel, Prewitt and Laplacian magnitude images"""

    @pytest.mark.parametrize("operator", [sobel, prewitt, laplacian])
    def test_vertical_edge(self, half_black_white, operator):
        pixels, width, height = half_black_white
        image = as_image(operator(pixels, width, height), width, height)

        for row in (1, 2, 3):
            np.testing.assert_array_equal(image[row, :, 0], [0, 255, 255, 0, 0])
        # grayscale output
        np.testing.assert_array_equal(image[..., 0], image[..., 1])
        np.testing.assert_array_equal(image[..., 0], image[..., 2])

    @pytest.mark.parametrize("operator", [sobel, prewitt, laplacian])
    def test_border_is_zero_and_alpha_kept(self, random_buffer, operator):
        pixels, width, height = random_buffer
        image = as_image(operator(pixels, width, height), width, height)
        source = as_image(pixels, width, height)

        assert not image[0, :, :3].any()
        assert not image[-1, :, :3].any()
        assert not image[:, 0, :3].any()
        assert not image[:, -1, :3].any()
        np.testing.assert_array_equal(image[..., 3], source[..., 3])

    @pytest.mark.parametrize("operator", [sobel, prewitt, laplacian])
    def test_uniform_has_no_edges(self, uniform_gray, operator):
        pixels, width, height = uniform_gray
        image = as_image(operator(pixels, width, height), width, height)
        assert not image[..., :3].any()

    def test_tiny_buffer(self, buffer_factory):
        pixels = buffer_factory(2, 2, (255, 255, 255))
        image = as_image(sobel(pixels, 2, 2), 2, 2)
        assert not image[..., :3].any()

    def test_sobel_weak_edge_not_clamped_to_zero(self, buffer_factory):
        # left column 0, rest 10: gradient 40 at column 1
        pixels = buffer_factory(4, 3, (10, 10, 10))
        image = as_image(pixels.copy(), 4, 3)
        image[:, 0, :3] = 0
        result = as_image(sobel(image.reshape(-1), 4, 3), 4, 3)
        assert result[1, 1, 0] == 40

    def test_invalid_input(self):
        with pytest.raises(InvalidInputError):
            sobel(np.zeros(12, dtype=np.uint8), 2, 2)


class TestComputeGradient:

    def test_magnitude_and_direction(self, half_black_white):
        pixels, width, height = half_black_white
        field = compute_gradient(pixels, width, height)

        assert field.magnitude.shape == (5, 5)
        assert field.magnitude[2, 1] == pytest.approx(1020.0)
        assert field.direction[2, 1] == pytest.approx(0.0)
        assert field.magnitude[0, 2] == 0.0

    def test_mismatched_kernels(self, half_black_white):
        pixels, width, height = half_black_white
        with pytest.raises(InvalidInputError):
            compute_gradient(pixels, width, height, SOBEL_X, np.ones((5, 5)))

    def test_prewitt_kernels(self, half_black_white):
        pixels, width, height = half_black_white
        field = compute_gradient(pixels, width, height, PREWITT_X, PREWITT_X.T)
        assert field.magnitude[2, 2] == pytest.approx(765.0)


class TestClassification:

    def test_thresholds_are_strict(self):
        magnitude = np.array([0.0, 50.0, 51.0, 150.0, 151.0])
        classes = classify_edges(magnitude, 50, 150)
        np.testing.assert_array_equal(classes, [0, 0, 1, 1, 2])

    def test_render_palette(self):
        classes = np.array([[EdgeClass.NONE, EdgeClass.WEAK, EdgeClass.STRONG]], dtype=np.uint8)
        rendered = render_edges(classes)

        assert rendered.dtype == np.uint8
        np.testing.assert_array_equal(rendered.reshape(-1, 4), EDGE_PALETTE)


class TestCanny:
    """Blur, Sobel and double threshold"""

    def test_split_buffer_strong_edges(self, half_black_white):
        pixels, width, height = half_black_white
        image = as_image(canny(pixels, width, height), width, height)

        for row in (1, 2, 3):
            assert tuple(image[row, 0]) == NONE_PIXEL
            for col in (1, 2, 3):
                assert tuple(image[row, col]) == STRONG_PIXEL
            assert tuple(image[row, 4]) == NONE_PIXEL
        assert not image[0].any()
        assert not image[4].any()

    def test_weak_edges(self, half_black_white):
        pixels, width, height = half_black_white
        # blurred columns are 0, 85, 170, 255, 255 so column 3 responds with 340
        image = as_image(canny(pixels, width, height, 300, 500), width, height)

        assert tuple(image[2, 1]) == STRONG_PIXEL
        assert tuple(image[2, 2]) == STRONG_PIXEL
        assert tuple(image[2, 3]) == WEAK_PIXEL

    def test_uniform_is_transparent(self, uniform_gray):
        pixels, width, height = uniform_gray
        assert not canny(pixels, width, height).any()

    def test_only_palette_colors(self, random_buffer):
        pixels, width, height = random_buffer
        result = canny(pixels, width, height).reshape(-1, 4)
        allowed = {NONE_PIXEL, WEAK_PIXEL, STRONG_PIXEL}
        assert {tuple(p) for p in result} <= allowed

    def test_inverted_thresholds_warn(self, half_black_white, caplog):
        pixels, width, height = half_black_white

        with caplog.at_level(logging.WARNING):
            result = canny(pixels, width, height, 200, 100)

        assert "above high_threshold" in caplog.text
        assert WEAK_PIXEL not in {tuple(p) for p in result.reshape(-1, 4)}

    @pytest.mark.parametrize("low,high", [
        ("50", 150), (50, None), (True, 150),
        (float("inf"), 150), (50, float("inf")), (float("-inf"), 150), (50, float("-inf")),
    ])
    def test_invalid_thresholds(self, half_black_white, low, high):
        pixels, width, height = half_black_white
        with pytest.raises(InvalidInputError):
            canny(pixels, width, height, low, high)

    def test_input_not_modified(self, random_buffer):
        pixels, width, height = random_buffer
        before = pixels.copy()
        canny(pixels, width, height)
        np.testing.assert_array_equal(pixels, before)
