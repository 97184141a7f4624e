import numpy as np
from scipy import ndimage
from dataclasses import dataclass
from enum import IntEnum

from .convolution import box_blur, validate_kernel, KernelLike
from ..utils.buffer_utils import (
    timing_decorator, as_rgba, require_number, luma, channel_mean, to_uint8,
    InvalidInputError, BufferLike
)
from ..utils.logging_config import get_logger

logger = get_logger(__name__)

SOBEL_X = np.array([[-1, 0, 1],
                    [-2, 0, 2],
                    [-1, 0, 1]], dtype=np.float64)

SOBEL_Y = np.array([[-1, -2, -1],
                    [0, 0, 0],
                    [1, 2, 1]], dtype=np.float64)

PREWITT_X = np.array([[-1, 0, 1],
                      [-1, 0, 1],
                      [-1, 0, 1]], dtype=np.float64)

PREWITT_Y = np.array([[-1, -1, -1],
                      [0, 0, 0],
                      [1, 1, 1]], dtype=np.float64)

LAPLACIAN_KERNEL = np.array([[0, -1, 0],
                             [-1, 4, -1],
                             [0, -1, 0]], dtype=np.float64)

DEFAULT_LOW_THRESHOLD = 50
DEFAULT_HIGH_THRESHOLD = 150


class EdgeClass(IntEnum):
    """Per-pixel Canny classification"""
    NONE = 0
    WEAK = 1
    STRONG = 2

# RGBA written for each EdgeClass, indexed by class value
EDGE_PALETTE = np.array([
    [0, 0, 0, 0],          # NONE: transparent black
    [128, 128, 128, 255],  # WEAK
    [255, 255, 255, 255],  # STRONG
], dtype=np.uint8)


@dataclass
class GradientField:
    """Gradient magnitude and direction planes, shape (height, width)"""
    magnitude: np.ndarray
    direction: np.ndarray


def _interior_response(plane: np.ndarray, kernel: np.ndarray) -> np.ndarray:
    """Kernel response on interior pixels, zero within one radius of the edge"""
    h, w = plane.shape
    radius = kernel.shape[0] // 2
    response = np.zeros((h, w), dtype=np.float64)

    if h > 2 * radius and w > 2 * radius:
        full = ndimage.correlate(plane, kernel, mode='nearest')
        response[radius:h - radius, radius:w - radius] = full[radius:h - radius, radius:w - radius]

    return response


def _gray_output(rgba: np.ndarray, values: np.ndarray) -> np.ndarray:
    """Replicate an intensity plane into RGB and keep the input alpha"""
    result = np.empty_like(rgba)
    result[..., :3] = to_uint8(values)[..., np.newaxis]
    result[..., 3] = rgba[..., 3]
    return result.reshape(-1)


def compute_gradient(pixels: BufferLike, width: int, height: int,
                     gx: KernelLike = SOBEL_X, gy: KernelLike = SOBEL_Y) -> GradientField:
    """
    Directional responses of the luma plane combined into magnitude and direction.

    Magnitude is sqrt(Gx^2 + Gy^2) without clamping, direction is
    atan2(Gy, Gx) in [-pi, pi]. Border pixels report 0 for both.
    """
    rgba = as_rgba(pixels, width, height)
    kx = validate_kernel(gx)
    ky = validate_kernel(gy)
    if kx.shape != ky.shape:
        raise InvalidInputError(f"Gradient kernels differ in shape: {kx.shape} vs {ky.shape}")

    plane = luma(rgba)
    response_x = _interior_response(plane, kx)
    response_y = _interior_response(plane, ky)

    return GradientField(
        magnitude=np.hypot(response_x, response_y),
        direction=np.arctan2(response_y, response_x),
    )


@timing_decorator
def sobel(pixels: BufferLike, width: int, height: int) -> np.ndarray:
    """Sobel gradient magnitude, clamped and replicated into RGB"""
    rgba = as_rgba(pixels, width, height)
    field = compute_gradient(rgba, width, height, SOBEL_X, SOBEL_Y)
    return _gray_output(rgba, field.magnitude)


@timing_decorator
def prewitt(pixels: BufferLike, width: int, height: int) -> np.ndarray:
    """Prewitt gradient magnitude, clamped and replicated into RGB"""
    rgba = as_rgba(pixels, width, height)
    field = compute_gradient(rgba, width, height, PREWITT_X, PREWITT_Y)
    return _gray_output(rgba, field.magnitude)


@timing_decorator
def laplacian(pixels: BufferLike, width: int, height: int) -> np.ndarray:
    """
    Absolute second-derivative response.

    Samples the unweighted channel mean rather than luma.
    """
    rgba = as_rgba(pixels, width, height)
    response = _interior_response(channel_mean(rgba), LAPLACIAN_KERNEL)
    return _gray_output(rgba, np.abs(response))


def classify_edges(magnitude: np.ndarray, low_threshold: float, high_threshold: float) -> np.ndarray:
    """Map magnitudes to EdgeClass values (uint8 array of the same shape)"""
    classes = np.full(magnitude.shape, EdgeClass.NONE, dtype=np.uint8)
    classes[magnitude > low_threshold] = EdgeClass.WEAK
    classes[magnitude > high_threshold] = EdgeClass.STRONG
    return classes


def render_edges(classes: np.ndarray) -> np.ndarray:
    """Convert an EdgeClass plane into a flat RGBA buffer"""
    return EDGE_PALETTE[classes].reshape(-1)


@timing_decorator
def canny(pixels: BufferLike, width: int, height: int,
          low_threshold: float = DEFAULT_LOW_THRESHOLD,
          high_threshold: float = DEFAULT_HIGH_THRESHOLD) -> np.ndarray:
    """
    Simplified Canny edge detection.

    Stages: 3x3 box blur, Sobel magnitude over the blurred luma, then dual
    thresholding. There is no non-maximum suppression and no hysteresis
    tracking. Strong edges become opaque white, weak edges opaque mid-gray
    and everything else transparent black.

    Args:
        pixels: RGBA buffer
        width: Buffer width in pixels
        height: Buffer height in pixels
        low_threshold: Magnitudes above this are at least weak edges
        high_threshold: Magnitudes above this are strong edges

    Returns:
        New flat uint8 buffer of the same length
    """
    rgba = as_rgba(pixels, width, height)
    low_threshold = require_number("low_threshold", low_threshold)
    high_threshold = require_number("high_threshold", high_threshold)

    if low_threshold > high_threshold:
        logger.warning(f"Canny low_threshold ({low_threshold}) is above high_threshold "
                       f"({high_threshold}); weak edges will not be reported")

    blurred = box_blur(rgba, width, height)
    field = compute_gradient(blurred, width, height, SOBEL_X, SOBEL_Y)
    classes = classify_edges(field.magnitude, low_threshold, high_threshold)

    logger.debug(f"Canny classification: strong={int(np.count_nonzero(classes == EdgeClass.STRONG))}, "
                 f"weak={int(np.count_nonzero(classes == EdgeClass.WEAK))}")

    return render_edges(classes)
