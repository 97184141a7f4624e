"""
Kernel convolution over RGBA pixel buffers.

Two sampling styles are provided. ``convolve`` only processes pixels that are
at least one kernel radius away from every edge and leaves the border RGB at
zero (sharpen, emboss). ``convolve_clamped`` clamps sample coordinates to the
image so every pixel is processed (blur).
"""

import numpy as np
from scipy import ndimage
from typing import Sequence, Union

from ..utils.buffer_utils import (
    timing_decorator, as_rgba, require_number, require_integer,
    round_half_up, InvalidInputError, BufferLike
)
from ..utils.logging_config import get_logger

logger = get_logger(__name__)

KernelLike = Union[np.ndarray, Sequence[Sequence[float]]]

SHARPEN_KERNEL = np.array([[0, -1, 0],
                           [-1, 5, -1],
                           [0, -1, 0]], dtype=np.float64)

EMBOSS_KERNEL = np.array([[-2, -1, 0],
                          [-1, 1, 1],
                          [0, 1, 2]], dtype=np.float64)

EMBOSS_OFFSET = 128.0

MAX_BLUR_RADIUS = 50


def validate_kernel(kernel: KernelLike) -> np.ndarray:
    """Return the kernel as a float64 matrix, or raise for malformed kernels"""
    if kernel is None:
        raise InvalidInputError("Kernel is missing")

    try:
        matrix = np.asarray(kernel, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Kernel is not a numeric matrix: {e}") from e

    if matrix.ndim != 2 or matrix.size == 0:
        raise InvalidInputError(f"Kernel must be a non-empty 2D matrix, got shape {matrix.shape}")
    if matrix.shape[0] != matrix.shape[1]:
        raise InvalidInputError(f"Kernel must be square, got shape {matrix.shape}")
    if matrix.shape[0] % 2 == 0:
        raise InvalidInputError(f"Kernel size must be odd, got {matrix.shape[0]}")
    if not np.all(np.isfinite(matrix)):
        raise InvalidInputError("Kernel coefficients must be finite")

    return matrix


def _weighted_rgb(rgba: np.ndarray, weights: np.ndarray) -> np.ndarray:
    """Per-channel neighbourhood sums with edge-clamped sampling, shape (h, w, 3)"""
    rgb = rgba[..., :3].astype(np.float64)
    out = np.empty(rgb.shape, dtype=np.float64)
    for channel in range(3):
        # correlate, not convolve: the kernel is applied without flipping
        out[..., channel] = ndimage.correlate(rgb[..., channel], weights, mode='nearest')
    return out


def _scaled(matrix: np.ndarray, strength: float) -> np.ndarray:
    weights = matrix * strength
    if not np.all(np.isfinite(weights)):
        raise InvalidInputError(f"Kernel scaled by strength {strength} overflows")
    return weights


def _store(values: np.ndarray, offset: float) -> np.ndarray:
    return np.clip(round_half_up(values + offset), 0, 255).astype(np.uint8)


@timing_decorator
def convolve(pixels: BufferLike, width: int, height: int, kernel: KernelLike,
             strength: float = 1.0, offset: float = 0.0) -> np.ndarray:
    """
    Apply a kernel to interior pixels only.

    Pixels closer than the kernel radius to any edge keep RGB = 0. Alpha is
    copied from the input for every pixel.

    Args:
        pixels: RGBA buffer, length width * height * 4
        width: Buffer width in pixels
        height: Buffer height in pixels
        kernel: Odd-sized square coefficient matrix
        strength: Multiplier applied to every coefficient
        offset: Added to each weighted sum before clamping

    Returns:
        New flat uint8 buffer of the same length
    """
    rgba = as_rgba(pixels, width, height)
    matrix = validate_kernel(kernel)
    strength = require_number("strength", strength)
    offset = require_number("offset", offset)
    weights = _scaled(matrix, strength)

    h, w = rgba.shape[:2]
    radius = matrix.shape[0] // 2

    result = np.zeros_like(rgba)
    result[..., 3] = rgba[..., 3]

    if h > 2 * radius and w > 2 * radius:
        filtered = _weighted_rgb(rgba, weights)
        interior = filtered[radius:h - radius, radius:w - radius]
        result[radius:h - radius, radius:w - radius, :3] = _store(interior, offset)
    else:
        logger.debug(f"Buffer {w}x{h} has no interior pixels for a {matrix.shape[0]}x{matrix.shape[0]} kernel")

    return result.reshape(-1)


@timing_decorator
def convolve_clamped(pixels: BufferLike, width: int, height: int, kernel: KernelLike,
                     strength: float = 1.0, offset: float = 0.0) -> np.ndarray:
    """
    Apply a kernel to every pixel, sampling with coordinates clamped to the
    buffer bounds. Alpha is copied unchanged.
    """
    rgba = as_rgba(pixels, width, height)
    matrix = validate_kernel(kernel)
    strength = require_number("strength", strength)
    offset = require_number("offset", offset)
    weights = _scaled(matrix, strength)

    result = np.empty_like(rgba)
    result[..., :3] = _store(_weighted_rgb(rgba, weights), offset)
    result[..., 3] = rgba[..., 3]

    return result.reshape(-1)


def box_blur(pixels: BufferLike, width: int, height: int) -> np.ndarray:
    """3x3 mean blur with clamped sampling"""
    return convolve_clamped(pixels, width, height, np.ones((3, 3)), strength=1.0 / 9.0)


def gaussian_blur(pixels: BufferLike, width: int, height: int, radius: int = 2) -> np.ndarray:
    """
    Mean blur over a (2 * radius + 1) square window with clamped sampling.

    The window is uniform, matching the toolkit's historical "gaussian" blur.
    """
    radius = require_integer("radius", radius, minimum=1, maximum=MAX_BLUR_RADIUS)
    size = 2 * radius + 1
    return convolve_clamped(pixels, width, height, np.ones((size, size)), strength=1.0 / (size * size))


def sharpen(pixels: BufferLike, width: int, height: int, amount: float = 1.0) -> np.ndarray:
    """Sharpen interior pixels with a 4-neighbour kernel scaled by amount"""
    amount = require_number("amount", amount)
    return convolve(pixels, width, height, SHARPEN_KERNEL, strength=amount)


def emboss(pixels: BufferLike, width: int, height: int) -> np.ndarray:
    return convolve(pixels, width, height, EMBOSS_KERNEL, strength=1.0, offset=EMBOSS_OFFSET)
