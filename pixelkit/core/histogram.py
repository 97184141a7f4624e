import cv2
import numpy as np

from ..utils.buffer_utils import (
    timing_decorator, as_rgba, luma_indices, round_half_up,
    InvalidInputError, BufferLike
)
from ..utils.logging_config import get_logger

logger = get_logger(__name__)

NUM_BINS = 256

IDENTITY_LUT = np.arange(NUM_BINS, dtype=np.uint8)


def histogram_of(rgba: np.ndarray) -> np.ndarray:
    """256-bin histogram of rounded luma for an (h, w, 4) region"""
    return np.bincount(luma_indices(rgba).ravel(), minlength=NUM_BINS).astype(np.int64)


def get_histogram(pixels: BufferLike, width: int, height: int) -> np.ndarray:
    """
    Luma histogram of a whole buffer.

    Returns:
        int64 array of 256 counts summing to width * height
    """
    return histogram_of(as_rgba(pixels, width, height))


def compute_cdf(histogram: np.ndarray) -> np.ndarray:
    """Cumulative distribution of a histogram"""
    histogram = np.asarray(histogram, dtype=np.int64)
    if histogram.shape != (NUM_BINS,):
        raise InvalidInputError(f"Histogram must have {NUM_BINS} bins, got shape {histogram.shape}")
    if np.any(histogram < 0):
        raise InvalidInputError("Histogram counts must be non-negative")
    return np.cumsum(histogram)


def build_lut(histogram: np.ndarray) -> np.ndarray:
    """
    Equalization lookup table from a (possibly clipped) histogram.

    LUT[i] = round((CDF[i] - CDF[0]) / (CDF[255] - CDF[0]) * 255). When all
    of the mass sits in bin 0 the denominator is zero and the identity table
    is returned instead.
    """
    cdf = compute_cdf(histogram)
    cdf_min = cdf[0]
    total = cdf[-1]

    if total == cdf_min:
        logger.debug("Degenerate histogram, using identity LUT")
        return IDENTITY_LUT.copy()

    scaled = (cdf - cdf_min) / float(total - cdf_min) * 255.0
    return np.clip(round_half_up(scaled), 0, 255).astype(np.uint8)


def validate_lut(lut: np.ndarray) -> np.ndarray:
    table = np.asarray(lut)
    if table.shape != (NUM_BINS,):
        raise InvalidInputError(f"LUT must have {NUM_BINS} entries, got shape {table.shape}")
    if np.any(table < 0) or np.any(table > 255):
        raise InvalidInputError("LUT values must be within [0, 255]")
    return table.astype(np.uint8)


def apply_lut_rgb(rgba: np.ndarray, lut: np.ndarray) -> np.ndarray:
    """
    Remap R, G and B of an (..., 4) array through one LUT, alpha unchanged.

    Each channel is looked up with its own value.
    """
    result = rgba.copy()
    rgb = np.ascontiguousarray(rgba[..., :3]).reshape(-1, 3)
    result[..., :3] = cv2.LUT(rgb, lut).reshape(rgba[..., :3].shape)
    return result


def apply_lut(pixels: BufferLike, width: int, height: int, lut: np.ndarray) -> np.ndarray:
    """Apply a 256-entry LUT to every RGB channel of a buffer"""
    rgba = as_rgba(pixels, width, height)
    table = validate_lut(lut)
    return apply_lut_rgb(rgba, table).reshape(-1)


@timing_decorator
def equalize(pixels: BufferLike, width: int, height: int) -> np.ndarray:
    """
    Global histogram equalization.

    The LUT is derived from the luma histogram but applied to R, G and B
    independently, so colored images may shift in balance.
    """
    rgba = as_rgba(pixels, width, height)

    lut = build_lut(histogram_of(rgba))
    logger.debug(f"Equalization LUT spans {int(lut.min())}..{int(lut.max())}")

    return apply_lut_rgb(rgba, lut).reshape(-1)
