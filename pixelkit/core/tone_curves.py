import numpy as np

from .histogram import apply_lut_rgb, NUM_BINS
from ..utils.buffer_utils import (
    timing_decorator, validate_buffer, require_number, round_half_up, to_uint8,
    BufferLike
)
from ..utils.logging_config import get_logger

logger = get_logger(__name__)

SIGMOID_STEEPNESS = 4.0

_LEVELS = np.arange(NUM_BINS, dtype=np.float64)


def gamma_lut(gamma: float) -> np.ndarray:
    """
    LUT[i] = round((i / 255) ^ gamma * 255)

    The exponent is gamma itself, not 1 / gamma, so gamma 0.5 maps 50 to 113.
    """
    gamma = require_number("gamma", gamma, minimum=0.0, exclusive_minimum=True)
    table = round_half_up(np.power(_LEVELS / 255.0, gamma) * 255.0)
    return np.clip(table, 0, 255).astype(np.uint8)


def sigmoid_lut(contrast: float) -> np.ndarray:
    contrast = require_number("contrast", contrast, minimum=-1.0, maximum=1.0)
    factor = np.exp(abs(contrast) * SIGMOID_STEEPNESS)

    normalized = _LEVELS / 255.0
    if contrast > 0:
        normalized = normalized * factor
    elif contrast < 0:
        normalized = normalized / factor

    return np.clip(round_half_up(normalized * 255.0), 0, 255).astype(np.uint8)


@timing_decorator
def gamma_correction(pixels: BufferLike, gamma: float) -> np.ndarray:
    """
    Power-law correction through a precomputed LUT.

    gamma < 1 brightens, gamma > 1 darkens.
    """
    lut = gamma_lut(gamma)
    rgba = validate_buffer(pixels)
    return apply_lut_rgb(rgba, lut).reshape(-1)


@timing_decorator
def sigmoid_contrast(pixels: BufferLike, contrast: float) -> np.ndarray:
    """
    Exponential contrast scaling for contrast in [-1, 1].

    Positive values multiply normalized channels by exp(|contrast| * 4),
    negative values divide by it. contrast == 0 returns an exact copy.
    """
    lut = sigmoid_lut(contrast)
    rgba = validate_buffer(pixels)

    if contrast == 0:
        return rgba.reshape(-1).copy()

    return apply_lut_rgb(rgba, lut).reshape(-1)


@timing_decorator
def adjust_brightness(pixels: BufferLike, amount: float) -> np.ndarray:
    """Add amount (-100..100) to every RGB channel, clamped"""
    amount = require_number("amount", amount, minimum=-100.0, maximum=100.0)
    rgba = validate_buffer(pixels)
    return apply_lut_rgb(rgba, to_uint8(_LEVELS + amount)).reshape(-1)


@timing_decorator
def adjust_contrast(pixels: BufferLike, amount: float) -> np.ndarray:
    """Linear contrast stretch around 128 for amount in [0.5, 3.0]"""
    amount = require_number("amount", amount, minimum=0.5, maximum=3.0)
    rgba = validate_buffer(pixels)

    factor = (259.0 * (amount + 255.0)) / (255.0 * (259.0 - amount))
    logger.debug(f"Contrast factor {factor:.4f} for amount {amount}")

    return apply_lut_rgb(rgba, to_uint8(factor * (_LEVELS - 128.0) + 128.0)).reshape(-1)
