import numbers
import time
from dataclasses import dataclass
from functools import wraps
from typing import Any, Optional, Tuple, Union

import numpy as np

from .logging_config import get_logger

logger = get_logger(__name__)

CHANNELS = 4

# Perceptual luma weights (R, G, B)
LUMA_WEIGHTS = (0.299, 0.587, 0.114)

BufferLike = Union[bytes, bytearray, memoryview, np.ndarray, "PixelBuffer"]


class PixelKitError(Exception):
    """Base exception for pixel buffer processing errors"""
    pass

class InvalidInputError(PixelKitError, ValueError):
    """Raised when a buffer, dimension or parameter violates the caller contract"""
    pass

class ProcessingTimeoutError(PixelKitError):
    """Exception for processing timeout errors"""
    pass


@dataclass
class PixelBuffer:
    """Interleaved RGBA raster, 8 bits per channel, row-major"""

    data: np.ndarray
    width: int
    height: int

    def __post_init__(self):
        self.data = as_rgba(self.data, self.width, self.height).reshape(-1)

    @classmethod
    def from_bytes(cls, raw: Union[bytes, bytearray, memoryview], width: int, height: int) -> "PixelBuffer":
        return cls(np.frombuffer(bytes(raw), dtype=np.uint8).copy(), width, height)

    @classmethod
    def blank(cls, width: int, height: int) -> "PixelBuffer":
        validate_dimensions(width, height)
        return cls(np.zeros(width * height * CHANNELS, dtype=np.uint8), width, height)

    def to_bytes(self) -> bytes:
        return self.data.tobytes()

    def as_image(self) -> np.ndarray:
        """(height, width, 4) view over the same memory"""
        return self.data.reshape(self.height, self.width, CHANNELS)

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.data.copy(), self.width, self.height)

    def __len__(self) -> int:
        return self.data.size


def timing_decorator(func):
    """Decorator to measure and log processing time"""
    @wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.time()
        try:
            result = func(*args, **kwargs)
            processing_time = time.time() - start_time
            logger.debug(f"{func.__name__} completed in {processing_time:.4f} seconds")
            return result
        except Exception as e:
            processing_time = time.time() - start_time
            logger.error(f"{func.__name__} failed after {processing_time:.4f} seconds: {str(e)}")
            raise
    return wrapper


def is_number(value: Any) -> bool:
    """True for finite real numbers, False for bools, NaN, infinities and everything else"""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return bool(np.isfinite(float(value)))

def require_number(name: str, value: Any,
                   minimum: Optional[float] = None,
                   maximum: Optional[float] = None,
                   exclusive_minimum: bool = False) -> float:
    """Validate a numeric parameter and return it as float"""
    if not is_number(value):
        raise InvalidInputError(f"{name} must be a finite number, got {value!r}")

    value = float(value)
    if minimum is not None:
        if exclusive_minimum and value <= minimum:
            raise InvalidInputError(f"{name} must be greater than {minimum}, got {value}")
        if not exclusive_minimum and value < minimum:
            raise InvalidInputError(f"{name} must be at least {minimum}, got {value}")
    if maximum is not None and value > maximum:
        raise InvalidInputError(f"{name} must be at most {maximum}, got {value}")
    return value

def require_integer(name: str, value: Any, minimum: Optional[int] = None,
                    maximum: Optional[int] = None) -> int:
    """Validate an integral parameter (ints and integer-valued floats)"""
    if not is_number(value) or not float(value).is_integer():
        raise InvalidInputError(f"{name} must be an integer, got {value!r}")

    value = int(value)
    if minimum is not None and value < minimum:
        raise InvalidInputError(f"{name} must be at least {minimum}, got {value}")
    if maximum is not None and value > maximum:
        raise InvalidInputError(f"{name} must be at most {maximum}, got {value}")
    return value

def validate_dimensions(width: Any, height: Any) -> Tuple[int, int]:
    """Validate buffer width and height"""
    width = require_integer("width", width, minimum=1)
    height = require_integer("height", height, minimum=1)
    return width, height


def _as_uint8_array(pixels: Any) -> np.ndarray:
    if pixels is None:
        raise InvalidInputError("Pixel buffer is missing")

    if isinstance(pixels, PixelBuffer):
        return pixels.data

    if isinstance(pixels, (bytes, bytearray, memoryview)):
        return np.frombuffer(pixels, dtype=np.uint8)

    if isinstance(pixels, np.ndarray):
        if pixels.dtype != np.uint8:
            raise InvalidInputError(f"Pixel buffer must have dtype uint8, got {pixels.dtype}")
        return pixels

    raise InvalidInputError(f"Unsupported pixel buffer type: {type(pixels).__name__}")

def validate_buffer(pixels: Any) -> np.ndarray:
    """Validate a buffer whose dimensions are not needed (tone curves)"""
    array = _as_uint8_array(pixels).reshape(-1)
    if array.size == 0:
        raise InvalidInputError("Pixel buffer is empty")
    if array.size % CHANNELS != 0:
        raise InvalidInputError(
            f"Pixel buffer length {array.size} is not a multiple of {CHANNELS}"
        )
    return array.reshape(-1, CHANNELS)

def as_rgba(pixels: Any, width: Any, height: Any) -> np.ndarray:
    """
    Validate a buffer against its dimensions and return an (h, w, 4) view.

    The returned array may share memory with the caller's buffer, callers
    must not write to it.
    """
    array = _as_uint8_array(pixels)
    width, height = validate_dimensions(width, height)

    expected = width * height * CHANNELS
    if array.size != expected:
        raise InvalidInputError(
            f"Pixel buffer length {array.size} does not match {width}x{height}x{CHANNELS}={expected}"
        )
    return array.reshape(height, width, CHANNELS)


def round_half_up(values: np.ndarray) -> np.ndarray:
    """Round .5 away from negative infinity"""
    return np.floor(np.asarray(values, dtype=np.float64) + 0.5)

def to_uint8(values: np.ndarray) -> np.ndarray:
    """Clamp to [0, 255] and store the way a clamped byte array does"""
    return np.rint(np.clip(values, 0, 255)).astype(np.uint8)

def luma(rgba: np.ndarray) -> np.ndarray:
    """Luma-weighted intensity plane as float64"""
    rgb = rgba[..., :3].astype(np.float64)
    return rgb[..., 0] * LUMA_WEIGHTS[0] + rgb[..., 1] * LUMA_WEIGHTS[1] + rgb[..., 2] * LUMA_WEIGHTS[2]

def luma_indices(rgba: np.ndarray) -> np.ndarray:
    """Luma rounded to histogram bin indices"""
    return np.clip(round_half_up(luma(rgba)), 0, 255).astype(np.intp)

def channel_mean(rgba: np.ndarray) -> np.ndarray:
    """Unweighted (R + G + B) / 3 plane as float64"""
    return rgba[..., :3].astype(np.float64).sum(axis=-1) / 3.0


def flatten(rgba: np.ndarray) -> np.ndarray:
    """Return a freshly allocated flat uint8 buffer"""
    return np.ascontiguousarray(rgba, dtype=np.uint8).reshape(-1).copy()

def calculate_buffer_metrics(pixels: BufferLike, width: int, height: int) -> dict:
    """Luma statistics used to compare a buffer before and after processing"""
    gray = luma(as_rgba(pixels, width, height))

    return {
        'mean_brightness': float(np.mean(gray)),
        'std_brightness': float(np.std(gray)),
        'contrast': float(gray.max() - gray.min()),
        'dynamic_range': float(np.percentile(gray, 99) - np.percentile(gray, 1)),
        'buffer_size': (width, height)
    }
