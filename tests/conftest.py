"""
Pytest configuration and shared fixtures

This module provides common fixtures and configuration for all tests.
"""

import sys
from pathlib import Path
from typing import Callable, Tuple

import numpy as np
import pytest

# Make the package importable without installation
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir))

from pixelkit.utils.logging_config import setup_logging
from pixelkit.config import get_settings


# Configure test logging
setup_logging(log_level="DEBUG")


def make_buffer(width: int, height: int, rgb: Tuple[int, int, int] = (0, 0, 0), alpha: int = 255) -> np.ndarray:
    """Flat RGBA buffer filled with one color"""
    rgba = np.empty((height, width, 4), dtype=np.uint8)
    rgba[..., 0] = rgb[0]
    rgba[..., 1] = rgb[1]
    rgba[..., 2] = rgb[2]
    rgba[..., 3] = alpha
    return rgba.reshape(-1)


def split_buffer(width: int, height: int, split_x: int) -> np.ndarray:
    """Black for x < split_x, white from split_x on, fully opaque"""
    rgba = np.zeros((height, width, 4), dtype=np.uint8)
    rgba[:, split_x:, :3] = 255
    rgba[..., 3] = 255
    return rgba.reshape(-1)


@pytest.fixture
def buffer_factory() -> Callable[..., np.ndarray]:
    return make_buffer


@pytest.fixture
def half_black_white() -> Tuple[np.ndarray, int, int]:
    """5x5 buffer split at x=2 into black (left) and white (right)"""
    return split_buffer(5, 5, 2), 5, 5


@pytest.fixture
def uniform_gray() -> Tuple[np.ndarray, int, int]:
    """8x8 buffer of mid-gray 128"""
    return make_buffer(8, 8, (128, 128, 128)), 8, 8


@pytest.fixture
def low_contrast() -> Tuple[np.ndarray, int, int]:
    """8x8 low-contrast buffer with every other pixel lifted"""
    rgba = np.empty((8, 8, 4), dtype=np.uint8)
    rgba[...] = (100, 120, 110, 255)
    flat = rgba.reshape(-1, 4)
    flat[::2, :3] = (150, 140, 130)
    return rgba.reshape(-1), 8, 8


@pytest.fixture
def random_buffer() -> Tuple[np.ndarray, int, int]:
    """Seeded 32x24 buffer with random colors and random alpha"""
    rng = np.random.default_rng(1234)
    width, height = 32, 24
    return rng.integers(0, 256, size=width * height * 4, dtype=np.uint8), width, height


@pytest.fixture
def gradient_buffer() -> Tuple[np.ndarray, int, int]:
    """64x64 diagonal gradient, non-uniform in every tile"""
    width, height = 64, 64
    ys, xs = np.mgrid[0:height, 0:width]
    value = ((xs * 3 + ys) % 256).astype(np.uint8)
    rgba = np.empty((height, width, 4), dtype=np.uint8)
    rgba[..., 0] = value
    rgba[..., 1] = (value // 2 + 40).astype(np.uint8)
    rgba[..., 2] = 255 - value
    rgba[..., 3] = 200
    return rgba.reshape(-1), width, height


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached; tests that touch the environment need a fresh copy"""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# Markers for test categorization
def pytest_configure(config):
    """Configure custom markers"""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
