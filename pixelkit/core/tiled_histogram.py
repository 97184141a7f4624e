import math
import numpy as np
from typing import List, NamedTuple

from .histogram import histogram_of, build_lut, apply_lut_rgb, NUM_BINS
from ..utils.buffer_utils import (
    timing_decorator, as_rgba, require_number, require_integer, round_half_up,
    InvalidInputError, BufferLike
)
from ..utils.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_CLIP_LIMIT = 2.0
DEFAULT_GRID_SIZE = 8


class TileRegion(NamedTuple):
    """Half-open rectangle [x1, x2) x [y1, y2) inside the buffer"""
    x1: int
    y1: int
    x2: int
    y2: int

    @property
    def pixel_count(self) -> int:
        return (self.x2 - self.x1) * (self.y2 - self.y1)


def tile_regions(width: int, height: int, grid_size: int) -> List[TileRegion]:
    """
    Partition a width x height buffer into a grid_size x grid_size grid.

    Tiles are ceil(width / grid_size) by ceil(height / grid_size) pixels and
    clipped to the buffer, so the last row and column may be smaller. Tiles
    that fall completely outside the buffer are dropped.
    """
    grid_size = require_integer("grid_size", grid_size, minimum=1)
    tile_width = math.ceil(width / grid_size)
    tile_height = math.ceil(height / grid_size)

    regions = []
    for tile_y in range(grid_size):
        for tile_x in range(grid_size):
            x1 = tile_x * tile_width
            y1 = tile_y * tile_height
            x2 = min((tile_x + 1) * tile_width, width)
            y2 = min((tile_y + 1) * tile_height, height)
            if x1 < x2 and y1 < y2:
                regions.append(TileRegion(x1, y1, x2, y2))
    return regions


def tile_histogram(rgba: np.ndarray, region: TileRegion) -> np.ndarray:
    """Luma histogram of one tile of an (h, w, 4) array"""
    return histogram_of(rgba[region.y1:region.y2, region.x1:region.x2])


def clip_histogram(histogram: np.ndarray, clip_limit: float) -> np.ndarray:
    """
    Cap every bin at round(clip_limit * mean bin count).

    Mass above the cap is discarded, it is not redistributed to other bins.
    Returns a new array.
    """
    histogram = np.asarray(histogram, dtype=np.int64)
    if histogram.shape != (NUM_BINS,):
        raise InvalidInputError(f"Histogram must have {NUM_BINS} bins, got shape {histogram.shape}")

    mean_count = histogram.sum() / NUM_BINS
    limit = int(round_half_up(clip_limit * mean_count))
    return np.minimum(histogram, limit)


@timing_decorator
def clahe(pixels: BufferLike, width: int, height: int,
          clip_limit: float = DEFAULT_CLIP_LIMIT,
          grid_size: int = DEFAULT_GRID_SIZE) -> np.ndarray:
    """
    Contrast limited adaptive histogram equalization without tile blending.

    Every tile gets its own LUT from its clipped luma histogram, and the LUT
    is applied to R, G and B of that tile only. Tiles are not interpolated
    into each other, so block seams along tile borders are expected.

    Args:
        pixels: RGBA buffer
        width: Buffer width in pixels
        height: Buffer height in pixels
        clip_limit: Multiplier on the mean bin count, typically 2.0 - 4.0
        grid_size: Tiles per axis, typically 8 - 16

    Returns:
        New flat uint8 buffer of the same length
    """
    rgba = as_rgba(pixels, width, height)
    clip_limit = require_number("clip_limit", clip_limit, minimum=0.0, exclusive_minimum=True)
    grid_size = require_integer("grid_size", grid_size, minimum=1)

    regions = tile_regions(width, height, grid_size)
    logger.debug(f"CLAHE: {len(regions)} tiles for {width}x{height}, "
                 f"grid_size={grid_size}, clip_limit={clip_limit}")

    result = np.empty_like(rgba)
    for region in regions:
        lut = build_lut(clip_histogram(tile_histogram(rgba, region), clip_limit))
        tile = rgba[region.y1:region.y2, region.x1:region.x2]
        result[region.y1:region.y2, region.x1:region.x2] = apply_lut_rgb(tile, lut)

    return result.reshape(-1)
