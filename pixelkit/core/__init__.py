"""
Core buffer processing modules

This package contains the processing components:
- Kernel convolution (blur, sharpen, emboss)
- Edge detection (Sobel, Prewitt, Laplacian, Canny)
- Global histogram equalization
- Tiled adaptive equalization (CLAHE)
- Tone curves (gamma, sigmoid contrast, brightness, contrast)
- Enhancement pipeline
"""

from .convolution import convolve, convolve_clamped, box_blur, gaussian_blur, sharpen, emboss
from .edge_detection import (
    sobel, prewitt, laplacian, canny, compute_gradient, classify_edges,
    render_edges, EdgeClass, GradientField
)
from .histogram import get_histogram, compute_cdf, build_lut, apply_lut, equalize
from .tiled_histogram import clahe, tile_regions, clip_histogram, TileRegion
from .tone_curves import gamma_correction, sigmoid_contrast, adjust_brightness, adjust_contrast
from .pipeline import EnhancementPipeline

__all__ = [
    'convolve',
    'convolve_clamped',
    'box_blur',
    'gaussian_blur',
    'sharpen',
    'emboss',
    'sobel',
    'prewitt',
    'laplacian',
    'canny',
    'compute_gradient',
    'classify_edges',
    'render_edges',
    'EdgeClass',
    'GradientField',
    'get_histogram',
    'compute_cdf',
    'build_lut',
    'apply_lut',
    'equalize',
    'clahe',
    'tile_regions',
    'clip_histogram',
    'TileRegion',
    'gamma_correction',
    'sigmoid_contrast',
    'adjust_brightness',
    'adjust_contrast',
    'EnhancementPipeline',
]
