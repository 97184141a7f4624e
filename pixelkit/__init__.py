"""
PixelKit - RGBA pixel buffer processing

Edge detection (Sobel, Prewitt, Laplacian, simplified Canny), global and
tiled histogram equalization, tone curves and kernel convolution over raw
interleaved RGBA buffers.
"""

from .core.convolution import gaussian_blur, sharpen, emboss
from .core.edge_detection import sobel, prewitt, laplacian, canny
from .core.histogram import get_histogram, equalize
from .core.tiled_histogram import clahe
from .core.tone_curves import gamma_correction, sigmoid_contrast, adjust_brightness, adjust_contrast
from .core.pipeline import EnhancementPipeline
from .configs.processing_config import ProcessingConfig
from .utils.buffer_utils import PixelBuffer, PixelKitError, InvalidInputError

__all__ = [
    'gaussian_blur',
    'sharpen',
    'emboss',
    'sobel',
    'prewitt',
    'laplacian',
    'canny',
    'get_histogram',
    'equalize',
    'clahe',
    'gamma_correction',
    'sigmoid_contrast',
    'adjust_brightness',
    'adjust_contrast',
    'EnhancementPipeline',
    'ProcessingConfig',
    'PixelBuffer',
    'PixelKitError',
    'InvalidInputError',
]

__version__ = '1.0.0'
__author__ = 'PixelKit Team'
