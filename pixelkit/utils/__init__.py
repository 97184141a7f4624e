"""
Utility functions for buffer processing

Contains buffer validation, logging and error handling helpers.
"""

from .buffer_utils import (
    PixelBuffer,
    timing_decorator,
    as_rgba,
    validate_buffer,
    validate_dimensions,
    calculate_buffer_metrics,
    logger,
    PixelKitError,
    InvalidInputError,
    ProcessingTimeoutError
)
from .logging_config import setup_logging, get_logger, ProcessingLogger
from .error_handler import ErrorType, ProcessingErrorHandler

__all__ = [
    'PixelBuffer',
    'timing_decorator',
    'as_rgba',
    'validate_buffer',
    'validate_dimensions',
    'calculate_buffer_metrics',
    'logger',
    'PixelKitError',
    'InvalidInputError',
    'ProcessingTimeoutError',
    'setup_logging',
    'get_logger',
    'ProcessingLogger',
    'ErrorType',
    'ProcessingErrorHandler',
]
