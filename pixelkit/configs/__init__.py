"""
Configuration module for buffer processing

Contains the default parameters used by the processing operations.
"""

from .processing_config import ProcessingConfig

__all__ = ['ProcessingConfig']
