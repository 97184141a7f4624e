from dataclasses import dataclass
import os

@dataclass
class ProcessingConfig:
    """Default parameters for the buffer processing operations"""

    # Performance settings
    MAX_PROCESSING_TIME: float = float(os.getenv('MAX_BUFFER_PROCESSING_TIME', 10))

    # Edge detection settings
    CANNY_LOW_THRESHOLD: float = float(os.getenv('CANNY_LOW_THRESHOLD', 50))
    CANNY_HIGH_THRESHOLD: float = float(os.getenv('CANNY_HIGH_THRESHOLD', 150))
    EDGE_DETECTOR: str = os.getenv('EDGE_DETECTOR', 'canny')

    # Contrast enhancement settings
    CLAHE_CLIP_LIMIT: float = float(os.getenv('CLAHE_CLIP_LIMIT', 2.0))
    CLAHE_GRID_SIZE: int = int(os.getenv('CLAHE_GRID_SIZE', 8))
    CONTRAST_METHOD: str = os.getenv('CONTRAST_METHOD', 'clahe')

    # Tone curve settings
    GAMMA: float = 1.0
    SIGMOID_CONTRAST: float = 0.0

    # Convolution settings
    BLUR_RADIUS: int = 2
    SHARPEN_AMOUNT: float = 1.0

    LOG_PROCESSING_STEPS: bool = True
    FAIL_ON_TIMEOUT: bool = False
