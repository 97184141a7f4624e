import numpy as np
import time
from typing import Any, Dict, List, Optional

from .convolution import gaussian_blur, sharpen
from .edge_detection import sobel, prewitt, laplacian, canny
from .histogram import equalize
from .tiled_histogram import clahe
from .tone_curves import gamma_correction, sigmoid_contrast
from ..utils.buffer_utils import (
    timing_decorator, as_rgba, flatten, calculate_buffer_metrics, require_number,
    InvalidInputError, ProcessingTimeoutError, BufferLike
)
from ..utils.logging_config import get_logger
from ..utils.error_handler import ProcessingErrorHandler
from ..configs.processing_config import ProcessingConfig

logger = get_logger(__name__)

PIPELINE_VERSION = '1.0.0'

CONTRAST_METHODS = ('equalize', 'clahe')
EDGE_DETECTORS = ('sobel', 'prewitt', 'laplacian', 'canny')

EDGE_OPERATORS = {
    'sobel': sobel,
    'prewitt': prewitt,
    'laplacian': laplacian,
}

STEP_ORDER = (
    'smoothing',
    'contrast_enhancement',
    'tone_curve',
    'sharpening',
    'edge_detection',
)

SWITCH_OPTIONS = tuple(f'enable_{step}' for step in STEP_ORDER) + (
    'fail_on_timeout',
    'keep_intermediate_buffers',
)

class EnhancementPipeline:
    """Runs contrast, tone and edge operations over one buffer in a fixed order"""

    def __init__(self, config: Optional[ProcessingConfig] = None):
        self.config = config or ProcessingConfig()
        self.error_handler = ProcessingErrorHandler()

        self.stats = {
            'total_processed': 0,
            'successful_processed': 0,
            'average_processing_time': 0.0,
            'total_processing_time': 0.0,
            'error_count': 0,
            'last_error': None
        }

        logger.info(f"EnhancementPipeline initialized with config: {self.config}")

    @timing_decorator
    def process_buffer(self,
                       pixels: BufferLike,
                       width: int,
                       height: int,
                       options: Optional[Dict] = None) -> Dict[str, Any]:
        """
        Process a single buffer through the enabled steps

        Args:
            pixels: RGBA buffer, length width * height * 4
            width: Buffer width in pixels
            height: Buffer height in pixels
            options: Step switches and parameters, see _parse_processing_options

        Returns:
            Processing results with metadata. Invalid input is reported with
            success=False rather than raised.
        """
        start_time = time.time()
        self.stats['total_processed'] += 1
        logger.log_processing_start("buffer processing", {'width': width, 'height': height})

        try:
            opts = self._parse_processing_options(options)
            rgba = as_rgba(pixels, width, height)

            result = self._initialize_result_structure(rgba, width, height, opts)
            processed = self._execute_pipeline(rgba, width, height, opts, result, start_time)

            processing_time = time.time() - start_time
            self._finalize_results(result, processed, processing_time)

            self.stats['successful_processed'] += 1
            self._update_processing_stats(processing_time, success=True)

            logger.log_processing_end("buffer processing", True, processing_time, {
                'steps': len(result['processing_steps']),
                'warnings': len(result['warnings']),
            })
            if processing_time > 0:
                logger.log_performance_metric("throughput", width * height / processing_time / 1e6, "Mpx/s")
            return result

        except (InvalidInputError, ProcessingTimeoutError) as e:
            processing_time = time.time() - start_time
            error_result = self._handle_processing_error(e, processing_time, width, height)
            self._update_processing_stats(processing_time, success=False, error=str(e))
            return error_result

    def _parse_processing_options(self, options: Optional[Dict]) -> Dict:
        """Merge options over the config defaults and validate the choices"""
        default_options = {
            # Pipeline control
            'enable_smoothing': False,
            'enable_contrast_enhancement': True,
            'enable_tone_curve': False,
            'enable_sharpening': False,
            'enable_edge_detection': False,

            # Step parameters
            'blur_radius': self.config.BLUR_RADIUS,
            'contrast_method': self.config.CONTRAST_METHOD,
            'clip_limit': self.config.CLAHE_CLIP_LIMIT,
            'grid_size': self.config.CLAHE_GRID_SIZE,
            'gamma': self.config.GAMMA,
            'sigmoid_contrast': self.config.SIGMOID_CONTRAST,
            'sharpen_amount': self.config.SHARPEN_AMOUNT,
            'edge_detector': self.config.EDGE_DETECTOR,
            'low_threshold': self.config.CANNY_LOW_THRESHOLD,
            'high_threshold': self.config.CANNY_HIGH_THRESHOLD,

            # Performance
            'timeout_seconds': self.config.MAX_PROCESSING_TIME,
            'fail_on_timeout': self.config.FAIL_ON_TIMEOUT,
            'keep_intermediate_buffers': False,
        }

        if options:
            if not isinstance(options, dict):
                raise InvalidInputError(f"Processing options must be a dict, got {type(options).__name__}")
            unknown = set(options) - set(default_options)
            if unknown:
                raise InvalidInputError(f"Unknown processing options: {', '.join(sorted(map(str, unknown)))}")
            default_options.update(options)

        if default_options['contrast_method'] not in CONTRAST_METHODS:
            raise InvalidInputError(
                f"contrast_method must be one of {CONTRAST_METHODS}, got {default_options['contrast_method']!r}"
            )
        if default_options['edge_detector'] not in EDGE_DETECTORS:
            raise InvalidInputError(
                f"edge_detector must be one of {EDGE_DETECTORS}, got {default_options['edge_detector']!r}"
            )

        for switch in SWITCH_OPTIONS:
            if not isinstance(default_options[switch], bool):
                raise InvalidInputError(f"{switch} must be True or False, got {default_options[switch]!r}")
        default_options['timeout_seconds'] = require_number(
            'timeout_seconds', default_options['timeout_seconds'], minimum=0, exclusive_minimum=True
        )

        return default_options

    def _initialize_result_structure(self, rgba: np.ndarray, width: int, height: int, opts: Dict) -> Dict:
        return {
            'width': width,
            'height': height,
            'processed_buffer': None,
            'intermediate_buffers': {},
            'processing_steps': [],
            'original_metrics': calculate_buffer_metrics(rgba, width, height),
            'final_metrics': None,
            'improvements': {},
            'processing_options': opts.copy(),
            'processing_time': 0.0,
            'success': False,
            'error': None,
            'error_info': None,
            'warnings': [],
            'pipeline_version': PIPELINE_VERSION
        }

    def _execute_pipeline(self, rgba: np.ndarray, width: int, height: int,
                          opts: Dict, result: Dict, start_time: float) -> np.ndarray:
        """Execute the enabled steps in STEP_ORDER"""
        current = flatten(rgba)
        step_number = 1

        for step in STEP_ORDER:
            if not opts[f'enable_{step}']:
                continue

            if self.config.LOG_PROCESSING_STEPS:
                logger.info(f"Step {step_number}: {step.replace('_', ' ').title()}")
            current = self._run_step(step, current, width, height, opts)
            result['processing_steps'].append(step)

            if opts['keep_intermediate_buffers']:
                result['intermediate_buffers'][step] = current.copy()

            self._check_timeout(step, start_time, opts, result)
            step_number += 1

        return current

    def _run_step(self, step: str, current: np.ndarray, width: int, height: int, opts: Dict) -> np.ndarray:
        if step == 'smoothing':
            return gaussian_blur(current, width, height, opts['blur_radius'])

        if step == 'contrast_enhancement':
            if opts['contrast_method'] == 'equalize':
                return equalize(current, width, height)
            return clahe(current, width, height, opts['clip_limit'], opts['grid_size'])

        if step == 'tone_curve':
            if opts['gamma'] != 1.0:
                current = gamma_correction(current, opts['gamma'])
            if opts['sigmoid_contrast'] != 0:
                current = sigmoid_contrast(current, opts['sigmoid_contrast'])
            return current

        if step == 'sharpening':
            return sharpen(current, width, height, opts['sharpen_amount'])

        detector = opts['edge_detector']
        if detector == 'canny':
            return canny(current, width, height, opts['low_threshold'], opts['high_threshold'])
        return EDGE_OPERATORS[detector](current, width, height)

    def _check_timeout(self, step: str, start_time: float, opts: Dict, result: Dict):
        elapsed = time.time() - start_time
        if elapsed <= opts['timeout_seconds']:
            return

        message = f"Processing time ({elapsed:.2f}s) exceeded target ({opts['timeout_seconds']}s) after {step}"
        if opts['fail_on_timeout']:
            raise ProcessingTimeoutError(message)
        if message not in result['warnings']:
            result['warnings'].append(message)
            logger.warning(message)

    def _finalize_results(self, result: Dict, processed: np.ndarray, processing_time: float):
        """Finalize processing results with metrics"""
        result['processed_buffer'] = processed
        result['processing_time'] = processing_time
        result['success'] = True

        result['final_metrics'] = calculate_buffer_metrics(processed, result['width'], result['height'])
        result['improvements'] = self._calculate_improvements(
            result['original_metrics'],
            result['final_metrics']
        )

    def _calculate_improvements(self, original_metrics: Dict, final_metrics: Dict) -> Dict:
        """Per-metric change between the input and output buffers"""
        improvements = {}

        for metric in ['mean_brightness', 'std_brightness', 'contrast', 'dynamic_range']:
            original_val = original_metrics[metric]
            final_val = final_metrics[metric]

            improvement = final_val - original_val
            improvement_pct = (improvement / original_val * 100) if original_val > 0 else 0

            improvements[metric] = {
                'absolute': float(improvement),
                'percentage': float(improvement_pct),
                'original': float(original_val),
                'final': float(final_val)
            }

        return improvements

    def _handle_processing_error(self, error: Exception, processing_time: float,
                                 width: Any, height: Any) -> Dict:
        """Create the error result for a failed run"""
        report = self.error_handler.handle_error(error, {'width': width, 'height': height})

        return {
            'width': width,
            'height': height,
            'processed_buffer': None,
            'intermediate_buffers': {},
            'processing_steps': [],
            'original_metrics': None,
            'final_metrics': None,
            'improvements': {},
            'processing_options': {},
            'processing_time': processing_time,
            'success': False,
            'error': str(error),
            'error_info': report,
            'warnings': [],
            'pipeline_version': PIPELINE_VERSION
        }

    def _update_processing_stats(self, processing_time: float, success: bool, error: Optional[str] = None):
        self.stats['total_processing_time'] += processing_time

        if self.stats['total_processed'] > 0:
            self.stats['average_processing_time'] = (
                self.stats['total_processing_time'] / self.stats['total_processed']
            )

        if not success:
            self.stats['error_count'] += 1
            self.stats['last_error'] = error

    def get_processing_statistics(self) -> Dict:
        """Get processing statistics"""
        stats = self.stats.copy()

        if stats['total_processed'] > 0:
            stats['success_rate'] = stats['successful_processed'] / stats['total_processed']
            stats['error_rate'] = stats['error_count'] / stats['total_processed']
        else:
            stats['success_rate'] = 0.0
            stats['error_rate'] = 0.0

        return stats

    def reset_statistics(self):
        """Reset processing statistics"""
        self.stats = {
            'total_processed': 0,
            'successful_processed': 0,
            'average_processing_time': 0.0,
            'total_processing_time': 0.0,
            'error_count': 0,
            'last_error': None
        }
        self.error_handler.clear_error_history()
        logger.info("Processing statistics reset")

    def available_steps(self) -> List[str]:
        return list(STEP_ORDER)
