import logging
import logging.handlers
import os
import sys
from typing import Any, Dict, Optional

DEFAULT_FORMAT = (
    '%(asctime)s - %(name)s - %(levelname)s - '
    '[%(filename)s:%(lineno)d] - %(message)s'
)

# Parent of every toolkit logger, follows the level passed to setup_logging
TOOLKIT_LOGGER = "pixelkit"


def _file_handler(log_file: str, max_file_size: int, backup_count: int) -> logging.Handler:
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    return logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=max_file_size,
        backupCount=backup_count,
        encoding='utf-8'
    )


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    max_file_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
    format_string: Optional[str] = None
):
    """
    Configure root logging for the toolkit

    Replaces any handlers already installed on the root logger with a stdout
    handler and, when log_file is given, a rotating file handler.

    Args:
        log_level: Logging level name, case insensitive
        log_file: Path to log file (optional), parent directories are created
        max_file_size: Bytes before the log file is rotated
        backup_count: Number of rotated files to keep
        format_string: Custom format string for log messages
    """
    level = getattr(logging, log_level.upper())
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    handlers = [logging.StreamHandler(sys.stdout)]
    file_error = None
    if log_file:
        try:
            handlers.append(_file_handler(log_file, max_file_size, backup_count))
        except OSError as e:
            file_error = e

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)
        root_logger.addHandler(handler)

    if file_error is not None:
        root_logger.warning(f"Failed to set up file logging: {file_error}")

    logging.getLogger(TOOLKIT_LOGGER).setLevel(level)


def _format_details(details: Optional[Dict[str, Any]]) -> str:
    if not details:
        return ""
    return " - " + ", ".join(f"{k}={v}" for k, v in details.items())


class ProcessingLogger:
    """Named logger with helpers for buffer operation events"""

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)
        self.component_name = name

    def debug(self, message: str, *args, **kwargs):
        self.logger.debug(message, *args, **kwargs)

    def info(self, message: str, *args, **kwargs):
        self.logger.info(message, *args, **kwargs)

    def warning(self, message: str, *args, **kwargs):
        self.logger.warning(message, *args, **kwargs)

    def error(self, message: str, *args, **kwargs):
        self.logger.error(message, *args, **kwargs)

    def critical(self, message: str, *args, **kwargs):
        self.logger.critical(message, *args, **kwargs)

    def log_processing_start(self, operation: str, details: Optional[dict] = None):
        self.logger.info(f"Starting {operation}{_format_details(details)}")

    def log_processing_end(self, operation: str, success: bool,
                           duration: float, details: Optional[dict] = None):
        """Completed runs log at INFO, failed runs at ERROR"""
        status = "completed" if success else "failed"
        message = f"{operation} {status} in {duration:.2f}s{_format_details(details)}"
        self.logger.log(logging.INFO if success else logging.ERROR, message)

    def log_performance_metric(self, metric_name: str, value: float, unit: str = ""):
        suffix = f" {unit}" if unit else ""
        self.logger.info(f"Performance metric: {metric_name} = {value:.2f}{suffix}")

    def log_error_with_context(self, error: Exception, context: dict):
        """Log an error with key=value context, traceback at DEBUG"""
        context_str = ", ".join(f"{k}={v}" for k, v in context.items())
        self.logger.error(f"Error in {self.component_name}: {error} - Context: {context_str}")
        self.logger.debug("Full traceback:", exc_info=error)


def get_logger(name: str) -> ProcessingLogger:
    """Get a processing logger instance"""
    return ProcessingLogger(name)
