import time
import traceback
from enum import Enum
from typing import Any, Dict, List, Optional

from .buffer_utils import InvalidInputError, ProcessingTimeoutError
from .logging_config import get_logger

logger = get_logger(__name__)

class ErrorType(Enum):
    INVALID_INPUT = "invalid_input"
    TIMEOUT_ERROR = "timeout_error"
    MEMORY_ERROR = "memory_error"
    PROCESSING_ERROR = "processing_error"

def classify_error(error: Exception) -> ErrorType:
    """Map an exception raised during processing to an ErrorType"""
    if isinstance(error, InvalidInputError):
        return ErrorType.INVALID_INPUT
    if isinstance(error, ProcessingTimeoutError):
        return ErrorType.TIMEOUT_ERROR
    if isinstance(error, MemoryError):
        return ErrorType.MEMORY_ERROR
    return ErrorType.PROCESSING_ERROR

class ProcessingErrorHandler:
    def __init__(self, max_retries: int = 1, max_history_size: int = 100):
        self.error_counts: Dict[ErrorType, int] = {}
        self.max_retries = max_retries
        self.error_history: List[Dict[str, Any]] = []
        self.max_history_size = max_history_size

    def handle_error(self, error: Exception,
                     context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Turn an exception into an error report, log it and record it"""
        error_type = classify_error(error)
        error_info = {
            "error_type": error_type.value,
            "error_message": str(error),
            "traceback": "".join(traceback.format_exception(type(error), error, error.__traceback__)),
            "context": context or {},
            "timestamp": time.time()
        }

        # Caller contract violations are warnings, everything else is an error
        if error_type == ErrorType.INVALID_INPUT:
            logger.warning(f"{error_type.value}: {str(error)}")
        else:
            logger.log_error_with_context(error, {"error_type": error_type.value, **error_info["context"]})

        self.error_counts[error_type] = self.error_counts.get(error_type, 0) + 1
        self._add_to_history(error_info)

        return {
            "success": False,
            "error_info": error_info,
            "retry_recommended": self._should_retry(error_type),
            "retry_count": self._get_retry_count(error_type),
            "max_retries": self.max_retries
        }

    def _should_retry(self, error_type: ErrorType) -> bool:
        """Invalid input never succeeds unchanged; timeouts may succeed on retry"""
        if error_type == ErrorType.INVALID_INPUT:
            return False

        if error_type in (ErrorType.TIMEOUT_ERROR, ErrorType.MEMORY_ERROR):
            return self._get_retry_count(error_type) <= self.max_retries

        return False

    def _get_retry_count(self, error_type: ErrorType) -> int:
        """Count recent errors of this type (last 10 entries, last 5 minutes)"""
        recent_errors = [
            e for e in self.error_history[-10:]
            if e.get("error_type") == error_type.value and
               time.time() - e.get("timestamp", 0) < 300
        ]
        return len(recent_errors)

    def _add_to_history(self, error_info: Dict[str, Any]):
        self.error_history.append(error_info)
        if len(self.error_history) > self.max_history_size:
            self.error_history = self.error_history[-self.max_history_size:]

    def get_error_statistics(self) -> Dict[str, Any]:
        """Error counts by type and the most common one"""
        return {
            "total_errors": sum(self.error_counts.values()),
            "error_counts_by_type": {k.value: v for k, v in self.error_counts.items()},
            "most_common_error": max(self.error_counts.items(), key=lambda x: x[1])[0].value if self.error_counts else None,
            "history_size": len(self.error_history)
        }

    def clear_error_history(self):
        """Clear error history and reset counters"""
        self.error_history.clear()
        self.error_counts.clear()
        logger.info("Error history and counters cleared")
