"""Foundation - Error taxonomy and configuration.

Contains: errors, config.
"""

from __future__ import annotations

from .config import FaultcaseSettings, LoggingSettings, RetrySettings, clear_settings_cache, get_settings
from .errors import (
    ConfigurationError,
    ErrorCode,
    NonTransientError,
    OperationError,
    RetriesExhaustedError,
    RetryCancelledError,
    RetryError,
    classify_exception,
)

__all__ = [
    # Errors
    "ErrorCode", "classify_exception",
    "RetryError", "ConfigurationError", "OperationError",
    "RetriesExhaustedError", "NonTransientError", "RetryCancelledError",
    # Config
    "FaultcaseSettings", "LoggingSettings", "RetrySettings",
    "get_settings", "clear_settings_cache",
]
