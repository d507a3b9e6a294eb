"""Unified error handling for faultcase.

- ErrorCode: Standard error codes used for transient classification
- classify_exception: Map any exception to an ErrorCode
- RetryError hierarchy: Configuration, operation and terminal retry errors
"""

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
    # Codes
    "ErrorCode", "classify_exception",
    # Taxonomy
    "RetryError", "ConfigurationError", "OperationError",
    "RetriesExhaustedError", "NonTransientError", "RetryCancelledError",
]
