"""Runtime - Retry execution, concurrency and observability.

Contains: retry, concurrency, observability.
"""

from __future__ import annotations

from .concurrency import CancellationToken
from .observability import JsonFormatter, LoggingObserver, configure_logging
from .retry import (
    DEFAULT_RETRYABLE,
    NO_RETRY,
    AsyncAdapter,
    CatchAllClassifier,
    ErrorCodeClassifier,
    ExceptionTypeClassifier,
    ExponentialBackoff,
    FixedInterval,
    Incremental,
    NeverTransientClassifier,
    PredicateClassifier,
    RetryCondition,
    RetryEvent,
    RetryManager,
    RetryObserver,
    RetryPolicy,
    Strategy,
    SyncAdapter,
    TransientErrorClassifier,
    as_classifier,
    parse_strategy,
    retry,
)

__all__ = [
    # Retry
    "RetryCondition", "RetryEvent", "RetryObserver",
    "Strategy", "FixedInterval", "Incremental", "ExponentialBackoff", "parse_strategy",
    "TransientErrorClassifier", "ErrorCodeClassifier", "ExceptionTypeClassifier",
    "CatchAllClassifier", "NeverTransientClassifier", "PredicateClassifier",
    "DEFAULT_RETRYABLE", "as_classifier",
    "RetryPolicy", "NO_RETRY", "retry", "RetryManager",
    "SyncAdapter", "AsyncAdapter",
    # Concurrency
    "CancellationToken",
    # Observability
    "JsonFormatter", "LoggingObserver", "configure_logging",
]
