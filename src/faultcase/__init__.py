"""faultcase - Transient fault handling for sync and async Python.

Wraps a fallible operation in a retry policy: a backoff strategy decides
when to try again, a classifier decides whether the failure is worth
retrying at all.

Quick Start:
    >>> from faultcase import ExponentialBackoff, RetryPolicy
    >>>
    >>> policy = RetryPolicy(strategy=ExponentialBackoff(retry_count=5))
    >>> data = policy.execute(lambda: fetch("https://example.com"))

Async, with cancellation:
    >>> from faultcase import CancellationToken
    >>>
    >>> token = CancellationToken()
    >>> data = await policy.execute_async(lambda: afetch(url), cancel=token)

Decorators:
    >>> from faultcase import FixedInterval, RetryPolicy, retry
    >>>
    >>> @retry(RetryPolicy(strategy=FixedInterval(retry_count=3, retry_interval=0.5)))
    ... async def afetch(url: str) -> bytes: ...

Configuration (environment):
    FAULTCASE_RETRY_RETRY_COUNT=5
    FAULTCASE_RETRY_MAX_BACKOFF=60
    FAULTCASE_LOG_FORMAT=json
"""

from __future__ import annotations

__version__ = "0.1.0"

from .foundation import (
    ConfigurationError,
    ErrorCode,
    FaultcaseSettings,
    LoggingSettings,
    NonTransientError,
    OperationError,
    RetriesExhaustedError,
    RetryCancelledError,
    RetryError,
    RetrySettings,
    classify_exception,
    clear_settings_cache,
    get_settings,
)
from .runtime import (
    DEFAULT_RETRYABLE,
    NO_RETRY,
    AsyncAdapter,
    CancellationToken,
    CatchAllClassifier,
    ErrorCodeClassifier,
    ExceptionTypeClassifier,
    ExponentialBackoff,
    FixedInterval,
    Incremental,
    JsonFormatter,
    LoggingObserver,
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
    configure_logging,
    parse_strategy,
    retry,
)

__all__ = [
    "__version__",
    # Errors
    "ErrorCode", "classify_exception",
    "RetryError", "ConfigurationError", "OperationError",
    "RetriesExhaustedError", "NonTransientError", "RetryCancelledError",
    # Config
    "FaultcaseSettings", "RetrySettings", "LoggingSettings", "get_settings", "clear_settings_cache",
    # Strategies
    "RetryCondition", "Strategy", "FixedInterval", "Incremental", "ExponentialBackoff", "parse_strategy",
    # Classifiers
    "TransientErrorClassifier", "ErrorCodeClassifier", "ExceptionTypeClassifier",
    "CatchAllClassifier", "NeverTransientClassifier", "PredicateClassifier",
    "DEFAULT_RETRYABLE", "as_classifier",
    # Policy
    "RetryPolicy", "RetryEvent", "RetryObserver", "NO_RETRY", "retry", "RetryManager",
    "SyncAdapter", "AsyncAdapter", "CancellationToken",
    # Observability
    "LoggingObserver", "JsonFormatter", "configure_logging",
]
