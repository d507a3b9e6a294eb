"""Retry policies for transient faults.

Wraps any fallible operation, sync or async, and re-executes it according
to a backoff strategy until it succeeds, the budget runs out, or a failure
is classified as permanent.

Example:
    >>> from faultcase import ExponentialBackoff, ExceptionTypeClassifier, RetryPolicy
    >>>
    >>> policy = RetryPolicy(
    ...     strategy=ExponentialBackoff(retry_count=5, min_backoff=0.5, max_backoff=10.0, delta_backoff=1.0),
    ...     classifier=ExceptionTypeClassifier(ConnectionError, TimeoutError),
    ... )
    >>> rows = policy.execute(lambda: db.fetch_all("select 1"))
    >>> page = await policy.execute_async(lambda: client.get("/status"))
"""

from .adapters import AsyncAdapter, SyncAdapter
from .backoff import (
    DEFAULT_DELTA_BACKOFF,
    DEFAULT_MAX_BACKOFF,
    DEFAULT_MIN_BACKOFF,
    DEFAULT_RETRY_COUNT,
    ExponentialBackoff,
    FixedInterval,
    Incremental,
    Strategy,
    parse_strategy,
)
from .classify import (
    DEFAULT_RETRYABLE,
    CatchAllClassifier,
    ErrorCodeClassifier,
    ExceptionTypeClassifier,
    NeverTransientClassifier,
    PredicateClassifier,
    TransientErrorClassifier,
    as_classifier,
)
from .condition import RetryCondition, RetryEvent, RetryObserver
from .manager import RetryManager
from .policy import NO_RETRY, RetryPolicy, retry

__all__ = [
    # Decisions
    "RetryCondition", "RetryEvent", "RetryObserver",
    # Backoff strategies
    "Strategy", "FixedInterval", "Incremental", "ExponentialBackoff", "parse_strategy",
    "DEFAULT_RETRY_COUNT", "DEFAULT_MIN_BACKOFF", "DEFAULT_MAX_BACKOFF", "DEFAULT_DELTA_BACKOFF",
    # Classifiers
    "TransientErrorClassifier", "ErrorCodeClassifier", "ExceptionTypeClassifier",
    "CatchAllClassifier", "NeverTransientClassifier", "PredicateClassifier",
    "DEFAULT_RETRYABLE", "as_classifier",
    # Policy
    "RetryPolicy", "NO_RETRY", "retry", "RetryManager",
    # Execution
    "SyncAdapter", "AsyncAdapter",
]
