"""Retry policy: binds a backoff strategy and a transient error classifier.

Drives one retry loop per `execute` call:

    Idle -> Attempting -> Succeeded
                       -> Waiting -> Attempting
                       -> Failed (NonTransientError | RetriesExhaustedError)

Cancellation observed while Waiting ends the loop with RetryCancelledError.
A policy holds no per-call state, so one instance can serve any number of
concurrent executions.

Example:
    >>> policy = RetryPolicy(
    ...     strategy=FixedInterval(retry_count=5, retry_interval=0.1),
    ...     classifier=ExceptionTypeClassifier(ConnectionError),
    ... )
    >>> policy.execute(fetch_page)
    >>> await policy.execute_async(fetch_page_async)
    >>>
    >>> @policy.wrap
    ... def fetch(url: str) -> bytes: ...
"""

from __future__ import annotations

import functools
import inspect
import logging
from collections.abc import Awaitable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, ParamSpec, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from faultcase.foundation.config import RetrySettings, get_settings
from faultcase.foundation.errors import (
    ConfigurationError,
    NonTransientError,
    OperationError,
    RetriesExhaustedError,
    RetryCancelledError,
)

from .adapters import ASYNC, SYNC, AsyncAdapter, SyncAdapter
from .backoff import ExponentialBackoff, FixedInterval, Incremental, Strategy
from .classify import ErrorCodeClassifier, NeverTransientClassifier, TransientErrorClassifier, as_classifier
from .condition import RetryEvent, RetryObserver

if TYPE_CHECKING:
    from faultcase.runtime.concurrency import CancellationToken

logger = logging.getLogger("faultcase.retry")

T = TypeVar("T")
P = ParamSpec("P")


class RetryPolicy(BaseModel):
    """Retry policy for fallible operations.

    Attributes:
        strategy: Backoff strategy deciding whether and when to retry
        classifier: Decides whether a failure is transient (default: by error code)
        observers: Callables receiving a RetryEvent before every wait
    """

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,  # For classifier protocol
        extra="forbid",
        revalidate_instances="never",
    )

    strategy: Strategy = Field(default_factory=ExponentialBackoff)
    classifier: TransientErrorClassifier = Field(default_factory=ErrorCodeClassifier)
    observers: tuple[RetryObserver, ...] = Field(default=(), repr=False)

    def __init__(self, **data: object) -> None:
        try:
            super().__init__(**data)
        except ValidationError as e:
            raise ConfigurationError.from_validation_error(e, title="retry policy") from e

    @field_validator("classifier", mode="before")
    @classmethod
    def _coerce_classifier(cls, v: object) -> TransientErrorClassifier:
        """Accept predicates and classifier names."""
        return as_classifier(v)  # type: ignore[arg-type]

    # ─────────────────────────────────────────────────────────────────────
    # Construction helpers
    # ─────────────────────────────────────────────────────────────────────

    @classmethod
    def from_config(cls, data: Mapping[str, object]) -> RetryPolicy:
        """Build from plain data, e.g. {"strategy": {"kind": "fixed", ...}, "classifier": "catch_all"}."""
        return cls(**dict(data))

    @classmethod
    def default_fixed(cls, settings: RetrySettings | None = None) -> RetryPolicy:
        s = settings or get_settings().retry
        return cls(strategy=FixedInterval(
            retry_count=s.retry_count, retry_interval=s.retry_interval, first_fast_retry=s.first_fast_retry,
        ))

    @classmethod
    def default_progressive(cls, settings: RetrySettings | None = None) -> RetryPolicy:
        s = settings or get_settings().retry
        return cls(strategy=Incremental(
            retry_count=s.retry_count, initial_interval=s.retry_interval, increment=s.increment,
            first_fast_retry=s.first_fast_retry,
        ))

    @classmethod
    def default_exponential(cls, settings: RetrySettings | None = None) -> RetryPolicy:
        s = settings or get_settings().retry
        return cls(strategy=ExponentialBackoff(
            retry_count=s.retry_count, min_backoff=s.min_backoff, max_backoff=s.max_backoff,
            delta_backoff=s.delta_backoff, first_fast_retry=s.first_fast_retry,
        ))

    def add_observer(self, observer: RetryObserver) -> RetryPolicy:
        """New policy with `observer` appended."""
        return self.model_copy(update={"observers": (*self.observers, observer)})

    @property
    def name(self) -> str:
        return self.strategy.name or self.strategy.kind

    # ─────────────────────────────────────────────────────────────────────
    # Execution
    # ─────────────────────────────────────────────────────────────────────

    def execute(
        self,
        operation: Callable[[], T],
        *,
        cancel: CancellationToken | None = None,
        adapter: SyncAdapter = SYNC,
    ) -> T:
        """Run `operation`, retrying transient failures on the calling thread.

        Raises:
            NonTransientError: The classifier rejected a failure
            RetriesExhaustedError: The strategy stopped retrying
            RetryCancelledError: `cancel` fired before a retry
        """
        run = _Execution(self, cancel)
        while True:
            run.check_cancelled()
            try:
                return adapter.invoke(operation)
            except Exception as exc:
                delay = run.failed(exc)
            if adapter.wait(delay, cancel):
                raise run.cancelled()
            run.advance()

    async def execute_async(
        self,
        operation: Callable[[], Awaitable[T] | T],
        *,
        cancel: CancellationToken | None = None,
        adapter: AsyncAdapter = ASYNC,
    ) -> T:
        """Async counterpart of execute(); waits yield to the event loop."""
        run = _Execution(self, cancel)
        while True:
            run.check_cancelled()
            try:
                return await adapter.invoke(operation)
            except Exception as exc:
                delay = run.failed(exc)
            if await adapter.wait(delay, cancel):
                raise run.cancelled()
            run.advance()

    def wrap(self, fn: Callable[P, T]) -> Callable[P, T]:
        """Decorate `fn` so every call runs under this policy. Coroutine functions stay async."""
        if inspect.iscoroutinefunction(fn):
            @functools.wraps(fn)
            async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
                return await self.execute_async(lambda: fn(*args, **kwargs))
            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(fn)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return self.execute(lambda: fn(*args, **kwargs))
        return wrapper

    def _notify(self, event: RetryEvent) -> None:
        for observer in self.observers:
            try:
                observer(event)
            except Exception:
                logger.exception(f"[{self.name}] Retry observer {observer!r} failed")


@dataclass(slots=True)
class _Execution:
    """State of one execute() call. Never shared between calls."""

    policy: RetryPolicy
    cancel: CancellationToken | None
    attempt: int = 0
    last_error: OperationError | None = None

    def failed(self, exc: Exception) -> float:
        """Record a failure and return the delay before the next attempt, or raise a terminal error."""
        policy, attempt = self.policy, self.attempt
        err = self.last_error = OperationError(exc, attempt)

        if not policy.classifier.is_transient(exc):
            logger.warning(f"[{policy.name}] Attempt {attempt + 1} failed with non-transient error: {exc!r}")
            raise NonTransientError(err) from err

        condition = policy.strategy.next_delay(attempt, exc)
        if not condition.should_retry:
            logger.warning(f"[{policy.name}] Giving up after {attempt + 1} attempt(s): {exc!r}")
            raise RetriesExhaustedError(err, attempt + 1) from err

        logger.info(
            f"[{policy.name}] Retry {attempt + 1}/{policy.strategy.retry_count} "
            f"after {condition.delay:.3f}s ({err.code}: {exc})"
        )
        policy._notify(RetryEvent(attempt, exc, condition.delay, policy.strategy.name))
        return condition.delay

    def advance(self) -> None:
        self.attempt += 1
        logger.debug(f"[{self.policy.name}] Starting attempt {self.attempt + 1}")

    def check_cancelled(self) -> None:
        if self.cancel is not None and self.cancel.cancelled:
            raise self.cancelled()

    def cancelled(self) -> RetryCancelledError:
        attempts = self.last_error.attempt + 1 if self.last_error else 0
        logger.info(f"[{self.policy.name}] Cancelled after {attempts} attempt(s)")
        err = RetryCancelledError(self.last_error, attempts)
        err.__cause__ = self.last_error
        return err


# Fails on the first error without waiting
NO_RETRY = RetryPolicy(
    strategy=FixedInterval(name="no_retry", retry_count=0, retry_interval=0.0),
    classifier=NeverTransientClassifier(),
)


def retry(policy: RetryPolicy | None = None) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Decorator form of RetryPolicy.wrap; defaults to the exponential policy from settings.

    Example:
        >>> @retry(RetryPolicy(strategy=Incremental(retry_count=3)))
        ... async def fetch(url: str) -> bytes: ...
    """
    def decorator(fn: Callable[P, T]) -> Callable[P, T]:
        return (policy if policy is not None else RetryPolicy.default_exponential()).wrap(fn)
    return decorator
