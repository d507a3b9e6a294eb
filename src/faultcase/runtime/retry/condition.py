"""Retry decisions and the notifications emitted while retrying."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, ClassVar

from faultcase.foundation.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class RetryCondition:
    """One retry decision: whether to retry, and after how long.

    A condition that does not retry always carries a zero delay.

    Attributes:
        should_retry: Whether another attempt should be made
        delay: Seconds to wait before that attempt
    """

    should_retry: bool
    delay: float = 0.0

    STOP: ClassVar[RetryCondition]
    IMMEDIATE: ClassVar[RetryCondition]

    def __post_init__(self) -> None:
        if self.delay < 0:
            raise ConfigurationError(f"must be non-negative, got {self.delay}", field="delay")
        if not self.should_retry and self.delay:
            object.__setattr__(self, "delay", 0.0)


RetryCondition.STOP = RetryCondition(False)
RetryCondition.IMMEDIATE = RetryCondition(True, 0.0)


@dataclass(frozen=True, slots=True)
class RetryEvent:
    """Emitted once per retry, before the policy waits.

    Attributes:
        attempt: 0-indexed attempt that just failed
        error: Exception raised by that attempt
        delay: Seconds the policy is about to wait
        strategy: Name of the strategy, if it has one
    """

    attempt: int
    error: BaseException
    delay: float
    strategy: str | None = None


RetryObserver = Callable[[RetryEvent], None]
