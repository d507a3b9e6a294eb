"""Backoff strategies for retry policies.

A closed set of tagged variants, each answering one question through
`next_delay(attempt, last_error)`: retry again, and after how long?

- FixedInterval: Same delay before every retry
- Incremental: Delay grows by a fixed increment per attempt
- ExponentialBackoff: Bounded exponential growth with +/-20% jitter

Attempt numbers are 0-indexed (first retry decision = attempt 0). Every
variant stops once `attempt >= retry_count`, and every variant honors
`first_fast_retry` by retrying immediately on attempt 0.

Durations are seconds; `datetime.timedelta` values are accepted too.

Example:
    >>> strategy = ExponentialBackoff(retry_count=3, min_backoff=1.0, max_backoff=5.0, delta_backoff=2.0)
    >>> strategy.next_delay(0)
    RetryCondition(should_retry=True, delay=1.0)
    >>> strategy.next_delay(3).should_retry
    False
    >>> parse_strategy({"kind": "fixed", "retry_count": 5, "retry_interval": 0.1})
    FixedInterval(name=None, first_fast_retry=False, kind='fixed', retry_count=5, retry_interval=0.1)
"""

from __future__ import annotations

import random
import threading
from collections.abc import Mapping
from datetime import timedelta
from typing import Annotated, Literal

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    NonNegativeFloat,
    TypeAdapter,
    ValidationError,
    model_validator,
)

from faultcase.foundation.errors import ConfigurationError

from .condition import RetryCondition

DEFAULT_RETRY_COUNT = 10
DEFAULT_RETRY_INTERVAL = 1.0
DEFAULT_RETRY_INCREMENT = 1.0
DEFAULT_MIN_BACKOFF = 1.0
DEFAULT_MAX_BACKOFF = 30.0
DEFAULT_DELTA_BACKOFF = 10.0
DEFAULT_FIRST_FAST_RETRY = False

# Past this exponent (2**attempt - 1) * jitter exceeds any representable backoff
_SATURATION_EXPONENT = 63

_local = threading.local()


def _rng() -> random.Random:
    """Per-thread jitter source; concurrent executions never share generator state."""
    rng: random.Random | None = getattr(_local, "rng", None)
    if rng is None:
        rng = _local.rng = random.Random()
    return rng


def _to_seconds(v: object) -> object:
    return v.total_seconds() if isinstance(v, timedelta) else v


def _ms(seconds: float) -> int:
    return round(seconds * 1000)


Seconds = Annotated[NonNegativeFloat, Field(allow_inf_nan=False), BeforeValidator(_to_seconds)]
RetryCount = Annotated[int, Field(ge=0)]


class _StrategyOptions(BaseModel):
    """Options shared by every strategy variant.

    Construction failures surface as ConfigurationError rather than
    pydantic's ValidationError.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        revalidate_instances="never",
    )

    name: str | None = None
    first_fast_retry: bool = DEFAULT_FIRST_FAST_RETRY

    def __init__(self, **data: object) -> None:
        try:
            super().__init__(**data)
        except ValidationError as e:
            raise ConfigurationError.from_validation_error(e, title=type(self).__name__) from e

    def _gate(self, attempt: int, retry_count: int) -> RetryCondition | None:
        """Budget and fast-retry decisions common to all variants, or None to defer."""
        if attempt >= retry_count:
            return RetryCondition.STOP
        if self.first_fast_retry and attempt == 0:
            return RetryCondition.IMMEDIATE
        return None

    def describe(self) -> dict[str, object]:
        """Plain-data view of the strategy, suitable for logs and parse_strategy()."""
        return self.model_dump()


class FixedInterval(_StrategyOptions):
    """Fixed delay between retries.

    Attributes:
        retry_count: Maximum number of retries
        retry_interval: Delay before each retry in seconds
    """

    kind: Literal["fixed"] = "fixed"
    retry_count: RetryCount = DEFAULT_RETRY_COUNT
    retry_interval: Seconds = DEFAULT_RETRY_INTERVAL

    def next_delay(self, attempt: int, last_error: BaseException | None = None) -> RetryCondition:
        if (gated := self._gate(attempt, self.retry_count)) is not None:
            return gated
        return RetryCondition(True, self.retry_interval)


class Incremental(_StrategyOptions):
    """Linearly growing delay.

    Delay = initial_interval + increment * attempt

    Attributes:
        retry_count: Maximum number of retries
        initial_interval: Delay before the first retry in seconds
        increment: Added to the delay for every subsequent retry
    """

    kind: Literal["incremental"] = "incremental"
    retry_count: RetryCount = DEFAULT_RETRY_COUNT
    initial_interval: Seconds = DEFAULT_RETRY_INTERVAL
    increment: Seconds = DEFAULT_RETRY_INCREMENT

    def next_delay(self, attempt: int, last_error: BaseException | None = None) -> RetryCondition:
        if (gated := self._gate(attempt, self.retry_count)) is not None:
            return gated
        return RetryCondition(True, self.initial_interval + self.increment * attempt)


class ExponentialBackoff(_StrategyOptions):
    """Exponential backoff with jitter, bounded by min/max.

    Delay = min(min_backoff + (2^attempt - 1) * r, max_backoff)
    where r is drawn uniformly from [0.8, 1.2] * delta_backoff (whole ms).

    Jitter keeps concurrent callers sharing a dependency from retrying in
    lockstep.

    Attributes:
        retry_count: Maximum number of retries (default: 10)
        min_backoff: Lower bound of the delay (default: 1s)
        max_backoff: Upper bound of the delay (default: 30s)
        delta_backoff: Base of the randomized exponential term (default: 10s)
    """

    kind: Literal["exponential"] = "exponential"
    retry_count: RetryCount = DEFAULT_RETRY_COUNT
    min_backoff: Seconds = DEFAULT_MIN_BACKOFF
    max_backoff: Seconds = DEFAULT_MAX_BACKOFF
    delta_backoff: Seconds = DEFAULT_DELTA_BACKOFF

    @model_validator(mode="after")
    def _check_bounds(self) -> ExponentialBackoff:
        if self.min_backoff >= self.max_backoff:
            raise ValueError(
                f"min_backoff ({self.min_backoff}) must be less than max_backoff ({self.max_backoff})"
            )
        return self

    def next_delay(self, attempt: int, last_error: BaseException | None = None) -> RetryCondition:
        if (gated := self._gate(attempt, self.retry_count)) is not None:
            return gated

        min_ms, max_ms, delta_ms = _ms(self.min_backoff), _ms(self.max_backoff), _ms(self.delta_backoff)
        r = _rng().randint(int(delta_ms * 0.8), int(delta_ms * 1.2))
        if r and attempt >= _SATURATION_EXPONENT:
            interval = max_ms
        else:
            interval = min(min_ms + (2 ** attempt - 1) * r, max_ms)
        return RetryCondition(True, interval / 1000)


Strategy = Annotated[FixedInterval | Incremental | ExponentialBackoff, Field(discriminator="kind")]
STRATEGY_TYPES: tuple[type[_StrategyOptions], ...] = (FixedInterval, Incremental, ExponentialBackoff)

_strategy_adapter: TypeAdapter[Strategy] = TypeAdapter(Strategy)


def parse_strategy(data: Strategy | Mapping[str, object]) -> Strategy:
    """Build a strategy from its tagged plain-data form.

    Raises:
        ConfigurationError: Unknown kind or invalid parameters
    """
    if isinstance(data, STRATEGY_TYPES):
        return data  # type: ignore[return-value]
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"expected a mapping or strategy, got {type(data).__name__}", field="strategy")
    try:
        return _strategy_adapter.validate_python(dict(data))
    except ValidationError as e:
        raise ConfigurationError.from_validation_error(e, title="strategy") from e
