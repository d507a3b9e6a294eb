"""Named strategy registry.

Resolves policies by strategy name so call sites can ask for "the database
strategy" without knowing its parameters. One strategy is the default.

Example:
    >>> manager = RetryManager([
    ...     FixedInterval(name="db", retry_count=3, retry_interval=0.5),
    ...     ExponentialBackoff(name="http"),
    ... ], default="http")
    >>> manager.get_policy("db", classifier="catch_all").execute(query)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Callable

from faultcase.foundation.config import RetrySettings, get_settings
from faultcase.foundation.errors import ConfigurationError

from .backoff import ExponentialBackoff, Strategy, parse_strategy
from .classify import TransientErrorClassifier
from .condition import RetryObserver
from .policy import RetryPolicy

logger = logging.getLogger("faultcase.retry.manager")

DEFAULT_STRATEGY_NAME = "default"

ClassifierLike = TransientErrorClassifier | Callable[[BaseException], bool] | str


class RetryManager:
    """Registry of named strategies producing ready-to-use retry policies."""

    __slots__ = ("_strategies", "_default")

    def __init__(
        self,
        strategies: Iterable[Strategy | Mapping[str, object]],
        default: str | None = None,
    ) -> None:
        self._strategies: dict[str, Strategy] = {}
        for raw in strategies:
            strategy = parse_strategy(raw)
            if not strategy.name:
                raise ConfigurationError("managed strategies must be named", field="name")
            if strategy.name in self._strategies:
                raise ConfigurationError(f"duplicate strategy name {strategy.name!r}", field="name")
            self._strategies[strategy.name] = strategy

        if not self._strategies:
            raise ConfigurationError("at least one strategy is required", field="strategies")
        if default is None:
            default = next(iter(self._strategies))
        elif default not in self._strategies:
            raise ConfigurationError(f"unknown default strategy {default!r}", field="default")
        self._default = default
        logger.debug(f"Retry manager ready: {', '.join(self._strategies)} (default: {default})")

    @classmethod
    def from_settings(cls, settings: RetrySettings | None = None) -> RetryManager:
        """Manager holding a single exponential strategy named "default", built from settings."""
        s = settings or get_settings().retry
        return cls([ExponentialBackoff(
            name=DEFAULT_STRATEGY_NAME, retry_count=s.retry_count, min_backoff=s.min_backoff,
            max_backoff=s.max_backoff, delta_backoff=s.delta_backoff, first_fast_retry=s.first_fast_retry,
        )])

    @property
    def default_name(self) -> str:
        return self._default

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._strategies)

    def get_strategy(self, name: str | None = None) -> Strategy:
        key = name or self._default
        try:
            return self._strategies[key]
        except KeyError:
            raise ConfigurationError(f"no strategy named {key!r}", field="name") from None

    def get_policy(
        self,
        name: str | None = None,
        *,
        classifier: ClassifierLike | None = None,
        observers: Iterable[RetryObserver] = (),
    ) -> RetryPolicy:
        """Policy for the named (or default) strategy. Classifier defaults to error-code classification."""
        data: dict[str, object] = {"strategy": self.get_strategy(name), "observers": tuple(observers)}
        if classifier is not None:
            data["classifier"] = classifier
        return RetryPolicy(**data)

    def __contains__(self, name: object) -> bool:
        return name in self._strategies

    def __repr__(self) -> str:
        return f"RetryManager([{', '.join(self._strategies)}], default={self._default!r})"
