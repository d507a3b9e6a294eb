"""Tests for RetryManager."""

from __future__ import annotations

import pytest

from faultcase import (
    CatchAllClassifier,
    ConfigurationError,
    ErrorCodeClassifier,
    ExponentialBackoff,
    FixedInterval,
    Incremental,
    RetryManager,
    RetrySettings,
)


@pytest.fixture
def manager() -> RetryManager:
    return RetryManager([
        FixedInterval(name="db", retry_count=3, retry_interval=0.5),
        {"kind": "incremental", "name": "queue", "retry_count": 2},
        ExponentialBackoff(name="http"),
    ], default="http")


def test_lookup_by_name(manager: RetryManager) -> None:
    assert manager.names == ("db", "queue", "http")
    assert isinstance(manager.get_strategy("queue"), Incremental)
    assert manager.get_strategy("db").retry_interval == 0.5
    assert "db" in manager
    assert "cache" not in manager


def test_default_strategy(manager: RetryManager) -> None:
    assert manager.default_name == "http"
    assert manager.get_strategy() is manager.get_strategy("http")


def test_first_strategy_is_default_when_unspecified() -> None:
    manager = RetryManager([FixedInterval(name="a"), FixedInterval(name="b")])
    assert manager.default_name == "a"


def test_unknown_name(manager: RetryManager) -> None:
    with pytest.raises(ConfigurationError):
        manager.get_strategy("cache")
    with pytest.raises(ConfigurationError):
        manager.get_policy("cache")


@pytest.mark.parametrize("strategies, default", [
    ([], None),
    ([FixedInterval()], None),
    ([FixedInterval(name="a"), Incremental(name="a")], None),
    ([FixedInterval(name="a")], "b"),
    ([{"kind": "fixed", "name": "a", "retry_count": -1}], None),
])
def test_invalid_registry(strategies: list[object], default: str | None) -> None:
    with pytest.raises(ConfigurationError):
        RetryManager(strategies, default=default)  # type: ignore[arg-type]


def test_get_policy(manager: RetryManager) -> None:
    policy = manager.get_policy("db", classifier="catch_all", observers=[print])
    assert policy.strategy is manager.get_strategy("db")
    assert isinstance(policy.classifier, CatchAllClassifier)
    assert policy.observers == (print,)
    assert policy.name == "db"

    default = manager.get_policy()
    assert isinstance(default.classifier, ErrorCodeClassifier)
    assert default.name == "http"


def test_policy_from_manager_runs(manager: RetryManager, recorder, flaky) -> None:
    op = flaky(2)
    assert manager.get_policy("db", classifier="catch_all").execute(op, adapter=recorder) == "ok"
    assert recorder.delays == [0.5, 0.5]


def test_from_settings() -> None:
    manager = RetryManager.from_settings(RetrySettings(retry_count=4, min_backoff=0.5, max_backoff=8.0))
    strategy = manager.get_strategy()
    assert manager.names == ("default",)
    assert isinstance(strategy, ExponentialBackoff)
    assert (strategy.retry_count, strategy.min_backoff, strategy.max_backoff) == (4, 0.5, 8.0)
    assert "default" in repr(manager)
