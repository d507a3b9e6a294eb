"""Tests for settings and logging setup."""

from __future__ import annotations

import io
import logging
import sys
from collections.abc import Iterator

import orjson
import pytest

from faultcase import (
    ConfigurationError,
    FixedInterval,
    JsonFormatter,
    LoggingObserver,
    LoggingSettings,
    RetryEvent,
    RetryManager,
    RetryPolicy,
    RetrySettings,
    configure_logging,
    get_settings,
    retry,
)
from faultcase.runtime.observability.logging import ROOT_LOGGER


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger(ROOT_LOGGER)
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


# ═════════════════════════════════════════════════════════════════════════════
# Settings
# ═════════════════════════════════════════════════════════════════════════════


def test_defaults() -> None:
    settings = get_settings()
    assert settings.retry.retry_count == 10
    assert settings.retry.max_backoff == 30.0
    assert settings.logging.level == "INFO"
    assert not settings.is_production


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FAULTCASE_RETRY_RETRY_COUNT", "3")
    monkeypatch.setenv("FAULTCASE_RETRY_FIRST_FAST_RETRY", "true")
    monkeypatch.setenv("FAULTCASE_LOG_LEVEL", "debug")
    monkeypatch.setenv("FAULTCASE_ENVIRONMENT", "Production")

    settings = get_settings()
    assert settings.retry.retry_count == 3
    assert settings.retry.first_fast_retry is True
    assert settings.logging.level == "DEBUG"
    assert settings.is_production


def test_settings_are_cached() -> None:
    assert get_settings() is get_settings()


def test_policies_pick_up_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FAULTCASE_RETRY_RETRY_COUNT", "2")
    monkeypatch.setenv("FAULTCASE_RETRY_RETRY_INTERVAL", "0.25")
    assert RetryPolicy.default_fixed().strategy == FixedInterval(retry_count=2, retry_interval=0.25)


@pytest.mark.parametrize("kwargs", [
    {"min_backoff": 5.0, "max_backoff": 5.0},
    {"retry_count": -1},
    {"delta_backoff": -0.1},
    {"max_backoff": float("inf")},
    {"retry_interval": float("nan")},
])
def test_invalid_retry_settings(kwargs: dict[str, float]) -> None:
    with pytest.raises(ConfigurationError):
        RetrySettings(**kwargs)


@pytest.mark.parametrize("name, value", [
    ("FAULTCASE_RETRY_MIN_BACKOFF", "40"),
    ("FAULTCASE_RETRY_MAX_BACKOFF", "inf"),
    ("FAULTCASE_RETRY_RETRY_COUNT", "many"),
    ("FAULTCASE_LOG_FORMAT", "xml"),
])
def test_invalid_environment_raises_configuration_error(monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)
    with pytest.raises(ConfigurationError):
        get_settings()
    with pytest.raises(ConfigurationError):
        RetryPolicy.default_exponential()
    with pytest.raises(ConfigurationError):
        RetryManager.from_settings()


def test_retry_decorator_reports_invalid_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FAULTCASE_RETRY_MIN_BACKOFF", "40")
    with pytest.raises(ConfigurationError):
        retry()(lambda: None)


# ═════════════════════════════════════════════════════════════════════════════
# Logging
# ═════════════════════════════════════════════════════════════════════════════


def test_configure_logging_text(restore_root_logger: None) -> None:
    stream = io.StringIO()
    configure_logging(LoggingSettings(level="INFO", format="text", include_timestamps=False), stream=stream)
    logging.getLogger("faultcase.retry").info("hello")
    logging.getLogger("faultcase.retry").debug("hidden")
    assert stream.getvalue() == "INFO faultcase.retry: hello\n"


def test_configure_logging_replaces_previous_handler(restore_root_logger: None) -> None:
    first = configure_logging(LoggingSettings(format="text"), stream=io.StringIO())
    second = configure_logging(LoggingSettings(format="text"), stream=io.StringIO())
    handlers = logging.getLogger(ROOT_LOGGER).handlers
    assert second in handlers
    assert first not in handlers


def test_configure_logging_json(restore_root_logger: None) -> None:
    stream = io.StringIO()
    configure_logging(LoggingSettings(format="json"), stream=stream)
    logging.getLogger("faultcase.retry").warning("giving up", extra={"attempt": 3})

    record = orjson.loads(stream.getvalue().splitlines()[-1])
    assert record["level"] == "warning"
    assert record["logger"] == "faultcase.retry"
    assert record["event"] == "giving up"
    assert record["attempt"] == 3
    assert "timestamp" in record


def test_json_formatter_includes_exceptions() -> None:
    try:
        raise ValueError("boom")
    except ValueError:
        record = logging.getLogger("x").makeRecord(
            "x", logging.ERROR, __file__, 1, "failed", None, exc_info=sys.exc_info(),
        )
    data = orjson.loads(JsonFormatter(include_timestamps=False).format(record))
    assert "ValueError: boom" in data["exc_info"]
    assert "timestamp" not in data


def test_logging_observer(caplog: pytest.LogCaptureFixture) -> None:
    observer = LoggingObserver()
    with caplog.at_level(logging.WARNING, logger="faultcase.retry.events"):
        observer(RetryEvent(attempt=1, error=TimeoutError("slow"), delay=0.5, strategy="http"))

    [record] = caplog.records
    assert record.name == "faultcase.retry.events"
    assert record.attempt == 1
    assert record.delay == 0.5
    assert record.error_code == "TIMEOUT"
    assert record.strategy == "http"
    assert "attempt 2" in record.getMessage()


def test_logging_observer_with_policy(recorder, flaky, caplog: pytest.LogCaptureFixture) -> None:
    policy = RetryPolicy(strategy=FixedInterval(retry_count=2, retry_interval=0.1), observers=(LoggingObserver(),))
    with caplog.at_level(logging.WARNING, logger="faultcase.retry.events"):
        policy.execute(flaky(1), adapter=recorder)
    assert [r.error_code for r in caplog.records if r.name == "faultcase.retry.events"] == ["NETWORK_ERROR"]
