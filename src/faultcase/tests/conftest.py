"""Shared fixtures for faultcase tests."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from faultcase import RetryEvent, SyncAdapter, clear_settings_cache


class RecordingAdapter(SyncAdapter):
    """Sync adapter that records requested delays instead of sleeping."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    def wait(self, delay: float, cancel: object) -> bool:
        self.delays.append(delay)
        return False


class Flaky:
    """Callable failing with `error` for the first `failures` calls, then returning `value`."""

    def __init__(self, failures: int, error: Exception | None = None, value: object = "ok") -> None:
        self.failures = failures
        self.error = error or ConnectionError("connection reset")
        self.value = value
        self.calls = 0

    def __call__(self) -> object:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return self.value


@pytest.fixture
def recorder() -> RecordingAdapter:
    return RecordingAdapter()


@pytest.fixture
def events() -> list[RetryEvent]:
    return []


@pytest.fixture(autouse=True)
def clean_settings() -> Iterator[None]:
    """Reset cached settings around each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def flaky() -> type[Flaky]:
    return Flaky
