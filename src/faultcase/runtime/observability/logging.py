"""Logging setup and a logging retry observer.

Every faultcase module logs through a standard library logger under the
"faultcase" namespace. configure_logging() attaches one handler to that
namespace honoring LoggingSettings: human-readable text for development,
JSON lines for production.

Quick Start:
    >>> from faultcase.runtime.observability import LoggingObserver, configure_logging
    >>>
    >>> configure_logging()  # FAULTCASE_LOG_LEVEL / FAULTCASE_LOG_FORMAT apply
    >>> policy = RetryPolicy(observers=(LoggingObserver(),))
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, TextIO

import orjson

from faultcase.foundation.config import LoggingSettings, get_settings
from faultcase.foundation.errors import classify_exception

if TYPE_CHECKING:
    from faultcase.runtime.retry import RetryEvent

ROOT_LOGGER = "faultcase"

_TEXT_FORMAT = "%(levelname)s %(name)s: %(message)s"
_TEXT_FORMAT_TS = "%(asctime)s " + _TEXT_FORMAT

# Attributes every LogRecord has; anything else came in through `extra=`
_RESERVED = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """One JSON object per record; `extra=` fields are merged in."""

    def __init__(self, *, include_timestamps: bool = True) -> None:
        super().__init__()
        self.include_timestamps = include_timestamps

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
        }
        if self.include_timestamps:
            payload["timestamp"] = datetime.fromtimestamp(record.created, UTC).isoformat()
        payload.update({k: v for k, v in vars(record).items() if k not in _RESERVED})
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return orjson.dumps(payload, default=str, option=orjson.OPT_NON_STR_KEYS).decode()


def configure_logging(
    settings: LoggingSettings | None = None,
    *,
    stream: TextIO | None = None,
) -> logging.Handler:
    """Attach a handler to the "faultcase" logger. Calling again replaces it."""
    s = settings or get_settings().logging
    handler = logging.StreamHandler(stream or sys.stderr)
    if s.format == "json":
        handler.setFormatter(JsonFormatter(include_timestamps=s.include_timestamps))
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT_TS if s.include_timestamps else _TEXT_FORMAT))
    handler.set_name("faultcase")

    root = logging.getLogger(ROOT_LOGGER)
    for existing in [h for h in root.handlers if h.get_name() == "faultcase"]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(s.level)
    return handler


@dataclass(frozen=True, slots=True)
class LoggingObserver:
    """Retry observer that logs each RetryEvent.

    Attributes:
        logger_name: Logger to write to (default: faultcase.retry.events)
        level: Log level for retry events (default: WARNING)
    """

    logger_name: str = "faultcase.retry.events"
    level: int = logging.WARNING

    def __call__(self, event: RetryEvent) -> None:
        logging.getLogger(self.logger_name).log(
            self.level,
            f"Retrying after {event.delay:.3f}s (attempt {event.attempt + 1} failed: {event.error!r})",
            extra={
                "attempt": event.attempt,
                "delay": event.delay,
                "error_code": classify_exception(event.error).value,
                "strategy": event.strategy,
            },
        )
