"""Error codes and the retry error taxonomy.

Provides error codes used for transient/permanent classification and the
exceptions surfaced by retry policies:

- ConfigurationError: invalid strategy/policy parameters (construction time)
- OperationError: a failure of the retried operation, chained to the original
- RetriesExhaustedError: the retry budget ran out
- NonTransientError: the classifier rejected a retry
- RetryCancelledError: cancellation was observed while waiting
"""

from __future__ import annotations

from enum import StrEnum
from functools import lru_cache
from typing import TYPE_CHECKING, Self

if TYPE_CHECKING:
    from pydantic import ValidationError


class ErrorCode(StrEnum):
    """Standard error codes for operation failures.

    Used for programmatic error handling and retry decisions.
    """
    API_KEY_MISSING = "API_KEY_MISSING"
    API_KEY_INVALID = "API_KEY_INVALID"
    RATE_LIMITED = "RATE_LIMITED"
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    INVALID_PARAMS = "INVALID_PARAMS"
    PARSE_ERROR = "PARSE_ERROR"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    NOT_FOUND = "NOT_FOUND"
    UNKNOWN = "UNKNOWN"


# Built-in exception families checked before name/message patterns
_TYPE_CODES: tuple[tuple[type[BaseException], ErrorCode], ...] = (
    (TimeoutError, ErrorCode.TIMEOUT),
    (ConnectionError, ErrorCode.NETWORK_ERROR),
    (PermissionError, ErrorCode.PERMISSION_DENIED),
    (FileNotFoundError, ErrorCode.NOT_FOUND),
)

# Flattened pattern -> code mapping, ordered for priority
_PATTERN_CODES: dict[str, ErrorCode] = {
    "timeout": ErrorCode.TIMEOUT,
    "timed out": ErrorCode.TIMEOUT,
    "connection": ErrorCode.NETWORK_ERROR,
    "network": ErrorCode.NETWORK_ERROR,
    "unavailable": ErrorCode.NETWORK_ERROR,
    "throttl": ErrorCode.RATE_LIMITED,
    "ratelimit": ErrorCode.RATE_LIMITED,
    "rate limit": ErrorCode.RATE_LIMITED,
    "too many requests": ErrorCode.RATE_LIMITED,
    "auth": ErrorCode.API_KEY_INVALID,
    "permission": ErrorCode.PERMISSION_DENIED,
    "forbidden": ErrorCode.PERMISSION_DENIED,
    "parse": ErrorCode.PARSE_ERROR,
    "json": ErrorCode.PARSE_ERROR,
    "decode": ErrorCode.PARSE_ERROR,
    "validation": ErrorCode.INVALID_PARAMS,
    "notfound": ErrorCode.NOT_FOUND,
}
_PATTERN_KEYS = tuple(_PATTERN_CODES.keys())


@lru_cache(maxsize=256)
def _classify_cached(exc_key: str) -> ErrorCode:
    """Cached classification by exception signature."""
    haystack = exc_key.lower()
    for pattern in _PATTERN_KEYS:
        if pattern in haystack:
            return _PATTERN_CODES[pattern]
    return ErrorCode.UNKNOWN


def classify_exception(exc: BaseException) -> ErrorCode:
    """Map exception to error code via type families, then name/message patterns.

    Exceptions matching nothing are UNKNOWN.
    """
    for exc_type, code in _TYPE_CODES:
        if isinstance(exc, exc_type):
            return code
    return _classify_cached(f"{type(exc).__name__} {exc}")


class RetryError(Exception):
    """Base class for every error raised by faultcase."""


class ConfigurationError(RetryError):
    """Invalid strategy or policy parameters. Raised at construction, never at call time."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        self.field = field
        super().__init__(f"{field}: {message}" if field else message)

    @classmethod
    def from_validation_error(cls, exc: ValidationError, *, title: str | None = None) -> Self:
        """Summarize a pydantic ValidationError, keeping the first offending field."""
        errors = exc.errors(include_url=False)
        locs = [".".join(str(p) for p in e["loc"]) for e in errors]
        detail = "; ".join(f"{loc or '<root>'}: {e['msg']}" for loc, e in zip(locs, errors))
        err = cls(f"invalid {title or exc.title}: {detail}")
        err.field = locs[0] if locs and locs[0] else None
        return err


class OperationError(RetryError):
    """A failure of the retried operation.

    Attributes:
        error: The exception raised by the operation
        attempt: 0-indexed attempt number that produced the failure
    """

    __slots__ = ("error", "attempt")

    def __init__(self, error: BaseException, attempt: int) -> None:
        self.error = error
        self.attempt = attempt
        super().__init__(f"attempt {attempt + 1} failed: {type(error).__name__}: {error}")
        self.__cause__ = error

    @property
    def code(self) -> ErrorCode:
        return classify_exception(self.error)


class RetriesExhaustedError(RetryError):
    """The retry budget was reached without success.

    Carries the final OperationError both as `last_error` and as `__cause__`.
    """

    def __init__(self, last_error: OperationError, attempts: int) -> None:
        self.last_error = last_error
        self.attempts = attempts
        super().__init__(f"Retries exhausted after {attempts} attempt(s): {last_error.error}")


class NonTransientError(RetryError):
    """The classifier reported the failure as non-transient; no retry attempted."""

    def __init__(self, last_error: OperationError) -> None:
        self.last_error = last_error
        self.attempts = last_error.attempt + 1
        super().__init__(f"Non-transient failure on attempt {self.attempts}: {last_error.error}")


class RetryCancelledError(RetryError):
    """Cancellation was requested while the policy was waiting to retry."""

    def __init__(self, last_error: OperationError | None = None, attempts: int = 0) -> None:
        self.last_error = last_error
        self.attempts = attempts
        super().__init__(f"Retry cancelled after {attempts} attempt(s)")
