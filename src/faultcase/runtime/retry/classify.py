"""Transient error classifiers.

A classifier answers one question about a failure: is it worth retrying?
Policies fail closed, so anything a classifier does not recognize as
transient ends the retry loop immediately.

- ErrorCodeClassifier: Maps exceptions to ErrorCode, retries transient codes (default)
- ExceptionTypeClassifier: Retries instances of the given exception types
- CatchAllClassifier: Treats every failure as transient
- NeverTransientClassifier: Treats every failure as permanent
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol, runtime_checkable

from faultcase.foundation.errors import ConfigurationError, ErrorCode, classify_exception

# Default retryable error codes - transient errors that may succeed on retry
DEFAULT_RETRYABLE: frozenset[ErrorCode] = frozenset({
    ErrorCode.RATE_LIMITED,
    ErrorCode.TIMEOUT,
    ErrorCode.NETWORK_ERROR,
})


@runtime_checkable
class TransientErrorClassifier(Protocol):
    """Protocol for transient error detection.

    Implementations must be stateless; one instance is shared by every
    concurrent execution of a policy.
    """

    def is_transient(self, error: BaseException) -> bool:
        """Whether a retry might succeed after this failure."""
        ...


@dataclass(frozen=True, slots=True)
class ErrorCodeClassifier:
    """Classify by error code.

    Built-in timeout and connection exceptions are recognized by type; other
    exceptions by name/message patterns. Unrecognized failures are UNKNOWN
    and therefore permanent unless UNKNOWN is listed as retryable.

    Attributes:
        retryable_codes: Codes treated as transient (default: rate limit, timeout, network)
    """

    retryable_codes: frozenset[ErrorCode] = DEFAULT_RETRYABLE

    def is_transient(self, error: BaseException) -> bool:
        return classify_exception(error) in self.retryable_codes


@dataclass(frozen=True, slots=True, init=False)
class ExceptionTypeClassifier:
    """Transient iff the failure is an instance of one of `types`."""

    types: tuple[type[BaseException], ...]

    def __init__(self, *types: type[BaseException]) -> None:
        if not types:
            raise ConfigurationError("at least one exception type is required", field="types")
        object.__setattr__(self, "types", types)

    def is_transient(self, error: BaseException) -> bool:
        return isinstance(error, self.types)


@dataclass(frozen=True, slots=True)
class CatchAllClassifier:
    """Every failure is transient. Retries are bounded only by the strategy."""

    def is_transient(self, error: BaseException) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class NeverTransientClassifier:
    """No failure is transient. The first failure ends execution."""

    def is_transient(self, error: BaseException) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class PredicateClassifier:
    """Adapts a plain `(error) -> bool` callable."""

    predicate: Callable[[BaseException], bool]

    def is_transient(self, error: BaseException) -> bool:
        return bool(self.predicate(error))


NAMED_CLASSIFIERS: dict[str, TransientErrorClassifier] = {
    "error_code": ErrorCodeClassifier(),
    "catch_all": CatchAllClassifier(),
    "never": NeverTransientClassifier(),
}


def as_classifier(
    obj: TransientErrorClassifier | Callable[[BaseException], bool] | str,
) -> TransientErrorClassifier:
    """Accept a classifier, a predicate, or a name from NAMED_CLASSIFIERS.

    Raises:
        ConfigurationError: Unknown name or unsupported object
    """
    if isinstance(obj, type):
        raise ConfigurationError(
            f"expected a classifier instance, got the class {obj.__name__}", field="classifier",
        )
    if isinstance(obj, TransientErrorClassifier):
        return obj
    if isinstance(obj, str):
        try:
            return NAMED_CLASSIFIERS[obj]
        except KeyError:
            known = ", ".join(sorted(NAMED_CLASSIFIERS))
            raise ConfigurationError(f"unknown classifier {obj!r} (known: {known})", field="classifier") from None
    if callable(obj):
        return PredicateClassifier(obj)
    raise ConfigurationError(f"expected a classifier or predicate, got {type(obj).__name__}", field="classifier")
