"""Observability - logging configuration and retry event sinks."""

from .logging import JsonFormatter, LoggingObserver, configure_logging

__all__ = ["JsonFormatter", "LoggingObserver", "configure_logging"]
