"""Concurrency primitives shared by the sync and async retry paths."""

from .cancel import CancellationToken

__all__ = ["CancellationToken"]
