from __future__ import annotations

import functools
import time
from typing import Any, Callable, Optional, TypeVar

import structlog

logger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class ScopedTimer:
    """Logs the wall-clock time spent inside a ``with`` block.

    The record is emitted exactly once, when the block exits, whether it
    returns normally or raises. Exceptions are never suppressed."""

    def __init__(self, label: str) -> None:
        self.label = label
        self._start: Optional[float] = None
        self.elapsed: Optional[float] = None

    def __enter__(self) -> "ScopedTimer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.stop()
        return False

    def stop(self) -> Optional[float]:
        """Emit the timing record. Calls after the first one are ignored."""
        if self._start is None or self.elapsed is not None:
            return self.elapsed
        self.elapsed = time.perf_counter() - self._start
        logger.info("timer", label=self.label, elapsed_ms=round(self.elapsed * 1000, 3))
        return self.elapsed


def timed(label: str) -> Callable[[F], F]:
    """Decorator form of ScopedTimer."""

    def decorator(fn: F) -> F:
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            with ScopedTimer(label):
                return fn(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
