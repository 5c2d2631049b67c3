"""
Error Boundary - crash isolation for scene and animation work.

Code run inside a boundary cannot take down the caller: exceptions are
counted, logged and turned into a fallback value (optionally produced by a
fallback callable), unless the boundary is ``fail_fast``.

This module provides:
- ErrorBoundary: decorator/execute-based error isolation
"""

import logging
import traceback
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorBoundary:
    """
    Wraps functions to isolate crashes.

    Usage:
        boundary = ErrorBoundary("scene", fallback=lambda exc: None)

        @boundary.wrap
        def render_frame(clock):
            ...
    """

    def __init__(
        self,
        name: str,
        fail_fast: bool = False,
        fallback: Optional[Callable[[Exception], Any]] = None,
    ):
        """
        Initialize the error boundary.

        Args:
            name: Name used in log lines
            fail_fast: If True, re-raises the exception after recording it
            fallback: Called with the exception; its result is returned
        """
        self.name = name
        self.fail_fast = fail_fast
        self.fallback = fallback
        self.error_count = 0
        self.last_error: Optional[Exception] = None

    @property
    def tripped(self) -> bool:
        return self.last_error is not None

    def _handle(self, exc: Exception, where: str) -> Any:
        self.error_count += 1
        self.last_error = exc
        _LOGGER.error(
            "[%s] Error in %s: %s\nTraceback: %s",
            self.name,
            where,
            exc,
            traceback.format_exc(),
        )
        if self.fail_fast:
            raise exc
        if self.fallback is not None:
            return self.fallback(exc)
        return None

    def wrap(self, func: Callable[..., T]) -> Callable[..., Optional[T]]:
        """Decorator to wrap a function with error isolation."""

        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                return self._handle(e, func.__name__)

        return wrapper

    def execute(self, func: Callable[..., T], *args, **kwargs) -> Optional[T]:
        """Execute a function with error isolation."""
        try:
            return func(*args, **kwargs)
        except Exception as e:
            return self._handle(e, getattr(func, "__name__", "execution"))

    def reset(self):
        """Reset error counters."""
        self.error_count = 0
        self.last_error = None


__all__ = ["ErrorBoundary"]
