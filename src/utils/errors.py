"""Error types and failure bookkeeping for the top stories cache.

Key Components:
- Exception hierarchy rooted at NewsError
- ErrorContext for timing and logging an operation
- backoff_delay for scheduling retries after failed reloads
"""

import logging
import time
from typing import Any, Optional

logger = logging.getLogger(__name__)


class NewsError(Exception):
    """Base exception for failures while loading or serving stories."""

    def __init__(self, message: str, **context: Any):
        """Initialize error with context.

        Args:
            message: Error message
            **context: Additional context information
        """
        super().__init__(message)
        self.context = context
        self.timestamp = time.time()


class TransportError(NewsError):
    """Network failure or non-2xx response from the remote API."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        **context: Any,
    ):
        super().__init__(message, **context)
        self.url = url
        self.status_code = status_code

    def __str__(self):
        base = super().__str__()
        if self.status_code is not None:
            return f"{base} (HTTP {self.status_code})"
        return base


class DecodeError(NewsError):
    """Response body is not JSON or does not have the expected shape."""

    def __init__(self, message: str, url: Optional[str] = None, **context: Any):
        super().__init__(message, **context)
        self.url = url


class DataIntegrityError(NewsError):
    """A loaded snapshot breaks the ranked list / story table invariant."""

    def __init__(self, message: str, story_id: Optional[int] = None, **context: Any):
        super().__init__(message, **context)
        self.story_id = story_id


class CacheNotLoadedError(NewsError):
    """The cache was read before any load succeeded."""


class ErrorContext:
    """Context manager that logs an operation's duration and failure.

    Usage:
        with ErrorContext("reload") as ctx:
            ctx.add_info("wanted", 30)
            ...
    """

    def __init__(self, operation: str):
        self.operation = operation
        self.info: dict[str, Any] = {}
        self.start_time: Optional[float] = None
        self.duration: float = 0.0

    def __enter__(self):
        self.start_time = time.monotonic()
        logger.debug(f"Starting operation: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.monotonic() - self.start_time if self.start_time else 0.0

        if exc_type is None:
            logger.info(
                f"Operation '{self.operation}' completed in {self.duration:.2f}s",
                extra={"context": self.info},
            )
        else:
            logger.error(
                f"Operation '{self.operation}' failed after {self.duration:.2f}s: {exc_val}",
                extra={"context": self.info, "error_type": exc_type.__name__},
            )

        return False

    def add_info(self, key: str, value: Any):
        """Add contextual information.

        Args:
            key: Information key
            value: Information value
        """
        self.info[key] = value


def backoff_delay(
    attempt: int,
    initial_delay: float,
    backoff_factor: float,
    max_delay: Optional[float] = None,
) -> float:
    """Delay before retry number ``attempt`` (1-based), growing exponentially.

    Args:
        attempt: Consecutive failure count, starting at 1
        initial_delay: Delay after the first failure in seconds
        backoff_factor: Multiplier applied per further failure
        max_delay: Upper bound on the delay; no bound when None or 0

    Returns:
        Delay in seconds

    Raises:
        ValueError: If attempt is less than 1
    """
    if attempt < 1:
        raise ValueError("attempt must be at least 1")

    delay = initial_delay * (backoff_factor ** (attempt - 1))
    if max_delay:
        delay = min(delay, max_delay)
    return delay


__all__ = [
    "NewsError",
    "TransportError",
    "DecodeError",
    "DataIntegrityError",
    "CacheNotLoadedError",
    "ErrorContext",
    "backoff_delay",
]
