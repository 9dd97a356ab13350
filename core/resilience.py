"""
OpenBibles - Resilience Patterns

Retry with exponential backoff for the transport side of the system.
Parsing never retries; only network calls go through a RetryPolicy.
"""

from __future__ import annotations

import functools
import random
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Set, Type, TypeVar, ParamSpec

from opentelemetry import trace

T = TypeVar("T")
P = ParamSpec("P")

tracer = trace.get_tracer(__name__)


@dataclass
class RetryConfig:
    """Configuration for retry policy."""

    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 60.0
    exponential_base: float = 2.0
    jitter: bool = True
    retryable_exceptions: Set[Type[Exception]] = field(
        default_factory=lambda: {Exception}
    )
    non_retryable_exceptions: Set[Type[Exception]] = field(default_factory=set)


class RetryPolicy:
    """
    Configurable retry policy with exponential backoff.

    Usage:
        policy = RetryPolicy(RetryConfig(max_attempts=4))

        @policy.wrap
        def send_batch(...):
            ...
    """

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config or RetryConfig()
        self._sleep = sleep

    def calculate_delay(self, attempt: int) -> float:
        """Calculate delay for given attempt number."""
        delay = min(
            self.config.base_delay * (self.config.exponential_base ** attempt),
            self.config.max_delay
        )

        if self.config.jitter:
            delay *= (0.5 + random.random())

        return delay

    def is_retryable(self, exception: Exception) -> bool:
        """Check if exception should trigger retry."""
        exc_type = type(exception)

        # Check non-retryable first
        if any(issubclass(exc_type, t) for t in self.config.non_retryable_exceptions):
            return False

        return any(issubclass(exc_type, t) for t in self.config.retryable_exceptions)

    def call(self, func: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> T:
        """Invoke func, retrying retryable failures until attempts run out."""
        last_exception: Optional[Exception] = None

        for attempt in range(self.config.max_attempts):
            with tracer.start_as_current_span(f"retry.attempt_{attempt}") as span:
                span.set_attribute("retry.attempt", attempt)
                span.set_attribute("retry.max_attempts", self.config.max_attempts)

                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    last_exception = e
                    span.set_attribute("retry.exception", type(e).__name__)

                    if not self.is_retryable(e):
                        raise

                    if attempt < self.config.max_attempts - 1:
                        delay = self.calculate_delay(attempt)
                        span.set_attribute("retry.delay_seconds", delay)
                        self._sleep(delay)

        raise last_exception  # type: ignore

    def wrap(self, func: Callable[P, T]) -> Callable[P, T]:
        """Wrap function with retry logic."""

        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return self.call(func, *args, **kwargs)

        return wrapper
