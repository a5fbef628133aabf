"""
Caller-side retry utilities.

Components make exactly one provider call per attempt. Callers that want
retries wrap a whole operation with retry_operation(), which backs off
exponentially and only retries error kinds marked retryable.
"""

import random
import logging
import threading
from typing import Callable, Optional, Protocol, TypeVar

from .exceptions import MediaGenerationError, OperationCancelledError, normalize_error

T = TypeVar("T")


class RetryConfig(Protocol):
    """Protocol for config objects that support retry settings."""
    retry_base_delay: float
    retry_max_delay: float
    retry_jitter_percent: float


def calculate_retry_delay(
    retry_count: int,
    base_delay: float = 2,
    max_delay: float = 60,
    jitter_percent: float = 0.2
) -> float:
    """
    Calculate exponential backoff delay with jitter.

    Args:
        retry_count: Current retry attempt number (1-indexed)
        base_delay: Initial delay in seconds
        max_delay: Maximum delay cap in seconds
        jitter_percent: Percentage of jitter to add (±)

    Returns:
        Calculated delay in seconds with jitter applied
    """
    # Exponential backoff with cap at attempt 4 (2^4 = 16x base)
    delay = min(
        base_delay * (2 ** min(retry_count - 1, 4)),
        max_delay
    )

    jitter = delay * jitter_percent * (random.random() - 0.5)
    return max(0.1, delay + jitter)


def retry_operation(
    operation: Callable[[], T],
    config: RetryConfig,
    logger: logging.Logger,
    max_attempts: int = 3,
    cancel_event: Optional[threading.Event] = None
) -> T:
    """
    Run ``operation`` until it succeeds, fails with a non-retryable error, or
    runs out of attempts.

    Args:
        operation: Zero-argument callable to run
        config: Configuration object with retry settings
        logger: Logger instance for output
        max_attempts: Total number of attempts including the first
        cancel_event: Set by the caller to abort the backoff wait

    Returns:
        The operation's result

    Raises:
        MediaGenerationError: The last normalized failure
        OperationCancelledError: If cancelled while backing off
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            return operation()
        except MediaGenerationError as e:
            error = e
        except Exception as e:
            error = normalize_error(e)

        if not error.retryable or attempt >= max_attempts:
            raise error

        delay = calculate_retry_delay(
            attempt,
            config.retry_base_delay,
            config.retry_max_delay,
            config.retry_jitter_percent
        )
        logger.warning(f"{error.kind} error: {error}. Waiting {delay:.1f}s before retry {attempt}...")

        waiter = cancel_event or threading.Event()
        if waiter.wait(delay):
            raise OperationCancelledError("Retry cancelled by caller")
