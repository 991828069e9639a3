"""Retry policy for transport calls.

Only connection-level failures are retried. A CliError is the device
answering, so retrying it would just repeat the same rejection.
"""
import logging
from typing import Any, Callable

from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..transport.base import CliError

logger = logging.getLogger(__name__)

# Failures of the connection itself
RETRYABLE_EXCEPTIONS = (
    ConnectionRefusedError,
    ConnectionResetError,
    TimeoutError,
    OSError,
    EOFError,
)


def retry_policy(
    max_attempts: int = 3,
    min_wait: float = 1,
    max_wait: float = 10,
    exceptions: tuple = RETRYABLE_EXCEPTIONS,
) -> dict[str, Any]:
    """tenacity.retry keyword arguments for the policy."""
    return {
        "stop": stop_after_attempt(max_attempts),
        "wait": wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        "retry": (
            retry_if_exception_type(exceptions)
            & retry_if_not_exception_type(CliError)
        ),
        "before_sleep": before_sleep_log(logger, logging.WARNING),
        "reraise": True,
    }


def with_retry(
    max_attempts: int = 3,
    min_wait: float = 1,
    max_wait: float = 10,
    exceptions: tuple = RETRYABLE_EXCEPTIONS,
) -> Callable[[Callable], Callable]:
    """Retry a function or coroutine on connection failures.

    The wait doubles from min_wait up to max_wait seconds. Once
    max_attempts calls have failed, the last exception propagates as is.
    """
    policy = retry_policy(max_attempts, min_wait, max_wait, exceptions)

    def decorator(func: Callable) -> Callable:
        # tenacity wraps coroutine functions with its async retrier
        return retry(**policy)(func)

    return decorator
