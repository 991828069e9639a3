"""Utility modules for logging and transport retry."""
from .connection import with_retry, retry_policy, RETRYABLE_EXCEPTIONS
from .logging_config import (
    setup_logging,
    timed,
    timed_section_sync,
    perf_logger,
)

__all__ = [
    "with_retry",
    "retry_policy",
    "RETRYABLE_EXCEPTIONS",
    "setup_logging",
    "timed",
    "timed_section_sync",
    "perf_logger",
]
