"""
Fetch Facade - Retry Logic.

Polling-driven retry sessions and timeout races for request coroutines.
"""

from .config import Attempt, AttemptOutcome, RetryOptions
from .polling import PollingDriver, PollState
from .scheduler import (
    RetrySession,
    always_retry,
    async_with_retry,
    fetch_with_retry,
    retryable_only,
)
from .timeout import DEFAULT_TIMEOUT, fetch_with_timeout

__all__ = [
    "Attempt",
    "AttemptOutcome",
    "RetryOptions",
    "PollingDriver",
    "PollState",
    "RetrySession",
    "always_retry",
    "async_with_retry",
    "fetch_with_retry",
    "retryable_only",
    "DEFAULT_TIMEOUT",
    "fetch_with_timeout",
]
