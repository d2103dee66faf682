"""
Fetch Facade - HTTP requests with retry and timeout orchestration.

A small facade for calling a backend API: one executor that issues a
request, plus composable retry sessions and timeout races around it.
"""

from .clients import BaseExecutor, HttpExecutor, RequestParams, quote
from .exceptions import (
    FetchError,
    NetworkError,
    ConnectionError,
    HTTPStatusError,
    InvalidResponseError,
    TimeoutError,
)
from .retry import (
    PollingDriver,
    RetryOptions,
    RetrySession,
    async_with_retry,
    fetch_with_retry,
    fetch_with_timeout,
    retryable_only,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Clients
    "BaseExecutor",
    "HttpExecutor",
    "RequestParams",
    "quote",
    # Exceptions
    "FetchError",
    "NetworkError",
    "ConnectionError",
    "HTTPStatusError",
    "InvalidResponseError",
    "TimeoutError",
    # Retry
    "PollingDriver",
    "RetryOptions",
    "RetrySession",
    "async_with_retry",
    "fetch_with_retry",
    "fetch_with_timeout",
    "retryable_only",
]
