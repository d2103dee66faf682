"""
Fetch Facade - Exception Hierarchy.

Custom exceptions for fetch operations with retry-awareness.
"""

from .base import (
    RETRYABLE_STATUS_CODES,
    FetchError,
    NetworkError,
    ConnectionError,
    HTTPStatusError,
    InvalidResponseError,
    TimeoutError,
)

__all__ = [
    "RETRYABLE_STATUS_CODES",
    "FetchError",
    "NetworkError",
    "ConnectionError",
    "HTTPStatusError",
    "InvalidResponseError",
    "TimeoutError",
]
