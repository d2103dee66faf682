"""
Base exception classes for fetch operations.

Each exception includes a `retryable` flag indicating whether the request
can be safely retried with the same parameters.
"""

from typing import Any

import httpx

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class FetchError(Exception):
    """Base exception for all fetch errors."""

    def __init__(
        self,
        message: str,
        *,
        retryable: bool = False,
        status_code: int | None = None,
        url: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.retryable = retryable
        self.status_code = status_code
        self.url = url

    def __str__(self) -> str:
        parts = [self.message]
        if self.url:
            parts.insert(0, f"[{self.url}]")
        if self.status_code:
            parts.append(f"(status: {self.status_code})")
        return " ".join(parts)


class NetworkError(FetchError):
    """Raised when the underlying request fails. Retryable unless stated otherwise."""

    def __init__(self, message: str = "Request failed", *, retryable: bool = True, **kwargs):
        super().__init__(message, retryable=retryable, **kwargs)


class ConnectionError(NetworkError):
    """Raised when the server cannot be reached. Usually retryable."""

    def __init__(self, message: str = "Connection failed", **kwargs):
        super().__init__(message, retryable=True, **kwargs)


class HTTPStatusError(NetworkError):
    """
    Raised when the response status is not the expected one.

    Carries the response so callers can read structured error bodies.
    Retryable for rate limiting and server errors only.
    """

    def __init__(
        self,
        message: str = "Unexpected status",
        *,
        response: httpx.Response | None = None,
        expected_status: int | None = None,
        **kwargs,
    ):
        if response is not None:
            kwargs.setdefault("status_code", response.status_code)
            kwargs.setdefault("url", str(response.request.url))
        kwargs.setdefault(
            "retryable", kwargs.get("status_code") in RETRYABLE_STATUS_CODES
        )
        super().__init__(message, **kwargs)
        self.response = response
        self.expected_status = expected_status

    @property
    def headers(self) -> httpx.Headers:
        if self.response is None:
            return httpx.Headers()
        return self.response.headers

    @property
    def text(self) -> str:
        return self.response.text if self.response is not None else ""

    def json(self) -> Any:
        """Parse the error body as JSON. Returns None when there is no response."""
        if self.response is None:
            return None
        return self.response.json()


class InvalidResponseError(NetworkError):
    """Raised when a response body cannot be parsed. Not retryable."""

    def __init__(self, message: str = "Invalid response body", **kwargs):
        super().__init__(message, retryable=False, **kwargs)


class TimeoutError(FetchError):
    """Raised when an operation does not settle in time. Retryable."""

    def __init__(
        self,
        message: str = "Operation timed out",
        *,
        timeout: float | None = None,
        **kwargs,
    ):
        super().__init__(message, retryable=True, **kwargs)
        self.timeout = timeout
