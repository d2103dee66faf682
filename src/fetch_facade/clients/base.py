"""
Base request executor interface.

Defines the request parameters and the single capability every executor
provides: issue one HTTP request and return a result or raise a failure.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class RequestParams:
    """Parameters for a single HTTP request."""

    url: str
    method: str = "GET"
    query_params: dict[str, Any] | None = None
    username: str | None = None
    password: str | None = None
    success_status: int | None = None
    json: Any = None
    is_json_response: bool = True
    is_text_response: bool = False
    headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.method = self.method.upper()

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.password)

    @classmethod
    def get(cls, url: str, **kwargs) -> "RequestParams":
        """Create GET request parameters."""
        return cls(url=url, method="GET", **kwargs)

    @classmethod
    def post(cls, url: str, json: Any = None, **kwargs) -> "RequestParams":
        """Create POST request parameters."""
        return cls(url=url, method="POST", json=json, **kwargs)

    @classmethod
    def put(cls, url: str, json: Any = None, **kwargs) -> "RequestParams":
        """Create PUT request parameters."""
        return cls(url=url, method="PUT", json=json, **kwargs)


class BaseExecutor(ABC):
    """
    Abstract base class for request executors.

    Executors are callable, so one can be handed directly to
    `fetch_with_retry` as the function to retry.
    """

    @abstractmethod
    async def execute(self, params: RequestParams) -> Any:
        """
        Issue one request.

        Args:
            params: Request parameters

        Returns:
            Parsed JSON, text, or the raw response depending on negotiation
        """
        ...

    async def __call__(self, params: RequestParams) -> Any:
        return await self.execute(params)


def quote(value: Any) -> str:
    """Wrap a value in double quotes."""
    return f'"{value}"'
