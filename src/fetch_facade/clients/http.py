"""
httpx request executor.

A thin facade over httpx: builds headers, query string and JSON body,
checks the status and negotiates the response type.
"""

import json
import logging
from typing import Any

import httpx

from .base import BaseExecutor, RequestParams
from ..exceptions import (
    ConnectionError,
    HTTPStatusError,
    InvalidResponseError,
)

logger = logging.getLogger(__name__)

BODY_METHODS = {"POST", "PUT", "PATCH"}


class HttpExecutor(BaseExecutor):
    """
    Executor issuing requests with httpx.

    Features:
    - Basic auth from static credentials
    - JSON request bodies for POST/PUT/PATCH
    - Expected status checks
    - JSON/text/raw response negotiation
    """

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 30.0,
        default_headers: dict[str, str] | None = None,
    ):
        """
        Initialize the executor.

        Args:
            base_url: Prefix for relative request URLs
            timeout: Transport timeout in seconds
            default_headers: Headers sent with every request
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.default_headers = default_headers or {}

    def _build_url(self, url: str) -> str:
        if self.base_url and not url.startswith(("http://", "https://")):
            return f"{self.base_url}/{url.lstrip('/')}"
        return url

    def _build_headers(self, params: RequestParams) -> dict[str, str]:
        headers = dict(self.default_headers)
        if params.method == "GET":
            headers["Accept"] = "*/*"
        if params.json is not None:
            headers["Content-Type"] = "application/json"
        headers.update(params.headers)
        return headers

    def _build_query(self, params: RequestParams) -> dict[str, Any] | None:
        if not params.query_params:
            return None
        # Falsy values are left out of the query string entirely
        return {key: value for key, value in params.query_params.items() if value}

    def _build_body(self, params: RequestParams) -> str | None:
        if params.method not in BODY_METHODS or params.json is None:
            return None
        return json.dumps(params.json, indent=2)

    def _check_status(self, response: httpx.Response, params: RequestParams) -> None:
        """Raise HTTPStatusError when the status is not the expected one."""
        expected = params.success_status
        if (expected and response.status_code != expected) or not response.is_success:
            logger.warning(
                f"{params.method} {response.request.url} returned {response.status_code}"
                + (f", expected {expected}" if expected else "")
            )
            raise HTTPStatusError(
                f"Unexpected status {response.status_code}",
                response=response,
                expected_status=expected,
            )

    def _parse(self, response: httpx.Response, params: RequestParams) -> Any:
        content_type = response.headers.get("content-type", "").split(";")[0].strip()
        if content_type == "application/json" or params.is_json_response:
            try:
                return response.json()
            except ValueError as e:
                raise InvalidResponseError(
                    f"Response is not valid JSON: {e}",
                    status_code=response.status_code,
                    url=str(response.request.url),
                ) from e
        if params.is_text_response:
            return response.text
        return response

    async def execute(self, params: RequestParams) -> Any:
        """Issue one request and return the negotiated response payload."""
        url = self._build_url(params.url)
        auth = (params.username, params.password) if params.has_credentials else None

        try:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                response = await client.request(
                    params.method,
                    url,
                    params=self._build_query(params),
                    headers=self._build_headers(params),
                    content=self._build_body(params),
                    auth=auth,
                )
        except httpx.TimeoutException as e:
            raise ConnectionError(
                f"Request timed out after {self.timeout}s",
                url=url,
            ) from e
        except httpx.TransportError as e:
            raise ConnectionError(f"Failed to connect: {e}", url=url) from e

        self._check_status(response, params)
        return self._parse(response, params)

    async def get(
        self,
        url: str,
        *,
        query_params: dict[str, Any] | None = None,
        username: str | None = None,
        password: str | None = None,
        success_status: int | None = None,
        is_json_response: bool = True,
        is_text_response: bool = False,
    ) -> Any:
        """Execute a GET request."""
        return await self.execute(
            RequestParams.get(
                url,
                query_params=query_params,
                username=username,
                password=password,
                success_status=success_status,
                is_json_response=is_json_response,
                is_text_response=is_text_response,
            )
        )

    async def post(
        self,
        url: str,
        json: Any = None,
        *,
        query_params: dict[str, Any] | None = None,
        username: str | None = None,
        password: str | None = None,
        success_status: int | None = None,
        is_json_response: bool = True,
        is_text_response: bool = False,
    ) -> Any:
        """Execute a POST request with an optional JSON body."""
        return await self.execute(
            RequestParams.post(
                url,
                json,
                query_params=query_params,
                username=username,
                password=password,
                success_status=success_status,
                is_json_response=is_json_response,
                is_text_response=is_text_response,
            )
        )

    async def put(
        self,
        url: str,
        json: Any = None,
        *,
        query_params: dict[str, Any] | None = None,
        username: str | None = None,
        password: str | None = None,
        success_status: int | None = None,
        is_json_response: bool = True,
        is_text_response: bool = False,
    ) -> Any:
        """Execute a PUT request with an optional JSON body."""
        return await self.execute(
            RequestParams.put(
                url,
                json,
                query_params=query_params,
                username=username,
                password=password,
                success_status=success_status,
                is_json_response=is_json_response,
                is_text_response=is_text_response,
            )
        )
