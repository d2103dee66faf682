"""
Fetch Facade - Request Executors.

Issue one HTTP request and return a result or raise a failure.
"""

from .base import BaseExecutor, RequestParams, quote
from .http import HttpExecutor

__all__ = [
    "BaseExecutor",
    "RequestParams",
    "quote",
    "HttpExecutor",
]
