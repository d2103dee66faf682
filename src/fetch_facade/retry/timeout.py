"""
Timeout race for a single pending operation.
"""

import asyncio
import logging
from typing import Awaitable, TypeVar

from ..exceptions import TimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT = 3.0

# Operations that lost the race keep running; hold them until they settle.
_abandoned: set[asyncio.Future] = set()


async def fetch_with_timeout(api_call: Awaitable[T], timeout: float = DEFAULT_TIMEOUT) -> T:
    """
    Fail with TimeoutError if `api_call` has not settled within `timeout`.

    The operation is not cancelled when the timer wins: it keeps running in
    the background and its eventual outcome is discarded.

    Args:
        api_call: Awaitable to race against the timer
        timeout: Time limit in seconds (default: 3.0)

    Returns:
        The operation's own result

    Raises:
        TimeoutError: If the timer fires first
        Exception: The operation's own failure, verbatim, if it settles first
    """
    if timeout < 0:
        raise ValueError(f"timeout must be non-negative, got {timeout}")

    future = asyncio.ensure_future(api_call)
    try:
        done, _ = await asyncio.wait({future}, timeout=timeout)
    except asyncio.CancelledError:
        _abandon(future)
        raise
    if future in done:
        return future.result()

    logger.warning(f"Operation did not settle within {timeout:.1f}s, abandoning it")
    _abandon(future)
    raise TimeoutError(f"Operation timed out after {timeout}s", timeout=timeout)


def _abandon(future: asyncio.Future) -> None:
    _abandoned.add(future)
    future.add_done_callback(_release)


def _release(future: asyncio.Future) -> None:
    _abandoned.discard(future)
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        logger.debug(f"Abandoned operation failed after its timeout: {exc!r}")
