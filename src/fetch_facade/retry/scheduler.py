"""
Retry scheduling: turn a single-shot coroutine function into a retrying one.

The caller awaits one outcome no matter how many attempts ran underneath.
Every failure is retryable by default until the attempt budget is spent;
pass `is_retryable` to classify failures differently.
"""

import asyncio
import dataclasses
import functools
import logging
from typing import Any, Awaitable, Callable, Generic, ParamSpec, TypeVar

from .config import Attempt, RetryOptions
from .polling import PollingDriver
from ..exceptions import FetchError

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")
A = TypeVar("A")

RetryPredicate = Callable[[Exception], bool]
RetryCallback = Callable[[int, Exception, float], None]


def always_retry(exc: Exception) -> bool:
    """Treat every failure as retryable."""
    return True


def retryable_only(exc: Exception) -> bool:
    """Retry only fetch errors flagged as retryable."""
    return isinstance(exc, FetchError) and exc.retryable


class RetrySession(Generic[A, T]):
    """
    One logical call from its first attempt to its terminal outcome.

    The outcome is a single future, so the session settles exactly once
    however many attempts it takes.
    """

    def __init__(
        self,
        api_func: Callable[[A], Awaitable[T]],
        api_params: A,
        options: RetryOptions,
        *,
        is_retryable: RetryPredicate | None = None,
        on_retry: RetryCallback | None = None,
    ):
        self.api_func = api_func
        self.api_params = api_params
        self.options = options
        self.is_retryable = is_retryable or always_retry
        self.on_retry = on_retry
        self.attempts: list[Attempt] = []
        self._outcome: asyncio.Future | None = None

    async def run(self) -> T:
        """Start polling and wait for the terminal outcome."""
        if self._outcome is not None:
            raise RuntimeError("Retry session already ran")

        self._outcome = asyncio.get_running_loop().create_future()
        driver = PollingDriver(self._attempt, self.options)
        driver.start()
        try:
            return await self._outcome
        finally:
            # Also reached when the caller is cancelled: no further attempts.
            driver.stop()

    async def _attempt(self, driver: PollingDriver) -> None:
        attempt = Attempt(number=driver.attempt)
        self.attempts.append(attempt)

        try:
            result = await self.api_func(self.api_params)
        except asyncio.CancelledError:
            driver.stop()
            self._outcome.cancel()
            raise
        except Exception as e:
            attempt.fail(e)
            try:
                self._handle_failure(driver, e)
            except BaseException as hook_error:
                # A raising is_retryable or on_retry ends the session with its error
                self._abort(driver, hook_error)
                if not isinstance(hook_error, Exception):
                    raise
            return
        except BaseException as e:
            attempt.fail(e)
            self._abort(driver, e)
            raise

        attempt.succeed(result)
        driver.stop()
        if not self._outcome.cancelled():
            self._outcome.set_result(result)

    def _abort(self, driver: PollingDriver, exc: BaseException) -> None:
        driver.stop()
        if not self._outcome.done():
            self._outcome.set_exception(exc)

    def _handle_failure(self, driver: PollingDriver, exc: Exception) -> None:
        if self._outcome.cancelled():
            driver.stop()
            return

        number = driver.attempt + 1
        max_retries = self.options.max_retries

        if not self.is_retryable(exc):
            logger.info(f"Attempt {number}/{max_retries} failed with non-retryable error: {exc}")
            driver.stop()
            self._outcome.set_exception(exc)
            return

        if driver.should_stop():
            logger.error(f"All {max_retries} attempts exhausted: {exc}")
            driver.stop()
            self._outcome.set_exception(exc)
            return

        # Notify before scheduling so a failing hook leaves no timer behind
        delay = self.options.delay_for(driver.attempt)
        if delay is not None:
            if self.on_retry:
                self.on_retry(number - 1, exc, delay)
            else:
                logger.warning(
                    f"Retry {number}/{max_retries - 1}: {exc}, waiting {delay:.1f}s"
                )

        if driver.schedule_next() is None:
            self._outcome.set_exception(exc)


async def fetch_with_retry(
    api_func: Callable[[A], Awaitable[T]],
    api_params: A,
    options: RetryOptions | None = None,
    *,
    is_retryable: RetryPredicate | None = None,
    on_retry: RetryCallback | None = None,
    **overrides: Any,
) -> T:
    """
    Call `api_func(api_params)` with automatic retry.

    Drop-in replacement for awaiting `api_func(api_params)` directly. With
    `max_retries == 1` the function is awaited once and its outcome is
    returned unchanged.

    Args:
        api_func: Coroutine function issuing one request
        api_params: Parameters passed to every attempt
        options: Retry options (default: RetryOptions())
        is_retryable: Predicate deciding whether a failure may be retried
            (default: every failure is retryable)
        on_retry: Optional callback(attempt, exception, delay) called before each retry
        **overrides: RetryOptions fields overriding `options` for this call

    Returns:
        The result of the first successful attempt

    Raises:
        The failure of the last attempt, verbatim
    """
    if options is None:
        options = RetryOptions()
    if overrides:
        options = dataclasses.replace(options, **overrides)

    if options.max_retries == 1:
        return await api_func(api_params)

    session = RetrySession(
        api_func,
        api_params,
        options,
        is_retryable=is_retryable,
        on_retry=on_retry,
    )
    return await session.run()


def async_with_retry(
    options: RetryOptions | None = None,
    *,
    is_retryable: RetryPredicate | None = None,
    on_retry: RetryCallback | None = None,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """
    Decorator for async functions with retry logic.

    Args:
        options: Retry options (default: RetryOptions())
        is_retryable: Predicate deciding whether a failure may be retried
        on_retry: Optional callback(attempt, exception, delay) called before each retry

    Returns:
        Decorated async function with retry behavior
    """

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            async def call(_: None) -> T:
                return await func(*args, **kwargs)

            return await fetch_with_retry(
                call,
                None,
                options,
                is_retryable=is_retryable,
                on_retry=on_retry,
            )

        return wrapper

    return decorator
