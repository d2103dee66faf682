"""
Polling driver: sequences delayed re-invocations of an attempt callback.

The driver owns the attempt counter and the pending timer of one retry
session. The callback receives the driver itself and decides after each
attempt whether to stop or schedule the next one.
"""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable

from .config import RetryOptions

logger = logging.getLogger(__name__)


class PollState(str, Enum):
    """Lifecycle states of a polling driver."""

    IDLE = "idle"
    RUNNING = "running"  # an attempt is in flight
    SCHEDULED = "scheduled"  # waiting on the inter-attempt timer
    STOPPED = "stopped"  # terminal


class PollingDriver:
    """
    Invoke an async callback repeatedly with a delay between invocations.

    Attempt 0 runs as soon as `start()` is called. Every further attempt is
    scheduled explicitly from inside the callback with `schedule_next()`, so
    attempt N+1 never starts before attempt N has reported its outcome.
    """

    def __init__(
        self,
        callback: Callable[["PollingDriver"], Awaitable[None]],
        options: RetryOptions,
    ):
        """
        Initialize the driver.

        Args:
            callback: Coroutine function called with this driver for each attempt
            options: Retry options providing the attempt budget and delays
        """
        self._callback = callback
        self._options = options
        self._attempt = 0
        self._state = PollState.IDLE
        self._timer: asyncio.TimerHandle | None = None
        self._task: asyncio.Task | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def attempt(self) -> int:
        """Zero-based number of the current attempt."""
        return self._attempt

    @property
    def state(self) -> PollState:
        return self._state

    def start(self) -> None:
        """Run attempt 0 immediately. Must be called from a running event loop."""
        if self._state is not PollState.IDLE:
            raise RuntimeError(f"Polling already started (state: {self._state.value})")
        self._loop = asyncio.get_running_loop()
        logger.debug(f"Polling started, budget of {self._options.max_retries} attempts")
        self._fire()

    def should_stop(self) -> bool:
        """Whether the current attempt is the last one allowed."""
        return self._attempt >= self._options.max_retries - 1

    def remaining_attempts(self) -> int:
        """Number of attempts still allowed after the current one."""
        return max(0, self._options.max_retries - 1 - self._attempt)

    def schedule_next(self) -> float | None:
        """
        Schedule the next attempt after the delay configured for this one.

        Returns:
            The delay in seconds, or None if nothing was scheduled. The
            driver stops itself when the budget is spent or no delay is
            configured for the current attempt.
        """
        if self._state is not PollState.RUNNING:
            return None

        if self.should_stop():
            self.stop()
            return None

        delay = self._options.delay_for(self._attempt)
        if delay is None:
            logger.warning(
                f"No delay configured after attempt {self._attempt + 1} "
                f"and use_last_timeout is off, stopping"
            )
            self.stop()
            return None

        self._timer = self._loop.call_later(delay, self._fire)
        self._attempt += 1
        self._state = PollState.SCHEDULED
        return delay

    def stop(self) -> None:
        """Cancel any pending timer. An attempt already in flight runs to completion."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._state is not PollState.STOPPED:
            logger.debug(f"Polling stopped after attempt {self._attempt + 1}")
        self._state = PollState.STOPPED

    def continue_poll(self, should_continue: bool = True) -> float | None:
        """Schedule the next attempt, or stop when `should_continue` is False."""
        if should_continue:
            return self.schedule_next()
        self.stop()
        return None

    def _fire(self) -> None:
        self._timer = None
        if self._state is PollState.STOPPED:
            return
        self._state = PollState.RUNNING
        self._task = self._loop.create_task(self._callback(self))
        self._task.add_done_callback(self._on_attempt_done)

    def _on_attempt_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            self.stop()
            return
        exc = task.exception()
        if exc is not None:
            self.stop()
            self._loop.call_exception_handler(
                {
                    "message": f"Polling callback failed on attempt {self._attempt + 1}",
                    "exception": exc,
                    "task": task,
                }
            )
