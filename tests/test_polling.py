"""Tests for the polling driver - behavior focused."""

import asyncio

import pytest
from fetch_facade.retry import PollingDriver, PollState, RetryOptions


class Recorder:
    """Attempt callback that keeps polling until told otherwise."""

    def __init__(self, keep_going: bool = True):
        self.keep_going = keep_going
        self.attempts: list[int] = []
        self.times: list[float] = []
        self.finished = asyncio.Event()

    async def __call__(self, driver: PollingDriver) -> None:
        self.attempts.append(driver.attempt)
        self.times.append(asyncio.get_running_loop().time())
        if not self.keep_going or driver.schedule_next() is None:
            driver.stop()
            self.finished.set()


class TestStart:
    """Test starting the driver."""

    @pytest.mark.asyncio
    async def test_first_attempt_runs_without_delay(self):
        """Attempt 0 fires as soon as the driver starts."""
        recorder = Recorder(keep_going=False)
        driver = PollingDriver(recorder, RetryOptions(max_retries=3, timeouts=10.0))

        driver.start()
        await asyncio.wait_for(recorder.finished.wait(), timeout=1.0)

        assert recorder.attempts == [0]
        assert driver.state == PollState.STOPPED

    @pytest.mark.asyncio
    async def test_start_twice_raises(self):
        """A driver runs a single session."""
        driver = PollingDriver(Recorder(keep_going=False), RetryOptions())
        driver.start()

        with pytest.raises(RuntimeError):
            driver.start()
        driver.stop()

    def test_start_requires_running_loop(self):
        """Starting outside an event loop is an error."""
        driver = PollingDriver(Recorder(keep_going=False), RetryOptions())

        with pytest.raises(RuntimeError):
            driver.start()


class TestAttemptBudget:
    """Test should_stop and remaining_attempts."""

    def test_fresh_driver_has_full_budget(self):
        driver = PollingDriver(Recorder(), RetryOptions(max_retries=3))

        assert driver.attempt == 0
        assert driver.state == PollState.IDLE
        assert driver.should_stop() is False
        assert driver.remaining_attempts() == 2

    def test_single_attempt_budget_stops_immediately(self):
        """With max_retries=1 the first attempt is the last."""
        driver = PollingDriver(Recorder(), RetryOptions(max_retries=1))

        assert driver.should_stop() is True
        assert driver.remaining_attempts() == 0

    @pytest.mark.asyncio
    async def test_runs_exactly_max_retries_attempts(self):
        """Polling ends on its own once the budget is spent."""
        recorder = Recorder()
        driver = PollingDriver(recorder, RetryOptions(max_retries=4, timeouts=0.001))

        driver.start()
        await asyncio.wait_for(recorder.finished.wait(), timeout=1.0)

        assert recorder.attempts == [0, 1, 2, 3]
        assert driver.state == PollState.STOPPED


class TestScheduleNext:
    """Test scheduling follow-up attempts."""

    def test_idle_driver_schedules_nothing(self):
        """Only a running attempt can schedule the next one."""
        driver = PollingDriver(Recorder(), RetryOptions(max_retries=3))

        assert driver.schedule_next() is None
        assert driver.attempt == 0

    @pytest.mark.asyncio
    async def test_returns_delay_and_advances_attempt(self):
        """schedule_next reports the delay and bumps the counter."""
        seen = {}

        async def callback(driver):
            if driver.attempt == 0:
                seen["delay"] = driver.schedule_next()
                seen["attempt"] = driver.attempt
                seen["state"] = driver.state
                driver.stop()

        driver = PollingDriver(callback, RetryOptions(max_retries=3, timeouts=[0.25, 0.5]))
        driver.start()
        await asyncio.sleep(0.01)

        assert seen == {"delay": 0.25, "attempt": 1, "state": PollState.SCHEDULED}

    @pytest.mark.asyncio
    async def test_delays_follow_timeouts(self):
        """Attempts are spaced by the configured delays."""
        recorder = Recorder()
        options = RetryOptions(max_retries=3, timeouts=[0.05, 0.1], use_last_timeout=True)
        driver = PollingDriver(recorder, options)

        driver.start()
        await asyncio.wait_for(recorder.finished.wait(), timeout=2.0)

        start = recorder.times[0]
        assert recorder.times[1] - start >= 0.045
        assert recorder.times[2] - start >= 0.145

    @pytest.mark.asyncio
    async def test_exhausted_timeouts_without_reuse_stops(self):
        """Past the end of timeouts with use_last_timeout off, polling stops."""
        recorder = Recorder()
        options = RetryOptions(max_retries=5, timeouts=[0.001], use_last_timeout=False)
        driver = PollingDriver(recorder, options)

        driver.start()
        await asyncio.wait_for(recorder.finished.wait(), timeout=1.0)

        assert recorder.attempts == [0, 1]
        assert driver.state == PollState.STOPPED

    @pytest.mark.asyncio
    async def test_continue_poll_false_stops(self):
        """continue_poll(False) is the same as stop()."""

        async def callback(driver):
            driver.continue_poll(False)

        driver = PollingDriver(callback, RetryOptions(max_retries=3))
        driver.start()
        await asyncio.sleep(0.01)

        assert driver.state == PollState.STOPPED
        assert driver.attempt == 0


class TestStop:
    """Test cancellation of pending attempts."""

    @pytest.mark.asyncio
    async def test_stop_cancels_pending_timer(self):
        """A scheduled attempt never fires after stop()."""
        calls = []

        async def callback(driver):
            calls.append(driver.attempt)
            driver.schedule_next()

        driver = PollingDriver(callback, RetryOptions(max_retries=5, timeouts=0.05))
        driver.start()
        await asyncio.sleep(0.01)
        assert driver.state == PollState.SCHEDULED

        driver.stop()
        await asyncio.sleep(0.1)

        assert calls == [0]
        assert driver.state == PollState.STOPPED

    @pytest.mark.asyncio
    async def test_stop_is_idempotent(self):
        driver = PollingDriver(Recorder(keep_going=False), RetryOptions())
        driver.stop()
        driver.stop()

        assert driver.state == PollState.STOPPED

    @pytest.mark.asyncio
    async def test_stop_does_not_cancel_in_flight_attempt(self):
        """An attempt already running completes even after stop()."""
        completed = asyncio.Event()

        async def callback(driver):
            await asyncio.sleep(0.02)
            completed.set()

        driver = PollingDriver(callback, RetryOptions())
        driver.start()
        await asyncio.sleep(0)
        driver.stop()

        await asyncio.wait_for(completed.wait(), timeout=1.0)
        assert completed.is_set()


class TestCallbackFailure:
    """Test a callback that raises."""

    @pytest.mark.asyncio
    async def test_stops_and_reports_to_loop(self):
        """The error reaches the loop's exception handler and polling stops."""
        loop = asyncio.get_running_loop()
        reported = []
        loop.set_exception_handler(lambda _loop, context: reported.append(context))

        async def callback(driver):
            driver.schedule_next()
            raise RuntimeError("callback bug")

        try:
            driver = PollingDriver(callback, RetryOptions(max_retries=5, timeouts=0.05))
            driver.start()
            await asyncio.sleep(0.1)
        finally:
            loop.set_exception_handler(None)

        assert driver.state == PollState.STOPPED
        assert driver.attempt == 1
        assert isinstance(reported[0]["exception"], RuntimeError)
