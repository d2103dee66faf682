"""
Retry configuration and attempt records.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Sequence

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class RetryOptions:
    """
    Configuration for retry behavior.

    Attributes:
        max_retries: Total number of attempts, 1 means call once (default: 3)
        timeouts: Delay in seconds before each retry, either a single value
            reused for every retry or one value per retry (default: 1.0)
        use_last_timeout: Reuse the last entry of `timeouts` once the
            sequence is exhausted (default: True)
    """

    max_retries: int = 3
    timeouts: float | Sequence[float] = 1.0
    use_last_timeout: bool = True

    def __post_init__(self) -> None:
        if isinstance(self.max_retries, bool) or not isinstance(self.max_retries, int):
            raise ValueError(f"max_retries must be an integer, got {self.max_retries!r}")
        if self.max_retries < 1:
            raise ValueError(f"max_retries must be >= 1, got {self.max_retries}")

        if isinstance(self.timeouts, (int, float)):
            delays: tuple[float, ...] = (float(self.timeouts),)
        else:
            self.timeouts = delays = tuple(float(t) for t in self.timeouts)
            if not delays:
                raise ValueError("timeouts must not be empty")
        if any(delay < 0 for delay in delays):
            raise ValueError(f"timeouts must be non-negative, got {self.timeouts!r}")

    def delay_for(self, attempt: int) -> float | None:
        """
        Delay before the retry that follows a failed attempt.

        Args:
            attempt: Zero-based number of the attempt that just failed

        Returns:
            Delay in seconds, or None when no delay is configured
        """
        if not isinstance(self.timeouts, tuple):
            return float(self.timeouts)
        if attempt < len(self.timeouts):
            return self.timeouts[attempt]
        if self.use_last_timeout:
            return self.timeouts[-1]
        return None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "RetryOptions":
        """
        Build options from MAX_RETRIES, API_TIMEOUTS and USE_LAST_TIMEOUT.

        Meant to be called once at startup; the result is passed down to
        whatever issues requests. Unset variables keep the defaults.
        """
        if environ is None:
            environ = os.environ

        kwargs: dict[str, Any] = {}

        max_retries = environ.get("MAX_RETRIES", "").strip()
        if max_retries:
            try:
                kwargs["max_retries"] = int(max_retries)
            except ValueError as e:
                raise ValueError(f"MAX_RETRIES must be an integer, got {max_retries!r}") from e

        timeouts = environ.get("API_TIMEOUTS", "").strip()
        if timeouts:
            try:
                values = [float(part) for part in timeouts.split(",") if part.strip()]
            except ValueError as e:
                raise ValueError(
                    f"API_TIMEOUTS must be comma separated seconds, got {timeouts!r}"
                ) from e
            kwargs["timeouts"] = values[0] if len(values) == 1 else values

        use_last = environ.get("USE_LAST_TIMEOUT", "").strip().lower()
        if use_last:
            if use_last in TRUE_VALUES:
                kwargs["use_last_timeout"] = True
            elif use_last in FALSE_VALUES:
                kwargs["use_last_timeout"] = False
            else:
                raise ValueError(f"USE_LAST_TIMEOUT must be a boolean, got {use_last!r}")

        return cls(**kwargs)

    @classmethod
    def no_retry(cls) -> "RetryOptions":
        """Preset for no retry (single attempt only)."""
        return cls(max_retries=1)


class AttemptOutcome(str, Enum):
    """Outcome of a single attempt."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class Attempt:
    """One invocation of the underlying operation within a retry session."""

    number: int
    outcome: AttemptOutcome = AttemptOutcome.PENDING
    result: Any = None
    error: BaseException | None = field(default=None, repr=False)

    def succeed(self, result: Any) -> None:
        self.outcome = AttemptOutcome.SUCCESS
        self.result = result

    def fail(self, error: BaseException) -> None:
        self.outcome = AttemptOutcome.FAILURE
        self.error = error
