r"""Conditions bounding the total running time of the retry loop.

Both conditions own a deadline lifetime created at construction. When
the deadline expires the lifetime ends, which kills the attempt in
flight and interrupts the backoff sleep.
"""

from __future__ import annotations

__all__ = ["StopOnMaxExecutionTime", "StopOnTimeout"]

import time

from cmdretry.conditions.base import BaseCondition, ConditionInfo
from cmdretry.lifetime import Lifetime


class StopOnMaxExecutionTime(BaseCondition):
    """Stop once ``max_execution_time`` seconds elapsed since construction.

    The condition is reached exactly when its deadline lifetime ended,
    whether by expiry or by ``cancel``.

    Args:
        max_execution_time: The time budget in seconds.

    Raises:
        ValueError: If ``max_execution_time`` is negative.

    Example:
        ```pycon
        >>> from cmdretry.conditions import StopOnMaxExecutionTime
        >>> condition = StopOnMaxExecutionTime(60.0)
        >>> condition.is_reached()
        False
        >>> condition.cancel()
        >>> condition.is_reached()
        True

        ```
    """

    def __init__(self, max_execution_time: float) -> None:
        if max_execution_time < 0:
            msg = f"max_execution_time must be >= 0, got {max_execution_time}"
            raise ValueError(msg)

        self.max_execution_time = max_execution_time
        self.tries = 0
        self._lifetime = Lifetime(timeout=max_execution_time)

    @property
    def lifetime(self) -> Lifetime:
        return self._lifetime

    def is_reached(self) -> bool:
        return self._lifetime.done()

    def on_try_start(self) -> None:
        self.tries += 1

    def cancel(self) -> None:
        """Release the deadline early."""
        self._lifetime.cancel()

    def describe(self) -> ConditionInfo:
        return ConditionInfo(
            kind="max_execution_time",
            label="max execution time",
            fields={"max_execution_time": self.max_execution_time},
        )


class StopOnTimeout(BaseCondition):
    """Stop once ``timeout`` seconds elapsed since construction.

    Elapsed time is measured on the monotonic clock. The condition is also
    reached when its lifetime ended early through ``cancel``.

    Args:
        timeout: The timeout in seconds.

    Raises:
        ValueError: If ``timeout`` is negative.

    Example:
        ```pycon
        >>> from cmdretry.conditions import StopOnTimeout
        >>> StopOnTimeout(60.0).is_reached()
        False
        >>> StopOnTimeout(0.0).is_reached()
        True

        ```
    """

    def __init__(self, timeout: float) -> None:
        if timeout < 0:
            msg = f"timeout must be >= 0, got {timeout}"
            raise ValueError(msg)

        self.timeout = timeout
        self._start_time = time.monotonic()
        self._lifetime = Lifetime(timeout=timeout)

    @property
    def lifetime(self) -> Lifetime:
        return self._lifetime

    @property
    def elapsed(self) -> float:
        """Seconds elapsed since construction."""
        return time.monotonic() - self._start_time

    def is_reached(self) -> bool:
        return self.elapsed >= self.timeout or self._lifetime.done()

    def cancel(self) -> None:
        """Release the deadline early."""
        self._lifetime.cancel()

    def describe(self) -> ConditionInfo:
        return ConditionInfo(kind="timeout", label="timeout", fields={"timeout": self.timeout})
