r"""Linear backoff strategy."""

from __future__ import annotations

__all__ = ["LinearBackoff"]

from typing import Any

from cmdretry.backoff.base import BaseBackoffStrategy


class LinearBackoff(BaseBackoffStrategy):
    """Linear backoff strategy.

    Calculates delay as: base_delay + (attempt - 1) * increment, with an
    optional max_delay cap.

    Args:
        base_delay: The delay in seconds after the first attempt
            (default: 1.0).
        increment: The number of seconds added after each further attempt
            (default: 1.0).
        max_delay: Optional maximum delay cap in seconds. ``None`` or 0
            disables the cap.

    Example:
        ```pycon
        >>> from cmdretry.backoff import LinearBackoff
        >>> backoff = LinearBackoff(base_delay=1.0, increment=0.5)
        >>> backoff.next_delay(1)
        1.0
        >>> backoff.next_delay(2)
        1.5
        >>> backoff.next_delay(3)
        2.0
        >>> # With max_delay cap
        >>> backoff = LinearBackoff(base_delay=2.0, increment=2.0, max_delay=5.0)
        >>> backoff.next_delay(5)  # Would be 10.0, but capped
        5.0

        ```
    """

    name = "linear"

    def __init__(
        self,
        base_delay: float = 1.0,
        increment: float = 1.0,
        max_delay: float | None = None,
    ) -> None:
        if base_delay < 0:
            msg = f"base_delay must be non-negative, got {base_delay}"
            raise ValueError(msg)
        if increment < 0:
            msg = f"increment must be non-negative, got {increment}"
            raise ValueError(msg)
        if max_delay is not None and max_delay < 0:
            msg = f"max_delay must be non-negative if specified, got {max_delay}"
            raise ValueError(msg)

        self.base_delay = base_delay
        self.increment = increment
        self.max_delay = max_delay

    def next_delay(self, attempt: int) -> float:
        """Calculate linear backoff delay.

        Args:
            attempt: The number of attempts made so far (1-indexed).

        Returns:
            The calculated delay: base_delay + (attempt - 1) * increment,
            capped at max_delay if set.
        """
        if attempt <= 0:
            return self.base_delay
        delay = self.base_delay + (attempt - 1) * self.increment
        if self.max_delay and delay > self.max_delay:
            return self.max_delay
        return delay

    def describe(self) -> dict[str, Any]:
        return {
            "strategy": self.name,
            "base_delay": self.base_delay,
            "increment": self.increment,
            "max_delay": self.max_delay,
        }
