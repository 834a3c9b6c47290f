r"""Fixed backoff strategy."""

from __future__ import annotations

__all__ = ["FixedBackoff"]

from typing import Any

from cmdretry.backoff.base import BaseBackoffStrategy


class FixedBackoff(BaseBackoffStrategy):
    """Fixed delay backoff strategy.

    Returns the same delay after every attempt, regardless of the attempt
    number.

    Args:
        delay: The fixed delay in seconds (default: 1.0).

    Example:
        ```pycon
        >>> from cmdretry.backoff import FixedBackoff
        >>> backoff = FixedBackoff(delay=2.5)
        >>> backoff.next_delay(1)
        2.5
        >>> backoff.next_delay(10)
        2.5

        ```
    """

    name = "fixed"

    def __init__(self, delay: float = 1.0) -> None:
        if delay < 0:
            msg = f"delay must be non-negative, got {delay}"
            raise ValueError(msg)

        self.delay = delay

    def next_delay(self, attempt: int) -> float:  # noqa: ARG002
        """Return the fixed delay.

        Args:
            attempt: The number of attempts made so far (unused).

        Returns:
            The fixed delay value.
        """
        return self.delay

    def describe(self) -> dict[str, Any]:
        return {"strategy": self.name, "delay": self.delay}
