r"""Backoff strategy following a user-provided delay sequence."""

from __future__ import annotations

__all__ = ["CustomBackoff"]

from typing import TYPE_CHECKING, Any

from cmdretry.backoff.base import BaseBackoffStrategy

if TYPE_CHECKING:
    from collections.abc import Sequence


class CustomBackoff(BaseBackoffStrategy):
    """Custom delay sequence backoff strategy.

    The delay after attempt ``n`` is ``delays[n - 1]``. Once the attempts
    outnumber the delays, the last delay is reused.

    Args:
        delays: The sequence of delays in seconds.

    Example:
        ```pycon
        >>> from cmdretry.backoff import CustomBackoff
        >>> backoff = CustomBackoff([1.0, 5.0, 30.0])
        >>> [backoff.next_delay(attempt) for attempt in range(0, 6)]
        [0.0, 1.0, 5.0, 30.0, 30.0, 30.0]

        ```
    """

    name = "custom"

    def __init__(self, delays: Sequence[float]) -> None:
        for delay in delays:
            if delay < 0:
                msg = f"delays must be non-negative, got {delay}"
                raise ValueError(msg)

        self.delays: tuple[float, ...] = tuple(delays)

    def next_delay(self, attempt: int) -> float:
        """Return the delay at position ``attempt`` of the sequence.

        Args:
            attempt: The number of attempts made so far (1-indexed).

        Returns:
            The delay for this attempt, the last delay when the sequence
            is exhausted, or 0.0 when ``attempt <= 0`` or there are no
            delays.
        """
        if attempt <= 0 or not self.delays:
            return 0.0
        index = min(attempt, len(self.delays)) - 1
        return self.delays[index]

    def describe(self) -> dict[str, Any]:
        return {"strategy": self.name, "delays": list(self.delays)}
