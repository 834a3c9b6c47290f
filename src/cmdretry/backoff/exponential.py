r"""Exponential backoff strategy."""

from __future__ import annotations

__all__ = ["ExponentialBackoff"]

import math
import threading
from typing import Any

from cmdretry.backoff.base import BaseBackoffStrategy


class ExponentialBackoff(BaseBackoffStrategy):
    """Exponential backoff strategy.

    Calculates delay as: base_delay * (multiplier ** (attempt - 1)), with
    optional max_delay cap.

    Args:
        base_delay: The delay in seconds after the first attempt
            (default: 1.0).
        max_delay: Optional maximum delay cap in seconds. ``None`` or 0
            disables the cap.
        multiplier: The growth factor between consecutive delays. Must be
            > 1 (default: 2.0).

    Example:
        ```pycon
        >>> from cmdretry.backoff import ExponentialBackoff
        >>> backoff = ExponentialBackoff(base_delay=0.5)
        >>> backoff.next_delay(1)
        0.5
        >>> backoff.next_delay(2)
        1.0
        >>> backoff.next_delay(3)
        2.0
        >>> # With max_delay cap
        >>> backoff = ExponentialBackoff(base_delay=1.0, max_delay=5.0)
        >>> backoff.next_delay(10)  # Would be 512.0, but capped
        5.0

        ```
    """

    name = "exponential"

    def __init__(
        self,
        base_delay: float = 1.0,
        max_delay: float | None = None,
        multiplier: float = 2.0,
    ) -> None:
        if base_delay < 0:
            msg = f"base_delay must be non-negative, got {base_delay}"
            raise ValueError(msg)
        if max_delay is not None and max_delay < 0:
            msg = f"max_delay must be non-negative if specified, got {max_delay}"
            raise ValueError(msg)
        if multiplier <= 1:
            msg = f"multiplier must be > 1, got {multiplier}"
            raise ValueError(msg)

        self.base_delay = base_delay
        self.max_delay = max_delay
        self.multiplier = multiplier

    def next_delay(self, attempt: int) -> float:
        """Calculate exponential backoff delay.

        Args:
            attempt: The number of attempts made so far (1-indexed).

        Returns:
            The calculated delay: base_delay * (multiplier ** (attempt - 1)),
            capped at max_delay if set. A delay too large to represent is
            clamped to max_delay, or to ``threading.TIMEOUT_MAX`` when
            uncapped.
        """
        if attempt <= 0:
            return self.base_delay
        try:
            delay = self.base_delay * (self.multiplier ** (attempt - 1))
        except OverflowError:
            delay = math.inf if self.base_delay > 0 else 0.0

        if self.max_delay and delay > self.max_delay:
            return self.max_delay
        return min(delay, threading.TIMEOUT_MAX)

    def describe(self) -> dict[str, Any]:
        return {
            "strategy": self.name,
            "base_delay": self.base_delay,
            "max_delay": self.max_delay,
            "multiplier": self.multiplier,
        }
