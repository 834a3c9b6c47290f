r"""Fibonacci backoff strategy."""

from __future__ import annotations

__all__ = ["FibonacciBackoff"]

from typing import Any

from cmdretry.backoff.base import BaseBackoffStrategy


class FibonacciBackoff(BaseBackoffStrategy):
    """Fibonacci backoff strategy.

    Calculates delay as: base_delay * fib(attempt), with optional
    max_delay cap, where fib is the sequence 1, 1, 2, 3, 5, 8, 13, ...

    The sequence is extended lazily and cached, so the delay returned for
    a given attempt never changes once computed.

    Args:
        base_delay: The base delay in seconds (default: 1.0).
        max_delay: Optional maximum delay cap in seconds. ``None`` or 0
            disables the cap.

    Example:
        ```pycon
        >>> from cmdretry.backoff import FibonacciBackoff
        >>> backoff = FibonacciBackoff(base_delay=1.0)
        >>> [backoff.next_delay(attempt) for attempt in range(1, 7)]
        [1.0, 1.0, 2.0, 3.0, 5.0, 8.0]
        >>> # With max_delay cap
        >>> backoff = FibonacciBackoff(base_delay=1.0, max_delay=10.0)
        >>> backoff.next_delay(11)  # fib(11) = 89, but capped
        10.0

        ```
    """

    name = "fibonacci"

    def __init__(self, base_delay: float = 1.0, max_delay: float | None = None) -> None:
        if base_delay < 0:
            msg = f"base_delay must be non-negative, got {base_delay}"
            raise ValueError(msg)
        if max_delay is not None and max_delay < 0:
            msg = f"max_delay must be non-negative if specified, got {max_delay}"
            raise ValueError(msg)

        self.base_delay = base_delay
        self.max_delay = max_delay
        self._sequence: list[int] = [1, 1]

    def _fibonacci(self, n: int) -> int:
        """Return the nth Fibonacci number (1-indexed), extending the
        cached sequence when needed.

        Args:
            n: The position in the Fibonacci sequence (1-indexed, >= 1).

        Returns:
            The nth Fibonacci number.
        """
        while len(self._sequence) < n:
            self._sequence.append(self._sequence[-1] + self._sequence[-2])
        return self._sequence[n - 1]

    def next_delay(self, attempt: int) -> float:
        """Calculate Fibonacci backoff delay.

        Args:
            attempt: The number of attempts made so far (1-indexed).

        Returns:
            The calculated delay: base_delay * fib(attempt), capped at
            max_delay if set.
        """
        if attempt <= 0:
            return self.base_delay
        delay = self.base_delay * self._fibonacci(attempt)
        if self.max_delay and delay > self.max_delay:
            return self.max_delay
        return delay

    def describe(self) -> dict[str, Any]:
        return {"strategy": self.name, "base_delay": self.base_delay, "max_delay": self.max_delay}
