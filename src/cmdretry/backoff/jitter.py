r"""Jitter decorator for backoff strategies."""

from __future__ import annotations

__all__ = ["JitterBackoff"]

import logging
import random
from typing import Any

from cmdretry.backoff.base import BaseBackoffStrategy

logger: logging.Logger = logging.getLogger(__name__)

# OS entropy, so concurrent invocations started together do not draw
# correlated jitter.
_system_random = random.SystemRandom()


class JitterBackoff(BaseBackoffStrategy):
    """Backoff strategy adding random jitter to another strategy.

    The delay of the wrapped strategy is perturbed by a uniformly
    distributed value in ``[-jitter * delay, +jitter * delay]`` and
    floored at zero.

    Args:
        strategy: The wrapped backoff strategy. ``None`` always yields a
            zero delay.
        jitter: The jitter ratio, clamped to ``[0, 1]``.

    Example:
        ```pycon
        >>> from cmdretry.backoff import FixedBackoff, JitterBackoff
        >>> backoff = JitterBackoff(FixedBackoff(delay=10.0), jitter=0.1)
        >>> 9.0 <= backoff.next_delay(1) <= 11.0
        True
        >>> JitterBackoff(FixedBackoff(delay=10.0), jitter=0.0).next_delay(1)
        10.0

        ```
    """

    name = "jitter"

    def __init__(self, strategy: BaseBackoffStrategy | None, jitter: float = 0.1) -> None:
        self.strategy = strategy
        self.jitter = min(max(jitter, 0.0), 1.0)

    def next_delay(self, attempt: int) -> float:
        """Return the wrapped strategy's delay with jitter applied.

        Args:
            attempt: The number of attempts made so far (1-indexed).

        Returns:
            The jittered delay in seconds, never negative.
        """
        if self.strategy is None:
            return 0.0
        base = self.strategy.next_delay(attempt)
        if base == 0 or self.jitter == 0:
            return base

        spread = base * self.jitter
        offset = _system_random.uniform(-spread, spread)
        delay = max(base + offset, 0.0)
        logger.debug(f"Jitter applied: base={base:.3f}s, offset={offset:+.3f}s")
        return delay

    def describe(self) -> dict[str, Any]:
        wrapped = self.strategy.describe() if self.strategy is not None else None
        return {"strategy": self.name, "jitter": self.jitter, "wrapped": wrapped}
