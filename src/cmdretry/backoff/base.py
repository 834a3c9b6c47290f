r"""Abstract base class for backoff strategies."""

from __future__ import annotations

__all__ = ["BaseBackoffStrategy"]

from abc import ABC, abstractmethod
from typing import Any


class BaseBackoffStrategy(ABC):
    """Abstract base class for backoff strategies.

    A backoff strategy determines how long to wait before the next
    attempt of a failed command, based on the number of attempts made so
    far. Delays are expressed in seconds.
    """

    name: str = "custom"

    @abstractmethod
    def next_delay(self, attempt: int) -> float:
        """Calculate the delay to wait after a given attempt.

        Args:
            attempt: The number of attempts made so far (1-indexed). For
                example, attempt=1 is the delay after the first failed
                attempt. Values <= 0 return the base delay.

        Returns:
            The non-negative delay in seconds before the next attempt.
        """

    def describe(self) -> dict[str, Any]:
        """Describe the strategy for logging.

        Returns:
            A dictionary with the strategy name and its parameters.
        """
        return {"strategy": self.name}

    def __repr__(self) -> str:
        params = ", ".join(f"{key}={value!r}" for key, value in self.describe().items() if key != "strategy")
        return f"{self.__class__.__qualname__}({params})"
