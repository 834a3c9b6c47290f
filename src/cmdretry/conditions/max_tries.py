r"""Condition stopping the loop after a number of attempts."""

from __future__ import annotations

__all__ = ["StopOnMaxTries"]

from cmdretry.conditions.base import BaseCondition, ConditionInfo


class StopOnMaxTries(BaseCondition):
    """Stop once the command was tried ``max_tries`` times.

    Args:
        max_tries: The maximum number of attempts. 0 means unbounded.

    Raises:
        ValueError: If ``max_tries`` is negative.

    Example:
        ```pycon
        >>> from cmdretry.conditions import StopOnMaxTries
        >>> condition = StopOnMaxTries(2)
        >>> condition.on_try_start()
        >>> condition.is_reached()
        False
        >>> condition.on_try_start()
        >>> condition.is_reached()
        True

        ```
    """

    def __init__(self, max_tries: int) -> None:
        if max_tries < 0:
            msg = f"max_tries must be >= 0, got {max_tries}"
            raise ValueError(msg)

        self.max_tries = max_tries
        self.tries = 0

    def is_reached(self) -> bool:
        if self.max_tries == 0:
            return False
        return self.tries >= self.max_tries

    def on_try_start(self) -> None:
        self.tries += 1

    def describe(self) -> ConditionInfo:
        return ConditionInfo(
            kind="max_tries",
            label="max tries",
            fields={"max_tries": self.max_tries, "tries": self.tries},
        )
