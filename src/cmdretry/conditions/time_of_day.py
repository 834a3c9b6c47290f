r"""Condition stopping the loop at a wall-clock time."""

from __future__ import annotations

__all__ = ["StopAtTimeOfDay"]

import logging
import re
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from cmdretry.conditions.base import BaseCondition, ConditionInfo

if TYPE_CHECKING:
    from collections.abc import Callable

logger: logging.Logger = logging.getLogger(__name__)

_TIME_OF_DAY = re.compile(r"(\d{1,2}):(\d{2})")


def parse_time_of_day(value: str) -> tuple[int, int]:
    """Parse a ``"HH:MM"`` string.

    Args:
        value: The time of day, on a 24-hour clock.

    Returns:
        The ``(hour, minute)`` tuple.

    Raises:
        ValueError: If ``value`` is not a valid ``"HH:MM"`` time.

    Example:
        ```pycon
        >>> from cmdretry.conditions.time_of_day import parse_time_of_day
        >>> parse_time_of_day("09:30")
        (9, 30)

        ```
    """
    match = _TIME_OF_DAY.fullmatch(value)
    if match is None:
        msg = f"invalid time format (use HH:MM): {value!r}"
        raise ValueError(msg)
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        msg = f"invalid time format (use HH:MM): {value!r} is out of range"
        raise ValueError(msg)
    return hour, minute


class StopAtTimeOfDay(BaseCondition):
    """Stop once the local clock passes a given time of day.

    The deadline is the given time today, or the same time tomorrow when
    it already passed at construction.

    Args:
        time_of_day: The time of day as ``"HH:MM"`` on a 24-hour clock.
        clock: Callable returning the current local time. Defaults to
            ``datetime.now``.

    Raises:
        ValueError: If ``time_of_day`` is malformed.

    Example:
        ```pycon
        >>> from datetime import datetime
        >>> from cmdretry.conditions import StopAtTimeOfDay
        >>> now = datetime(2024, 1, 1, 18, 0)
        >>> condition = StopAtTimeOfDay("17:00", clock=lambda: now)
        >>> condition.deadline
        datetime.datetime(2024, 1, 2, 17, 0)
        >>> condition.is_reached()
        False

        ```
    """

    def __init__(self, time_of_day: str, clock: Callable[[], datetime] | None = None) -> None:
        hour, minute = parse_time_of_day(time_of_day)
        self.time_of_day = time_of_day
        self._clock = clock or datetime.now

        now = self._clock()
        deadline = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
        if deadline < now:
            deadline += timedelta(days=1)
        self.deadline = deadline
        logger.debug(f"Stop time set to {deadline.isoformat()}")

    def is_reached(self) -> bool:
        return self._clock() > self.deadline

    def describe(self) -> ConditionInfo:
        return ConditionInfo(
            kind="time_of_day",
            label="time of day",
            fields={"time_of_day": self.time_of_day, "deadline": self.deadline.isoformat()},
        )
