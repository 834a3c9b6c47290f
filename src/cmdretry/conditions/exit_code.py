r"""Conditions reacting to the exit code of the last attempt.

Each condition keeps only the last fed exit code: a later feed always
overrides an earlier one.
"""

from __future__ import annotations

__all__ = ["RetryOnExitCode", "StopOnExitCode", "SuccessOnExitCode"]

from typing import TYPE_CHECKING

from cmdretry.conditions.base import ConditionInfo, FeedableCondition

if TYPE_CHECKING:
    from collections.abc import Iterable


class _ExitCodeCondition(FeedableCondition):
    kind: str = "exit_code"
    label: str = "exit code"

    def __init__(self, exit_codes: Iterable[int]) -> None:
        self.exit_codes: frozenset[int] = frozenset(exit_codes)
        self.last_exit_code: int | None = None

    def feed_exit_code(self, exit_code: int) -> None:
        self.last_exit_code = exit_code

    @property
    def matched(self) -> bool:
        """Whether the last fed exit code is one of ``exit_codes``."""
        return self.last_exit_code is not None and self.last_exit_code in self.exit_codes

    def describe(self) -> ConditionInfo:
        return ConditionInfo(
            kind=self.kind,
            label=self.label,
            fields={"exit_codes": sorted(self.exit_codes), "last_exit_code": self.last_exit_code},
        )


class StopOnExitCode(_ExitCodeCondition):
    """Stop when the last attempt exited with one of the given codes.

    Args:
        exit_codes: The exit codes that stop the loop.

    Example:
        ```pycon
        >>> from cmdretry.conditions import StopOnExitCode
        >>> condition = StopOnExitCode([2, 3])
        >>> condition.feed_exit_code(2)
        >>> condition.is_reached()
        True
        >>> condition.feed_exit_code(1)
        >>> condition.is_reached()
        False

        ```
    """

    kind = "stop_on_exit_code"
    label = "exit code"

    def is_reached(self) -> bool:
        return self.matched


class SuccessOnExitCode(_ExitCodeCondition):
    """Treat the given exit codes as success.

    Args:
        exit_codes: The exit codes meaning success.

    Example:
        ```pycon
        >>> from cmdretry.conditions import SuccessOnExitCode
        >>> condition = SuccessOnExitCode([0, 3])
        >>> condition.feed_exit_code(3)
        >>> condition.is_reached()
        True

        ```
    """

    is_success_condition = True
    kind = "success_on_exit_code"
    label = "success exit code"

    def is_reached(self) -> bool:
        return self.matched


class RetryOnExitCode(_ExitCodeCondition):
    """Allow retries only while the command exits with one of the given
    codes.

    The condition is reached (the loop stops) as soon as an attempt exits
    with any other code. Before the first feed it is not reached, so the
    first attempt always runs.

    Args:
        exit_codes: The exit codes that are worth retrying.

    Example:
        ```pycon
        >>> from cmdretry.conditions import RetryOnExitCode
        >>> condition = RetryOnExitCode([75])
        >>> condition.is_reached()
        False
        >>> condition.feed_exit_code(75)
        >>> condition.is_reached()
        False
        >>> condition.feed_exit_code(1)
        >>> condition.is_reached()
        True

        ```
    """

    kind = "retry_on_exit_code"
    label = "retry exit code"

    def is_reached(self) -> bool:
        if self.last_exit_code is None:
            return False
        return not self.matched
