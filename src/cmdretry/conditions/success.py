r"""Success conditions matching the output of the last attempt.

A reached success condition overrides the failure of the attempt: the
loop ends successfully even when the command exited with an error.
"""

from __future__ import annotations

__all__ = ["SuccessContains", "SuccessRegex"]

from cmdretry.conditions.base import ConditionInfo, FeedableCondition
from cmdretry.conditions.matching import OutputMatcher


class SuccessContains(FeedableCondition):
    r"""Succeed when the output contains a pattern.

    A pattern that is not a valid regular expression is searched as a
    literal substring.

    Args:
        pattern: The regular expression or literal to search.

    Example:
        ```pycon
        >>> from cmdretry.conditions import SuccessContains
        >>> condition = SuccessContains("200 OK")
        >>> condition.feed_output("HTTP/1.1 200 OK\n", "")
        >>> condition.is_reached()
        True

        ```
    """

    is_success_condition = True

    def __init__(self, pattern: str) -> None:
        self._matcher = OutputMatcher(pattern)
        self._reached = False

    @property
    def pattern(self) -> str:
        return self._matcher.pattern

    def is_reached(self) -> bool:
        return self._reached

    def feed_output(self, stdout: str, stderr: str) -> None:
        self._reached = self._matcher.matches(stdout, stderr)

    def describe(self) -> ConditionInfo:
        return ConditionInfo(kind="success_contains", label="success pattern", fields={"pattern": self.pattern})


class SuccessRegex(SuccessContains):
    """Succeed when the output matches a regular expression.

    Args:
        pattern: The regular expression to search.

    Raises:
        InvalidPatternError: If ``pattern`` is not a valid regular
            expression.
    """

    def __init__(self, pattern: str) -> None:
        self._matcher = OutputMatcher(pattern, strict=True)
        self._reached = False

    def describe(self) -> ConditionInfo:
        return ConditionInfo(kind="success_regex", label="success regex", fields={"pattern": self.pattern})
