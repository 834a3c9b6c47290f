r"""Retry-gating conditions.

These conditions permit retries only while a trigger holds in the output
of the last attempt. They are reached, stopping the loop, as soon as an
attempt's output lacks the trigger. Before the first feed they are not
reached, so the first attempt always runs.
"""

from __future__ import annotations

__all__ = ["RetryIfContains", "RetryRegex"]

from cmdretry.conditions.base import ConditionInfo, FeedableCondition
from cmdretry.conditions.matching import OutputMatcher


class RetryIfContains(FeedableCondition):
    r"""Retry only while the output contains a pattern.

    A pattern that is not a valid regular expression is searched as a
    literal substring.

    Args:
        pattern: The regular expression or literal to search.

    Example:
        ```pycon
        >>> from cmdretry.conditions import RetryIfContains
        >>> condition = RetryIfContains("connection refused")
        >>> condition.is_reached()
        False
        >>> condition.feed_output("", "error: connection refused\n")
        >>> condition.is_reached()
        False
        >>> condition.feed_output("", "error: disk full\n")
        >>> condition.is_reached()
        True

        ```
    """

    def __init__(self, pattern: str) -> None:
        self._matcher = OutputMatcher(pattern)
        self._should_retry = True

    @property
    def pattern(self) -> str:
        return self._matcher.pattern

    def is_reached(self) -> bool:
        return not self._should_retry

    def feed_output(self, stdout: str, stderr: str) -> None:
        self._should_retry = self._matcher.matches(stdout, stderr)

    def describe(self) -> ConditionInfo:
        return ConditionInfo(kind="retry_if_contains", label="retry pattern", fields={"pattern": self.pattern})


class RetryRegex(RetryIfContains):
    """Retry only while the output matches a regular expression.

    Args:
        pattern: The regular expression to search.

    Raises:
        InvalidPatternError: If ``pattern`` is not a valid regular
            expression.
    """

    def __init__(self, pattern: str) -> None:
        self._matcher = OutputMatcher(pattern, strict=True)
        self._should_retry = True

    def describe(self) -> ConditionInfo:
        return ConditionInfo(kind="retry_regex", label="retry regex", fields={"pattern": self.pattern})
