r"""Conditions stopping the loop based on the output of the last attempt."""

from __future__ import annotations

__all__ = ["FailIfContains", "StopOnOutputPattern"]

from cmdretry.conditions.base import ConditionInfo, FeedableCondition
from cmdretry.conditions.matching import OutputMatcher


class StopOnOutputPattern(FeedableCondition):
    r"""Stop when the output does, or does not, contain a pattern.

    The pattern is searched in the concatenation of stdout and stderr. A
    pattern that is not a valid regular expression is searched as a
    literal substring.

    Args:
        pattern: The regular expression or literal to search.
        want_contains: ``True`` to stop when the pattern is found,
            ``False`` to stop when it is absent.

    Example:
        ```pycon
        >>> from cmdretry.conditions import StopOnOutputPattern
        >>> condition = StopOnOutputPattern.contains("ready")
        >>> condition.feed_output("server ready\n", "")
        >>> condition.is_reached()
        True
        >>> condition = StopOnOutputPattern.not_contains("retrying")
        >>> condition.feed_output("done\n", "")
        >>> condition.is_reached()
        True

        ```
    """

    def __init__(self, pattern: str, want_contains: bool = True) -> None:
        self._matcher = OutputMatcher(pattern)
        self.want_contains = want_contains
        self.last_stdout = ""
        self.last_stderr = ""
        self._reached = False

    @classmethod
    def contains(cls, pattern: str) -> StopOnOutputPattern:
        """Create a condition stopping when the output contains
        ``pattern``."""
        return cls(pattern, want_contains=True)

    @classmethod
    def not_contains(cls, pattern: str) -> StopOnOutputPattern:
        """Create a condition stopping when the output does not contain
        ``pattern``."""
        return cls(pattern, want_contains=False)

    @property
    def pattern(self) -> str:
        return self._matcher.pattern

    def is_reached(self) -> bool:
        return self._reached

    def feed_output(self, stdout: str, stderr: str) -> None:
        self.last_stdout = stdout
        self.last_stderr = stderr
        self._reached = self._matcher.matches(stdout, stderr) == self.want_contains

    def describe(self) -> ConditionInfo:
        return ConditionInfo(
            kind="output_pattern",
            label="output pattern",
            fields={"pattern": self.pattern, "want_contains": self.want_contains},
        )


class FailIfContains(FeedableCondition):
    """Stop as a hard failure when the output contains a pattern.

    Unlike success conditions, being reached does not make the command
    successful: the loop ends with the error of the last attempt.

    Args:
        pattern: The regular expression or literal to search.
    """

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
        return ConditionInfo(kind="fail_if_contains", label="failure pattern", fields={"pattern": self.pattern})
