r"""Base classes for the conditions driving the retry loop.

A condition answers one question, "has my limit been reached?", and is
notified of the attempt lifecycle. Feedable conditions additionally
receive the exit code and the captured output of each attempt.
"""

from __future__ import annotations

__all__ = ["BaseCondition", "ConditionInfo", "FeedableCondition"]

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar

from cmdretry.lifetime import BACKGROUND, Lifetime


@dataclass(frozen=True)
class ConditionInfo:
    """Description of a condition, used for logging and reporting.

    Attributes:
        kind: The kind of condition (e.g. ``"max_tries"``).
        label: A short human readable name (e.g. ``"max tries"``).
        fields: The parameters of the condition.
        children: The descriptions of nested conditions, for composites.
    """

    kind: str
    label: str
    fields: dict[str, Any] = field(default_factory=dict)
    children: tuple[ConditionInfo, ...] = ()

    def walk(self) -> list[ConditionInfo]:
        """Return this description followed by all nested descriptions,
        depth-first."""
        nodes = [self]
        for child in self.children:
            nodes.extend(child.walk())
        return nodes


class BaseCondition(ABC):
    """Abstract base class for conditions.

    Subclasses implement ``is_reached`` and ``describe``. The lifecycle
    hooks do nothing by default and the lifetime is ``BACKGROUND``,
    meaning the condition never ends in-flight work on its own.

    Success-type conditions set ``is_success_condition`` to ``True``;
    such a condition being reached means the command succeeded.
    """

    is_success_condition: ClassVar[bool] = False

    @abstractmethod
    def is_reached(self) -> bool:
        """Return whether the condition's limit has been reached."""

    @abstractmethod
    def describe(self) -> ConditionInfo:
        """Return a description of the condition."""

    @property
    def lifetime(self) -> Lifetime:
        """The lifetime that ends when the condition wants in-flight work
        torn down."""
        return BACKGROUND

    def on_try_start(self) -> None:
        """Called before each attempt."""

    def on_try_end(self) -> None:
        """Called after each attempt, once its results were fed."""

    def success_conditions(self) -> list[BaseCondition]:
        """Return the success-type conditions held by this condition.

        Returns:
            ``[self]`` for a success-type condition, an empty list
            otherwise.
        """
        return [self] if self.is_success_condition else []

    def __repr__(self) -> str:
        info = self.describe()
        params = ", ".join(f"{key}={value!r}" for key, value in info.fields.items())
        return f"{self.__class__.__qualname__}({params})"


class FeedableCondition(BaseCondition):
    """Base class for conditions that observe the results of attempts.

    Both feed methods are called after the process terminated and its
    output streams were drained. The default implementations ignore the
    data, so subclasses only override what they need.
    """

    def feed_exit_code(self, exit_code: int) -> None:
        """Receive the exit code of the last attempt.

        Args:
            exit_code: The normalized exit code.
        """

    def feed_output(self, stdout: str, stderr: str) -> None:
        """Receive the captured output of the last attempt.

        Args:
            stdout: The captured standard output.
            stderr: The captured standard error.
        """
