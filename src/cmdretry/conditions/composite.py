r"""Boolean composition of conditions.

A composite combines several conditions with AND or OR logic. Its
lifetime merges the lifetimes of its children: it ends as soon as any
child lifetime ends, so a timeout nested in a composite still kills the
attempt in flight.
"""

from __future__ import annotations

__all__ = ["CompositeCondition", "LogicOperator"]

import logging
import threading
from enum import Enum

from cmdretry.conditions.base import BaseCondition, ConditionInfo, FeedableCondition
from cmdretry.lifetime import Lifetime

logger: logging.Logger = logging.getLogger(__name__)


class LogicOperator(Enum):
    """Logic used to combine the children of a composite condition."""

    AND = "AND"
    OR = "OR"

    @classmethod
    def parse(cls, value: LogicOperator | str) -> LogicOperator:
        """Convert a string (case-insensitive) to a ``LogicOperator``.

        Raises:
            ValueError: If ``value`` is not ``"AND"`` or ``"OR"``.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            msg = f"logic must be 'AND' or 'OR', got {value!r}"
            raise ValueError(msg) from None


class CompositeCondition(FeedableCondition):
    """Combine conditions with AND or OR logic.

    Success-type children are ignored by ``is_reached``: they decide
    whether the command succeeded, not whether the loop stops. With no
    remaining children, AND is reached and OR is not.

    Lifecycle notifications are forwarded to every child in order, and
    feeds to the feedable children only.

    At most one daemon thread monitors the cancellable child lifetimes.
    It cancels the composite with the reason of the first child that
    fired, and exits when any monitored lifetime, the composite's own
    included, ends.

    Args:
        logic: The logic operator, or ``"AND"``/``"OR"``.
        *conditions: The child conditions.

    Raises:
        ValueError: If ``logic`` is not a valid operator.

    Example:
        ```pycon
        >>> from cmdretry.conditions import (
        ...     CompositeCondition,
        ...     StopOnExitCode,
        ...     StopOnMaxTries,
        ... )
        >>> condition = CompositeCondition("OR", StopOnMaxTries(5), StopOnExitCode([2]))
        >>> condition.on_try_start()
        >>> condition.feed_exit_code(2)
        >>> condition.is_reached()
        True

        ```
    """

    def __init__(self, logic: LogicOperator | str, *conditions: BaseCondition) -> None:
        self.logic = LogicOperator.parse(logic)
        self._conditions: tuple[BaseCondition, ...] = conditions
        self._feedable: tuple[FeedableCondition, ...] = tuple(
            condition for condition in conditions if isinstance(condition, FeedableCondition)
        )
        self._lifetime = Lifetime()
        self._monitor: threading.Thread | None = None

        watched = [condition.lifetime for condition in conditions if condition.lifetime.cancellable]
        if watched:
            self._monitor = threading.Thread(
                target=self._watch,
                args=(watched,),
                name="cmdretry-composite-monitor",
                daemon=True,
            )
            self._monitor.start()

    @property
    def conditions(self) -> tuple[BaseCondition, ...]:
        """The child conditions."""
        return self._conditions

    @property
    def lifetime(self) -> Lifetime:
        return self._lifetime

    def _watch(self, watched: list[Lifetime]) -> None:
        fired = threading.Event()

        def _on_done(_lifetime: Lifetime) -> None:
            fired.set()

        monitored = [*watched, self._lifetime]
        for lifetime in monitored:
            lifetime.add_done_callback(_on_done)
        try:
            fired.wait()
            for lifetime in watched:
                if lifetime.done():
                    logger.debug(f"Child lifetime ended ({lifetime.reason}), cancelling composite")
                    self._lifetime.cancel(lifetime.reason)
                    break
        finally:
            for lifetime in monitored:
                lifetime.remove_done_callback(_on_done)

    def is_reached(self) -> bool:
        relevant = [condition for condition in self._conditions if not condition.is_success_condition]
        if self.logic is LogicOperator.AND:
            return all(condition.is_reached() for condition in relevant)
        return any(condition.is_reached() for condition in relevant)

    def on_try_start(self) -> None:
        for condition in self._conditions:
            condition.on_try_start()

    def on_try_end(self) -> None:
        for condition in self._conditions:
            condition.on_try_end()

    def feed_exit_code(self, exit_code: int) -> None:
        for condition in self._feedable:
            condition.feed_exit_code(exit_code)

    def feed_output(self, stdout: str, stderr: str) -> None:
        for condition in self._feedable:
            condition.feed_output(stdout, stderr)

    def cancel(self) -> None:
        """Cancel the composite, then every child that can be cancelled,
        depth-first and in order."""
        self._lifetime.cancel()
        for condition in self._conditions:
            cancel = getattr(condition, "cancel", None)
            if callable(cancel):
                cancel()

    def success_conditions(self) -> list[BaseCondition]:
        found: list[BaseCondition] = []
        for condition in self._conditions:
            found.extend(condition.success_conditions())
        return found

    def describe(self) -> ConditionInfo:
        return ConditionInfo(
            kind="composite",
            label=f"composite ({self.logic.value})",
            fields={"logic": self.logic.value, "size": len(self._conditions)},
            children=tuple(condition.describe() for condition in self._conditions),
        )
