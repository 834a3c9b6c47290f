r"""Configuration dataclass assembling a retry engine.

``RetryConfig`` holds the resolved settings of a retry execution, the
way a command-line front end would collect them from flags and
environment variables, and builds the stop condition, the success
conditions and the backoff strategy from them.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_BACKOFF",
    "DEFAULT_DELAY",
    "DEFAULT_LOGIC",
    "DEFAULT_MAX_TRIES",
    "RetryConfig",
]

from dataclasses import dataclass, fields, replace
from typing import TYPE_CHECKING, Any

from cmdretry.backoff import (
    CustomBackoff,
    ExponentialBackoff,
    FibonacciBackoff,
    FixedBackoff,
    JitterBackoff,
    LinearBackoff,
)
from cmdretry.conditions import (
    CompositeCondition,
    FailIfContains,
    LogicOperator,
    RetryIfContains,
    RetryOnExitCode,
    RetryRegex,
    StopAtTimeOfDay,
    StopOnExitCode,
    StopOnMaxExecutionTime,
    StopOnMaxTries,
    StopOnOutputPattern,
    StopOnTimeout,
    SuccessContains,
    SuccessOnExitCode,
    SuccessRegex,
)
from cmdretry.conditions.matching import OutputMatcher
from cmdretry.conditions.time_of_day import parse_time_of_day
from cmdretry.engine import RetryEngine
from cmdretry.process import console_sink
from cmdretry.utils.validation import validate_backoff_params, validate_retry_params

if TYPE_CHECKING:
    from cmdretry.backoff import BaseBackoffStrategy
    from cmdretry.conditions import BaseCondition
    from cmdretry.listener import ExecutionListener
    from cmdretry.process import OutputSink


# Default maximum number of attempts, the first one included
DEFAULT_MAX_TRIES = 3

# Default delay in seconds between attempts
DEFAULT_DELAY = 0.0

# Default backoff strategy name
DEFAULT_BACKOFF = "fixed"

# Default logic combining several stop conditions
DEFAULT_LOGIC = "OR"


@dataclass
class RetryConfig:
    """Configuration of a retry execution.

    Durations are expressed in seconds. ``None`` and empty tuples disable
    the matching condition.

    Args:
        max_tries: Maximum number of attempts. 0 means unbounded. Must be
            >= 0.
        timeout: Stop once this many seconds elapsed. Must be > 0 if
            provided.
        max_execution_time: Stop once this many seconds elapsed. Must be
            > 0 if provided.
        stop_at: Stop once the local clock passes this ``"HH:MM"`` time.
        stop_on_exit_codes: Stop when the command exits with one of these
            codes.
        stop_when_contains: Stop when the output contains this pattern.
        stop_when_not_contains: Stop when the output lacks this pattern.
        fail_if_contains: Stop, failing, when the output contains this
            pattern.
        retry_on_exit_codes: Retry only while the command exits with one
            of these codes.
        retry_if_contains: Retry only while the output contains this
            pattern.
        retry_regex: Retry only while the output matches this regular
            expression.
        logic: ``"AND"`` or ``"OR"``, combining several stop conditions.
        success_exit_codes: Exit codes meaning success.
        success_contains: Succeed when the output contains this pattern.
        success_regex: Succeed when the output matches this regular
            expression.
        backoff: The backoff strategy name, one of ``"fixed"``,
            ``"linear"``, ``"exponential"``, ``"fibonacci"`` or
            ``"custom"``.
        delay: The base delay. Must be >= 0.
        max_delay: The maximum delay, ``None`` or 0 for uncapped.
        increment: The increment of the linear backoff. Defaults to
            ``delay`` when ``None``.
        multiplier: The multiplier of the exponential backoff. Must be > 1
            for that strategy.
        custom_delays: The delays of the custom backoff. Must be
            non-empty for that strategy.
        jitter: The jitter ratio applied to the delays. Must be in
            ``[0, 1]``.

    Raises:
        ValueError: If any parameter fails validation.

    Example:
        ```pycon
        >>> from cmdretry.config import RetryConfig
        >>> config = RetryConfig()
        >>> config.max_tries
        3
        >>> config.build_stop_condition()
        StopOnMaxTries(max_tries=3, tries=0)
        >>> config = RetryConfig(max_tries=5, stop_on_exit_codes=(2,))
        >>> config.build_stop_condition().logic
        <LogicOperator.OR: 'OR'>

        ```
    """

    max_tries: int = DEFAULT_MAX_TRIES
    timeout: float | None = None
    max_execution_time: float | None = None
    stop_at: str | None = None
    stop_on_exit_codes: tuple[int, ...] = ()
    stop_when_contains: str | None = None
    stop_when_not_contains: str | None = None
    fail_if_contains: str | None = None
    retry_on_exit_codes: tuple[int, ...] = ()
    retry_if_contains: str | None = None
    retry_regex: str | None = None
    logic: str = DEFAULT_LOGIC
    success_exit_codes: tuple[int, ...] = ()
    success_contains: str | None = None
    success_regex: str | None = None
    backoff: str = DEFAULT_BACKOFF
    delay: float = DEFAULT_DELAY
    max_delay: float | None = None
    increment: float | None = None
    multiplier: float = 2.0
    custom_delays: tuple[float, ...] = ()
    jitter: float = 0.0

    def __post_init__(self) -> None:
        """Validate configuration parameters after initialization.

        Raises:
            ValueError: If any parameter fails validation.
            InvalidPatternError: If ``retry_regex`` or ``success_regex``
                is not a valid regular expression.
        """
        validate_retry_params(
            max_tries=self.max_tries,
            timeout=self.timeout,
            max_execution_time=self.max_execution_time,
        )
        validate_backoff_params(
            backoff=self.backoff,
            delay=self.delay,
            max_delay=self.max_delay,
            increment=self.increment if self.increment is not None else 0.0,
            multiplier=self.multiplier,
            custom_delays=self.custom_delays,
            jitter=self.jitter,
        )
        LogicOperator.parse(self.logic)
        if self.stop_at is not None:
            parse_time_of_day(self.stop_at)
        for pattern in (self.retry_regex, self.success_regex):
            if pattern is not None:
                OutputMatcher(pattern, strict=True)

    def build_stop_condition(self) -> BaseCondition:
        """Build the stop condition.

        Every configured stop condition is built; time-based ones start
        their clock now. Several conditions are combined in a
        ``CompositeCondition`` using ``logic``. ``StopOnMaxTries`` is left
        out when unbounded, unless nothing else is configured.

        Returns:
            The stop condition.
        """
        conditions: list[BaseCondition] = []
        if self.max_tries > 0:
            conditions.append(StopOnMaxTries(self.max_tries))
        if self.timeout is not None:
            conditions.append(StopOnTimeout(self.timeout))
        if self.max_execution_time is not None:
            conditions.append(StopOnMaxExecutionTime(self.max_execution_time))
        if self.stop_at is not None:
            conditions.append(StopAtTimeOfDay(self.stop_at))
        if self.stop_on_exit_codes:
            conditions.append(StopOnExitCode(self.stop_on_exit_codes))
        if self.stop_when_contains is not None:
            conditions.append(StopOnOutputPattern.contains(self.stop_when_contains))
        if self.stop_when_not_contains is not None:
            conditions.append(StopOnOutputPattern.not_contains(self.stop_when_not_contains))
        if self.fail_if_contains is not None:
            conditions.append(FailIfContains(self.fail_if_contains))
        if self.retry_on_exit_codes:
            conditions.append(RetryOnExitCode(self.retry_on_exit_codes))
        if self.retry_if_contains is not None:
            conditions.append(RetryIfContains(self.retry_if_contains))
        if self.retry_regex is not None:
            conditions.append(RetryRegex(self.retry_regex))

        if not conditions:
            return StopOnMaxTries(self.max_tries)
        if len(conditions) == 1:
            return conditions[0]
        return CompositeCondition(self.logic, *conditions)

    def build_success_conditions(self) -> list[BaseCondition]:
        """Build the success conditions.

        Returns:
            The success conditions, possibly empty.
        """
        conditions: list[BaseCondition] = []
        if self.success_exit_codes:
            conditions.append(SuccessOnExitCode(self.success_exit_codes))
        if self.success_contains is not None:
            conditions.append(SuccessContains(self.success_contains))
        if self.success_regex is not None:
            conditions.append(SuccessRegex(self.success_regex))
        return conditions

    def build_backoff(self) -> BaseBackoffStrategy:
        """Build the backoff strategy, wrapped with jitter when ``jitter``
        is positive.

        Returns:
            The backoff strategy.
        """
        strategy: BaseBackoffStrategy
        if self.backoff == "linear":
            increment = self.increment if self.increment is not None else self.delay
            strategy = LinearBackoff(base_delay=self.delay, increment=increment, max_delay=self.max_delay)
        elif self.backoff == "exponential":
            strategy = ExponentialBackoff(
                base_delay=self.delay, max_delay=self.max_delay, multiplier=self.multiplier
            )
        elif self.backoff == "fibonacci":
            strategy = FibonacciBackoff(base_delay=self.delay, max_delay=self.max_delay)
        elif self.backoff == "custom":
            strategy = CustomBackoff(self.custom_delays)
        else:
            strategy = FixedBackoff(delay=self.delay)

        if self.jitter > 0:
            return JitterBackoff(strategy, jitter=self.jitter)
        return strategy

    def create_engine(
        self,
        command: str,
        listener: ExecutionListener | None = None,
        output_sink: OutputSink | None = console_sink,
    ) -> RetryEngine:
        """Create a retry engine for ``command`` from this configuration.

        Args:
            command: The command line to run.
            listener: Optional listener notified of the progress.
            output_sink: Optional callable receiving each output line.

        Returns:
            The retry engine.

        Raises:
            EmptyCommandError: If ``command`` is empty.
            InvalidPatternError: If ``success_regex`` or ``retry_regex`` is
                not a valid regular expression.
        """
        return RetryEngine(
            command,
            self.build_stop_condition(),
            success_conditions=self.build_success_conditions(),
            backoff=self.build_backoff(),
            listener=listener,
            output_sink=output_sink,
        )

    def merge(self, **overrides: Any) -> RetryConfig:
        """Create a new config with specified parameters overridden.

        Only non-None override values are applied.

        Args:
            **overrides: Keyword arguments for parameters to override.

        Returns:
            A new, validated ``RetryConfig`` with overrides applied.

        Example:
            ```pycon
            >>> from cmdretry.config import RetryConfig
            >>> config = RetryConfig(max_tries=3)
            >>> config.merge(max_tries=5, delay=None).max_tries
            5
            >>> config.max_tries  # unchanged
            3

            ```
        """
        filtered_overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **filtered_overrides)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary format.

        Returns:
            Dictionary with every configuration parameter.
        """
        return {item.name: getattr(self, item.name) for item in fields(self)}
