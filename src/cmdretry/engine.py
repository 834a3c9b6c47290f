r"""Retry engine executing a command until its stop condition fires.

Each iteration of the loop asks the stop condition whether to continue,
runs one attempt bound to the caller's lifetime and to the stop
condition's lifetime, feeds the results back to the conditions, and
either ends on success or sleeps for the backoff delay.

Example:
    ```pycon
    >>> from cmdretry.conditions import StopOnMaxTries
    >>> from cmdretry.engine import RetryEngine
    >>> engine = RetryEngine("true", StopOnMaxTries(3), output_sink=None)
    >>> result = engine.run()  # doctest: +SKIP
    >>> result.attempts  # doctest: +SKIP
    1

    ```
"""

from __future__ import annotations

__all__ = ["ExecutionResult", "RetryEngine"]

import logging
import time
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cmdretry.conditions.base import FeedableCondition
from cmdretry.exceptions import ExecutionCancelledError, PolicyExhaustedError
from cmdretry.lifetime import BACKGROUND, Lifetime, wait_any
from cmdretry.listener import ExecutionListener
from cmdretry.process import AttemptResult, console_sink, parse_command, run_command
from cmdretry.utils.structured_logging import reset_execution_id, set_execution_id

if TYPE_CHECKING:
    from collections.abc import Iterable

    from cmdretry.backoff.base import BaseBackoffStrategy
    from cmdretry.conditions.base import BaseCondition, ConditionInfo
    from cmdretry.process import OutputSink

logger: logging.Logger = logging.getLogger(__name__)


@dataclass
class ExecutionResult:
    """Outcome of a successful execution.

    Attributes:
        command: The command line.
        attempts: The number of attempts made.
        exit_code: The raw exit code of the last attempt. It can be
            non-zero when a success condition granted success.
        success_condition_met: Whether a success condition was reached.
        total_time: The duration of the execution in seconds.
        last_attempt: The result of the last attempt.
    """

    command: str
    attempts: int
    exit_code: int
    success_condition_met: bool
    total_time: float
    last_attempt: AttemptResult | None = None


def _max_tries(info: ConditionInfo) -> int:
    for node in info.walk():
        if node.kind == "max_tries":
            return node.fields["max_tries"]
    return 0


class RetryEngine:
    r"""Run a command until its stop condition fires or it succeeds.

    Args:
        command: The command line. It is split on whitespace, honoring
            single and double quotes.
        stop_condition: The condition deciding when to stop retrying.
        success_conditions: Conditions tracked separately from the stop
            condition. Any of them being reached makes the attempt a
            success, even when the command failed.
        backoff: Optional strategy computing the delay between attempts.
            Without one, attempts follow each other immediately.
        listener: Optional listener notified of the progress.
        output_sink: Optional callable receiving each output line of the
            command. Defaults to echoing the output to the console.

    Raises:
        ValueError: If ``stop_condition`` is ``None``.
        EmptyCommandError: If ``command`` is empty.
        InvalidCommandError: If ``command`` cannot be parsed.
    """

    def __init__(
        self,
        command: str,
        stop_condition: BaseCondition,
        *,
        success_conditions: Iterable[BaseCondition] = (),
        backoff: BaseBackoffStrategy | None = None,
        listener: ExecutionListener | None = None,
        output_sink: OutputSink | None = console_sink,
    ) -> None:
        if stop_condition is None:
            msg = "stop_condition must not be None"
            raise ValueError(msg)

        self.command = command
        self.argv = parse_command(command)
        self.stop_condition = stop_condition
        self.success_conditions = list(success_conditions)
        self.backoff = backoff
        self.listener = listener if listener is not None else ExecutionListener()
        self.output_sink = output_sink

        self.attempts = 0
        self.last_exit_code = 0
        self.last_result: AttemptResult | None = None

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}(command={self.command!r}, "
            f"stop_condition={self.stop_condition!r}, backoff={self.backoff!r})"
        )

    def run(self, lifetime: Lifetime | None = None) -> ExecutionResult:
        """Run the retry loop.

        Args:
            lifetime: Optional lifetime controlled by the caller. Ending it
                kills the attempt in flight and ends the loop.

        Returns:
            The result of the execution, when it succeeded.

        Raises:
            ExecutionCancelledError: If the caller's lifetime or the stop
                condition's lifetime ended the loop.
            PolicyExhaustedError: If the stop condition fired while the
                command was still failing.
            CommandError: If the last attempt failed and the stop
                condition was not reached.
        """
        token = set_execution_id(uuid.uuid4().hex[:12])
        try:
            return self._run(lifetime if lifetime is not None else BACKGROUND)
        finally:
            reset_execution_id(token)

    def _run(self, root: Lifetime) -> ExecutionResult:
        start_time = time.monotonic()
        self.attempts = 0
        self.last_exit_code = 0
        self.last_result = None

        max_tries = _max_tries(self.stop_condition.describe())
        backoff_name = self.backoff.name if self.backoff is not None else "none"
        logger.debug(
            f"Retry loop starting: command={self.command!r}, max_tries={max_tries}, "
            f"backoff={backoff_name}, success_conditions={len(self.success_conditions)}"
        )
        self.listener.start_execution(self.command, max_tries, backoff_name)

        error: Exception | None = None
        while self._should_continue(root):
            self.listener.start_attempt(self.attempts + 1)
            result = self._attempt(root)
            error = result.error

            success_met = self._success_condition_met()
            success = error is None or success_met
            self.listener.end_attempt(result.exit_code, success)
            if success:
                if success_met:
                    logger.debug(
                        f"Attempt {self.attempts} succeeded with a success condition "
                        f"(exit code {result.exit_code})"
                    )
                    self._log_success_conditions()
                    error = None
                break
            logger.debug(f"Attempt {self.attempts} failed with exit code {result.exit_code}")

            if self._should_continue(root, quiet=True):
                self._sleep(root)

        return self._finish(root, error, start_time)

    def _should_continue(self, root: Lifetime, quiet: bool = False) -> bool:
        if root.done():
            if not quiet:
                logger.debug(f"Caller lifetime ended ({root.reason}), stopping retry loop")
            return False
        stop_lifetime = self.stop_condition.lifetime
        if stop_lifetime.done():
            if not quiet:
                logger.debug(f"Stop condition lifetime ended ({stop_lifetime.reason}), stopping retry loop")
            return False
        if self.stop_condition.is_reached():
            if not quiet:
                info = self.stop_condition.describe()
                logger.debug(
                    f"Stop condition reached: {info.label} after {self.attempts} attempts ({info.fields})"
                )
            return False
        return True

    def _attempt(self, root: Lifetime) -> AttemptResult:
        self.stop_condition.on_try_start()
        for condition in self.success_conditions:
            condition.on_try_start()
        self.attempts += 1

        logger.debug(f"Executing command (attempt {self.attempts}): {self.command}")
        result = run_command(
            self.argv,
            lifetimes=(root, self.stop_condition.lifetime),
            output_sink=self._emit_output,
        )
        self.last_exit_code = result.exit_code
        self.last_result = result

        for condition in [self.stop_condition, *self.success_conditions]:
            if isinstance(condition, FeedableCondition):
                condition.feed_exit_code(result.exit_code)
                condition.feed_output(result.stdout, result.stderr)

        self.stop_condition.on_try_end()
        for condition in self.success_conditions:
            condition.on_try_end()
        return result

    def _emit_output(self, line: str, is_stderr: bool) -> None:
        self.listener.on_output(line, is_stderr)
        if self.output_sink is not None:
            self.output_sink(line, is_stderr)

    def _candidate_success_conditions(self) -> list[BaseCondition]:
        return [*self.success_conditions, *self.stop_condition.success_conditions()]

    def _success_condition_met(self) -> bool:
        return any(condition.is_reached() for condition in self._candidate_success_conditions())

    def _log_success_conditions(self) -> None:
        for index, condition in enumerate(self._candidate_success_conditions()):
            if condition.is_reached():
                info = condition.describe()
                logger.debug(f"Success condition {index} met: {info.label} {info.fields}")

    def _sleep(self, root: Lifetime) -> None:
        if self.backoff is None:
            return
        delay = self.backoff.next_delay(self.attempts)
        if delay <= 0:
            return
        logger.debug(f"Applying backoff delay of {delay:.3f}s after attempt {self.attempts}: {self.backoff.describe()}")
        self.listener.on_retry_delay(delay)
        if wait_any([root, self.stop_condition.lifetime], delay):
            logger.debug("Backoff delay interrupted by an ended lifetime")

    def _finish(self, root: Lifetime, error: Exception | None, start_time: float) -> ExecutionResult:
        total_time = time.monotonic() - start_time
        info = self.stop_condition.describe()
        stop_lifetime = self.stop_condition.lifetime

        outcome: Exception | None
        if root.done():
            outcome = ExecutionCancelledError("caller", root.reason)
            self.listener.end_execution(False, "cancelled", "caller")
        elif stop_lifetime.done():
            outcome = ExecutionCancelledError("policy", stop_lifetime.reason)
            self.listener.end_execution(False, "context timeout", info.label)
        elif self._success_condition_met():
            outcome = None
            self.listener.end_execution(True)
        elif self.stop_condition.is_reached() and error is not None:
            outcome = PolicyExhaustedError(self.attempts, error)
            self.listener.end_execution(False, f"{info.label} reached", info.label)
        elif error is not None:
            outcome = error
            self.listener.end_execution(False, str(error))
        else:
            outcome = None
            self.listener.end_execution(True)

        if outcome is None:
            logger.debug(f"Retry loop completed after {self.attempts} attempts in {total_time:.3f}s")
            return ExecutionResult(
                command=self.command,
                attempts=self.attempts,
                exit_code=self.last_exit_code,
                success_condition_met=self._success_condition_met(),
                total_time=total_time,
                last_attempt=self.last_result,
            )

        logger.debug(f"Retry loop failed after {self.attempts} attempts: {outcome}")
        if outcome is error:
            raise outcome
        raise outcome from error
