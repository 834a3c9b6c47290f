r"""Listeners observing the progress of a retry execution.

The engine reports every step of an execution to an
``ExecutionListener``: the start of the execution, each attempt and its
output, the delays between attempts, and the final outcome. The base
class ignores every event; ``LoggingExecutionListener`` logs them and
keeps an ``ExecutionSummary``.

Example:
    ```pycon
    >>> from cmdretry.listener import LoggingExecutionListener
    >>> listener = LoggingExecutionListener()
    >>> listener.start_execution("make test", max_tries=3, backoff_name="fixed")
    >>> listener.start_attempt(1)
    >>> listener.end_attempt(exit_code=0, success=True)
    >>> listener.end_execution(success=True)
    >>> listener.summary.total_attempts
    1
    >>> print(listener.summary.format_summary().splitlines()[1])
    Result: Success

    ```
"""

from __future__ import annotations

__all__ = ["AttemptRecord", "ExecutionListener", "ExecutionSummary", "LoggingExecutionListener"]

import logging
import threading
import time
from dataclasses import asdict, dataclass, field
from typing import Any

from cmdretry.utils.structured_logging import log_structured

_HEADER_WIDTH = 15
_FOOTER_WIDTH = 41


class ExecutionListener:
    """Listener ignoring every event.

    Subclass it and override the events of interest. ``on_output`` is
    called from the threads reading the command output; every other event
    is called from the thread running the engine.
    """

    def start_execution(self, command: str, max_tries: int, backoff_name: str) -> None:
        """Called once before the first attempt.

        Args:
            command: The command line.
            max_tries: The maximum number of attempts, 0 when unbounded or
                unknown.
            backoff_name: The name of the backoff strategy, ``"none"``
                without one.
        """

    def start_attempt(self, attempt: int) -> None:
        """Called before each attempt, with its 1-based number."""

    def on_output(self, line: str, is_stderr: bool) -> None:
        """Called for each line the command writes."""

    def end_attempt(self, exit_code: int, success: bool) -> None:
        """Called after each attempt.

        Args:
            exit_code: The exit code of the attempt.
            success: Whether the attempt succeeded, either by exiting
                cleanly or by satisfying a success condition.
        """

    def on_retry_delay(self, delay: float) -> None:
        """Called before sleeping ``delay`` seconds between attempts."""

    def end_execution(
        self,
        success: bool,
        failure_reason: str = "",
        stop_condition: str = "",
    ) -> None:
        """Called once after the last attempt.

        Args:
            success: Whether the execution succeeded.
            failure_reason: Why the execution failed, empty on success.
            stop_condition: The label of the condition that stopped the
                loop, if any.
        """


@dataclass
class AttemptRecord:
    """Record of one attempt, as kept by ``ExecutionSummary``."""

    attempt: int
    exit_code: int | None = None
    success: bool = False
    duration: float = 0.0
    output: str = ""


@dataclass
class ExecutionSummary:
    """Summary of a retry execution.

    Attributes:
        command: The command line.
        max_tries: The maximum number of attempts, 0 when unbounded.
        backoff_strategy: The name of the backoff strategy.
        total_attempts: The number of attempts made.
        final_exit_code: The exit code of the last attempt.
        success: Whether the execution succeeded.
        failure_reason: Why the execution failed.
        stop_condition: The label of the condition that stopped the loop.
        total_duration: The duration of the execution in seconds.
        attempts: The record of every attempt.
    """

    command: str = ""
    max_tries: int = 0
    backoff_strategy: str = ""
    total_attempts: int = 0
    final_exit_code: int | None = None
    success: bool = False
    failure_reason: str = ""
    stop_condition: str = ""
    total_duration: float = 0.0
    attempts: list[AttemptRecord] = field(default_factory=list)

    def format_summary(self, verbose: bool = False) -> str:
        """Format the summary as a human readable block of text.

        Args:
            verbose: Whether to include the backoff strategy and the
                command.

        Returns:
            The formatted summary.
        """
        header = "═" * _HEADER_WIDTH
        if self.success:
            result = "Success"
        else:
            result = f"Failed ({self.failure_reason or 'Command failed'})"
        if self.max_tries > 0:
            attempts = f"{self.total_attempts}/{self.max_tries}"
        else:
            attempts = str(self.total_attempts)

        lines = [
            f"{header} SUMMARY {header}",
            f"Result: {result}",
            f"Attempts: {attempts}",
            f"Duration: {self.total_duration:.3f}s",
            f"Final exit code: {self.final_exit_code}",
        ]
        if self.stop_condition:
            lines.append(f"Stop condition: {self.stop_condition}")
        if verbose:
            if self.backoff_strategy:
                lines.append(f"Backoff strategy: {self.backoff_strategy}")
            lines.append(f"Command: {self.command}")
        lines.append("═" * _FOOTER_WIDTH)
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert the summary to a JSON-serializable dictionary."""
        return asdict(self)


class LoggingExecutionListener(ExecutionListener):
    """Listener logging every event and keeping an ``ExecutionSummary``.

    Events are logged with ``log_structured``, so the fields of each event
    show up in the JSON output of ``StructuredFormatter``.

    Args:
        logger: The logger to use. Defaults to this module's logger.
        log_output: Whether to log each output line at debug level.
    """

    def __init__(self, logger: logging.Logger | None = None, log_output: bool = False) -> None:
        self.logger = logger if logger is not None else logging.getLogger(__name__)
        self.log_output = log_output
        self.summary = ExecutionSummary()
        self._lock = threading.Lock()
        self._start_time = time.monotonic()
        self._attempt_start = self._start_time
        self._current: AttemptRecord | None = None

    def start_execution(self, command: str, max_tries: int, backoff_name: str) -> None:
        self._start_time = time.monotonic()
        self.summary = ExecutionSummary(command=command, max_tries=max_tries, backoff_strategy=backoff_name)
        log_structured(
            self.logger,
            logging.DEBUG,
            f"Retry execution starting: {command}",
            command=command,
            max_tries=max_tries,
            backoff=backoff_name,
        )

    def start_attempt(self, attempt: int) -> None:
        self._attempt_start = time.monotonic()
        self._current = AttemptRecord(attempt=attempt)
        self.summary.attempts.append(self._current)
        self.summary.total_attempts = attempt
        progress = f"{attempt}/{self.summary.max_tries}" if self.summary.max_tries > 0 else str(attempt)
        verb = "Attempting command" if attempt == 1 else "Retrying"
        log_structured(self.logger, logging.INFO, f"[{progress}] {verb}...", attempt=attempt)

    def on_output(self, line: str, is_stderr: bool) -> None:
        with self._lock:
            if self._current is not None:
                self._current.output += line
        if self.log_output:
            log_structured(
                self.logger,
                logging.DEBUG,
                line.rstrip("\n"),
                stream="stderr" if is_stderr else "stdout",
            )

    def end_attempt(self, exit_code: int, success: bool) -> None:
        self.summary.final_exit_code = exit_code
        if self._current is not None:
            self._current.exit_code = exit_code
            self._current.success = success
            self._current.duration = time.monotonic() - self._attempt_start
        if success:
            log_structured(
                self.logger, logging.INFO, f"Command succeeded (exit code {exit_code})", exit_code=exit_code
            )
        else:
            log_structured(
                self.logger, logging.WARNING, f"Command failed (exit code {exit_code})", exit_code=exit_code
            )

    def on_retry_delay(self, delay: float) -> None:
        log_structured(self.logger, logging.INFO, f"Waiting {delay:.3f}s before retry...", delay=delay)

    def end_execution(
        self,
        success: bool,
        failure_reason: str = "",
        stop_condition: str = "",
    ) -> None:
        self.summary.success = success
        self.summary.failure_reason = failure_reason
        self.summary.stop_condition = stop_condition
        self.summary.total_duration = time.monotonic() - self._start_time
        if success:
            log_structured(
                self.logger,
                logging.INFO,
                "Retry execution completed successfully",
                attempts=self.summary.total_attempts,
                final_exit_code=self.summary.final_exit_code,
            )
        else:
            log_structured(
                self.logger,
                logging.WARNING,
                f"Retry execution failed: {failure_reason or 'command failed'}",
                failure_reason=failure_reason,
                stop_condition=stop_condition,
                attempts=self.summary.total_attempts,
                final_exit_code=self.summary.final_exit_code,
            )
