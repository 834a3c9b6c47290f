r"""Exception types raised by the command retry engine.

The hierarchy separates construction errors (invalid commands, invalid
patterns), attempt errors (the command could not start, failed or was
killed by a signal), policy exhaustion and cancellation, so that calling
code can branch on the outcome kind with ``except`` clauses instead of
matching error messages.

Example:
    ```pycon
    >>> from cmdretry.exceptions import CommandFailedError, CommandRetryError
    >>> err = CommandFailedError(command="make test", exit_code=2)
    >>> isinstance(err, CommandRetryError)
    True
    >>> err.exit_code
    2

    ```
"""

from __future__ import annotations

__all__ = [
    "CommandError",
    "CommandFailedError",
    "CommandRetryError",
    "CommandSignalError",
    "CommandStartError",
    "EmptyCommandError",
    "ExecutionCancelledError",
    "InvalidCommandError",
    "InvalidPatternError",
    "PolicyExhaustedError",
]

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cmdretry.lifetime import CancelReason


class CommandRetryError(Exception):
    """Base class of all the errors raised by ``cmdretry``."""


class InvalidCommandError(CommandRetryError, ValueError):
    """Raised when a command line cannot be parsed.

    Args:
        command: The command line that failed to parse.
        message: A descriptive error message.
    """

    def __init__(self, command: str, message: str | None = None) -> None:
        super().__init__(message or f"invalid command: {command!r}")
        self.command = command


class EmptyCommandError(InvalidCommandError):
    """Raised when a command line parses to no executable at all."""

    def __init__(self, command: str = "") -> None:
        super().__init__(command, "empty command")


class InvalidPatternError(CommandRetryError, ValueError):
    """Raised by strictly validated conditions when a regex does not
    compile.

    Args:
        pattern: The invalid pattern.
        cause: The ``re.error`` raised by the compiler.
    """

    def __init__(self, pattern: str, cause: Exception | None = None) -> None:
        message = f"invalid regex pattern {pattern!r}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.pattern = pattern
        self.cause = cause


class CommandError(CommandRetryError):
    """Base class for the errors of a single attempt.

    Args:
        command: The command line that was executed.
        exit_code: The normalized exit code of the attempt.
        message: A descriptive error message.
        cause: The underlying exception, if any.
    """

    def __init__(
        self,
        command: str,
        exit_code: int,
        message: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message or f"command failed with exit code {exit_code}")
        self.command = command
        self.exit_code = exit_code
        self.cause = cause


class CommandStartError(CommandError):
    """Raised when the process could not be started at all.

    The exit code is always ``-1``.
    """

    def __init__(self, command: str, cause: Exception | None = None) -> None:
        message = "command could not start"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(command=command, exit_code=-1, message=message, cause=cause)


class CommandFailedError(CommandError):
    """Raised when the process exited with a non-zero status."""

    def __init__(self, command: str, exit_code: int) -> None:
        super().__init__(
            command=command,
            exit_code=exit_code,
            message=f"command failed: exit status {exit_code}",
        )


class CommandSignalError(CommandError):
    """Raised when the process was terminated by a signal.

    The exit code is synthesized as ``128 + signal_number``.

    Args:
        command: The command line that was executed.
        signal_number: The number of the signal that killed the process.
    """

    def __init__(self, command: str, signal_number: int) -> None:
        super().__init__(
            command=command,
            exit_code=128 + signal_number,
            message=f"command terminated by signal {signal_number}",
        )
        self.signal_number = signal_number


class PolicyExhaustedError(CommandRetryError):
    """Raised when the stop condition fired while the command was still
    failing.

    Args:
        attempts: The number of attempts that were made.
        last_error: The error of the last attempt.
    """

    def __init__(self, attempts: int, last_error: Exception | None = None) -> None:
        super().__init__(f"max tries reached: command still failing after {attempts} attempts")
        self.attempts = attempts
        self.last_error = last_error


class ExecutionCancelledError(CommandRetryError):
    """Raised when a lifetime ended the retry loop.

    Args:
        source: ``"caller"`` when the root lifetime supplied by the caller
            fired, ``"policy"`` when the stop condition's own lifetime
            fired (for example a timeout).
        reason: Why the lifetime ended.
    """

    def __init__(self, source: str, reason: CancelReason | None = None) -> None:
        detail = reason.value if reason is not None else "cancelled"
        super().__init__(f"context error ({source}): {detail}")
        self.source = source
        self.reason = reason
