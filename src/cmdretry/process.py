r"""Execution of a single attempt of the command.

The command runs in its own process group so that cancellation kills the
whole tree it spawned, not only the direct child. Its stdout and stderr
are drained concurrently, line by line, into an optional sink and into
per-attempt buffers.
"""

from __future__ import annotations

__all__ = ["AttemptResult", "OutputSink", "console_sink", "parse_command", "run_command"]

import contextvars
import logging
import os
import shlex
import signal
import subprocess
import sys
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import IO, TYPE_CHECKING

from cmdretry.exceptions import (
    CommandError,
    CommandFailedError,
    CommandSignalError,
    CommandStartError,
    EmptyCommandError,
    InvalidCommandError,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from cmdretry.lifetime import Lifetime

logger: logging.Logger = logging.getLogger(__name__)

OutputSink = Callable[[str, bool], None]


@dataclass
class AttemptResult:
    """Outcome of one attempt.

    Attributes:
        exit_code: 0 on success, -1 when the process could not start,
            ``128 + N`` when it was killed by signal N, and the raw exit
            status otherwise.
        stdout: The captured standard output.
        stderr: The captured standard error.
        error: The error of the attempt, ``None`` on success.
        duration: The wall time of the attempt in seconds.
    """

    exit_code: int
    stdout: str = ""
    stderr: str = ""
    error: CommandError | None = None
    duration: float = 0.0

    @property
    def succeeded(self) -> bool:
        """Whether the process exited cleanly."""
        return self.error is None


def parse_command(command: str) -> list[str]:
    r"""Split a command line into its argument vector.

    Arguments are separated by whitespace. Single and double quotes group
    words into one argument and are removed.

    Args:
        command: The command line.

    Returns:
        The argument vector, executable first.

    Raises:
        EmptyCommandError: If the command line holds no argument.
        InvalidCommandError: If a quote is not closed.

    Example:
        ```pycon
        >>> from cmdretry.process import parse_command
        >>> parse_command("echo 'hello world' \"again\"")
        ['echo', 'hello world', 'again']

        ```
    """
    lexer = shlex.shlex(command, posix=True)
    lexer.whitespace_split = True
    lexer.commenters = ""
    try:
        argv = list(lexer)
    except ValueError as exc:
        raise InvalidCommandError(command, f"invalid command {command!r}: {exc}") from exc
    if not argv:
        raise EmptyCommandError(command)
    return argv


def console_sink(line: str, is_stderr: bool) -> None:
    """Write a line of command output to the matching console stream."""
    stream = sys.stderr if is_stderr else sys.stdout
    stream.write(line)
    stream.flush()


def _pump(stream: IO[bytes], chunks: list[str], is_stderr: bool, sink: OutputSink | None) -> None:
    with stream:
        for raw in iter(stream.readline, b""):
            line = raw.decode("utf-8", errors="replace")
            chunks.append(line)
            if sink is None:
                continue
            try:
                sink(line, is_stderr)
            except Exception as exc:  # noqa: BLE001
                logger.debug(f"Output sink failed on {'stderr' if is_stderr else 'stdout'} line: {exc!r}")


def _kill_group(process: subprocess.Popen[bytes]) -> None:
    try:
        os.killpg(process.pid, signal.SIGKILL)
    except ProcessLookupError:
        logger.debug(f"Process group {process.pid} already exited")
    else:
        logger.debug(f"Killed process group {process.pid}")


def run_command(
    command: str | Sequence[str],
    lifetimes: Iterable[Lifetime] = (),
    output_sink: OutputSink | None = None,
) -> AttemptResult:
    """Run the command once and wait for it.

    When any of ``lifetimes`` ends while the command runs, its whole
    process group is killed with ``SIGKILL``. The function returns only
    once the process terminated and both output streams were drained.

    Args:
        command: The command line, or an already parsed argument vector.
        lifetimes: The lifetimes bounding the attempt.
        output_sink: Optional callable receiving each output line and
            whether it came from stderr. It is called from the reader
            threads; its exceptions are logged and the stream keeps
            draining.

    Returns:
        The result of the attempt. Failures to start, non-zero exits and
        signals are reported through ``AttemptResult.error``.

    Raises:
        EmptyCommandError: If the command holds no argument.
        InvalidCommandError: If the command line cannot be parsed.
    """
    if isinstance(command, str):
        argv = parse_command(command)
        display = command
    else:
        argv = list(command)
        if not argv:
            raise EmptyCommandError
        display = shlex.join(argv)

    logger.debug(f"Parsed command: executable={argv[0]!r}, args={argv[1:]}")
    start_time = time.monotonic()
    try:
        process = subprocess.Popen(  # noqa: S603
            argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            start_new_session=True,
        )
    except OSError as exc:
        logger.debug(f"Command could not start: {exc}")
        return AttemptResult(
            exit_code=-1,
            error=CommandStartError(display, exc),
            duration=time.monotonic() - start_time,
        )

    def _on_done(_lifetime: Lifetime) -> None:
        _kill_group(process)

    watched = list(lifetimes)
    for lifetime in watched:
        lifetime.add_done_callback(_on_done)

    stdout_chunks: list[str] = []
    stderr_chunks: list[str] = []
    # Readers run in a copy of the caller's context, execution id included.
    pumps = [
        threading.Thread(
            target=contextvars.copy_context().run,
            args=(_pump, process.stdout, stdout_chunks, False, output_sink),
            name="cmdretry-stdout",
            daemon=True,
        ),
        threading.Thread(
            target=contextvars.copy_context().run,
            args=(_pump, process.stderr, stderr_chunks, True, output_sink),
            name="cmdretry-stderr",
            daemon=True,
        ),
    ]
    try:
        for pump in pumps:
            pump.start()
        returncode = process.wait()
        for pump in pumps:
            pump.join()
    finally:
        for lifetime in watched:
            lifetime.remove_done_callback(_on_done)

    duration = time.monotonic() - start_time
    stdout = "".join(stdout_chunks)
    stderr = "".join(stderr_chunks)

    error: CommandError | None = None
    exit_code = returncode
    if returncode < 0:
        error = CommandSignalError(display, -returncode)
        exit_code = error.exit_code
    elif returncode > 0:
        error = CommandFailedError(display, returncode)

    logger.debug(f"Command completed: exit_code={exit_code}, duration={duration:.3f}s, error={error is not None}")
    return AttemptResult(exit_code=exit_code, stdout=stdout, stderr=stderr, error=error, duration=duration)
