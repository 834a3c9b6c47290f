r"""Unit tests for the execution of a single attempt."""

from __future__ import annotations

import sys
import time
from typing import TYPE_CHECKING

import pytest

from cmdretry.exceptions import (
    CommandFailedError,
    CommandSignalError,
    CommandStartError,
    EmptyCommandError,
    InvalidCommandError,
)
from cmdretry.lifetime import BACKGROUND, Lifetime
from cmdretry.process import AttemptResult, console_sink, parse_command, run_command

if TYPE_CHECKING:
    from collections.abc import Callable

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="requires POSIX process groups")


###################################
#     Tests for parse_command     #
###################################


@pytest.mark.parametrize(
    ("command", "expected"),
    [
        ("echo hello", ["echo", "hello"]),
        ("  echo   hello  ", ["echo", "hello"]),
        ("echo 'hello world'", ["echo", "hello world"]),
        ('echo "hello world"', ["echo", "hello world"]),
        ("echo 'it''s'", ["echo", "its"]),
        ("curl -s http://example.com#frag", ["curl", "-s", "http://example.com#frag"]),
        ("echo # not a comment", ["echo", "#", "not", "a", "comment"]),
    ],
)
def test_parse_command(command: str, expected: list[str]) -> None:
    """Test splitting command lines into argument vectors."""
    assert parse_command(command) == expected


@pytest.mark.parametrize("command", ["", "   ", "\t\n"])
def test_parse_command_empty(command: str) -> None:
    """Test that empty command lines raise EmptyCommandError."""
    with pytest.raises(EmptyCommandError, match=r"empty command"):
        parse_command(command)


def test_parse_command_unclosed_quote() -> None:
    """Test that an unclosed quote raises InvalidCommandError."""
    with pytest.raises(InvalidCommandError, match=r"invalid command"):
        parse_command("echo 'hello")


#################################
#     Tests for AttemptResult   #
#################################


def test_attempt_result_succeeded() -> None:
    """Test the succeeded property."""
    assert AttemptResult(exit_code=0).succeeded
    assert not AttemptResult(exit_code=1, error=CommandFailedError("false", 1)).succeeded


################################
#     Tests for console_sink   #
################################


def test_console_sink(capsys: pytest.CaptureFixture[str]) -> None:
    """Test that lines go to the matching console stream."""
    console_sink("out\n", False)
    console_sink("err\n", True)
    captured = capsys.readouterr()
    assert captured.out == "out\n"
    assert captured.err == "err\n"


#################################
#     Tests for run_command     #
#################################


def test_run_command_success(python_command: Callable[[str], str]) -> None:
    """Test a command exiting cleanly."""
    result = run_command(python_command("print('hello')"))
    assert result.exit_code == 0
    assert result.error is None
    assert result.stdout == "hello\n"
    assert result.stderr == ""
    assert result.duration >= 0


def test_run_command_failure(python_command: Callable[[str], str]) -> None:
    """Test that a non-zero exit is reported as CommandFailedError."""
    result = run_command(python_command("import sys; sys.exit(3)"))
    assert result.exit_code == 3
    assert isinstance(result.error, CommandFailedError)
    assert result.error.exit_code == 3
    assert str(result.error) == "command failed: exit status 3"


def test_run_command_signal(python_command: Callable[[str], str]) -> None:
    """Test that a signal exit is reported as 128 plus the signal."""
    result = run_command(python_command("import os, signal; os.kill(os.getpid(), signal.SIGKILL)"))
    assert result.exit_code == 137
    assert isinstance(result.error, CommandSignalError)
    assert result.error.signal_number == 9


def test_run_command_start_error() -> None:
    """Test that a missing executable is reported with exit code -1."""
    result = run_command("/nonexistent/cmdretry-missing-binary --flag")
    assert result.exit_code == -1
    assert isinstance(result.error, CommandStartError)
    assert isinstance(result.error.cause, OSError)
    assert result.stdout == ""


def test_run_command_argv() -> None:
    """Test that an argument vector is run as-is."""
    result = run_command([sys.executable, "-c", "import sys; print(sys.argv[1])", "a b"])
    assert result.exit_code == 0
    assert result.stdout == "a b\n"


def test_run_command_empty_argv() -> None:
    """Test that an empty argument vector raises EmptyCommandError."""
    with pytest.raises(EmptyCommandError):
        run_command([])


def test_run_command_empty_string() -> None:
    """Test that an empty command line raises EmptyCommandError."""
    with pytest.raises(EmptyCommandError):
        run_command("")


def test_run_command_captures_both_streams(
    python_command: Callable[[str], str],
    collecting_sink: Callable[[str, bool], None],
    output_lines: list[tuple[str, bool]],
) -> None:
    """Test that both streams are captured and sent to the sink."""
    code = "import sys; print('out1'); print('err1', file=sys.stderr); print('out2')"
    result = run_command(python_command(code), output_sink=collecting_sink)
    assert result.stdout == "out1\nout2\n"
    assert result.stderr == "err1\n"
    assert sorted(output_lines) == [("err1\n", True), ("out1\n", False), ("out2\n", False)]
    assert [line for line, is_stderr in output_lines if not is_stderr] == ["out1\n", "out2\n"]


def test_run_command_invalid_utf8(python_command: Callable[[str], str]) -> None:
    """Test that undecodable bytes are replaced."""
    result = run_command(python_command("import sys; sys.stdout.buffer.write(b'a\\xffb\\n')"))
    assert result.stdout == "a�b\n"


def test_run_command_background_lifetime(python_command: Callable[[str], str]) -> None:
    """Test that the background lifetime never interferes."""
    result = run_command(python_command("print('ok')"), lifetimes=[BACKGROUND])
    assert result.exit_code == 0


def test_run_command_killed_by_lifetime(python_command: Callable[[str], str]) -> None:
    """Test that an ended lifetime kills the running command."""
    lifetime = Lifetime(timeout=0.1)
    start = time.monotonic()
    result = run_command(python_command("import time; time.sleep(30)"), lifetimes=[BACKGROUND, lifetime])
    assert time.monotonic() - start < 10.0
    assert result.exit_code == 137
    assert isinstance(result.error, CommandSignalError)


def test_run_command_already_cancelled(python_command: Callable[[str], str]) -> None:
    """Test that a lifetime that already ended kills the command at
    once."""
    lifetime = Lifetime()
    lifetime.cancel()
    start = time.monotonic()
    result = run_command(python_command("import time; time.sleep(30)"), lifetimes=[lifetime])
    assert time.monotonic() - start < 10.0
    assert result.exit_code == 137


def test_run_command_kills_process_group(python_command: Callable[[str], str]) -> None:
    """Test that children holding the output pipes are killed too."""
    code = (
        "import subprocess, sys, time; "
        "subprocess.Popen([sys.executable, '-c', 'import time; time.sleep(30)']); "
        "time.sleep(30)"
    )
    lifetime = Lifetime(timeout=0.2)
    start = time.monotonic()
    result = run_command(python_command(code), lifetimes=[lifetime])
    assert time.monotonic() - start < 10.0
    assert result.exit_code == 137


def test_run_command_removes_callbacks(python_command: Callable[[str], str]) -> None:
    """Test that a lifetime ending after the attempt kills nothing."""
    lifetime = Lifetime()
    result = run_command(python_command("print('done')"), lifetimes=[lifetime])
    assert result.exit_code == 0
    assert lifetime._callbacks == []
    lifetime.cancel()


def test_run_command_failing_sink_keeps_draining(python_command: Callable[[str], str]) -> None:
    """Test that a failing sink neither stops the readers nor fails the
    attempt."""
    calls: list[str] = []

    def sink(line: str, is_stderr: bool) -> None:  # noqa: ARG001
        calls.append(line)
        msg = "sink is broken"
        raise RuntimeError(msg)

    code = "import sys\nfor i in range(5000): print('x' * 64)\nprint('done', file=sys.stderr)"
    result = run_command(python_command(code), output_sink=sink)
    assert result.exit_code == 0
    assert result.error is None
    assert result.stdout.count("\n") == 5000
    assert result.stderr == "done\n"
    assert len(calls) == 5001
