r"""Unit tests for execution listeners."""

from __future__ import annotations

import logging

import pytest
from coola import objects_are_equal

from cmdretry.listener import (
    AttemptRecord,
    ExecutionListener,
    ExecutionSummary,
    LoggingExecutionListener,
)

###########################################
#     Tests for ExecutionListener         #
###########################################


def test_execution_listener_ignores_events() -> None:
    """Test that the base listener accepts every event."""
    listener = ExecutionListener()
    listener.start_execution("make", 3, "fixed")
    listener.start_attempt(1)
    listener.on_output("line\n", False)
    listener.end_attempt(1, False)
    listener.on_retry_delay(1.0)
    listener.end_execution(False, "max tries reached", "max tries")


###########################################
#     Tests for ExecutionSummary          #
###########################################


def test_format_summary_success() -> None:
    """Test the summary of a successful execution."""
    summary = ExecutionSummary(
        command="make test",
        max_tries=3,
        backoff_strategy="fixed",
        total_attempts=2,
        final_exit_code=0,
        success=True,
        total_duration=1.5,
    )
    assert summary.format_summary() == "\n".join(
        [
            f"{'═' * 15} SUMMARY {'═' * 15}",
            "Result: Success",
            "Attempts: 2/3",
            "Duration: 1.500s",
            "Final exit code: 0",
            "═" * 41,
        ]
    )


def test_format_summary_failure_verbose() -> None:
    """Test the verbose summary of a failed execution."""
    summary = ExecutionSummary(
        command="make test",
        max_tries=3,
        backoff_strategy="exponential",
        total_attempts=3,
        final_exit_code=2,
        failure_reason="max tries reached",
        stop_condition="max tries",
    )
    lines = summary.format_summary(verbose=True).splitlines()
    assert lines[1] == "Result: Failed (max tries reached)"
    assert "Stop condition: max tries" in lines
    assert "Backoff strategy: exponential" in lines
    assert "Command: make test" in lines


def test_format_summary_unbounded_default_reason() -> None:
    """Test the summary without max tries nor failure reason."""
    lines = ExecutionSummary(total_attempts=4, final_exit_code=1).format_summary().splitlines()
    assert lines[1] == "Result: Failed (Command failed)"
    assert lines[2] == "Attempts: 4"
    assert not any(line.startswith("Command:") for line in lines)


def test_summary_to_dict() -> None:
    """Test the dictionary form of a summary."""
    summary = ExecutionSummary(command="true", max_tries=1, total_attempts=1, final_exit_code=0, success=True)
    summary.attempts.append(AttemptRecord(attempt=1, exit_code=0, success=True))
    assert objects_are_equal(
        summary.to_dict(),
        {
            "command": "true",
            "max_tries": 1,
            "backoff_strategy": "",
            "total_attempts": 1,
            "final_exit_code": 0,
            "success": True,
            "failure_reason": "",
            "stop_condition": "",
            "total_duration": 0.0,
            "attempts": [{"attempt": 1, "exit_code": 0, "success": True, "duration": 0.0, "output": ""}],
        },
    )


###########################################
#     Tests for LoggingExecutionListener  #
###########################################


def test_logging_listener_summary() -> None:
    """Test that the listener records every attempt."""
    listener = LoggingExecutionListener()
    listener.start_execution("make test", 3, "fixed")
    listener.start_attempt(1)
    listener.on_output("first\n", False)
    listener.on_output("oops\n", True)
    listener.end_attempt(1, False)
    listener.on_retry_delay(0.5)
    listener.start_attempt(2)
    listener.end_attempt(0, True)
    listener.end_execution(True)

    summary = listener.summary
    assert summary.command == "make test"
    assert summary.total_attempts == 2
    assert summary.final_exit_code == 0
    assert summary.success
    assert summary.total_duration >= 0
    assert [(record.attempt, record.exit_code, record.success) for record in summary.attempts] == [
        (1, 1, False),
        (2, 0, True),
    ]
    assert summary.attempts[0].output == "first\noops\n"


def test_logging_listener_failure() -> None:
    """Test that the failure reason and stop condition are recorded."""
    listener = LoggingExecutionListener()
    listener.start_execution("false", 1, "none")
    listener.start_attempt(1)
    listener.end_attempt(1, False)
    listener.end_execution(False, "max tries reached", "max tries")
    assert not listener.summary.success
    assert listener.summary.failure_reason == "max tries reached"
    assert listener.summary.stop_condition == "max tries"


def test_logging_listener_restarts_summary() -> None:
    """Test that a new execution starts a new summary."""
    listener = LoggingExecutionListener()
    listener.start_execution("a", 1, "fixed")
    listener.start_attempt(1)
    listener.start_execution("b", 2, "linear")
    assert listener.summary.command == "b"
    assert listener.summary.attempts == []


def test_logging_listener_log_messages(caplog: pytest.LogCaptureFixture) -> None:
    """Test the messages and levels of the logged events."""
    listener = LoggingExecutionListener()
    with caplog.at_level(logging.DEBUG, logger="cmdretry.listener"):
        listener.start_execution("make", 2, "fixed")
        listener.start_attempt(1)
        listener.end_attempt(1, False)
        listener.on_retry_delay(1.0)
        listener.start_attempt(2)
        listener.end_attempt(0, True)
        listener.end_execution(True)

    messages = [(record.levelno, record.getMessage()) for record in caplog.records]
    assert messages == [
        (logging.DEBUG, "Retry execution starting: make"),
        (logging.INFO, "[1/2] Attempting command..."),
        (logging.WARNING, "Command failed (exit code 1)"),
        (logging.INFO, "Waiting 1.000s before retry..."),
        (logging.INFO, "[2/2] Retrying..."),
        (logging.INFO, "Command succeeded (exit code 0)"),
        (logging.INFO, "Retry execution completed successfully"),
    ]
    assert caplog.records[2].exit_code == 1


def test_logging_listener_failure_log(caplog: pytest.LogCaptureFixture) -> None:
    """Test the structured fields of a failed execution."""
    listener = LoggingExecutionListener()
    with caplog.at_level(logging.WARNING, logger="cmdretry.listener"):
        listener.start_execution("make", 0, "fixed")
        listener.start_attempt(1)
        listener.end_execution(False, "context timeout", "timeout")
    record = caplog.records[-1]
    assert record.getMessage() == "Retry execution failed: context timeout"
    assert record.stop_condition == "timeout"
    assert record.attempts == 1


def test_logging_listener_unbounded_progress(caplog: pytest.LogCaptureFixture) -> None:
    """Test the progress message without max tries."""
    listener = LoggingExecutionListener()
    with caplog.at_level(logging.INFO, logger="cmdretry.listener"):
        listener.start_execution("make", 0, "fixed")
        listener.start_attempt(7)
    assert caplog.records[-1].getMessage() == "[7] Retrying..."


def test_logging_listener_log_output(caplog: pytest.LogCaptureFixture) -> None:
    """Test that output lines are logged on request only."""
    quiet = LoggingExecutionListener()
    verbose = LoggingExecutionListener(logger=logging.getLogger("cmdretry.tests.output"), log_output=True)
    with caplog.at_level(logging.DEBUG):
        quiet.on_output("hidden\n", False)
        verbose.on_output("shown\n", True)
    assert [record.getMessage() for record in caplog.records] == ["shown"]
    assert caplog.records[0].stream == "stderr"
