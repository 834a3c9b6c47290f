r"""Unit tests for the exit code conditions."""

from __future__ import annotations

from cmdretry.conditions import RetryOnExitCode, StopOnExitCode, SuccessOnExitCode

##########################################
#     Tests for StopOnExitCode           #
##########################################


def test_stop_on_exit_code_not_reached_before_feed() -> None:
    """Test that the condition is pending before any exit code."""
    assert not StopOnExitCode([1]).is_reached()


def test_stop_on_exit_code_matching_code() -> None:
    """Test that a listed exit code reaches the condition."""
    condition = StopOnExitCode([2, 3])
    condition.feed_exit_code(3)
    assert condition.is_reached()


def test_stop_on_exit_code_other_code() -> None:
    """Test that an unlisted exit code does not reach the condition."""
    condition = StopOnExitCode([2, 3])
    condition.feed_exit_code(1)
    assert not condition.is_reached()


def test_stop_on_exit_code_last_feed_wins() -> None:
    """Test that only the last fed exit code counts."""
    condition = StopOnExitCode([1])
    condition.feed_exit_code(1)
    condition.feed_exit_code(0)
    assert not condition.is_reached()
    condition.feed_exit_code(1)
    assert condition.is_reached()


def test_stop_on_exit_code_ignores_output() -> None:
    """Test that output feeds do not change the state."""
    condition = StopOnExitCode([1])
    condition.feed_output("1", "1")
    assert not condition.is_reached()


def test_stop_on_exit_code_describe() -> None:
    """Test the description of StopOnExitCode."""
    condition = StopOnExitCode([3, 2])
    condition.feed_exit_code(2)
    info = condition.describe()
    assert info.kind == "stop_on_exit_code"
    assert info.fields == {"exit_codes": [2, 3], "last_exit_code": 2}


##########################################
#     Tests for SuccessOnExitCode        #
##########################################


def test_success_on_exit_code_is_success_condition() -> None:
    """Test that SuccessOnExitCode is a success-type condition."""
    condition = SuccessOnExitCode([0])
    assert condition.is_success_condition
    assert condition.success_conditions() == [condition]


def test_success_on_exit_code_matching_code() -> None:
    """Test that a listed exit code means success."""
    condition = SuccessOnExitCode([0, 3])
    assert not condition.is_reached()
    condition.feed_exit_code(3)
    assert condition.is_reached()


def test_success_on_exit_code_last_feed_wins() -> None:
    """Test that a later unlisted exit code clears the success."""
    condition = SuccessOnExitCode([3])
    condition.feed_exit_code(3)
    condition.feed_exit_code(1)
    assert not condition.is_reached()


##########################################
#     Tests for RetryOnExitCode          #
##########################################


def test_retry_on_exit_code_allows_first_attempt() -> None:
    """Test that the condition is not reached before any feed."""
    assert not RetryOnExitCode([75]).is_reached()


def test_retry_on_exit_code_retryable_code() -> None:
    """Test that a retryable exit code keeps retrying."""
    condition = RetryOnExitCode([75, 111])
    condition.feed_exit_code(111)
    assert not condition.is_reached()


def test_retry_on_exit_code_other_code_stops() -> None:
    """Test that any other exit code stops the loop."""
    condition = RetryOnExitCode([75])
    condition.feed_exit_code(1)
    assert condition.is_reached()
    condition.feed_exit_code(0)
    assert condition.is_reached()


def test_retry_on_exit_code_last_feed_wins() -> None:
    """Test that only the last fed exit code counts."""
    condition = RetryOnExitCode([75])
    condition.feed_exit_code(1)
    condition.feed_exit_code(75)
    assert not condition.is_reached()
