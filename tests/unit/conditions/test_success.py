r"""Unit tests for SuccessContains and SuccessRegex."""

from __future__ import annotations

import pytest

from cmdretry.conditions import SuccessContains, SuccessRegex
from cmdretry.exceptions import InvalidPatternError

##########################################
#     Tests for SuccessContains          #
##########################################


def test_success_contains_found() -> None:
    """Test that SuccessContains is reached when the pattern is found."""
    condition = SuccessContains("200 OK")
    assert not condition.is_reached()
    condition.feed_output("HTTP/1.1 200 OK\n", "")
    assert condition.is_reached()


def test_success_contains_last_feed_wins() -> None:
    """Test that a later output without the pattern clears the success."""
    condition = SuccessContains("200 OK")
    condition.feed_output("200 OK", "")
    condition.feed_output("503", "")
    assert not condition.is_reached()


def test_success_contains_is_success_condition() -> None:
    """Test that SuccessContains is a success-type condition."""
    condition = SuccessContains("x")
    assert condition.is_success_condition
    assert condition.success_conditions() == [condition]


def test_success_contains_invalid_regex_is_literal() -> None:
    """Test that SuccessContains never fails on an invalid regex."""
    condition = SuccessContains("[ok")
    condition.feed_output("status [ok]\n", "")
    assert condition.is_reached()


##########################################
#     Tests for SuccessRegex             #
##########################################


def test_success_regex_matches() -> None:
    """Test that SuccessRegex is reached when the regex matches."""
    condition = SuccessRegex(r"version \d+\.\d+")
    condition.feed_output("", "tool version 3.12\n")
    assert condition.is_reached()


def test_success_regex_no_match() -> None:
    """Test that SuccessRegex is not reached without a match."""
    condition = SuccessRegex(r"^done$")
    condition.feed_output("not done yet", "")
    assert not condition.is_reached()


def test_success_regex_invalid() -> None:
    """Test that an invalid regex raises InvalidPatternError."""
    with pytest.raises(InvalidPatternError, match=r"invalid regex pattern"):
        SuccessRegex("[unclosed")


def test_success_regex_invalid_is_value_error() -> None:
    """Test that InvalidPatternError is a ValueError."""
    with pytest.raises(ValueError):  # noqa: PT011
        SuccessRegex("(")


def test_success_regex_describe() -> None:
    """Test the description of SuccessRegex."""
    info = SuccessRegex("ok").describe()
    assert info.kind == "success_regex"
    assert info.fields == {"pattern": "ok"}
