r"""Unit tests for the condition base classes."""

from __future__ import annotations

import pytest

from cmdretry.conditions import BaseCondition, ConditionInfo, FeedableCondition
from cmdretry.lifetime import BACKGROUND


class _AlwaysReached(BaseCondition):
    def is_reached(self) -> bool:
        return True

    def describe(self) -> ConditionInfo:
        return ConditionInfo(kind="always", label="always", fields={"value": 1})


class _SuccessReached(_AlwaysReached):
    is_success_condition = True


class _Feedable(FeedableCondition):
    def is_reached(self) -> bool:
        return False

    def describe(self) -> ConditionInfo:
        return ConditionInfo(kind="feedable", label="feedable")


##########################################
#     Tests for ConditionInfo            #
##########################################


def test_condition_info_defaults() -> None:
    """Test the default fields and children of ConditionInfo."""
    info = ConditionInfo(kind="max_tries", label="max tries")
    assert info.fields == {}
    assert info.children == ()


def test_condition_info_walk() -> None:
    """Test that walk visits nested descriptions depth-first."""
    leaf1 = ConditionInfo(kind="a", label="a")
    leaf2 = ConditionInfo(kind="b", label="b")
    inner = ConditionInfo(kind="inner", label="inner", children=(leaf2,))
    root = ConditionInfo(kind="root", label="root", children=(leaf1, inner))
    assert [node.kind for node in root.walk()] == ["root", "a", "inner", "b"]


##########################################
#     Tests for BaseCondition            #
##########################################


def test_base_condition_is_abstract() -> None:
    """Test that BaseCondition cannot be instantiated."""
    with pytest.raises(TypeError):
        BaseCondition()  # type: ignore[abstract]


def test_base_condition_defaults() -> None:
    """Test the default lifetime and lifecycle hooks."""
    condition = _AlwaysReached()
    assert condition.lifetime is BACKGROUND
    condition.on_try_start()
    condition.on_try_end()
    assert condition.is_reached()


def test_base_condition_success_conditions() -> None:
    """Test that only success-type conditions list themselves."""
    assert _AlwaysReached().success_conditions() == []
    success = _SuccessReached()
    assert success.success_conditions() == [success]


def test_base_condition_repr() -> None:
    """Test that repr lists the described fields."""
    assert repr(_AlwaysReached()) == "_AlwaysReached(value=1)"


##########################################
#     Tests for FeedableCondition        #
##########################################


def test_feedable_condition_default_feeds_are_ignored() -> None:
    """Test that the default feed methods accept any data."""
    condition = _Feedable()
    condition.feed_exit_code(1)
    condition.feed_output("out", "err")
    assert not condition.is_reached()
