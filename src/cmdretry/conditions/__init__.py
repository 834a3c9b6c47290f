r"""Conditions deciding when the retry loop stops or succeeds.

Stop conditions end the loop (maximum tries, timeouts, exit codes,
output patterns, time of day). Success conditions turn a failing attempt
into a success. Retry-gating conditions allow retries only while a
trigger holds. ``CompositeCondition`` combines any of them with AND/OR
logic.
"""

from __future__ import annotations

__all__ = [
    "BaseCondition",
    "CompositeCondition",
    "ConditionInfo",
    "FailIfContains",
    "FeedableCondition",
    "LogicOperator",
    "OutputMatcher",
    "RetryIfContains",
    "RetryOnExitCode",
    "RetryRegex",
    "StopAtTimeOfDay",
    "StopOnExitCode",
    "StopOnMaxExecutionTime",
    "StopOnMaxTries",
    "StopOnOutputPattern",
    "StopOnTimeout",
    "SuccessContains",
    "SuccessOnExitCode",
    "SuccessRegex",
]

from cmdretry.conditions.base import BaseCondition, ConditionInfo, FeedableCondition
from cmdretry.conditions.composite import CompositeCondition, LogicOperator
from cmdretry.conditions.exit_code import RetryOnExitCode, StopOnExitCode, SuccessOnExitCode
from cmdretry.conditions.gating import RetryIfContains, RetryRegex
from cmdretry.conditions.matching import OutputMatcher
from cmdretry.conditions.max_tries import StopOnMaxTries
from cmdretry.conditions.output import FailIfContains, StopOnOutputPattern
from cmdretry.conditions.success import SuccessContains, SuccessRegex
from cmdretry.conditions.time_of_day import StopAtTimeOfDay
from cmdretry.conditions.timing import StopOnMaxExecutionTime, StopOnTimeout
