r"""Backoff strategies for delays between command attempts.

This package provides various backoff strategies for calculating the
delay before the next attempt, including fixed, linear, exponential,
Fibonacci and custom-sequence patterns, plus a jitter decorator that
randomizes any of them.
"""

from __future__ import annotations

__all__ = [
    "BaseBackoffStrategy",
    "CustomBackoff",
    "ExponentialBackoff",
    "FibonacciBackoff",
    "FixedBackoff",
    "JitterBackoff",
    "LinearBackoff",
]

from cmdretry.backoff.base import BaseBackoffStrategy
from cmdretry.backoff.custom import CustomBackoff
from cmdretry.backoff.exponential import ExponentialBackoff
from cmdretry.backoff.fibonacci import FibonacciBackoff
from cmdretry.backoff.fixed import FixedBackoff
from cmdretry.backoff.jitter import JitterBackoff
from cmdretry.backoff.linear import LinearBackoff
