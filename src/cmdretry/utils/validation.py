r"""Parameter validation utilities for the retry configuration.

This module provides validation functions for retry parameters to ensure
they meet the required constraints before conditions and backoff
strategies are built from them.
"""

from __future__ import annotations

__all__ = ["validate_backoff_params", "validate_retry_params"]

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

BACKOFF_NAMES = ("fixed", "linear", "exponential", "fibonacci", "custom")


def validate_retry_params(
    max_tries: int,
    timeout: float | None = None,
    max_execution_time: float | None = None,
) -> None:
    """Validate the stop parameters.

    Args:
        max_tries: Maximum number of attempts. Must be >= 0. A value of 0
            means unbounded.
        timeout: Timeout in seconds for the whole retry loop. Must be > 0
            if provided.
        max_execution_time: Maximum execution time in seconds. Must be > 0
            if provided.

    Raises:
        ValueError: If max_tries is negative, or if timeout or
            max_execution_time are non-positive.

    Example:
        ```pycon
        >>> from cmdretry.utils import validate_retry_params
        >>> validate_retry_params(max_tries=3)
        >>> validate_retry_params(max_tries=0, timeout=30.0)
        >>> validate_retry_params(max_tries=-1)  # doctest: +SKIP

        ```
    """
    if max_tries < 0:
        msg = f"max_tries must be >= 0, got {max_tries}"
        raise ValueError(msg)
    if timeout is not None and timeout <= 0:
        msg = f"timeout must be > 0, got {timeout}"
        raise ValueError(msg)
    if max_execution_time is not None and max_execution_time <= 0:
        msg = f"max_execution_time must be > 0, got {max_execution_time}"
        raise ValueError(msg)


def validate_backoff_params(
    backoff: str,
    delay: float = 0.0,
    max_delay: float | None = None,
    increment: float = 0.0,
    multiplier: float = 2.0,
    custom_delays: Sequence[float] = (),
    jitter: float = 0.0,
) -> None:
    """Validate the backoff parameters.

    Args:
        backoff: The backoff strategy name, one of ``"fixed"``,
            ``"linear"``, ``"exponential"``, ``"fibonacci"`` or
            ``"custom"``.
        delay: The base delay in seconds. Must be >= 0.
        max_delay: The maximum delay in seconds. Must be >= 0 if
            provided; 0 means uncapped.
        increment: The linear increment in seconds. Must be >= 0.
        multiplier: The exponential multiplier. Must be > 1 for the
            exponential strategy.
        custom_delays: The delays of the custom strategy. Must be
            non-empty for the custom strategy, and every delay >= 0.
        jitter: The jitter ratio. Must be in ``[0, 1]``.

    Raises:
        ValueError: If any parameter is out of range or the strategy name
            is unknown.

    Example:
        ```pycon
        >>> from cmdretry.utils import validate_backoff_params
        >>> validate_backoff_params("exponential", delay=1.0, multiplier=2.0)
        >>> validate_backoff_params("custom", custom_delays=[1.0, 5.0])
        >>> validate_backoff_params("custom")  # doctest: +SKIP

        ```
    """
    if backoff not in BACKOFF_NAMES:
        msg = f"backoff must be one of {BACKOFF_NAMES}, got {backoff!r}"
        raise ValueError(msg)
    if delay < 0:
        msg = f"delay must be >= 0, got {delay}"
        raise ValueError(msg)
    if max_delay is not None and max_delay < 0:
        msg = f"max_delay must be >= 0, got {max_delay}"
        raise ValueError(msg)
    if increment < 0:
        msg = f"increment must be >= 0, got {increment}"
        raise ValueError(msg)
    if backoff == "exponential" and multiplier <= 1:
        msg = f"multiplier must be > 1, got {multiplier}"
        raise ValueError(msg)
    if backoff == "custom" and not custom_delays:
        msg = "custom_delays must not be empty for the custom backoff"
        raise ValueError(msg)
    for value in custom_delays:
        if value < 0:
            msg = f"custom_delays must be >= 0, got {value}"
            raise ValueError(msg)
    if not 0 <= jitter <= 1:
        msg = f"jitter must be between 0 and 1, got {jitter}"
        raise ValueError(msg)
