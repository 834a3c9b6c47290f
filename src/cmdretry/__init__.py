r"""cmdretry - Retry external commands until a policy says stop.

This package repeatedly executes an external command until a termination
policy is satisfied. It combines pluggable conditions, deciding when to
stop and what counts as success, with pluggable backoff strategies
spacing the attempts. It is meant for flaky commands, slow-starting
dependencies and transient network failures.

Key Features:
    - Stop conditions: maximum tries, timeout, maximum execution time,
      time of day, exit codes and output patterns
    - Success conditions overriding a failing exit status
    - Retry-gating conditions retrying only while a trigger holds
    - AND/OR composition of conditions, with timeouts that kill the
      attempt in flight
    - Backoff strategies: fixed, linear, exponential, Fibonacci, custom
      sequences, and jitter
    - The command runs in its own process group, so cancellation kills
      every process it spawned
    - Listener API and structured JSON logging for observability

Example:
    ```pycon
    >>> from cmdretry import RetryConfig
    >>> config = RetryConfig(max_tries=5, delay=1.0, backoff="exponential")
    >>> engine = config.create_engine("curl -f https://api.example.com")
    >>> result = engine.run()  # doctest: +SKIP
    >>> from cmdretry import RetryEngine
    >>> from cmdretry.conditions import CompositeCondition, StopOnMaxTries, StopOnTimeout
    >>> engine = RetryEngine(
    ...     "make test",
    ...     CompositeCondition("OR", StopOnMaxTries(10), StopOnTimeout(60.0)),
    ... )
    >>> result = engine.run()  # doctest: +SKIP

    ```
"""

from __future__ import annotations

__all__ = [
    "AttemptResult",
    "CommandError",
    "CommandRetryError",
    "ExecutionCancelledError",
    "ExecutionListener",
    "ExecutionResult",
    "Lifetime",
    "LoggingExecutionListener",
    "PolicyExhaustedError",
    "RetryConfig",
    "RetryEngine",
    "__version__",
    "run_command",
]

from importlib.metadata import PackageNotFoundError, version

from cmdretry.config import RetryConfig
from cmdretry.engine import ExecutionResult, RetryEngine
from cmdretry.exceptions import (
    CommandError,
    CommandRetryError,
    ExecutionCancelledError,
    PolicyExhaustedError,
)
from cmdretry.lifetime import Lifetime
from cmdretry.listener import ExecutionListener, LoggingExecutionListener
from cmdretry.process import AttemptResult, run_command

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    # Package is not installed, fallback if needed
    __version__ = "0.0.0"
