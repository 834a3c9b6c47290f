r"""Structured logging utilities for machine-readable log output.

This module provides utilities for structured logging with JSON
formatting, execution IDs, and consistent field names. This is useful
when retry logs are shipped to a log aggregation system.

The structured logging system is opt-in and can be enabled by
configuring Python's logging system to use the provided formatter.

Example:
    Enable structured logging for cmdretry:

    ```python
    import logging
    from cmdretry.utils.structured_logging import StructuredFormatter

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())

    logger = logging.getLogger("cmdretry")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    ```

    Every record logged while ``RetryEngine.run`` executes carries the ID
    of that execution, so the lines of concurrent runs can be told apart.
"""

from __future__ import annotations

__all__ = [
    "StructuredFormatter",
    "clear_execution_id",
    "get_execution_id",
    "log_structured",
    "reset_execution_id",
    "set_execution_id",
]

import contextvars
import json
import logging
import time
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

_execution_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "execution_id", default=None
)

# Attributes every LogRecord has; anything else was passed through ``extra``.
_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "msecs",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "sinfo",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "message",
        "taskName",
    }
)


def get_execution_id() -> str | None:
    """Get the current execution ID.

    Returns:
        The current execution ID, or None if not set.

    Example:
        ```pycon
        >>> from cmdretry.utils.structured_logging import (
        ...     clear_execution_id,
        ...     get_execution_id,
        ...     set_execution_id,
        ... )
        >>> _ = set_execution_id("run-123")
        >>> get_execution_id()
        'run-123'
        >>> clear_execution_id()

        ```
    """
    return _execution_id.get()


def set_execution_id(execution_id: str) -> contextvars.Token[str | None]:
    """Set the execution ID for the current context.

    Args:
        execution_id: The execution ID to set.

    Returns:
        A token that restores the previous value when passed to
        ``reset_execution_id``.
    """
    return _execution_id.set(execution_id)


def reset_execution_id(token: contextvars.Token[str | None]) -> None:
    """Restore the execution ID that was current before ``set_execution_id``.

    Args:
        token: The token returned by ``set_execution_id``.
    """
    _execution_id.reset(token)


def clear_execution_id() -> None:
    """Clear the execution ID for the current context."""
    _execution_id.set(None)


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {key: value for key, value in vars(record).items() if key not in _RESERVED_ATTRS}


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Each record becomes one JSON object on a single line. Records logged
    during a retry execution carry its ``execution_id``, and the fields
    passed through ``extra`` (or ``log_structured``) are kept as top-level
    keys. Values that JSON cannot encode are written with ``str``.

    Fields in the JSON output:
        - timestamp: ISO 8601 UTC timestamp with milliseconds
        - level, logger, message
        - execution_id: only while an execution is running
        - module, function, line: only with ``include_location``
        - thread, process
        - exception, stack: only when the record has them

    Args:
        static_fields: Fields added to every record, for example the name
            of the job wrapping the command. Record fields win on conflict.
        include_location: Whether to include the source location of the
            logging call.

    Example:
        ```pycon
        >>> import logging
        >>> from io import StringIO
        >>> from cmdretry.utils.structured_logging import StructuredFormatter
        >>> stream = StringIO()
        >>> handler = logging.StreamHandler(stream)
        >>> handler.setFormatter(StructuredFormatter(static_fields={"job": "nightly"}))
        >>> logger = logging.getLogger("test_logger")
        >>> logger.addHandler(handler)
        >>> logger.setLevel(logging.INFO)
        >>> logger.info("Attempt failed", extra={"exit_code": 1})
        >>> output = stream.getvalue()
        >>> '"exit_code": 1' in output, '"job": "nightly"' in output
        (True, True)

        ```
    """

    def __init__(
        self,
        static_fields: Mapping[str, Any] | None = None,
        include_location: bool = True,
    ) -> None:
        super().__init__()
        self.static_fields = dict(static_fields or {})
        self.include_location = include_location

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as a single line of JSON."""
        entry: dict[str, Any] = dict(self.static_fields)
        entry.update(
            timestamp=self.formatTime(record),
            level=record.levelname,
            logger=record.name,
            message=record.getMessage(),
        )
        execution_id = get_execution_id()
        if execution_id is not None:
            entry["execution_id"] = execution_id
        if self.include_location:
            entry.update(module=record.module, function=record.funcName, line=record.lineno)
        entry.update(thread=record.threadName, process=record.process)

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            entry["stack"] = self.formatStack(record.stack_info)

        entry.update(_extra_fields(record))
        return json.dumps(entry, default=str)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:  # noqa: ARG002
        """Format timestamp as ISO 8601 with millisecond precision.

        Args:
            record: The log record.
            datefmt: Optional date format (ignored, always uses ISO 8601).

        Returns:
            ISO 8601 formatted timestamp.
        """
        return time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created)) + f".{int(record.msecs):03d}Z"


def log_structured(
    logger: logging.Logger,
    level: int,
    message: str,
    **extra: Any,
) -> None:
    """Log a message with structured data.

    The extra fields will be included in JSON output when using
    ``StructuredFormatter``.

    Args:
        logger: Logger to use.
        level: Log level (e.g., logging.INFO).
        message: Log message.
        **extra: Additional structured fields to include in the log.

    Example:
        ```pycon
        >>> import logging
        >>> from io import StringIO
        >>> from cmdretry.utils.structured_logging import (
        ...     StructuredFormatter,
        ...     log_structured,
        ... )
        >>> stream = StringIO()
        >>> handler = logging.StreamHandler(stream)
        >>> handler.setFormatter(StructuredFormatter())
        >>> logger = logging.getLogger("test_structured")
        >>> logger.addHandler(handler)
        >>> logger.setLevel(logging.DEBUG)
        >>> log_structured(logger, logging.INFO, "Attempt finished", attempt=2, exit_code=0)
        >>> "exit_code" in stream.getvalue()
        True

        ```
    """
    logger.log(level, message, extra=extra, stacklevel=2)
