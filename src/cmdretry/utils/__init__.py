r"""Utility functions shared across the package."""

from __future__ import annotations

__all__ = [
    "StructuredFormatter",
    "clear_execution_id",
    "get_execution_id",
    "log_structured",
    "reset_execution_id",
    "set_execution_id",
    "validate_backoff_params",
    "validate_retry_params",
]

from cmdretry.utils.structured_logging import (
    StructuredFormatter,
    clear_execution_id,
    get_execution_id,
    log_structured,
    reset_execution_id,
    set_execution_id,
)
from cmdretry.utils.validation import validate_backoff_params, validate_retry_params
