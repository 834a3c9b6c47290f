from __future__ import annotations

import shlex
import sys
from typing import TYPE_CHECKING
from unittest.mock import Mock, patch

import pytest

if TYPE_CHECKING:
    from collections.abc import Callable, Generator


@pytest.fixture
def mock_sleep() -> Generator[Mock, None, None]:
    """Patch time.sleep to make tests run faster."""
    with patch("time.sleep", return_value=None) as mock:
        yield mock


@pytest.fixture
def mock_listener() -> Mock:
    """Create a mock execution listener for testing listener events."""
    return Mock()


@pytest.fixture
def output_lines() -> list[tuple[str, bool]]:
    """Collect the lines passed to an output sink."""
    return []


@pytest.fixture
def collecting_sink(output_lines: list[tuple[str, bool]]) -> Callable[[str, bool], None]:
    """Create an output sink appending every line to ``output_lines``."""

    def sink(line: str, is_stderr: bool) -> None:
        output_lines.append((line, is_stderr))

    return sink


@pytest.fixture
def python_command() -> Callable[[str], str]:
    """Build a command line running a Python snippet with the current
    interpreter.

    Example:
        >>> def test_exit(python_command):
        ...     command = python_command("import sys; sys.exit(3)")
    """

    def build(code: str) -> str:
        return f"{shlex.quote(sys.executable)} -c {shlex.quote(code)}"

    return build
