r"""Unit tests for package initialization and metadata."""

from __future__ import annotations

import pytest

import cmdretry


def test_package_version_is_string() -> None:
    """Test that __version__ is a non-empty string."""
    assert isinstance(cmdretry.__version__, str)
    assert len(cmdretry.__version__) > 0


def test_package_version_format() -> None:
    """Test that __version__ follows semantic versioning."""
    assert "." in cmdretry.__version__


def test_all_exports_defined() -> None:
    """Test that all items in __all__ are defined in the module."""
    for name in cmdretry.__all__:
        assert hasattr(cmdretry, name), f"{name} is in __all__ but not defined in module"


def test_all_exports_sorted() -> None:
    """Test that __all__ is sorted."""
    assert list(cmdretry.__all__) == sorted(cmdretry.__all__)


@pytest.mark.parametrize(
    "name",
    ["CommandError", "ExecutionCancelledError", "PolicyExhaustedError"],
)
def test_exceptions_share_base_class(name: str) -> None:
    """Test that the exported errors derive from CommandRetryError."""
    assert issubclass(getattr(cmdretry, name), cmdretry.CommandRetryError)


def test_run_command_is_callable() -> None:
    """Test that run_command is exported as a callable."""
    assert callable(cmdretry.run_command)
