r"""Pattern matching over the captured output of an attempt."""

from __future__ import annotations

__all__ = ["OutputMatcher"]

import logging
import re

from cmdretry.exceptions import InvalidPatternError

logger: logging.Logger = logging.getLogger(__name__)


class OutputMatcher:
    r"""Search a pattern in the concatenation of stdout and stderr.

    The pattern is compiled as a regular expression. In lenient mode a
    pattern that does not compile is searched as a literal substring
    instead; in strict mode it raises ``InvalidPatternError``. An empty
    pattern matches any output.

    Args:
        pattern: The regular expression or literal to search.
        strict: Whether an invalid regular expression is an error.

    Raises:
        InvalidPatternError: If ``strict`` is set and ``pattern`` is not a
            valid regular expression.

    Example:
        ```pycon
        >>> from cmdretry.conditions.matching import OutputMatcher
        >>> OutputMatcher(r"HTTP/\d 200").matches("HTTP/1 200 OK\n", "")
        True
        >>> matcher = OutputMatcher("[unclosed")
        >>> matcher.is_literal
        True
        >>> matcher.matches("", "error: [unclosed bracket")
        True

        ```
    """

    def __init__(self, pattern: str, strict: bool = False) -> None:
        self.pattern = pattern
        self._regex: re.Pattern[str] | None
        try:
            self._regex = re.compile(pattern)
        except re.error as exc:
            if strict:
                raise InvalidPatternError(pattern, exc) from exc
            logger.debug(f"Pattern {pattern!r} is not a valid regex ({exc}), using literal matching")
            self._regex = None

    @property
    def is_literal(self) -> bool:
        """Whether the pattern is searched as a literal substring."""
        return self._regex is None

    def matches(self, stdout: str, stderr: str) -> bool:
        """Return whether the pattern occurs in ``stdout + stderr``."""
        combined = stdout + stderr
        if self._regex is not None:
            return self._regex.search(combined) is not None
        return self.pattern in combined

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(pattern={self.pattern!r}, literal={self.is_literal})"
