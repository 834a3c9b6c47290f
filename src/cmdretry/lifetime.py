r"""Cancellable lifetimes used to tear down in-flight work.

A lifetime is a signal meaning "this scope has ended". It is pending
until it is cancelled explicitly or until its optional deadline expires;
once done it stays done. Work bound to a lifetime (a running process, a
backoff sleep, a composite condition's monitoring thread) registers a
done callback or waits on it.

``BACKGROUND`` is the process-wide lifetime that is never done. It is
what conditions without a deadline expose, and composite conditions use
``cancellable`` to skip it when merging signals.

Example:
    ```pycon
    >>> from cmdretry.lifetime import BACKGROUND, CancelReason, Lifetime
    >>> lifetime = Lifetime()
    >>> lifetime.done()
    False
    >>> lifetime.cancel()
    >>> lifetime.done(), lifetime.reason
    (True, <CancelReason.CANCELLED: 'context canceled'>)
    >>> BACKGROUND.cancellable
    False

    ```
"""

from __future__ import annotations

__all__ = ["BACKGROUND", "CancelReason", "Lifetime", "wait_any"]

import logging
import threading
import time
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

logger: logging.Logger = logging.getLogger(__name__)


class CancelReason(Enum):
    """Why a lifetime ended.

    Attributes:
        CANCELLED: The lifetime was cancelled explicitly.
        DEADLINE_EXCEEDED: The lifetime's deadline expired.
    """

    CANCELLED = "context canceled"
    DEADLINE_EXCEEDED = "context deadline exceeded"


class Lifetime:
    r"""Cancellable signal with an optional deadline.

    Thread-safe: ``cancel`` may be called from any thread, and done
    callbacks run on the thread that ends the lifetime (the caller of
    ``cancel`` or the deadline timer thread).

    Args:
        timeout: Optional number of seconds after which the lifetime
            ends with ``CancelReason.DEADLINE_EXCEEDED``. Must be >= 0.

    Raises:
        ValueError: If ``timeout`` is negative.

    Example:
        ```pycon
        >>> from cmdretry.lifetime import Lifetime
        >>> lifetime = Lifetime(timeout=0.01)
        >>> lifetime.wait(1.0)
        True
        >>> lifetime.reason.value
        'context deadline exceeded'

        ```
    """

    cancellable: bool = True

    def __init__(self, timeout: float | None = None) -> None:
        if timeout is not None and timeout < 0:
            msg = f"timeout must be >= 0, got {timeout}"
            raise ValueError(msg)

        self._lock = threading.Lock()
        self._event = threading.Event()
        self._reason: CancelReason | None = None
        self._callbacks: list[Callable[[Lifetime], None]] = []
        self._deadline: float | None = None
        self._timer: threading.Timer | None = None

        if timeout is not None:
            self._deadline = time.monotonic() + timeout
            self._timer = threading.Timer(
                timeout, self._finish, args=(CancelReason.DEADLINE_EXCEEDED,)
            )
            self._timer.daemon = True
            self._timer.start()

    @property
    def deadline(self) -> float | None:
        """The ``time.monotonic()`` value at which the lifetime expires,
        or ``None`` when it has no deadline."""
        return self._deadline

    @property
    def reason(self) -> CancelReason | None:
        """Why the lifetime ended, or ``None`` while it is pending."""
        self.done()
        return self._reason

    def done(self) -> bool:
        """Return whether the lifetime has ended.

        An expired deadline is detected here too, so the answer does not
        depend on the timer thread having been scheduled yet.
        """
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._finish(CancelReason.DEADLINE_EXCEEDED)
            return True
        return False

    def cancel(self, reason: CancelReason = CancelReason.CANCELLED) -> None:
        """End the lifetime.

        Cancelling a lifetime that already ended does nothing.

        Args:
            reason: Why the lifetime ends. Lifetimes merging other
                lifetimes pass on the reason of the one that fired.
        """
        self._finish(reason)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the lifetime ends or ``timeout`` seconds elapse.

        Args:
            timeout: Maximum number of seconds to wait, ``None`` to wait
                forever.

        Returns:
            ``True`` if the lifetime has ended.
        """
        if self.done():
            return True
        return self._event.wait(timeout)

    def add_done_callback(self, callback: Callable[[Lifetime], None]) -> None:
        """Register ``callback`` to run once when the lifetime ends.

        If the lifetime already ended, ``callback`` runs immediately on
        the calling thread.

        Args:
            callback: Callable receiving this lifetime.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback(self)

    def remove_done_callback(self, callback: Callable[[Lifetime], None]) -> None:
        """Unregister a callback added with ``add_done_callback``.

        Args:
            callback: The callback to remove. Unknown callbacks are ignored.
        """
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def _finish(self, reason: CancelReason) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._reason = reason
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []

        if self._timer is not None:
            self._timer.cancel()
        logger.debug(f"Lifetime ended: {reason.value}")
        for callback in callbacks:
            callback(self)

    def __repr__(self) -> str:
        state = self._reason.name if self._event.is_set() and self._reason else "PENDING"
        return f"{self.__class__.__qualname__}(state={state}, deadline={self._deadline})"


class _BackgroundLifetime(Lifetime):
    """Lifetime that never ends."""

    cancellable = False

    def __init__(self) -> None:
        super().__init__(timeout=None)

    def cancel(self, reason: CancelReason = CancelReason.CANCELLED) -> None:  # noqa: ARG002
        pass

    def add_done_callback(self, callback: Callable[[Lifetime], None]) -> None:  # noqa: ARG002
        pass

    def __repr__(self) -> str:
        return "BACKGROUND"


BACKGROUND: Lifetime = _BackgroundLifetime()


def wait_any(lifetimes: Iterable[Lifetime], timeout: float) -> bool:
    """Sleep for ``timeout`` seconds, waking early if any lifetime ends.

    Lifetimes that are not cancellable are ignored. When none of them is
    cancellable this is a plain ``time.sleep``.

    Args:
        lifetimes: The lifetimes to watch.
        timeout: Number of seconds to sleep.

    Returns:
        ``True`` if one of the lifetimes ended.

    Example:
        ```pycon
        >>> from cmdretry.lifetime import BACKGROUND, Lifetime, wait_any
        >>> wait_any([BACKGROUND], 0.0)
        False
        >>> lifetime = Lifetime()
        >>> lifetime.cancel()
        >>> wait_any([BACKGROUND, lifetime], 10.0)
        True

        ```
    """
    watched = [lifetime for lifetime in lifetimes if lifetime.cancellable]
    if not watched:
        time.sleep(timeout)
        return False
    if any(lifetime.done() for lifetime in watched):
        return True
    if len(watched) == 1:
        return watched[0].wait(timeout)

    fired = threading.Event()

    def _on_done(_lifetime: Lifetime) -> None:
        fired.set()

    for lifetime in watched:
        lifetime.add_done_callback(_on_done)
    try:
        fired.wait(timeout)
    finally:
        for lifetime in watched:
            lifetime.remove_done_callback(_on_done)
    return any(lifetime.done() for lifetime in watched)
