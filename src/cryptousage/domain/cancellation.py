"""Cooperative cancellation for batch calls."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from .errors import BatchCancelledError

type Clock = Callable[[], float]


class CancellationToken:
    """Cancellation flag with an optional deadline, shared by one batch call.

    A token created with ``child()`` is cancelled whenever its parent is, but
    cancelling the child leaves the parent untouched.
    """

    def __init__(
        self,
        *,
        timeout: float | None = None,
        clock: Clock = time.monotonic,
        parent: CancellationToken | None = None,
    ) -> None:
        self._event = threading.Event()
        self._clock = clock
        self._deadline = clock() + timeout if timeout is not None else None
        self._parent = parent

    @classmethod
    def with_timeout(cls, timeout: float | None) -> CancellationToken:
        return cls(timeout=timeout)

    def child(self) -> CancellationToken:
        return CancellationToken(clock=self._clock, parent=self)

    def cancel(self) -> None:
        self._event.set()

    @property
    def expired(self) -> bool:
        if self._deadline is not None and self._clock() >= self._deadline:
            return True
        return self._parent is not None and self._parent.expired

    @property
    def cancelled(self) -> bool:
        if self._event.is_set() or self.expired:
            return True
        return self._parent is not None and self._parent.cancelled

    def raise_if_cancelled(self) -> None:
        if self._parent is not None:
            self._parent.raise_if_cancelled()
        if self._event.is_set():
            raise BatchCancelledError("batch was cancelled")
        if self.expired:
            raise BatchCancelledError("batch deadline exceeded")


NEVER_CANCELLED = CancellationToken()
