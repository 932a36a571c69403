"""A cancellation context shared between threads."""

from __future__ import annotations

import threading
import weakref
from typing import Optional

from agentsdk.core.errors import ContextCanceledError


class Context:
    """A cancellation signal; canceling a context cancels its children too."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._children: "weakref.WeakSet[Context]" = weakref.WeakSet()

    def cancel(self) -> None:
        """Cancel this context and every context derived from it."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            children = list(self._children)
            self._children.clear()
        for child in children:
            child.cancel()

    def is_done(self) -> bool:
        """Return True once the context has been canceled."""
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until canceled or until ``timeout`` seconds pass."""
        return self._event.wait(timeout)

    def check(self) -> None:
        """Raise ContextCanceledError if the context has been canceled."""
        if self._event.is_set():
            raise ContextCanceledError()

    @property
    def err(self) -> Optional[ContextCanceledError]:
        """The cancellation error, or None while the context is live."""
        return ContextCanceledError() if self._event.is_set() else None

    def child(self) -> "Context":
        """Return a new context that is canceled when this one is."""
        derived = Context()
        with self._lock:
            if not self._event.is_set():
                self._children.add(derived)
                return derived
        derived.cancel()
        return derived