"""A thread-safe monotonically increasing counter."""

from __future__ import annotations

import threading


class Counter:
    """A counter that can be incremented, read and reset from many threads."""

    def __init__(self) -> None:
        self._value = 0
        self._lock = threading.Lock()

    def inc(self) -> int:
        """Increment the counter and return the new value."""
        with self._lock:
            self._value += 1
            return self._value

    def value(self) -> int:
        """Return the current value of the counter."""
        with self._lock:
            return self._value

    def reset(self) -> None:
        """Set the counter back to zero."""
        with self._lock:
            self._value = 0