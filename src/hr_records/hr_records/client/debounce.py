from __future__ import annotations

import threading
from typing import Any, Callable, Optional

from ..core.constants import SEARCH_DEBOUNCE_SECONDS


class Debouncer:
    """Trailing-edge debounce: only the last call in a burst runs, ``wait`` seconds later."""

    def __init__(self, fn: Callable[..., Any], wait: float = SEARCH_DEBOUNCE_SECONDS):
        self._fn = fn
        self._wait = wait
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._pending: Optional[tuple] = None

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = (args, kwargs)
            self._timer = threading.Timer(self._wait, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def _fire(self) -> None:
        with self._lock:
            pending, self._pending, self._timer = self._pending, None, None
        if pending is not None:
            args, kwargs = pending
            self._fn(*args, **kwargs)

    def flush(self) -> None:
        """Run the pending call now, if any."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
        self._fire()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._pending = None

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._pending is not None
