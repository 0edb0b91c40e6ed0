from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..core.constants import TOAST_SECONDS

logger = logging.getLogger(__name__)

SUCCESS = "success"
ERROR = "error"
INFO = "info"
WARNING = "warning"


@dataclass(frozen=True)
class Toast:
    message: str
    kind: str
    shown_at: float


class ToastNotifier:
    """Non-blocking messages that close themselves after ``duration`` seconds."""

    def __init__(
        self,
        *,
        duration: float = TOAST_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        on_show: Optional[Callable[[Toast], None]] = None,
    ):
        self._duration = duration
        self._clock = clock
        self._on_show = on_show
        self._toasts: List[Toast] = []

    def show(self, message: str, kind: str = INFO) -> Toast:
        toast = Toast(message=message, kind=kind, shown_at=self._clock())
        self._toasts.append(toast)
        logger.debug("toast[%s] %s", kind, message)
        if self._on_show is not None:
            self._on_show(toast)
        return toast

    def success(self, message: str) -> Toast:
        return self.show(message, SUCCESS)

    def error(self, message: str) -> Toast:
        return self.show(message, ERROR)

    def info(self, message: str) -> Toast:
        return self.show(message, INFO)

    def warning(self, message: str) -> Toast:
        return self.show(message, WARNING)

    def active(self) -> List[Toast]:
        now = self._clock()
        self._toasts = [t for t in self._toasts if now - t.shown_at < self._duration]
        return list(self._toasts)

    @property
    def history(self) -> List[Toast]:
        """Every toast still held, expired or not (until the next ``active()``)."""
        return list(self._toasts)

    def dismiss(self, toast: Toast) -> None:
        if toast in self._toasts:
            self._toasts.remove(toast)


class ConfirmModal:
    """Yes/no prompt before destructive actions.

    ``ask`` shows ``title`` and ``message`` and returns the user's answer.
    """

    def __init__(self, ask: Callable[[str, str], bool]):
        self._ask = ask

    def confirm(self, title: str, message: str) -> bool:
        return bool(self._ask(title, message))


def console_ask(title: str, message: str) -> bool:
    answer = input(f"{title}: {message} [y/N] ")
    return answer.strip().lower() in {"y", "yes"}
