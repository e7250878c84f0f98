"""Coalesce rapid text-change events into one trailing call."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

from jsonlens.core import constants as app_constants
from jsonlens.core.exceptions import EXPECTED_ERRORS

_LOG = logging.getLogger(__name__)


class TimerScheduler:
    """Background-thread scheduler for hosts without an event loop."""

    def schedule(self, delay_ms: int, fn: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(max(0, delay_ms) / 1000.0, fn)
        timer.daemon = True
        timer.start()
        return timer

    def cancel(self, handle: threading.Timer) -> None:
        handle.cancel()


class TkScheduler:
    """Schedule on the Tk event loop via ``after``/``after_cancel``."""

    def __init__(self, widget: Any):
        self.widget = widget

    def schedule(self, delay_ms: int, fn: Callable[[], None]) -> Any:
        return self.widget.after(max(0, int(delay_ms)), fn)

    def cancel(self, handle: Any) -> None:
        try:
            self.widget.after_cancel(handle)
        except EXPECTED_ERRORS as exc:
            _LOG.debug("expected_error", exc_info=exc)


class Debouncer:
    """Run ``callback`` once, ``delay_ms`` after the last ``call``.

    Only the arguments of the most recent call are delivered. There is no
    cancellation of a callback already running.
    """

    def __init__(
        self,
        callback: Callable[..., Any],
        delay_ms: int = app_constants.LIVE_FEEDBACK_DELAY_MS_DEFAULT,
        scheduler: Optional[Any] = None,
    ):
        self.callback = callback
        self.delay_ms = max(0, int(delay_ms))
        self.scheduler = scheduler if scheduler is not None else TimerScheduler()
        self._lock = threading.RLock()
        self._handle = None
        self._pending = None

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def call(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            if self._handle is not None:
                self.scheduler.cancel(self._handle)
            self._pending = (args, kwargs)
            self._handle = self.scheduler.schedule(self.delay_ms, self._fire)

    def _take_pending(self):
        with self._lock:
            pending = self._pending
            self._pending = None
            self._handle = None
            return pending

    def _fire(self) -> None:
        pending = self._take_pending()
        if pending is None:
            return
        args, kwargs = pending
        self.callback(*args, **kwargs)

    def flush(self) -> bool:
        """Run the pending call now; returns False when nothing was pending."""
        with self._lock:
            if self._handle is not None:
                self.scheduler.cancel(self._handle)
        pending = self._take_pending()
        if pending is None:
            return False
        args, kwargs = pending
        self.callback(*args, **kwargs)
        return True

    def cancel(self) -> None:
        with self._lock:
            if self._handle is not None:
                self.scheduler.cancel(self._handle)
            self._handle = None
            self._pending = None
