# application/refresh.py
from __future__ import annotations

import re
import threading
from typing import Callable, ContextManager, Optional

_DELAY_RE = re.compile(r"^\s*(\d+(?:\.\d+)?|\.\d+)\s*(?:[;,]|$)")


def parse_refresh_delay(content: Optional[str]) -> Optional[float]:
    """
    Seconds from a refresh directive such as "2", "2.5" or "0; url=/next".
    None when the value has no leading non-negative number.
    """
    if content is None:
        return None
    m = _DELAY_RE.match(content)
    if not m:
        return None
    return float(m.group(1))


TimerFactory = Callable[[float, Callable[[], None]], threading.Timer]


def _default_timer(delay: float, fn: Callable[[], None]) -> threading.Timer:
    t = threading.Timer(delay, fn)
    t.daemon = True
    return t


class MetaRefreshTimer:
    """
    Single pending delayed reload.

    arm() always cancels the previous arm first. The expiry callback runs the
    action under the session lock and only when that arm is still the live one,
    so an expiry that lost the race against a new navigation does nothing.
    """

    def __init__(self, lock: ContextManager, timer_factory: Optional[TimerFactory] = None):
        self._lock = lock
        self._timer_factory = timer_factory or _default_timer
        self._guard = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._token: Optional[object] = None
        self.delay: Optional[float] = None

    @property
    def pending(self) -> bool:
        with self._guard:
            return self._token is not None

    def arm(self, delay: float, action: Callable[[], None]) -> None:
        self.cancel()
        token = object()
        timer = self._timer_factory(delay, lambda: self._fire(token, action))
        with self._guard:
            self._timer = timer
            self._token = token
            self.delay = delay
        timer.start()

    def cancel(self) -> bool:
        with self._guard:
            timer, self._timer = self._timer, None
            had = self._token is not None
            self._token = None
            self.delay = None
        if timer is not None:
            timer.cancel()
        return had

    def _fire(self, token: object, action: Callable[[], None]) -> None:
        with self._lock:
            with self._guard:
                if token is not self._token:
                    return
                self._timer = None
                self._token = None
                self.delay = None
            action()
