# application/recorder.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from threading import Lock
from typing import List, Optional

from application.dispatcher import EventDispatcher
from application.events import Event, EventHandler
from application.ports.http_client import HttpRequest


@dataclass(frozen=True)
class RecordedEntry:
    seq: int
    timestamp: datetime
    request: HttpRequest


class Recorder:
    """
    Records the requests of successful navigations and plays them back.

    The browser calls on_post_request() for every POST_REQUEST while attached.
    replay() emits RECORD_REPLAY per entry, in recorded order, on the recorder's
    own dispatcher; the first handler error stops the replay.
    """

    def __init__(self, max_entries: Optional[int] = None) -> None:
        self._dispatcher = EventDispatcher()
        self._lock = Lock()
        self._entries: List[RecordedEntry] = []
        self._seq = 0
        self._recording = False
        self._replaying = False
        self._max_entries = max_entries

    def on(self, event: Event, handler: EventHandler) -> None:
        self._dispatcher.on(event, handler)

    @property
    def recording(self) -> bool:
        return self._recording

    @property
    def entries(self) -> List[RecordedEntry]:
        with self._lock:
            return list(self._entries)

    def requests(self) -> List[HttpRequest]:
        return [e.request for e in self.entries]

    def start(self) -> None:
        self._recording = True
        self._dispatcher.dispatch(Event.RECORD_START, self)

    def stop(self) -> None:
        self._recording = False
        self._dispatcher.dispatch(Event.RECORD_STOP, self)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def on_post_request(self, request: HttpRequest) -> None:
        if not self._recording or self._replaying:
            return
        with self._lock:
            self._seq += 1
            self._entries.append(
                RecordedEntry(seq=self._seq, timestamp=datetime.now(timezone.utc), request=request)
            )
            if self._max_entries is not None and len(self._entries) > self._max_entries:
                del self._entries[: len(self._entries) - self._max_entries]

    def replay(self) -> int:
        """Re-emit every recorded request. Returns how many were replayed."""
        count = 0
        self._replaying = True
        try:
            for entry in self.entries:
                self._dispatcher.dispatch(Event.RECORD_REPLAY, self, entry.request)
                count += 1
        finally:
            self._replaying = False
        return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
