# application/dispatcher.py
from __future__ import annotations

from typing import Any, Dict, List

from application.events import Event, EventHandler, EventPayload, check_payload


class EventDispatcher:
    """
    Ordered publish/subscribe.

    Handlers run synchronously in the order they were bound. A handler fails by
    raising; the exception stops the remaining handlers and reaches the caller
    of dispatch() unchanged.
    """

    def __init__(self) -> None:
        self._handlers: Dict[Event, List[EventHandler]] = {}

    def on(self, event: Event, handler: EventHandler) -> None:
        self._handlers.setdefault(event, []).append(handler)

    def handlers(self, event: Event) -> List[EventHandler]:
        return list(self._handlers.get(event, []))

    def dispatch(self, event: Event, sender: Any, payload: EventPayload = None) -> None:
        check_payload(event, payload)
        # snapshot: a handler binding another handler mid-dispatch does not extend this fan-out
        for handler in self.handlers(event):
            handler(event, sender, payload)
