# application/events.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Tuple, Union

from application.ports.http_client import HttpRequest, HttpResponse


class Event(str, Enum):
    PRE_REQUEST = "pre_request"      # payload: HttpRequest
    POST_REQUEST = "post_request"    # payload: HttpResponse
    CLICK = "click"                  # payload: absolute URL (str)
    SUBMIT = "submit"                # payload: SubmitArgs
    RECORD_START = "record_start"    # payload: None
    RECORD_STOP = "record_stop"      # payload: None
    RECORD_REPLAY = "record_replay"  # payload: HttpRequest


@dataclass(frozen=True)
class SubmitArgs:
    values: List[Tuple[str, str]] = field(default_factory=list)  # same key may repeat
    method: str = "GET"
    action: str = ""


EventPayload = Union[HttpRequest, HttpResponse, SubmitArgs, str, None]

PAYLOAD_TYPES: Dict[Event, Optional[type]] = {
    Event.PRE_REQUEST: HttpRequest,
    Event.POST_REQUEST: HttpResponse,
    Event.CLICK: str,
    Event.SUBMIT: SubmitArgs,
    Event.RECORD_START: None,
    Event.RECORD_STOP: None,
    Event.RECORD_REPLAY: HttpRequest,
}


class EventHandler(Protocol):
    def __call__(self, event: Event, sender: Any, payload: EventPayload) -> None:
        ...


def check_payload(event: Event, payload: EventPayload) -> None:
    expected = PAYLOAD_TYPES[event]
    if expected is None:
        if payload is not None:
            raise TypeError(f"{event.name} carries no payload, got {type(payload).__name__}")
        return
    if not isinstance(payload, expected):
        raise TypeError(
            f"{event.name} expects {expected.__name__}, got {type(payload).__name__}"
        )
