# domain/state.py
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from application.document import Document
    from application.ports.http_client import HttpRequest, HttpResponse


@dataclass(frozen=True)
class State:
    """
    One loaded page: the request that produced it, the response and the parsed document.

    A new State is created per successful navigation and never edited afterwards.
    The bootstrap state (all None) is what a browser holds before anything loads.
    """

    request: Optional["HttpRequest"] = None
    response: Optional["HttpResponse"] = None
    document: Optional["Document"] = None

    @classmethod
    def bootstrap(cls) -> "State":
        return cls()

    @property
    def is_loaded(self) -> bool:
        return self.request is not None
