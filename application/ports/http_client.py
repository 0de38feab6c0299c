# application/ports/http_client.py
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional


@dataclass(frozen=True)
class HttpRequest:
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None

    def header(self, name: str) -> Optional[str]:
        for k, v in self.headers.items():
            if k.lower() == name.lower():
                return v
        return None


@dataclass(frozen=True)
class HttpHistoryItem:
    status: int
    url: str
    location: Optional[str]
    set_cookie: Optional[str]


@dataclass(frozen=True)
class HttpResponse:
    status: int
    url: str
    headers: Dict[str, str]
    content: bytes = b""
    request: Optional[HttpRequest] = None
    history: List[HttpHistoryItem] = field(default_factory=list)
    encoding: Optional[str] = None

    @property
    def text(self) -> str:
        return self.content.decode(self.encoding or "utf-8", errors="replace")

    def header(self, name: str) -> Optional[str]:
        for k, v in self.headers.items():
            if k.lower() == name.lower():
                return v
        return None


# Called before every redirect hop with (next_url, responses so far).
# Raising aborts the exchange.
RedirectCheck = Callable[[str, List[HttpHistoryItem]], None]


class HttpClientPort(ABC):
    @abstractmethod
    def exchange(
        self,
        request: HttpRequest,
        check_redirect: Optional[RedirectCheck] = None,
    ) -> HttpResponse:
        ...

    @abstractmethod
    def cookies_for(self, url: str) -> List[Dict[str, object]]:
        ...
