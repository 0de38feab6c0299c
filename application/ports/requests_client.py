# application/ports/requests_client.py
from __future__ import annotations

import requests
from requests.cookies import get_cookie_header
from typing import Dict, List, Optional

from application.ports.http_client import (
    HttpClientPort,
    HttpHistoryItem,
    HttpRequest,
    HttpResponse,
    RedirectCheck,
)
from domain.exceptions import TransportError


class RequestsSessionHttpClient(HttpClientPort):
    """
    Transport on top of requests.Session.

    Every hop is sent with allow_redirects=False so the caller can veto each
    redirect before it is followed. The session keeps cookies between exchanges.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout_sec: float = 20,
        max_redirects: int = 10,
    ):
        self._session = session or requests.Session()
        self._timeout = timeout_sec
        self._max_redirects = max_redirects

    def exchange(
        self,
        request: HttpRequest,
        check_redirect: Optional[RedirectCheck] = None,
    ) -> HttpResponse:
        prepared = self._session.prepare_request(
            requests.Request(
                method=request.method.upper(),
                url=request.url,
                headers=dict(request.headers),
                data=request.body,
            )
        )

        history: List[HttpHistoryItem] = []
        resp = self._send(prepared)
        while resp.is_redirect and resp.next is not None:
            if len(history) >= self._max_redirects:
                raise TransportError(f"Exceeded {self._max_redirects} redirects from '{request.url}'.")

            next_req = resp.next
            history.append(
                HttpHistoryItem(
                    status=resp.status_code,
                    url=str(resp.url),
                    location=resp.headers.get("Location"),
                    set_cookie=resp.headers.get("Set-Cookie"),
                )
            )
            if check_redirect is not None:
                # veto raises and aborts this exchange
                check_redirect(str(next_req.url), list(history))
            resp = self._send(next_req)

        return HttpResponse(
            status=resp.status_code,
            url=str(resp.url),
            headers=dict(resp.headers),
            content=resp.content,
            request=request,
            history=history,
            encoding=resp.encoding,
        )

    def cookies_for(self, url: str) -> List[Dict[str, object]]:
        probe = requests.Request("GET", url).prepare()
        header = get_cookie_header(self._session.cookies, probe) or ""
        out: List[Dict[str, object]] = []
        for part in header.split(";"):
            name, sep, value = part.strip().partition("=")
            if name and sep:
                out.append({"name": name, "value": value})
        return out

    def _send(self, prepared: requests.PreparedRequest) -> requests.Response:
        try:
            return self._session.send(prepared, allow_redirects=False, timeout=self._timeout)
        except requests.RequestException as e:
            raise TransportError(f"{prepared.method} {prepared.url} failed: {e}") from e
