# tests/mock_http_client.py
"""
Mock transport for browser tests.

Responses are registered per URL (optionally per method). A route with a
Location is a redirect; the mock walks redirect hops itself and calls
check_redirect before each one, the same contract as the requests client.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union
from urllib.parse import urljoin, urlsplit

from application.ports.http_client import (
    HttpClientPort,
    HttpHistoryItem,
    HttpRequest,
    HttpResponse,
    RedirectCheck,
)


@dataclass
class Route:
    bodies: List[str]
    status: int = 200
    headers: Dict[str, str] = field(default_factory=dict)
    location: Optional[str] = None
    hits: int = 0

    def next_body(self) -> str:
        # successive calls walk the list, the last body repeats
        body = self.bodies[min(self.hits, len(self.bodies) - 1)]
        self.hits += 1
        return body


class MockHttpClient(HttpClientPort):
    def __init__(self) -> None:
        self._routes: Dict[Tuple[str, str], Route] = {}
        self.requests: List[HttpRequest] = []
        self.cookies: Dict[str, str] = {}
        self.fail_with: Optional[Exception] = None

    def add(
        self,
        url: str,
        html: Union[str, List[str]] = "<html><head><title>ok</title></head><body>ok</body></html>",
        status: int = 200,
        method: str = "*",
        headers: Optional[Dict[str, str]] = None,
    ) -> Route:
        bodies = html if isinstance(html, list) else [html]
        route = Route(bodies=bodies, status=status, headers=headers or {"Content-Type": "text/html; charset=utf-8"})
        self._routes[(method.upper(), url)] = route
        return route

    def redirect(self, url: str, location: str, status: int = 302, method: str = "*") -> Route:
        route = Route(bodies=[""], status=status, headers={"Location": location}, location=location)
        self._routes[(method.upper(), url)] = route
        return route

    def exchange(
        self,
        request: HttpRequest,
        check_redirect: Optional[RedirectCheck] = None,
    ) -> HttpResponse:
        self.requests.append(request)
        if self.fail_with is not None:
            raise self.fail_with

        method, url = request.method.upper(), request.url
        history: List[HttpHistoryItem] = []
        while True:
            route = self._find(method, url)
            if route is None:
                return HttpResponse(status=404, url=url, headers={}, content=b"Not Found", request=request, history=history)
            if route.location is None:
                return HttpResponse(
                    status=route.status,
                    url=url,
                    headers=dict(route.headers),
                    content=route.next_body().encode("utf-8"),
                    request=request,
                    history=history,
                )

            route.hits += 1
            history.append(HttpHistoryItem(status=route.status, url=url, location=route.location, set_cookie=None))
            next_url = urljoin(url, route.location)
            if check_redirect is not None:
                check_redirect(next_url, list(history))
            if route.status in (301, 302, 303) and method == "POST":
                method = "GET"
            url = next_url

    def cookies_for(self, url: str) -> List[Dict[str, object]]:
        return [{"name": k, "value": v} for k, v in self.cookies.items()]

    def _find(self, method: str, url: str) -> Optional[Route]:
        no_query = urlsplit(url)._replace(query="").geturl()
        for key in ((method, url), ("*", url), (method, no_query), ("*", no_query)):
            if key in self._routes:
                return self._routes[key]
        return None
