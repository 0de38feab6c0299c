# application/browser.py
from __future__ import annotations

import base64
import threading
import uuid
from dataclasses import replace
from typing import Any, Callable, Dict, IO, List, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import urlencode, urljoin, urlsplit, urlunsplit

from bs4.element import Tag

from application.dispatcher import EventDispatcher
from application.document import Document, parse_document
from application.events import Event, EventHandler, SubmitArgs
from application.form import Form
from application.ports.bookmarks import BookmarksPort
from application.ports.http_client import HttpClientPort, HttpHistoryItem, HttpRequest, HttpResponse
from application.ports.logger import LoggerPort
from application.recorder import Recorder
from application.refresh import MetaRefreshTimer, TimerFactory, parse_refresh_delay
from application.services.browser_config import BrowserConfig
from application.services.redactor import mask_dict, mask_pairs, mask_url
from domain.assets import Image, Link, Script, Stylesheet
from domain.attributes import Attribute, AttributeMap
from domain.exceptions import (
    AttributeNotFoundError,
    BrowserError,
    ElementNotFoundError,
    InvalidURLError,
    PageNotLoadedError,
    RedirectDisabledError,
)
from domain.history import History
from domain.state import State

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

FormData = Union[Mapping[str, Any], Sequence[Tuple[str, Any]]]
Body = Union[str, bytes, IO, None]


def basic_auth(username: str, password: str) -> str:
    return base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")


def _form_pairs(data: Optional[FormData]) -> List[Tuple[str, str]]:
    """dict or pair list -> pair list; list values expand to repeated keys."""
    if not data:
        return []
    items = data.items() if isinstance(data, Mapping) else data
    pairs: List[Tuple[str, str]] = []
    for key, value in items:
        if isinstance(value, (list, tuple)):
            for item in value:
                pairs.append((key, "" if item is None else str(item)))
        else:
            pairs.append((key, "" if value is None else str(value)))
    return pairs


def _read_body(body: Body) -> Optional[bytes]:
    if body is None:
        return None
    if hasattr(body, "read"):
        body = body.read()
    if isinstance(body, str):
        return body.encode("utf-8")
    return bytes(body)


def _with_query(url: str, pairs: List[Tuple[str, str]]) -> str:
    parts = urlsplit(url)
    return urlunsplit(parts._replace(query=urlencode(pairs)))


class Browser:
    """
    Stateful headless browser session.

    Every navigation runs the same pipeline: build the request, emit
    PRE_REQUEST, exchange through the transport, push the previous state to
    history, commit the new state, emit POST_REQUEST and arm the meta refresh
    timer. Navigations are serialized by a session lock; the timed reload
    takes the same lock.
    """

    def __init__(
        self,
        http_client: HttpClientPort,
        logger: LoggerPort,
        config: Optional[BrowserConfig] = None,
        bookmarks: Optional[BookmarksPort] = None,
        dispatcher: Optional[EventDispatcher] = None,
        document_parser: Callable[[HttpResponse], Document] = parse_document,
        timer_factory: Optional[TimerFactory] = None,
    ):
        config = config if config is not None else BrowserConfig()
        self.session_id = uuid.uuid4().hex
        self._http = http_client
        self._logger = logger.bind(session_id=self.session_id)
        self._dispatcher = dispatcher if dispatcher is not None else EventDispatcher()
        self._parse = document_parser
        self._bookmarks = bookmarks
        self._recorder: Optional[Recorder] = None

        self._user_agent = config.user_agent
        self._attributes: AttributeMap = config.attributes()
        self._headers: Dict[str, str] = dict(config.headers)
        self._auth: Optional[Tuple[str, str]] = None

        self._lock = threading.RLock()
        self._refresh = MetaRefreshTimer(self._lock, timer_factory)
        self._state = State.bootstrap()
        self._history = History()

    # -------------------------
    # configuration
    # -------------------------

    def on(self, event: Event, handler: EventHandler) -> None:
        self._dispatcher.on(event, handler)

    @property
    def dispatcher(self) -> EventDispatcher:
        return self._dispatcher

    def set_user_agent(self, user_agent: str) -> None:
        self._user_agent = user_agent

    @property
    def user_agent(self) -> str:
        return self._user_agent

    def set_attribute(self, attribute: Attribute, value: bool) -> None:
        self._attributes[attribute] = bool(value)

    def set_attributes(self, attributes: AttributeMap) -> None:
        self._attributes = dict(attributes)

    def attribute(self, attribute: Attribute) -> bool:
        return self._attributes.get(attribute, False)

    def set_authorization(self, username: str, password: str) -> None:
        self._auth = (username, password) if username else None

    def set_bookmarks(self, bookmarks: BookmarksPort) -> None:
        self._bookmarks = bookmarks

    def set_headers(self, headers: Mapping[str, str]) -> None:
        self._headers = dict(headers)

    def add_request_header(self, name: str, value: str) -> None:
        for k in self._headers:
            if k.lower() == name.lower():
                self._headers[k] = f"{self._headers[k]}, {value}"
                return
        self._headers[name] = value

    def set_logger(self, logger: LoggerPort) -> None:
        self._logger = logger.bind(session_id=self.session_id)

    def set_recorder(self, recorder: Recorder) -> None:
        self._recorder = recorder
        # recorder learns about every committed navigation...
        self.on(Event.POST_REQUEST, lambda _e, _s, resp: recorder.on_post_request(resp.request))
        # ...and hands recorded requests back to this pipeline on replay
        recorder.on(Event.RECORD_REPLAY, self._on_replay)

    @property
    def recorder(self) -> Optional[Recorder]:
        return self._recorder

    # -------------------------
    # navigation
    # -------------------------

    def open(self, url: str) -> None:
        self._http_get(self._check_url(url), None)

    def open_form(self, url: str, data: Optional[FormData]) -> None:
        self.open(_with_query(self._check_url(url), _form_pairs(data)))

    def open_bookmark(self, name: str) -> None:
        self.open(self._require_bookmarks().read(name))

    def post(self, url: str, content_type: str, body: Body = None) -> None:
        self._http_post(self._check_url(url), None, content_type, _read_body(body))

    def post_form(self, url: str, data: Optional[FormData]) -> None:
        self.post(url, FORM_CONTENT_TYPE, urlencode(_form_pairs(data)))

    def back(self) -> bool:
        with self._lock:
            if len(self._history) <= 1:
                return False
            self._refresh.cancel()
            self._state = self._history.pop()
            self._logger.debug("browser.back", url=mask_url(self._state.request.url), history_len=len(self._history))
            return True

    def reload(self) -> None:
        with self._lock:
            if not self._state.is_loaded:
                raise PageNotLoadedError("Cannot reload, no page has been loaded.")
            self._logger.debug("browser.reload", url=mask_url(self._state.request.url))
            self._send(self._state.request)

    def bookmark(self, name: str) -> None:
        url = self.url
        self._logger.debug("browser.bookmark", name=name, url=url)
        self._require_bookmarks().save(name, url)

    def click(self, expr: str) -> None:
        matches = self.find(expr)
        if not matches:
            raise ElementNotFoundError(f"Element not found matching expr '{expr}'.")
        anchor = matches[0]
        if anchor.name != "a":
            raise ElementNotFoundError(f"Expr '{expr}' must match an anchor tag.")
        href = self._attr_to_resolved_url("href", anchor)

        # CLICK is informational: a failing observer does not cancel the navigation
        try:
            self._dispatcher.dispatch(Event.CLICK, self, href)
        except Exception as e:
            self._logger.warning(
                "browser.click_handler_failed", url=href, error=str(e), error_type=type(e).__name__
            )

        self._http_get(href, self.url)

    # -------------------------
    # page content
    # -------------------------

    @property
    def state(self) -> State:
        if not self._state.is_loaded:
            raise PageNotLoadedError("No page has been loaded.")
        return self._state

    @property
    def history(self) -> History:
        return self._history

    @property
    def url(self) -> str:
        state = self.state
        return state.response.url if state.response is not None else state.request.url

    @property
    def status_code(self) -> int:
        return self.state.response.status

    @property
    def response_headers(self) -> Dict[str, str]:
        return dict(self.state.response.headers)

    @property
    def title(self) -> str:
        return self.dom.title

    @property
    def body(self) -> str:
        return self.dom.body_html()

    @property
    def dom(self) -> Document:
        return self.state.document

    def find(self, expr: str) -> List[Tag]:
        return self.dom.select(expr)

    def resolve_url(self, url: str) -> str:
        return urljoin(self.url, url)

    def form(self, expr: str) -> Form:
        matches = self.find(expr)
        if not matches:
            raise ElementNotFoundError(f"Form not found matching expr '{expr}'.")
        if matches[0].name != "form":
            raise ElementNotFoundError(f"Expr '{expr}' does not match a form tag.")
        return self._new_form(matches[0])

    def forms(self) -> List[Form]:
        return [self._new_form(tag) for tag in self.find("form")]

    def links(self) -> List[Link]:
        links: List[Link] = []
        for a in self.find("a"):
            if a.get("href") is None:
                continue
            links.append(Link(url=self.resolve_url(a["href"]), id=a.get("id", ""), text=a.get_text()))
        return links

    def images(self) -> List[Image]:
        images: List[Image] = []
        for img in self.find("img"):
            if img.get("src") is None:
                continue
            images.append(
                Image(
                    url=self.resolve_url(img["src"]),
                    id=img.get("id", ""),
                    alt=img.get("alt", ""),
                    title=img.get("title", ""),
                )
            )
        return images

    def stylesheets(self) -> List[Stylesheet]:
        sheets: List[Stylesheet] = []
        for link in self.find("link"):
            rel = link.get("rel") or []
            if isinstance(rel, str):
                rel = rel.split()
            if "stylesheet" not in [r.lower() for r in rel] or link.get("href") is None:
                continue
            sheets.append(
                Stylesheet(
                    url=self.resolve_url(link["href"]),
                    id=link.get("id", ""),
                    media=link.get("media", "all"),
                    type=link.get("type", "text/css"),
                )
            )
        return sheets

    def scripts(self) -> List[Script]:
        scripts: List[Script] = []
        for s in self.find("script"):
            if s.get("src") is None:
                continue
            scripts.append(
                Script(
                    url=self.resolve_url(s["src"]),
                    id=s.get("id", ""),
                    type=s.get("type", "text/javascript"),
                )
            )
        return scripts

    def site_cookies(self) -> List[Dict[str, object]]:
        return self._http.cookies_for(self.url)

    def download(self, out: IO[str]) -> int:
        html = self.dom.html()
        self._logger.info("browser.download", url=self.url, size=len(html))
        out.write(html)
        return len(html)

    # -------------------------
    # pipeline
    # -------------------------

    def _check_url(self, url: str) -> str:
        try:
            parts = urlsplit(url)
        except ValueError as e:
            raise InvalidURLError(f"Invalid URL '{url}': {e}") from e
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise InvalidURLError(f"Invalid URL '{url}': an absolute http(s) URL is required.")
        return url

    def _build_request(
        self,
        method: str,
        url: str,
        referer: Optional[str],
        content_type: Optional[str] = None,
        body: Optional[bytes] = None,
    ) -> HttpRequest:
        headers = dict(self._headers)
        headers["User-Agent"] = self._user_agent
        if self.attribute(Attribute.SEND_REFERER) and referer:
            headers["Referer"] = referer
        if self._auth is not None:
            headers["Authorization"] = "Basic " + basic_auth(*self._auth)
        if content_type:
            headers["Content-Type"] = content_type
        self._logger.debug("browser.request_built", method=method, url=mask_url(url), headers=mask_dict(headers))
        return HttpRequest(method=method, url=url, headers=headers, body=body)

    def _http_get(self, url: str, referer: Optional[str]) -> None:
        self._send(self._build_request("GET", url, referer))

    def _http_post(self, url: str, referer: Optional[str], content_type: str, body: Optional[bytes]) -> None:
        self._send(self._build_request("POST", url, referer, content_type, body))

    def _send(self, request: HttpRequest) -> None:
        with self._lock:
            try:
                self._dispatcher.dispatch(Event.PRE_REQUEST, self, request)
            except Exception as e:
                self._log_error("pre_request", request, e)
                raise

            self._refresh.cancel()
            self._logger.info("browser.request", method=request.method, url=mask_url(request.url))
            try:
                response = self._http.exchange(request, self._check_redirect)
                if response.request is None:
                    response = replace(response, request=request)
                document = self._parse(response)
            except Exception as e:
                self._log_error("exchange", request, e)
                raise
            self._logger.info(
                "browser.response",
                status=response.status,
                url=response.url,
                redirects=len(response.history),
            )

            self._history.push(self._state)
            self._state = State(request=request, response=response, document=document)

            # committed: a POST_REQUEST failure is reported, the navigation stays
            try:
                self._dispatcher.dispatch(Event.POST_REQUEST, self, response)
            except Exception as e:
                self._log_error("post_request", request, e)
                raise
            finally:
                self._handle_meta_refresh()

    def _check_redirect(self, next_url: str, via: List[HttpHistoryItem]) -> None:
        if not self.attribute(Attribute.FOLLOW_REDIRECTS):
            raise RedirectDisabledError(next_url)
        self._logger.debug("browser.redirect", url=next_url, hop=len(via))

    def _handle_meta_refresh(self) -> None:
        if not self.attribute(Attribute.HANDLE_META_REFRESH) or self._state.document is None:
            return
        meta = self._state.document.select_one('meta[http-equiv="refresh" i]')
        if meta is None:
            return
        delay = parse_refresh_delay(meta.get("content"))
        if delay is None:
            self._logger.debug("browser.refresh_ignored", content=meta.get("content"))
            return
        self._logger.debug("browser.refresh_armed", delay_sec=delay, url=mask_url(self._state.request.url))
        self._refresh.arm(delay, self._reload_from_timer)

    @property
    def refresh_pending(self) -> bool:
        return self._refresh.pending

    def _reload_from_timer(self) -> None:
        try:
            self.reload()
        except Exception as e:
            self._logger.warning("browser.refresh_failed", error=str(e), error_type=type(e).__name__)

    def _on_replay(self, _event: Event, _sender: Any, request: HttpRequest) -> None:
        self._logger.debug("browser.replay", method=request.method, url=mask_url(request.url))
        self._send(request)

    def _on_submit(self, _event: Event, sender: Any, args: SubmitArgs) -> None:
        action = self._check_url(self.resolve_url(args.action))
        self._logger.info(
            "browser.submit",
            form=getattr(sender, "name", ""),
            method=args.method,
            action=action,
            values=mask_pairs(args.values),
        )
        if args.method == "POST":
            self._http_post(action, self.url, FORM_CONTENT_TYPE, urlencode(args.values).encode("ascii"))
        else:
            self._http_get(_with_query(action, args.values), self.url)

    def _new_form(self, tag: Tag) -> Form:
        form = Form(tag, base_url=self.url)
        form.on(Event.SUBMIT, self._on_submit)
        return form

    def _attr_to_resolved_url(self, name: str, el: Tag) -> str:
        value = el.get(name)
        if value is None:
            raise AttributeNotFoundError(f"Attribute '{name}' not found.")
        return self.resolve_url(value)

    def _require_bookmarks(self) -> BookmarksPort:
        if self._bookmarks is None:
            raise BrowserError("No bookmarks jar has been set.")
        return self._bookmarks

    def _log_error(self, stage: str, request: HttpRequest, e: Exception) -> None:
        self._logger.error(
            "browser.error",
            stage=stage,
            method=request.method,
            url=mask_url(request.url),
            error=str(e),
            error_type=type(e).__name__,
        )
