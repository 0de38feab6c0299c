# infrastructure/factory.py
from __future__ import annotations

from typing import Optional

from application.browser import Browser
from application.ports.bookmarks import BookmarksPort
from application.ports.http_client import HttpClientPort
from application.ports.logger import LoggerPort
from application.ports.requests_client import RequestsSessionHttpClient
from application.recorder import Recorder
from application.services.browser_config import BrowserConfig
from infrastructure.bookmarks.in_memory_bookmarks import InMemoryBookmarks
from infrastructure.logging.log_setup import setup_console_logging
from infrastructure.logging.loguru_logger import LoguruLogger


def new_browser(
    config: Optional[BrowserConfig] = None,
    http_client: Optional[HttpClientPort] = None,
    logger: Optional[LoggerPort] = None,
    bookmarks: Optional[BookmarksPort] = None,
    recorder: Optional[Recorder] = None,
) -> Browser:
    """
    Browser wired with the default collaborators; any of them can be swapped.
    Without an explicit logger, loguru gets a console sink at config.log_level.
    """
    config = config if config is not None else BrowserConfig()
    if logger is None:
        setup_console_logging(config.log_level)
        logger = LoguruLogger()
    browser = Browser(
        http_client=http_client
        if http_client is not None
        else RequestsSessionHttpClient(timeout_sec=config.timeout_sec, max_redirects=config.max_redirects),
        logger=logger,
        config=config,
        bookmarks=bookmarks if bookmarks is not None else InMemoryBookmarks(),
    )
    browser.set_recorder(recorder if recorder is not None else Recorder())
    return browser
