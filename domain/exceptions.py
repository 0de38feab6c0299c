# domain/exceptions.py
from __future__ import annotations


class BrowserError(Exception):
    """Base class for every error raised by the navigation pipeline."""


class InvalidURLError(BrowserError):
    pass


class TransportError(BrowserError):
    pass


class RedirectDisabledError(TransportError):
    def __init__(self, url: str):
        super().__init__(f"Redirects are disabled. Cannot follow '{url}'.")
        self.url = url


class PageNotLoadedError(BrowserError):
    pass


class ElementNotFoundError(BrowserError):
    pass


class AttributeNotFoundError(BrowserError):
    pass


class HandlerFailure(BrowserError):
    """Raised by an event handler to stop dispatch and fail the caller."""


class PreRequestVetoed(HandlerFailure):
    pass


class BookmarkNotFoundError(BrowserError):
    def __init__(self, name: str):
        super().__init__(f"Bookmark '{name}' does not exist.")
        self.name = name
