# application/document.py
from __future__ import annotations

import re
from typing import List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from application.ports.http_client import HttpResponse


def _charset_from_headers(response: HttpResponse) -> Optional[str]:
    ctype = response.header("Content-Type") or ""
    m = re.search(r"charset\s*=\s*([^\s;]+)", ctype, re.I)
    if not m:
        return None
    return m.group(1).strip().strip('"').strip("'")


class Document:
    """Parsed page. Thin wrapper over BeautifulSoup exposing CSS selection."""

    def __init__(self, soup: BeautifulSoup):
        self._soup = soup

    @property
    def soup(self) -> BeautifulSoup:
        return self._soup

    def select(self, expr: str) -> List[Tag]:
        return list(self._soup.select(expr))

    def select_one(self, expr: str) -> Optional[Tag]:
        return self._soup.select_one(expr)

    @property
    def title(self) -> str:
        return self._soup.title.get_text(strip=True) if self._soup.title else ""

    def body_html(self) -> str:
        body = self._soup.body
        if body is None:
            return ""
        return "".join(str(c) for c in body.contents)

    def html(self) -> str:
        return str(self._soup)


def parse_document(response: HttpResponse) -> Document:
    # charset header wins, otherwise bs4 sniffs <meta charset> / BOM
    soup = BeautifulSoup(response.content or b"", "lxml", from_encoding=_charset_from_headers(response))
    return Document(soup)
