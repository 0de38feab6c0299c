# infrastructure/bookmarks/in_memory_bookmarks.py
from __future__ import annotations

from dataclasses import dataclass, field
from threading import Lock
from typing import Dict

from application.ports.bookmarks import BookmarksPort
from domain.exceptions import BookmarkNotFoundError


@dataclass
class InMemoryBookmarks(BookmarksPort):
    _lock: Lock = field(default_factory=Lock, init=False)
    _urls: Dict[str, str] = field(default_factory=dict, init=False)

    def save(self, name: str, url: str) -> None:
        with self._lock:
            self._urls[name] = url

    def read(self, name: str) -> str:
        with self._lock:
            if name not in self._urls:
                raise BookmarkNotFoundError(name)
            return self._urls[name]

    def remove(self, name: str) -> bool:
        with self._lock:
            return self._urls.pop(name, None) is not None

    def has(self, name: str) -> bool:
        with self._lock:
            return name in self._urls

    def all(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._urls)
