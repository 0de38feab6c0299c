# application/ports/bookmarks.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict


class BookmarksPort(ABC):
    @abstractmethod
    def save(self, name: str, url: str) -> None:
        ...

    @abstractmethod
    def read(self, name: str) -> str:
        """
        Return the URL saved under name. Raises BookmarkNotFoundError when missing.
        """
        ...

    @abstractmethod
    def remove(self, name: str) -> bool:
        ...

    @abstractmethod
    def has(self, name: str) -> bool:
        ...

    @abstractmethod
    def all(self) -> Dict[str, str]:
        ...
