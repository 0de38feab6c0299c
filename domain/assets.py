# domain/assets.py
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Link:
    url: str
    id: str = ""
    text: str = ""


@dataclass(frozen=True)
class Image:
    url: str
    id: str = ""
    alt: str = ""
    title: str = ""


@dataclass(frozen=True)
class Stylesheet:
    url: str
    id: str = ""
    media: str = "all"
    type: str = "text/css"


@dataclass(frozen=True)
class Script:
    url: str
    id: str = ""
    type: str = "text/javascript"
