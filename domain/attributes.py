# domain/attributes.py
from __future__ import annotations

from enum import Enum
from typing import Dict


class Attribute(str, Enum):
    SEND_REFERER = "send_referer"
    HANDLE_META_REFRESH = "handle_meta_refresh"
    FOLLOW_REDIRECTS = "follow_redirects"


AttributeMap = Dict[Attribute, bool]
