# application/services/redactor.py
from __future__ import annotations

from typing import Any, Dict, List, Tuple
from urllib.parse import urlsplit, urlunsplit

MASK = "********"

SENSITIVE_KEYS = {
    "password",
    "passwd",
    "pass",
    "authorization",
    "proxy-authorization",
    "cookie",
    "set-cookie",
}


def mask_value(key: str, value: Any) -> Any:
    if key.lower() in SENSITIVE_KEYS and value is not None:
        return MASK
    return value


def mask_pairs(pairs: List[Tuple[str, str]]) -> List[Tuple[str, Any]]:
    return [(k, mask_value(k, v)) for k, v in pairs]


def mask_dict(d: Dict[str, Any]) -> Dict[str, Any]:
    return {k: mask_value(k, v) for k, v in d.items()}


def mask_url(url: str) -> str:
    """Hide the password of a user:pass@host URL."""
    try:
        parts = urlsplit(url)
        if parts.password is None:
            return url
        host = parts.hostname or ""
        if parts.port is not None:
            host = f"{host}:{parts.port}"
    except ValueError:
        return url
    return urlunsplit(parts._replace(netloc=f"{parts.username}:{MASK}@{host}"))
