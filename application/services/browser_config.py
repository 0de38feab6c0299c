# application/services/browser_config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

from dotenv import dotenv_values
from requests.utils import default_user_agent

from domain.attributes import Attribute, AttributeMap

VERSION = "0.1.0"
ENV_PREFIX = "WEBROVE_"

DEFAULT_USER_AGENT = f"webrove/{VERSION} {default_user_agent()}"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _parse_bool(key: str, raw: str) -> bool:
    v = raw.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise ValueError(f"{key} must be a boolean, got: {raw!r}")


@dataclass(frozen=True)
class BrowserConfig:
    """
    Per-session defaults. Built once when the browser is created; later changes
    go through the browser's setters, never through this object.
    """

    user_agent: str = DEFAULT_USER_AGENT
    send_referer: bool = True
    handle_meta_refresh: bool = True
    follow_redirects: bool = True
    timeout_sec: float = 20
    max_redirects: int = 10
    log_level: str = "INFO"
    headers: Dict[str, str] = field(default_factory=dict)

    def attributes(self) -> AttributeMap:
        return {
            Attribute.SEND_REFERER: self.send_referer,
            Attribute.HANDLE_META_REFRESH: self.handle_meta_refresh,
            Attribute.FOLLOW_REDIRECTS: self.follow_redirects,
        }

    @classmethod
    def from_env(
        cls,
        env_file: Optional[Union[str, Path]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "BrowserConfig":
        """
        Build from WEBROVE_* variables.

        Values in the .env file (default: ./.env) win over the process
        environment, unset keys keep their defaults.
        """
        path = Path(env_file) if env_file is not None else Path.cwd() / ".env"
        values: Dict[str, str] = {}
        if path.exists():
            values = {k: v for k, v in dotenv_values(path).items() if v is not None}
        for key, value in (os.environ if environ is None else environ).items():
            if key not in values:
                values[key] = value

        def get(name: str) -> Optional[str]:
            return values.get(ENV_PREFIX + name)

        kwargs: Dict[str, object] = {}
        if get("USER_AGENT"):
            kwargs["user_agent"] = get("USER_AGENT")
        for name, attr in (
            ("SEND_REFERER", "send_referer"),
            ("HANDLE_META_REFRESH", "handle_meta_refresh"),
            ("FOLLOW_REDIRECTS", "follow_redirects"),
        ):
            raw = get(name)
            if raw is not None and raw.strip():
                kwargs[attr] = _parse_bool(ENV_PREFIX + name, raw)
        if get("TIMEOUT_SEC"):
            kwargs["timeout_sec"] = float(get("TIMEOUT_SEC"))
        if get("MAX_REDIRECTS"):
            kwargs["max_redirects"] = int(get("MAX_REDIRECTS"))
        if get("LOG_LEVEL"):
            kwargs["log_level"] = get("LOG_LEVEL").upper()
        return cls(**kwargs)  # type: ignore[arg-type]
