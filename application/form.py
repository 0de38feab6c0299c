# application/form.py
from __future__ import annotations

from typing import Dict, List, Optional, Tuple
from urllib.parse import urljoin

from bs4.element import Tag

from application.dispatcher import EventDispatcher
from application.events import Event, EventHandler, SubmitArgs
from domain.exceptions import ElementNotFoundError

_SKIPPED_INPUT_TYPES = {"submit", "button", "image", "reset", "file"}


def _parse_fields(form: Tag) -> List[Tuple[str, str]]:
    """Collect the successful controls of a form in document order."""
    fields: List[Tuple[str, str]] = []
    for el in form.find_all(["input", "select", "textarea"]):
        name = el.get("name")
        if not name or el.has_attr("disabled"):
            continue

        if el.name == "input":
            itype = (el.get("type") or "text").lower()
            if itype in _SKIPPED_INPUT_TYPES:
                continue
            if itype in ("checkbox", "radio"):
                if el.has_attr("checked"):
                    fields.append((name, el.get("value", "on")))
                continue
            fields.append((name, el.get("value", "")))

        elif el.name == "select":
            options = el.find_all("option")
            selected = [o for o in options if o.has_attr("selected")]
            if not selected and options and not el.has_attr("multiple"):
                selected = options[:1]
            for o in selected:
                fields.append((name, o.get("value", o.get_text(strip=True))))

        else:
            fields.append((name, el.get_text()))
    return fields


def _parse_buttons(form: Tag) -> Dict[str, str]:
    buttons: Dict[str, str] = {}
    for el in form.find_all(["input", "button"]):
        name = el.get("name")
        if not name:
            continue
        btype = (el.get("type") or ("submit" if el.name == "button" else "text")).lower()
        if btype in ("submit", "image"):
            buttons[name] = el.get("value", "")
    return buttons


class Form:
    """
    A <form> of the current page.

    submit()/click() emit SUBMIT with SubmitArgs; whoever bound the event
    (normally the browser) performs the navigation.
    """

    def __init__(self, tag: Tag, base_url: str = ""):
        self._dispatcher = EventDispatcher()
        self.name: str = tag.get("name", "") or ""
        self.action: str = urljoin(base_url, tag.get("action") or "") if base_url else (tag.get("action") or "")
        method = (tag.get("method") or "GET").upper()
        self.method: str = method if method in ("GET", "POST") else "GET"
        self._fields = _parse_fields(tag)
        self._buttons = _parse_buttons(tag)

    def on(self, event: Event, handler: EventHandler) -> None:
        self._dispatcher.on(event, handler)

    def fields(self) -> List[Tuple[str, str]]:
        return list(self._fields)

    def value(self, name: str) -> Optional[str]:
        for k, v in self._fields:
            if k == name:
                return v
        return None

    def input(self, name: str, value: str) -> None:
        """Set the value of an existing field."""
        for i, (k, _v) in enumerate(self._fields):
            if k == name:
                self._fields[i] = (k, value)
                return
        raise ElementNotFoundError(f"No input found with name '{name}'.")

    def set(self, name: str, value: str) -> None:
        self.remove(name)
        self._fields.append((name, value))

    def add(self, name: str, value: str) -> None:
        self._fields.append((name, value))

    def remove(self, name: str) -> bool:
        before = len(self._fields)
        self._fields = [(k, v) for k, v in self._fields if k != name]
        return len(self._fields) != before

    def submit(self) -> None:
        self._send(None)

    def click(self, button: str) -> None:
        if button not in self._buttons:
            raise ElementNotFoundError(f"No submit button found with name '{button}'.")
        self._send((button, self._buttons[button]))

    def _send(self, button: Optional[Tuple[str, str]]) -> None:
        values = list(self._fields)
        if button is not None:
            values.append(button)
        self._dispatcher.dispatch(
            Event.SUBMIT,
            self,
            SubmitArgs(values=values, method=self.method, action=self.action),
        )
