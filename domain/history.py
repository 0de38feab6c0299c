# domain/history.py
from __future__ import annotations

from typing import Iterator, List, Optional

from domain.state import State


class History:
    """
    Stack of previously visited states, oldest first.

    The first entry pushed is the floor: pop() never removes it, so going back
    can not land on the bootstrap state.
    """

    def __init__(self) -> None:
        self._states: List[State] = []

    def push(self, state: State) -> None:
        self._states.append(state)

    def pop(self) -> Optional[State]:
        if len(self._states) <= 1:
            return None
        return self._states.pop()

    def top(self) -> Optional[State]:
        return self._states[-1] if self._states else None

    def clear(self) -> None:
        self._states.clear()

    def __len__(self) -> int:
        return len(self._states)

    def __iter__(self) -> Iterator[State]:
        return iter(list(self._states))
