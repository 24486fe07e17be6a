"""Shared state store for the components of one extension."""

from collections.abc import Callable, Mapping
from typing import Any

from notur_core.logging import get_logger

StateListener = Callable[[dict[str, Any]], None]

logger = get_logger("registry")


class ExtensionStateStore:
    """Dict-backed state every component of an extension shares.

    Updates are shallow merges; listeners receive a copy of the new state.
    """

    def __init__(self, initial: Mapping[str, Any] | None = None):
        self._state: dict[str, Any] = dict(initial or {})
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> dict[str, Any]:
        return dict(self._state)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def set_state(self, partial: Mapping[str, Any]) -> None:
        self._state = {**self._state, **partial}
        self._notify()

    def reset_state(self, reset_to: Mapping[str, Any] | None = None) -> None:
        self._state = dict(reset_to or {})
        self._notify()

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            if listener not in self._listeners:
                continue
            try:
                listener(dict(self._state))
            except Exception as e:
                logger.exception("State listener failed", exc=e)
