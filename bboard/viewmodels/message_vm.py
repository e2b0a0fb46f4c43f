"""Timed notification surface state.

The presenter passes Tk ``after`` and ``after_cancel`` callables so the hide
timer can be re-armed whenever a newer message supersedes the current one.
"""

from __future__ import annotations

from typing import Callable, Optional

from bboard.domain.ports import NotifierPort

ScheduleFn = Callable[[int, Callable[[], None]], object]
CancelFn = Callable[[object], None]


class MessageVM(NotifierPort):
    """Single-slot message banner: no queue, newest message wins."""

    def __init__(
        self,
        schedule: ScheduleFn,
        cancel: CancelFn,
        *,
        duration_ms: int = 4000,
        on_change: Optional[Callable[["MessageVM"], None]] = None,
    ) -> None:
        self._schedule = schedule
        self._cancel = cancel
        self.duration_ms = max(1, int(duration_ms))
        self.on_change = on_change
        self.text: str = ""
        self.is_error: bool = False
        self.visible: bool = False
        self._token: Optional[object] = None

    def notify(self, message: str, *, error: bool = False) -> None:
        self._cancel_timer()
        self.text = message
        self.is_error = error
        self.visible = True
        self._token = self._schedule(self.duration_ms, self._expire)
        self._changed()

    def _expire(self) -> None:
        self._token = None
        self.visible = False
        self._changed()

    def _cancel_timer(self) -> None:
        token, self._token = self._token, None
        if token is not None:
            self._cancel(token)

    def _changed(self) -> None:
        if self.on_change:
            self.on_change(self)


__all__ = ["MessageVM"]
