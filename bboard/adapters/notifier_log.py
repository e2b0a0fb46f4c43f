from __future__ import annotations

import logging

from bboard.domain.ports import NotifierPort


class LogNotifier(NotifierPort):
    """Notification surface for headless runs: messages go to the log."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._log = logger or logging.getLogger("bboard.notify")
        self.last_message: str = ""
        self.last_error: bool = False

    def notify(self, message: str, *, error: bool = False) -> None:
        self.last_message = message
        self.last_error = error
        self._log.log(logging.WARNING if error else logging.INFO, "%s", message)


__all__ = ["LogNotifier"]
