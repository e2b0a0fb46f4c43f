"""Use case for ending the current session."""

from __future__ import annotations

from dataclasses import dataclass

from bboard.domain.ports import GatewayPort, GatewayResult
from bboard.usecases.session_store import SessionStore


@dataclass
class Logout:
    """Best-effort server logout; the local session is cleared regardless."""

    session: SessionStore
    gateway: GatewayPort

    def __call__(self) -> None:
        if not self.session.credential:
            self.session.clear()
            return
        self.session.dispatch(self.gateway.logout, self._settle)

    def _settle(self, result: GatewayResult) -> None:
        # The server outcome is irrelevant: the token is discarded either way.
        self.session.clear()
        self.session.sync_identity()


__all__ = ["Logout"]
