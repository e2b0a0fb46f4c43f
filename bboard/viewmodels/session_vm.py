from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from bboard.domain.entities import Identity
from bboard.usecases.session_store import SessionStore


@dataclass(frozen=True)
class SessionViewState:
    """Auth-dependent enable/disable state for the account and publish surfaces."""

    authenticated: bool
    profile_summary: str
    publish_enabled: bool
    logout_enabled: bool
    my_ads_placeholder: str


class SessionVM:
    """Projects identity changes into form state; no I/O here."""

    LOGGED_OUT_PLACEHOLDER = "Log in to see your listings"

    def __init__(
        self,
        session: SessionStore,
        *,
        on_change: Optional[Callable[[SessionViewState], None]] = None,
    ) -> None:
        self.on_change = on_change
        self.state = self._build(session.identity)
        session.subscribe(self._on_identity)

    def _on_identity(self, identity: Optional[Identity]) -> None:
        self.state = self._build(identity)
        if self.on_change:
            self.on_change(self.state)

    def _build(self, identity: Optional[Identity]) -> SessionViewState:
        if identity is None:
            return SessionViewState(
                authenticated=False,
                profile_summary="",
                publish_enabled=False,
                logout_enabled=False,
                my_ads_placeholder=self.LOGGED_OUT_PLACEHOLDER,
            )
        return SessionViewState(
            authenticated=True,
            profile_summary=identity.summary,
            publish_enabled=True,
            logout_enabled=True,
            my_ads_placeholder="",
        )


__all__ = ["SessionVM", "SessionViewState"]
