"""Use case for logging in with email and password."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from bboard.domain.entities import Credentials, parse_identity
from bboard.domain.ports import GatewayPort, GatewayResult, NotifierPort, PresenterPort
from bboard.usecases.error_mapping import result_error
from bboard.usecases.session_store import SessionStore

log = logging.getLogger(__name__)


@dataclass
class Login:
    """Exchange credentials for a bearer token and adopt the returned identity."""

    session: SessionStore
    gateway: GatewayPort
    notifier: NotifierPort
    presenter: PresenterPort

    def __call__(self, credentials: Credentials) -> None:
        self.session.dispatch(lambda: self.gateway.login(credentials), self._settle)

    def _settle(self, result: GatewayResult) -> None:
        token = result.payload.get("token") if result.ok else None
        if not result.ok or not isinstance(token, str) or not token.strip():
            message = result_error(result).message if not result.ok else "Login response has no token"
            self.notifier.notify(message, error=True)
            return

        identity = parse_identity(result.payload.get("user"))
        self.session.establish(token, identity)
        name = identity.name if identity and identity.name else "user"
        log.info("Logged in as %s", identity.email if identity else "<unknown>")
        self.notifier.notify(f"Welcome, {name}!")
        self.presenter.reset_form("login")
        self.presenter.close_account_panel()
        self.session.sync_identity()


__all__ = ["Login"]
