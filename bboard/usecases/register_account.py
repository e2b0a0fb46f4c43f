"""Use case for creating an account."""

from __future__ import annotations

from dataclasses import dataclass

from bboard.domain.entities import Registration
from bboard.domain.ports import GatewayPort, GatewayResult, NotifierPort, PresenterPort
from bboard.usecases.error_mapping import result_error
from bboard.usecases.session_store import SessionStore

MSG_REGISTERED = "Registration complete. You can log in now."


@dataclass
class RegisterAccount:
    session: SessionStore
    gateway: GatewayPort
    notifier: NotifierPort
    presenter: PresenterPort

    def __call__(self, registration: Registration) -> None:
        self.session.dispatch(lambda: self.gateway.register(registration), self._settle)

    def _settle(self, result: GatewayResult) -> None:
        if not result.ok:
            self.notifier.notify(result_error(result).message, error=True)
            return
        self.notifier.notify(MSG_REGISTERED)
        self.presenter.reset_form("register")
        self.presenter.show_login_tab()


__all__ = ["RegisterAccount"]
