"""Session store: credential, authenticated identity, and gateway dispatch.

The store is the single source of truth for "am I logged in". It is created
once by ``bboard.app.controller.AppController`` and injected into every use
case; nothing reads session state from module globals.

Call context:
    - ``Login`` / ``Logout`` mutate it.
    - ``ListingCache`` and ``ResponseWorkflow`` subscribe to identity changes.
    - Every use case sends gateway work through :meth:`SessionStore.dispatch`
      so 401 responses clear the session in one place.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, TypeVar

from bboard.domain.entities import Identity, parse_identity
from bboard.domain.ports import (
    CredentialStorePort,
    GatewayPort,
    GatewayResult,
    NotifierPort,
    TaskRunnerPort,
)
from bboard.usecases.error_mapping import result_error

IdentityListener = Callable[[Optional[Identity]], None]
R = TypeVar("R", bound=GatewayResult)

log = logging.getLogger(__name__)


class SessionStore:
    """Owns the credential/identity pair and notifies identity listeners.

    Invariant: ``identity is not None`` implies ``credential is not None``.
    """

    def __init__(
        self,
        gateway: GatewayPort,
        storage: CredentialStorePort,
        runner: TaskRunnerPort,
        notifier: NotifierPort,
    ) -> None:
        self.gateway = gateway
        self.storage = storage
        self.runner = runner
        self.notifier = notifier
        self._credential: Optional[str] = None
        self._identity: Optional[Identity] = None
        self._listeners: List[IdentityListener] = []

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def credential(self) -> Optional[str]:
        return self._credential

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    @property
    def is_authenticated(self) -> bool:
        return self._identity is not None

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        """Register ``listener(identity)``; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def restore(self) -> Optional[str]:
        """Load the persisted credential at startup. Identity stays unknown."""
        self._credential = self.storage.load_credential()
        self._set_identity(None)
        return self._credential

    def set_credential(self, token: str) -> None:
        """Store and persist ``token``; identity is cleared until re-synced."""
        if not isinstance(token, str) or not token.strip():
            raise ValueError("Credential token must be a non-empty string.")
        self._credential = token
        self.storage.save_credential(token)
        self._set_identity(None)

    def establish(self, token: str, identity: Optional[Identity]) -> None:
        """Adopt a fresh login: persist ``token`` and set ``identity`` in one change."""
        if not isinstance(token, str) or not token.strip():
            raise ValueError("Credential token must be a non-empty string.")
        self._credential = token
        self.storage.save_credential(token)
        self._set_identity(identity, force=True)

    def clear(self) -> None:
        """Drop credential and identity and persist the removal."""
        self._credential = None
        self.storage.clear_credential()
        self._set_identity(None, force=True)

    def sync_identity(self) -> None:
        """Re-derive identity from ``GET /api/session``.

        Never raises: failures degrade to the logged-out view and are shown
        through the notifier.
        """
        self.dispatch(self.gateway.session, self._apply_session)

    def dispatch(self, work: Callable[[], R], on_done: Callable[[R], None]) -> None:
        """Run gateway ``work`` through the task runner.

        A 401 result clears the session when the credential is still the one
        captured at dispatch, then ``on_done`` receives the result.
        """
        token = self._credential

        def _settle(result: R) -> None:
            if result.status == 401 and token is not None and token == self._credential:
                log.info("Credential rejected by server; clearing session")
                self.clear()
            on_done(result)

        self.runner.submit(work, _settle)

    # ------------------------------------------------------------------
    def _apply_session(self, result: GatewayResult) -> None:
        if not result.ok:
            error = result_error(result)
            log.warning("Session check failed: %s", error.message)
            self._set_identity(None)
            self.notifier.notify(error.message, error=True)
            return
        identity = None
        if result.payload.get("authenticated") and self._credential is not None:
            identity = parse_identity(result.payload.get("user"))
        self._set_identity(identity)

    def _set_identity(self, identity: Optional[Identity], *, force: bool = False) -> None:
        if identity == self._identity and not force:
            return
        self._identity = identity
        log.debug("Identity changed: %s", identity.email if identity else "<anonymous>")
        for listener in list(self._listeners):
            listener(identity)


__all__ = ["IdentityListener", "SessionStore"]
