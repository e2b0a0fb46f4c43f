"""Adapter and use-case wiring for the board client runtime.

This module owns construction of the gateway, session store, listing cache,
response workflow and command use cases from
:class:`bboard.viewmodels.settings_vm.SettingsVM`. Views and presenters
receive the built objects; nothing else constructs adapters.
"""

from __future__ import annotations

from typing import Optional

from ..adapters.board_rest import BoardRestAdapter
from ..adapters.notifier_log import LogNotifier
from ..adapters.storage_local import StorageLocal
from ..domain.ports import NotifierPort, PresenterPort, TaskRunnerPort
from ..usecases.delete_listing import DeleteListing
from ..usecases.listing_cache import ListingCache
from ..usecases.login import Login
from ..usecases.logout import Logout
from ..usecases.publish_listing import PublishListing
from ..usecases.register_account import RegisterAccount
from ..usecases.response_workflow import ResponseWorkflow
from ..usecases.session_store import SessionStore
from ..viewmodels.settings_vm import SettingsVM


class AppController:
    """Create and hold runtime adapters/use-cases from settings state.

    Call chain:
        ``bboard.app.main.App`` creates one instance with its runner,
        notifier and presenter, calls ``ensure_ready`` and then ``start``.
    """

    def __init__(
        self,
        settings_vm: SettingsVM,
        *,
        runner: TaskRunnerPort,
        presenter: PresenterPort,
        notifier: Optional[NotifierPort] = None,
        storage: Optional[StorageLocal] = None,
    ) -> None:
        """Initialize controller with settings-backed dependencies.

        Args:
            settings_vm: Settings state containing the base URL and timeouts.
            runner: Delivers gateway results on the UI thread.
            notifier: Notification surface shared by all use cases; headless
                runs fall back to :class:`LogNotifier`.
            presenter: UI collaborator for confirmations and form resets.
            storage: Credential persistence; defaults to ``settings.state_dir``.
        """
        self.settings_vm = settings_vm
        self.runner = runner
        self.notifier = notifier or LogNotifier()
        self.presenter = presenter
        self.storage = storage
        self.gateway: Optional[BoardRestAdapter] = None
        self.session: Optional[SessionStore] = None
        self.cache: Optional[ListingCache] = None
        self.workflow: Optional[ResponseWorkflow] = None
        self.uc_login: Optional[Login] = None
        self.uc_logout: Optional[Logout] = None
        self.uc_register: Optional[RegisterAccount] = None
        self.uc_publish: Optional[PublishListing] = None
        self.uc_delete: Optional[DeleteListing] = None

    def _credential(self) -> Optional[str]:
        return self.session.credential if self.session else None

    def ensure_ready(self) -> bool:
        """Build the object graph once.

        Returns:
            ``True`` when everything is wired, ``False`` when the settings do
            not hold a usable base URL.
        """
        if self.session is not None:
            return True
        if not self.settings_vm.is_valid():
            return False

        if self.storage is None:
            self.storage = StorageLocal(self.settings_vm.state_dir)
        self.gateway = BoardRestAdapter(
            self.settings_vm.base_url,
            credential_provider=self._credential,
            request_timeout_s=self.settings_vm.request_timeout_s,
            retries=self.settings_vm.retries,
        )
        self.session = SessionStore(self.gateway, self.storage, self.runner, self.notifier)
        self.cache = ListingCache(self.session, self.gateway, self.notifier)
        self.workflow = ResponseWorkflow(
            self.session, self.cache, self.gateway, self.notifier, self.presenter
        )
        self.uc_login = Login(self.session, self.gateway, self.notifier, self.presenter)
        self.uc_logout = Logout(self.session, self.gateway)
        self.uc_register = RegisterAccount(self.session, self.gateway, self.notifier, self.presenter)
        self.uc_publish = PublishListing(
            self.session, self.cache, self.gateway, self.notifier, self.presenter
        )
        self.uc_delete = DeleteListing(
            self.session, self.cache, self.gateway, self.notifier, self.presenter
        )
        return True

    def start(self) -> None:
        """Restore the persisted credential and load the initial state."""
        if not self.ensure_ready():
            raise RuntimeError("Base URL is not configured")
        self.session.restore()
        self.session.sync_identity()
        self.cache.refresh_all()

    def reset(self) -> None:
        """Drop the object graph so the next ``ensure_ready`` rebuilds it."""
        self.gateway = None
        self.session = None
        self.cache = None
        self.workflow = None
        self.uc_login = None
        self.uc_logout = None
        self.uc_register = None
        self.uc_publish = None
        self.uc_delete = None


__all__ = ["AppController"]
