# bboard/app/main.py
from __future__ import annotations

import logging

from ..adapters.storage_local import StorageLocal
from ..adapters.task_runners import ThreadTaskRunner
from ..domain.entities import Credentials, ListingDraft, Registration
from ..utils import logging as logging_utils
from ..viewmodels.feed_vm import FeedVM
from ..viewmodels.message_vm import MessageVM
from ..viewmodels.session_vm import SessionVM
from ..viewmodels.settings_vm import SettingsVM
from .controller import AppController
from .views.main_window import MainWindowView

logging_utils.configure_root()


class App:
    """Bootstrap: wire the window, view models, use cases and the thread runner."""

    def __init__(self) -> None:
        self._log = logging.getLogger(__name__)
        self.settings_vm = SettingsVM()
        self.settings_vm.apply_env()
        self.storage = StorageLocal(self.settings_vm.state_dir)
        self.settings_vm.apply_dict(self.storage.load_settings())
        self.settings_vm.apply_env()
        level = logging_utils.configure_root(self.settings_vm.debug_logging)
        self._log.debug("Log level %s", logging.getLevelName(level))

        self.win = MainWindowView(
            on_login=self._on_login,
            on_register=self._on_register,
            on_logout=self._on_logout,
            on_publish=self._on_publish,
            on_refresh=self._on_refresh,
            on_respond=self._on_respond,
            on_delete=self._on_delete,
            on_show_responders=self._on_show_responders,
        )
        self.message_vm = MessageVM(
            self.win.after,
            self.win.after_cancel,
            duration_ms=self.settings_vm.message_duration_ms,
            on_change=self.win.render_message,
        )
        self.runner = ThreadTaskRunner(self.win.after)
        self.controller = AppController(
            self.settings_vm,
            runner=self.runner,
            notifier=self.message_vm,
            presenter=self.win,
            storage=self.storage,
        )
        if not self.controller.ensure_ready():
            raise SystemExit(f"Invalid base URL: {self.settings_vm.base_url!r}")

        self.session_vm = SessionVM(self.controller.session, on_change=self.win.render_session)
        self.feed_vm = FeedVM(
            self.controller.cache,
            self.controller.workflow,
            on_render=self.win.render_rows,
        )
        self.win.render_session(self.session_vm.state)
        self.win.protocol("WM_DELETE_WINDOW", self._on_close)
        self._log.info("Connecting to %s", self.settings_vm.base_url)
        self.controller.start()

    # ------------------------------------------------------------------
    def _on_login(self, email: str, password: str) -> None:
        self.controller.uc_login(Credentials(email=email.strip(), password=password))

    def _on_register(self, name: str, email: str, password: str) -> None:
        self.controller.uc_register(
            Registration(name=name.strip(), email=email.strip(), password=password)
        )

    def _on_logout(self) -> None:
        self.controller.uc_logout()

    def _on_publish(self, title: str, description: str, price: str) -> None:
        self.controller.uc_publish(ListingDraft(title=title, description=description, price=price))

    def _on_refresh(self) -> None:
        self.controller.cache.refresh_all()

    def _on_respond(self, listing_id: int) -> None:
        self.controller.workflow.respond(listing_id)

    def _on_delete(self, listing_id: int) -> None:
        self.controller.uc_delete(listing_id)

    def _on_show_responders(self, listing_id: int) -> None:
        self.controller.workflow.list_responders(listing_id)

    def _on_close(self) -> None:
        self.storage.save_settings(self.settings_vm.to_dict())
        self.runner.shutdown()
        self.win.destroy()


def main() -> None:
    app = App()
    app.win.mainloop()


if __name__ == "__main__":
    main()
