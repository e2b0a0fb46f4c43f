"""
MainWindowView
---------------
Tkinter main window for the board client. This file contains **only View
code**: no HTTP, no state rules. It renders rows handed to it and forwards
user intents through the callbacks passed to the constructor.

Layout:
  * Left: account panel (login/register tabs, or profile + logout) and the
    publish form
  * Right: notebook with Feed, My listings, My responses tables
  * Bottom: message banner
"""
from __future__ import annotations
import tkinter as tk
from tkinter import messagebox, ttk
from typing import Callable, Dict, List, Optional, Sequence

from ...domain.entities import Responder
from ...viewmodels.feed_vm import FeedRow, toolbar_state
from ...viewmodels.message_vm import MessageVM
from ...viewmodels.session_vm import SessionViewState

_COLUMNS = ("title", "price", "owner", "created", "responses", "respond")
_HEADINGS = {
    "title": "Title",
    "price": "Price",
    "owner": "Author",
    "created": "Published",
    "responses": "Responses",
    "respond": "Status",
}
_PANEL_TITLES = {"public": "Feed", "mine": "My listings", "my_responses": "My responses"}


class MainWindowView(tk.Tk):
    """Top-level application window (UI-only)."""

    OnVoid = Optional[Callable[[], None]]
    OnListing = Optional[Callable[[int], None]]

    def __init__(
        self,
        *,
        on_login: Optional[Callable[[str, str], None]] = None,
        on_register: Optional[Callable[[str, str, str], None]] = None,
        on_logout: OnVoid = None,
        on_publish: Optional[Callable[[str, str, str], None]] = None,
        on_refresh: OnVoid = None,
        on_respond: OnListing = None,
        on_delete: OnListing = None,
        on_show_responders: OnListing = None,
    ) -> None:
        super().__init__()
        self.title("Bulletin Board")
        self.geometry("1100x680")
        self.minsize(900, 560)

        self._on_login = on_login
        self._on_register = on_register
        self._on_logout = on_logout
        self._on_publish = on_publish
        self._on_refresh = on_refresh
        self._on_respond = on_respond
        self._on_delete = on_delete
        self._on_show_responders = on_show_responders

        self._rows: Dict[str, Dict[str, FeedRow]] = {name: {} for name in _PANEL_TITLES}
        self._tables: Dict[str, ttk.Treeview] = {}

        self.columnconfigure(1, weight=1)
        self.rowconfigure(0, weight=1)
        self._build_side(self)
        self._build_panels(self)
        self._build_banner(self)

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------
    def _build_side(self, parent: tk.Widget) -> None:
        side = ttk.Frame(parent, padding=8)
        side.grid(row=0, column=0, sticky="ns")

        self.account_tabs = ttk.Notebook(side)
        self.account_tabs.pack(fill="x")
        self.login_frame = ttk.Frame(self.account_tabs, padding=6)
        self.register_frame = ttk.Frame(self.account_tabs, padding=6)
        self.account_tabs.add(self.login_frame, text="Log in")
        self.account_tabs.add(self.register_frame, text="Register")

        self.login_email = self._entry(self.login_frame, "Email")
        self.login_password = self._entry(self.login_frame, "Password", show="*")
        ttk.Button(self.login_frame, text="Log in", command=self._submit_login).pack(fill="x", pady=(6, 0))

        self.register_name = self._entry(self.register_frame, "Name")
        self.register_email = self._entry(self.register_frame, "Email")
        self.register_password = self._entry(self.register_frame, "Password", show="*")
        ttk.Button(self.register_frame, text="Register", command=self._submit_register).pack(fill="x", pady=(6, 0))

        self.profile_frame = ttk.Frame(side, padding=6)
        self.profile_var = tk.StringVar(value="")
        ttk.Label(self.profile_frame, textvariable=self.profile_var).pack(anchor="w")
        self.logout_button = ttk.Button(
            self.profile_frame, text="Log out", command=lambda: self._on_logout and self._on_logout()
        )
        self.logout_button.pack(fill="x", pady=(6, 0))

        publish = ttk.LabelFrame(side, text="New listing", padding=6)
        publish.pack(fill="x", pady=(12, 0))
        self.publish_title = self._entry(publish, "Title")
        ttk.Label(publish, text="Description").pack(anchor="w")
        self.publish_description = tk.Text(publish, height=5, width=28)
        self.publish_description.pack(fill="x")
        self.publish_price = self._entry(publish, "Price")
        self.publish_button = ttk.Button(publish, text="Publish", command=self._submit_publish)
        self.publish_button.pack(fill="x", pady=(6, 0))
        self._publish_widgets = [
            self.publish_title,
            self.publish_description,
            self.publish_price,
            self.publish_button,
        ]

    def _build_panels(self, parent: tk.Widget) -> None:
        right = ttk.Frame(parent, padding=8)
        right.grid(row=0, column=1, sticky="nsew")
        right.rowconfigure(1, weight=1)
        right.columnconfigure(0, weight=1)

        toolbar = ttk.Frame(right)
        toolbar.grid(row=0, column=0, sticky="ew", pady=(0, 4))
        ttk.Button(toolbar, text="Refresh", command=lambda: self._on_refresh and self._on_refresh()).pack(side="left")
        self.respond_button = ttk.Button(toolbar, text="Respond", command=lambda: self._with_selection(self._on_respond))
        self.respond_button.pack(side="left", padx=4)
        self.responders_button = ttk.Button(
            toolbar, text="Responders", command=lambda: self._with_selection(self._on_show_responders)
        )
        self.responders_button.pack(side="left")
        self.delete_button = ttk.Button(toolbar, text="Delete", command=lambda: self._with_selection(self._on_delete))
        self.delete_button.pack(side="left", padx=4)

        self.panels = ttk.Notebook(right)
        self.panels.grid(row=1, column=0, sticky="nsew")
        for name, title in _PANEL_TITLES.items():
            frame = ttk.Frame(self.panels)
            table = ttk.Treeview(frame, columns=_COLUMNS, show="headings", selectmode="browse")
            for column in _COLUMNS:
                table.heading(column, text=_HEADINGS[column])
                table.column(column, width=260 if column == "title" else 110, anchor="w")
            table.pack(fill="both", expand=True)
            table.bind("<<TreeviewSelect>>", lambda _e: self._sync_toolbar())
            self.panels.add(frame, text=title)
            self._tables[name] = table
        self.panels.bind("<<NotebookTabChanged>>", lambda _e: self._sync_toolbar())
        self._sync_toolbar()

    def _build_banner(self, parent: tk.Widget) -> None:
        self.banner_var = tk.StringVar(value="")
        self.banner = tk.Label(parent, textvariable=self.banner_var, anchor="w", padx=8)
        self.banner.grid(row=1, column=0, columnspan=2, sticky="ew")

    @staticmethod
    def _entry(parent: tk.Widget, label: str, show: str = "") -> ttk.Entry:
        ttk.Label(parent, text=label).pack(anchor="w")
        entry = ttk.Entry(parent, show=show, width=30)
        entry.pack(fill="x")
        return entry

    # ------------------------------------------------------------------
    # Intents
    # ------------------------------------------------------------------
    def _submit_login(self) -> None:
        if self._on_login:
            self._on_login(self.login_email.get(), self.login_password.get())

    def _submit_register(self) -> None:
        if self._on_register:
            self._on_register(
                self.register_name.get(), self.register_email.get(), self.register_password.get()
            )

    def _submit_publish(self) -> None:
        if self._on_publish:
            self._on_publish(
                self.publish_title.get(),
                self.publish_description.get("1.0", "end").strip(),
                self.publish_price.get(),
            )

    def _selected_row(self) -> Optional[FeedRow]:
        panel = self.current_panel()
        selection = self._tables[panel].selection()
        if not selection:
            return None
        return self._rows[panel].get(selection[0])

    def _with_selection(self, callback: OnListing) -> None:
        row = self._selected_row()
        if callback and row is not None:
            callback(row.listing_id)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def current_panel(self) -> str:
        index = self.panels.index(self.panels.select())
        return list(_PANEL_TITLES)[index]

    def render_rows(self, panel: str, rows: List[FeedRow]) -> None:
        table = self._tables[panel]
        table.delete(*table.get_children())
        self._rows[panel] = {}
        for row in rows:
            iid = table.insert(
                "",
                "end",
                values=(
                    row.title,
                    row.price,
                    row.owner,
                    row.created_at,
                    "" if row.responses_count is None else row.responses_count,
                    row.respond_label,
                ),
            )
            self._rows[panel][iid] = row
        self._sync_toolbar()

    def _sync_toolbar(self) -> None:
        state = toolbar_state(self._selected_row())
        for button, enabled in (
            (self.respond_button, state.respond),
            (self.responders_button, state.responders),
            (self.delete_button, state.delete),
        ):
            button.configure(state="normal" if enabled else "disabled")

    def render_session(self, state: SessionViewState) -> None:
        if state.authenticated:
            self.account_tabs.pack_forget()
            self.profile_var.set(state.profile_summary)
            self.profile_frame.pack(fill="x", before=self.publish_button.master)
        else:
            self.profile_frame.pack_forget()
            self.account_tabs.pack(fill="x", before=self.publish_button.master)
        widget_state = "normal" if state.publish_enabled else "disabled"
        for widget in self._publish_widgets:
            widget.configure(state=widget_state)

    def render_message(self, vm: MessageVM) -> None:
        self.banner_var.set(vm.text if vm.visible else "")
        self.banner.configure(fg="#b00020" if vm.is_error else "#1b5e20")

    # ------------------------------------------------------------------
    # Presenter commands
    # ------------------------------------------------------------------
    def confirm(self, prompt: str) -> bool:
        return bool(messagebox.askyesno("Confirm", prompt, parent=self))

    def open_login(self) -> None:
        self.account_tabs.select(self.login_frame)
        self.login_email.focus_set()

    def show_login_tab(self) -> None:
        self.account_tabs.select(self.login_frame)

    def close_account_panel(self) -> None:
        self.panels.select(0)

    def reset_form(self, form: str) -> None:
        if form == "login":
            entries: Sequence[tk.Widget] = (self.login_email, self.login_password)
        elif form == "register":
            entries = (self.register_name, self.register_email, self.register_password)
        else:
            entries = (self.publish_title, self.publish_price)
            self.publish_description.delete("1.0", "end")
        for entry in entries:
            entry.delete(0, "end")

    def show_responders(self, listing_id: int, responders: Sequence[Responder]) -> None:
        lines = "\n".join(f"{item.name} <{item.email}>" for item in responders)
        messagebox.showinfo(f"Responders for listing {listing_id}", lines, parent=self)
