from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Protocol, Sequence, TypeVar

from .entities import (
    Credentials,
    ListingDraft,
    ListingId,
    Registration,
    Responder,
)

T = TypeVar("T")


# ---- Error model ----
class UseCaseError(Exception):
    """Base class for use case level errors (user-presentable)."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


# ---- Gateway result ----
@dataclass(frozen=True)
class GatewayResult:
    """Uniform outcome of one remote API call.

    Exactly one of ``payload`` (on success) or ``error`` (on failure) is
    meaningful. ``status`` is ``None`` when no HTTP response was received.
    """

    ok: bool
    payload: Dict[str, Any] = field(default_factory=dict)
    error: Optional[Exception] = None
    status: Optional[int] = None

    @property
    def message(self) -> str:
        return str(self.error) if self.error is not None else ""

    @classmethod
    def success(cls, payload: Optional[Dict[str, Any]] = None, status: int = 200) -> "GatewayResult":
        return cls(ok=True, payload=dict(payload or {}), status=status)

    @classmethod
    def failure(cls, error: Exception, status: Optional[int] = None) -> "GatewayResult":
        return cls(ok=False, error=error, status=status)


# ---- Ports (Hexagonal boundaries) ----
class GatewayPort(Protocol):
    """Remote bulletin board API. Every method returns, none raises."""

    def request(
        self, path: str, method: str = "GET", form_body: Optional[Dict[str, str]] = None
    ) -> GatewayResult: ...
    def session(self) -> GatewayResult: ...  # {"authenticated": bool, "user"?: {...}}
    def register(self, registration: Registration) -> GatewayResult: ...
    def login(self, credentials: Credentials) -> GatewayResult: ...  # {"token", "user"}
    def logout(self) -> GatewayResult: ...
    def list_ads(self) -> GatewayResult: ...  # {"ads": [...]}
    def create_ad(self, draft: ListingDraft) -> GatewayResult: ...
    def delete_ad(self, listing_id: ListingId) -> GatewayResult: ...
    def respond(self, listing_id: ListingId) -> GatewayResult: ...
    def list_responders(self, listing_id: ListingId) -> GatewayResult: ...  # {"responders": [...]}
    def my_responses(self) -> GatewayResult: ...  # {"ads": [...]}


class CredentialStorePort(Protocol):
    """Persistence for the single session credential."""

    def load_credential(self) -> Optional[str]: ...
    def save_credential(self, token: str) -> None: ...
    def clear_credential(self) -> None: ...


class NotifierPort(Protocol):
    """Transient user-facing message channel; newer messages replace older ones."""

    def notify(self, message: str, *, error: bool = False) -> None: ...


class PresenterPort(Protocol):
    """UI collaborator commands the core drives but never inspects."""

    def confirm(self, prompt: str) -> bool: ...
    def open_login(self) -> None: ...
    def show_login_tab(self) -> None: ...
    def close_account_panel(self) -> None: ...
    def reset_form(self, form: str) -> None: ...  # "login" | "register" | "publish"
    def show_responders(self, listing_id: ListingId, responders: Sequence[Responder]) -> None: ...


class TaskRunnerPort(Protocol):
    """Runs blocking gateway work and delivers the result on the UI thread."""

    def submit(self, work: Callable[[], T], on_done: Callable[[T], None]) -> None: ...
