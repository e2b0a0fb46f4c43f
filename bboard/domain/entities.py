from __future__ import annotations

"""Domain value objects shared across adapters, use-cases, and view models."""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional, Tuple

log = logging.getLogger(__name__)

ListingId = int


@dataclass(frozen=True)
class Identity:
    """Authenticated user as reported by the session and login endpoints."""

    id: int
    """Server-assigned user identifier."""
    name: str
    """Display name shown in the profile summary."""
    email: str
    """Contact address, also used as the login name."""

    def __post_init__(self) -> None:
        if not isinstance(self.id, int) or isinstance(self.id, bool):
            raise ValueError("Identity id must be an integer.")

    @property
    def summary(self) -> str:
        return f"{self.name} · {self.email}"


@dataclass(frozen=True)
class Listing:
    """Published classified ad exactly as delivered by the listing endpoints.

    The ``mine``, ``responses_count`` and ``has_responded`` annotations are
    computed by the server against the credential of the fetching request.
    Listings are never mutated in place; every fetch replaces them wholesale.
    """

    id: ListingId
    title: str
    description: str
    price: Decimal
    owner_name: str
    created_at: int
    """Creation time in epoch seconds."""
    mine: bool = False
    responses_count: Optional[int] = None
    has_responded: Optional[bool] = None

    def __post_init__(self) -> None:
        if not self.price.is_finite() or self.price < 0:
            raise ValueError("Listing price must be a finite non-negative amount.")
        if self.responses_count is not None and self.responses_count < 0:
            raise ValueError("Listing responses_count must be non-negative.")


@dataclass(frozen=True)
class Responder:
    """One user who responded to an owned listing."""

    name: str
    email: str


@dataclass(frozen=True)
class Credentials:
    """Login form payload."""

    email: str
    password: str

    def to_form(self) -> Dict[str, str]:
        return {"email": self.email, "password": self.password}


@dataclass(frozen=True)
class Registration:
    """Account registration form payload."""

    name: str
    email: str
    password: str

    def to_form(self) -> Dict[str, str]:
        return {"name": self.name, "email": self.email, "password": self.password}


@dataclass(frozen=True)
class ListingDraft:
    """Authoring form payload for a new listing.

    ``price`` stays text until submission so the form keeps whatever the user
    typed when validation fails.
    """

    title: str
    description: str
    price: str = ""

    def validate(self) -> Optional[str]:
        """Return a user-facing problem description, or ``None`` when valid."""
        if not self.title.strip() or not self.description.strip():
            return "Title and description are required"
        text = self.price.strip()
        if not text:
            return None
        try:
            value = Decimal(text)
        except InvalidOperation:
            return "Invalid price"
        if not value.is_finite() or value < 0:
            return "Invalid price"
        return None

    def to_form(self) -> Dict[str, str]:
        return {
            "title": self.title.strip(),
            "description": self.description.strip(),
            "price": self.price.strip(),
        }


# ---------------------------------------------------------------------------
# Payload parsing
# ---------------------------------------------------------------------------
def _as_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{field_name} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise ValueError(f"{field_name} must be an integer.")


def _as_price(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    try:
        price = Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Invalid price: {value!r}") from exc
    if not price.is_finite():
        raise ValueError(f"Invalid price: {value!r}")
    return price


def _optional_bool(raw: Mapping[str, Any], key: str) -> Optional[bool]:
    if key not in raw or raw[key] is None:
        return None
    return bool(raw[key])


def parse_identity(raw: Any) -> Optional[Identity]:
    """Build an ``Identity`` from a ``user`` object; ``None`` when absent."""
    if not isinstance(raw, Mapping):
        return None
    try:
        return Identity(
            id=_as_int(raw.get("id"), "user.id"),
            name=str(raw.get("name") or ""),
            email=str(raw.get("email") or ""),
        )
    except ValueError as exc:
        log.warning("Ignoring malformed user payload: %s", exc)
        return None


def parse_listing(raw: Mapping[str, Any]) -> Listing:
    """Build a ``Listing`` from one entry of an ``ads`` array.

    Raises:
        ValueError: When the id, price or timestamps are malformed.
    """
    count = raw.get("responsesCount")
    return Listing(
        id=_as_int(raw.get("id"), "id"),
        title=str(raw.get("title") or ""),
        description=str(raw.get("description") or ""),
        price=_as_price(raw.get("price")),
        owner_name=str(raw.get("ownerName") or ""),
        created_at=_as_int(raw.get("createdAt") or 0, "createdAt"),
        mine=bool(raw.get("mine", False)),
        responses_count=None if count is None else _as_int(count, "responsesCount"),
        has_responded=_optional_bool(raw, "hasResponded"),
    )


def parse_listings(payload: Mapping[str, Any]) -> Tuple[Listing, ...]:
    """Parse the ``ads`` array of a feed payload, skipping malformed entries."""
    listings: List[Listing] = []
    for raw in payload.get("ads") or []:
        if not isinstance(raw, Mapping):
            log.warning("Skipping non-object listing entry: %r", raw)
            continue
        try:
            listings.append(parse_listing(raw))
        except ValueError as exc:
            log.warning("Skipping malformed listing %r: %s", raw.get("id"), exc)
    return tuple(listings)


def parse_responders(payload: Mapping[str, Any]) -> Tuple[Responder, ...]:
    """Parse the ``responders`` array, preserving server order."""
    responders: List[Responder] = []
    for raw in payload.get("responders") or []:
        if not isinstance(raw, Mapping):
            continue
        responders.append(
            Responder(name=str(raw.get("name") or ""), email=str(raw.get("email") or ""))
        )
    return tuple(responders)


__all__ = [
    "Credentials",
    "Identity",
    "Listing",
    "ListingDraft",
    "ListingId",
    "Registration",
    "Responder",
    "parse_identity",
    "parse_listing",
    "parse_listings",
    "parse_responders",
]
