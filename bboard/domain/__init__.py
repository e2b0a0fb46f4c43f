"""Domain package exports for value objects and ports."""

from .entities import (
    Credentials,
    Identity,
    Listing,
    ListingDraft,
    ListingId,
    Registration,
    Responder,
    parse_identity,
    parse_listings,
    parse_responders,
)
from .ports import GatewayResult, UseCaseError

__all__ = [
    "Credentials",
    "GatewayResult",
    "Identity",
    "Listing",
    "ListingDraft",
    "ListingId",
    "Registration",
    "Responder",
    "UseCaseError",
    "parse_identity",
    "parse_listings",
    "parse_responders",
]
