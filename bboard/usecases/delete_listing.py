"""Use case for deleting an owned listing."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from bboard.domain.entities import ListingId
from bboard.domain.ports import GatewayPort, GatewayResult, NotifierPort, PresenterPort
from bboard.usecases.error_mapping import result_error
from bboard.usecases.listing_cache import ListingCache
from bboard.usecases.session_store import SessionStore

log = logging.getLogger(__name__)

PROMPT_DELETE = "Delete this listing?"
MSG_DELETED = "Listing deleted"


@dataclass
class DeleteListing:
    """Confirm, delete, and refresh both public and owner projections.

    Projections are never edited optimistically: a failed delete leaves them
    exactly as they were.
    """

    session: SessionStore
    cache: ListingCache
    gateway: GatewayPort
    notifier: NotifierPort
    presenter: PresenterPort

    def __call__(self, listing_id: ListingId) -> bool:
        if not self.presenter.confirm(PROMPT_DELETE):
            return False
        self.session.dispatch(
            lambda: self.gateway.delete_ad(listing_id),
            lambda result: self._settle(listing_id, result),
        )
        return True

    def _settle(self, listing_id: ListingId, result: GatewayResult) -> None:
        if not result.ok:
            error = result_error(result)
            log.info("Delete of listing %s failed: %s", listing_id, error.message)
            self.notifier.notify(error.message, error=True)
            return
        self.notifier.notify(MSG_DELETED)
        self.cache.refresh_public_feed()
        self.cache.refresh_mine()


__all__ = ["DeleteListing"]
