"""Use case for publishing a new listing."""

from __future__ import annotations

from dataclasses import dataclass

from bboard.domain.entities import ListingDraft
from bboard.domain.ports import GatewayPort, GatewayResult, NotifierPort, PresenterPort
from bboard.usecases.error_mapping import result_error
from bboard.usecases.listing_cache import ListingCache
from bboard.usecases.session_store import SessionStore

MSG_LOGIN_REQUIRED = "You must log in"
MSG_PUBLISHED = "Listing published"


@dataclass
class PublishListing:
    """Validate and submit a listing draft, then refresh affected projections."""

    session: SessionStore
    cache: ListingCache
    gateway: GatewayPort
    notifier: NotifierPort
    presenter: PresenterPort

    def __call__(self, draft: ListingDraft) -> bool:
        """Submit ``draft``.

        Returns:
            ``True`` when a request was dispatched. A missing credential or an
            invalid draft is reported to the user and short-circuits before
            any network call.
        """
        if not self.session.credential:
            self.notifier.notify(MSG_LOGIN_REQUIRED, error=True)
            self.presenter.open_login()
            return False
        problem = draft.validate()
        if problem:
            self.notifier.notify(problem, error=True)
            return False
        self.session.dispatch(lambda: self.gateway.create_ad(draft), self._settle)
        return True

    def _settle(self, result: GatewayResult) -> None:
        if not result.ok:
            # The form is left untouched so the user can fix and resubmit.
            self.notifier.notify(result_error(result).message, error=True)
            return
        self.presenter.reset_form("publish")
        self.cache.refresh_public_feed()
        self.cache.refresh_mine()
        self.notifier.notify(MSG_PUBLISHED)


__all__ = ["PublishListing"]
