"""Listing cache and its three view projections.

Projections:
    ``public``        every listing, ownership-only fields stripped.
    ``mine``          listings the server annotated with ``mine``.
    ``my_responses``  listings the current identity responded to.

Each projection is replaced atomically: listeners receive the whole tuple in
one call. Refreshes of the same projection follow last-issued-wins; a result
whose sequence number is not the latest issued for its projection is dropped,
so a slow straggler never overwrites fresher data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

from bboard.domain.entities import Identity, Listing, ListingId, parse_listings
from bboard.domain.ports import GatewayPort, GatewayResult, NotifierPort
from bboard.usecases.error_mapping import result_error
from bboard.usecases.session_store import SessionStore

PUBLIC = "public"
MINE = "mine"
MY_RESPONSES = "my_responses"
PROJECTIONS: Tuple[str, ...] = (PUBLIC, MINE, MY_RESPONSES)

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ListingView:
    """One listing as seen through a projection, with derived flags.

    ``responses_count`` is only set for the owner; ``has_responded`` only for
    a non-owner with a known identity.
    """

    listing: Listing
    mine: bool
    responses_count: Optional[int] = None
    has_responded: Optional[bool] = None

    @property
    def id(self) -> ListingId:
        return self.listing.id


ProjectionListener = Callable[[str, Tuple[ListingView, ...]], None]


class ListingCache:
    """Holds the last accepted fetch per projection and derives views from it."""

    def __init__(self, session: SessionStore, gateway: GatewayPort, notifier: NotifierPort) -> None:
        self.session = session
        self.gateway = gateway
        self.notifier = notifier
        self._raw: Dict[str, Tuple[Listing, ...]] = {name: () for name in PROJECTIONS}
        self._views: Dict[str, Tuple[ListingView, ...]] = {name: () for name in PROJECTIONS}
        self._issued: Dict[str, int] = {name: 0 for name in PROJECTIONS}
        # Listings this identity responded to during the session; keeps
        # has_responded monotonic even if a fetch lags behind the server.
        self._responded_ids: Set[ListingId] = set()
        self._listeners: List[ProjectionListener] = []
        session.subscribe(self._on_identity_changed)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def projection(self, name: str) -> Tuple[ListingView, ...]:
        self._check_name(name)
        return self._views[name]

    def find(self, listing_id: ListingId) -> Optional[ListingView]:
        """Return the freshest known view of ``listing_id`` across projections."""
        for name in PROJECTIONS:
            for view in self._views[name]:
                if view.id == listing_id:
                    return view
        return None

    def issued(self, name: str) -> int:
        """Latest sequence number issued for ``name``."""
        self._check_name(name)
        return self._issued[name]

    def subscribe(self, listener: ProjectionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Refresh commands
    # ------------------------------------------------------------------
    def refresh_public_feed(self) -> None:
        self._fetch(PUBLIC, self.gateway.list_ads)

    def refresh_mine(self) -> None:
        if not self.session.credential:
            self._reset(MINE)
            return
        self._fetch(MINE, self.gateway.list_ads)

    def refresh_my_responses(self) -> None:
        if not self.session.credential:
            self._reset(MY_RESPONSES)
            return
        self._fetch(MY_RESPONSES, self.gateway.my_responses)

    def refresh_all(self) -> None:
        self.refresh_public_feed()
        self.refresh_mine()
        self.refresh_my_responses()

    def mark_responded(self, listing_id: ListingId) -> None:
        """Record a confirmed response and re-derive every projection."""
        if listing_id in self._responded_ids:
            return
        self._responded_ids.add(listing_id)
        for name in PROJECTIONS:
            if any(item.id == listing_id for item in self._raw[name]):
                self._publish(name, self._project(name, self._raw[name]))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _fetch(self, name: str, call: Callable[[], GatewayResult]) -> None:
        self._issued[name] += 1
        seq = self._issued[name]
        self.session.dispatch(call, lambda result: self._settle(name, seq, result))

    def _settle(self, name: str, seq: int, result: GatewayResult) -> None:
        latest = self._issued[name]
        if seq != latest:
            log.debug("Dropping stale %s result (seq %d, latest %d)", name, seq, latest)
            return
        if not result.ok:
            error = result_error(result)
            log.warning("Refreshing %s failed: %s", name, error.message)
            self.notifier.notify(error.message, error=True)
            return
        listings = parse_listings(result.payload)
        self._raw[name] = listings
        self._publish(name, self._project(name, listings))

    def _reset(self, name: str) -> None:
        # Bumping the sequence also invalidates any fetch still in flight.
        self._issued[name] += 1
        self._raw[name] = ()
        self._publish(name, ())

    def _project(self, name: str, listings: Iterable[Listing]) -> Tuple[ListingView, ...]:
        identity = self.session.identity
        if name == MINE:
            listings = [item for item in listings if item.mine]
        return tuple(
            self._derive(item, identity, keep_count=name == MINE, responded=name == MY_RESPONSES)
            for item in listings
        )

    def _derive(
        self,
        listing: Listing,
        identity: Optional[Identity],
        *,
        keep_count: bool,
        responded: bool,
    ) -> ListingView:
        if listing.mine:
            count = (listing.responses_count or 0) if keep_count else None
            return ListingView(listing=listing, mine=True, responses_count=count)
        has_responded: Optional[bool] = None
        if identity is not None:
            has_responded = (
                responded
                or bool(listing.has_responded)
                or listing.id in self._responded_ids
            )
        return ListingView(listing=listing, mine=False, has_responded=has_responded)

    def _publish(self, name: str, views: Tuple[ListingView, ...]) -> None:
        self._views[name] = views
        for listener in list(self._listeners):
            listener(name, views)

    def _on_identity_changed(self, identity: Optional[Identity]) -> None:
        self._responded_ids.clear()
        self.refresh_all()

    @staticmethod
    def _check_name(name: str) -> None:
        if name not in PROJECTIONS:
            raise ValueError(f"Unknown projection '{name}'")


__all__ = [
    "MINE",
    "MY_RESPONSES",
    "PROJECTIONS",
    "PUBLIC",
    "ListingCache",
    "ListingView",
    "ProjectionListener",
]
