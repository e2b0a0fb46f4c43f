"""Per-listing response submission workflow.

Each submission owns a :class:`SubmissionGuard` that moves
``idle -> pending -> settled-success | settled-failure``. The ``pending``
transition happens synchronously inside :meth:`ResponseWorkflow.respond`, before
any I/O is dispatched, so a second trigger for the same listing (double
click) finds the guard and is rejected without a network call. Guards for
different listings are independent.

The server's unique constraint on ``(listing, user)`` stays authoritative; a
rejected submission is an ordinary failure here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Set

from bboard.domain.entities import Identity, ListingId, parse_responders
from bboard.domain.ports import GatewayPort, GatewayResult, NotifierPort, PresenterPort
from bboard.usecases.error_mapping import result_error
from bboard.usecases.listing_cache import ListingCache, ListingView
from bboard.usecases.session_store import SessionStore

log = logging.getLogger(__name__)

MSG_LOGIN_TO_RESPOND = "Log in to respond"
MSG_RESPONSE_SENT = "Response sent"
MSG_NO_RESPONSES = "No responses yet"


class SubmissionState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCEEDED = "settled-success"
    FAILED = "settled-failure"


class RespondAffordance(str, Enum):
    """What the respond control for one listing should offer."""

    HIDDEN = "hidden"  # own listing
    LOGIN_REQUIRED = "login_required"
    RESPOND = "respond"
    PENDING = "pending"
    ALREADY_RESPONDED = "already_responded"
    RESPONDED = "responded"  # confirmed in this view

    @property
    def enabled(self) -> bool:
        return self in (RespondAffordance.RESPOND, RespondAffordance.LOGIN_REQUIRED)


@dataclass
class SubmissionGuard:
    """Transient state of one in-flight submission."""

    listing_id: ListingId
    epoch: int = 0
    """Identity epoch the submission was dispatched under."""
    state: SubmissionState = SubmissionState.IDLE

    def begin(self) -> None:
        if self.state is not SubmissionState.IDLE:
            raise RuntimeError(f"Submission for listing {self.listing_id} already started")
        self.state = SubmissionState.PENDING

    def settle(self, ok: bool) -> None:
        if self.state is not SubmissionState.PENDING:
            raise RuntimeError(f"Submission for listing {self.listing_id} is not pending")
        self.state = SubmissionState.SUCCEEDED if ok else SubmissionState.FAILED


AffordanceListener = Callable[[ListingId, RespondAffordance], None]


class ResponseWorkflow:
    """Controls respond submissions and responder disclosure."""

    def __init__(
        self,
        session: SessionStore,
        cache: ListingCache,
        gateway: GatewayPort,
        notifier: NotifierPort,
        presenter: PresenterPort,
    ) -> None:
        self.session = session
        self.cache = cache
        self.gateway = gateway
        self.notifier = notifier
        self.presenter = presenter
        self._guards: Dict[ListingId, SubmissionGuard] = {}
        self._responded: Set[ListingId] = set()
        # Bumped on every identity change; results from an older epoch belong
        # to a previous user and must not mark anything responded.
        self._epoch = 0
        self._listeners: List[AffordanceListener] = []
        session.subscribe(self._on_identity_changed)

    # ------------------------------------------------------------------
    def subscribe(self, listener: AffordanceListener) -> Callable[[], None]:
        """Register ``listener(listing_id, affordance)`` for state transitions."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def is_pending(self, listing_id: ListingId) -> bool:
        return listing_id in self._guards

    def affordance(self, view: ListingView) -> RespondAffordance:
        """Derive the respond control state for one projected listing."""
        if view.mine:
            return RespondAffordance.HIDDEN
        if view.id in self._guards:
            return RespondAffordance.PENDING
        if view.id in self._responded:
            return RespondAffordance.RESPONDED
        if not self.session.credential:
            return RespondAffordance.LOGIN_REQUIRED
        if view.has_responded:
            return RespondAffordance.ALREADY_RESPONDED
        return RespondAffordance.RESPOND

    # ------------------------------------------------------------------
    def respond(self, listing_id: ListingId) -> bool:
        """Submit a response for ``listing_id``.

        Returns:
            ``True`` when a request was dispatched, ``False`` when the action
            was blocked client-side.
        """
        if listing_id in self._guards:
            log.debug("Respond to %s ignored: submission pending", listing_id)
            return False
        if listing_id in self._responded:
            log.debug("Respond to %s ignored: already responded", listing_id)
            return False
        if not self.session.credential:
            self.notifier.notify(MSG_LOGIN_TO_RESPOND, error=True)
            self.presenter.open_login()
            return False
        view = self.cache.find(listing_id)
        if view is not None and (view.mine or view.has_responded):
            log.debug("Respond to %s ignored: own listing or already responded", listing_id)
            return False

        guard = SubmissionGuard(listing_id, epoch=self._epoch)
        guard.begin()
        self._guards[listing_id] = guard
        self._emit(listing_id, RespondAffordance.PENDING)
        self.session.dispatch(
            lambda: self.gateway.respond(listing_id),
            lambda result: self._settle(guard, result),
        )
        return True

    def list_responders(self, listing_id: ListingId) -> None:
        """Fetch responders of an owned listing and hand them to the presenter."""
        self.session.dispatch(
            lambda: self.gateway.list_responders(listing_id),
            lambda result: self._show_responders(listing_id, result),
        )

    # ------------------------------------------------------------------
    def _settle(self, guard: SubmissionGuard, result: GatewayResult) -> None:
        listing_id = guard.listing_id
        if self._guards.get(listing_id) is guard:
            del self._guards[listing_id]
        guard.settle(result.ok)
        if guard.epoch != self._epoch:
            log.debug("Dropping respond result for %s from a previous session", listing_id)
            return
        if result.ok:
            self._responded.add(listing_id)
            self.cache.mark_responded(listing_id)
            self._emit(listing_id, RespondAffordance.RESPONDED)
            self.notifier.notify(MSG_RESPONSE_SENT)
            self.cache.refresh_public_feed()
            self.cache.refresh_mine()
            self.cache.refresh_my_responses()
            return

        error = result_error(result)
        log.info("Respond to %s failed: %s (%s)", listing_id, error.message, error.code)
        view = self.cache.find(listing_id)
        self._emit(listing_id, self.affordance(view) if view else RespondAffordance.RESPOND)
        self.notifier.notify(error.message, error=True)
        if error.code == "CONFLICT":
            # The server already holds a response from this user; pull its flags.
            self.cache.refresh_public_feed()

    def _show_responders(self, listing_id: ListingId, result: GatewayResult) -> None:
        if not result.ok:
            self.notifier.notify(result_error(result).message, error=True)
            return
        responders = parse_responders(result.payload)
        if not responders:
            self.notifier.notify(MSG_NO_RESPONSES)
            return
        self.presenter.show_responders(listing_id, responders)

    def _emit(self, listing_id: ListingId, affordance: RespondAffordance) -> None:
        for listener in list(self._listeners):
            listener(listing_id, affordance)

    def _on_identity_changed(self, identity: Identity | None) -> None:
        self._epoch += 1
        self._guards.clear()
        self._responded.clear()


__all__ = [
    "AffordanceListener",
    "RespondAffordance",
    "ResponseWorkflow",
    "SubmissionGuard",
    "SubmissionState",
]
