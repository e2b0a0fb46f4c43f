from __future__ import annotations

import pytest

from bboard.domain.entities import Identity, Responder
from bboard.tests.fakes import Harness, ad, fail, network_down, ok
from bboard.usecases.response_workflow import (
    RespondAffordance,
    SubmissionGuard,
    SubmissionState,
)

ANN = {"id": 1, "name": "Ann", "email": "a@x.com"}


def _logged_in_with_feed(*ads) -> Harness:
    h = Harness()
    h.login_as(ANN)
    h.gateway.queue("list_ads", ok({"ads": list(ads)}))
    h.cache.refresh_public_feed()
    h.runner.complete_all()
    return h


def _record_affordances(h: Harness):
    events = []
    h.workflow.subscribe(lambda listing_id, affordance: events.append((listing_id, affordance)))
    return events


def test_guard_transitions_once() -> None:
    guard = SubmissionGuard(42)
    guard.begin()
    assert guard.state is SubmissionState.PENDING

    with pytest.raises(RuntimeError):
        guard.begin()

    guard.settle(False)
    assert guard.state is SubmissionState.FAILED
    with pytest.raises(RuntimeError):
        guard.settle(True)


def test_double_trigger_sends_a_single_request() -> None:
    h = _logged_in_with_feed(ad(42))
    events = _record_affordances(h)

    assert h.workflow.respond(42) is True
    assert h.workflow.respond(42) is False

    assert h.gateway.count("respond:42") == 1
    assert events == [(42, RespondAffordance.PENDING)]
    assert h.workflow.affordance(h.cache.find(42)) is RespondAffordance.PENDING


def test_success_locks_the_control_and_refreshes_projections() -> None:
    h = _logged_in_with_feed(ad(42))
    events = _record_affordances(h)
    h.workflow.respond(42)
    h.gateway.calls.clear()
    h.gateway.defaults["list_ads"] = ok({"ads": [ad(42, has_responded=True)]})

    h.runner.complete(0)

    assert events[-1] == (42, RespondAffordance.RESPONDED)
    assert ("Response sent", False) in h.notifier.messages
    assert sorted(h.gateway.calls) == ["list_ads", "list_ads", "my_responses"]

    h.runner.complete_all()
    assert h.cache.find(42).has_responded is True
    assert h.workflow.affordance(h.cache.find(42)) is RespondAffordance.RESPONDED
    assert h.workflow.respond(42) is False
    assert h.gateway.count("respond:42") == 0


def test_failure_reverts_and_allows_retry() -> None:
    h = _logged_in_with_feed(ad(42))
    events = _record_affordances(h)
    h.gateway.queue("respond:42", fail(500, "Database error"))

    h.workflow.respond(42)
    h.runner.complete(0)

    assert events[-1] == (42, RespondAffordance.RESPOND)
    assert h.notifier.last == ("Database error", True)
    assert h.workflow.respond(42) is True
    assert h.gateway.count("respond:42") == 2


def test_network_failure_reverts_to_respond() -> None:
    h = _logged_in_with_feed(ad(42))
    h.gateway.queue("respond:42", network_down())

    h.workflow.respond(42)
    h.runner.complete(0)

    assert not h.workflow.is_pending(42)
    assert h.workflow.affordance(h.cache.find(42)) is RespondAffordance.RESPOND
    assert h.notifier.last == ("Network error. Check connection.", True)


def test_conflict_failure_pulls_server_flags() -> None:
    h = _logged_in_with_feed(ad(42))
    h.gateway.queue("respond:42", fail(409, "You have already responded to this advertisement"))
    h.workflow.respond(42)
    h.gateway.calls.clear()

    h.runner.complete(0)

    assert h.notifier.last == ("You have already responded to this advertisement", True)
    assert h.gateway.calls == ["list_ads"]


def test_respond_without_credential_asks_to_log_in() -> None:
    h = Harness()
    h.gateway.queue("list_ads", ok({"ads": [ad(42)]}))
    h.cache.refresh_public_feed()
    h.runner.complete_all()

    assert h.workflow.respond(42) is False

    assert h.gateway.count("respond:42") == 0
    assert h.notifier.last == ("Log in to respond", True)
    assert "open_login" in h.presenter.names()
    assert h.workflow.affordance(h.cache.find(42)) is RespondAffordance.LOGIN_REQUIRED


def test_own_or_already_responded_listing_is_blocked() -> None:
    h = _logged_in_with_feed(ad(7, mine=True), ad(8, has_responded=True))

    assert h.workflow.respond(7) is False
    assert h.workflow.respond(8) is False

    assert h.gateway.count("respond:7") == h.gateway.count("respond:8") == 0
    assert h.workflow.affordance(h.cache.find(7)) is RespondAffordance.HIDDEN
    assert h.workflow.affordance(h.cache.find(8)) is RespondAffordance.ALREADY_RESPONDED
    assert not RespondAffordance.ALREADY_RESPONDED.enabled


def test_submissions_for_different_listings_are_independent() -> None:
    h = _logged_in_with_feed(ad(1), ad(2))
    events = _record_affordances(h)

    assert h.workflow.respond(1) is True
    assert h.workflow.respond(2) is True
    h.runner.complete(1)
    h.runner.complete(0)

    settled = [event for event in events if event[1] is RespondAffordance.RESPONDED]
    assert sorted(settled) == [(1, RespondAffordance.RESPONDED), (2, RespondAffordance.RESPONDED)]


def test_responded_marks_reset_on_identity_change() -> None:
    h = _logged_in_with_feed(ad(42))
    h.gateway.defaults["list_ads"] = ok({"ads": [ad(42)]})
    h.workflow.respond(42)
    h.runner.complete_all()

    h.session.establish("other", None)
    h.runner.complete_all()

    view = h.cache.find(42)
    assert h.workflow.affordance(view) is RespondAffordance.RESPOND


def test_late_result_from_previous_user_is_not_credited_to_next_user() -> None:
    h = _logged_in_with_feed(ad(42))
    h.gateway.defaults["list_ads"] = ok({"ads": [ad(42)]})
    assert h.workflow.respond(42) is True

    h.session.clear()
    h.session.establish("ben", Identity(id=2, name="Ben", email="b@x.com"))
    h.runner.complete(0)
    h.runner.complete_all()

    view = h.cache.find(42)
    assert view.has_responded is False
    assert h.workflow.affordance(view) is RespondAffordance.RESPOND
    assert ("Response sent", False) not in h.notifier.messages
    assert h.workflow.respond(42) is True
    assert h.gateway.count("respond:42") == 2


def test_empty_responder_list_is_an_info_notice() -> None:
    h = _logged_in_with_feed(ad(7, mine=True))
    h.gateway.queue("responders:7", ok({"responders": []}))

    h.workflow.list_responders(7)
    h.runner.complete_all()

    assert h.notifier.last == ("No responses yet", False)
    assert h.presenter.responders == []


def test_responders_are_shown_in_server_order() -> None:
    h = _logged_in_with_feed(ad(7, mine=True))
    h.gateway.queue(
        "responders:7",
        ok({"responders": [{"name": "Cy", "email": "c@x.com"}, {"name": "Al", "email": "a@y.com"}]}),
    )

    h.workflow.list_responders(7)
    h.runner.complete_all()

    assert h.presenter.responders == [
        (7, (Responder(name="Cy", email="c@x.com"), Responder(name="Al", email="a@y.com")))
    ]


def test_responders_of_foreign_listing_surface_the_error() -> None:
    h = _logged_in_with_feed(ad(8))
    h.gateway.queue("responders:8", fail(403, "Not authorized"))

    h.workflow.list_responders(8)
    h.runner.complete_all()

    assert h.notifier.last == ("Not authorized", True)
    assert h.presenter.responders == []
