from __future__ import annotations

from bboard.domain.entities import ListingDraft
from bboard.tests.fakes import Harness, ad, fail, ok
from bboard.usecases.delete_listing import PROMPT_DELETE, DeleteListing
from bboard.usecases.listing_cache import MINE, PUBLIC
from bboard.usecases.publish_listing import PublishListing

ANN = {"id": 1, "name": "Ann", "email": "a@x.com"}


def _publish(h: Harness) -> PublishListing:
    return PublishListing(h.session, h.cache, h.gateway, h.notifier, h.presenter)


def _delete(h: Harness) -> DeleteListing:
    return DeleteListing(h.session, h.cache, h.gateway, h.notifier, h.presenter)


def test_publish_requires_login_before_any_request() -> None:
    h = Harness()

    sent = _publish(h)(ListingDraft(title="Bike", description="Red", price="10"))

    assert sent is False
    assert h.gateway.calls == []
    assert h.notifier.last == ("You must log in", True)
    assert h.presenter.names() == ["open_login"]


def test_publish_rejects_incomplete_draft_locally() -> None:
    h = Harness()
    h.login_as(ANN)
    h.gateway.calls.clear()

    assert _publish(h)(ListingDraft(title=" ", description="Red")) is False
    assert h.notifier.last == ("Title and description are required", True)
    assert _publish(h)(ListingDraft(title="Bike", description="Red", price="-1")) is False
    assert h.notifier.last == ("Invalid price", True)
    assert h.gateway.calls == []


def test_publish_success_resets_form_and_refreshes() -> None:
    h = Harness()
    h.login_as(ANN)
    h.gateway.calls.clear()

    assert _publish(h)(ListingDraft(title="Bike", description="Red", price="10")) is True
    h.runner.complete_all()

    assert h.gateway.calls == ["create_ad", "list_ads", "list_ads"]
    assert ("reset_form", "publish") in h.presenter.events
    assert h.notifier.last == ("Listing published", False)


def test_publish_failure_keeps_form() -> None:
    h = Harness()
    h.login_as(ANN)
    h.gateway.calls.clear()
    h.gateway.queue("create_ad", fail(400, "Title and description are required"))

    _publish(h)(ListingDraft(title="Bike", description="Red"))
    h.runner.complete_all()

    assert h.gateway.calls == ["create_ad"]
    assert ("reset_form", "publish") not in h.presenter.events
    assert h.notifier.last == ("Title and description are required", True)


def test_delete_confirmed_refreshes_public_and_mine() -> None:
    h = Harness()
    h.login_as(ANN)
    h.gateway.defaults["list_ads"] = ok({"ads": [ad(7, mine=True), ad(8)]})
    h.cache.refresh_all()
    h.runner.complete_all()
    h.gateway.defaults["list_ads"] = ok({"ads": [ad(8)]})

    assert _delete(h)(7) is True
    h.runner.complete_all()

    assert h.presenter.events[-1] == ("confirm", PROMPT_DELETE)
    assert h.gateway.count("delete:7") == 1
    assert h.notifier.last == ("Listing deleted", False)
    assert [v.id for v in h.cache.projection(PUBLIC)] == [8]
    assert h.cache.projection(MINE) == ()


def test_delete_declined_sends_nothing() -> None:
    h = Harness(confirm_answer=False)
    h.login_as(ANN)
    h.gateway.calls.clear()

    assert _delete(h)(7) is False
    assert h.gateway.calls == []


def test_delete_failure_leaves_projections_untouched() -> None:
    h = Harness()
    h.login_as(ANN)
    h.gateway.defaults["list_ads"] = ok({"ads": [ad(7, mine=True)]})
    h.cache.refresh_all()
    h.runner.complete_all()
    public, mine = h.cache.projection(PUBLIC), h.cache.projection(MINE)
    h.gateway.queue("delete:7", fail(403, "Not authorized"))
    h.gateway.calls.clear()

    _delete(h)(7)
    h.runner.complete_all()

    assert h.gateway.calls == ["delete:7"]
    assert h.notifier.last == ("Not authorized", True)
    assert h.cache.projection(PUBLIC) is public
    assert h.cache.projection(MINE) is mine
