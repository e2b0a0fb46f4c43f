"""End-to-end flows through the controller, REST adapter and an in-memory board API."""

from __future__ import annotations

import itertools
import json
import re
from typing import Any, Dict, List, Optional
from urllib.parse import urlsplit

from bboard.adapters.storage_local import StorageLocal
from bboard.adapters.task_runners import InlineTaskRunner
from bboard.app.controller import AppController
from bboard.domain.entities import Credentials, Identity, ListingDraft, Registration, Responder
from bboard.tests.fakes import RecordingNotifier, RecordingPresenter
from bboard.usecases.listing_cache import MINE, MY_RESPONSES, PUBLIC
from bboard.usecases.response_workflow import RespondAffordance
from bboard.viewmodels.settings_vm import SettingsVM

_AD_PATH = re.compile(r"^/api/ads/(\d+)(/respond|/responders)?$")


class _FakeResponse:
    def __init__(self, status_code: int, payload: Dict[str, Any]) -> None:
        self.status_code = status_code
        self.text = json.dumps(payload)

    def json(self) -> Any:
        return json.loads(self.text)


class _BoardServer:
    """In-memory stand-in for the board API, mounted as the requests session."""

    def __init__(self) -> None:
        self.users: Dict[str, Dict[str, Any]] = {}
        self.tokens: Dict[str, Dict[str, Any]] = {}
        self.ads: Dict[int, Dict[str, Any]] = {}
        self.responses: Dict[int, List[int]] = {}
        self.hits: List[str] = []
        self._ids = itertools.count(1)
        self._tokens = itertools.count(1)

    # requests.Session surface
    def get(self, url: str, *, headers: Dict[str, str], timeout: int) -> _FakeResponse:
        return self._handle("GET", url, None, headers)

    def request(self, method: str, url: str, *, data=None, headers: Dict[str, str], timeout: int):
        return self._handle(method, url, data or {}, headers)

    # ------------------------------------------------------------------
    def _handle(self, method: str, url: str, form: Optional[Dict[str, str]], headers: Dict[str, str]):
        path = urlsplit(url).path
        self.hits.append(f"{method} {path}")
        user = self._user(headers)

        if path == "/api/session":
            if user is None:
                return _FakeResponse(200, {"authenticated": False})
            return _FakeResponse(200, {"authenticated": True, "user": self._public_user(user)})
        if path == "/api/register":
            if form["email"] in self.users:
                return _FakeResponse(409, {"error": "Email already registered"})
            self.users[form["email"]] = {"id": next(self._ids), **form}
            return _FakeResponse(200, {"success": True})
        if path == "/api/login":
            found = self.users.get(form["email"])
            if found is None or found["password"] != form["password"]:
                return _FakeResponse(401, {"error": "Invalid credentials"})
            token = f"token-{next(self._tokens)}"
            self.tokens[token] = found
            return _FakeResponse(200, {"token": token, "user": self._public_user(found)})
        if path == "/api/logout":
            self.tokens.pop(headers.get("Authorization", "")[len("Bearer "):], None)
            return _FakeResponse(200, {"success": True})
        if path == "/api/ads" and method == "GET":
            return _FakeResponse(200, {"ads": [self._ad_json(ad, user) for ad in self._sorted_ads()]})
        if path == "/api/ads/my-responses":
            if user is None:
                return _FakeResponse(401, {"error": "Authentication required"})
            mine = [ad for ad in self._sorted_ads() if user["id"] in self.responses.get(ad["id"], [])]
            return _FakeResponse(200, {"ads": [self._ad_json(ad, user) for ad in mine]})
        if user is None:
            return _FakeResponse(401, {"error": "Authentication required"})
        if path == "/api/ads" and method == "POST":
            if not form.get("title") or not form.get("description"):
                return _FakeResponse(400, {"error": "Title and description are required"})
            ad_id = next(self._ids)
            self.ads[ad_id] = {
                "id": ad_id,
                "title": form["title"],
                "description": form["description"],
                "price": float(form.get("price") or 0),
                "owner": user,
                "createdAt": 1700000000 + ad_id,
            }
            return _FakeResponse(200, {"success": True})

        match = _AD_PATH.match(path)
        ad = self.ads.get(int(match.group(1))) if match else None
        if ad is None:
            return _FakeResponse(404, {"error": "Advertisement not found"})
        action = match.group(2)
        if method == "DELETE" and action is None:
            if ad["owner"] is not user:
                return _FakeResponse(403, {"error": "Not authorized"})
            del self.ads[ad["id"]]
            return _FakeResponse(200, {"success": True})
        if action == "/respond":
            if ad["owner"] is user:
                return _FakeResponse(400, {"error": "Cannot respond to your own advertisement"})
            responders = self.responses.setdefault(ad["id"], [])
            if user["id"] in responders:
                return _FakeResponse(409, {"error": "You have already responded to this advertisement"})
            responders.append(user["id"])
            return _FakeResponse(200, {"success": True})
        if action == "/responders":
            if ad["owner"] is not user:
                return _FakeResponse(403, {"error": "Not authorized"})
            by_id = {u["id"]: u for u in self.users.values()}
            people = [self._public_user(by_id[uid]) for uid in self.responses.get(ad["id"], [])]
            return _FakeResponse(200, {"responders": [{"name": p["name"], "email": p["email"]} for p in people]})
        return _FakeResponse(404, {"error": "Not found"})

    def _user(self, headers: Dict[str, str]) -> Optional[Dict[str, Any]]:
        auth = headers.get("Authorization", "")
        if not auth.startswith("Bearer "):
            return None
        return self.tokens.get(auth[len("Bearer "):])

    def _sorted_ads(self) -> List[Dict[str, Any]]:
        return sorted(self.ads.values(), key=lambda ad: ad["createdAt"], reverse=True)

    @staticmethod
    def _public_user(user: Dict[str, Any]) -> Dict[str, Any]:
        return {"id": user["id"], "name": user["name"], "email": user["email"]}

    def _ad_json(self, ad: Dict[str, Any], user: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        owned = user is not None and ad["owner"] is user
        payload = {
            "id": ad["id"],
            "title": ad["title"],
            "description": ad["description"],
            "price": ad["price"],
            "ownerName": ad["owner"]["name"],
            "createdAt": ad["createdAt"],
            "mine": owned,
        }
        if owned:
            payload["responsesCount"] = len(self.responses.get(ad["id"], []))
        elif user is not None:
            payload["hasResponded"] = user["id"] in self.responses.get(ad["id"], [])
        return payload


def _client(server: _BoardServer, state_dir) -> AppController:
    settings = SettingsVM()
    settings.base_url = "http://board.test"
    controller = AppController(
        settings,
        runner=InlineTaskRunner(),
        notifier=RecordingNotifier(),
        presenter=RecordingPresenter(),
        storage=StorageLocal(str(state_dir)),
    )
    assert controller.ensure_ready()
    controller.gateway.http.session = server  # type: ignore[assignment]
    controller.start()
    return controller


def _sign_up_and_in(app: AppController, name: str, email: str) -> None:
    app.uc_register(Registration(name=name, email=email, password="pw"))
    app.uc_login(Credentials(email=email, password="pw"))


def test_publish_respond_disclose_and_delete(tmp_path) -> None:
    server = _BoardServer()
    app = _client(server, tmp_path)
    assert app.cache.projection(PUBLIC) == ()
    assert app.session.identity is None

    _sign_up_and_in(app, "Bob", "b@x.com")
    assert app.session.identity == Identity(id=1, name="Bob", email="b@x.com")
    assert app.notifier.last == ("Welcome, Bob!", False)
    assert app.uc_publish(ListingDraft(title="Bike", description="Red bike", price="120"))
    (owned,) = app.cache.projection(MINE)
    assert (owned.listing.title, owned.responses_count) == ("Bike", 0)
    listing_id = owned.id
    app.uc_logout()
    assert app.session.credential is None
    assert app.cache.projection(MINE) == ()

    _sign_up_and_in(app, "Ann", "a@x.com")
    (view,) = app.cache.projection(PUBLIC)
    assert (view.mine, view.has_responded) == (False, False)
    assert app.workflow.affordance(view) is RespondAffordance.RESPOND

    assert app.workflow.respond(listing_id) is True
    assert app.notifier.last == ("Response sent", False)
    assert app.cache.find(listing_id).has_responded is True
    assert [v.id for v in app.cache.projection(MY_RESPONSES)] == [listing_id]
    assert app.workflow.respond(listing_id) is False
    assert server.hits.count(f"POST /api/ads/{listing_id}/respond") == 1

    app.uc_logout()
    app.uc_login(Credentials(email="b@x.com", password="pw"))
    (owned,) = app.cache.projection(MINE)
    assert owned.responses_count == 1
    app.workflow.list_responders(listing_id)
    assert app.presenter.responders == [(listing_id, (Responder(name="Ann", email="a@x.com"),))]

    assert app.uc_delete(listing_id) is True
    assert app.notifier.last == ("Listing deleted", False)
    assert app.cache.projection(PUBLIC) == ()
    assert app.cache.projection(MINE) == ()


def test_server_rejections_reach_the_notifier(tmp_path) -> None:
    server = _BoardServer()
    app = _client(server, tmp_path)

    app.uc_login(Credentials(email="nobody@x.com", password="pw"))
    assert app.notifier.last == ("Invalid credentials", True)

    _sign_up_and_in(app, "Bob", "b@x.com")
    app.uc_register(Registration(name="Bob", email="b@x.com", password="pw"))
    assert app.notifier.last == ("Email already registered", True)

    app.uc_publish(ListingDraft(title="Lamp", description="Desk lamp"))
    (owned,) = app.cache.projection(MINE)
    assert app.workflow.respond(owned.id) is False
    assert app.workflow.affordance(owned) is RespondAffordance.HIDDEN


def test_persisted_credential_survives_restart(tmp_path) -> None:
    server = _BoardServer()
    first = _client(server, tmp_path)
    _sign_up_and_in(first, "Ann", "a@x.com")
    assert (tmp_path / StorageLocal.CREDENTIAL_FILE).exists()

    second = _client(server, tmp_path)

    assert second.session.credential == first.session.credential
    assert second.session.identity == Identity(id=1, name="Ann", email="a@x.com")


def test_revoked_credential_is_cleared_on_startup(tmp_path) -> None:
    server = _BoardServer()
    first = _client(server, tmp_path)
    _sign_up_and_in(first, "Ann", "a@x.com")
    server.tokens.clear()

    second = _client(server, tmp_path)

    assert second.session.identity is None
    assert second.session.credential is None
    assert not (tmp_path / StorageLocal.CREDENTIAL_FILE).exists()
    assert second.cache.projection(MY_RESPONSES) == ()
