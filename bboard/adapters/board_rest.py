"""REST adapter implementing the bulletin board gateway contract."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from bboard.domain.entities import Credentials, ListingDraft, ListingId, Registration
from bboard.domain.ports import GatewayPort, GatewayResult

from bboard.adapters.api_errors import ApiNetworkError, build_api_error, parse_json_payload
from bboard.adapters.http_client import CredentialProvider, HttpConfig, RetryingSession

log = logging.getLogger(__name__)

_MUTATION_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


class BoardRestAdapter(GatewayPort):
    """HTTP adapter for the ``/api/*`` endpoints.

    Every call returns a :class:`GatewayResult`. Non-2xx statuses and missing
    responses are folded into failed results instead of raised, so callers
    only ever branch on ``result.ok``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        credential_provider: Optional[CredentialProvider] = None,
        request_timeout_s: int = 10,
        retries: int = 0,
    ) -> None:
        if not base_url:
            raise ValueError("BoardRestAdapter requires a base URL")
        self.base_url = base_url[:-1] if base_url.endswith("/") else base_url
        self.cfg = HttpConfig(request_timeout_s=request_timeout_s, retries=retries)
        self.http = RetryingSession(credential_provider, self.cfg)

    # ------------------------------------------------------------------
    def request(
        self, path: str, method: str = "GET", form_body: Optional[Dict[str, str]] = None
    ) -> GatewayResult:
        """Issue one API call and normalize the outcome.

        Args:
            path: Endpoint path starting with ``/api``.
            method: HTTP verb.
            form_body: Mutation fields, sent form-urlencoded.

        Returns:
            Successful result with the decoded JSON object (empty when the
            body is absent or not JSON), or a failed result carrying an
            ``ApiError`` whose message is the API's ``error`` field or a
            generic fallback.
        """
        verb = method.upper()
        url = self._make_url(path)
        ctx = f"{verb} {path}"
        try:
            if verb in _MUTATION_METHODS:
                resp = self.http.send(verb, url, form_body=form_body)
            else:
                resp = self.http.get(url)
        except ApiNetworkError as exc:
            log.warning("%s: no response (%s)", ctx, exc.__cause__ or exc)
            return GatewayResult.failure(exc)
        return self._to_result(resp, ctx)

    def session(self) -> GatewayResult:
        return self.request("/api/session")

    def register(self, registration: Registration) -> GatewayResult:
        return self.request("/api/register", "POST", registration.to_form())

    def login(self, credentials: Credentials) -> GatewayResult:
        return self.request("/api/login", "POST", credentials.to_form())

    def logout(self) -> GatewayResult:
        return self.request("/api/logout", "POST", {})

    def list_ads(self) -> GatewayResult:
        return self.request("/api/ads")

    def create_ad(self, draft: ListingDraft) -> GatewayResult:
        return self.request("/api/ads", "POST", draft.to_form())

    def delete_ad(self, listing_id: ListingId) -> GatewayResult:
        return self.request(f"/api/ads/{int(listing_id)}", "DELETE")

    def respond(self, listing_id: ListingId) -> GatewayResult:
        return self.request(f"/api/ads/{int(listing_id)}/respond", "POST", {})

    def list_responders(self, listing_id: ListingId) -> GatewayResult:
        return self.request(f"/api/ads/{int(listing_id)}/responders")

    def my_responses(self) -> GatewayResult:
        return self.request("/api/ads/my-responses")

    # ------------------------------------------------------------------
    def _make_url(self, path: str) -> str:
        """Build endpoint URL from the base URL and an absolute path."""
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self.base_url}{path}"

    @staticmethod
    def _to_result(resp: requests.Response, ctx: str) -> GatewayResult:
        """Map a received response to a success or typed failure result."""
        status = resp.status_code
        payload: Any = parse_json_payload(resp)
        if 200 <= status < 300:
            if not isinstance(payload, dict):
                if payload is not None:
                    log.debug("%s: ignoring non-object JSON body", ctx)
                payload = {}
            return GatewayResult.success(payload, status=status)
        error = build_api_error(status, payload, context=ctx)
        log.info("%s failed: HTTP %s %s", ctx, status, error)
        return GatewayResult.failure(error, status=status)


__all__ = ["BoardRestAdapter"]
