"""Shared HTTP transport utilities for the board REST adapter.

This module provides a thin wrapper around ``requests.Session`` that owns the
timeout policy, the GET retry loop, bearer-header construction, and form
encoding of mutation bodies.

Dependencies:
    - ``requests`` for network I/O.
    - ``bboard.adapters.api_errors.ApiNetworkError`` for typed transport failures.

Call context:
    - Constructed by ``bboard.adapters.board_rest.BoardRestAdapter``.
    - Used only inside adapter layer methods; use cases interact through ports.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

import requests
from requests import exceptions as req_exc

from bboard.adapters.api_errors import ApiNetworkError

CredentialProvider = Callable[[], Optional[str]]

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass
class HttpConfig:
    """Timeout and retry configuration for adapter HTTP calls.

    Attributes:
        request_timeout_s: Default timeout in seconds for API calls.
        retries: Retry attempts after the initial GET. Mutations never retry.
    """
    request_timeout_s: int = 10
    retries: int = 0


class RetryingSession:
    """Shared requests wrapper with bearer headers and a GET retry loop.

    This class is intentionally transport-only. Callers provide endpoint URLs and
    decide how to map non-2xx responses into results.
    """

    def __init__(self, credential_provider: Optional[CredentialProvider], cfg: HttpConfig) -> None:
        """Create a session.

        Args:
            credential_provider: Callable returning the current bearer token or
                ``None``. It is invoked for every request so a login or logout
                takes effect on the next call without rebuilding the session.
            cfg: Shared timeout and retry settings.

        Side Effects:
            Creates a persistent ``requests.Session`` object.
        """
        self.session = requests.Session()
        self.credential_provider = credential_provider
        self.cfg = cfg

    def _headers(self, form_body: bool = False) -> Dict[str, str]:
        """Build request headers, attaching ``Authorization`` only with a token."""
        headers = {"Accept": "application/json"}
        token = self.credential_provider() if self.credential_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if form_body:
            headers["Content-Type"] = FORM_CONTENT_TYPE
        return headers

    def get(self, url: str, *, timeout: Optional[int] = None) -> requests.Response:
        """Send a GET request with retries on timeout/connectivity failures.

        Raises:
            ApiNetworkError: If all attempts fail without a response.
        """
        context = f"GET {url}"
        last_err: ApiNetworkError | None = None
        attempts = max(0, self.cfg.retries) + 1
        for _ in range(attempts):
            try:
                return self.session.get(
                    url,
                    headers=self._headers(),
                    timeout=timeout or self.cfg.request_timeout_s,
                )
            except (req_exc.Timeout, req_exc.ConnectionError):
                last_err = ApiNetworkError(context=context)
            except req_exc.RequestException as exc:
                raise ApiNetworkError(context=context) from exc
        raise last_err

    def send(
        self,
        method: str,
        url: str,
        *,
        form_body: Optional[Dict[str, str]] = None,
        timeout: Optional[int] = None,
    ) -> requests.Response:
        """Send a mutation (POST/DELETE) once, form-encoding ``form_body``.

        Raises:
            ApiNetworkError: If no response is received.
        """
        context = f"{method} {url}"
        try:
            return self.session.request(
                method,
                url,
                data=form_body,
                headers=self._headers(form_body=form_body is not None),
                timeout=timeout or self.cfg.request_timeout_s,
            )
        except req_exc.RequestException as exc:
            raise ApiNetworkError(context=context) from exc


__all__ = ["CredentialProvider", "FORM_CONTENT_TYPE", "HttpConfig", "RetryingSession"]
