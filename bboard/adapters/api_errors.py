from __future__ import annotations

from typing import Any, Optional

GENERIC_FAILURE_MESSAGE = "Request failed"
NETWORK_FAILURE_MESSAGE = "Network error. Check connection."


class ApiError(RuntimeError):
    """Base class for REST adapter failures.

    ``str(err)`` is the user-facing message; ``context`` carries the
    ``METHOD path`` pair for logs.
    """

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        payload: Any = None,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.payload = payload
        self.context = context


class ApiClientError(ApiError):
    """HTTP 4xx from the board API."""

    def __init__(
        self,
        message: str,
        *,
        status: int,
        payload: Any = None,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(message, status=status, payload=payload, context=context)


class ApiServerError(ApiError):
    """HTTP 5xx from the board API."""

    def __init__(
        self,
        message: str,
        *,
        status: int,
        payload: Any = None,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(message, status=status, payload=payload, context=context)


class ApiNetworkError(ApiError):
    """No response received: timeout, refused connection, DNS failure."""

    def __init__(self, message: str = NETWORK_FAILURE_MESSAGE, *, context: Optional[str] = None) -> None:
        super().__init__(message, context=context)


def parse_json_payload(resp: Any) -> Any:
    """Best-effort JSON decoding; ``None`` for empty or non-JSON bodies."""
    text = getattr(resp, "text", "")
    if not text or not text.strip():
        return None
    try:
        return resp.json()
    except ValueError:
        return None


def extract_error_message(payload: Any) -> Optional[str]:
    """Return the API's ``error`` field when it is a non-empty string."""
    if isinstance(payload, dict):
        value = payload.get("error")
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def build_api_error(status: int, payload: Any, context: Optional[str] = None) -> ApiError:
    """Classify a non-2xx response into the matching ``ApiError`` subclass."""
    message = extract_error_message(payload) or GENERIC_FAILURE_MESSAGE
    if 400 <= status < 500:
        return ApiClientError(message, status=status, payload=payload, context=context)
    if 500 <= status < 600:
        return ApiServerError(message, status=status, payload=payload, context=context)
    return ApiError(message, status=status, payload=payload, context=context)


__all__ = [
    "ApiClientError",
    "ApiError",
    "ApiNetworkError",
    "ApiServerError",
    "GENERIC_FAILURE_MESSAGE",
    "NETWORK_FAILURE_MESSAGE",
    "build_api_error",
    "extract_error_message",
    "parse_json_payload",
]
