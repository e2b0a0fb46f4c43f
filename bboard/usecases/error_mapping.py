"""Translate adapter errors into user-facing UseCaseError instances."""

from __future__ import annotations

from typing import Optional

from bboard.adapters.api_errors import (
    GENERIC_FAILURE_MESSAGE,
    NETWORK_FAILURE_MESSAGE,
    ApiClientError,
    ApiError,
    ApiNetworkError,
    ApiServerError,
)
from bboard.domain.ports import GatewayResult, UseCaseError

_CLIENT_CODES = {
    401: "AUTH_REQUIRED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    409: "CONFLICT",
}


def map_api_error(
    exc: Optional[Exception],
    *,
    default_code: str = "REQUEST_FAILED",
    default_message: Optional[str] = None,
) -> UseCaseError:
    """Map adapter exceptions to stable UseCaseError codes.

    The API's own ``error`` text is already the exception message, so it is
    kept verbatim; only the code is derived from the failure class and status.
    """
    if isinstance(exc, UseCaseError):
        return exc
    if isinstance(exc, ApiNetworkError):
        return UseCaseError("NETWORK_ERROR", NETWORK_FAILURE_MESSAGE)
    if isinstance(exc, ApiClientError):
        code = _CLIENT_CODES.get(exc.status or 0, "REQUEST_FAILED")
        return UseCaseError(code, _message_or_default(exc))
    if isinstance(exc, ApiServerError):
        return UseCaseError("SERVER_ERROR", _message_or_default(exc))
    if isinstance(exc, ApiError):
        return UseCaseError("API_ERROR", _message_or_default(exc))

    message = default_message or (str(exc) if exc else "") or GENERIC_FAILURE_MESSAGE
    return UseCaseError(default_code, message)


def result_error(result: GatewayResult) -> UseCaseError:
    """Shortcut for ``map_api_error(result.error)`` on a failed result."""
    return map_api_error(result.error)


def _message_or_default(exc: Exception) -> str:
    text = str(exc).strip()
    return text or GENERIC_FAILURE_MESSAGE


__all__ = ["map_api_error", "result_error"]
