"""Error taxonomy for the PageSeeder API client."""

from __future__ import annotations

import httpx

from psml.errors import EncodeError, ParseError

__all__ = [
    "ApiError",
    "AuthError",
    "EncodeError",
    "InvalidRequest",
    "MalformedResponse",
    "PageSeederError",
    "ParseError",
    "Timeout",
    "TransportError",
    "is_transient",
]


class PageSeederError(Exception):
    """Base exception for client failures."""


class InvalidRequest(PageSeederError, ValueError):
    """Raised before sending when a required parameter is missing or empty."""

    def __init__(self, service: str, parameter: str, reason: str = "is required") -> None:
        self.service = service
        self.parameter = parameter
        super().__init__(f"{service}: parameter '{parameter}' {reason}")


class AuthError(PageSeederError):
    """Raised when the credential exchange fails."""

    def __init__(self, message: str, status: int | None = None) -> None:
        self.status = status
        super().__init__(message)


class ApiError(PageSeederError):
    """The service rejected an operation.

    Attributes:
        status: HTTP status code of the response
        code: Service error id from ``<error id="...">``, if present
        message: Human-readable message from the response body
        request: Request description echoed by the service, if present
    """

    def __init__(
        self,
        status: int,
        message: str,
        code: str | None = None,
        request: str | None = None,
    ) -> None:
        self.status = status
        self.code = code
        self.message = message
        self.request = request
        detail = f"[{code}] {message}" if code else message
        super().__init__(f"HTTP {status}: {detail}")

    @property
    def retryable(self) -> bool:
        return self.status == httpx.codes.TOO_MANY_REQUESTS or self.status >= 500


class MalformedResponse(PageSeederError):
    """Raised when a success response body cannot be decoded."""

    def __init__(self, message: str, status: int, body: str = "") -> None:
        self.status = status
        self.body = body
        super().__init__(f"{message} (HTTP {status})")


class Timeout(PageSeederError):
    """Raised when a network round trip exceeds its timeout."""


class TransportError(PageSeederError):
    """Raised for connection-level failures reported by the transport."""


def is_transient(error: BaseException) -> bool:
    """Return True for failures that are worth retrying with backoff."""
    if isinstance(error, (Timeout, TransportError)):
        return True
    if isinstance(error, ApiError):
        return error.retryable
    return False
