"""Asynchronous PageSeeder API client."""

from .auth import Credential, SessionManager, SessionState
from .client import PageSeederClient, open_client
from .config import ClientCredentials, ClientSettings
from .errors import (
    ApiError,
    AuthError,
    InvalidRequest,
    MalformedResponse,
    PageSeederError,
    Timeout,
    TransportError,
    is_transient,
)
from .pagination import Page, Paginator

__all__ = [
    "ApiError",
    "AuthError",
    "ClientCredentials",
    "ClientSettings",
    "Credential",
    "InvalidRequest",
    "MalformedResponse",
    "Page",
    "PageSeederClient",
    "PageSeederError",
    "Paginator",
    "SessionManager",
    "SessionState",
    "Timeout",
    "TransportError",
    "is_transient",
    "open_client",
]
