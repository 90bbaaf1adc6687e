"""OAuth session handling for the PageSeeder API."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from enum import Enum

import httpx
from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from .config import ClientSettings
from .errors import AuthError
from .models import TokenResponse

TOKEN_PATH = "/ps/oauth/token"


def utc_now() -> datetime:
    return datetime.now(UTC)


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    EXPIRED = "expired"


class Credential(BaseModel):
    """Access token obtained from the OAuth endpoint.

    Attributes:
        access_token: Bearer token sent with each request
        issued_at: When the token was received
        expires_at: When the token stops being valid; None for tokens without expiry
    """

    access_token: str = Field(min_length=1, repr=False)
    issued_at: datetime
    expires_at: datetime | None = None

    @classmethod
    def from_token_response(cls, response: TokenResponse, now: datetime) -> Credential:
        expires_at = None
        if response.expires_in is not None:
            expires_at = now + timedelta(seconds=response.expires_in)
        return cls(access_token=response.access_token, issued_at=now, expires_at=expires_at)

    def expired(self, now: datetime, margin: float = 0.0) -> bool:
        if self.expires_at is None:
            return False
        return now >= self.expires_at - timedelta(seconds=margin)

    @property
    def authorization_header(self) -> str:
        return f"Bearer {self.access_token}"


class SessionManager:
    """Own the access credential shared by every request of a client.

    At most one credential exchange runs at a time: callers that need a token while
    an exchange is in flight wait for that exchange instead of starting their own.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: ClientSettings,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._client = client
        self._settings = settings
        self._clock = clock
        self._credential: Credential | None = None
        self._renewal: asyncio.Task[Credential] | None = None
        self._state = SessionState.UNAUTHENTICATED

    @property
    def state(self) -> SessionState:
        if (
            self._state is SessionState.AUTHENTICATED
            and self._credential is not None
            and self._is_expired(self._credential)
        ):
            return SessionState.EXPIRED
        return self._state

    def preauthorize(self, credential: Credential) -> None:
        """Install a credential obtained elsewhere, skipping the first exchange."""
        self._credential = credential
        self._state = SessionState.AUTHENTICATED

    def reset(self) -> None:
        """Forget the current credential and cancel any exchange in flight."""
        if self._renewal is not None and not self._renewal.done():
            logger.warning("Cancelling access token exchange in flight")
            self._renewal.cancel()
        self._renewal = None
        self._credential = None
        self._state = SessionState.UNAUTHENTICATED

    def invalidate(self, credential: Credential) -> None:
        """Mark ``credential`` as rejected by the server.

        Has no effect if a newer credential has already replaced it.
        """
        if self._credential is credential:
            logger.info("Access token rejected by server; will renew")
            self._credential = None
            self._state = SessionState.EXPIRED

    async def token(self) -> Credential:
        """Return a valid credential, renewing it if needed.

        Raises:
            AuthError: If the credential exchange fails.
        """
        credential = self._credential
        if credential is not None and not self._is_expired(credential):
            return credential

        if credential is not None:
            self._state = SessionState.EXPIRED
        renewal = self._renewal
        if renewal is None:
            self._state = SessionState.AUTHENTICATING
            renewal = asyncio.ensure_future(self._exchange())
            renewal.add_done_callback(self._renewal_done)
            self._renewal = renewal
        try:
            # Cancelling one waiter must not cancel the exchange the others wait on.
            return await asyncio.shield(renewal)
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if renewal.cancelled() and current is not None and not current.cancelling():
                raise AuthError("Access token exchange was cancelled") from None
            raise

    def _is_expired(self, credential: Credential) -> bool:
        return credential.expired(self._clock(), self._settings.token_refresh_margin_seconds)

    def _renewal_done(self, task: asyncio.Task[Credential]) -> None:
        if self._renewal is not task:
            # Superseded by reset() or a newer renewal.
            return
        self._renewal = None
        if task.cancelled():
            logger.warning("Access token exchange cancelled")
            self._state = SessionState.UNAUTHENTICATED
            return
        error = task.exception()
        if error is not None:
            self._credential = None
            self._state = SessionState.UNAUTHENTICATED
            return
        self._credential = task.result()
        self._state = SessionState.AUTHENTICATED

    async def _exchange(self) -> Credential:
        credentials = self._settings.credentials
        url = f"{self._settings.root_url}{TOKEN_PATH}"
        logger.info(f"Requesting access token for client {credentials.client_id}")
        try:
            response = await self._client.post(
                url,
                data={
                    "grant_type": "client_credentials",
                    "client_id": credentials.client_id,
                    "client_secret": credentials.client_secret,
                },
                headers={"Accept": "application/json"},
                timeout=self._settings.timeout_seconds,
            )
        except httpx.HTTPError as exc:
            logger.error(f"Token request failed: {exc.__class__.__name__}")
            raise AuthError(f"Token request failed: {exc}") from exc

        if response.status_code != httpx.codes.OK:
            logger.error(f"Token endpoint returned HTTP {response.status_code}")
            raise AuthError(
                f"Token endpoint returned HTTP {response.status_code}",
                status=response.status_code,
            )

        try:
            token_response = TokenResponse.model_validate_json(response.content)
        except ValidationError as exc:
            raise AuthError("Token endpoint returned an unreadable body") from exc

        credential = Credential.from_token_response(token_response, self._clock())
        logger.info(f"Access token obtained, expires at {credential.expires_at}")
        return credential
