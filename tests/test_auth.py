"""Tests for the OAuth session manager."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any, cast

import httpx
import pytest

from pageseeder_api.auth import Credential, SessionManager, SessionState
from pageseeder_api.config import ClientSettings
from pageseeder_api.errors import AuthError

TOKEN_URL = "https://ps.example.org/ps/oauth/token"


def token_response(token: str = "token-1", expires_in: int = 3600) -> httpx.Response:
    return httpx.Response(
        200,
        json={"access_token": token, "expires_in": expires_in, "token_type": "Bearer"},
    )


class StubAsyncClient:
    """Minimal async client surface used by `SessionManager`."""

    def __init__(self, handler: Callable[[int], httpx.Response]) -> None:
        self._handler = handler
        self.calls: list[dict[str, Any]] = []
        self.release = asyncio.Event()
        self.block = False

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        self.calls.append({"url": url, **kwargs})
        if self.block:
            await self.release.wait()
        return self._handler(len(self.calls))


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now


def _manager(
    settings: ClientSettings,
    handler: Callable[[int], httpx.Response],
    clock: FakeClock | None = None,
) -> tuple[SessionManager, StubAsyncClient]:
    client = StubAsyncClient(handler)
    manager = SessionManager(
        cast(httpx.AsyncClient, client), settings, clock=clock or FakeClock()
    )
    return manager, client


def test_token_exchange_posts_client_credentials(settings: ClientSettings) -> None:
    """Given no credential, when a token is requested, then one client-credentials exchange runs
    and the manager becomes authenticated."""

    manager, client = _manager(settings, lambda n: token_response(f"token-{n}"))

    credential = asyncio.run(manager.token())

    assert credential.access_token == "token-1"
    assert credential.authorization_header == "Bearer token-1"
    assert manager.state is SessionState.AUTHENTICATED
    (call,) = client.calls
    assert call["url"] == TOKEN_URL
    assert call["data"] == {
        "grant_type": "client_credentials",
        "client_id": "client-id",
        "client_secret": "client-secret",
    }


def test_concurrent_callers_share_one_exchange(settings: ClientSettings) -> None:
    """Given N concurrent callers and no credential, when they all ask for a token, then exactly
    one exchange is issued and every caller receives its result."""

    manager, client = _manager(settings, lambda n: token_response(f"token-{n}"))
    client.block = True

    async def scenario() -> list[Credential]:
        waiters = [asyncio.create_task(manager.token()) for _ in range(10)]
        await asyncio.sleep(0)
        assert manager.state is SessionState.AUTHENTICATING
        client.release.set()
        return await asyncio.gather(*waiters)

    credentials = asyncio.run(scenario())

    assert len(client.calls) == 1
    assert {credential.access_token for credential in credentials} == {"token-1"}


def test_concurrent_callers_share_one_failure(settings: ClientSettings) -> None:
    manager, client = _manager(settings, lambda n: httpx.Response(401, text="bad client"))
    client.block = True

    async def scenario() -> list[Any]:
        waiters = [asyncio.create_task(manager.token()) for _ in range(5)]
        await asyncio.sleep(0)
        client.release.set()
        return await asyncio.gather(*waiters, return_exceptions=True)

    results = asyncio.run(scenario())

    assert len(client.calls) == 1
    assert all(isinstance(result, AuthError) for result in results)
    assert all(result.status == 401 for result in results)
    assert manager.state is SessionState.UNAUTHENTICATED


def test_failed_exchange_allows_later_retry(settings: ClientSettings) -> None:
    """Given a failing exchange, when a later caller asks again, then a fresh exchange runs."""

    responses = [httpx.Response(500), token_response("token-2")]
    manager, client = _manager(settings, lambda n: responses[n - 1])

    with pytest.raises(AuthError):
        asyncio.run(manager.token())
    assert manager.state is SessionState.UNAUTHENTICATED

    credential = asyncio.run(manager.token())
    assert credential.access_token == "token-2"
    assert len(client.calls) == 2


def test_unreadable_token_body_is_auth_error(settings: ClientSettings) -> None:
    manager, _ = _manager(settings, lambda n: httpx.Response(200, text="<html/>"))
    with pytest.raises(AuthError, match="unreadable"):
        asyncio.run(manager.token())


def test_transport_failure_is_auth_error(settings: ClientSettings) -> None:
    def handler(n: int) -> httpx.Response:
        raise httpx.ConnectError("refused")

    manager, _ = _manager(settings, handler)
    with pytest.raises(AuthError, match="Token request failed"):
        asyncio.run(manager.token())
    assert manager.state is SessionState.UNAUTHENTICATED


def test_cancelled_waiter_does_not_cancel_exchange(settings: ClientSettings) -> None:
    manager, client = _manager(settings, lambda n: token_response(f"token-{n}"))
    client.block = True

    async def scenario() -> Credential:
        first = asyncio.create_task(manager.token())
        second = asyncio.create_task(manager.token())
        await asyncio.sleep(0)
        first.cancel()
        await asyncio.sleep(0)
        client.release.set()
        with pytest.raises(asyncio.CancelledError):
            await first
        return await second

    credential = asyncio.run(scenario())

    assert credential.access_token == "token-1"
    assert len(client.calls) == 1


def test_cancelled_exchange_allows_new_renewal(settings: ClientSettings) -> None:
    """Given an exchange cancelled mid-flight, when a caller asks again, then a new exchange runs
    instead of waiting forever."""

    manager, client = _manager(settings, lambda n: token_response(f"token-{n}"))
    client.block = True

    async def scenario() -> Credential:
        waiter = asyncio.create_task(manager.token())
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        assert len(client.calls) == 1
        manager.reset()
        with pytest.raises(AuthError, match="cancelled"):
            await waiter
        assert manager.state is SessionState.UNAUTHENTICATED
        client.block = False
        return await manager.token()

    credential = asyncio.run(scenario())

    assert credential.access_token == "token-2"
    assert len(client.calls) == 2


def test_expired_token_is_renewed(settings: ClientSettings) -> None:
    clock = FakeClock()
    manager, client = _manager(settings, lambda n: token_response(f"token-{n}", 60), clock)

    async def scenario() -> tuple[Credential, Credential, Credential]:
        first = await manager.token()
        again = await manager.token()
        clock.now += timedelta(seconds=61)
        assert manager.state is SessionState.EXPIRED
        renewed = await manager.token()
        return first, again, renewed

    first, again, renewed = asyncio.run(scenario())

    assert first is again
    assert renewed.access_token == "token-2"
    assert len(client.calls) == 2


def test_refresh_margin_renews_early(settings: ClientSettings) -> None:
    clock = FakeClock()
    early = settings.model_copy(update={"token_refresh_margin_seconds": 30})
    manager, client = _manager(early, lambda n: token_response(f"token-{n}", 60), clock)

    async def scenario() -> Credential:
        await manager.token()
        clock.now += timedelta(seconds=31)
        return await manager.token()

    assert asyncio.run(scenario()).access_token == "token-2"


def test_invalidate_ignores_stale_credentials(settings: ClientSettings) -> None:
    manager, client = _manager(settings, lambda n: token_response(f"token-{n}"))

    async def scenario() -> None:
        old = await manager.token()
        manager.invalidate(old)
        assert manager.state is SessionState.EXPIRED
        new = await manager.token()
        manager.invalidate(old)
        assert manager.state is SessionState.AUTHENTICATED
        assert await manager.token() is new

    asyncio.run(scenario())
    assert len(client.calls) == 2


def test_preauthorized_credential_skips_exchange(settings: ClientSettings) -> None:
    manager, client = _manager(settings, lambda n: token_response())
    credential = Credential(access_token="given", issued_at=datetime(2024, 1, 1, tzinfo=UTC))

    manager.preauthorize(credential)

    assert asyncio.run(manager.token()) is credential
    assert not client.calls
    assert repr(credential).count("given") == 0
