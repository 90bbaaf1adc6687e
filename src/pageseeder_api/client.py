"""Asynchronous client for the PageSeeder service API."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable, Mapping
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from enum import Enum
from typing import Any, TypeVar

import httpx
from loguru import logger

import psml
from psml import Document, Node, ParseError

from . import services
from .auth import SessionManager, utc_now
from .config import ClientSettings
from .errors import ApiError, MalformedResponse, Timeout, TransportError
from .models import (
    DocumentFragment,
    Event,
    EventType,
    FragmentCreation,
    Group,
    LoadClear,
    LoadStart,
    LoadUnzip,
    SearchResult,
    SearchResultPage,
    Thread,
    Upload,
    Uri,
    UriHistory,
    VersionCreation,
)
from .pagination import Page, Paginator, page_number_marker
from .services import Service
from .transform import ResponseTransformer

R = TypeVar("R")

PSML_CONTENT_TYPE = "application/xml; charset=utf-8"


class PageSeederClient:
    """Run PageSeeder service calls with authentication, retries and decoding.

    Every call goes through the same pipeline: parameters are checked before anything
    is sent, a bearer token is attached (renewed when missing or expired), 401/403
    responses trigger one renew-and-retry, and transient failures (timeouts, transport
    errors, 429 and 5xx) are retried with capped exponential backoff.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: ClientSettings,
        *,
        session: SessionManager | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._client = client
        self._settings = settings
        self._session = session or SessionManager(client, settings)
        self._sleep = sleep
        self._clock = clock

    @property
    def session(self) -> SessionManager:
        return self._session

    # Pipeline

    async def _call(
        self,
        service: Service,
        path_params: Mapping[str, Any],
        *,
        query: Mapping[str, Any] | None = None,
        data: Mapping[str, Any] | None = None,
        content: bytes | str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        path = service.path(**path_params)
        service.check_query({**(query or {}), **(data or {})})
        url = f"{self._settings.root_url}{path}"

        attempt = 0
        renewed = False
        while True:
            attempt += 1
            credential = await self._session.token()
            request_headers = {**(headers or {}), "Authorization": credential.authorization_header}
            retry_after: float | None = None
            try:
                response = await self._client.request(
                    service.method,
                    url,
                    params=_encode_parameters(query),
                    data=_encode_parameters(data),
                    content=content,
                    headers=request_headers,
                    timeout=self._settings.timeout_seconds,
                )
            except httpx.TimeoutException as exc:
                error: Exception = Timeout(f"{service.name}: request timed out")
                error.__cause__ = exc
            except httpx.TransportError as exc:
                error = TransportError(f"{service.name}: {exc.__class__.__name__}: {exc}")
                error.__cause__ = exc
            else:
                status = response.status_code
                logger.debug(f"{service.method} {path} -> {status} (attempt {attempt})")
                if response.is_success:
                    return response
                if status in (httpx.codes.UNAUTHORIZED, httpx.codes.FORBIDDEN):
                    if renewed:
                        raise self._api_error(response)
                    renewed = True
                    self._session.invalidate(credential)
                    attempt -= 1
                    continue
                api_error = self._api_error(response)
                if not api_error.retryable:
                    raise api_error
                error = api_error
                retry_after = _retry_after_seconds(response, self._clock())

            if attempt >= self._settings.max_attempts:
                logger.error(f"{service.name} failed after {attempt} attempts: {error}")
                raise error
            delay = self._backoff(attempt, retry_after)
            logger.warning(
                f"{service.name} attempt {attempt} failed ({error}); retrying in {delay:.2f}s"
            )
            await self._sleep(delay)

    def _backoff(self, attempt: int, retry_after: float | None) -> float:
        settings = self._settings
        if retry_after is not None:
            delay = retry_after
        else:
            delay = settings.backoff_base_seconds * 2 ** (attempt - 1)
        return min(delay, settings.backoff_max_seconds)

    @staticmethod
    def _api_error(response: httpx.Response) -> ApiError:
        body = ResponseTransformer.parse_error(response.content)
        if body is not None:
            return ApiError(
                response.status_code,
                body.message or response.reason_phrase,
                code=body.id,
                request=body.request,
            )
        message = response.text.strip() or response.reason_phrase
        return ApiError(response.status_code, message)

    @staticmethod
    def _decode(service: Service, response: httpx.Response, parse: Callable[[bytes], R]) -> R:
        try:
            return parse(response.content)
        except (ValueError, ParseError) as exc:
            logger.error(f"{service.name}: undecodable response body: {exc}")
            raise MalformedResponse(
                f"{service.name}: could not decode response",
                response.status_code,
                response.text,
            ) from exc

    async def _request(
        self,
        service: Service,
        path_params: Mapping[str, Any],
        parse: Callable[[bytes], R],
        **kwargs: Any,
    ) -> R:
        response = await self._call(service, path_params, **kwargs)
        return self._decode(service, response, parse)

    # Groups and URIs

    async def get_group(self, group: str) -> Group:
        """Return details of a group."""
        return await self._request(
            services.GET_GROUP, {"group": group}, ResponseTransformer.parse_group
        )

    async def get_uri(self, member: str, uri: str) -> Uri:
        """Return details of a URI as seen by ``member``."""
        return await self._request(
            services.GET_URI, {"member": member, "uri": uri}, ResponseTransformer.parse_uri
        )

    async def get_uri_history(self, group: str, uri: str) -> UriHistory:
        return await self._request(
            services.GET_URI_HISTORY,
            {"group": group, "uri": uri},
            ResponseTransformer.parse_uri_history,
        )

    def get_uris_history(
        self,
        group: str,
        events: Iterable[EventType | str] = (),
        params: Mapping[str, Any] | None = None,
    ) -> Paginator[Event]:
        """Page through the history events of every URI in a group.

        Args:
            group: Group name
            events: Event types to include; all types when empty
            params: Extra query parameters passed to the service
        """
        query: dict[str, Any] = dict(params or {})
        event_filter = services.join_values(events)
        if event_filter:
            query["events"] = event_filter
        if self._settings.page_size is not None:
            query.setdefault("pagesize", self._settings.page_size)
        services.GET_URIS_HISTORY.path(group=group)

        async def fetch(marker: int | str | None) -> Page[Event]:
            history = await self._request(
                services.GET_URIS_HISTORY,
                {"group": group},
                ResponseTransformer.parse_uri_history,
                query={**query, "page": marker or 1},
            )
            return Page(history.events, _history_marker(history))

        return Paginator(fetch)

    # Fragments and documents

    async def get_uri_fragment(
        self,
        member: str,
        group: str,
        uri: str,
        fragment: str,
        params: Mapping[str, Any] | None = None,
    ) -> DocumentFragment:
        return await self._request(
            services.GET_URI_FRAGMENT,
            {"member": member, "group": group, "uri": uri, "fragment": fragment},
            ResponseTransformer.parse_document_fragment,
            query=params,
        )

    async def put_uri_fragment(
        self,
        member: str,
        group: str,
        uri: str,
        fragment: str,
        content: Node | str,
        params: Mapping[str, Any] | None = None,
    ) -> FragmentCreation:
        """Replace a fragment with ``content`` (a fragment node or PSML text)."""
        body = psml.encode(content) if isinstance(content, Node) else content
        return await self._request(
            services.PUT_URI_FRAGMENT,
            {"member": member, "group": group, "uri": uri, "fragment": fragment},
            ResponseTransformer.parse_fragment_creation,
            query=params,
            content=body.encode("utf-8"),
            headers={"Content-Type": PSML_CONTENT_TYPE},
        )

    async def add_uri_fragment(
        self,
        member: str,
        group: str,
        uri: str,
        content: Node | str,
        params: Mapping[str, Any] | None = None,
    ) -> FragmentCreation:
        """Add a new fragment to a document; ``content`` is sent as a form field."""
        body = psml.encode(content) if isinstance(content, Node) else content
        return await self._request(
            services.ADD_URI_FRAGMENT,
            {"member": member, "group": group, "uri": uri},
            ResponseTransformer.parse_fragment_creation,
            data={**(params or {}), "content": body},
        )

    async def fetch_document(self, uri: str) -> Document:
        """Download a document as PSML and decode it."""
        return await self._request(services.FETCH_DOCUMENT, {"uri": uri}, psml.decode_document)

    async def create_uri_version(
        self,
        member: str,
        group: str,
        uri: str,
        name: str,
        params: Mapping[str, Any] | None = None,
    ) -> VersionCreation:
        return await self._request(
            services.CREATE_URI_VERSION,
            {"member": member, "group": group, "uri": uri},
            ResponseTransformer.parse_version_creation,
            data={**(params or {}), "name": name},
        )

    # Search

    async def group_search_page(
        self, group: str, page: int = 1, params: Mapping[str, Any] | None = None
    ) -> SearchResultPage:
        """Fetch a single page of search results."""
        query: dict[str, Any] = dict(params or {})
        if self._settings.page_size is not None:
            query.setdefault("pagesize", self._settings.page_size)
        query["page"] = page
        return await self._request(
            services.GROUP_SEARCH,
            {"group": group},
            ResponseTransformer.parse_search_page,
            query=query,
        )

    def group_search(
        self, group: str, params: Mapping[str, Any] | None = None
    ) -> Paginator[SearchResult]:
        """Search a group, fetching result pages as iteration reaches them."""
        services.GROUP_SEARCH.path(group=group)

        async def fetch(marker: int | str | None) -> Page[SearchResult]:
            result_page = await self.group_search_page(group, int(marker or 1), params)
            logger.info(
                f"Search page {result_page.page}/{result_page.total_pages} "
                f"({result_page.total_results} results)"
            )
            return Page(
                result_page.results,
                page_number_marker(result_page.page, result_page.total_pages),
            )

        return Paginator(fetch)

    # Threads and exports

    async def uri_export(
        self, member: str, uri: str, params: Mapping[str, Any] | None = None
    ) -> Thread:
        """Start an export and return the thread running it."""
        return await self._request(
            services.URI_EXPORT,
            {"member": member, "uri": uri},
            ResponseTransformer.parse_thread,
            query=params,
        )

    async def thread_progress(self, thread_id: str) -> Thread:
        return await self._request(
            services.THREAD_PROGRESS, {"id": thread_id}, ResponseTransformer.parse_thread
        )

    async def wait_for_thread(
        self, thread_id: str, interval: float = 1.0, max_polls: int | None = None
    ) -> Thread:
        """Poll a thread until it stops running and return its final state.

        Raises:
            TimeoutError: If ``max_polls`` polls pass while the thread is still running.
        """
        polls = 0
        while True:
            thread = await self.thread_progress(thread_id)
            polls += 1
            if not thread.running:
                logger.info(f"Thread {thread_id} finished with status {thread.status.value}")
                return thread
            if max_polls is not None and polls >= max_polls:
                raise TimeoutError(f"Thread {thread_id} still running after {polls} polls")
            await self._sleep(interval)

    async def download_member_resource(self, group: str, filename: str) -> bytes:
        """Download a file from the member resources, such as an export result."""
        response = await self._call(
            services.DOWNLOAD_MEMBER_RESOURCE, {"group": group, "filename": filename}
        )
        return response.content

    # Uploads and loading zone

    async def upload(
        self,
        group: str,
        filename: str,
        file: bytes,
        params: Mapping[str, Any] | None = None,
    ) -> Upload:
        """Upload a file to the member's loading zone for ``group``."""
        return await self._request(
            services.UPLOAD,
            {},
            ResponseTransformer.parse_upload,
            query={**(params or {}), "group": group, "filename": filename},
            content=file,
            headers={"Content-Type": "application/octet-stream"},
        )

    async def clear_loading_zone(self, member: str, group: str) -> LoadClear:
        return await self._request(
            services.CLEAR_LOADING_ZONE,
            {"member": member, "group": group},
            ResponseTransformer.parse_load_clear,
        )

    async def unzip_loading_zone(
        self, member: str, group: str, path: str, params: Mapping[str, Any] | None = None
    ) -> LoadUnzip:
        return await self._request(
            services.UNZIP_LOADING_ZONE,
            {"member": member, "group": group},
            ResponseTransformer.parse_load_unzip,
            data={**(params or {}), "path": path},
        )

    async def start_loading(
        self, member: str, group: str, params: Mapping[str, Any] | None = None
    ) -> LoadStart:
        return await self._request(
            services.START_LOADING,
            {"member": member, "group": group},
            ResponseTransformer.parse_load_start,
            data=params,
        )


@asynccontextmanager
async def open_client(settings: ClientSettings) -> AsyncIterator[PageSeederClient]:
    """Create a client with its own HTTP connection pool, closed on exit."""
    async with httpx.AsyncClient(timeout=settings.timeout_seconds) as http_client:
        yield PageSeederClient(http_client, settings)


def _encode_parameters(params: Mapping[str, Any] | None) -> dict[str, str] | None:
    if not params:
        return None
    return {key: _parameter_value(value) for key, value in params.items() if value is not None}


def _parameter_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _history_marker(history: UriHistory) -> int | None:
    if history.page is None or not history.pagesize or history.total is None:
        return None
    if history.page * history.pagesize < history.total:
        return history.page + 1
    return None


def _retry_after_seconds(response: httpx.Response, now: datetime) -> float | None:
    raw = response.headers.get("Retry-After")
    if not raw:
        return None
    raw = raw.strip()
    if raw.isdigit():
        return float(raw)
    try:
        when = parsedate_to_datetime(raw)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=UTC)
    return max((when - now).total_seconds(), 0.0)
