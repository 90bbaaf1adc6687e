"""Descriptors for the PageSeeder service endpoints used by the client."""

from __future__ import annotations

import string
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from .errors import InvalidRequest

SERVICE_PREFIX = "/ps/service"


@dataclass(frozen=True, slots=True)
class Service:
    """One endpoint: HTTP method, path template and the parameters it needs.

    Path placeholders are always required. ``required_query`` names query or form
    parameters that must be present and non-empty as well.
    """

    name: str
    method: str
    template: str
    required_query: tuple[str, ...] = ()
    prefixed: bool = True

    @property
    def path_parameters(self) -> tuple[str, ...]:
        return tuple(
            field for _, field, _, _ in string.Formatter().parse(self.template) if field
        )

    def path(self, **params: Any) -> str:
        """Render the request path with URL-escaped parameter values.

        Raises:
            InvalidRequest: If a path parameter is missing or empty.
        """
        values: dict[str, str] = {}
        for name in self.path_parameters:
            value = params.get(name)
            if value is None or not str(value).strip():
                raise InvalidRequest(self.name, name)
            values[name] = quote(str(value), safe="")
        rendered = self.template.format(**values)
        return f"{SERVICE_PREFIX}{rendered}" if self.prefixed else rendered

    def check_query(self, query: Mapping[str, Any] | None) -> None:
        """Raise :class:`InvalidRequest` if a required query parameter is missing."""
        query = query or {}
        for name in self.required_query:
            value = query.get(name)
            if value is None or not str(value).strip():
                raise InvalidRequest(self.name, name)


GET_GROUP = Service("get_group", "GET", "/groups/{group}")
GET_URI = Service("get_uri", "GET", "/members/{member}/uris/{uri}")
GET_URI_HISTORY = Service("get_uri_history", "GET", "/groups/{group}/uris/{uri}/history")
GET_URIS_HISTORY = Service("get_uris_history", "GET", "/groups/{group}/uris/history")
GET_URI_FRAGMENT = Service(
    "get_uri_fragment",
    "GET",
    "/members/{member}/groups/{group}/uris/{uri}/fragments/{fragment}",
)
PUT_URI_FRAGMENT = Service(
    "put_uri_fragment",
    "PUT",
    "/members/{member}/groups/{group}/uris/{uri}/fragments/{fragment}",
)
ADD_URI_FRAGMENT = Service(
    "add_uri_fragment",
    "POST",
    "/members/{member}/groups/{group}/uris/{uri}/fragments",
    required_query=("content",),
)
FETCH_DOCUMENT = Service("fetch_document", "GET", "/ps/uri/{uri}.psml", prefixed=False)
URI_EXPORT = Service("uri_export", "GET", "/members/{member}/uris/{uri}/export")
GROUP_SEARCH = Service("group_search", "GET", "/groups/{group}/search")
THREAD_PROGRESS = Service("thread_progress", "GET", "/threads/{id}/progress")
UPLOAD = Service(
    "upload",
    "PUT",
    "/ps/servlet/upload",
    required_query=("group", "filename"),
    prefixed=False,
)
CLEAR_LOADING_ZONE = Service(
    "clear_loading_zone", "POST", "/members/{member}/groups/{group}/loadingzone/clear"
)
UNZIP_LOADING_ZONE = Service(
    "unzip_loading_zone",
    "POST",
    "/members/{member}/groups/{group}/loadingzone/unzip",
    required_query=("path",),
)
START_LOADING = Service(
    "start_loading", "POST", "/members/{member}/groups/{group}/loadingzone/start"
)
DOWNLOAD_MEMBER_RESOURCE = Service(
    "download_member_resource",
    "GET",
    "/ps/member-resource/{group}/{filename}",
    prefixed=False,
)
CREATE_URI_VERSION = Service(
    "create_uri_version",
    "POST",
    "/members/{member}/groups/{group}/uris/{uri}/versions",
    required_query=("name",),
)

ALL_SERVICES: tuple[Service, ...] = (
    GET_GROUP,
    GET_URI,
    GET_URI_HISTORY,
    GET_URIS_HISTORY,
    GET_URI_FRAGMENT,
    PUT_URI_FRAGMENT,
    ADD_URI_FRAGMENT,
    FETCH_DOCUMENT,
    URI_EXPORT,
    GROUP_SEARCH,
    THREAD_PROGRESS,
    UPLOAD,
    CLEAR_LOADING_ZONE,
    UNZIP_LOADING_ZONE,
    START_LOADING,
    DOWNLOAD_MEMBER_RESOURCE,
    CREATE_URI_VERSION,
)


def join_values(values: Iterable[Any]) -> str:
    """Comma-join parameter values, using enum values where given."""
    return ",".join(str(getattr(value, "value", value)) for value in values)
