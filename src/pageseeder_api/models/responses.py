"""Typed views of PageSeeder service responses.

Field aliases are the XML attribute or child element names used by the service, so
:mod:`pageseeder_api.transform` can feed attribute maps straight into
``model_validate``.

Element reference: https://dev.pageseeder.com/api/element_reference.html
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from psml.nodes import Locator, Node


class _XmlModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class GroupAccess(str, Enum):
    PUBLIC = "public"
    MEMBER = "member"


class EventType(str, Enum):
    """Kinds of URI history event, as accepted by the ``events`` parameter."""

    UPLOAD = "upload"
    CREATION = "creation"
    MOVE = "move"
    MODIFICATION = "modification"
    STRUCTURE = "structure"
    WORKFLOW = "workflow"
    VERSION = "version"
    EDIT = "edit"
    DRAFT = "draft"
    NOTE = "note"
    XREF = "xref"
    IMAGE = "image"
    COMMENT = "comment"
    TASK = "task"


class ThreadStatus(str, Enum):
    INITIALISED = "initialised"
    IN_PROGRESS = "inprogress"
    ERROR = "error"
    WARNING = "warning"
    CANCELLED = "cancelled"
    FAILED = "failed"
    COMPLETED = "completed"

    @property
    def running(self) -> bool:
        """True while the thread has not reached a final status."""
        return self in (ThreadStatus.INITIALISED, ThreadStatus.IN_PROGRESS)


class ErrorBody(_XmlModel):
    """Body of a failed service call: ``<error id="..."><request/><message/></error>``."""

    id: str | None = None
    request: str | None = None
    message: str = ""


class TokenResponse(BaseModel):
    """JSON body returned by the OAuth token endpoint."""

    access_token: str = Field(min_length=1)
    expires_in: int | None = Field(default=None, description="Lifetime in seconds")
    token_type: str = "Bearer"
    scope: str | None = None


class Group(_XmlModel):
    id: int
    name: str
    owner: str | None = None
    description: str | None = None
    access: GroupAccess | None = None

    @property
    def short_name(self) -> str:
        """Group name without its project prefix, e.g. ``docs`` for ``acme-docs``."""
        _, _, short = self.name.rpartition("-")
        return short


class Uri(_XmlModel):
    """A PageSeeder URI (document, folder or external link)."""

    id: str
    scheme: str | None = None
    host: str | None = None
    port: str | None = None
    path: str | None = None
    decodedpath: str | None = None
    external: bool = False
    archived: bool | None = None
    folder: bool | None = None
    docid: str | None = None
    mediatype: str | None = Field(default=None, description="MIME type of the content")
    documenttype: str | None = None
    title: str | None = None
    created: datetime | None = None
    modified: datetime | None = None
    labels: list[str] = Field(default_factory=list)
    description: str | None = None


class Author(_XmlModel):
    id: str | None = None
    firstname: str | None = None
    surname: str | None = None
    username: str | None = None
    status: str | None = None

    @property
    def fullname(self) -> str:
        return " ".join(part for part in (self.firstname, self.surname) if part)


class Event(_XmlModel):
    id: str
    timestamp: datetime | None = Field(default=None, alias="datetime")
    event_type: EventType = Field(alias="type")
    fragment: str | None = None
    title: str | None = None
    uriid: str | None = None
    targetfragment: str | None = None
    version: str | None = None
    author: Author | None = None
    uri: Uri | None = None
    labels: list[str] = Field(default_factory=list)


class UriHistory(BaseModel):
    """History of one URI or of every URI in a group."""

    model_config = ConfigDict(populate_by_name=False, extra="ignore")

    event_filter: str | None = Field(default=None, alias="events")
    page: int | None = None
    pagesize: int | None = None
    total: int | None = None
    events: list[Event] = Field(default_factory=list, alias="event")

    @property
    def event_types(self) -> list[EventType]:
        """Event types requested, parsed from ``@events``."""
        if not self.event_filter:
            return []
        return [EventType(item.strip()) for item in self.event_filter.split(",") if item.strip()]


class ThreadCounter(_XmlModel):
    current: int
    total: int


class Thread(_XmlModel):
    """A server-side process such as an export or a loading-zone import."""

    id: str
    name: str | None = None
    username: str | None = None
    groupid: str | None = None
    status: ThreadStatus
    processing: ThreadCounter | None = None
    packaging: ThreadCounter | None = None
    zip: str | None = Field(default=None, description="Name of the file produced by an export")
    message: str | None = None

    @property
    def running(self) -> bool:
        return self.status.running


class SearchResultField(_XmlModel):
    name: str
    value: str = ""


class SearchResult(_XmlModel):
    fields: list[SearchResultField] = Field(default_factory=list, alias="field")

    def get(self, name: str) -> str | None:
        for field in self.fields:
            if field.name == name:
                return field.value
        return None

    def as_dict(self) -> dict[str, list[str]]:
        result: dict[str, list[str]] = {}
        for field in self.fields:
            result.setdefault(field.name, []).append(field.value)
        return result


class SearchResultPage(_XmlModel):
    page: int = 1
    page_size: int = Field(default=0, alias="page-size")
    total_pages: int = Field(default=1, alias="total-pages")
    total_results: int = Field(default=0, alias="total-results")
    first_result: int | None = Field(default=None, alias="first-result")
    last_result: int | None = Field(default=None, alias="last-result")
    results: list[SearchResult] = Field(default_factory=list, alias="result")

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


class DocumentFragment(_XmlModel):
    """A fragment returned by the fragment services, with its locator."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", arbitrary_types_allowed=True)

    locator: Locator | None = None
    fragment: Node | None = Field(default=None, description="Fragment node of any kind")


class FragmentCreation(_XmlModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", arbitrary_types_allowed=True)

    unresolved_xrefs: bool | None = Field(default=None, alias="unresolved-xrefs")
    document_fragment: DocumentFragment = Field(alias="document-fragment")


class UploadedFile(_XmlModel):
    name: str
    path: str | None = None
    file_type: str | None = Field(default=None, alias="type")


class Upload(_XmlModel):
    member: str | None = None
    uploadid: str | None = None
    status: str | None = None
    max_workflow_notifications: int | None = Field(
        default=None, alias="max-workflow-notifications"
    )
    message: str | None = None
    uri: Uri | None = None
    file: UploadedFile | None = None


class LoadClear(_XmlModel):
    """Result of clearing a loading zone; the service reports only attributes."""

    attributes: dict[str, str] = Field(default_factory=dict)


class LoadUnzip(_XmlModel):
    thread: Thread


class LoadStart(_XmlModel):
    thread: Thread


class Version(_XmlModel):
    id: str
    name: str
    created: datetime | None = None
    description: str | None = None
    author: Author | None = None


class VersionCreation(_XmlModel):
    uri: Uri | None = None
    version: Version
