"""Response models for the PageSeeder service API."""

from .responses import (
    Author,
    DocumentFragment,
    ErrorBody,
    Event,
    EventType,
    FragmentCreation,
    Group,
    GroupAccess,
    LoadClear,
    LoadStart,
    LoadUnzip,
    SearchResult,
    SearchResultField,
    SearchResultPage,
    Thread,
    ThreadCounter,
    ThreadStatus,
    TokenResponse,
    Upload,
    UploadedFile,
    Uri,
    UriHistory,
    Version,
    VersionCreation,
)

__all__ = [
    "Author",
    "DocumentFragment",
    "ErrorBody",
    "Event",
    "EventType",
    "FragmentCreation",
    "Group",
    "GroupAccess",
    "LoadClear",
    "LoadStart",
    "LoadUnzip",
    "SearchResult",
    "SearchResultField",
    "SearchResultPage",
    "Thread",
    "ThreadCounter",
    "ThreadStatus",
    "TokenResponse",
    "Upload",
    "UploadedFile",
    "Uri",
    "UriHistory",
    "Version",
    "VersionCreation",
]
