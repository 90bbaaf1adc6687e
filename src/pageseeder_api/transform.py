"""Translate PageSeeder XML responses into response models."""

from __future__ import annotations

from typing import Any

from lxml import etree

import psml
from psml.nodes import FRAGMENT_TYPES, Locator, Node

from .models import (
    DocumentFragment,
    ErrorBody,
    FragmentCreation,
    Group,
    LoadClear,
    LoadStart,
    LoadUnzip,
    SearchResultPage,
    Thread,
    Upload,
    Uri,
    UriHistory,
    VersionCreation,
)

_PARSER = etree.XMLParser(resolve_entities=False, no_network=True, remove_comments=True)


def parse_xml(payload: bytes | str) -> etree._Element:
    """Parse a response body, raising ``ValueError`` for anything that is not XML."""
    if isinstance(payload, str):
        payload = payload.encode()
    if not payload.strip():
        raise ValueError("Empty response body")
    try:
        return etree.fromstring(payload, _PARSER)
    except etree.XMLSyntaxError as exc:
        raise ValueError(f"Invalid XML response: {exc.msg}") from exc


class ResponseTransformer:
    """Build response models from PageSeeder XML payloads.

    Every ``parse_*`` method raises ``ValueError`` (including pydantic's
    ``ValidationError``) when the payload does not have the expected shape; the
    fragment parsers raise :class:`psml.ParseError` for malformed PSML.
    """

    @staticmethod
    def parse_error(payload: bytes | str) -> ErrorBody | None:
        """Return the ``<error>`` body of a failed call, or None if there is none."""
        try:
            root = parse_xml(payload)
        except ValueError:
            return None
        if root.tag != "error":
            root = root.find(".//error")
            if root is None:
                return None
        return ErrorBody(
            id=root.get("id"),
            request=_child_text(root, "request"),
            message=_child_text(root, "message") or "",
        )

    @staticmethod
    def parse_group(payload: bytes | str) -> Group:
        return Group.model_validate(_attributes(_require(parse_xml(payload), "group")))

    @staticmethod
    def parse_uri(payload: bytes | str) -> Uri:
        return Uri.model_validate(_uri_record(_require(parse_xml(payload), "uri")))

    @staticmethod
    def parse_uri_history(payload: bytes | str) -> UriHistory:
        root = parse_xml(payload)
        record = _attributes(root)
        record["event"] = [_event_record(element) for element in root.iter("event")]
        return UriHistory.model_validate(record)

    @staticmethod
    def parse_thread(payload: bytes | str) -> Thread:
        return Thread.model_validate(_thread_record(_require(parse_xml(payload), "thread")))

    @staticmethod
    def parse_search_page(payload: bytes | str) -> SearchResultPage:
        results = _require(parse_xml(payload), "results")
        record = _attributes(results)
        record["result"] = [
            {
                "field": [
                    {"name": field.get("name", ""), "value": "".join(field.itertext())}
                    for field in result.findall("field")
                ]
            }
            for result in results.findall("result")
        ]
        return SearchResultPage.model_validate(record)

    @staticmethod
    def parse_document_fragment(payload: bytes | str) -> DocumentFragment:
        root = psml.decode(payload)
        holder = root if root.tag == "document-fragment" else _find_tag(root, "document-fragment")
        if holder is None:
            raise ValueError(f"Expected <document-fragment>, found <{root.tag}>")
        return _fragment_record(holder)

    @staticmethod
    def parse_fragment_creation(payload: bytes | str) -> FragmentCreation:
        root = psml.decode(payload)
        if root.tag != "fragment-creation":
            raise ValueError(f"Expected <fragment-creation>, found <{root.tag}>")
        holder = _find_tag(root, "document-fragment")
        if holder is None:
            raise ValueError("Fragment creation response has no <document-fragment>")
        return FragmentCreation.model_validate(
            {
                "unresolved-xrefs": root.get("unresolved-xrefs"),
                "document-fragment": _fragment_record(holder),
            }
        )

    @staticmethod
    def parse_upload(payload: bytes | str) -> Upload:
        root = parse_xml(payload)
        record = _attributes(root)
        record["message"] = _child_text(root, "message")
        uri = root.find("uri")
        if uri is not None:
            record["uri"] = _uri_record(uri)
        file = root.find("file")
        if file is not None:
            record["file"] = _attributes(file)
        return Upload.model_validate(record)

    @staticmethod
    def parse_load_clear(payload: bytes | str) -> LoadClear:
        return LoadClear(attributes=_attributes(parse_xml(payload)))

    @staticmethod
    def parse_load_unzip(payload: bytes | str) -> LoadUnzip:
        thread = _require(parse_xml(payload), "thread")
        return LoadUnzip.model_validate({"thread": _thread_record(thread)})

    @staticmethod
    def parse_load_start(payload: bytes | str) -> LoadStart:
        thread = _require(parse_xml(payload), "thread")
        return LoadStart.model_validate({"thread": _thread_record(thread)})

    @staticmethod
    def parse_version_creation(payload: bytes | str) -> VersionCreation:
        root = parse_xml(payload)
        version = _require(root, "version")
        record: dict[str, Any] = {"version": _attributes(version)}
        record["version"]["description"] = _child_text(version, "description")
        author = version.find("author")
        if author is not None:
            record["version"]["author"] = _attributes(author)
        uri = root.find(".//uri")
        if uri is not None:
            record["uri"] = _uri_record(uri)
        return VersionCreation.model_validate(record)


def _require(root: etree._Element, tag: str) -> etree._Element:
    if root.tag == tag:
        return root
    element = root.find(f".//{tag}")
    if element is None:
        raise ValueError(f"Response has no <{tag}> element (root is <{root.tag}>)")
    return element


def _attributes(element: etree._Element) -> dict[str, Any]:
    return {str(key): value for key, value in element.attrib.items()}


def _child_text(element: etree._Element, tag: str) -> str | None:
    child = element.find(tag)
    if child is None:
        return None
    return "".join(child.itertext())


def _labels(element: etree._Element) -> list[str]:
    raw = _child_text(element, "labels")
    if not raw:
        return []
    return [label.strip() for label in raw.split(",") if label.strip()]


def _uri_record(element: etree._Element) -> dict[str, Any]:
    record = _attributes(element)
    record["labels"] = _labels(element)
    description = _child_text(element, "description")
    if description is not None:
        record["description"] = description
    return record


def _event_record(element: etree._Element) -> dict[str, Any]:
    record = _attributes(element)
    record["labels"] = _labels(element)
    author = element.find("author")
    if author is not None:
        record["author"] = _attributes(author)
    uri = element.find("uri")
    if uri is not None:
        record["uri"] = _uri_record(uri)
    return record


def _thread_record(element: etree._Element) -> dict[str, Any]:
    record = _attributes(element)
    for counter in ("processing", "packaging"):
        child = element.find(counter)
        if child is not None:
            record[counter] = _attributes(child)
    record["zip"] = _child_text(element, "zip")
    record["message"] = _child_text(element, "message")
    return record


def _find_tag(root: Node, tag: str) -> Node | None:
    for node in root.iter():
        if node.tag == tag:
            return node
    return None


def _fragment_record(holder: Node) -> DocumentFragment:
    locator = holder.find(Locator)
    fragment = next((child for child in holder.elements() if isinstance(child, FRAGMENT_TYPES)), None)
    return DocumentFragment(locator=locator, fragment=fragment)
