"""Decode PSML text into :mod:`psml.nodes` trees and encode them back.

Decoding keeps every attribute (in document order, empty values included), every
text segment (whitespace included) and every unknown element. Comments and
processing instructions are not part of the node model and are dropped.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

from loguru import logger
from lxml import etree

from .document import Document
from .errors import EncodeError, ParseError
from .nodes import DocumentNode, Node, node_from_parts

_XML_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>")
_DECLARATION_TEXT = '<?xml version="1.0" encoding="UTF-8"?>\n'


class _NodeBuilder:
    """lxml parser target assembling nodes as elements close."""

    def __init__(self) -> None:
        self._stack: list[tuple[str, dict[str, str], list[Node | str]]] = []
        self._root: Node | None = None

    def start(self, tag: str, attrib: dict[str, str], nsmap: dict[str, str] | None = None) -> None:
        self._stack.append((tag, dict(attrib), []))

    def end(self, tag: str) -> None:
        name, attributes, children = self._stack.pop()
        node = node_from_parts(name, attributes, children)
        if self._stack:
            self._stack[-1][2].append(node)
        else:
            self._root = node

    def data(self, text: str) -> None:
        if not self._stack:
            return
        children = self._stack[-1][2]
        if children and isinstance(children[-1], str):
            children[-1] += text
        else:
            children.append(text)

    def comment(self, text: str) -> None:
        pass

    def pi(self, target: str, data: str | None = None) -> None:
        pass

    def close(self) -> Node | None:
        return self._root


def decode(source: str | bytes) -> Node:
    """Parse PSML markup into a node tree.

    Args:
        source: XML text. ``str`` input may carry an XML declaration; ``bytes`` input
            is decoded according to its own declaration.

    Returns:
        The root node.

    Raises:
        ParseError: If the input is empty or not well-formed.
    """
    if isinstance(source, str):
        source = _XML_DECLARATION.sub("", source, count=1)
    if not source or not source.strip():
        raise ParseError("Empty input")

    parser = etree.XMLParser(
        target=_NodeBuilder(),
        resolve_entities=False,
        no_network=True,
        huge_tree=True,
        remove_comments=True,
        remove_pis=True,
    )
    try:
        root = etree.fromstring(source, parser)
    except etree.XMLSyntaxError as exc:
        line, column = exc.position if exc.position else (exc.lineno, exc.offset)
        logger.debug(f"PSML parse failed at line {line}: {exc.msg}")
        raise ParseError(exc.msg or "Malformed XML", line=line, column=column) from exc
    if root is None:
        raise ParseError("Document has no root element")
    return root


def decode_document(source: str | bytes) -> Document:
    """Parse markup whose root must be ``<document>``."""
    root = decode(source)
    if not isinstance(root, DocumentNode):
        raise ParseError(f"Expected <document> root element, found <{root.tag}>")
    return Document(root)


def decode_file(path: str | Path) -> Node:
    """Parse a PSML file from disk."""
    return decode(Path(path).read_bytes())


def encode(node: Node, *, xml_declaration: bool = False) -> str:
    """Serialize a node tree as XML text.

    Attribute and child order are kept as-is and no indentation is added, so
    ``decode(encode(node)) == node`` for any tree built from valid XML names and
    characters.

    Raises:
        EncodeError: If a tag, attribute name or value cannot be represented in XML.
    """
    element = _to_element(node, f"/{node.tag}")
    text = etree.tostring(element, encoding="unicode")
    return _DECLARATION_TEXT + text if xml_declaration else text


def encode_document(document: Document | DocumentNode) -> str:
    """Serialize a whole document with an XML declaration, ready for upload."""
    root = document.root if isinstance(document, Document) else document
    return encode(root, xml_declaration=True)


def _to_element(node: Node, path: str) -> etree._Element:
    try:
        element = etree.Element(node.tag)
        for name, value in node.attributes.items():
            element.set(name, value)
    except (TypeError, ValueError) as exc:
        raise EncodeError(str(exc), path) from exc

    last: etree._Element | None = None
    for child, child_path in _child_paths(node.children, path):
        if isinstance(child, str):
            try:
                if last is None:
                    element.text = (element.text or "") + child
                else:
                    last.tail = (last.tail or "") + child
            except (TypeError, ValueError) as exc:
                raise EncodeError(str(exc), path) from exc
        else:
            last = _to_element(child, child_path)
            element.append(last)
    return element


def _child_paths(children: Iterable[Node | str], parent: str) -> Iterable[tuple[Node | str, str]]:
    counts: dict[str, int] = {}
    for child in children:
        if isinstance(child, str):
            yield child, parent
            continue
        counts[child.tag] = counts.get(child.tag, 0) + 1
        yield child, f"{parent}/{child.tag}[{counts[child.tag]}]"
