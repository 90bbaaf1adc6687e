"""Optional semantic checks over a PSML node tree.

Decoding accepts any well-formed markup; :func:`validate` reports where a tree departs
from the PSML element rules without raising.
"""

from __future__ import annotations

import re
from collections.abc import Iterator

from pydantic import BaseModel, Field

from .nodes import BlockXRef, Heading, Image, Node, Property, UnknownNode, XRef

_PROPERTY_NAME = re.compile(r"^(?!-)[a-zA-Z0-9_-]+$")
_INTEGER = re.compile(r"^-?\d+$")
_BOOLEAN_VALUES = frozenset({"true", "false"})


class Violation(BaseModel):
    """A single rule broken by a node."""

    path: str = Field(description="Slash-separated location of the node, e.g. /document/section[1]")
    tag: str = Field(description="Tag of the offending node")
    message: str = Field(description="What is wrong")

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


def validate(node: Node, *, strict: bool = False) -> list[Violation]:
    """Check ``node`` and its descendants against the PSML element rules.

    Args:
        node: Root of the tree to check.
        strict: Also report elements outside the PSML element set.

    Returns:
        Violations in document order; an empty list when the tree is valid.
    """
    violations: list[Violation] = []
    for path, current in _walk(node, f"/{node.tag}"):
        violations.extend(
            Violation(path=path, tag=current.tag, message=message)
            for message in _check(current, strict)
        )
    return violations


def is_valid(node: Node, *, strict: bool = False) -> bool:
    return not validate(node, strict=strict)


def _walk(node: Node, path: str) -> Iterator[tuple[str, Node]]:
    yield path, node
    counts: dict[str, int] = {}
    for child in node.children:
        if isinstance(child, Node):
            counts[child.tag] = counts.get(child.tag, 0) + 1
            yield from _walk(child, f"{path}/{child.tag}[{counts[child.tag]}]")


def _check(node: Node, strict: bool) -> Iterator[str]:
    if isinstance(node, UnknownNode):
        if strict:
            yield f"Unknown element <{node.tag}>"
        return

    attributes = node.attributes
    for name in node.REQUIRED_ATTRIBUTES:
        if name not in attributes:
            yield f"Missing required attribute '{name}'"
    for name, allowed in node.ENUMERATED_ATTRIBUTES.items():
        value = attributes.get(name)
        if value is not None and value not in allowed:
            yield f"Attribute '{name}' has value '{value}', expected one of {sorted(allowed)}"
    for name in node.BOOLEAN_ATTRIBUTES:
        value = attributes.get(name)
        if value is not None and value not in _BOOLEAN_VALUES:
            yield f"Attribute '{name}' must be 'true' or 'false', got '{value}'"
    for name in node.INTEGER_ATTRIBUTES:
        value = attributes.get(name)
        if value is not None and not _INTEGER.match(value):
            yield f"Attribute '{name}' must be an integer, got '{value}'"

    if isinstance(node, (XRef, BlockXRef)):
        if not any(key in attributes for key in ("href", "docid", "uriid")):
            yield "Cross reference needs one of 'href', 'docid' or 'uriid'"
    elif isinstance(node, Image):
        if not any(key in attributes for key in ("src", "docid", "uriid")):
            yield "Image needs one of 'src', 'docid' or 'uriid'"
    elif isinstance(node, Heading):
        level = node.level
        if level is not None and not 1 <= level <= 6:
            yield f"Heading level must be between 1 and 6, got {level}"
    elif isinstance(node, Property):
        name = node.name
        if name is not None and not _PROPERTY_NAME.match(name):
            yield f"Invalid property name '{name}'"
