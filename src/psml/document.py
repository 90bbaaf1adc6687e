"""Document-level view over a decoded ``<document>`` tree."""

from __future__ import annotations

from .nodes import (
    FRAGMENT_TYPES,
    DocumentLevel,
    DocumentNode,
    Node,
    PropertiesFragment,
    Property,
    Section,
)


class Document:
    """A PSML document: the root node plus the metadata PageSeeder derives from it.

    The wrapper reads everything from ``root`` on access, so edits to the tree are
    reflected immediately.
    """

    __slots__ = ("root",)

    def __init__(self, root: DocumentNode) -> None:
        self.root = root

    @classmethod
    def from_node(cls, root: Node) -> Document:
        if not isinstance(root, DocumentNode):
            raise ValueError(f"Expected a <document> root, got <{root.tag}>")
        return cls(root)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Document):
            return NotImplemented
        return self.root == other.root

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Document(docid={self.docid!r}, title={self.title!r})"

    @property
    def title(self) -> str | None:
        """Display title, falling back to the URI title."""
        info = self.root.documentinfo
        uri = info.uri if info is not None else None
        if uri is None:
            return None
        return uri.displaytitle or uri.title

    @property
    def docid(self) -> str | None:
        info = self.root.documentinfo
        uri = info.uri if info is not None else None
        return uri.docid if uri is not None else None

    @property
    def uriid(self) -> str | None:
        info = self.root.documentinfo
        uri = info.uri if info is not None else None
        return uri.id if uri is not None else None

    @property
    def doc_type(self) -> str | None:
        return self.root.doc_type

    @property
    def level(self) -> DocumentLevel | None:
        return self.root.level

    @property
    def labels(self) -> list[str]:
        info = self.root.documentinfo
        uri = info.uri if info is not None else None
        return uri.labels if uri is not None else []

    @property
    def properties(self) -> dict[str, list[str | Node]]:
        """Map of property name to values from the ``<metadata>`` block."""
        metadata = self.root.metadata
        if metadata is None:
            return {}
        result: dict[str, list[str | Node]] = {}
        for prop in metadata.properties:
            if prop.name is not None:
                result.setdefault(prop.name, []).extend(prop.values)
        return result

    @property
    def sections(self) -> list[Section]:
        return self.root.sections

    def section(self, section_id: str) -> Section | None:
        return self.root.section(section_id)

    def fragment(self, fragment_id: str) -> Node | None:
        """Find a fragment of any kind by id, searching all sections."""
        for section in self.root.sections:
            for fragment in section.fragments:
                if isinstance(fragment, FRAGMENT_TYPES) and fragment.get("id") == fragment_id:
                    return fragment
        return None

    def fragment_properties(self, fragment_id: str) -> list[Property]:
        """Properties held by a properties fragment, empty if there is none with that id."""
        fragment = self.fragment(fragment_id)
        if isinstance(fragment, PropertiesFragment):
            return fragment.properties
        return []
