"""Typed node model for PSML (PageSeeder Markup Language) documents.

Every element is a :class:`Node` holding its tag, an ordered attribute map and an
ordered list of children (nodes or text). Each element kind defined by PSML has its
own subclass exposing typed accessors; anything else decodes to :class:`UnknownNode`
so that unfamiliar markup survives a round trip untouched.

Element reference: https://dev.pageseeder.com/psml/element_reference.html
"""

from __future__ import annotations

import copy
import re
from collections.abc import Iterable, Iterator, Mapping
from enum import Enum
from types import MappingProxyType
from typing import ClassVar, TypeVar

N = TypeVar("N", bound="Node")
E = TypeVar("E", bound=Enum)


class DocumentLevel(str, Enum):
    """Value of ``document/@level``."""

    METADATA = "metadata"
    PORTABLE = "portable"
    PROCESSED = "processed"


class XRefDisplayKind(str, Enum):
    """How the target of an xref is displayed."""

    DOCUMENT = "document"
    DOCUMENT_MANUAL = "document+manual"
    DOCUMENT_FRAGMENT = "document+fragment"
    MANUAL = "manual"
    TEMPLATE = "template"


class XRefKind(str, Enum):
    """Value of ``xref/@type``."""

    NONE = "none"
    ALTERNATE = "alternate"
    MATH = "math"


class BlockXRefKind(str, Enum):
    """Value of ``blockxref/@type``."""

    NONE = "none"
    ALTERNATE = "alternate"
    MATH = "math"
    EMBED = "embed"
    TRANSCLUDE = "transclude"


class PropertyDatatype(str, Enum):
    """Value of ``property/@datatype``."""

    STRING = "string"
    DATE = "date"
    DATETIME = "datetime"
    XREF = "xref"
    LINK = "link"
    MARKDOWN = "markdown"
    MARKUP = "markup"


class Alignment(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    JUSTIFY = "justify"


class VerticalAlignment(str, Enum):
    TOP = "top"
    CENTER = "center"
    BOTTOM = "bottom"


class TablePart(str, Enum):
    HEADER = "header"
    BODY = "body"
    FOOTER = "footer"


class NumberedListType(str, Enum):
    ARABIC = "arabic"
    UPPERALPHA = "upperalpha"
    LOWERALPHA = "loweralpha"
    UPPERROMAN = "upperroman"
    LOWERROMAN = "lowerroman"


def _values(enum: type[Enum]) -> frozenset[str]:
    return frozenset(str(member.value) for member in enum)


class Node:
    """A single PSML element.

    ``attributes`` keeps insertion order and distinguishes an attribute set to ``""``
    from an attribute that is absent. ``children`` holds nodes and text segments in
    document order.
    """

    TAG: ClassVar[str] = ""
    REQUIRED_ATTRIBUTES: ClassVar[tuple[str, ...]] = ()
    ENUMERATED_ATTRIBUTES: ClassVar[Mapping[str, frozenset[str]]] = MappingProxyType({})
    BOOLEAN_ATTRIBUTES: ClassVar[tuple[str, ...]] = ()
    INTEGER_ATTRIBUTES: ClassVar[tuple[str, ...]] = ()

    __slots__ = ("attributes", "children")

    def __init__(
        self,
        attributes: Mapping[str, str] | None = None,
        children: Iterable[Node | str] | None = None,
    ) -> None:
        self.attributes: dict[str, str] = dict(attributes or {})
        self.children: list[Node | str] = list(children or [])

    @property
    def tag(self) -> str:
        return self.TAG

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node) or type(other) is not type(self):
            return NotImplemented
        return (
            self.tag == other.tag
            and self.attributes == other.attributes
            and self.children == other.children
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(tag={self.tag!r}, attributes={self.attributes!r}, "
            f"children={self.children!r})"
        )

    # Attribute helpers

    def get(self, name: str, default: str | None = None) -> str | None:
        return self.attributes.get(name, default)

    def set(self, name: str, value: str | int | bool | Enum | None) -> None:
        """Set an attribute, converting booleans and enums to their PSML spelling.

        ``None`` removes the attribute.
        """
        if value is None:
            self.attributes.pop(name, None)
        elif isinstance(value, bool):
            self.attributes[name] = "true" if value else "false"
        elif isinstance(value, Enum):
            self.attributes[name] = str(value.value)
        else:
            self.attributes[name] = str(value)

    def _bool(self, name: str) -> bool | None:
        raw = self.attributes.get(name)
        if raw is None:
            return None
        return raw == "true"

    def _int(self, name: str) -> int | None:
        raw = self.attributes.get(name)
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError:
            return None

    def _list(self, name: str) -> list[str]:
        raw = self.attributes.get(name)
        if not raw:
            return []
        return [item.strip() for item in raw.split(",") if item.strip()]

    def _enum(self, name: str, enum: type[E]) -> E | None:
        raw = self.attributes.get(name)
        if raw is None:
            return None
        try:
            return enum(raw)
        except ValueError:
            return None

    # Child helpers

    def append(self, child: Node | str) -> Node:
        self.children.append(child)
        return self

    def extend(self, children: Iterable[Node | str]) -> Node:
        self.children.extend(children)
        return self

    def elements(self) -> list[Node]:
        """Return the child nodes, skipping text."""
        return [child for child in self.children if isinstance(child, Node)]

    def find(self, kind: type[N]) -> N | None:
        """Return the first direct child of the given node class."""
        for child in self.children:
            if isinstance(child, kind):
                return child
        return None

    def find_all(self, kind: type[N]) -> list[N]:
        return [child for child in self.children if isinstance(child, kind)]

    def iter(self) -> Iterator[Node]:
        """Yield this node and every descendant node depth-first."""
        yield self
        for child in self.children:
            if isinstance(child, Node):
                yield from child.iter()

    @property
    def text(self) -> str:
        """Concatenated text of this node and its descendants."""
        parts: list[str] = []
        for child in self.children:
            parts.append(child if isinstance(child, str) else child.text)
        return "".join(parts)

    def copy(self: N) -> N:
        return copy.deepcopy(self)


class UnknownNode(Node):
    """An element outside the PSML element set, kept verbatim."""

    __slots__ = ("_tag",)

    def __init__(
        self,
        tag: str,
        attributes: Mapping[str, str] | None = None,
        children: Iterable[Node | str] | None = None,
    ) -> None:
        super().__init__(attributes, children)
        self._tag = tag

    @property
    def tag(self) -> str:
        return self._tag


class _TextElement(Node):
    """Element whose meaning is its text content."""

    __slots__ = ()

    def __init__(
        self,
        attributes: Mapping[str, str] | None = None,
        children: Iterable[Node | str] | None = None,
    ) -> None:
        super().__init__(attributes, children)

    @classmethod
    def of(cls: type[N], text: str, **attributes: str) -> N:
        return cls(attributes, [text] if text else [])


class _Fragmentish(Node):
    """Shared accessors for the four fragment kinds."""

    REQUIRED_ATTRIBUTES = ("id",)
    __slots__ = ()

    @property
    def id(self) -> str | None:
        return self.get("id")

    @property
    def fragment_type(self) -> str | None:
        return self.get("type")

    @property
    def labels(self) -> list[str]:
        return self._list("labels")


# Document structure


class DocumentNode(Node):
    """The ``<document>`` root element."""

    TAG = "document"
    ENUMERATED_ATTRIBUTES = MappingProxyType({"level": _values(DocumentLevel)})
    BOOLEAN_ATTRIBUTES = ("edit", "lockstructure")
    __slots__ = ()

    @property
    def doc_type(self) -> str | None:
        return self.get("type")

    @property
    def level(self) -> DocumentLevel | None:
        return self._enum("level", DocumentLevel)

    @property
    def edit(self) -> bool | None:
        return self._bool("edit")

    @property
    def lockstructure(self) -> bool | None:
        return self._bool("lockstructure")

    @property
    def documentinfo(self) -> DocumentInfo | None:
        return self.find(DocumentInfo)

    @property
    def metadata(self) -> Metadata | None:
        return self.find(Metadata)

    @property
    def sections(self) -> list[Section]:
        return self.find_all(Section)

    def section(self, section_id: str) -> Section | None:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None


class DocumentInfo(Node):
    TAG = "documentinfo"
    __slots__ = ()

    @property
    def uri(self) -> UriDescriptor | None:
        return self.find(UriDescriptor)

    @property
    def publication(self) -> Publication | None:
        return self.find(Publication)


class UriDescriptor(Node):
    """Metadata about the document's URI (``documentinfo/uri``)."""

    TAG = "uri"
    BOOLEAN_ATTRIBUTES = ("folder", "external", "archived")
    __slots__ = ()

    @property
    def id(self) -> str | None:
        return self.get("id")

    @property
    def docid(self) -> str | None:
        return self.get("docid")

    @property
    def documenttype(self) -> str | None:
        return self.get("documenttype")

    @property
    def title(self) -> str | None:
        return self.get("title")

    @property
    def folder(self) -> bool | None:
        return self._bool("folder")

    @property
    def displaytitle(self) -> str | None:
        node = self.find(DisplayTitle)
        return node.text if node is not None else None

    @property
    def description(self) -> str | None:
        node = self.find(Description)
        return node.text if node is not None else None

    @property
    def labels(self) -> list[str]:
        node = self.find(Labels)
        return node.values if node is not None else []


class DisplayTitle(_TextElement):
    TAG = "displaytitle"
    __slots__ = ()


class Description(_TextElement):
    TAG = "description"
    __slots__ = ()


class Labels(_TextElement):
    """Comma-separated labels for a document, note or fragment."""

    TAG = "labels"
    __slots__ = ()

    @property
    def values(self) -> list[str]:
        return [label.strip() for label in self.text.split(",") if label.strip()]


class Publication(Node):
    TAG = "publication"
    REQUIRED_ATTRIBUTES = ("id",)
    __slots__ = ()

    @property
    def id(self) -> str | None:
        return self.get("id")

    @property
    def publication_type(self) -> str | None:
        return self.get("type")


class ReverseXRefs(Node):
    TAG = "reversexrefs"
    BOOLEAN_ATTRIBUTES = ("limitreached",)
    __slots__ = ()

    @property
    def xrefs(self) -> list[ReverseXRef]:
        return self.find_all(ReverseXRef)


class ReverseXRef(Node):
    TAG = "reversexref"
    ENUMERATED_ATTRIBUTES = MappingProxyType(
        {"display": _values(XRefDisplayKind), "type": _values(BlockXRefKind)}
    )
    __slots__ = ()

    @property
    def href(self) -> str | None:
        return self.get("href")

    @property
    def uriid(self) -> str | None:
        return self.get("uriid")

    @property
    def frag(self) -> str | None:
        return self.get("frag")


class FragmentInfo(Node):
    TAG = "fragmentinfo"
    __slots__ = ()

    @property
    def locators(self) -> list[Locator]:
        return self.find_all(Locator)


class Locator(Node):
    """Metadata relating to a fragment."""

    TAG = "locator"
    __slots__ = ()

    @property
    def fragment(self) -> str | None:
        return self.get("fragment")

    @property
    def notes(self) -> list[Note]:
        holder = self.find(Notes)
        return holder.find_all(Note) if holder is not None else []


class Notes(Node):
    TAG = "notes"
    __slots__ = ()


class Note(Node):
    TAG = "note"
    __slots__ = ()

    @property
    def id(self) -> str | None:
        return self.get("id")

    @property
    def title(self) -> str | None:
        return self.get("title")

    @property
    def modified(self) -> str | None:
        return self.get("modified")

    @property
    def labels(self) -> list[str]:
        node = self.find(Labels)
        return node.values if node is not None else []

    @property
    def content(self) -> Content | None:
        return self.find(Content)


class Content(Node):
    TAG = "content"
    __slots__ = ()


class Metadata(Node):
    """Document metadata block holding ``properties``."""

    TAG = "metadata"
    __slots__ = ()

    @property
    def properties(self) -> list[Property]:
        holder = self.find(Properties)
        return holder.find_all(Property) if holder is not None else []


class Properties(Node):
    TAG = "properties"
    __slots__ = ()


class Toc(Node):
    TAG = "toc"
    __slots__ = ()

    @property
    def parts(self) -> list[TocPart]:
        return self.find_all(TocPart)


class TocPart(Node):
    TAG = "tocpart"
    INTEGER_ATTRIBUTES = ("level",)
    BOOLEAN_ATTRIBUTES = ("canonical",)
    __slots__ = ()

    @property
    def level(self) -> int | None:
        return self._int("level")

    @property
    def idref(self) -> str | None:
        return self.get("idref")


class Section(Node):
    """A PSML section holding fragments."""

    TAG = "section"
    REQUIRED_ATTRIBUTES = ("id",)
    BOOLEAN_ATTRIBUTES = ("edit", "lockstructure", "overwrite")
    __slots__ = ()

    @classmethod
    def new(cls, section_id: str, title: str | None = None) -> Section:
        """Create an empty editable section, as PageSeeder does for new sections."""
        section = cls({"id": section_id})
        if title is not None:
            section.append(Title.of(title))
        return section

    @property
    def id(self) -> str | None:
        return self.get("id")

    @property
    def title(self) -> str | None:
        """UI title from ``@title``."""
        return self.get("title")

    @property
    def content_title(self) -> str | None:
        node = self.find(Title)
        return node.text if node is not None else None

    @property
    def edit(self) -> bool | None:
        return self._bool("edit")

    @property
    def lockstructure(self) -> bool | None:
        return self._bool("lockstructure")

    @property
    def overwrite(self) -> bool | None:
        return self._bool("overwrite")

    @property
    def fragment_types(self) -> list[str]:
        return self._list("fragmenttype")

    @property
    def fragments(self) -> list[Node]:
        return [child for child in self.elements() if isinstance(child, _Fragmentish)]

    def add_fragment(self, fragment: Node) -> Section:
        if not isinstance(fragment, _Fragmentish):
            raise TypeError(f"Sections hold fragments, not <{fragment.tag}>")
        self.children.append(fragment)
        return self


class Title(_TextElement):
    TAG = "title"
    __slots__ = ()


# Fragments


class Fragment(_Fragmentish):
    """A content fragment."""

    TAG = "fragment"
    __slots__ = ()


class PropertiesFragment(_Fragmentish):
    TAG = "properties-fragment"
    __slots__ = ()

    @property
    def properties(self) -> list[Property]:
        return self.find_all(Property)

    def get_property(self, name: str) -> Property | None:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None

    def with_properties(self, properties: Iterable[Property]) -> PropertiesFragment:
        self.children.extend(properties)
        return self


class XRefFragment(_Fragmentish):
    TAG = "xref-fragment"
    __slots__ = ()

    @property
    def xrefs(self) -> list[BlockXRef]:
        return self.find_all(BlockXRef)

    def with_xrefs(self, xrefs: Iterable[BlockXRef]) -> XRefFragment:
        self.children.extend(xrefs)
        return self


class MediaFragment(_Fragmentish):
    TAG = "media-fragment"
    __slots__ = ()

    @property
    def mediatype(self) -> str | None:
        return self.get("mediatype")


# Properties

_PROPERTY_BAD_NAME = re.compile(r"(^-|[^a-zA-Z0-9_-]+)")


class Property(Node):
    """A named property with one or more values.

    Values come either from ``@value`` or from child elements, depending on the
    datatype: ``value`` for strings and dates, ``xref``, ``link`` or ``markdown``
    elements, or arbitrary block markup for the ``markup`` datatype.
    """

    TAG = "property"
    REQUIRED_ATTRIBUTES = ("name",)
    ENUMERATED_ATTRIBUTES = MappingProxyType({"datatype": _values(PropertyDatatype)})
    BOOLEAN_ATTRIBUTES = ("multiple",)
    __slots__ = ()

    @classmethod
    def with_value(
        cls,
        name: str,
        value: str | XRef | Link | Markdown | list[Node],
        title: str | None = None,
    ) -> Property:
        prop = cls({"name": name})
        prop.set("title", title)
        if isinstance(value, str):
            prop.set("value", value)
        elif isinstance(value, XRef):
            prop.set("datatype", PropertyDatatype.XREF)
            prop.append(value)
        elif isinstance(value, Link):
            prop.set("datatype", PropertyDatatype.LINK)
            prop.append(value)
        elif isinstance(value, Markdown):
            prop.set("datatype", PropertyDatatype.MARKDOWN)
            prop.append(value)
        else:
            prop.set("datatype", PropertyDatatype.MARKUP)
            prop.extend(value)
        return prop

    @staticmethod
    def sanitize_name(name: str, replacement: str = "_") -> str:
        """Replace characters that PSML forbids in property names."""
        return _PROPERTY_BAD_NAME.sub(replacement, name)

    @property
    def name(self) -> str | None:
        return self.get("name")

    @property
    def title(self) -> str | None:
        return self.get("title")

    @property
    def datatype(self) -> PropertyDatatype | None:
        return self._enum("datatype", PropertyDatatype)

    @property
    def multiple(self) -> bool | None:
        return self._bool("multiple")

    @property
    def values(self) -> list[str | Node]:
        """Return the property values.

        Text values are returned as strings; xref, link and markdown values as their
        nodes; markup properties as their block nodes.
        """
        if "value" in self.attributes:
            return [self.attributes["value"]]
        datatype = self.datatype
        if datatype is PropertyDatatype.MARKUP:
            return list(self.elements())
        values: list[str | Node] = []
        for child in self.elements():
            if isinstance(child, Value):
                values.append(child.text)
            elif isinstance(child, (XRef, Link, Markdown)):
                values.append(child)
        return values

    @property
    def value(self) -> str | Node | None:
        values = self.values
        return values[0] if values else None


class Value(_TextElement):
    TAG = "value"
    __slots__ = ()


class Markdown(_TextElement):
    TAG = "markdown"
    __slots__ = ()


class Link(Node):
    """An external link, inline or as a property value."""

    TAG = "link"
    REQUIRED_ATTRIBUTES = ("href",)
    __slots__ = ()

    @classmethod
    def to(cls, href: str, text: str = "") -> Link:
        return cls({"href": href}, [text] if text else [])

    @property
    def href(self) -> str | None:
        return self.get("href")

    @property
    def role(self) -> str | None:
        return self.get("role")


# Block content


class Block(Node):
    TAG = "block"
    REQUIRED_ATTRIBUTES = ("label",)
    __slots__ = ()

    @property
    def label(self) -> str | None:
        return self.get("label")


class BlockXRef(Node):
    """A block-level cross reference."""

    TAG = "blockxref"
    REQUIRED_ATTRIBUTES = ("frag",)
    ENUMERATED_ATTRIBUTES = MappingProxyType(
        {"display": _values(XRefDisplayKind), "type": _values(BlockXRefKind)}
    )
    BOOLEAN_ATTRIBUTES = ("archived", "external", "reverselink", "unresolved")
    INTEGER_ATTRIBUTES = ("level",)
    __slots__ = ()

    @classmethod
    def for_docid(cls, docid: str, frag: str = "default") -> BlockXRef:
        return cls({"docid": docid, "frag": frag})

    @classmethod
    def for_uriid(cls, uriid: str, frag: str = "default") -> BlockXRef:
        return cls({"uriid": uriid, "frag": frag})

    @classmethod
    def for_href(cls, href: str, frag: str = "default") -> BlockXRef:
        return cls({"href": href, "frag": frag})

    @property
    def href(self) -> str | None:
        return self.get("href")

    @property
    def docid(self) -> str | None:
        return self.get("docid")

    @property
    def uriid(self) -> str | None:
        return self.get("uriid")

    @property
    def frag(self) -> str | None:
        return self.get("frag")

    @property
    def display(self) -> XRefDisplayKind | None:
        return self._enum("display", XRefDisplayKind)

    @property
    def xref_type(self) -> BlockXRefKind | None:
        return self._enum("type", BlockXRefKind)

    @property
    def level(self) -> int | None:
        return self._int("level")


class Heading(Node):
    TAG = "heading"
    INTEGER_ATTRIBUTES = ("level",)
    BOOLEAN_ATTRIBUTES = ("numbered",)
    __slots__ = ()

    @classmethod
    def of(cls, text: str, level: int = 1) -> Heading:
        return cls({"level": str(level)}, [text])

    @property
    def level(self) -> int | None:
        return self._int("level")

    @property
    def numbered(self) -> bool | None:
        return self._bool("numbered")

    @property
    def prefix(self) -> str | None:
        return self.get("prefix")


class Para(Node):
    TAG = "para"
    INTEGER_ATTRIBUTES = ("indent",)
    BOOLEAN_ATTRIBUTES = ("numbered",)
    __slots__ = ()

    @classmethod
    def of(cls, *content: Node | str) -> Para:
        return cls(children=content)

    @property
    def indent(self) -> int | None:
        return self._int("indent")

    @property
    def numbered(self) -> bool | None:
        return self._bool("numbered")

    @property
    def prefix(self) -> str | None:
        return self.get("prefix")


class Preformat(Node):
    TAG = "preformat"
    __slots__ = ()

    @property
    def role(self) -> str | None:
        return self.get("role")


class List(Node):
    """An unordered list (``<list>``)."""

    TAG = "list"
    __slots__ = ()

    @property
    def items(self) -> list[Item]:
        return self.find_all(Item)


class NList(Node):
    """A numbered list (``<nlist>``)."""

    TAG = "nlist"
    ENUMERATED_ATTRIBUTES = MappingProxyType({"type": _values(NumberedListType)})
    INTEGER_ATTRIBUTES = ("start",)
    __slots__ = ()

    @property
    def items(self) -> list[Item]:
        return self.find_all(Item)

    @property
    def start(self) -> int | None:
        return self._int("start")


class Item(Node):
    TAG = "item"
    __slots__ = ()


class Table(Node):
    TAG = "table"
    __slots__ = ()

    @classmethod
    def basic(cls, columns: int, cells: list[list[str]], caption: str | None = None) -> Table:
        """Build a plain table with ``columns`` columns and one row per entry in ``cells``."""
        table = cls()
        if caption is not None:
            table.append(Caption.of(caption))
        table.extend(Col() for _ in range(columns))
        for row in cells:
            table.append(Row(children=[Cell(children=[text] if text else []) for text in row]))
        return table

    @property
    def caption(self) -> str | None:
        node = self.find(Caption)
        return node.text if node is not None else None

    @property
    def columns(self) -> list[Col]:
        return self.find_all(Col)

    @property
    def rows(self) -> list[Row]:
        return self.find_all(Row)


class Caption(_TextElement):
    TAG = "caption"
    __slots__ = ()


class Col(Node):
    TAG = "col"
    ENUMERATED_ATTRIBUTES = MappingProxyType(
        {"align": _values(Alignment), "part": _values(TablePart)}
    )
    __slots__ = ()

    @property
    def align(self) -> Alignment | None:
        return self._enum("align", Alignment)

    @property
    def part(self) -> TablePart | None:
        return self._enum("part", TablePart)

    @property
    def width(self) -> str | None:
        return self.get("width")


class Row(Node):
    TAG = "row"
    ENUMERATED_ATTRIBUTES = MappingProxyType(
        {"align": _values(Alignment), "part": _values(TablePart)}
    )
    __slots__ = ()

    @property
    def part(self) -> TablePart | None:
        return self._enum("part", TablePart)

    @property
    def cells(self) -> list[Node]:
        return [child for child in self.elements() if isinstance(child, (Cell, HCell))]


class _CellBase(Node):
    ENUMERATED_ATTRIBUTES = MappingProxyType(
        {"align": _values(Alignment), "valign": _values(VerticalAlignment)}
    )
    INTEGER_ATTRIBUTES = ("colspan", "rowspan")
    __slots__ = ()

    @property
    def colspan(self) -> int | None:
        return self._int("colspan")

    @property
    def rowspan(self) -> int | None:
        return self._int("rowspan")

    @property
    def align(self) -> Alignment | None:
        return self._enum("align", Alignment)


class Cell(_CellBase):
    TAG = "cell"
    __slots__ = ()


class HCell(_CellBase):
    TAG = "hcell"
    __slots__ = ()


class Image(Node):
    TAG = "image"
    INTEGER_ATTRIBUTES = ("height", "width")
    __slots__ = ()

    @property
    def src(self) -> str | None:
        return self.get("src")

    @property
    def docid(self) -> str | None:
        return self.get("docid")

    @property
    def uriid(self) -> str | None:
        return self.get("uriid")

    @property
    def alt(self) -> str | None:
        return self.get("alt")

    @property
    def height(self) -> int | None:
        return self._int("height")

    @property
    def width(self) -> int | None:
        return self._int("width")


# Inline content


class Anchor(Node):
    TAG = "anchor"
    REQUIRED_ATTRIBUTES = ("name",)
    __slots__ = ()

    @property
    def name(self) -> str | None:
        return self.get("name")


class Bold(Node):
    TAG = "bold"
    __slots__ = ()


class Italic(Node):
    TAG = "italic"
    __slots__ = ()


class Underline(Node):
    TAG = "underline"
    __slots__ = ()


class Subscript(Node):
    TAG = "subscript"
    __slots__ = ()


class Superscript(Node):
    TAG = "superscript"
    __slots__ = ()


class Monospace(Node):
    TAG = "monospace"
    __slots__ = ()


class Br(Node):
    TAG = "br"
    __slots__ = ()


class Inline(Node):
    """A labelled inline span."""

    TAG = "inline"
    REQUIRED_ATTRIBUTES = ("label",)
    __slots__ = ()

    @property
    def label(self) -> str | None:
        return self.get("label")


class Placeholder(Node):
    TAG = "placeholder"
    REQUIRED_ATTRIBUTES = ("name",)
    BOOLEAN_ATTRIBUTES = ("unresolved",)
    __slots__ = ()

    @property
    def name(self) -> str | None:
        return self.get("name")


class XRef(Node):
    """An inline cross reference.

    ``frag`` is required plus at least one of ``href``, ``docid`` or ``uriid``. The
    text content is informational; PageSeeder regenerates it on upload.
    """

    TAG = "xref"
    REQUIRED_ATTRIBUTES = ("frag",)
    ENUMERATED_ATTRIBUTES = MappingProxyType(
        {"display": _values(XRefDisplayKind), "type": _values(XRefKind)}
    )
    BOOLEAN_ATTRIBUTES = ("reverselink", "external", "archived", "unresolved")
    INTEGER_ATTRIBUTES = ("level",)
    __slots__ = ()

    @classmethod
    def _default(cls, key: str, target: str, content: str) -> XRef:
        return cls(
            {
                key: target,
                "display": XRefDisplayKind.DOCUMENT.value,
                "frag": "default",
                "reverselink": "true",
            },
            [content] if content else [],
        )

    @classmethod
    def to_uriid(cls, uriid: str, content: str = "") -> XRef:
        return cls._default("uriid", uriid, content)

    @classmethod
    def to_docid(cls, docid: str, content: str = "") -> XRef:
        return cls._default("docid", docid, content)

    @classmethod
    def to_href(cls, href: str, content: str = "") -> XRef:
        return cls._default("href", href, content)

    @property
    def href(self) -> str | None:
        return self.get("href")

    @property
    def docid(self) -> str | None:
        return self.get("docid")

    @property
    def uriid(self) -> str | None:
        return self.get("uriid")

    @property
    def frag(self) -> str | None:
        return self.get("frag")

    @property
    def display(self) -> XRefDisplayKind | None:
        return self._enum("display", XRefDisplayKind)

    @property
    def xref_type(self) -> XRefKind | None:
        return self._enum("type", XRefKind)

    @property
    def reverselink(self) -> bool | None:
        return self._bool("reverselink")

    @property
    def title(self) -> str | None:
        return self.get("title")

    @property
    def labels(self) -> list[str]:
        return self._list("labels")


KNOWN_NODE_TYPES: tuple[type[Node], ...] = (
    DocumentNode,
    DocumentInfo,
    UriDescriptor,
    DisplayTitle,
    Description,
    Labels,
    Publication,
    ReverseXRefs,
    ReverseXRef,
    FragmentInfo,
    Locator,
    Notes,
    Note,
    Content,
    Metadata,
    Properties,
    Toc,
    TocPart,
    Section,
    Title,
    Fragment,
    PropertiesFragment,
    XRefFragment,
    MediaFragment,
    Property,
    Value,
    Markdown,
    Link,
    Block,
    BlockXRef,
    Heading,
    Para,
    Preformat,
    List,
    NList,
    Item,
    Table,
    Caption,
    Col,
    Row,
    HCell,
    Cell,
    Image,
    Anchor,
    Bold,
    Italic,
    Underline,
    Subscript,
    Superscript,
    Monospace,
    Br,
    Inline,
    Placeholder,
    XRef,
)

NODE_TYPES_BY_TAG: Mapping[str, type[Node]] = MappingProxyType(
    {node_type.TAG: node_type for node_type in KNOWN_NODE_TYPES}
)

FRAGMENT_TYPES: tuple[type[Node], ...] = (Fragment, PropertiesFragment, XRefFragment, MediaFragment)


def node_from_parts(
    tag: str,
    attributes: Mapping[str, str] | None = None,
    children: Iterable[Node | str] | None = None,
) -> Node:
    """Build the node class for ``tag``, falling back to :class:`UnknownNode`."""
    node_type = NODE_TYPES_BY_TAG.get(tag)
    if node_type is None:
        return UnknownNode(tag, attributes, children)
    return node_type(attributes, children)
