from __future__ import annotations

from pathlib import Path

import pytest

from psml import Document, EncodeError, ParseError, decode, decode_document, decode_file, encode
from psml.codec import encode_document
from psml.nodes import (
    Bold,
    DocumentNode,
    Fragment,
    Para,
    PropertiesFragment,
    Section,
    UnknownNode,
    XRef,
)

SAMPLE = """<?xml version="1.0" encoding="UTF-8"?>
<document level="portable" type="references">
  <documentinfo>
    <uri id="1234" docid="doc-1" title="Sample"><displaytitle>Sample doc</displaytitle></uri>
  </documentinfo>
  <section id="title"><fragment id="1"><heading level="1">Title &amp; more</heading></fragment></section>
  <section id="content" title="">
    <fragment id="2" labels="">
      <para indent="1">Text with <bold>bold</bold>, <xref frag="default" uriid="99" display="document">ref</xref> and
        <custom:widget xmlns:custom="urn:x" custom:size="3">kept</custom:widget> tail</para>
      <para><inline label="x">a</inline><br/>b</para>
    </fragment>
    <properties-fragment id="3">
      <property name="author" value="Jane" />
      <property name="notes" datatype="markup"><para>note</para></property>
    </properties-fragment>
  </section>
</document>
"""


def test_round_trip_preserves_tree() -> None:
    """Given a well-formed PSML document, when encoded and decoded again, then the tree is
    structurally equal to the first decode."""

    first = decode(SAMPLE)
    second = decode(encode(first))

    assert second == first


def test_decode_builds_known_and_unknown_nodes() -> None:
    root = decode(SAMPLE)

    assert isinstance(root, DocumentNode)
    content = root.section("content")
    assert content is not None
    fragment = content.find(Fragment)
    assert fragment is not None
    para = fragment.find(Para)
    assert para is not None
    assert para.indent == 1
    assert isinstance(para.find(Bold), Bold)
    assert para.find(XRef).uriid == "99"  # type: ignore[union-attr]

    widget = para.find(UnknownNode)
    assert widget is not None
    assert widget.tag == "{urn:x}widget"
    assert widget.attributes == {"{urn:x}size": "3"}
    assert widget.children == ["kept"]


def test_unknown_tag_survives_encoding() -> None:
    """Given an unknown element, when re-encoded, then its tag, attributes and children come back
    unchanged."""

    source = '<para>x<widget kind="" n="1"><bold>b</bold>t</widget>y</para>'
    node = decode(source)

    assert encode(node) == source
    widget = node.find(UnknownNode)
    assert widget is not None
    assert widget.attributes == {"kind": "", "n": "1"}


def test_empty_and_absent_attributes_stay_distinct() -> None:
    root = decode(SAMPLE)
    content = root.section("content")  # type: ignore[attr-defined]

    assert content.attributes["title"] == ""
    assert content.title == ""
    assert "title" not in root.section("title").attributes  # type: ignore[attr-defined]
    assert 'title=""' in encode(content)


def test_attribute_order_and_text_are_preserved() -> None:
    source = '<xref uriid="1" frag="default" display="manual" title="a &lt; b">x &amp; y</xref>'
    assert encode(decode(source)) == source


def test_whitespace_text_is_kept() -> None:
    node = decode("<para> <bold>a</bold>\n\t</para>")
    assert node.children[0] == " "
    assert node.children[-1] == "\n\t"


def test_entities_and_cdata_merge_into_one_text_segment() -> None:
    node = decode("<para>a &amp; <![CDATA[<b>]]> c</para>")
    assert node.children == ["a & <b> c"]


def test_attribute_whitespace_characters_survive() -> None:
    para = Para({"prefix": "line1\nline2\tend\r"}, ["x"])
    assert decode(encode(para)) == para


def test_comments_and_processing_instructions_are_dropped() -> None:
    node = decode("<para>a<!-- note --><?pi data?>b</para>")
    assert node.children == ["ab"]


def test_bytes_input_honours_declared_encoding() -> None:
    payload = '<?xml version="1.0" encoding="ISO-8859-1"?><para>café</para>'.encode("latin-1")
    assert decode(payload).text == "café"


@pytest.mark.parametrize(
    ("source", "line"),
    [
        ("<para>\n<bold>text</para>", 2),
        ("<para>one</para>\n\n<para>two</para>", 3),
    ],
)
def test_parse_error_reports_position(source: str, line: int) -> None:
    """Given malformed markup, when decoding, then `ParseError` carries the offending line."""

    with pytest.raises(ParseError) as excinfo:
        decode(source)

    assert excinfo.value.line == line
    assert excinfo.value.column is not None


def test_empty_input_is_a_parse_error() -> None:
    with pytest.raises(ParseError, match="Empty input"):
        decode("   ")


def test_encode_error_names_node_path() -> None:
    """Given a caller-built node holding a character XML cannot carry, when encoding, then
    `EncodeError` names the node's path."""

    document = DocumentNode(
        children=[
            Section.new("a"),
            Section(
                {"id": "b"},
                [Fragment({"id": "1"}, [Para.of("ok"), Para.of("bad \x00 char")])],
            ),
        ]
    )

    with pytest.raises(EncodeError) as excinfo:
        encode(document)

    assert excinfo.value.path == "/document/section[2]/fragment[1]/para[2]"


def test_encode_error_for_invalid_attribute_name() -> None:
    with pytest.raises(EncodeError) as excinfo:
        encode(Para({"bad name": "x"}))
    assert excinfo.value.path == "/para"


def test_decode_document_wraps_root() -> None:
    document = decode_document(SAMPLE)

    assert isinstance(document, Document)
    assert document.docid == "doc-1"
    with pytest.raises(ParseError, match="Expected <document>"):
        decode_document("<fragment id='1'/>")


def test_encode_document_adds_declaration() -> None:
    document = decode_document(SAMPLE)
    text = encode_document(document)

    assert text.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    assert decode_document(text) == document


def test_decode_file_reads_from_disk(tmp_path: Path) -> None:
    path = tmp_path / "doc.psml"
    path.write_text(SAMPLE, encoding="utf-8")

    root = decode_file(path)

    assert isinstance(root, DocumentNode)
    assert isinstance(root.section("content").find(PropertiesFragment), PropertiesFragment)  # type: ignore[union-attr]


def test_deeply_nested_document_round_trips() -> None:
    """Given nesting deeper than libxml2's default limit, when decoding, then the tree is
    accepted and encodes back to the same text."""

    depth = 300
    text = '<block label="b">' * depth + "x" + "</block>" * depth

    root = decode(text)

    node = root
    for _ in range(depth - 1):
        (node,) = node.children  # type: ignore[assignment]
    assert node.children == ["x"]
    assert encode(root) == text
