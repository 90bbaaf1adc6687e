from __future__ import annotations

from psml import decode, validate
from psml.validation import Violation, is_valid


def test_valid_document_has_no_violations() -> None:
    root = decode(
        '<document level="portable"><section id="s"><fragment id="1">'
        '<heading level="2">Title</heading>'
        '<para>See <xref frag="default" uriid="12">this</xref></para>'
        '<image src="pic.png" width="100"/>'
        "</fragment></section></document>"
    )

    assert validate(root) == []
    assert is_valid(root)


def test_violations_report_path_tag_and_message() -> None:
    """Given nodes breaking the element rules, when validating, then each problem is reported
    with its location instead of raising."""

    root = decode(
        '<document level="draft"><section><fragment id="1">'
        '<heading level="9">H</heading>'
        '<xref frag="default">dangling</xref>'
        "<image/>"
        "</fragment>"
        '<properties-fragment id="2"><property name="-bad name" multiple="yes"/></properties-fragment>'
        "</section></document>"
    )

    violations = validate(root)
    found = {(violation.path, violation.tag) for violation in violations}

    assert all(isinstance(violation, Violation) for violation in violations)
    assert ("/document", "document") in found
    assert ("/document/section[1]", "section") in found
    assert ("/document/section[1]/fragment[1]/heading[1]", "heading") in found
    assert ("/document/section[1]/fragment[1]/xref[1]", "xref") in found
    assert ("/document/section[1]/fragment[1]/image[1]", "image") in found
    messages = [violation.message for violation in violations]
    assert any("level" in message and "draft" in message for message in messages)
    assert any("Missing required attribute 'id'" == message for message in messages)
    assert any("between 1 and 6" in message for message in messages)
    assert any("Invalid property name" in message for message in messages)
    assert any("'multiple' must be 'true' or 'false'" in message for message in messages)


def test_unknown_elements_reported_only_when_strict() -> None:
    root = decode("<para>a<custom>b</custom></para>")

    assert validate(root) == []
    strict = validate(root, strict=True)
    assert [(violation.path, violation.message) for violation in strict] == [
        ("/para/custom[1]", "Unknown element <custom>")
    ]


def test_integer_attributes_are_checked() -> None:
    violations = validate(decode('<para indent="two">x</para>'))
    assert [str(violation) for violation in violations] == [
        "/para: Attribute 'indent' must be an integer, got 'two'"
    ]
