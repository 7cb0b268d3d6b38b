"""Unit tests for splitting Markdown files into YAML headers and bodies."""

from __future__ import annotations

import pytest

from flint_pages.frontmatter import (
    FrontmatterError,
    parse_frontmatter,
    stringify_frontmatter,
)


def test_parses_header_and_body() -> None:
    """The YAML header becomes a mapping and the rest is the body."""
    parsed = parse_frontmatter(
        "---\nTitle: Hello\nLabels:\n  - a\n  - b\n---\n# Heading\n\nText\n"
    )

    assert parsed.data == {"Title": "Hello", "Labels": ["a", "b"]}
    assert parsed.content == "# Heading\n\nText\n"


def test_document_without_header_is_all_body() -> None:
    """A file that does not open with ``---`` has no frontmatter."""
    text = "# Just Markdown\n\n---\n\nA rule above.\n"

    parsed = parse_frontmatter(text)

    assert parsed.data == {}
    assert parsed.content == text


def test_accepts_crlf_line_endings() -> None:
    """Windows line endings delimit the header just like ``\\n``."""
    parsed = parse_frontmatter("---\r\nTitle: Hi\r\n---\r\nBody\r\n")

    assert parsed.data == {"Title": "Hi"}
    assert parsed.content == "Body\r\n"


def test_leading_byte_order_mark_is_ignored() -> None:
    """A UTF-8 BOM before the opening delimiter does not hide the header."""
    parsed = parse_frontmatter("\ufeff---\nTitle: BOM\n---\nBody\n")

    assert parsed.data == {"Title": "BOM"}
    assert parsed.content == "Body\n"


def test_empty_header_yields_empty_mapping() -> None:
    """``---`` immediately followed by ``---`` is an empty header."""
    parsed = parse_frontmatter("---\n---\nBody\n")

    assert parsed.data == {}
    assert parsed.content == "Body\n"


def test_invalid_yaml_raises() -> None:
    """Malformed YAML is reported rather than silently dropped."""
    with pytest.raises(FrontmatterError, match="Failed to parse frontmatter"):
        parse_frontmatter("---\nTitle: [unclosed\n---\nBody\n")


def test_non_mapping_header_raises() -> None:
    """A YAML list is not a usable header."""
    with pytest.raises(FrontmatterError, match="expected a mapping"):
        parse_frontmatter("---\n- one\n- two\n---\nBody\n")


def test_stringify_writes_header_that_parses_back() -> None:
    """Serialized frontmatter is readable by :func:`parse_frontmatter`."""
    text = stringify_frontmatter({"Title": "Saved", "Order": 2}, "Body\n")

    assert text.startswith("---\n")
    parsed = parse_frontmatter(text)
    assert parsed.data == {"Title": "Saved", "Order": 2}
    assert parsed.content.strip() == "Body"


def test_stringify_without_data_returns_body() -> None:
    """No header is emitted for an empty mapping."""
    assert stringify_frontmatter({}, "Body\n") == "Body\n"
