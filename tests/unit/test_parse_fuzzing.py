"""Property-based fuzzing tests for Markdown parsing.

This test module uses Hypothesis to generate random Markdown-ish input and
checks that the parse facade, the tree builder and the encoder behave
correctly across a wide range of inputs, including malformed markup and
control characters.

Test Coverage:
- Property: parse never raises for text or bytes within the size limit
- Property: encoded output is always valid JSON
- Property: image nodes never keep children
- Property: unbalanced leave events never corrupt the root
- Property: escaping only touches the quote, backslash and C0 range
"""

import json

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from md2json import ErrorKind, NodeType, parse, parse_to_json
from md2json.ast import TreeBuilder, escape_json
from md2json.parsers.events import BlockType, SpanType, TextType

MARKDOWN_FRAGMENTS = st.sampled_from(
    [
        "# ",
        "## ",
        "> ",
        "- ",
        "1. ",
        "- [x] ",
        "- [ ] ",
        "*",
        "**",
        "~~",
        "`",
        "```",
        "$",
        "$$",
        "[[",
        "]]",
        "|",
        "|---|",
        "![",
        "](",
        ")",
        "<div>",
        "</div>",
        "https://example.com",
        "\n",
        "\n\n",
        "    ",
        "\t",
        "\\",
        "&amp;",
        "\x00",
        "text",
    ]
)

MARKDOWN_TEXT = st.lists(st.one_of(MARKDOWN_FRAGMENTS, st.text(max_size=10)), max_size=40).map("".join)

OPTIONS = st.fixed_dictionaries(
    {},
    optional={
        "gfm": st.booleans(),
        "enableTables": st.booleans(),
        "enableTaskLists": st.booleans(),
        "enableStrikethrough": st.booleans(),
        "enableAutolink": st.booleans(),
        "math": st.booleans(),
        "wiki": st.booleans(),
    },
)

EVENTS = st.lists(
    st.one_of(
        st.tuples(st.just("enter_block"), st.sampled_from([BlockType.P, BlockType.QUOTE, BlockType.CODE])),
        st.tuples(st.just("leave_block"), st.sampled_from([BlockType.P, BlockType.QUOTE, BlockType.CODE])),
        st.tuples(st.just("enter_span"), st.sampled_from([SpanType.EM, SpanType.IMG, SpanType.A])),
        st.tuples(st.just("leave_span"), st.sampled_from([SpanType.EM, SpanType.IMG, SpanType.A])),
        st.tuples(st.just("text"), st.sampled_from([TextType.NORMAL, TextType.SOFTBR, TextType.NULLCHAR])),
    ),
    max_size=50,
)


@pytest.mark.unit
@pytest.mark.fuzzing
class TestParseFuzzing:
    """Property-based tests for the parse facade."""

    @given(MARKDOWN_TEXT, OPTIONS)
    @settings(suppress_health_check=[HealthCheck.too_slow], deadline=None)
    def test_parse_never_raises(self, markdown: str, options: dict) -> None:
        """Test that parsing returns a result for any input."""
        try:
            result = parse(markdown, options)
        except Exception as e:
            pytest.fail(f"Unexpected exception for input {markdown!r}: {e}")

        if result.success:
            assert result.root is not None
            assert result.root.type is NodeType.DOCUMENT
        else:
            assert result.error.kind in (ErrorKind.INPUT_TOO_LARGE, ErrorKind.TOKENIZE_FAILURE)

    @given(st.binary(max_size=200))
    @settings(deadline=None)
    def test_bytes_never_raise(self, data: bytes) -> None:
        """Test arbitrary bytes are accepted."""
        assert parse(data).success

    @given(MARKDOWN_TEXT)
    @settings(suppress_health_check=[HealthCheck.too_slow], deadline=None)
    def test_output_is_valid_json(self, markdown: str) -> None:
        """Test the encoded tree always decodes."""
        decoded = json.loads(parse_to_json(markdown, {"math": True, "wiki": True}).ast)

        assert isinstance(decoded, list)
        if decoded:
            assert decoded[0]["type"] == "document"

    @given(MARKDOWN_TEXT)
    @settings(suppress_health_check=[HealthCheck.too_slow], deadline=None)
    def test_leaf_invariants(self, markdown: str) -> None:
        """Test images, code and html blocks never keep children."""
        result = parse(markdown)

        if not result.success:
            return
        for node in result.root.walk():
            if node.type in (NodeType.IMAGE, NodeType.CODE_BLOCK, NodeType.HTML_BLOCK, NodeType.TEXT):
                assert node.children == []

    @given(st.text(min_size=1, max_size=50), st.integers(min_value=0, max_value=60))
    @settings(deadline=None)
    def test_size_limit(self, markdown: str, limit: int) -> None:
        """Test the size check matches the UTF-8 byte length."""
        result = parse(markdown, {"maxInputSize": limit})
        too_large = len(markdown.encode("utf-8")) > limit

        assert (not result.success and result.error.kind is ErrorKind.INPUT_TOO_LARGE) is too_large


@pytest.mark.unit
@pytest.mark.fuzzing
class TestBuilderFuzzing:
    """Property-based tests for arbitrary event streams."""

    @given(EVENTS)
    def test_root_survives_any_event_order(self, events: list) -> None:
        """Test that unbalanced streams keep a single intact root."""
        builder = TreeBuilder()
        for kind, value in events:
            if kind == "text":
                status = builder.text(value, "x")
            else:
                status = getattr(builder, kind)(value, None)
            assert status == 0

        root = builder.finish()
        assert root is builder.root
        assert root.type is NodeType.DOCUMENT
        assert builder.depth >= 1
        assert sum(1 for node in root.walk() if node.type is NodeType.DOCUMENT) == 1


@pytest.mark.unit
@pytest.mark.fuzzing
class TestEscapeFuzzing:
    """Property-based tests for string escaping."""

    @given(st.text())
    def test_escape_round_trips_through_json(self, value: str) -> None:
        """Test escaped text decodes back to the original."""
        assert json.loads(f'"{escape_json(value)}"') == value

    @given(st.text(alphabet=st.characters(min_codepoint=0x20)))
    def test_printable_untouched(self, value: str) -> None:
        """Test characters from U+0020 up are never altered, quote and backslash aside."""
        value = value.replace('"', "").replace("\\", "")
        assert escape_json(value) == value
