#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Tests for building document trees from tokenizer events."""

import pytest

from md2json.ast import Node, NodeType, TableCellAlign, TreeBuilder
from md2json.ast.builder import STATUS_DEADLINE_EXCEEDED
from md2json.parsers.events import (
    BlockType,
    CellAlign,
    CodeDetail,
    HeadingDetail,
    ImageDetail,
    LinkDetail,
    ListItemDetail,
    OrderedListDetail,
    SpanType,
    TableCellDetail,
    TextType,
    UnorderedListDetail,
    WikiLinkDetail,
)


def child_types(node: Node) -> list[NodeType]:
    return [child.type for child in node.children]


@pytest.mark.unit
class TestTextBuffering:
    """Test coalescing of literal text events."""

    def test_consecutive_text_merges(self, builder: TreeBuilder) -> None:
        """Test consecutive literal events become one text node."""
        builder.enter_block(BlockType.P, None)
        builder.text(TextType.NORMAL, "Hello")
        builder.text(TextType.ENTITY, "&amp;")
        builder.text(TextType.NORMAL, " world")
        builder.leave_block(BlockType.P, None)

        paragraph = builder.finish().children[0]
        assert len(paragraph.children) == 1
        assert paragraph.children[0].content == "Hello&amp; world"

    def test_softbreak_splits_text(self, builder: TreeBuilder) -> None:
        """Test a soft break separates text nodes."""
        builder.enter_block(BlockType.P, None)
        builder.text(TextType.NORMAL, "one")
        builder.text(TextType.SOFTBR, "\n")
        builder.text(TextType.NORMAL, "two")
        builder.leave_block(BlockType.P, None)

        paragraph = builder.finish().children[0]
        assert child_types(paragraph) == [NodeType.TEXT, NodeType.SOFTBREAK, NodeType.TEXT]

    def test_hardbreak_splits_text(self, builder: TreeBuilder) -> None:
        """Test a hard break separates text nodes."""
        builder.enter_block(BlockType.P, None)
        builder.text(TextType.NORMAL, "one")
        builder.text(TextType.BR, "\n")
        builder.text(TextType.NORMAL, "two")
        builder.leave_block(BlockType.P, None)

        paragraph = builder.finish().children[0]
        assert child_types(paragraph) == [NodeType.TEXT, NodeType.HARDBREAK, NodeType.TEXT]
        assert paragraph.children[1].content is None

    def test_span_boundary_splits_text(self, builder: TreeBuilder) -> None:
        """Test text never straddles a span boundary."""
        builder.enter_block(BlockType.P, None)
        builder.text(TextType.NORMAL, "a ")
        builder.enter_span(SpanType.EM, None)
        builder.text(TextType.NORMAL, "b")
        builder.leave_span(SpanType.EM, None)
        builder.text(TextType.NORMAL, " c")
        builder.leave_block(BlockType.P, None)

        paragraph = builder.finish().children[0]
        assert child_types(paragraph) == [NodeType.TEXT, NodeType.EMPHASIS, NodeType.TEXT]
        assert paragraph.children[1].children[0].content == "b"
        assert paragraph.children[2].content == " c"

    def test_nullchar_dropped(self, builder: TreeBuilder) -> None:
        """Test null-character events leave no trace."""
        builder.enter_block(BlockType.P, None)
        builder.text(TextType.NORMAL, "a")
        builder.text(TextType.NULLCHAR, "\x00")
        builder.text(TextType.NORMAL, "b")
        builder.leave_block(BlockType.P, None)

        paragraph = builder.finish().children[0]
        assert len(paragraph.children) == 1
        assert paragraph.children[0].content == "ab"

    def test_finish_flushes_trailing_text(self, builder: TreeBuilder) -> None:
        """Test finish appends text still waiting in the buffer."""
        builder.text(TextType.NORMAL, "tail")

        assert builder.pending_text == "tail"
        root = builder.finish()
        assert root.children[0].content == "tail"
        assert builder.pending_text == ""


@pytest.mark.unit
class TestStackDiscipline:
    """Test nesting and stack underflow handling."""

    def test_document_enter_is_noop(self, builder: TreeBuilder) -> None:
        """Test the root is never pushed twice."""
        builder.enter_block(BlockType.DOC, None)
        assert builder.depth == 1
        builder.leave_block(BlockType.DOC, None)

        root = builder.finish()
        assert root.type is NodeType.DOCUMENT
        assert root.children == []

    def test_nesting(self, builder: TreeBuilder) -> None:
        """Test pushed nodes become children of the current top."""
        builder.enter_block(BlockType.QUOTE, None)
        builder.enter_block(BlockType.P, None)
        assert builder.depth == 3
        assert builder.current.type is NodeType.PARAGRAPH
        builder.leave_block(BlockType.P, None)
        builder.leave_block(BlockType.QUOTE, None)

        quote = builder.finish().children[0]
        assert quote.type is NodeType.BLOCKQUOTE
        assert child_types(quote) == [NodeType.PARAGRAPH]

    def test_extra_leaves_keep_root(self, builder: TreeBuilder) -> None:
        """Test unbalanced leave events never pop or corrupt the root."""
        builder.enter_block(BlockType.P, None)
        builder.text(TextType.NORMAL, "x")
        for _ in range(5):
            assert builder.leave_block(BlockType.P, None) == 0
        assert builder.leave_span(SpanType.EM, None) == 0
        assert builder.leave_block(BlockType.CODE, None) == 0

        root = builder.finish()
        assert builder.depth == 1
        assert builder.current is root
        assert child_types(root) == [NodeType.PARAGRAPH]
        assert root.children[0].children[0].content == "x"

    def test_handlers_return_zero(self, builder: TreeBuilder) -> None:
        """Test every handler reports success without a deadline."""
        assert builder.enter_block(BlockType.P, None) == 0
        assert builder.enter_span(SpanType.STRONG, None) == 0
        assert builder.text(TextType.NORMAL, "x") == 0
        assert builder.leave_span(SpanType.STRONG, None) == 0
        assert builder.leave_block(BlockType.P, None) == 0


@pytest.mark.unit
class TestBlockAttributes:
    """Test attributes derived from block details."""

    def test_heading_level(self, builder: TreeBuilder) -> None:
        """Test heading level comes from the detail."""
        builder.enter_block(BlockType.H, HeadingDetail(level=3))
        builder.leave_block(BlockType.H, HeadingDetail(level=3))

        heading = builder.finish().children[0]
        assert heading.type is NodeType.HEADING
        assert heading.level == 3

    def test_ordered_list(self, builder: TreeBuilder) -> None:
        """Test ordered lists carry ordered and start."""
        detail = OrderedListDetail(start=4)
        builder.enter_block(BlockType.OL, detail)
        builder.leave_block(BlockType.OL, detail)

        node = builder.finish().children[0]
        assert node.type is NodeType.LIST
        assert node.ordered is True
        assert node.start == 4

    def test_unordered_list(self, builder: TreeBuilder) -> None:
        """Test unordered lists carry ordered=False and no start."""
        builder.enter_block(BlockType.UL, UnorderedListDetail())
        builder.leave_block(BlockType.UL, None)

        node = builder.finish().children[0]
        assert node.ordered is False
        assert node.start is None

    @pytest.mark.parametrize("mark,checked", [("x", True), ("X", True), (" ", False)])
    def test_task_list_item(self, builder: TreeBuilder, mark: str, checked: bool) -> None:
        """Test task items switch kind and derive checked from the mark."""
        builder.enter_block(BlockType.LI, ListItemDetail(is_task=True, task_mark=mark))
        builder.leave_block(BlockType.LI, None)

        item = builder.finish().children[0]
        assert item.type is NodeType.TASK_LIST_ITEM
        assert item.checked is checked

    def test_plain_list_item(self, builder: TreeBuilder) -> None:
        """Test non-task items stay list_item without checked."""
        builder.enter_block(BlockType.LI, ListItemDetail())
        builder.leave_block(BlockType.LI, None)

        item = builder.finish().children[0]
        assert item.type is NodeType.LIST_ITEM
        assert item.checked is None

    @pytest.mark.parametrize(
        "block_type,align,expected_align,is_header",
        [
            (BlockType.TH, CellAlign.LEFT, TableCellAlign.LEFT, True),
            (BlockType.TD, CellAlign.RIGHT, TableCellAlign.RIGHT, False),
            (BlockType.TD, CellAlign.CENTER, TableCellAlign.CENTER, False),
            (BlockType.TH, CellAlign.DEFAULT, TableCellAlign.DEFAULT, True),
        ],
    )
    def test_table_cells(
        self,
        builder: TreeBuilder,
        block_type: BlockType,
        align: CellAlign,
        expected_align: TableCellAlign,
        is_header: bool,
    ) -> None:
        """Test cells carry header flag and alignment."""
        builder.enter_block(block_type, TableCellDetail(align=align))
        builder.leave_block(block_type, None)

        cell = builder.finish().children[0]
        assert cell.type is NodeType.TABLE_CELL
        assert cell.is_header is is_header
        assert cell.align is expected_align

    def test_cell_without_detail_is_default(self, builder: TreeBuilder) -> None:
        """Test a missing alignment maps to DEFAULT."""
        builder.enter_block(BlockType.TD, None)
        builder.leave_block(BlockType.TD, None)

        assert builder.finish().children[0].align is TableCellAlign.DEFAULT

    def test_table_structure(self, builder: TreeBuilder) -> None:
        """Test table sections map to their node kinds."""
        for block_type in (BlockType.TABLE, BlockType.THEAD, BlockType.TR):
            builder.enter_block(block_type, None)
        builder.leave_block(BlockType.TR, None)
        builder.leave_block(BlockType.THEAD, None)
        builder.enter_block(BlockType.TBODY, None)
        builder.leave_block(BlockType.TBODY, None)
        builder.leave_block(BlockType.TABLE, None)

        table = builder.finish().children[0]
        assert table.type is NodeType.TABLE
        assert child_types(table) == [NodeType.TABLE_HEAD, NodeType.TABLE_BODY]
        assert child_types(table.children[0]) == [NodeType.TABLE_ROW]

    def test_thematic_break(self, builder: TreeBuilder) -> None:
        """Test horizontal rules become thematic_break leaves."""
        builder.enter_block(BlockType.HR, None)
        builder.leave_block(BlockType.HR, None)

        node = builder.finish().children[0]
        assert node.type is NodeType.THEMATIC_BREAK
        assert node.children == []


@pytest.mark.unit
class TestRawBlocks:
    """Test code and html block body capture."""

    def test_code_block_content(self, builder: TreeBuilder) -> None:
        """Test code text moves into content with the language set."""
        detail = CodeDetail(info="python title=x", lang="python", fence_char="`")
        builder.enter_block(BlockType.CODE, detail)
        builder.text(TextType.CODE, "print(1)\n")
        builder.text(TextType.CODE, "print(2)\n")
        builder.leave_block(BlockType.CODE, detail)

        code = builder.finish().children[0]
        assert code.type is NodeType.CODE_BLOCK
        assert code.language == "python"
        assert code.content == "print(1)\nprint(2)\n"
        assert code.children == []

    def test_code_block_without_language(self, builder: TreeBuilder) -> None:
        """Test an empty info string leaves language unset."""
        builder.enter_block(BlockType.CODE, CodeDetail())
        builder.text(TextType.CODE, "x\n")
        builder.leave_block(BlockType.CODE, None)

        assert builder.finish().children[0].language is None

    def test_empty_code_block(self, builder: TreeBuilder) -> None:
        """Test an empty body leaves content unset."""
        builder.enter_block(BlockType.CODE, CodeDetail(lang="sh"))
        builder.leave_block(BlockType.CODE, None)

        code = builder.finish().children[0]
        assert code.content is None
        assert code.children == []

    def test_breaks_inside_raw_block_stay_text(self, builder: TreeBuilder) -> None:
        """Test break events inside a raw block become newlines in the body."""
        builder.enter_block(BlockType.HTML, None)
        builder.text(TextType.HTML, "<div>")
        builder.text(TextType.SOFTBR, "\n")
        builder.text(TextType.HTML, "</div>")
        builder.leave_block(BlockType.HTML, None)

        html = builder.finish().children[0]
        assert html.type is NodeType.HTML_BLOCK
        assert html.content == "<div>\n</div>"
        assert html.children == []

    def test_breaks_after_raw_block_are_nodes(self, builder: TreeBuilder) -> None:
        """Test raw capture ends with its block."""
        builder.enter_block(BlockType.HTML, None)
        builder.text(TextType.HTML, "<hr>")
        builder.leave_block(BlockType.HTML, None)
        builder.enter_block(BlockType.P, None)
        builder.text(TextType.NORMAL, "a")
        builder.text(TextType.SOFTBR, "\n")
        builder.leave_block(BlockType.P, None)

        paragraph = builder.finish().children[1]
        assert child_types(paragraph) == [NodeType.TEXT, NodeType.SOFTBREAK]

    def test_unbalanced_raw_block_close_ends_capture(self, builder: TreeBuilder) -> None:
        """Test a code block closed by a mismatched leave does not capture later breaks."""
        builder.enter_block(BlockType.CODE, CodeDetail())
        builder.enter_span(SpanType.EM, None)
        builder.leave_block(BlockType.CODE, None)
        builder.leave_block(BlockType.P, None)
        builder.enter_block(BlockType.P, None)
        builder.text(TextType.NORMAL, "a")
        builder.text(TextType.SOFTBR, "\n")
        builder.text(TextType.BR, "\n")
        builder.leave_block(BlockType.P, None)

        paragraph = builder.finish().children[1]
        assert paragraph.type is NodeType.PARAGRAPH
        assert child_types(paragraph) == [NodeType.TEXT, NodeType.SOFTBREAK, NodeType.HARDBREAK]


@pytest.mark.unit
class TestSpans:
    """Test inline span handling."""

    def test_link_attributes(self, builder: TreeBuilder) -> None:
        """Test links carry href and title."""
        detail = LinkDetail(href="https://example.com", title="Example")
        builder.enter_span(SpanType.A, detail)
        builder.text(TextType.NORMAL, "site")
        builder.leave_span(SpanType.A, detail)

        link = builder.finish().children[0]
        assert link.type is NodeType.LINK
        assert link.href == "https://example.com"
        assert link.title == "Example"
        assert link.children[0].content == "site"

    def test_link_empty_title_unset(self, builder: TreeBuilder) -> None:
        """Test an empty title is not recorded."""
        builder.enter_span(SpanType.A, LinkDetail(href="/x"))
        builder.leave_span(SpanType.A, None)

        assert builder.finish().children[0].title is None

    def test_image_alt_from_nested_text(self, builder: TreeBuilder) -> None:
        """Test image alt collects text at any nesting depth and children are dropped."""
        builder.enter_span(SpanType.IMG, ImageDetail(src="cat.png", title="Cat"))
        builder.text(TextType.NORMAL, "a ")
        builder.enter_span(SpanType.EM, None)
        builder.text(TextType.NORMAL, "very ")
        builder.enter_span(SpanType.STRONG, None)
        builder.text(TextType.NORMAL, "fluffy")
        builder.leave_span(SpanType.STRONG, None)
        builder.leave_span(SpanType.EM, None)
        builder.text(TextType.NORMAL, " cat")
        builder.leave_span(SpanType.IMG, None)

        image = builder.finish().children[0]
        assert image.type is NodeType.IMAGE
        assert image.src == "cat.png"
        assert image.title == "Cat"
        assert image.alt == "a very fluffy cat"
        assert image.children == []

    def test_image_without_alt(self, builder: TreeBuilder) -> None:
        """Test an empty description leaves alt unset."""
        builder.enter_span(SpanType.IMG, ImageDetail(src="x.png"))
        builder.leave_span(SpanType.IMG, None)

        image = builder.finish().children[0]
        assert image.alt is None
        assert image.children == []

    def test_wiki_link_target(self, builder: TreeBuilder) -> None:
        """Test wiki links store the target as href."""
        builder.enter_span(SpanType.WIKILINK, WikiLinkDetail(target="Home Page"))
        builder.text(TextType.NORMAL, "home")
        builder.leave_span(SpanType.WIKILINK, None)

        link = builder.finish().children[0]
        assert link.type is NodeType.WIKI_LINK
        assert link.href == "Home Page"

    @pytest.mark.parametrize(
        "span_type,node_type",
        [
            (SpanType.EM, NodeType.EMPHASIS),
            (SpanType.STRONG, NodeType.STRONG),
            (SpanType.DEL, NodeType.STRIKETHROUGH),
            (SpanType.U, NodeType.UNDERLINE),
            (SpanType.CODE, NodeType.CODE_INLINE),
            (SpanType.LATEXMATH, NodeType.MATH_INLINE),
            (SpanType.LATEXMATH_DISPLAY, NodeType.MATH_BLOCK),
        ],
    )
    def test_span_kinds(self, builder: TreeBuilder, span_type: SpanType, node_type: NodeType) -> None:
        """Test span kinds map onto node kinds."""
        builder.enter_span(span_type, None)
        builder.text(TextType.NORMAL, "x")
        builder.leave_span(span_type, None)

        node = builder.finish().children[0]
        assert node.type is node_type
        assert node.children[0].content == "x"


@pytest.mark.unit
class TestDeadline:
    """Test deadline enforcement inside the handlers."""

    def test_before_deadline(self, make_builder, fake_clock) -> None:
        """Test handlers succeed until the deadline passes."""
        builder = make_builder(1.0)

        assert builder.enter_block(BlockType.P, None) == 0
        fake_clock.advance(0.5)
        assert builder.text(TextType.NORMAL, "x") == 0
        assert not builder.deadline_exceeded

    def test_after_deadline_every_handler_aborts(self, make_builder, fake_clock) -> None:
        """Test every handler returns the abort status once the deadline passed."""
        builder = make_builder(1.0)
        builder.enter_block(BlockType.P, None)
        fake_clock.advance(2.0)

        assert builder.text(TextType.NORMAL, "x") == STATUS_DEADLINE_EXCEEDED
        assert builder.enter_span(SpanType.EM, None) == STATUS_DEADLINE_EXCEEDED
        assert builder.leave_span(SpanType.EM, None) == STATUS_DEADLINE_EXCEEDED
        assert builder.enter_block(BlockType.P, None) == STATUS_DEADLINE_EXCEEDED
        assert builder.leave_block(BlockType.P, None) == STATUS_DEADLINE_EXCEEDED
        assert builder.deadline_exceeded

    def test_deadline_is_sticky(self, make_builder, fake_clock) -> None:
        """Test the builder stays aborted even if the clock goes back."""
        builder = make_builder(1.0)
        fake_clock.advance(5.0)
        builder.enter_block(BlockType.P, None)
        fake_clock.now = 0.0

        assert builder.text(TextType.NORMAL, "x") == STATUS_DEADLINE_EXCEEDED

    def test_no_deadline_never_aborts(self, fake_clock) -> None:
        """Test a builder without a deadline ignores the clock."""
        builder = TreeBuilder(clock=fake_clock)
        fake_clock.advance(1e9)

        assert builder.enter_block(BlockType.P, None) == 0
        assert not builder.deadline_exceeded
