#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2json/ast/builder.py
"""Event-driven construction of the document tree.

:class:`TreeBuilder` is the :class:`~md2json.parsers.events.EventHandler` the
tokenizer drives during a parse. It keeps a stack of open nodes whose bottom is
always the document root, and a buffer that coalesces consecutive literal text
events into a single text node.

Rules the builder maintains:

- Pending text is flushed before any structural or break event, so a text node
  never straddles an element boundary.
- A pushed node is appended to the current top's children before it becomes
  the new top.
- Leave events never pop the root, however unbalanced the event stream.

"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from md2json.ast.nodes import Node, NodeType, TableCellAlign
from md2json.parsers.events import (
    BlockDetail,
    BlockType,
    CellAlign,
    CodeDetail,
    HeadingDetail,
    ImageDetail,
    LinkDetail,
    ListItemDetail,
    OrderedListDetail,
    SpanDetail,
    SpanType,
    TableCellDetail,
    TextType,
    WikiLinkDetail,
)

logger = logging.getLogger(__name__)

# Status returned to the tokenizer to abort once the deadline has passed
STATUS_DEADLINE_EXCEEDED = -1

BLOCK_NODE_TYPES: dict[BlockType, NodeType] = {
    BlockType.DOC: NodeType.DOCUMENT,
    BlockType.QUOTE: NodeType.BLOCKQUOTE,
    BlockType.UL: NodeType.LIST,
    BlockType.OL: NodeType.LIST,
    BlockType.LI: NodeType.LIST_ITEM,
    BlockType.HR: NodeType.THEMATIC_BREAK,
    BlockType.H: NodeType.HEADING,
    BlockType.CODE: NodeType.CODE_BLOCK,
    BlockType.HTML: NodeType.HTML_BLOCK,
    BlockType.P: NodeType.PARAGRAPH,
    BlockType.TABLE: NodeType.TABLE,
    BlockType.THEAD: NodeType.TABLE_HEAD,
    BlockType.TBODY: NodeType.TABLE_BODY,
    BlockType.TR: NodeType.TABLE_ROW,
    BlockType.TH: NodeType.TABLE_CELL,
    BlockType.TD: NodeType.TABLE_CELL,
}

SPAN_NODE_TYPES: dict[SpanType, NodeType] = {
    SpanType.EM: NodeType.EMPHASIS,
    SpanType.STRONG: NodeType.STRONG,
    SpanType.A: NodeType.LINK,
    SpanType.IMG: NodeType.IMAGE,
    SpanType.CODE: NodeType.CODE_INLINE,
    SpanType.DEL: NodeType.STRIKETHROUGH,
    SpanType.LATEXMATH: NodeType.MATH_INLINE,
    SpanType.LATEXMATH_DISPLAY: NodeType.MATH_BLOCK,
    SpanType.WIKILINK: NodeType.WIKI_LINK,
    SpanType.U: NodeType.UNDERLINE,
}

CELL_ALIGNMENTS: dict[CellAlign, TableCellAlign] = {
    CellAlign.DEFAULT: TableCellAlign.DEFAULT,
    CellAlign.LEFT: TableCellAlign.LEFT,
    CellAlign.CENTER: TableCellAlign.CENTER,
    CellAlign.RIGHT: TableCellAlign.RIGHT,
}

# Blocks whose body is captured into ``content`` instead of child text nodes
RAW_CAPTURE_BLOCKS = frozenset({BlockType.CODE, BlockType.HTML})
RAW_CAPTURE_NODE_TYPES = frozenset(BLOCK_NODE_TYPES[block_type] for block_type in RAW_CAPTURE_BLOCKS)

LITERAL_TEXT_TYPES = frozenset({TextType.NORMAL, TextType.CODE, TextType.LATEXMATH, TextType.HTML, TextType.ENTITY})


def cell_align_from_detail(align: object) -> TableCellAlign:
    """Map a tokenizer alignment to a cell alignment; anything unknown is DEFAULT."""
    if isinstance(align, CellAlign):
        return CELL_ALIGNMENTS[align]
    return TableCellAlign.DEFAULT


class TreeBuilder:
    """Build a document tree from tokenizer events.

    One builder serves exactly one parse; it must not be reused or shared.

    Parameters
    ----------
    deadline : float or None, default = None
        Absolute time, on ``clock``'s scale, after which every handler returns
        a non-zero status so the tokenizer aborts. None disables the check.
    clock : callable, default = time.monotonic
        Source of the current time for the deadline check

    Examples
    --------
    >>> builder = TreeBuilder()
    >>> builder.enter_block(BlockType.P, None)
    0
    >>> builder.text(TextType.NORMAL, "Hello")
    0
    >>> builder.leave_block(BlockType.P, None)
    0
    >>> builder.finish().children[0].children[0].content
    'Hello'

    """

    def __init__(self, deadline: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        """Create a builder holding a fresh document root."""
        self.root = Node(NodeType.DOCUMENT)
        self._stack: list[Node] = [self.root]
        self._pending_text: list[str] = []
        self._deadline = deadline
        self._clock = clock
        self.deadline_exceeded = False

    @property
    def current(self) -> Node:
        """The innermost open node."""
        return self._stack[-1]

    @property
    def depth(self) -> int:
        """Number of open nodes, the root included."""
        return len(self._stack)

    @property
    def pending_text(self) -> str:
        """Literal text buffered since the last flush."""
        return "".join(self._pending_text)

    def flush_pending_text(self) -> None:
        """Append buffered text to the current node as one text node."""
        if not self._pending_text:
            return
        content = "".join(self._pending_text)
        self._pending_text.clear()
        if content:
            self.current.add_child(Node(NodeType.TEXT, content=content))

    def finish(self) -> Node:
        """Flush trailing text and return the document root."""
        self.flush_pending_text()
        return self.root

    def _push(self, node: Node) -> None:
        self.current.add_child(node)
        self._stack.append(node)

    def _pop(self) -> Optional[Node]:
        if len(self._stack) > 1:
            return self._stack.pop()
        logger.debug("Ignoring leave event with only the document root open")
        return None

    def _check_deadline(self) -> int:
        if self._deadline is None:
            return 0
        if self.deadline_exceeded or self._clock() > self._deadline:
            if not self.deadline_exceeded:
                logger.warning("Parse deadline exceeded while building the document tree")
            self.deadline_exceeded = True
            return STATUS_DEADLINE_EXCEEDED
        return 0

    # ------------------------------------------------------------------
    # Block events
    # ------------------------------------------------------------------

    def enter_block(self, block_type: BlockType, detail: BlockDetail) -> int:
        status = self._check_deadline()
        if status:
            return status
        self.flush_pending_text()

        # The root already exists and is never pushed twice
        if block_type is BlockType.DOC:
            return 0

        node = Node(BLOCK_NODE_TYPES[block_type])

        if block_type is BlockType.H and isinstance(detail, HeadingDetail):
            node.level = detail.level
        elif block_type is BlockType.CODE:
            if isinstance(detail, CodeDetail) and detail.lang:
                node.language = detail.lang
        elif block_type is BlockType.OL:
            node.ordered = True
            node.start = detail.start if isinstance(detail, OrderedListDetail) else 1
        elif block_type is BlockType.UL:
            node.ordered = False
        elif block_type is BlockType.LI:
            if isinstance(detail, ListItemDetail) and detail.is_task:
                node.type = NodeType.TASK_LIST_ITEM
                node.checked = detail.task_mark in ("x", "X")
        elif block_type in (BlockType.TH, BlockType.TD):
            node.is_header = block_type is BlockType.TH
            node.align = cell_align_from_detail(detail.align if isinstance(detail, TableCellDetail) else None)

        self._push(node)
        return 0

    def leave_block(self, block_type: BlockType, detail: BlockDetail) -> int:
        status = self._check_deadline()
        if status:
            return status

        if block_type is BlockType.DOC:
            self.flush_pending_text()
            return 0

        node = self.current
        if block_type in RAW_CAPTURE_BLOCKS and node.type is BLOCK_NODE_TYPES[block_type]:
            self._capture_raw_body(node)
        else:
            self.flush_pending_text()

        self._pop()
        return 0

    def _capture_raw_body(self, node: Node) -> None:
        """Move the block body into ``content`` so the node stays a leaf."""
        parts = [child.content for child in node.children if child.type is NodeType.TEXT and child.content]
        parts.extend(self._pending_text)
        self._pending_text.clear()
        node.children.clear()
        body = "".join(parts)
        if body:
            node.content = body

    # ------------------------------------------------------------------
    # Span events
    # ------------------------------------------------------------------

    def enter_span(self, span_type: SpanType, detail: SpanDetail) -> int:
        status = self._check_deadline()
        if status:
            return status
        self.flush_pending_text()

        node = Node(SPAN_NODE_TYPES[span_type])

        if span_type is SpanType.A and isinstance(detail, LinkDetail):
            if detail.href:
                node.href = detail.href
            if detail.title:
                node.title = detail.title
        elif span_type is SpanType.IMG and isinstance(detail, ImageDetail):
            if detail.src:
                node.src = detail.src
            if detail.title:
                node.title = detail.title
        elif span_type is SpanType.WIKILINK and isinstance(detail, WikiLinkDetail):
            if detail.target:
                node.href = detail.target

        self._push(node)
        return 0

    def leave_span(self, span_type: SpanType, detail: SpanDetail) -> int:
        status = self._check_deadline()
        if status:
            return status
        self.flush_pending_text()

        node = self.current
        if span_type is SpanType.IMG and node.type is NodeType.IMAGE:
            alt_text = "".join(node.iter_text())
            if alt_text:
                node.alt = alt_text
            node.children.clear()

        self._pop()
        return 0

    # ------------------------------------------------------------------
    # Text events
    # ------------------------------------------------------------------

    def text(self, text_type: TextType, text: str) -> int:
        status = self._check_deadline()
        if status:
            return status

        if text_type in LITERAL_TEXT_TYPES:
            self._pending_text.append(text)
        elif self.current.type in RAW_CAPTURE_NODE_TYPES and text_type in (TextType.SOFTBR, TextType.BR):
            # Raw block bodies stay verbatim
            self._pending_text.append("\n")
        elif text_type is TextType.SOFTBR:
            self.flush_pending_text()
            self.current.add_child(Node(NodeType.SOFTBREAK))
        elif text_type is TextType.BR:
            self.flush_pending_text()
            self.current.add_child(Node(NodeType.HARDBREAK))
        # NULLCHAR fragments are dropped
        return 0
