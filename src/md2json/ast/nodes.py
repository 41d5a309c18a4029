#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2json/ast/nodes.py
"""Document tree nodes and parse results.

Every element of a parsed document is a :class:`Node`: a node kind plus an
ordered list of owned children and a handful of optional scalar attributes.
Only the attributes relevant to a kind are ever set, which keeps the shape of
the encoded output uniform across kinds.

Node Kinds
----------
Block-level kinds:
    - document, paragraph, heading, blockquote
    - list, list_item, task_list_item, thematic_break
    - code_block, html_block, math_block
    - table, table_head, table_body, table_row, table_cell

Inline kinds:
    - text, emphasis, strong, strikethrough, underline
    - link, image, wiki_link, code_inline, math_inline
    - softbreak, hardbreak

Attributes
----------
``content``
    Leaf text, or the raw body of a code/html block.
``level``
    Heading level (1-6).
``href``, ``src``, ``alt``, ``title``
    Link and image targets and text.
``language``
    Fenced code block language.
``ordered``, ``start``
    List containers.
``checked``
    Task list items.
``align``, ``is_header``
    Table cells.

"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterator, Optional

from md2json.constants import EMPTY_DOCUMENT_JSON, FAILED_PARSE_JSON
from md2json.exceptions import InputTooLargeError, TokenizeError


class NodeType(str, enum.Enum):
    """Kinds of document tree node."""

    DOCUMENT = "document"
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    BLOCKQUOTE = "blockquote"
    LIST = "list"
    LIST_ITEM = "list_item"
    TASK_LIST_ITEM = "task_list_item"
    THEMATIC_BREAK = "thematic_break"
    CODE_BLOCK = "code_block"
    HTML_BLOCK = "html_block"
    TABLE = "table"
    TABLE_HEAD = "table_head"
    TABLE_BODY = "table_body"
    TABLE_ROW = "table_row"
    TABLE_CELL = "table_cell"
    TEXT = "text"
    EMPHASIS = "emphasis"
    STRONG = "strong"
    LINK = "link"
    IMAGE = "image"
    CODE_INLINE = "code_inline"
    STRIKETHROUGH = "strikethrough"
    UNDERLINE = "underline"
    MATH_INLINE = "math_inline"
    MATH_BLOCK = "math_block"
    WIKI_LINK = "wiki_link"
    SOFTBREAK = "softbreak"
    HARDBREAK = "hardbreak"


class TableCellAlign(enum.Enum):
    """Alignment of a table cell."""

    DEFAULT = "default"
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


# Kinds that hold scalar content and never structural children
LEAF_TYPES = frozenset(
    {
        NodeType.TEXT,
        NodeType.IMAGE,
        NodeType.CODE_BLOCK,
        NodeType.HTML_BLOCK,
        NodeType.SOFTBREAK,
        NodeType.HARDBREAK,
        NodeType.THEMATIC_BREAK,
    }
)


@dataclass
class Node:
    """A node of the document tree.

    Parameters
    ----------
    type : NodeType
        Node kind
    children : list of Node, default = empty list
        Owned child nodes in document order
    content : str or None, default = None
        Leaf text or captured raw block body
    level : int or None, default = None
        Heading level (1-6)
    href : str or None, default = None
        Link or wiki link target
    src : str or None, default = None
        Image source
    alt : str or None, default = None
        Image alternative text
    title : str or None, default = None
        Link or image title
    language : str or None, default = None
        Fenced code block language
    ordered : bool or None, default = None
        Whether a list is ordered
    start : int or None, default = None
        First number of an ordered list
    checked : bool or None, default = None
        Task list item state
    align : TableCellAlign or None, default = None
        Table cell alignment
    is_header : bool or None, default = None
        Whether a table cell belongs to the header row

    """

    type: NodeType
    children: list[Node] = field(default_factory=list)
    content: Optional[str] = None
    level: Optional[int] = None
    href: Optional[str] = None
    src: Optional[str] = None
    alt: Optional[str] = None
    title: Optional[str] = None
    language: Optional[str] = None
    ordered: Optional[bool] = None
    start: Optional[int] = None
    checked: Optional[bool] = None
    align: Optional[TableCellAlign] = None
    is_header: Optional[bool] = None

    def add_child(self, child: Node) -> Node:
        """Append ``child`` as the last child and return it."""
        self.children.append(child)
        return child

    @property
    def is_leaf(self) -> bool:
        """Whether this node's kind never holds structural children."""
        return self.type in LEAF_TYPES

    def iter_text(self) -> Iterator[str]:
        """Yield the content of every text node below this one, in document order."""
        for child in self.children:
            if child.type is NodeType.TEXT:
                if child.content:
                    yield child.content
            else:
                yield from child.iter_text()

    def walk(self) -> Iterator[Node]:
        """Yield this node and all of its descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()


class ErrorKind(enum.Enum):
    """Recoverable parse failure categories."""

    INPUT_TOO_LARGE = "InputTooLarge"
    TOKENIZE_FAILURE = "TokenizeFailure"


@dataclass(frozen=True)
class ParseError:
    """Description of a failed parse.

    ``line`` and ``column`` are part of the result shape but are only filled
    in when the tokenizer reports a position.
    """

    message: str
    kind: ErrorKind = ErrorKind.TOKENIZE_FAILURE
    line: Optional[int] = None
    column: Optional[int] = None


@dataclass
class ParseResult:
    """Outcome of :func:`md2json.api.parse`.

    Parameters
    ----------
    success : bool
        Whether parsing succeeded
    root : Node or None
        The document root on success
    error : ParseError or None
        The failure description otherwise
    empty_input : bool, default = False
        Set by the empty-input fast path; the encoded form then carries an
        explicit empty ``children`` array

    """

    success: bool
    root: Optional[Node] = None
    error: Optional[ParseError] = None
    empty_input: bool = False

    @classmethod
    def succeeded(cls, root: Node, empty_input: bool = False) -> ParseResult:
        return cls(success=True, root=root, empty_input=empty_input)

    @classmethod
    def failed(cls, message: str, kind: ErrorKind = ErrorKind.TOKENIZE_FAILURE) -> ParseResult:
        return cls(success=False, error=ParseError(message=message, kind=kind))

    @property
    def nodes(self) -> list[Node]:
        """Top-level nodes: the root on success, nothing on failure."""
        return [self.root] if self.success and self.root is not None else []

    def to_json(self) -> str:
        """Encode the top-level node list as compact JSON text.

        Returns
        -------
        str
            ``[<root>]`` on success, ``[]`` on failure

        """
        from md2json.ast.serialization import encode_nodes

        if not self.success:
            return FAILED_PARSE_JSON
        if self.empty_input:
            return EMPTY_DOCUMENT_JSON
        return encode_nodes(self.nodes)

    def raise_for_error(self) -> None:
        """Raise the exception matching a failed result; do nothing on success.

        Raises
        ------
        InputTooLargeError
            If the input was rejected for its size
        TokenizeError
            If the tokenizer did not complete

        """
        if self.success or self.error is None:
            return
        if self.error.kind is ErrorKind.INPUT_TOO_LARGE:
            raise InputTooLargeError(self.error.message)
        raise TokenizeError(self.error.message, line=self.error.line, column=self.error.column)
