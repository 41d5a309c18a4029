#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2json/parsers/events.py
"""Event vocabulary shared by the tokenizer and the tree builder.

The tokenizer reports document structure as a flat, push-style sequence of
callbacks: ``enter_block``/``leave_block`` around block elements,
``enter_span``/``leave_span`` around inline elements, and ``text`` for literal
fragments. The block, span and text categories and the flag names use the
vocabulary of md4c-style push parsers, so a handler written against this module
does not care which tokenizer drives it.

Each callback returns an ``int`` status. Zero means "continue"; any other value
aborts tokenization, and the tokenizer returns that value to its caller.

"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Protocol, Union


class ParserFlags(enum.IntFlag):
    """Tokenizer feature flags."""

    NONE = 0
    COLLAPSE_WHITESPACE = 0x0001
    PERMISSIVE_URL_AUTOLINKS = 0x0004
    PERMISSIVE_EMAIL_AUTOLINKS = 0x0008
    TABLES = 0x0100
    STRIKETHROUGH = 0x0200
    PERMISSIVE_WWW_AUTOLINKS = 0x0400
    TASKLISTS = 0x0800
    LATEX_MATH_SPANS = 0x1000
    WIKILINKS = 0x2000

    PERMISSIVE_AUTOLINKS = PERMISSIVE_URL_AUTOLINKS | PERMISSIVE_EMAIL_AUTOLINKS | PERMISSIVE_WWW_AUTOLINKS


class BlockType(enum.Enum):
    """Block-level structures reported by ``enter_block``/``leave_block``."""

    DOC = "doc"
    QUOTE = "quote"
    UL = "ul"
    OL = "ol"
    LI = "li"
    HR = "hr"
    H = "h"
    CODE = "code"
    HTML = "html"
    P = "p"
    TABLE = "table"
    THEAD = "thead"
    TBODY = "tbody"
    TR = "tr"
    TH = "th"
    TD = "td"


class SpanType(enum.Enum):
    """Inline structures reported by ``enter_span``/``leave_span``."""

    EM = "em"
    STRONG = "strong"
    A = "a"
    IMG = "img"
    CODE = "code"
    DEL = "del"
    LATEXMATH = "latexmath"
    LATEXMATH_DISPLAY = "latexmath_display"
    WIKILINK = "wikilink"
    U = "u"


class TextType(enum.Enum):
    """Kinds of literal fragments reported by ``text``."""

    NORMAL = "normal"
    NULLCHAR = "nullchar"
    BR = "br"
    SOFTBR = "softbr"
    ENTITY = "entity"
    CODE = "code"
    HTML = "html"
    LATEXMATH = "latexmath"


class CellAlign(enum.Enum):
    """Table column alignment taken from the delimiter row."""

    DEFAULT = "default"
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


@dataclass(frozen=True)
class HeadingDetail:
    """Detail for ``BlockType.H``."""

    level: int


@dataclass(frozen=True)
class CodeDetail:
    """Detail for ``BlockType.CODE``.

    ``info`` is the complete info string of a fenced block, ``lang`` its first
    word. Both are empty for indented code blocks.
    """

    info: str = ""
    lang: str = ""
    fence_char: Optional[str] = None


@dataclass(frozen=True)
class UnorderedListDetail:
    """Detail for ``BlockType.UL``."""

    is_tight: bool = True
    mark: str = "-"


@dataclass(frozen=True)
class OrderedListDetail:
    """Detail for ``BlockType.OL``."""

    start: int = 1
    is_tight: bool = True
    mark_delimiter: str = "."


@dataclass(frozen=True)
class ListItemDetail:
    """Detail for ``BlockType.LI``.

    ``task_mark`` is the character between the task brackets (``"x"``,
    ``"X"`` or ``" "``) and is only meaningful when ``is_task`` is true.
    """

    is_task: bool = False
    task_mark: Optional[str] = None


@dataclass(frozen=True)
class TableCellDetail:
    """Detail for ``BlockType.TH`` and ``BlockType.TD``."""

    align: CellAlign = CellAlign.DEFAULT


@dataclass(frozen=True)
class LinkDetail:
    """Detail for ``SpanType.A``."""

    href: str = ""
    title: str = ""


@dataclass(frozen=True)
class ImageDetail:
    """Detail for ``SpanType.IMG``."""

    src: str = ""
    title: str = ""


@dataclass(frozen=True)
class WikiLinkDetail:
    """Detail for ``SpanType.WIKILINK``."""

    target: str = ""


BlockDetail = Union[
    HeadingDetail,
    CodeDetail,
    UnorderedListDetail,
    OrderedListDetail,
    ListItemDetail,
    TableCellDetail,
    None,
]
SpanDetail = Union[LinkDetail, ImageDetail, WikiLinkDetail, None]


class EventHandler(Protocol):
    """Receiver of tokenizer events."""

    def enter_block(self, block_type: BlockType, detail: BlockDetail) -> int: ...

    def leave_block(self, block_type: BlockType, detail: BlockDetail) -> int: ...

    def enter_span(self, span_type: SpanType, detail: SpanDetail) -> int: ...

    def leave_span(self, span_type: SpanType, detail: SpanDetail) -> int: ...

    def text(self, text_type: TextType, text: str) -> int: ...


class EventSource(Protocol):
    """A tokenizer that drives an :class:`EventHandler`."""

    def parse(self, text: str, handler: EventHandler) -> int: ...
