#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2json/parsers/markdown.py
"""Markdown tokenizer driving the event protocol.

This module runs the mistune parser and replays its token tree as the
push-style event sequence defined in :mod:`md2json.parsers.events`. The tree
builder never sees mistune tokens; it only receives ``enter_block``,
``leave_block``, ``enter_span``, ``leave_span`` and ``text`` callbacks.

Replaying a token tree (rather than hooking a renderer) keeps the event order
identical to a single depth-first pass over the document: every element is
entered, its contents are emitted, and then it is left.

"""

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Callable, Generator, Optional

from md2json.constants import DEPS_MARKDOWN
from md2json.parsers.events import (
    BlockDetail,
    BlockType,
    CellAlign,
    CodeDetail,
    EventHandler,
    HeadingDetail,
    ImageDetail,
    LinkDetail,
    ListItemDetail,
    OrderedListDetail,
    ParserFlags,
    SpanDetail,
    SpanType,
    TableCellDetail,
    TextType,
    UnorderedListDetail,
    WikiLinkDetail,
)
from md2json.utils.decorators import requires_dependencies

if TYPE_CHECKING:
    from mistune import Markdown
    from mistune.core import InlineState
    from mistune.inline_parser import InlineParser

logger = logging.getLogger(__name__)

WIKI_LINK_PATTERN = r"\[\[(?P<wiki_target>[^\[\]|\n]+)(?:\|(?P<wiki_label>[^\[\]\n]+))?\]\]"

_WHITESPACE_RUN = re.compile(r"[ \t\n\v\f\r]+")

_ALIGNMENTS = {
    "left": CellAlign.LEFT,
    "center": CellAlign.CENTER,
    "right": CellAlign.RIGHT,
}

# Plugins enabled by each flag, in registration order
_FLAG_PLUGINS: tuple[tuple[ParserFlags, tuple[Any, ...]], ...] = (
    (
        ParserFlags.TABLES,
        ("table", "mistune.plugins.table.table_in_quote", "mistune.plugins.table.table_in_list"),
    ),
    (ParserFlags.STRIKETHROUGH, ("strikethrough",)),
    (ParserFlags.TASKLISTS, ("task_lists",)),
    (ParserFlags.PERMISSIVE_URL_AUTOLINKS, ("url",)),
    (
        ParserFlags.LATEX_MATH_SPANS,
        ("math", "mistune.plugins.math.math_in_quote", "mistune.plugins.math.math_in_list"),
    ),
)


def parse_wiki_link(inline: "InlineParser", m: re.Match[str], state: "InlineState") -> int:
    """Turn ``[[target]]`` or ``[[target|label]]`` into a ``wiki_link`` token."""
    target = m.group("wiki_target").strip()
    label = m.group("wiki_label")
    if not target:
        inline.process_text(m.group(0), state)
        return m.end()

    label_state = state.copy()
    label_state.src = label.strip() if label and label.strip() else target
    label_state.in_link = True
    state.append_token(
        {
            "type": "wiki_link",
            "children": inline.render(label_state),
            "attrs": {"target": target},
        }
    )
    return m.end()


def wiki_links(md: "Markdown") -> None:
    """A mistune plugin to support wiki links.

    .. code-block:: text

        See [[Home]] or [[Getting Started|the guide]].

    :param md: Markdown instance
    """
    md.inline.register("wiki_link", WIKI_LINK_PATTERN, parse_wiki_link, before="link")


class TokenizerAbort(Exception):
    """Raised inside the replay when a handler returns a non-zero status."""

    def __init__(self, status: int):
        super().__init__(f"Event handler aborted with status {status}")
        self.status = status


class _EventEmitter:
    """Replays one mistune token tree into one handler."""

    def __init__(self, handler: EventHandler, collapse_whitespace: bool):
        self.handler = handler
        self.collapse_whitespace = collapse_whitespace
        self._block_handlers: dict[str, Callable[[dict[str, Any]], None]] = {
            "paragraph": self._paragraph,
            "block_text": self._block_text,
            "heading": self._heading,
            "block_code": self._code_block,
            "block_quote": self._block_quote,
            "list": self._list,
            "list_item": self._list_item,
            "task_list_item": self._list_item,
            "thematic_break": self._thematic_break,
            "block_html": self._html_block,
            "table": self._table,
            "block_math": self._display_math_block,
        }
        self._inline_handlers: dict[str, Callable[[dict[str, Any]], None]] = {
            "text": self._text,
            "softbreak": self._softbreak,
            "linebreak": self._linebreak,
            "codespan": self._codespan,
            "emphasis": self._simple_span(SpanType.EM),
            "strong": self._simple_span(SpanType.STRONG),
            "strikethrough": self._simple_span(SpanType.DEL),
            "link": self._link,
            "image": self._image,
            "inline_html": self._inline_html,
            "inline_math": self._inline_math,
            "block_math": self._display_math_span,
            "wiki_link": self._wiki_link,
        }

    # ------------------------------------------------------------------
    # Event plumbing
    # ------------------------------------------------------------------

    @staticmethod
    def _check(status: int) -> None:
        if status:
            raise TokenizerAbort(status)

    @contextmanager
    def _block(self, block_type: BlockType, detail: BlockDetail = None) -> Generator[None, None, None]:
        self._check(self.handler.enter_block(block_type, detail))
        yield
        self._check(self.handler.leave_block(block_type, detail))

    @contextmanager
    def _span(self, span_type: SpanType, detail: SpanDetail = None) -> Generator[None, None, None]:
        self._check(self.handler.enter_span(span_type, detail))
        yield
        self._check(self.handler.leave_span(span_type, detail))

    def _emit_text(self, text_type: TextType, text: str) -> None:
        self._check(self.handler.text(text_type, text))

    def emit_document(self, tokens: list[dict[str, Any]]) -> None:
        with self._block(BlockType.DOC):
            self.emit_blocks(tokens)

    def emit_blocks(self, tokens: list[dict[str, Any]]) -> None:
        for token in tokens:
            token_type = token.get("type", "")
            handler = self._block_handlers.get(token_type)
            if handler is not None:
                handler(token)
            elif token_type != "blank_line":
                logger.debug(f"Skipping unsupported block token: {token_type}")

    def emit_inlines(self, tokens: list[dict[str, Any]]) -> None:
        for token in tokens:
            token_type = token.get("type", "")
            handler = self._inline_handlers.get(token_type)
            if handler is not None:
                handler(token)
            else:
                logger.debug(f"Skipping unsupported inline token: {token_type}")

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def _paragraph(self, token: dict[str, Any]) -> None:
        with self._block(BlockType.P):
            self.emit_inlines(_children(token))

    def _block_text(self, token: dict[str, Any]) -> None:
        # Tight list items carry their inline content without a paragraph
        self.emit_inlines(_children(token))

    def _heading(self, token: dict[str, Any]) -> None:
        level = _attrs(token).get("level", 1)
        if not isinstance(level, int) or level < 1 or level > 6:
            level = 1
        with self._block(BlockType.H, HeadingDetail(level=level)):
            self.emit_inlines(_children(token))

    def _code_block(self, token: dict[str, Any]) -> None:
        info = (_attrs(token).get("info") or "").strip()
        lang = info.split(maxsplit=1)[0] if info else ""
        marker = token.get("marker") or ""
        detail = CodeDetail(info=info, lang=lang, fence_char=marker[:1] or None)
        with self._block(BlockType.CODE, detail):
            raw = token.get("raw", "")
            if raw:
                # Indented blocks arrive without their final line terminator
                if not raw.endswith("\n"):
                    raw += "\n"
                self._emit_text(TextType.CODE, raw)

    def _block_quote(self, token: dict[str, Any]) -> None:
        with self._block(BlockType.QUOTE):
            self.emit_blocks(_children(token))

    def _list(self, token: dict[str, Any]) -> None:
        attrs = _attrs(token)
        tight = bool(token.get("tight", True))
        bullet = token.get("bullet") or ""
        detail: BlockDetail
        if attrs.get("ordered"):
            block_type = BlockType.OL
            detail = OrderedListDetail(start=int(attrs.get("start", 1)), is_tight=tight, mark_delimiter=bullet or ".")
        else:
            block_type = BlockType.UL
            detail = UnorderedListDetail(is_tight=tight, mark=bullet or "-")
        with self._block(block_type, detail):
            self.emit_blocks(_children(token))

    def _list_item(self, token: dict[str, Any]) -> None:
        if token.get("type") == "task_list_item":
            checked = bool(_attrs(token).get("checked"))
            detail = ListItemDetail(is_task=True, task_mark="x" if checked else " ")
        else:
            detail = ListItemDetail()
        with self._block(BlockType.LI, detail):
            self.emit_blocks(_children(token))

    def _thematic_break(self, token: dict[str, Any]) -> None:
        with self._block(BlockType.HR):
            pass

    def _html_block(self, token: dict[str, Any]) -> None:
        with self._block(BlockType.HTML):
            raw = token.get("raw", "")
            if raw:
                self._emit_text(TextType.HTML, raw)

    def _table(self, token: dict[str, Any]) -> None:
        with self._block(BlockType.TABLE):
            for section in _children(token):
                section_type = section.get("type")
                if section_type == "table_head":
                    # Header cells are direct children of the head; wrap them in a row
                    with self._block(BlockType.THEAD), self._block(BlockType.TR):
                        self._table_cells(_children(section))
                elif section_type == "table_body":
                    with self._block(BlockType.TBODY):
                        for row in _children(section):
                            with self._block(BlockType.TR):
                                self._table_cells(_children(row))

    def _table_cells(self, cells: list[dict[str, Any]]) -> None:
        for cell in cells:
            attrs = _attrs(cell)
            block_type = BlockType.TH if attrs.get("head") else BlockType.TD
            detail = TableCellDetail(align=_ALIGNMENTS.get(attrs.get("align") or "", CellAlign.DEFAULT))
            with self._block(block_type, detail):
                self.emit_inlines(_children(cell))

    def _display_math_block(self, token: dict[str, Any]) -> None:
        # Display math is an inline span; at block level it gets its own paragraph
        with self._block(BlockType.P):
            self._display_math_span(token)

    # ------------------------------------------------------------------
    # Inlines
    # ------------------------------------------------------------------

    def _text(self, token: dict[str, Any]) -> None:
        raw = token.get("raw", "")
        pieces = raw.split("\x00")
        for index, piece in enumerate(pieces):
            if index:
                self._emit_text(TextType.NULLCHAR, "\x00")
            if self.collapse_whitespace:
                piece = _WHITESPACE_RUN.sub(" ", piece)
            if piece:
                self._emit_text(TextType.NORMAL, piece)

    def _softbreak(self, token: dict[str, Any]) -> None:
        self._emit_text(TextType.SOFTBR, "\n")

    def _linebreak(self, token: dict[str, Any]) -> None:
        self._emit_text(TextType.BR, "\n")

    def _codespan(self, token: dict[str, Any]) -> None:
        with self._span(SpanType.CODE):
            raw = token.get("raw", "")
            if raw:
                self._emit_text(TextType.CODE, raw)

    def _simple_span(self, span_type: SpanType) -> Callable[[dict[str, Any]], None]:
        def emit(token: dict[str, Any]) -> None:
            with self._span(span_type):
                self.emit_inlines(_children(token))

        return emit

    def _link(self, token: dict[str, Any]) -> None:
        attrs = _attrs(token)
        detail = LinkDetail(href=attrs.get("url") or "", title=attrs.get("title") or "")
        with self._span(SpanType.A, detail):
            self.emit_inlines(_children(token))

    def _image(self, token: dict[str, Any]) -> None:
        attrs = _attrs(token)
        detail = ImageDetail(src=attrs.get("url") or "", title=attrs.get("title") or "")
        with self._span(SpanType.IMG, detail):
            self.emit_inlines(_children(token))

    def _inline_html(self, token: dict[str, Any]) -> None:
        raw = token.get("raw", "")
        if raw:
            self._emit_text(TextType.HTML, raw)

    def _inline_math(self, token: dict[str, Any]) -> None:
        with self._span(SpanType.LATEXMATH):
            raw = token.get("raw", "")
            if raw:
                self._emit_text(TextType.LATEXMATH, raw)

    def _display_math_span(self, token: dict[str, Any]) -> None:
        with self._span(SpanType.LATEXMATH_DISPLAY):
            raw = token.get("raw", "")
            if raw:
                self._emit_text(TextType.LATEXMATH, raw)

    def _wiki_link(self, token: dict[str, Any]) -> None:
        detail = WikiLinkDetail(target=_attrs(token).get("target") or "")
        with self._span(SpanType.WIKILINK, detail):
            self.emit_inlines(_children(token))


def _attrs(token: dict[str, Any]) -> dict[str, Any]:
    attrs = token.get("attrs")
    return attrs if isinstance(attrs, dict) else {}


def _children(token: dict[str, Any]) -> list[dict[str, Any]]:
    children = token.get("children")
    if not isinstance(children, list):
        return []
    return [child for child in children if isinstance(child, dict)]


class MistuneEventSource:
    """Tokenize Markdown with mistune and report it as parse events.

    Parameters
    ----------
    flags : ParserFlags, default ParserFlags.NONE
        Extensions to recognise. Plain CommonMark is always parsed.

    Examples
    --------
    >>> from md2json.ast import TreeBuilder
    >>> builder = TreeBuilder()
    >>> MistuneEventSource(ParserFlags.TABLES).parse("# Title", builder)
    0
    >>> builder.finish().children[0].level
    1

    """

    def __init__(self, flags: ParserFlags = ParserFlags.NONE):
        """Store the flag set; mistune itself is created per parse."""
        self.flags = flags

    def plugins(self) -> list[Any]:
        """Return the mistune plugins enabled by the current flags."""
        plugins: list[Any] = []
        for flag, names in _FLAG_PLUGINS:
            if self.flags & flag:
                plugins.extend(names)
        if self.flags & ParserFlags.WIKILINKS:
            plugins.append(wiki_links)
        return plugins

    @requires_dependencies("markdown", DEPS_MARKDOWN)
    def tokenize(self, text: str) -> list[dict[str, Any]]:
        """Run mistune over ``text`` and return its token tree."""
        import mistune

        markdown = mistune.create_markdown(renderer=None, plugins=self.plugins())
        tokens, _state = markdown.parse(text)
        if not isinstance(tokens, list):
            return []
        return tokens

    def parse(self, text: str, handler: EventHandler) -> int:
        """Tokenize ``text`` and report its structure to ``handler``.

        Parameters
        ----------
        text : str
            Markdown source
        handler : EventHandler
            Receiver of the events

        Returns
        -------
        int
            0 when every event was accepted, otherwise the first non-zero
            status a handler returned (tokenization stops at that event)

        """
        tokens = self.tokenize(text)
        emitter = _EventEmitter(handler, collapse_whitespace=bool(self.flags & ParserFlags.COLLAPSE_WHITESPACE))
        try:
            emitter.emit_document(tokens)
        except TokenizerAbort as abort:
            logger.debug(f"Tokenization aborted by handler (status {abort.status})")
            return abort.status
        return 0


def create_event_source(flags: Optional[ParserFlags] = None) -> MistuneEventSource:
    """Return the default tokenizer configured with ``flags``."""
    return MistuneEventSource(flags if flags is not None else ParserFlags.NONE)
