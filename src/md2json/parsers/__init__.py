#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2json/parsers/__init__.py
"""Tokenizer package.

:mod:`md2json.parsers.events` defines the push-parser event vocabulary and
:mod:`md2json.parsers.markdown` drives it from the mistune tokenizer.
"""

from md2json.parsers.events import (
    BlockType,
    CellAlign,
    EventHandler,
    EventSource,
    ParserFlags,
    SpanType,
    TextType,
)
from md2json.parsers.markdown import MistuneEventSource, create_event_source, wiki_links

__all__ = [
    "BlockType",
    "CellAlign",
    "EventHandler",
    "EventSource",
    "MistuneEventSource",
    "ParserFlags",
    "SpanType",
    "TextType",
    "create_event_source",
    "wiki_links",
]
