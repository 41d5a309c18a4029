"""md2json - Markdown to document tree parsing with a stable JSON encoding.

md2json tokenizes CommonMark and GitHub Flavored Markdown with mistune,
builds an owning document tree from the tokenizer's push-style events and
encodes that tree as compact, deterministic JSON text for consuming
applications.

Key Features
------------
- GFM tables, task lists, strikethrough and bare URL autolinks
- Optional LaTeX math spans and ``[[wiki links]]``
- Input size limit and a deadline on tree construction
- A parse call that reports failures as data instead of raising

Requirements
------------
- Python 3.10+
- mistune 3

Examples
--------
Parsing into a tree:

    >>> from md2json import parse
    >>> result = parse("# Hello")
    >>> result.success
    True
    >>> result.root.children[0].level
    1

Encoding for a consumer:

    >>> from md2json import parse_to_json
    >>> parse_to_json("").ast
    '[{"type":"document","children":[]}]'

Decoded envelope with camelCase options:

    >>> from md2json import parse_markdown
    >>> parse_markdown("hello world", {"maxInputSize": 5})["error"]["message"]
    'Input exceeds maximum size limit'

"""

#  Copyright (c) 2025 Tom Villani, Ph.D.
# src/md2json/__init__.py

from md2json.api import NativeParseResult, parse, parse_markdown, parse_to_json
from md2json.ast import (
    ErrorKind,
    Node,
    NodeType,
    ParseError,
    ParseResult,
    TableCellAlign,
    TreeBuilder,
    encode,
    encode_nodes,
)
from md2json.exceptions import (
    DependencyError,
    InputTooLargeError,
    Md2JsonError,
    ParsingError,
    TokenizeError,
    ValidationError,
)
from md2json.logging_utils import configure_logging
from md2json.options import EffectiveOptions, ParserOptions, resolve_options

__version__ = "1.0.0"

__all__ = [
    "__version__",
    # Parsing
    "parse",
    "parse_to_json",
    "parse_markdown",
    "NativeParseResult",
    # Tree
    "Node",
    "NodeType",
    "TableCellAlign",
    "TreeBuilder",
    "ParseResult",
    "ParseError",
    "ErrorKind",
    "encode",
    "encode_nodes",
    # Options
    "ParserOptions",
    "EffectiveOptions",
    "resolve_options",
    # Exceptions
    "Md2JsonError",
    "ValidationError",
    "ParsingError",
    "InputTooLargeError",
    "TokenizeError",
    "DependencyError",
    # Logging
    "configure_logging",
]
