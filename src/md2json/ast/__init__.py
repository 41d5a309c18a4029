#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2json/ast/__init__.py
"""Document tree module.

- nodes: the :class:`Node` shape, node kinds and parse result records
- builder: :class:`TreeBuilder`, which turns tokenizer events into a tree
- serialization: the compact JSON encoder

Examples
--------
    >>> from md2json.ast import Node, NodeType, encode
    >>> encode(Node(NodeType.THEMATIC_BREAK))
    '{"type":"thematic_break"}'

"""

from __future__ import annotations

from md2json.ast.builder import TreeBuilder
from md2json.ast.nodes import (
    ErrorKind,
    Node,
    NodeType,
    ParseError,
    ParseResult,
    TableCellAlign,
)
from md2json.ast.serialization import encode, encode_nodes, escape_json, node_to_dict

__all__ = [
    "ErrorKind",
    "Node",
    "NodeType",
    "ParseError",
    "ParseResult",
    "TableCellAlign",
    "TreeBuilder",
    "encode",
    "encode_nodes",
    "escape_json",
    "node_to_dict",
]
