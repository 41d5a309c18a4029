#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2json/ast/serialization.py
"""Compact JSON encoding of document trees.

Each node becomes an insertion-ordered dict that :func:`json.dumps` writes
with compact separators and ``ensure_ascii=False``. Fields appear in a fixed
order, unset attributes and empty ``children`` arrays are left out, and string
escaping touches only the quote, the backslash and the C0 control range.

Field order
-----------
``type``, ``content``, ``level``, ``href``, ``src``, ``alt``, ``title``,
``language``, ``ordered``, ``start``, ``checked``, ``align``, ``isHeader``,
``children``.

Examples
--------
    >>> from md2json.ast import Node, NodeType
    >>> from md2json.ast.serialization import encode
    >>> heading = Node(NodeType.HEADING, level=1)
    >>> _ = heading.add_child(Node(NodeType.TEXT, content="Hello"))
    >>> encode(heading)
    '{"type":"heading","level":1,"children":[{"type":"text","content":"Hello"}]}'

"""

from __future__ import annotations

import json
from typing import Any, Iterable

from md2json.ast.nodes import Node, TableCellAlign

_SEPARATORS = (",", ":")

_ALIGN_NAMES: dict[TableCellAlign, str] = {
    TableCellAlign.LEFT: "left",
    TableCellAlign.CENTER: "center",
    TableCellAlign.RIGHT: "right",
    TableCellAlign.DEFAULT: "default",
}

# (JSON key, Node attribute) for the optional scalars, in output order
_SCALAR_FIELDS = (
    ("content", "content"),
    ("level", "level"),
    ("href", "href"),
    ("src", "src"),
    ("alt", "alt"),
    ("title", "title"),
    ("language", "language"),
    ("ordered", "ordered"),
    ("start", "start"),
    ("checked", "checked"),
)


def escape_json(value: str) -> str:
    r"""Escape a string for inclusion between JSON double quotes.

    Parameters
    ----------
    value : str
        Raw string

    Returns
    -------
    str
        The string with ``"`` and ``\`` backslash-escaped, the named control
        characters written as ``\b \f \n \r \t`` and every other character below
        U+0020 written as ``\u00XX``. Everything else is left untouched.

    """
    return json.dumps(value, ensure_ascii=False)[1:-1]


def align_name(align: object) -> str:
    """Return the encoded name of a cell alignment; unknown values are ``"default"``."""
    if isinstance(align, TableCellAlign):
        return _ALIGN_NAMES[align]
    return "default"


def node_to_dict(node: Node) -> dict[str, Any]:
    """Convert a node and its descendants to ordered plain data.

    Parameters
    ----------
    node : Node
        Tree to convert

    Returns
    -------
    dict
        Keys in encoding order, with unset attributes and empty children left out

    """
    data: dict[str, Any] = {"type": node.type.value}
    for key, attribute in _SCALAR_FIELDS:
        value = getattr(node, attribute)
        if value is not None:
            data[key] = value
    if node.align is not None:
        data["align"] = align_name(node.align)
    if node.is_header is not None:
        data["isHeader"] = node.is_header
    if node.children:
        data["children"] = [node_to_dict(child) for child in node.children]
    return data


def encode(node: Node) -> str:
    """Encode a node and its descendants as compact JSON text.

    Parameters
    ----------
    node : Node
        Tree to encode

    Returns
    -------
    str
        JSON object text

    """
    return json.dumps(node_to_dict(node), ensure_ascii=False, separators=_SEPARATORS)


def encode_nodes(nodes: Iterable[Node]) -> str:
    """Encode a sequence of top-level nodes as a JSON array."""
    return json.dumps([node_to_dict(node) for node in nodes], ensure_ascii=False, separators=_SEPARATORS)
