#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Configuration options for md2json parsing.

:class:`ParserOptions` holds the user-facing switches; :func:`resolve_options`
turns them into the :class:`EffectiveOptions` a single parse runs with.
"""

from __future__ import annotations

from md2json.options.base import CloneFrozenMixin
from md2json.options.markdown import EffectiveOptions, ParserOptions, RawParserOptions, resolve_options

__all__ = [
    "CloneFrozenMixin",
    "EffectiveOptions",
    "ParserOptions",
    "RawParserOptions",
    "resolve_options",
]
