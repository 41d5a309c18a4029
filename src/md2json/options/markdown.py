#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Configuration options for Markdown parsing.

User-facing feature switches live on :class:`ParserOptions`. Before a parse
they are resolved into an :class:`EffectiveOptions` record, which carries the
tokenizer flag set and the limits the parse facade enforces.
"""
# src/md2json/options/markdown.py

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from md2json.constants import (
    DEFAULT_ENABLE_AUTOLINK,
    DEFAULT_ENABLE_STRIKETHROUGH,
    DEFAULT_ENABLE_TABLES,
    DEFAULT_ENABLE_TASK_LISTS,
    DEFAULT_GFM,
    DEFAULT_MATH,
    DEFAULT_MAX_INPUT_SIZE,
    DEFAULT_TIMEOUT_MS,
    DEFAULT_WIKI,
)
from md2json.exceptions import ValidationError
from md2json.options.base import CloneFrozenMixin
from md2json.parsers.events import ParserFlags

logger = logging.getLogger(__name__)

# Consumer-side (camelCase) spelling of each option
_CAMEL_CASE_ALIASES = {
    "enableTables": "enable_tables",
    "enableTaskLists": "enable_task_lists",
    "enableStrikethrough": "enable_strikethrough",
    "enableAutolink": "enable_autolink",
    "maxInputSize": "max_input_size",
}


@dataclass(frozen=True)
class ParserOptions(CloneFrozenMixin):
    """Configuration options for Markdown-to-tree parsing.

    Parameters
    ----------
    gfm : bool, default True
        Enable every GitHub Flavored Markdown extension. When true the four
        ``enable_*`` switches below are implied.
    enable_tables : bool, default True
        Parse pipe tables.
    enable_task_lists : bool, default True
        Parse ``- [ ]`` / ``- [x]`` task list items.
    enable_strikethrough : bool, default True
        Parse ``~~strikethrough~~``.
    enable_autolink : bool, default True
        Turn bare ``http(s)://`` URLs into links.
    math : bool, default False
        Parse ``$inline$`` and ``$$display$$`` LaTeX math. Not implied by ``gfm``.
    wiki : bool, default False
        Parse ``[[target]]`` and ``[[target|label]]`` wiki links. Not implied by ``gfm``.
    max_input_size : int, default 10 MiB
        Largest accepted input, in UTF-8 bytes.
    timeout : int, default 5000
        Deadline for building the tree, in milliseconds. Zero or a negative
        value disables the deadline.

    """

    gfm: bool = field(
        default=DEFAULT_GFM,
        metadata={"help": "Enable all GFM extensions (tables, task lists, strikethrough, autolinks)"},
    )
    enable_tables: bool = field(default=DEFAULT_ENABLE_TABLES, metadata={"help": "Parse pipe tables"})
    enable_task_lists: bool = field(
        default=DEFAULT_ENABLE_TASK_LISTS, metadata={"help": "Parse task list checkboxes (- [ ] and - [x])"}
    )
    enable_strikethrough: bool = field(
        default=DEFAULT_ENABLE_STRIKETHROUGH, metadata={"help": "Parse strikethrough syntax (~~text~~)"}
    )
    enable_autolink: bool = field(
        default=DEFAULT_ENABLE_AUTOLINK, metadata={"help": "Link bare URLs found in text"}
    )
    math: bool = field(default=DEFAULT_MATH, metadata={"help": "Parse inline and display LaTeX math"})
    wiki: bool = field(default=DEFAULT_WIKI, metadata={"help": "Parse [[wiki links]]"})
    max_input_size: int = field(
        default=DEFAULT_MAX_INPUT_SIZE,
        metadata={"help": "Maximum input size in bytes", "type": int},
    )
    timeout: int = field(
        default=DEFAULT_TIMEOUT_MS,
        metadata={"help": "Tree building deadline in milliseconds (0 disables)", "type": int},
    )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ParserOptions:
        """Build options from a mapping using camelCase or snake_case keys.

        Keys whose value is ``None`` keep their default, as do unknown keys,
        which are logged and otherwise ignored.

        Parameters
        ----------
        data : Mapping[str, Any]
            Raw options, e.g. ``{"gfm": False, "enableTables": True}``

        Returns
        -------
        ParserOptions
            Options with the given values applied over the defaults

        """
        known = cls.field_names()
        kwargs: dict[str, Any] = {}
        unknown = []
        for key, value in data.items():
            name = _CAMEL_CASE_ALIASES.get(key, key)
            if name not in known:
                unknown.append(key)
                continue
            if value is not None:
                kwargs[name] = value

        if unknown:
            logger.debug(f"Skipping unknown parser options: {unknown}")

        return cls(**kwargs)


@dataclass(frozen=True)
class EffectiveOptions:
    """Resolved, tokenizer-facing configuration for a single parse.

    Parameters
    ----------
    tables, task_lists, strikethrough, autolink, math, wiki : bool
        Extensions the tokenizer will recognise.
    collapse_whitespace : bool
        Collapse whitespace runs in plain text. Always enabled.
    max_input_size : int
        Largest accepted input, in UTF-8 bytes.
    timeout_ms : int
        Tree building deadline in milliseconds; ``<= 0`` means no deadline.

    """

    tables: bool
    task_lists: bool
    strikethrough: bool
    autolink: bool
    math: bool
    wiki: bool
    collapse_whitespace: bool = True
    max_input_size: int = DEFAULT_MAX_INPUT_SIZE
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    @property
    def flags(self) -> ParserFlags:
        """The tokenizer flag set for these options."""
        flags = ParserFlags.NONE
        if self.tables:
            flags |= ParserFlags.TABLES
        if self.task_lists:
            flags |= ParserFlags.TASKLISTS
        if self.strikethrough:
            flags |= ParserFlags.STRIKETHROUGH
        if self.autolink:
            flags |= ParserFlags.PERMISSIVE_AUTOLINKS
        if self.math:
            flags |= ParserFlags.LATEX_MATH_SPANS
        if self.wiki:
            flags |= ParserFlags.WIKILINKS
        if self.collapse_whitespace:
            flags |= ParserFlags.COLLAPSE_WHITESPACE
        return flags

    @property
    def deadline_enabled(self) -> bool:
        return self.timeout_ms > 0


RawParserOptions = Union[ParserOptions, Mapping[str, Any], None]


def resolve_options(options: RawParserOptions = None) -> EffectiveOptions:
    """Resolve user-facing options into the effective parse configuration.

    ``gfm`` implies tables, task lists, strikethrough and autolinks; each of
    those can also be switched on individually. ``math`` and ``wiki`` are only
    enabled when set explicitly. Whitespace collapsing is always on.

    Parameters
    ----------
    options : ParserOptions, Mapping or None, default None
        Raw options. A mapping is read with :meth:`ParserOptions.from_dict`.

    Returns
    -------
    EffectiveOptions
        The resolved configuration

    Raises
    ------
    ValidationError
        If ``options`` is neither None, a ParserOptions nor a mapping

    """
    if options is None:
        options = ParserOptions()
    elif isinstance(options, Mapping):
        options = ParserOptions.from_dict(options)
    elif not isinstance(options, ParserOptions):
        raise ValidationError(
            f"Parser options must be ParserOptions or a mapping, not '{type(options).__name__}'",
            parameter_name="options",
            parameter_value=options,
        )

    gfm = bool(options.gfm)
    effective = EffectiveOptions(
        tables=gfm or bool(options.enable_tables),
        task_lists=gfm or bool(options.enable_task_lists),
        strikethrough=gfm or bool(options.enable_strikethrough),
        autolink=gfm or bool(options.enable_autolink),
        math=bool(options.math),
        wiki=bool(options.wiki),
        collapse_whitespace=True,
        max_input_size=int(options.max_input_size),
        timeout_ms=int(options.timeout),
    )
    logger.debug(f"Resolved parser flags: {effective.flags!r}")
    return effective
