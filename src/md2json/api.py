"""The major exported API functions for Markdown parsing."""

#  Copyright (c) 2025 Tom Villani, Ph.D.
# src/md2json/api.py
from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from md2json.ast.builder import TreeBuilder
from md2json.ast.nodes import ErrorKind, Node, NodeType, ParseResult
from md2json.constants import ERROR_INPUT_TOO_LARGE, ERROR_TOKENIZE_FAILURE, FAILED_PARSE_JSON
from md2json.exceptions import DependencyError
from md2json.options.markdown import EffectiveOptions, RawParserOptions, resolve_options
from md2json.parsers.markdown import create_event_source
from md2json.utils.decorators import debug_timer

logger = logging.getLogger(__name__)

MarkdownInput = Union[str, bytes]


def _decode_content(content: MarkdownInput) -> str:
    if isinstance(content, bytes):
        return content.decode("utf-8", errors="replace")
    return content


def _input_size(content: MarkdownInput) -> int:
    # Bytes are measured as given, before replacement characters are substituted
    if isinstance(content, bytes):
        return len(content)
    return len(content.encode("utf-8", errors="surrogatepass"))


def _make_deadline(effective: EffectiveOptions, clock: Callable[[], float]) -> Optional[float]:
    if not effective.deadline_enabled:
        return None
    return clock() + effective.timeout_ms / 1000.0


def parse(
    content: MarkdownInput,
    options: RawParserOptions = None,
    *,
    clock: Callable[[], float] = time.monotonic,
) -> ParseResult:
    """Parse Markdown into a document tree.

    Parameters
    ----------
    content : str or bytes
        Markdown source. Bytes are decoded as UTF-8; invalid sequences are
        replaced rather than rejected.
    options : ParserOptions, Mapping or None, default None
        Feature switches and limits, see :class:`~md2json.options.ParserOptions`
    clock : callable, default time.monotonic
        Time source for the tree building deadline

    Returns
    -------
    ParseResult
        Success with the document root, or one of the two failure kinds:
        ``InputTooLarge`` when the input exceeds ``max_input_size`` bytes (UTF-8
        for text, raw length for bytes)
        and ``TokenizeFailure`` when tokenizing did not complete.

    Raises
    ------
    ValidationError
        If ``options`` is not a ParserOptions, a mapping or None
    DependencyError
        If mistune is not installed

    Examples
    --------
    >>> result = parse("# Hello")
    >>> result.root.children[0].type.value
    'heading'
    >>> parse("hello world", {"maxInputSize": 5}).error.message
    'Input exceeds maximum size limit'

    """
    effective = resolve_options(options)

    size = _input_size(content)
    if size > effective.max_input_size:
        logger.warning(f"Rejecting input of {size} bytes (limit {effective.max_input_size})")
        return ParseResult.failed(ERROR_INPUT_TOO_LARGE, ErrorKind.INPUT_TOO_LARGE)

    text = _decode_content(content)

    if not text:
        return ParseResult.succeeded(Node(NodeType.DOCUMENT), empty_input=True)

    builder = TreeBuilder(deadline=_make_deadline(effective, clock), clock=clock)
    source = create_event_source(effective.flags)

    try:
        with debug_timer(logger, "Markdown parsing"):
            status = source.parse(text, builder)
    except DependencyError:
        raise
    except Exception as e:
        logger.error(f"Tokenizer raised while parsing {size} bytes: {e}", exc_info=True)
        return ParseResult.failed(ERROR_TOKENIZE_FAILURE)

    if status != 0:
        if builder.deadline_exceeded:
            logger.warning(f"Parsing aborted after exceeding the {effective.timeout_ms}ms deadline")
        else:
            logger.warning(f"Tokenizer reported status {status}")
        return ParseResult.failed(ERROR_TOKENIZE_FAILURE)

    return ParseResult.succeeded(builder.finish())


@dataclass
class NativeParseResult:
    """Encoded parse outcome handed across a binding boundary.

    Parameters
    ----------
    success : bool
        Whether parsing succeeded
    ast : str
        Top-level node array as compact JSON text, ``"[]"`` on failure
    error_message : str or None
        Failure message
    error_line, error_column : int or None
        Failure position, when the tokenizer reports one

    """

    success: bool
    ast: str = FAILED_PARSE_JSON
    error_message: Optional[str] = None
    error_line: Optional[int] = None
    error_column: Optional[int] = None

    @classmethod
    def from_result(cls, result: ParseResult) -> NativeParseResult:
        if result.success or result.error is None:
            return cls(success=True, ast=result.to_json())
        return cls(
            success=False,
            ast=FAILED_PARSE_JSON,
            error_message=result.error.message,
            error_line=result.error.line,
            error_column=result.error.column,
        )


def parse_to_json(content: MarkdownInput, options: RawParserOptions = None) -> NativeParseResult:
    """Parse Markdown and encode the tree as compact JSON text.

    Examples
    --------
    >>> parse_to_json("# Hi").ast
    '[{"type":"document","children":[{"type":"heading","level":1,"children":[{"type":"text","content":"Hi"}]}]}]'

    """
    return NativeParseResult.from_result(parse(content, options))


def parse_markdown(content: MarkdownInput, options: RawParserOptions = None) -> dict[str, Any]:
    """Parse Markdown into plain Python data.

    Parameters
    ----------
    content : str or bytes
        Markdown source
    options : ParserOptions, Mapping or None, default None
        Parser options; camelCase keys are accepted

    Returns
    -------
    dict
        ``{"success": True, "nodes": [...]}`` on success, otherwise
        ``{"success": False, "nodes": [], "error": {"message": ...}}`` where
        ``error`` also holds ``line`` and ``column`` when they are known

    """
    native = parse_to_json(content, options)

    if not native.success:
        return {"success": False, "nodes": [], "error": _error_payload(native)}

    try:
        nodes = json.loads(native.ast)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to decode parser output: {e}")
        return {"success": False, "nodes": [], "error": {"message": str(e)}}

    return {"success": True, "nodes": nodes}


def _error_payload(native: NativeParseResult) -> dict[str, Any]:
    error: dict[str, Any] = {"message": native.error_message or ERROR_TOKENIZE_FAILURE}
    if native.error_line is not None:
        error["line"] = native.error_line
    if native.error_column is not None:
        error["column"] = native.error_column
    return error
