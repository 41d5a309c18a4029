#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2json/constants.py
"""Constants and default values shared across md2json modules.

This module centralizes default option values, fixed error messages and
dependency specifications so that parsers, the option resolver and the
public API agree on them.

"""

from __future__ import annotations

# =============================================================================
# Parser option defaults
# =============================================================================

DEFAULT_GFM = True
DEFAULT_ENABLE_TABLES = True
DEFAULT_ENABLE_TASK_LISTS = True
DEFAULT_ENABLE_STRIKETHROUGH = True
DEFAULT_ENABLE_AUTOLINK = True
DEFAULT_MATH = False
DEFAULT_WIKI = False
DEFAULT_MAX_INPUT_SIZE = 10 * 1024 * 1024  # 10MB
DEFAULT_TIMEOUT_MS = 5000  # 5 seconds

# =============================================================================
# Parse failures
# =============================================================================

ERROR_INPUT_TOO_LARGE = "Input exceeds maximum size limit"
ERROR_TOKENIZE_FAILURE = "Failed to parse markdown"

# Consumers rely on the empty-input result carrying an explicit empty children array
EMPTY_DOCUMENT_JSON = '[{"type":"document","children":[]}]'
FAILED_PARSE_JSON = "[]"

# =============================================================================
# Dependency Specifications for @requires_dependencies decorator
# =============================================================================
# Each spec is a list of tuples: (pip_package, import_name, version_constraint)

DEPS_MARKDOWN = [("mistune", "mistune", ">=3.0.0")]
