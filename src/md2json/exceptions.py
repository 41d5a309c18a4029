#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Custom exceptions for the md2json library.

The parse functions in :mod:`md2json.api` report failures as data (a failed
:class:`~md2json.ast.nodes.ParseResult`) rather than by raising. The classes
below exist for callers that prefer exceptions, via
:meth:`ParseResult.raise_for_error`, and for configuration problems such as a
missing tokenizer dependency.

Exception Hierarchy
-------------------
- Md2JsonError (base exception)

  - ValidationError (parameter/option validation)

  - ParsingError (input document parsing failures)
    - InputTooLargeError (input larger than ``max_input_size``)
    - TokenizeError (tokenizer reported failure or raised)

  - DependencyError (missing/incompatible packages)

"""

from typing import Any


class Md2JsonError(Exception):
    """Base exception class for all md2json-specific errors.

    Parameters
    ----------
    message : str
        Human-readable description of the error
    original_error : Exception, optional
        Exception that caused this one, kept for inspection

    """

    def __init__(self, message: str, original_error: Exception | None = None):
        """Initialize the error with a message and optional cause."""
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ValidationError(Md2JsonError):
    """Raised when an argument or option value has the wrong type or shape.

    Parameters
    ----------
    message : str
        What was wrong with the value
    parameter_name : str, optional
        Name of the offending argument
    parameter_value : any, optional
        The value that was rejected
    original_error : Exception, optional
        Exception that caused this one

    """

    def __init__(
        self,
        message: str,
        parameter_name: str | None = None,
        parameter_value: Any = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message, original_error=original_error)
        self.parameter_name = parameter_name
        self.parameter_value = parameter_value


class ParsingError(Md2JsonError):
    """Raised when Markdown input could not be turned into a document tree.

    Parameters
    ----------
    message : str
        Description of the failure
    parsing_stage : str, optional
        Pipeline step that failed, ``"size_check"`` or ``"tokenize"``
    line, column : int, optional
        1-based position of the failure, when the tokenizer reports one
    original_error : Exception, optional
        Exception that caused this one

    """

    def __init__(
        self,
        message: str,
        parsing_stage: str | None = None,
        line: int | None = None,
        column: int | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message, original_error)
        self.parsing_stage = parsing_stage
        self.line = line
        self.column = column


class InputTooLargeError(ParsingError):
    """Raised for input larger than the configured ``max_input_size``.

    ``size`` and ``limit`` are in UTF-8 bytes when known.
    """

    def __init__(self, message: str, size: int | None = None, limit: int | None = None):
        super().__init__(message, parsing_stage="size_check")
        self.size = size
        self.limit = limit


class TokenizeError(ParsingError):
    """Raised when the Markdown tokenizer does not complete."""

    def __init__(
        self,
        message: str,
        line: int | None = None,
        column: int | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message, parsing_stage="tokenize", line=line, column=column, original_error=original_error)


def _requirement(name: str, spec: str) -> str:
    return f"{name}{spec}" if spec else name


class DependencyError(Md2JsonError):
    """Raised when a package the tokenizer needs is missing or too old.

    Parameters
    ----------
    component : str
        Part of md2json that needs the packages, e.g. ``"markdown"``
    missing_packages : list[tuple[str, str]]
        ``(distribution, version_spec)`` pairs that could not be imported
    version_mismatches : list[tuple[str, str, str]], optional
        ``(distribution, required_spec, installed_version)`` triples
    install_command : str, optional
        Command to suggest instead of the generated ``pip install`` line
    message : str, optional
        Full message, replacing the generated one
    original_import_error : ImportError, optional
        First ImportError seen while checking the packages

    """

    def __init__(
        self,
        component: str,
        missing_packages: list[tuple[str, str]],
        version_mismatches: list[tuple[str, str, str]] | None = None,
        install_command: str = "",
        message: str | None = None,
        original_import_error: ImportError | None = None,
    ):
        version_mismatches = version_mismatches or []
        if message is None:
            message = self._build_message(component, missing_packages, version_mismatches, install_command)

        super().__init__(message, original_error=original_import_error)
        self.component = component
        self.missing_packages = missing_packages
        self.version_mismatches = version_mismatches
        self.install_command = install_command
        self.original_import_error = original_import_error

    @staticmethod
    def _build_message(
        component: str,
        missing_packages: list[tuple[str, str]],
        version_mismatches: list[tuple[str, str, str]],
        install_command: str,
    ) -> str:
        lines = []
        if missing_packages:
            names = ", ".join(f"'{_requirement(name, spec)}'" for name, spec in missing_packages)
            lines.append(f"{component} support requires the following packages: {names}")
        if version_mismatches:
            details = ", ".join(
                f"'{name}' (requires {required}, but {installed} is installed)"
                for name, required, installed in version_mismatches
            )
            lines.append(f"{component} support has version mismatches: {details}")

        if not install_command:
            wanted = missing_packages + [(name, required) for name, required, _ in version_mismatches]
            if wanted:
                quoted = " ".join(f'"{_requirement(name, spec)}"' if spec else name for name, spec in wanted)
                install_command = f"pip install --upgrade {quoted}"
        if install_command:
            lines.append(f"Install with: {install_command}")

        return "\n".join(lines)
