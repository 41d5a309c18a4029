#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2json/utils/decorators.py
"""Dependency guard and timing helpers used by the parsing pipeline."""

from __future__ import annotations

import importlib
import logging
import time
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Generator, List, Optional, Tuple

from md2json.exceptions import DependencyError
from md2json.utils.packages import check_version_requirement

# (distribution name, import name, version specifier or "")
PackageSpec = Tuple[str, str, str]


def find_dependency_problems(
    packages: List[PackageSpec],
) -> Tuple[List[Tuple[str, str]], List[Tuple[str, str, str]], Optional[ImportError]]:
    """Import each package and compare installed versions against their specifiers.

    Returns
    -------
    tuple
        ``(missing, version_mismatches, first_import_error)``

    """
    missing: List[Tuple[str, str]] = []
    mismatches: List[Tuple[str, str, str]] = []
    first_error: Optional[ImportError] = None

    for distribution, module_name, version_spec in packages:
        try:
            importlib.import_module(module_name)
        except ImportError as e:
            missing.append((distribution, version_spec))
            first_error = first_error or e
            continue

        if not version_spec:
            continue
        satisfied, installed = check_version_requirement(distribution, version_spec)
        if not satisfied:
            mismatches.append((distribution, version_spec, installed or "unknown"))

    return missing, mismatches, first_error


def requires_dependencies(component: str, packages: List[PackageSpec]) -> Callable:
    """Check required packages before every call of the decorated function.

    Parameters
    ----------
    component : str
        Name used in the error message, e.g. ``"markdown"``
    packages : list of tuple
        ``(distribution, import_name, version_spec)`` tuples, such as
        ``("mistune", "mistune", ">=3.0.0")``. An empty ``version_spec``
        accepts any installed version.

    Raises
    ------
    DependencyError
        If a package cannot be imported or its version does not match

    Examples
    --------
        >>> @requires_dependencies("markdown", [("mistune", "mistune", ">=3.0.0")])
        ... def tokenize(self, text):
        ...     import mistune
        ...     return mistune.create_markdown(renderer=None).parse(text)[0]

    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            missing, mismatches, import_error = find_dependency_problems(packages)
            if missing or mismatches:
                raise DependencyError(
                    component=component,
                    missing_packages=missing,
                    version_mismatches=mismatches,
                    original_import_error=import_error,
                ) from import_error
            return func(*args, **kwargs)

        return wrapper

    return decorator


@contextmanager
def debug_timer(logger: logging.Logger, operation: str) -> Generator[None, None, None]:
    """Log how long the wrapped block took, at DEBUG level.

    The clock is only read when the logger is enabled for DEBUG. The timing
    line is written even if the block raises.

    Examples
    --------
        >>> with debug_timer(logger, "Markdown parsing"):
        ...     status = source.parse(text, builder)
        ... # DEBUG: "Markdown parsing completed in 0.01s"

    """
    if not logger.isEnabledFor(logging.DEBUG):
        yield
        return

    started = time.perf_counter()
    try:
        yield
    finally:
        logger.debug(f"{operation} completed in {time.perf_counter() - started:.2f}s")
