"""Pytest configuration and shared fixtures for the md2json test suite.

This module provides shared fixtures, test configuration, and utilities
that are used across the entire test suite.
"""

import logging
from typing import Callable, Generator

import pytest

from md2json.ast import TreeBuilder

# Configure Hypothesis for property-based testing
try:
    from hypothesis import Phase, Verbosity, settings

    # Register custom Hypothesis profiles
    settings.register_profile("ci", max_examples=100, verbosity=Verbosity.verbose)
    settings.register_profile("dev", max_examples=20)
    settings.register_profile(
        "debug", max_examples=10, verbosity=Verbosity.verbose, phases=[Phase.explicit, Phase.reuse, Phase.generate]
    )

    # Load profile from environment or use default
    import os

    profile = os.getenv("HYPOTHESIS_PROFILE", "dev")
    settings.load_profile(profile)
except ImportError:
    # Hypothesis not installed, skip configuration
    pass


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests - fast, isolated component tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interaction tests")
    config.addinivalue_line("markers", "fuzzing: Property-based fuzzing tests")


class FakeClock:
    """Manually advanced clock for deadline tests."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    """Provide a clock that only moves when told to."""
    return FakeClock()


@pytest.fixture
def builder() -> TreeBuilder:
    """Provide a fresh tree builder without a deadline."""
    return TreeBuilder()


@pytest.fixture
def make_builder(fake_clock: FakeClock) -> Callable[[float], TreeBuilder]:
    """Provide a factory for builders whose deadline follows ``fake_clock``."""

    def factory(deadline: float) -> TreeBuilder:
        return TreeBuilder(deadline=deadline, clock=fake_clock)

    return factory


@pytest.fixture
def restore_package_logger() -> Generator[logging.Logger, None, None]:
    """Reset the md2json logger after tests that configure it."""
    package_logger = logging.getLogger("md2json")
    saved_handlers = list(package_logger.handlers)
    saved_level = package_logger.level
    saved_propagate = package_logger.propagate
    try:
        yield package_logger
    finally:
        for handler in list(package_logger.handlers):
            if handler not in saved_handlers:
                handler.close()
        package_logger.handlers = saved_handlers
        package_logger.setLevel(saved_level)
        package_logger.propagate = saved_propagate
