"""
Pytest configuration and fixtures for error handler tests.
"""

import pytest

from error_handler import runtime
from error_handler.reporter import ErrorReporter
from error_handler.severity import Severity


class RecordingHooks:
    """ProcessHooks stand-in that stores handlers instead of installing them."""

    def __init__(self):
        self.error_handler = None
        self.exception_handler = None
        self.shutdown_function = None
        self.installs = []

    def set_error_handler(self, handler):
        self.error_handler = handler
        self.installs.append("error")

    def set_exception_handler(self, handler):
        self.exception_handler = handler
        self.installs.append("exception")

    def register_shutdown_function(self, handler):
        self.shutdown_function = handler
        self.installs.append("shutdown")

    def restore(self):
        self.error_handler = None
        self.exception_handler = None
        self.shutdown_function = None


class CollectingRenderer:
    """Renderer that remembers every (record, failure) it receives."""

    def __init__(self):
        self.calls = []

    def __call__(self, record, failure):
        self.calls.append((record, failure))

    @property
    def last_record(self):
        return self.calls[-1][0]


class ChainedError(Exception):
    """Exception type used to build cause chains."""
    pass


@pytest.fixture(autouse=True)
def clean_runtime():
    """Reset the last-error slot, reporting level and shutdown slot around every test."""
    runtime.clear_last_error()
    previous = runtime.error_reporting(Severity.ALL)
    yield
    runtime.clear_last_error()
    runtime.error_reporting(previous)
    runtime.clear_shutdown_function()


@pytest.fixture
def hooks():
    return RecordingHooks()


@pytest.fixture
def collector():
    return CollectingRenderer()


@pytest.fixture
def reporter(hooks, collector):
    """Reporter wired to recording hooks and a collecting renderer."""
    reporter = ErrorReporter(hooks=hooks)
    reporter.set_renderer(collector)
    return reporter


@pytest.fixture
def chained_failure():
    """F0 caused by F1 caused by F2."""
    try:
        try:
            try:
                raise ChainedError("F2")
            except ChainedError as f2:
                raise ChainedError("F1") from f2
        except ChainedError as f1:
            raise ChainedError("F0") from f1
    except ChainedError as f0:
        return f0
