"""
Tests for the host runtime collaborator and severity model.
"""

import sys
import warnings
from unittest.mock import Mock, patch

import pytest

from error_handler import runtime
from error_handler.runtime import LastError, ProcessHooks
from error_handler.severity import Severity, severity_for_warning


class TestLastError:
    """Test the last-error slot."""

    def test_empty_by_default(self):
        """Test no error is recorded initially."""
        assert runtime.error_get_last() is None

    def test_record_replaces_previous(self):
        """Test only the most recent error is kept."""
        runtime.record_error(Severity.WARNING, "first", "a.py", 1)
        runtime.record_error(Severity.ERROR, "second", "b.py", 2)

        assert runtime.error_get_last() == LastError(Severity.ERROR, "second", "b.py", 2)

    def test_clear(self):
        """Test clearing empties the slot."""
        runtime.record_error(Severity.ERROR, "x")
        runtime.clear_last_error()

        assert runtime.error_get_last() is None

    def test_error_reporting_returns_previous(self):
        """Test setting the level returns the level it replaced."""
        assert runtime.error_reporting() == Severity.ALL
        assert runtime.error_reporting(Severity.ERROR) == Severity.ALL
        assert runtime.error_reporting() == Severity.ERROR


class TestProcessHooks:
    """Test installation into the real process slots."""

    def test_exception_handler_installed_and_restored(self):
        """Test sys.excepthook is replaced and put back."""
        original = sys.excepthook
        handler = Mock()
        hooks = ProcessHooks()

        hooks.set_exception_handler(handler)
        try:
            assert sys.excepthook is not original
            error = ValueError("x")
            sys.excepthook(ValueError, error, None)
        finally:
            hooks.restore()

        handler.assert_called_once_with(error)
        assert sys.excepthook is original

    def test_exception_handler_attaches_traceback(self):
        """Test the traceback argument is attached when missing."""
        handler = Mock()
        hooks = ProcessHooks()
        try:
            raise ValueError("x")
        except ValueError as e:
            tb = e.__traceback__
        error = ValueError("bare")

        hooks.set_exception_handler(handler)
        try:
            sys.excepthook(ValueError, error, tb)
        finally:
            hooks.restore()

        assert handler.call_args[0][0].__traceback__ is tb

    def test_error_handler_records_and_forwards(self):
        """Test warnings are recorded in the slot and forwarded with a severity."""
        handler = Mock()
        hooks = ProcessHooks()

        with warnings.catch_warnings():
            warnings.simplefilter("always")
            hooks.set_error_handler(handler)
            try:
                warnings.warn("resource leak", ResourceWarning)
            finally:
                hooks.restore()

        severity, message, filename, lineno = handler.call_args[0]
        assert severity == Severity.NOTICE
        assert message == "resource leak"
        assert filename == __file__
        assert runtime.error_get_last().message == "resource leak"

    def test_restore_puts_back_showwarning(self):
        """Test the original showwarning survives repeated installs."""
        original = warnings.showwarning
        hooks = ProcessHooks()

        hooks.set_error_handler(Mock())
        hooks.set_error_handler(Mock())
        hooks.restore()

        assert warnings.showwarning is original

    @patch("error_handler.runtime.atexit")
    def test_shutdown_function_replaces(self, mock_atexit):
        """Test a second shutdown function unregisters the first."""
        hooks = ProcessHooks()
        first = Mock()
        second = Mock()

        hooks.register_shutdown_function(first)
        hooks.register_shutdown_function(second)

        mock_atexit.register.assert_any_call(first)
        mock_atexit.register.assert_any_call(second)
        mock_atexit.unregister.assert_called_once_with(first)

        hooks.restore()
        mock_atexit.unregister.assert_called_with(second)

    def test_restore_without_install(self):
        """Test restore is harmless when nothing was installed."""
        original = sys.excepthook
        ProcessHooks().restore()

        assert sys.excepthook is original


class TestSeverity:
    """Test severity flags and warning mapping."""

    def test_fatal_mask(self):
        """Test the fatal mask covers exactly the four fatal severities."""
        for severity in (Severity.PARSE, Severity.ERROR, Severity.CORE_ERROR, Severity.COMPILE_ERROR):
            assert severity.is_fatal
        for severity in (Severity.WARNING, Severity.NOTICE, Severity.DEPRECATED,
                         Severity.USER_ERROR, Severity.RECOVERABLE_ERROR):
            assert not severity.is_fatal

    def test_labels(self):
        """Test labels are lowercase names."""
        assert Severity.CORE_ERROR.label == "core_error"
        assert (Severity.ERROR | Severity.WARNING).label == "error|warning"

    @pytest.mark.parametrize("category, expected", [
        (DeprecationWarning, Severity.DEPRECATED),
        (PendingDeprecationWarning, Severity.DEPRECATED),
        (FutureWarning, Severity.USER_DEPRECATED),
        (SyntaxWarning, Severity.COMPILE_WARNING),
        (ImportWarning, Severity.CORE_WARNING),
        (ResourceWarning, Severity.NOTICE),
        (UserWarning, Severity.USER_WARNING),
        (RuntimeWarning, Severity.WARNING),
        (BytesWarning, Severity.WARNING),
    ])
    def test_severity_for_warning(self, category, expected):
        """Test warning categories map to severities."""
        assert severity_for_warning(category) == expected

    def test_warning_subclass(self):
        """Test subclasses inherit their base category's severity."""
        class ApiDeprecation(DeprecationWarning):
            pass

        assert severity_for_warning(ApiDeprecation) == Severity.DEPRECATED


class FakeAtexit:
    """Stand-in for the atexit module that keeps the callback list."""

    def __init__(self):
        self.callbacks = []

    def register(self, func):
        self.callbacks.append(func)

    def unregister(self, func):
        self.callbacks = [callback for callback in self.callbacks if callback != func]

    def run_exitfuncs(self):
        for callback in reversed(self.callbacks):
            callback()


class TestProcessWideSlots:
    """Test that slots are shared by every ProcessHooks instance."""

    def test_second_instance_replaces_shutdown_function(self):
        """Test installing from another instance unregisters the earlier callback."""
        fake_atexit = FakeAtexit()
        first_calls = []
        second_calls = []

        with patch("error_handler.runtime.atexit", fake_atexit):
            ProcessHooks().register_shutdown_function(lambda: first_calls.append(1))
            second = lambda: second_calls.append(1)
            ProcessHooks().register_shutdown_function(second)

            fake_atexit.run_exitfuncs()

        assert first_calls == []
        assert second_calls == [1]
        assert fake_atexit.callbacks == [second]
        assert runtime.installed_shutdown_function() is second

    def test_older_restore_keeps_newer_hooks(self):
        """Test restore() from a replaced instance leaves the newer hooks alone."""
        original_excepthook = sys.excepthook
        original_showwarning = warnings.showwarning
        older = ProcessHooks()
        newer = ProcessHooks()
        fake_atexit = FakeAtexit()

        with patch("error_handler.runtime.atexit", fake_atexit):
            older.set_exception_handler(Mock())
            older.set_error_handler(Mock())
            older.register_shutdown_function(Mock())
            newer.set_exception_handler(Mock())
            newer.set_error_handler(Mock())
            shutdown = Mock()
            newer.register_shutdown_function(shutdown)

            try:
                installed_excepthook = sys.excepthook
                installed_showwarning = warnings.showwarning

                older.restore()

                assert sys.excepthook is installed_excepthook
                assert warnings.showwarning is installed_showwarning
                assert runtime.installed_shutdown_function() is shutdown
                assert fake_atexit.callbacks == [shutdown]
            finally:
                newer.restore()

        assert runtime.installed_shutdown_function() is None
        assert fake_atexit.callbacks == []
        # newer put back what it displaced, which was older's shim
        assert sys.excepthook is not original_excepthook
        sys.excepthook = original_excepthook
        warnings.showwarning = original_showwarning

    def test_restore_in_reverse_order(self):
        """Test restoring newest first returns the original hooks."""
        original_excepthook = sys.excepthook
        older = ProcessHooks()
        newer = ProcessHooks()

        older.set_exception_handler(Mock())
        newer.set_exception_handler(Mock())
        newer.restore()
        older.restore()

        assert sys.excepthook is original_excepthook
