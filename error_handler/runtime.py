"""
Host runtime collaborator.

Provides the process-level pieces the reporter relies on: a slot holding
the last recorded low-level error, the ambient reporting level, and
ProcessHooks, which owns the three process-wide installation slots
(``warnings.showwarning``, ``sys.excepthook`` and an ``atexit`` callback).
"""

import atexit
import logging
import sys
import warnings
from dataclasses import dataclass
from typing import Callable, Optional

from .severity import Severity, severity_for_warning

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LastError:
    """The most recently recorded low-level error."""
    severity: Severity
    message: str
    file: str
    line: int


_last_error: Optional[LastError] = None
_reporting_level: int = Severity.ALL


def record_error(severity: int, message: str, file: str = "", line: int = 0) -> LastError:
    """Record an error in the last-error slot, replacing any earlier one."""
    global _last_error
    _last_error = LastError(Severity(severity), str(message), file, line)
    return _last_error


def error_get_last() -> Optional[LastError]:
    """Return the last recorded error, or None."""
    return _last_error


def clear_last_error() -> None:
    global _last_error
    _last_error = None


def error_reporting(level: Optional[int] = None) -> int:
    """
    Get or set the ambient reporting level.

    Args:
        level: New severity mask; None leaves the level unchanged

    Returns:
        The level in effect before the call
    """
    global _reporting_level
    previous = _reporting_level
    if level is not None:
        _reporting_level = int(level)
    return previous


ErrorHandlerFn = Callable[[int, str, str, int], None]
ExceptionHandlerFn = Callable[[BaseException], None]
ShutdownFn = Callable[[], None]

_shutdown_function: Optional[ShutdownFn] = None


def installed_shutdown_function() -> Optional[ShutdownFn]:
    """The shutdown function currently registered by any ProcessHooks."""
    return _shutdown_function


def clear_shutdown_function() -> None:
    """Unregister the installed shutdown function, if any."""
    global _shutdown_function
    if _shutdown_function is not None:
        atexit.unregister(_shutdown_function)
        _shutdown_function = None


class ProcessHooks:
    """
    Installs handlers into the process-wide failure slots.

    Each slot holds one handler for the whole process; installing again,
    from this or any other ProcessHooks, replaces the previous handler
    instead of stacking. restore() only touches slots that still hold this
    instance's handler.
    """

    def __init__(self):
        self._original_showwarning = None
        self._original_excepthook = None
        self._showwarning = None
        self._excepthook = None
        self._shutdown = None

    def set_error_handler(self, handler: ErrorHandlerFn) -> None:
        """Route warnings to ``handler(severity, message, filename, lineno)``."""
        if warnings.showwarning is not self._showwarning:
            self._original_showwarning = warnings.showwarning

        def showwarning(message, category, filename, lineno, file=None, line=None):
            severity = severity_for_warning(category)
            record_error(severity, str(message), filename, lineno)
            handler(severity, str(message), filename, lineno)

        self._showwarning = showwarning
        warnings.showwarning = showwarning
        logger.debug("Installed warnings handler")

    def set_exception_handler(self, handler: ExceptionHandlerFn) -> None:
        """Route uncaught exceptions to ``handler(exception)``."""
        if sys.excepthook is not self._excepthook:
            self._original_excepthook = sys.excepthook

        def excepthook(exc_type, exc_value, exc_traceback):
            if exc_value is None:
                exc_value = exc_type()
            if exc_value.__traceback__ is None:
                exc_value = exc_value.with_traceback(exc_traceback)
            handler(exc_value)

        self._excepthook = excepthook
        sys.excepthook = excepthook
        logger.debug("Installed exception handler")

    def register_shutdown_function(self, handler: ShutdownFn) -> None:
        """Run ``handler()`` at interpreter exit, replacing any earlier one."""
        global _shutdown_function
        clear_shutdown_function()
        _shutdown_function = handler
        self._shutdown = handler
        atexit.register(handler)
        logger.debug("Registered shutdown handler")

    def restore(self) -> None:
        """Reinstate the hooks this instance displaced, if it still owns them."""
        if self._showwarning is not None and warnings.showwarning is self._showwarning:
            warnings.showwarning = self._original_showwarning
        if self._excepthook is not None and sys.excepthook is self._excepthook:
            sys.excepthook = self._original_excepthook
        if self._shutdown is not None and _shutdown_function is self._shutdown:
            clear_shutdown_function()

        self._original_showwarning = None
        self._original_excepthook = None
        self._showwarning = None
        self._excepthook = None
        self._shutdown = None
        logger.debug("Restored process hooks")
