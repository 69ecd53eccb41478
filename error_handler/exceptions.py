"""
Exceptions for the Error Handler

This module defines the exceptions raised by the reporter itself and the
SignalError used to escalate warnings and fatal shutdown errors.
"""

from typing import Optional

from .severity import Severity


class ErrorHandlerError(Exception):
    """Base exception for all error handler errors."""
    pass


class InvalidRendererError(ErrorHandlerError, TypeError):
    """Raised when a renderer cannot be normalized into a callable."""
    pass


class ConfigurationError(ErrorHandlerError, ValueError):
    """Raised when reporter configuration is invalid."""
    pass


class SignalError(ErrorHandlerError):
    """
    A runtime signal (warning or fatal error) converted into an exception.

    Carries the severity and source location of the original signal so the
    uncaught-exception path can report it like any other failure.
    """

    code = 0

    def __init__(self,
                 message: str,
                 severity: Severity = Severity.ERROR,
                 filename: Optional[str] = None,
                 lineno: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.severity = Severity(severity)
        self.filename = filename
        self.lineno = lineno

    def __repr__(self) -> str:
        return (f"SignalError({self.message!r}, severity={self.severity.label}, "
                f"filename={self.filename!r}, lineno={self.lineno!r})")
