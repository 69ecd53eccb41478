"""
Severity levels for runtime signals.

Severities are bit flags so that masks (the fatal set, the ambient
reporting level) can be tested with a single ``&``.
"""

from enum import IntFlag
from typing import Type


class Severity(IntFlag):
    """Runtime signal severity."""
    ERROR = 1
    WARNING = 2
    PARSE = 4
    NOTICE = 8
    CORE_ERROR = 16
    CORE_WARNING = 32
    COMPILE_ERROR = 64
    COMPILE_WARNING = 128
    USER_ERROR = 256
    USER_WARNING = 512
    USER_NOTICE = 1024
    STRICT = 2048
    RECOVERABLE_ERROR = 4096
    DEPRECATED = 8192
    USER_DEPRECATED = 16384
    ALL = 32767
    FATAL = PARSE | ERROR | CORE_ERROR | COMPILE_ERROR

    @property
    def label(self) -> str:
        """Lowercase name, e.g. ``"core_error"``; combined flags join with ``|``."""
        if self.name:
            return self.name.lower()
        return "|".join(
            member.name.lower() for member in _SINGLE_FLAGS if member & self
        ) or str(int(self))

    @property
    def is_fatal(self) -> bool:
        return bool(self & Severity.FATAL)


_SINGLE_FLAGS = [member for member in Severity
                 if member not in (Severity.ALL, Severity.FATAL)]


# Checked in order, subclasses before their bases
_WARNING_SEVERITIES = [
    (DeprecationWarning, Severity.DEPRECATED),
    (PendingDeprecationWarning, Severity.DEPRECATED),
    (FutureWarning, Severity.USER_DEPRECATED),
    (SyntaxWarning, Severity.COMPILE_WARNING),
    (ImportWarning, Severity.CORE_WARNING),
    (ResourceWarning, Severity.NOTICE),
    (UserWarning, Severity.USER_WARNING),
]


def severity_for_warning(category: Type[Warning]) -> Severity:
    """Map a warning category to its severity."""
    for warning_class, severity in _WARNING_SEVERITIES:
        if issubclass(category, warning_class):
            return severity
    return Severity.WARNING
