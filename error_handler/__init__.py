"""
Error Handler

Process-wide capture and reporting of warnings, uncaught exceptions and
fatal shutdown errors, including:
- Normalization of every failure into a diagnostic record
- Pluggable renderers (callables, registered names, classes)
- Optional stack traces with JSON-safe frame data
- Scoped invocation returning exceptions as values
- Cause-chain message flattening

Typical use::

    reporter = ErrorReporter()
    reporter.set_renderer("json")
    reporter.register(debug=True, include_trace=True)
"""

from .exceptions import (
    ErrorHandlerError,
    InvalidRendererError,
    ConfigurationError,
    SignalError,
)

from .severity import Severity, severity_for_warning

from .records import GENERIC_MESSAGE, DiagnosticRecord, build_trace, normalize_value

from .renderers import (
    TextRenderer,
    JsonRenderer,
    YamlRenderer,
    LoggingRenderer,
    register_renderer,
    available_renderers,
    resolve_renderer,
)

from .scoped import CallResult, call, get_messages, get_messages_by_call, iter_causes

from .config import ReporterConfig, ConfigurationManager, load_config

from .runtime import ProcessHooks, LastError

from .reporter import ErrorReporter

__all__ = [
    "ErrorHandlerError",
    "InvalidRendererError",
    "ConfigurationError",
    "SignalError",
    "Severity",
    "severity_for_warning",
    "GENERIC_MESSAGE",
    "DiagnosticRecord",
    "build_trace",
    "normalize_value",
    "TextRenderer",
    "JsonRenderer",
    "YamlRenderer",
    "LoggingRenderer",
    "register_renderer",
    "available_renderers",
    "resolve_renderer",
    "CallResult",
    "call",
    "get_messages",
    "get_messages_by_call",
    "iter_causes",
    "ReporterConfig",
    "ConfigurationManager",
    "load_config",
    "ProcessHooks",
    "LastError",
    "ErrorReporter",
]
