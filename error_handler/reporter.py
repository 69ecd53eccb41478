"""
Process-wide Error Reporter

Captures warnings, uncaught exceptions and fatal errors left over at
shutdown, normalizes each into a diagnostic record, and hands the record to
a caller-supplied renderer.

Flow:
- warning        -> handle_error     -> raises SignalError
- uncaught error -> handle_exception -> record -> renderer (or dump and exit)
- shutdown       -> handle_fatal     -> raises SignalError for fatal errors
"""

import logging
import pprint
import sys
from typing import Any, Callable, List, Optional

from . import runtime, scoped
from .config import ReporterConfig, load_config
from .exceptions import SignalError
from .records import DiagnosticRecord, StackFrame, build_trace
from .renderers import Renderer, resolve_renderer
from .runtime import ProcessHooks
from .scoped import CallResult
from .severity import Severity


class ErrorReporter:
    """
    Normalizes runtime failures and dispatches them to a renderer.

    The reporter owns its configuration and installs itself through an
    injected ProcessHooks, so several reporters can coexist in tests while
    only the last registered one receives process-wide failures.
    """

    def __init__(self,
                 config: Optional[ReporterConfig] = None,
                 hooks: Optional[ProcessHooks] = None):
        """
        Initialize error reporter.

        Args:
            config: Operating mode; defaults to non-debug, no trace
            hooks: Installer for the process-wide handler slots
        """
        self.config = config or ReporterConfig()
        self.hooks = hooks or ProcessHooks()
        self.logger = logging.getLogger(__name__)
        self._renderer: Optional[Renderer] = None

        if self.config.renderer:
            self.set_renderer(self.config.renderer)

    @classmethod
    def from_config(cls,
                    config_file: Optional[str] = None,
                    hooks: Optional[ProcessHooks] = None) -> "ErrorReporter":
        """
        Build a reporter from configuration files and the environment.

        Args:
            config_file: Explicit config file; None searches the standard locations
            hooks: Installer for the process-wide handler slots

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        return cls(config=load_config(config_file), hooks=hooks)

    @property
    def debug(self) -> bool:
        return self.config.debug

    @property
    def include_trace(self) -> bool:
        return self.config.include_trace

    @property
    def renderer(self) -> Optional[Renderer]:
        return self._renderer

    def register(self, debug: bool = False, include_trace: bool = False) -> None:
        """
        Set the operating mode and install the reporter as the process's
        handler for warnings, uncaught exceptions and shutdown.

        Replaces handlers installed by an earlier register() call.
        """
        self.set_debug(debug)
        self.set_trace(include_trace)

        self.hooks.set_error_handler(self.handle_error)
        self.hooks.set_exception_handler(self.handle_exception)
        self.hooks.register_shutdown_function(self._shutdown)

        self.logger.debug(f"Error reporter registered (debug={debug}, include_trace={include_trace})")

    def set_debug(self, debug: bool = True) -> None:
        self.config.debug = debug

    def set_trace(self, include_trace: bool = True) -> None:
        self.config.include_trace = include_trace

    def set_renderer(self, renderer: Any) -> None:
        """
        Bind the renderer that receives every report.

        Args:
            renderer: A callable, a registered renderer name, a renderer class,
                or an object with a ``render`` method

        Raises:
            InvalidRendererError: If ``renderer`` cannot be made callable
        """
        self._renderer = resolve_renderer(renderer)

    def handle_error(self, severity: int, message: str, filename: str, line: int) -> None:
        """Convert a runtime signal into a SignalError and raise it."""
        raise SignalError(message, severity=Severity(severity), filename=filename, lineno=line)

    def handle_exception(self, failure: BaseException) -> None:
        """
        Report a failure through the bound renderer.

        Without a renderer the record is dumped to stdout and the process
        exits with the configured exit code.
        """
        self.logger.debug(
            f"Handling {type(failure).__name__} "
            f"(renderer {'bound' if self._renderer else 'not bound'})"
        )

        try:
            record = self.build_record(failure)
        except Exception:
            self.logger.exception(f"Failed to build diagnostic record for {type(failure).__name__}")
            record = DiagnosticRecord.generic().to_dict()
            self._dump_and_exit(record)
            return

        if self._renderer is None:
            self._dump_and_exit(record)
            return

        try:
            self._renderer(record, failure)
        except Exception:
            self.logger.exception("Renderer failed while reporting an error")
            self._dump_and_exit(record)

    def build_record(self, failure: BaseException) -> dict:
        """Diagnostic record for ``failure`` under the current mode."""
        if not self.config.debug:
            return DiagnosticRecord.generic().to_dict()

        record = DiagnosticRecord.from_failure(failure)
        if self.config.include_trace:
            record.trace = self.get_trace(failure)
        return record.to_dict()

    def handle_fatal(self) -> None:
        """
        Raise a SignalError if the last recorded error is fatal.

        No-op when there is no last error, reporting is switched off, or the
        error's severity is not one of parse, error, core error, compile error.
        """
        error = runtime.error_get_last()

        if error and runtime.error_reporting() and error.severity & Severity.FATAL:
            raise SignalError(error.message, severity=error.severity,
                              filename=error.file, lineno=error.line)

    def _shutdown(self) -> None:
        # atexit does not pass callback exceptions to sys.excepthook
        try:
            self.handle_fatal()
        except SignalError as signal_error:
            self.handle_exception(signal_error)

    def _dump_and_exit(self, record: dict) -> None:
        pprint.pprint(record, stream=sys.stdout)
        sys.stdout.flush()
        sys.exit(self.config.exit_code)

    def get_trace(self, failure: BaseException) -> List[StackFrame]:
        return build_trace(failure)

    def call(self, unit: Callable[[], Any]) -> CallResult:
        return scoped.call(unit)

    def get_messages(self, failure: BaseException) -> List[str]:
        return scoped.get_messages(failure)

    def get_messages_by_call(self, unit: Callable[[], Any]) -> Optional[List[str]]:
        return scoped.get_messages_by_call(unit)
