"""
Renderers for Diagnostic Records

A renderer is any callable taking ``(record, failure)``; what it does with
them (print, log, write a response) is up to the application. This module
provides a name registry, the built-in renderers, and resolve_renderer(),
which normalizes the accepted input shapes into one callable.

Built-in renderers:
- text: human-readable lines
- json: a JSON document
- yaml: a YAML document
- logging: a log record through the logging module
"""

import inspect
import json
import logging
import sys
from typing import Any, Callable, Dict, List, Optional, TextIO

import yaml

from .exceptions import InvalidRendererError

Renderer = Callable[[Dict[str, Any], BaseException], None]
RendererFactory = Callable[[], Any]


class TextRenderer:
    """Write the record as ``key: value`` lines."""

    def __init__(self, stream: Optional[TextIO] = None, title: str = "Error Report"):
        self.stream = stream
        self.title = title

    def __call__(self, record: Dict[str, Any], failure: BaseException) -> None:
        stream = self.stream or sys.stderr
        lines = [self.title, "=" * len(self.title)]
        lines.append(f"Message: {record['message']}")

        if "code" in record:
            lines.append(f"Type: {type(failure).__name__}")
            lines.append(f"Code: {record['code']}")
            lines.append(f"Location: {record['file']}:{record['line']}")

        if record.get("trace"):
            lines.append("")
            lines.append("Trace (most recent call first):")
            for index, frame in enumerate(record["trace"]):
                lines.append(
                    f"  #{index} {frame.get('function')} at "
                    f"{frame.get('file')}:{frame.get('line')}"
                )
                if frame.get("code"):
                    lines.append(f"      {frame['code']}")

        stream.write("\n".join(lines) + "\n")
        stream.flush()


class JsonRenderer:
    """Write the record as a JSON document."""

    def __init__(self, stream: Optional[TextIO] = None, indent: Optional[int] = 2):
        self.stream = stream
        self.indent = indent

    def __call__(self, record: Dict[str, Any], failure: BaseException) -> None:
        stream = self.stream or sys.stderr
        stream.write(json.dumps({"error": record}, indent=self.indent, default=str) + "\n")
        stream.flush()


class YamlRenderer:
    """Write the record as a YAML document."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream

    def __call__(self, record: Dict[str, Any], failure: BaseException) -> None:
        stream = self.stream or sys.stderr
        yaml.safe_dump({"error": record}, stream, default_flow_style=False, sort_keys=False)
        stream.flush()


class LoggingRenderer:
    """Log the record, with the failure's traceback attached."""

    def __init__(self, logger_name: str = "error_handler.report", level: int = logging.ERROR):
        self.logger = logging.getLogger(logger_name)
        self.level = level

    def __call__(self, record: Dict[str, Any], failure: BaseException) -> None:
        if "file" in record:
            log_message = f"{record['message']} ({record['file']}:{record['line']})"
        else:
            log_message = record["message"]

        self.logger.log(
            self.level,
            log_message,
            exc_info=(type(failure), failure, failure.__traceback__),
            extra={"diagnostic_record": record},
        )


_RENDERER_REGISTRY: Dict[str, RendererFactory] = {
    "text": TextRenderer,
    "json": JsonRenderer,
    "yaml": YamlRenderer,
    "logging": LoggingRenderer,
}


def register_renderer(name: str, factory: RendererFactory) -> None:
    """
    Make a renderer available by name.

    Args:
        name: Identifier accepted by ErrorReporter.set_renderer
        factory: Zero-argument callable producing the renderer
    """
    if not callable(factory):
        raise InvalidRendererError(f"Renderer factory for '{name}' is not callable")
    _RENDERER_REGISTRY[name] = factory


def get_renderer_factory(name: str) -> RendererFactory:
    try:
        return _RENDERER_REGISTRY[name]
    except KeyError:
        raise InvalidRendererError(
            f"Unknown renderer '{name}'. Available: {', '.join(available_renderers())}"
        ) from None


def available_renderers() -> List[str]:
    return sorted(_RENDERER_REGISTRY)


def _accepts_failure(func: Callable) -> bool:
    """Whether ``func`` can be called with two positional arguments."""
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return True

    positional = 0
    for parameter in signature.parameters.values():
        if parameter.kind == parameter.VAR_POSITIONAL:
            return True
        if parameter.kind in (parameter.POSITIONAL_ONLY, parameter.POSITIONAL_OR_KEYWORD):
            positional += 1
    return positional >= 2


def _as_binary(func: Callable) -> Renderer:
    if _accepts_failure(func):
        return func

    def render(record: Dict[str, Any], failure: BaseException) -> None:
        func(record)

    render.__wrapped__ = func
    return render


def resolve_renderer(value: Any) -> Renderer:
    """
    Normalize a renderer given as a name, a class, a callable or an object
    with a ``render`` method.

    Raises:
        InvalidRendererError: If no callable can be derived from ``value``
    """
    if isinstance(value, str):
        value = get_renderer_factory(value)()
    elif isinstance(value, type):
        try:
            value = value()
        except TypeError as e:
            raise InvalidRendererError(
                f"Renderer class {value.__name__} cannot be constructed without arguments: {e}"
            ) from e

    if callable(value):
        return _as_binary(value)

    render = getattr(value, "render", None)
    if callable(render):
        return _as_binary(render)

    raise InvalidRendererError(f"Cannot use {type(value).__name__} as a renderer")
