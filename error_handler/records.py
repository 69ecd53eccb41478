"""
Diagnostic Records

Builds the normalized representation of a handled failure that renderers
receive: the DiagnosticRecord and the JSON-representable stack frames of
its optional trace.
"""

import inspect
import linecache
import math
import traceback
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

GENERIC_MESSAGE = "Whoops, looks like something went wrong."

MAX_DEPTH = 10

StackFrame = Dict[str, Any]


@dataclass
class DiagnosticRecord:
    """
    Normalized, renderer-facing description of a failure.

    Only ``message`` is always present. ``code``, ``file`` and ``line`` are
    set in debug mode, ``trace`` when trace inclusion is also enabled. A
    record without a code renders as the generic message alone.
    """
    message: str = GENERIC_MESSAGE
    code: Optional[int] = None
    file: Optional[str] = None
    line: Optional[int] = None
    trace: Optional[List[StackFrame]] = None

    @classmethod
    def generic(cls) -> "DiagnosticRecord":
        """Record that reveals nothing about the failure."""
        return cls()

    @classmethod
    def from_failure(cls, failure: BaseException) -> "DiagnosticRecord":
        """Detailed record with message, code and location of ``failure``."""
        file, line = failure_location(failure)
        return cls(
            message=str(failure),
            code=failure_code(failure),
            file=file,
            line=line,
        )

    def to_dict(self) -> Dict[str, Any]:
        """External shape handed to renderers."""
        if self.code is None:
            return {"message": self.message}

        data = {
            "message": self.message,
            "code": self.code,
            "file": self.file,
            "line": self.line,
        }
        if self.trace is not None:
            data["trace"] = self.trace
        return data


def failure_code(failure: BaseException) -> int:
    """Integer code of a failure: ``code`` or ``errno`` attribute, else 0."""
    for attr in ("code", "errno"):
        value = getattr(failure, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return 0


def failure_location(failure: BaseException) -> Tuple[str, int]:
    """
    File and line where a failure originated.

    Explicit ``filename``/``lineno`` attributes (SignalError, SyntaxError)
    win over the innermost traceback entry.
    """
    filename = getattr(failure, "filename", None)
    lineno = getattr(failure, "lineno", None)
    if isinstance(filename, str) and isinstance(lineno, int):
        return filename, lineno

    tb = failure.__traceback__
    if tb is None:
        return "", 0

    while tb.tb_next is not None:
        tb = tb.tb_next
    return tb.tb_frame.f_code.co_filename, tb.tb_lineno


def normalize_value(value: Any, depth: int = 0) -> Any:
    """
    Reduce a value to JSON-representable data.

    Strings, finite numbers, booleans and None are kept, sequences and
    mappings are normalized recursively, anything else becomes its repr().
    """
    if depth > MAX_DEPTH:
        return "<max depth exceeded>"

    if value is None or isinstance(value, (bool, int, str)):
        return value

    if isinstance(value, float):
        return value if math.isfinite(value) else repr(value)

    if isinstance(value, (list, tuple, set, frozenset)):
        return [normalize_value(item, depth + 1) for item in value]

    if isinstance(value, dict):
        return {
            str(key): normalize_value(item, depth + 1)
            for key, item in value.items()
        }

    try:
        return repr(value)
    except Exception:
        return f"<unrepresentable {type(value).__name__}>"


def _frame_arguments(frame) -> Dict[str, Any]:
    """Arguments the frame's function was called with, by parameter name."""
    try:
        arg_info = inspect.getargvalues(frame)
    except (TypeError, ValueError):
        return {}

    names = list(arg_info.args)
    if arg_info.varargs:
        names.append(arg_info.varargs)
    if arg_info.keywords:
        names.append(arg_info.keywords)
    return {name: arg_info.locals[name] for name in names if name in arg_info.locals}


def normalize_frame(frame, lineno: int) -> StackFrame:
    """Build one trace entry from a live frame object."""
    filename = frame.f_code.co_filename
    source = linecache.getline(filename, lineno).strip() or None
    raw = {
        "file": filename,
        "line": lineno,
        "function": frame.f_code.co_name,
        "code": source,
        "args": _frame_arguments(frame),
    }
    return normalize_value(raw)


def build_trace(failure: BaseException) -> List[StackFrame]:
    """Normalized frames of a failure's traceback, innermost call first."""
    frames = [
        normalize_frame(frame, lineno)
        for frame, lineno in traceback.walk_tb(failure.__traceback__)
    ]
    frames.reverse()
    return frames
