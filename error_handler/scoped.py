"""
Scoped invocation and cause-chain helpers.

These work without a reporter: ``call`` turns a raised exception into a
returned value, and ``get_messages`` flattens an exception and its causes
into a list of messages.
"""

from typing import Any, Callable, Iterator, List, NamedTuple, Optional


class CallResult(NamedTuple):
    """Outcome of ``call``: the unit's return value or the exception it raised."""
    result: Any
    failure: Optional[Exception]

    @property
    def ok(self) -> bool:
        return self.failure is None


def call(unit: Callable[[], Any]) -> CallResult:
    """
    Run ``unit`` with no arguments and capture any exception it raises.

    KeyboardInterrupt, SystemExit and other non-Exception BaseExceptions
    are not captured.

    Returns:
        CallResult(value, None) on success, CallResult(None, exc) on failure
    """
    try:
        result = unit()
    except Exception as exc:
        return CallResult(None, exc)
    return CallResult(result, None)


def _next_cause(failure: BaseException) -> Optional[BaseException]:
    if failure.__cause__ is not None:
        return failure.__cause__
    if failure.__suppress_context__:
        return None
    return failure.__context__


def iter_causes(failure: BaseException) -> Iterator[BaseException]:
    """Yield ``failure``, then its cause, then that cause's cause, and so on."""
    current = failure
    while current is not None:
        yield current
        current = _next_cause(current)


def get_messages(failure: BaseException) -> List[str]:
    """Messages of ``failure`` and all its causes, newest first."""
    return [str(item) for item in iter_causes(failure)]


def get_messages_by_call(unit: Callable[[], Any]) -> Optional[List[str]]:
    """
    None if ``unit`` succeeds, else the cause-chain messages of its failure.

    The unit's return value is not passed back; use call() when both the
    value and the failure are needed.
    """
    outcome = call(unit)
    if outcome.failure is None:
        return None
    return get_messages(outcome.failure)
