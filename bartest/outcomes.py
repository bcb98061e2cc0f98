"""Classification of what happened inside a unit's fault boundary.

Exceptions are translated once into an ``Outcome`` value; the execution
engine then maps outcome kinds to result statuses with a lookup table
instead of a chain of ``except`` clauses.
"""

import traceback
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .errors import AssertionFailed, Inconclusive, InvocationError, UnitTimeout


class OutcomeKind(Enum):
    PASSED = "passed"
    ASSERTION_FAILED = "assertion_failed"
    UNEXPECTED_FAULT = "unexpected_fault"
    INCONCLUSIVE = "inconclusive"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class Outcome:
    """Tagged outcome of invoking one operation."""

    kind: OutcomeKind
    message: str = ""
    fault_kind: Optional[str] = None   # Exception class name for faults
    trace_head: Optional[str] = None   # Innermost frame of the traceback

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.PASSED


PASSED = Outcome(OutcomeKind.PASSED)


def unwrap(exc: BaseException) -> BaseException:
    """Strip ``InvocationError`` wrappers down to the real cause."""
    seen = set()
    while isinstance(exc, InvocationError) and exc.__cause__ is not None and id(exc) not in seen:
        seen.add(id(exc))
        exc = exc.__cause__
    return exc


def trace_head(exc: BaseException) -> Optional[str]:
    """Return the innermost traceback frame as ``file:line in func``."""
    tb = exc.__traceback__
    if tb is None:
        return None
    frames = traceback.extract_tb(tb)
    if not frames:
        return None
    frame = frames[-1]
    return f"{frame.filename}:{frame.lineno} in {frame.name}"


def describe_fault(exc: BaseException) -> str:
    return f"{type(exc).__name__} — {exc}"


def classify(exc: BaseException) -> Outcome:
    """Translate an exception raised inside a fault boundary into an Outcome."""
    exc = unwrap(exc)

    if isinstance(exc, AssertionFailed):
        return Outcome(OutcomeKind.ASSERTION_FAILED, exc.message, type(exc).__name__)

    # A bare ``assert`` in a unit body is the author asserting too
    if isinstance(exc, AssertionError):
        message = str(exc) or "Assertion failed"
        return Outcome(OutcomeKind.ASSERTION_FAILED, message, type(exc).__name__, trace_head(exc))

    if isinstance(exc, Inconclusive):
        return Outcome(OutcomeKind.INCONCLUSIVE, exc.message, type(exc).__name__)

    if isinstance(exc, UnitTimeout):
        return Outcome(OutcomeKind.TIMED_OUT, str(exc), type(exc).__name__)

    return Outcome(
        OutcomeKind.UNEXPECTED_FAULT,
        f"unexpected fault: {describe_fault(exc)}",
        type(exc).__name__,
        trace_head(exc),
    )
