"""Assertion primitives for test units.

Every primitive either returns normally or raises ``AssertionFailed`` with
the caller's ``message`` override or a generated default message. Nothing
here catches and swallows a failure signal.
"""

import math
from typing import Any, Callable, Optional, Tuple, Type, Union

from .errors import AssertionFailed, Inconclusive

DEFAULT_TOLERANCE = 1e-4

ExceptionKind = Union[Type[BaseException], Tuple[Type[BaseException], ...]]


def _kind_name(kind: ExceptionKind) -> str:
    if isinstance(kind, tuple):
        return " | ".join(k.__name__ for k in kind)
    return kind.__name__


def fail(message: str = "Test failed") -> None:
    """Fail the current unit unconditionally."""
    raise AssertionFailed(message)


def inconclusive(message: str = "Test inconclusive") -> None:
    """Stop the current unit without a pass/fail verdict."""
    raise Inconclusive(message)


# --- Equality ------------------------------------------------------------------

def assert_equal(expected: Any, actual: Any, message: Optional[str] = None) -> None:
    if not expected == actual:
        fail(message or f"Expected: <{expected}>, but was: <{actual}>")


def assert_not_equal(not_expected: Any, actual: Any, message: Optional[str] = None) -> None:
    if not_expected == actual:
        fail(message or f"Expected: not <{not_expected}>, but was: <{actual}>")


def assert_close(expected: float, actual: float, tolerance: float = DEFAULT_TOLERANCE,
                 message: Optional[str] = None) -> None:
    """Absolute-difference float comparison.

    NaN on either side always fails since it never lies within a tolerance.
    """
    difference = abs(expected - actual)
    if not difference <= tolerance:
        fail(message or (
            f"Expected: <{expected}> ±{tolerance}, but was: <{actual}> "
            f"(difference: {difference})"
        ))


# --- Conditions ------------------------------------------------------------------

def assert_true(condition: Any, message: Optional[str] = None) -> None:
    if not condition:
        fail(message or "Expected: True, but was: False")


def assert_false(condition: Any, message: Optional[str] = None) -> None:
    if condition:
        fail(message or "Expected: False, but was: True")


def assert_none(value: Any, message: Optional[str] = None) -> None:
    if value is not None:
        fail(message or f"Expected: None, but was: <{value}>")


def assert_not_none(value: Any, message: Optional[str] = None) -> None:
    if value is None:
        fail(message or "Expected: not None, but was: None")


def assert_is_instance(value: Any, kind: type, message: Optional[str] = None) -> None:
    if not isinstance(value, kind):
        fail(message or f"Expected: instance of <{_kind_name(kind)}>, but was: <{type(value).__name__}>")


def assert_contains(container: Any, item: Any, message: Optional[str] = None) -> None:
    if item not in container:
        fail(message or f"Expected: <{container}> to contain <{item}>, but it did not")


# --- Ordering --------------------------------------------------------------------

def assert_greater(actual: Any, threshold: Any, message: Optional[str] = None) -> None:
    if not actual > threshold:
        fail(message or f"Expected: <{actual}> > <{threshold}>, but was not")


def assert_greater_equal(actual: Any, threshold: Any, message: Optional[str] = None) -> None:
    if not actual >= threshold:
        fail(message or f"Expected: <{actual}> >= <{threshold}>, but was not")


def assert_less(actual: Any, threshold: Any, message: Optional[str] = None) -> None:
    if not actual < threshold:
        fail(message or f"Expected: <{actual}> < <{threshold}>, but was not")


def assert_less_equal(actual: Any, threshold: Any, message: Optional[str] = None) -> None:
    if not actual <= threshold:
        fail(message or f"Expected: <{actual}> <= <{threshold}>, but was not")


def assert_in_range(actual: Any, low: Any, high: Any, message: Optional[str] = None) -> None:
    """Inclusive range check."""
    if not low <= actual <= high:
        fail(message or f"Expected: <{actual}> between <{low}> and <{high}>, but was not")


# --- Exceptions ------------------------------------------------------------------

def expect_raises(kind: ExceptionKind, func: Callable[..., Any], *args: Any,
                  message: Optional[str] = None, **kwargs: Any) -> BaseException:
    """Require ``func(*args, **kwargs)`` to raise ``kind`` (or a subclass).

    Returns the caught exception so callers can inspect it.
    """
    try:
        func(*args, **kwargs)
    except kind as exc:
        return exc
    except Exception as exc:
        raise AssertionFailed(message or (
            f"Expected exception of type <{_kind_name(kind)}>, "
            f"but got <{type(exc).__name__}>: {exc}"
        )) from exc
    raise AssertionFailed(
        message or f"Expected exception of type <{_kind_name(kind)}>, but no exception was thrown"
    )


def expect_no_raise(func: Callable[..., Any], *args: Any,
                    message: Optional[str] = None, **kwargs: Any) -> Any:
    """Require ``func(*args, **kwargs)`` to return normally; returns its value."""
    try:
        return func(*args, **kwargs)
    except Exception as exc:
        raise AssertionFailed(
            message or f"Expected no exception, but got <{type(exc).__name__}>: {exc}"
        ) from exc


def is_nan(value: float) -> bool:
    return isinstance(value, float) and math.isnan(value)
