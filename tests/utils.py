"""Utility helpers for lightweight test execution without pytest."""

import math


def assert_close(actual: float, expected: float, rel: float = 1e-9, msg: str = ""):
    """Assert that two floating point values are approximately equal."""
    if not math.isclose(actual, expected, rel_tol=rel, abs_tol=1e-12):
        suffix = f" ({msg})" if msg else ""
        raise AssertionError(f"Expected {expected} ± {rel}, got {actual}{suffix}")


def expect_raises(exception, func, *args, **kwargs):
    """Assert that a function raises a specific exception and return it.

    Deliberately independent of ``bartest.asserts.expect_raises`` so the
    framework's own primitives are not used to test themselves.
    """
    try:
        func(*args, **kwargs)
    except exception as exc:
        return exc
    raise AssertionError(f"Expected {exception.__name__} to be raised")
