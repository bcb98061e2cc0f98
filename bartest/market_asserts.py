"""Bar-data assertions for indicator and price checks.

Built only on the public primitives in ``bartest.asserts``; series are
indexed bars-ago (``series[0]`` is the current bar).
"""

from typing import Optional

from .asserts import DEFAULT_TOLERANCE, assert_close, fail, is_nan
from .context import TestContext
from .host import Series


def _required(value, name: str):
    if value is None:
        raise ValueError(f"{name} must not be None")
    return value


def indicator_value(indicator: Series, expected: float, tolerance: float = DEFAULT_TOLERANCE,
                    bars_ago: int = 0, message: Optional[str] = None) -> None:
    actual = _required(indicator, "indicator")[bars_ago]
    where = f" at bar {bars_ago}" if bars_ago else ""
    if is_nan(actual):
        fail(message or f"Expected indicator value{where}, but got NaN")
    assert_close(
        expected, actual, tolerance,
        message or f"Expected indicator value{where}: {expected} ±{tolerance}, but was: {actual}",
    )


def indicator_is_valid(indicator: Series, bars_ago: int = 0, message: Optional[str] = None) -> None:
    """Current value must be a finite number."""
    actual = _required(indicator, "indicator")[bars_ago]
    if is_nan(actual) or actual in (float("inf"), float("-inf")):
        fail(message or f"Expected a valid indicator value, but was: {actual}")


def crossed_above(series1: Series, series2: Series, bars_ago: int = 1,
                  message: Optional[str] = None) -> None:
    _required(series1, "series1")
    _required(series2, "series2")
    crossed = series1[bars_ago] > series2[bars_ago] and series1[bars_ago + 1] <= series2[bars_ago + 1]
    if not crossed:
        fail(message or (
            f"Expected series1 to cross above series2 at bar {bars_ago}. "
            f"Series1: [{series1[bars_ago + 1]:.4f}] -> [{series1[bars_ago]:.4f}], "
            f"Series2: [{series2[bars_ago + 1]:.4f}] -> [{series2[bars_ago]:.4f}]"
        ))


def crossed_below(series1: Series, series2: Series, bars_ago: int = 1,
                  message: Optional[str] = None) -> None:
    _required(series1, "series1")
    _required(series2, "series2")
    crossed = series1[bars_ago] < series2[bars_ago] and series1[bars_ago + 1] >= series2[bars_ago + 1]
    if not crossed:
        fail(message or (
            f"Expected series1 to cross below series2 at bar {bars_ago}. "
            f"Series1: [{series1[bars_ago + 1]:.4f}] -> [{series1[bars_ago]:.4f}], "
            f"Series2: [{series2[bars_ago + 1]:.4f}] -> [{series2[bars_ago]:.4f}]"
        ))


def series_above(series1: Series, series2: Series, bars_ago: int = 0,
                 message: Optional[str] = None) -> None:
    a, b = _required(series1, "series1")[bars_ago], _required(series2, "series2")[bars_ago]
    if not a > b:
        fail(message or f"Expected series1 ({a:.4f}) to be above series2 ({b:.4f}) at bar {bars_ago}")


def series_below(series1: Series, series2: Series, bars_ago: int = 0,
                 message: Optional[str] = None) -> None:
    a, b = _required(series1, "series1")[bars_ago], _required(series2, "series2")[bars_ago]
    if not a < b:
        fail(message or f"Expected series1 ({a:.4f}) to be below series2 ({b:.4f}) at bar {bars_ago}")


def price_in_range(price: float, low: float, high: float, message: Optional[str] = None) -> None:
    if price < low or price > high:
        fail(message or f"Expected price to be between {low} and {high}, but was: {price}")


def close_above(context: TestContext, price: float, message: Optional[str] = None) -> None:
    close = _required(context, "context").close[0]
    if close <= price:
        fail(message or f"Expected Close ({close}) to be above {price}, but it was not")


def close_below(context: TestContext, price: float, message: Optional[str] = None) -> None:
    close = _required(context, "context").close[0]
    if close >= price:
        fail(message or f"Expected Close ({close}) to be below {price}, but it was not")


def bullish_bar(context: TestContext, message: Optional[str] = None) -> None:
    close, open_ = _required(context, "context").close[0], context.open[0]
    if close <= open_:
        fail(message or f"Expected bullish bar (Close > Open), but Close={close}, Open={open_}")


def bearish_bar(context: TestContext, message: Optional[str] = None) -> None:
    close, open_ = _required(context, "context").close[0], context.open[0]
    if close >= open_:
        fail(message or f"Expected bearish bar (Close < Open), but Close={close}, Open={open_}")
