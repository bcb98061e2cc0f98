"""Execution context and host boundary tests (pytest-free)."""

import time
from datetime import datetime

import polars as pl

from bartest.context import TestContext
from bartest.errors import UnitTimeout
from bartest.host import SeriesHost
from tests.fixtures import START_TIME, make_host
from tests.utils import expect_raises


# --- Scratch map --------------------------------------------------------------

def test_missing_key_returns_zero_value_of_kind():
    context = TestContext(make_host(bars=3))
    assert context.get("count", int) == 0
    assert context.get("label", str) == ""
    assert context.get("anything") is None


def test_missing_key_of_kind_without_zero_value_is_none():
    class Level:
        def __init__(self, price):
            self.price = price

    context = TestContext(make_host(bars=3))
    context.reset()
    assert context.get("started", datetime) is None
    assert context.get("level", Level) is None


def test_scratch_map_round_trip():
    context = TestContext(make_host(bars=3))
    context.set("threshold", 1.5)
    assert context.contains("threshold")
    assert context.get("threshold", float) == 1.5
    context.remove("threshold")
    assert not context.contains("threshold")
    context.remove("threshold")


def test_reset_clears_scratch_and_output():
    context = TestContext(make_host(bars=3))
    context.reset()
    first_start = context.start_time
    context.set("key", "value")
    context.print("hello")

    context.reset()
    assert context.get("key") is None
    assert context.output == ""
    assert context.start_time >= first_start
    assert context.end_time is None


def test_requires_host():
    expect_raises(ValueError, TestContext, None)


# --- Host pass-throughs ----------------------------------------------------------

def test_pass_throughs_read_current_bar():
    host = make_host(bars=10)
    context = TestContext(host)
    assert context.current_bar == 9
    assert context.count == 10
    assert context.instrument == host.instrument
    assert context.time == host.time_at(9)
    assert context.close[0] == host.series("close")[0]
    assert context.close[1] < context.close[0]


def test_print_forwards_bar_prefixed_line():
    lines = []
    context = TestContext(make_host(bars=4), writer=lines.append)
    context.print("checking")
    assert lines == ["[TestContext @ Bar 3] checking"]
    assert context.output == "checking"


# --- Cooperative timeout ---------------------------------------------------------

def test_checkpoint_raises_after_deadline():
    context = TestContext(make_host(bars=1))
    context.reset()
    context.arm_deadline(1)
    time.sleep(0.01)
    exc = expect_raises(UnitTimeout, context.checkpoint)
    assert exc.timeout_ms == 1
    assert exc.elapsed_ms > 1


def test_checkpoint_without_deadline_never_raises():
    context = TestContext(make_host(bars=1))
    context.reset()
    context.arm_deadline(0)
    time.sleep(0.002)
    context.checkpoint()


# --- SeriesHost ------------------------------------------------------------------

def test_series_host_rejects_time_going_backwards():
    host = SeriesHost()
    host.add_bar(datetime(2026, 1, 5, 10, 0), 1, 2, 0.5, 1.5)
    expect_raises(ValueError, host.add_bar, datetime(2026, 1, 5, 9, 59), 1, 2, 0.5, 1.5)


def test_series_host_frame_round_trip():
    host = make_host(bars=5)
    frame = host.to_frame()
    assert frame.height == 5
    assert frame.columns == ["time", "open", "high", "low", "close", "volume"]

    rebuilt = SeriesHost.from_frame(frame)
    assert rebuilt.count == 5
    assert rebuilt.time_at(0) == START_TIME
    assert rebuilt.series("close")[0] == host.series("close")[0]


def test_extra_series_and_conditions():
    host = SeriesHost.from_frame(pl.DataFrame({
        "time": [datetime(2026, 1, 5, 9, 30), datetime(2026, 1, 5, 9, 31)],
        "open": [1.0, 2.0], "high": [2.0, 3.0], "low": [0.5, 1.5], "close": [1.5, 2.5],
    }))
    host.set_series("SMA", [1.5, 2.0])
    assert host.series("SMA")[0] == 2.0
    assert host.series("volume")[0] == 0.0
    expect_raises(KeyError, host.series, "RSI")

    assert not host.condition_active("trend")
    host.set_condition("trend")
    assert host.condition_active("trend")
    host.set_condition("trend", False)
    assert not host.condition_active("trend")
