"""Suite base class helper tests (pytest-free)."""

from bartest.asserts import assert_equal, assert_false, assert_true
from bartest.base import BarTestBase
from bartest.context import TestContext
from bartest.host import Series
from bartest.registry import TestRegistry
from bartest.results import UnitStatus
from bartest.tags import SuiteTag
from tests.fixtures import execute, make_host
from tests.utils import assert_close


def series(*values):
    """Oldest value first; the last value is ``[0]``."""
    return Series.from_values(values)


def initialized(bars: int = 10) -> BarTestBase:
    suite = BarTestBase()
    suite.initialize(TestContext(make_host(bars=bars)))
    return suite


# --- Price shortcuts -------------------------------------------------------------

def test_median_and_typical_price_of_current_bar():
    suite = initialized(bars=10)
    # last bar: open 104.5, close 104.9, high 105.15, low 104.25
    assert_close(suite.median, (105.15 + 104.25) / 2.0)
    assert_close(suite.typical, (105.15 + 104.25 + 104.9) / 3.0)
    assert suite.low[0] < suite.median < suite.high[0]


# --- Cross helpers ---------------------------------------------------------------

def test_cross_above_on_current_bar():
    fast = series(1, 1, 1, 3)
    slow = series(2, 2, 2, 2)
    assert BarTestBase.cross_above(fast, slow)
    assert not BarTestBase.cross_below(fast, slow)


def test_touch_then_break_counts_as_cross():
    assert BarTestBase.cross_above(series(2, 3), series(2, 2))
    assert BarTestBase.cross_below(series(2, 1), series(2, 2))


def test_no_cross_when_series_stay_apart():
    fast = series(3, 4, 5, 6)
    slow = series(2, 2, 2, 2)
    assert not BarTestBase.cross_above(fast, slow, look_back=3)
    assert not BarTestBase.cross_below(fast, slow, look_back=3)


def test_look_back_window_reaches_older_crosses():
    fast = series(1, 3, 3, 3)
    slow = series(2, 2, 2, 2)
    assert not BarTestBase.cross_above(fast, slow, look_back=1)
    assert not BarTestBase.cross_above(fast, slow, look_back=2)
    assert BarTestBase.cross_above(fast, slow, look_back=3)

    falling = series(3, 1, 1)
    assert not BarTestBase.cross_below(falling, series(2, 2, 2), look_back=1)
    assert BarTestBase.cross_below(falling, series(2, 2, 2), look_back=2)


def test_helpers_inside_a_running_suite():
    host = make_host(bars=10)
    # closes run 100.4, 100.9, ... and pass 103.0 between bars 5 and 6
    host.set_series("level", [103.0] * 10)

    class Crossing(BarTestBase):
        def close_crossed_level_recently(self):
            level = self.context.series("level")
            assert_false(self.cross_above(self.close, level, look_back=3), "too early")
            assert_true(self.cross_above(self.close, level, look_back=4), "cross missed")

        def typical_above_median_on_bullish_bar(self):
            assert_true(self.typical > self.median)
            assert_equal(10, self.count)

    registry = TestRegistry()
    registry.register(Crossing, SuiteTag(),
                      ["close_crossed_level_recently", "typical_above_median_on_bullish_bar"])
    results = execute(registry, host=host)
    assert [r.status for r in results] == [UnitStatus.PASSED, UnitStatus.PASSED]
