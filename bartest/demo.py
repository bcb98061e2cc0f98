"""Built-in demo suites for the CLI.

Loaded with ``include_module("bartest.demo")``; checks the basic shape of
whatever bars the host has loaded.
"""

import numpy as np

from . import market_asserts as market
from .asserts import assert_greater_equal, assert_less_equal, assert_true
from .base import BarTestBase
from .registry import make_registration
from .tags import SuiteTag, UnitTag


class BarIntegritySuite(BarTestBase):
    """OHLC relationships every bar must satisfy."""

    def high_is_highest(self):
        assert_greater_equal(self.high[0], max(self.open[0], self.close[0]),
                             "High must be >= open and close")

    def low_is_lowest(self):
        assert_less_equal(self.low[0], min(self.open[0], self.close[0]),
                          "Low must be <= open and close")

    def close_inside_range(self):
        market.price_in_range(self.close[0], self.low[0], self.high[0])

    def volume_not_negative(self):
        assert_greater_equal(self.volume[0], 0, "Volume must not be negative")


class MovingAverageSuite(BarTestBase):
    """Simple moving average sanity checks over the loaded history."""

    period = 20

    def on_initialize(self):
        self.sma = None

    def class_set_up(self):
        closes = self.close.to_numpy()
        window = np.ones(self.period) / self.period
        self.sma = np.convolve(closes, window, mode="valid")

    def sma_is_finite(self):
        assert_true(np.isfinite(self.sma).all(), "SMA contains non-finite values")

    def sma_within_price_range(self):
        closes = self.close.to_numpy()[-self.period:]
        slack = 1e-9 * float(closes.max())  # float rounding in the convolution
        market.price_in_range(float(self.sma[-1]), float(closes.min()) - slack, float(closes.max()) + slack)


def register_suites():
    return [
        make_registration(
            BarIntegritySuite,
            SuiteTag(name="Bar integrity", category="Data", tags="smoke,data", priority=0),
            {
                "high_is_highest": UnitTag(),
                "low_is_lowest": UnitTag(),
                "close_inside_range": UnitTag(),
                "volume_not_negative": UnitTag(),
            },
        ),
        make_registration(
            MovingAverageSuite,
            SuiteTag(name="Moving average", category="Indicators", tags="indicator",
                     min_bars=MovingAverageSuite.period, priority=1),
            ["sma_is_finite", "sma_within_price_range"],
        ),
    ]
