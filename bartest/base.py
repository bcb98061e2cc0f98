"""Optional base class for test suites."""

from typing import Optional

from .context import TestContext
from .host import Series


class BarTestBase:
    """Base class giving a suite access to the run context and host data.

    The engine calls ``initialize`` once per suite instance before any unit
    runs. Unit methods share the instance, so attributes set in one unit are
    visible to the next unless the suite opts into ``fixture_per_unit``.
    """

    context: Optional[TestContext] = None

    def initialize(self, context: TestContext) -> None:
        if context is None:
            raise ValueError("context must not be None")
        self.context = context
        self.on_initialize()

    def on_initialize(self) -> None:
        pass

    # Lifecycle hooks, all optional
    def class_set_up(self) -> None:
        pass

    def class_tear_down(self) -> None:
        pass

    def set_up(self) -> None:
        pass

    def tear_down(self) -> None:
        pass

    # Host shortcuts
    @property
    def host(self):
        return self.context.host

    @property
    def current_bar(self) -> int:
        return self.context.current_bar

    @property
    def count(self) -> int:
        return self.context.count

    @property
    def instrument(self) -> str:
        return self.context.instrument

    @property
    def open(self) -> Series:
        return self.context.open

    @property
    def high(self) -> Series:
        return self.context.high

    @property
    def low(self) -> Series:
        return self.context.low

    @property
    def close(self) -> Series:
        return self.context.close

    @property
    def volume(self) -> Series:
        return self.context.volume

    @property
    def median(self) -> float:
        """(High + Low) / 2 of the current bar."""
        return (self.high[0] + self.low[0]) / 2.0

    @property
    def typical(self) -> float:
        """(High + Low + Close) / 3 of the current bar."""
        return (self.high[0] + self.low[0] + self.close[0]) / 3.0

    def print(self, message: str) -> None:
        self.context.print(f"[{type(self).__name__}] {message}")

    @staticmethod
    def cross_above(series1: Series, series2: Series, look_back: int = 1) -> bool:
        """True if series1 moved from <= series2 to > series2 within ``look_back`` bars."""
        for bars_ago in range(0, look_back):
            if series1[bars_ago] > series2[bars_ago] and series1[bars_ago + 1] <= series2[bars_ago + 1]:
                return True
        return False

    @staticmethod
    def cross_below(series1: Series, series2: Series, look_back: int = 1) -> bool:
        for bars_ago in range(0, look_back):
            if series1[bars_ago] < series2[bars_ago] and series1[bars_ago + 1] >= series2[bars_ago + 1]:
                return True
        return False
