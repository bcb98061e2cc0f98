"""Simulated bar feed using AgentPy.

``BarFeedModel`` stands in for the host application's bar clock: every step
appends one OHLCV bar (geometric Brownian motion) to a ``SeriesHost`` and
notifies the test runner, which decides whether a run is due.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional

import agentpy as ap

from .config import RunConfig
from .host import BarPeriod, SeriesHost
from .report import LineSink
from .runner import RunReport, TestRunner

MINUTES_PER_DAY = 24 * 60


class BarFeedModel(ap.Model):
    """Agent-based bar generator driving a ``TestRunner``.

    Parameters (``self.p``):
        host: existing ``SeriesHost`` to append to (created when missing)
        runner: ``TestRunner`` notified after every bar (optional)
        instrument, bar_minutes, start_time: used when creating the host
        initial_price, volatility_daily, trend_bias: price process
        tick_size: prices are rounded to this increment
        base_volume: median bar volume
        seed: AgentPy seed for reproducible paths
    """

    def setup(self) -> None:
        bar_minutes = self.p.get('bar_minutes', 1)
        self.host: SeriesHost = self.p.get('host')
        if self.host is None:
            self.host = SeriesHost(
                instrument=self.p.get('instrument', "ES 12-26"),
                period=BarPeriod("Minute", bar_minutes),
                registry=self.p.get('registry'),
            )
        self.runner: Optional[TestRunner] = self.p.get('runner')

        self.bar_minutes: int = bar_minutes
        self.start_time: datetime = self.p.get('start_time', datetime(2026, 1, 5, 9, 30))
        self.tick_size: float = self.p.get('tick_size', 0.25)
        self.price: float = self.p.get('initial_price', 100.0)
        self.sigma: float = self.p.get('volatility_daily', 0.02) * math.sqrt(bar_minutes / MINUTES_PER_DAY)
        self.drift: float = self.p.get('trend_bias', 0.0) * 0.001
        self.base_volume: float = self.p.get('base_volume', 1000.0)

        self.reports: List[RunReport] = []
        self.record('initial_price', self.price)

    def step(self) -> None:
        open_ = self.price
        log_return = self.drift * self.sigma + self.random.normalvariate(0, self.sigma)
        close = open_ * math.exp(log_return)

        # Wicks extend beyond the body by a half-normal excursion
        upper = abs(self.random.normalvariate(0, self.sigma)) * open_
        lower = abs(self.random.normalvariate(0, self.sigma)) * open_
        high = max(open_, close) + upper
        low = max(self.tick_size, min(open_, close) - lower)

        volume = round(self.base_volume * self.random.lognormvariate(0, 0.5))
        bar_time = self.start_time + timedelta(minutes=self.bar_minutes * self.host.count)

        self.host.add_bar(
            bar_time,
            self._round(open_), self._round(high), self._round(low), self._round(close),
            volume,
        )
        self.price = close

        self.record('close', self._round(close))
        self.record('volume', volume)

        if self.runner is not None:
            report = self.runner.on_bar_update()
            if report is not None:
                self.reports.append(report)
                self.record('tests_passed', report.summary.passed)
                self.record('tests_failed', report.summary.failed)

    def _round(self, price: float) -> float:
        return round(round(price / self.tick_size) * self.tick_size, 10)


@dataclass
class FeedRun:
    """Outcome of driving a runner through a simulated feed."""
    host: SeriesHost
    runner: TestRunner
    reports: List[RunReport] = field(default_factory=list)

    @property
    def last_report(self) -> Optional[RunReport]:
        return self.reports[-1] if self.reports else None


def run_feed(bars: int, config: Optional[RunConfig] = None, registry=None,
             sink: Optional[LineSink] = None, host: Optional[SeriesHost] = None,
             terminate: bool = True, **params) -> FeedRun:
    """Generate ``bars`` bars and let the runner fire on them like a live host."""
    if host is None:
        host = SeriesHost(
            instrument=params.get('instrument', "ES 12-26"),
            period=BarPeriod("Minute", params.get('bar_minutes', 1)),
            registry=registry,
        )
    runner = TestRunner(host, config, registry, sink)

    params.update({'host': host, 'runner': runner})
    params.setdefault('seed', 42)

    model = BarFeedModel(params)
    model.sim_setup(steps=bars)

    for _ in range(bars):
        model.step()

    if terminate:
        runner.terminate()

    return FeedRun(host=host, runner=runner, reports=model.reports)
