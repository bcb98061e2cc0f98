"""Shared hosts, configs and sample suites for the test modules."""

from datetime import datetime, timedelta

from bartest.asserts import assert_equal, assert_true
from bartest.config import RunConfig
from bartest.context import TestContext
from bartest.discovery import discover
from bartest.engine import ExecutionEngine
from bartest.host import BarPeriod, SeriesHost
from bartest.registry import TestRegistry
from bartest.tags import SuiteTag, UnitTag

START_TIME = datetime(2026, 1, 5, 9, 30)


def make_host(bars: int = 60, start_price: float = 100.0, step: float = 0.5,
              period: BarPeriod = None, registry=None) -> SeriesHost:
    """Host with a steady uptrend: every bar is bullish, one tick wicks."""
    host = SeriesHost(period=period, registry=registry)
    for i in range(bars):
        open_ = start_price + i * step
        close = open_ + step * 0.8
        host.add_bar(START_TIME + timedelta(minutes=i), open_, close + 0.25, open_ - 0.25, close, 100 + i)
    return host


def quiet_config(**overrides) -> RunConfig:
    """Config that runs immediately and keeps the chart untouched."""
    params = {"start_test_at_bar": 0, "show_results_on_chart": False}
    params.update(overrides)
    return RunConfig(**params)


def execute(registry: TestRegistry, host: SeriesHost = None, config: RunConfig = None):
    """Discover and run a registry directly through the engine."""
    host = host or make_host()
    config = config or quiet_config()
    context = TestContext(host)
    found = discover(registry, config, host)
    return ExecutionEngine(context, config).run(found.suites)


# --- End-to-end scenario suites --------------------------------------------

class PassingSuite:
    def first(self):
        assert_true(True)

    def second(self):
        assert_equal(2, 1 + 1)


class FailingSuite:
    def check(self):
        assert_true(False, "X must be Y")


class PendingSuite:
    calls = 0

    def not_ready(self):
        PendingSuite.calls += 1


def scenario_registry() -> TestRegistry:
    registry = TestRegistry()
    registry.register(PassingSuite, SuiteTag(name="S1"), ["first", "second"])
    registry.register(FailingSuite, SuiteTag(name="S2"), ["check"])
    registry.register(PendingSuite, SuiteTag(name="S3"), {"not_ready": UnitTag(skip="not ready")})
    return registry
