"""Execution engine tests (pytest-free).

Each test builds its own registry so suites never leak between tests.
"""

import time

from bartest.asserts import assert_equal, inconclusive
from bartest.base import BarTestBase
from bartest.errors import InvocationError, ResultFrozenError
from bartest.registry import TestRegistry
from bartest.results import UnitStatus
from bartest.tags import SuiteTag, UnitTag
from tests.fixtures import PendingSuite, execute, make_host, quiet_config
from tests.utils import expect_raises


def run_one(suite_type, units, tag=None, config=None, host=None):
    registry = TestRegistry()
    registry.register(suite_type, tag or SuiteTag(), units)
    return execute(registry, host=host, config=config)


# --- Classification --------------------------------------------------------------

def test_normal_return_passes():
    class Clean:
        def works(self):
            assert_equal(1, 1)

    [result] = run_one(Clean, ["works"])
    assert result.status is UnitStatus.PASSED
    assert result.message == ""
    assert result.fault_kind is None
    assert result.duration_ms >= 0


def test_assertion_message_is_kept_verbatim():
    class Asserting:
        def check(self):
            assert_equal(10, 11, "X must be Y")

    [result] = run_one(Asserting, ["check"])
    assert result.status is UnitStatus.FAILED
    assert result.message == "X must be Y"


def test_bare_assert_counts_as_assertion_failure():
    class BareAssert:
        def check(self):
            raise AssertionError("plain assert")

    [result] = run_one(BareAssert, ["check"])
    assert result.status is UnitStatus.FAILED
    assert result.message == "plain assert"


def test_unexpected_fault_message_and_trace():
    class Faulty:
        def explode(self):
            raise ValueError("boom")

    [result] = run_one(Faulty, ["explode"])
    assert result.status is UnitStatus.FAILED
    assert result.message == "unexpected fault: ValueError — boom"
    assert result.fault_kind == "ValueError"
    assert "in explode" in result.trace_head


def test_distinguish_errors_reports_errored():
    class Faulty:
        def explode(self):
            raise KeyError("missing")

    [result] = run_one(Faulty, ["explode"], config=quiet_config(distinguish_errors=True))
    assert result.status is UnitStatus.ERRORED
    assert result.message.startswith("unexpected fault: KeyError")


def test_invocation_wrapper_is_unwrapped():
    class Wrapped:
        def call(self):
            try:
                raise ZeroDivisionError("division by zero")
            except ZeroDivisionError as e:
                raise InvocationError("wrapper") from e

    [result] = run_one(Wrapped, ["call"])
    assert result.message == "unexpected fault: ZeroDivisionError — division by zero"


def test_inconclusive_signal():
    class Undecided:
        def maybe(self):
            inconclusive("not enough bars")

    [result] = run_one(Undecided, ["maybe"])
    assert result.status is UnitStatus.INCONCLUSIVE
    assert result.message == "not enough bars"


# --- Skips ---------------------------------------------------------------------------

def test_skipped_unit_body_never_runs():
    PendingSuite.calls = 0
    [result] = run_one(PendingSuite, {"not_ready": UnitTag(skip="not ready")})
    assert PendingSuite.calls == 0
    assert result.status is UnitStatus.SKIPPED
    assert result.skip_reason == "not ready"
    assert result.duration_ms == 0


def test_gated_suite_is_not_instantiated():
    class Gated:
        created = 0

        def __init__(self):
            Gated.created += 1

        def a(self):
            pass

        def b(self):
            pass

    results = run_one(Gated, ["a", "b"], tag=SuiteTag(min_bars=500), host=make_host(bars=10))
    assert Gated.created == 0
    assert [r.status for r in results] == [UnitStatus.SKIPPED, UnitStatus.SKIPPED]
    assert results[0].skip_reason == "Requires at least 500 bars, only 10 loaded"


# --- Construction and class hooks ------------------------------------------------------

def test_constructor_failure_yields_single_result():
    class Broken:
        def __init__(self):
            raise RuntimeError("broken")

        def a(self):
            pass

        def b(self):
            pass

    results = run_one(Broken, ["a", "b"])
    assert len(results) == 1
    assert results[0].unit_name == "<constructor>"
    assert results[0].status is UnitStatus.FAILED
    assert results[0].message == "Failed to create test instance: broken"


def test_class_setup_failure_fails_every_unit_without_running_them():
    class BadClassSetup:
        calls = []

        def class_set_up(self):
            raise RuntimeError("no data feed")

        def class_tear_down(self):
            BadClassSetup.calls.append("class_tear_down")

        def a(self):
            BadClassSetup.calls.append("a")

        def b(self):
            BadClassSetup.calls.append("b")

    results = run_one(BadClassSetup, ["a", "b"])
    assert BadClassSetup.calls == []
    assert [r.status for r in results] == [UnitStatus.FAILED, UnitStatus.FAILED]
    assert results[0].message == "class setup failed: RuntimeError — no data feed"


def test_class_teardown_failure_appends_synthetic_result():
    class BadClassTeardown:
        def class_tear_down(self):
            raise OSError("cleanup")

        def a(self):
            pass

    results = run_one(BadClassTeardown, ["a"])
    assert [r.unit_name for r in results] == ["a", "<class teardown>"]
    assert results[0].status is UnitStatus.PASSED
    assert results[1].status is UnitStatus.FAILED
    assert results[1].message == "class teardown failed: OSError — cleanup"


# --- Unit hooks ------------------------------------------------------------------------

def test_hook_order_around_each_unit():
    class Ordered:
        calls = []

        def class_set_up(self):
            Ordered.calls.append("class_set_up")

        def set_up(self):
            Ordered.calls.append("set_up")

        def tear_down(self):
            Ordered.calls.append("tear_down")

        def class_tear_down(self):
            Ordered.calls.append("class_tear_down")

        def a(self):
            Ordered.calls.append("a")

        def b(self):
            Ordered.calls.append("b")
            raise ValueError("still tears down")

    run_one(Ordered, ["a", "b"])
    assert Ordered.calls == [
        "class_set_up",
        "set_up", "a", "tear_down",
        "set_up", "b", "tear_down",
        "class_tear_down",
    ]


def test_setup_failure_skips_body_and_reports_failed():
    class BadSetup:
        ran = False

        def set_up(self):
            raise RuntimeError("fixture")

        def a(self):
            BadSetup.ran = True

    [result] = run_one(BadSetup, ["a"])
    assert not BadSetup.ran
    assert result.status is UnitStatus.FAILED
    assert result.message == "unit setup failed: RuntimeError — fixture"


def test_teardown_failure_fails_an_otherwise_passing_unit():
    class BadTeardown:
        def tear_down(self):
            raise RuntimeError("leak")

        def passes(self):
            pass

        def fails(self):
            assert_equal(1, 2, "real failure")

    passing, failing = run_one(BadTeardown, ["passes", "fails"])
    assert passing.status is UnitStatus.FAILED
    assert passing.message == "unit teardown failed: RuntimeError — leak"
    assert failing.message == "real failure"


# --- Context and instance sharing ------------------------------------------------------

def test_context_scratch_map_is_reset_between_units():
    class Isolation(BarTestBase):
        seen = []

        def writer(self):
            self.context.set("shared_key", 42)
            Isolation.seen.append(self.context.get("shared_key"))

        def reader(self):
            Isolation.seen.append(self.context.get("shared_key"))

    run_one(Isolation, ["writer", "reader"])
    assert Isolation.seen == [42, None]


def test_suite_instance_is_shared_by_default():
    class Shared(BarTestBase):
        def first(self):
            self.counter = 1

        def second(self):
            assert_equal(1, self.counter)

    results = run_one(Shared, ["first", "second"])
    assert all(r.status is UnitStatus.PASSED for r in results)


def test_fixture_per_unit_gives_fresh_instances():
    class Fresh(BarTestBase):
        def first(self):
            self.counter = 1

        def second(self):
            assert_equal(False, hasattr(self, "counter"), "state leaked")

    results = run_one(Fresh, ["first", "second"], tag=SuiteTag(fixture_per_unit=True))
    assert all(r.status is UnitStatus.PASSED for r in results)


def test_unit_output_and_snapshot_are_recorded():
    class Chatty(BarTestBase):
        def talk(self):
            self.print("close is up")

    [result] = run_one(Chatty, ["talk"], host=make_host(bars=12))
    assert result.output == "[Chatty] close is up"
    assert result.snapshot.bar == 11
    assert result.snapshot.instrument == "ES 12-26"
    assert result.snapshot.period == "1 Minute"


# --- Timing ------------------------------------------------------------------------------

def test_slow_unit_times_out():
    class Slow:
        def crawl(self):
            time.sleep(0.03)

    [result] = run_one(Slow, {"crawl": UnitTag(timeout_ms=5)})
    assert result.status is UnitStatus.TIMED_OUT
    assert result.message.startswith("Exceeded timeout of 5ms")


def test_timeout_overrides_failure_but_keeps_message():
    class SlowFailure:
        def crawl(self):
            time.sleep(0.03)
            assert_equal(1, 2, "late failure")

    [result] = run_one(SlowFailure, {"crawl": UnitTag(timeout_ms=5)})
    assert result.status is UnitStatus.TIMED_OUT
    assert result.message == "late failure"


def test_cooperative_checkpoint_stops_unit_early():
    class Looping(BarTestBase):
        iterations = 0

        def spin(self):
            while True:
                Looping.iterations += 1
                time.sleep(0.001)
                self.context.checkpoint()

    [result] = run_one(Looping, {"spin": UnitTag(timeout_ms=10)})
    assert result.status is UnitStatus.TIMED_OUT
    assert "Exceeded timeout of 10ms" in result.message
    assert Looping.iterations > 0


def test_benchmark_fails_slow_unit_only_when_enabled():
    class Benchmarked:
        def strict(self):
            time.sleep(0.02)

        def lenient(self):
            time.sleep(0.02)

    strict, lenient = run_one(Benchmarked, {
        "strict": UnitTag(benchmark_ms=1),
        "lenient": UnitTag(benchmark_ms=1, fail_on_slow=False),
    })
    assert strict.status is UnitStatus.FAILED
    assert strict.message.startswith("exceeded benchmark of 1ms")
    assert lenient.status is UnitStatus.PASSED


# --- Results ----------------------------------------------------------------------------

def test_results_are_frozen_after_completion():
    class Clean:
        def works(self):
            pass

    [result] = run_one(Clean, ["works"])
    expect_raises(ResultFrozenError, setattr, result, "status", UnitStatus.FAILED)
    expect_raises(AttributeError, setattr, result, "message", "edited")
    assert result.status is UnitStatus.PASSED


def test_result_count_matches_discovered_units():
    class Mixed(BarTestBase):
        def a(self):
            pass

        def b(self):
            raise ValueError("x")

        def c(self):
            pass

    results = run_one(Mixed, {"a": UnitTag(), "b": UnitTag(), "c": UnitTag(skip="later")})
    assert [r.status for r in results] == [UnitStatus.PASSED, UnitStatus.FAILED, UnitStatus.SKIPPED]
