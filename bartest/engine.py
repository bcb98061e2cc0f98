"""Execution engine: runs discovered suites unit by unit.

Every unit executes inside its own fault boundary. Whatever a suite does,
the engine returns one terminal ``UnitResult`` per discovered unit (plus
synthetic results for construction and class teardown faults) and moves on
to the next unit.
"""

import time
from typing import Callable, Iterable, List, Optional

from .config import RunConfig
from .context import TestContext
from .discovery import SuiteDescriptor, UnitDescriptor
from .outcomes import PASSED, Outcome, OutcomeKind, classify, describe_fault, trace_head, unwrap
from .results import EnvironmentSnapshot, UnitResult, UnitStatus

CONSTRUCTOR_UNIT = "<constructor>"
CLASS_TEARDOWN_UNIT = "<class teardown>"

STATUS_BY_OUTCOME = {
    OutcomeKind.PASSED: UnitStatus.PASSED,
    OutcomeKind.ASSERTION_FAILED: UnitStatus.FAILED,
    OutcomeKind.UNEXPECTED_FAULT: UnitStatus.FAILED,
    OutcomeKind.INCONCLUSIVE: UnitStatus.INCONCLUSIVE,
    OutcomeKind.TIMED_OUT: UnitStatus.TIMED_OUT,
}


def _fault_message(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class ExecutionEngine:
    """Sequential executor for a worklist of suite descriptors."""

    def __init__(self, context: TestContext, config: Optional[RunConfig] = None,
                 on_result: Optional[Callable[[UnitResult], None]] = None):
        self.context = context
        self.config = config or RunConfig()
        self.on_result = on_result

    def run(self, worklist: Iterable[SuiteDescriptor]) -> List[UnitResult]:
        results: List[UnitResult] = []
        for suite in worklist:
            results.extend(self.run_suite(suite))
        return results

    def run_suite(self, suite: SuiteDescriptor) -> List[UnitResult]:
        results: List[UnitResult] = []

        if suite.is_gated:
            for unit in suite.units:
                results.append(self._skip(suite, unit, suite.gate_reason))
            return results

        try:
            shared = self._instantiate(suite)
        except Exception as e:
            result = UnitResult(suite.name, CONSTRUCTOR_UNIT, category=suite.tag.category, tags=suite.tag.tags)
            result.mark_running(EnvironmentSnapshot.capture(self.context))
            results.append(self._finish(
                result, UnitStatus.FAILED,
                f"Failed to create test instance: {_fault_message(unwrap(e))}",
                unwrap(e),
            ))
            return results

        fault = self._call_hook(shared, "class_set_up")
        if fault is not None:
            message = f"class setup failed: {describe_fault(fault)}"
            for unit in suite.units:
                result = self._new_result(suite, unit)
                result.mark_running(EnvironmentSnapshot.capture(self.context))
                results.append(self._finish(result, UnitStatus.FAILED, message, fault))
            return results

        for unit in suite.units:
            results.append(self.run_unit(suite, unit, shared))

        fault = self._call_hook(shared, "class_tear_down")
        if fault is not None:
            result = UnitResult(suite.name, CLASS_TEARDOWN_UNIT, category=suite.tag.category, tags=suite.tag.tags)
            result.mark_running(EnvironmentSnapshot.capture(self.context))
            results.append(self._finish(
                result, UnitStatus.FAILED, f"class teardown failed: {describe_fault(fault)}", fault))

        return results

    def run_unit(self, suite: SuiteDescriptor, unit: UnitDescriptor, shared) -> UnitResult:
        if unit.tag.should_skip:
            return self._skip(suite, unit, unit.tag.skip)

        result = self._new_result(suite, unit)
        self.context.reset()

        instance = shared
        if suite.tag.fixture_per_unit:
            try:
                instance = self._instantiate(suite)
            except Exception as e:
                result.mark_running(EnvironmentSnapshot.capture(self.context))
                return self._finish(
                    result, UnitStatus.FAILED,
                    f"Failed to create test instance: {_fault_message(unwrap(e))}",
                    unwrap(e),
                )

        result.mark_running(EnvironmentSnapshot.capture(self.context))

        fault = self._call_hook(instance, "set_up")
        if fault is not None:
            self.context.mark_end()
            return self._finish(result, UnitStatus.FAILED, f"unit setup failed: {describe_fault(fault)}", fault)

        timeout_ms = unit.tag.timeout_ms
        self.context.arm_deadline(timeout_ms)
        start = time.perf_counter()
        try:
            getattr(instance, unit.method_name)()
            outcome = PASSED
        except Exception as e:
            outcome = classify(e)
        elapsed_ms = (time.perf_counter() - start) * 1000.0

        teardown_fault = self._call_hook(instance, "tear_down")
        self.context.mark_end()

        status = self._status_for(outcome)
        message = outcome.message
        if timeout_ms > 0 and elapsed_ms > timeout_ms:
            status = UnitStatus.TIMED_OUT
            if outcome.ok:
                message = f"Exceeded timeout of {timeout_ms:.0f}ms (elapsed {elapsed_ms:.2f}ms)"
        elif status is UnitStatus.PASSED and self._too_slow(unit, elapsed_ms):
            status = UnitStatus.FAILED
            message = f"exceeded benchmark of {unit.tag.benchmark_ms:.0f}ms (took {elapsed_ms:.2f}ms)"

        fault_kind, head = outcome.fault_kind, outcome.trace_head
        if status is UnitStatus.PASSED and teardown_fault is not None:
            status = UnitStatus.FAILED
            message = f"unit teardown failed: {describe_fault(teardown_fault)}"
            fault_kind, head = type(teardown_fault).__name__, trace_head(teardown_fault)

        result.duration_ms = elapsed_ms
        result.output = self.context.output
        result.fault_kind = fault_kind
        result.trace_head = head
        return self._finish(result, status, message)

    # --- Helpers -----------------------------------------------------------------

    def _instantiate(self, suite: SuiteDescriptor):
        instance = suite.suite_type()
        initialize = getattr(instance, "initialize", None)
        if callable(initialize):
            initialize(self.context)
        return instance

    @staticmethod
    def _call_hook(instance, name: str) -> Optional[BaseException]:
        """Run an optional lifecycle hook; return the fault it raised, if any."""
        hook = getattr(instance, name, None)
        if not callable(hook):
            return None
        try:
            hook()
        except Exception as e:
            return unwrap(e)
        return None

    def _status_for(self, outcome: Outcome) -> UnitStatus:
        if outcome.kind is OutcomeKind.UNEXPECTED_FAULT and self.config.distinguish_errors:
            return UnitStatus.ERRORED
        return STATUS_BY_OUTCOME[outcome.kind]

    @staticmethod
    def _too_slow(unit: UnitDescriptor, elapsed_ms: float) -> bool:
        tag = unit.tag
        return tag.benchmark_ms > 0 and tag.fail_on_slow and elapsed_ms > tag.benchmark_ms

    @staticmethod
    def _new_result(suite: SuiteDescriptor, unit: UnitDescriptor) -> UnitResult:
        return UnitResult(
            suite_name=suite.name,
            unit_name=unit.method_name,
            display_name=unit.display_name,
            category=suite.tag.category,
            tags=suite.tag.tags,
        )

    def _skip(self, suite: SuiteDescriptor, unit: UnitDescriptor, reason: str) -> UnitResult:
        result = self._new_result(suite, unit)
        result.snapshot = EnvironmentSnapshot.capture(self.context)
        result.skip_reason = reason
        return self._finish(result, UnitStatus.SKIPPED, "")

    def _finish(self, result: UnitResult, status: UnitStatus, message: str,
                fault: Optional[BaseException] = None) -> UnitResult:
        result.status = status
        result.message = message
        if fault is not None:
            result.fault_kind = type(fault).__name__
            result.trace_head = trace_head(fault)
        result.freeze()
        if self.on_result is not None:
            self.on_result(result)
        return result
