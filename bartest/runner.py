"""Trigger surface: the object a host drives to run tests on its bars."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from .config import RunConfig
from .context import TestContext
from .discovery import DiscoveryResult, discover
from .engine import ExecutionEngine
from .host import Annotation, HostEnvironment
from .logging_util import get_logger
from .metrics import RunSummary, summarize
from .registry import TestRegistry, default_registry
from .report import LineSink, TestLogger
from .results import UnitResult

logger = get_logger("runner")


@dataclass
class RunReport:
    """Everything one run produced."""
    results: List[UnitResult] = field(default_factory=list)
    summary: RunSummary = field(default_factory=RunSummary)
    discovery: DiscoveryResult = field(default_factory=DiscoveryResult)
    lines: List[str] = field(default_factory=list)
    bar: int = -1
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


class TestRunner:
    """Runs registered suites against a host, once or on every bar.

    The host calls ``on_bar_update`` from its bar clock; the runner decides
    whether a run is due (start bar reached, run-once policy) and reports
    through the configured sink.
    """

    __test__ = False  # Not a pytest test class

    def __init__(self, host: HostEnvironment, config: Optional[RunConfig] = None,
                 registry: Optional[TestRegistry] = None, sink: Optional[LineSink] = None):
        if host is None:
            raise ValueError("TestRunner requires a host environment")
        self.host = host
        self.config = config or RunConfig()
        self.config.validate()
        if registry is None:
            registry = host.type_universe()
        self.registry = registry if registry is not None else default_registry

        self.test_logger = TestLogger(sink, self.config.enable_timestamps, live=self.config.enable_logging)
        self.context = TestContext(host, writer=self.test_logger.log)
        self.engine = ExecutionEngine(self.context, self.config)

        self.tests_have_run = False
        self.run_count = 0
        self.last_report: Optional[RunReport] = None

    def run_all(self) -> RunReport:
        """Discover, execute and report one full run at the host's current bar."""
        first_line = len(self.test_logger.export_lines())
        bar = self.host.current_bar
        start_time = datetime.now()

        discovery = discover(self.registry, self.config, self.host)
        for namespace in discovery.skipped_groups:
            self.test_logger.log_warning(f"Skipped suite module {namespace} (failed to load)")
        self.test_logger.log_discovery(len(discovery.suites), discovery.total_units)

        results = self.engine.run(discovery.suites)
        end_time = datetime.now()
        summary = summarize(results)

        self.test_logger.log_run_report(results, start_time, end_time, bar=bar,
                                        detailed=self.config.detailed_report,
                                        bar_time=self.host.time_at(bar))
        if self.config.show_results_on_chart:
            self.annotate(summary)

        self.run_count += 1
        logger.debug("Run %d at bar %d: %d results", self.run_count, bar, summary.total)

        report = RunReport(
            results=results,
            summary=summary,
            discovery=discovery,
            lines=self.test_logger.export_lines()[first_line:],
            bar=bar,
            start_time=start_time,
            end_time=end_time,
        )
        self.last_report = report
        return report

    def on_bar_update(self) -> Optional[RunReport]:
        """Bar clock hook; returns the run report when a run happened."""
        if self.host.current_bar < self.config.start_test_at_bar:
            return None
        if self.config.run_tests_once and self.tests_have_run:
            return None

        report = self.run_all()
        self.tests_have_run = True
        return report

    def terminate(self) -> Optional[RunSummary]:
        """Print the final summary of the last run, if any run happened."""
        if not self.tests_have_run or self.last_report is None:
            return None
        summary = self.last_report.summary
        self.test_logger.log_final_summary(summary)
        return summary

    def annotate(self, summary: RunSummary) -> Annotation:
        price = 0.0
        if self.host.count > 0:
            try:
                price = self.host.series("high")[0]
            except (KeyError, IndexError):
                price = 0.0
        color = "green" if summary.all_passed else "red"
        annotation = Annotation(self.host.current_bar, f"Tests: {summary.passed}/{summary.total}", color, price)
        self.host.annotate(annotation)
        return annotation


def run_all(host: HostEnvironment, config: Optional[RunConfig] = None,
            registry: Optional[TestRegistry] = None, sink: Optional[LineSink] = None) -> RunReport:
    """One-shot run at the host's current bar, ignoring the start-bar policy."""
    return TestRunner(host, config, registry, sink).run_all()
