"""Line-oriented reporting of discovery, progress and results.

``TestLogger`` formats report lines and pushes them to a ``LineSink``. Every
line is also kept in an internal buffer, so a run's report can be exported
whether or not the live sink was enabled.
"""

from datetime import datetime
from typing import List, Optional, Sequence

from .metrics import RunSummary, group_by_suite, summarize
from .results import UnitResult, UnitStatus, status_icon

SEPARATOR_WIDTH = 55
SEPARATOR = "─" * SEPARATOR_WIDTH
HEADER_RULE = "═" * SEPARATOR_WIDTH
NO_TESTS_FOUND = "No tests found"


class LineSink:
    """Destination for report lines."""

    def write_line(self, line: str) -> None:
        raise NotImplementedError


class ConsoleSink(LineSink):
    def write_line(self, line: str) -> None:
        print(line)


class BufferSink(LineSink):
    """Collects lines in memory."""

    def __init__(self):
        self.lines: List[str] = []

    def write_line(self, line: str) -> None:
        self.lines.append(line)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


class NullSink(LineSink):
    def write_line(self, line: str) -> None:
        pass


class TestLogger:
    """Formats report lines and forwards them to a sink."""

    __test__ = False  # Not a pytest test class

    def __init__(self, sink: Optional[LineSink] = None, enable_timestamps: bool = False,
                 live: bool = True):
        self.sink = sink or ConsoleSink()
        self.enable_timestamps = enable_timestamps
        self.live = live
        self._buffer: List[str] = []

    # --- Basic logging -------------------------------------------------------

    def log(self, message: str = "") -> None:
        line = self._format(message)
        self._buffer.append(line)
        if self.live:
            self.sink.write_line(line)

    def log_line(self) -> None:
        self.log("")

    def log_separator(self, character: str = "─", length: int = SEPARATOR_WIDTH) -> None:
        self.log(character * length)

    def log_header(self, text: str) -> None:
        self.log(HEADER_RULE)
        self.log(text)
        self.log(HEADER_RULE)

    def _format(self, message: str) -> str:
        if self.enable_timestamps:
            now = datetime.now()
            return f"[{now:%H:%M:%S}.{now.microsecond // 1000:03d}] {message}"
        return message

    # --- Results -----------------------------------------------------------------

    def log_result(self, result: UnitResult) -> None:
        if result is None:
            return

        status = result.status.value.upper()
        if result.status is UnitStatus.SKIPPED:
            self.log(f"  {result.icon} {result.unit_name} - {status}")
        else:
            self.log(f"  {result.icon} {result.unit_name} - {status} ({result.duration_ms:.2f}ms)")

        if result.status is not UnitStatus.PASSED and result.message:
            self.log(f"     Error: {result.message}")
            if result.trace_head:
                self.log(f"     Stack: {result.trace_head}")

        if result.skipped and result.skip_reason:
            self.log(f"     Reason: {result.skip_reason}")

    def log_results(self, results: Sequence[UnitResult]) -> None:
        """Results grouped by suite, in run order."""
        if not results:
            self.log(NO_TESTS_FOUND)
            return

        for suite_name, suite_results in group_by_suite(list(results)).items():
            self.log_line()
            self.log(f"{suite_name}:")
            for result in suite_results:
                self.log_result(result)

    def log_summary(self, summary: RunSummary) -> None:
        self.log_line()
        self.log_separator()
        self.log(
            f"Total: {summary.total} | Passed: {summary.passed} | "
            f"Failed: {summary.failed} | Skipped: {summary.skipped}"
        )
        extra = []
        if summary.errored:
            extra.append(f"Errored: {summary.errored}")
        if summary.timed_out:
            extra.append(f"Timed Out: {summary.timed_out}")
        if summary.inconclusive:
            extra.append(f"Inconclusive: {summary.inconclusive}")
        if extra:
            self.log(" | ".join(extra))
        self.log(f"Success Rate: {summary.success_rate:.1f}%")
        self.log_separator()

    def log_detailed_summary(self, results: Sequence[UnitResult]) -> None:
        if not results:
            self.log(NO_TESTS_FOUND)
            return

        summary = summarize(list(results))
        total = summary.total

        def share(count: int) -> float:
            return count * 100.0 / total if total else 0.0

        self.log_line()
        self.log_separator()
        self.log(f"Total Tests: {total}")
        self.log(f"Passed: {summary.passed} ({share(summary.passed):.1f}%)")
        self.log(f"Failed: {summary.failed} ({share(summary.failed):.1f}%)")
        self.log(f"Skipped: {summary.skipped} ({share(summary.skipped):.1f}%)")
        for label, count in (("Errored", summary.errored), ("Timed Out", summary.timed_out),
                             ("Inconclusive", summary.inconclusive)):
            if count:
                self.log(f"{label}: {count} ({share(count):.1f}%)")
        self.log_line()
        self.log(f"Total Time: {summary.total_duration_ms:.2f}ms")
        self.log(f"Average Time: {summary.avg_duration_ms:.2f}ms")
        self.log(f"Min Time: {summary.min_duration_ms:.2f}ms")
        self.log(f"Max Time: {summary.max_duration_ms:.2f}ms")
        self.log_separator()

    def log_run_report(self, results: Sequence[UnitResult], start_time: datetime,
                       end_time: datetime, bar: Optional[int] = None,
                       detailed: bool = True, bar_time: Optional[datetime] = None) -> None:
        """Framed report; the title carries the bar and its timestamp when given."""
        title = "TestRunner Results"
        if bar is not None:
            stamp = bar_time if bar_time is not None else start_time
            title += f" (Bar {bar}, {stamp:%Y-%m-%d %H:%M:%S})"
        self.log_header(title)
        self.log(f"Start Time: {start_time:%Y-%m-%d %H:%M:%S}")
        self.log(f"End Time: {end_time:%Y-%m-%d %H:%M:%S}")
        self.log(f"Duration: {(end_time - start_time).total_seconds():.2f}s")

        self.log_results(results)
        if results:
            if detailed:
                self.log_detailed_summary(results)
            else:
                self.log_summary(summarize(list(results)))

        self.log_header("End of Report")

    def log_final_summary(self, summary: RunSummary) -> None:
        self.log_line()
        self.log_header("TestRunner Final Summary")
        self.log(f"Tests Run: {summary.total}")
        self.log(f"Passed: {summary.passed}")
        self.log(f"Failed: {summary.failed}")
        self.log(f"Success Rate: {summary.success_rate:.1f}%")
        self.log(HEADER_RULE)

    # --- Progress ----------------------------------------------------------------

    def log_discovery(self, suite_count: int, unit_count: int) -> None:
        self.log(f"[TestRunner] Discovered {suite_count} test class(es) with {unit_count} test method(s)")

    def log_test_start(self, suite_name: str, unit_name: str, bar: int) -> None:
        self.log(f"[TestRunner] Running {suite_name}.{unit_name} at bar {bar}")

    def log_test_complete(self, suite_name: str, unit_name: str, status: UnitStatus,
                          milliseconds: float) -> None:
        self.log(f"[TestRunner] {status_icon(status)} {suite_name}.{unit_name} - "
                 f"{status.value} ({milliseconds:.2f}ms)")

    # --- Errors --------------------------------------------------------------------

    def log_error(self, message: str, exc: Optional[BaseException] = None) -> None:
        self.log(f"[ERROR] {message}")
        if exc is not None:
            self.log(f"[ERROR] Exception: {type(exc).__name__} - {exc}")

    def log_warning(self, message: str) -> None:
        self.log(f"[WARNING] {message}")

    # --- Buffer --------------------------------------------------------------------

    def clear(self) -> None:
        self._buffer.clear()

    def export_lines(self) -> List[str]:
        return list(self._buffer)

    def export_text(self) -> str:
        return "".join(line + "\n" for line in self._buffer)
