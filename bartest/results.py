"""Result records produced by the execution engine."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from .errors import ResultFrozenError


class UnitStatus(Enum):
    PENDING = "Pending"
    RUNNING = "Running"
    PASSED = "Passed"
    FAILED = "Failed"
    SKIPPED = "Skipped"
    INCONCLUSIVE = "Inconclusive"
    TIMED_OUT = "TimedOut"
    ERRORED = "Errored"

    @property
    def is_terminal(self) -> bool:
        return self not in (UnitStatus.PENDING, UnitStatus.RUNNING)


STATUS_ICONS = {
    UnitStatus.PASSED: "✓",
    UnitStatus.FAILED: "✗",
    UnitStatus.ERRORED: "✗",
    UnitStatus.SKIPPED: "○",
    UnitStatus.RUNNING: "►",
    UnitStatus.TIMED_OUT: "⏱",
    UnitStatus.INCONCLUSIVE: "?",
}
UNKNOWN_ICON = "·"


def status_icon(status: UnitStatus) -> str:
    return STATUS_ICONS.get(status, UNKNOWN_ICON)


@dataclass(frozen=True)
class EnvironmentSnapshot:
    """Host state captured when a unit starts."""
    bar: int = -1
    time: Optional[datetime] = None
    instrument: str = ""
    period: str = ""

    @classmethod
    def capture(cls, context) -> "EnvironmentSnapshot":
        return cls(context.current_bar, context.time, context.instrument, str(context.period))


@dataclass
class UnitResult:
    """Outcome of one unit.

    Only the engine writes to a result. Once ``freeze()`` is called (on a
    terminal status) any further attribute write raises ``ResultFrozenError``.
    """

    suite_name: str
    unit_name: str
    display_name: str = ""
    status: UnitStatus = UnitStatus.PENDING
    duration_ms: float = 0.0
    message: str = ""
    trace_head: Optional[str] = None
    skip_reason: str = ""
    snapshot: EnvironmentSnapshot = field(default_factory=EnvironmentSnapshot)
    category: str = ""
    tags: str = ""
    output: str = ""
    fault_kind: Optional[str] = None
    frozen: bool = field(default=False, repr=False, compare=False)

    def __post_init__(self):
        if not self.display_name:
            self.display_name = self.unit_name

    def __setattr__(self, name, value):
        if self.__dict__.get("frozen", False):
            raise ResultFrozenError(f"Result for {self.suite_name}.{self.unit_name} is frozen")
        super().__setattr__(name, value)

    # --- Engine-side transitions ------------------------------------------------

    def mark_running(self, snapshot: EnvironmentSnapshot) -> None:
        self.status = UnitStatus.RUNNING
        self.snapshot = snapshot

    def freeze(self) -> "UnitResult":
        if not self.status.is_terminal:
            raise ValueError(f"Cannot freeze a result in status {self.status.value}")
        self.frozen = True
        return self

    # --- Queries --------------------------------------------------------------------

    @property
    def full_name(self) -> str:
        return f"{self.suite_name}.{self.unit_name}"

    @property
    def passed(self) -> bool:
        return self.status is UnitStatus.PASSED

    @property
    def failed(self) -> bool:
        return self.status in (UnitStatus.FAILED, UnitStatus.ERRORED)

    @property
    def skipped(self) -> bool:
        return self.status is UnitStatus.SKIPPED

    @property
    def icon(self) -> str:
        return status_icon(self.status)

    # --- Formatting -------------------------------------------------------------

    def to_line(self) -> str:
        line = f"{self.icon} {self.full_name}"
        if self.status is UnitStatus.SKIPPED:
            return f"{line} [SKIPPED: {self.skip_reason}]"
        line += f" ({self.duration_ms:.2f}ms)"
        if self.status is not UnitStatus.PASSED and self.message:
            line += f" - {self.message}"
        return line

    def to_short_string(self) -> str:
        return f"{self.icon} {self.display_name or self.unit_name}"

    def to_detailed_string(self) -> str:
        lines = [
            f"Test: {self.full_name}",
            f"Status: {self.status.value}",
            f"Duration: {self.duration_ms:.2f}ms",
            f"Bar: {self.snapshot.bar}",
            f"Instrument: {self.snapshot.instrument}",
        ]
        if self.category:
            lines.append(f"Category: {self.category}")
        if self.tags:
            lines.append(f"Tags: {self.tags}")
        if self.message:
            lines.append(f"Message: {self.message}")
        if self.skip_reason:
            lines.append(f"Skip Reason: {self.skip_reason}")
        if self.trace_head:
            lines.append(f"At: {self.trace_head}")
        if self.output:
            lines.append("Output:")
            lines.append(self.output)
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.to_line()
