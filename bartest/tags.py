"""Declarative metadata attached to registered test suites and test units.

Tags are plain data. They never execute anything; the registry stores them
next to the suite type and the discovery engine reads them to decide what
runs, in which order, and under which gates.
"""

import re
from dataclasses import dataclass
from typing import Any, List, Tuple

RUN_AT_UNSET = -1  # Defer to the run's configured start bar

_TAG_SEPARATORS = re.compile(r"[,; ]+")


def split_tags(tags: str) -> List[str]:
    """Split a comma/space/semicolon separated tag string into clean tokens."""
    if not tags:
        return []
    return [t for t in _TAG_SEPARATORS.split(tags.strip()) if t]


@dataclass(frozen=True)
class SuiteTag:
    """Metadata for a test suite (one registered class).

    Gating fields (``min_bars``, ``required_period_*``, ``require_condition``)
    do not remove the suite from a run; an unmet gate reports every unit as
    skipped so the reason stays visible in the report.
    """

    name: str = ""                     # Display name, falls back to the class name
    description: str = ""
    category: str = "General"          # Grouping label, also usable as a run filter
    enabled: bool = True               # Disabled suites never reach the worklist
    author: str = ""
    run_at_bar: int = RUN_AT_UNSET     # Only run when the host sits on this bar
    min_bars: int = 0                  # Require at least this many bars loaded
    required_period_type: str = ""     # e.g. "Minute", "Day", "Tick"
    required_period_value: int = 0     # e.g. 5 for 5-minute bars (needs a type)
    require_condition: str = ""        # Host condition that must be active
    run_every_n_bars: int = 0          # Re-select the suite every N bars
    priority: int = 0                  # Lower runs first
    tags: str = ""                     # "fast,unit critical;smoke"
    bugs: Tuple[str, ...] = ()         # Tracked issue ids this suite covers
    fixture_per_unit: bool = False     # Fresh suite instance for every unit

    def tag_list(self) -> List[str]:
        return split_tags(self.tags)

    def has_tag(self, tag: str) -> bool:
        """Case-insensitive membership test against ``tags``."""
        if not tag or not self.tags:
            return False
        wanted = tag.strip().lower()
        return any(t.lower() == wanted for t in self.tag_list())

    def has_any_tag(self, tags: str) -> bool:
        return any(self.has_tag(t) for t in split_tags(tags))

    @property
    def has_run_at(self) -> bool:
        return self.run_at_bar >= 0

    def __str__(self) -> str:
        name = self.name or "Unnamed Test"
        category = f" ({self.category})" if self.category else ""
        run_info = f" @ Bar {self.run_at_bar}" if self.has_run_at else ""
        return f"{name}{category}{run_info}"


@dataclass(frozen=True)
class UnitTag:
    """Metadata for a single test unit (one method of a registered suite)."""

    name: str = ""                  # Display name, falls back to the method name
    description: str = ""
    enabled: bool = True
    skip: str = ""                  # Non-empty reason forces Skipped
    timeout_ms: float = 0           # > 0 bounds the unit, exceeding it is TimedOut
    priority: int = 0               # Lower runs first within the suite
    expected_result: Any = None     # Documentation only
    benchmark_ms: float = 0         # Soft performance budget
    fail_on_slow: bool = True       # Fail a passing unit that blows the budget
    bugs: Tuple[str, ...] = ()

    @property
    def should_skip(self) -> bool:
        return bool(self.skip)

    def __str__(self) -> str:
        name = self.name or "Unnamed Test Case"
        skip = " [SKIPPED]" if self.should_skip else ""
        return f"{name}{skip}"
