"""Runtime context shared by every unit of a run."""

import time
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from .errors import UnitTimeout
from .host import BarPeriod, HostEnvironment, Series


class TestContext:
    """Per-run context handed to suites.

    Built once per run and reset before every unit: the scratch map and the
    captured output are emptied and ``start_time`` is refreshed. Units must
    not keep references to scratch values past their own execution.
    """

    __test__ = False  # Not a pytest test class

    def __init__(self, host: HostEnvironment, writer: Optional[Callable[[str], None]] = None):
        if host is None:
            raise ValueError("TestContext requires a host environment")
        self.host = host
        self.data: Dict[str, Any] = {}
        self.start_time: Optional[datetime] = None
        self.end_time: Optional[datetime] = None
        self._writer = writer
        self._output: List[str] = []
        self._deadline_ms = 0.0
        self._started_at = 0.0

    # --- Lifecycle (driven by the engine) -------------------------------------

    def reset(self) -> None:
        self.data.clear()
        self._output.clear()
        self.start_time = datetime.now()
        self.end_time = None
        self._started_at = time.perf_counter()
        self._deadline_ms = 0.0

    def arm_deadline(self, timeout_ms: float) -> None:
        """Start the unit clock; ``checkpoint`` measures from here."""
        self._started_at = time.perf_counter()
        self._deadline_ms = float(timeout_ms or 0)

    def mark_end(self) -> None:
        self.end_time = datetime.now()

    @property
    def output(self) -> str:
        return "\n".join(self._output)

    # --- Scratch map ----------------------------------------------------------

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value

    def get(self, key: str, kind: Optional[type] = None) -> Any:
        """Return the stored value, or the zero value of ``kind`` when missing.

        ``get("n", int)`` on a missing key gives ``0``; without ``kind`` a
        missing key gives ``None``, as does a ``kind`` with no zero value.
        """
        if key in self.data:
            return self.data[key]
        if kind is None:
            return None
        try:
            return kind()
        except TypeError:
            return None

    def contains(self, key: str) -> bool:
        return key in self.data

    def remove(self, key: str) -> None:
        self.data.pop(key, None)

    # --- Cooperative timeout ------------------------------------------------

    @property
    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self._started_at) * 1000.0

    def checkpoint(self) -> None:
        """Raise ``UnitTimeout`` if the running unit is past its deadline."""
        if self._deadline_ms > 0:
            elapsed = self.elapsed_ms
            if elapsed > self._deadline_ms:
                raise UnitTimeout(self._deadline_ms, elapsed)

    # --- Host pass-throughs ---------------------------------------------------

    @property
    def current_bar(self) -> int:
        return self.host.current_bar

    @property
    def count(self) -> int:
        return self.host.count

    @property
    def instrument(self) -> str:
        return self.host.instrument

    @property
    def period(self) -> BarPeriod:
        return self.host.period

    @property
    def time(self) -> Optional[datetime]:
        return self.host.time_at(self.host.current_bar)

    @property
    def open(self) -> Series:
        return self.host.series("open")

    @property
    def high(self) -> Series:
        return self.host.series("high")

    @property
    def low(self) -> Series:
        return self.host.series("low")

    @property
    def close(self) -> Series:
        return self.host.series("close")

    @property
    def volume(self) -> Series:
        return self.host.series("volume")

    def series(self, name: str) -> Series:
        return self.host.series(name)

    def print(self, message: str) -> None:
        self._output.append(message)
        if self._writer is not None:
            self._writer(f"[TestContext @ Bar {self.current_bar}] {message}")
