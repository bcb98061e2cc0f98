"""Boundary to the host application that owns the bar data.

The framework never mutates the host. ``HostEnvironment`` lists what the
core reads from it; ``SeriesHost`` is an in-memory implementation backed by
numpy arrays, used by the simulated feed, the CLI, and the tests.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Set

import numpy as np
import polars as pl

PRICE_SERIES = ("open", "high", "low", "close", "volume")


@dataclass(frozen=True)
class BarPeriod:
    """Bar aggregation of the host chart, e.g. 5 Minute."""
    period_type: str = "Minute"
    value: int = 1

    def __str__(self) -> str:
        return f"{self.value} {self.period_type}"


@dataclass(frozen=True)
class Annotation:
    """Visual marker the runner asks the host to draw."""
    bar: int
    text: str
    color: str          # "green" when everything passed, "red" otherwise
    price: float = 0.0  # Vertical anchor, above the bar high


class Series:
    """Read-only bars-ago view of one data series.

    ``series[0]`` is the value at the current bar, ``series[1]`` the bar
    before it. Indexing beyond the loaded history raises ``IndexError``.
    """

    def __init__(self, name: str, values: Sequence[float], current_bar: Optional[int] = None):
        self.name = name
        self._values = np.asarray(values, dtype=float)
        self.current_bar = len(self._values) - 1 if current_bar is None else current_bar

    @classmethod
    def from_values(cls, values: Iterable[float], name: str = "series") -> "Series":
        return cls(name, list(values))

    def __getitem__(self, bars_ago: int) -> float:
        index = self.current_bar - bars_ago
        if bars_ago < 0 or index < 0 or index >= len(self._values):
            raise IndexError(f"{self.name}[{bars_ago}] is outside the loaded history")
        return float(self._values[index])

    def __len__(self) -> int:
        return max(0, self.current_bar + 1)

    def to_numpy(self) -> np.ndarray:
        return self._values[: self.current_bar + 1].copy()

    def __repr__(self) -> str:
        return f"Series({self.name!r}, bars={len(self)})"


class HostEnvironment(ABC):
    """Accessor the framework consumes from the host application."""

    @property
    @abstractmethod
    def current_bar(self) -> int:
        """Index of the bar being processed (-1 before any bar)."""

    @property
    @abstractmethod
    def count(self) -> int:
        """Number of bars loaded."""

    @property
    @abstractmethod
    def instrument(self) -> str:
        pass

    @property
    @abstractmethod
    def period(self) -> BarPeriod:
        pass

    @abstractmethod
    def time_at(self, bar: int) -> Optional[datetime]:
        """Timestamp of ``bar``; monotonic in the bar index."""

    @abstractmethod
    def series(self, name: str) -> Series:
        """Named read-only data series (``close``, ``high``, indicators...)."""

    def condition_active(self, name: str) -> bool:
        """Whether a host-detected condition (pattern, regime) is active."""
        return False

    def type_universe(self):
        """Registry of suites visible to this host, or None for the default."""
        return None

    def annotate(self, annotation: Annotation) -> None:
        """Draw a marker on the host's canvas; hosts without one ignore it."""


class SeriesHost(HostEnvironment):
    """In-memory host holding OHLCV bars plus any extra named series."""

    def __init__(self, instrument: str = "ES 12-26", period: Optional[BarPeriod] = None,
                 registry=None):
        self._instrument = instrument
        self._period = period or BarPeriod()
        self._registry = registry
        self._times: List[datetime] = []
        self._data: Dict[str, List[float]] = {name: [] for name in PRICE_SERIES}
        self._extra: Dict[str, List[float]] = {}
        self._conditions: Set[str] = set()
        self.annotations: List[Annotation] = []

    # --- Loading ------------------------------------------------------------

    def add_bar(self, time: datetime, open: float, high: float, low: float,
                close: float, volume: float = 0.0) -> int:
        """Append a bar and return its index (the new current bar)."""
        if self._times and time < self._times[-1]:
            raise ValueError(f"Bar time {time} is earlier than the previous bar {self._times[-1]}")
        self._times.append(time)
        for name, value in zip(PRICE_SERIES, (open, high, low, close, volume)):
            self._data[name].append(float(value))
        return self.current_bar

    def set_series(self, name: str, values: Sequence[float]) -> None:
        """Attach an extra series (indicator output) aligned to the bars."""
        self._extra[name] = [float(v) for v in values]

    def set_condition(self, name: str, active: bool = True) -> None:
        if active:
            self._conditions.add(name)
        else:
            self._conditions.discard(name)

    @classmethod
    def from_frame(cls, df: pl.DataFrame, **kwargs) -> "SeriesHost":
        """Build a host from a frame with time/open/high/low/close[/volume] columns."""
        host = cls(**kwargs)
        has_volume = "volume" in df.columns
        for row in df.iter_rows(named=True):
            host.add_bar(
                row["time"], row["open"], row["high"], row["low"], row["close"],
                row["volume"] if has_volume else 0.0,
            )
        return host

    def to_frame(self) -> pl.DataFrame:
        return pl.DataFrame({"time": self._times, **self._data})

    # --- HostEnvironment ----------------------------------------------------

    @property
    def current_bar(self) -> int:
        return len(self._times) - 1

    @property
    def count(self) -> int:
        return len(self._times)

    @property
    def instrument(self) -> str:
        return self._instrument

    @property
    def period(self) -> BarPeriod:
        return self._period

    def time_at(self, bar: int) -> Optional[datetime]:
        if 0 <= bar < len(self._times):
            return self._times[bar]
        return None

    def series(self, name: str) -> Series:
        key = name.lower()
        if key in self._data:
            return Series(key, self._data[key], self.current_bar)
        if name in self._extra:
            return Series(name, self._extra[name], self.current_bar)
        raise KeyError(f"Unknown series '{name}'")

    def condition_active(self, name: str) -> bool:
        return name in self._conditions

    def type_universe(self):
        return self._registry

    def annotate(self, annotation: Annotation) -> None:
        self.annotations.append(annotation)
