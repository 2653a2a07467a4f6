"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple

RawRow = Sequence[Any]

TEMPERATURE_RANGE = (-40.0, 125.0)
HUMIDITY_RANGE = (0.0, 100.0)

_ONE_DECIMAL = Decimal("0.1")


def round_half_away(value: float) -> float:
    """Round to one decimal place, halves away from zero (2.25 -> 2.3, -2.25 -> -2.3)."""
    return float(Decimal(repr(value)).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


@dataclass(frozen=True, slots=True)
class Reading:
    """A single validated sensor observation taken from one sheet row."""

    timestamp: str
    temperature: float
    humidity: float
    raw_row: Tuple[Any, ...] = field(default=(), compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class Statistics:
    """Descriptive statistics over a batch of readings, at full precision."""

    avg_temp: float = 0.0
    avg_humidity: float = 0.0
    min_temp: float = 0.0
    max_temp: float = 0.0
    min_humidity: float = 0.0
    max_humidity: float = 0.0
    data_points: int = 0

    def rounded(self) -> "Statistics":
        """Copy rounded for display."""
        return Statistics(
            avg_temp=round_half_away(self.avg_temp),
            avg_humidity=round_half_away(self.avg_humidity),
            min_temp=round_half_away(self.min_temp),
            max_temp=round_half_away(self.max_temp),
            min_humidity=round_half_away(self.min_humidity),
            max_humidity=round_half_away(self.max_humidity),
            data_points=self.data_points,
        )


@dataclass(frozen=True, slots=True)
class SheetMetadata:
    total_rows: int
    has_data: bool

    @classmethod
    def from_row_count(cls, total_rows: int) -> "SheetMetadata":
        # Row 1 is the header.
        return cls(total_rows=total_rows, has_data=total_rows > 1)


@dataclass(frozen=True, slots=True)
class CleanResult:
    """Readings that survived validation plus a tally of what was dropped."""

    readings: Tuple[Reading, ...]
    dropped_by_reason: Dict[str, int] = field(default_factory=dict)

    @property
    def dropped_count(self) -> int:
        return sum(self.dropped_by_reason.values())


class SnapshotStatus(str, Enum):
    loading = "loading"
    ok = "ok"
    error = "error"


@dataclass(frozen=True, slots=True)
class DashboardSnapshot:
    """The complete working set shown by the dashboard.

    Snapshots are never mutated; every refresh installs a new one.
    """

    status: SnapshotStatus = SnapshotStatus.loading
    readings: Tuple[Reading, ...] = ()
    statistics: Statistics = field(default_factory=Statistics)
    dropped_count: int = 0
    error: Optional[str] = None
    stale: bool = False
    refreshed_at: Optional[datetime] = None
    attempted_at: Optional[datetime] = None

    def as_failed(self, message: str, attempted_at: datetime) -> "DashboardSnapshot":
        """Keep the previous data but flag it stale and attach the error."""
        return DashboardSnapshot(
            status=SnapshotStatus.error,
            readings=self.readings,
            statistics=self.statistics,
            dropped_count=self.dropped_count,
            error=message,
            stale=bool(self.readings) or self.refreshed_at is not None,
            refreshed_at=self.refreshed_at,
            attempted_at=attempted_at,
        )
