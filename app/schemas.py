"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from models.records import SnapshotStatus


class ReadingOut(BaseModel):
    """One cleaned sensor reading."""

    timestamp: str
    temperature: float
    humidity: float


class StatisticsSummary(BaseModel):
    """Statistics block, rounded to one decimal place."""

    avg_temp: float = 0.0
    avg_humidity: float = 0.0
    min_temp: float = 0.0
    max_temp: float = 0.0
    min_humidity: float = 0.0
    max_humidity: float = 0.0
    data_points: int = Field(0, ge=0)


class ColorBand(BaseModel):
    start: float
    end: float


class Gauge(BaseModel):
    """A single dial: its value plus the scale it is drawn on."""

    label: str
    unit: str
    value: float
    min: float
    max: float
    green: ColorBand
    yellow: ColorBand
    red: ColorBand
    major_ticks: List[str] = Field(default_factory=list)


class Gauges(BaseModel):
    temperature: Gauge
    humidity: Gauge


class TrendSeries(BaseModel):
    """Both trend lines on one shared time axis."""

    timestamps: List[str] = Field(default_factory=list)
    labels: List[str] = Field(
        default_factory=list,
        description="Axis labels with all but roughly ten of them blanked out.",
    )
    temperatures: List[float] = Field(default_factory=list)
    humidities: List[float] = Field(default_factory=list)


class DashboardView(BaseModel):
    """Everything the page needs to draw one refresh."""

    status: SnapshotStatus
    error: Optional[str] = None
    stale: bool = False
    gauges: Gauges
    trends: TrendSeries
    summary: StatisticsSummary
    readings: List[ReadingOut] = Field(default_factory=list)
    dropped_rows: int = Field(0, ge=0)
    last_updated: Optional[datetime] = None
    last_attempt: Optional[datetime] = None
    refresh_interval_seconds: float = Field(..., gt=0)
