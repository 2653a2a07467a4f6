"""Map dashboard snapshots onto the view the page renders."""

from __future__ import annotations

import asyncio
import math
from functools import lru_cache
from pathlib import Path
from typing import List, Sequence

from fastapi.templating import Jinja2Templates
from jinja2 import Template

from app.schemas import (
    ColorBand,
    DashboardView,
    Gauge,
    Gauges,
    ReadingOut,
    StatisticsSummary,
    TrendSeries,
)
from models.records import DashboardSnapshot
from settings import get_settings

TEMPLATE_NAME = "ui/index.html"
MAX_AXIS_LABELS = 10

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


def thin_labels(timestamps: Sequence[str], max_labels: int = MAX_AXIS_LABELS) -> List[str]:
    """Keep every ``ceil(n / max_labels)``-th label and blank the rest."""
    if not timestamps:
        return []
    step = math.ceil(len(timestamps) / max_labels)
    return [ts if index % step == 0 else "" for index, ts in enumerate(timestamps)]


def temperature_gauge(value: float) -> Gauge:
    return Gauge(
        label="Temperature",
        unit="°C",
        value=value,
        min=0,
        max=50,
        green=ColorBand(start=10, end=30),
        yellow=ColorBand(start=40, end=45),
        red=ColorBand(start=45, end=50),
        major_ticks=["0", "10", "20", "30", "40", "50"],
    )


def humidity_gauge(value: float) -> Gauge:
    return Gauge(
        label="Humidity",
        unit="%",
        value=value,
        min=0,
        max=100,
        green=ColorBand(start=30, end=70),
        yellow=ColorBand(start=70, end=80),
        red=ColorBand(start=80, end=100),
        major_ticks=["0", "20", "40", "60", "80", "100"],
    )


def build_view(snapshot: DashboardSnapshot, refresh_interval: float) -> DashboardView:
    stats = snapshot.statistics.rounded()
    timestamps = [reading.timestamp for reading in snapshot.readings]
    return DashboardView(
        status=snapshot.status,
        error=snapshot.error,
        stale=snapshot.stale,
        gauges=Gauges(
            temperature=temperature_gauge(stats.avg_temp),
            humidity=humidity_gauge(stats.avg_humidity),
        ),
        trends=TrendSeries(
            timestamps=timestamps,
            labels=thin_labels(timestamps),
            temperatures=[reading.temperature for reading in snapshot.readings],
            humidities=[reading.humidity for reading in snapshot.readings],
        ),
        summary=StatisticsSummary(
            avg_temp=stats.avg_temp,
            avg_humidity=stats.avg_humidity,
            min_temp=stats.min_temp,
            max_temp=stats.max_temp,
            min_humidity=stats.min_humidity,
            max_humidity=stats.max_humidity,
            data_points=stats.data_points,
        ),
        readings=[
            ReadingOut(
                timestamp=reading.timestamp,
                temperature=reading.temperature,
                humidity=reading.humidity,
            )
            for reading in snapshot.readings
        ],
        dropped_rows=snapshot.dropped_count,
        last_updated=snapshot.refreshed_at,
        last_attempt=snapshot.attempted_at,
        refresh_interval_seconds=refresh_interval,
    )


class DashboardPresenter:
    """Renders snapshots as JSON views or as the HTML page.

    :meth:`initialize` must be awaited once before the first render.
    """

    def __init__(self, refresh_interval: float) -> None:
        self.refresh_interval = refresh_interval
        self._template: Template | None = None

    @property
    def ready(self) -> bool:
        return self._template is not None

    async def initialize(self) -> None:
        if self._template is not None:
            return
        self._template = await asyncio.to_thread(templates.get_template, TEMPLATE_NAME)

    def render_view(self, snapshot: DashboardSnapshot) -> DashboardView:
        self._ready_template()
        return build_view(snapshot, self.refresh_interval)

    def render_html(self, snapshot: DashboardSnapshot) -> str:
        template = self._ready_template()
        view = build_view(snapshot, self.refresh_interval)
        return template.render(view=view)

    def _ready_template(self) -> Template:
        if self._template is None:
            raise RuntimeError("DashboardPresenter.initialize() has not been awaited.")
        return self._template


@lru_cache
def build_default_presenter() -> DashboardPresenter:
    return DashboardPresenter(refresh_interval=get_settings().refresh_interval)
