"""Refresh-cycle orchestration for the dashboard."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from datetime import datetime, timezone
from functools import lru_cache
from typing import Optional

from datastore.snapshot_store import SnapshotStore
from errors import ApiInitError, FetchError
from models.records import DashboardSnapshot, SnapshotStatus
from services.aggregator import Aggregator
from services.cleaner import clean_rows
from services.range_estimator import estimate_range
from settings import get_settings
from sheets.client import SheetsClient

logger = logging.getLogger(__name__)

INIT_ERROR_PREFIX = "Failed to initialize dashboard."
FETCH_ERROR_PREFIX = "Failed to fetch data from Google Sheets."


class DashboardService:
    """Coordinates the sheet client, cleaning, statistics and the snapshot store."""

    def __init__(
        self,
        client: SheetsClient,
        store: SnapshotStore,
        aggregator: Aggregator,
        display_limit: int,
        refresh_interval: float,
    ) -> None:
        self.client = client
        self.store = store
        self.aggregator = aggregator
        self.display_limit = display_limit
        self.refresh_interval = refresh_interval
        self._refresh_lock = asyncio.Lock()
        self._timer_task: Optional[asyncio.Task[None]] = None

    @property
    def snapshot(self) -> DashboardSnapshot:
        return self.store.get()

    async def load(self) -> DashboardSnapshot:
        """Initialize the API client if needed, then run a refresh cycle.

        This is the only path that retries a failed initialization; timer
        ticks go through :meth:`refresh` and do not.
        """
        async with self._refresh_lock:
            try:
                await self.client.initialize()
            except ApiInitError as exc:
                return self._install_failure(f"{INIT_ERROR_PREFIX} {exc}")
            return await self._run_cycle()

    async def refresh(self) -> DashboardSnapshot:
        """Run one refresh cycle, waiting for any cycle already in flight."""
        async with self._refresh_lock:
            return await self._run_cycle()

    async def start(self) -> None:
        """Load once, then keep refreshing every ``refresh_interval`` seconds."""
        await self.load()
        if self._timer_task is None or self._timer_task.done():
            self._timer_task = asyncio.create_task(self._run_periodic())
            logger.info("Auto-refresh scheduled every %ss", self.refresh_interval)

    async def stop(self) -> None:
        """Cancel the refresh timer and release the HTTP client."""
        task, self._timer_task = self._timer_task, None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        await self.client.aclose()

    async def _run_periodic(self) -> None:
        while True:
            await asyncio.sleep(self.refresh_interval)
            await self.refresh()

    async def _run_cycle(self) -> DashboardSnapshot:
        start_time = time.perf_counter()
        try:
            metadata = await self.client.fetch_metadata()
            row_range = estimate_range(metadata.total_rows, self.display_limit)
            rows = await self.client.fetch_range(row_range)
            cleaned = clean_rows(rows)
            statistics = self.aggregator.aggregate(cleaned.readings)
        except ApiInitError as exc:
            return self._install_failure(f"{INIT_ERROR_PREFIX} {exc}")
        except FetchError as exc:
            return self._install_failure(f"{FETCH_ERROR_PREFIX} {exc}")
        except Exception as exc:  # pragma: no cover - catch-all
            logger.exception("Unexpected failure during refresh")
            return self._install_failure(f"{FETCH_ERROR_PREFIX} {exc}")

        now = datetime.now(timezone.utc)
        snapshot = DashboardSnapshot(
            status=SnapshotStatus.ok,
            readings=cleaned.readings,
            statistics=statistics,
            dropped_count=cleaned.dropped_count,
            refreshed_at=now,
            attempted_at=now,
        )
        self.store.replace(snapshot)
        logger.info(
            "Dashboard refreshed",
            extra={
                "status": snapshot.status.value,
                "total_rows": metadata.total_rows,
                "valid_count": statistics.data_points,
                "dropped_count": cleaned.dropped_count,
                "elapsed_ms": int((time.perf_counter() - start_time) * 1000),
            },
        )
        return snapshot

    def _install_failure(self, message: str) -> DashboardSnapshot:
        snapshot = self.store.get().as_failed(message, attempted_at=datetime.now(timezone.utc))
        self.store.replace(snapshot)
        logger.warning("Dashboard refresh failed", extra={"status": snapshot.status.value, "reason": message})
        return snapshot


@lru_cache
def build_default_service() -> DashboardService:
    """Factory that wires the service from environment settings."""
    settings = get_settings()
    return DashboardService(
        client=SheetsClient(settings),
        store=SnapshotStore(),
        aggregator=Aggregator(),
        display_limit=settings.display_limit,
        refresh_interval=settings.refresh_interval,
    )
