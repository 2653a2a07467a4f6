from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Set
from urllib.parse import unquote

import httpx
import pytest

from datastore.snapshot_store import SnapshotStore
from services.aggregator import Aggregator
from services.dashboard import DashboardService
from settings import Settings
from sheets.client import SheetsClient

DISCOVERY_URL = "https://sheets.test/$discovery/rest?version=v4"
DISCOVERY_DOCUMENT: Dict[str, Any] = {
    "rootUrl": "https://sheets.test/",
    "servicePath": "",
    "resources": {
        "spreadsheets": {
            "resources": {
                "values": {
                    "methods": {
                        "get": {"path": "v4/spreadsheets/{spreadsheetId}/values/{range}"}
                    }
                }
            }
        }
    },
}
HEADER = ["Timestamp", "Temperature", "Humidity"]

_RANGE_PATTERN = re.compile(r"^(?P<sheet>.+)!A(?P<start>\d*):C(?P<end>\d*)$")


class FakeSheet:
    """In-memory stand-in for the Sheets discovery and values endpoints."""

    def __init__(self) -> None:
        self.rows: List[List[str]] = [list(HEADER)]
        self.requested_ranges: List[str] = []
        self.api_keys: List[Optional[str]] = []
        self.discovery_requests = 0
        self.discovery_status = 200
        self.failures: Dict[str, int] = {}
        self.timeouts: Set[str] = set()

    def add_rows(self, *rows: List[str]) -> None:
        self.rows.extend(list(row) for row in rows)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.api_keys.append(request.headers.get("x-goog-api-key"))
        if "$discovery" in request.url.path:
            self.discovery_requests += 1
            if self.discovery_status != 200:
                return httpx.Response(
                    self.discovery_status,
                    json={"error": {"code": self.discovery_status, "message": "discovery refused"}},
                )
            return httpx.Response(200, json=DISCOVERY_DOCUMENT)

        raw_path = request.url.raw_path.decode("ascii").split("?", 1)[0]
        a1_range = unquote(raw_path.rsplit("/values/", 1)[1])
        self.requested_ranges.append(a1_range)
        match = _RANGE_PATTERN.match(a1_range)
        assert match is not None, a1_range
        kind = "probe" if not match.group("start") else "range"

        if kind in self.timeouts:
            raise httpx.ReadTimeout("read timed out", request=request)
        if kind in self.failures:
            status = self.failures[kind]
            return httpx.Response(
                status, json={"error": {"code": status, "message": f"{kind} unavailable"}}
            )

        if kind == "probe":
            rows = self.rows
        else:
            rows = self.rows[int(match.group("start")) - 1 : int(match.group("end"))]
        body: Dict[str, Any] = {"range": a1_range, "majorDimension": "ROWS"}
        if rows:
            body["values"] = rows
        return httpx.Response(200, json=body)


def make_settings(**overrides: Any) -> Settings:
    values: Dict[str, Any] = {
        "api_key": "test-key",
        "sheet_id": "sheet-123",
        "discovery_docs": (DISCOVERY_URL,),
        "request_timeout": 1.0,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def fake_sheet() -> FakeSheet:
    return FakeSheet()


@pytest.fixture
def sheets_client(settings: Settings, fake_sheet: FakeSheet) -> SheetsClient:
    return SheetsClient(settings, transport=httpx.MockTransport(fake_sheet.handler))


@pytest.fixture
def dashboard_service(settings: Settings, sheets_client: SheetsClient) -> DashboardService:
    return DashboardService(
        client=sheets_client,
        store=SnapshotStore(),
        aggregator=Aggregator(),
        display_limit=settings.display_limit,
        refresh_interval=settings.refresh_interval,
    )


@pytest.fixture
def settings_factory():
    return make_settings
