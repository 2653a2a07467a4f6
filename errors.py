"""Error types raised by the dashboard pipeline."""

from __future__ import annotations


class DashboardError(Exception):
    """Base class for every failure the refresh cycle can surface."""


class ConfigError(DashboardError):
    """Required configuration is missing or malformed."""


class ApiInitError(DashboardError):
    """The Sheets API client could not be initialized."""


class FetchError(DashboardError):
    """A remote read failed; the current refresh cycle is aborted."""
