"""Unit tests for the aggregation logic."""

from __future__ import annotations

import pytest

from models.records import Reading, Statistics, round_half_away
from services.aggregator import Aggregator


def _reading(temperature: float, humidity: float) -> Reading:
    """Helper to build deterministic readings."""

    return Reading(timestamp="2024-01-01 00:00", temperature=temperature, humidity=humidity)


def test_aggregate_empty_iterable_returns_zero_statistics() -> None:
    aggregator = Aggregator()

    stats = aggregator.aggregate([])

    assert stats == Statistics(0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0)
    assert stats.rounded() == stats


def test_aggregate_computes_statistics() -> None:
    aggregator = Aggregator()

    stats = aggregator.aggregate([_reading(20, 50), _reading(30, 60)])

    assert stats.avg_temp == 25.0
    assert stats.min_temp == 20.0
    assert stats.max_temp == 30.0
    assert stats.avg_humidity == 55.0
    assert stats.min_humidity == 50.0
    assert stats.max_humidity == 60.0
    assert stats.data_points == 2


def test_aggregate_handles_negative_temperatures() -> None:
    stats = Aggregator().aggregate([_reading(-10, 20), _reading(-30, 40), _reading(5, 30)])

    assert stats.min_temp == -30.0
    assert stats.max_temp == 5.0
    assert stats.avg_temp == pytest.approx(-35 / 3)


def test_aggregate_keeps_full_precision_until_rounded() -> None:
    stats = Aggregator().aggregate([_reading(0.25, 50.25), _reading(0.25, 50.25)])

    assert stats.avg_temp == 0.25
    rounded = stats.rounded()
    assert rounded.avg_temp == 0.3
    assert rounded.min_temp == 0.3
    assert rounded.avg_humidity == 50.3
    assert rounded.max_humidity == 50.3
    assert rounded.data_points == 2


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (2.25, 2.3),
        (-2.25, -2.3),
        (0.05, 0.1),
        (21.04, 21.0),
        (-0.04, -0.0),
        (55.0, 55.0),
    ],
)
def test_round_half_away_from_zero(value: float, expected: float) -> None:
    assert round_half_away(value) == expected
