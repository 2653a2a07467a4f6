"""Turn raw sheet rows into validated readings."""

from __future__ import annotations

import logging
import math
import re
from collections import Counter
from typing import Iterable, List, Optional, Tuple

from models.records import (
    HUMIDITY_RANGE,
    TEMPERATURE_RANGE,
    CleanResult,
    RawRow,
    Reading,
)

logger = logging.getLogger(__name__)

TOO_FEW_CELLS = "too_few_cells"
MISSING_VALUE = "missing_value"
SENSOR_FAILURE = "sensor_failure"
NOT_NUMERIC = "not_numeric"
OUT_OF_RANGE = "out_of_range"

# Failed sensor reads can surface in the sheet as "NaN", "nan", "NAN" ...
_FAILURE_MARKER = "NAN"

# Reads the leading number of a cell: "55%" is 55 and "1_000" is 1.
_NUMERIC_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _parse_float(value: str) -> Optional[float]:
    match = _NUMERIC_PREFIX.match(value)
    if match is None:
        return None
    parsed = float(match.group())
    return parsed if math.isfinite(parsed) else None


def _within(value: float, bounds: Tuple[float, float]) -> bool:
    low, high = bounds
    return low <= value <= high


def validate_row(row: Optional[RawRow]) -> Tuple[Optional[Reading], Optional[str]]:
    """Validate one row, returning either a reading or the reason it was dropped."""
    if row is None or len(row) < 3:
        return None, TOO_FEW_CELLS

    timestamp = str(row[0]).strip()
    temperature_raw = str(row[1]).strip()
    humidity_raw = str(row[2]).strip()

    if not timestamp or not temperature_raw or not humidity_raw:
        return None, MISSING_VALUE

    if (
        _FAILURE_MARKER in temperature_raw.upper()
        or _FAILURE_MARKER in humidity_raw.upper()
    ):
        return None, SENSOR_FAILURE

    temperature = _parse_float(temperature_raw)
    humidity = _parse_float(humidity_raw)
    if temperature is None or humidity is None:
        return None, NOT_NUMERIC

    if not _within(temperature, TEMPERATURE_RANGE) or not _within(humidity, HUMIDITY_RANGE):
        return None, OUT_OF_RANGE

    return (
        Reading(
            timestamp=timestamp,
            temperature=temperature,
            humidity=humidity,
            raw_row=tuple(row),
        ),
        None,
    )


def clean_rows(rows: Iterable[Optional[RawRow]]) -> CleanResult:
    """Validate ``rows`` in order, silently dropping the ones that fail."""
    readings: List[Reading] = []
    dropped: Counter[str] = Counter()

    for row in rows:
        reading, reason = validate_row(row)
        if reason is not None:
            dropped[reason] += 1
            continue
        readings.append(reading)  # type: ignore[arg-type]

    result = CleanResult(readings=tuple(readings), dropped_by_reason=dict(dropped))
    logger.info(
        "Cleaned sheet rows",
        extra={
            "row_count": len(readings) + result.dropped_count,
            "valid_count": len(readings),
            "dropped_count": result.dropped_count,
        },
    )
    return result


def clean_and_validate(rows: Iterable[Optional[RawRow]]) -> List[Reading]:
    return list(clean_rows(rows).readings)
