"""Aggregation logic for sensor readings."""

from __future__ import annotations

from typing import Iterable

from models.records import Reading, Statistics


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def aggregate(self, readings: Iterable[Reading]) -> Statistics:
        count = 0
        temp_total = 0.0
        humidity_total = 0.0
        min_temp = max_temp = 0.0
        min_humidity = max_humidity = 0.0

        for reading in readings:
            temperature = reading.temperature
            humidity = reading.humidity
            if count == 0:
                min_temp = max_temp = temperature
                min_humidity = max_humidity = humidity
            else:
                min_temp = min(min_temp, temperature)
                max_temp = max(max_temp, temperature)
                min_humidity = min(min_humidity, humidity)
                max_humidity = max(max_humidity, humidity)
            temp_total += temperature
            humidity_total += humidity
            count += 1

        if not count:
            return Statistics()

        return Statistics(
            avg_temp=temp_total / count,
            avg_humidity=humidity_total / count,
            min_temp=min_temp,
            max_temp=max_temp,
            min_humidity=min_humidity,
            max_humidity=max_humidity,
            data_points=count,
        )
