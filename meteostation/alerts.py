"""Alert thresholds, current readings and alert classification."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

# Fraction of the allowed range, measured in from each limit, that counts as a warning zone.
WARNING_MARGIN = 0.1


class AlertLevel(IntEnum):
    """Severity of the station's state; higher is worse."""

    OK = 0
    ATTENTION = 1
    CRITICAL = 2


@dataclass
class Settings:
    """User-adjustable limits and calibration offsets."""

    temp_min: float = 10.0
    temp_max: float = 40.0
    umi_min: float = 30.0
    umi_max: float = 80.0
    pres_min: float = 900.0
    pres_max: float = 1020.0
    offset_temp: float = 0.0
    offset_umi: float = 0.0
    offset_pres: float = 0.0


@dataclass
class Readings:
    """Latest compensated values: degrees Celsius, percent and hectopascals."""

    temperature: float = 0.0
    humidity: float = 0.0
    pressure: float = 0.0


def classify(value: float, minimum: float, maximum: float) -> AlertLevel:
    """Rate ``value`` against a range with a 10 % warning zone at each edge."""
    if value < minimum or value > maximum:
        return AlertLevel.CRITICAL
    margin = (maximum - minimum) * WARNING_MARGIN
    if value < minimum + margin or value > maximum - margin:
        return AlertLevel.ATTENTION
    return AlertLevel.OK


def alert_level(readings: Readings, settings: Settings) -> AlertLevel:
    """Return the worst level among temperature, humidity and pressure."""
    return max(
        classify(readings.temperature, settings.temp_min, settings.temp_max),
        classify(readings.humidity, settings.umi_min, settings.umi_max),
        classify(readings.pressure, settings.pres_min, settings.pres_max),
    )