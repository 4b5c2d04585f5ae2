"""Unit conversions and speed colour banding."""

from __future__ import annotations

MILES_PER_METER = 0.000621371
MPH_PER_MPS = 2.23694
MS_PER_HOUR = 3_600_000

_CARDINALS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW", "N")

# Speed bands (mph) used to colour map legs.
GREEN_MPH = 5.0
YELLOW_MPH = 50.0
RED_MPH = 100.0

_GREEN = (0x00, 0xFF, 0x00)
_YELLOW = (0xFF, 0xFF, 0x00)
_RED = (0xFF, 0x00, 0x00)


def meters_to_miles(meters: float) -> float:
    return meters * MILES_PER_METER


def mps_to_mph(mps: float) -> float:
    return mps * MPH_PER_MPS


def average_mph(distance_miles: float, duration_ms: int) -> float:
    """Average speed over a span; zero when the span is empty."""

    if duration_ms <= 0:
        return 0.0
    return distance_miles / (duration_ms / MS_PER_HOUR)


def cardinal_direction(bearing_deg: float) -> str:
    """Map a bearing in degrees to one of the eight compass points."""

    normalized = bearing_deg % 360.0
    # Half-up rounding: 22.5 degrees is NE, not N.
    return _CARDINALS[int(normalized / 45.0 + 0.5)]


def _lerp(
    start: tuple[int, int, int], end: tuple[int, int, int], fraction: float
) -> str:
    fraction = min(1.0, max(0.0, fraction))
    channels = (round(a + (b - a) * fraction) for a, b in zip(start, end))
    return "#" + "".join(f"{value:02x}" for value in channels)


def speed_color(mph: float) -> str:
    """Hex colour for a speed: green when slow, through yellow, to red."""

    if mph <= GREEN_MPH:
        return _lerp(_GREEN, _GREEN, 0.0)
    if mph >= RED_MPH:
        return _lerp(_RED, _RED, 0.0)
    if mph <= YELLOW_MPH:
        return _lerp(_GREEN, _YELLOW, (mph - GREEN_MPH) / (YELLOW_MPH - GREEN_MPH))
    return _lerp(_YELLOW, _RED, (mph - YELLOW_MPH) / (RED_MPH - YELLOW_MPH))


__all__ = [
    "average_mph",
    "cardinal_direction",
    "meters_to_miles",
    "mps_to_mph",
    "speed_color",
]
