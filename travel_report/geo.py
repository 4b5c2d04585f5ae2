"""Geodesic helpers shared by the segmenter and the gap bridger."""

from __future__ import annotations

import math
from typing import Callable, List, Sequence, Tuple

from .models import LatLon, LocationSample
from .units import mps_to_mph

_EARTH_RADIUS_M = 6_371_000.0

DistanceFn = Callable[[float, float, float, float], float]

# Legs shorter than this are too noisy to derive a speed from.
_MIN_LEG_SECONDS = 1.0


def distance_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Return the haversine distance in metres between two coordinates."""

    sin = math.sin
    cos = math.cos
    radians = math.radians
    atan2 = math.atan2
    sqrt = math.sqrt
    lat1_rad = radians(lat1)
    lat2_rad = radians(lat2)
    delta_lat = lat2_rad - lat1_rad
    delta_lon = radians(lon2 - lon1)
    sin_half_lat = sin(delta_lat / 2.0)
    sin_half_lon = sin(delta_lon / 2.0)
    a = sin_half_lat**2 + cos(lat1_rad) * cos(lat2_rad) * sin_half_lon**2
    c = 2.0 * atan2(sqrt(a), sqrt(max(0.0, 1.0 - a)))
    return _EARTH_RADIUS_M * c


def sample_distance(
    first: LocationSample,
    second: LocationSample,
    distance_fn: DistanceFn = distance_meters,
) -> float:
    return distance_fn(
        first.latitude, first.longitude, second.latitude, second.longitude
    )


def path_length_m(
    samples: Sequence[LocationSample], distance_fn: DistanceFn = distance_meters
) -> float:
    """Sum distances between consecutive samples (in the given order)."""

    total = 0.0
    for previous, current in zip(samples, samples[1:]):
        total += sample_distance(previous, current, distance_fn)
    return total


def leg_speeds(
    samples: Sequence[LocationSample], distance_fn: DistanceFn = distance_meters
) -> List[Tuple[LatLon, LatLon, float]]:
    """Return ``(from, to, mph)`` for each consecutive pair of samples.

    Legs spanning one second or less report zero speed.
    """

    legs: List[Tuple[LatLon, LatLon, float]] = []
    for previous, current in zip(samples, samples[1:]):
        elapsed_s = (current.timestamp_ms - previous.timestamp_ms) / 1000.0
        meters = sample_distance(previous, current, distance_fn)
        mps = meters / elapsed_s if elapsed_s > _MIN_LEG_SECONDS else 0.0
        legs.append((previous.point, current.point, mps_to_mph(mps)))
    return legs


__all__ = [
    "DistanceFn",
    "distance_meters",
    "leg_speeds",
    "path_length_m",
    "sample_distance",
]
