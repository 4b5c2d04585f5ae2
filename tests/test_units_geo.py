from __future__ import annotations

import pytest

from conftest import ORIGIN, make_sample, north_of
from travel_report.geo import distance_meters, leg_speeds, path_length_m
from travel_report.units import (
    average_mph,
    cardinal_direction,
    meters_to_miles,
    mps_to_mph,
    speed_color,
)


def test_unit_conversions():
    assert meters_to_miles(1609.344) == pytest.approx(1.0, rel=1e-5)
    assert meters_to_miles(0) == 0
    assert mps_to_mph(10.0) == pytest.approx(22.3694)


def test_average_mph_zero_duration():
    assert average_mph(5.0, 0) == 0.0
    assert average_mph(5.0, -10) == 0.0
    assert average_mph(30.0, 30 * 60 * 1000) == pytest.approx(60.0)


@pytest.mark.parametrize(
    "bearing, expected",
    [
        (0, "N"),
        (22.4, "N"),
        (22.5, "NE"),
        (90, "E"),
        (180, "S"),
        (270, "W"),
        (337.5, "N"),
        (359.9, "N"),
        (-45, "NW"),
        (720 + 135, "SE"),
    ],
)
def test_cardinal_direction(bearing, expected):
    assert cardinal_direction(bearing) == expected


def test_speed_color_bands():
    assert speed_color(0) == "#00ff00"
    assert speed_color(5) == "#00ff00"
    assert speed_color(50) == "#ffff00"
    assert speed_color(100) == "#ff0000"
    assert speed_color(250) == "#ff0000"
    mid_low = speed_color(27.5)
    assert mid_low.startswith("#") and mid_low.endswith("ff00")
    assert mid_low not in {"#00ff00", "#ffff00"}
    assert speed_color(75) == "#ff8000"


def test_distance_meters_known_values():
    assert distance_meters(*ORIGIN, *ORIGIN) == 0.0
    assert distance_meters(ORIGIN[0], ORIGIN[1], north_of(ORIGIN[0], 1000.0), ORIGIN[1]) == pytest.approx(1000.0, rel=1e-9)
    # One degree of longitude on the equator.
    assert distance_meters(0.0, 0.0, 0.0, 1.0) == pytest.approx(111_194.9, rel=1e-4)


def test_path_length_sums_consecutive_legs():
    samples = [
        make_sample(0),
        make_sample(1, north_of(ORIGIN[0], 300.0)),
        make_sample(2, ORIGIN[0]),
    ]

    assert path_length_m(samples) == pytest.approx(600.0, rel=1e-9)
    assert path_length_m(samples[:1]) == 0.0


def test_leg_speeds_and_short_legs():
    samples = [
        make_sample(0),
        make_sample(1, north_of(ORIGIN[0], 600.0)),
        make_sample(1, north_of(ORIGIN[0], 700.0)),
    ]

    legs = leg_speeds(samples)

    assert len(legs) == 2
    start, end, mph = legs[0]
    assert start == samples[0].point
    assert end == samples[1].point
    assert mph == pytest.approx(mps_to_mph(10.0), rel=1e-6)
    assert legs[1][2] == 0.0
