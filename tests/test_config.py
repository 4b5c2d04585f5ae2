import dataclasses

import pytest

from travel_report import config


def test_default_thresholds():
    thresholds = config.DEFAULT_THRESHOLDS

    assert thresholds.stationary_radius_m == 50.0
    assert thresholds.min_stationary_duration_ms == 5 * 60 * 1000
    assert thresholds.max_acceptable_gap_ms == 15 * 60 * 1000
    assert thresholds.stationary_bridge_radius_m == 100.0
    assert thresholds.travel_bridge_max_teleport_distance_m == 2000.0
    assert thresholds.travel_bridge_max_gap_duration_ms == 30 * 60 * 1000


def test_thresholds_are_frozen_and_replaceable():
    custom = dataclasses.replace(config.DEFAULT_THRESHOLDS, stationary_radius_m=25.0)

    assert custom.stationary_radius_m == 25.0
    assert config.DEFAULT_THRESHOLDS.stationary_radius_m == 50.0
    with pytest.raises(dataclasses.FrozenInstanceError):
        custom.stationary_radius_m = 1.0  # type: ignore[misc]


def test_env_helpers(monkeypatch):
    monkeypatch.setenv("TR_FLOAT", "2.5")
    monkeypatch.setenv("TR_INT", "nope")
    monkeypatch.setenv("TR_BOOL", "Yes")
    monkeypatch.setenv("TR_BOOL_BAD", "maybe")
    monkeypatch.delenv("TR_MISSING", raising=False)

    assert config._env_float("TR_FLOAT", 1.0) == 2.5
    assert config._env_int("TR_INT", 7) == 7
    assert config._env_int("TR_MISSING", 3) == 3
    assert config._env_bool("TR_BOOL", False) is True
    assert config._env_bool("TR_BOOL_BAD", False) is False
