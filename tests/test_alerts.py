import pytest

from meteostation.alerts import (
    AlertLevel,
    Readings,
    Settings,
    alert_level,
    classify,
)


def test_default_settings():
    s = Settings()
    assert (s.temp_min, s.temp_max) == (10.0, 40.0)
    assert (s.umi_min, s.umi_max) == (30.0, 80.0)
    assert (s.pres_min, s.pres_max) == (900.0, 1020.0)
    assert (s.offset_temp, s.offset_umi, s.offset_pres) == (0.0, 0.0, 0.0)


def test_middle_of_range_is_ok():
    assert classify(25.0, 10.0, 40.0) is AlertLevel.OK


@pytest.mark.parametrize("value", [9.9, 40.1, -100.0, 1000.0])
def test_outside_range_is_critical(value):
    assert classify(value, 10.0, 40.0) is AlertLevel.CRITICAL


@pytest.mark.parametrize("value", [11.0, 39.0])
def test_near_edges_is_attention(value):
    assert classify(value, 10.0, 40.0) is AlertLevel.ATTENTION


@pytest.mark.parametrize("value", [10.0, 40.0])
def test_exact_limits_are_not_critical(value):
    assert classify(value, 10.0, 40.0) is AlertLevel.ATTENTION


def test_critical_exactly_when_outside():
    for tenth in range(0, 500):
        value = tenth / 10
        outside = value < 10.0 or value > 40.0
        assert (classify(value, 10.0, 40.0) is AlertLevel.CRITICAL) == outside


def test_alert_level_all_fine():
    assert alert_level(Readings(25.0, 55.0, 960.0), Settings()) is AlertLevel.OK


def test_alert_level_takes_worst():
    assert alert_level(Readings(25.0, 55.0, 1030.0), Settings()) is AlertLevel.CRITICAL
    assert alert_level(Readings(11.0, 55.0, 960.0), Settings()) is AlertLevel.ATTENTION


def test_alert_level_respects_custom_limits():
    settings = Settings(pres_min=1020.0, pres_max=1100.0)
    assert alert_level(Readings(25.0, 55.0, 1013.0), settings) is AlertLevel.CRITICAL
    assert alert_level(Readings(25.0, 55.0, 1060.0), settings) is AlertLevel.OK


def test_zero_readings_are_critical_with_defaults():
    assert alert_level(Readings(), Settings()) is AlertLevel.CRITICAL